"""Unit tests for LedgerStore over the in-memory database."""

from unittest.mock import AsyncMock

import pytest

from tests.fakes import InMemoryDatabase
from transfer_ledger.application.ports import Querier
from transfer_ledger.application.store import LedgerStore
from transfer_ledger.domain.exceptions import (
    AccountNotFoundError,
    AfterCommitError,
    ConstraintViolationError,
    TransferNotFoundError,
    UserNotFoundError,
)
from transfer_ledger.domain.models import (
    CreateAccountParams,
    CreateUserParams,
    TransferTxParams,
    User,
)


def user_params(username: str = "alice") -> CreateUserParams:
    return CreateUserParams(
        username=username,
        hashed_password="secret-hash",
        full_name=username.title(),
        email=f"{username}@example.com",
    )


class TestRunTx:
    """Tests for the run-then-post-commit pattern."""

    @pytest.mark.asyncio
    async def test_returns_result_without_after_commit(self, memory_store: LedgerStore) -> None:
        """run_tx without an effect just returns the work result."""

        async def work(q: Querier) -> str:
            return "ok"

        assert await memory_store.run_tx(work) == "ok"

    @pytest.mark.asyncio
    async def test_after_commit_sees_committed_state(
        self,
        memory_store: LedgerStore,
        memory_db: InMemoryDatabase,
    ) -> None:
        """The effect runs only after the write is durable."""
        seen: list[bool] = []

        async def work(q: Querier) -> User:
            return await q.users.create(user_params())

        async def effect(user: User) -> None:
            seen.append(user.username in memory_db.users)

        await memory_store.run_tx(work, effect)

        assert seen == [True]

    @pytest.mark.asyncio
    async def test_after_commit_not_called_when_work_fails(self, memory_store: LedgerStore) -> None:
        """A rolled back unit of work never fires the effect."""
        effect = AsyncMock()

        async def work(q: Querier) -> None:
            await q.accounts.get(999)

        with pytest.raises(AccountNotFoundError):
            await memory_store.run_tx(work, effect)

        effect.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_after_commit_failure_keeps_write(
        self,
        memory_store: LedgerStore,
        memory_db: InMemoryDatabase,
    ) -> None:
        """A failing effect is reported but the committed write stays."""
        cause = RuntimeError("queue unavailable")

        async def work(q: Querier) -> User:
            return await q.users.create(user_params())

        with pytest.raises(AfterCommitError) as exc_info:
            await memory_store.run_tx(work, AsyncMock(side_effect=cause), effect="notify")

        assert exc_info.value.cause is cause
        assert exc_info.value.effect == "notify"
        assert exc_info.value.result.username == "alice"
        assert "alice" in memory_db.users


class TestCreateUserTx:
    """Tests for user creation with a post-commit hook."""

    @pytest.mark.asyncio
    async def test_creates_user(self, memory_store: LedgerStore) -> None:
        """The user row is created and returned."""
        result = await memory_store.create_user_tx(user_params("bob"))

        assert result.user.username == "bob"
        assert result.user.email == "bob@example.com"
        assert (await memory_store.get_user("bob")).full_name == "Bob"

    @pytest.mark.asyncio
    async def test_after_create_receives_user(self, memory_store: LedgerStore) -> None:
        """The hook is called with the created user after commit."""
        after_create = AsyncMock()

        result = await memory_store.create_user_tx(user_params(), after_create)

        after_create.assert_awaited_once_with(result.user)

    @pytest.mark.asyncio
    async def test_duplicate_user_skips_hook(self, memory_store: LedgerStore) -> None:
        """A rejected insert rolls back and does not notify."""
        await memory_store.create_user_tx(user_params())
        after_create = AsyncMock()

        with pytest.raises(ConstraintViolationError) as exc_info:
            await memory_store.create_user_tx(user_params(), after_create)

        assert exc_info.value.is_unique_violation
        after_create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_hook_failure_leaves_user_durable(self, memory_store: LedgerStore) -> None:
        """The user exists even if the hook failed."""
        with pytest.raises(AfterCommitError):
            await memory_store.create_user_tx(user_params(), AsyncMock(side_effect=RuntimeError("down")))

        assert (await memory_store.get_user("alice")).username == "alice"


class TestSingleRowOperations:
    """Tests for querier operations exposed directly on the store."""

    @pytest.mark.asyncio
    async def test_create_and_get_account(
        self,
        memory_store: LedgerStore,
        memory_db: InMemoryDatabase,
    ) -> None:
        """A created account can be read back."""
        memory_db.seed_user("alice")

        account = await memory_store.create_account(CreateAccountParams(owner="alice", currency="USD"))
        fetched = await memory_store.get_account(account.id)

        assert fetched == account
        assert fetched.balance == 0

    @pytest.mark.asyncio
    async def test_get_missing_account(self, memory_store: LedgerStore) -> None:
        """Missing accounts raise AccountNotFoundError."""
        with pytest.raises(AccountNotFoundError):
            await memory_store.get_account(404)

    @pytest.mark.asyncio
    async def test_account_for_unknown_owner_rejected(self, memory_store: LedgerStore) -> None:
        """The owner must exist."""
        with pytest.raises(ConstraintViolationError) as exc_info:
            await memory_store.create_account(CreateAccountParams(owner="ghost", currency="USD"))

        assert exc_info.value.is_foreign_key_violation

    @pytest.mark.asyncio
    async def test_list_accounts_by_owner(
        self,
        memory_store: LedgerStore,
        memory_db: InMemoryDatabase,
    ) -> None:
        """Only the owner's accounts are listed, paged."""
        usd = memory_db.seed_account("alice", 10, "USD")
        eur = memory_db.seed_account("alice", 10, "EUR")
        memory_db.seed_account("bob", 10, "USD")

        assert await memory_store.list_accounts("alice") == [usd, eur]
        assert await memory_store.list_accounts("alice", limit=1, offset=1) == [eur]

    @pytest.mark.asyncio
    async def test_transfer_history_lookups(
        self,
        memory_store: LedgerStore,
        memory_db: InMemoryDatabase,
    ) -> None:
        """Transfers and entries written by transfer_tx can be read back."""
        a = memory_db.seed_account("alice", 100)
        b = memory_db.seed_account("bob", 50)

        result = await memory_store.transfer_tx(TransferTxParams(a.id, b.id, 30))

        assert await memory_store.get_transfer(result.transfer.id) == result.transfer
        assert await memory_store.get_entry(result.from_entry.id) == result.from_entry
        assert await memory_store.list_transfers(a.id, a.id) == [result.transfer]
        assert await memory_store.list_entries(b.id) == [result.to_entry]

    @pytest.mark.asyncio
    async def test_missing_lookups(self, memory_store: LedgerStore) -> None:
        """Missing rows raise their not-found errors."""
        with pytest.raises(TransferNotFoundError):
            await memory_store.get_transfer(1)
        with pytest.raises(UserNotFoundError):
            await memory_store.get_user("nobody")

    @pytest.mark.asyncio
    async def test_close_closes_database(
        self,
        memory_store: LedgerStore,
        memory_db: InMemoryDatabase,
    ) -> None:
        """Closing the store releases the database."""
        await memory_store.close()

        assert memory_db.closed


class TestTransferTxFailures:
    """Tests for transfer_tx error reporting."""

    @pytest.mark.asyncio
    async def test_unknown_destination_rejected(
        self,
        memory_store: LedgerStore,
        memory_db: InMemoryDatabase,
    ) -> None:
        """Referencing a missing account surfaces the constraint violation."""
        a = memory_db.seed_account("alice", 100)

        with pytest.raises(ConstraintViolationError) as exc_info:
            await memory_store.transfer_tx(TransferTxParams(a.id, 999, 10))

        assert exc_info.value.is_foreign_key_violation
        assert memory_db.accounts[a.id].balance == 100
        assert memory_db.transfers == {}

    @pytest.mark.asyncio
    async def test_overdraft_rejected_by_storage(
        self,
        memory_store: LedgerStore,
        memory_db: InMemoryDatabase,
    ) -> None:
        """The non-negative balance constraint rejects an overdraft and rolls back."""
        a = memory_db.seed_account("alice", 10)
        b = memory_db.seed_account("bob", 0)

        with pytest.raises(ConstraintViolationError) as exc_info:
            await memory_store.transfer_tx(TransferTxParams(a.id, b.id, 11))

        assert exc_info.value.is_check_violation
        assert memory_db.accounts[a.id].balance == 10
        assert memory_db.accounts[b.id].balance == 0
        assert memory_db.entries == {}
