"""Shared pytest fixtures for transfer ledger tests."""

import random
import string
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from tests.fakes import InMemoryDatabase, InMemoryQueries
from transfer_ledger.application.executor import TransactionExecutor
from transfer_ledger.application.store import LedgerStore
from transfer_ledger.domain.models import Account, Entry, Transfer, User


@pytest.fixture
def mock_account_repository() -> AsyncMock:
    """Create mock AccountRepository."""
    repo = AsyncMock()
    repo.create = AsyncMock()
    repo.get = AsyncMock()
    repo.list_by_owner = AsyncMock(return_value=[])
    repo.add_balance = AsyncMock()
    return repo


@pytest.fixture
def mock_transfer_repository() -> AsyncMock:
    """Create mock TransferRepository."""
    repo = AsyncMock()
    repo.create = AsyncMock()
    repo.get = AsyncMock()
    repo.list_for_accounts = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def mock_entry_repository() -> AsyncMock:
    """Create mock EntryRepository."""
    repo = AsyncMock()
    repo.create = AsyncMock()
    repo.get = AsyncMock()
    repo.list_by_account_id = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def mock_user_repository() -> AsyncMock:
    """Create mock UserRepository."""
    repo = AsyncMock()
    repo.create = AsyncMock()
    repo.get = AsyncMock()
    return repo


@pytest.fixture
def mock_querier(
    mock_account_repository: AsyncMock,
    mock_transfer_repository: AsyncMock,
    mock_entry_repository: AsyncMock,
    mock_user_repository: AsyncMock,
) -> MagicMock:
    """Create mock Querier with all repositories."""
    querier = MagicMock()
    querier.accounts = mock_account_repository
    querier.transfers = mock_transfer_repository
    querier.entries = mock_entry_repository
    querier.users = mock_user_repository
    return querier


@pytest.fixture
def mock_session() -> AsyncMock:
    """Create mock AsyncSession usable as an async context manager."""
    session = AsyncMock()
    session.connection = AsyncMock(return_value=MagicMock())
    session.commit = AsyncMock(return_value=None)
    session.rollback = AsyncMock(return_value=None)
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=None)
    return session


@pytest.fixture
def mock_database(mock_session: AsyncMock) -> MagicMock:
    """Create mock Database whose session factory hands out ``mock_session``."""
    database = MagicMock()
    database.session_factory = MagicMock(return_value=mock_session)
    database.close = AsyncMock(return_value=None)
    return database


@pytest.fixture
def memory_db() -> InMemoryDatabase:
    """Create an empty in-memory database."""
    return InMemoryDatabase()


@pytest.fixture
def memory_store(memory_db: InMemoryDatabase) -> LedgerStore:
    """Create LedgerStore running the real executor over the in-memory database."""
    executor = TransactionExecutor(memory_db, querier_factory=InMemoryQueries)  # type: ignore[arg-type]
    return LedgerStore(executor)


def random_int(low: int, high: int) -> int:
    """Random integer in [low, high]."""
    return random.randint(low, high)


def random_string(n: int) -> str:
    """Random lowercase string of length n."""
    return "".join(random.choice(string.ascii_lowercase) for _ in range(n))


def random_owner() -> str:
    """Random owner username."""
    return random_string(6)


def random_money() -> int:
    """Random amount of money."""
    return random_int(0, 1000)


def create_account(
    account_id: int,
    owner: str = "owner01",
    balance: int = 100,
    currency: str = "USD",
) -> Account:
    """Helper to create Account with custom values."""
    return Account(
        id=account_id,
        owner=owner,
        balance=balance,
        currency=currency,
        created_at=datetime.now(UTC),
    )


def create_transfer(
    transfer_id: int,
    from_account_id: int,
    to_account_id: int,
    amount: int,
) -> Transfer:
    """Helper to create Transfer with custom values."""
    return Transfer(
        id=transfer_id,
        from_account_id=from_account_id,
        to_account_id=to_account_id,
        amount=amount,
        created_at=datetime.now(UTC),
    )


def create_entry(entry_id: int, account_id: int, amount: int) -> Entry:
    """Helper to create Entry with custom values."""
    return Entry(id=entry_id, account_id=account_id, amount=amount, created_at=datetime.now(UTC))


def create_user(username: str = "alice") -> User:
    """Helper to create User with custom values."""
    return User(
        username=username,
        hashed_password="secret-hash",
        full_name=username.title(),
        email=f"{username}@example.com",
    )
