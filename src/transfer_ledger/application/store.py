import structlog

from transfer_ledger.application.ports import AfterCommit, Executor, Querier, UnitOfWork
from transfer_ledger.application.transfers import TransferOperation
from transfer_ledger.domain.exceptions import AfterCommitError
from transfer_ledger.domain.models import (
    Account,
    CreateAccountParams,
    CreateUserParams,
    CreateUserTxResult,
    Entry,
    Transfer,
    TransferTxParams,
    TransferTxResult,
    User,
)
from transfer_ledger.infrastructure.metrics import (
    AFTER_COMMIT_FAILURES_TOTAL,
    TRANSFER_DURATION_SECONDS,
    TRANSFERS_TOTAL,
    track_duration,
)


logger = structlog.get_logger()


class LedgerStore:
    """
    Everything callers need from the ledger's storage.

    Single-row operations run as their own short transaction; multi-step
    operations (``transfer_tx``, ``create_user_tx`` and anything passed to
    ``run_tx``) run all their writes in one transaction through the executor.
    """

    def __init__(self, executor: Executor) -> None:
        self._executor = executor

    async def execute[T](self, work: UnitOfWork[T]) -> T:
        return await self._executor.execute(work)

    async def run_tx[T](
        self,
        work: UnitOfWork[T],
        after_commit: AfterCommit[T] | None = None,
        effect: str = "after_commit",
    ) -> T:
        """Run ``work`` in one transaction, then ``after_commit`` on its result.

        ``after_commit`` only runs once the commit succeeded, and its failure
        does not undo the commit: it is raised as AfterCommitError with the
        committed result attached.
        """
        result = await self._executor.execute(work)
        if after_commit is None:
            return result

        try:
            await after_commit(result)
        except Exception as exc:
            AFTER_COMMIT_FAILURES_TOTAL.labels(effect=effect).inc()
            logger.error("after_commit_failed", effect=effect, error=str(exc), exc_info=True)
            raise AfterCommitError(effect, result, exc) from exc
        return result

    @track_duration(TRANSFER_DURATION_SECONDS)
    async def transfer_tx(self, params: TransferTxParams) -> TransferTxResult:
        log = logger.bind(
            from_account_id=params.from_account_id,
            to_account_id=params.to_account_id,
            amount=params.amount,
        )
        try:
            result = await self._executor.execute(TransferOperation(params))
        except Exception as exc:
            TRANSFERS_TOTAL.labels(status="failed").inc()
            log.warning("transfer_failed", error=str(exc), error_type=type(exc).__name__)
            raise

        TRANSFERS_TOTAL.labels(status="committed").inc()
        log.info(
            "transfer_committed",
            transfer_id=result.transfer.id,
            from_balance=result.from_account.balance,
            to_balance=result.to_account.balance,
        )
        return result

    async def create_user_tx(
        self,
        params: CreateUserParams,
        after_create: AfterCommit[User] | None = None,
    ) -> CreateUserTxResult:
        async def create(q: Querier) -> CreateUserTxResult:
            return CreateUserTxResult(user=await q.users.create(params))

        async def notify(result: CreateUserTxResult) -> None:
            if after_create is not None:
                await after_create(result.user)

        result = await self.run_tx(
            create,
            notify if after_create is not None else None,
            effect="after_create_user",
        )
        logger.info("user_created", username=result.user.username)
        return result

    async def create_account(self, params: CreateAccountParams) -> Account:
        return await self.execute(lambda q: q.accounts.create(params))

    async def get_account(self, account_id: int) -> Account:
        return await self.execute(lambda q: q.accounts.get(account_id))

    async def list_accounts(self, owner: str, limit: int = 100, offset: int = 0) -> list[Account]:
        return await self.execute(lambda q: q.accounts.list_by_owner(owner, limit=limit, offset=offset))

    async def get_transfer(self, transfer_id: int) -> Transfer:
        return await self.execute(lambda q: q.transfers.get(transfer_id))

    async def list_transfers(
        self,
        from_account_id: int,
        to_account_id: int,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Transfer]:
        return await self.execute(
            lambda q: q.transfers.list_for_accounts(from_account_id, to_account_id, limit=limit, offset=offset)
        )

    async def get_entry(self, entry_id: int) -> Entry:
        return await self.execute(lambda q: q.entries.get(entry_id))

    async def list_entries(self, account_id: int, limit: int = 100, offset: int = 0) -> list[Entry]:
        return await self.execute(lambda q: q.entries.list_by_account_id(account_id, limit=limit, offset=offset))

    async def get_user(self, username: str) -> User:
        return await self.execute(lambda q: q.users.get(username))

    async def close(self) -> None:
        await self._executor.close()
