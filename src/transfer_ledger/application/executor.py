import asyncio
import time
from collections.abc import Callable

import structlog
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from transfer_ledger.application.ports import Querier, UnitOfWork
from transfer_ledger.domain.exceptions import CompositeError, TransactionLifecycleError
from transfer_ledger.infrastructure.database import Database
from transfer_ledger.infrastructure.metrics import (
    LEDGER_TRANSACTION_DURATION_SECONDS,
    LEDGER_TRANSACTIONS_TOTAL,
)
from transfer_ledger.infrastructure.queries import Queries
from transfer_ledger.infrastructure.repositories.base import sqlstate_of
from transfer_ledger.logging import transaction_context


logger = structlog.get_logger()


# asyncpg connect failures (refused, timed out) are not wrapped by SQLAlchemy
STORAGE_ERRORS = (SQLAlchemyError, OSError, TimeoutError)


def _sqlstate(exc: BaseException) -> str | None:
    return sqlstate_of(exc) if isinstance(exc, DBAPIError) else None


class TransactionExecutor:
    """
    Runs units of work inside a single database transaction.

    Every call borrows one pooled connection, hands the unit of work a
    Querier bound to that connection's transaction and then either commits
    or rolls back. The session is closed on every exit path, including
    cancellation, so the connection always goes back to the pool.

    Failures are reported, never retried:
    - begin or commit failure -> TransactionLifecycleError
    - work failure, rollback ok -> the work's own exception
    - work failure, rollback failure -> CompositeError carrying both
    """

    def __init__(
        self,
        database: Database,
        timeout: float | None = None,
        querier_factory: Callable[[AsyncSession], Querier] = Queries,
    ) -> None:
        self._database = database
        self._timeout = timeout
        self._querier_factory = querier_factory

    async def execute[T](self, work: UnitOfWork[T]) -> T:
        start = time.perf_counter()
        try:
            with transaction_context():
                async with self._database.session_factory() as session:
                    await self._begin(session)
                    try:
                        # the deadline bounds the work only; COMMIT runs unbounded
                        async with asyncio.timeout(self._timeout):
                            result = await work(self._querier_factory(session))
                    except Exception as exc:
                        await self._rollback(session, exc)
                        raise
                    except BaseException as exc:
                        await self._rollback_interrupted(session, exc)
                        raise
                    await self._commit(session)
                    return result
        finally:
            LEDGER_TRANSACTION_DURATION_SECONDS.observe(time.perf_counter() - start)

    async def close(self) -> None:
        await self._database.close()

    async def _begin(self, session: AsyncSession) -> None:
        try:
            await session.connection()
        except STORAGE_ERRORS as exc:
            LEDGER_TRANSACTIONS_TOTAL.labels(outcome="begin_failed").inc()
            logger.error("tx_begin_failed", error=str(exc), error_type=type(exc).__name__)
            raise TransactionLifecycleError("begin", str(exc), sqlstate=_sqlstate(exc)) from exc

    async def _commit(self, session: AsyncSession) -> None:
        try:
            await session.commit()
        except STORAGE_ERRORS as exc:
            LEDGER_TRANSACTIONS_TOTAL.labels(outcome="commit_failed").inc()
            logger.error("tx_commit_failed", error=str(exc), error_type=type(exc).__name__)
            raise TransactionLifecycleError("commit", str(exc), sqlstate=_sqlstate(exc)) from exc
        LEDGER_TRANSACTIONS_TOTAL.labels(outcome="committed").inc()

    async def _rollback(self, session: AsyncSession, work_error: Exception) -> None:
        try:
            await session.rollback()
        except Exception as rollback_error:
            LEDGER_TRANSACTIONS_TOTAL.labels(outcome="rollback_failed").inc()
            logger.error(
                "tx_rollback_failed",
                error=str(work_error),
                error_type=type(work_error).__name__,
                rollback_error=str(rollback_error),
            )
            raise CompositeError(work_error, rollback_error) from work_error
        LEDGER_TRANSACTIONS_TOTAL.labels(outcome="rolled_back").inc()
        logger.info(
            "tx_rolled_back",
            error=str(work_error),
            error_type=type(work_error).__name__,
        )

    async def _rollback_interrupted(self, session: AsyncSession, interrupt: BaseException) -> None:
        # Cancellation must keep propagating; a failed rollback here is only logged.
        # Closing the session afterwards releases the connection either way.
        try:
            await session.rollback()
        except Exception as rollback_error:
            LEDGER_TRANSACTIONS_TOTAL.labels(outcome="rollback_failed").inc()
            logger.error(
                "tx_rollback_failed",
                error_type=type(interrupt).__name__,
                rollback_error=str(rollback_error),
            )
            return
        LEDGER_TRANSACTIONS_TOTAL.labels(outcome="rolled_back").inc()
        logger.info("tx_rolled_back", error_type=type(interrupt).__name__)
