from typing import Any, Literal


FOREIGN_KEY_VIOLATION = "23503"
UNIQUE_VIOLATION = "23505"
CHECK_VIOLATION = "23514"
SERIALIZATION_FAILURE = "40001"
DEADLOCK_DETECTED = "40P01"

RETRYABLE_SQLSTATES = frozenset({SERIALIZATION_FAILURE, DEADLOCK_DETECTED})


class LedgerError(Exception):
    """Base exception for ledger errors."""


class QueryError(LedgerError):
    """Raised when a storage operation inside a unit of work fails."""

    def __init__(self, operation: str, message: str, sqlstate: str | None = None) -> None:
        self.operation = operation
        self.sqlstate = sqlstate
        super().__init__(f"{operation} failed: {message}")


class ConstraintViolationError(QueryError):
    """Raised when the storage layer rejects a write on an integrity constraint."""

    def __init__(
        self,
        operation: str,
        sqlstate: str | None,
        constraint: str | None,
        detail: str,
    ) -> None:
        self.constraint = constraint
        self.detail = detail
        super().__init__(operation, f"constraint {constraint or '<unknown>'} violated: {detail}", sqlstate)

    @property
    def is_foreign_key_violation(self) -> bool:
        return self.sqlstate == FOREIGN_KEY_VIOLATION

    @property
    def is_unique_violation(self) -> bool:
        return self.sqlstate == UNIQUE_VIOLATION

    @property
    def is_check_violation(self) -> bool:
        return self.sqlstate == CHECK_VIOLATION


class NotFoundError(QueryError):
    """Raised when a single-row lookup matches no row."""

    entity = "row"

    def __init__(self, operation: str, key: Any) -> None:
        self.key = key
        super().__init__(operation, f"{self.entity} {key} not found")


class AccountNotFoundError(NotFoundError):
    entity = "account"


class TransferNotFoundError(NotFoundError):
    entity = "transfer"


class EntryNotFoundError(NotFoundError):
    entity = "entry"


class UserNotFoundError(NotFoundError):
    entity = "user"


class TransactionLifecycleError(LedgerError):
    """Raised when a transaction scope cannot be opened or committed."""

    def __init__(
        self,
        phase: Literal["begin", "commit"],
        message: str,
        sqlstate: str | None = None,
    ) -> None:
        self.phase = phase
        self.sqlstate = sqlstate
        super().__init__(f"Transaction {phase} failed: {message}")


class CompositeError(LedgerError):
    """Raised when a unit of work failed and the rollback that followed failed too."""

    def __init__(self, work_error: BaseException, rollback_error: BaseException) -> None:
        self.work_error = work_error
        self.rollback_error = rollback_error
        super().__init__(f"tx err: {work_error}, rb err: {rollback_error}")


class AfterCommitError(LedgerError):
    """Raised when a post-commit effect fails. The committed write stays durable."""

    def __init__(self, effect: str, result: Any, cause: BaseException) -> None:
        self.effect = effect
        self.result = result
        self.cause = cause
        super().__init__(f"{effect} failed after commit: {cause}")


def is_retryable(exc: BaseException) -> bool:
    """Whether a caller may safely replay the whole unit of work after ``exc``."""
    if isinstance(exc, CompositeError):
        return is_retryable(exc.work_error)
    sqlstate = getattr(exc, "sqlstate", None)
    return isinstance(exc, QueryError | TransactionLifecycleError) and sqlstate in RETRYABLE_SQLSTATES
