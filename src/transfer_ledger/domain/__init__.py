"""Domain layer - ledger entities, errors and the lock ordering rule."""

from transfer_ledger.domain.exceptions import (
    AccountNotFoundError,
    AfterCommitError,
    CompositeError,
    ConstraintViolationError,
    EntryNotFoundError,
    LedgerError,
    NotFoundError,
    QueryError,
    TransactionLifecycleError,
    TransferNotFoundError,
    UserNotFoundError,
    is_retryable,
)
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
from transfer_ledger.domain.ordering import lock_order


__all__ = [
    "Account",
    "AccountNotFoundError",
    "AfterCommitError",
    "CompositeError",
    "ConstraintViolationError",
    "CreateAccountParams",
    "CreateUserParams",
    "CreateUserTxResult",
    "Entry",
    "EntryNotFoundError",
    "LedgerError",
    "NotFoundError",
    "QueryError",
    "TransactionLifecycleError",
    "Transfer",
    "TransferNotFoundError",
    "TransferTxParams",
    "TransferTxResult",
    "User",
    "UserNotFoundError",
    "is_retryable",
    "lock_order",
]
