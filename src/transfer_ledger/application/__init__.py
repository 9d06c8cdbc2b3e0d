"""Application layer - transaction execution and ledger operations."""

from transfer_ledger.application.executor import TransactionExecutor
from transfer_ledger.application.ports import Executor, Querier
from transfer_ledger.application.store import LedgerStore
from transfer_ledger.application.transfers import TransferOperation


__all__ = [
    "Executor",
    "LedgerStore",
    "Querier",
    "TransactionExecutor",
    "TransferOperation",
]
