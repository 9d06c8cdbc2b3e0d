import structlog

from transfer_ledger.application.executor import TransactionExecutor
from transfer_ledger.application.store import LedgerStore
from transfer_ledger.config import Settings, settings
from transfer_ledger.infrastructure.database import Database


logger = structlog.get_logger()


def build_store(config: Settings = settings) -> LedgerStore:
    database = Database.from_settings(config)
    executor = TransactionExecutor(database, timeout=config.tx_timeout_seconds)
    logger.info(
        "ledger_store_ready",
        database=config.database_url.split("@")[-1],
        pool_size=config.db_pool_size,
        tx_timeout_seconds=config.tx_timeout_seconds,
    )
    return LedgerStore(executor)
