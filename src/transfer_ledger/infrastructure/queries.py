from sqlalchemy.ext.asyncio import AsyncSession

from transfer_ledger.infrastructure.repositories import (
    AccountRepository,
    EntryRepository,
    TransferRepository,
    UserRepository,
)


class Queries:
    """Single-row operations bound to one session, and so to its transaction."""

    def __init__(self, session: AsyncSession) -> None:
        self.accounts = AccountRepository(session)
        self.transfers = TransferRepository(session)
        self.entries = EntryRepository(session)
        self.users = UserRepository(session)
