from collections.abc import Awaitable, Callable
from typing import Protocol

from transfer_ledger.domain.models import (
    Account,
    CreateAccountParams,
    CreateUserParams,
    Entry,
    Transfer,
    User,
)


class AccountQueries(Protocol):
    async def create(self, params: CreateAccountParams) -> Account: ...

    async def get(self, account_id: int) -> Account: ...

    async def list_by_owner(self, owner: str, limit: int = 100, offset: int = 0) -> list[Account]: ...

    async def add_balance(self, account_id: int, amount: int) -> Account: ...


class TransferQueries(Protocol):
    async def create(self, from_account_id: int, to_account_id: int, amount: int) -> Transfer: ...

    async def get(self, transfer_id: int) -> Transfer: ...

    async def list_for_accounts(
        self,
        from_account_id: int,
        to_account_id: int,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Transfer]: ...


class EntryQueries(Protocol):
    async def create(self, account_id: int, amount: int) -> Entry: ...

    async def get(self, entry_id: int) -> Entry: ...

    async def list_by_account_id(self, account_id: int, limit: int = 100, offset: int = 0) -> list[Entry]: ...


class UserQueries(Protocol):
    async def create(self, params: CreateUserParams) -> User: ...

    async def get(self, username: str) -> User: ...


class Querier(Protocol):
    accounts: AccountQueries
    transfers: TransferQueries
    entries: EntryQueries
    users: UserQueries


type UnitOfWork[T] = Callable[[Querier], Awaitable[T]]
type AfterCommit[T] = Callable[[T], Awaitable[None]]


class Executor(Protocol):
    async def execute[T](self, work: UnitOfWork[T]) -> T: ...

    async def close(self) -> None: ...
