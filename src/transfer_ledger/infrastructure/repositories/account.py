from typing import Any

from sqlalchemy import text

from transfer_ledger.domain.exceptions import AccountNotFoundError
from transfer_ledger.domain.models import Account, CreateAccountParams
from transfer_ledger.infrastructure.repositories.base import BaseRepository


def _to_account(row: Any) -> Account:
    return Account(
        id=row.id,
        owner=row.owner,
        balance=row.balance,
        currency=row.currency,
        created_at=row.created_at,
    )


class AccountRepository(BaseRepository):
    async def create(self, params: CreateAccountParams) -> Account:
        result = await self._execute(
            "create_account",
            text("""
                INSERT INTO accounts (owner, balance, currency)
                VALUES (:owner, :balance, :currency)
                RETURNING id, owner, balance, currency, created_at
            """),
            {
                "owner": params.owner,
                "balance": params.balance,
                "currency": params.currency,
            },
        )
        return _to_account(result.one())

    async def get(self, account_id: int) -> Account:
        result = await self._execute(
            "get_account",
            text("""
                SELECT id, owner, balance, currency, created_at
                FROM accounts
                WHERE id = :id
            """),
            {"id": account_id},
        )
        row = result.fetchone()
        if not row:
            raise AccountNotFoundError("get_account", account_id)
        return _to_account(row)

    async def list_by_owner(self, owner: str, limit: int = 100, offset: int = 0) -> list[Account]:
        result = await self._execute(
            "list_accounts",
            text("""
                SELECT id, owner, balance, currency, created_at
                FROM accounts
                WHERE owner = :owner
                ORDER BY id
                LIMIT :limit
                OFFSET :offset
            """),
            {"owner": owner, "limit": limit, "offset": offset},
        )
        return [_to_account(row) for row in result.fetchall()]

    async def add_balance(self, account_id: int, amount: int) -> Account:
        """Add a signed delta to the balance in one statement and return the updated row.

        The UPDATE takes the row lock and computes the new balance from the
        current committed value, so concurrent deltas never overwrite each other.
        """
        result = await self._execute(
            "add_account_balance",
            text("""
                UPDATE accounts
                SET balance = balance + :amount
                WHERE id = :id
                RETURNING id, owner, balance, currency, created_at
            """),
            {"id": account_id, "amount": amount},
        )
        row = result.fetchone()
        if not row:
            raise AccountNotFoundError("add_account_balance", account_id)
        return _to_account(row)
