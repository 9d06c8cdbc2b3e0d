from typing import Any

from sqlalchemy import text

from transfer_ledger.domain.exceptions import TransferNotFoundError
from transfer_ledger.domain.models import Transfer
from transfer_ledger.infrastructure.repositories.base import BaseRepository


def _to_transfer(row: Any) -> Transfer:
    return Transfer(
        id=row.id,
        from_account_id=row.from_account_id,
        to_account_id=row.to_account_id,
        amount=row.amount,
        created_at=row.created_at,
    )


class TransferRepository(BaseRepository):
    async def create(self, from_account_id: int, to_account_id: int, amount: int) -> Transfer:
        result = await self._execute(
            "create_transfer",
            text("""
                INSERT INTO transfers (from_account_id, to_account_id, amount)
                VALUES (:from_account_id, :to_account_id, :amount)
                RETURNING id, from_account_id, to_account_id, amount, created_at
            """),
            {
                "from_account_id": from_account_id,
                "to_account_id": to_account_id,
                "amount": amount,
            },
        )
        return _to_transfer(result.one())

    async def get(self, transfer_id: int) -> Transfer:
        result = await self._execute(
            "get_transfer",
            text("""
                SELECT id, from_account_id, to_account_id, amount, created_at
                FROM transfers
                WHERE id = :id
            """),
            {"id": transfer_id},
        )
        row = result.fetchone()
        if not row:
            raise TransferNotFoundError("get_transfer", transfer_id)
        return _to_transfer(row)

    async def list_for_accounts(
        self,
        from_account_id: int,
        to_account_id: int,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Transfer]:
        result = await self._execute(
            "list_transfers",
            text("""
                SELECT id, from_account_id, to_account_id, amount, created_at
                FROM transfers
                WHERE from_account_id = :from_account_id OR to_account_id = :to_account_id
                ORDER BY id
                LIMIT :limit
                OFFSET :offset
            """),
            {
                "from_account_id": from_account_id,
                "to_account_id": to_account_id,
                "limit": limit,
                "offset": offset,
            },
        )
        return [_to_transfer(row) for row in result.fetchall()]
