from typing import Any

from sqlalchemy import text

from transfer_ledger.domain.exceptions import UserNotFoundError
from transfer_ledger.domain.models import CreateUserParams, User
from transfer_ledger.infrastructure.repositories.base import BaseRepository


def _to_user(row: Any) -> User:
    return User(
        username=row.username,
        hashed_password=row.hashed_password,
        full_name=row.full_name,
        email=row.email,
        password_changed_at=row.password_changed_at,
        created_at=row.created_at,
    )


class UserRepository(BaseRepository):
    async def create(self, params: CreateUserParams) -> User:
        result = await self._execute(
            "create_user",
            text("""
                INSERT INTO users (username, hashed_password, full_name, email)
                VALUES (:username, :hashed_password, :full_name, :email)
                RETURNING username, hashed_password, full_name, email,
                          password_changed_at, created_at
            """),
            {
                "username": params.username,
                "hashed_password": params.hashed_password,
                "full_name": params.full_name,
                "email": params.email,
            },
        )
        return _to_user(result.one())

    async def get(self, username: str) -> User:
        result = await self._execute(
            "get_user",
            text("""
                SELECT username, hashed_password, full_name, email,
                       password_changed_at, created_at
                FROM users
                WHERE username = :username
            """),
            {"username": username},
        )
        row = result.fetchone()
        if not row:
            raise UserNotFoundError("get_user", username)
        return _to_user(row)
