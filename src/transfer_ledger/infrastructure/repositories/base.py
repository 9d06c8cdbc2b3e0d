from typing import Any

from sqlalchemy import Result, TextClause
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from transfer_ledger.domain.exceptions import ConstraintViolationError, QueryError


def sqlstate_of(exc: DBAPIError) -> str | None:
    # asyncpg exposes ``sqlstate``, psycopg ``pgcode``
    orig = exc.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def constraint_of(exc: DBAPIError) -> str | None:
    # SQLAlchemy wraps the driver error; asyncpg keeps the name on the wrapped cause
    for candidate in (exc.orig, getattr(exc.orig, "__cause__", None)):
        name = getattr(candidate, "constraint_name", None)
        if name:
            return str(name)
    return None


class BaseRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _execute(
        self,
        operation: str,
        statement: TextClause,
        params: dict[str, Any],
    ) -> Result[Any]:
        try:
            return await self._session.execute(statement, params)
        except IntegrityError as exc:
            raise ConstraintViolationError(
                operation,
                sqlstate=sqlstate_of(exc),
                constraint=constraint_of(exc),
                detail=str(exc.orig),
            ) from exc
        except DBAPIError as exc:
            raise QueryError(operation, str(exc.orig), sqlstate=sqlstate_of(exc)) from exc
