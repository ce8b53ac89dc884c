"""Shared plumbing for the entity repositories."""

from collections.abc import Awaitable, Callable
from typing import Any, ClassVar, Self

from sqlalchemy import Table
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine
from sqlalchemy.types import TypeEngine

from herald.core.database import Executor, column_types, within_transaction


def page_params(page_number: int, rows_per_page: int) -> dict[str, int]:
    """LIMIT/OFFSET parameters for a 1-based page."""
    return {"offset": (page_number - 1) * rows_per_page, "rows_per_page": rows_per_page}


class Repository:
    """Base repository bound to an engine or to a connection inside a transaction."""

    table: ClassVar[Table]

    def __init__(self, db: Executor, *, in_tran: bool = False) -> None:
        self.db = db
        self.in_tran = in_tran

    @property
    def types(self) -> dict[str, TypeEngine[Any]]:
        return column_types(self.table)

    def bind(self, conn: AsyncConnection) -> Self:
        """Return a copy of this repository that runs on ``conn``'s transaction."""
        return type(self)(conn, in_tran=True)

    async def within_tran[T](self, fn: Callable[[AsyncConnection], Awaitable[T]]) -> T:
        """Run ``fn`` in a transaction, joining the current one when already inside it."""
        if self.in_tran:
            assert isinstance(self.db, AsyncConnection)
            return await fn(self.db)
        assert isinstance(self.db, AsyncEngine)
        return await within_transaction(self.db, fn)
