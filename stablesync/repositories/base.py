"""Base repository with the storage verbs used by the sync engine."""

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import delete, func, insert, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from stablesync.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository class: find, create_many, update, delete_many."""

    def __init__(self, model: type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    def _filtered(self, query, filters: dict[str, Any] | None):
        if filters:
            for key, value in filters.items():
                if not hasattr(self.model, key):
                    raise ValueError(f"{self.model.__name__} has no column '{key}'")
                column = getattr(self.model, key)
                if isinstance(value, (list, tuple, set, frozenset)):
                    query = query.where(column.in_(value))
                else:
                    query = query.where(column == value)
        return query

    async def get(self, id: int) -> ModelType | None:
        """Get a record by ID."""
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def find_many(
        self,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[ModelType]:
        """
        Get records matching all filters.

        A list/tuple/set value is an ``IN`` filter; any other value is an
        equality filter (``None`` matches NULL).
        """
        query = self._filtered(select(self.model), filters)
        if order_by:
            query = query.order_by(getattr(self.model, order_by))
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count(self, filters: dict[str, Any] | None = None) -> int:
        """Count records with optional filters."""
        query = self._filtered(select(func.count()).select_from(self.model), filters)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def create(self, data: dict[str, Any]) -> ModelType:
        """Create a new record."""
        instance = self.model(**data)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def create_many(
        self,
        rows: Sequence[dict[str, Any]],
        skip_duplicates: bool = False,
        returning: str = "id",
    ) -> list[Any]:
        """
        Insert many rows in one statement.

        With ``skip_duplicates`` rows that collide with a unique constraint
        are silently ignored (``ON CONFLICT DO NOTHING``), so two overlapping
        runs inserting the same natural key leave a single row. Every row
        must carry the same keys.

        Returns:
            Values of the ``returning`` column for the rows actually written;
            rows dropped by a conflict are not in the list
        """
        if not rows:
            return []

        table = self.model.__table__
        values = [dict(row) for row in rows]
        if skip_duplicates:
            dialect = self.session.get_bind().dialect.name
            if dialect == "sqlite":
                stmt = sqlite_insert(table).values(values).on_conflict_do_nothing()
            elif dialect == "postgresql":
                stmt = postgresql_insert(table).values(values).on_conflict_do_nothing()
            else:
                raise NotImplementedError(f"skip_duplicates is not supported on {dialect}")
        else:
            stmt = insert(table).values(values)

        result = await self.session.execute(stmt.returning(table.c[returning]))
        return list(result.scalars().all())

    async def update(self, id: int, data: dict[str, Any]) -> ModelType | None:
        """
        Update a record by ID.

        Unlike a form update, ``None`` values are written: the engine uses
        this to clear fields.
        """
        instance = await self.get(id)
        if instance is None:
            return None

        for key, value in data.items():
            if not hasattr(instance, key):
                raise ValueError(f"{self.model.__name__} has no column '{key}'")
            setattr(instance, key, value)

        await self.session.flush()
        return instance

    async def delete_many(self, ids: Sequence[int]) -> int:
        """Delete records by ID. Returns the number of rows deleted."""
        if not ids:
            return 0
        result = await self.session.execute(
            delete(self.model).where(self.model.id.in_(list(ids)))
        )
        return result.rowcount or 0
