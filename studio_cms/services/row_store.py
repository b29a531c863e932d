"""
Row store access for the CMS tables.

RowStore wraps one AsyncSession and is the single handle passed to every
service that reads or writes rows. Each write is committed on its own: the
hosted backend guarantees single-row atomicity and nothing here relies on
multi-row transactions.
"""
from typing import Any, Iterable, Optional
import logging

from fastapi import Depends
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from studio_cms.database import get_db
from studio_cms.errors import RowNotFoundError, RowStoreError

logger = logging.getLogger(__name__)


def _table(model) -> str:
    return model.__tablename__


def _error_code(exc: SQLAlchemyError) -> str:
    # DBAPI errors carry the driver's code (e.g. asyncpg sqlstate) when available
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code or type(exc).__name__


class RowStore:
    """Select/insert/update/delete over SQLAlchemy models, translating driver errors."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _fail(self, action: str, model, exc: SQLAlchemyError) -> RowStoreError:
        await self.session.rollback()
        message = f"Failed to {action} {_table(model)}: {exc}"
        logger.error(message, exc_info=True)
        return RowStoreError(message, code=_error_code(exc))

    async def select(self, model, *criteria, order_by: Any = None, limit: Optional[int] = None) -> list:
        query = select(model).where(*criteria)
        if order_by is not None:
            order_by = order_by if isinstance(order_by, (list, tuple)) else [order_by]
            query = query.order_by(*order_by)
        if limit is not None:
            query = query.limit(limit)
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise await self._fail("read", model, e)
        return list(result.scalars().all())

    async def get(self, model, row_id: str):
        try:
            return await self.session.get(model, row_id)
        except SQLAlchemyError as e:
            raise await self._fail("read", model, e)

    async def require(self, model, row_id: str):
        row = await self.get(model, row_id)
        if row is None:
            raise RowNotFoundError(_table(model), row_id)
        return row

    async def count(self, model, *criteria) -> int:
        try:
            result = await self.session.execute(
                select(func.count()).select_from(model).where(*criteria)
            )
        except SQLAlchemyError as e:
            raise await self._fail("count", model, e)
        return result.scalar() or 0

    async def max(self, column, *criteria) -> Optional[int]:
        model = column.class_
        try:
            result = await self.session.execute(select(func.max(column)).where(*criteria))
        except SQLAlchemyError as e:
            raise await self._fail("read", model, e)
        return result.scalar()

    async def insert(self, model, values: dict):
        row = model(**values)
        self.session.add(row)
        try:
            await self.session.commit()
            await self.session.refresh(row)
        except SQLAlchemyError as e:
            raise await self._fail("insert into", model, e)
        logger.info(f"Inserted {_table(model)} row {row.id}")
        return row

    async def insert_many(self, model, rows: Iterable[dict]) -> list:
        created = [model(**values) for values in rows]
        self.session.add_all(created)
        try:
            await self.session.commit()
            for row in created:
                await self.session.refresh(row)
        except SQLAlchemyError as e:
            raise await self._fail("insert into", model, e)
        logger.info(f"Inserted {len(created)} {_table(model)} row(s)")
        return created

    async def update(self, model, row_id: str, patch: dict):
        row = await self.require(model, row_id)
        for field, value in patch.items():
            setattr(row, field, value)
        try:
            await self.session.commit()
            await self.session.refresh(row)
        except SQLAlchemyError as e:
            raise await self._fail("update", model, e)
        return row

    async def delete(self, model, row_id: str) -> None:
        row = await self.require(model, row_id)
        try:
            await self.session.delete(row)
            await self.session.commit()
        except SQLAlchemyError as e:
            raise await self._fail("delete from", model, e)
        logger.info(f"Deleted {_table(model)} row {row_id}")

    async def delete_where(self, model, *criteria) -> int:
        """Filtered delete. Returns the number of rows removed."""
        try:
            result = await self.session.execute(
                delete(model).where(*criteria).execution_options(synchronize_session=False)
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            raise await self._fail("delete from", model, e)
        # Drop identity-map copies of rows removed behind the ORM's back
        self.session.expunge_all()
        return result.rowcount or 0

    async def update_where(self, model, values: dict, *criteria) -> int:
        """Filtered update. Returns the number of rows changed."""
        try:
            result = await self.session.execute(
                model.__table__.update().where(*criteria).values(**values)
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            raise await self._fail("update", model, e)
        self.session.expunge_all()
        return result.rowcount or 0


async def get_row_store(db: AsyncSession = Depends(get_db)) -> RowStore:
    """FastAPI dependency providing the request's RowStore handle."""
    return RowStore(db)
