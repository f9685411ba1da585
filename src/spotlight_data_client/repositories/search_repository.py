import logging
from typing import List, Optional

from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession

from spotlight_data_client.db import SearchORM
from spotlight_data_client.db.base import get_session
from spotlight_data_client.exceptions import DatabaseError
from spotlight_data_client.models.search import SearchCreate, SearchUpdate

logger = logging.getLogger(__name__)


class SearchRepository:
    """Сохранённые поиски (категории просмотра) выставки."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def create(self, exhibit_id: int, data: SearchCreate) -> SearchORM:
        search = SearchORM(exhibit_id=exhibit_id, **data.model_dump())
        async with get_session(self._session_factory) as session:
            try:
                session.add(search)
                await session.commit()
                await session.refresh(search)
                return search
            except IntegrityError as e:
                await session.rollback()
                raise DatabaseError(f"Failed to save search: {e}") from e

    async def get(self, search_id: int) -> Optional[SearchORM]:
        async with get_session(self._session_factory) as session:
            return await session.get(SearchORM, search_id)

    async def list_for_exhibit(self, exhibit_id: int, on_landing_page: bool | None = None) -> List[SearchORM]:
        stmt = select(SearchORM).where(SearchORM.exhibit_id == exhibit_id)
        if on_landing_page is not None:
            stmt = stmt.where(SearchORM.on_landing_page == on_landing_page)
        stmt = stmt.order_by(SearchORM.weight, SearchORM.id)
        async with get_session(self._session_factory) as session:
            res = await session.execute(stmt)
            return list(res.scalars().all())

    async def update(self, search_id: int, patch: SearchUpdate) -> Optional[SearchORM]:
        values = patch.model_dump(exclude_unset=True)
        if not values:
            return await self.get(search_id)
        return await self._update_values(search_id, values)

    async def set_featured_image(self, search_id: int, object_path: Optional[str]) -> Optional[SearchORM]:
        return await self._update_values(search_id, {"featured_image": object_path})

    async def _update_values(self, search_id: int, values: dict) -> Optional[SearchORM]:
        async with get_session(self._session_factory) as session:
            try:
                res = await session.execute(
                    update(SearchORM).where(SearchORM.id == search_id).values(**values)
                )
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise DatabaseError(str(e)) from e
            if res.rowcount == 0:
                return None
            return await session.get(SearchORM, search_id, populate_existing=True)

    async def delete(self, search_id: int) -> bool:
        async with get_session(self._session_factory) as session:
            try:
                res = await session.execute(delete(SearchORM).where(SearchORM.id == search_id))
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise DatabaseError(f"Failed to delete search {search_id}: {e}") from e
            return res.rowcount > 0
