import logging
import re
from typing import AsyncIterator, List, Optional

from sqlalchemy import select, update, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession

from spotlight_data_client.db import ExhibitORM
from spotlight_data_client.db.base import get_session
from spotlight_data_client.exceptions import DatabaseError
from spotlight_data_client.models.exhibit import ExhibitCreate

logger = logging.getLogger(__name__)

DEFAULT_EXHIBIT_SLUG = "default"


def slugify(title: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug or "exhibit"


class ExhibitRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def check_connection(self):
        """Проверяет соединение с базой данных, выполняя простой запрос."""
        logger.debug("Checking PostgreSQL connection...")
        async with get_session(self._session_factory) as session:
            try:
                await session.execute(text("SELECT 1"))
                logger.debug("PostgreSQL connection successful.")
            except SQLAlchemyError as e:
                logger.error(f"PostgreSQL connection failed: {e}")
                raise DatabaseError("Failed to connect to the database.") from e

    async def create(self, data: ExhibitCreate) -> ExhibitORM:
        exhibit = ExhibitORM(**data.model_dump(exclude={"slug"}), slug=data.slug or slugify(data.title))
        async with get_session(self._session_factory) as session:
            try:
                session.add(exhibit)
                await session.commit()
                await session.refresh(exhibit)
            except IntegrityError as e:
                await session.rollback()
                raise DatabaseError(f"Failed to create exhibit '{exhibit.slug}': {e}") from e
        logger.info("Created exhibit %s (%s)", exhibit.id, exhibit.slug)
        return exhibit

    async def get(self, exhibit_id: int) -> Optional[ExhibitORM]:
        async with get_session(self._session_factory) as session:
            return await session.get(ExhibitORM, exhibit_id)

    async def get_by_slug(self, slug: str) -> Optional[ExhibitORM]:
        async with get_session(self._session_factory) as session:
            res = await session.execute(select(ExhibitORM).where(ExhibitORM.slug == slug))
            return res.scalar_one_or_none()

    async def default(self) -> ExhibitORM:
        """
        Выставка по умолчанию. Создаётся при первом обращении; гонку двух
        параллельных созданий разрешает уникальный индекс по slug.
        """
        exhibit = await self.get_by_slug(DEFAULT_EXHIBIT_SLUG)
        if exhibit:
            return exhibit
        try:
            return await self.create(ExhibitCreate(title="Default exhibit", slug=DEFAULT_EXHIBIT_SLUG))
        except DatabaseError:
            exhibit = await self.get_by_slug(DEFAULT_EXHIBIT_SLUG)
            if exhibit is None:
                raise
            return exhibit

    async def list_all(self) -> List[ExhibitORM]:
        async with get_session(self._session_factory) as session:
            res = await session.execute(select(ExhibitORM).order_by(ExhibitORM.id))
            return list(res.scalars().all())

    async def iter_all(self, batch_size: int = 1000) -> AsyncIterator[ExhibitORM]:
        """Обходит все выставки пачками по первичному ключу (аналог find_each)."""
        last_id = 0
        while True:
            async with get_session(self._session_factory) as session:
                res = await session.execute(
                    select(ExhibitORM)
                    .where(ExhibitORM.id > last_id)
                    .order_by(ExhibitORM.id)
                    .limit(batch_size)
                )
                batch = list(res.scalars().all())
            if not batch:
                return
            for exhibit in batch:
                yield exhibit
            if len(batch) < batch_size:
                return
            last_id = batch[-1].id

    async def set_masthead(self, exhibit_id: int, object_path: Optional[str]) -> Optional[ExhibitORM]:
        async with get_session(self._session_factory) as session:
            try:
                res = await session.execute(
                    update(ExhibitORM)
                    .where(ExhibitORM.id == exhibit_id)
                    .values(masthead=object_path)
                )
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise DatabaseError(f"Failed to set masthead for exhibit {exhibit_id}: {e}") from e
            if res.rowcount == 0:
                return None
            return await session.get(ExhibitORM, exhibit_id, populate_existing=True)
