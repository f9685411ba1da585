import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession

from spotlight_data_client.db import ExhibitORM, SolrDocumentSidecarORM
from spotlight_data_client.db.base import get_session
from spotlight_data_client.exceptions import DatabaseError

logger = logging.getLogger(__name__)


def _stringify_keys(data: Mapping[Any, Any]) -> Dict[str, Any]:
    return {str(k): v for k, v in (data or {}).items()}


class SidecarRepository:
    """
    Хранилище sidecar-записей: произвольные атрибуты документа индекса в рамках
    одной выставки. Запись создаётся лениво, при первой записи данных.
    """
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def find(self, document_id: str, exhibit_id: int) -> Optional[SolrDocumentSidecarORM]:
        async with get_session(self._session_factory) as session:
            res = await session.execute(
                select(SolrDocumentSidecarORM).where(
                    SolrDocumentSidecarORM.solr_document_id == document_id,
                    SolrDocumentSidecarORM.exhibit_id == exhibit_id,
                )
            )
            return res.scalar_one_or_none()

    async def find_or_initialize(self, document_id: str, exhibit: ExhibitORM) -> SolrDocumentSidecarORM:
        """Существующая запись или новая пустая (ещё не сохранённая)."""
        sidecar = await self.find(document_id, exhibit.id)
        if sidecar is None:
            sidecar = SolrDocumentSidecarORM(solr_document_id=document_id, exhibit_id=exhibit.id, data={})
        return sidecar

    async def list_for_document(self, document_id: str) -> List[SolrDocumentSidecarORM]:
        async with get_session(self._session_factory) as session:
            res = await session.execute(
                select(SolrDocumentSidecarORM).where(SolrDocumentSidecarORM.solr_document_id == document_id)
            )
            return list(res.scalars().all())

    async def update(self, sidecar: SolrDocumentSidecarORM, data: Mapping[Any, Any]) -> SolrDocumentSidecarORM:
        """
        Сливает data в sidecar (ключи приводятся к строкам, новые значения
        перекрывают старые) и сохраняет запись.
        """
        merged = {**(sidecar.data or {}), **_stringify_keys(data)}
        if sidecar.id is None:
            await self._insert(sidecar, merged, data)
        else:
            await self._write_data(sidecar.id, merged)
            sidecar.data = merged
        return sidecar

    async def _insert(self, sidecar: SolrDocumentSidecarORM, merged: Dict[str, Any], data: Mapping[Any, Any]):
        row = SolrDocumentSidecarORM(
            solr_document_id=sidecar.solr_document_id,
            exhibit_id=sidecar.exhibit_id,
            data=merged,
        )
        async with get_session(self._session_factory) as session:
            try:
                session.add(row)
                await session.commit()
                sidecar.id = row.id
                sidecar.data = merged
                return
            except IntegrityError:
                # Параллельный запрос успел создать запись для той же пары.
                await session.rollback()
                logger.info(
                    "Sidecar for document %s / exhibit %s already exists, merging into it",
                    sidecar.solr_document_id, sidecar.exhibit_id,
                )
            except SQLAlchemyError as e:
                await session.rollback()
                raise DatabaseError(f"Failed to create sidecar: {e}") from e

        existing = await self.find(sidecar.solr_document_id, sidecar.exhibit_id)
        if existing is None:
            raise DatabaseError(
                f"Sidecar insert for document {sidecar.solr_document_id} conflicted but no row was found"
            )
        merged = {**(existing.data or {}), **_stringify_keys(data)}
        await self._write_data(existing.id, merged)
        sidecar.id = existing.id
        sidecar.data = merged

    async def _write_data(self, sidecar_id: int, data: Dict[str, Any]):
        async with get_session(self._session_factory) as session:
            try:
                await session.execute(
                    update(SolrDocumentSidecarORM)
                    .where(SolrDocumentSidecarORM.id == sidecar_id)
                    .values(data=data)
                )
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise DatabaseError(f"Failed to update sidecar {sidecar_id}: {e}") from e
