# spotlight_data_client/documents/solr_document.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from spotlight_data_client.db import ExhibitORM, SolrDocumentSidecarORM
from spotlight_data_client.exceptions import DocumentNotFoundError
from spotlight_data_client.repositories.es_repository import ElasticsearchRepository
from spotlight_data_client.repositories.exhibit_repository import ExhibitRepository
from spotlight_data_client.repositories.sidecar_repository import SidecarRepository
from spotlight_data_client.repositories.tags.tag_ledger import TagLedger

logger = logging.getLogger(__name__)


def solr_field_for_tagger(tagger: ExhibitORM) -> str:
    """Поле индекса с тегами выставки: exhibit_<id>_tags_ssim."""
    return f"{tagger.param_key}_{tagger.id}_tags_ssim"


@dataclass
class DocumentServices:
    """Коллабораторы, которыми пользуется SolrDocument."""
    index: ElasticsearchRepository
    sidecars: SidecarRepository
    tags: TagLedger
    exhibits: ExhibitRepository


class SolrDocument:
    """
    Запись поискового индекса, которая ведёт себя как сохранённая сущность:
    всегда persisted, никогда не new и не destroyed. Собственных данных для
    записи у документа нет - update() раскладывает атрибуты по sidecar'ам и
    тегам выставки, а save() переиндексирует документ.
    """

    def __init__(self, id: str, source: Mapping[str, Any] | None, services: DocumentServices):
        self.id = id
        self._source: Dict[str, Any] = dict(source or {})
        self._services = services
        self._sidecar_cache: Dict[int, SolrDocumentSidecarORM] = {}
        self._owner_tag_lists: Dict[Tuple[int, str], Tuple[ExhibitORM, List[str]]] = {}

    @classmethod
    def after_save(cls, *args, **kwargs):
        """Заглушка для коллабораторов, регистрирующих хуки сохранения."""

    # --- identity ---

    @staticmethod
    def primary_key() -> str:
        return "id"

    def to_key(self) -> List[str]:
        return [self.id]

    @property
    def persisted(self) -> bool:
        return True

    @property
    def destroyed(self) -> bool:
        return False

    @property
    def new_record(self) -> bool:
        return not self.persisted

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SolrDocument):
            return NotImplemented
        return type(self) is type(other) and self.to_key() == other.to_key()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.id))

    def __repr__(self) -> str:
        return f"<SolrDocument id={self.id!r}>"

    # --- index fields ---

    def __getitem__(self, field: str) -> Any:
        return self._source[field]

    def get(self, field: str, default: Any = None) -> Any:
        return self._source.get(field, default)

    @property
    def source(self) -> Dict[str, Any]:
        return dict(self._source)

    # --- mutation ---

    async def update(self, exhibit: ExhibitORM, new_attributes: Mapping[Any, Any]):
        attributes = {str(k): v for k, v in new_attributes.items()}

        custom_data = attributes.pop("sidecar", None)
        if custom_data is not None:
            sidecar = await self.sidecar(exhibit)
            await self._services.sidecars.update(sidecar, custom_data)

        tags = attributes.pop("exhibit_tag_list", None)
        if tags is not None:
            # tag() сам сохраняет документ
            await self._services.tags.tag(exhibit, self, with_=tags, on="tags")

        if attributes:
            logger.debug("Ignoring unsupported attributes for %s: %s", self.id, sorted(attributes))

    async def save(self):
        await self._services.tags.save_owned_tags(self)
        await self.reindex()

    async def reindex(self):
        projection = await self.to_solr()
        try:
            await self._services.index.write(self.id, projection)
        except DocumentNotFoundError:
            logger.info("Document %s is gone from the index, skipping reindex", self.id)

    # --- owned tags, pending until save() ---

    def set_owner_tag_list(self, owner: ExhibitORM, context: str, names: List[str]):
        self._owner_tag_lists[(owner.id, context)] = (owner, list(names))

    def pop_owner_tag_lists(self) -> List[Tuple[ExhibitORM, str, List[str]]]:
        pending = [(owner, context, names) for (_, context), (owner, names) in self._owner_tag_lists.items()]
        self._owner_tag_lists.clear()
        return pending

    async def exhibit_tag_list(self, exhibit: ExhibitORM) -> List[str]:
        pending = self._owner_tag_lists.get((exhibit.id, "tags"))
        if pending is not None:
            return list(pending[1])
        return await self._services.tags.names_for(self.id, exhibit)

    # --- sidecars ---

    async def sidecar(self, exhibit: ExhibitORM) -> SolrDocumentSidecarORM:
        cached = self._sidecar_cache.get(exhibit.id)
        if cached is None:
            cached = await self._services.sidecars.find_or_initialize(self.id, exhibit)
            self._sidecar_cache[exhibit.id] = cached
        return cached

    async def sidecars(self) -> List[SolrDocumentSidecarORM]:
        return await self._services.sidecars.list_for_document(self.id)

    # --- projection ---

    async def to_solr(self) -> Dict[str, Any]:
        projection: Dict[str, Any] = {}
        for sidecar in await self.sidecars():
            projection.update(sidecar.to_solr())
        projection["id"] = self.id
        projection.update(await self.tags_to_solr())
        return projection

    async def tags_to_solr(self) -> Dict[str, Optional[List[str]]]:
        h: Dict[str, Optional[List[str]]] = {}

        # Пустое поле для каждой выставки: если с документа сняли последний тег
        # выставки, поле в индексе тоже должно очиститься.
        async for exhibit in self._services.exhibits.iter_all():
            h[solr_field_for_tagger(exhibit)] = None

        for tagger, name in await self._services.tags.taggings_for(self.id):
            key = solr_field_for_tagger(tagger)
            if h.get(key) is None:
                h[key] = []
            h[key].append(name)
        return h


class SolrDocumentFinder:
    """Поиск документов в индексе и переиндексация по id."""

    def __init__(self, services: DocumentServices):
        self._services = services

    async def find(self, doc_id: str) -> SolrDocument:
        source = await self._services.index.find(doc_id)
        return SolrDocument(doc_id, source, self._services)

    async def reindex(self, doc_id: str) -> bool:
        """False, если документа в индексе нет (это не ошибка)."""
        try:
            document = await self.find(doc_id)
        except DocumentNotFoundError:
            logger.debug("Reindex skipped, no document %s in the index", doc_id)
            return False
        await document.reindex()
        return True
