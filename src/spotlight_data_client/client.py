import logging
from typing import Any, List, Mapping, Optional

from spotlight_data_client.db import ExhibitORM, SearchORM
from spotlight_data_client.documents import (
    DocumentServices,
    ReindexTrigger,
    SolrDocument,
    SolrDocumentFinder,
    solr_field_for_tagger,
)
from spotlight_data_client.exceptions import DatabaseError, ESError, MinioError, NotFoundError
from spotlight_data_client.repositories import (
    ElasticsearchRepository,
    ExhibitRepository,
    MinioRepository,
    SearchRepository,
    SidecarRepository,
    TagLedger,
)
from spotlight_data_client.uploaders import MastheadUploader

logger = logging.getLogger(__name__)


class DataClient:
    """
    Единая точка доступа: документы индекса с данными выставок,
    выставки, сохранённые поиски и их изображения.
    """

    def __init__(
        self,
        exhibit_repo: ExhibitRepository,
        sidecar_repo: SidecarRepository,
        tag_ledger: TagLedger,
        elastic_repo: ElasticsearchRepository,
        search_repo: SearchRepository | None = None,
        minio_repo: MinioRepository | None = None,
        uploader: MastheadUploader | None = None,
    ):
        self.exhibits = exhibit_repo
        self.sidecars = sidecar_repo
        self.tags = tag_ledger
        self.es = elastic_repo
        self.searches = search_repo
        self.minio = minio_repo
        self.uploader = uploader

        self.services = DocumentServices(
            index=elastic_repo,
            sidecars=sidecar_repo,
            tags=tag_ledger,
            exhibits=exhibit_repo,
        )
        self.documents = SolrDocumentFinder(self.services)
        self.reindex_trigger = ReindexTrigger(tag_ledger, self.documents)

    async def check_connections(self) -> dict[str, str]:
        """
        Проверяет доступность внешних сервисов (PostgreSQL, Elasticsearch, MinIO).
        Возвращает словарь со статусами.
        """
        statuses = {}

        try:
            await self.exhibits.check_connection()
            statuses["postgres"] = "ok"
        except DatabaseError as e:
            statuses["postgres"] = f"failed: {e}"

        try:
            await self.es.check_connection()
            statuses["elastic"] = "ok"
        except ESError as e:
            statuses["elastic"] = f"failed: {e}"

        if self.minio is not None:
            try:
                await self.minio.check_connection()
                statuses["minio"] = "ok"
            except MinioError as e:
                statuses["minio"] = f"failed: {e}"

        return statuses

    # ――― documents ――― #

    async def get_document(self, doc_id: str) -> SolrDocument:
        return await self.documents.find(doc_id)

    async def _require_exhibit(self, exhibit_id: int) -> ExhibitORM:
        exhibit = await self.exhibits.get(exhibit_id)
        if exhibit is None:
            raise NotFoundError(f"Exhibit {exhibit_id} not found.")
        return exhibit

    async def update_document(self, exhibit_id: int, doc_id: str, attributes: Mapping[str, Any]) -> SolrDocument:
        """
        Применяет правку куратора: ключ "sidecar" - данные выставки для документа,
        "exhibit_tag_list" - теги выставки. Остальные ключи игнорируются.
        """
        exhibit = await self._require_exhibit(exhibit_id)
        document = await self.documents.find(doc_id)
        await document.update(exhibit, attributes)
        # tag() уже сохранил документ
        if "exhibit_tag_list" not in {str(k) for k in attributes}:
            await document.save()
        return document

    async def reindex(self, doc_id: str) -> bool:
        return await self.documents.reindex(doc_id)

    async def projection(self, doc_id: str) -> dict[str, Any]:
        document = await self.documents.find(doc_id)
        return await document.to_solr()

    async def exhibit_tags(self, exhibit_id: int, doc_id: str) -> List[str]:
        exhibit = await self._require_exhibit(exhibit_id)
        return await self.tags.names_for(doc_id, exhibit)

    async def find_tagged(self, exhibit_id: int, tag: str, limit: int | None = None) -> List[str]:
        """id документов, помеченных тегом tag в выставке."""
        exhibit = await self._require_exhibit(exhibit_id)
        return await self.es.search_by_field(solr_field_for_tagger(exhibit), tag, limit=limit)

    # ――― images ――― #

    def _require_uploader(self) -> MastheadUploader:
        if self.uploader is None:
            raise MinioError("Object storage is not configured for this client.")
        return self.uploader

    async def upload_exhibit_masthead(
        self, exhibit_id: int, file_name: str, content: bytes, content_type: str | None = None
    ) -> ExhibitORM:
        uploader = self._require_uploader()
        exhibit = await self._require_exhibit(exhibit_id)
        previous = exhibit.masthead
        object_path = await uploader.store(exhibit, "masthead", file_name, content, content_type)
        try:
            updated = await self.exhibits.set_masthead(exhibit_id, object_path)
        except DatabaseError:
            logger.error("Failed to attach masthead to exhibit %s, removing %s", exhibit_id, object_path)
            await uploader.remove(object_path)
            raise
        if previous and previous != object_path:
            await uploader.remove(previous)
        return updated

    async def upload_search_image(
        self, search_id: int, file_name: str, content: bytes, content_type: str | None = None
    ) -> SearchORM:
        uploader = self._require_uploader()
        if self.searches is None:
            raise DatabaseError("Saved searches are not configured for this client.")
        search = await self.searches.get(search_id)
        if search is None:
            raise NotFoundError(f"Search {search_id} not found.")
        previous = search.featured_image
        object_path = await uploader.store(search, "featured_image", file_name, content, content_type)
        try:
            updated = await self.searches.set_featured_image(search_id, object_path)
        except DatabaseError:
            await uploader.remove(object_path)
            raise
        if previous and previous != object_path:
            await uploader.remove(previous)
        return updated

    async def masthead_url(self, exhibit_id: int, version_name: Optional[str] = None) -> str:
        exhibit = await self._require_exhibit(exhibit_id)
        return await self._require_uploader().url(exhibit.masthead, version_name)
