# spotlight_data_client/repositories/es_repository.py
import logging
from typing import Any, Dict, List, Mapping

from elasticsearch import AsyncElasticsearch, ApiError, NotFoundError as ESNotFoundError, TransportError
from spotlight_data_client.config import ElasticsearchConfig
from spotlight_data_client.exceptions import DocumentNotFoundError, ESError

logger = logging.getLogger(__name__)

# Суффиксы полей следуют соглашению динамических полей Solr: *_ssim - многозначная
# строка, *_tesim - многозначный текст. Шаблоны держат ту же схему в Elasticsearch.
DOCS_INDEX_MAPPINGS: Dict[str, Any] = {
    "dynamic_templates": [
        {"ssim": {"match": "*_ssim", "mapping": {"type": "keyword"}}},
        {"ssi": {"match": "*_ssi", "mapping": {"type": "keyword"}}},
        {"tesim": {"match": "*_tesim", "mapping": {"type": "text"}}},
        {"bsi": {"match": "*_bsi", "mapping": {"type": "boolean"}}},
    ],
    "properties": {
        "id": {"type": "keyword"},
    },
}


class ElasticsearchRepository:
    """Поисковый индекс документов: чтение записи и публикация её проекции."""

    def __init__(self, cfg: ElasticsearchConfig, client: AsyncElasticsearch | None = None):
        self._cfg = cfg
        if client is None:
            auth = None
            if cfg.api_key:
                auth = {"api_key": cfg.api_key}
            elif cfg.username and cfg.password:
                auth = (cfg.username, cfg.password)
            client = AsyncElasticsearch(
                cfg.endpoint,
                basic_auth=auth if isinstance(auth, tuple) else None,
                api_key=auth["api_key"] if isinstance(auth, dict) else None,
                verify_certs=cfg.verify_certs,
                request_timeout=cfg.request_timeout,
            )
        self._es = client
        self._index_docs = cfg.index_docs

    async def close(self):
        await self._es.close()

    async def check_connection(self) -> bool:
        try:
            ok = await self._es.ping()
            logger.info("Elasticsearch ping: %s", ok)
        except Exception as e:
            logger.exception("Elasticsearch ping failed: %s", e)
            raise ESError(f"Elasticsearch is unreachable: {e}") from e
        if not ok:
            raise ESError("Elasticsearch ping returned false")
        return True

    async def ensure_index(self) -> bool:
        """Создаёт индекс документов, если его ещё нет. True - если индекс создан сейчас."""
        try:
            exists = await self._es.indices.exists(index=self._index_docs)
            if exists:
                return False
            await self._es.indices.create(index=self._index_docs, mappings=DOCS_INDEX_MAPPINGS)
            logger.info("Created index %s", self._index_docs)
            return True
        except (ApiError, TransportError) as e:
            raise ESError(f"Failed to create index {self._index_docs}: {e}") from e

    async def find(self, doc_id: str) -> Dict[str, Any]:
        """_source записи; DocumentNotFoundError, если записи с таким id нет."""
        try:
            res = await self._es.get(index=self._index_docs, id=doc_id)
        except ESNotFoundError as e:
            raise DocumentNotFoundError(f"Document {doc_id} not found in index {self._index_docs}") from e
        except (ApiError, TransportError) as e:
            raise ESError(f"Failed to fetch document {doc_id}: {e}") from e
        return dict(res.get("_source") or {})

    async def write(self, doc_id: str, projection: Mapping[str, Any]):
        """
        Частичное обновление записи. Значение None очищает поле в индексе,
        так что снятие последнего тега не оставляет устаревших значений.
        """
        doc = {k: v for k, v in projection.items() if k != "id"}
        try:
            await self._es.update(index=self._index_docs, id=doc_id, doc=doc)
        except ESNotFoundError as e:
            raise DocumentNotFoundError(f"Document {doc_id} not found in index {self._index_docs}") from e
        except (ApiError, TransportError) as e:
            logger.error("ES update failed for %s: %s", doc_id, e)
            raise ESError(f"Failed to write projection for {doc_id}: {e}") from e
        logger.debug("Published projection for %s (%d fields)", doc_id, len(doc))

    async def delete(self, doc_id: str) -> bool:
        try:
            await self._es.delete(index=self._index_docs, id=doc_id)
            return True
        except ESNotFoundError:
            return False
        except (ApiError, TransportError) as e:
            raise ESError(f"Failed to delete document {doc_id}: {e}") from e

    async def search_by_field(self, field: str, value: str, limit: int | None = None) -> List[str]:
        """id записей, у которых keyword-поле field содержит value."""
        size = min(self._cfg.max_page_size, limit or self._cfg.max_page_size)
        try:
            res = await self._es.search(
                index=self._index_docs,
                query={"bool": {"filter": [{"term": {field: value}}]}},
                size=size,
                source=False,
            )
        except (ApiError, TransportError) as e:
            logger.exception("ES search error: %s", e)
            raise ESError(f"Search on {field} failed: {e}") from e
        return [h["_id"] for h in res.get("hits", {}).get("hits", [])]
