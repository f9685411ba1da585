# Файл: src/spotlight_data_client/__init__.py

from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from .client import DataClient
from .config import (
    get_settings,
    DataClientConfig,
    PostgresConfig,
    MinioConfig,
    ElasticsearchConfig,
    TaggingConfig,
    UploaderConfig,
)
from .documents import SolrDocument, solr_field_for_tagger
from .repositories import (
    ElasticsearchRepository,
    ExhibitRepository,
    MinioRepository,
    SearchRepository,
    SidecarRepository,
    TagLedger,
)
from .uploaders import MastheadUploader

from .exceptions import *

def create_data_client(config: Optional[DataClientConfig] = None) -> DataClient:
    """
    Фабричная функция для создания и конфигурации DataClient.

    :param config: Единый объект с настройками.
                   Если не предоставлен, используются переменные окружения.
    :return: Сконфигурированный экземпляр DataClient.
    """
    if config is None:
        config = get_settings().to_client_config()

    engine = create_async_engine(
            config.postgres.get_pg_dsn(),
            pool_size=config.postgres.pool_size,
            max_overflow=config.postgres.max_overflow,
            pool_timeout=config.postgres.pool_timeout,
            pool_recycle=config.postgres.pool_recycle,
            pool_pre_ping=config.postgres.pool_pre_ping,
            connect_args={
                "server_settings": {
                    "application_name": config.postgres.application_name
                }
            }
        )

    session_factory = async_sessionmaker(bind=engine, expire_on_commit=False)

    minio_repo = MinioRepository(config.minio)
    es_repo = ElasticsearchRepository(config.elastic)

    client = DataClient(
        exhibit_repo=ExhibitRepository(session_factory),
        sidecar_repo=SidecarRepository(session_factory),
        tag_ledger=TagLedger(session_factory, config.tagging),
        elastic_repo=es_repo,
        search_repo=SearchRepository(session_factory),
        minio_repo=minio_repo,
        uploader=MastheadUploader(minio_repo, config.uploader),
    )

    async def _aclose():
        await es_repo.close()
        await engine.dispose()
    client.engine = engine
    client.aclose = _aclose

    return client

__all__ = [
    "DataClient", "create_data_client",
    "DataClientConfig", "PostgresConfig", "MinioConfig", "ElasticsearchConfig",
    "TaggingConfig", "UploaderConfig",
    "SolrDocument", "solr_field_for_tagger", "MastheadUploader",
    "ElasticsearchRepository", "ExhibitRepository", "MinioRepository",
    "SearchRepository", "SidecarRepository", "TagLedger",
    "DataClientError", "DatabaseError", "NotFoundError", "DocumentNotFoundError",
    "MinioError", "ESError",
]
