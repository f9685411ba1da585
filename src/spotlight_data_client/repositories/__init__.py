from .minio_repository import MinioRepository
from .es_repository import ElasticsearchRepository
from .exhibit_repository import ExhibitRepository
from .search_repository import SearchRepository
from .sidecar_repository import SidecarRepository
from .tags.tag_ledger import TagLedger

__all__ = [
    "MinioRepository",
    "ElasticsearchRepository",
    "ExhibitRepository",
    "SearchRepository",
    "SidecarRepository",
    "TagLedger",
]
