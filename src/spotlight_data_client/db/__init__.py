# spotlight_data_client/db/__init__.py

from .base import Base

from .exhibits.exhibit_orm import ExhibitORM
from .exhibits.search_orm import SearchORM
from .documents.sidecar_orm import SolrDocumentSidecarORM

from .tags.tag_orm import TagORM
from .tags.tagging_orm import TaggingORM, TAGGABLE_TYPE, TAGGER_TYPE


__all__ = [
    "Base",
    "ExhibitORM",
    "SearchORM",
    "SolrDocumentSidecarORM",
    "TagORM",
    "TaggingORM",
    "TAGGABLE_TYPE",
    "TAGGER_TYPE",
]
