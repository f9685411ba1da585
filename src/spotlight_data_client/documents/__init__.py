from .solr_document import DocumentServices, SolrDocument, SolrDocumentFinder, solr_field_for_tagger
from .reindex import ReindexTrigger

__all__ = [
    "DocumentServices",
    "SolrDocument",
    "SolrDocumentFinder",
    "ReindexTrigger",
    "solr_field_for_tagger",
]
