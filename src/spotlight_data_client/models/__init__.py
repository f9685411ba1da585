from .exhibit import ExhibitCreate, ExhibitInDB
from .search import SearchCreate, SearchUpdate, SearchInDB
from .tagging import TagRemoved

__all__ = [
    "ExhibitCreate", "ExhibitInDB",
    "SearchCreate", "SearchUpdate", "SearchInDB",
    "TagRemoved",
]
