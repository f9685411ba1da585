from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TagRemoved:
    """Событие ledger'а: тег снят с документа (строка taggings удалена)."""
    tagging_id: int
    taggable_id: str
    tagger_id: int
    tag_name: str
