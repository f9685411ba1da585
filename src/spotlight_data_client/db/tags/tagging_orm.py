# spotlight_data_client/db/tags/tagging_orm.py

from __future__ import annotations
from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from spotlight_data_client.db.base import Base, CreatedAt
from spotlight_data_client.db.tags.tag_orm import TagORM

TAGGABLE_TYPE = "SolrDocument"
TAGGER_TYPE = "Spotlight::Exhibit"


class TaggingORM(Base):
    """
    Связь (тег, документ, автор тега). Автор тега - выставка, поэтому одна и та же
    пара тег/документ может встречаться несколько раз от разных выставок.
    """
    __tablename__ = "taggings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tag_id: Mapped[int] = mapped_column(ForeignKey("tags.id", ondelete="CASCADE"), nullable=False)

    taggable_id: Mapped[str] = mapped_column(String(255), nullable=False)
    taggable_type: Mapped[str] = mapped_column(String(255), nullable=False, default=TAGGABLE_TYPE)

    tagger_id: Mapped[int] = mapped_column(ForeignKey("spotlight_exhibits.id", ondelete="CASCADE"), nullable=False)
    tagger_type: Mapped[str] = mapped_column(String(255), nullable=False, default=TAGGER_TYPE)

    context: Mapped[str] = mapped_column(String(128), nullable=False, default="tags")

    created_at: Mapped[CreatedAt]

    tag: Mapped[TagORM] = relationship(TagORM, lazy="joined")

    __table_args__ = (
        UniqueConstraint(
            "tag_id", "taggable_id", "taggable_type", "tagger_id", "tagger_type", "context",
            name="uq_taggings_idx",
        ),
        Index("idx_taggings_taggable", "taggable_id", "taggable_type", "context"),
        Index("idx_taggings_tagger", "tagger_id", "tagger_type"),
    )
