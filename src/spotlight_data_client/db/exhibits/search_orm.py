# spotlight_data_client/db/exhibits/search_orm.py

from __future__ import annotations
from typing import ClassVar, Optional
from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from spotlight_data_client.db.base import Base, CreatedAt, JsonData, UpdatedAt
from spotlight_data_client.models.search import SearchInDB


class SearchORM(Base):
    """Сохранённый поиск выставки; на лендинге показывается как категория просмотра."""
    __tablename__ = "spotlight_searches"

    model_path: ClassVar[str] = "spotlight/search"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    short_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    long_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    query_params: Mapped[dict] = mapped_column(JsonData, nullable=False, default=dict)
    weight: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    on_landing_page: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    featured_image: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    exhibit_id: Mapped[int] = mapped_column(ForeignKey("spotlight_exhibits.id", ondelete="CASCADE"), nullable=False)

    created_at: Mapped[CreatedAt]
    updated_at: Mapped[UpdatedAt]

    __table_args__ = (
        Index("idx_spotlight_searches_exhibit_id", "exhibit_id"),
    )

    def to_pydantic(self) -> SearchInDB:
        return SearchInDB.model_validate(self)
