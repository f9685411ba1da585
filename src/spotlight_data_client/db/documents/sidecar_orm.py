# spotlight_data_client/db/documents/sidecar_orm.py

from __future__ import annotations
from typing import Any, Dict, Optional
from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from spotlight_data_client.db.base import Base, CreatedAt, JsonData, UpdatedAt


class SolrDocumentSidecarORM(Base):
    """
    Данные куратора для пары (документ индекса, выставка).
    Сам документ живёт только в поисковом индексе, поэтому solr_document_id
    - обычная строка без внешнего ключа.
    """
    __tablename__ = "spotlight_solr_document_sidecars"

    id: Mapped[Optional[int]] = mapped_column(Integer, primary_key=True, autoincrement=True)
    solr_document_id: Mapped[str] = mapped_column(String(255), nullable=False)
    exhibit_id: Mapped[int] = mapped_column(ForeignKey("spotlight_exhibits.id", ondelete="CASCADE"), nullable=False)
    data: Mapped[Dict[str, Any]] = mapped_column(JsonData, nullable=False, default=dict)

    created_at: Mapped[CreatedAt]
    updated_at: Mapped[UpdatedAt]

    # Уникальность пары обеспечивает БД; find-or-create опирается на этот ключ.
    __table_args__ = (
        UniqueConstraint("solr_document_id", "exhibit_id", name="uq_sidecars_document_exhibit"),
    )

    def to_solr(self) -> Dict[str, Any]:
        return dict(self.data or {})
