# spotlight_data_client/db/exhibits/exhibit_orm.py

from __future__ import annotations
from typing import ClassVar, Optional
from sqlalchemy import Boolean, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from spotlight_data_client.db.base import Base, CreatedAt, UpdatedAt
from spotlight_data_client.models.exhibit import ExhibitInDB


class ExhibitORM(Base):
    __tablename__ = "spotlight_exhibits"

    # Имя модели в терминах исходного движка: участвует в именах полей индекса
    # (exhibit_<id>_tags_ssim) и в путях загрузки (uploads/spotlight/exhibit/...).
    param_key: ClassVar[str] = "exhibit"
    model_path: ClassVar[str] = "spotlight/exhibit"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    subtitle: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Путь объекта в MinIO; NULL означает "использовать картинку по умолчанию".
    masthead: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    published: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, server_default=text("true"))

    created_at: Mapped[CreatedAt]
    updated_at: Mapped[UpdatedAt]

    def to_pydantic(self) -> ExhibitInDB:
        return ExhibitInDB.model_validate(self)
