# spotlight_data_client/db/tags/tag_orm.py

from __future__ import annotations
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from spotlight_data_client.db.base import Base, CreatedAt

class TagORM(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Имя тега уникально; нормализация имён - задача TagLedger.
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)

    created_at: Mapped[CreatedAt]
