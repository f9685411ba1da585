from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class SearchCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    short_description: Optional[str] = None
    long_description: Optional[str] = None
    query_params: Dict[str, Any] = Field(default_factory=dict)
    weight: int = 0
    on_landing_page: bool = False


class SearchUpdate(BaseModel):
    """Частичное обновление: учитываются только явно переданные поля."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    short_description: Optional[str] = None
    long_description: Optional[str] = None
    query_params: Optional[Dict[str, Any]] = None
    weight: Optional[int] = None
    on_landing_page: Optional[bool] = None


class SearchInDB(SearchCreate):
    id: int
    exhibit_id: int
    featured_image: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
