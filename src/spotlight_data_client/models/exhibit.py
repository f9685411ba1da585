from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ExhibitCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    subtitle: Optional[str] = None
    description: Optional[str] = None
    published: bool = True


class ExhibitInDB(ExhibitCreate):
    id: int
    slug: str
    masthead: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
