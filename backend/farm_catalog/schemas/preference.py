from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from farm_catalog.schemas.common import NoticeOut


class SelectRequest(BaseModel):
    """Adds a global entry to the farm's selection"""
    entity_id: int


class OrderRequest(BaseModel):
    """Selected entries in their new display order"""
    entity_ids: List[int] = Field(..., description="Ids of selected entries, first = top")


class BatchRequest(BaseModel):
    """Full list of selected global entries"""
    entity_ids: List[int] = Field(default_factory=list)


class LinkOut(BaseModel):
    id: int
    display_order: int
    is_favorite: bool
    usage_count: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ResolvedItemOut(BaseModel):
    id: int
    code: str
    name: str
    description: Optional[str] = None
    scope: str
    is_active: bool
    is_favorite: bool = False
    usage_count: int = 0
    display_order: int = 0
    link: Optional[LinkOut] = None


class ResolutionResponse(BaseModel):
    """selected / available views of one farm over one catalog"""
    selected: List[ResolvedItemOut]
    available: List[ResolvedItemOut]
    total_selected: int
    total_available: int
    notices: List[NoticeOut] = Field(default_factory=list)


class UsageResponse(BaseModel):
    entity_id: int
    usage_count: int
