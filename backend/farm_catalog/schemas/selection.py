from pydantic import BaseModel
from typing import List, Optional


class SelectionItemOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    is_local: bool = False
    is_favorite: bool = False
    usage_count: int = 0

    class Config:
        from_attributes = True


class SelectionGroupOut(BaseModel):
    name: str  # favorites, recent, others
    items: List[SelectionItemOut]


class PickerResponse(BaseModel):
    """Ranked items of a picker; empty groups are omitted"""
    groups: List[SelectionGroupOut]
    total: int
