from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime


class FarmCreate(BaseModel):
    """Schema for farm creation (operators)"""
    name: str = Field(..., min_length=1, max_length=200)
    country_code: Optional[str] = Field(None, min_length=2, max_length=2, description="ISO code of the country")
    is_active: bool = True

    @field_validator('country_code')
    @classmethod
    def upper_country_code(cls, v):
        return v.upper() if v else v


class FarmResponse(BaseModel):
    id: int
    name: str
    country_code: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
