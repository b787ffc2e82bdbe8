from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime


def _country_code(v):
    v = v.strip().upper()
    if len(v) != 2 or not v.isalpha():
        raise ValueError('country_code must be an ISO 3166-1 alpha-2 code')
    return v


class BreedCountryLink(BaseModel):
    breed_id: int
    country_code: str = Field(..., min_length=2, max_length=2)
    is_active: bool = True

    @field_validator('country_code')
    @classmethod
    def validate_country_code(cls, v):
        return _country_code(v)


class BreedCountryUnlink(BaseModel):
    breed_id: int
    country_code: str = Field(..., min_length=2, max_length=2)

    @field_validator('country_code')
    @classmethod
    def validate_country_code(cls, v):
        return _country_code(v)


class BreedCountryResponse(BaseModel):
    id: int
    breed_id: int
    country_code: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CampaignCountryLink(BaseModel):
    campaign_id: int
    country_code: str = Field(..., min_length=2, max_length=2)
    is_active: bool = True

    @field_validator('country_code')
    @classmethod
    def validate_country_code(cls, v):
        return _country_code(v)


class CampaignCountryUnlink(BaseModel):
    campaign_id: int
    country_code: str = Field(..., min_length=2, max_length=2)

    @field_validator('country_code')
    @classmethod
    def validate_country_code(cls, v):
        return _country_code(v)


class CampaignCountryResponse(BaseModel):
    id: int
    campaign_id: int
    country_code: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ToggleActiveRequest(BaseModel):
    is_active: bool
