from pydantic import BaseModel, Field, EmailStr, field_validator, model_validator
from typing import Optional
from datetime import date, datetime
import re


# ============ COMMON ============

class CatalogBase(BaseModel):
    """Fields shared by every catalog"""
    code: Optional[str] = Field(None, min_length=1, max_length=50, description="Unique code (generated for local entries)")
    name_fr: str = Field(..., min_length=1, max_length=200, description="Name in French")
    name_en: Optional[str] = Field(None, max_length=200)
    name_ar: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    is_active: bool = Field(True)
    display_order: Optional[int] = Field(None, ge=0)

    @field_validator('code')
    @classmethod
    def normalize_code(cls, v):
        """Codes are stored trimmed and upper case"""
        if v is None:
            return v
        v = v.strip().upper()
        if not v:
            raise ValueError('code cannot be blank')
        return v


class CatalogUpdate(BaseModel):
    """
    Partial update. version is the token read by the client:
    the update is refused (409) if the row changed since.
    """
    version: int = Field(..., ge=1)
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    name_fr: Optional[str] = Field(None, min_length=1, max_length=200)
    name_en: Optional[str] = Field(None, max_length=200)
    name_ar: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    is_active: Optional[bool] = None
    display_order: Optional[int] = Field(None, ge=0)

    @field_validator('code')
    @classmethod
    def normalize_code(cls, v):
        return v.strip().upper() if v else v


class CatalogResponse(BaseModel):
    id: int
    code: str
    name_fr: str
    name_en: Optional[str] = None
    name_ar: Optional[str] = None
    description: Optional[str] = None
    is_active: bool
    display_order: Optional[int] = None
    version: int
    farm_id: Optional[int] = None
    scope: str = "global"
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ============ SPECIES ============

class SpeciesCreate(CatalogBase):
    icon: Optional[str] = Field(None, max_length=50)


class SpeciesUpdate(CatalogUpdate):
    icon: Optional[str] = Field(None, max_length=50)


class SpeciesResponse(CatalogResponse):
    icon: Optional[str] = None


# ============ BREEDS ============

class BreedCreate(CatalogBase):
    species_id: int


class BreedUpdate(CatalogUpdate):
    species_id: Optional[int] = None


class BreedResponse(CatalogResponse):
    species_id: int


# ============ COUNTRIES ============

class CountryCreate(CatalogBase):
    code: str = Field(..., min_length=2, max_length=2, description="ISO 3166-1 alpha-2")
    region: Optional[str] = Field(None, max_length=100)

    @field_validator('code')
    @classmethod
    def validate_iso_code(cls, v):
        """Two letters, stored upper case"""
        v = v.strip().upper()
        if not re.match(r'^[A-Z]{2}$', v):
            raise ValueError('code must be an ISO 3166-1 alpha-2 code (ex: DZ)')
        return v


class CountryUpdate(CatalogUpdate):
    region: Optional[str] = Field(None, max_length=100)

    @field_validator('code')
    @classmethod
    def validate_iso_code(cls, v):
        if v is None:
            return v
        v = v.strip().upper()
        if not re.match(r'^[A-Z]{2}$', v):
            raise ValueError('code must be an ISO 3166-1 alpha-2 code (ex: DZ)')
        return v


class CountryResponse(CatalogResponse):
    region: Optional[str] = None


# ============ VACCINES ============

class VaccineCreate(CatalogBase):
    target_disease: Optional[str] = Field(None, max_length=200)
    manufacturer: Optional[str] = Field(None, max_length=200)


class VaccineUpdate(CatalogUpdate):
    target_disease: Optional[str] = Field(None, max_length=200)
    manufacturer: Optional[str] = Field(None, max_length=200)


class VaccineResponse(CatalogResponse):
    target_disease: Optional[str] = None
    manufacturer: Optional[str] = None


# ============ VETERINARIANS ============

class VeterinarianCreate(CatalogBase):
    license_number: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[EmailStr] = None
    region: Optional[str] = Field(None, max_length=100)


class VeterinarianUpdate(CatalogUpdate):
    license_number: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[EmailStr] = None
    region: Optional[str] = Field(None, max_length=100)


class VeterinarianResponse(CatalogResponse):
    license_number: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    region: Optional[str] = None


# ============ PRODUCTS ============

class ProductCreate(CatalogBase):
    manufacturer: Optional[str] = Field(None, max_length=200)
    form: Optional[str] = Field(None, max_length=50, description="injectable, oral, pour-on...")
    withdrawal_days: Optional[int] = Field(None, ge=0, description="Meat withdrawal period in days")


class ProductUpdate(CatalogUpdate):
    manufacturer: Optional[str] = Field(None, max_length=200)
    form: Optional[str] = Field(None, max_length=50)
    withdrawal_days: Optional[int] = Field(None, ge=0)


class ProductResponse(CatalogResponse):
    manufacturer: Optional[str] = None
    form: Optional[str] = None
    withdrawal_days: Optional[int] = None


# ============ CAMPAIGNS ============

class CampaignCreate(CatalogBase):
    campaign_type: Optional[str] = Field(None, max_length=50, description="vaccination, deworming...")
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode='after')
    def check_dates(self):
        """The campaign cannot end before it starts"""
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError('end_date must be on or after start_date')
        return self


class CampaignUpdate(CatalogUpdate):
    campaign_type: Optional[str] = Field(None, max_length=50)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode='after')
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError('end_date must be on or after start_date')
        return self


class CampaignResponse(CatalogResponse):
    campaign_type: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
