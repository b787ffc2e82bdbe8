"""
Models of the farm catalog

Catalog tables share CatalogMixin (code, names, version, soft delete, scope).
Preference tables hold per-farm selections; junction tables link two catalogs.
"""

from farm_catalog.models.base import Base, TimestampMixin, SoftDeleteMixin, VersionedMixin, ScopeMixin, CatalogMixin
from farm_catalog.models.farm import Farm
from farm_catalog.models.species import Species
from farm_catalog.models.breed import Breed
from farm_catalog.models.country import Country
from farm_catalog.models.vaccine import Vaccine
from farm_catalog.models.veterinarian import Veterinarian
from farm_catalog.models.product import Product
from farm_catalog.models.campaign import Campaign
from farm_catalog.models.preference import (
    PreferenceMixin,
    SpeciesPreference,
    BreedPreference,
    VaccinePreference,
    VeterinarianPreference,
    ProductPreference,
    CampaignPreference,
)
from farm_catalog.models.junction import JunctionMixin, BreedCountry, CampaignCountry

__all__ = [
    "Base",
    "TimestampMixin",
    "SoftDeleteMixin",
    "VersionedMixin",
    "ScopeMixin",
    "CatalogMixin",
    "Farm",
    "Species",
    "Breed",
    "Country",
    "Vaccine",
    "Veterinarian",
    "Product",
    "Campaign",
    "PreferenceMixin",
    "SpeciesPreference",
    "BreedPreference",
    "VaccinePreference",
    "VeterinarianPreference",
    "ProductPreference",
    "CampaignPreference",
    "JunctionMixin",
    "BreedCountry",
    "CampaignCountry",
]
