"""
Catalog Registry

One CatalogSpec per reference catalog. The generic services and routers are
driven by these entries instead of one hand-written module per catalog.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from farm_catalog.core.errors import NotFound

from farm_catalog.models import (
    Species, Breed, Country, Vaccine, Veterinarian, Product, Campaign, Farm,
    SpeciesPreference, BreedPreference, VaccinePreference,
    VeterinarianPreference, ProductPreference, CampaignPreference,
    BreedCountry, CampaignCountry,
)


@dataclass(frozen=True)
class DependencyCounter:
    """
    Counts rows of `model` whose `column` equals the entity's `ref` attribute.

    Example: DependencyCounter("breeds", Breed, "species_id")
    counts the breeds of a species.
    """
    key: str
    model: Any
    column: str
    ref: str = "id"


@dataclass(frozen=True)
class CatalogSpec:
    name: str                      # URL segment and registry key
    label: str                     # display name in messages
    model: Any
    preference_model: Optional[Any] = None
    allows_local: bool = False
    search_fields: Tuple[str, ...] = ("code", "name_fr", "name_en", "name_ar", "description")
    references: Dict[str, str] = field(default_factory=dict)  # fk field -> catalog name
    filters: Tuple[str, ...] = ()  # extra equality filters accepted by the listing
    dependencies: Tuple[DependencyCounter, ...] = ()

    @property
    def has_preferences(self) -> bool:
        return self.preference_model is not None


@dataclass(frozen=True)
class JunctionSpec:
    name: str
    label: str
    model: Any
    left: str                      # catalog name of the left side
    right: str                     # catalog name of the right side
    right_column: str = "id"       # column of the right catalog the key refers to
    search_fields: Tuple[str, ...] = ()


def _prefs(key: str, model: Any) -> DependencyCounter:
    return DependencyCounter(key, model, "catalog_entity_id")


CATALOGS: Dict[str, CatalogSpec] = {
    spec.name: spec for spec in (
        CatalogSpec(
            name="species",
            label="Species",
            model=Species,
            preference_model=SpeciesPreference,
            allows_local=True,
            dependencies=(
                DependencyCounter("breeds", Breed, "species_id"),
                _prefs("species_preferences", SpeciesPreference),
            ),
        ),
        CatalogSpec(
            name="breeds",
            label="Breed",
            model=Breed,
            preference_model=BreedPreference,
            allows_local=True,
            references={"species_id": "species"},
            filters=("species_id",),
            dependencies=(
                _prefs("breed_preferences", BreedPreference),
                DependencyCounter("breed_countries", BreedCountry, "breed_id"),
            ),
        ),
        CatalogSpec(
            name="countries",
            label="Country",
            model=Country,
            search_fields=("code", "name_fr", "name_en", "name_ar", "region"),
            filters=("region",),
            dependencies=(
                DependencyCounter("breed_countries", BreedCountry, "country_code", ref="code"),
                DependencyCounter("campaign_countries", CampaignCountry, "country_code", ref="code"),
                DependencyCounter("farms", Farm, "country_code", ref="code"),
            ),
        ),
        CatalogSpec(
            name="vaccines",
            label="Vaccine",
            model=Vaccine,
            preference_model=VaccinePreference,
            allows_local=True,
            search_fields=("code", "name_fr", "name_en", "name_ar", "target_disease", "manufacturer"),
            dependencies=(_prefs("vaccine_preferences", VaccinePreference),),
        ),
        CatalogSpec(
            name="veterinarians",
            label="Veterinarian",
            model=Veterinarian,
            preference_model=VeterinarianPreference,
            allows_local=True,
            search_fields=("code", "name_fr", "name_en", "license_number", "region"),
            filters=("region",),
            dependencies=(_prefs("veterinarian_preferences", VeterinarianPreference),),
        ),
        CatalogSpec(
            name="products",
            label="Product",
            model=Product,
            preference_model=ProductPreference,
            allows_local=True,
            search_fields=("code", "name_fr", "name_en", "name_ar", "manufacturer"),
            dependencies=(_prefs("product_preferences", ProductPreference),),
        ),
        CatalogSpec(
            name="campaigns",
            label="Campaign",
            model=Campaign,
            preference_model=CampaignPreference,
            filters=("campaign_type",),
            dependencies=(
                DependencyCounter("campaign_countries", CampaignCountry, "campaign_id"),
                _prefs("campaign_preferences", CampaignPreference),
            ),
        ),
    )
}


JUNCTIONS: Dict[str, JunctionSpec] = {
    spec.name: spec for spec in (
        JunctionSpec(
            name="breed-countries",
            label="Breed country",
            model=BreedCountry,
            left="breeds",
            right="countries",
            right_column="code",
        ),
        JunctionSpec(
            name="campaign-countries",
            label="Campaign country",
            model=CampaignCountry,
            left="campaigns",
            right="countries",
            right_column="code",
        ),
    )
}


def get_catalog(name: str) -> CatalogSpec:
    try:
        return CATALOGS[name]
    except KeyError:
        raise NotFound("Catalog", name)
