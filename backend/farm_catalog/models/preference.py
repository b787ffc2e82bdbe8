"""
Farm Preference Links

One table per preference-enabled catalog. A row means "this farm works with
this catalog entry". Owned by a single farm, so there is no version column:
concurrent edits from two sessions of the same farm are last-write-wins.
"""
from sqlalchemy import Column, Integer, Boolean, ForeignKey, UniqueConstraint, Index
from sqlalchemy.ext.declarative import declared_attr
from sqlalchemy.orm import relationship
from farm_catalog.models.base import Base, TimestampMixin


class PreferenceMixin(TimestampMixin):
    """
    Common columns of the preference tables

    Subclasses set catalog_table (target table) and catalog_model
    (target class name for the relationship).
    """
    catalog_table = None
    catalog_model = None

    id = Column(Integer, primary_key=True, index=True)

    @declared_attr
    def farm_id(cls):
        return Column(Integer, ForeignKey('farms.id', ondelete='CASCADE'), nullable=False, index=True)

    @declared_attr
    def catalog_entity_id(cls):
        return Column(Integer, ForeignKey(f'{cls.catalog_table}.id', ondelete='CASCADE'), nullable=False)

    @declared_attr
    def catalog_entity(cls):
        return relationship(cls.catalog_model, lazy="joined")

    display_order = Column(Integer, default=0, nullable=False)
    is_favorite = Column(Boolean, default=False, nullable=False)
    usage_count = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    @declared_attr
    def __table_args__(cls):
        return (
            UniqueConstraint('farm_id', 'catalog_entity_id', name=f'uq_{cls.__tablename__}_farm_entity'),
            Index(f'idx_{cls.__tablename__}_farm_order', 'farm_id', 'display_order'),
        )

    def __repr__(self):
        return f"<{type(self).__name__} farm={self.farm_id} entity={self.catalog_entity_id}>"


class SpeciesPreference(Base, PreferenceMixin):
    __tablename__ = "species_preferences"
    catalog_table = "species"
    catalog_model = "Species"


class BreedPreference(Base, PreferenceMixin):
    __tablename__ = "breed_preferences"
    catalog_table = "breeds"
    catalog_model = "Breed"


class VaccinePreference(Base, PreferenceMixin):
    __tablename__ = "vaccine_preferences"
    catalog_table = "vaccines"
    catalog_model = "Vaccine"


class VeterinarianPreference(Base, PreferenceMixin):
    __tablename__ = "veterinarian_preferences"
    catalog_table = "veterinarians"
    catalog_model = "Veterinarian"


class ProductPreference(Base, PreferenceMixin):
    __tablename__ = "product_preferences"
    catalog_table = "products"
    catalog_model = "Product"


class CampaignPreference(Base, PreferenceMixin):
    __tablename__ = "campaign_preferences"
    catalog_table = "campaigns"
    catalog_model = "Campaign"
