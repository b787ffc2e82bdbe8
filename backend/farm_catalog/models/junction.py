"""
Junction Links (many-to-many between two catalogs)

Pattern:
- no deleted_at (no soft delete) and no version
- is_active to deactivate a pair while keeping its identity for history
- composite unique (left, right): the constraint is the authority on duplicates
"""
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from farm_catalog.models.base import Base, TimestampMixin


class JunctionMixin(TimestampMixin):
    """
    Subclasses declare their two key columns and name them in
    left_key / right_key so the junction service can stay generic.
    """
    left_key = None
    right_key = None

    id = Column(Integer, primary_key=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    @property
    def left_value(self):
        return getattr(self, self.left_key)

    @property
    def right_value(self):
        return getattr(self, self.right_key)


class BreedCountry(Base, JunctionMixin):
    """
    Breeds raised in a country
    """
    __tablename__ = "breed_countries"
    left_key = "breed_id"
    right_key = "country_code"

    breed_id = Column(Integer, ForeignKey('breeds.id'), nullable=False, index=True)
    country_code = Column(String(2), ForeignKey('countries.code'), nullable=False, index=True)

    breed = relationship("Breed")
    country = relationship("Country")

    __table_args__ = (
        UniqueConstraint('breed_id', 'country_code', name='uq_breed_countries_pair'),
    )

    def __repr__(self):
        return f"<BreedCountry {self.breed_id}-{self.country_code}>"


class CampaignCountry(Base, JunctionMixin):
    """
    Countries where a national campaign runs
    """
    __tablename__ = "campaign_countries"
    left_key = "campaign_id"
    right_key = "country_code"

    campaign_id = Column(Integer, ForeignKey('campaigns.id'), nullable=False, index=True)
    country_code = Column(String(2), ForeignKey('countries.code'), nullable=False, index=True)

    campaign = relationship("Campaign")
    country = relationship("Country")

    __table_args__ = (
        UniqueConstraint('campaign_id', 'country_code', name='uq_campaign_countries_pair'),
    )

    def __repr__(self):
        return f"<CampaignCountry {self.campaign_id}-{self.country_code}>"
