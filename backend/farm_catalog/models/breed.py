from sqlalchemy import Column, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship
from farm_catalog.models.base import Base, CatalogMixin


class Breed(Base, CatalogMixin):
    """
    Breeds of a species

    Example:
    - Ovine (species)
      - Ouled Djellal
      - Rembi
    """
    __tablename__ = "breeds"

    species_id = Column(Integer, ForeignKey('species.id'), nullable=False)

    species = relationship("Species", back_populates="breeds")

    __table_args__ = (
        Index('idx_breeds_species', 'species_id'),
    )
