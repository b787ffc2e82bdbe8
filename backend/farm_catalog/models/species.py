from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from farm_catalog.models.base import Base, CatalogMixin


class Species(Base, CatalogMixin):
    """
    Animal species (ovine, bovine, caprine...)
    """
    __tablename__ = "species"

    icon = Column(String(50), nullable=True)

    breeds = relationship("Breed", back_populates="species")
