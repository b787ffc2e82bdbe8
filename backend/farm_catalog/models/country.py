from sqlalchemy import Column, String
from farm_catalog.models.base import Base, CatalogMixin


class Country(Base, CatalogMixin):
    """
    Countries (code = ISO 3166-1 alpha-2, ex: DZ, FR, TN)
    Global only: farms never create local countries
    """
    __tablename__ = "countries"

    region = Column(String(100), nullable=True)
