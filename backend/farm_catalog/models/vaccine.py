from sqlalchemy import Column, String
from farm_catalog.models.base import Base, CatalogMixin


class Vaccine(Base, CatalogMixin):
    """
    Vaccines available for the herds
    """
    __tablename__ = "vaccines"

    target_disease = Column(String(200), nullable=True)
    manufacturer = Column(String(200), nullable=True)
