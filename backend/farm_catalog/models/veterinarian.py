from sqlalchemy import Column, String
from farm_catalog.models.base import Base, CatalogMixin


class Veterinarian(Base, CatalogMixin):
    """
    Veterinarians (name_fr holds the full name)
    """
    __tablename__ = "veterinarians"

    license_number = Column(String(50), nullable=True)
    phone = Column(String(30), nullable=True)
    email = Column(String(200), nullable=True)
    region = Column(String(100), nullable=True)
