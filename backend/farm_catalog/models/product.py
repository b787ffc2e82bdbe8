from sqlalchemy import Column, Integer, String
from farm_catalog.models.base import Base, CatalogMixin


class Product(Base, CatalogMixin):
    """
    Medical products (antiparasitics, antibiotics...)
    """
    __tablename__ = "products"

    manufacturer = Column(String(200), nullable=True)
    form = Column(String(50), nullable=True)  # injectable, oral, pour-on...
    withdrawal_days = Column(Integer, nullable=True)  # Meat withdrawal period
