from sqlalchemy import Column, Integer, String, Boolean
from farm_catalog.models.base import Base, TimestampMixin


class Farm(Base, TimestampMixin):
    """
    A farm using the platform

    Each farm has:
    - its own preference links over the global catalogs
    - its own local catalog entries, invisible to other farms
    """
    __tablename__ = "farms"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(200), nullable=False)
    country_code = Column(String(2), nullable=True, index=True)  # ISO code, see countries.code

    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<Farm {self.name} (ID: {self.id})>"
