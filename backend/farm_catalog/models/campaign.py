from sqlalchemy import Column, String, Date
from farm_catalog.models.base import Base, CatalogMixin


class Campaign(Base, CatalogMixin):
    """
    National sanitary campaigns (vaccination, deworming...)
    Global only, farms follow them through preferences
    """
    __tablename__ = "campaigns"

    campaign_type = Column(String(50), nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
