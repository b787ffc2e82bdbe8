from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.ext.declarative import declared_attr
from datetime import datetime
from farm_catalog.database import Base


class TimestampMixin:
    """
    Temporal audit fields
    Every table gets created_at and updated_at
    """
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class SoftDeleteMixin:
    """
    Soft delete: deleted_at set means the row is hidden from listings but
    still referenceable by historic data. Reversible through restore.
    """
    deleted_at = Column(DateTime, nullable=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class VersionedMixin:
    """
    Version token for optimistic concurrency
    Starts at 1, incremented by every successful mutation
    (see services/concurrency.py)
    """
    version = Column(Integer, default=1, nullable=False)


class ScopeMixin:
    """
    Scope provenance of a catalog row

    - farm_id NULL: global entry, owned by the platform operator
    - farm_id set: local entry, private to that farm

    Never changes after creation.
    """

    @declared_attr
    def farm_id(cls):
        return Column(Integer, ForeignKey('farms.id'), nullable=True, index=True)


class CatalogMixin(ScopeMixin, VersionedMixin, SoftDeleteMixin, TimestampMixin):
    """
    Common columns of every reference catalog (species, breeds, vaccines...)
    """
    id = Column(Integer, primary_key=True, index=True)

    # Identification (code unique within the catalog)
    code = Column(String(50), nullable=False, unique=True, index=True)
    name_fr = Column(String(200), nullable=False)
    name_en = Column(String(200), nullable=True)
    name_ar = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)

    # Status and ordering
    is_active = Column(Boolean, default=True, nullable=False)
    display_order = Column(Integer, nullable=True)

    def name_for(self, locale: str) -> str:
        """Name in the given locale, falling back to French"""
        return getattr(self, f"name_{locale}", None) or self.name_fr

    def __repr__(self):
        return f"<{type(self).__name__} {self.code}>"


__all__ = ['Base', 'TimestampMixin', 'SoftDeleteMixin', 'VersionedMixin', 'ScopeMixin', 'CatalogMixin']
