"""
Junction Link/Unlink Service

Many-to-many links between two catalogs (breed <-> country, campaign <-> country).

State machine of a pair:
    absent --link--> active <--toggle--> inactive --unlink--> absent

The composite unique constraint is the authority on duplicates: there is no
read-before-insert, a violation is reported as DuplicateLink.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from farm_catalog.api.utils import get_by_id, paginate_query, validate_fk
from farm_catalog.core.errors import DuplicateLink, HasDependencies, NotFound
from farm_catalog.models import Farm
from farm_catalog.services.catalog_registry import CATALOGS, JUNCTIONS, JunctionSpec

logger = logging.getLogger(__name__)


class JunctionService:
    """
    Usage:
        service = JunctionService(JUNCTIONS["breed-countries"])
        link = service.link(db, 12, "DZ")
    """

    def __init__(self, spec: JunctionSpec):
        self.spec = spec
        self.model = spec.model
        self.left = CATALOGS[spec.left]
        self.right = CATALOGS[spec.right]

    @property
    def left_column(self):
        return getattr(self.model, self.model.left_key)

    @property
    def right_column(self):
        return getattr(self.model, self.model.right_key)

    # ============ READ ============

    def list(
        self,
        db: Session,
        left: Any = None,
        right: Any = None,
        is_active: Optional[bool] = None,
        page: int = 1,
        limit: int = 25,
    ) -> Tuple[List[Any], int]:
        query = db.query(self.model)

        if left is not None:
            query = query.filter(self.left_column == left)
        if right is not None:
            query = query.filter(self.right_column == right)
        if is_active is not None:
            query = query.filter(self.model.is_active == is_active)

        return paginate_query(query, page, limit, (self.left_column, self.right_column))

    def get_by_id(self, db: Session, link_id: int):
        return get_by_id(db, self.model, link_id, label=self.spec.label)

    def _find(self, db: Session, left: Any, right: Any):
        return (
            db.query(self.model)
            .filter(self.left_column == left, self.right_column == right)
            .first()
        )

    # ============ WRITE ============

    def link(self, db: Session, left: Any, right: Any, is_active: bool = True):
        """
        Creates the pair.

        Raises:
            NotFound: one of the two sides does not exist
            DuplicateLink: the pair already exists
        """
        left_entity = validate_fk(db, self.left.model, left, self.left.label)
        if left_entity.farm_id is not None:
            # Local entries stay out of the shared reference links
            raise NotFound(self.left.label, left)
        validate_fk(db, self.right.model, right, self.right.label, column=self.spec.right_column)

        row = self.model(**{self.model.left_key: left, self.model.right_key: right, "is_active": is_active})
        db.add(row)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.info("[JUNCTION] Duplicate %s %s-%s", self.spec.name, left, right)
            raise DuplicateLink(f"{self.spec.label} {left}-{right} already exists")

        db.refresh(row)
        logger.info("[JUNCTION] Linked %s %s-%s", self.spec.name, left, right)
        return row

    def toggle_active(self, db: Session, link_id: int, is_active: bool):
        """Activates/deactivates a pair without deleting it"""
        row = self.get_by_id(db, link_id)
        row.is_active = is_active
        db.commit()
        db.refresh(row)
        logger.info("[JUNCTION] %s %s is_active=%s", self.spec.name, link_id, is_active)
        return row

    def count_dependencies(self, db: Session, row: Any) -> Dict[str, int]:
        """
        Preferences on the left entry held by farms located in the right country.
        Only non-zero counts are returned.
        """
        preference_model = self.left.preference_model
        if preference_model is None:
            return {}

        total = (
            db.query(func.count(preference_model.id))
            .join(Farm, Farm.id == preference_model.farm_id)
            .filter(
                preference_model.catalog_entity_id == row.left_value,
                Farm.country_code == row.right_value,
            )
            .scalar()
        )
        return {preference_model.__tablename__: total} if total else {}

    def unlink(self, db: Session, left: Any, right: Any) -> None:
        """
        Hard-deletes the pair when nothing depends on it.

        Raises:
            NotFound: the pair does not exist
            HasDependencies: farms of that country still use the left entry
        """
        row = self._find(db, left, right)
        if row is None:
            raise NotFound(self.spec.label, f"{left}-{right}")

        dependencies = self.count_dependencies(db, row)
        if dependencies:
            raise HasDependencies(dependencies)

        db.delete(row)
        db.commit()
        logger.info("[JUNCTION] Unlinked %s %s-%s", self.spec.name, left, right)


_services: Dict[str, JunctionService] = {}


def get_junction_service(name: str) -> JunctionService:
    if name not in _services:
        _services[name] = JunctionService(JUNCTIONS[name])
    return _services[name]
