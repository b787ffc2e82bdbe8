"""
Catalog Service

Generic CRUD over one reference catalog, driven by its CatalogSpec:
- listing with scope view, search, filters, sorting and pagination
- create (scope decided by the actor), versioned update, soft delete/restore
- dependency counts and purge (hard delete)
"""
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from farm_catalog.api.utils import apply_search_filter, paginate_query, validate_unique
from farm_catalog.config import settings
from farm_catalog.core.errors import HasDependencies, NotFound, ValidationFailure
from farm_catalog.services import concurrency
from farm_catalog.services.catalog_registry import CATALOGS, CatalogSpec
from farm_catalog.services.scope import (
    Actor, LocalScope, Operation, ScopedEntity, ScopeView, attach_scope, scope_resolver,
)

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = ("code", "name_fr", "name_en", "name_ar", "display_order", "created_at", "updated_at")


@dataclass
class ListParams:
    page: int = 1
    limit: int = settings.DEFAULT_PAGE_SIZE
    search: Optional[str] = None
    is_active: Optional[bool] = None
    include_deleted: bool = False
    sort_by: Optional[str] = None
    sort_order: str = "asc"
    view: ScopeView = ScopeView.ALL
    filters: Dict[str, Any] = field(default_factory=dict)


def generate_local_code(farm_id: int) -> str:
    """Code of a local entry created without one (ex: LOCAL-12-3F9A0B1C)"""
    return f"LOCAL-{farm_id}-{uuid.uuid4().hex[:8].upper()}"


class CatalogService:
    """
    Service of one catalog

    Usage:
        service = CatalogService(CATALOGS["breeds"])
        items, total = service.get_all(db, actor, ListParams(search="ouled"))
    """

    def __init__(self, spec: CatalogSpec):
        self.spec = spec
        self.model = spec.model

    # ============ READ ============

    def get_all(self, db: Session, actor: Actor, params: ListParams) -> Tuple[List[ScopedEntity], int]:
        model = self.model
        query = scope_resolver.visibility_filter(db.query(model), model, actor, params.view)

        if not params.include_deleted:
            query = query.filter(model.deleted_at.is_(None))

        if params.is_active is not None:
            query = query.filter(model.is_active == params.is_active)

        for name, value in params.filters.items():
            if value is None:
                continue
            if name not in self.spec.filters:
                raise ValidationFailure(f"unknown filter '{name}'", field=name)
            column = getattr(model, name)
            try:
                value = column.type.python_type(value)
            except (TypeError, ValueError):
                raise ValidationFailure(f"invalid value for '{name}'", field=name)
            query = query.filter(column == value)

        query = apply_search_filter(
            query, params.search, *[getattr(model, f) for f in self.spec.search_fields]
        )

        items, total = paginate_query(query, params.page, params.limit, self._order_by(params))
        return [attach_scope(item) for item in items], total

    def _order_by(self, params: ListParams) -> tuple:
        model = self.model
        if params.sort_by:
            if params.sort_by not in SORTABLE_FIELDS:
                raise ValidationFailure(f"cannot sort by '{params.sort_by}'", field="sort_by")
            column = getattr(model, params.sort_by)
            column = column.desc() if params.sort_order == "desc" else column.asc()
            return (column, model.id)

        # Catalog order: display_order first (unset last), then name
        return (model.display_order.is_(None), model.display_order, model.name_fr, model.id)

    def get_by_id(self, db: Session, actor: Actor, entity_id: int, include_deleted: bool = True) -> ScopedEntity:
        """
        Raises:
            NotFound: missing, invisible to the actor, or soft-deleted
            (when include_deleted=False)
        """
        entity = db.query(self.model).filter(self.model.id == entity_id).first()
        if not entity or (entity.is_deleted and not include_deleted):
            raise NotFound(self.spec.label, entity_id)

        scoped = attach_scope(entity)
        scope_resolver.require(actor, Operation.READ, scoped, self.spec.label)
        return scoped

    # ============ WRITE ============

    def create(self, db: Session, actor: Actor, data: Dict[str, Any]) -> ScopedEntity:
        """
        Creates an entry. Operators create global entries; farmers create
        entries local to their farm (always active, code generated when absent).
        """
        scope = scope_resolver.scope_for_create(actor, self.spec.allows_local, self.spec.label)
        values = dict(data)
        values.pop("farm_id", None)
        values.pop("version", None)

        if isinstance(scope, LocalScope):
            values["farm_id"] = scope.farm_id
            values["is_active"] = True
            if not values.get("code"):
                values["code"] = generate_local_code(scope.farm_id)
        elif not values.get("code"):
            raise ValidationFailure("code is required", field="code")

        if values.get("display_order") is None:
            values.pop("display_order", None)

        self._validate_references(db, actor, values)
        validate_unique(db, self.model, "code", values["code"])

        entity = self.model(**values)
        db.add(entity)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning("[CATALOG] %s create violates a constraint: %s", self.spec.label, e.orig)
            raise ValidationFailure("code already exists", field="code")
        db.refresh(entity)

        scoped = attach_scope(entity)
        logger.info(
            "[CATALOG] %s created: %s (id=%s, scope=%s)",
            self.spec.label, entity.code, entity.id, scoped.scope.kind.value
        )
        return scoped

    def _validate_references(self, db: Session, actor: Actor, values: Dict[str, Any]) -> None:
        """Foreign keys must point to a live row the actor can see"""
        for field_name, catalog_name in self.spec.references.items():
            ref_id = values.get(field_name)
            if ref_id is None:
                continue
            target = CATALOGS[catalog_name]
            query = db.query(target.model).filter(
                target.model.id == ref_id,
                target.model.deleted_at.is_(None),
            )
            query = scope_resolver.visibility_filter(query, target.model, actor)
            if not query.first():
                raise NotFound(target.label, ref_id)

    def update(self, db: Session, actor: Actor, entity_id: int, patch: Dict[str, Any], version: int) -> ScopedEntity:
        scoped = self.get_by_id(db, actor, entity_id)
        scope_resolver.require(actor, Operation.UPDATE, scoped, self.spec.label)

        if scoped.entity.is_deleted:
            raise NotFound(self.spec.label, entity_id)

        self._validate_references(db, actor, patch)
        concurrency.versioned_update(db, scoped.entity, patch, version, self.spec.label)

        logger.info("[CATALOG] %s %s updated to v%s", self.spec.label, entity_id, scoped.entity.version)
        return scoped

    def delete(self, db: Session, actor: Actor, entity_id: int) -> ScopedEntity:
        """Soft delete. Idempotent; references from historic data stay valid."""
        scoped = self.get_by_id(db, actor, entity_id)
        scope_resolver.require(actor, Operation.DELETE, scoped, self.spec.label)

        if concurrency.soft_delete(db, scoped.entity):
            logger.info("[CATALOG] %s %s soft-deleted", self.spec.label, entity_id)
        return scoped

    def restore(self, db: Session, actor: Actor, entity_id: int) -> ScopedEntity:
        scoped = self.get_by_id(db, actor, entity_id)
        scope_resolver.require(actor, Operation.RESTORE, scoped, self.spec.label)

        if concurrency.restore(db, scoped.entity):
            logger.info("[CATALOG] %s %s restored", self.spec.label, entity_id)
        return scoped

    # ============ DEPENDENCIES ============

    def count_dependencies(self, db: Session, entity: Any) -> Dict[str, int]:
        """
        Counts the rows referencing the entity.
        Only non-zero counts are returned.
        """
        counts = {}
        for counter in self.spec.dependencies:
            column = getattr(counter.model, counter.column)
            total = db.query(func.count()).select_from(counter.model).filter(
                column == getattr(entity, counter.ref)
            ).scalar()
            if total:
                counts[counter.key] = total
        return counts

    def check_dependencies(self, db: Session, actor: Actor, entity_id: int) -> Dict[str, int]:
        scoped = self.get_by_id(db, actor, entity_id)
        return self.count_dependencies(db, scoped.entity)

    def purge(self, db: Session, actor: Actor, entity_id: int) -> None:
        """
        Hard delete of a soft-deleted entry with no dependencies.

        Raises:
            ValidationFailure: entry not soft-deleted yet
            HasDependencies: rows still reference the entry
        """
        scoped = self.get_by_id(db, actor, entity_id)
        scope_resolver.require(actor, Operation.PURGE, scoped, self.spec.label)

        entity = scoped.entity
        if not entity.is_deleted:
            raise ValidationFailure("delete the entry before purging it", field="deleted_at")

        dependencies = self.count_dependencies(db, entity)
        if dependencies:
            raise HasDependencies(dependencies)

        db.delete(entity)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning("[CATALOG] %s %s purge blocked: %s", self.spec.label, entity_id, e.orig)
            raise HasDependencies({"references": 1})

        logger.info("[CATALOG] %s %s purged", self.spec.label, entity_id)


_services: Dict[str, CatalogService] = {}


def get_catalog_service(name: str) -> CatalogService:
    """One service instance per catalog"""
    if name not in _services:
        _services[name] = CatalogService(CATALOGS[name])
    return _services[name]
