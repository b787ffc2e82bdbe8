"""
Catalog routes - one router per catalog, built from the registry
"""
from typing import Dict, Optional, Tuple, Type

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session

from farm_catalog.api.deps import get_db, get_current_actor, get_translator, get_notifier
from farm_catalog.api.utils import build_meta
from farm_catalog.config import settings
from farm_catalog.core.i18n import Translator
from farm_catalog.core.notifier import CollectingNotifier
from farm_catalog.schemas import (
    PaginatedResponse, MutationResponse,
    SpeciesCreate, SpeciesUpdate, SpeciesResponse,
    BreedCreate, BreedUpdate, BreedResponse,
    CountryCreate, CountryUpdate, CountryResponse,
    VaccineCreate, VaccineUpdate, VaccineResponse,
    VeterinarianCreate, VeterinarianUpdate, VeterinarianResponse,
    ProductCreate, ProductUpdate, ProductResponse,
    CampaignCreate, CampaignUpdate, CampaignResponse,
)
from farm_catalog.services.catalog_registry import CATALOGS, CatalogSpec
from farm_catalog.services.catalog_service import ListParams, get_catalog_service
from farm_catalog.services.scope import Actor, ScopedEntity, ScopeView

# (create, update, response) schemas of each catalog
CATALOG_SCHEMAS: Dict[str, Tuple[Type[BaseModel], Type[BaseModel], Type[BaseModel]]] = {
    "species": (SpeciesCreate, SpeciesUpdate, SpeciesResponse),
    "breeds": (BreedCreate, BreedUpdate, BreedResponse),
    "countries": (CountryCreate, CountryUpdate, CountryResponse),
    "vaccines": (VaccineCreate, VaccineUpdate, VaccineResponse),
    "veterinarians": (VeterinarianCreate, VeterinarianUpdate, VeterinarianResponse),
    "products": (ProductCreate, ProductUpdate, ProductResponse),
    "campaigns": (CampaignCreate, CampaignUpdate, CampaignResponse),
}


def to_response(schema: Type[BaseModel], scoped: ScopedEntity) -> BaseModel:
    """Serializes a row with the scope attached at fetch time"""
    return schema.model_validate(scoped.entity).model_copy(update={"scope": scoped.scope.kind.value})


def build_catalog_router(spec: CatalogSpec) -> APIRouter:
    """
    CRUD router of one catalog:
    list, get, create, update (versioned), soft delete, restore,
    dependencies, purge
    """
    create_schema, update_schema, response_schema = CATALOG_SCHEMAS[spec.name]
    service = get_catalog_service(spec.name)
    router = APIRouter()

    # ============ READ ============

    @router.get("/", response_model=PaginatedResponse[response_schema])
    def list_entries(
        request: Request,
        page: int = Query(1, ge=1, description="Page"),
        limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Items per page"),
        search: Optional[str] = Query(None, description="Search by code, names..."),
        is_active: Optional[bool] = Query(None),
        include_deleted: bool = Query(False),
        sort_by: Optional[str] = Query(None),
        sort_order: str = Query("asc", pattern="^(asc|desc)$"),
        view: ScopeView = Query(ScopeView.ALL, description="all = global + my local, global_only"),
        db: Session = Depends(get_db),
        actor: Actor = Depends(get_current_actor)
    ):
        """List entries with pagination and filters"""
        filters = {name: request.query_params.get(name) for name in spec.filters}

        params = ListParams(
            page=page,
            limit=limit,
            search=search,
            is_active=is_active,
            include_deleted=include_deleted,
            sort_by=sort_by,
            sort_order=sort_order,
            view=view,
            filters=filters,
        )
        items, total = service.get_all(db, actor, params)
        return {
            "data": [to_response(response_schema, item) for item in items],
            "meta": build_meta(total, page, limit),
        }

    @router.get("/{entity_id}", response_model=response_schema)
    def get_entry(
        entity_id: int,
        db: Session = Depends(get_db),
        actor: Actor = Depends(get_current_actor)
    ):
        """Get one entry (soft-deleted entries included)"""
        return to_response(response_schema, service.get_by_id(db, actor, entity_id))

    @router.get("/{entity_id}/dependencies")
    def get_dependencies(
        entity_id: int,
        db: Session = Depends(get_db),
        actor: Actor = Depends(get_current_actor)
    ):
        """Count the rows referencing the entry"""
        dependencies = service.check_dependencies(db, actor, entity_id)
        return {"entity_id": entity_id, "dependencies": dependencies, "total": sum(dependencies.values())}

    # ============ WRITE ============

    @router.post("/", response_model=MutationResponse[response_schema], status_code=201)
    def create_entry(
        payload: create_schema,
        db: Session = Depends(get_db),
        actor: Actor = Depends(get_current_actor),
        t: Translator = Depends(get_translator),
        notifier: CollectingNotifier = Depends(get_notifier)
    ):
        """Create an entry (global for operators, local for farmers)"""
        scoped = service.create(db, actor, payload.model_dump())
        notifier.success(t("common.success"), t("catalog.created", {"entity": spec.label}))
        return {"data": to_response(response_schema, scoped), "notices": notifier.as_list()}

    @router.put("/{entity_id}", response_model=MutationResponse[response_schema])
    def update_entry(
        entity_id: int,
        payload: update_schema,
        db: Session = Depends(get_db),
        actor: Actor = Depends(get_current_actor),
        t: Translator = Depends(get_translator),
        notifier: CollectingNotifier = Depends(get_notifier)
    ):
        """Update an entry; 409 if `version` is stale"""
        patch = payload.model_dump(exclude_unset=True, exclude={"version"})
        scoped = service.update(db, actor, entity_id, patch, payload.version)
        notifier.success(t("common.success"), t("catalog.updated", {"entity": spec.label}))
        return {"data": to_response(response_schema, scoped), "notices": notifier.as_list()}

    @router.delete("/{entity_id}", response_model=MutationResponse[response_schema])
    def delete_entry(
        entity_id: int,
        db: Session = Depends(get_db),
        actor: Actor = Depends(get_current_actor),
        t: Translator = Depends(get_translator),
        notifier: CollectingNotifier = Depends(get_notifier)
    ):
        """Soft delete (restorable)"""
        scoped = service.delete(db, actor, entity_id)
        notifier.success(t("common.success"), t("catalog.deleted", {"entity": spec.label}))
        return {"data": to_response(response_schema, scoped), "notices": notifier.as_list()}

    @router.post("/{entity_id}/restore", response_model=MutationResponse[response_schema])
    def restore_entry(
        entity_id: int,
        db: Session = Depends(get_db),
        actor: Actor = Depends(get_current_actor),
        t: Translator = Depends(get_translator),
        notifier: CollectingNotifier = Depends(get_notifier)
    ):
        """Restore a soft-deleted entry"""
        scoped = service.restore(db, actor, entity_id)
        notifier.success(t("common.success"), t("catalog.restored", {"entity": spec.label}))
        return {"data": to_response(response_schema, scoped), "notices": notifier.as_list()}

    @router.delete("/{entity_id}/purge", response_model=MutationResponse[response_schema])
    def purge_entry(
        entity_id: int,
        db: Session = Depends(get_db),
        actor: Actor = Depends(get_current_actor),
        t: Translator = Depends(get_translator),
        notifier: CollectingNotifier = Depends(get_notifier)
    ):
        """Hard delete of a soft-deleted entry without dependencies"""
        service.purge(db, actor, entity_id)
        notifier.success(t("common.success"), t("catalog.purged", {"entity": spec.label}))
        return {"data": None, "notices": notifier.as_list()}

    return router


def build_catalog_routers() -> Dict[str, APIRouter]:
    return {name: build_catalog_router(spec) for name, spec in CATALOGS.items()}
