"""
Junction routes - /breed-countries and /campaign-countries
"""
from typing import Dict, Optional, Tuple, Type

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from farm_catalog.api.deps import get_db, get_current_actor, require_operator, get_translator, get_notifier
from farm_catalog.api.utils import build_meta
from farm_catalog.config import settings
from farm_catalog.core.i18n import Translator
from farm_catalog.core.notifier import CollectingNotifier
from farm_catalog.schemas import (
    PaginatedResponse, MutationResponse, ToggleActiveRequest,
    BreedCountryLink, BreedCountryUnlink, BreedCountryResponse,
    CampaignCountryLink, CampaignCountryUnlink, CampaignCountryResponse,
)
from farm_catalog.services.catalog_registry import JUNCTIONS, JunctionSpec
from farm_catalog.services.junction_service import get_junction_service
from farm_catalog.services.scope import Actor

# (link, unlink, response) schemas of each junction
JUNCTION_SCHEMAS: Dict[str, Tuple[Type[BaseModel], Type[BaseModel], Type[BaseModel]]] = {
    "breed-countries": (BreedCountryLink, BreedCountryUnlink, BreedCountryResponse),
    "campaign-countries": (CampaignCountryLink, CampaignCountryUnlink, CampaignCountryResponse),
}


def build_junction_router(spec: JunctionSpec) -> APIRouter:
    link_schema, unlink_schema, response_schema = JUNCTION_SCHEMAS[spec.name]
    service = get_junction_service(spec.name)
    left_key = spec.model.left_key
    right_key = spec.model.right_key
    router = APIRouter()

    @router.get("/", response_model=PaginatedResponse[response_schema])
    def list_links(
        left: Optional[int] = Query(None, alias=left_key),
        right: Optional[str] = Query(None, alias=right_key),
        is_active: Optional[bool] = Query(None),
        page: int = Query(1, ge=1),
        limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
        db: Session = Depends(get_db),
        actor: Actor = Depends(get_current_actor)
    ):
        """List the pairs (filters on either side)"""
        if right is not None:
            right = right.upper()
        items, total = service.list(db, left, right, is_active, page, limit)
        return {"data": items, "meta": build_meta(total, page, limit)}

    @router.get("/{link_id}", response_model=response_schema)
    def get_link(
        link_id: int,
        db: Session = Depends(get_db),
        actor: Actor = Depends(get_current_actor)
    ):
        """Get one pair"""
        return service.get_by_id(db, link_id)

    @router.post("/link", response_model=MutationResponse[response_schema], status_code=201)
    def link(
        payload: link_schema,
        db: Session = Depends(get_db),
        actor: Actor = Depends(require_operator),
        t: Translator = Depends(get_translator),
        notifier: CollectingNotifier = Depends(get_notifier)
    ):
        """Create a pair; 409 if it already exists"""
        row = service.link(db, getattr(payload, left_key), getattr(payload, right_key), payload.is_active)
        notifier.success(t("common.success"), t("junction.linked"))
        return {"data": row, "notices": notifier.as_list()}

    @router.post("/unlink", response_model=MutationResponse[response_schema])
    def unlink(
        payload: unlink_schema,
        db: Session = Depends(get_db),
        actor: Actor = Depends(require_operator),
        t: Translator = Depends(get_translator),
        notifier: CollectingNotifier = Depends(get_notifier)
    ):
        """Delete a pair; 409 if farms still depend on it"""
        service.unlink(db, getattr(payload, left_key), getattr(payload, right_key))
        notifier.success(t("common.success"), t("junction.unlinked"))
        return {"data": None, "notices": notifier.as_list()}

    @router.patch("/{link_id}", response_model=MutationResponse[response_schema])
    def toggle_active(
        link_id: int,
        payload: ToggleActiveRequest,
        db: Session = Depends(get_db),
        actor: Actor = Depends(require_operator),
        t: Translator = Depends(get_translator),
        notifier: CollectingNotifier = Depends(get_notifier)
    ):
        """Activate / deactivate a pair"""
        row = service.toggle_active(db, link_id, payload.is_active)
        notifier.success(t("common.success"), t("junction.activated" if row.is_active else "junction.deactivated"))
        return {"data": row, "notices": notifier.as_list()}

    return router


def build_junction_routers() -> Dict[str, APIRouter]:
    return {name: build_junction_router(spec) for name, spec in JUNCTIONS.items()}
