"""
Farm preference routes

/farms/{farm_id}/preferences/{catalog} for every preference-enabled catalog
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from farm_catalog.api.deps import get_db, get_current_actor, get_current_farm, get_translator, get_notifier
from farm_catalog.api.routes.catalog import CATALOG_SCHEMAS, to_response
from farm_catalog.core.i18n import Translator
from farm_catalog.core.notifier import CollectingNotifier
from farm_catalog.models import Farm
from farm_catalog.schemas import (
    SelectRequest, OrderRequest, BatchRequest, LinkOut, ResolutionResponse, UsageResponse,
    PickerResponse, MutationResponse, ToggleActiveRequest,
)
from farm_catalog.services.catalog_registry import CATALOGS, CatalogSpec
from farm_catalog.services.preference_service import PreferenceService
from farm_catalog.services.ranking import SelectionItem, rank_items
from farm_catalog.services.resolution import Resolution, ResolvedItem
from farm_catalog.services.scope import Actor

router = APIRouter()


def item_to_dict(item: ResolvedItem, locale: str) -> dict:
    entity = item.entity
    return {
        "id": entity.id,
        "code": entity.code,
        "name": entity.name_for(locale),
        "description": entity.description,
        "scope": item.scope.kind.value,
        "is_active": entity.is_active,
        "is_favorite": item.is_favorite,
        "usage_count": item.usage_count,
        "display_order": item.display_order,
        "link": LinkOut.model_validate(item.link) if item.link is not None else None,
    }


def resolution_to_response(resolution: Resolution, t: Translator, notifier: CollectingNotifier = None) -> dict:
    return {
        "selected": [item_to_dict(item, t.locale) for item in resolution.selected],
        "available": [item_to_dict(item, t.locale) for item in resolution.available],
        "total_selected": len(resolution.selected),
        "total_available": resolution.available_total,
        "notices": notifier.as_list() if notifier else [],
    }


def to_selection_items(items: List[ResolvedItem], locale: str) -> List[SelectionItem]:
    return [
        SelectionItem(
            id=item.id,
            name=item.entity.name_for(locale),
            description=item.entity.description,
            is_local=item.is_local,
            is_favorite=item.is_favorite,
            usage_count=item.usage_count,
        )
        for item in items
    ]


def add_preference_routes(spec: CatalogSpec) -> None:
    create_schema, _, response_schema = CATALOG_SCHEMAS[spec.name]
    base = f"/{{farm_id}}/preferences/{spec.name}"
    tag = f"preferences:{spec.name}"

    def service_for(t: Translator, notifier: CollectingNotifier) -> PreferenceService:
        return PreferenceService(spec, notifier, t)

    @router.get(base, response_model=ResolutionResponse, tags=[tag])
    def get_preferences(
        search: Optional[str] = Query(None, description="Filters the available entries"),
        include_inactive: bool = Query(False, description="Also list inactive entries and deactivated preferences"),
        farm: Farm = Depends(get_current_farm),
        db: Session = Depends(get_db),
        t: Translator = Depends(get_translator),
        notifier: CollectingNotifier = Depends(get_notifier)
    ):
        """Selected and available entries of the farm"""
        resolution = service_for(t, notifier).resolve_for_farm(db, farm.id, search, active_only=not include_inactive)
        return resolution_to_response(resolution, t)

    @router.post(f"{base}/select", response_model=ResolutionResponse, tags=[tag])
    def select_entry(
        payload: SelectRequest,
        farm: Farm = Depends(get_current_farm),
        db: Session = Depends(get_db),
        t: Translator = Depends(get_translator),
        notifier: CollectingNotifier = Depends(get_notifier)
    ):
        """Add a global entry to the selection (idempotent)"""
        resolution = service_for(t, notifier).select(db, farm.id, payload.entity_id)
        return resolution_to_response(resolution, t, notifier)

    @router.post(f"{base}/local", response_model=MutationResponse[response_schema], status_code=201, tags=[tag])
    def create_local_entry(
        payload: create_schema,
        farm: Farm = Depends(get_current_farm),
        actor: Actor = Depends(get_current_actor),
        db: Session = Depends(get_db),
        t: Translator = Depends(get_translator),
        notifier: CollectingNotifier = Depends(get_notifier)
    ):
        """Create an entry private to the farm"""
        scoped, _ = service_for(t, notifier).create_local(db, actor, payload.model_dump())
        return {"data": to_response(response_schema, scoped), "notices": notifier.as_list()}

    @router.put(f"{base}/order", response_model=ResolutionResponse, tags=[tag])
    def reorder_entries(
        payload: OrderRequest,
        farm: Farm = Depends(get_current_farm),
        db: Session = Depends(get_db),
        t: Translator = Depends(get_translator),
        notifier: CollectingNotifier = Depends(get_notifier)
    ):
        """Rewrite the display order of the selection"""
        resolution = service_for(t, notifier).reorder(db, farm.id, payload.entity_ids)
        return resolution_to_response(resolution, t, notifier)

    @router.put(f"{base}/batch", response_model=ResolutionResponse, tags=[tag])
    def save_batch(
        payload: BatchRequest,
        farm: Farm = Depends(get_current_farm),
        db: Session = Depends(get_db),
        t: Translator = Depends(get_translator),
        notifier: CollectingNotifier = Depends(get_notifier)
    ):
        """Replace the selected global entries"""
        resolution = service_for(t, notifier).save_batch(db, farm.id, payload.entity_ids)
        return resolution_to_response(resolution, t, notifier)

    @router.get(f"{base}/picker", response_model=PickerResponse, tags=[tag])
    def get_picker(
        search: Optional[str] = Query(None),
        farm: Farm = Depends(get_current_farm),
        db: Session = Depends(get_db),
        t: Translator = Depends(get_translator),
        notifier: CollectingNotifier = Depends(get_notifier)
    ):
        """Selected entries ranked into favorites, recent and others"""
        resolution = service_for(t, notifier).resolve_for_farm(db, farm.id, active_only=True)
        groups = rank_items(to_selection_items(resolution.selected, t.locale), search)
        return {
            "groups": [{"name": name, "items": list(items)} for name, items in groups.groups()],
            "total": len(groups.ordered()),
        }

    @router.delete(f"{base}/{{entity_id}}", response_model=ResolutionResponse, tags=[tag])
    def deselect_entry(
        entity_id: int,
        farm: Farm = Depends(get_current_farm),
        db: Session = Depends(get_db),
        t: Translator = Depends(get_translator),
        notifier: CollectingNotifier = Depends(get_notifier)
    ):
        """Remove from the selection (local entries are soft-deleted)"""
        resolution = service_for(t, notifier).deselect(db, farm.id, entity_id)
        return resolution_to_response(resolution, t, notifier)

    @router.post(f"{base}/{{entity_id}}/favorite", response_model=ResolutionResponse, tags=[tag])
    def toggle_favorite(
        entity_id: int,
        farm: Farm = Depends(get_current_farm),
        db: Session = Depends(get_db),
        t: Translator = Depends(get_translator),
        notifier: CollectingNotifier = Depends(get_notifier)
    ):
        """Flip the favorite flag"""
        resolution = service_for(t, notifier).toggle_favorite(db, farm.id, entity_id)
        return resolution_to_response(resolution, t, notifier)

    @router.patch(f"{base}/{{entity_id}}", response_model=ResolutionResponse, tags=[tag])
    def set_preference_active(
        entity_id: int,
        payload: ToggleActiveRequest,
        farm: Farm = Depends(get_current_farm),
        db: Session = Depends(get_db),
        t: Translator = Depends(get_translator),
        notifier: CollectingNotifier = Depends(get_notifier)
    ):
        """Activate or deactivate a preference without removing it"""
        resolution = service_for(t, notifier).set_active(db, farm.id, entity_id, payload.is_active)
        return resolution_to_response(resolution, t, notifier)

    @router.post(f"{base}/{{entity_id}}/usage", response_model=UsageResponse, tags=[tag])
    def record_usage(
        entity_id: int,
        farm: Farm = Depends(get_current_farm),
        db: Session = Depends(get_db),
        t: Translator = Depends(get_translator),
        notifier: CollectingNotifier = Depends(get_notifier)
    ):
        """Increment the usage counter of an entry"""
        usage_count = service_for(t, notifier).record_usage(db, farm.id, entity_id)
        return {"entity_id": entity_id, "usage_count": usage_count}


for _spec in CATALOGS.values():
    if _spec.has_preferences:
        add_preference_routes(_spec)
