"""
Farm routes
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from farm_catalog.api.deps import get_db, get_current_actor, require_operator
from farm_catalog.api.utils import get_by_id, paginate_query, build_meta, apply_search_filter
from farm_catalog.config import settings
from farm_catalog.core.errors import NotFound
from farm_catalog.models import Farm
from farm_catalog.schemas import FarmCreate, FarmResponse, PaginatedResponse
from farm_catalog.services.scope import Actor

router = APIRouter()


@router.get("/", response_model=PaginatedResponse[FarmResponse])
def list_farms(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search: str = Query(None),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """List farms (a farmer only sees its own)"""
    query = db.query(Farm)
    if not actor.is_operator:
        query = query.filter(Farm.id == actor.farm_id)
    query = apply_search_filter(query, search, Farm.name)

    items, total = paginate_query(query, page, limit, Farm.name)
    return {"data": items, "meta": build_meta(total, page, limit)}


@router.post("/", response_model=FarmResponse, status_code=201)
def create_farm(
    farm: FarmCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_operator)
):
    """Create a farm"""
    db_farm = Farm(**farm.model_dump())
    db.add(db_farm)
    db.commit()
    db.refresh(db_farm)
    return db_farm


@router.get("/{farm_id}", response_model=FarmResponse)
def get_farm(
    farm_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """Get one farm"""
    if not actor.is_operator and actor.farm_id != farm_id:
        raise NotFound("Farm", farm_id)
    return get_by_id(db, Farm, farm_id)
