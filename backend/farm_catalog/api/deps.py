from fastapi import Depends, Request, Path
from sqlalchemy.orm import Session

from farm_catalog.database import SessionLocal
from farm_catalog.core.errors import NotFound, ScopeViolation
from farm_catalog.core.i18n import Translator
from farm_catalog.core.notifier import CollectingNotifier
from farm_catalog.models import Farm
from farm_catalog.services.scope import Actor


def get_db():
    """
    Dependency that yields a database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_actor(request: Request) -> Actor:
    """
    Actor of the request (set by ActorMiddleware)
    """
    actor = getattr(request.state, "actor", None)
    if actor is None:
        raise ScopeViolation("Actor not identified")
    return actor


def require_operator(actor: Actor = Depends(get_current_actor)) -> Actor:
    """
    Only platform operators may manage global data
    """
    if not actor.is_operator:
        raise ScopeViolation("Operator access required")
    return actor


def get_translator(request: Request) -> Translator:
    """
    Translator for the request locale (Accept-Language)
    """
    return Translator(request.headers.get("Accept-Language"))


def get_notifier() -> CollectingNotifier:
    """
    Notices of the request, returned in the response body
    """
    return CollectingNotifier()


def get_current_farm(
    farm_id: int = Path(..., description="Farm ID"),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
) -> Farm:
    """
    Farm of the URL; a farmer can only act on its own farm
    """
    if actor.farm_id != farm_id:
        raise ScopeViolation(f"Farm {farm_id} does not belong to the current actor")

    farm = db.query(Farm).filter_by(id=farm_id, is_active=True).first()
    if not farm:
        raise NotFound("Farm", farm_id)
    return farm
