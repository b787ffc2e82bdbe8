"""
Optimistic Concurrency Guard

Every write on a shared (versioned) row is a compare-and-swap on the version
column:

    UPDATE ... SET ..., version = version + 1
    WHERE id = :id AND version = :expected AND deleted_at IS NULL

Zero rows affected means somebody else won the race (or the row was deleted):
the transaction is rolled back and VersionConflict carries the current
version so the client can re-fetch and retry.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from farm_catalog.core.errors import NotFound, ValidationFailure, VersionConflict

logger = logging.getLogger(__name__)

# Columns a patch never writes
PROTECTED_FIELDS = {"id", "version", "farm_id", "created_at", "updated_at", "deleted_at"}


def clean_patch(model, patch: Dict[str, Any]) -> Dict[str, Any]:
    """
    Keeps the writable columns of a patch.

    Raises:
        ValidationFailure when the patch tries to move the row to another scope
    """
    if "farm_id" in patch:
        raise ValidationFailure("scope cannot change after creation", field="farm_id")

    columns = set(model.__table__.columns.keys())
    values = {}
    for key, value in patch.items():
        if key in PROTECTED_FIELDS:
            continue
        if key not in columns:
            raise ValidationFailure(f"unknown field '{key}'", field=key)
        values[key] = value
    return values


def versioned_update(db: Session, entity: Any, patch: Dict[str, Any], expected_version: int, label: str = None) -> Any:
    """
    Applies a patch if the row still carries expected_version.

    Args:
        db: Database session
        entity: Loaded row (the id and the model are taken from it)
        patch: Fields to change
        expected_version: Version the client read
        label: Entity name for error messages

    Returns:
        The refreshed row (version + 1)

    Raises:
        NotFound: row soft-deleted
        VersionConflict: version mismatch, nothing written
        ValidationFailure: unique constraint violated (ex: code taken)
    """
    model = type(entity)
    label = label or model.__name__
    entity_id = entity.id

    if entity.is_deleted:
        raise NotFound(label, entity_id)

    values = clean_patch(model, patch)
    values["version"] = model.version + 1
    values["updated_at"] = datetime.utcnow()

    stmt = (
        update(model)
        .where(model.id == entity_id)
        .where(model.version == expected_version)
        .where(model.deleted_at.is_(None))
        .values(**values)
        .execution_options(synchronize_session=False)
    )

    try:
        result = db.execute(stmt)
    except IntegrityError as e:
        db.rollback()
        logger.warning("[CONCURRENCY] %s %s update violates a constraint: %s", label, entity_id, e.orig)
        raise ValidationFailure("value already used by another entry", field="code")

    if result.rowcount != 1:
        db.rollback()
        current = db.query(model.version).filter(model.id == entity_id).scalar()
        logger.info(
            "[CONCURRENCY] Conflict on %s %s: expected v%s, current v%s",
            label, entity_id, expected_version, current
        )
        raise VersionConflict(label, entity_id, expected_version, current)

    db.commit()
    db.refresh(entity)
    return entity

def _mark_deleted(db: Session, entity: Any, deleted_at: Optional[datetime]) -> bool:
    """
    Sets deleted_at and bumps the version in a single UPDATE, guarded on the
    current deletion state stored in the database (not the loaded copy).
    """
    model = type(entity)
    if deleted_at is None:
        guard = model.deleted_at.isnot(None)
    else:
        guard = model.deleted_at.is_(None)

    stmt = (
        update(model)
        .where(model.id == entity.id)
        .where(guard)
        .values(deleted_at=deleted_at, version=model.version + 1, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()
    db.refresh(entity)
    return result.rowcount == 1


def soft_delete(db: Session, entity: Any) -> bool:
    """
    Marks the row as deleted. Idempotent.

    Returns:
        True if the row changed, False if it was already deleted
    """
    changed = _mark_deleted(db, entity, datetime.utcnow())
    if changed:
        logger.info("[CONCURRENCY] %s %s soft-deleted (v%s)", type(entity).__name__, entity.id, entity.version)
    return changed


def restore(db: Session, entity: Any) -> bool:
    """
    Clears the deletion mark. Idempotent.

    Returns:
        True if the row changed, False if it was not deleted
    """
    changed = _mark_deleted(db, entity, None)
    if changed:
        logger.info("[CONCURRENCY] %s %s restored (v%s)", type(entity).__name__, entity.id, entity.version)
    return changed
