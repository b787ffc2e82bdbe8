"""
Database Helpers - utility functions for database access
Removes duplication from the routes and services
"""
from typing import Type, TypeVar, Optional, Any
from sqlalchemy.orm import Session
from farm_catalog.core.errors import NotFound, ValidationFailure

T = TypeVar('T')


def get_by_id(
    db: Session,
    model: Type[T],
    entity_id: int,
    raise_not_found: bool = True,
    label: str = None,
    include_deleted: bool = True,
    options: list = None
) -> Optional[T]:
    """
    Fetches an entity by ID.

    Args:
        db: Database session
        model: SQLAlchemy model class
        entity_id: Entity ID
        raise_not_found: If True, raises NotFound when missing
        label: Entity name for the error message (optional)
        include_deleted: If False, soft-deleted rows count as missing
        options: List of loader options (optional)

    Returns:
        The entity or None

    Raises:
        NotFound if raise_not_found=True and the entity does not exist

    Usage:
        breed = get_by_id(db, Breed, breed_id)
        breed = get_by_id(db, Breed, breed_id, include_deleted=False, label="Breed")
    """
    query = db.query(model).filter(model.id == entity_id)

    if not include_deleted and hasattr(model, "deleted_at"):
        query = query.filter(model.deleted_at.is_(None))

    if options:
        for opt in options:
            query = query.options(opt)

    entity = query.first()

    if not entity and raise_not_found:
        raise NotFound(label or model.__name__, entity_id)

    return entity


def validate_fk(
    db: Session,
    model: Type[T],
    fk_id: Any,
    field_name: str = None,
    column: str = "id"
) -> T:
    """
    Checks that a foreign key points to an existing, non-deleted row.

    Args:
        db: Database session
        model: Model of the FK target
        fk_id: Value to check
        field_name: Field name for the error message (optional)
        column: Target column (default: id; ex: "code" for countries)

    Returns:
        The referenced entity

    Raises:
        NotFound if the FK does not exist

    Usage:
        species = validate_fk(db, Species, data["species_id"], "Species")
        country = validate_fk(db, Country, "DZ", "Country", column="code")
    """
    query = db.query(model).filter(getattr(model, column) == fk_id)
    if hasattr(model, "deleted_at"):
        query = query.filter(model.deleted_at.is_(None))

    entity = query.first()

    if not entity:
        raise NotFound(field_name or model.__name__, fk_id)

    return entity


def validate_unique(
    db: Session,
    model: Type[T],
    field_name: str,
    field_value: Any,
    exclude_id: int = None,
    display_name: str = None
) -> None:
    """
    Checks that a field value is unique within its table.
    The database constraint stays the final authority; this gives the caller
    a field-level message before the insert.

    Raises:
        ValidationFailure if the value already exists

    Usage:
        validate_unique(db, Breed, "code", "OULED_DJELLAL")
        validate_unique(db, Breed, "code", code, exclude_id=breed.id)
    """
    field = getattr(model, field_name)
    query = db.query(model).filter(field == field_value)

    if exclude_id:
        query = query.filter(model.id != exclude_id)

    if query.first():
        name = display_name or field_name
        raise ValidationFailure(f"{name} already exists", field=field_name)
