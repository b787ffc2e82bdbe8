"""
Error taxonomy of the catalog core

Every failure is scoped to a single user operation and leaves prior state
intact. Services raise these errors and never swallow them; the HTTP layer
turns them into responses (see main.py) with a translated message.
"""
from typing import Any, Dict, Optional


def format_dependencies(dependencies: Dict[str, int]) -> str:
    """
    Formats dependency counts for display.

    Usage:
        format_dependencies({"breed_preferences": 12})
        # -> "12 breed preferences"
    """
    parts = []
    for key, count in dependencies.items():
        parts.append(f"{count} {key.replace('_', ' ')}")
    return ", ".join(parts)


class CatalogError(Exception):
    """Base class of all catalog errors"""

    status_code = 400
    error = "Bad Request"
    message_key = "errors.validation"

    def __init__(self, detail: str = "", **params: Any):
        super().__init__(detail or self.message_key)
        self.detail = detail
        self.params = params

    def message_params(self) -> Dict[str, Any]:
        return {"detail": self.detail, **self.params}

    def extra(self) -> Dict[str, Any]:
        """Additional fields for the error payload"""
        return {}


class ValidationFailure(CatalogError):
    """Malformed input caught before it reaches the database"""

    status_code = 400
    error = "Bad Request"
    message_key = "errors.validation"

    def __init__(self, detail: str, field: Optional[str] = None, message_key: Optional[str] = None, **params: Any):
        super().__init__(detail, **params)
        self.field = field
        if message_key:
            self.message_key = message_key

    def extra(self) -> Dict[str, Any]:
        return {"field": self.field} if self.field else {}


class NotFound(CatalogError):
    """Stale id referenced after an external deletion"""

    status_code = 404
    error = "Not Found"
    message_key = "errors.not_found"

    def __init__(self, entity: str, entity_id: Any = None):
        super().__init__(f"{entity} {entity_id} not found", entity=entity)
        self.entity = entity
        self.entity_id = entity_id


class ScopeViolation(CatalogError):
    """The actor is not allowed to perform the operation on this scope"""

    status_code = 403
    error = "Forbidden"
    message_key = "errors.scope_violation"


class VersionConflict(CatalogError):
    """A write on a shared entity lost the race; re-fetch and retry"""

    status_code = 409
    error = "Conflict"
    message_key = "errors.version_conflict"

    def __init__(self, entity: str, entity_id: Any, expected: int, current: Optional[int]):
        super().__init__(
            f"{entity} {entity_id}: version {expected} does not match current version {current}",
            expected=expected,
            current=current,
        )
        self.entity = entity
        self.entity_id = entity_id
        self.expected = expected
        self.current = current

    def extra(self) -> Dict[str, Any]:
        return {"currentVersion": self.current}


class DuplicateLink(CatalogError):
    """The (left, right) pair already exists"""

    status_code = 409
    error = "Conflict"
    message_key = "errors.duplicate_link"


class HasDependencies(CatalogError):
    """Hard delete refused because dependent records exist"""

    status_code = 409
    error = "Conflict"
    message_key = "errors.has_dependencies"

    def __init__(self, dependencies: Dict[str, int], detail: str = ""):
        super().__init__(
            detail or f"Has dependencies: {format_dependencies(dependencies)}",
            dependencies=format_dependencies(dependencies),
        )
        self.dependencies = dependencies

    def extra(self) -> Dict[str, Any]:
        return {"dependencies": self.dependencies}


class TransportFailure(CatalogError):
    """Database or network failure; the operation is treated as not applied"""

    status_code = 503
    error = "Service Unavailable"
    message_key = "errors.transport"
