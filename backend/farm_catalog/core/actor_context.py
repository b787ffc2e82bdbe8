from contextvars import ContextVar
from typing import Optional

# Farm of the current request, readable anywhere without passing it around
# (used by the logging filter)
_farm_id_ctx_var: ContextVar[Optional[int]] = ContextVar('farm_id', default=None)


def get_current_farm_id() -> Optional[int]:
    """
    Returns the farm_id of the current request context
    """
    return _farm_id_ctx_var.get()


def set_current_farm_id(farm_id: Optional[int]) -> None:
    """
    Sets the farm_id for the current request context
    """
    _farm_id_ctx_var.set(farm_id)


def clear_current_farm_id() -> None:
    """
    Clears the farm_id from the context
    """
    _farm_id_ctx_var.set(None)
