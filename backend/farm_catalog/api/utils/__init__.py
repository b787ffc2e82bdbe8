# API Utilities - DRY Helpers
from farm_catalog.api.utils.db_helpers import get_by_id, validate_fk, validate_unique
from farm_catalog.api.utils.pagination import paginate_query, build_meta, apply_search_filter

__all__ = [
    # db_helpers
    "get_by_id",
    "validate_fk",
    "validate_unique",
    # pagination
    "paginate_query",
    "build_meta",
    "apply_search_filter",
]
