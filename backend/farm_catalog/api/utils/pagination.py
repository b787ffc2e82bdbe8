"""
Pagination Helpers - pagination and filters
"""
import math
from typing import TypeVar, Any, Optional, Tuple, List
from sqlalchemy.orm import Query
from sqlalchemy import or_

T = TypeVar('T')


def paginate_query(
    query: Query,
    page: int = 1,
    limit: int = 25,
    order_by: Any = None
) -> Tuple[List[T], int]:
    """
    Paginates a query and returns items + total.

    Args:
        query: SQLAlchemy query
        page: Page number (1-indexed)
        limit: Page size
        order_by: Column(s) to sort by - a single one or a tuple

    Returns:
        Tuple (items, total)

    Usage:
        items, total = paginate_query(query, page=1, limit=25, order_by=Breed.name_fr)
        items, total = paginate_query(query, 1, 25, (Breed.display_order, Breed.name_fr))
    """
    total = query.count()

    if order_by is not None:
        if isinstance(order_by, tuple):
            query = query.order_by(*order_by)
        else:
            query = query.order_by(order_by)

    items = query.offset((page - 1) * limit).limit(limit).all()

    return items, total


def build_meta(total: int, page: int, limit: int) -> dict:
    """
    Pagination metadata of a list response ({data, meta}).
    """
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }


def apply_search_filter(
    query: Query,
    search_term: Optional[str],
    *fields
) -> Query:
    """
    Applies a case-insensitive ILIKE search over several fields.

    Usage:
        query = apply_search_filter(query, search, Breed.code, Breed.name_fr, Breed.name_en)
    """
    if not search_term or not search_term.strip() or not fields:
        return query

    term = search_term.strip()
    conditions = [field.ilike(f"%{term}%") for field in fields]
    return query.filter(or_(*conditions))
