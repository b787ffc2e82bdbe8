"""
Preference Resolution Engine

Pure functions: given the global entries of a catalog, the preference links
of one farm and that farm's local entries, compute

- selected: what the farm works with (linked globals + its local entries)
- available: the global entries it could still add

No database access here; preference_service loads the rows and persists.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from farm_catalog.services.scope import GlobalScope, Scope, attach_scope

DEFAULT_SEARCH_FIELDS = ("code", "name_fr", "name_en", "name_ar", "description")


@dataclass(frozen=True)
class ResolvedItem:
    entity: Any
    scope: Scope
    link: Optional[Any] = None

    @property
    def id(self) -> int:
        return self.entity.id

    @property
    def is_local(self) -> bool:
        return not isinstance(self.scope, GlobalScope)

    @property
    def is_favorite(self) -> bool:
        return bool(self.link and self.link.is_favorite)

    @property
    def usage_count(self) -> int:
        return self.link.usage_count if self.link else 0

    @property
    def display_order(self) -> int:
        if self.link is not None:
            return self.link.display_order
        return self.entity.display_order or 0

    def sort_key(self) -> Tuple[int, datetime, int]:
        source = self.link if self.link is not None else self.entity
        return (self.display_order, source.created_at or datetime.min, self.id)


@dataclass(frozen=True)
class Resolution:
    selected: Tuple[ResolvedItem, ...]
    available: Tuple[ResolvedItem, ...]
    available_total: int  # before the search filter

    @property
    def selected_ids(self) -> List[int]:
        return [item.id for item in self.selected]

    @property
    def available_ids(self) -> List[int]:
        return [item.id for item in self.available]


def matches(entity: Any, search: Optional[str], fields: Sequence[str] = DEFAULT_SEARCH_FIELDS) -> bool:
    """Case-insensitive substring match over the given attributes"""
    if not search or not search.strip():
        return True
    term = search.strip().lower()
    for name in fields:
        value = getattr(entity, name, None)
        if value is not None and term in str(value).lower():
            return True
    return False


def _usable(entity: Any, active_only: bool) -> bool:
    if entity.deleted_at is not None:
        return False
    return entity.is_active or not active_only


def _link_usable(link: Optional[Any], active_only: bool) -> bool:
    return link is None or link.is_active or not active_only


def resolve(
    global_entities: Iterable[Any],
    links: Iterable[Any],
    local_entities: Iterable[Any],
    search: Optional[str] = None,
    search_fields: Sequence[str] = DEFAULT_SEARCH_FIELDS,
    active_only: bool = False,
) -> Resolution:
    """
    Computes the selected / available views of one farm.

    Args:
        global_entities: Global entries of the catalog, in catalog order
        links: Preference links of the farm (globals and lazily created local ones)
        local_entities: Local entries owned by the farm
        search: Filters `available` only
        search_fields: Attributes the search looks at
        active_only: Hide inactive entries and deactivated links from both views

    Returns:
        Resolution where selected and available never share an id
    """
    links_by_entity = {link.catalog_entity_id: link for link in links}

    globals_ = []
    for entity in global_entities:
        scoped = attach_scope(entity)
        if isinstance(scoped.scope, GlobalScope) and _usable(entity, active_only):
            globals_.append(scoped)

    selected = [
        ResolvedItem(s.entity, s.scope, links_by_entity[s.id])
        for s in globals_
        if s.id in links_by_entity
    ]
    for entity in local_entities:
        scoped = attach_scope(entity)
        if scoped.is_local and _usable(entity, active_only):
            selected.append(ResolvedItem(entity, scoped.scope, links_by_entity.get(entity.id)))

    # A deactivated link still holds its entry out of `available`
    selected = [item for item in selected if _link_usable(item.link, active_only)]
    selected.sort(key=lambda item: item.sort_key())

    available = [ResolvedItem(s.entity, s.scope) for s in globals_ if s.id not in links_by_entity]
    available_total = len(available)
    available = [item for item in available if matches(item.entity, search, search_fields)]

    return Resolution(tuple(selected), tuple(available), available_total)
