"""
Ranking of the selection widget

rank_items partitions the selectable items of a picker into
favorites, recent (most used) and others.
"""
from dataclasses import dataclass, replace
from typing import Any, Iterable, List, Optional, Tuple

from farm_catalog.config import settings


@dataclass(frozen=True)
class SelectionItem:
    id: Any
    name: str
    description: Optional[str] = None
    is_local: bool = False
    is_favorite: bool = False
    usage_count: int = 0

    def with_usage(self, usage_count: int) -> "SelectionItem":
        return replace(self, usage_count=usage_count)

    def with_favorite(self, is_favorite: bool) -> "SelectionItem":
        return replace(self, is_favorite=is_favorite)


@dataclass(frozen=True)
class RankedGroups:
    favorites: Tuple[SelectionItem, ...] = ()
    recent: Tuple[SelectionItem, ...] = ()
    others: Tuple[SelectionItem, ...] = ()

    def groups(self) -> List[Tuple[str, Tuple[SelectionItem, ...]]]:
        """Non-empty groups in display order"""
        return [
            (name, items)
            for name, items in (("favorites", self.favorites), ("recent", self.recent), ("others", self.others))
            if items
        ]

    def ordered(self) -> List[SelectionItem]:
        return list(self.favorites) + list(self.recent) + list(self.others)

    @property
    def is_empty(self) -> bool:
        return not (self.favorites or self.recent or self.others)


def _id_key(item_id: Any) -> tuple:
    # ints and strings may be mixed (temporary ids); never compare across types
    if isinstance(item_id, str):
        return (1, 0, item_id)
    return (0, item_id, "")


def filter_items(items: Iterable[SelectionItem], search: Optional[str]) -> List[SelectionItem]:
    """Case-insensitive substring match on name and description"""
    items = list(items)
    if not search or not search.strip():
        return items
    term = search.strip().lower()
    return [
        item for item in items
        if term in item.name.lower() or (item.description and term in item.description.lower())
    ]


def rank_items(
    items: Iterable[SelectionItem],
    search: Optional[str] = None,
    recent_limit: int = None,
) -> RankedGroups:
    """
    Partitions items into favorites, recent and others.

    - favorites keep their input order
    - the rest is sorted by usage_count desc, ties by id
    - recent: the first `recent_limit` of them with usage_count > 0
    - others: everything left

    Usage:
        groups = rank_items(items, search="oul")
        for name, group in groups.groups(): ...
    """
    if recent_limit is None:
        recent_limit = settings.RECENT_LIMIT

    visible = filter_items(items, search)

    favorites = [item for item in visible if item.is_favorite]
    rest = sorted(
        (item for item in visible if not item.is_favorite),
        key=lambda item: (-item.usage_count, _id_key(item.id)),
    )

    # rest is sorted by usage, so the used items form its prefix
    recent = [item for item in rest if item.usage_count > 0][:recent_limit]
    others = rest[len(recent):]

    return RankedGroups(tuple(favorites), tuple(recent), tuple(others))
