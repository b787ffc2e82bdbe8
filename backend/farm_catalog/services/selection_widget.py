"""
Ranked Selection Widget

State controller of a picker over one catalog: search text, current value,
the open/closed create dialog, and the items ranked by rank_items.
Rendering is left to the caller; the controller only holds state and calls
the callbacks it was given.

Callbacks may be plain functions or coroutines:
- on_change(item_id)                      selection changed
- create_local(name, extra) -> item|None  inline creation of a local entry
- record_usage(item_id)                   usage increment, fire-and-forget
- toggle_favorite(item_id)                persists the favorite flag

After dispose() every state update is ignored; requests already in flight
are not cancelled.
"""
import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Set

from farm_catalog.core.errors import CatalogError
from farm_catalog.core.i18n import Translator
from farm_catalog.core.notifier import LoggingNotifier, Notifier
from farm_catalog.services.ranking import RankedGroups, SelectionItem, rank_items

logger = logging.getLogger(__name__)


@dataclass
class CreateDialogState:
    is_open: bool = False
    name: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)
    is_creating: bool = False


def merge_items(*lists: Iterable[SelectionItem]) -> List[SelectionItem]:
    """Concatenates item lists, the first occurrence of an id wins"""
    seen = set()
    merged = []
    for items in lists:
        for item in items:
            if item.id in seen:
                continue
            seen.add(item.id)
            merged.append(item)
    return merged


class RankedSelectionWidget:

    def __init__(
        self,
        on_change: Callable[[Any], Any],
        create_local: Optional[Callable[[str, Dict[str, Any]], Awaitable[Optional[SelectionItem]]]] = None,
        record_usage: Optional[Callable[[Any], Any]] = None,
        toggle_favorite: Optional[Callable[[Any], Any]] = None,
        notifier: Notifier = None,
        translator: Translator = None,
        recent_limit: int = None,
    ):
        self.on_change = on_change
        self._create_local = create_local
        self._record_usage = record_usage
        self._toggle_favorite = toggle_favorite
        self.notifier = notifier or LoggingNotifier()
        self.t = translator or Translator()
        self.recent_limit = recent_limit

        self.items: List[SelectionItem] = []
        self.value: Any = None
        self.search: str = ""
        self.is_open: bool = False
        self.dialog = CreateDialogState()

        self._disposed = False
        self._pending: Set[asyncio.Task] = set()

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def groups(self) -> RankedGroups:
        return rank_items(self.items, self.search, self.recent_limit)

    @property
    def can_create(self) -> bool:
        return self._create_local is not None

    # ============ LOAD ============

    async def load(self, *sources: Callable[[], Awaitable[Iterable[SelectionItem]]]) -> List[SelectionItem]:
        """
        Runs the sources concurrently and replaces the items with their merge.
        All or nothing: if one source fails the error is raised and the
        current items are left untouched.
        """
        results = await asyncio.gather(*(source() for source in sources))
        if self._disposed:
            return self.items

        self.items = merge_items(*results)
        return self.items

    def set_items(self, items: Iterable[SelectionItem]) -> None:
        if self._disposed:
            return
        self.items = list(items)

    # ============ SEARCH / OPEN ============

    def open(self) -> None:
        if not self._disposed:
            self.is_open = True

    def close(self) -> None:
        if self._disposed:
            return
        self.is_open = False
        self.search = ""

    def set_search(self, text: str) -> None:
        if not self._disposed:
            self.search = text

    # ============ SELECT ============

    def select(self, item_id: Any) -> None:
        """
        Sets the value, notifies on_change and closes the list.
        An async on_change and the usage increment run in the background;
        a failure of either is only logged.
        """
        if self._disposed:
            return

        self.value = item_id
        self._schedule(self.on_change(item_id), "change notification", item_id)
        self.is_open = False
        self.search = ""

        self.items = [
            item.with_usage(item.usage_count + 1) if item.id == item_id else item
            for item in self.items
        ]
        self._fire_usage(item_id)

    def _fire_usage(self, item_id: Any) -> None:
        if self._record_usage is None:
            return

        try:
            result = self._record_usage(item_id)
        except Exception:
            logger.warning("[WIDGET] Usage increment failed for %s", item_id, exc_info=True)
            return

        self._schedule(result, "usage increment", item_id)

    def _schedule(self, result: Any, action: str, item_id: Any) -> None:
        """Runs an awaitable callback result as a tracked task of the running loop"""
        if not inspect.isawaitable(result):
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Nothing can run the coroutine outside an event loop
            if inspect.iscoroutine(result):
                result.close()
            logger.warning("[WIDGET] No event loop, %s for %s dropped", action, item_id)
            return

        task = loop.create_task(self._await_callback(result, action, item_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _await_callback(self, awaitable: Awaitable, action: str, item_id: Any) -> None:
        try:
            await awaitable
        except Exception:
            logger.warning("[WIDGET] %s failed for %s", action.capitalize(), item_id, exc_info=True)

    async def wait_pending(self) -> None:
        """Waits for the background callbacks (tests, shutdown)"""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ============ FAVORITES ============

    async def toggle_favorite(self, item_id: Any) -> None:
        """
        Persists the flag through the callback, then flips it locally.
        A failing callback leaves the local state unchanged and is raised.
        """
        if self._disposed:
            return

        if self._toggle_favorite is not None:
            result = self._toggle_favorite(item_id)
            if inspect.isawaitable(result):
                await result

        if self._disposed:
            return
        self.items = [
            item.with_favorite(not item.is_favorite) if item.id == item_id else item
            for item in self.items
        ]

    # ============ INLINE CREATION ============

    def open_create_dialog(self, name: Optional[str] = None) -> None:
        """Opens the dialog, pre-filled with the search text by default"""
        if self._disposed:
            return
        self.dialog = CreateDialogState(is_open=True, name=self.search if name is None else name)
        self.is_open = False

    def cancel_create_dialog(self) -> None:
        if not self._disposed:
            self.dialog = CreateDialogState()

    async def create_local(self, name: Optional[str] = None, extra: Optional[Dict[str, Any]] = None) -> Optional[SelectionItem]:
        """
        Creates a local entry through the callback.

        - success: the new item is added and selected, the dialog is closed
          and its name cleared
        - failure: an error notice is emitted, the dialog stays open and the
          typed name is preserved

        Returns:
            The created item, or None
        """
        if self._disposed or self._create_local is None:
            return None

        if name is not None:
            self.dialog.name = name
        if extra is not None:
            self.dialog.extra = dict(extra)

        typed = self.dialog.name.strip()
        if not typed:
            return None

        self.dialog.is_creating = True
        try:
            item = await self._create_local(typed, dict(self.dialog.extra))
        except Exception as e:
            logger.warning("[WIDGET] Local creation of '%s' failed: %s", typed, e)
            if not self._disposed:
                self.dialog.is_open = True
                self.notifier.error(self.t("common.error"), self._error_message(e))
            return None
        finally:
            self.dialog.is_creating = False

        if self._disposed:
            return item

        if item is not None:
            self.items = merge_items(self.items, [item])
            self.select(item.id)
        self.dialog = CreateDialogState()
        return item

    def _error_message(self, error: Exception) -> str:
        if isinstance(error, CatalogError):
            return self.t(error.message_key, error.message_params())
        return self.t("errors.transport")

    # ============ TEARDOWN ============

    def dispose(self) -> None:
        self._disposed = True
