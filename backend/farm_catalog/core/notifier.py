"""
Notification sink

Fire-and-forget: the core calls success/error/warning and moves on. A failing
sink is logged and never interrupts the operation that emitted the notice.
"""
import logging
from dataclasses import dataclass, asdict
from typing import List

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    level: str  # success, warning, error
    title: str
    message: str

    def to_dict(self) -> dict:
        return asdict(self)


class Notifier:
    """Base sink; subclasses implement _emit"""

    def success(self, title: str, message: str = "") -> None:
        self._safe_emit(Notice("success", title, message))

    def warning(self, title: str, message: str = "") -> None:
        self._safe_emit(Notice("warning", title, message))

    def error(self, title: str, message: str = "") -> None:
        self._safe_emit(Notice("error", title, message))

    def _safe_emit(self, notice: Notice) -> None:
        try:
            self._emit(notice)
        except Exception:
            logger.exception("[NOTIFY] Failed to emit %s notice", notice.level)

    def _emit(self, notice: Notice) -> None:
        raise NotImplementedError


class CollectingNotifier(Notifier):
    """
    Keeps the notices of one request so the API can return them
    in the response body ("notices").
    """

    def __init__(self):
        self.notices: List[Notice] = []

    def _emit(self, notice: Notice) -> None:
        self.notices.append(notice)

    def as_list(self) -> List[dict]:
        return [n.to_dict() for n in self.notices]


class LoggingNotifier(Notifier):
    """Writes notices to the log (background use, scripts)"""

    LEVELS = {"success": logging.INFO, "warning": logging.WARNING, "error": logging.ERROR}

    def _emit(self, notice: Notice) -> None:
        logger.log(self.LEVELS.get(notice.level, logging.INFO), "[NOTIFY] %s: %s", notice.title, notice.message)
