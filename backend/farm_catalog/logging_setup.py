import logging
import logging.handlers
from pathlib import Path
from farm_catalog.core.actor_context import get_current_farm_id

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [farm=%(farm_id)s] %(message)s"


class FarmContextFilter(logging.Filter):
    """Adds the farm of the current request to every record"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.farm_id = get_current_farm_id() or "-"
        return True


def setup_logging(settings) -> logging.Handler:
    """Configure console logging, plus a rotating file when LOG_FILE is set"""
    fmt = logging.Formatter(LOG_FORMAT)
    context_filter = FarmContextFilter()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    if settings.LOG_FILE:
        log_path = Path(settings.LOG_FILE).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(fmt)
    handler.addFilter(context_filter)
    handler.setLevel(level)
    handler.set_name("farm_catalog")

    root = logging.getLogger()
    root.setLevel(level)
    # avoid duplicate handlers on reload
    if not any(h.get_name() == "farm_catalog" for h in root.handlers):
        root.addHandler(handler)

    # also wire uvicorn loggers (if present)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        lg = logging.getLogger(name)
        lg.setLevel(level)
        if not any(h.get_name() == "farm_catalog" for h in lg.handlers):
            lg.addHandler(handler)
        lg.propagate = False

    return handler
