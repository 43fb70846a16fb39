import json
import logging
from datetime import datetime, timezone
from typing import Optional

from shopledger.config import Settings, get_settings

_TEXT_FORMAT = "%(asctime)s %(levelname)s [%(app)s] %(name)s - %(message)s"


class _AppContextFilter(logging.Filter):
    """Stamps every record with the app name and environment."""

    def __init__(self, app_name: str, environment: str):
        super().__init__()
        self.app_name = app_name
        self.environment = environment

    def filter(self, record: logging.LogRecord) -> bool:
        record.app = self.app_name
        record.environment = self.environment
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "app": getattr(record, "app", None),
            "env": getattr(record, "environment", None),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(settings: Optional[Settings] = None) -> None:
    settings = settings or get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler()
    handler.addFilter(_AppContextFilter(settings.APP_NAME, settings.ENVIRONMENT))
    if settings.LOG_JSON:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(fmt=_TEXT_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # SQL statements only when LOG_SQL is set.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.LOG_SQL else logging.WARNING)


__all__ = ["JsonFormatter", "setup_logging"]
