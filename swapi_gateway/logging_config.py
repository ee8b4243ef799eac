"""Process-wide logging setup driven by :class:`~swapi_gateway.settings.Settings`.

Records go to stdout and, when ``LOG_FILE_PATH`` is set, to a file that
survives external rotation.
"""

import logging
import logging.config
from pathlib import Path
from typing import Any, Dict, Optional

from .settings import Settings, settings as default_settings

FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Server/framework loggers that follow LOG_LEVEL instead of their own defaults
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi")

# httpx logs every request at INFO; api.py logs the upstream events itself
QUIET_LOGGERS = {"httpx": "WARNING", "httpcore": "WARNING"}

_configured = False


def build_config(cfg: Settings) -> Dict[str, Any]:
    """Translate settings into a ``logging.config.dictConfig`` mapping."""
    level = cfg.LOG_LEVEL.upper()
    handlers: Dict[str, Any] = {
        "stdout": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
            "formatter": "plain",
        }
    }
    if cfg.LOG_FILE_PATH:
        Path(cfg.LOG_FILE_PATH).parent.mkdir(parents=True, exist_ok=True)
        handlers["logfile"] = {
            "class": "logging.handlers.WatchedFileHandler",
            "filename": cfg.LOG_FILE_PATH,
            "formatter": "plain",
        }

    loggers: Dict[str, Any] = {name: {"level": level} for name in SERVER_LOGGERS}
    loggers.update({name: {"level": lvl} for name, lvl in QUIET_LOGGERS.items()})

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"plain": {"format": FORMAT}},
        "handlers": handlers,
        "loggers": loggers,
        "root": {"level": level, "handlers": list(handlers)},
    }


def configure_logging(cfg: Optional[Settings] = None, *, force: bool = False) -> None:
    """Apply the logging config once per process.

    Args:
        cfg: Settings to read ``LOG_LEVEL``/``LOG_FILE_PATH`` from; defaults
            to the module-level ``settings``.
        force: Reconfigure even if a previous call already ran.
    """
    global _configured
    if _configured and not force:
        return

    logging.config.dictConfig(build_config(cfg or default_settings))
    _configured = True
