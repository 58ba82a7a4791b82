import logging
import sys
import json


def get_logger(name: str = __name__) -> logging.Logger:
    """Return a JSON-configured logger.

    Reuses existing handlers to avoid duplicates when called multiple times.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    handler = logging.StreamHandler(sys.stdout)
    fmt = json.dumps(
        {
            "ts": "%(asctime)s",
            "lvl": "%(levelname)s",
            "mod": "%(name)s",
            "msg": "%(message)s",
        }
    )
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)
    logger.setLevel(_configured_level())
    return logger


def _configured_level() -> int:
    # Imported lazily: config must stay importable without logging set up.
    from .core.config import settings

    level = logging.getLevelName(str(settings.log_level).upper())
    return level if isinstance(level, int) else logging.INFO
