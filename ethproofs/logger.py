"""Process-wide logging setup driven by environment variables."""

from __future__ import annotations

import logging
import os
import threading
from typing import Dict, Optional, Tuple

FILTER_ENV = "ETHPROOFS_LOG"
LOGGER_TYPE_ENV = "ETHPROOFS_LOGGER"

TRACE = 5
OFF = logging.CRITICAL + 1
logging.addLevelName(TRACE, "TRACE")

_LEVELS = {
    "off": OFF,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": TRACE,
}

_lock = threading.Lock()
_installed_handler: Optional[logging.Handler] = None


def _parse_filter(spec: str) -> Tuple[int, Dict[str, int]]:
    """Parse `level` and `target=level` directives separated by commas."""
    root_level = OFF
    targets: Dict[str, int] = {}
    for directive in (part.strip() for part in spec.split(",")):
        if not directive:
            continue
        if "=" in directive:
            target, _, level = directive.rpartition("=")
            level = level.strip().lower()
            if not target.strip() or level not in _LEVELS:
                raise ValueError(f"invalid log filter directive: {directive!r}")
            targets[target.strip()] = _LEVELS[level]
        elif directive.lower() in _LEVELS:
            root_level = _LEVELS[directive.lower()]
        else:
            targets[directive] = TRACE
    return root_level, targets


def _filter_from_env() -> Tuple[int, Dict[str, int]]:
    spec = os.environ.get(FILTER_ENV)
    if spec is None:
        return OFF, {}
    try:
        return _parse_filter(spec)
    except ValueError:
        return OFF, {}


def _build_handler(logger_type: str) -> logging.Handler:
    handler = logging.StreamHandler()
    if logger_type == "forest":
        handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        handler.addFilter(lambda record: record.levelno == logging.INFO)
    elif logger_type == "forest-all":
        handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    elif logger_type == "flat":
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    else:
        raise ValueError(f"Invalid logger type: {logger_type}")
    return handler


def setup_logger() -> None:
    """Install the log handler once; later calls do nothing.

    The filter comes from ETHPROOFS_LOG (default: off) and the output style
    from ETHPROOFS_LOGGER: `flat` (default), `forest` or `forest-all`.
    """
    global _installed_handler
    with _lock:
        if _installed_handler is not None:
            return
        handler = _build_handler(os.environ.get(LOGGER_TYPE_ENV, "flat"))
        root_level, targets = _filter_from_env()

        root = logging.getLogger()
        root.setLevel(root_level)
        for name, level in targets.items():
            logging.getLogger(name).setLevel(level)
        root.addHandler(handler)
        _installed_handler = handler