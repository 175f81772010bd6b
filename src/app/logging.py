"""Logging setup with a Rich console handler on stderr.

Log records go to stderr so that tables and CSV written to stdout by the CLI
stay machine-readable.
"""

from __future__ import annotations

import logging
import os
from typing import Final

from rich.console import Console
from rich.logging import RichHandler

_DEFAULT_LEVEL: Final[str] = "INFO"
_LEVEL_ENV_VAR: Final[str] = "BBL_LOG_LEVEL"
_FORMAT: Final[str] = "%(message)s"
_DATE_FORMAT: Final[str] = "[%X]"

_handler: RichHandler | None = None


def _resolve_level(level: str | None) -> int:
    if level is None:
        level = os.environ.get(_LEVEL_ENV_VAR, _DEFAULT_LEVEL)
    return getattr(logging, level.upper(), logging.INFO)


def setup_logging(level: str | None = None, *, force: bool = False) -> None:
    """Attach a Rich handler to the root logger.

    Only the first call installs the handler.  Later calls are no-ops unless
    *force* is set, in which case the level is re-applied to the existing
    handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Falls back to the BBL_LOG_LEVEL env var, then to INFO.
        force: Re-apply *level* even if logging is already configured.
    """
    global _handler
    resolved_level = _resolve_level(level)
    root = logging.getLogger()

    if _handler is not None:
        if force:
            _handler.setLevel(resolved_level)
            root.setLevel(resolved_level)
        return

    _handler = RichHandler(
        console=Console(stderr=True),
        level=resolved_level,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
    )
    _handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))

    root.setLevel(resolved_level)
    root.addHandler(_handler)


def get_logger(name: str) -> logging.Logger:
    """Return a named logger, ensuring logging is configured.

    Args:
        name: Logger name, typically ``__name__`` of the calling module.
    """
    setup_logging()
    return logging.getLogger(name)
