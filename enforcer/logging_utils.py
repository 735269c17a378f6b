"""Centralized logging for the enforcer packages.

Every module asks for its logger through :func:`get_logger` so handlers are
attached exactly once, on the shared ``enforcer`` parent logger.
"""

from __future__ import annotations

import logging

from enforcer.config import settings

_ROOT_NAME = "enforcer"

# Cache created loggers so repeated calls don't duplicate handlers
_LOGGER_CACHE: dict[str, logging.Logger] = {}


def _configure_root() -> logging.Logger:
    root = logging.getLogger(_ROOT_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s")
        )
        root.addHandler(handler)
    root.setLevel(settings.log_level.upper())
    return root


def get_logger(name: str = _ROOT_NAME) -> logging.Logger:
    """Return a :class:`logging.Logger` under the ``enforcer`` hierarchy.

    Names outside the hierarchy (e.g. ``cli.main``) are nested beneath it so
    they share the same handler and level.
    """
    if name in _LOGGER_CACHE:
        return _LOGGER_CACHE[name]

    _configure_root()
    if name == _ROOT_NAME or name.startswith(_ROOT_NAME + "."):
        logger = logging.getLogger(name)
    else:
        logger = logging.getLogger(f"{_ROOT_NAME}.{name}")

    _LOGGER_CACHE[name] = logger
    return logger
