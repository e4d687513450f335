"""
Logging setup.

Modules log through ``logging.getLogger(__name__)``; this module
only decides where records go and at which level.
"""

import logging

from client_ledger.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Attach a stream handler to the package logger once."""
    settings = get_settings()
    level = (level or settings.LOG_LEVEL).upper()

    root = logging.getLogger("client_ledger")
    root.setLevel(level)

    if not any(getattr(h, "_client_ledger", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._client_ledger = True
        root.addHandler(handler)
