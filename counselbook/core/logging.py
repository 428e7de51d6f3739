# counselbook/core/logging.py
import logging

from counselbook.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """
    Configure root logging for the service.

    Safe to call more than once (e.g. once per `create_app()` in tests);
    only the level is updated after the first call.
    """
    resolved = (level or get_settings().LOG_LEVEL or "INFO").upper()
    root = logging.getLogger()

    if not root.handlers:
        logging.basicConfig(level=resolved, format=LOG_FORMAT)
    root.setLevel(resolved)

    # SQL echo is controlled separately; keep the engine quiet by default.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
