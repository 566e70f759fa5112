"""Process-wide logging setup."""

import logging
from typing import Optional

from .config import settings
from .request_context import attach_request_id_filter

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s %(actor_id)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging and tag every record with the current request/actor."""
    logging.basicConfig(level=level or settings.log_level, format=LOG_FORMAT)
    attach_request_id_filter()
