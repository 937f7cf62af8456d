# app/core/logging_config.py
import logging
from typing import Optional

from app.core.settings import LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

def configure_logging(level: Optional[str] = None) -> None:
    """Root logger setup; modules log through logging.getLogger(__name__)."""
    logging.basicConfig(level=(level or LOG_LEVEL), format=LOG_FORMAT)
    # requests/urllib3 are noisy at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
