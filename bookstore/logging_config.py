"""
Logging setup for the bookstore core.

Modules log through ``logging.getLogger(__name__)``; this only wires the
root handler and level once, from settings.
"""

import logging
import sys
from typing import Optional

from bookstore.config import settings

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"


def setup_logging(level: Optional[str] = None):
    """Configure a single stdout handler for the process."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # SQL echo is too noisy outside debugging
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
