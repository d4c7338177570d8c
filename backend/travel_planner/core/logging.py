import logging
from typing import Optional

from travel_planner.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(level=(level or settings.log_level).upper(), format=LOG_FORMAT)
    # requests logs every connection at INFO through urllib3
    logging.getLogger("urllib3").setLevel(logging.WARNING)
