import logging
import sys
from typing import Optional, TextIO

from tracelens.explore.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    """
    Configure logging for the explorer:
    - one handler on the root logger, writing to stderr so rendered views
      on stdout stay clean
    - explorer logs (tracelens.*) at ``level``, else LOG_LEVEL
    - HTTP and SQL libraries reduced to warnings
    """

    app_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(min(app_level, logging.WARNING))
    root.addHandler(handler)

    logging.getLogger("tracelens").setLevel(app_level)

    for name in ("httpx", "httpcore", "asyncio"):
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("sqlglot").setLevel(logging.ERROR)
