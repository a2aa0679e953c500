import logging
import sys
from typing import IO, Optional


def setup_logging(level: int = logging.INFO, stream: Optional[IO[str]] = None) -> None:
    """Configure logging to output to stdout with proper formatting."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if root_logger.handlers:
        # Already configured by the host process (or the test runner)
        return

    handler = logging.StreamHandler(stream or sys.stdout)
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Per-event scheduling logs are only useful when explicitly debugging
    if level > logging.DEBUG:
        logging.getLogger("engine.events").setLevel(logging.INFO)
