import logging
import sys
from typing import Optional, TextIO, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s: %(message)s"


def configure_logging(level: Union[int, str] = logging.INFO, stream: Optional[TextIO] = None) -> None:
    """Install a single stream handler on the root logger.

    ``level`` may be a logging constant or its name ("DEBUG", "warning", ...).
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")
    handler = logging.StreamHandler(stream=stream or sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%H:%M:%S"))

    root = logging.getLogger()
    root.setLevel(level)
    # Drop existing handlers so repeated calls do not duplicate output
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
