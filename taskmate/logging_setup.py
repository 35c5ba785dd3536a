import logging
import sys
from typing import Union

_configured = False


class _ThirdPartyFilter(logging.Filter):
    """Keep taskmate logs and the uvicorn access/error logs; only warnings from everyone else."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(("taskmate", "uvicorn")):
            return True
        return record.levelno >= logging.WARNING


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure a single stderr handler on the root logger.

    Safe to call more than once; later calls only adjust the level.
    """
    global _configured

    root = logging.getLogger()
    root.setLevel(level)
    if _configured:
        return

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    handler.addFilter(_ThirdPartyFilter())
    root.addHandler(handler)

    # SQL echo is noisy even at INFO.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.captureWarnings(True)
    _configured = True
