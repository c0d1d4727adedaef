import logging
import sys

from s3_direct_upload.config import get_log_level

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Attach a single stderr handler to the root logger.

    Safe to call more than once; earlier handlers are replaced.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, (level or get_log_level()).upper(), logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    root_logger.addHandler(handler)

    # botocore logs every credential lookup at DEBUG.
    logging.getLogger("botocore").setLevel(logging.WARNING)
