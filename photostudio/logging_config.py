import logging
from typing import Optional

from . import config


def configure_logging(level: Optional[str] = None) -> None:
    desired_level = getattr(logging, (level or config.log_level()).upper(), logging.INFO)
    root = logging.getLogger()
    if getattr(configure_logging, "_configured", False):
        root.setLevel(desired_level)
        return

    for handler in list(root.handlers):
        root.removeHandler(handler)

    root.setLevel(desired_level)
    formatter = logging.Formatter("[%(asctime)s] [%(levelname)s] %(name)s: %(message)s")

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    # the SDK's transport is chatty at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    configure_logging._configured = True  # type: ignore[attr-defined]
    root.debug("Logging configured at %s", logging.getLevelName(desired_level))
