"""
Logging setup for command-line entry points.
"""

import logging
import os
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[Union[int, str]] = None) -> None:
    """
    Configure root logging.

    The level defaults to LOG_LEVEL, then DEBUG when STORYBOOK_ENV is
    "development", then INFO.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL")
    if level is None:
        level = logging.DEBUG if os.getenv("STORYBOOK_ENV") == "development" else logging.INFO
    if isinstance(level, str):
        level = level.upper()

    logging.basicConfig(level=level, format=LOG_FORMAT)
