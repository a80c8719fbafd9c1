"""CLI-facing helpers for SPARQLGen.

Startup banner, logging setup and the `--log` level parser shared by the
command-line entry point.
"""

from __future__ import annotations

from collections.abc import Callable
import argparse
import logging
import random
from typing import cast

from art import text2art as _text2art  # pyright: ignore[reportUnknownVariableType]

logger = logging.getLogger(__name__)

# ================================================================================================ #
# Third-Party Wrappers                                                                             #
# ================================================================================================ #

TextToArtCallable = Callable[..., str]
text2art: TextToArtCallable = cast(TextToArtCallable, _text2art)

# ================================================================================================ #
# Logging Configuration                                                                            #
# ================================================================================================ #

LOG_FORMAT = "%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d - %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

_LEVELS_BY_NAME = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "warn": logging.WARNING,
    "err": logging.ERROR,
    "crit": logging.CRITICAL,
}
_NUMERIC_LEVELS = (10, 20, 30, 40, 50)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure the root logger for a CLI run at the given numeric `level`."""
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)


def parse_log_level(value: str) -> int:
    """Parse the value of the --log argument.

    Accepts level names (case-insensitive), the aliases warn, err and crit,
    and the numeric levels 10 to 50.

    Raises:
        argparse.ArgumentTypeError: If `value` is none of the above.
    """
    value = value.strip()

    if value.isdigit():
        numeric = int(value)
        if numeric in _NUMERIC_LEVELS:
            return numeric
        message = f"Invalid numeric log level: {numeric}. Allowed values: 10, 20, 30, 40, 50."
        raise argparse.ArgumentTypeError(message)

    level = _LEVELS_BY_NAME.get(value.lower())
    if level is not None:
        return level

    message = (
        f"Invalid log level '{value}'. "
        "Use names (debug, info, warning, error, critical) "
        "or aliases (warn, err, crit), "
        "or numeric values (10, 20, 30, 40, 50)."
    )
    raise argparse.ArgumentTypeError(message)


# ================================================================================================ #
# ASCII Header                                                                                     #
# ================================================================================================ #

_FONT_STYLES = ["standard", "small", "big", "doom", "slant"]


def print_ascii_header() -> None:
    """Print the SPARQLGen banner in a randomly chosen ASCII-art font."""
    header = text2art("SPARQLGen", font=random.choice(_FONT_STYLES))

    print("\n")  # noqa: T201
    print(header)  # noqa: T201
    print("\n")  # noqa: T201
