"""Logging setup for the coverage-treemap command line.

Console output goes through a RichHandler on stderr so JSON printed on
stdout by ``tree`` and ``layout`` stays machine-readable. A plain-text log
file can be added alongside it via ``TreemapConfig.log_file``.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "coverage_treemap"

LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbosity: str = "normal", log_file: Optional[str] = None) -> logging.Logger:
    """Route ``coverage_treemap`` logs to the terminal and optionally a file.

    Calling this again replaces the handlers from the previous call, so each
    CLI invocation logs according to its own configuration.

    Args:
        verbosity: One of ``quiet``, ``normal`` or ``verbose``
        log_file: Path appended to with every record at the chosen level

    Returns:
        The package's root logger
    """
    level = LEVELS.get(verbosity, logging.WARNING)
    verbose = verbosity == "verbose"

    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            show_path=verbose,
        )
    ]
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)

    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the ``coverage_treemap`` namespace.

    ``get_logger(__name__)`` inside the package returns the module's own
    logger; any other name is nested under the package root.
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER)
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
