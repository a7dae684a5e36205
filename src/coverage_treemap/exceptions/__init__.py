"""Exception hierarchy for coverage-treemap."""

from .base import CoverageTreemapError
from .config import ConfigurationError, InvalidConfigError, InvalidPathError
from .data import CoverageDataError

__all__ = [
    "CoverageTreemapError",
    "ConfigurationError",
    "InvalidConfigError",
    "InvalidPathError",
    "CoverageDataError",
]
