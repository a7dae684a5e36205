"""Configuration loading and management for coverage-treemap.

Configuration sources are merged in priority order:
    1. Defaults (defined in TreemapConfig)
    2. Global config (~/.coverage-treemap.toml)
    3. Project config (./coverage-treemap.toml)
    4. Explicit config file
    5. Environment variables (COVERAGE_TREEMAP_* prefix)
    6. Keyword overrides (typically CLI flags)

Example:
    >>> config = load_config(default_namespace="app", verbose=True)
    >>> config.verbosity
    'verbose'
    >>> config.default_namespace
    'app'
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError, InvalidPathError

Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "COVERAGE_TREEMAP_"
CONFIG_FILE_NAME = "coverage-treemap.toml"


@dataclass(frozen=True)
class LayoutThresholds:
    """Numeric guards used by the squarified layout engine.

    All values are in the container's area/length units (pixels for the
    shell). They exist to keep degenerate input from producing zero-size or
    NaN rectangles, not to tune the visual result.

    Attributes:
        min_area: Normalized weights below this are never laid out
        min_thickness: Rows thinner than this are dropped
        fit_tolerance: Slack allowed when a row is thicker than the space left
        min_dimension: Placed rects with a side below this are filtered out
        small_row_share: Minimum share of the row length for rows of
            ``small_row_limit`` items or fewer
        large_row_share: Minimum share for longer rows
        small_row_limit: Item count separating small from large rows
    """

    min_area: float = 0.1
    min_thickness: float = 0.1
    fit_tolerance: float = 0.01
    min_dimension: float = 0.1
    small_row_share: float = 0.10
    large_row_share: float = 0.05
    small_row_limit: int = 4

    def __post_init__(self) -> None:
        """Validate layout thresholds."""
        for field_name in ("min_area", "min_thickness", "fit_tolerance", "min_dimension"):
            if getattr(self, field_name) < 0:
                raise ValueError(f"{field_name} must be non-negative")

        # A share above 1/n for n items could never fit the row
        if not 0.0 <= self.small_row_share <= 0.5:
            raise ValueError("small_row_share must be between 0.0 and 0.5")
        if not 0.0 <= self.large_row_share <= 1.0 / (self.small_row_limit + 1):
            raise ValueError("large_row_share is too large for rows above small_row_limit")
        if self.small_row_limit < 2:
            raise ValueError("small_row_limit must be at least 2")

    def min_share(self, row_size: int) -> float:
        """Minimum fraction of a row's length granted to each item."""
        return self.small_row_share if row_size <= self.small_row_limit else self.large_row_share


DEFAULT_THRESHOLDS = LayoutThresholds()


@dataclass(frozen=True)
class TreemapConfig:
    """Configuration for building and laying out a coverage treemap.

    Attributes:
        Source layout:
            project_root: Directory source roots are relative to (None = cwd)
            source_directories: Source roots, relative to project_root
            excluded_directories: Directories skipped during the source scan
            source_extensions: File suffixes picked up by the source scan
            default_namespace: Namespace for files sitting directly in a root

        Projection and rendering:
            zero_weight: Layout weight substituted for nodes with nothing coverable
            nested_padding: Inset between a parent rect and its nested children
            default_depth: Depth used when the caller does not request one

        Output control:
            verbosity: Logging verbosity level
            log_file: Optional file that also receives log records

        Layout guards:
            layout: LayoutThresholds for the squarify engine
    """

    project_root: Optional[str] = None
    source_directories: list[str] = field(default_factory=lambda: ["src"])
    excluded_directories: list[str] = field(default_factory=list)
    source_extensions: list[str] = field(default_factory=lambda: [".py"])
    default_namespace: str = "root"

    zero_weight: float = 0.5
    nested_padding: float = 2.0
    default_depth: int = 0

    verbosity: Verbosity = "normal"
    log_file: Optional[str] = None

    layout: LayoutThresholds = field(default_factory=LayoutThresholds)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.source_directories:
            raise ValueError("source_directories must not be empty")
        if not self.default_namespace or "/" in self.default_namespace:
            raise ValueError("default_namespace must be a single non-empty path segment")
        if self.zero_weight <= 0:
            raise ValueError("zero_weight must be positive")
        if self.nested_padding < 0:
            raise ValueError("nested_padding must be non-negative")
        if self.default_depth < 0:
            raise ValueError("default_depth must be non-negative")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be one of quiet, normal, verbose")

    @property
    def root_path(self) -> Path:
        """Resolved project root."""
        return Path(self.project_root).resolve() if self.project_root else Path.cwd().resolve()


def load_config(config_file: Optional[Path] = None, **overrides) -> TreemapConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options fall through.

    Returns:
        Validated TreemapConfig instance

    Raises:
        ConfigurationError: If a config file is missing or unreadable
        InvalidConfigError: If a value fails validation
        InvalidPathError: If project_root names a file

    Example:
        >>> config = load_config(config_file=Path("custom.toml"))
    """
    merged: dict = {}

    global_config = Path.home() / f".{CONFIG_FILE_NAME}"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / CONFIG_FILE_NAME
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    layout_dict = merged.pop("layout", None)
    if layout_dict is not None:
        if isinstance(layout_dict, dict):
            try:
                merged["layout"] = LayoutThresholds(**layout_dict)
            except TypeError as e:
                raise ConfigurationError(f"Invalid [layout] config: {e}")
            except ValueError as e:
                raise InvalidConfigError("layout", layout_dict, str(e))
        elif isinstance(layout_dict, LayoutThresholds):
            merged["layout"] = layout_dict

    project_root = merged.get("project_root")
    if project_root is not None and Path(project_root).is_file():
        raise InvalidPathError(Path(project_root), "project root must be a directory")

    try:
        return TreemapConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ConfigurationError(f"Invalid configuration: {e}")
    except ValueError as e:
        raise InvalidConfigError("config", merged, str(e))


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from COVERAGE_TREEMAP_* environment variables.

    Supported environment variables:
        COVERAGE_TREEMAP_PROJECT_ROOT: path
        COVERAGE_TREEMAP_SOURCE_DIRECTORIES: comma-separated list
        COVERAGE_TREEMAP_EXCLUDED_DIRECTORIES: comma-separated list
        COVERAGE_TREEMAP_SOURCE_EXTENSIONS: comma-separated list
        COVERAGE_TREEMAP_DEFAULT_NAMESPACE: str
        COVERAGE_TREEMAP_ZERO_WEIGHT: float
        COVERAGE_TREEMAP_NESTED_PADDING: float
        COVERAGE_TREEMAP_DEFAULT_DEPTH: int
        COVERAGE_TREEMAP_VERBOSITY: quiet/normal/verbose
        COVERAGE_TREEMAP_LOG_FILE: path

    Returns:
        Dict of field_name -> parsed_value for any variables found.
    """
    type_hints = get_type_hints(TreemapConfig)

    result: dict[str, Any] = {}

    for field_name in TreemapConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint, field_name)
            if parsed is not None:
                result[field_name] = parsed
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))

    return result


def _parse_env_value(value: str, type_hint: Any, field_name: str) -> Any:
    """Parse environment variable string to the correct type.

    Args:
        value: Raw string from environment
        type_hint: Type annotation from dataclass
        field_name: Field name for error messages

    Returns:
        Parsed value or None if the type is not supported

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if origin is list:
        return [part.strip() for part in value.split(",") if part.strip()]

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Args:
        path: Path to TOML file

    Returns:
        Parsed TOML as dict

    Raises:
        ConfigurationError: If tomllib/tomli not available
        Exception: If TOML parsing fails
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        data = tomllib.load(f)

    # Allow either a top-level table or a [tool.coverage-treemap] section
    tool_section = data.get("tool", {}).get("coverage-treemap")
    if isinstance(tool_section, dict):
        return dict(tool_section)
    return data
