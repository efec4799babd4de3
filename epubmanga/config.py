"""Configuration management for epubmanga.

Build options are an immutable dataclass. Callers override the defaults field
by field, either with keyword arguments, a mapping, or a JSON options file,
and the merged result is validated once before the build starts.
"""

import os
import json
import logging
from dataclasses import dataclass, fields, replace, asdict
from enum import Enum
from pathlib import Path
from typing import Dict, Any, Optional, Mapping, Union

from .error import ConfigurationError

# Set up logging
logger = logging.getLogger(__name__)

# Kobo Clara HD resolution
DEFAULT_PAGE_WIDTH = 1072
DEFAULT_PAGE_HEIGHT = 1448

DEFAULT_AUTHOR = "EPUB Manga Generator"
DEFAULT_LANGUAGE = "en-US"

# Default JPEG quality
DEFAULT_QUALITY = 85


class ReadingDirection(str, Enum):
    """Page progression direction of the book."""

    LTR = "ltr"
    RTL = "rtl"

    @property
    def writing_mode(self) -> str:
        """Value of the primary-writing-mode metadata."""
        return "horizontal-lr" if self is ReadingDirection.LTR else "horizontal-rl"


@dataclass(frozen=True)
class BuildOptions:
    """Options for one build."""

    page_width: int = DEFAULT_PAGE_WIDTH
    page_height: int = DEFAULT_PAGE_HEIGHT
    reading_direction: ReadingDirection = ReadingDirection.RTL
    author: str = DEFAULT_AUTHOR
    region_magnification: bool = True
    language: str = DEFAULT_LANGUAGE
    image_quality: int = DEFAULT_QUALITY
    max_workers: Optional[int] = None
    workspace_root: Optional[Path] = None
    font_path: Optional[Path] = None
    show_progress: bool = False

    @property
    def orientation(self) -> str:
        """Rendition orientation derived from the page canvas."""
        return "portrait" if self.page_height >= self.page_width else "landscape"

    def to_dict(self) -> Dict[str, Any]:
        """Return the options as plain JSON-friendly values."""
        data = asdict(self)
        data["reading_direction"] = self.reading_direction.value
        for key in ("workspace_root", "font_path"):
            if data[key] is not None:
                data[key] = str(data[key])
        return data


# Default configuration values
DEFAULT_OPTIONS = BuildOptions().to_dict()

OPTION_NAMES = frozenset(f.name for f in fields(BuildOptions))


def _coerce(key: str, value: Any) -> Any:
    """Convert a raw override value to the type of its field."""
    if value is None:
        return None

    if key == "reading_direction":
        if isinstance(value, ReadingDirection):
            return value
        try:
            return ReadingDirection(str(value).lower())
        except ValueError:
            raise ConfigurationError(
                f"Invalid reading direction: {value!r} (expected 'ltr' or 'rtl')",
                field=key,
            ) from None

    if key in ("workspace_root", "font_path"):
        return Path(os.path.expanduser(str(value)))

    if key in ("page_width", "page_height", "image_quality", "max_workers"):
        if isinstance(value, bool):
            raise ConfigurationError(f"Invalid value for {key}: {value!r}", field=key)
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid value for {key}: {value!r}", field=key) from None

    if key in ("region_magnification", "show_progress"):
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)

    return str(value)


def merge_options(base: Optional[BuildOptions] = None,
                  overrides: Optional[Mapping[str, Any]] = None) -> BuildOptions:
    """Overlay caller-supplied values on top of base options.

    Keys mapped to None keep the base value, so unset command line flags
    never clobber defaults.

    Args:
        base: Options to start from (defaults when omitted).
        overrides: Field name to value mapping.

    Returns:
        BuildOptions: The merged options.

    Raises:
        ConfigurationError: If a key is unknown or a value has the wrong type.
    """
    base = base or BuildOptions()
    if not overrides:
        return base

    unknown = sorted(set(overrides) - OPTION_NAMES)
    if unknown:
        raise ConfigurationError(f"Unknown option(s): {', '.join(unknown)}", field=unknown[0])

    changes = {}
    for key, value in overrides.items():
        if value is None:
            continue
        changes[key] = _coerce(key, value)

    return replace(base, **changes)


def validate_options(options: BuildOptions) -> BuildOptions:
    """Check that options describe a buildable book.

    Args:
        options: The options to check.

    Returns:
        BuildOptions: The same options, for chaining.

    Raises:
        ConfigurationError: If any value is out of range.
    """
    if options.page_width <= 0 or options.page_height <= 0:
        raise ConfigurationError(
            f"Page size must be positive, got {options.page_width}x{options.page_height}",
            field="page_width" if options.page_width <= 0 else "page_height",
        )

    if not isinstance(options.reading_direction, ReadingDirection):
        raise ConfigurationError(
            f"Invalid reading direction: {options.reading_direction!r}",
            field="reading_direction",
        )

    if not 1 <= options.image_quality <= 100:
        raise ConfigurationError(
            f"Image quality must be between 1 and 100, got {options.image_quality}",
            field="image_quality",
        )

    if options.max_workers is not None and options.max_workers < 1:
        raise ConfigurationError(
            f"Worker count must be at least 1, got {options.max_workers}",
            field="max_workers",
        )

    if not options.language.strip():
        raise ConfigurationError("Language must not be empty", field="language")

    if options.font_path is not None and not options.font_path.is_file():
        raise ConfigurationError(f"Font file not found: {options.font_path}", field="font_path")

    return options


def resolve_options(options: Union[BuildOptions, Mapping[str, Any], None] = None) -> BuildOptions:
    """Turn whatever the caller passed into validated options."""
    if isinstance(options, BuildOptions):
        return validate_options(options)
    return validate_options(merge_options(None, options))


def load_options_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Load option overrides from a JSON file.

    Args:
        path: Path to a JSON object of option overrides.

    Returns:
        Dict[str, Any]: The overrides, not yet merged or validated.

    Raises:
        ConfigurationError: If the file cannot be read or is not a JSON object.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.error(f"Error loading options file {path}: {e}")
        raise ConfigurationError(f"Cannot read options file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Options file {path} must contain a JSON object")

    logger.debug(f"Loaded {len(data)} option(s) from {path}")
    return data
