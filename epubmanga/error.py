"""Error handling for epubmanga.

This module defines the typed failures raised by the build pipeline and the
handler used by the command line to log and display them.
"""

import logging
import traceback
from enum import Enum
from typing import Dict, Any, Optional, List, Union
from dataclasses import dataclass
import click
from pathlib import Path

# Set up logging
logger = logging.getLogger(__name__)


class ErrorCategory(Enum):
    """Categories of errors that can occur while building a book."""

    ENVIRONMENT = "environment"  # Workspace creation/cleanup
    IMAGE = "image"  # Unreadable or corrupt source images
    RENDER = "render"  # Cover composition
    ARCHIVE = "archive"  # Compression or final write
    VALIDATION = "validation"  # Options and input validation
    UNEXPECTED = "unexpected"  # Anything else


@dataclass
class EpubMangaError(Exception):
    """Base exception for every failure raised by the build pipeline."""

    message: str
    category: ErrorCategory = ErrorCategory.UNEXPECTED
    original_error: Optional[Exception] = None
    details: Optional[Dict[str, Any]] = None
    recoverable: bool = False

    def __post_init__(self):
        super().__init__(self.message)
        if self.details is None:
            self.details = {}

    def __str__(self) -> str:
        return f"{self.message} [{self.category.value}]"

    @property
    def stage(self) -> Optional[str]:
        """Pipeline stage that failed, if known."""
        return self.details.get("stage")


class BuildEnvironmentError(EpubMangaError):
    """The temporary workspace could not be created or removed.

    This is not an ``OSError``: catch ``EpubMangaError`` (or this class) and
    read the underlying ``OSError`` from ``original_error``.
    """

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None,
                 original_error: Optional[Exception] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.ENVIRONMENT,
            original_error=original_error,
            details={"stage": "workspace", "path": str(path) if path else None},
        )
        self.path = Path(path) if path else None


class ImageDecodeError(EpubMangaError):
    """A source image could not be decoded."""

    def __init__(self, path: Union[str, Path], original_error: Optional[Exception] = None):
        super().__init__(
            message=f"Cannot decode image: {path}",
            category=ErrorCategory.IMAGE,
            original_error=original_error,
            details={"stage": "normalize", "path": str(path)},
        )
        self.path = Path(path)


class RenderError(EpubMangaError):
    """The cover image could not be composed or rasterized."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None,
                 original_error: Optional[Exception] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.RENDER,
            original_error=original_error,
            details={"stage": "cover", "path": str(path) if path else None},
        )
        self.path = Path(path) if path else None


class ArchiveError(EpubMangaError):
    """The EPUB archive could not be written."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None,
                 original_error: Optional[Exception] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.ARCHIVE,
            original_error=original_error,
            details={"stage": "archive", "path": str(path) if path else None},
        )
        self.path = Path(path) if path else None


class ConfigurationError(EpubMangaError):
    """Build options or inputs are invalid."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            details={"stage": "configure", "field": field},
        )
        self.field = field


class ErrorHandler:
    """Logs build failures and renders them for the command line."""

    def __init__(self, debug: bool = False):
        """Initialize error handler.

        Args:
            debug: Whether to enable debug mode.
        """
        self.debug = debug
        self.error_log: List[EpubMangaError] = []
        self.log_file: Optional[Path] = None

    def set_log_file(self, log_file: Union[str, Path]) -> None:
        """Set log file path.

        Args:
            log_file: Path to log file.
        """
        self.log_file = Path(log_file)

        file_handler = logging.FileHandler(self.log_file)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))

        # Add handler to root logger
        logging.getLogger().addHandler(file_handler)

    def handle(self, error: Exception,
               category: ErrorCategory = ErrorCategory.UNEXPECTED) -> EpubMangaError:
        """Record an exception, wrapping foreign exceptions in EpubMangaError.

        Args:
            error: The original exception.
            category: Category used when the error is not already typed.

        Returns:
            EpubMangaError: The handled error.
        """
        if isinstance(error, EpubMangaError):
            em_error = error
        else:
            em_error = EpubMangaError(
                message=str(error),
                category=category,
                original_error=error,
            )

        self.error_log.append(em_error)
        logger.error(f"{em_error} - {'Recoverable' if em_error.recoverable else 'Fatal'}")

        if self.debug:
            logger.debug(f"Details: {em_error.details}")
            logger.debug(f"Traceback: {traceback.format_exc()}")

        return em_error

    def display_error(self, error: EpubMangaError) -> None:
        """Display error to user with appropriate formatting.

        Args:
            error: The error to display.
        """
        category_display = {
            ErrorCategory.ENVIRONMENT: "📁 Workspace Error",
            ErrorCategory.IMAGE: "🖼️ Image Error",
            ErrorCategory.RENDER: "🎨 Cover Error",
            ErrorCategory.ARCHIVE: "📦 Archive Error",
            ErrorCategory.VALIDATION: "❌ Validation Error",
            ErrorCategory.UNEXPECTED: "❓ Unexpected Error",
        }

        click.secho(category_display.get(error.category, "Error"), fg="yellow", bold=True, err=True)
        click.secho(f"{error.message}", fg="red", err=True)

        if self.debug and error.details:
            click.echo("Details:", err=True)
            for key, value in error.details.items():
                click.echo(f"  - {key}: {value}", err=True)
            if error.original_error is not None:
                click.echo(f"  - cause: {error.original_error!r}", err=True)

        if not error.recoverable:
            click.secho("No EPUB file was written.", fg="red", err=True)


# Create global error handler
error_handler = ErrorHandler()


def initialize_error_handler(debug: bool = False, log_dir: Optional[str] = None) -> ErrorHandler:
    """Initialize global error handler.

    Args:
        debug: Whether to enable debug mode.
        log_dir: Directory for log files.

    Returns:
        The initialized error handler.
    """
    error_handler.debug = debug

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        # Create log file with timestamp
        from datetime import datetime
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"epubmanga_{timestamp}.log"

        error_handler.set_log_file(log_file)

    return error_handler
