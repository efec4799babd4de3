"""Utility functions for epubmanga.

This module contains small helpers shared by the pipeline stages.
"""

import logging
import mimetypes
from pathlib import Path
from typing import List, Union
from urllib.parse import quote

# Set up logging
logger = logging.getLogger(__name__)

# Extensions accepted as page images
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp")

# Media types by extension, used before falling back to the mimetypes table
MEDIA_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
    ".xhtml": "application/xhtml+xml",
    ".css": "text/css",
    ".ncx": "application/x-dtbncx+xml",
    ".opf": "application/oebps-package+xml",
}


def ensure_directory(directory_path: Union[str, Path]) -> Path:
    """Create directory if it doesn't exist.

    Args:
        directory_path: Path to the directory to create.

    Returns:
        Path: The Path object for the created directory.

    Raises:
        OSError: If directory creation fails.
    """
    path = Path(directory_path)
    try:
        path.mkdir(parents=True, exist_ok=True)
        return path
    except OSError as e:
        logger.error(f"Failed to create directory {path}: {e}")
        raise


def list_image_files(directory: Union[str, Path]) -> List[Path]:
    """List the page images of a directory in reading order.

    Only regular files with an image extension are returned, sorted by file
    name so the order is the same on every platform.

    Args:
        directory: Directory containing the page images.

    Returns:
        List[Path]: Image paths in reading order.
    """
    directory = Path(directory)
    return [f for f in sorted(directory.iterdir(), key=lambda p: p.name)
            if f.is_file() and f.suffix.lower() in IMAGE_EXTENSIONS]


def media_type(path: Union[str, Path]) -> str:
    """Infer the media type of a file from its extension.

    Args:
        path: File path or name.

    Returns:
        str: The media type, ``application/octet-stream`` when unknown.
    """
    extension = Path(path).suffix.lower()
    if extension in MEDIA_TYPES:
        return MEDIA_TYPES[extension]
    guessed, _ = mimetypes.guess_type(str(path))
    return guessed or "application/octet-stream"


def format_index(index: int) -> str:
    """Zero-pad a 1-based page index so lexical order equals reading order."""
    return f"{index:05d}"


def href(name: str) -> str:
    """Quote a relative file name for use in a document link."""
    return quote(name, safe="/")
