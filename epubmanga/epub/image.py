"""Image processing for manga pages.

This module copies the source pages into the build workspace and normalizes
each one to the fixed page canvas of the book.
"""

import shutil
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union
from PIL import Image, ImageOps, UnidentifiedImageError

from ..config import DEFAULT_PAGE_WIDTH, DEFAULT_PAGE_HEIGHT, DEFAULT_QUALITY
from ..error import ImageDecodeError, ConfigurationError, BuildEnvironmentError
from ..parallel import map_in_thread_pool
from ..utils import ensure_directory, list_image_files

# Set up logging
logger = logging.getLogger(__name__)

# Letterbox colour
BACKGROUND_COLOR = (255, 255, 255)


@dataclass(frozen=True)
class PageImage:
    """A source page and its normalized copy in the workspace."""

    source_path: Path
    normalized_path: Path
    original_width: int
    original_height: int
    width: int
    height: int

    @property
    def name(self) -> str:
        return self.normalized_path.name


class ImageProcessor:
    """Normalizes manga images to a fixed page canvas."""

    def __init__(self, target_width: int = DEFAULT_PAGE_WIDTH,
                 target_height: int = DEFAULT_PAGE_HEIGHT,
                 quality: int = DEFAULT_QUALITY,
                 max_workers: Optional[int] = None,
                 show_progress: bool = False):
        """Initialize the image processor.

        Args:
            target_width: Width of the page canvas.
            target_height: Height of the page canvas.
            quality: JPEG quality (1-100).
            max_workers: Maximum number of images processed at once.
            show_progress: Whether to show a progress bar.
        """
        self.target_width = target_width
        self.target_height = target_height
        self.quality = quality
        self.max_workers = max_workers
        self.show_progress = show_progress

    def list_source_images(self, source_dir: Union[str, Path]) -> List[Path]:
        """Find the page images of a source directory in reading order.

        Args:
            source_dir: Directory containing source images.

        Returns:
            List[Path]: Image paths sorted by file name.

        Raises:
            ConfigurationError: If the directory is missing or has no images.
        """
        source_dir = Path(source_dir)

        if not source_dir.is_dir():
            logger.error(f"Source directory does not exist: {source_dir}")
            raise ConfigurationError(f"Source directory does not exist: {source_dir}",
                                     field="source_directory")

        image_files = list_image_files(source_dir)
        if not image_files:
            logger.error(f"No images found in {source_dir}")
            raise ConfigurationError(f"No images found in {source_dir}", field="source_directory")

        logger.info(f"Found {len(image_files)} image(s) in {source_dir}")
        return image_files

    def copy_images(self, source_paths: List[Path], images_dir: Union[str, Path]) -> List[Path]:
        """Copy source images into the workspace, keeping their names.

        Args:
            source_paths: Images in reading order.
            images_dir: Workspace image directory.

        Returns:
            List[Path]: Paths of the copies, in the same order.
        """
        out_dir = ensure_directory(images_dir)
        copies = []
        for source_path in source_paths:
            destination = out_dir / source_path.name
            try:
                shutil.copyfile(source_path, destination)
            except OSError as e:
                logger.error(f"Cannot copy {source_path} into the workspace: {e}")
                raise BuildEnvironmentError(
                    f"Cannot copy {source_path} into the workspace: {e}",
                    path=destination, original_error=e
                ) from e
            copies.append(destination)
        return copies

    def pad_image(self, img: Image.Image) -> Image.Image:
        """Resize an image into the canvas and letterbox it on white.

        Args:
            img: PIL Image object to normalize.

        Returns:
            Image.Image: A canvas-sized RGB image with the page centred.
        """
        if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
            rgba = img.convert("RGBA")
            img = Image.new("RGB", rgba.size, BACKGROUND_COLOR)
            img.paste(rgba, mask=rgba.getchannel("A"))
        elif img.mode != "RGB":
            img = img.convert("RGB")

        return ImageOps.pad(img, (self.target_width, self.target_height),
                            method=Image.LANCZOS, color=BACKGROUND_COLOR)

    def normalize(self, path: Union[str, Path], source_path: Optional[Path] = None) -> PageImage:
        """Normalize one image in place.

        Args:
            path: Workspace copy of the image; it is overwritten.
            source_path: Original location of the image, for reporting.

        Returns:
            PageImage: The normalized page.

        Raises:
            ImageDecodeError: If the image cannot be decoded or written.
        """
        path = Path(path)
        source_path = source_path or path

        try:
            with Image.open(path) as img:
                img_format = img.format
                original_width, original_height = img.size
                img = ImageOps.exif_transpose(img)
                page = self.pad_image(img)

            save_kwargs = {"optimize": True}
            if img_format == "JPEG":
                save_kwargs["quality"] = self.quality
            elif img_format == "WEBP":
                save_kwargs["lossless"] = True
            page.save(path, format=img_format if img_format else None, **save_kwargs)
        except (OSError, UnidentifiedImageError, ValueError, Image.DecompressionBombError) as e:
            logger.error(f"Error processing image {source_path}: {e}")
            raise ImageDecodeError(source_path, original_error=e) from e

        logger.debug(f"Normalized {source_path.name}: {original_width}x{original_height} "
                     f"-> {page.width}x{page.height}")

        return PageImage(
            source_path=source_path,
            normalized_path=path,
            original_width=original_width,
            original_height=original_height,
            width=page.width,
            height=page.height,
        )

    def normalize_all(self, paths: List[Path],
                      source_paths: Optional[List[Path]] = None) -> List[PageImage]:
        """Normalize every image, in parallel, keeping reading order.

        The first failure aborts the remaining work and is re-raised.

        Args:
            paths: Workspace copies in reading order.
            source_paths: Matching original paths, for error reporting.

        Returns:
            List[PageImage]: Normalized pages in reading order.
        """
        source_paths = source_paths or paths
        pairs = list(zip(paths, source_paths))
        return map_in_thread_pool(
            lambda pair: self.normalize(*pair),
            pairs,
            max_workers=self.max_workers,
            show_progress=self.show_progress,
            desc="Normalizing pages",
            unit="page",
        )

    def process_directory(self, source_dir: Union[str, Path],
                          images_dir: Union[str, Path]) -> List[PageImage]:
        """Copy and normalize all images of a directory.

        Args:
            source_dir: Directory containing source images.
            images_dir: Workspace image directory.

        Returns:
            List[PageImage]: Normalized pages in reading order.
        """
        source_paths = self.list_source_images(source_dir)
        copies = self.copy_images(source_paths, images_dir)
        return self.normalize_all(copies, source_paths)
