"""Build orchestration.

This module runs one conversion from a directory of page images to a
fixed-layout EPUB: workspace, normalization, cover, pages, navigation,
package descriptors, archive, teardown. Every stage runs in order; the first
failure aborts the build and the workspace is removed before the error
reaches the caller.
"""

import uuid
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Union
from datetime import datetime

from .config import BuildOptions, resolve_options
from .error import EpubMangaError
from .epub.archive import ArchiveAssembler
from .epub.cover import CoverComposer, TextMetrics
from .epub.image import ImageProcessor
from .epub.navigation import write_navigation
from .epub.package import write_package, COVER_FILE_NAME
from .epub.pages import PageMarkupGenerator, write_stylesheet
from .workspace import Workspace

# Set up logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildRequest:
    """Everything needed for one build."""

    source_directory: Path
    output_file: Path
    title: str = ""
    options: BuildOptions = BuildOptions()


class EpubBuilder:
    """Builds a manga in fixed-layout EPUB format."""

    def __init__(self, metrics: Optional[TextMetrics] = None):
        """Initialize the builder.

        Args:
            metrics: Text metrics for the cover title; a Pillow font is used
                when omitted.
        """
        self.metrics = metrics

    def build(self, request: BuildRequest) -> Path:
        """Run the whole pipeline for one request.

        Args:
            request: The build request.

        Returns:
            Path: The written EPUB file.
        """
        options = request.options
        identifier = str(uuid.uuid4())
        start_time = datetime.now()

        logger.info(f"Building '{request.title}' from {request.source_directory}")

        staged = None
        try:
            with Workspace.acquire(options.workspace_root) as workspace:
                # Step 1: Copy and normalize images
                processor = ImageProcessor(
                    target_width=options.page_width,
                    target_height=options.page_height,
                    quality=options.image_quality,
                    max_workers=options.max_workers,
                    show_progress=options.show_progress,
                )
                images = processor.process_directory(request.source_directory,
                                                     workspace.images_dir)

                # Step 2: Cover from the first page
                composer = CoverComposer(metrics=self.metrics, font_path=options.font_path)
                composer.compose(images[0].normalized_path, workspace.path / COVER_FILE_NAME,
                                 request.title)

                # Step 3: Stylesheet and page documents
                write_stylesheet(workspace.path)
                page_paths = PageMarkupGenerator(options, request.title).build(images,
                                                                               workspace.path)

                # Step 4: Navigation
                write_navigation(page_paths, workspace.path, identifier, request.title,
                                 options.language)

                # Step 5: Package and container descriptors
                write_package(images, page_paths, workspace.path, identifier, request.title, options)

                # Step 6: Archive, moved into place once the workspace is gone
                staged = ArchiveAssembler(workspace.path).stage(
                    request.output_file, images, page_paths
                )
        except EpubMangaError:
            if staged is not None:
                ArchiveAssembler.discard(staged)
            raise

        output = ArchiveAssembler.commit(staged, request.output_file)

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(f"Built {output} with {len(page_paths)} page(s) in {elapsed:.1f}s")
        return output


def convert(source_directory: Union[str, Path], output_file: Union[str, Path], title: str = "",
            options: Union[BuildOptions, Mapping[str, Any], None] = None,
            metrics: Optional[TextMetrics] = None) -> Path:
    """Convert a directory of page images into a fixed-layout EPUB.

    Args:
        source_directory: Directory containing the page images.
        output_file: Path of the EPUB to write.
        title: Book title, drawn on the cover when not empty.
        options: Build options, or a mapping of overrides on the defaults.
        metrics: Text metrics for the cover title.

    Returns:
        Path: The written EPUB file.

    Raises:
        EpubMangaError: One of its subclasses, naming the failed stage.
    """
    request = BuildRequest(
        source_directory=Path(source_directory),
        output_file=Path(output_file),
        title=title or "",
        options=resolve_options(options),
    )
    return EpubBuilder(metrics=metrics).build(request)
