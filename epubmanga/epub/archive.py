"""EPUB archive assembly.

Packs the workspace into the final ``.epub`` with direct ZIP manipulation.
The archive is written next to its destination under a temporary name and
moved into place only once complete, so a failed build never leaves a
partial file behind.
"""

import os
import zipfile
import tempfile
import logging
from pathlib import Path
from typing import List, Sequence, Tuple, Union

from ..error import ArchiveError
from .image import PageImage
from .navigation import NAV_FILE_NAME, NCX_FILE_NAME
from .package import OPF_FILE_NAME, CONTAINER_PATH, COVER_FILE_NAME
from .pages import STYLESHEET_NAME

# Set up logging
logger = logging.getLogger(__name__)

MIMETYPE = "application/epub+zip"


class ArchiveAssembler:
    """Collects the generated files of a workspace into one EPUB archive."""

    def __init__(self, workspace_dir: Union[str, Path]):
        """Initialize the assembler.

        Args:
            workspace_dir: Directory holding the generated files.
        """
        self.workspace_dir = Path(workspace_dir)

    def entries(self, images: Sequence[PageImage],
                page_paths: Sequence[Union[str, Path]]) -> List[Tuple[Path, str]]:
        """Files to pack and their internal paths, after the mimetype entry.

        Args:
            images: Normalized pages in reading order.
            page_paths: Page documents in reading order.

        Returns:
            List of (workspace path, archive name) pairs.
        """
        entries = [(image.normalized_path, f"images/{image.name}") for image in images]
        entries += [(Path(p), Path(p).name) for p in page_paths]
        for name in (STYLESHEET_NAME, NAV_FILE_NAME, NCX_FILE_NAME, OPF_FILE_NAME,
                     CONTAINER_PATH, COVER_FILE_NAME):
            entries.append((self.workspace_dir / name, name))
        return entries

    def write_zip(self, target: Union[str, Path], entries: List[Tuple[Path, str]]) -> None:
        """Write the archive; the mimetype entry comes first, uncompressed."""
        with zipfile.ZipFile(target, "w", zipfile.ZIP_DEFLATED) as zip_file:
            zip_file.writestr("mimetype", MIMETYPE, compress_type=zipfile.ZIP_STORED)
            for file_path, arcname in entries:
                zip_file.write(file_path, arcname=arcname)

    def stage(self, output_path: Union[str, Path], images: Sequence[PageImage],
              page_paths: Sequence[Union[str, Path]]) -> Path:
        """Write the archive next to its destination under a temporary name.

        Args:
            output_path: Final location of the EPUB.
            images: Normalized pages in reading order.
            page_paths: Page documents in reading order.

        Returns:
            Path: The staged archive, to be passed to ``commit``.

        Raises:
            ArchiveError: If any part of the archive cannot be written.
        """
        output_path = Path(output_path)
        entries = self.entries(images, page_paths)
        temp_name = None

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                prefix=f".{output_path.name}.", suffix=".part", dir=str(output_path.parent)
            )
            os.close(fd)

            self.write_zip(temp_name, entries)
            # mkstemp creates the file private to the owner
            os.chmod(temp_name, 0o644)
        except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
            logger.error(f"Error writing EPUB {output_path}: {e}")
            if temp_name is not None:
                self.discard(temp_name)
            raise ArchiveError(f"Cannot write EPUB {output_path}: {e}",
                               path=output_path, original_error=e) from e

        logger.debug(f"EPUB staged at {temp_name} ({len(entries) + 1} entries)")
        return Path(temp_name)

    @staticmethod
    def commit(staged: Union[str, Path], output_path: Union[str, Path]) -> Path:
        """Move a staged archive to its destination.

        Raises:
            ArchiveError: If the archive cannot be moved into place.
        """
        output_path = Path(output_path)
        try:
            os.replace(staged, output_path)
        except OSError as e:
            logger.error(f"Error moving EPUB into place at {output_path}: {e}")
            ArchiveAssembler.discard(staged)
            raise ArchiveError(f"Cannot write EPUB {output_path}: {e}",
                               path=output_path, original_error=e) from e

        logger.info(f"EPUB written to {output_path}")
        return output_path

    @staticmethod
    def discard(staged: Union[str, Path]) -> None:
        """Remove a staged archive that will not be committed."""
        try:
            if os.path.exists(staged):
                os.remove(staged)
        except OSError as e:
            logger.warning(f"Cannot remove staged archive {staged}: {e}")

    def assemble(self, output_path: Union[str, Path], images: Sequence[PageImage],
                 page_paths: Sequence[Union[str, Path]]) -> Path:
        """Write the EPUB archive atomically.

        Args:
            output_path: Final location of the EPUB.
            images: Normalized pages in reading order.
            page_paths: Page documents in reading order.

        Returns:
            Path: The written archive.

        Raises:
            ArchiveError: If any part of the archive cannot be written.
        """
        return self.commit(self.stage(output_path, images, page_paths), output_path)
