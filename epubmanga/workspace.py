"""Temporary workspace for one build.

Each build gets its own uniquely named directory. The workspace is a context
manager so the directory is removed on every exit path, including failures.
"""

import os
import shutil
import tempfile
import logging
from pathlib import Path
from typing import Optional, Union

from .error import BuildEnvironmentError

# Set up logging
logger = logging.getLogger(__name__)

WORKSPACE_PREFIX = "epub-manga-"


class Workspace:
    """A temporary directory tree owned by a single build."""

    IMAGES_DIR = "images"

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.released = False

    @classmethod
    def acquire(cls, root: Optional[Union[str, Path]] = None) -> "Workspace":
        """Create a new workspace.

        Args:
            root: Parent directory, the platform temp directory when omitted.

        Returns:
            Workspace: Handle to the created directory.

        Raises:
            BuildEnvironmentError: If the directory cannot be created.
        """
        parent = Path(root) if root is not None else Path(tempfile.gettempdir())
        try:
            parent.mkdir(parents=True, exist_ok=True)
            path = tempfile.mkdtemp(prefix=WORKSPACE_PREFIX, dir=str(parent))
        except OSError as e:
            logger.error(f"Cannot create workspace in {parent}: {e}")
            raise BuildEnvironmentError(
                f"Cannot create workspace in {parent}: {e}", path=parent, original_error=e
            ) from e

        logger.debug(f"Workspace created at {path}")
        return cls(path)

    @property
    def images_dir(self) -> Path:
        return self.path / self.IMAGES_DIR

    def release(self) -> None:
        """Remove the workspace directory and everything in it.

        Raises:
            BuildEnvironmentError: If the directory cannot be removed.
        """
        if self.released:
            return

        try:
            if self.path.exists():
                shutil.rmtree(self.path)
        except OSError as e:
            logger.error(f"Cannot remove workspace {self.path}: {e}")
            raise BuildEnvironmentError(
                f"Cannot remove workspace {self.path}: {e}", path=self.path, original_error=e
            ) from e

        self.released = True
        logger.debug(f"Workspace removed: {self.path}")

    def __enter__(self) -> "Workspace":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc is None:
            self.release()
            return

        # Never mask the error that aborted the build.
        try:
            self.release()
        except BuildEnvironmentError as cleanup_error:
            logger.warning(f"Workspace cleanup failed after build error: {cleanup_error}")

    def __repr__(self) -> str:
        return f"Workspace({os.fspath(self.path)!r})"
