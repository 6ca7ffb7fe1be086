"""Copying files into managed library storage."""

import logging
import shutil
from pathlib import Path

from ..errors import FileCopyError
from ..models.catalog import Library
from ..utils.identifiers import sanitize_path_component

logger = logging.getLogger(__name__)


class FileRelocator:
    """Copies imported files to <library-root>/<library-name>/<file name>."""

    def __init__(self, managed_root: Path) -> None:
        self._managed_root = managed_root

    def destination_for(self, source: Path, library: Library) -> Path:
        """Managed location for a source file, without touching the disk."""
        base = Path(library.path).expanduser() if library.path else self._managed_root
        return base / sanitize_path_component(library.name, "Library") / source.name

    def relocate(self, source: Path, library: Library) -> Path:
        """Copy the source into managed storage and return the new path.

        An existing file at the destination is replaced.

        Raises:
            FileCopyError: on any filesystem error.
        """
        destination = self.destination_for(source, library)

        try:
            if destination.exists() and destination.samefile(source):
                logger.debug(f"{source.name} is already in managed storage")
                return destination

            destination.parent.mkdir(parents=True, exist_ok=True)
            if destination.exists() or destination.is_symlink():
                destination.unlink()
            shutil.copy2(source, destination)
        except OSError as e:
            raise FileCopyError(source, e.strerror or str(e)) from e

        logger.debug(f"Copied {source} -> {destination}")
        return destination
