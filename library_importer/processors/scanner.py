"""Directory scanning and audio format validation."""

import logging
import os
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path

from ..config import SUPPORTED_FORMATS
from ..errors import PathNotFoundError, RootNotDirectoryError

logger = logging.getLogger(__name__)


def is_supported_audio_file(path: Path) -> bool:
    """Check the file extension against the supported format whitelist."""
    return path.suffix.lower() in SUPPORTED_FORMATS


def filter_supported(paths: Iterable[Path]) -> tuple[list[Path], list[Path]]:
    """Split paths into (supported, rejected), preserving order."""
    supported: list[Path] = []
    rejected: list[Path] = []
    for path in paths:
        (supported if is_supported_audio_file(path) else rejected).append(path)
    return supported, rejected


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


class DirectoryScan(Sequence[Path]):
    """Sorted, re-enumerable result of a recursive directory walk."""

    def __init__(self, root: Path, files: list[Path]) -> None:
        self.root = root
        self._files = files

    def __getitem__(self, index):
        return self._files[index]

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[Path]:
        return iter(self._files)

    def __repr__(self) -> str:
        return f"DirectoryScan(root={self.root!s}, files={len(self._files)})"


class DirectoryScanner:
    """Finds every regular file below a root directory."""

    def __init__(self, include_hidden: bool = False) -> None:
        self._include_hidden = include_hidden

    def scan(self, root: Path) -> DirectoryScan:
        """Walk the root recursively and return all regular files, sorted by path.

        Non-audio files are included; callers filter with
        is_supported_audio_file().

        Raises:
            PathNotFoundError: if the root does not exist.
            RootNotDirectoryError: if the root is not a directory.
        """
        if not root.exists():
            raise PathNotFoundError(root)
        if not root.is_dir():
            raise RootNotDirectoryError(root)

        files: list[Path] = []

        def _on_walk_error(err: OSError) -> None:
            target = getattr(err, "filename", None) or str(root)
            logger.warning(f"Skipping unreadable directory {target}: {err.strerror or err}")

        for dirpath, dirnames, filenames in os.walk(root, onerror=_on_walk_error):
            if not self._include_hidden:
                dirnames[:] = [d for d in dirnames if not _is_hidden(d)]
            base = Path(dirpath)
            for name in filenames:
                if not self._include_hidden and _is_hidden(name):
                    continue
                path = base / name
                if path.is_file():
                    files.append(path)

        files.sort(key=lambda p: p.relative_to(root).parts)
        logger.debug(f"Scanned {root}: {len(files)} files")
        return DirectoryScan(root, files)
