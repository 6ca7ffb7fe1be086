"""Duplicate detection against the existing catalog."""

from pathlib import Path

from ..models.catalog import Library, Track
from ..services.repository import CatalogRepository


class DuplicateDetector:
    """Matches candidate files to tracks already in a library.

    A candidate is a duplicate when any track in the library has a stored
    path ending with the candidate's file name, so files that were copied
    into managed storage are still recognized on re-import. The match is a
    plain suffix test: "song.mp3" matches a stored "01 song.mp3".
    """

    def __init__(self, repository: CatalogRepository) -> None:
        self._repository = repository

    def find_duplicate(self, candidate: Path, library: Library) -> Track | None:
        """Return the existing track matching the candidate, if any."""
        return self._repository.find_track_by_file_name(candidate.name, library)

    def is_duplicate(self, candidate: Path, library: Library) -> bool:
        return self.find_duplicate(candidate, library) is not None
