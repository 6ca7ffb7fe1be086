"""Library-wide statistics."""

import logging

from ..models.catalog import Library, LibraryStatistics
from ..services.repository import CatalogRepository

logger = logging.getLogger(__name__)


class StatisticsAggregator:
    """Recomputes counts and durations by walking the catalog tree."""

    def __init__(self, repository: CatalogRepository) -> None:
        self._repository = repository

    def compute(self, library: Library) -> LibraryStatistics:
        """Return fresh totals for the library.

        Album caches are ignored; every value is summed from the tracks.
        """
        stats = LibraryStatistics(last_scanned_at=library.last_scanned_at)
        for artist in self._repository.artists_for(library):
            stats.artist_count += 1
            for album in self._repository.albums_for(artist):
                stats.album_count += 1
                for track in self._repository.tracks_for(album):
                    stats.track_count += 1
                    stats.total_duration += track.duration
                    stats.total_size_bytes += track.file_size
        return stats

    def refresh_album_totals(self, library: Library) -> int:
        """Recompute each album's track_count and total_duration.

        Returns the number of albums whose cached values were corrected.
        """
        corrected = 0
        for artist in self._repository.artists_for(library):
            for album in self._repository.albums_for(artist):
                tracks = self._repository.tracks_for(album)
                track_count = len(tracks)
                total_duration = sum(track.duration for track in tracks)
                if album.track_count != track_count or album.total_duration != total_duration:
                    album.track_count = track_count
                    album.total_duration = total_duration
                    self._repository.update_album(album)
                    corrected += 1
        if corrected:
            logger.debug(f"Corrected totals for {corrected} albums in '{library.name}'")
        return corrected
