"""Catalog writing: turning extracted metadata into Artist/Album/Track records."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING

from ..config import UNKNOWN_ALBUM, UNKNOWN_ARTIST
from ..errors import CatalogWriteError
from ..models.catalog import Album, Artist, Library, Track
from ..models.track import AudioMetadata
from ..services.repository import CatalogRepository
from ..utils.identifiers import normalize_artist_name

if TYPE_CHECKING:
    from ..extractors.artwork import ArtworkExtractor

logger = logging.getLogger(__name__)


class CatalogWriter:
    """Find-or-creates artists and albums and attaches new tracks to them."""

    def __init__(
        self,
        repository: CatalogRepository,
        artwork_extractor: ArtworkExtractor | None = None,
        artwork_dir: Path | None = None,
        on_track_imported: Callable[[Track], None] | None = None,
    ) -> None:
        self._repository = repository
        self._artwork = artwork_extractor
        self._artwork_dir = artwork_dir
        self._on_track_imported = on_track_imported

    def write(self, metadata: AudioMetadata, file_path: Path, library: Library) -> Track:
        """Create the track for an imported file.

        The album's cached track_count and total_duration are bumped here;
        the statistics step recomputes them at the end of the import. If any
        repository call fails, the records this call created are removed and
        the album's previous values are restored.

        Raises:
            CatalogWriteError: if the repository rejects any of the records.
        """
        created: list[Artist | Album | Track] = []
        album: Album | None = None
        previous: Album | None = None
        try:
            name = self._artist_name(metadata)
            artist = self._repository.find_artist(name, library)
            if artist is None:
                logger.debug(f"Creating artist '{name}' in library '{library.name}'")
                artist = self._repository.create_artist(Artist(name=name, library_id=library.id))
                created.append(artist)

            album = self._repository.find_album(self._album_title(metadata), artist)
            if album is None:
                album = self._create_album(metadata, artist)
                created.append(album)
            else:
                previous = replace(album)
                self._fill_album_details(album, metadata)

            track = Track(
                title=metadata.title or file_path.stem,
                file_path=str(file_path),
                duration=metadata.duration,
                format=metadata.format or file_path.suffix.lstrip(".").lower(),
                album_id=album.id,
                bitrate=metadata.bitrate or 0,
                sample_rate=metadata.sample_rate or 0,
                channels=metadata.channels or 0,
                track_number=metadata.track_number or 0,
                disc_number=metadata.disc_number or 1,
                file_size=metadata.file_size,
            )
            self._repository.create_track(track)
            created.append(track)

            album.track_count += 1
            album.total_duration += metadata.duration
            self._repository.update_album(album)
        except Exception as e:
            self._roll_back(created, album, previous)
            raise CatalogWriteError(file_path, str(e)) from e

        if album.artwork_path is None:
            self._store_artwork(album, file_path)

        if self._on_track_imported is not None:
            try:
                self._on_track_imported(track)
            except Exception as e:
                logger.warning(f"Track import listener failed for {track.title}: {e}")

        return track

    def _roll_back(
        self,
        created: list[Artist | Album | Track],
        album: Album | None,
        previous: Album | None,
    ) -> None:
        """Undo a partial write, newest record first."""
        if album is not None and previous is not None:
            album.year = previous.year
            album.genre = previous.genre
            album.track_count = previous.track_count
            album.total_duration = previous.total_duration

        for record in reversed(created):
            try:
                if isinstance(record, Track):
                    self._repository.remove_track(record)
                elif isinstance(record, Album):
                    self._repository.remove_album(record)
                else:
                    self._repository.remove_artist(record)
            except Exception as e:
                logger.warning(f"Could not roll back {type(record).__name__} {record.id}: {e}")

    def _artist_name(self, metadata: AudioMetadata) -> str:
        """Album artist when tagged, else the track artist."""
        name = normalize_artist_name(metadata.album_artist or metadata.artist)
        return name or UNKNOWN_ARTIST

    def _album_title(self, metadata: AudioMetadata) -> str:
        return (metadata.album_title or "").strip() or UNKNOWN_ALBUM

    def _create_album(self, metadata: AudioMetadata, artist: Artist) -> Album:
        title = self._album_title(metadata)
        logger.debug(f"Creating album '{title}' for artist '{artist.name}'")
        return self._repository.create_album(
            Album(
                title=title,
                artist_id=artist.id,
                year=metadata.year,
                genre=metadata.genre,
            )
        )

    def _fill_album_details(self, album: Album, metadata: AudioMetadata) -> None:
        """Fill in details the album's earlier tracks did not carry."""
        if album.year is None and metadata.year:
            album.year = metadata.year
        if album.genre is None and metadata.genre:
            album.genre = metadata.genre

    def _store_artwork(self, album: Album, file_path: Path) -> None:
        """Save the file's embedded artwork as the album cover, once per album."""
        if self._artwork is None or self._artwork_dir is None:
            return

        cover = self._artwork.extract(file_path)
        if cover is None:
            return

        destination = self._artwork_dir / f"{album.id}{cover.file_extension}"
        try:
            self._artwork_dir.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(cover.data)
        except OSError as e:
            logger.warning(f"Could not save artwork for album '{album.title}': {e}")
            return

        album.artwork_path = str(destination)
        try:
            self._repository.update_album(album)
        except Exception as e:
            album.artwork_path = None
            logger.warning(f"Could not record artwork for album '{album.title}': {e}")
