"""Catalog repository: the unit-of-work boundary around the catalog store."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path

from ..models.catalog import Album, Artist, Library, Track
from ..utils.identifiers import get_grouping_key

logger = logging.getLogger(__name__)

CATALOG_VERSION = 1


class CatalogRepository(ABC):
    """Storage-agnostic access to libraries and their artist/album/track tree.

    Records returned by create_* are visible to later find_* calls right
    away; save() makes everything created since the previous save durable.
    """

    @abstractmethod
    def get_library(self, library_id: str) -> Library | None: ...

    @abstractmethod
    def find_library_by_name(self, name: str) -> Library | None: ...

    @abstractmethod
    def list_libraries(self) -> list[Library]: ...

    @abstractmethod
    def create_library(self, library: Library) -> Library: ...

    @abstractmethod
    def update_library(self, library: Library) -> None: ...

    @abstractmethod
    def find_artist(self, name: str, library: Library) -> Artist | None: ...

    @abstractmethod
    def create_artist(self, artist: Artist) -> Artist: ...

    @abstractmethod
    def find_album(self, title: str, artist: Artist) -> Album | None: ...

    @abstractmethod
    def create_album(self, album: Album) -> Album: ...

    @abstractmethod
    def update_album(self, album: Album) -> None: ...

    @abstractmethod
    def create_track(self, track: Track) -> Track: ...

    @abstractmethod
    def remove_artist(self, artist: Artist) -> None: ...

    @abstractmethod
    def remove_album(self, album: Album) -> None: ...

    @abstractmethod
    def remove_track(self, track: Track) -> None: ...

    @abstractmethod
    def find_track_by_file_name(self, file_name: str, library: Library) -> Track | None: ...

    @abstractmethod
    def artists_for(self, library: Library) -> list[Artist]: ...

    @abstractmethod
    def albums_for(self, artist: Artist) -> list[Album]: ...

    @abstractmethod
    def tracks_for(self, album: Album) -> list[Track]: ...

    @abstractmethod
    def save(self) -> int:
        """Flush pending changes. Returns the number of records flushed."""


class InMemoryCatalogRepository(CatalogRepository):
    """Catalog held in dictionaries, guarded by a lock."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._libraries: dict[str, Library] = {}
        self._artists: dict[str, Artist] = {}
        self._albums: dict[str, Album] = {}
        self._tracks: dict[str, Track] = {}
        # (library_id, name key) -> artist id, (artist_id, title key) -> album id
        self._artist_index: dict[tuple[str, str], str] = {}
        self._album_index: dict[tuple[str, str], str] = {}
        self._artists_by_library: dict[str, list[str]] = {}
        self._albums_by_artist: dict[str, list[str]] = {}
        self._tracks_by_album: dict[str, list[str]] = {}
        self._pending: list[object] = []

    @property
    def pending_count(self) -> int:
        """Records changed since the last save."""
        with self._lock:
            return len(self._pending)

    def get_library(self, library_id: str) -> Library | None:
        with self._lock:
            return self._libraries.get(library_id)

    def find_library_by_name(self, name: str) -> Library | None:
        key = get_grouping_key(name)
        with self._lock:
            for library in self._libraries.values():
                if get_grouping_key(library.name) == key:
                    return library
        return None

    def list_libraries(self) -> list[Library]:
        with self._lock:
            return sorted(self._libraries.values(), key=lambda lib: lib.name.casefold())

    def create_library(self, library: Library) -> Library:
        with self._lock:
            self._libraries[library.id] = library
            self._artists_by_library.setdefault(library.id, [])
            self._pending.append(library)
        return library

    def update_library(self, library: Library) -> None:
        with self._lock:
            self._libraries[library.id] = library
            self._pending.append(library)

    def find_artist(self, name: str, library: Library) -> Artist | None:
        with self._lock:
            artist_id = self._artist_index.get((library.id, get_grouping_key(name)))
            return self._artists.get(artist_id) if artist_id else None

    def create_artist(self, artist: Artist) -> Artist:
        with self._lock:
            self._add_artist(artist)
            self._pending.append(artist)
        return artist

    def find_album(self, title: str, artist: Artist) -> Album | None:
        with self._lock:
            album_id = self._album_index.get((artist.id, get_grouping_key(title)))
            return self._albums.get(album_id) if album_id else None

    def create_album(self, album: Album) -> Album:
        with self._lock:
            self._add_album(album)
            self._pending.append(album)
        return album

    def update_album(self, album: Album) -> None:
        with self._lock:
            self._albums[album.id] = album
            self._pending.append(album)

    def create_track(self, track: Track) -> Track:
        with self._lock:
            self._add_track(track)
            self._pending.append(track)
        return track

    def remove_artist(self, artist: Artist) -> None:
        """Remove an artist. Its albums must already be removed."""
        with self._lock:
            if self._artists.pop(artist.id, None) is None:
                return
            key = (artist.library_id, get_grouping_key(artist.name))
            if self._artist_index.get(key) == artist.id:
                del self._artist_index[key]
            siblings = self._artists_by_library.get(artist.library_id, [])
            if artist.id in siblings:
                siblings.remove(artist.id)
            self._albums_by_artist.pop(artist.id, None)
            self._pending.append(artist)

    def remove_album(self, album: Album) -> None:
        """Remove an album. Its tracks must already be removed."""
        with self._lock:
            if self._albums.pop(album.id, None) is None:
                return
            key = (album.artist_id, get_grouping_key(album.title))
            if self._album_index.get(key) == album.id:
                del self._album_index[key]
            siblings = self._albums_by_artist.get(album.artist_id, [])
            if album.id in siblings:
                siblings.remove(album.id)
            self._tracks_by_album.pop(album.id, None)
            self._pending.append(album)

    def remove_track(self, track: Track) -> None:
        with self._lock:
            if self._tracks.pop(track.id, None) is None:
                return
            siblings = self._tracks_by_album.get(track.album_id, [])
            if track.id in siblings:
                siblings.remove(track.id)
            self._pending.append(track)

    def find_track_by_file_name(self, file_name: str, library: Library) -> Track | None:
        """Find a track in the library whose stored path ends with file_name."""
        with self._lock:
            for artist_id in self._artists_by_library.get(library.id, []):
                for album_id in self._albums_by_artist.get(artist_id, []):
                    for track_id in self._tracks_by_album.get(album_id, []):
                        track = self._tracks[track_id]
                        if track.file_path.endswith(file_name):
                            return track
        return None

    def artists_for(self, library: Library) -> list[Artist]:
        with self._lock:
            return [self._artists[i] for i in self._artists_by_library.get(library.id, [])]

    def albums_for(self, artist: Artist) -> list[Album]:
        with self._lock:
            return [self._albums[i] for i in self._albums_by_artist.get(artist.id, [])]

    def tracks_for(self, album: Album) -> list[Track]:
        with self._lock:
            return [self._tracks[i] for i in self._tracks_by_album.get(album.id, [])]

    def save(self) -> int:
        with self._lock:
            flushed = len(self._pending)
            self._pending.clear()
        return flushed

    def _add_artist(self, artist: Artist) -> None:
        self._artists[artist.id] = artist
        self._artist_index[(artist.library_id, get_grouping_key(artist.name))] = artist.id
        self._artists_by_library.setdefault(artist.library_id, []).append(artist.id)
        self._albums_by_artist.setdefault(artist.id, [])

    def _add_album(self, album: Album) -> None:
        self._albums[album.id] = album
        self._album_index[(album.artist_id, get_grouping_key(album.title))] = album.id
        self._albums_by_artist.setdefault(album.artist_id, []).append(album.id)
        self._tracks_by_album.setdefault(album.id, [])

    def _add_track(self, track: Track) -> None:
        self._tracks[track.id] = track
        self._tracks_by_album.setdefault(track.album_id, []).append(track.id)


class JsonCatalogRepository(InMemoryCatalogRepository):
    """In-memory catalog persisted to a JSON file on every save.

    The file is replaced atomically, so an interrupted import leaves the
    catalog as of the last successful save.
    """

    def __init__(self, catalog_file: Path) -> None:
        super().__init__()
        self._catalog_file = catalog_file
        if catalog_file.exists():
            self._load()

    def _load(self) -> None:
        """Load the catalog file into memory."""
        try:
            with open(self._catalog_file, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Catalog file is not valid JSON: {self._catalog_file}: {e}") from e

        try:
            for item in data.get("libraries", []):
                library = Library.from_dict(item)
                self._libraries[library.id] = library
                self._artists_by_library.setdefault(library.id, [])
            for item in data.get("artists", []):
                self._add_artist(Artist.from_dict(item))
            for item in data.get("albums", []):
                self._add_album(Album.from_dict(item))
            for item in data.get("tracks", []):
                self._add_track(Track.from_dict(item))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Catalog file is malformed: {self._catalog_file}: {e}") from e

        logger.debug(
            f"Loaded catalog from {self._catalog_file}: {len(self._libraries)} libraries, "
            f"{len(self._tracks)} tracks"
        )

    def to_dict(self) -> dict:
        """Convert the whole catalog to a JSON-serializable dictionary."""
        with self._lock:
            return {
                "version": CATALOG_VERSION,
                "libraries": [library.to_dict() for library in self._libraries.values()],
                "artists": [artist.to_dict() for artist in self._artists.values()],
                "albums": [album.to_dict() for album in self._albums.values()],
                "tracks": [track.to_dict() for track in self._tracks.values()],
            }

    def save(self) -> int:
        with self._lock:
            json_str = json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
            self._catalog_file.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self._catalog_file.name}.", dir=self._catalog_file.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(json_str)
                os.replace(tmp_path, self._catalog_file)
            except OSError:
                Path(tmp_path).unlink(missing_ok=True)
                raise
            return super().save()
