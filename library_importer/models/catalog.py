"""Catalog data models."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class LibraryMode(str, Enum):
    """How a library stores its files."""

    MANAGED = "managed"  # files copied into the managed storage tree
    EXTERNAL = "external"  # files indexed in place


@dataclass
class Library:
    """A user's music library."""

    name: str
    path: str = ""
    mode: LibraryMode = LibraryMode.MANAGED
    id: str = field(default_factory=_new_id)
    last_scanned_at: datetime | None = None
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def update_last_scanned(self) -> None:
        """Stamp the library as scanned now."""
        self.last_scanned_at = _now()
        self.updated_at = self.last_scanned_at

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "mode": self.mode.value,
            "last_scanned_at": _format_timestamp(self.last_scanned_at),
            "created_at": _format_timestamp(self.created_at),
            "updated_at": _format_timestamp(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Library":
        return cls(
            id=data["id"],
            name=data["name"],
            path=data.get("path") or "",
            mode=LibraryMode(data.get("mode", LibraryMode.MANAGED.value)),
            last_scanned_at=_parse_timestamp(data.get("last_scanned_at")),
            created_at=_parse_timestamp(data.get("created_at")) or _now(),
            updated_at=_parse_timestamp(data.get("updated_at")) or _now(),
        )


@dataclass
class Artist:
    """Artist within a library."""

    name: str
    library_id: str
    sort_name: str = ""
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        if not self.sort_name:
            self.sort_name = self.name

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "sort_name": self.sort_name,
            "library_id": self.library_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Artist":
        return cls(
            id=data["id"],
            name=data["name"],
            sort_name=data.get("sort_name", ""),
            library_id=data["library_id"],
        )


@dataclass
class Album:
    """Album by an artist.

    track_count and total_duration are a running cache during imports; the
    statistics step recomputes them from the album's tracks.
    """

    title: str
    artist_id: str
    sort_title: str = ""
    year: int | None = None
    genre: str | None = None
    track_count: int = 0
    total_duration: float = 0.0
    artwork_path: str | None = None
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        if not self.sort_title:
            self.sort_title = self.title

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "sort_title": self.sort_title,
            "year": self.year,
            "genre": self.genre,
            "artist_id": self.artist_id,
            "track_count": self.track_count,
            "total_duration": self.total_duration,
            "artwork_path": self.artwork_path,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Album":
        return cls(
            id=data["id"],
            title=data["title"],
            sort_title=data.get("sort_title", ""),
            year=data.get("year"),
            genre=data.get("genre"),
            artist_id=data["artist_id"],
            track_count=data.get("track_count", 0),
            total_duration=data.get("total_duration", 0.0),
            artwork_path=data.get("artwork_path"),
        )


@dataclass
class Track:
    """A single audio file in the catalog."""

    title: str
    file_path: str
    duration: float
    format: str
    album_id: str
    bitrate: int = 0  # kBits/s, 0 = unknown
    sample_rate: int = 0  # Hz, 0 = unknown
    channels: int = 0
    track_number: int = 0
    disc_number: int = 1
    file_size: int = 0  # bytes
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_now)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "file_path": self.file_path,
            "duration": self.duration,
            "format": self.format,
            "bitrate": self.bitrate,
            "sample_rate": self.sample_rate,
            "channels": self.channels,
            "track_number": self.track_number,
            "disc_number": self.disc_number,
            "file_size": self.file_size,
            "album_id": self.album_id,
            "created_at": _format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Track":
        return cls(
            id=data["id"],
            title=data["title"],
            file_path=data["file_path"],
            duration=data["duration"],
            format=data.get("format", ""),
            bitrate=data.get("bitrate", 0),
            sample_rate=data.get("sample_rate", 0),
            channels=data.get("channels", 0),
            track_number=data.get("track_number", 0),
            disc_number=data.get("disc_number", 1),
            file_size=data.get("file_size", 0),
            album_id=data["album_id"],
            created_at=_parse_timestamp(data.get("created_at")) or _now(),
        )


@dataclass
class LibraryStatistics:
    """Library-wide totals, recomputed from the catalog tree."""

    artist_count: int = 0
    album_count: int = 0
    track_count: int = 0
    total_duration: float = 0.0  # seconds
    total_size_bytes: int = 0
    last_scanned_at: datetime | None = None

    @property
    def duration_formatted(self) -> str:
        """Total duration as "Xh Ym"."""
        hours = int(self.total_duration) // 3600
        minutes = (int(self.total_duration) % 3600) // 60
        return f"{hours}h {minutes}m"
