"""Track data models."""

from dataclasses import dataclass


@dataclass
class AudioMetadata:
    """Metadata extracted from an audio file using TinyTag and mutagen."""

    duration: float  # seconds
    file_size: int  # bytes
    title: str | None = None
    artist: str | None = None
    album_title: str | None = None
    album_artist: str | None = None
    track_number: int | None = None
    disc_number: int | None = None
    year: int | None = None
    genre: str | None = None
    format: str = ""
    bitrate: int | None = None  # kBits/s
    sample_rate: int | None = None  # Hz
    channels: int | None = None
