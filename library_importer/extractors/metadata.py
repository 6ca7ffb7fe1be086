"""Audio metadata extraction using TinyTag and mutagen.

TinyTag provides the generic pass over the common tag set. mutagen then
reads the container-specific tags (ID3 frames, MP4 atoms, Vorbis comments)
and only fills fields the generic pass left empty.
"""

import logging
import re
from pathlib import Path
from typing import Any

from mutagen import File as MutagenFile
from mutagen.id3 import ID3
from mutagen.mp4 import MP4Tags
from tinytag import TinyTag

from ..errors import MetadataExtractionError
from ..models.track import AudioMetadata
from ..utils.identifiers import extract_year, parse_position

logger = logging.getLogger(__name__)

ID3_FRAMES = {
    "title": ("TIT2",),
    "artist": ("TPE1",),
    "album_title": ("TALB",),
    "album_artist": ("TPE2",),
    "track_number": ("TRCK",),
    "disc_number": ("TPOS",),
    "year": ("TDRC", "TYER", "TDOR"),
    "genre": ("TCON",),
}

MP4_ATOMS = {
    "title": ("©nam",),
    "artist": ("©ART",),
    "album_title": ("©alb",),
    "album_artist": ("aART",),
    "track_number": ("trkn",),
    "disc_number": ("disk",),
    "year": ("©day",),
    "genre": ("©gen",),
}

VORBIS_KEYS = {
    "title": ("title",),
    "artist": ("artist",),
    "album_title": ("album",),
    "album_artist": ("albumartist", "album artist"),
    "track_number": ("tracknumber",),
    "disc_number": ("discnumber",),
    "year": ("date", "year", "originaldate"),
    "genre": ("genre",),
}


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _merge_missing(target: dict[str, Any], source: dict[str, Any]) -> None:
    """Copy values from source into target only where target has none."""
    for key, value in source.items():
        if _is_empty(value):
            continue
        if _is_empty(target.get(key)):
            target[key] = value


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class MetadataExtractor:
    """Extracts metadata from audio files."""

    def extract(self, file_path: Path) -> AudioMetadata:
        """Extract metadata from an audio file.

        Raises:
            MetadataExtractionError: if the file cannot be read or its
                duration cannot be determined.
        """
        try:
            file_size = file_path.stat().st_size
        except OSError as e:
            raise MetadataExtractionError(file_path, e.strerror or str(e)) from e

        fields: dict[str, Any] = {}
        _merge_missing(fields, self._read_generic(file_path))
        _merge_missing(fields, self._read_format_specific(file_path))
        self._apply_fallbacks(fields, file_path)

        duration = fields.get("duration")
        if not isinstance(duration, (int, float)) or duration <= 0:
            raise MetadataExtractionError(file_path, "duration could not be determined")

        return AudioMetadata(
            title=fields.get("title"),
            artist=fields.get("artist"),
            album_title=fields.get("album_title"),
            album_artist=fields.get("album_artist"),
            track_number=fields.get("track_number"),
            disc_number=fields.get("disc_number"),
            year=fields.get("year"),
            genre=fields.get("genre"),
            duration=float(duration),
            format=file_path.suffix.lstrip(".").lower(),
            bitrate=fields.get("bitrate"),
            sample_rate=fields.get("sample_rate"),
            channels=fields.get("channels"),
            file_size=file_size,
        )

    def _read_generic(self, file_path: Path) -> dict[str, Any]:
        """Read the common tag set and stream info with TinyTag."""
        try:
            tag = TinyTag.get(str(file_path))
        except Exception as e:
            logger.debug(f"TinyTag could not read {file_path.name}: {e}")
            return {}

        return {
            "title": _clean_text(tag.title),
            "artist": _clean_text(tag.artist),
            "album_title": _clean_text(tag.album),
            "album_artist": _clean_text(tag.albumartist),
            "track_number": parse_position(tag.track),
            "disc_number": parse_position(tag.disc),
            "year": extract_year(_clean_text(tag.year)),
            "genre": _clean_text(tag.genre),
            "duration": float(tag.duration) if tag.duration else None,
            "bitrate": int(round(tag.bitrate)) if tag.bitrate else None,
            "sample_rate": int(tag.samplerate) if tag.samplerate else None,
            "channels": int(tag.channels) if tag.channels else None,
        }

    def _read_format_specific(self, file_path: Path) -> dict[str, Any]:
        """Read container-specific tags and stream info with mutagen."""
        try:
            audio = MutagenFile(file_path)
        except Exception as e:
            logger.debug(f"mutagen could not read {file_path.name}: {e}")
            return {}

        if audio is None:
            return {}

        fields: dict[str, Any] = {}

        info = getattr(audio, "info", None)
        length = getattr(info, "length", None)
        if isinstance(length, (int, float)) and length > 0:
            fields["duration"] = float(length)
        bitrate = getattr(info, "bitrate", None)
        if isinstance(bitrate, (int, float)) and bitrate > 0:
            fields["bitrate"] = int(bitrate // 1000)
        sample_rate = getattr(info, "sample_rate", None)
        if isinstance(sample_rate, int) and sample_rate > 0:
            fields["sample_rate"] = sample_rate
        channels = getattr(info, "channels", None)
        if isinstance(channels, int) and channels > 0:
            fields["channels"] = channels

        tags = getattr(audio, "tags", None)
        if not tags:
            return fields

        if isinstance(tags, ID3):
            raw = self._read_id3(tags)
        elif isinstance(tags, MP4Tags):
            raw = self._read_keyed(tags, MP4_ATOMS)
        else:
            raw = self._read_keyed(tags, VORBIS_KEYS)

        fields.update(
            {
                "title": _clean_text(raw.get("title")),
                "artist": _clean_text(raw.get("artist")),
                "album_title": _clean_text(raw.get("album_title")),
                "album_artist": _clean_text(raw.get("album_artist")),
                "track_number": parse_position(raw.get("track_number")),
                "disc_number": parse_position(raw.get("disc_number")),
                "year": extract_year(_clean_text(raw.get("year"))),
                "genre": _clean_text(raw.get("genre")),
            }
        )
        return fields

    def _read_id3(self, tags: ID3) -> dict[str, Any]:
        """Read text frames from ID3 tags."""
        values: dict[str, Any] = {}
        for field_name, frame_ids in ID3_FRAMES.items():
            for frame_id in frame_ids:
                frame = tags.get(frame_id)
                if frame is None:
                    continue
                # TCON resolves numeric genre references like "(17)"
                if frame_id == "TCON" and getattr(frame, "genres", None):
                    values[field_name] = frame.genres[0]
                    break
                if frame.text:
                    values[field_name] = str(frame.text[0])
                    break
        return values

    def _read_keyed(self, tags: Any, key_map: dict[str, tuple[str, ...]]) -> dict[str, Any]:
        """Read list-valued tags (MP4 atoms, Vorbis comments)."""
        values: dict[str, Any] = {}
        for field_name, keys in key_map.items():
            for key in keys:
                try:
                    value = tags.get(key)
                except (KeyError, ValueError):
                    value = None
                if not value:
                    continue
                values[field_name] = value[0] if isinstance(value, list) else value
                break
        return values

    def _apply_fallbacks(self, fields: dict[str, Any], file_path: Path) -> None:
        """Apply fallback extraction from the file name."""
        if _is_empty(fields.get("title")):
            fields["title"] = file_path.stem

        # Track number from filename (e.g., "01 Song Name.mp3")
        if fields.get("track_number") is None:
            match = re.match(r"^(\d{1,3})[\s.\-_]+", file_path.name)
            if match and int(match.group(1)) > 0:
                fields["track_number"] = int(match.group(1))
