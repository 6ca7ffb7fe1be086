"""Embedded cover art extraction from audio files."""

import logging
from dataclasses import dataclass
from pathlib import Path

from mutagen import File as MutagenFile
from mutagen.id3 import ID3
from mutagen.mp4 import MP4Cover, MP4Tags

logger = logging.getLogger(__name__)


@dataclass
class CoverArt:
    """Cover art bytes pulled out of an audio container."""

    data: bytes
    mime_type: str = "image/jpeg"

    @property
    def file_extension(self) -> str:
        """File extension matching the image type."""
        return ".png" if self.mime_type == "image/png" else ".jpg"


class ArtworkExtractor:
    """Extracts the first embedded picture from an audio file."""

    def extract(self, file_path: Path) -> CoverArt | None:
        """Return the embedded cover art, or None if the file has none."""
        try:
            audio = MutagenFile(file_path)
        except Exception as e:
            logger.debug(f"Could not open {file_path.name} for artwork: {e}")
            return None

        if audio is None:
            return None

        # FLAC picture blocks live on the file object, not in its tags
        pictures = getattr(audio, "pictures", None)
        if pictures:
            picture = pictures[0]
            return CoverArt(data=picture.data, mime_type=picture.mime or "image/jpeg")

        tags = getattr(audio, "tags", None)
        if not tags:
            return None

        if isinstance(tags, ID3):
            frames = tags.getall("APIC")
            if frames:
                return CoverArt(data=frames[0].data, mime_type=frames[0].mime or "image/jpeg")
        elif isinstance(tags, MP4Tags):
            covers = tags.get("covr")
            if covers:
                cover = covers[0]
                mime = (
                    "image/png"
                    if getattr(cover, "imageformat", None) == MP4Cover.FORMAT_PNG
                    else "image/jpeg"
                )
                return CoverArt(data=bytes(cover), mime_type=mime)

        return None
