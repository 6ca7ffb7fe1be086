"""Shared fixtures for library importer tests."""

import wave
from pathlib import Path

import pytest

from library_importer.config import Config, ImportConfig, PathConfig
from library_importer.errors import MetadataExtractionError
from library_importer.models.catalog import Library
from library_importer.models.track import AudioMetadata
from library_importer.services.repository import InMemoryCatalogRepository


def write_wav(path: Path, seconds: float = 1.0, sample_rate: int = 8000) -> Path:
    """Write a silent mono 16-bit WAV file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with wave.open(str(path), "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(b"\x00\x00" * int(seconds * sample_rate))
    return path


class StubExtractor:
    """Metadata extractor that derives tags from the file name.

    Files named "<artist> - <album> - <title>.ext" get those tags; files
    with "corrupt" in the name fail extraction.
    """

    def __init__(self, duration: float = 180.0) -> None:
        self.duration = duration
        self.calls: list[Path] = []

    def extract(self, file_path: Path) -> AudioMetadata:
        self.calls.append(file_path)
        if "corrupt" in file_path.name:
            raise MetadataExtractionError(file_path, "corrupt container")

        parts = [part.strip() for part in file_path.stem.split(" - ")]
        if len(parts) == 3:
            artist, album, title = parts
        else:
            artist, album, title = None, None, file_path.stem
        return AudioMetadata(
            duration=self.duration,
            file_size=file_path.stat().st_size if file_path.exists() else 0,
            title=title,
            artist=artist,
            album_title=album,
            format=file_path.suffix.lstrip(".").lower(),
        )


@pytest.fixture
def make_wav(tmp_path):
    """Factory writing WAV files below tmp_path."""

    def _make(name: str, seconds: float = 1.0) -> Path:
        return write_wav(tmp_path / name, seconds)

    return _make


@pytest.fixture
def make_file(tmp_path):
    """Factory writing arbitrary files below tmp_path."""

    def _make(name: str, content: bytes = b"not really audio") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    return _make


@pytest.fixture
def config(tmp_path):
    """Config with every path inside tmp_path."""
    return Config(
        paths=PathConfig(
            managed_root=tmp_path / "managed",
            catalog_file=tmp_path / "catalog.json",
            artwork_dir=tmp_path / "artwork",
        ),
        importing=ImportConfig(batch_size=10, save_artwork=False),
    )


@pytest.fixture
def repository():
    return InMemoryCatalogRepository()


@pytest.fixture
def library(repository):
    """An empty managed library stored in the repository."""
    return repository.create_library(Library(name="Test Library"))


@pytest.fixture
def stub_extractor():
    return StubExtractor()
