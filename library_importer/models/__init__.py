"""Data models for the catalog, extracted metadata and import progress."""

from .track import AudioMetadata
from .catalog import Album, Artist, Library, LibraryMode, LibraryStatistics, Track
from .progress import (
    FileError,
    ImportMode,
    ImportProgress,
    ImportStage,
    ImportSummary,
    PipelineStep,
)

__all__ = [
    "AudioMetadata",
    "Album",
    "Artist",
    "Library",
    "LibraryMode",
    "LibraryStatistics",
    "Track",
    "FileError",
    "ImportMode",
    "ImportProgress",
    "ImportStage",
    "ImportSummary",
    "PipelineStep",
]
