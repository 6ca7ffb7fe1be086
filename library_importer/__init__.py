"""Music library import core.

Scans directories, validates and deduplicates audio files, extracts their
metadata and writes Artist/Album/Track records into a library catalog.
"""

from .config import Config
from .errors import FileImportError, JobFatalError, LibraryImportError
from .importer import ImportJob, LibraryImporter
from .models import ImportMode, ImportProgress, ImportStage, ImportSummary, Library
from .services.repository import (
    CatalogRepository,
    InMemoryCatalogRepository,
    JsonCatalogRepository,
)

__version__ = "0.1.0"

__all__ = [
    "CatalogRepository",
    "Config",
    "FileImportError",
    "ImportJob",
    "ImportMode",
    "ImportProgress",
    "ImportStage",
    "ImportSummary",
    "InMemoryCatalogRepository",
    "JobFatalError",
    "JsonCatalogRepository",
    "Library",
    "LibraryImportError",
    "LibraryImporter",
]
