"""Import job progress models."""

from dataclasses import dataclass, field
from enum import Enum


class ImportMode(str, Enum):
    """How files are handled during import."""

    COPY_INTO_LIBRARY = "copy_into_library"
    POINT_AT_EXTERNAL_DIRECTORY = "point_at_external_directory"


class ImportStage(str, Enum):
    """Stage of an import job, as reported in progress events."""

    PREPARING = "preparing"
    SCANNING = "scanning"
    IMPORTING = "importing"
    EXTRACTING_METADATA = "extracting_metadata"
    COPYING = "copying"
    DONE = "done"
    FAILED = "failed"


class PipelineStep(str, Enum):
    """Per-file processing step a file failed in."""

    VALIDATE = "validate"
    EXTRACT = "extract"
    COPY = "copy"
    CATALOG_WRITE = "catalog_write"


@dataclass(frozen=True)
class ImportProgress:
    """A single progress event from an import job."""

    files_processed: int
    total_files: int
    stage: ImportStage
    current_file: str | None = None

    @property
    def percentage(self) -> float:
        """Fraction of files processed, from 0.0 to 1.0."""
        if self.stage is ImportStage.DONE:
            return 1.0
        if self.total_files <= 0:
            return 0.0
        return min(1.0, self.files_processed / self.total_files)


@dataclass(frozen=True)
class FileError:
    """A per-file failure recorded during an import."""

    path: str
    step: PipelineStep
    message: str


@dataclass
class ImportSummary:
    """Aggregate outcome of an import job."""

    total_files: int = 0
    files_processed: int = 0
    imported: int = 0
    skipped_duplicates: int = 0
    invalid_files_skipped: int = 0
    failed: int = 0
    errors: list[FileError] = field(default_factory=list)

    def describe(self) -> str:
        """One-line summary distinguishing imported from skipped files."""
        parts = [f"{self.imported} imported"]
        if self.skipped_duplicates:
            parts.append(f"{self.skipped_duplicates} duplicates skipped")
        if self.invalid_files_skipped:
            parts.append(f"{self.invalid_files_skipped} invalid files skipped")
        if self.failed:
            parts.append(f"{self.failed} failed")
        return ", ".join(parts)
