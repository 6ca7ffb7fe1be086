"""Import error taxonomy.

Job-fatal errors end an import job with a terminal failure. File errors
only abort the import of a single file; the job moves on to the next one.
"""

from pathlib import Path

from .models.progress import PipelineStep


class LibraryImportError(Exception):
    """Base class for all import errors."""


class JobFatalError(LibraryImportError):
    """Error that aborts the whole import job."""


class LibraryNotFoundError(JobFatalError):
    def __init__(self, library_id: str) -> None:
        super().__init__(f"Library not found: {library_id}")
        self.library_id = library_id


class PathNotFoundError(JobFatalError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"Path not found: {path}")
        self.path = path


class RootNotDirectoryError(JobFatalError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"Not a directory: {path}")
        self.path = path


class EmptyImportError(JobFatalError):
    def __init__(self) -> None:
        super().__init__("No files given to import")


class ImportCancelledError(JobFatalError):
    def __init__(self, files_processed: int, total_files: int) -> None:
        super().__init__(f"Import cancelled after {files_processed}/{total_files} files")
        self.files_processed = files_processed
        self.total_files = total_files


class FileImportError(LibraryImportError):
    """Error that aborts the import of one file.

    Subclasses set step to the pipeline step they fail in.
    """

    step: PipelineStep

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(message)
        self.path = path


class UnsupportedFormatError(FileImportError):
    step = PipelineStep.VALIDATE

    def __init__(self, path: Path) -> None:
        super().__init__(path, f"Unsupported format: {path.suffix or '(no extension)'}")


class MetadataExtractionError(FileImportError):
    step = PipelineStep.EXTRACT

    def __init__(self, path: Path, reason: str = "") -> None:
        message = f"Failed to extract metadata from: {path.name}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(path, message)


class FileCopyError(FileImportError):
    step = PipelineStep.COPY

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(path, f"Failed to copy file {path.name}: {reason}")


class CatalogWriteError(FileImportError):
    step = PipelineStep.CATALOG_WRITE

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(path, f"Failed to write catalog entry for {path.name}: {reason}")


class CatalogSaveError(JobFatalError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to save catalog: {reason}")
