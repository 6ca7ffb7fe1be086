"""Import orchestration.

Runs each import job on its own worker thread and streams progress back to
the caller through a queue. Per-file failures are recorded in the job
summary; job-fatal errors end the stream.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Iterable, Iterator
from functools import partial
from pathlib import Path

from .config import Config
from .errors import (
    CatalogSaveError,
    EmptyImportError,
    FileImportError,
    ImportCancelledError,
    JobFatalError,
    LibraryNotFoundError,
    PathNotFoundError,
    RootNotDirectoryError,
    UnsupportedFormatError,
)
from .extractors.artwork import ArtworkExtractor
from .extractors.metadata import MetadataExtractor
from .models.catalog import Library, LibraryMode, Track
from .models.progress import FileError, ImportMode, ImportProgress, ImportStage, ImportSummary
from .processors.catalog import CatalogWriter
from .processors.duplicates import DuplicateDetector
from .processors.relocator import FileRelocator
from .processors.scanner import DirectoryScanner, is_supported_audio_file
from .processors.statistics import StatisticsAggregator
from .services.repository import CatalogRepository

logger = logging.getLogger(__name__)

# Marks the end of a job's progress stream
_END = object()


class ImportJob:
    """Handle on a running import.

    Iterating the job yields ImportProgress events as the worker emits them
    and raises the job's error, if any, once the stream ends. Events are
    queued from the moment the job is created, so none are missed by a
    caller that starts iterating late.
    """

    def __init__(self, library_id: str, mode: ImportMode) -> None:
        self.library_id = library_id
        self.mode = mode
        self.summary = ImportSummary()
        self._events: queue.Queue = queue.Queue()
        self._cancel_requested = threading.Event()
        self._thread: threading.Thread | None = None
        self._error: BaseException | None = None
        self._state = ImportStage.PREPARING

    @property
    def state(self) -> ImportStage:
        """Stage of the most recent event, or DONE/FAILED once finished."""
        return self._state

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested.is_set()

    def start(self, work: Callable[[ImportJob], None]) -> None:
        """Run work(job) on a dedicated worker thread."""
        if self._thread is not None:
            raise RuntimeError("Import job already started")
        self._thread = threading.Thread(
            target=self._run,
            args=(work,),
            name=f"import-{self.library_id}",
            daemon=True,
        )
        self._thread.start()

    def cancel(self) -> None:
        """Ask the worker to stop before the next file."""
        logger.info(f"Cancellation requested for import into {self.library_id}")
        self._cancel_requested.set()

    def emit(self, progress: ImportProgress) -> None:
        self._state = progress.stage
        self._events.put(progress)

    def wait(self, timeout: float | None = None) -> ImportSummary:
        """Block until the job finishes and return its summary.

        Raises:
            TimeoutError: if the job is still running after timeout seconds.
            JobFatalError: if the job failed.
        """
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                raise TimeoutError(f"Import into {self.library_id} still running")
        if self._error is not None:
            raise self._error
        return self.summary

    def __iter__(self) -> Iterator[ImportProgress]:
        while True:
            item = self._events.get()
            if item is _END:
                # Leave the marker for any later iteration
                self._events.put(_END)
                break
            yield item
        if self._error is not None:
            raise self._error

    def _run(self, work: Callable[[ImportJob], None]) -> None:
        try:
            work(self)
        except JobFatalError as e:
            logger.error(f"Import into {self.library_id} failed: {e}")
            self._error = e
            self._state = ImportStage.FAILED
        except Exception as e:
            logger.exception(f"Unexpected error during import into {self.library_id}: {e}")
            self._error = e
            self._state = ImportStage.FAILED
        else:
            self._state = ImportStage.DONE
        finally:
            self._events.put(_END)


class LibraryImporter:
    """Drives files through validate, dedup, extract, copy and catalog-write."""

    def __init__(
        self,
        repository: CatalogRepository,
        config: Config,
        extractor: MetadataExtractor | None = None,
        relocator: FileRelocator | None = None,
        on_track_imported: Callable[[Track], None] | None = None,
    ) -> None:
        """
        Args:
            repository: Catalog store shared with the caller.
            config: Paths and batching settings.
            extractor: Metadata extractor; defaults to the TinyTag/mutagen one.
            relocator: File relocator; defaults to one rooted at the managed root.
            on_track_imported: Called on the worker thread for every new track.
        """
        self._repository = repository
        self._config = config
        self._extractor = extractor or MetadataExtractor()
        self._relocator = relocator or FileRelocator(config.paths.managed_root)
        self._scanner = DirectoryScanner()
        self._duplicates = DuplicateDetector(repository)
        self._statistics = StatisticsAggregator(repository)

        save_artwork = config.importing.save_artwork
        self._writer = CatalogWriter(
            repository,
            artwork_extractor=ArtworkExtractor() if save_artwork else None,
            artwork_dir=config.paths.artwork_dir if save_artwork else None,
            on_track_imported=on_track_imported,
        )

    def import_files(
        self,
        paths: Iterable[str | Path],
        library_id: str,
        mode: ImportMode = ImportMode.COPY_INTO_LIBRARY,
    ) -> ImportJob:
        """Start importing an explicit list of files into a library.

        In copy mode files are copied into managed storage; otherwise the
        tracks point at the files where they are.
        """
        candidates = [Path(p).expanduser().resolve() for p in paths]
        job = ImportJob(library_id, mode)
        job.start(partial(self._run_file_import, candidates=candidates))
        return job

    def point_at_directory(self, directory: str | Path, library_id: str) -> ImportJob:
        """Start indexing every file below a directory in place.

        The library becomes an external library rooted at the directory.
        """
        root = Path(directory).expanduser().resolve()
        job = ImportJob(library_id, ImportMode.POINT_AT_EXTERNAL_DIRECTORY)
        job.start(partial(self._run_directory_import, root=root))
        return job

    def _require_library(self, library_id: str) -> Library:
        library = self._repository.get_library(library_id)
        if library is None:
            raise LibraryNotFoundError(library_id)
        return library

    def _run_file_import(self, job: ImportJob, candidates: list[Path]) -> None:
        library = self._require_library(job.library_id)
        if not candidates:
            raise EmptyImportError()

        logger.info(
            f"Importing {len(candidates)} files into '{library.name}' ({job.mode.value})"
        )
        copy = job.mode is ImportMode.COPY_INTO_LIBRARY
        self._process(job, library, candidates, copy=copy)

    def _run_directory_import(self, job: ImportJob, root: Path) -> None:
        library = self._require_library(job.library_id)
        if not root.exists():
            raise PathNotFoundError(root)
        if not root.is_dir():
            raise RootNotDirectoryError(root)

        job.emit(ImportProgress(0, 0, ImportStage.SCANNING))
        files = self._scanner.scan(root)
        logger.info(f"Found {len(files)} files under {root}")

        library.path = str(root)
        library.mode = LibraryMode.EXTERNAL
        self._repository.update_library(library)

        self._process(job, library, list(files), copy=False)

    def _process(self, job: ImportJob, library: Library, candidates: list[Path], copy: bool) -> None:
        summary = job.summary
        total = len(candidates)
        summary.total_files = total
        batch_size = self._config.importing.batch_size
        unsaved = 0

        job.emit(ImportProgress(0, total, ImportStage.PREPARING))

        for index, path in enumerate(candidates):
            if job.cancel_requested:
                self._flush()
                raise ImportCancelledError(index, total)

            job.emit(ImportProgress(index, total, ImportStage.IMPORTING, path.name))
            try:
                track = self._import_one(job, library, path, index, total, copy)
            except UnsupportedFormatError as e:
                logger.info(f"Skipping {path.name}: {e}")
                summary.invalid_files_skipped += 1
            except FileImportError as e:
                logger.warning(f"Failed to import {path.name}: {e}")
                summary.failed += 1
                summary.errors.append(FileError(str(path), e.step, str(e)))
            else:
                if track is None:
                    summary.skipped_duplicates += 1
                else:
                    summary.imported += 1
                    unsaved += 1
                    if unsaved >= batch_size:
                        self._flush()
                        unsaved = 0

            summary.files_processed = index + 1

        self._flush()

        self._statistics.refresh_album_totals(library)
        library.update_last_scanned()
        self._repository.update_library(library)
        self._flush()

        job.emit(ImportProgress(total, total, ImportStage.DONE))
        logger.info(f"Import into '{library.name}' complete: {summary.describe()}")

    def _import_one(
        self,
        job: ImportJob,
        library: Library,
        path: Path,
        index: int,
        total: int,
        copy: bool,
    ) -> Track | None:
        """Run one file through the pipeline. Returns None for duplicates."""
        if not is_supported_audio_file(path):
            raise UnsupportedFormatError(path)

        existing = self._duplicates.find_duplicate(path, library)
        if existing is not None:
            logger.debug(f"{path.name} already in library as {existing.file_path}")
            return None

        job.emit(ImportProgress(index, total, ImportStage.EXTRACTING_METADATA, path.name))
        metadata = self._extractor.extract(path)

        file_path = path
        if copy:
            job.emit(ImportProgress(index, total, ImportStage.COPYING, path.name))
            file_path = self._relocator.relocate(path, library)

        return self._writer.write(metadata, file_path, library)

    def _flush(self) -> None:
        try:
            flushed = self._repository.save()
        except Exception as e:
            raise CatalogSaveError(str(e)) from e
        if flushed:
            logger.debug(f"Saved {flushed} catalog changes")
