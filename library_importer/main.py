#!/usr/bin/env python3
"""
Music Library Importer

Imports audio files into a local music library catalog, either by copying
them into managed storage or by indexing an external directory in place.
"""

import argparse
import logging
import sys
from pathlib import Path

from tqdm import tqdm

from .config import Config, configure_logging
from .errors import LibraryImportError
from .importer import ImportJob, LibraryImporter
from .models.catalog import Library
from .models.progress import ImportMode, ImportSummary
from .processors.statistics import StatisticsAggregator
from .services.repository import CatalogRepository, JsonCatalogRepository
from .utils.durations import format_duration

logger = logging.getLogger(__name__)


def get_or_create_library(repository: CatalogRepository, name: str) -> Library:
    """Look up a library by name, creating it on first use."""
    library = repository.find_library_by_name(name)
    if library is not None:
        return library

    logger.info(f"Creating library '{name}'")
    library = repository.create_library(Library(name=name))
    repository.save()
    return library


def run_job(job: ImportJob) -> ImportSummary:
    """Render a job's progress stream as a progress bar and return its summary."""
    with tqdm(total=0, desc="Preparing", unit="file") as bar:
        for progress in job:
            if bar.total != progress.total_files:
                bar.total = progress.total_files
            bar.update(progress.files_processed - bar.n)
            bar.set_description(progress.stage.value.replace("_", " ").capitalize())
            bar.set_postfix_str(progress.current_file or "")
    return job.wait()


def print_summary(summary: ImportSummary, library: Library) -> None:
    """Print the outcome of an import, including per-file errors."""
    print(f"\nComplete!")
    print(f"  Imported: {summary.imported} files")
    print(f"  Skipped (already in library): {summary.skipped_duplicates} files")
    if summary.invalid_files_skipped:
        print(f"  Skipped (unsupported format): {summary.invalid_files_skipped} files")
    if summary.failed:
        print(f"  Failed: {summary.failed} files")
        for error in summary.errors:
            print(f"    {error.path} [{error.step.value}]: {error.message}")
    print(f"  Library: {library.name} ({library.mode.value})")


def print_statistics(repository: CatalogRepository, library: Library) -> None:
    stats = StatisticsAggregator(repository).compute(library)
    print(f"{library.name} ({library.mode.value})")
    if library.path:
        print(f"  Path: {library.path}")
    print(f"  Artists: {stats.artist_count}")
    print(f"  Albums: {stats.album_count}")
    print(f"  Tracks: {stats.track_count}")
    print(f"  Duration: {stats.duration_formatted} ({format_duration(stats.total_duration)})")
    print(f"  Size: {stats.total_size_bytes / (1024 * 1024):.1f} MB")
    if stats.last_scanned_at:
        print(f"  Last scanned: {stats.last_scanned_at:%Y-%m-%d %H:%M}")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Import music into a local library catalog"
    )
    parser.add_argument(
        "--catalog",
        type=Path,
        help="Catalog file (default: LIBRARY_CATALOG_FILE)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import", help="Import audio files")
    import_parser.add_argument("files", nargs="+", type=Path, help="Audio files to import")
    import_parser.add_argument("--library", "-l", required=True, help="Target library name")
    import_parser.add_argument(
        "--in-place",
        action="store_true",
        help="Index files where they are instead of copying them",
    )

    point_parser = subparsers.add_parser(
        "point", help="Index an external directory without copying"
    )
    point_parser.add_argument("directory", type=Path, help="Directory to scan")
    point_parser.add_argument("--library", "-l", required=True, help="Target library name")

    stats_parser = subparsers.add_parser("stats", help="Show library statistics")
    stats_parser.add_argument(
        "--library", "-l", help="Library name (default: all libraries)"
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    configure_logging(verbose=args.verbose)

    try:
        config = Config.from_environment()
        if args.catalog:
            config.paths.catalog_file = args.catalog.expanduser()
        config.validate()
        repository = JsonCatalogRepository(config.paths.catalog_file)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if args.command == "stats":
        if args.library:
            library = repository.find_library_by_name(args.library)
            if library is None:
                print(f"Error: no library named '{args.library}'")
                return 1
            print_statistics(repository, library)
        else:
            libraries = repository.list_libraries()
            if not libraries:
                print("No libraries yet.")
            for library in libraries:
                print_statistics(repository, library)
        return 0

    library = get_or_create_library(repository, args.library)
    importer = LibraryImporter(repository, config)

    if args.command == "point":
        print(f"Scanning {args.directory} into library '{library.name}'...")
        job = importer.point_at_directory(args.directory, library.id)
    else:
        mode = (
            ImportMode.POINT_AT_EXTERNAL_DIRECTORY
            if args.in_place
            else ImportMode.COPY_INTO_LIBRARY
        )
        print(f"Importing {len(args.files)} files into library '{library.name}'...")
        job = importer.import_files(args.files, library.id, mode)

    try:
        summary = run_job(job)
    except LibraryImportError as e:
        print(f"Error: {e}")
        return 1

    print_summary(summary, library)
    return 0


if __name__ == "__main__":
    sys.exit(main())
