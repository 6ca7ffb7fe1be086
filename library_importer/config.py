"""Configuration management for the library importer."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


# Supported audio formats
SUPPORTED_FORMATS = {".mp3", ".m4a", ".flac", ".wav", ".aac"}

# Fallback names for records with missing tags
UNKNOWN_ARTIST = "Unknown Artist"
UNKNOWN_ALBUM = "Unknown Album"

DEFAULT_BATCH_SIZE = 10


def _default_base_dir() -> Path:
    return Path.home() / "Music" / "Library"


@dataclass
class PathConfig:
    """File path configuration."""

    managed_root: Path
    catalog_file: Path
    artwork_dir: Path | None = None

    def __post_init__(self) -> None:
        if self.artwork_dir is None:
            self.artwork_dir = self.managed_root.parent / "artwork"

    def validate(self) -> None:
        """Validate that configured paths are usable."""
        if self.managed_root.exists() and not self.managed_root.is_dir():
            raise ValueError(f"Managed root is not a directory: {self.managed_root}")
        if self.catalog_file.exists() and self.catalog_file.is_dir():
            raise ValueError(f"Catalog file is a directory: {self.catalog_file}")


@dataclass
class ImportConfig:
    """Import pipeline tuning."""

    batch_size: int = DEFAULT_BATCH_SIZE  # tracks per repository flush
    save_artwork: bool = True


@dataclass
class Config:
    """Main configuration container."""

    paths: PathConfig
    importing: ImportConfig = field(default_factory=ImportConfig)

    @classmethod
    def from_environment(cls, env_path: Path | None = None) -> "Config":
        """Load configuration from environment variables."""
        if env_path:
            load_dotenv(env_path)
        else:
            load_dotenv()

        base_dir = _default_base_dir()
        managed_root = Path(
            os.getenv("LIBRARY_MANAGED_ROOT", str(base_dir / "music"))
        ).expanduser()
        catalog_file = Path(
            os.getenv("LIBRARY_CATALOG_FILE", str(base_dir / "catalog.json"))
        ).expanduser()
        artwork_dir = os.getenv("LIBRARY_ARTWORK_DIR")

        batch_size_raw = os.getenv("IMPORT_BATCH_SIZE", str(DEFAULT_BATCH_SIZE))
        try:
            batch_size = int(batch_size_raw)
        except ValueError:
            raise ValueError(f"IMPORT_BATCH_SIZE must be an integer, got {batch_size_raw!r}")

        return cls(
            paths=PathConfig(
                managed_root=managed_root,
                catalog_file=catalog_file,
                artwork_dir=Path(artwork_dir).expanduser() if artwork_dir else None,
            ),
            importing=ImportConfig(
                batch_size=batch_size,
                save_artwork=os.getenv("IMPORT_SAVE_ARTWORK", "true").lower() == "true",
            ),
        )

    def validate(self) -> None:
        """Validate the configuration."""
        self.paths.validate()
        if self.importing.batch_size < 1:
            raise ValueError("IMPORT_BATCH_SIZE must be at least 1")


def configure_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
