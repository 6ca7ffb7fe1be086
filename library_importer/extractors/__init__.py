"""Extractor modules for audio metadata and artwork."""

from .metadata import MetadataExtractor
from .artwork import ArtworkExtractor, CoverArt

__all__ = ["MetadataExtractor", "ArtworkExtractor", "CoverArt"]
