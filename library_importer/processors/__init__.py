"""Processor modules for the import pipeline stages."""

from .catalog import CatalogWriter
from .duplicates import DuplicateDetector
from .relocator import FileRelocator
from .scanner import DirectoryScan, DirectoryScanner, filter_supported, is_supported_audio_file
from .statistics import StatisticsAggregator

__all__ = [
    "CatalogWriter",
    "DirectoryScan",
    "DirectoryScanner",
    "DuplicateDetector",
    "FileRelocator",
    "StatisticsAggregator",
    "filter_supported",
    "is_supported_audio_file",
]
