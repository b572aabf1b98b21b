"""Ruled table grid detection and cell text extraction."""

__version__ = "1.0.0"
__author__ = "Table Grid Team"

from .pipeline import (
    TableExtractor,
    TableExtraction,
    GridDetection,
    CellReading,
    extract_table_image,
    extract_table_path,
    extract_table_bytes,
)

__all__ = [
    "TableExtractor",
    "TableExtraction",
    "GridDetection",
    "CellReading",
    "extract_table_image",
    "extract_table_path",
    "extract_table_bytes",
]
