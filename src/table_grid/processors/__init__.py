"""Table grid processors.

This module provides the processing stages of grid extraction. Each stage
is available both as a processor class driven by configuration and as a
plain function.
"""

# Base processor
from .base import BaseProcessor

# Image I/O
from .image_io import (
    load_image,
    decode_image,
    save_image,
    get_image_files,
    adjust_contrast,
    to_grayscale,
    prepare_image,
)

# Run scanning
from .run_scanner import (
    Axis,
    Run,
    ScanResult,
    RunScanner,
    scan_runs,
)

# Segment cleaning
from .segment_cleaner import (
    Segment,
    SegmentCleaner,
    clean_lines,
    collect_candidates,
    min_length_for,
)

# Line deduplication
from .line_dedup import (
    LineDeduplicator,
    deduplicate_lines,
)

# Grid assembly
from .grid_assembly import (
    CellRect,
    GridAssembler,
    assemble_cells,
    pair_lines,
)

# Visualization
from .visualization import (
    VisualizationProcessor,
    visualize_grid,
    grid_summary,
)

__all__ = [
    # Base
    "BaseProcessor",

    # Image I/O
    "load_image",
    "decode_image",
    "save_image",
    "get_image_files",
    "adjust_contrast",
    "to_grayscale",
    "prepare_image",

    # Run scanning
    "Axis",
    "Run",
    "ScanResult",
    "RunScanner",
    "scan_runs",

    # Segment cleaning
    "Segment",
    "SegmentCleaner",
    "clean_lines",
    "collect_candidates",
    "min_length_for",

    # Line deduplication
    "LineDeduplicator",
    "deduplicate_lines",

    # Grid assembly
    "CellRect",
    "GridAssembler",
    "assemble_cells",
    "pair_lines",

    # Visualization
    "VisualizationProcessor",
    "visualize_grid",
    "grid_summary",
]
