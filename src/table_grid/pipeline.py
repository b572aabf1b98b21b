"""Table extraction pipeline and command line interface."""

import argparse
import csv
import io
import json
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np

from .config import Config, get_default_config, load_config
from .exceptions import RecognitionError, TableGridError
from .processors import (
    Axis,
    CellRect,
    GridAssembler,
    LineDeduplicator,
    RunScanner,
    Segment,
    SegmentCleaner,
    VisualizationProcessor,
    decode_image,
    get_image_files,
    grid_summary,
    load_image,
    prepare_image,
)
from .recognition import Recognition, TesseractRecognizer, TextRecognizer
from .utils.logging_utils import (
    ProcessingProgress,
    get_logger,
    log_processing_stats,
    setup_logging,
)

logger = get_logger(__name__)


@dataclass
class GridDetection:
    """Intermediate results of grid detection for one image."""

    width: int
    height: int
    vertical_candidates: List[Segment]
    horizontal_candidates: List[Segment]
    vertical_lines: List[Segment]
    horizontal_lines: List[Segment]
    cells: List[List[CellRect]]

    @property
    def column_positions(self) -> List[int]:
        return sorted(line.index for line in self.vertical_lines)

    @property
    def row_positions(self) -> List[int]:
        return sorted(line.index for line in self.horizontal_lines)

    @property
    def shape(self) -> List[int]:
        """Number of cells in every row."""
        return [len(row) for row in self.cells]


@dataclass
class CellReading:
    row: int
    column: int
    rect: CellRect
    text: str
    confidence: float


@dataclass
class TableExtraction:
    """Recognized table: the string matrix plus the geometry it came from."""

    grid: GridDetection
    readings: List[List[CellReading]] = field(default_factory=list)

    @property
    def rows(self) -> List[List[str]]:
        return [[reading.text for reading in row] for row in self.readings]

    def to_json(self) -> str:
        payload = {
            "rows": self.rows,
            "cells": [
                {
                    "row": reading.row,
                    "column": reading.column,
                    "x": reading.rect.x,
                    "y": reading.rect.y,
                    "width": reading.rect.width,
                    "height": reading.rect.height,
                    "text": reading.text,
                    "confidence": reading.confidence,
                }
                for row in self.readings
                for reading in row
            ],
            "columns": self.grid.column_positions,
            "row_lines": self.grid.row_positions,
        }
        return json.dumps(payload, indent=2, ensure_ascii=False)

    def to_csv(self) -> str:
        buffer = io.StringIO()
        csv.writer(buffer, lineterminator="\n").writerows(self.rows)
        return buffer.getvalue()


class TableExtractor:
    """Detect the ruled grid of a table image and recognize every cell."""

    def __init__(
        self,
        config: Optional[Config] = None,
        recognizer: Optional[TextRecognizer] = None,
    ):
        """Initialize the extractor.

        Args:
            config: Pipeline configuration (defaults when None)
            recognizer: Text recognizer; a :class:`TesseractRecognizer` built
                from ``config.recognizer`` is created lazily when None
        """
        self.config = config or get_default_config()
        self._recognizer = recognizer

        self.run_scanner = RunScanner(self.config.grid)
        self.segment_cleaner = SegmentCleaner(self.config.grid)
        self.deduplicator = LineDeduplicator(self.config.grid)
        self.assembler = GridAssembler(self.config.cells)
        self.visualizer = VisualizationProcessor(self.config.output)

    @property
    def recognizer(self) -> TextRecognizer:
        if self._recognizer is None:
            self._recognizer = TesseractRecognizer.from_config(self.config.recognizer)
        return self._recognizer

    def detect_grid(self, gray: np.ndarray) -> GridDetection:
        """Run scanning, cleaning, deduplication and assembly on a grayscale grid."""
        scan = self.run_scanner.process(gray)
        height, width = gray.shape

        vertical_candidates = self.segment_cleaner.process(
            scan.vertical, Axis.VERTICAL, Axis.VERTICAL.extent(gray)
        )
        horizontal_candidates = self.segment_cleaner.process(
            scan.horizontal, Axis.HORIZONTAL, Axis.HORIZONTAL.extent(gray)
        )

        vertical_lines = self.deduplicator.process(vertical_candidates)
        horizontal_lines = self.deduplicator.process(horizontal_candidates)

        cells = self.assembler.process(
            [line.index for line in horizontal_lines],
            [line.index for line in vertical_lines],
        )

        grid = GridDetection(
            width=width,
            height=height,
            vertical_candidates=vertical_candidates,
            horizontal_candidates=horizontal_candidates,
            vertical_lines=vertical_lines,
            horizontal_lines=horizontal_lines,
            cells=cells,
        )
        logger.info(
            "Detected %d vertical and %d horizontal lines, %d cells in %d rows",
            len(vertical_lines), len(horizontal_lines), sum(grid.shape), len(cells),
        )
        for line in grid_summary(vertical_lines, horizontal_lines):
            logger.debug(line)
        return grid

    def extract_array(self, gray: np.ndarray, name: str = "image") -> TableExtraction:
        """Extract the table from an already prepared grayscale grid."""
        grid = self.detect_grid(gray)
        self._save_debug_overlay(gray, grid, name)

        if not grid.cells:
            return TableExtraction(grid=grid)

        recognizer = self.recognizer
        recognizer.set_image(gray)
        return TableExtraction(grid=grid, readings=self._recognize_cells(recognizer, grid.cells))

    def extract_image(self, image: np.ndarray, name: str = "image") -> TableExtraction:
        """Extract the table from a decoded BGR or grayscale image."""
        gray = prepare_image(image, self.config.preprocessing.contrast)
        return self.extract_array(gray, name)

    def extract_path(self, image_path: Union[str, Path]) -> TableExtraction:
        """Extract the table from an image file."""
        image_path = Path(image_path)
        logger.info(f"Processing: {image_path}")
        return self.extract_image(load_image(image_path), image_path.stem)

    def extract_bytes(self, buffer: bytes, name: str = "buffer") -> TableExtraction:
        """Extract the table from an encoded image held in memory."""
        return self.extract_image(decode_image(buffer), name)

    def extract_directory(self, input_dir: Union[str, Path]) -> Dict[Path, TableExtraction]:
        """Extract tables from every image in a directory.

        Failing images are logged and skipped; the remaining images are
        still processed.
        """
        input_dir = Path(input_dir)
        if not input_dir.is_dir():
            raise ValueError(f"Input directory does not exist: {input_dir}")

        image_files = get_image_files(input_dir)
        if not image_files:
            logger.warning(f"No image files found in: {input_dir}")
            return {}

        results = {}
        with log_processing_stats(f"table extraction in {input_dir}", logger) as stats:
            with ProcessingProgress("Extracting tables", len(image_files), logger) as progress:
                for image_path in image_files:
                    try:
                        results[image_path] = self.extract_path(image_path)
                    except TableGridError as e:
                        logger.error(f"Error processing {image_path}: {e}")
                        stats["files_failed"] += 1
                        progress.update(success=False)
                        continue
                    stats["files_processed"] += 1
                    progress.update()
        return results

    def _recognize_cells(
        self, recognizer: TextRecognizer, cells: List[List[CellRect]]
    ) -> List[List[CellReading]]:
        rects = [rect for row_cells in cells for rect in row_cells]

        def recognize(rect: CellRect) -> Recognition:
            try:
                result = recognizer.recognize(rect)
            except RecognitionError as e:
                e.details.setdefault("row", rect.row)
                e.details.setdefault("column", rect.column)
                raise
            logger.debug("Cell (%d, %d) confidence %.1f", rect.row, rect.column, result.confidence)
            return result

        workers = self.config.recognizer.workers
        if workers > 1 and len(rects) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                # map() yields in submission order and re-raises the first failure
                results = list(executor.map(recognize, rects))
        else:
            results = [recognize(rect) for rect in rects]

        ordered = iter(results)
        return [
            [
                CellReading(rect.row, rect.column, rect, result.text, result.confidence)
                for rect, result in zip(row_cells, ordered)
            ]
            for row_cells in cells
        ]

    def _save_debug_overlay(self, gray: np.ndarray, grid: GridDetection, name: str) -> None:
        debug_dir = self.config.output.debug_dir
        if not debug_dir:
            return
        self.visualizer.clear_debug_images()
        self.visualizer.process(
            gray,
            vertical_lines=grid.vertical_lines,
            horizontal_lines=grid.horizontal_lines,
            cells=grid.cells,
        )
        self.visualizer.save_debug_images_to_dir(Path(debug_dir), prefix=name)


def extract_table_image(image: np.ndarray, config: Optional[Config] = None,
                        recognizer: Optional[TextRecognizer] = None) -> List[List[str]]:
    """Extract the string matrix of a table from a decoded image."""
    return TableExtractor(config, recognizer).extract_image(image).rows


def extract_table_path(path: Union[str, Path], config: Optional[Config] = None,
                       recognizer: Optional[TextRecognizer] = None) -> List[List[str]]:
    """Extract the string matrix of a table from an image file."""
    return TableExtractor(config, recognizer).extract_path(path).rows


def extract_table_bytes(buffer: bytes, config: Optional[Config] = None,
                        recognizer: Optional[TextRecognizer] = None) -> List[List[str]]:
    """Extract the string matrix of a table from an encoded image buffer."""
    return TableExtractor(config, recognizer).extract_bytes(buffer).rows


def _write_output(extraction: TableExtraction, output: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    if output.suffix.lower() == ".csv":
        output.write_text(extraction.to_csv(), encoding="utf-8")
    else:
        output.write_text(extraction.to_json(), encoding="utf-8")
    logger.info(f"Saved: {output}")


def main(argv: Optional[List[str]] = None) -> int:
    """Command line interface."""
    parser = argparse.ArgumentParser(
        description="Extract the cell texts of a ruled table from an image"
    )
    parser.add_argument("input", help="Input image file or directory")
    parser.add_argument("-c", "--config", help="Configuration file (JSON, YAML or TOML)")
    parser.add_argument(
        "-o", "--output",
        help="Output file (.json or .csv) for a single image, or directory for a batch"
    )
    parser.add_argument("--lang", help="Tesseract language (default: use config)")
    parser.add_argument("--debug-dir", help="Save grid overlay images to this directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config) if args.config else get_default_config()
    except TableGridError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.verbose:
        config.logging.level = "DEBUG"
    elif args.quiet:
        config.logging.level = "WARNING"
    if args.lang:
        config.recognizer.language = args.lang
    if args.debug_dir:
        config.output.debug_dir = args.debug_dir

    setup_logging(
        level=config.logging.level,
        log_file=config.logging.log_file,
        use_rich=config.logging.use_rich,
        format_style=config.logging.format_style,
    )

    extractor = TableExtractor(config)
    input_path = Path(args.input)

    try:
        if input_path.is_dir():
            results = extractor.extract_directory(input_path)
            output_dir = Path(args.output) if args.output else None
            for image_path, extraction in results.items():
                if output_dir is not None:
                    _write_output(extraction, output_dir / f"{image_path.stem}.json")
                else:
                    print(f"# {image_path.name}")
                    for row in extraction.rows:
                        print(row)
        else:
            extraction = extractor.extract_path(input_path)
            if args.output:
                _write_output(extraction, Path(args.output))
            else:
                for row in extraction.rows:
                    print(row)
    except TableGridError as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
