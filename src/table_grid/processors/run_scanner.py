"""Dark-pixel run scanning along both image axes."""

from enum import Enum
from typing import List, NamedTuple

import numpy as np

from .base import BaseProcessor


class Axis(str, Enum):
    """Scan direction.

    VERTICAL scans one column per index (index = x, coordinates along y) and
    yields candidates for column borders. HORIZONTAL scans one row per index
    (index = y, coordinates along x) and yields candidates for row borders.
    """
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"

    def scan_lines(self, grid: np.ndarray) -> np.ndarray:
        """Return the grid arranged as one scan line per row."""
        return grid.T if self is Axis.VERTICAL else grid

    def extent(self, grid: np.ndarray) -> int:
        """Length of one scan line on this axis."""
        height, width = grid.shape[:2]
        return height if self is Axis.VERTICAL else width


class Run(NamedTuple):
    axis: Axis
    index: int
    start: int
    end: int


class ScanResult(NamedTuple):
    vertical: List[Run]
    horizontal: List[Run]


class RunScanner(BaseProcessor):
    """Processor emitting maximal runs of dark pixels for both axes."""

    def process(self, image: np.ndarray, **kwargs) -> ScanResult:
        """Scan every column and every row of a grayscale grid.

        Args:
            image: 2-D grayscale pixel grid (H x W)
            **kwargs: Optional ``dark_threshold`` override

        Returns:
            ScanResult with vertical and horizontal runs
        """
        self.validate_image(image)
        threshold = kwargs.get("dark_threshold", self.get_config_value("dark_threshold", 200))

        return ScanResult(
            vertical=scan_runs(image, Axis.VERTICAL, threshold),
            horizontal=scan_runs(image, Axis.HORIZONTAL, threshold),
        )


def scan_runs(grid: np.ndarray, axis: Axis, dark_threshold: int = 200) -> List[Run]:
    """Find maximal runs of dark pixels along every scan line of an axis.

    A run starts at a dark pixel preceded by a light pixel (or the line start)
    and ends at the next light pixel, which is the exclusive ``end``. A run
    still open when the scan line ends is not committed.

    Args:
        grid: 2-D grayscale pixel grid (H x W)
        axis: Axis to scan
        dark_threshold: Pixels with intensity below this value are dark

    Returns:
        Runs ordered by index, then by start
    """
    dark = axis.scan_lines(np.asarray(grid)) < dark_threshold
    previous = np.zeros_like(dark)
    previous[:, 1:] = dark[:, :-1]

    starts = dark & ~previous
    ends = ~dark & previous

    runs = []
    for index in range(dark.shape[0]):
        line_ends = np.flatnonzero(ends[index])
        if line_ends.size == 0:
            continue
        # Every end has a matching earlier start; a trailing unmatched start is an open run.
        line_starts = np.flatnonzero(starts[index])[:line_ends.size]
        runs.extend(
            Run(axis, index, int(start), int(end))
            for start, end in zip(line_starts, line_ends)
        )
    return runs
