"""Merging of nearby runs into border segments and length filtering."""

import math
from itertools import groupby
from typing import Iterable, List, NamedTuple, Sequence, Tuple

from ..exceptions import LineDetectionError
from .base import BaseProcessor
from .run_scanner import Axis, Run


class Segment(NamedTuple):
    index: int
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


class SegmentCleaner(BaseProcessor):
    """Processor turning raw runs of one axis into grid line candidates."""

    def process(self, runs: Sequence[Run], axis: Axis, extent: int, **kwargs) -> List[Segment]:
        """Clean all runs of one axis.

        Args:
            runs: Runs produced by the run scanner for ``axis``
            axis: Axis the runs belong to
            extent: Scan line length on that axis (image height for
                vertical runs, image width for horizontal runs)
            **kwargs: Optional ``merge_gap`` override

        Returns:
            Candidate segments ordered by index
        """
        if extent <= 0:
            raise LineDetectionError(
                "Scan line extent must be positive",
                processor="SegmentCleaner", axis=axis.value, extent=extent,
            )

        merge_gap = kwargs.get("merge_gap", self.get_config_value("merge_gap", 5))
        if axis is Axis.VERTICAL:
            ratio = self.get_config_value("vertical_min_length_ratio", 0.10)
        else:
            ratio = self.get_config_value("horizontal_min_length_ratio", 0.75)

        return collect_candidates(runs, merge_gap, min_length_for(extent, ratio))


def min_length_for(extent: int, ratio: float) -> int:
    """Minimum segment length for an axis, rounding halves away from zero."""
    return int(math.floor(extent * ratio + 0.5))


def clean_lines(
    spans: Iterable[Tuple[int, int]], merge_gap: int = 5, min_length: int = 0
) -> List[Tuple[int, int]]:
    """Merge spans of one scan line and drop those too short to be a border.

    Spans are sorted by start and folded left: a span whose start lies less
    than ``merge_gap`` after the current segment's end extends that segment,
    otherwise the current segment is closed and a new one opened. A closed
    segment is kept only if ``end - start >= min_length``; the length test is
    applied after merging.

    Args:
        spans: (start, end) pairs of a single index
        merge_gap: Gaps strictly smaller than this are bridged
        min_length: Minimum length of a kept segment

    Returns:
        Cleaned (start, end) pairs in ascending order
    """
    ordered = sorted(spans, key=lambda span: span[0])
    if not ordered:
        return []

    cleaned = []
    low, high = ordered[0]
    for start, end in ordered[1:]:
        if start - high < merge_gap:
            high = max(high, end)
        else:
            if high - low >= min_length:
                cleaned.append((low, high))
            low, high = start, end

    if high - low >= min_length:
        cleaned.append((low, high))

    return cleaned


def collect_candidates(runs: Iterable[Run], merge_gap: int, min_length: int) -> List[Segment]:
    """Clean runs index by index and tag the survivors with their index."""
    ordered = sorted(runs, key=lambda run: (run.index, run.start))

    candidates = []
    for index, group in groupby(ordered, key=lambda run: run.index):
        spans = [(run.start, run.end) for run in group]
        candidates.extend(
            Segment(index, start, end)
            for start, end in clean_lines(spans, merge_gap, min_length)
        )
    return candidates
