"""Pairing of grid lines into inset cell rectangles."""

import logging
from typing import Iterable, List, NamedTuple, Sequence, Tuple, Union

from ..config.models import DegeneratePolicy
from ..exceptions import DegenerateGridError
from .base import BaseProcessor

logger = logging.getLogger(__name__)


class CellRect(NamedTuple):
    x: int
    y: int
    width: int
    height: int
    row: int = 0
    column: int = 0

    def as_bounds(self) -> Tuple[int, int, int, int]:
        """Return the rectangle as (x1, y1, x2, y2)."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)


class GridAssembler(BaseProcessor):
    """Processor building the row-major cell matrix from grid line positions."""

    def process(
        self, row_positions: Sequence[int], column_positions: Sequence[int], **kwargs
    ) -> List[List[CellRect]]:
        """Assemble cell rectangles.

        Args:
            row_positions: Positions of the horizontal grid lines (y)
            column_positions: Positions of the vertical grid lines (x)
            **kwargs: Optional ``inset``, ``policy`` and ``fail_on_empty`` overrides

        Returns:
            Rows of cell rectangles, top to bottom, left to right
        """
        return assemble_cells(
            row_positions,
            column_positions,
            inset=kwargs.get("inset", self.get_config_value("inset", 4)),
            policy=kwargs.get(
                "policy", self.get_config_value("degenerate_policy", DegeneratePolicy.SKIP)
            ),
            fail_on_empty=kwargs.get(
                "fail_on_empty", self.get_config_value("fail_on_empty_grid", False)
            ),
        )


def pair_lines(positions: Iterable[int]) -> List[Tuple[int, int]]:
    """Group ascending line positions into disjoint consecutive pairs.

    ``[a, b, c, d, e]`` becomes ``[(a, b), (c, d)]``; with an odd count the
    last position stays unpaired. Pairs that are not strictly increasing
    cannot bound a cell and are dropped.
    """
    ordered = sorted(positions)
    pairs = []
    for first, second in zip(ordered[0::2], ordered[1::2]):
        if second > first:
            pairs.append((first, second))
        else:
            logger.debug("Dropping zero-width line pair at %d", first)
    return pairs


def _inset_span(first: int, second: int, inset: int, policy: DegeneratePolicy) -> Tuple[int, int]:
    span = second - first
    size = span - 2 * inset
    if size > 0 or policy is not DegeneratePolicy.CLAMP:
        return first + inset, size
    shrink = min(inset, (span - 1) // 2)
    return first + shrink, span - 2 * shrink


def assemble_cells(
    row_positions: Sequence[int],
    column_positions: Sequence[int],
    inset: int = 4,
    policy: Union[DegeneratePolicy, str] = DegeneratePolicy.SKIP,
    fail_on_empty: bool = False,
) -> List[List[CellRect]]:
    """Build inset cell rectangles for every (row pair, column pair) combination.

    A cell spans ``x = x1 + inset``, ``y = y1 + inset``,
    ``width = x2 - x1 - 2 * inset`` and ``height = y2 - y1 - 2 * inset``.
    Cells whose width or height would not be positive are skipped (and
    logged), clamped to the largest inset that leaves one pixel, or raise
    :class:`DegenerateGridError`, depending on ``policy``. Skipping can
    leave rows of different lengths.

    Args:
        row_positions: Horizontal grid line positions
        column_positions: Vertical grid line positions
        inset: Pixels removed from each side of a cell
        policy: ``skip``, ``clamp`` or ``error``
        fail_on_empty: Raise :class:`DegenerateGridError` instead of
            returning an empty matrix when an axis has no line pair

    Returns:
        Row-major matrix of cell rectangles
    """
    policy = DegeneratePolicy(policy)
    row_pairs = pair_lines(row_positions)
    column_pairs = pair_lines(column_positions)

    if not row_pairs or not column_pairs:
        details = {"row_pairs": len(row_pairs), "column_pairs": len(column_pairs)}
        if fail_on_empty:
            raise DegenerateGridError(
                "No table cells found", processor="GridAssembler", **details
            )
        logger.warning("No table cells found (row pairs: %d, column pairs: %d)",
                       len(row_pairs), len(column_pairs))
        return []

    rows = []
    for row, (y1, y2) in enumerate(row_pairs):
        y, height = _inset_span(y1, y2, inset, policy)
        cells = []
        for column, (x1, x2) in enumerate(column_pairs):
            x, width = _inset_span(x1, x2, inset, policy)
            if width <= 0 or height <= 0:
                if policy is DegeneratePolicy.ERROR:
                    raise DegenerateGridError(
                        "Cell too small for inset",
                        processor="GridAssembler",
                        row=row, column=column, width=width, height=height,
                    )
                logger.warning("Skipping cell (%d, %d): inset rectangle is %dx%d",
                               row, column, width, height)
                continue
            cells.append(CellRect(x, y, width, height, row, column))
        rows.append(cells)

    return rows
