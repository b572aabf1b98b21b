"""Collapsing of grid line candidates into confirmed grid lines."""

import logging
from typing import List, Sequence, Union

from ..config.models import DedupMode
from .base import BaseProcessor
from .segment_cleaner import Segment

logger = logging.getLogger(__name__)


class LineDeduplicator(BaseProcessor):
    """Processor reducing a candidate stream to grid lines."""

    def process(self, candidates: Sequence[Segment], **kwargs) -> List[Segment]:
        """Deduplicate the candidates of one axis.

        Args:
            candidates: Candidate segments of a single axis
            **kwargs: Optional ``tolerance``, ``min_separation`` and ``mode`` overrides

        Returns:
            Confirmed grid lines in emission order
        """
        lines = deduplicate_lines(
            candidates,
            tolerance=kwargs.get("tolerance", self.get_config_value("dedup_tolerance", 10)),
            min_separation=kwargs.get(
                "min_separation", self.get_config_value("dedup_min_separation", 10)
            ),
            mode=kwargs.get("mode", self.get_config_value("dedup_mode", DedupMode.REFERENCE)),
        )
        logger.debug("Deduplicated %d candidates into %d lines", len(candidates), len(lines))
        return lines


def deduplicate_lines(
    candidates: Sequence[Segment],
    tolerance: int = 10,
    min_separation: int = 10,
    mode: Union[DedupMode, str] = DedupMode.REFERENCE,
) -> List[Segment]:
    """Collapse near-duplicate border candidates into grid lines.

    Candidates are visited in index order while tracking the last accepted
    candidate. A candidate matches when both its start and its end differ
    from the tracked one by less than ``tolerance``. On a match, if the index
    gap to the tracked candidate is at least ``min_separation``, both are
    emitted; the match then becomes the tracked candidate. A non-matching
    candidate is dropped and tracking stays where it was, unless ``mode`` is
    ``restart``, in which case tracking moves on to it.

    Since table borders of one table share their extent, consecutive
    emissions form the pairs the grid assembler consumes, e.g. three row
    borders ``a < b < c`` give ``[a, b, b, c]``.

    Args:
        candidates: Candidate segments of one axis
        tolerance: Maximum start/end drift (exclusive) for a match
        min_separation: Minimum index gap before a matched pair is emitted
        mode: ``reference`` or ``restart`` handling of non-matching candidates

    Returns:
        Emitted grid lines, possibly repeating a candidate that closes one
        pair and opens the next
    """
    if not candidates:
        return []

    restart = DedupMode(mode) is DedupMode.RESTART
    ordered = sorted(candidates, key=lambda candidate: candidate.index)

    lines = []
    last = ordered[0]
    for candidate in ordered[1:]:
        matches = (
            abs(candidate.start - last.start) < tolerance
            and abs(candidate.end - last.end) < tolerance
        )
        if matches:
            if candidate.index - last.index >= min_separation:
                lines.append(last)
                lines.append(candidate)
            last = candidate
        elif restart:
            last = candidate

    return lines
