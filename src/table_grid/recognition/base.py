"""Text recognizer interface."""

from typing import Iterable, NamedTuple, Protocol, Union, runtime_checkable

import numpy as np

from ..processors.grid_assembly import CellRect


class Recognition(NamedTuple):
    text: str
    confidence: float


@runtime_checkable
class TextRecognizer(Protocol):
    """Capability turning a region of the current image into text.

    ``set_image`` is called once per image; ``recognize`` is then called once
    per cell rectangle and must not modify the image. Implementations report
    failures by raising :class:`~table_grid.exceptions.RecognitionError`.
    """

    def set_image(self, image: np.ndarray) -> None:
        ...

    def recognize(self, rect: CellRect) -> Recognition:
        ...


def normalize_text(text: str) -> str:
    """Collapse line breaks to spaces and trim surrounding whitespace."""
    return text.replace("\n", " ").strip()


def mean_confidence(values: Iterable[Union[str, int, float]]) -> float:
    """Mean of the non-negative word confidences, 0.0 when there are none."""
    confidences = []
    for value in values:
        try:
            confidence = float(value)
        except (TypeError, ValueError):
            continue
        if confidence >= 0:
            confidences.append(confidence)
    if not confidences:
        return 0.0
    return sum(confidences) / len(confidences)
