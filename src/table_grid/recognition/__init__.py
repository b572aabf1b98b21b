"""Cell text recognition."""

from .base import Recognition, TextRecognizer, mean_confidence, normalize_text
from .tesseract import TesseractRecognizer

__all__ = [
    "Recognition",
    "TextRecognizer",
    "TesseractRecognizer",
    "mean_confidence",
    "normalize_text",
]
