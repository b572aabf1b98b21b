"""Tesseract-backed text recognizer built on pytesseract."""

import logging
from typing import List, Optional

import numpy as np
import pytesseract

from ..config.models import RecognizerConfig
from ..exceptions import RecognitionError, RecognizerInitError, ValidationError
from ..processors.grid_assembly import CellRect
from .base import Recognition, mean_confidence, normalize_text

logger = logging.getLogger(__name__)


class TesseractRecognizer:
    """Recognize cell text by running Tesseract on the cell region.

    The grayscale image is held for the lifetime of one extraction; each
    call crops the requested rectangle and hands only that region to
    Tesseract, so concurrent ``recognize`` calls never share mutable state.
    """

    def __init__(
        self,
        language: str = "deu",
        tesseract_cmd: Optional[str] = None,
        psm: Optional[int] = None,
        extra_config: str = "",
        verify: bool = True,
    ):
        self.language = language
        self.psm = psm
        self.extra_config = extra_config
        self._image: Optional[np.ndarray] = None

        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

        if verify:
            self._verify_installation()

    @classmethod
    def from_config(cls, config: RecognizerConfig, verify: bool = True) -> "TesseractRecognizer":
        return cls(
            language=config.language,
            tesseract_cmd=config.tesseract_cmd,
            psm=config.psm,
            extra_config=config.extra_config,
            verify=verify,
        )

    @property
    def tesseract_config(self) -> str:
        parts = []
        if self.psm is not None:
            parts.append(f"--psm {self.psm}")
        if self.extra_config:
            parts.append(self.extra_config)
        return " ".join(parts)

    def _verify_installation(self) -> None:
        try:
            version = pytesseract.get_tesseract_version()
        except pytesseract.TesseractNotFoundError as e:
            raise RecognizerInitError(
                "Tesseract executable not found",
                tesseract_cmd=pytesseract.pytesseract.tesseract_cmd,
            ) from e

        try:
            available = pytesseract.get_languages(config="")
        except pytesseract.TesseractError as e:
            raise RecognizerInitError(f"Could not list Tesseract languages: {e}") from e

        missing = self._missing_languages(available)
        if missing:
            raise RecognizerInitError(
                "Tesseract language data not installed",
                missing=",".join(missing),
                language=self.language,
            )
        logger.debug("Using Tesseract %s with language '%s'", version, self.language)

    def _missing_languages(self, available: List[str]) -> List[str]:
        return [lang for lang in self.language.split("+") if lang not in available]

    def set_image(self, image: np.ndarray) -> None:
        if image is None or image.ndim != 2:
            raise ValidationError("Recognizer expects a 2-D grayscale image")
        self._image = image

    def recognize(self, rect: CellRect) -> Recognition:
        if self._image is None:
            raise RecognitionError("No image set on the recognizer")

        x1, y1, x2, y2 = rect.as_bounds()
        region = self._image[max(y1, 0):y2, max(x1, 0):x2]
        if region.size == 0:
            return Recognition("", 0.0)

        try:
            text = pytesseract.image_to_string(
                region, lang=self.language, config=self.tesseract_config
            )
            data = pytesseract.image_to_data(
                region,
                lang=self.language,
                config=self.tesseract_config,
                output_type=pytesseract.Output.DICT,
            )
        except (pytesseract.TesseractError, RuntimeError) as e:
            raise RecognitionError(f"Tesseract failed on cell {rect.as_bounds()}: {e}") from e

        return Recognition(normalize_text(text), mean_confidence(data.get("conf", [])))
