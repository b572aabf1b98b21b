"""
Pytest configuration and shared fixtures for table grid tests.

Provides synthetic ruled table images, configurations and a scripted text
recognizer so that no test needs a Tesseract installation.
"""

import sys
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import cv2
import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from table_grid.config import Config, get_default_config  # noqa: E402
from table_grid.exceptions import RecognitionError  # noqa: E402
from table_grid.processors import CellRect  # noqa: E402
from table_grid.recognition import Recognition  # noqa: E402
from table_grid.utils.logging_utils import setup_logging  # noqa: E402


def make_ruled_table(
    width: int,
    height: int,
    row_lines: Sequence[int],
    column_lines: Sequence[int],
    x_span: Tuple[int, int],
    y_span: Tuple[int, int],
    thickness: int = 1,
) -> np.ndarray:
    """Draw a white grayscale image with black grid borders.

    Row borders cover ``x_span`` (end exclusive) and column borders cover
    ``y_span``; each border is ``thickness`` pixels thick, growing towards
    larger coordinates.
    """
    image = np.full((height, width), 255, dtype=np.uint8)
    for y in row_lines:
        image[y:y + thickness, x_span[0]:x_span[1]] = 0
    for x in column_lines:
        image[y_span[0]:y_span[1], x:x + thickness] = 0
    return image


class ScriptedRecognizer:
    """Text recognizer returning ``r<row>c<column>`` for every cell."""

    def __init__(self, confidence: float = 90.0, fail_at: Tuple[int, int] = None):
        self.confidence = confidence
        self.fail_at = fail_at
        self.images: List[np.ndarray] = []
        self.calls: List[CellRect] = []

    def set_image(self, image: np.ndarray) -> None:
        self.images.append(image)

    def recognize(self, rect: CellRect) -> Recognition:
        self.calls.append(rect)
        if self.fail_at == (rect.row, rect.column):
            raise RecognitionError("scripted failure")
        return Recognition(f"r{rect.row}c{rect.column}", self.confidence)


@pytest.fixture
def ruled_table_image() -> np.ndarray:
    """100x60 table with three row and three column borders: a 2x2 grid."""
    return make_ruled_table(
        width=100,
        height=60,
        row_lines=[5, 30, 55],
        column_lines=[5, 50, 95],
        x_span=(5, 96),
        y_span=(5, 56),
    )


@pytest.fixture
def ruled_table_cells() -> List[List[CellRect]]:
    """Cell rectangles expected for ``ruled_table_image`` with the default inset."""
    return [
        [CellRect(9, 9, 37, 17, 0, 0), CellRect(54, 9, 37, 17, 0, 1)],
        [CellRect(9, 34, 37, 17, 1, 0), CellRect(54, 34, 37, 17, 1, 1)],
    ]


@pytest.fixture
def blank_image() -> np.ndarray:
    """Create a blank white grayscale image."""
    return np.full((60, 100), 255, dtype=np.uint8)


@pytest.fixture
def table_factory():
    return make_ruled_table


@pytest.fixture
def recognizer() -> ScriptedRecognizer:
    return ScriptedRecognizer()


@pytest.fixture
def recognizer_factory():
    return ScriptedRecognizer


@pytest.fixture
def sample_config() -> Config:
    """Create a sample configuration for testing."""
    config = get_default_config()

    # Override some settings for testing
    config.logging.level = "DEBUG"
    config.logging.use_rich = False  # Disable rich for cleaner test output

    return config


@pytest.fixture
def sample_config_dict() -> Dict:
    """Create a sample configuration dictionary."""
    return {
        "grid": {
            "dark_threshold": 180,
            "merge_gap": 3,
            "dedup_mode": "restart",
        },
        "cells": {
            "inset": 2,
            "degenerate_policy": "clamp",
        },
        "recognizer": {
            "language": "deu+eng",
            "psm": 7,
        },
        "logging": {
            "level": "DEBUG",
            "use_rich": False,
            "format_style": "minimal",
        },
    }


@pytest.fixture
def table_image_files(tmp_path: Path, ruled_table_image: np.ndarray) -> Dict[str, Path]:
    """Write the ruled table as PNG files into an input directory."""
    input_dir = tmp_path / "input"
    input_dir.mkdir()

    files = {}
    for name in ["page_001", "page_002"]:
        path = input_dir / f"{name}.png"
        cv2.imwrite(str(path), ruled_table_image)
        files[name] = path
    return files


@pytest.fixture(autouse=True)
def setup_test_logging():
    """Setup logging for tests."""
    setup_logging(
        level="WARNING",  # Only show warnings and errors in tests
        use_rich=False,
        format_style="minimal"
    )


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (deselect with '-m \"not unit\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers based on test location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)
