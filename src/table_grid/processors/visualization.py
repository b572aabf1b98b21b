"""Visualization utilities for debugging grid detection."""

from typing import List, Sequence, Tuple

import cv2
import numpy as np

from .base import BaseProcessor
from .grid_assembly import CellRect
from .segment_cleaner import Segment


class VisualizationProcessor(BaseProcessor):
    """Processor rendering detected grid lines and cells over the image."""

    def process(self, image: np.ndarray, **kwargs) -> np.ndarray:
        """Create a grid overlay.

        Args:
            image: Grayscale pixel grid the lines were detected on
            **kwargs: ``vertical_lines``, ``horizontal_lines`` and ``cells``

        Returns:
            BGR visualization image
        """
        self.validate_image(image)
        overlay = visualize_grid(
            image,
            kwargs.get("vertical_lines", []),
            kwargs.get("horizontal_lines", []),
            kwargs.get("cells", []),
            line_color=tuple(self.get_config_value("line_color_bgr", (0, 0, 255))),
            cell_color=tuple(self.get_config_value("cell_color_bgr", (0, 255, 0))),
            thickness=self.get_config_value("line_thickness", 1),
        )
        self.save_debug_image("grid", overlay)
        return overlay


def visualize_grid(
    image: np.ndarray,
    vertical_lines: Sequence[Segment],
    horizontal_lines: Sequence[Segment],
    cells: Sequence[Sequence[CellRect]] = (),
    line_color: Tuple[int, int, int] = (0, 0, 255),
    cell_color: Tuple[int, int, int] = (0, 255, 0),
    thickness: int = 1,
) -> np.ndarray:
    """Draw grid lines and cell rectangles.

    Args:
        image: Grayscale or BGR base image
        vertical_lines: Column borders (index = x, start/end along y)
        horizontal_lines: Row borders (index = y, start/end along x)
        cells: Row-major cell rectangles
        line_color: BGR color of grid lines
        cell_color: BGR color of cell outlines
        thickness: Line thickness

    Returns:
        BGR image with the overlay
    """
    vis_image = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR) if image.ndim == 2 else image.copy()

    for x, y1, y2 in vertical_lines:
        cv2.line(vis_image, (x, y1), (x, max(y1, y2 - 1)), line_color, thickness)

    for y, x1, x2 in horizontal_lines:
        cv2.line(vis_image, (x1, y), (max(x1, x2 - 1), y), line_color, thickness)

    for row in cells:
        for cell in row:
            x1, y1, x2, y2 = cell.as_bounds()
            cv2.rectangle(vis_image, (x1, y1), (x2 - 1, y2 - 1), cell_color, thickness)

    return vis_image


def grid_summary(vertical_lines: Sequence[Segment], horizontal_lines: Sequence[Segment]) -> List[str]:
    """Human readable description of the detected line positions."""
    return [
        f"columns at x={[line.index for line in vertical_lines]}",
        f"rows at y={[line.index for line in horizontal_lines]}",
    ]
