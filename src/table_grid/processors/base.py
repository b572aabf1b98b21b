"""Base processor class and common utilities for grid processors."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np

from ..exceptions import ValidationError


class BaseProcessor(ABC):
    """Base class for all processors."""

    def __init__(self, config: Optional[Any] = None):
        """Initialize processor with optional configuration."""
        self.config = config
        self.debug_images: Dict[str, np.ndarray] = {}

    def get_config_value(self, key: str, default: Any) -> Any:
        """Safely get a config value with a default."""
        if self.config is None:
            return default
        return getattr(self.config, key, default)

    @abstractmethod
    def process(self, *args, **kwargs) -> Any:
        """Run the processor. Must be implemented by subclasses."""
        pass

    def validate_image(self, image: np.ndarray) -> None:
        """Validate that the input is a usable 2-D grayscale pixel grid."""
        if image is None:
            raise ValidationError("Image cannot be None")
        if not isinstance(image, np.ndarray):
            raise ValidationError(f"Image must be a numpy array, got {type(image).__name__}")
        if image.size == 0:
            raise ValidationError("Image cannot be empty")
        if image.ndim != 2:
            raise ValidationError(
                "Image must be a single-channel grayscale grid",
                {"shape": image.shape},
            )

    def save_debug_image(self, name: str, image: np.ndarray) -> None:
        """Store a debug image for later saving."""
        self.debug_images[name] = image

    def get_debug_images(self) -> Dict[str, np.ndarray]:
        """Get all stored debug images."""
        return self.debug_images

    def clear_debug_images(self) -> None:
        """Clear stored debug images."""
        self.debug_images = {}

    def save_debug_images_to_dir(self, debug_dir: Path, prefix: str = "") -> None:
        """Save all debug images to the specified directory."""
        from .image_io import save_image

        for name, image in self.debug_images.items():
            filename = f"{prefix}_{name}.png" if prefix else f"{name}.png"
            save_image(image, Path(debug_dir) / filename)
