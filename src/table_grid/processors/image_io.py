"""Image I/O and preparation utilities."""

from pathlib import Path
from typing import List, Union

import cv2
import numpy as np

from ..exceptions import ImageLoadError, ImageSaveError

IMAGE_EXTENSIONS = [".jpg", ".jpeg", ".png", ".tif", ".tiff", ".bmp"]


def load_image(image_path: Union[str, Path]) -> np.ndarray:
    """Load image from file.

    Args:
        image_path: Path to the image file

    Returns:
        numpy array containing the image (BGR)

    Raises:
        ImageLoadError: If image cannot be loaded
    """
    image = cv2.imread(str(image_path), cv2.IMREAD_COLOR)
    if image is None:
        raise ImageLoadError("Could not load image", image_path=str(image_path))
    return image


def decode_image(buffer: bytes) -> np.ndarray:
    """Decode an encoded image (PNG, JPEG, ...) held in memory.

    Raises:
        ImageLoadError: If the buffer is empty or not a decodable image
    """
    data = np.frombuffer(buffer, dtype=np.uint8)
    if data.size == 0:
        raise ImageLoadError("Cannot decode an empty buffer")
    image = cv2.imdecode(data, cv2.IMREAD_COLOR)
    if image is None:
        raise ImageLoadError("Could not decode image buffer", size=data.size)
    return image


def save_image(image: np.ndarray, output_path: Union[str, Path]) -> None:
    """Save image to file.

    Raises:
        ImageSaveError: If image is empty or cannot be written
    """
    output_path = Path(output_path)
    if image is None or image.size == 0:
        raise ImageSaveError("Cannot save an empty image", image_path=str(output_path))

    output_path.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(output_path), image):
        raise ImageSaveError("Could not write image", image_path=str(output_path))


def get_image_files(directory: Path) -> List[Path]:
    """Get all image files from directory, sorted."""
    image_files = set()  # Use set to avoid duplicates on case-insensitive filesystems

    for ext in IMAGE_EXTENSIONS:
        image_files.update(directory.glob(f"*{ext}"))
        image_files.update(directory.glob(f"*{ext.upper()}"))

    return sorted(image_files)


def adjust_contrast(image: np.ndarray, contrast: float) -> np.ndarray:
    """Stretch every channel around mid grey.

    Each value ``v`` becomes ``((v / 255 - 0.5) * p + 0.5) * 255`` clamped to
    the 8-bit range, where ``p = ((100 + contrast) / 100) ** 2``.
    """
    percent = ((100.0 + contrast) / 100.0) ** 2
    scaled = (image.astype(np.float32) / 255.0 - 0.5) * percent + 0.5
    return np.clip(scaled * 255.0, 0, 255).astype(np.uint8)


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Convert a BGR/BGRA image to a single channel; grayscale input is returned as is."""
    if image.ndim == 2:
        return image
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    if image.shape[2] == 1:
        return image[:, :, 0]
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


def prepare_image(image: np.ndarray, contrast: float = 20.0) -> np.ndarray:
    """Contrast-adjust an image and reduce it to an 8-bit grayscale grid."""
    if contrast:
        image = adjust_contrast(image, contrast)
    return to_grayscale(image).astype(np.uint8, copy=False)
