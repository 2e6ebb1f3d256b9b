"""Image decoding helpers."""

import io
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from PIL import Image, UnidentifiedImageError

from omni_ocr.errors import InvalidImageError


@dataclass
class DecodedImage:
    """Decoded image in the in-memory forms the native engines consume."""

    image: Image.Image
    _array: Optional[np.ndarray] = field(default=None, repr=False)

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def array(self) -> np.ndarray:
        """RGB pixel array (H, W, 3)."""
        if self._array is None:
            self._array = np.asarray(self.image.convert("RGB"))
        return self._array


def decode_image(image_bytes: bytes) -> DecodedImage:
    """
    Decode encoded image bytes (PNG, JPEG, ...).

    Args:
        image_bytes: Encoded image data

    Returns:
        DecodedImage with pixel data loaded

    Raises:
        InvalidImageError: If the bytes are empty or cannot be decoded
    """
    if not image_bytes:
        raise InvalidImageError("Invalid image data: no bytes supplied")

    try:
        image = Image.open(io.BytesIO(image_bytes))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise InvalidImageError(f"Invalid image data: {e}") from e

    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")

    return DecodedImage(image=image)
