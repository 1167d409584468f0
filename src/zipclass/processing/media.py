from dataclasses import dataclass

import numpy as np
from PIL import Image

from ..errors import DecodeError
from ..logger import get_logger

logger = get_logger(__name__)


@dataclass
class DecodedImage:
    """Pixel data of a single image plus its geometry."""

    width: int
    height: int
    channels: int
    mode: str
    pixels: np.ndarray

    @property
    def shape(self):
        return self.pixels.shape


def decode_image(path: str) -> DecodedImage:
    """Decode an image file into a numpy array (HW or HWC).

    Raises:
        DecodeError: if the file is missing or Pillow cannot read it.
    """
    try:
        with Image.open(path) as image:
            image.load()
            width, height = image.size
            channels = len(image.getbands())
            mode = image.mode
            pixels = np.asarray(image)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        logger.debug(f"Decode failed for {path}: {e}")
        raise DecodeError(str(path), str(e)) from e

    return DecodedImage(
        width=width,
        height=height,
        channels=channels,
        mode=mode,
        pixels=pixels,
    )
