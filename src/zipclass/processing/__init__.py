"""Media processing utilities for zipclass.

This package contains modules for:
- Image decoding into numpy arrays
- Zip archive extraction
"""

from .media import DecodedImage, decode_image
from .archive import extract_zip, remove_archive

__all__ = [
    "DecodedImage",
    "decode_image",
    "extract_zip",
    "remove_archive",
]
