"""Shared fixtures: image writers, archive builders and a fake decoder."""

from io import BytesIO
from pathlib import Path
from zipfile import ZipFile

import numpy as np
import pytest
from PIL import Image

from zipclass.errors import DecodeError
from zipclass.processing.media import DecodedImage


DEFAULT_SIZE = (8, 6)


def _image_bytes(member: str, size=DEFAULT_SIZE, mode="RGB") -> bytes:
    buffer = BytesIO()
    image_format = "PNG" if member.lower().endswith(".png") else "JPEG"
    Image.new(mode, size).save(buffer, format=image_format)
    return buffer.getvalue()


class FakeDecoder:
    """Decoder stand-in that records every path it is asked to decode."""

    def __init__(self, width=4, height=3, channels=3, fail_on=()):
        self.width = width
        self.height = height
        self.channels = channels
        self.fail_on = tuple(fail_on)
        self.calls = []

    def __call__(self, path: str) -> DecodedImage:
        self.calls.append(path)
        if any(path.endswith(name) for name in self.fail_on):
            raise DecodeError(path, "corrupt test image")
        return DecodedImage(
            width=self.width,
            height=self.height,
            channels=self.channels,
            mode="RGB",
            pixels=np.zeros((self.height, self.width, self.channels), dtype=np.uint8),
        )


@pytest.fixture
def fake_decoder():
    return FakeDecoder


@pytest.fixture
def touch_files(tmp_path):
    """Create empty files under tmp_path/root from relative paths."""

    def _touch(relative_paths):
        root = tmp_path / "root"
        root.mkdir(exist_ok=True)
        for relative in relative_paths:
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"")
        return root

    return _touch


@pytest.fixture
def write_image():
    """Write a solid image to disk; the format follows the extension."""

    def _write(path, size=DEFAULT_SIZE, mode="RGB"):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(_image_bytes(path.name, size, mode))
        return path

    return _write


@pytest.fixture
def make_zip(tmp_path):
    """Build a zip archive from {member: spec}.

    spec is None for a default 8x6 RGB image, a (size, mode) tuple, or raw bytes.
    """

    def _make(members, name="dataset.zip"):
        archive_dir = tmp_path / "archives"
        archive_dir.mkdir(exist_ok=True)
        zip_path = archive_dir / name
        with ZipFile(zip_path, "w") as archive:
            for member, spec in members.items():
                if isinstance(spec, bytes):
                    archive.writestr(member, spec)
                elif spec is None:
                    archive.writestr(member, _image_bytes(member))
                else:
                    size, mode = spec
                    archive.writestr(member, _image_bytes(member, size, mode))
        return zip_path

    return _make


@pytest.fixture
def pets_zip(make_zip):
    """Two train categories and one test image."""
    return make_zip(
        {
            "train/cat/a.jpg": None,
            "train/dog/b.jpg": None,
            "test/cat/c.jpg": None,
        },
        name="pets.zip",
    )


@pytest.fixture
def encrypted_zip(make_zip):
    """One train image whose central directory entry claims to be encrypted."""
    zip_path = make_zip({"train/cat/a.jpg": None}, name="locked.zip")
    data = bytearray(zip_path.read_bytes())
    # General purpose flag bit 0 of the central directory record
    data[data.rfind(b"PK\x01\x02") + 8] |= 0x01
    zip_path.write_bytes(bytes(data))
    return zip_path
