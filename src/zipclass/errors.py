"""Exception types raised while collecting and reading a dataset."""


class ZipClassError(Exception):
    """Base class for all zipclass errors."""


class ConfigurationError(ZipClassError, ValueError):
    """Missing or malformed options, detected before any I/O."""


class EmptyDatasetError(ZipClassError):
    """Indexing found no training images."""


class AcquisitionError(ZipClassError):
    """The archive could not be downloaded or extracted."""


class DecodeError(ZipClassError):
    """An image file could not be decoded."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to decode image {path}: {reason}")
