import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml

from ..config import DEFAULT_DATA_DIR
from ..constants import IMAGES_SUBDIR, METADATA_VALIDATION_MODES
from ..errors import ConfigurationError
from ..logger import get_logger
from ..processing.media import DecodedImage, decode_image
from .download import HF_PREFIX, archive_filename, is_supported_url, parse_hf_url

logger = get_logger(__name__)


@dataclass
class CollectOptions:
    url: str = ""
    data_dir: str = DEFAULT_DATA_DIR

    # Indexing
    shuffle_before_indexing: bool = False
    seed: Optional[int] = None

    # "fast" reports size.test from the train split and a fixed channel count
    metadata_validation: str = "fast"

    # Train batches keep None placeholders past the end; test batches drop them
    keep_train_batch_holes: bool = True

    # The zip is deleted after extraction; True keeps a caller-provided file:// archive
    keep_local_archive: bool = False

    hf_token: Optional[str] = None
    decoder: Callable[[str], DecodedImage] = field(default=decode_image, repr=False)

    @property
    def dataset_name(self) -> str:
        name = archive_filename(self.url) if self.url else ""
        return os.path.splitext(name)[0]

    @property
    def images_dir(self) -> Path:
        return Path(self.data_dir) / IMAGES_SUBDIR

    def validate(self) -> "CollectOptions":
        """Check options before any I/O is attempted.

        Raises:
            ConfigurationError: on a missing url, a non-zip archive or bad values
        """
        if not self.url:
            raise ConfigurationError("Please specify the url of your dataset")

        if not is_supported_url(self.url):
            raise ConfigurationError(f"Unsupported dataset URL: {self.url}")

        if self.url.startswith(HF_PREFIX):
            parse_hf_url(self.url)

        extension = archive_filename(self.url).split(".")
        if len(extension) < 2 or extension[-1] != "zip":
            raise ConfigurationError("The dataset provided should be a zip file")

        if not self.data_dir:
            raise ConfigurationError("data_dir must not be empty")

        if self.metadata_validation not in METADATA_VALIDATION_MODES:
            raise ConfigurationError(
                f"metadata_validation must be one of {METADATA_VALIDATION_MODES}, "
                f"got {self.metadata_validation!r}"
            )

        if self.seed is not None and not isinstance(self.seed, int):
            raise ConfigurationError(f"seed must be an integer, got {self.seed!r}")

        if not callable(self.decoder):
            raise ConfigurationError("decoder must be callable")

        if self.hf_token is None:
            self.hf_token = os.environ.get("HF_TOKEN")

        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CollectOptions":
        """Build options from a plain mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown collect options: {sorted(unknown)}")
        return cls(**data)


def load_collect_options_from_yaml(
    yaml_path: str, overrides: Optional[Dict[str, Any]] = None
) -> CollectOptions:
    """Load CollectOptions from a YAML file.

    The file holds a flat mapping of option names, e.g.:

        url: https://example.com/flowers.zip
        data_dir: /data/flowers
        metadata_validation: strict

    Args:
        yaml_path: Path to the YAML config
        overrides: Values that replace those read from the file (None entries ignored)
    """
    try:
        with open(yaml_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise ConfigurationError(f"Config file not found: {yaml_path}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {yaml_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {yaml_path} must contain a mapping")

    if "decoder" in data:
        raise ConfigurationError("decoder cannot be set from a config file")

    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value

    logger.debug(f"Loaded collect options from {yaml_path}: {sorted(data)}")
    return CollectOptions.from_dict(data)
