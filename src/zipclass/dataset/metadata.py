from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List

from ..constants import DEFAULT_CHANNELS, METADATA_VALIDATION_MODES
from ..errors import ConfigurationError, EmptyDatasetError
from ..logger import get_logger
from ..processing.media import DecodedImage
from .indexer import LabelMap, SplitPartition

logger = get_logger(__name__)


class DataSourceType(str, Enum):
    IMAGE = "image"


@dataclass(frozen=True)
class DatasetSize:
    train: int
    test: int


@dataclass(frozen=True)
class ImageDimension:
    x: int
    y: int
    z: int


@dataclass(frozen=True)
class DatasetMeta:
    size: DatasetSize
    dimension: ImageDimension
    label_map: List[str] = field(default_factory=list)
    type: DataSourceType = DataSourceType.IMAGE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "size": {"train": self.size.train, "test": self.size.test},
            "dimension": {
                "x": self.dimension.x,
                "y": self.dimension.y,
                "z": self.dimension.z,
            },
            "labelMap": list(self.label_map),
        }


def build_meta(
    partition: SplitPartition,
    label_map: LabelMap,
    decoder: Callable[[str], DecodedImage],
    validation: str = "fast",
) -> DatasetMeta:
    """Summarise an indexed dataset from a single decoded sample.

    Only the first training image is decoded, so mixed image sizes go
    unnoticed. In "fast" mode size.test mirrors the train count and the
    channel count is fixed at 3, matching what existing consumers expect.
    "strict" mode reports the real test count and the sample's channels.

    Raises:
        EmptyDatasetError: if the partition has no training entries
        DecodeError: if the sample image cannot be decoded
    """
    if validation not in METADATA_VALIDATION_MODES:
        raise ConfigurationError(f"Unknown metadata validation mode: {validation!r}")

    if not partition.train:
        raise EmptyDatasetError("Cannot build metadata without training images")

    sample = decoder(partition.train[0].path)
    strict = validation == "strict"

    # NOTE: fast mode reports the train count for test as well
    test_size = len(partition.test) if strict else len(partition.train)
    channels = sample.channels if strict else DEFAULT_CHANNELS

    meta = DatasetMeta(
        size=DatasetSize(train=len(partition.train), test=test_size),
        dimension=ImageDimension(x=sample.width, y=sample.height, z=channels),
        label_map=label_map.to_list(),
    )
    logger.debug(f"Built {validation} metadata: {meta.to_dict()}")
    return meta
