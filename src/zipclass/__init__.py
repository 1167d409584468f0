"""zipclass - zipped image classification datasets as iterable data sources

Main components:
- dataset: archive acquisition, indexing, metadata and split cursors
- processing: zip extraction and image decoding
- cli: command line inspection of a dataset archive

Example usage:
    from zipclass import CollectOptions, collect_dataset

    source = await collect_dataset(
        CollectOptions(url="file:///data/flowers.zip", data_dir="/tmp/flowers")
    )
    meta = source.get_meta()
    batch = await source.train.next_batch(32)
"""

from .dataset import (
    CollectOptions,
    DatasetMeta,
    ImageClassificationDataSource,
    Sample,
    SplitCursor,
    collect_dataset,
    load_collect_options_from_yaml,
)
from .errors import (
    AcquisitionError,
    ConfigurationError,
    DecodeError,
    EmptyDatasetError,
    ZipClassError,
)
from .processing import DecodedImage, decode_image

__version__ = "0.1.0"

__all__ = [
    "CollectOptions",
    "DatasetMeta",
    "ImageClassificationDataSource",
    "Sample",
    "SplitCursor",
    "collect_dataset",
    "load_collect_options_from_yaml",
    "AcquisitionError",
    "ConfigurationError",
    "DecodeError",
    "EmptyDatasetError",
    "ZipClassError",
    "DecodedImage",
    "decode_image",
]
