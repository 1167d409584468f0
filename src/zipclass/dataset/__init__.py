"""Dataset handling for zipclass.

This package contains modules for:
- Collection options and validation
- Archive acquisition (local, http(s), Hugging Face Hub)
- Image discovery and label assignment
- Metadata summaries
- Split cursors and the data source facade
"""

from .config import CollectOptions, load_collect_options_from_yaml
from .download import ResolvedArchive, resolve_archive
from .indexer import LabelMap, LabeledEntry, SplitPartition, index_image_paths
from .metadata import DatasetMeta, DatasetSize, ImageDimension, build_meta
from .cursor import Sample, SplitCursor
from .source import ImageClassificationDataSource
from .collect import collect_dataset

__all__ = [
    "CollectOptions",
    "load_collect_options_from_yaml",
    "ResolvedArchive",
    "resolve_archive",
    "LabelMap",
    "LabeledEntry",
    "SplitPartition",
    "index_image_paths",
    "DatasetMeta",
    "DatasetSize",
    "ImageDimension",
    "build_meta",
    "Sample",
    "SplitCursor",
    "ImageClassificationDataSource",
    "collect_dataset",
]
