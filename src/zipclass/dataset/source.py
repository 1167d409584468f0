from typing import Callable

from ..constants import ITERABLE_SPLITS, SPLIT_TEST, SPLIT_TRAIN
from ..processing.media import DecodedImage
from .cursor import SplitCursor
from .indexer import LabelMap, SplitPartition
from .metadata import DatasetMeta


class ImageClassificationDataSource:
    """Data source handed to training code after collection.

    ``train`` and ``test`` each own a single offset shared by every caller.
    Use open_cursor() to give a consumer its own position.
    """

    def __init__(
        self,
        meta: DatasetMeta,
        partition: SplitPartition,
        label_map: LabelMap,
        decoder: Callable[[str], DecodedImage],
        keep_train_batch_holes: bool = True,
    ):
        self._meta = meta
        self._partition = partition
        self._label_map = label_map
        self._decoder = decoder
        self._keep_train_batch_holes = keep_train_batch_holes

        self.train = self.open_cursor(SPLIT_TRAIN)
        self.test = self.open_cursor(SPLIT_TEST)

    def get_meta(self) -> DatasetMeta:
        return self._meta

    @property
    def label_map(self) -> LabelMap:
        return self._label_map

    @property
    def partition(self) -> SplitPartition:
        return self._partition

    def open_cursor(self, split: str) -> SplitCursor:
        """Create an independent cursor over split, starting at offset 0."""
        if split not in ITERABLE_SPLITS:
            raise ValueError(f"Unknown split {split!r}, expected one of {ITERABLE_SPLITS}")

        if split == SPLIT_TRAIN:
            return SplitCursor(
                SPLIT_TRAIN,
                self._partition.train,
                self._decoder,
                drop_absent=not self._keep_train_batch_holes,
            )
        return SplitCursor(SPLIT_TEST, self._partition.test, self._decoder, drop_absent=True)
