"""Offset-based async reading of one dataset split."""

import asyncio
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from ..logger import ContextLogger, get_logger
from ..processing.media import DecodedImage
from .indexer import LabeledEntry

logger = get_logger(__name__)


@dataclass
class Sample:
    data: DecodedImage
    label: int


class SplitCursor:
    """Reads decoded samples from a split, one shared offset per cursor.

    next() returns None once the offset is outside the split. Offsets are
    claimed synchronously before any decode is awaited, so interleaved
    coroutines always see distinct positions.
    """

    def __init__(
        self,
        split: str,
        entries: Sequence[LabeledEntry],
        decoder: Callable[[str], DecodedImage],
        drop_absent: bool = True,
    ):
        self.split = split
        self.drop_absent = drop_absent
        self._entries = entries
        self._decoder = decoder
        self._offset = 0
        self._log = ContextLogger(logger, {"split": split})

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return max(0, len(self._entries) - max(self._offset, 0))

    def __len__(self) -> int:
        return len(self._entries)

    def _claim(self) -> Optional[LabeledEntry]:
        position = self._offset
        self._offset += 1
        if 0 <= position < len(self._entries):
            return self._entries[position]
        return None

    async def _load(self, entry: Optional[LabeledEntry]) -> Optional[Sample]:
        if entry is None:
            return None
        loop = asyncio.get_running_loop()
        image = await loop.run_in_executor(None, self._decoder, entry.path)
        return Sample(data=image, label=entry.label)

    async def next(self) -> Optional[Sample]:
        return await self._load(self._claim())

    async def next_batch(self, batch_size: int) -> List[Optional[Sample]]:
        """Read batch_size samples, decoding them concurrently.

        With drop_absent the end-of-split placeholders are removed, so the
        batch may be shorter than batch_size. Without it the batch always
        has batch_size items and may contain None.
        """
        if batch_size < 0:
            raise ValueError(f"batch_size must be non-negative, got {batch_size}")

        self._log.debug(f"Decoding {batch_size} samples from offset {self._offset}")
        entries = [self._claim() for _ in range(batch_size)]
        samples = await asyncio.gather(*(self._load(entry) for entry in entries))

        if self.drop_absent:
            return [sample for sample in samples if sample is not None]
        return list(samples)

    def seek(self, position: int) -> None:
        self._log.debug(f"Seek {self._offset} -> {position}")
        self._offset = position

    def __aiter__(self):
        return self

    async def __anext__(self) -> Sample:
        sample = await self.next()
        if sample is None:
            raise StopAsyncIteration
        return sample

    def __repr__(self) -> str:
        return f"SplitCursor(split={self.split!r}, offset={self._offset}, size={len(self._entries)})"
