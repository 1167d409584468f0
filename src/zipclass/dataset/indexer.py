"""Discovery of labelled images in an extracted dataset tree.

The expected layout is ``<root>/**/{train,validation,test}/<category>/<image>``.
Category folder names become integer labels in the order they are first seen.
"""

import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from ..constants import (
    IMAGE_FILE_EXTENSIONS,
    SPLIT_DIRECTORIES,
    SPLIT_TEST,
    SPLIT_TRAIN,
)
from ..errors import EmptyDatasetError
from ..logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LabeledEntry:
    path: str
    label: int


class LabelMap:
    """Ordered category names; a name's position is its label."""

    def __init__(self, names: Optional[List[str]] = None):
        self._names: List[str] = []
        self._index = {}
        for name in names or []:
            self.resolve(name)

    def resolve(self, name: str) -> int:
        """Return the label for name, appending it if unseen."""
        label = self._index.get(name)
        if label is None:
            label = len(self._names)
            self._names.append(name)
            self._index[name] = label
        return label

    def index(self, name: str) -> int:
        return self._index[name]

    def to_list(self) -> List[str]:
        return list(self._names)

    def __getitem__(self, label: int) -> str:
        return self._names[label]

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, LabelMap):
            return self._names == other._names
        if isinstance(other, list):
            return self._names == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"LabelMap({self._names!r})"


@dataclass
class SplitPartition:
    train: List[LabeledEntry] = field(default_factory=list)
    test: List[LabeledEntry] = field(default_factory=list)
    # Matched files outside train/test (validation)
    discarded: int = 0


def _is_hidden(part: str) -> bool:
    return part.startswith(".")


def find_image_paths(root: Union[str, Path]) -> List[Path]:
    """Find files matching ``**/{train,validation,test}/*/*.{jpg,jpeg,png}``.

    Hidden files and directories are skipped, as a shell glob would.
    Results are sorted by their POSIX path so the order does not depend
    on the filesystem.
    """
    root = Path(root)
    matches = []
    for path in root.rglob("*"):
        if path.suffix not in IMAGE_FILE_EXTENSIONS:
            continue
        relative = path.relative_to(root).parts
        if len(relative) < 3:
            continue
        if any(_is_hidden(part) for part in relative):
            continue
        if relative[-3] not in SPLIT_DIRECTORIES:
            continue
        if not path.is_file():
            continue
        matches.append(path)

    matches.sort(key=lambda p: p.as_posix())
    return matches


def index_image_paths(
    root: Union[str, Path],
    shuffle: bool = False,
    seed: Optional[int] = None,
) -> Tuple[SplitPartition, LabelMap]:
    """Partition the images under root into train/test entries.

    Args:
        root: Directory holding the extracted archive
        shuffle: Shuffle discovered paths before labels are assigned
        seed: Random seed used when shuffle is set

    Returns:
        (partition, label_map)

    Raises:
        EmptyDatasetError: if no training images were found
    """
    image_paths = find_image_paths(root)
    logger.info(f"Found {len(image_paths)} images under {root}")

    if shuffle:
        rng = random.Random(seed)
        rng.shuffle(image_paths)

    partition = SplitPartition()
    label_map = LabelMap()

    for image_path in image_paths:
        split = image_path.parent.parent.name
        category = image_path.parent.name

        label = label_map.resolve(category)

        if split == SPLIT_TRAIN:
            partition.train.append(LabeledEntry(path=str(image_path), label=label))
        elif split == SPLIT_TEST:
            partition.test.append(LabeledEntry(path=str(image_path), label=label))
        else:
            partition.discarded += 1

    logger.info(
        f"Indexed {len(partition.train)} train / {len(partition.test)} test images "
        f"in {len(label_map)} categories ({partition.discarded} not indexed)"
    )

    if not partition.train:
        raise EmptyDatasetError(f"No training images found under {root}")

    return partition, label_map
