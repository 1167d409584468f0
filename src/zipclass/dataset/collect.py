import asyncio
from pathlib import Path

from ..logger import ContextLogger, get_logger
from ..processing.archive import extract_zip, remove_archive
from .config import CollectOptions
from .download import resolve_archive
from .indexer import index_image_paths
from .metadata import build_meta
from .source import ImageClassificationDataSource

logger = get_logger(__name__)


async def collect_dataset(options: CollectOptions) -> ImageClassificationDataSource:
    """Collect an image classification dataset from a zip archive.

    The archive must hold the usual folder layout:

        train/
            category1-name/
                image1.jpg
                image2.jpeg
            category2-name/
        test/          (optional)
        validation/    (optional, not iterated)

    Args:
        options: Collection options; url may be file://, http(s):// or hf://

    Returns:
        Data source with metadata and train/test cursors

    Raises:
        ConfigurationError: on bad options, before anything is downloaded
        AcquisitionError: if the archive cannot be fetched or unpacked
        EmptyDatasetError: if the archive has no training images
        DecodeError: if the first training image cannot be decoded
    """
    options.validate()
    log = ContextLogger(logger, {"dataset": options.dataset_name})

    data_dir = Path(options.data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)

    loop = asyncio.get_running_loop()

    archive = await loop.run_in_executor(
        None, resolve_archive, options.url, data_dir, options.hf_token
    )

    log.info("unzip and collecting data...")
    images_dir = options.images_dir
    await loop.run_in_executor(None, extract_zip, archive.path, images_dir)

    if archive.downloaded or (archive.local and not options.keep_local_archive):
        remove_archive(archive.path)

    partition, label_map = await loop.run_in_executor(
        None,
        index_image_paths,
        images_dir,
        options.shuffle_before_indexing,
        options.seed,
    )

    meta = await loop.run_in_executor(
        None,
        build_meta,
        partition,
        label_map,
        options.decoder,
        options.metadata_validation,
    )

    log.info(
        f"Collected {meta.size.train} train images, {len(partition.test)} test images, "
        f"{len(label_map)} categories, dimension {meta.dimension.x}x{meta.dimension.y}x{meta.dimension.z}"
    )

    return ImageClassificationDataSource(
        meta=meta,
        partition=partition,
        label_map=label_map,
        decoder=options.decoder,
        keep_train_batch_holes=options.keep_train_batch_holes,
    )
