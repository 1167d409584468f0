import os
import shutil
from pathlib import Path
from typing import Union
from zipfile import BadZipFile, ZipFile

from ..errors import AcquisitionError
from ..logger import get_logger

logger = get_logger(__name__)


def _is_macos_metadata(member_name: str) -> bool:
    return "__MACOSX" in member_name.split("/")


def extract_zip(zip_path: Union[str, Path], target_dir: Union[str, Path]) -> Path:
    """Unpack a zip archive into target_dir, creating it if needed.

    A pre-existing target_dir is removed first so files from an earlier
    archive never end up in the index.

    Returns:
        Path of the populated target directory
    """
    zip_path = Path(zip_path)
    target_dir = Path(target_dir)

    if target_dir.exists():
        logger.debug(f"Removing previous extraction at {target_dir}")
        shutil.rmtree(target_dir)
    target_dir.mkdir(parents=True, exist_ok=True)

    logger.info(f"📂 Extracting {zip_path.name} to: {target_dir}")
    try:
        with ZipFile(zip_path) as archive:
            members = [
                m for m in archive.namelist() if not _is_macos_metadata(m)
            ]
            skipped = len(archive.namelist()) - len(members)
            if skipped:
                logger.debug(f"Skipping {skipped} __MACOSX entries")
            archive.extractall(target_dir, members=members)
    # zipfile reports encrypted members and unsupported compression as RuntimeError
    except (BadZipFile, OSError, RuntimeError) as e:
        logger.error(f"❌ Failed to extract archive {zip_path}: {e}")
        if target_dir.exists():
            shutil.rmtree(target_dir)
        raise AcquisitionError(f"Failed to extract {zip_path}: {e}") from e

    logger.info(f"✅ Archive extracted successfully ({len(members)} entries)")
    return target_dir


def remove_archive(zip_path: Union[str, Path]) -> None:
    """Delete an archive once its contents are extracted."""
    if os.path.exists(zip_path):
        os.remove(zip_path)
        logger.debug(f"Removed archive {zip_path}")
