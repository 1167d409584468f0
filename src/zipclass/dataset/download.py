import hashlib
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import urlparse

import requests
import huggingface_hub as hf_hub

from ..config import DOWNLOAD_CHUNK_SIZE, DOWNLOAD_TIMEOUT, MAX_DOWNLOAD_RETRIES
from ..errors import AcquisitionError, ConfigurationError
from ..logger import get_logger

logger = get_logger(__name__)


FILE_PREFIX = "file://"
HF_PREFIX = "hf://"
HTTP_SCHEMES = ("http", "https")


@dataclass
class ResolvedArchive:
    """Local zip file produced by resolve_archive.

    downloaded is True when the file was fetched into the destination
    directory; local is True for a caller-provided file:// path. A Hub
    download is neither, since the Hub cache owns that file.
    """

    path: Path
    downloaded: bool
    local: bool = False


def archive_filename(url: str) -> str:
    """Return the file name component of a dataset URL or file:// path."""
    if url.startswith(FILE_PREFIX):
        return os.path.basename(url[len(FILE_PREFIX):])
    if url.startswith(HF_PREFIX):
        return url.rstrip("/").split("/")[-1]
    return os.path.basename(urlparse(url).path)


def is_supported_url(url: str) -> bool:
    if url.startswith(FILE_PREFIX) or url.startswith(HF_PREFIX):
        return True
    return urlparse(url).scheme in HTTP_SCHEMES


def parse_hf_url(url: str) -> Tuple[str, str, str]:
    """Split an hf:// reference into (repo_id, filename, repo_type).

    Accepted forms:
        hf://datasets/org/repo/path/to/data.zip
        hf://models/org/repo/data.zip
        hf://org/repo/data.zip            (dataset repo)
    """
    parts = url[len(HF_PREFIX):].strip("/").split("/")
    repo_type = "dataset"
    if parts and parts[0] in ("datasets", "models", "spaces"):
        repo_type = parts[0][:-1]
        parts = parts[1:]
    if len(parts) < 3:
        raise ConfigurationError(
            f"Invalid Hugging Face URL: {url}. Expected: hf://[datasets/]org/repo/path.zip"
        )
    return "/".join(parts[:2]), "/".join(parts[2:]), repo_type


def resolve_archive(
    url: str,
    dest_dir: Path,
    hf_token: Optional[str] = None,
    max_retries: int = MAX_DOWNLOAD_RETRIES,
) -> ResolvedArchive:
    """Resolve a dataset URL to a local zip file, downloading if remote.

    Args:
        url: file:// path, http(s) URL or hf:// Hub reference
        dest_dir: Directory downloads are written to
        hf_token: Hugging Face API token for private repos
        max_retries: Attempts for http(s) downloads before giving up

    Raises:
        AcquisitionError: the archive could not be found or downloaded
    """
    dest_dir = Path(dest_dir)

    if url.startswith(FILE_PREFIX):
        local_path = Path(url[len(FILE_PREFIX):])
        if not local_path.is_file():
            raise AcquisitionError(f"Local archive not found: {local_path}")
        logger.info(f"Using local archive {local_path}")
        return ResolvedArchive(path=local_path, downloaded=False, local=True)

    if url.startswith(HF_PREFIX):
        return ResolvedArchive(
            path=_download_from_hub(url, dest_dir, hf_token), downloaded=False
        )

    if urlparse(url).scheme not in HTTP_SCHEMES:
        raise ConfigurationError(f"Unsupported dataset URL scheme: {url}")

    logger.info("downloading dataset ...")
    path = download_archive(url, dest_dir, hf_token=hf_token, max_retries=max_retries)
    return ResolvedArchive(path=path, downloaded=True)


def _download_from_hub(url: str, dest_dir: Path, hf_token: Optional[str]) -> Path:
    repo_id, filename, repo_type = parse_hf_url(url)
    hf_cache_dir = dest_dir / "hf_cache"

    logger.info(f"📦 Downloading {filename} from {repo_id}")
    try:
        path = hf_hub.hf_hub_download(
            repo_id=repo_id,
            filename=filename,
            repo_type=repo_type,
            cache_dir=str(hf_cache_dir),
            token=hf_token,
        )
    except Exception as e:
        logger.error(f"❌ Hub download failed for {url}: {e}")
        raise AcquisitionError(f"Failed to download {filename} from {repo_id}: {e}") from e

    logger.info(f"✅ Downloaded archive from: {repo_id}/{filename}")
    return Path(path)



def _download_path(url: str, output_dir: Path) -> Path:
    # Hash of the full URL keeps same-named archives from colliding
    url_hash = hashlib.md5(url.encode()).hexdigest()[:8]
    name, ext = os.path.splitext(archive_filename(url))
    return output_dir / f"{name}_{url_hash}{ext}"


def _stream_to_file(
    url: str, filepath: Path, headers: dict, chunk_size: int
) -> Tuple[int, int]:
    """Write one GET response to filepath; returns (bytes written, Content-Length)."""
    with requests.get(
        url, stream=True, timeout=DOWNLOAD_TIMEOUT, headers=headers
    ) as response:
        if response.status_code != 200:
            raise requests.HTTPError(
                f"status {response.status_code}", response=response
            )

        expected = int(response.headers.get("content-length", 0))
        written = 0
        with open(filepath, "wb") as f:
            for chunk in response.iter_content(chunk_size=chunk_size):
                if chunk:
                    f.write(chunk)
                    written += len(chunk)

    return written, expected


def download_archive(
    url: str,
    output_dir: Path,
    hf_token: Optional[str] = None,
    max_retries: int = MAX_DOWNLOAD_RETRIES,
    chunk_size: int = DOWNLOAD_CHUNK_SIZE,
) -> Path:
    """Stream an http(s) archive into output_dir, retrying with backoff.

    A response shorter than its Content-Length counts as a failed attempt
    and the partial file is deleted.

    Raises:
        AcquisitionError: every attempt failed
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    filepath = _download_path(url, output_dir)

    headers = {}
    if hf_token and "huggingface.co" in url:
        headers["Authorization"] = f"Bearer {hf_token}"

    reason = "no attempts made"
    for attempt in range(max_retries):
        if attempt:
            time.sleep(2 ** (attempt - 1))
        logger.info(f"Downloading {url} -> {filepath.name} (attempt {attempt + 1}/{max_retries})")

        try:
            written, expected = _stream_to_file(url, filepath, headers, chunk_size)
        except (requests.RequestException, OSError) as e:
            reason = str(e)
            logger.warning(f"⚠️ Download of {url} failed: {reason}")
            continue

        if expected and written != expected:
            reason = f"expected {expected} bytes, got {written}"
            logger.warning(f"⚠️ Download of {url} incomplete: {reason}")
            filepath.unlink()
            continue

        logger.info(f"✅ Downloaded {filepath.name} ({written / (1024 * 1024):.1f} MB)")
        return filepath

    if filepath.exists():
        filepath.unlink()
    logger.error(f"❌ Failed to download {url} after {max_retries} attempts")
    raise AcquisitionError(f"Failed to download dataset from {url}: {reason}")
