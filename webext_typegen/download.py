"""Download WebExtension schemas from the Firefox source archive."""

from __future__ import annotations

import io
import zipfile
from pathlib import Path, PurePosixPath

import requests

from .logging_config import get_logger

logger = get_logger(__name__)

ARCHIVE_URL = "https://hg.mozilla.org/mozilla-unified/archive"

# Output folder name -> schema folder in the source tree
SCHEMA_PATHS = {
    "toolkit": "toolkit/components/extensions/schemas/",
    "browser": "browser/components/extensions/schemas/",
}


class SchemaDownloadError(Exception):
    """Custom exception for schema download errors."""

    pass


def schema_url(tag: str, schema_path: str) -> str:
    return f"{ARCHIVE_URL}/{tag}.zip/{schema_path}"


def extract_schemas(archive: bytes, out_dir: Path) -> list[Path]:
    """Write the ``.json`` members of a zip archive into one folder.

    Args:
        archive: Zip file content.
        out_dir: Destination folder, created if needed.

    Returns:
        Paths of the written files.

    Raises:
        SchemaDownloadError: If the archive is not a valid zip file.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    written = []
    try:
        with zipfile.ZipFile(io.BytesIO(archive)) as zf:
            for member in zf.infolist():
                name = PurePosixPath(member.filename).name
                if member.is_dir() or not name.endswith(".json"):
                    continue
                target = out_dir / name
                target.write_bytes(zf.read(member))
                written.append(target)
    except zipfile.BadZipFile as e:
        raise SchemaDownloadError(f"Invalid schema archive: {e}") from e
    return written


def download_schemas(
    tag: str, version: str, out_dir: str | Path, timeout: int = 60
) -> list[Path]:
    """Download the toolkit and browser schema folders of a Firefox release.

    Args:
        tag: Mercurial tag, e.g. ``FIREFOX_63_0_RELEASE``.
        version: Version name used for the output folder.
        out_dir: Base output folder.
        timeout: Request timeout in seconds.

    Returns:
        The schema folders, ready to pass to the generator.

    Raises:
        SchemaDownloadError: If a request fails or an archive is invalid.
    """
    base = Path(out_dir) / version
    folders = []

    for name, schema_path in SCHEMA_PATHS.items():
        url = schema_url(tag, schema_path)
        logger.info(f"Downloading {url}")
        try:
            response = requests.get(url, timeout=timeout)
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            logger.error(f"Request timeout for URL: {url}")
            raise SchemaDownloadError(f"Request timeout for URL: {url}") from e
        except requests.exceptions.HTTPError as e:
            logger.error(f"HTTP error {e.response.status_code} for URL: {url}")
            raise SchemaDownloadError(
                f"HTTP error {e.response.status_code} for URL: {url}"
            ) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error for URL {url}: {e}")
            raise SchemaDownloadError(f"Request error for URL {url}: {e}") from e

        folder = base / name
        files = extract_schemas(response.content, folder)
        logger.info(f"Wrote {len(files)} schema files to {folder}")
        folders.append(folder)

    return folders
