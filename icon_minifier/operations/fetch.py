"""
Stylesheet and font fetching.

Reads local files or downloads URLs, keeping downloaded bodies in an on-disk
cache so repeated runs do not hit the network again.
"""

import hashlib
import shutil
from pathlib import Path

import requests

from icon_minifier.core.fontface import is_url
from icon_minifier.errors import FetchError
from icon_minifier.utils.logging import logger

# Seconds to wait for a remote stylesheet or font
FETCH_TIMEOUT = 60


class ResponseCache:
    """
    Response bodies stored on disk, keyed by URL.

    Entries never expire; remove the directory (or call clear) to refetch.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, url: str) -> Path:
        return self.directory / hashlib.sha256(url.encode("utf-8")).hexdigest()

    def get(self, url: str) -> bytes | None:
        path = self._path(url)
        if not path.exists():
            return None
        return path.read_bytes()

    def put(self, url: str, data: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(url).write_bytes(data)

    def clear(self) -> None:
        if self.directory.exists():
            shutil.rmtree(self.directory)


def download(url: str, cache: ResponseCache | None = None) -> bytes:
    """
    Download a URL, going through the cache when one is given.

    Raises:
        FetchError: On network failure or a non-2xx response
    """
    if cache is not None:
        cached = cache.get(url)
        if cached is not None:
            logger.debug(f"Cache hit: {url}")
            return cached

    logger.info(f"Downloading {url}")
    try:
        response = requests.get(url, timeout=FETCH_TIMEOUT)
    except requests.RequestException as e:
        raise FetchError(url, str(e)) from e

    if not response.ok:
        raise FetchError(url, response.reason or "request failed", response.status_code)

    if cache is not None:
        cache.put(url, response.content)
    return response.content


def get_content(
    location: str, *, binary: bool = False, cache: ResponseCache | None = None
) -> str | bytes:
    """
    Contents of a URL or local file.

    Args:
        location: URL or filesystem path
        binary: Return bytes instead of text
        cache: Response cache for URLs

    Raises:
        FetchError: If the location cannot be read
    """
    if is_url(location):
        data = download(location, cache)
    else:
        try:
            data = Path(location).read_bytes()
        except OSError as e:
            raise FetchError(location, e.strerror or str(e)) from e

    if binary:
        return data
    return data.decode("utf-8", errors="replace")
