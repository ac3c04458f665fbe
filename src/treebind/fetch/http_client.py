"""
HTTP client for downloading headers.

Headers are stored under the configured cache directory by file name;
a header already in the cache is not downloaded again unless forced.
"""

import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx

from ..config import get_config

logger = logging.getLogger(__name__)


class HeaderFetchError(Exception):
    """Error downloading a header."""
    pass


class HeaderFetcher:
    """Downloads remote headers into a local cache directory."""

    def __init__(
        self,
        cache_dir: str | Path | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the fetcher.

        Args:
            cache_dir: Download directory (default from config)
            timeout: Request timeout in seconds (default from config)
            transport: Optional httpx transport (useful for testing)
        """
        config = get_config()
        self.cache_dir = Path(cache_dir or config.cache_dir).expanduser()
        self.timeout = timeout if timeout is not None else config.fetch_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def cache_path(self, url: str) -> Path:
        """Local path a URL is cached at.

        Raises:
            HeaderFetchError: If the URL has no file name
        """
        name = Path(unquote(urlparse(url).path)).name
        if not name:
            raise HeaderFetchError(f"Cannot derive a file name from URL: {url}")
        return self.cache_dir / name

    async def fetch(self, url: str, force: bool = False) -> Path:
        """Download a header unless it is already cached.

        Args:
            url: Header URL
            force: Download even if the file is cached

        Returns:
            Path of the local file

        Raises:
            HeaderFetchError: If the download fails
        """
        path = self.cache_path(url)
        if path.is_file() and not force:
            logger.debug("Using cached %s", path)
            return path

        client = await self._get_client()
        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise HeaderFetchError(f"HTTP {e.response.status_code}: {url}") from e
        except httpx.RequestError as e:
            raise HeaderFetchError(f"Request failed: {e}") from e

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(response.content)
        logger.info("Downloaded %s -> %s", url, path)
        return path


# Global fetcher instance
_fetcher: HeaderFetcher | None = None


def get_fetcher() -> HeaderFetcher:
    """Get the global fetcher instance."""
    global _fetcher
    if _fetcher is None:
        _fetcher = HeaderFetcher()
    return _fetcher


def set_fetcher(fetcher: HeaderFetcher | None) -> None:
    """Set the global fetcher instance."""
    global _fetcher
    _fetcher = fetcher
