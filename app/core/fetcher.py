import aiohttp
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


class FetchStatus(str, Enum):
    """Outcome of a single GET request."""
    SUCCESS = "success"
    EMPTY = "empty"
    FAILURE = "failure"


@dataclass
class FetchResult:
    url: str
    status: FetchStatus
    html: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == FetchStatus.SUCCESS


class PageFetcher:
    """Fetch pages over one aiohttp session.

    Upstream problems never raise: every call to fetch() comes back as a
    FetchResult so callers decide whether to stop, skip or continue.
    """

    def __init__(self, timeout: float = 30, request_delay: float = 0.0, user_agent: Optional[str] = None):
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.request_delay = request_delay
        self.headers = {
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8',
            'Accept-Language': 'pt-BR,pt;q=0.9,en-US;q=0.8,en;q=0.7'
        }
        if user_agent:
            self.headers['User-Agent'] = user_agent
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "PageFetcher":
        self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        if self._session is not None:
            await self._session.close()
            self._session = None

    def _headers_for(self, url: str) -> Dict[str, str]:
        parsed_url = urlparse(url)
        headers = self.headers.copy()
        if parsed_url.scheme and parsed_url.netloc:
            headers['Referer'] = f"{parsed_url.scheme}://{parsed_url.netloc}/"
        return headers

    async def fetch(self, url: str) -> FetchResult:
        """Fetch a page and classify the outcome."""
        if self._session is None:
            raise RuntimeError("PageFetcher must be used as an async context manager")

        if self.request_delay > 0:
            await asyncio.sleep(self.request_delay)

        try:
            async with self._session.get(url, headers=self._headers_for(url), allow_redirects=True) as response:
                if response.status >= 400:
                    logger.warning(f"Failed to fetch {url}: Status {response.status}")
                    return FetchResult(url, FetchStatus.FAILURE, error=f"HTTP {response.status}")
                html = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning(f"Error fetching {url}: {e!r}")
            return FetchResult(url, FetchStatus.FAILURE, error=str(e) or e.__class__.__name__)

        if not html.strip():
            logger.info(f"Empty response body from {url}")
            return FetchResult(url, FetchStatus.EMPTY, html=html)

        return FetchResult(url, FetchStatus.SUCCESS, html=html)
