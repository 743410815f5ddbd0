"""
LRCLIB search client

Thin async wrapper around the LRCLIB full-text search endpoint
(GET {api_base}/search?q=...). The endpoint needs no API key and returns a
JSON array of entries carrying duration, syncedLyrics and plainLyrics.

Entries are validated into Candidate records at this boundary; anything that
does not conform is skipped. Transport problems are raised as NetworkFailure
so the resolver can decide how to degrade.
"""

import asyncio
from typing import List, Optional

import aiohttp
from asyncio_throttle import Throttler

from ..config.settings import get_settings
from ..exceptions import NetworkFailure
from ..utils.logger import get_logger
from .models import Candidate


logger = get_logger(__name__)


class LrcLibClient:
    """
    Async LRCLIB search client

    A single aiohttp session is reused across searches and created lazily.
    Requests are throttled to the configured rate so rapid track skipping does
    not hammer the public API.
    """

    def __init__(
        self,
        api_base: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: Optional[float] = None,
        rate_limit: Optional[int] = None,
        user_agent: Optional[str] = None,
    ):
        """
        Initialize the client

        Args:
            api_base: API root, defaults to lyrics.api_base from settings
            session: Existing aiohttp session to reuse (not closed by this client)
            timeout: Total request timeout in seconds
            rate_limit: Maximum requests per second
            user_agent: User-Agent header sent with every request
        """
        config = get_settings().lyrics
        self.api_base = (api_base or config.api_base).rstrip('/')
        self.timeout = timeout if timeout is not None else config.request_timeout
        self.user_agent = user_agent or config.user_agent
        self._session = session
        self._owns_session = session is None
        self._throttler = Throttler(rate_limit=rate_limit or config.rate_limit, period=1.0)

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers={'User-Agent': self.user_agent})
            self._owns_session = True
        return self._session

    async def search(self, query: str) -> List[Candidate]:
        """
        Full-text search for lyrics

        Args:
            query: Free-form query, usually "<title> <artist>"

        Returns:
            Validated candidates in API order (possibly empty)

        Raises:
            NetworkFailure: On transport errors, timeouts, non-200 responses or
                a body that is not a JSON array
        """
        session = await self._get_session()
        url = f"{self.api_base}/search"

        logger.debug(f"LRCLIB search: '{query}'")

        try:
            async with self._throttler:
                async with session.get(
                    url,
                    params={'q': query},
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if response.status != 200:
                        raise NetworkFailure(
                            f"LRCLIB search returned HTTP {response.status}",
                            details={'query': query},
                            status=response.status
                        )
                    data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise NetworkFailure(f"LRCLIB search failed: {e}", details={'query': query}) from e

        if not isinstance(data, list):
            raise NetworkFailure("LRCLIB search returned a non-list body", details={'query': query})

        candidates = []
        for entry in data:
            candidate = Candidate.from_api_data(entry)
            if candidate is None:
                logger.debug(f"Skipping malformed LRCLIB entry: {str(entry)[:120]}")
                continue
            candidates.append(candidate)

        logger.debug(f"LRCLIB search '{query}': {len(candidates)}/{len(data)} usable results")
        return candidates

    async def close(self) -> None:
        """Close the underlying session if this client created it"""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> 'LrcLibClient':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
