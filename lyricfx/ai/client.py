"""
Generative text API client

Minimal async client for the Gemini generateContent REST endpoint. Both the
AI effects generator and the translation adapter send a single text prompt
and read back a single text completion, so that is all this client does.

Request:  POST {endpoint}/models/{model}:generateContent?key=<api key>
          {"contents": [{"parts": [{"text": "<prompt>"}]}]}
Response: completion text at candidates[0].content.parts[0].text
"""

import asyncio
from typing import Any, Optional

import aiohttp

from ..config.settings import get_settings
from ..exceptions import ConfigError, MalformedResponseError, NetworkFailure
from ..utils.helpers import strip_code_fences
from ..utils.logger import get_logger


logger = get_logger(__name__)


def extract_completion(payload: Any) -> str:
    """
    Pull the completion text out of a generateContent response

    Args:
        payload: Decoded JSON response

    Returns:
        Completion text with any surrounding markdown fence removed

    Raises:
        MalformedResponseError: If the payload does not have the expected shape
    """
    try:
        text = payload['candidates'][0]['content']['parts'][0]['text']
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedResponseError(
            "Generative API response has no completion text",
            details={'payload': str(payload)[:200]}
        ) from e

    if not isinstance(text, str):
        raise MalformedResponseError("Generative API completion is not text")
    return strip_code_fences(text)


class GenerativeTextClient:
    """
    Async client for one-shot text generation

    The API key is read from settings (ai.api_key, usually provided through
    GEMINI_API_KEY) unless passed explicitly.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        config = get_settings().ai
        self.api_key = api_key if api_key is not None else config.api_key
        self.model = model or config.model
        self.endpoint = (endpoint or config.endpoint).rstrip('/')
        self.timeout = timeout if timeout is not None else config.request_timeout
        self._session = session
        self._owns_session = session is None

    @property
    def url(self) -> str:
        return f"{self.endpoint}/models/{self.model}:generateContent"

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def generate_text(self, prompt: str) -> str:
        """
        Send a prompt and return the completion text

        Args:
            prompt: Full prompt text

        Returns:
            Completion text, fence-stripped

        Raises:
            ConfigError: If no API key is configured
            NetworkFailure: On transport errors, timeouts or non-200 responses
            MalformedResponseError: If the response has no completion text
        """
        if not self.api_key:
            raise ConfigError("Generative API key not configured", details={'env': 'GEMINI_API_KEY'})

        session = await self._get_session()
        body = {"contents": [{"parts": [{"text": prompt}]}]}

        logger.debug(f"Generative request to {self.model} ({len(prompt)} chars)")

        try:
            async with session.post(
                self.url,
                params={'key': self.api_key},
                json=body,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise NetworkFailure(
                        f"Generative API returned HTTP {response.status}",
                        details={'body': error_text[:200]},
                        status=response.status
                    )
                try:
                    payload = await response.json(content_type=None)
                except ValueError as e:
                    raise MalformedResponseError("Generative API returned invalid JSON") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkFailure(f"Generative API request failed: {e}") from e

        return extract_completion(payload)

    async def close(self) -> None:
        """Close the underlying session if this client created it"""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None
