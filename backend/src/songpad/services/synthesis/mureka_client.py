"""Mureka API client for song generation with error classification."""

from typing import Any, Optional

import httpx
import structlog
from pydantic import ValidationError

from songpad.services.exceptions import (
    SynthesisAuthError,
    SynthesisConfigError,
    SynthesisError,
    SynthesisNetworkError,
    SynthesisRateLimitError,
    SynthesisResponseError,
    SynthesisUnavailableError,
    SynthesisValidationError,
)
from songpad.services.synthesis.schemas import MurekaTask

logger = structlog.get_logger()


def classify_response(response: httpx.Response) -> SynthesisError | None:
    """Map a non-2xx Mureka response to an error, or None for success.

    Classification rules:
        - 429 → SynthesisRateLimitError (transient)
        - 500/502/503/504 → SynthesisUnavailableError (transient)
        - 401/403 → SynthesisAuthError (permanent)
        - 400/422 → SynthesisValidationError (permanent)
        - any other non-2xx → SynthesisResponseError (permanent)
    """
    code = response.status_code
    if 200 <= code < 300:
        return None

    detail = f"Mureka API error: {code} {response.reason_phrase} - {response.text[:500]}"
    if code == 429:
        return SynthesisRateLimitError(detail)
    if code in (500, 502, 503, 504):
        return SynthesisUnavailableError(detail)
    if code in (401, 403):
        return SynthesisAuthError(
            f"{detail}. Check MUREKA_API_KEY configuration in .env file."
        )
    if code in (400, 422):
        return SynthesisValidationError(detail)
    return SynthesisResponseError(detail)


class MurekaClient:
    """Song synthesis client for the Mureka platform.

    Exposes the two calls the tracker needs: submit a generation task and query
    a task's status. Both return a normalized MurekaTask.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.mureka.ai",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Mureka client.

        Args:
            api_key: Mureka API key (from MUREKA_API_KEY env var)
            base_url: API root (default: public endpoint)
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    async def generate_song(self, lyrics: str, model: str, prompt: str) -> MurekaTask:
        """Start a song generation task.

        Args:
            lyrics: Lyric text to sing
            model: Model variant (auto, mureka-5.5, mureka-6)
            prompt: Style prompt

        Returns:
            Task with the external ID and the initial status

        Raises:
            SynthesisError: Any failure; the caller must not persist anything
        """
        payload = {"lyrics": lyrics, "model": model, "prompt": prompt}
        logger.info(
            "mureka.generate.started",
            model=model,
            prompt=prompt,
            lyrics_length=len(lyrics),
        )
        task = await self._request("POST", "/v1/song/generate", json=payload)
        logger.info("mureka.generate.accepted", task_id=task.id, status=task.status.value)
        return task

    async def query_song(self, task_id: str) -> MurekaTask:
        """Fetch the current status of a song generation task.

        Args:
            task_id: External task ID returned by generate_song

        Raises:
            SynthesisError: Any failure
        """
        return await self._request("GET", f"/v1/song/query/{task_id}")

    async def _request(self, method: str, path: str, json: Any = None) -> MurekaTask:
        if not self.api_key:
            raise SynthesisConfigError("MUREKA_API_KEY not configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(
                    method, f"{self.base_url}{path}", headers=self.headers, json=json
                )
        except httpx.TimeoutException as e:
            raise SynthesisNetworkError(f"Request timeout after {self.timeout}s: {e}") from e
        except httpx.HTTPError as e:
            raise SynthesisNetworkError(f"Network error: {e}") from e

        error = classify_response(response)
        if error is not None:
            raise error

        try:
            return MurekaTask.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise SynthesisResponseError(f"Unexpected response from Mureka: {e}") from e
