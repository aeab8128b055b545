"""HTTP client for the DuoDebate service."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from config.settings import ApiConfig
from debate_stream.exceptions import DebateTransportError

from .schemas import DebateRequest, DebateResult, ModelInfo

logger = logging.getLogger(__name__)

DEBATE_PATH = "/api/debate"
DEBATE_STREAM_PATH = "/api/debate/stream"
HEALTH_PATH = "/api/health"
CONFIG_PATH = "/api/config"


class DuoDebateClient:
    """Talks to the DuoDebate API.

    A fresh ``httpx.AsyncClient`` is opened per call. Pass ``transport`` to
    route requests somewhere other than the network (e.g. a
    ``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        api_config: ApiConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_config = api_config or ApiConfig()
        self._transport = transport

    def _client(self, timeout: httpx.Timeout | float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.api_config.base_url,
            timeout=timeout,
            transport=self._transport,
        )

    @property
    def _debate_timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            self.api_config.timeout, connect=self.api_config.connect_timeout
        )

    @asynccontextmanager
    async def stream_debate(
        self, prompt: str, max_rounds: int
    ) -> AsyncIterator[AsyncIterator[bytes]]:
        """Open a debate event stream.

        Yields an async iterator over the raw response body chunks. The
        response is closed when the context exits.

        Raises:
            DebateTransportError: The stream could not be opened, returned a
                non-2xx status, or broke while being read
        """
        request = DebateRequest(prompt=prompt, max_iterations=max_rounds)
        logger.info(
            f"Starting streaming debate ({request.max_iterations} rounds max): {request.prompt[:80]}"
        )

        try:
            async with self._client(self._debate_timeout) as client:
                async with client.stream(
                    "POST",
                    DEBATE_STREAM_PATH,
                    json=request.to_wire(),
                    headers={"Accept": "text/event-stream"},
                ) as response:
                    if response.is_error:
                        raise DebateTransportError(
                            f"HTTP error! status: {response.status_code}",
                            status_code=response.status_code,
                        )
                    yield response.aiter_bytes()
        except (httpx.HTTPError, httpx.StreamError) as e:
            logger.error(f"Debate stream transport failed: {e!r}")
            raise DebateTransportError(f"Debate stream failed: {e}") from e

    async def conduct_debate(self, prompt: str, max_rounds: int) -> DebateResult:
        """Run a whole debate in one blocking request."""
        request = DebateRequest(prompt=prompt, max_iterations=max_rounds)

        try:
            async with self._client(self._debate_timeout) as client:
                response = await client.post(DEBATE_PATH, json=request.to_wire())
                response.raise_for_status()
                return DebateResult.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            logger.error(f"Error conducting debate: {e}")
            raise DebateTransportError(
                f"HTTP error! status: {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Error conducting debate: {e!r}")
            raise DebateTransportError(f"Debate request failed: {e}") from e

    async def check_health(self) -> bool:
        """Return True if the service answers its health endpoint."""
        try:
            async with self._client(self.api_config.health_timeout) as client:
                response = await client.get(HEALTH_PATH)
                return response.is_success
        except httpx.HTTPError as e:
            logger.warning(f"Health check failed: {e!r}")
            return False

    async def get_config(self) -> ModelInfo | None:
        """Fetch the models assigned to each role, or None if unavailable."""
        try:
            async with self._client(self.api_config.health_timeout) as client:
                response = await client.get(CONFIG_PATH)
                response.raise_for_status()
                return ModelInfo.model_validate(response.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Failed to fetch config: {e}")
            return None
