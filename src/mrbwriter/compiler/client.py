"""Async HTTP client for the remote mruby compiler service."""

from __future__ import annotations

from urllib.parse import quote

import httpx
from pydantic import ValidationError

from mrbwriter.exceptions import CompileFailedError
from mrbwriter.models.compile import CompileResponse, SourceCode
from mrbwriter.settings import DEFAULT_COMPILER_URL, DEFAULT_HTTP_TIMEOUT
from mrbwriter.utils.logging import get_logger

logger = get_logger(__name__)


class CompilerClient:
    """Client for the compiler service.

    Usage:
        async with CompilerClient("http://compiler:8080") as client:
            source = await client.get_source("abc123")
            result = await client.compile("abc123")
    """

    def __init__(
        self,
        base_url: str = DEFAULT_COMPILER_URL,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout, connect=10.0),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> CompilerClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def get_source(self, source_id: str) -> SourceCode | None:
        """Fetch the source stored under *source_id*.

        Returns None when the service has no source for the id, the request
        fails, or the body has no ``code`` field.
        """
        path = f"/code/{quote(source_id, safe='')}"
        try:
            response = await self._client.get(path)
            response.raise_for_status()
            return SourceCode.model_validate(response.json())
        except (httpx.HTTPError, ValueError, ValidationError) as exc:
            logger.info("source_fetch_failed", source_id=source_id, error=str(exc))
            return None

    async def compile(self, source_id: str) -> CompileResponse:
        """Ask the service to compile the source stored under *source_id*.

        Raises:
            CompileFailedError: If the request fails or the body is malformed.
        """
        path = f"/code/{quote(source_id, safe='')}/compile"
        try:
            response = await self._client.post(path)
            response.raise_for_status()
            return CompileResponse.model_validate(response.json())
        except (httpx.HTTPError, ValueError, ValidationError) as exc:
            logger.warning("compile_request_failed", source_id=source_id, error=str(exc))
            raise CompileFailedError("Compile failed.") from exc
