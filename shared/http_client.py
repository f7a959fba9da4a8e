"""
HTTP client utilities for media downloads and webhook delivery.
"""

import asyncio
from pathlib import Path
from typing import Any

import aiohttp

DOWNLOAD_CHUNK_SIZE = 1024 * 1024


class AsyncHTTPClient:
    """Async HTTP client used for fetching render inputs and posting callbacks."""

    def __init__(self, timeout: float = 30) -> None:
        """Initialize HTTP client."""
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "AsyncHTTPClient":
        """Enter async context manager."""
        self.session = aiohttp.ClientSession(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        if self.session:
            await self.session.close()

    @staticmethod
    async def _prepare_request(coro_or_ctx: Any) -> Any:
        """Normalize aiohttp request result to an async context manager."""
        if asyncio.iscoroutine(coro_or_ctx):
            return await coro_or_ctx
        return coro_or_ctx

    @staticmethod
    async def _ensure_response_ok(response: Any) -> None:
        """Invoke raise_for_status, awaiting when necessary."""
        result = response.raise_for_status()
        if asyncio.iscoroutine(result):
            await result

    def _require_session(self) -> aiohttp.ClientSession:
        if not self.session:
            raise RuntimeError("HTTP client not initialized. Use async context manager.")
        return self.session

    async def download(self, url: str, destination: Path, headers: dict[str, Any] | None = None) -> int:
        """Stream a remote file to disk and return the number of bytes written.

        Chunk writes run in a worker thread so large files do not stall the event loop.
        """
        session = self._require_session()

        request_ctx = await self._prepare_request(session.get(url, headers=headers))
        written = 0
        async with request_ctx as response:
            await self._ensure_response_ok(response)
            with open(destination, "wb") as handle:
                async for chunk in response.content.iter_chunked(DOWNLOAD_CHUNK_SIZE):
                    await asyncio.to_thread(handle.write, chunk)
                    written += len(chunk)
        return written

    async def post(
        self,
        url: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, Any] | None = None,
    ) -> int:
        """Perform POST request with a JSON body and return the response status."""
        session = self._require_session()

        request_ctx = await self._prepare_request(
            session.post(url, json=data, headers=headers)
        )
        async with request_ctx as response:
            await self._ensure_response_ok(response)
            return response.status
