"""Best-effort webhook delivery once a render has been published."""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp

from services.render.errors import CallbackError
from shared.config import config
from shared.http_client import AsyncHTTPClient
from shared.logging_utils import get_callback_failure_logger, setup_logging

logger = setup_logging("callback-notifier")
failure_logger = get_callback_failure_logger()


class CallbackNotifier:
    """Fire-and-forget callback dispatch.

    Deliveries run as detached tasks so the render response never waits on the
    caller's webhook. Failures go to the callback failure channel and are
    otherwise ignored.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout if timeout is not None else config.get("callback_timeout", 10.0)
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def dispatch(self, url: str | None, payload: dict[str, Any]) -> asyncio.Task[None] | None:
        if not url:
            return None
        task = asyncio.create_task(self._deliver(url, payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _deliver(self, url: str, payload: dict[str, Any]) -> None:
        try:
            await self._post(url, payload)
        except CallbackError as e:
            failure_logger.warning(f"Callback for job {payload.get('job_id')} to {url} failed: {e}")
            return
        logger.info(f"Callback delivered for job {payload.get('job_id')}")

    async def _post(self, url: str, payload: dict[str, Any]) -> None:
        try:
            async with AsyncHTTPClient(timeout=self.timeout) as client:
                await client.post(url, data=payload)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            raise CallbackError(str(e) or e.__class__.__name__) from e

    async def drain(self) -> None:
        """Wait for in-flight deliveries, used on shutdown and in tests."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
