"""Tests for best-effort callback delivery."""

import asyncio
from unittest.mock import AsyncMock, patch

import aiohttp
import pytest

from services.render.notifier import CallbackNotifier

PAYLOAD = {"render_secret": "s", "job_id": "job-1", "status": "success", "video_url": "https://x/y.mp4"}


class TestCallbackNotifier:
    """Test detached webhook delivery."""

    @pytest.mark.asyncio
    async def test_dispatch_posts_payload(self) -> None:
        notifier = CallbackNotifier(timeout=1)
        with patch.object(CallbackNotifier, "_post", AsyncMock()) as post:
            task = notifier.dispatch("https://hooks.example.com/done", PAYLOAD)
            await notifier.drain()

        assert task is not None and task.done()
        post.assert_awaited_once_with("https://hooks.example.com/done", PAYLOAD)
        assert notifier.pending == 0

    @pytest.mark.asyncio
    async def test_dispatch_without_url_is_noop(self) -> None:
        assert CallbackNotifier().dispatch(None, PAYLOAD) is None
        assert CallbackNotifier().dispatch("", PAYLOAD) is None

    @pytest.mark.asyncio
    async def test_dispatch_does_not_wait_for_delivery(self) -> None:
        release = asyncio.Event()

        async def slow_post(url: str, payload: dict) -> None:
            await release.wait()

        notifier = CallbackNotifier()
        with patch.object(notifier, "_post", slow_post):
            task = notifier.dispatch("https://hooks.example.com/done", PAYLOAD)
            assert notifier.pending == 1
            assert not task.done()
            release.set()
            await notifier.drain()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError(), OSError("unreachable")],
    )
    async def test_failures_are_logged_not_raised(self, error: Exception) -> None:
        notifier = CallbackNotifier(timeout=0.1)
        with patch("services.render.notifier.AsyncHTTPClient") as client_class, patch(
            "services.render.notifier.failure_logger"
        ) as failure_logger:
            client = client_class.return_value.__aenter__.return_value
            client.post = AsyncMock(side_effect=error)
            client_class.return_value.__aexit__ = AsyncMock(return_value=None)

            task = notifier.dispatch("https://hooks.example.com/done", PAYLOAD)
            await notifier.drain()

        assert task.exception() is None
        failure_logger.warning.assert_called_once()
        assert "job-1" in failure_logger.warning.call_args.args[0]
