"""Tests for watermark strategy selection."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from services.render.errors import WatermarkDownloadError
from services.render.watermark import WatermarkSelector
from shared.enums import PlanTier, WatermarkMode

ASSET = Path("/tmp/watermark.png")


class TestWatermarkSelector:
    """Test the tier / asset selection table."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tier", [PlanTier.PAID, PlanTier.PRO, PlanTier.ENTERPRISE, "paid"])
    async def test_paid_tiers_get_no_watermark(self, tier: object) -> None:
        """The asset is never fetched for tiers without branding."""
        fetch = AsyncMock(return_value=ASSET)
        decision = await WatermarkSelector().select(tier, "https://cdn.example.com/wm.png", fetch)

        assert decision.mode is WatermarkMode.NONE
        fetch.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tier", [PlanTier.FREE, PlanTier.TRIAL, "FREE"])
    async def test_watermark_tier_with_asset_uses_image(self, tier: object) -> None:
        fetch = AsyncMock(return_value=ASSET)
        decision = await WatermarkSelector().select(tier, "https://cdn.example.com/wm.png", fetch)

        assert decision.mode is WatermarkMode.IMAGE
        assert decision.asset_path == ASSET
        fetch.assert_awaited_once_with("https://cdn.example.com/wm.png")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("watermark_url", [None, ""])
    async def test_watermark_tier_without_asset_uses_text(self, watermark_url: object) -> None:
        fetch = AsyncMock()
        decision = await WatermarkSelector().select(PlanTier.FREE, watermark_url, fetch)

        assert decision.mode is WatermarkMode.TEXT
        assert decision.asset_path is None
        fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unreachable_asset_demotes_to_text(self) -> None:
        fetch = AsyncMock(side_effect=WatermarkDownloadError("connection refused"))
        decision = await WatermarkSelector().select(PlanTier.FREE, "https://unreachable.invalid/wm.png", fetch)

        assert decision.mode is WatermarkMode.TEXT
        assert "connection refused" in decision.reason

    @pytest.mark.asyncio
    async def test_unexpected_fetch_errors_propagate(self) -> None:
        fetch = AsyncMock(side_effect=RuntimeError("bug"))
        with pytest.raises(RuntimeError):
            await WatermarkSelector().select(PlanTier.FREE, "https://cdn.example.com/wm.png", fetch)

    def test_tiers_are_configurable(self) -> None:
        selector = WatermarkSelector(watermark_tiers=["Free", "paid"])

        assert selector.requires_watermark(PlanTier.PAID)
        assert selector.requires_watermark("free")
        assert not selector.requires_watermark(PlanTier.TRIAL)
