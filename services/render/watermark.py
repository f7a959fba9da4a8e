"""Watermark strategy selection per plan tier and asset availability."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Iterable

from services.render.errors import WatermarkDownloadError
from shared.config import config
from shared.enums import PlanTier, WatermarkMode
from shared.logging_utils import setup_logging

logger = setup_logging("watermark-selector")

AssetFetcher = Callable[[str], Awaitable[Path]]


@dataclass(frozen=True)
class WatermarkDecision:
    mode: WatermarkMode
    asset_path: Path | None = None
    reason: str = ""


class WatermarkSelector:
    """Decide NONE / IMAGE / TEXT once per job.

    The tier check runs first; the asset is only fetched when the tier needs
    branding, and a failed fetch demotes IMAGE to TEXT instead of failing.
    """

    def __init__(self, watermark_tiers: Iterable[str] | None = None) -> None:
        tiers = (
            watermark_tiers
            if watermark_tiers is not None
            else config.get_pipeline_value("watermark.tiers", ["free", "trial"])
        )
        self.watermark_tiers = {str(tier).strip().lower() for tier in tiers}

    def requires_watermark(self, tier: PlanTier | str) -> bool:
        value = tier.value if isinstance(tier, PlanTier) else str(tier).strip().lower()
        return value in self.watermark_tiers

    async def select(
        self,
        tier: PlanTier | str,
        watermark_url: str | None,
        fetch_asset: AssetFetcher,
    ) -> WatermarkDecision:
        if not self.requires_watermark(tier):
            return WatermarkDecision(WatermarkMode.NONE, reason="plan tier has no watermark")

        if not watermark_url:
            return WatermarkDecision(WatermarkMode.TEXT, reason="no watermark asset supplied")

        try:
            asset_path = await fetch_asset(watermark_url)
        except WatermarkDownloadError as e:
            logger.warning(f"Watermark asset unavailable, falling back to text watermark: {e}")
            return WatermarkDecision(WatermarkMode.TEXT, reason=f"watermark download failed: {e}")

        return WatermarkDecision(WatermarkMode.IMAGE, asset_path=asset_path, reason="watermark asset downloaded")
