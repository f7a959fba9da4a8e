"""
Enums and constants used across the application.
"""

from enum import Enum


class PlanTier(str, Enum):
    """Billing plan of the account requesting a render."""

    FREE = "free"
    TRIAL = "trial"
    PAID = "paid"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class WatermarkMode(str, Enum):
    """Resolved branding overlay for a render job."""

    NONE = "none"
    IMAGE = "image"
    TEXT = "text"


class CaptionRole(str, Enum):
    """Which caption line a style record or event belongs to."""

    TOP = "top"
    BOTTOM = "bottom"


class PipelineStep(str, Enum):
    """Ordered steps of a render pipeline run."""

    AUTH = "auth"
    VALIDATE = "validate"
    DOWNLOAD_VIDEO = "download_video"
    PROBE_RESOLUTION = "probe_resolution"
    DOWNLOAD_WATERMARK = "download_watermark"
    BUILD_SUBTITLES = "build_subtitles"
    BUILD_GRAPH = "build_graph"
    ENCODE = "encode"
    UPLOAD = "upload"
    CALLBACK = "callback"
    RESPOND = "respond"
