"""Caption burn-in render service.

This service runs one render job end to end:
- Downloading the source video and optional watermark asset
- Probing the real resolution and compiling the caption document
- Compositing watermark and captions with ffmpeg
- Publishing the artifact and notifying the caller's webhook
"""

__version__ = "1.0.0"
