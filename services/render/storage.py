"""Artifact publishing to Google Cloud Storage."""

from __future__ import annotations

import asyncio
import time
from datetime import timedelta
from pathlib import Path
from typing import Any

from google.cloud import storage

from services.render.errors import UploadError
from shared.config import config
from shared.file_utils import sanitize_filename
from shared.logging_utils import setup_logging

logger = setup_logging("artifact-store")

ARTIFACT_PREFIX = "renders"
ARTIFACT_CONTENT_TYPE = "video/mp4"


def artifact_key(job_id: str, timestamp_ms: int | None = None) -> str:
    """Object key for a job's rendered video: renders/<job_id>-<epoch ms>.mp4."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{ARTIFACT_PREFIX}/{sanitize_filename(job_id)}-{timestamp_ms}.mp4"


class ArtifactStore:
    """Uploads rendered videos and hands back a URL callers can fetch."""

    def __init__(
        self,
        bucket_name: str | None = None,
        client: Any = None,
        signed_url_expiry_days: int | None = None,
        use_signed_urls: bool | None = None,
    ) -> None:
        self.bucket_name = bucket_name or config.get("bucket_name")
        self._client = client
        self.signed_url_expiry = timedelta(
            days=signed_url_expiry_days
            if signed_url_expiry_days is not None
            else config.get("signed_url_expiry_days", 7)
        )
        self.use_signed_urls = (
            use_signed_urls if use_signed_urls is not None else config.get("use_signed_urls", True)
        )

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = storage.Client(project=config.get("gcp_project"))
        return self._client

    async def upload(self, local_path: Path, job_id: str) -> str:
        """Upload the artifact and return its signed (or public) URL.

        Raises:
            UploadError: If the bucket is not configured or the upload fails
        """
        if not self.bucket_name:
            raise UploadError("Artifact bucket not configured")

        key = artifact_key(job_id)
        try:
            url = await asyncio.to_thread(self._upload_sync, local_path, key)
        except UploadError:
            raise
        except Exception as e:
            raise UploadError(f"Upload of {key} failed: {e}") from e

        logger.info(f"Uploaded artifact gs://{self.bucket_name}/{key}")
        return url

    def _upload_sync(self, local_path: Path, key: str) -> str:
        bucket = self.client.bucket(self.bucket_name)
        blob = bucket.blob(key)
        blob.upload_from_filename(str(local_path), content_type=ARTIFACT_CONTENT_TYPE)

        if not self.use_signed_urls:
            return blob.public_url

        return blob.generate_signed_url(
            version="v4",
            expiration=self.signed_url_expiry,
            method="GET",
        )
