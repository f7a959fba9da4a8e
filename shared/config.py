"""
Configuration management for the render service.
"""

import json
import os
from typing import Any

import yaml

from dotenv import load_dotenv


class ServiceConfig:
    """Configuration management using environment variables and a YAML render config."""

    def __init__(self) -> None:
        """Initialize configuration by loading environment variables."""
        # .env lives next to app.py
        env_path = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.env"))
        load_dotenv(dotenv_path=env_path, override=False)
        self.config: dict[str, Any] = {}
        self.pipeline_config: dict[str, Any] = {}
        self.pipeline_config_path = os.getenv(
            "RENDER_CONFIG_PATH",
            os.path.join(os.path.dirname(__file__), "../config/render.yaml"),
        )
        self.load_from_env()
        self.load_pipeline_config()

    def load_from_env(self) -> None:
        """Load configuration from environment variables."""
        self.config = {
            "render_secret": os.getenv("RENDER_SECRET"),
            "bucket_name": os.getenv("BUCKET_NAME"),
            "gcp_project": os.getenv("GCP_PROJECT"),
            "fonts_dirs": [
                path
                for path in os.getenv("FONTS_DIR", "/app/fonts" + os.pathsep + "/usr/share/fonts").split(
                    os.pathsep
                )
                if path
            ],
            "tmp_dir": os.getenv("RENDER_TMP_DIR", "/tmp"),
            "ffmpeg_binary": os.getenv("FFMPEG_BINARY", "ffmpeg"),
            "ffprobe_binary": os.getenv("FFPROBE_BINARY", "ffprobe"),
            "callback_timeout": float(os.getenv("CALLBACK_TIMEOUT_SECONDS", "10")),
            "download_timeout": float(os.getenv("DOWNLOAD_TIMEOUT_SECONDS", "300")),
            "signed_url_expiry_days": int(os.getenv("SIGNED_URL_EXPIRY_DAYS", "7")),
            "use_signed_urls": os.getenv("USE_SIGNED_URLS", "true").lower() == "true",
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
            "allowed_origins": json.loads(os.getenv("ALLOWED_ORIGINS", '["*"]')),
            "port": int(os.getenv("PORT", "8080")),
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value
        """
        value = self.config.get(key, default)
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value.

        Args:
            key: Configuration key
            value: Configuration value
        """
        self.config[key] = value

    def reload(self) -> None:
        """Reload configuration from environment variables and the render config file."""
        self.load_from_env()
        self.load_pipeline_config()

    def load_pipeline_config(self) -> None:
        """Load render pipeline configuration from YAML file."""
        path = os.path.abspath(self.pipeline_config_path)
        try:
            with open(path, "r", encoding="utf-8") as stream:
                data = yaml.safe_load(stream) or {}
        except FileNotFoundError:
            data = {}
        self.pipeline_config = data

    def get_pipeline_value(self, path: str, default: Any = None) -> Any:
        """Retrieve a render configuration value via dotted path."""
        env_override_key = f"PIPELINE_FLAG_{path.replace('.', '_').upper()}"
        env_value = os.getenv(env_override_key)
        if env_value is not None:
            return self._coerce_env_value(env_value, default)

        node: Any = self.pipeline_config
        for part in path.split("."):
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return default
        return node if node is not None else default

    def set_pipeline_config(self, pipeline_config: dict[str, Any]) -> None:
        """Override render configuration (useful for tests)."""
        self.pipeline_config = pipeline_config

    @staticmethod
    def _coerce_env_value(raw: str, default: Any) -> Any:
        lowered = raw.lower()
        if lowered in {"true", "false"}:
            return lowered == "true"
        if lowered.replace(".", "", 1).isdigit():
            try:
                return float(lowered) if "." in lowered else int(lowered)
            except ValueError:
                return raw
        return raw or default


# Global configuration instance
config = ServiceConfig()
