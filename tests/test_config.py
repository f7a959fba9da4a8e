"""Tests for service configuration."""

import os
from pathlib import Path
from unittest.mock import patch

from shared.config import ServiceConfig, config as service_config


class TestServiceConfig:
    """Test environment and YAML configuration loading."""

    def test_environment_values(self) -> None:
        env = {
            "RENDER_SECRET": "abc",
            "BUCKET_NAME": "renders-bucket",
            "FONTS_DIR": os.pathsep.join(["/fonts/a", "", "/fonts/b"]),
            "SIGNED_URL_EXPIRY_DAYS": "3",
            "USE_SIGNED_URLS": "false",
            "CALLBACK_TIMEOUT_SECONDS": "2.5",
        }
        with patch.dict(os.environ, env):
            loaded = ServiceConfig()

        assert loaded.get("render_secret") == "abc"
        assert loaded.get("bucket_name") == "renders-bucket"
        assert loaded.get("fonts_dirs") == ["/fonts/a", "/fonts/b"]
        assert loaded.get("signed_url_expiry_days") == 3
        assert loaded.get("use_signed_urls") is False
        assert loaded.get("callback_timeout") == 2.5

    def test_get_returns_default_for_none(self) -> None:
        service_config.set("gcp_project", None)
        assert service_config.get("gcp_project", "fallback") == "fallback"

    def test_render_yaml_loaded(self) -> None:
        service_config.load_pipeline_config()

        assert service_config.get_pipeline_value("layout.scale_policy") == "linear"
        assert service_config.get_pipeline_value("watermark.tiers") == ["free", "trial"]
        assert service_config.get_pipeline_value("style_defaults.color_bottom") == "#FFD100"
        assert service_config.get_pipeline_value("missing.key", 7) == 7

    def test_env_override(self) -> None:
        service_config.set_pipeline_config({"encode": {"crf": 18}})
        with patch.dict(os.environ, {"PIPELINE_FLAG_ENCODE_CRF": "22", "PIPELINE_FLAG_LAYOUT_SCALE_POLICY": "damped"}):
            assert service_config.get_pipeline_value("encode.crf", 18) == 22
            assert service_config.get_pipeline_value("layout.scale_policy", "linear") == "damped"

    def test_missing_config_file(self, tmp_path: Path) -> None:
        with patch.dict(os.environ, {"RENDER_CONFIG_PATH": str(tmp_path / "absent.yaml")}):
            loaded = ServiceConfig()

        assert loaded.pipeline_config == {}
        assert loaded.get_pipeline_value("layout.line_gap", 12) == 12
