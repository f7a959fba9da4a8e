"""Tests for shared-secret request authorization."""

import pytest

from services.auth import authorize_request, extract_credential, verify_render_secret
from services.render.errors import AuthError


class TestExtractCredential:
    def test_header_preferred(self) -> None:
        assert extract_credential("header", {"render_secret": "body"}) == "header"

    def test_body_field_fallback(self) -> None:
        assert extract_credential(None, {"render_secret": "body"}) == "body"
        assert extract_credential("", {"render_secret": "body"}) == "body"

    @pytest.mark.parametrize("payload", [None, [], "text", {"render_secret": 123}, {"render_secret": ""}])
    def test_no_credential(self, payload: object) -> None:
        assert extract_credential(None, payload) is None


class TestVerifyRenderSecret:
    """Test constant-time secret comparison."""

    def test_matching_secret(self) -> None:
        verify_render_secret("s3cret", expected="s3cret")

    @pytest.mark.parametrize("presented", [None, "", "s3cre", "s3cret ", "S3CRET"])
    def test_mismatch(self, presented: object) -> None:
        with pytest.raises(AuthError) as excinfo:
            verify_render_secret(presented, expected="s3cret")
        assert excinfo.value.status_code == 401
        assert excinfo.value.message == "unauthorized"

    def test_unset_server_secret_rejects(self) -> None:
        from shared.config import config as service_config

        service_config.set("render_secret", "")
        with pytest.raises(AuthError):
            verify_render_secret("")
        with pytest.raises(AuthError):
            verify_render_secret("anything")

    def test_defaults_to_configured_secret(self) -> None:
        from shared.config import config as service_config

        service_config.set("render_secret", "from-env")
        verify_render_secret("from-env")

    def test_non_ascii_secret(self) -> None:
        verify_render_secret("clé-secrète", expected="clé-secrète")
        with pytest.raises(AuthError):
            verify_render_secret("cle-secrete", expected="clé-secrète")

    def test_authorize_request_uses_body(self) -> None:
        authorize_request(None, {"render_secret": "abc"}, expected="abc")
        with pytest.raises(AuthError):
            authorize_request("wrong", {"render_secret": "abc"}, expected="abc")
