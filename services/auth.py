import hmac
from typing import Any

from fastapi.security import APIKeyHeader

from services.render.errors import AuthError
from shared.config import config

RENDER_SECRET_HEADER = "x-render-secret"
RENDER_SECRET_FIELD = "render_secret"

# auto_error=False so the body field can be checked when the header is missing
render_secret_header = APIKeyHeader(name=RENDER_SECRET_HEADER, auto_error=False)


def extract_credential(header_secret: str | None, payload: Any) -> str | None:
    """Return the presented credential, preferring the header over the body field."""
    if header_secret:
        return header_secret
    if isinstance(payload, dict):
        body_secret = payload.get(RENDER_SECRET_FIELD)
        if isinstance(body_secret, str) and body_secret:
            return body_secret
    return None


def verify_render_secret(presented: str | None, expected: str | None = None) -> None:
    """Compare the presented credential with the configured shared secret.

    Raises:
        AuthError: If no secret is configured, none was presented, or they differ
    """
    expected = expected if expected is not None else config.get("render_secret")
    if not expected or not presented:
        raise AuthError()
    if not hmac.compare_digest(presented.encode("utf-8"), expected.encode("utf-8")):
        raise AuthError()


def authorize_request(header_secret: str | None, payload: Any, expected: str | None = None) -> None:
    """Authorize a render request before any of its fields are validated."""
    verify_render_secret(extract_credential(header_secret, payload), expected)
