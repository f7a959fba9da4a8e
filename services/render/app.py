"""Render service API endpoints."""

import json

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from services.auth import render_secret_header
from services.render import __version__
from services.render.fonts import FontIndex
from services.render.orchestrator import RenderPipeline
from shared.config import config
from shared.logging_utils import setup_logging
from shared.response_models import HealthResponse, RenderErrorResponse, RenderSuccessResponse

logger = setup_logging("render-service", config.get("log_level", "INFO"))

app = FastAPI(
    title="Render Service",
    description="Burns styled two-line captions and plan watermarks into videos",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Font index is scanned once per process and shared by every job
font_index = FontIndex.build(config.get("fonts_dirs", []))
pipeline = RenderPipeline(font_index=font_index)


@app.get("/", response_class=PlainTextResponse)
async def root() -> str:
    """Liveness probe."""
    return "Render service is running"


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint for the render service."""
    return HealthResponse(
        status="healthy",
        message="Render Service is healthy",
        version=__version__,
        dependencies={
            "fonts": f"{len(font_index)} indexed",
            "storage": "configured" if config.get("bucket_name") else "not configured",
        },
    )


@app.post(
    "/render",
    response_model=RenderSuccessResponse,
    responses={
        400: {"model": RenderErrorResponse},
        401: {"model": RenderErrorResponse},
        500: {"model": RenderErrorResponse},
    },
)
async def render_video(
    request: Request, header_secret: str | None = Depends(render_secret_header)
) -> JSONResponse:
    """Render a captioned video and return the published artifact URL.

    The shared secret may be sent as the ``x-render-secret`` header or as a
    ``render_secret`` body field. It is checked before the body is validated.
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        # Not an object; still authorized first, then rejected as invalid
        payload = None

    status_code, body = await pipeline.process_request(payload, header_secret)
    return JSONResponse(status_code=status_code, content=body)
