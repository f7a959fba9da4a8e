"""
CaptionBurn Renderer - Application Entry Point
Mounts the render service under a single FastAPI application
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from services.render import app as render_module
from shared.config import config
from shared.logging_utils import setup_logging

logger = setup_logging("captionburn-renderer", config.get("log_level", "INFO"))

render_app = render_module.app

app = FastAPI(
    title="CaptionBurn Renderer API",
    description="""
    Caption burn-in rendering for short-form video.

    POST /render composites styled captions and plan watermarks onto a video
    and publishes the result to object storage.
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {
            "name": "Health",
            "description": "Service health and status endpoints",
        },
        {
            "name": "Render",
            "description": "Caption burn-in rendering",
        },
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes to exclude (internal FastAPI docs routes)
EXCLUDED_PATHS = {"/openapi.json", "/docs", "/docs/oauth2-redirect", "/redoc"}

# Render routes are served from the root so callers keep posting to /render
for route in render_app.routes:
    if hasattr(route, "path") and hasattr(route, "endpoint"):
        if route.path in EXCLUDED_PATHS:
            continue
        route_kwargs = {
            "path": route.path,
            "endpoint": route.endpoint,
            "methods": route.methods,
            "tags": ["Health"] if route.path in {"/", "/health"} else ["Render"],
        }
        if hasattr(route, "name"):
            route_kwargs["name"] = f"render_{route.name}"
        if hasattr(route, "response_model"):
            route_kwargs["response_model"] = route.response_model
        if hasattr(route, "response_class"):
            route_kwargs["response_class"] = route.response_class
        if hasattr(route, "responses"):
            route_kwargs["responses"] = route.responses
        app.add_api_route(**route_kwargs)


if __name__ == "__main__":
    import uvicorn

    port = config.get("port", 8080)
    logger.info(f"Starting CaptionBurn Renderer on http://0.0.0.0:{port}")
    uvicorn.run("app:app", host="0.0.0.0", port=port, log_level="info")
