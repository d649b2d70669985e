"""
FastAPI application factory.

``create_app()`` assembles the application with CORS, error handlers,
the review router, the health endpoint and the static landing page. The
module-level ``app`` instance allows ``uvicorn src.api.app:app --reload``;
``main()`` backs the ``vocal-review-api`` console script.
"""

import html
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse

from src.api.middleware.error_handler import register_error_handlers
from src.api.routes import reviews
from src.core.config import get_settings
from src.core.models import HealthResponse
from src.core.utils import configure_logging
from src.services.audio.transcoder import TranscodeQueue
from src.services.review_pipeline import ReviewPipeline, build_review_pipeline


WIZARD_URL_PLACEHOLDER = "{{WIZARD_URL}}"


def render_landing_page(index: Path, wizard_url: str) -> str:
    """Return the landing page with the wizard address filled in."""
    return index.read_text(encoding="utf-8").replace(WIZARD_URL_PLACEHOLDER, html.escape(wizard_url))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the shared transcode worker and build the pipeline."""
    queue = TranscodeQueue()
    queue.start()
    app.state.transcode_queue = queue
    if app.state.review_pipeline is None:
        app.state.review_pipeline = build_review_pipeline(get_settings(), queue)
    try:
        yield
    finally:
        await queue.stop()


def create_app(pipeline: ReviewPipeline | None = None) -> FastAPI:
    """Build and return a fully configured FastAPI application.

    Args:
        pipeline: Pre-built pipeline; when None one is assembled from settings
            at startup (or lazily on the first request).
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Vocal Review",
        description="Monthly employee review wizard backend: transcription, "
        "archival and spreadsheet recording of voice feedback.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.review_pipeline = pipeline
    app.state.transcode_queue = None

    # -- CORS --
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            settings.wizard_url,  # Streamlit wizard
            "http://localhost:3000",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -- Error handlers --
    register_error_handlers(app)

    # -- Health check --
    @app.get("/health", response_model=HealthResponse, tags=["system"])
    async def health() -> HealthResponse:
        return HealthResponse(timestamp=datetime.now(UTC))

    # -- REST routes --
    app.include_router(reviews.router, prefix="/api")

    # -- Static landing page (registered last: catches every other GET) --
    static_root = Path(settings.static_dir or Path(__file__).parent / "static").resolve()

    @app.get("/{full_path:path}", include_in_schema=False)
    async def static_page(full_path: str):
        index = static_root / "index.html"
        candidate = (static_root / full_path).resolve()
        if full_path and candidate != index and candidate.is_file() and candidate.is_relative_to(static_root):
            return FileResponse(candidate)
        if index.is_file():
            return HTMLResponse(render_landing_page(index, get_settings().wizard_url))
        return JSONResponse(status_code=404, content={"error": "Not found", "code": "NOT_FOUND"})

    return app


app = create_app()


def main() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    settings = get_settings()
    uvicorn.run("src.api.app:app", host=settings.app_host, port=settings.app_port)


if __name__ == "__main__":
    main()
