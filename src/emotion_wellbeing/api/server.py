"""FastAPI application — the local dashboard shell.

Each ``GET /dashboard`` is one refresh cycle: the pipeline runs, and its
result is returned together with the display-ready screen.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from emotion_wellbeing.api.auth import router as auth_router
from emotion_wellbeing.api.middleware import setup_middleware
from emotion_wellbeing.config import get_settings
from emotion_wellbeing.pipeline import WellbeingPipeline, create_pipeline
from emotion_wellbeing.presentation import build_screen, render_text
from emotion_wellbeing.storage.database import dispose_engines, init_db

logger = structlog.get_logger(__name__)


def create_app(pipeline: WellbeingPipeline | None = None) -> FastAPI:
    """Build the shell; an injected ``pipeline`` skips the default wiring."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup / shutdown lifecycle hooks."""
        if pipeline is None:
            settings = get_settings()
            await init_db(settings.database_url)
            app.state.pipeline = create_pipeline(settings)
        else:
            app.state.pipeline = pipeline
        logger.info("server.started")

        yield

        await app.state.pipeline.close()
        if pipeline is None:
            await dispose_engines()
        logger.info("server.stopped")

    app = FastAPI(
        title="Emotion Wellbeing",
        description="Local dashboard for fitness, sleep, usage and wellbeing prediction.",
        version="0.1.0",
        lifespan=lifespan,
    )
    setup_middleware(app)
    app.include_router(auth_router)

    @app.get("/health", tags=["system"])
    async def health():
        return {"status": "ok"}

    @app.get("/dashboard", tags=["dashboard"])
    async def dashboard(request: Request):
        result = await request.app.state.pipeline.run()
        return {
            "result": result.model_dump(mode="json"),
            "screen": build_screen(result).model_dump(mode="json"),
        }

    @app.get("/dashboard.txt", tags=["dashboard"], response_class=PlainTextResponse)
    async def dashboard_text(request: Request):
        result = await request.app.state.pipeline.run()
        return render_text(build_screen(result))

    return app


app = create_app()
