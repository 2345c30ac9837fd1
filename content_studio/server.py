"""
Content Studio HTTP Server
==========================

FastAPI surface for the presentation layer: read the workflow state,
start a run, retry one scene image, and move between stages.

Usage:
    uvicorn content_studio.server:app --reload --port 8000
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI, BackgroundTasks, HTTPException
from pydantic import BaseModel, field_validator

from . import __version__
from .api import get_client
from .core.config import get_config
from .core.exceptions import ValidationError
from .models import LengthTier, Stage
from .workflow import ContentPipeline

logger = logging.getLogger(__name__)


class RunRequest(BaseModel):
    """Request model for a pipeline run."""
    topic: str
    length: LengthTier = LengthTier.MEDIUM

    @field_validator("length", mode="before")
    @classmethod
    def parse_length(cls, value):
        try:
            return LengthTier.parse(value)
        except ValidationError as e:
            raise ValueError(e.message)


class NavigateRequest(BaseModel):
    """Request model for stage navigation."""
    stage: Stage


def create_app(pipeline: Optional[ContentPipeline] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        pipeline: Pipeline to serve (built from the global config on
            startup when omitted)
    """
    app = FastAPI(
        title="Content Studio API",
        description="Turn one topic into a YouTube content package",
        version=__version__,
    )
    app.state.pipeline = pipeline

    def _pipeline() -> ContentPipeline:
        if app.state.pipeline is None:
            raise HTTPException(status_code=503, detail="Pipeline not initialized")
        return app.state.pipeline

    @app.on_event("startup")
    async def startup():
        """Initialize the pipeline on startup."""
        if app.state.pipeline is None:
            config = get_config()
            client = get_client(config.service.provider, config=config)
            app.state.pipeline = ContentPipeline(client, config=config)
            logger.info("Content pipeline initialized")

    @app.on_event("shutdown")
    async def shutdown():
        """Cleanup on shutdown."""
        if app.state.pipeline is not None:
            await app.state.pipeline.close()

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Content Studio API",
            "version": __version__,
            "endpoints": {
                "state": "GET /state",
                "run": "POST /run",
                "retry": "POST /scenes/{index}/retry",
                "navigate": "POST /navigate",
                "reset": "POST /reset",
            },
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "pipeline_ready": app.state.pipeline is not None,
            "api_configured": bool(get_config().service.api_key or os.getenv("GEMINI_API_KEY")),
        }

    @app.get("/state")
    async def get_state():
        """Current workflow state."""
        return _pipeline().store.snapshot()

    @app.post("/run", status_code=202)
    async def start_run(request: RunRequest, background_tasks: BackgroundTasks):
        """
        Start a pipeline run.

        The run happens in the background. Poll /state for progress.
        """
        pipeline = _pipeline()
        if not request.topic.strip():
            raise HTTPException(status_code=400, detail="Topic is required")
        # Claimed synchronously so a second request sees is_processing
        if not pipeline.begin(request.topic, request.length):
            raise HTTPException(status_code=409, detail="A run is already in progress")

        background_tasks.add_task(pipeline.execute)

        return {
            "status": "started",
            "length": request.length.value,
            "target_chars": request.length.target_chars,
            "message": "Run started. Check /state for progress.",
        }

    @app.post("/scenes/{index}/retry")
    async def retry_scene(index: int):
        """Regenerate one scene image. The previous image is kept on failure."""
        pipeline = _pipeline()
        script = pipeline.state.script
        if script is None:
            raise HTTPException(status_code=409, detail="No script yet")
        if not 0 <= index < len(script.scenes):
            raise HTTPException(status_code=404, detail="Scene not found")

        outcome = await pipeline.retry_scene(index)
        if outcome is None:
            raise HTTPException(status_code=409, detail="Scene is already generating")

        return {
            "index": outcome.index,
            "succeeded": outcome.succeeded,
            "error": outcome.error,
        }

    @app.post("/navigate")
    async def navigate(request: NavigateRequest):
        """Select the displayed stage."""
        if not _pipeline().navigate(request.stage):
            raise HTTPException(status_code=409, detail="Only the active stage is available during a run")
        return {"current_stage": request.stage.value}

    @app.post("/reset")
    async def reset():
        """Start over from the input stage."""
        if not _pipeline().reset():
            raise HTTPException(status_code=409, detail="A run is in progress")
        return {"current_stage": Stage.INPUT.value}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
