"""
Attention engine HTTP API.

Exposes the attention feed and its mutation endpoints. Caller identity is
resolved upstream and arrives as an opaque user id in a request header
(X-User-Id by default).
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from attention_engine import __version__
from attention_engine.config import EngineSettings, load_settings
from attention_engine.engine.errors import AttentionError
from attention_engine.engine.models import AttentionFeed
from attention_engine.service import AttentionService, build_default_service

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class AttentionIdRequest(BaseModel):
    attention_id: Any = None


class SnoozeRequest(BaseModel):
    attention_id: Any = None
    snoozed_until: Any = None
    hours: Any = None


class DismissRequest(BaseModel):
    attention_id: Any = None
    reason: Any = None
    note: Optional[str] = None


def get_service(request: Request) -> AttentionService:
    return request.app.state.attention_service


def get_user_id(request: Request) -> Optional[str]:
    """Opaque caller id from the configured header (validated by the service)."""
    header = request.app.state.attention_service.settings.user_header
    return request.headers.get(header)


router = APIRouter(prefix="/attention", tags=["attention"])


@router.get("", response_model=AttentionFeed)
async def get_attention(
    window_hours: Optional[str] = None,
    user_id: Optional[str] = Depends(get_user_id),
    service: AttentionService = Depends(get_service)
):
    """Compute the caller's attention feed over the last ``window_hours`` hours."""
    return await service.get_feed(user_id, window_hours)


@router.post("/ack")
async def acknowledge(
    body: AttentionIdRequest,
    user_id: Optional[str] = Depends(get_user_id),
    service: AttentionService = Depends(get_service)
):
    await service.acknowledge(user_id, body.attention_id)
    return {"success": True}


@router.post("/snooze")
async def snooze(
    body: SnoozeRequest,
    user_id: Optional[str] = Depends(get_user_id),
    service: AttentionService = Depends(get_service)
):
    """Snooze until ``snoozed_until``, or for ``hours`` when no timestamp is given."""
    if body.snoozed_until is None and body.hours is not None:
        await service.snooze_for(user_id, body.attention_id, body.hours)
    else:
        await service.snooze(user_id, body.attention_id, body.snoozed_until)
    return {"success": True}


@router.post("/dismiss")
async def dismiss(
    body: DismissRequest,
    user_id: Optional[str] = Depends(get_user_id),
    service: AttentionService = Depends(get_service)
):
    """Dismiss permanently. ``reason`` and ``note`` are optional."""
    if body.reason is not None or body.note is not None:
        await service.dismiss_with_reason(user_id, body.attention_id, body.reason, body.note)
    else:
        await service.dismiss(user_id, body.attention_id)
    return {"success": True}


@router.post("/mark-read")
async def mark_read(
    body: AttentionIdRequest,
    user_id: Optional[str] = Depends(get_user_id),
    service: AttentionService = Depends(get_service)
):
    await service.mark_read(user_id, body.attention_id)
    return {"success": True}


def create_app(
    service: Optional[AttentionService] = None,
    settings: Optional[EngineSettings] = None
) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        service: Preconfigured service (tests inject one); built from the
            configured database when omitted
        settings: Engine settings (read from the environment when omitted)
    """
    owns_database = service is None
    if service is None:
        service = build_default_service(settings or load_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup and shutdown events."""
        if owns_database:
            from attention_engine.db.database import init_db
            init_db()
        logger.info(f"Attention engine ready with {len(service.collectors)} collectors")
        yield
        logger.info("Attention engine shutting down")

    app = FastAPI(
        title="attention-engine",
        description="Ranks what needs a user's attention across workspace sources",
        version=__version__,
        lifespan=lifespan
    )
    app.state.attention_service = service

    @app.exception_handler(AttentionError)
    async def attention_error_handler(request: Request, exc: AttentionError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.client_message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return JSONResponse(status_code=400, content={"error": message})

    @app.get("/")
    async def root():
        """API root - shows available endpoints."""
        return {
            "service": "attention-engine",
            "version": __version__,
            "docs": "/docs",
            "endpoints": {
                "health": "/health",
                "feed": "/attention?window_hours=24",
                "ack": "/attention/ack",
                "snooze": "/attention/snooze",
                "dismiss": "/attention/dismiss",
                "mark_read": "/attention/mark-read"
            }
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok", "service": "attention-engine"}

    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "attention_engine.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000"))
    )
