from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
from logging.handlers import RotatingFileHandler

from meetinghub.config import get_settings
from meetinghub.models.base import init_db
from meetinghub.api.action_items import router as action_items_router
from meetinghub.api.auth import router as auth_router
from meetinghub.api.bots import router as bots_router
from meetinghub.api.dashboard import router as dashboard_router
from meetinghub.api.meetings import router as meetings_router
from meetinghub.services.bot_service import BotServiceError
from meetinghub.services.scheduling import MeetingConflictError


logger = logging.getLogger("meetinghub.api")


def _configure_logging() -> None:
    settings = get_settings()
    try:
        log_file = settings.logs_dir / "backend.log"
        handler = RotatingFileHandler(str(log_file), maxBytes=5_000_000, backupCount=2)
        formatter = logging.Formatter(
            fmt='%(asctime)s %(levelname)s %(name)s %(message)s'
        )
        handler.setFormatter(formatter)
        root = logging.getLogger()
        if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
            root.addHandler(handler)
        root.setLevel(logging.INFO)
    except OSError:
        # Read-only home directories still get console logging
        logging.basicConfig(level=logging.INFO)
        logger.warning("File logging disabled: cannot write to %s", settings.logs_dir)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="MeetingHub Backend", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def _startup() -> None:
        settings.ensure_dirs()
        _configure_logging()
        init_db()
        logger.info("Storage backend: %s", settings.storage_backend)

    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(auth_router, prefix="/api")
    app.include_router(dashboard_router, prefix="/api")
    app.include_router(meetings_router, prefix="/api")
    app.include_router(action_items_router, prefix="/api")
    app.include_router(bots_router, prefix="/api")

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
        return JSONResponse(
            status_code=400,
            content={"message": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_exception_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(MeetingConflictError)
    async def _conflict_handler(request: Request, exc: MeetingConflictError):  # type: ignore[override]
        return JSONResponse(
            status_code=409,
            content={"message": str(exc), "conflicts": [m.id for m in exc.conflicts]},
        )

    @app.exception_handler(BotServiceError)
    async def _bot_service_handler(request: Request, exc: BotServiceError):  # type: ignore[override]
        logger.warning("Bot service failure on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=502, content={"message": "Bot service request failed"})

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):  # type: ignore[override]
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        content = {"message": "Internal server error"}
        if not settings.is_production:
            content["error"] = str(exc)
        return JSONResponse(status_code=500, content=content)

    return app


app = create_app()


if __name__ == "__main__":
    import argparse
    import uvicorn

    parser = argparse.ArgumentParser(description="MeetingHub Backend Server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload (dev only)")

    args = parser.parse_args()

    uvicorn.run(
        "meetinghub.main:app" if args.reload else app,
        host=args.host,
        port=args.port,
        reload=args.reload
    )
