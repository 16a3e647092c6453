from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from .config import Settings, get_settings
from .db import Database
from .errors import IntakeError
from .logging import configure_logging, get_logger
from .routers import candidates, submissions
from .storage import LocalDocumentStorage, build_storage
from .submission import SubmissionCoordinator

logger = get_logger(__name__)


def _register_error_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(IntakeError)
    async def intake_error_handler(request: Request, exc: IntakeError):
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(include_details=not settings.is_production),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", path=request.url.path)
        body = {"success": False, "error": "server_error", "message": "Internal server error"}
        if not settings.is_production:
            body["details"] = str(exc)
        return JSONResponse(status_code=500, content=body)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    database = Database(settings)
    storage = build_storage(settings)

    app = FastAPI(title="candidate-intake")
    app.state.settings = settings
    app.state.database = database
    app.state.coordinator = SubmissionCoordinator(database, storage, timeout=settings.submission_timeout_seconds)

    @app.on_event("startup")
    def on_startup():
        database.init_db()
        logger.info("Service started", environment=settings.environment, storage=settings.storage_backend)

    @app.on_event("shutdown")
    def on_shutdown():
        database.dispose()

    _register_error_handlers(app, settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(submissions.router, tags=["submissions"])
    app.include_router(candidates.router, tags=["candidates"])
    if isinstance(storage, LocalDocumentStorage):
        app.mount("/uploads", StaticFiles(directory=str(storage.upload_dir)), name="uploads")

    @app.get("/")
    def root():
        return {"ok": True, "service": "candidate-intake"}

    @app.get("/health")
    def health():
        return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/api/status")
    def status():
        try:
            db_status = database.ping()
        except SQLAlchemyError as exc:
            logger.error("Database status check failed", error=str(exc))
            body = {"status": "ERROR", "message": "Database connection failed"}
            if not settings.is_production:
                body["error"] = str(exc)
            return JSONResponse(status_code=500, content=body)
        return {"status": "OK", "time": datetime.now(timezone.utc).isoformat(), "database": db_status}

    return app


app = create_app()
