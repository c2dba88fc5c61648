"""
FastAPI app entry point wiring the records router onto a repository.
Run as `uvicorn records_backend.api:app` or `python -m records_backend.api`.
"""
from __future__ import annotations


import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .db import Settings, load_settings
from .domain.errors import ValidationError
from .logs import LogContext, setup_logging
from .repository import RecordRepository, open_repository
from .routes import base as base_routes
from .routes import records as records_routes


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "invalid request body"


async def validation_error_handler(request: Request, exc: RequestValidationError):
    err = ValidationError(_validation_message(exc))
    return JSONResponse(status_code=err.status_code, content={"error": str(err)})


def create_app(repository: RecordRepository | None = None, settings: Settings | None = None) -> FastAPI:
    """
    Build the application.

    With an explicit ``repository`` the app uses it as-is and never closes it
    (tests own its lifetime). Otherwise the repository is opened from
    ``settings`` on startup and closed on shutdown.
    """
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title=base_routes.APP_NAME, version=base_routes.APP_VERSION)
    app.state.settings = settings
    app.state.repository = repository

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(RequestValidationError, validation_error_handler)

    @app.on_event("startup")
    def on_startup():
        if app.state.repository is not None:
            return
        log = LogContext("STARTUP")
        log.set_payload({"driver": settings.db.driver})
        try:
            app.state.repository = open_repository(settings.db)
            app.state.owns_repository = True
        except Exception as e:
            log.write("ERROR", f"open_repository_failed: {e}")
            raise
        log.write("OK")

    @app.on_event("shutdown")
    def on_shutdown():
        if getattr(app.state, "owns_repository", False):
            app.state.repository.close()
            app.state.repository = None
            LogContext("SHUTDOWN").write("OK")

    app.include_router(base_routes.router)
    app.include_router(records_routes.router, prefix=f"/{settings.collection}")
    return app


app = create_app()


def main():
    s: Settings = app.state.settings
    uvicorn.run(app, host=s.host, port=s.port)


if __name__ == "__main__":
    main()
