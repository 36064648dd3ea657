"""FastAPI application factory, error mapping, live feed and startup."""

import sys
from typing import Callable, Dict, List, Optional

from fastapi import FastAPI, Request, WebSocket
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from dm_relay.adapters.web.routes import api_router
from dm_relay.adapters.web.schemas import StatusResponse
from dm_relay.adapters.web.services import Services, build_services
from dm_relay.config import AppConfig
from dm_relay.domain.dispatch import Sleeper
from dm_relay.errors import (
    AuthError,
    NotFoundError,
    PersistenceError,
    UpstreamError,
    ValidationError,
)
from dm_relay.ports.outbound import SessionFactory, StoragePort


def _log(msg: str):
    print(msg, file=sys.stderr)


def _field_errors(exc: RequestValidationError) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        field = loc[0] if loc else "body"
        errors.setdefault(field, []).append(err.get("msg", "Invalid value"))
    return errors


def _install_error_handlers(app: FastAPI):
    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Invalid request", "errors": _field_errors(exc)},
        )

    @app.exception_handler(ValidationError)
    async def _validation(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": exc.message, "errors": exc.errors},
        )

    @app.exception_handler(AuthError)
    @app.exception_handler(UpstreamError)
    async def _upstream(request: Request, exc: Exception):
        _log(f"Discord API error on {request.url.path}: {exc}")
        return JSONResponse(status_code=400, content={"success": False, "message": str(exc)})

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"success": False, "message": str(exc)})

    @app.exception_handler(PersistenceError)
    async def _persistence(request: Request, exc: PersistenceError):
        _log(f"Storage error on {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"success": False, "message": "Storage unavailable"})

    @app.middleware("http")
    async def _unexpected(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            _log(f"Unhandled error on {request.url.path}: {e!r}")
            return JSONResponse(
                status_code=500,
                content={"success": False, "message": "Internal server error"},
            )


def create_app(
    config: Optional[AppConfig] = None,
    storage: Optional[StoragePort] = None,
    sessions: Optional[SessionFactory] = None,
    sleep: Optional[Sleeper] = None,
    listener_factory: Optional[Callable] = None,
) -> FastAPI:
    """Build the app; every collaborator can be injected for tests."""
    config = config or AppConfig.from_env()
    services = build_services(
        config,
        storage=storage,
        sessions=sessions,
        sleep=sleep,
        listener_factory=listener_factory,
    )

    app = FastAPI(title="Discord DM Relay")
    app.state.services = services
    app.include_router(api_router)
    _install_error_handlers(app)

    @app.get("/status", response_model=StatusResponse)
    async def status():
        """Server status endpoint"""
        storage_name = getattr(services.storage, "backend_name", type(services.storage).__name__)
        return StatusResponse(
            status="ok",
            storage=storage_name,
            listener=services.listeners.running,
            liveViewers=services.feed.subscriber_count,
        )

    @app.websocket("/ws")
    async def live_feed(websocket: WebSocket):
        await services.feed.serve(websocket, services.ingestion.snapshot)

    @app.on_event("startup")
    async def startup_event():
        _log("Discord DM relay starting")
        await services.storage.initialize()

        token = config.discord.listener_token
        if token:
            await services.listeners.start(token)
        else:
            _log("Reply listener not configured (set DISCORD_BOT_TOKEN in .env)")
        _log("Ready!")

    @app.on_event("shutdown")
    async def shutdown_event():
        await services.listeners.stop()
        await services.storage.close()

    return app


def services_of(app: FastAPI) -> Services:
    return app.state.services
