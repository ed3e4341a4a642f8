from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator, Dict, Any, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .container import ApplicationContainer
from .logging import configure_logging
from ..application.services.auth_guard import AuthGuard
from ..application.services.auth_service import AuthService
from ..application.services.credential_service import CredentialService
from ..application.services.session_manager import SessionManager
from ..application.services.task_service import TaskService
from ..domain.errors import InfrastructureError
from ..infrastructure.persistence.sqlite import SQLitePersistence
from ..presentation.api.routers import tasks as tasks_router
from ..presentation.api.routers import users as users_router

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
}


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(title="TaskVault", lifespan=_create_lifespan(settings))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(users_router.router)
    app.include_router(tasks_router.router)

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.exception_handler(InfrastructureError)
    async def infrastructure_error_handler(request: Request, exc: InfrastructureError) -> JSONResponse:
        logger.error(
            "Storage failure while handling %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"message": "Internal Server Error"})

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"ok": True}

    return app


def _create_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        persistence = SQLitePersistence(settings.database_path)
        credential_service = CredentialService(
            persistence,
            hash_rounds=settings.password_hash_rounds,
        )
        session_manager = SessionManager(
            persistence,
            ttl=timedelta(hours=settings.session_ttl_hours),
        )
        auth_guard = AuthGuard(session_manager)
        auth_service = AuthService(credential_service, session_manager)
        task_service = TaskService(persistence)

        container = ApplicationContainer(
            settings=settings,
            persistence=persistence,
            credential_service=credential_service,
            session_manager=session_manager,
            auth_guard=auth_guard,
            auth_service=auth_service,
            task_service=task_service,
        )

        app.state.container = container  # type: ignore[attr-defined]
        logger.info("TaskVault storage ready at %s", settings.database_path)

        try:
            yield
        finally:
            persistence.close()

    return lifespan
