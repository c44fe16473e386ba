"""Main FastAPI application for the JSON-file REST service."""
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from zxsgit.api import auth, companies, todos, users
from zxsgit.config import Settings, settings as default_settings
from zxsgit.database import JsonDocumentStore
from zxsgit.utils.exceptions import AppException, http_error_from
from zxsgit.utils.logger import logger

VERSION = "1.0.0"

ENDPOINTS = [
    "POST /api/register",
    "POST /api/login",
    "GET /api/users",
    "PUT /api/users/:id",
    "DELETE /api/users/:id",
    "POST /api/users/sync",
    "GET /api/todos",
    "POST /api/todos",
    "GET /api/companies",
    "GET /api/companies/:id",
    "POST /api/companies",
    "PUT /api/companies/:id",
    "DELETE /api/companies/:id",
]


def _envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "message": message})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the REST service.

    Args:
        settings: Configuration; the environment settings when omitted

    Returns:
        FastAPI application with its document store on app.state
    """
    settings = settings or default_settings

    app = FastAPI(
        title="ZXSGit API",
        description="JSON-file REST service for users, todos and companies",
        version=VERSION,
    )
    app.state.settings = settings
    app.state.store = JsonDocumentStore(settings.data_dir)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        """Reject bodies over the limit; images travel inline as data URLs."""
        length = request.headers.get("content-length")
        if length and length.isdigit() and int(length) > settings.max_body_bytes:
            return _envelope(413, "Request body too large")
        return await call_next(request)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _envelope(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.debug(f"Rejected {request.method} {request.url.path}: {exc.errors()}")
        return _envelope(400, "Invalid request body")

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        error = http_error_from(exc)
        return _envelope(error.status_code, error.detail)

    # Include routers
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(todos.router)
    app.include_router(companies.router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "ok": True,
            "message": "ZXSGit API Server",
            "version": VERSION,
            "endpoints": ENDPOINTS,
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"ok": True, "status": "healthy"}

    logger.info(f"REST service storing data in {settings.data_dir}")
    return app


def run() -> None:
    """Start the REST service with uvicorn."""
    uvicorn.run(
        "zxsgit.main:create_app",
        factory=True,
        host=default_settings.api_host,
        port=default_settings.api_port,
        reload=default_settings.environment == "development",
    )
