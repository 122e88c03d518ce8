"""Portfolio Service - FastAPI backend for the portfolio contact form."""

import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from portfolio_service.shared.config import Settings, load_settings
from portfolio_service.shared.contact.input_validation import FIELD_ERRORS
from portfolio_service.shared.contact.rate_limit import RateLimiter
from portfolio_service.shared.contact.routes import router as contact_router
from portfolio_service.shared.database import ConnectionManager
from portfolio_service.shared.diagnostics.routes import router as diagnostics_router

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _cors_headers(request: Request) -> Dict[str, str]:
    """CORS headers for error responses, mirroring CORSMiddleware for allowed origins."""
    headers = {}
    origin = request.headers.get("origin")
    if origin and origin in request.app.state.settings.allowed_origins:
        headers["Access-Control-Allow-Origin"] = origin
        headers["Access-Control-Allow-Credentials"] = "true"
        headers["Vary"] = "Origin"
    return headers


def _validation_messages(exc: RequestValidationError) -> list:
    """Turn pydantic errors into the per-field messages shown by the contact form."""
    messages = []
    for error in exc.errors():
        loc = error.get("loc", ())
        field = loc[1] if len(loc) > 1 else None
        if error.get("type") == "json_invalid":
            message = "Request body must be valid JSON"
        elif error.get("type") == "value_error" and error.get("ctx", {}).get("error"):
            message = str(error["ctx"]["error"])
        elif field in FIELD_ERRORS:
            message = FIELD_ERRORS[field]
        elif loc == ("body",):
            # No usable body at all: every field is missing
            for field_message in FIELD_ERRORS.values():
                if field_message not in messages:
                    messages.append(field_message)
            continue
        else:
            message = error.get("msg", "Invalid request")
        if message not in messages:
            messages.append(message)
    return messages


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application with its own connection manager and rate limiter."""
    if settings is None:
        settings = load_settings()

    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO), format=LOG_FORMAT)

    connection_manager = ConnectionManager(
        settings.database_url,
        ssl=settings.db_ssl,
        retry_delay=settings.db_retry_delay_seconds,
    )
    rate_limiter = RateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
        max_tracked_clients=settings.rate_limit_max_tracked_clients,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # A failed first attempt is retried in the background; startup continues either way
        await run_in_threadpool(connection_manager.connect)
        logging.info(f"Server running on port {settings.port}")
        logging.info(f"Health check: http://localhost:{settings.port}/health")
        logging.info(f"Database test: http://localhost:{settings.port}/test-db")
        logging.info(f"Stats: http://localhost:{settings.port}/api/stats")
        logging.info(f"Environment: {settings.environment_label}")
        yield
        logging.info("Shutting down gracefully")
        connection_manager.close()

    app = FastAPI(
        title="Portfolio Service",
        description="Contact form backend for the portfolio website",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.connection_manager = connection_manager
    app.state.rate_limiter = rate_limiter

    app.include_router(contact_router)
    app.include_router(diagnostics_router)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logging.info(f"{request.method} {request.url.path}")
        return await call_next(request)

    # CORS configuration - added after the logging middleware so it wraps every response
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Route errors carry their JSON body as a dict detail."""
        if isinstance(exc.detail, dict):
            content = exc.detail
        else:
            content = {"error": str(exc.detail)}
        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers={**(exc.headers or {}), **_cors_headers(request)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Unmatched paths and methods are reported as 404."""
        if exc.status_code in (404, 405):
            return JSONResponse(
                status_code=404,
                content={"error": "Route not found"},
                headers=_cors_headers(request),
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail if isinstance(exc.detail, str) else str(exc.detail)},
            headers=_cors_headers(request),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Report every failing field together as a 400."""
        return JSONResponse(
            status_code=400,
            content={"error": "Validation failed", "details": _validation_messages(exc)},
            headers=_cors_headers(request),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Last-resort handler so a single bad request never takes the process down."""
        logging.error(f"Unhandled error: {str(exc)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": str(exc) if settings.is_development else "Something went wrong",
            },
            headers=_cors_headers(request),
        )

    @app.get("/")
    async def root():
        return {"message": "Portfolio Service API is running", "status": "ok"}

    return app


def main() -> None:
    import uvicorn

    settings = load_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
