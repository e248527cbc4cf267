import time

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.academic_years.router import router as academic_years_router
from app.api.activities.router import router as activities_router
from app.api.classes.router import router as classes_router
from app.api.users.router import router as users_router
from app.core.config import settings
from app.core.logging import get_logger, setup_logging

logger = get_logger(__name__)

# No Content-Security-Policy: the interactive docs load their assets from a CDN.
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    "X-XSS-Protection": "0",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
}


async def add_security_headers(request: Request, call_next) -> Response:
    response = await call_next(request)
    for header, value in SECURITY_HEADERS.items():
        response.headers.setdefault(header, value)
    return response


async def log_request(request: Request, call_next) -> Response:
    start = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "http_request",
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        duration_ms=round((time.perf_counter() - start) * 1000, 2),
    )
    return response


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", method=request.method, path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Server Error"},
    )


def create_app() -> FastAPI:
    setup_logging(settings)
    app = FastAPI(title="School Management Backend")

    # Session cookies cross origins, so the frontend origin is named explicitly.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.client_url] if settings.client_url else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.middleware("http")(add_security_headers)
    if settings.is_development:
        app.middleware("http")(log_request)

    app.add_exception_handler(Exception, handle_unexpected_error)

    @app.get("/", tags=["health"])
    async def health_check() -> dict:
        return {"status": "OK", "message": "Server is healthy"}

    # Routers
    app.include_router(users_router)
    app.include_router(activities_router)
    app.include_router(academic_years_router)
    app.include_router(classes_router)

    logger.info("app_created", environment=settings.environment)
    return app


app = create_app()
