# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
FastAPI application factory.

Responsibilities
----------------
* Instantiate the FastAPI app.
* Register CORS and request-logging middleware.
* Render every :class:`core.errors.AppError` as ``{"detail": message}``
  with the error's status code.
* Mount the feature routers under ``settings.api_prefix``.
* Expose a /health endpoint for container liveness checks.

Production note
---------------
The session cookie is sent cross-origin, so ``allow_credentials`` is on and
``cors_origin`` must be the exact frontend origin (never ``*``).
"""

import time

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from auth.router import router as auth_router
from users.router import router as users_router
from categories.router import router as categories_router
from contents.router import router as contents_router
from advertisements.router import router as advertisements_router
from admin.router import router as admin_router
from core.config import settings
from core.errors import AppError
from core.logger import logger
from core.security import get_client_ip

app = FastAPI(title="Streamdesk", version="1.0.0")

# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.cors_origin],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Content-Type"],
)


# ---------------------------------------------------------------------------
# Request-logging middleware
# ---------------------------------------------------------------------------
# Logs every inbound request: method, path, client IP, status, latency.
# Bodies (login payload, uploads) are NOT echoed – only the URL and
# metadata are recorded.


class _RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, client IP, response status and latency (ms)."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        client_ip = get_client_ip(request)

        logger.info(
            "%s %s | client=%s status=%d latency=%.1fms",
            request.method,
            request.url.path,
            client_ip,
            response.status_code,
            elapsed_ms,
        )
        return response


app.add_middleware(_RequestLogMiddleware)


# ---------------------------------------------------------------------------
# Error rendering
# ---------------------------------------------------------------------------


@app.exception_handler(AppError)
async def _app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
for _router in (
    auth_router,
    users_router,
    categories_router,
    contents_router,
    advertisements_router,
    admin_router,
):
    app.include_router(_router, prefix=settings.api_prefix)

# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------


@app.on_event("startup")
async def _on_startup():
    logger.info("Streamdesk service starting up (environment=%s)", settings.environment)


@app.on_event("shutdown")
async def _on_shutdown():
    logger.info("Streamdesk service shutting down")


@app.get("/health")
def health():
    return {"status": "ok"}
