"""
Application entrypoint.

Builds the FastAPI app, mounts the API router under `/api`, installs the
error envelope handlers and, on startup, creates the tables and the shared
completion provider (unless one was already placed on `app.state`).
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIASGIMiddleware
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException

from projectchat.api.completion import OpenAICompletionProvider
from projectchat.api.fast_api import router
from projectchat.database.config.config import settings
from projectchat.database.core.db import init_db
from projectchat.errors import ChatPlatformError

logging.basicConfig(level=settings.LOG_LEVEL, format="[%(asctime)s] %(levelname)s - %(message)s")
logger = logging.getLogger("projectchat")

GENERIC_ERROR = "Something went wrong on the server!"
RATE_LIMITED = "Too many requests from this IP, please try again later."

# one shared budget per client IP across every route
limiter = Limiter(
    key_func=get_remote_address,
    application_limits=[settings.RATE_LIMIT],
    enabled=settings.RATE_LIMIT_ENABLED,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if getattr(app.state, "completion_provider", None) is None:
        app.state.completion_provider = OpenAICompletionProvider()
    logger.info("Chatbot platform backend ready (model=%s)", settings.OPEN_AI_MODEL)
    yield


app = FastAPI(title="Project Chat Platform", version="1.0.0", lifespan=lifespan)
app.state.limiter = limiter

# added first so CORS wraps it and 429 answers keep their CORS headers
app.add_middleware(SlowAPIASGIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------- Middleware (debug logging) --------------------
@app.middleware("http")
async def access_logger(request: Request, call_next):
    """
    Access log when DEBUG_LOG is on.
    Example:
      127.0.0.1 GET /api/health -> 200 (3.2 ms)
    """
    start = time.perf_counter()
    response = await call_next(request)
    if settings.DEBUG_LOG:
        dur_ms = (time.perf_counter() - start) * 1000
        client = getattr(request.client, "host", "-")
        logger.info(
            "%s %s %s -> %s (%.1f ms)", client, request.method, request.url.path, response.status_code, dur_ms
        )
    return response


# -------------------- Error envelope --------------------
def _error(status_code: int, detail: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": detail}, headers=headers)


@app.exception_handler(ChatPlatformError)
async def platform_error_handler(request: Request, exc: ChatPlatformError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %r", request.method, request.url.path, exc.__cause__ or exc)
    return _error(exc.status_code, exc.detail)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning("Rate limit hit by %s on %s %s", get_remote_address(request), request.method, request.url.path)
    return _error(429, RATE_LIMITED)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    if exc.status_code == 404 and detail == "Not Found":
        detail = f"Route {request.url.path} not found"
    return _error(exc.status_code, str(detail), headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return _error(400, f"{location}: {message}" if location else message)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, GENERIC_ERROR)


app.include_router(router, prefix="/api")


@app.get("/")
def root():
    return {
        "message": "Chatbot Platform Backend is Running!",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("projectchat.main:app", host="0.0.0.0", port=5000)
