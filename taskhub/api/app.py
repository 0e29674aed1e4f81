# Rev 0.2.0

"""FastAPI application factory.

create_app() wraps an AppContext; services raise TaskhubError subclasses and
the handlers below turn them into JSON responses:
- ValidationError, request-shape errors -> 400 {"message", "errors"}
- NotFoundError                         -> 404 {"message"}
- anything unexpected                   -> 500, logged with traceback
"""
from __future__ import annotations
import secrets
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskhub.app_context import AppContext
from taskhub.errors import NotFoundError, ValidationError
from taskhub.utils.logging_setup import get_logger

log = get_logger("api")

_LOCATIONS = ("body", "query", "path", "header")


def get_context(request: Request) -> AppContext:
    return request.app.state.context


async def require_token(request: Request, authorization: Optional[str] = Header(default=None)) -> None:
    """Bearer check, active only when settings carry an api_token."""
    expected = get_context(request).settings.get("api_token")
    if not expected:
        return
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing token")
    token = authorization.split(" ", 1)[1].strip()
    if not secrets.compare_digest(token, expected):
        raise HTTPException(status_code=401, detail="Invalid token")


def _field_from_loc(loc) -> str:
    parts = [str(p) for p in loc if p not in _LOCATIONS]
    return ".".join(parts) or (str(loc[0]) if loc else "body")


def create_app(context: AppContext) -> FastAPI:
    from .routes import health_router, router

    app = FastAPI(title="taskhub", version="0.2.0")
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError):
        log.info("%s %s rejected: %s %s", request.method, request.url.path, exc.message,
                 [e.as_dict() for e in exc.errors])
        return JSONResponse(
            status_code=400,
            content={"message": exc.message, "errors": [e.as_dict() for e in exc.errors]},
        )

    @app.exception_handler(RequestValidationError)
    async def _request_shape_error(request: Request, exc: RequestValidationError):
        errors = [{"field": _field_from_loc(e.get("loc", ())), "message": e.get("msg", "Invalid value")}
                  for e in exc.errors()]
        log.info("%s %s rejected: %s", request.method, request.url.path, errors)
        return JSONResponse(status_code=400, content={"message": "Invalid request", "errors": errors})

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"message": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code >= 500:
            log.error("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)},
                            headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception):
        log.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"message": "Internal Server Error"})

    app.include_router(health_router, prefix="/api")
    app.include_router(router, prefix="/api", dependencies=[Depends(require_token)])
    log.info("API ready (auth %s)", "on" if context.settings.get("api_token") else "off")
    return app
