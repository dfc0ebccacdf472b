"""FastAPI app factory: routes, CORS on every response, JSON request logging."""
from __future__ import annotations

import os
import time
from collections.abc import Awaitable, Callable
from uuid import uuid4

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from key_beacon import __version__
from key_beacon.api import router as api_router
from key_beacon.logging_conf import get_logger, setup_logging

# Configure logging before anything else.
setup_logging()
logger = get_logger("app")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def _with_cors(response: Response) -> Response:
    response.headers.update(CORS_HEADERS)
    return response


def create_app() -> FastAPI:
    # No /docs or /openapi.json: every path outside the router is a plain 404.
    app = FastAPI(
        title="Fleet Key Beacon",
        version=os.getenv("APP_VERSION", __version__),
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.on_event("startup")
    async def _on_startup() -> None:
        logger.info("startup", extra={"event": "startup"})

    @app.on_event("shutdown")
    async def _on_shutdown() -> None:
        logger.info("shutdown", extra={"event": "shutdown"})

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> Response:
        # Known path with the wrong method reads the same as an unknown path.
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return PlainTextResponse("Not Found", status_code=status.HTTP_404_NOT_FOUND)
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.middleware("http")
    async def cors_and_request_log(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        """Answer preflights, stamp CORS headers, log each request.

        - OPTIONS on any path is a 204 without touching the router
        - X-Request-ID is propagated or minted and echoed on the response
        - Anything the routes let escape becomes a 500 JSON body
        """
        if request.method == "OPTIONS":
            return _with_cors(Response(status_code=status.HTTP_204_NO_CONTENT))

        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        request.state.request_id = request_id

        start = time.perf_counter()
        logger.info(
            "request.start",
            extra={
                "event": "request_start",
                "method": request.method,
                "path": request.url.path,
                "request_id": request_id,
            },
        )
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception(
                "request.error",
                extra={
                    "event": "request_error",
                    "path": request.url.path,
                    "method": request.method,
                    "request_id": request_id,
                },
            )
            response = JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": str(exc) or "Internal Server Error"},
            )
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000.0

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request.end",
            extra={
                "event": "request_end",
                "status_code": response.status_code,
                "elapsed_ms": round(elapsed_ms, 2),
                "request_id": request_id,
            },
        )
        return _with_cors(response)

    app.include_router(api_router)

    return app


# ASGI entrypoint for uvicorn: `uvicorn key_beacon.main:app --port 8080`
app = create_app()
