#!/usr/bin/env python3
"""HTTP API for the clipboard server.

Builds the FastAPI application exposing the sync service:
- POST /clipboard            submit a new clipboard value (201)
- GET  /clipboard            fetch the latest value (404 when empty)
- GET  /history?limit=&q=    list history, pinned first
- POST /history/pin          pin or unpin an entry
- POST|DELETE /history/delete  delete an entry (204)
- GET  /logs                 recent request log records

Route functions are synchronous so FastAPI runs them in its thread pool,
one request per worker thread. Domain errors are translated to status codes
by exception handlers registered in create_app().
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from clipbridge.errors import InvalidArgument, NotFound, StorageError
from clipbridge.models import ClipboardEntry, DeleteRequest, PinRequest, SubmitRequest
from clipbridge.request_logs import RequestLogRecord, RequestLogs, truncate_for_log
from clipbridge.server_handlers import SyncService

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT: int = 50

LOGS_PATH: str = "/logs"

router = APIRouter()


def get_service(request: Request) -> SyncService:
    return request.app.state.service


def get_request_logs(request: Request) -> RequestLogs:
    return request.app.state.request_logs


@router.post("/clipboard", status_code=201, response_model=ClipboardEntry)
def submit_clipboard(
    body: SubmitRequest, service: SyncService = Depends(get_service)
) -> ClipboardEntry:
    return service.submit(body.text, body.source)


@router.get("/clipboard", response_model=ClipboardEntry)
def fetch_clipboard(service: SyncService = Depends(get_service)) -> ClipboardEntry:
    return service.fetch_latest()


@router.get("/history", response_model=list[ClipboardEntry])
def list_history(
    limit: int = DEFAULT_HISTORY_LIMIT,
    q: str = "",
    service: SyncService = Depends(get_service),
) -> list[ClipboardEntry]:
    return service.list_history(limit, q)


@router.post("/history/pin", response_model=ClipboardEntry)
def pin_entry(body: PinRequest, service: SyncService = Depends(get_service)) -> ClipboardEntry:
    return service.set_pin(body.id, body.pinned)


@router.api_route("/history/delete", methods=["POST", "DELETE"], status_code=204)
def delete_entry(body: DeleteRequest, service: SyncService = Depends(get_service)) -> Response:
    service.delete_entry(body.id)
    return Response(status_code=204)


@router.get(LOGS_PATH, response_model=list[RequestLogRecord])
def list_request_logs(logs: RequestLogs = Depends(get_request_logs)) -> list[RequestLogRecord]:
    return logs.list()


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"detail": message})


async def _invalid_argument(request: Request, exc: Exception) -> JSONResponse:
    return _error(400, str(exc))


async def _invalid_request(request: Request, exc: Exception) -> JSONResponse:
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    if errors:
        location = ".".join(str(part) for part in errors[0].get("loc", ()))
        return _error(400, f"invalid request: {location}: {errors[0].get('msg', '')}")
    return _error(400, "invalid request")


async def _not_found(request: Request, exc: Exception) -> JSONResponse:
    return _error(404, str(exc))


async def _storage_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return _error(500, "storage failure")


def _install_request_logging(app: FastAPI, logs: RequestLogs) -> None:
    """Record every request except GET /logs into the ring buffer."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        if request.url.path == LOGS_PATH:
            return await call_next(request)

        request_body = b""
        if request.method in ("POST", "PUT", "PATCH"):
            request_body = await request.body()

        response = await call_next(request)
        response_body = b"".join([chunk async for chunk in response.body_iterator])

        logs.add(
            RequestLogRecord(
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                remote_addr=request.client.host if request.client else "",
                timestamp=datetime.now(timezone.utc),
                request_body=truncate_for_log(request_body),
                response_body=truncate_for_log(response_body),
            )
        )
        logger.debug("%s %s -> %d", request.method, request.url.path, response.status_code)
        return Response(
            content=response_body,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type,
        )


def create_app(service: SyncService, request_logs: RequestLogs | None = None) -> FastAPI:
    """Create the FastAPI application serving the given sync service.

    Args:
        service: The sync service with a seeded latest cache.
        request_logs: Request log buffer; a fresh one is created when omitted.

    Returns:
        The configured FastAPI application.
    """
    app = FastAPI(title="clipbridge")
    app.state.service = service
    app.state.request_logs = request_logs if request_logs is not None else RequestLogs()

    app.add_exception_handler(InvalidArgument, _invalid_argument)
    app.add_exception_handler(RequestValidationError, _invalid_request)
    app.add_exception_handler(NotFound, _not_found)
    app.add_exception_handler(StorageError, _storage_error)

    _install_request_logging(app, app.state.request_logs)
    app.include_router(router)
    return app
