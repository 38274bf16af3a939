"""
RFC 9457 Problem Details error handlers.

Every error leaving the API is ``application/problem+json``:

- ``ForecastError`` (including ``ForecastFailed``): status chosen by ``kind``;
  the body carries ``kind`` and, for orchestrator failures, ``stage``
- request validation: 422 with the offending fields listed
- ``HTTPException`` raised by routes (404 for missing batches/alerts)
- anything else: 500 with a generic detail; the traceback goes to the log
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from sectorcast.api.schemas.common import ProblemDetail
from sectorcast.errors import ForecastError

logger = logging.getLogger(__name__)

_PROBLEM_JSON = "application/problem+json"

# kind -> (status, title)
KIND_STATUS: dict[str, tuple[int, str]] = {
    "RegionUnknown": (404, "Unknown Region"),
    "PersistenceConflict": (409, "Concurrent Forecast In Progress"),
    "InferenceUnavailable": (503, "Inference Service Unavailable"),
    "InferenceMalformed": (502, "Malformed Inference Response"),
    "ResponseUnparsable": (502, "Unparsable Model Output"),
    "NoValidPredictions": (502, "No Valid Predictions"),
    "ForecastTimedOut": (504, "Forecast Timed Out"),
}

_GENERIC_DETAIL = "An unexpected error occurred. Check server logs for details."


def problem(
    request: Request,
    status: int,
    title: Optional[str] = None,
    detail: Optional[str] = None,
    **extra: Any,
) -> JSONResponse:
    """Build a problem+json response; *title* defaults to the status phrase."""
    body = ProblemDetail(
        title=title or HTTPStatus(status).phrase,
        status=status,
        detail=detail,
        instance=request.url.path,
    ).model_dump(exclude_none=True)
    body.update({k: v for k, v in extra.items() if v is not None})
    return JSONResponse(status_code=status, content=body, media_type=_PROBLEM_JSON)


async def _forecast_error(request: Request, exc: ForecastError) -> JSONResponse:
    known = exc.kind in KIND_STATUS
    status, title = KIND_STATUS.get(exc.kind, (500, "Forecast Failed"))
    stage = getattr(exc, "stage", None)

    if status >= 500:
        logger.warning(
            "%s %s failed at %s: [%s] %s",
            request.method, request.url.path, stage or "-", exc.kind, exc.message,
        )
    return problem(
        request,
        status,
        title,
        exc.message if known else _GENERIC_DETAIL,
        kind=exc.kind,
        stage=stage,
    )


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [
        {
            "loc": list(err.get("loc", ())),
            "msg": err.get("msg", "invalid value"),
            "type": err.get("type", "value_error"),
        }
        for err in exc.errors()
    ]
    detail = "; ".join(
        f"{'.'.join(str(part) for part in f['loc'])}: {f['msg']}" for f in fields
    )
    return problem(request, 422, "Validation Error", detail, errors=fields)


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return problem(request, exc.status_code, detail=detail)


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return problem(request, 500, detail=_GENERIC_DETAIL)


def register_error_handlers(app: FastAPI) -> None:
    """Install the problem+json handlers on *app*."""
    app.add_exception_handler(ForecastError, _forecast_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error)  # type: ignore[arg-type]
