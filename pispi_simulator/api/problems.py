"""
RFC 7807 problem documents

The only place where domain error kinds are turned into HTTP statuses.
"""

from http import HTTPStatus
from typing import Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..errors import DomainError, ErrorKind
from ..logging_config import get_logger, log_action


logger = get_logger("pispi.api")

STATUS_BY_KIND = {
    ErrorKind.VALIDATION_FAILED: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INSUFFICIENT_FUNDS: 400,
    ErrorKind.CAPACITY_EXCEEDED: 400,
    ErrorKind.INTERNAL_INCONSISTENCY: 500,
}

GENERIC_ERROR_DETAIL = "Une erreur inattendue s'est produite"


def problem(status_code: int, detail: str,
            invalid_params: Optional[List[Dict[str, str]]] = None,
            headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    """Build an ``application/problem+json`` response"""
    body = {
        "type": "about:blank",
        "title": HTTPStatus(status_code).phrase,
        "status": status_code,
        "detail": detail,
    }
    if invalid_params:
        body["invalid-params"] = invalid_params
    return JSONResponse(
        status_code=status_code,
        content=body,
        headers=headers,
        media_type="application/problem+json",
    )


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = STATUS_BY_KIND[exc.kind]
    if status_code >= 500:
        return problem(status_code, GENERIC_ERROR_DETAIL)
    return problem(status_code, exc.message, exc.invalid_params())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    invalid_params = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        invalid_params.append({"name": ".".join(location) or "body", "reason": error.get("msg", "")})
    return problem(400, "La requête contient des paramètres invalides", invalid_params)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return problem(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log_action(logger, "error", "Unhandled error", action="unhandled_error",
               extra={"path": request.url.path, "method": request.method}, exc_info=True)
    return problem(500, GENERIC_ERROR_DETAIL)


def register_problem_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
