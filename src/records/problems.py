"""Exception handlers that turn every failure into a problem-detail response.

Each condition maps to exactly one HTTP status and one ``type`` URI
(``{problem_base_uri}/{slug}``). Bodies never contain stack traces or
driver messages; full detail for unexpected failures goes to the log only.

Register on the app with ``register_exception_handlers(app)``.
"""

from datetime import UTC, datetime
from http import HTTPStatus
from types import UnionType
from typing import Any, Union, get_args, get_origin

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from records.config import settings
from records.exceptions import (
    DomainError,
    DomainValidationError,
    DuplicateKeyError,
    InsufficientStockError,
    NotFoundError,
    RequestValidationFailed,
)
from records.logging import get_logger
from records.schemas.error import FieldError, ProblemDetail

logger = get_logger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"

# pydantic error types that mean "this value is not of the declared type"
_TYPE_ERRORS = frozenset({"enum", "is_instance_of", "literal_error", "uuid_parsing"})


def problem_type(slug: str) -> str:
    return f"{settings.problem_base_uri.rstrip('/')}/{slug}"


def problem_response(
    request: Request,
    status: int,
    slug: str,
    title: str,
    detail: str | None = None,
    headers: dict[str, str] | None = None,
    **context: Any,
) -> JSONResponse:
    """Build a problem-detail JSONResponse. ``context`` keys are emitted as given (camelCase)."""
    body = ProblemDetail(
        type=problem_type(slug),
        title=title,
        status=status,
        detail=detail,
        instance=request.url.path,
        timestamp=datetime.now(UTC),
        **context,
    )
    return JSONResponse(
        status_code=status,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
        media_type=PROBLEM_MEDIA_TYPE,
        headers=headers,
    )


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    logger.warning("entity_not_found", entity=exc.entity, identifier=exc.identifier)
    return problem_response(
        request,
        404,
        f"{exc.entity.lower()}-not-found",
        f"{exc.entity} Not Found",
        exc.message,
        resource=exc.entity,
        resourceId=exc.identifier,
    )


async def insufficient_stock_handler(
    request: Request, exc: InsufficientStockError
) -> JSONResponse:
    logger.warning(
        "insufficient_stock",
        product_id=exc.product_id,
        requested=exc.requested,
        available=exc.available,
    )
    return problem_response(
        request,
        400,
        "insufficient-stock",
        "Insufficient Stock",
        exc.message,
        productId=exc.product_id,
        requestedQuantity=exc.requested,
        availableQuantity=exc.available,
    )


async def domain_validation_handler(
    request: Request, exc: DomainValidationError
) -> JSONResponse:
    logger.warning("domain_validation_error", field=exc.field, error=exc.message)
    return problem_response(
        request,
        400,
        "validation-error",
        "Validation Error",
        exc.message,
        field=exc.field,
        rejectedValue=exc.value,
    )


async def duplicate_key_handler(request: Request, exc: DuplicateKeyError) -> JSONResponse:
    logger.info("duplicate_key", entity=exc.entity, field=exc.field)
    return problem_response(
        request,
        409,
        "duplicate-key",
        "Duplicate Key",
        exc.message,
        field=exc.field,
        rejectedValue=exc.value,
    )


def _validation_failed(request: Request, errors: list[FieldError]) -> JSONResponse:
    logger.warning("request_validation_failed", fields=[error.field for error in errors])
    return problem_response(
        request,
        400,
        "validation-failed",
        "Validation Failed",
        "Validation failed",
        errors=errors,
    )


async def request_validation_failed_handler(
    request: Request, exc: RequestValidationFailed
) -> JSONResponse:
    return _validation_failed(
        request,
        [
            FieldError(
                field=violation.field,
                rejected_value=violation.rejected_value,
                message=violation.message,
                code=violation.code,
            )
            for violation in exc.violations
        ],
    )


def _type_name(annotation: Any) -> str:
    if get_origin(annotation) in (Union, UnionType):
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            annotation = args[0]
    return getattr(annotation, "__name__", str(annotation))


def _expected_type(request: Request, location: str, name: str) -> str | None:
    """Declared type of a query/path parameter, looked up on the matched route."""
    dependant = getattr(request.scope.get("route"), "dependant", None)
    if dependant is None:
        return None
    params = dependant.path_params if location == "path" else dependant.query_params
    for param in params:
        if param.alias == name:
            return _type_name(param.field_info.annotation)
    return None


def _is_type_error(error_type: str) -> bool:
    return (
        error_type.endswith("_parsing")
        or error_type.endswith("_type")
        or error_type in _TYPE_ERRORS
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Split framework validation errors into the specific problem types.

    Order: malformed body, missing parameter, parameter type mismatch,
    then everything else as a field-error list.
    """
    errors = exc.errors()

    if any(e["type"] == "json_invalid" or tuple(e["loc"]) == ("body",) for e in errors):
        logger.warning("malformed_request", path=request.url.path)
        return problem_response(
            request, 400, "malformed-request", "Malformed Request", "Malformed JSON request"
        )

    for error in errors:
        location, *rest = error["loc"]
        if location not in ("query", "path") or not rest:
            continue
        name = str(rest[0])
        expected = _expected_type(request, location, name)
        if error["type"] == "missing":
            logger.warning("missing_parameter", parameter=name)
            return problem_response(
                request,
                400,
                "missing-parameter",
                "Missing Parameter",
                f"Required parameter '{name}' is missing",
                parameter=name,
                parameterType=expected,
            )
        if _is_type_error(error["type"]):
            logger.warning("parameter_type_mismatch", parameter=name)
            return problem_response(
                request,
                400,
                "type-mismatch",
                "Type Mismatch",
                f"Invalid value '{error.get('input')}' for parameter '{name}'. "
                f"Expected type: {expected}",
                parameter=name,
                rejectedValue=error.get("input"),
                expectedType=expected,
            )

    field_errors = []
    for error in errors:
        _, *rest = error["loc"]
        field_errors.append(
            FieldError(
                field=".".join(str(part) for part in rest),
                rejected_value=None if error["type"] == "missing" else error.get("input"),
                message=error["msg"],
                code=error["type"],
            )
        )
    return _validation_failed(request, field_errors)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework-raised HTTP errors: unmapped routes, wrong methods."""
    if exc.status_code == 404:
        logger.warning("route_not_found", path=request.url.path)
        return problem_response(
            request,
            404,
            "resource-not-found",
            "Resource Not Found",
            "The requested resource was not found",
        )
    if exc.status_code == 405:
        return problem_response(
            request,
            405,
            "method-not-allowed",
            "Method Not Allowed",
            f"Method {request.method} is not supported for this resource",
            headers=exc.headers,
        )
    phrase = HTTPStatus(exc.status_code).phrase
    return problem_response(
        request,
        exc.status_code,
        phrase.lower().replace(" ", "-"),
        phrase,
        str(exc.detail),
        headers=exc.headers,
    )


# https://www.postgresql.org/docs/current/errcodes-appendix.html
UNIQUE_VIOLATION = "23505"


def _is_unique_violation(exc: IntegrityError) -> bool:
    """SQLSTATE when the driver reports one (asyncpg, psycopg), else the message text (SQLite)."""
    sqlstate = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    if sqlstate:
        return sqlstate == UNIQUE_VIOLATION
    message = str(exc.orig if exc.orig is not None else exc).lower()
    return "unique" in message or "duplicate key" in message


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Storage-level constraint violations that no domain pre-check intercepted."""
    # Driver messages can contain row data, so they stay in the log.
    logger.error("data_integrity_violation", error=str(exc.orig), path=request.url.path)
    if _is_unique_violation(exc):
        return problem_response(
            request,
            409,
            "duplicate-key",
            "Duplicate Key",
            "A record with this information already exists.",
        )
    return problem_response(
        request,
        409,
        "data-integrity",
        "Data Integrity Violation",
        "This operation violates a data constraint.",
    )


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Return 400 for domain violations without a more specific handler."""
    logger.warning("domain_error", error=exc.message, path=request.url.path)
    return problem_response(request, 400, "domain-error", "Domain Error", exc.message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unhandled exceptions with traceback and return a generic 500."""
    logger.exception("unhandled_exception", path=request.url.path, method=request.method)
    return problem_response(
        request,
        500,
        "internal-error",
        "Internal Server Error",
        "An unexpected error occurred. Please try again later.",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NotFoundError, not_found_handler)  # type: ignore[arg-type]
    app.add_exception_handler(InsufficientStockError, insufficient_stock_handler)  # type: ignore[arg-type]
    app.add_exception_handler(DomainValidationError, domain_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(DuplicateKeyError, duplicate_key_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationFailed, request_validation_failed_handler)  # type: ignore[arg-type]
    app.add_exception_handler(DomainError, domain_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
