"""
Shared API error handlers for the TradeBotError contract and deterministic 422 payloads.
"""

from __future__ import annotations

from typing import Any, Sequence, cast

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

from tradebot.platform.errors import (
    ErrorKind,
    TradeBotError,
    UserMessageCategory,
    report_error,
)
from tradebot.shared_kernel.primitives import UserId


def register_api_error_handlers(*, app: FastAPI) -> None:
    """
    Register global handlers for TradeBotError, request validation, and unexpected errors.

    Args:
        app: FastAPI application instance.
    Returns:
        None.
    Assumptions:
        Handlers are installed once during application startup.
    Raises:
        ValueError: If `app` dependency is missing.
    Side Effects:
        Mutates FastAPI exception-handler registry.
    """
    if app is None:  # type: ignore[truthy-bool]
        raise ValueError("register_api_error_handlers requires app")

    app.add_exception_handler(TradeBotError, tradebot_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)


def tradebot_error_handler(request: Request, error: Exception) -> JSONResponse:
    """
    Convert TradeBotError into `{"error": {"code", "category", "message"}}` payload.

    Args:
        request: Starlette request object.
        error: Raised TradeBotError instance.
    Returns:
        JSONResponse: Response with error status code and user-facing message.
    Assumptions:
        Internal diagnostic message is logged, never returned.
    Raises:
        None.
    Side Effects:
        Writes one log record.
    """
    tradebot_error = cast(TradeBotError, error)
    resolved = report_error(error=tradebot_error, context=_request_context(request))
    return JSONResponse(
        status_code=tradebot_error.status_code,
        content=tradebot_error.payload(user_message=resolved.text),
    )


def request_validation_error_handler(_request: Request, error: Exception) -> JSONResponse:
    """
    Convert FastAPI RequestValidationError to canonical `validation_error` payload.

    Args:
        _request: Starlette request object (unused).
        error: Raised validation exception from FastAPI/Pydantic.
    Returns:
        JSONResponse: HTTP 422 payload with deterministically sorted `details.errors` list.
    Assumptions:
        Validation errors include `loc`, `type`, and `msg` attributes. Raw input values are
        never echoed because request bodies may carry private keys.
    Raises:
        None.
    Side Effects:
        None.
    """
    validation_error = cast(RequestValidationError, error)
    payload: dict[str, Any] = {
        "error": {
            "code": "validation_error",
            "category": UserMessageCategory.VALIDATION.value,
            "message": "The request is invalid. Please check the values and try again.",
            "details": {
                "errors": _sorted_validation_errors(raw_errors=validation_error.errors()),
            },
        }
    }
    return JSONResponse(status_code=422, content=payload)


def unexpected_error_handler(request: Request, error: Exception) -> JSONResponse:
    """
    Convert unclassified exception into generic 500 payload.

    Args:
        request: Starlette request object.
        error: Unexpected exception.
    Returns:
        JSONResponse: HTTP 500 payload with heuristically resolved user message.
    Assumptions:
        Traceback is logged server-side only.
    Raises:
        None.
    Side Effects:
        Writes one log record with traceback.
    """
    resolved = report_error(error=error, context=_request_context(request))
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "unexpected_error",
                "category": resolved.category.value,
                "message": resolved.text,
            }
        },
    )


class InvalidUserIdError(TradeBotError):
    """
    InvalidUserIdError — path user identifier is malformed.
    """

    def __init__(self) -> None:
        super().__init__(
            code="validation_error",
            message="Invalid user id.",
            kind=ErrorKind.USER,
            category=UserMessageCategory.VALIDATION,
            status_code=422,
        )


def parse_user_id(raw_user_id: str) -> UserId:
    """
    Parse path user id into value object.

    Args:
        raw_user_id: Raw path segment.
    Returns:
        UserId: Parsed identifier.
    Assumptions:
        None.
    Raises:
        InvalidUserIdError: If identifier is blank, too long, or contains whitespace.
    Side Effects:
        None.
    """
    try:
        return UserId.from_string(raw_user_id)
    except ValueError as error:
        raise InvalidUserIdError() from error


def _request_context(request: Request) -> dict[str, object]:
    return {
        "method": request.method,
        "path": request.url.path,
    }


def _sorted_validation_errors(*, raw_errors: Any) -> list[dict[str, str]]:
    """
    Convert raw validation errors into deterministic list sorted by path, code, and message.

    Args:
        raw_errors: Raw iterable from FastAPI validation subsystem.
    Returns:
        list[dict[str, str]]: Sorted normalized validation items.
    Assumptions:
        Unknown raw shapes are stringified for deterministic payload stability.
    Raises:
        None.
    Side Effects:
        None.
    """
    if not isinstance(raw_errors, Sequence) or isinstance(raw_errors, (str, bytes, bytearray)):
        return []

    normalized_items: list[dict[str, str]] = []
    for raw_error in raw_errors:
        if not isinstance(raw_error, dict):
            normalized_items.append(
                {"path": "unknown", "code": "validation_error", "message": str(raw_error)}
            )
            continue
        normalized_items.append(
            {
                "path": _normalize_error_path(loc=raw_error.get("loc")),
                "code": _normalize_error_code(raw_type=raw_error.get("type")),
                "message": str(raw_error.get("msg", "Validation error")),
            }
        )

    return sorted(
        normalized_items,
        key=lambda item: (item["path"], item["code"], item["message"]),
    )


def _normalize_error_path(*, loc: Any) -> str:
    if isinstance(loc, Sequence) and not isinstance(loc, (str, bytes, bytearray)):
        path_parts = [str(part) for part in loc]
        if path_parts:
            return ".".join(path_parts)
    if loc is None:
        return "unknown"
    return str(loc)


def _normalize_error_code(*, raw_type: Any) -> str:
    """
    Normalize raw validation error type into stable machine-readable code.

    Args:
        raw_type: Raw `type` value from validation error mapping.
    Returns:
        str: Stable error code.
    Assumptions:
        Missing required fields are represented with Pydantic `missing` type.
    Raises:
        None.
    Side Effects:
        None.
    """
    if raw_type is None:
        return "validation_error"

    normalized = str(raw_type).strip().lower()
    if not normalized:
        return "validation_error"

    if normalized == "missing" or normalized.endswith(".missing"):
        return "required"

    return normalized
