"""DRF exception handler producing one error envelope for the whole API.

Every error response has the shape::

    {
        "type": "validation_error" | "client_error" | "server_error",
        "errors": [{"code": ..., "detail": ..., "attr": ..., ...context}],
    }

Domain exceptions contribute their structured context (e.g. stock
shortfall) to the error entry.  Anything that is neither a DRF
``APIException`` nor a ``DomainError`` is logged and reported as a
generic server error, without leaking internal details.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

import structlog
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

from modules.core.exceptions import DomainError, ValidationFailure

logger = structlog.get_logger(__name__)

SERVER_ERROR_DETAIL = "A server error occurred."


def api_exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    if isinstance(exc, DjangoValidationError):
        exc = exceptions.ValidationError(
            exc.message_dict if hasattr(exc, "error_dict") else exc.messages
        )

    response = exception_handler(exc, context)
    if response is not None:
        response.data = {
            "type": _error_type(exc, response.status_code),
            "errors": _api_exception_errors(exc),
        }
        return response

    set_rollback()

    if isinstance(exc, DomainError):
        error: Dict[str, Any] = {"code": exc.code, "detail": exc.message, "attr": None}
        error.update(_jsonable(exc.context))
        return Response(
            {
                "type": "validation_error"
                if isinstance(exc, ValidationFailure)
                else _error_type(exc, exc.status_code),
                "errors": [error],
            },
            status=exc.status_code,
        )

    view = context.get("view")
    logger.exception(
        "api.unhandled_exception",
        view=view.__class__.__name__ if view is not None else None,
        error_type=exc.__class__.__name__,
    )
    return Response(
        {
            "type": "server_error",
            "errors": [{"code": "error", "detail": SERVER_ERROR_DETAIL, "attr": None}],
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def _error_type(exc: Exception, status_code: int) -> str:
    if isinstance(exc, exceptions.ValidationError):
        return "validation_error"
    if status_code >= 500:
        return "server_error"
    return "client_error"


def _api_exception_errors(exc: Exception) -> List[Dict[str, Any]]:
    if isinstance(exc, exceptions.APIException):
        return list(_flatten(exc.get_full_details()))
    return [{"code": "error", "detail": str(exc), "attr": None}]


def _flatten(details: Any, attr: Optional[str] = None) -> Iterator[Dict[str, Any]]:
    if isinstance(details, dict) and set(details) == {"message", "code"}:
        yield {
            "code": str(details["code"]),
            "detail": str(details["message"]),
            "attr": None if attr in (None, "non_field_errors") else attr,
        }
    elif isinstance(details, dict):
        for key, value in details.items():
            yield from _flatten(value, f"{attr}.{key}" if attr else str(key))
    elif isinstance(details, list):
        for index, item in enumerate(details):
            if isinstance(item, dict) and set(item) != {"message", "code"}:
                yield from _flatten(item, f"{attr}.{index}" if attr else str(index))
            else:
                yield from _flatten(item, attr)


def _jsonable(context: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: value
        if isinstance(value, (int, float, bool, dict, list, type(None)))
        else str(value)
        for key, value in context.items()
    }
