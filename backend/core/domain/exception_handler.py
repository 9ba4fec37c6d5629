"""
core.domain.exception_handler — DRF ``EXCEPTION_HANDLER``.

Views never catch domain exceptions; they bubble up to this handler,
which turns them into JSON error bodies::

    {"detail": "User 7 is not an authority and cannot be assigned.",
     "code": "invalid_assignee"}

DRF's own exceptions (validation, authentication, throttling) are left
to the stock handler.
"""

from __future__ import annotations

import logging
from typing import Any

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from core.domain import exceptions as domain

logger = logging.getLogger(__name__)

# Looked up along the exception's MRO, so subclasses inherit their
# parent's mapping unless listed here.
_RESPONSES: dict[type[domain.DomainError], tuple[int, str]] = {
    domain.PermissionDenied: (status.HTTP_403_FORBIDDEN, "permission_denied"),
    domain.NotFound: (status.HTTP_404_NOT_FOUND, "not_found"),
    domain.Conflict: (status.HTTP_409_CONFLICT, "conflict"),
    domain.InvalidAssignee: (status.HTTP_400_BAD_REQUEST, "invalid_assignee"),
    domain.DomainError: (status.HTTP_400_BAD_REQUEST, "domain_error"),
}


def _lookup(exc: domain.DomainError) -> tuple[int, str]:
    for klass in type(exc).__mro__:
        if klass in _RESPONSES:
            return _RESPONSES[klass]
    return _RESPONSES[domain.DomainError]


def domain_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    response = drf_exception_handler(exc, context)
    if response is not None or not isinstance(exc, domain.DomainError):
        return response

    status_code, code = _lookup(exc)
    request = context.get("request")
    logger.warning(
        "%s on %s %s (user=%s): %s",
        type(exc).__name__,
        getattr(request, "method", "?"),
        getattr(request, "path", "?"),
        getattr(getattr(request, "user", None), "pk", None),
        exc,
    )
    return Response({"detail": str(exc), "code": code}, status=status_code)
