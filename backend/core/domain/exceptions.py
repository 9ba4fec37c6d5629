"""
core.domain.exceptions — errors raised by the service layer.

Services raise these instead of DRF exceptions so they can be called
from management commands and tests without a request.
``core.domain.exception_handler`` turns them into HTTP responses:

    DomainError       400   invalid input for a business rule
    InvalidAssignee   400   assignment target is not an authority
    PermissionDenied  403   actor's role is not allowed
    NotFound          404   complaint / user / zone ... missing or invisible
    Conflict          409   uniqueness, restricted delete, lost race

Example::

    if actor.role not in STAFF_ROLES:
        raise PermissionDenied(f"User {actor.pk} cannot change complaint status.")
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class; a plain ``DomainError`` means the request broke a rule."""

    default_message = "A business rule was violated."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class PermissionDenied(DomainError):
    default_message = "Your role does not allow this action."


class NotFound(DomainError):
    """
    The referenced row does not exist.  Also used for complaints outside
    the caller's visibility scope, so their existence is not leaked.
    """

    default_message = "The requested resource was not found."


class Conflict(DomainError):
    """
    The write clashes with stored state: a duplicate e-mail, code or name;
    deleting a user, category or authority still referenced by complaint
    data; or an assignment that kept losing the race for the active slot.
    """

    default_message = "The operation conflicts with the current state."


class InvalidAssignee(DomainError):
    """
    The user chosen as handling authority does not exist or does not hold
    the ``authority`` role.  Admins are not assignable.
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        assignee_id: int | None = None,
    ) -> None:
        self.assignee_id = assignee_id
        super().__init__(
            message or f"User {assignee_id} is not an authority and cannot be assigned."
        )
