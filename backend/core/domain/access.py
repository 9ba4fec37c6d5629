"""
core.domain.access — Role-scoped queryset selectors and guards.

Every user holds exactly one role from ``accounts.UserRole``
(``citizen``, ``authority``, ``admin``).  Services describe who sees what
as a ``role -> filter`` mapping and hand it to ``apply_role_scope``;
write operations start with ``require_role``.  Anonymous users have no
role and therefore see nothing.

Example::

    from core.domain.access import apply_role_scope

    COMPLAINT_SCOPE = {
        UserRole.ADMIN:     lambda qs, u: qs,
        UserRole.AUTHORITY: lambda qs, u: qs,
        UserRole.CITIZEN:   lambda qs, u: qs.filter(Q(is_public=True) | Q(reporter=u)),
    }

    qs = apply_role_scope(Complaint.objects.all(), user, scope_config=COMPLAINT_SCOPE)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from django.db.models import QuerySet

from core.domain.exceptions import PermissionDenied

if TYPE_CHECKING:
    from accounts.models import User

# Takes (queryset, user) and returns a filtered queryset.
ScopeFilter = Callable[[QuerySet, "User"], QuerySet]

ScopeConfig = dict[str, ScopeFilter]


def get_user_role(user: User | None) -> str | None:
    """
    Return the role value of ``user`` or ``None`` for anonymous users.

    Args:
        user: A ``User`` instance, ``AnonymousUser`` or ``None``.

    Returns:
        One of the ``UserRole`` values, or ``None``.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    return getattr(user, "role", None)


def apply_role_scope(
    queryset: QuerySet,
    user: User,
    *,
    scope_config: ScopeConfig,
    default: str = "none",
) -> QuerySet:
    """
    Apply the scope filter registered for the user's role.

    Args:
        queryset:     Base (unfiltered) queryset.
        user:         The authenticated user.
        scope_config: Mapping ``role → filter_fn``.
        default:      What to do when the role has no entry.
                      ``"none"`` (default) → empty queryset.
                      ``"all"`` → return unfiltered.

    Returns:
        The (possibly filtered) queryset.
    """
    role = get_user_role(user)
    if role is not None and role in scope_config:
        return scope_config[role](queryset, user)

    if default == "none":
        return queryset.none()
    return queryset


def require_role(user: User | None, *allowed_roles: str, message: str = "") -> None:
    """
    Guard that raises ``PermissionDenied`` if the user's role is not
    among ``allowed_roles``.

    Args:
        user:          Acting user.
        *allowed_roles: Accepted ``UserRole`` values.
        message:       Optional custom error message.

    Raises:
        core.domain.exceptions.PermissionDenied
    """
    role = get_user_role(user)
    if role not in allowed_roles:
        raise PermissionDenied(
            message
            or (
                f"Role '{role}' is not permitted for this operation. "
                f"Required: {', '.join(allowed_roles)}."
            )
        )
