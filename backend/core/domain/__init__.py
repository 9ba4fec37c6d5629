"""
core.domain — Shared domain utilities for cross-app service layers.

Modules
-------
exceptions         Domain-specific exceptions that map cleanly to HTTP responses.
exception_handler  DRF handler translating domain exceptions to responses.
notifications      Synchronous notification creation helper.
transactions       Helpers for ``transaction.atomic`` + ``select_for_update``.
access             Role-scoped queryset selectors and role guards.

Usage from any app::

    from core.domain.exceptions import DomainError, NotFound
    from core.domain.notifications import NotificationService
    from core.domain.transactions import lock_for_update, run_with_retry
    from core.domain.access import apply_role_scope, require_role
"""
