"""
Custom authentication backend for case-insensitive e-mail login.

E-mail addresses are stored lower-cased and are unique regardless of
case, so ``Alice@City.gov`` and ``alice@city.gov`` identify the same
account.  Django's default ``ModelBackend`` does an exact match on
``USERNAME_FIELD``; this backend normalises the submitted value first.

Registered in ``settings.AUTHENTICATION_BACKENDS``.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

User = get_user_model()


class EmailAuthBackend(ModelBackend):
    """
    Authenticate against the user's e-mail address.

    Accepts the credential either as ``email=`` or as Django's generic
    ``username=`` keyword (used by the admin login form and SimpleJWT).
    """

    def authenticate(self, request, email=None, password=None, username=None, **kwargs):
        """
        Resolve the user by e-mail and verify *password*.

        Returns
        -------
        User | None
            The authenticated user, or ``None`` on failure (unknown
            e-mail, wrong password, or suspended account).
        """
        identifier = email or username or kwargs.get(User.USERNAME_FIELD)
        if identifier is None or password is None:
            return None

        try:
            user = User.objects.get(email__iexact=identifier.strip())
        except User.DoesNotExist:
            # Run the default password hasher to mitigate timing attacks
            User().set_password(password)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
