"""
Management command: create_admin
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Bootstraps an active ``admin`` account so the first operator can log in
and promote authorities through the API.

The command is **idempotent** — safe to run multiple times.  If a user
with the given e-mail already exists (compared case-insensitively) it is
promoted to ``admin`` / ``active``; the password is only replaced when
``--reset-password`` is passed.

Usage::

    python manage.py create_admin --email ops@city.gov \\
        --full-name "City Operator" --password "s3cret-pass"
"""

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from accounts.models import User, UserRole, UserStatus


class Command(BaseCommand):
    help = (
        "Creates (or promotes) an active admin account.  "
        "Safe to run multiple times (idempotent)."
    )

    def add_arguments(self, parser):
        parser.add_argument("--email", required=True)
        parser.add_argument("--full-name", required=True, dest="full_name")
        parser.add_argument("--password", required=True)
        parser.add_argument(
            "--reset-password",
            action="store_true",
            help="Overwrite the password of an existing account.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        email = User.objects.normalize_email(options["email"])
        if not email:
            raise CommandError("--email may not be blank.")

        user = User.objects.filter(email__iexact=email).first()

        if user is None:
            user = User.objects.create_superuser(
                email=email,
                password=options["password"],
                full_name=options["full_name"],
            )
            self.stdout.write(self.style.SUCCESS(
                f"  ✔  Created admin: {user.email} (id={user.pk})"
            ))
            return

        user.role = UserRole.ADMIN
        user.status = UserStatus.ACTIVE
        user.is_superuser = True
        if options["reset_password"]:
            user.set_password(options["password"])
        user.save()

        self.stdout.write(self.style.SUCCESS(
            f"  ✔  Updated admin: {user.email} (id={user.pk})"
        ))
