"""Grant or revoke the super admin claim of a user."""

import typing as t

from django.core.management.base import BaseCommand, CommandError

from accounts.models import User
from accounts.service import claims_service


class Command(BaseCommand):
    help = "Grant (or with --revoke, revoke) the super admin claim of a user identified by username."

    def add_arguments(self, parser: t.Any) -> None:
        """Add command arguments."""
        parser.add_argument("username", type=str, help="Username of the user")
        parser.add_argument("--revoke", action="store_true", help="Revoke instead of grant")

    def handle(self, *args: t.Any, **options: t.Any) -> None:
        """Update the claims of the user."""
        username = options["username"]
        try:
            user = User.objects.get(username=username)
        except User.DoesNotExist:
            raise CommandError(f'User "{username}" does not exist')

        claims = claims_service.set_super_admin(user, enabled=not options["revoke"])
        state = "granted" if claims.super_admin else "revoked"
        self.stdout.write(self.style.SUCCESS(f"Super admin {state} for {user.username} ({user.pk})"))
