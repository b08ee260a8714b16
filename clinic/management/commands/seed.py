# clinic/management/commands/seed.py
from django.core.management.base import BaseCommand, CommandError
from django.db import IntegrityError

from clinic.services.seed import seed


class Command(BaseCommand):
    help = "Create the admin role, default permission and admin user (fails if already seeded)."

    def handle(self, *args, **opts):
        try:
            user = seed()
        except IntegrityError as exc:
            raise CommandError(f"database already seeded: {exc}")
        self.stdout.write(self.style.SUCCESS(f"ok: {user.email} (admin)"))
        self.stdout.write(self.style.SUCCESS("Database seeded."))
