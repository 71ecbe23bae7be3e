from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
import os

from accounts.models import Role


class Command(BaseCommand):
    help = "Seed a platform admin user, or promote an existing user to the admin role"

    def add_arguments(self, parser):
        parser.add_argument("--create", action="store_true", help="Create the admin user if missing")
        parser.add_argument("--username", default=os.getenv("PLATFORM_ADMIN_USERNAME", "admin"))
        parser.add_argument("--email", default=os.getenv("PLATFORM_ADMIN_EMAIL", "admin@example.com"))
        parser.add_argument("--password", default=os.getenv("PLATFORM_ADMIN_PASSWORD", ""))

    def handle(self, *args, **options):
        User = get_user_model()
        username = options["username"]
        password = options["password"]

        user = User.objects.filter(username=username).first()
        if user is None:
            if not options["create"]:
                self.stdout.write(self.style.WARNING(
                    f"User '{username}' not found. Pass --create to create the admin."
                ))
                return
            if not password:
                self.stdout.write(self.style.ERROR(
                    "No password provided. Set PLATFORM_ADMIN_PASSWORD env var or pass --password."
                ))
                return
            user = User.objects.create_user(username=username, email=options["email"], password=password)
            self.stdout.write(self.style.SUCCESS(f"Created user '{username}'"))
        elif password:
            user.set_password(password)
            user.save(update_fields=["password"])
            self.stdout.write(self.style.SUCCESS(f"Updated password for '{username}'"))

        if user.role != Role.ADMIN:
            user.role = Role.ADMIN
            user.save(update_fields=["role"])
            self.stdout.write(self.style.SUCCESS(f"Granted admin role to '{username}'"))
        else:
            self.stdout.write(self.style.WARNING(f"User '{username}' is already an admin"))
