from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from accounts.gateway import hash_password
from accounts.models import ROLE_ADMIN, Account, normalize_email
from core import queries
from core.errors import ValidationError
from core.mutations import new_record_id
from core.sheet_store import get_store
from utils.validators import validate_password


class Command(BaseCommand):
    help = "Create the records workbook (Login, Data, Options sheets), seed the default admin and back-fill record ids."

    def add_arguments(self, parser):
        parser.add_argument("--admin-email", default=settings.RECORDS_ADMIN_EMAIL)
        parser.add_argument("--admin-password", default=settings.RECORDS_ADMIN_PASSWORD)

    def handle(self, *args, **options):
        store = get_store()
        store.ensure_sheets()
        self.stdout.write(self.style.NOTICE(f"Workbook: {store.path}"))

        email = normalize_email(options["admin_email"])
        password = options["admin_password"]
        if email:
            with store.transaction():
                found = queries.find_account(email, store=store)
                if found:
                    self.stdout.write(self.style.SUCCESS(f"Account '{email}' already exists. No action taken."))
                else:
                    try:
                        validate_password(password)
                    except ValidationError as exc:
                        raise CommandError(f"Admin password rejected: {exc.message}") from exc
                    queries.add_account(
                        Account(email=email, password_hash=hash_password(password), role=ROLE_ADMIN),
                        store=store,
                    )
                    self.stdout.write(self.style.SUCCESS(f"Seeded admin account '{email}'."))
        else:
            self.stdout.write(self.style.WARNING("No admin email given; skipping admin provisioning."))

        filled = queries.backfill_record_ids(new_record_id, store=store)
        if filled:
            self.stdout.write(self.style.SUCCESS(f"Assigned record ids to {filled} row(s)."))
