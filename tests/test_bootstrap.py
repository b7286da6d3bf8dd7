"""Tests for the bootstrap_store management command."""

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from accounts import gateway
from core import helpers, queries
from core.core_models import DATA_SHEET
from core.sheet_store import get_store


def test_bootstrap_seeds_admin_once(workbook):
    call_command("bootstrap_store", admin_email="Boss@Example.com", admin_password="boss-pass")
    call_command("bootstrap_store", admin_email="boss@example.com", admin_password="boss-pass")

    accounts = queries.get_accounts()
    assert len(accounts) == 1
    assert gateway.login("boss@example.com", "boss-pass").data["role"] == "Admin"


def test_bootstrap_rejects_weak_admin_password(workbook):
    with pytest.raises(CommandError):
        call_command("bootstrap_store", admin_email="boss@example.com", admin_password="123")


def test_bootstrap_backfills_missing_record_ids(workbook):
    store = get_store()
    store.ensure_sheets()
    store.append(DATA_SHEET, ["Nursing", "G1", "Amina", "N1", "2024-01-01", 3, "Blida", "CHU", "Dr. H", "S1", "a@x.com", ""])
    store.append(DATA_SHEET, ["", "", "", "", "", None, "", "", "", "", "", ""])

    call_command("bootstrap_store", admin_email="")

    (view,) = helpers.list_records("a@x.com", "Admin")
    assert len(view.handle) == 32
