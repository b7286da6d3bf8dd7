"""Tests for record create/update/delete."""

import pytest

from core import helpers, mutations, queries
from core.errors import OperationResult, ValidationError
from tests.conftest import ADMIN_EMAIL, OTHER_ADMIN_EMAIL, USER_EMAIL, record_data


def _all(email=ADMIN_EMAIL, role="Admin"):
    return helpers.list_records(email, role)


class TestCreate:
    def test_create_stamps_owner_and_handle(self, accounts):
        result = mutations.create_record(record_data(national_id="X1", hours_count=3), ADMIN_EMAIL)
        assert result.success, result.message
        handle = result.data["handle"]

        (view,) = _all()
        assert view.handle == handle
        assert view.owner_email == ADMIN_EMAIL
        assert view.hours_count == 3
        assert _all(OTHER_ADMIN_EMAIL)[0].handle == handle
        assert helpers.list_records(USER_EMAIL, "User") == []

    def test_duplicate_national_id_is_a_conflict(self, accounts):
        assert mutations.create_record(record_data(national_id="A123"), ADMIN_EMAIL).success
        result = mutations.create_record(record_data(national_id="A123", full_name="Someone Else"), OTHER_ADMIN_EMAIL)
        assert not result.success
        assert result.error == "conflict"
        assert len(_all()) == 1

    def test_invalid_record_is_rejected(self, accounts):
        result = mutations.create_record(record_data(hours_count=0), ADMIN_EMAIL)
        assert (result.success, result.error, result.field) == (False, "validation", "hours_count")
        assert _all() == []

    @pytest.mark.parametrize("actor", [USER_EMAIL, "ghost@example.com", ""])
    def test_non_admin_is_forbidden_without_touching_records(self, accounts, monkeypatch, actor):
        touched = []
        monkeypatch.setattr(queries, "load_records", lambda *a, **k: touched.append(1))
        monkeypatch.setattr(queries, "append_record", lambda *a, **k: touched.append(1))

        result = mutations.create_record(record_data(), actor)
        assert (result.success, result.error) == (False, "forbidden")
        assert touched == []

    def test_create_invalidates_summary(self, accounts):
        assert helpers.get_summary_stats()["records"] == 0
        mutations.create_record(record_data(national_id="X1", hours_count=3), ADMIN_EMAIL)
        assert helpers.get_summary_stats() == {"specialties": 1, "records": 1, "hours": 3, "institutions": 1}

    def test_create_writes_audit_log(self, accounts):
        handle = mutations.create_record(record_data(national_id="X1"), ADMIN_EMAIL).data["handle"]
        logs = queries.get_audit_logs(handle)
        assert len(logs) == 1
        entry = logs.iloc[0]
        assert (entry["actor"], entry["event"]) == (ADMIN_EMAIL, "create")


class TestUpdate:
    def test_update_replaces_row_and_restamps_owner(self, accounts):
        handle = mutations.create_record(record_data(national_id="X1"), ADMIN_EMAIL).data["handle"]

        result = mutations.update_record(record_data(national_id="X1", hours_count=8, group="G7"), handle, OTHER_ADMIN_EMAIL)
        assert result.success, result.message

        (view,) = _all()
        assert view.handle == handle
        assert (view.hours_count, view.group, view.owner_email) == (8, "G7", OTHER_ADMIN_EMAIL)

    def test_update_keeping_own_national_id_is_not_a_conflict(self, accounts):
        handle = mutations.create_record(record_data(national_id="X1"), ADMIN_EMAIL).data["handle"]
        assert mutations.update_record(record_data(national_id="X1"), handle, ADMIN_EMAIL).success

    def test_update_colliding_with_other_row_is_a_conflict(self, accounts):
        mutations.create_record(record_data(national_id="X1"), ADMIN_EMAIL)
        handle = mutations.create_record(record_data(national_id="X2"), ADMIN_EMAIL).data["handle"]

        result = mutations.update_record(record_data(national_id="X1"), handle, ADMIN_EMAIL)
        assert (result.success, result.error) == (False, "conflict")
        assert [v.national_id for v in _all()] == ["X1", "X2"]

    def test_update_unknown_handle_is_not_found(self, accounts):
        result = mutations.update_record(record_data(), "9999", ADMIN_EMAIL)
        assert (result.success, result.error) == (False, "not_found")

    def test_update_by_user_is_forbidden(self, accounts):
        handle = mutations.create_record(record_data(national_id="X1"), ADMIN_EMAIL).data["handle"]
        result = mutations.update_record(record_data(national_id="X1", group="G9"), handle, USER_EMAIL)
        assert result.error == "forbidden"
        assert _all()[0].group == "G1"

    def test_update_invalidates_summary(self, accounts):
        handle = mutations.create_record(record_data(national_id="X1", hours_count=3), ADMIN_EMAIL).data["handle"]
        assert helpers.get_summary_stats()["hours"] == 3
        mutations.update_record(record_data(national_id="X1", hours_count=10), handle, ADMIN_EMAIL)
        assert helpers.get_summary_stats()["hours"] == 10


class TestDelete:
    def test_delete_removes_row(self, accounts):
        first = mutations.create_record(record_data(national_id="X1"), ADMIN_EMAIL).data["handle"]
        mutations.create_record(record_data(national_id="X2"), ADMIN_EMAIL)

        assert mutations.delete_record(first, ADMIN_EMAIL).success
        assert [v.national_id for v in _all()] == ["X2"]
        assert helpers.get_summary_stats()["records"] == 1

    def test_handles_survive_row_shifts(self, accounts):
        first = mutations.create_record(record_data(national_id="X1"), ADMIN_EMAIL).data["handle"]
        second = mutations.create_record(record_data(national_id="X2"), ADMIN_EMAIL).data["handle"]
        mutations.delete_record(first, ADMIN_EMAIL)

        result = mutations.update_record(record_data(national_id="X2", hours_count=5), second, ADMIN_EMAIL)
        assert result.success
        assert _all()[0].hours_count == 5

    @pytest.mark.parametrize("handle", ["9999", "", None])
    def test_delete_unknown_handle_is_not_found(self, accounts, handle):
        mutations.create_record(record_data(national_id="X1"), ADMIN_EMAIL)
        result = mutations.delete_record(handle, ADMIN_EMAIL)
        assert (result.success, result.error) == (False, "not_found")
        assert len(_all()) == 1

    def test_delete_twice_is_not_found(self, accounts):
        handle = mutations.create_record(record_data(national_id="X1"), ADMIN_EMAIL).data["handle"]
        assert mutations.delete_record(handle, ADMIN_EMAIL).success
        assert mutations.delete_record(handle, ADMIN_EMAIL).error == "not_found"


def test_store_failure_becomes_server_error(accounts, monkeypatch):
    def boom(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(queries, "append_record", boom)
    result = mutations.create_record(record_data(), ADMIN_EMAIL)
    assert (result.success, result.error) == (False, "server")
    assert "disk full" not in result.message


def test_result_payload_carries_field_and_extra():
    result = OperationResult.fail(ValidationError("Bad email.", field="email"))
    result.extra["hint"] = "Use name@domain.tld"
    assert result.as_dict() == {
        "success": False,
        "message": "Bad email.",
        "error": "validation",
        "field": "email",
        "hint": "Use name@domain.tld",
    }
    assert OperationResult.ok().extra == {}
