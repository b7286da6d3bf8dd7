# core/mutations.py
import logging
import uuid

from django.utils.translation import gettext as _

from accounts.gateway import is_admin
from accounts.models import normalize_email
from core import queries
from core.errors import (
    AuthorizationError, ConflictError, NotFoundError, OperationResult, guarded,
)
from core.sheet_store import get_store
from utils.cache_utils import get_aggregate_cache
from utils.validators import validate_record

logger = logging.getLogger(__name__)


def new_record_id() -> str:
    return uuid.uuid4().hex


def _require_admin(actor_email, store):
    """Resolve the actor's role from the Login sheet; only Admins may write."""
    if not is_admin(actor_email, store=store):
        raise AuthorizationError(_("You are not allowed to modify records."))
    return normalize_email(actor_email)


def _resolve_row(handle, store):
    row_number = queries.find_record_row(handle, store=store)
    if row_number is None:
        raise NotFoundError(_("The record was not found. It may have been deleted."))
    return row_number


def _duplicate_error(national_id):
    return ConflictError(
        _("A record with national ID %(national_id)s already exists.") % {"national_id": national_id}
    )


def _after_write(actor, event, record_id, values=None):
    get_aggregate_cache().invalidate()
    queries.write_audit_log(actor, event, record_id, values)


# -------------------------
# Create / Update / Delete
# -------------------------
@guarded
def create_record(data, acting_admin_email, store=None) -> OperationResult:
    store = store or get_store()
    actor = _require_admin(acting_admin_email, store)
    record = validate_record(data)

    with store.transaction():
        if queries.national_id_exists(record.national_id, store=store):
            raise _duplicate_error(record.national_id)
        record.owner_email = actor
        record.record_id = new_record_id()
        queries.append_record(record, store=store)

    logger.info("Record %s created by %s", record.record_id, actor)
    _after_write(actor, "create", record.record_id, record.to_dict())
    return OperationResult.ok(_("Record saved successfully."), data={"handle": record.record_id})


@guarded
def update_record(data, handle, acting_admin_email, store=None) -> OperationResult:
    """Full-row replace; the owner is re-stamped to the acting admin."""
    store = store or get_store()
    actor = _require_admin(acting_admin_email, store)

    with store.transaction():
        row_number = _resolve_row(handle, store)
        record = validate_record(data)
        if queries.national_id_exists(record.national_id, exclude_row=row_number, store=store):
            raise _duplicate_error(record.national_id)
        record.owner_email = actor
        record.record_id = str(handle).strip()
        queries.replace_record(row_number, record, store=store)

    logger.info("Record %s updated by %s", record.record_id, actor)
    _after_write(actor, "update", record.record_id, record.to_dict())
    return OperationResult.ok(_("Record updated successfully."), data={"handle": record.record_id})


@guarded
def delete_record(handle, acting_admin_email, store=None) -> OperationResult:
    store = store or get_store()
    actor = _require_admin(acting_admin_email, store)

    with store.transaction():
        row_number = _resolve_row(handle, store)
        queries.remove_record(row_number, store=store)

    logger.info("Record %s deleted by %s", handle, actor)
    _after_write(actor, "delete", str(handle).strip())
    return OperationResult.ok(_("Record deleted successfully."))
