# core/queries.py
import json
import logging
import os
from datetime import datetime

import pandas as pd
from django.conf import settings

from accounts.models import Account, normalize_email
from core.core_models import (
    DATA_COLUMNS, DATA_SHEET, LOGIN_SHEET, OPTION_COLUMNS, OPTIONS_SHEET,
    Record, cell_to_text,
)
from core.sheet_store import get_store

logger = logging.getLogger(__name__)


# -------------------------
# Accounts (Login sheet)
# -------------------------
def get_accounts(store=None) -> list:
    """Return [(row_number, Account), ...] skipping rows without an email."""
    store = store or get_store()
    accounts = []
    for row_number, values in store.get_all(LOGIN_SHEET):
        account = Account.from_row(values)
        if account.email:
            accounts.append((row_number, account))
    return accounts


def find_account(email: str, store=None):
    """Return (row_number, Account) for the email, or None."""
    email = normalize_email(email)
    if not email:
        return None
    for row_number, account in get_accounts(store):
        if account.email == email:
            return row_number, account
    return None


def get_account_by_email(email: str, store=None):
    found = find_account(email, store)
    return found[1] if found else None


def add_account(account: Account, store=None) -> int:
    store = store or get_store()
    return store.append(LOGIN_SHEET, account.to_row())


def save_account(row_number: int, account: Account, store=None):
    """Rewrite the whole account row in a single write."""
    store = store or get_store()
    store.update_row(LOGIN_SHEET, row_number, account.to_row())


# -------------------------
# Records (Data sheet)
# -------------------------
def load_records(store=None) -> pd.DataFrame:
    """
    Return every Data row as a DataFrame in sheet order.
    Columns are DATA_COLUMNS plus 'row' (the physical worksheet row).
    """
    store = store or get_store()
    rows = []
    for row_number, values in store.get_all(DATA_SHEET):
        record = Record.from_row(values)
        item = record.to_dict()
        item["row"] = row_number
        rows.append(item)
    return pd.DataFrame(rows, columns=DATA_COLUMNS + ["row"])


def find_record_row(handle, store=None):
    """Translate a record handle into its current worksheet row, or None."""
    handle = cell_to_text(handle)
    if not handle:
        return None
    df = load_records(store)
    match = df[df["record_id"] == handle]
    if match.empty:
        return None
    return int(match.iloc[0]["row"])


def get_record_by_handle(handle, store=None):
    handle = cell_to_text(handle)
    if not handle:
        return None
    df = load_records(store)
    match = df[df["record_id"] == handle]
    if match.empty:
        return None
    row = match.to_dict("records")[0]
    row.pop("row", None)
    return Record(**row)


def national_id_exists(national_id: str, exclude_row=None, store=None) -> bool:
    """True when another row already carries this national ID."""
    national_id = cell_to_text(national_id)
    df = load_records(store)
    if df.empty:
        return False
    mask = df["national_id"].astype(str).str.strip() == national_id
    if exclude_row is not None:
        mask &= df["row"] != exclude_row
    return bool(mask.any())


def append_record(record: Record, store=None) -> int:
    store = store or get_store()
    return store.append(DATA_SHEET, record.to_row())


def replace_record(row_number: int, record: Record, store=None):
    store = store or get_store()
    store.update_row(DATA_SHEET, row_number, record.to_row())


def remove_record(row_number: int, store=None):
    store = store or get_store()
    store.delete_row(DATA_SHEET, row_number)


def backfill_record_ids(id_factory, store=None) -> int:
    """Give every data row without a RecordId a fresh one. Returns the count."""
    store = store or get_store()
    filled = 0
    with store.transaction():
        df = load_records(store)
        for row in df.to_dict("records"):
            if row["record_id"] or not any(row[c] for c in ("specialty", "group", "full_name")):
                continue
            record = Record(**{c: row[c] for c in DATA_COLUMNS})
            record.record_id = id_factory()
            replace_record(int(row["row"]), record, store=store)
            filled += 1
    return filled


# -------------------------
# Options (reference sheet)
# -------------------------
def load_options(store=None) -> pd.DataFrame:
    store = store or get_store()
    rows = [
        [cell_to_text(v) for v in values]
        for _, values in store.get_all(OPTIONS_SHEET)
    ]
    return pd.DataFrame(rows, columns=OPTION_COLUMNS)


# -------------------------
# Audit Logs
# -------------------------
def write_audit_log(actor: str, event: str, record_id: str, values=None):
    """Write a JSON entry for a record mutation under AUDIT_LOG_DIR."""
    log_dir = settings.AUDIT_LOG_DIR
    ts = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
    safe_id = str(record_id).replace(os.sep, "-") if record_id else "unknown"
    log_path = os.path.join(log_dir, f"{event}-{safe_id}-{ts}.json")

    entry = {
        "actor": actor,
        "event": event,  # 'create', 'update' or 'delete'
        "record_id": record_id,
        "timestamp": datetime.now().isoformat(timespec="seconds"),
        "values": values or {},
    }
    try:
        os.makedirs(log_dir, exist_ok=True)
        with open(log_path, "w", encoding="utf-8") as f:
            json.dump(entry, f, ensure_ascii=False, indent=2)
    except OSError:
        # Non-fatal: the mutation has already been committed
        logger.warning("Could not write audit log %s", log_path, exc_info=True)
        return None
    return log_path


def get_audit_logs(record_id: str = None) -> pd.DataFrame:
    """Return audit entries (newest first), optionally for one record."""
    log_dir = settings.AUDIT_LOG_DIR
    if not os.path.isdir(log_dir):
        return pd.DataFrame()
    records = []
    for fname in os.listdir(log_dir):
        if not fname.endswith(".json"):
            continue
        try:
            with open(os.path.join(log_dir, fname), "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            # Skip malformed logs
            continue
        if record_id and data.get("record_id") != record_id:
            continue
        data["timestamp"] = pd.to_datetime(data.get("timestamp"), errors="coerce")
        data["log_file"] = fname
        records.append(data)
    df = pd.DataFrame(records)
    if not df.empty:
        df = df.sort_values("timestamp", ascending=False)
    return df
