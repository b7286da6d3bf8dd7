# core/helpers.py
import math

import pandas as pd
from django.conf import settings
from django.utils.translation import gettext as _

from accounts.models import ROLE_ADMIN, normalize_email, normalize_role
from core.core_models import (
    DATA_COLUMNS, FIELD_LABELS, PRIMARY_FIELDS, DateRange, Record, RecordView,
)
from core.errors import ValidationError
from core.queries import load_options, load_records
from utils.cache_utils import get_aggregate_cache
from utils.validators import safe_date, safe_float

FILTERABLE_FIELDS = set(DATA_COLUMNS) - {"record_id"}


# ---------------------------
# Filter & Visibility
# ---------------------------

def drop_padding_rows(df: pd.DataFrame) -> pd.DataFrame:
    """Remove rows that are blank across the three identifying fields."""
    if df.empty:
        return df
    filled = df[PRIMARY_FIELDS].astype(str).apply(lambda col: col.str.strip() != "")
    return df[filled.any(axis=1)]


def apply_visibility(df: pd.DataFrame, requester_email, requester_role) -> pd.DataFrame:
    """Admins see every row; everyone else only rows they own."""
    if normalize_role(requester_role) == ROLE_ADMIN:
        return df
    owner = df["owner_email"].astype(str).str.strip().str.lower()
    return df[owner == normalize_email(requester_email)]


def apply_field_filters(df: pd.DataFrame, filters) -> pd.DataFrame:
    """
    Equality filters, ANDed. Empty values impose no constraint.
    Unknown field names are rejected rather than silently ignored.
    """
    for name, value in (filters or {}).items():
        if name not in FILTERABLE_FIELDS:
            raise ValidationError(_("Unknown filter field: %(field)s") % {"field": name}, field=name)
        wanted = "" if value is None else str(value).strip()
        if not wanted:
            continue
        column = df[name]
        if name == "hours_count":
            wanted_num = safe_float(wanted)
            df = df[column.map(safe_float) == wanted_num] if wanted_num is not None else df.iloc[0:0]
        elif name == "owner_email":
            df = df[column.astype(str).str.strip().str.lower() == normalize_email(wanted)]
        else:
            df = df[column.astype(str).str.strip() == wanted]
    return df


def _coerce_range(date_range) -> DateRange:
    if date_range is None:
        return DateRange()
    if isinstance(date_range, DateRange):
        return date_range
    if isinstance(date_range, dict):
        return DateRange(date_range.get("start"), date_range.get("end"))
    start, end = date_range
    return DateRange(start, end)


def apply_date_range(df: pd.DataFrame, date_range) -> pd.DataFrame:
    """Inclusive range on training_date; unparsable dates drop out while active."""
    date_range = _coerce_range(date_range)
    if not date_range.active:
        return df

    bounds = {}
    for name, raw in (("start", date_range.start), ("end", date_range.end)):
        if raw in (None, ""):
            bounds[name] = None
            continue
        parsed = safe_date(raw)
        if parsed is None:
            raise ValidationError(
                _("%(field)s is not a valid date.") % {"field": FIELD_LABELS["training_date"]},
                field="training_date",
            )
        bounds[name] = parsed

    dates = df["training_date"].map(safe_date)
    mask = dates.notna()
    if bounds["start"] is not None:
        mask &= dates.map(lambda d: d is not None and d >= bounds["start"])
    if bounds["end"] is not None:
        mask &= dates.map(lambda d: d is not None and d <= bounds["end"])
    return df[mask.astype(bool)]


def to_views(df: pd.DataFrame) -> list:
    views = []
    for row in df.to_dict("records"):
        row.pop("row", None)
        views.append(RecordView.from_record(Record(**row)))
    return views


def paginate(items, page=1, per_page=25) -> dict:
    """Slice an in-memory result; pages are 1-based."""
    page = max(int(page or 1), 1)
    per_page = max(int(per_page or 1), 1)
    total = len(items)
    start = (page - 1) * per_page
    return {
        "items": list(items[start:start + per_page]),
        "page": page,
        "per_page": per_page,
        "total": total,
        "pages": math.ceil(total / per_page) if total else 0,
    }


def list_records(requester_email, requester_role, filters=None, date_range=None,
                 page=None, per_page=None, store=None) -> list:
    """
    Visible, filtered records in sheet order.
    When `page` is given the result is the 1-based page slice of size `per_page`.
    """
    df = load_records(store)
    df = drop_padding_rows(df)
    df = apply_visibility(df, requester_email, requester_role)
    df = apply_field_filters(df, filters)
    df = apply_date_range(df, date_range)
    views = to_views(df)
    if page:
        return paginate(views, page, per_page or settings.RECORDS_DEFAULT_PER_PAGE)["items"]
    return views


def get_record_view(handle, requester_email, requester_role, store=None):
    """One visible record by handle, or None."""
    for view in list_records(requester_email, requester_role, store=store):
        if view.handle == str(handle or "").strip():
            return view
    return None


# ---------------------------
# Aggregates
# ---------------------------

def _nested_index(df: pd.DataFrame, outer: str, inner: str, leaf: str) -> dict:
    index = {}
    for row in df[[outer, inner, leaf]].itertuples(index=False):
        a, b, c = (str(v).strip() for v in row)
        if not (a and b and c):
            continue
        index.setdefault(a, {}).setdefault(b, set()).add(c)
    return {
        a: {b: sorted(names) for b, names in sorted(groups.items())}
        for a, groups in sorted(index.items())
    }


def build_option_index(store=None) -> dict:
    """
    Scan the Options sheet once and build the cascading choices:
    specialty -> group -> names, commune -> institution -> supervisors.
    """
    df = load_options(store)
    return {
        "specialties": _nested_index(df, "specialty", "group", "full_name"),
        "communes": _nested_index(df, "commune", "institution", "supervisor_name"),
    }


def compute_summary(store=None) -> dict:
    """Statistics over the full record set, independent of who is asking."""
    df = drop_padding_rows(load_records(store))
    if df.empty:
        return {"specialties": 0, "records": 0, "hours": 0, "institutions": 0}

    def _unique(col):
        values = df[col].astype(str).str.strip()
        return int(values[values != ""].nunique())

    hours = df["hours_count"].map(safe_float).fillna(0).sum()
    hours = float(hours)
    return {
        "specialties": _unique("specialty"),
        "records": int(len(df)),
        "hours": int(hours) if hours.is_integer() else round(hours, 2),
        "institutions": _unique("institution"),
    }


def get_dropdown_options(store=None) -> str:
    return get_aggregate_cache().get_options(lambda: build_option_index(store))


def get_summary_stats(store=None) -> dict:
    return get_aggregate_cache().get_summary(lambda: compute_summary(store))
