# utils/validators.py
import re
from datetime import date, datetime

import numpy as np
import pandas as pd
from django.utils.translation import gettext as _

from core.core_models import FIELD_LABELS, RECORD_FIELDS, Record, cell_to_text
from core.errors import ValidationError

NATIONAL_ID_RE = re.compile(r"^[A-Za-z0-9]{1,15}$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6
DATE_PART_RE = re.compile(r"[A-Za-z]+|\d+")


# -----------------------------
# String Normalization
# -----------------------------
def normalize_string(val):
    """Normalize strings (strip + lowercase)."""
    if isinstance(val, str):
        return val.strip().lower()
    elif val is not None and pd.notna(val):
        return str(val).strip().lower()
    return ''


# -----------------------------
# Safe numeric conversions
# -----------------------------
def safe_float(val):
    """Convert to float safely (handles comma decimals, NaN)."""
    try:
        if isinstance(val, bool):
            return None
        if val is not None and pd.notna(val):
            if isinstance(val, str):
                val = val.strip().replace(",", ".")
                if not val:
                    return None
            result = float(val)
            return result if np.isfinite(result) else None
    except (TypeError, ValueError):
        pass
    return None


# -----------------------------
# Safe date conversions
# -----------------------------
def safe_date(val):
    """Convert to datetime.date safely. Handles Excel serials, strings, and rejects invalid years."""
    try:
        if val is None or (not isinstance(val, str) and pd.isna(val)):
            return None

        # Excel serial (numeric)
        if isinstance(val, (int, float, np.integer, np.floating)) and not isinstance(val, bool):
            dt = pd.to_datetime(val, origin="1899-12-30", unit="D")
            return dt.date() if dt.year >= 1901 else None

        # Datetime or Timestamp
        if isinstance(val, (datetime, pd.Timestamp)):
            return val.date() if val.year >= 1901 else None
        if isinstance(val, date):
            return val if val.year >= 1901 else None

        # String formats
        if isinstance(val, str):
            val = val.strip()
            if not val:
                return None
            for fmt in ("%Y-%m-%d", "%d/%m/%Y", "%m/%d/%Y", "%d-%m-%Y", "%Y/%m/%d"):
                try:
                    dt = datetime.strptime(val, fmt)
                    return dt.date() if dt.year >= 1901 else None
                except ValueError:
                    continue
            # fallback to pandas parser, only for values naming day, month and year
            if len(DATE_PART_RE.findall(val)) < 3:
                return None
            dt = pd.to_datetime(val, errors="coerce", dayfirst=True)
            if pd.notna(dt) and dt.year >= 1901:
                return dt.date()
    except (TypeError, ValueError, OverflowError):
        return None
    return None


# -----------------------------
# Record validation
# -----------------------------
def validate_record(data) -> Record:
    """
    Validate a submitted record and return a cleaned copy.
    Rules run in a fixed order and the first failure is raised:
    mandatory fields, hours >= 1, parseable training date, national ID format.
    """
    record = data if isinstance(data, Record) else Record.from_dict(data)

    cleaned = {}
    for name in RECORD_FIELDS:
        value = cell_to_text(getattr(record, name))
        if not value:
            raise ValidationError(
                _("The field \"%(field)s\" is required.") % {"field": FIELD_LABELS[name]},
                field=name,
            )
        cleaned[name] = value

    hours = safe_float(cleaned["hours_count"])
    if hours is None or hours < 1:
        raise ValidationError(
            _("%(field)s must be a number greater than or equal to 1.") % {"field": FIELD_LABELS["hours_count"]},
            field="hours_count",
        )

    training_date = safe_date(cleaned["training_date"])
    if training_date is None:
        raise ValidationError(
            _("%(field)s is not a valid date.") % {"field": FIELD_LABELS["training_date"]},
            field="training_date",
        )

    if not NATIONAL_ID_RE.match(cleaned["national_id"]):
        raise ValidationError(
            _("%(field)s must be 1 to 15 letters or digits.") % {"field": FIELD_LABELS["national_id"]},
            field="national_id",
        )

    cleaned["hours_count"] = int(hours) if float(hours).is_integer() else hours
    cleaned["training_date"] = training_date.isoformat()
    return Record(**cleaned)


# -----------------------------
# Account validation
# -----------------------------
def validate_email(email: str) -> str:
    email = normalize_string(email)
    if not EMAIL_RE.match(email):
        raise ValidationError(_("Please enter a valid email address."), field="email")
    return email


def validate_password(password: str):
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            _("Password must be at least %(count)d characters.") % {"count": MIN_PASSWORD_LENGTH},
            field="password",
        )
