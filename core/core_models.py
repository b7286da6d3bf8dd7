# core/core_models.py
from dataclasses import asdict, dataclass, fields
from datetime import date, datetime
from typing import Optional

from django.utils.translation import gettext_lazy as _

# -------------------------
# Sheet layouts
# -------------------------
LOGIN_SHEET = "Login"
DATA_SHEET = "Data"
OPTIONS_SHEET = "Options"

LOGIN_HEADERS = ["Email", "PasswordHash", "Role", "OtpCode"]
DATA_HEADERS = [
    "Specialty", "Group", "FullName", "NationalId", "TrainingDate",
    "HoursCount", "Commune", "Institution", "SupervisorName", "SupervisorId",
    "OwnerEmail", "RecordId",
]
OPTIONS_HEADERS = [
    "Specialty", "Group", "FullName", "Commune", "Institution", "SupervisorName",
]

SHEET_HEADERS = {
    LOGIN_SHEET: LOGIN_HEADERS,
    DATA_SHEET: DATA_HEADERS,
    OPTIONS_SHEET: OPTIONS_HEADERS,
}

# Business fields, in Data sheet column order. All ten are mandatory.
RECORD_FIELDS = [
    "specialty", "group", "full_name", "national_id", "training_date",
    "hours_count", "commune", "institution", "supervisor_name", "supervisor_id",
]
DATA_COLUMNS = RECORD_FIELDS + ["owner_email", "record_id"]
OPTION_COLUMNS = [
    "specialty", "group", "full_name", "commune", "institution", "supervisor_name",
]

# Rows blank across these are sheet padding, not data
PRIMARY_FIELDS = ["specialty", "group", "full_name"]

FIELD_LABELS = {
    "specialty": _("Specialty"),
    "group": _("Group"),
    "full_name": _("Full name"),
    "national_id": _("National ID"),
    "training_date": _("Training date"),
    "hours_count": _("Hours"),
    "commune": _("Commune"),
    "institution": _("Institution"),
    "supervisor_name": _("Supervisor name"),
    "supervisor_id": _("Supervisor ID"),
    "owner_email": _("Created by"),
}


def cell_to_text(value) -> str:
    """Stringify a sheet cell; dates become YYYY-MM-DD, integral floats lose '.0'."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


# -------------------------
# Records
# -------------------------
@dataclass
class Record:
    specialty: str = ""
    group: str = ""
    full_name: str = ""
    national_id: str = ""
    training_date: str = ""
    hours_count: object = ""
    commune: str = ""
    institution: str = ""
    supervisor_name: str = ""
    supervisor_id: str = ""
    owner_email: str = ""
    record_id: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Record":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (data or {}).items() if k in known})

    @classmethod
    def from_row(cls, values) -> "Record":
        values = list(values or [])
        values += [None] * (len(DATA_COLUMNS) - len(values))
        kwargs = {}
        for name, value in zip(DATA_COLUMNS, values):
            if name == "hours_count" and isinstance(value, (int, float)):
                kwargs[name] = value
            else:
                kwargs[name] = cell_to_text(value)
        return cls(**kwargs)

    def to_row(self) -> list:
        return [getattr(self, name) for name in DATA_COLUMNS]

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class RecordView(Record):
    """A visible record plus the handle used to target it for update/delete."""

    handle: str = ""

    @classmethod
    def from_record(cls, record: Record) -> "RecordView":
        return cls(**record.to_dict(), handle=record.record_id)


@dataclass
class DateRange:
    start: Optional[object] = None
    end: Optional[object] = None

    @property
    def active(self) -> bool:
        return bool(cell_to_text(self.start) or cell_to_text(self.end))
