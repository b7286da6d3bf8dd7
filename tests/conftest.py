import pytest

from accounts.gateway import hash_password
from accounts.models import ROLE_ADMIN, ROLE_USER, Account
from core import queries
from core.core_models import OPTIONS_SHEET, Record
from core.mutations import new_record_id
from core.sheet_store import SheetStore
from utils.cache_utils import AggregateCache, set_aggregate_cache

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-pass"
OTHER_ADMIN_EMAIL = "second.admin@example.com"
USER_EMAIL = "user@example.com"
USER_PASSWORD = "user-pass"


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def record_data(**overrides) -> dict:
    data = {
        "specialty": "Nursing",
        "group": "G1",
        "full_name": "Amina Belkacem",
        "national_id": "A123",
        "training_date": "2024-03-15",
        "hours_count": 3,
        "commune": "Blida",
        "institution": "CHU Blida",
        "supervisor_name": "Dr. Haddad",
        "supervisor_id": "S01",
    }
    data.update(overrides)
    return data


@pytest.fixture(autouse=True)
def workbook(settings, tmp_path):
    settings.RECORDS_WORKBOOK_PATH = tmp_path / "records.xlsx"
    settings.MEDIA_ROOT = tmp_path / "media"
    settings.AUDIT_LOG_DIR = tmp_path / "media" / "logs"
    settings.EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
    return settings.RECORDS_WORKBOOK_PATH


@pytest.fixture
def store(workbook):
    store = SheetStore(workbook)
    store.ensure_sheets()
    return store


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def cache(clock):
    cache = AggregateCache(ttl=300, clock=clock)
    set_aggregate_cache(cache)
    yield cache
    set_aggregate_cache(None)


@pytest.fixture
def accounts(store):
    for email, password, role in (
        (ADMIN_EMAIL, ADMIN_PASSWORD, ROLE_ADMIN),
        (OTHER_ADMIN_EMAIL, ADMIN_PASSWORD, ROLE_ADMIN),
        (USER_EMAIL, USER_PASSWORD, ROLE_USER),
    ):
        queries.add_account(Account(email, hash_password(password), role), store=store)
    return store


@pytest.fixture
def add_row(store):
    """Append a record straight to the Data sheet, bypassing validation."""
    def _add(owner_email=ADMIN_EMAIL, **overrides):
        record = Record(**record_data(**overrides))
        record.owner_email = owner_email
        record.record_id = overrides.get("record_id") or new_record_id()
        queries.append_record(record, store=store)
        return record.record_id
    return _add


@pytest.fixture
def add_option(store):
    def _add(*values):
        store.append(OPTIONS_SHEET, list(values))
    return _add
