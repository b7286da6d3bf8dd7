# core/sheet_store.py
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path

from django.conf import settings
from openpyxl import Workbook, load_workbook

from core.core_models import SHEET_HEADERS
from core.errors import NotFoundError

logger = logging.getLogger(__name__)

# One lock per workbook file, shared by every SheetStore pointing at it
_LOCKS = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path):
    key = str(path.resolve())
    with _LOCKS_GUARD:
        if key not in _LOCKS:
            _LOCKS[key] = threading.RLock()
        return _LOCKS[key]


class SheetStore:
    """
    Row-oriented access to the workbook backing the application.

    Row numbers are 1-based worksheet rows; row 1 is always the header, so
    data rows live in [2, max_row]. The workbook is re-read on every call and
    every write is saved through a temp file + os.replace, so a reader never
    observes a half-written file.
    """

    def __init__(self, path):
        self.path = Path(path)
        self._lock = _lock_for(self.path)

    # -----------------------------
    # Locking
    # -----------------------------
    @contextmanager
    def transaction(self):
        """Hold the workbook lock across a read-check-write sequence."""
        with self._lock:
            yield self

    # -----------------------------
    # Workbook lifecycle
    # -----------------------------
    def ensure_sheets(self):
        """Create the workbook and any missing sheet, each with its header row."""
        with self._lock:
            if self.path.exists():
                wb = load_workbook(self.path)
            else:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                wb = Workbook()
                wb.remove(wb.active)
            changed = False
            for name, headers in SHEET_HEADERS.items():
                if name not in wb.sheetnames:
                    ws = wb.create_sheet(name)
                    ws.append(list(headers))
                    changed = True
                    logger.info("Created sheet %s in %s", name, self.path)
            if changed:
                self._save(wb)

    def _load(self, sheet: str, read_only: bool):
        # Only read-only loads resolve formulas to cached values
        if not self.path.exists():
            self.ensure_sheets()
        wb = load_workbook(self.path, read_only=read_only, data_only=read_only)
        if sheet not in wb.sheetnames:
            wb.close()
            self.ensure_sheets()
            wb = load_workbook(self.path, read_only=read_only, data_only=read_only)
        return wb

    def _save(self, wb):
        fd, tmp_name = tempfile.mkstemp(suffix=".xlsx", dir=str(self.path.parent))
        os.close(fd)
        try:
            wb.save(tmp_name)
            os.replace(tmp_name, self.path)
        except Exception:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise

    # -----------------------------
    # Row operations
    # -----------------------------
    def get_all(self, sheet: str) -> list:
        """Return [(row_number, values), ...] for every row below the header."""
        width = len(SHEET_HEADERS[sheet])
        wb = self._load(sheet, read_only=True)
        try:
            ws = wb[sheet]
            rows = []
            for row_number, values in enumerate(
                ws.iter_rows(min_row=2, max_col=width, values_only=True), start=2
            ):
                values = list(values) + [None] * (width - len(values))
                rows.append((row_number, values))
            return rows
        finally:
            wb.close()

    def append(self, sheet: str, values) -> int:
        with self._lock:
            wb = self._load(sheet, read_only=False)
            ws = wb[sheet]
            ws.append(list(values))
            row_number = ws.max_row
            self._save(wb)
            return row_number

    def update_row(self, sheet: str, row_number: int, values):
        with self._lock:
            wb = self._load(sheet, read_only=False)
            ws = wb[sheet]
            self._check_row(ws, row_number)
            for col, value in enumerate(values, start=1):
                ws.cell(row=row_number, column=col, value=value)
            self._save(wb)

    def delete_row(self, sheet: str, row_number: int):
        with self._lock:
            wb = self._load(sheet, read_only=False)
            ws = wb[sheet]
            self._check_row(ws, row_number)
            ws.delete_rows(row_number)
            self._save(wb)

    @staticmethod
    def _check_row(ws, row_number):
        if not isinstance(row_number, int) or row_number < 2 or row_number > ws.max_row:
            raise NotFoundError(f"Row {row_number} is outside the data range of {ws.title}.")


def get_store() -> SheetStore:
    """Store for the configured workbook."""
    return SheetStore(settings.RECORDS_WORKBOOK_PATH)
