"""Tests for record export rendering."""

import os

from openpyxl import load_workbook

from core import helpers
from tests.conftest import ADMIN_EMAIL
from utils.export_utils import export_records, export_records_excel, export_records_pdf, records_to_dataframe


def test_dataframe_uses_labels_and_order(add_row):
    add_row(national_id="N1")
    add_row(national_id="N2")
    df = records_to_dataframe(helpers.list_records(ADMIN_EMAIL, "Admin"))
    assert list(df.columns)[:4] == ["Specialty", "Group", "Full name", "National ID"]
    assert df["National ID"].tolist() == ["N1", "N2"]


def test_excel_export_roundtrips_rows(add_row, tmp_path):
    add_row(national_id="N1", hours_count=3)
    content = export_records_excel(helpers.list_records(ADMIN_EMAIL, "Admin"))
    path = tmp_path / "out.xlsx"
    path.write_bytes(content)

    ws = load_workbook(path)["Records"]
    assert ws["A1"].value == "Specialty"
    assert ws["D2"].value == "N1"
    assert ws["F2"].value == 3


def test_pdf_export_produces_pdf(add_row):
    add_row(national_id="N1")
    content = export_records_pdf(helpers.list_records(ADMIN_EMAIL, "Admin"), title_text="Records")
    assert content.startswith(b"%PDF")


def test_export_records_saves_under_media(add_row, settings):
    add_row(national_id="N1")
    url = export_records(helpers.list_records(ADMIN_EMAIL, "Admin"), fmt="xlsx")
    assert url.startswith("/media/exports/")
    fname = url.rsplit("/", 1)[-1]
    assert os.path.exists(os.path.join(settings.MEDIA_ROOT, "exports", fname))


def test_export_records_sentinels(add_row, monkeypatch):
    assert export_records([], fmt="xlsx") is None

    add_row(national_id="N1")
    records = helpers.list_records(ADMIN_EMAIL, "Admin")
    assert export_records(records, fmt="docx") is None

    def boom(*args, **kwargs):
        raise RuntimeError("renderer crashed")

    monkeypatch.setattr("utils.export_utils.export_records_excel", boom)
    assert export_records(records, fmt="xlsx") is None
