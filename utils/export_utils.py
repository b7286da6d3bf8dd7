# utils/export_utils.py
import io
import logging
import os
import uuid

import pandas as pd
from django.conf import settings
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from core.core_models import FIELD_LABELS, RECORD_FIELDS

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = RECORD_FIELDS + ["owner_email"]
EXPORT_FORMATS = ("xlsx", "pdf")


# -----------------------------
# Records → DataFrame
# -----------------------------
def records_to_dataframe(records) -> pd.DataFrame:
    """Ordered records (RecordView or dicts) as a DataFrame with localized headers."""
    rows = [r.to_dict() if hasattr(r, "to_dict") else dict(r) for r in records]
    df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
    return df.rename(columns={c: str(FIELD_LABELS[c]) for c in EXPORT_COLUMNS})


# -----------------------------
# Export Records to Excel
# -----------------------------
def export_records_excel(records) -> bytes:
    df = records_to_dataframe(records)
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Records")
        ws = writer.sheets["Records"]

        # Bold header and widen columns to their longest value
        for idx, col in enumerate(df.columns, start=1):
            ws.cell(row=1, column=idx).font = Font(bold=True)
            longest = max([len(str(col))] + [len(str(v)) for v in df[col].tolist()])
            ws.column_dimensions[get_column_letter(idx)].width = min(longest + 2, 50)
        ws.freeze_panes = "A2"
    output.seek(0)
    return output.getvalue()


# -----------------------------
# Export Records to PDF
# -----------------------------
def export_records_pdf(records, title_text: str | None = None, max_cols_per_table: int = 6) -> bytes:
    """
    Returns PDF bytes for the records, landscape A4.
    Columns are chunked into stacked tables so wide records stay readable.
    """
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import A4, landscape
    from reportlab.lib.styles import getSampleStyleSheet
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

    df = records_to_dataframe(records)

    def fmt(v):
        if v is None or (isinstance(v, float) and pd.isna(v)) or str(v).strip() == "":
            return "-"
        return str(v)

    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=landscape(A4), leftMargin=18, rightMargin=18, topMargin=18, bottomMargin=18)
    styles = getSampleStyleSheet()
    elements = []
    if title_text:
        elements.append(Paragraph(title_text, styles["Title"]))
        elements.append(Spacer(1, 12))

    all_cols = list(df.columns)
    chunks = [all_cols[i:i + max_cols_per_table] for i in range(0, len(all_cols), max_cols_per_table)]
    for cols in chunks:
        data = [cols]
        for _, row in df[cols].iterrows():
            data.append([fmt(row[c]) for c in cols])
        table = Table(data, repeatRows=1)
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#f0f0f0')),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.HexColor('#333333')),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, 0), 10),
            ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
            ('GRID', (0, 0), (-1, -1), 0.25, colors.HexColor('#cccccc')),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#fbfbfb')]),
            ('FONTSIZE', (0, 1), (-1, -1), 9),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ]))
        elements.append(table)
        elements.append(Spacer(1, 8))

    doc.build(elements)
    buf.seek(0)
    return buf.getvalue()


# -----------------------------
# Export to a downloadable file
# -----------------------------
def export_records(records, fmt: str = "xlsx", title_text: str | None = None):
    """
    Render the records and save them under MEDIA_ROOT/exports.
    Returns the media URL of the file, or None when there is nothing to export
    or rendering fails.
    """
    records = list(records or [])
    if not records or fmt not in EXPORT_FORMATS:
        return None
    try:
        if fmt == "pdf":
            content = export_records_pdf(records, title_text=title_text)
        else:
            content = export_records_excel(records)
        export_dir = os.path.join(settings.MEDIA_ROOT, "exports")
        os.makedirs(export_dir, exist_ok=True)
        fname = f"records-{uuid.uuid4().hex}.{fmt}"
        with open(os.path.join(export_dir, fname), "wb") as f:
            f.write(content)
    except Exception:
        logger.exception("Export of %d records as %s failed", len(records), fmt)
        return None
    return f"{settings.MEDIA_URL.rstrip('/')}/exports/{fname}"
