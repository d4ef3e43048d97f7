"""
Reading client rows out of uploaded spreadsheets.

Accepts the first worksheet of an ``.xlsx`` workbook or a ``.csv`` file with
the header row ``Name, Monthly Amount, Phone, Email``. Rows are returned with
their spreadsheet row number so import errors can point at the right line.
"""
import csv
import io
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from paytrack.core.errors import ValidationError


HEADER_FIELDS = {
    "name": "name",
    "monthly amount": "monthly_amount",
    "phone": "phone",
    "email": "email",
}

SPREADSHEET_EXTENSIONS = (".xlsx", ".xlsm")
CSV_EXTENSIONS = (".csv",)


def _cell_text(value):
    # Excel stores phone numbers typed without a leading "+" as numbers
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return value


def _cell_amount(value):
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        return value.strip()
    return value


def _normalize_row(header: list, values) -> dict | None:
    row = {}

    for column, value in zip(header, values):
        field = HEADER_FIELDS.get(column)
        if field is None:
            continue

        if isinstance(value, str):
            value = value.strip()

        if field == "monthly_amount":
            row[field] = _cell_amount(value)
        else:
            row[field] = _cell_text(value)

    if all(value in (None, "") for value in row.values()):
        return None

    return row


def _normalize_header(values) -> list:
    return [
        str(value).strip().lower() if value is not None else None
        for value in values
    ]


def _rows_from_workbook(content: bytes):
    try:
        workbook = load_workbook(io.BytesIO(content), data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError) as exc:
        raise ValidationError("file", "Could not read the Excel file") from exc

    yield from workbook.worksheets[0].iter_rows(values_only=True)


def _rows_from_csv(content: bytes):
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ValidationError("file", "CSV file must be UTF-8 encoded") from exc

    yield from csv.reader(io.StringIO(text))


def read_client_rows(filename: str, content: bytes) -> list[tuple[int, dict]]:
    name = (filename or "").lower()

    if name.endswith(SPREADSHEET_EXTENSIONS):
        raw_rows = _rows_from_workbook(content)
    elif name.endswith(CSV_EXTENSIONS):
        raw_rows = _rows_from_csv(content)
    else:
        raise ValidationError("file", "Please upload an Excel (.xlsx) or CSV file")

    header = None
    rows = []

    for row_number, values in enumerate(raw_rows, start=1):
        if header is None:
            header = _normalize_header(values)
            if "name" not in header:
                raise ValidationError("file", "Header row must contain a 'Name' column")
            continue

        row = _normalize_row(header, values)
        if row is not None:
            rows.append((row_number, row))

    if not rows:
        raise ValidationError("file", "No data found in the uploaded file")

    return rows
