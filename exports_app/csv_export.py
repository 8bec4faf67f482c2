"""
CSV export.

Turns a list of flat records (dicts) into CSV text and wraps it in a download response. The
format is fixed: every cell, header included, is wrapped in double quotes with inner quotes
doubled, cells are separated by ',' and rows by '\\n', and there is no trailing newline.

Nested values (dicts, lists) are written as compact JSON. A cell that cannot be serialized, or
whose formatter fails, is written empty and a warning is logged; the rest of the export is kept.
"""
import csv
import io
import json
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from django.core.serializers.json import DjangoJSONEncoder
from django.http import HttpResponse
from django.utils import timezone

logger = logging.getLogger(__name__)

CSV_CONTENT_TYPE = 'text/csv'


class NoDataError(Exception):
    """Raised when there are no records to export. No file is produced."""

    def __init__(self, message="No data to export."):
        super().__init__(message)


@dataclass(frozen=True)
class ExportColumn:
    """
    One column of an export.

    Attributes:
        key: The record key read when no formatter is given.
        header: The text of the header cell.
        formatter: Optional function of the whole record returning the cell value.
    """
    key: str
    header: str
    formatter: Optional[Callable] = None

    def value(self, record):
        if self.formatter is None:
            return record.get(self.key)
        return self.formatter(record)


@dataclass(frozen=True)
class CSVExport:
    filename: str
    content: str
    content_type: str = CSV_CONTENT_TYPE
    row_count: int = 0


def derive_columns(records):
    """Columns taken from the keys of the first record; keys starting with '_' are private."""
    return [ExportColumn(key=key, header=key) for key in records[0] if not key.startswith('_')]


def _serialize(value):
    try:
        return json.dumps(value, cls=DjangoJSONEncoder, separators=(',', ':'), ensure_ascii=False)
    except Exception as exc:
        # Includes RecursionError for values nested beyond the recursion limit.
        logger.warning(
            "Could not serialize export cell of type %s: %r", type(value).__name__, exc
        )
        return ''


def cell_text(value):
    """
    The unquoted text of one cell.

    None becomes an empty cell, dicts and lists become compact JSON, booleans become
    "true" or "false" and everything else goes through str(). A value that cannot be
    converted gives an empty cell and a warning.
    """
    if value is None:
        return ''
    if isinstance(value, (dict, list, tuple)):
        return _serialize(value)
    try:
        if isinstance(value, bool):
            return 'true' if value else 'false'
        return str(value)
    except Exception:
        logger.warning(
            "Could not convert export cell of type %s to text", type(value).__name__,
            exc_info=True
        )
        return ''


def _write_rows(rows):
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator='\n')
    writer.writerows(rows)
    text = buffer.getvalue()
    return text[:-1] if text.endswith('\n') else text


def format_cell(value):
    """Renders one value as a quoted CSV cell. Embedded newlines are kept."""
    return _write_rows([[cell_text(value)]])


def _cell_value(column, record, formatters):
    try:
        value = column.value(record)
        formatter = formatters.get(column.key)
        if formatter is not None:
            value = formatter(value)
    except Exception:
        logger.warning("Formatter for export column '%s' failed", column.key, exc_info=True)
        return None
    return value


def build_csv(records, columns=None, formatters=None):
    """
    Builds the CSV text for `records`.

    Args:
        records (list[dict]): The rows to export.
        columns (list[ExportColumn], optional): Defaults to the keys of the first record.
            Later records are not inspected: missing keys give empty cells and extra keys
            are dropped.
        formatters (dict, optional): `{key: fn(value)}` applied to a column's raw value.

    Returns:
        tuple: `(text, row_count)`, where `row_count` excludes the header.

    Raises:
        NoDataError: If `records` is None or empty.
    """
    if not records:
        raise NoDataError()

    columns = columns or derive_columns(records)
    formatters = formatters or {}

    rows = [[cell_text(column.header) for column in columns]]
    for record in records:
        rows.append([cell_text(_cell_value(column, record, formatters)) for column in columns])
    return _write_rows(rows), len(records)


def export_filename(base_filename, today=None):
    """`{base_filename}_{YYYY-MM-DD}.csv`, dated with the current UTC day unless `today` is given."""
    today = today or timezone.now().date()
    return f"{base_filename}_{today.isoformat()}.csv"


def export_to_csv(records, base_filename, columns=None, formatters=None, today=None):
    """
    Builds a complete, named CSV export.

    Raises:
        ValueError: If `base_filename` is empty.
        NoDataError: If there is nothing to export.
    """
    if not base_filename:
        raise ValueError("A base filename is required for an export.")

    content, row_count = build_csv(records, columns=columns, formatters=formatters)
    export = CSVExport(
        filename=export_filename(base_filename, today=today),
        content=content,
        row_count=row_count,
    )
    logger.info("Exported %d rows to %s", row_count, export.filename)
    return export


def csv_response(export):
    """Wraps an export in an attachment response so the browser offers it as a download."""
    response = HttpResponse(export.content, content_type=f"{export.content_type}; charset=utf-8")
    response['Content-Disposition'] = f'attachment; filename="{export.filename}"'
    return response


def yes_no(value):
    return 'Yes' if value else 'No'


def iso_date(value):
    return value.strftime('%Y-%m-%d') if value else ''


# Column set of the review export on the seller and admin dashboards.
REVIEW_EXPORT_COLUMNS = [
    ExportColumn('customer', 'Customer'),
    ExportColumn('product', 'Product'),
    ExportColumn('rating', 'Rating'),
    ExportColumn('title', 'Title'),
    ExportColumn('comment', 'Comment'),
    ExportColumn('status', 'Status'),
    ExportColumn('is_verified_purchase', 'Verified Purchase',
                 lambda record: yes_no(record.get('is_verified_purchase'))),
    ExportColumn('seller_response', 'Seller Response'),
    ExportColumn('created_at', 'Date', lambda record: iso_date(record.get('created_at'))),
]

ORDER_EXPORT_COLUMNS = [
    ExportColumn('id', 'Order ID'),
    ExportColumn('customer', 'Customer'),
    ExportColumn('status', 'Status'),
    ExportColumn('items_count', 'Items Count'),
    ExportColumn('total_amount', 'Total Amount'),
    ExportColumn('placed_at', 'Order Date', lambda record: iso_date(record.get('placed_at'))),
]
