"""
CSV codec for bulk import and export.

Import rules:
- Lines are split on LF or CRLF and blank lines are dropped.
- The first line is the header. Declared columns are matched by
  case-insensitive, trimmed header name; column order does not matter.
- A missing declared header fails the whole parse before any row is read.
- Row errors are collected and the row skipped; the batch continues.

Quoted fields may contain commas and doubled quotes ("") but not line
breaks, since input is split into lines before tokenizing.
"""
import csv
import io
import logging
import re
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional

from saga_inventory.utils.number_format import format_money

logger = logging.getLogger(__name__)

LINE_SPLIT = re.compile(r'\r?\n')

EMPTY_INPUT_MESSAGE = 'CSV file is empty'


class ColumnMapping(NamedTuple):
    csv_header: str
    field: str


class ExportColumn(NamedTuple):
    field: str
    label: str


class ParseResult(NamedTuple):
    records: List[Any]
    errors: List[str]
    # False when the file was empty or a declared header was missing
    header_ok: bool = True


class EmptyInputError(ValueError):
    """Raised by split_lines when no non-blank line is present."""
    def __init__(self):
        super().__init__(EMPTY_INPUT_MESSAGE)


def split_lines(raw_text: str) -> List[str]:
    lines = [line for line in LINE_SPLIT.split(raw_text or '') if line.strip()]
    if not lines:
        raise EmptyInputError()
    return lines


def parse_csv_line(line: str) -> List[str]:
    """Tokenize one CSV line into trimmed field values."""
    fields = []
    current = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < length and line[i + 1] == '"':
                # Escaped quote
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == ',' and not in_quotes:
            fields.append(''.join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1

    fields.append(''.join(current).strip())
    return fields


def _normalize_header(header: str) -> str:
    return header.strip().lower()


def resolve_columns(headers: List[str], column_mapping: Iterable[ColumnMapping]):
    """Map each declared csv_header to its index. Returns (indices, errors)."""
    normalized = [_normalize_header(h) for h in headers]
    indices = {}
    errors = []

    for mapping in column_mapping:
        try:
            indices[mapping.csv_header] = normalized.index(_normalize_header(mapping.csv_header))
        except ValueError:
            errors.append(f'Required column "{mapping.csv_header}" not found in CSV')

    return indices, errors


def parse_csv(
    raw_text: str,
    column_mapping: List[ColumnMapping],
    row_transform: Optional[Callable[[Dict[str, str]], Any]] = None
) -> ParseResult:
    """
    Parse CSV text into records.

    Args:
        raw_text: Whole file contents.
        column_mapping: Declared columns, matched against the header row.
        row_transform: Converts and validates the {csv_header: value} dict
            of one row. Any exception it raises becomes a row error.

    Returns:
        ParseResult with transformed records and error strings, both in
        row order. Header-stage failures return no records.
    """
    try:
        lines = split_lines(raw_text)
    except EmptyInputError as e:
        return ParseResult([], [str(e)], header_ok=False)

    headers = parse_csv_line(lines[0])
    indices, errors = resolve_columns(headers, column_mapping)
    if errors:
        logger.info(f"[IMPORT] Header check failed: {len(errors)} missing column(s)")
        return ParseResult([], errors, header_ok=False)

    records = []
    for line_number, line in enumerate(lines[1:], start=2):
        values = parse_csv_line(line)
        row = {}
        for header, index in indices.items():
            row[header] = values[index] if index < len(values) else ''

        try:
            records.append(row_transform(row) if row_transform else row)
        except Exception as e:
            errors.append(f'Error on row {line_number}: {str(e) or "Invalid data"}')

    return ParseResult(records, errors)


def _export_value(value) -> str:
    if value is None:
        return ''
    if isinstance(value, Decimal):
        return format_money(value)
    return str(value)


def export_csv(records: Iterable[Dict[str, Any]], columns: List[ExportColumn]) -> str:
    """Render records as CSV text with a header of column labels."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow([column.label for column in columns])
    for record in records:
        writer.writerow([_export_value(record.get(column.field)) for column in columns])
    return buffer.getvalue()
