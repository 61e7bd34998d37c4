"""
Unit tests for the CSV codec.
"""

from saga_inventory.services.csv_codec import (
    ColumnMapping, ExportColumn, export_csv, parse_csv, parse_csv_line
)
from saga_inventory.services.validators import parse_decimal, require_non_empty


COLUMNS = [
    ColumnMapping('Name', 'name'),
    ColumnMapping('Price', 'price'),
    ColumnMapping('Qty', 'qty'),
]


class TestParseCsvLine:
    """Tests for the line tokenizer."""

    def test_plain_fields_are_trimmed(self):
        assert parse_csv_line(' a , b ,c ') == ['a', 'b', 'c']

    def test_quoted_comma_stays_in_field(self):
        assert parse_csv_line('"Acme, Inc",100,5') == ['Acme, Inc', '100', '5']

    def test_doubled_quote_is_literal(self):
        assert parse_csv_line('"She said ""hi""",1,1') == ['She said "hi"', '1', '1']

    def test_empty_fields(self):
        assert parse_csv_line('a,,c,') == ['a', '', 'c', '']


class TestParseCsv:
    """Tests for header resolution and row processing."""

    def test_valid_file_returns_one_record_per_row_in_order(self):
        text = 'Name,Price,Qty\nWidget,1.50,3\nGadget,2.00,4\n'
        result = parse_csv(text, COLUMNS)

        assert result.errors == []
        assert result.header_ok is True
        assert result.records == [
            {'Name': 'Widget', 'Price': '1.50', 'Qty': '3'},
            {'Name': 'Gadget', 'Price': '2.00', 'Qty': '4'},
        ]

    def test_crlf_and_blank_lines(self):
        text = 'Name,Price,Qty\r\n\r\nWidget,1,1\r\n   \r\nGadget,2,2\r\n'
        result = parse_csv(text, COLUMNS)

        assert [r['Name'] for r in result.records] == ['Widget', 'Gadget']

    def test_headers_match_case_insensitively_in_any_order(self):
        text = ' qty , PRICE ,name\n3,1.50,Widget\n'
        result = parse_csv(text, COLUMNS)

        assert result.records == [{'Name': 'Widget', 'Price': '1.50', 'Qty': '3'}]

    def test_missing_headers_fail_before_rows(self):
        calls = []
        text = 'Name,Cost\nWidget,1\n'
        result = parse_csv(text, COLUMNS, lambda row: calls.append(row))

        assert result.records == []
        assert result.header_ok is False
        assert result.errors == [
            'Required column "Price" not found in CSV',
            'Required column "Qty" not found in CSV',
        ]
        assert calls == []

    def test_empty_input(self):
        result = parse_csv('\n  \r\n', COLUMNS)

        assert result.records == []
        assert result.errors == ['CSV file is empty']
        assert result.header_ok is False

    def test_row_errors_do_not_abort_batch(self):
        text = 'Name,Price,Qty\nWidget,1.50,3\nBroken,abc,1\nGadget,2,4\n'

        def transform(row):
            return {
                'name': require_non_empty(row['Name'], 'Name'),
                'price': parse_decimal(row['Price'], 'Price'),
            }

        result = parse_csv(text, COLUMNS, transform)

        assert [r['name'] for r in result.records] == ['Widget', 'Gadget']
        assert result.errors == ['Error on row 3: Price must be a valid number']

    def test_short_rows_fill_missing_cells_with_empty_string(self):
        result = parse_csv('Name,Price,Qty\nWidget\n', COLUMNS)

        assert result.records == [{'Name': 'Widget', 'Price': '', 'Qty': ''}]

    def test_undeclared_columns_are_ignored(self):
        result = parse_csv('Name,Notes,Price,Qty\nWidget,"x, y",1,2\n', COLUMNS)

        assert result.records == [{'Name': 'Widget', 'Price': '1', 'Qty': '2'}]


class TestExportCsv:
    """Tests for CSV export."""

    def test_header_uses_labels_and_quotes_when_needed(self):
        columns = [ExportColumn('name', 'Name'), ExportColumn('note', 'Note'), ExportColumn('qty', 'Qty')]
        records = [
            {'name': 'Acme, Inc', 'note': 'She said "hi"', 'qty': 5},
            {'name': 'Plain', 'note': None, 'qty': 0},
        ]

        text = export_csv(records, columns)

        assert text.splitlines() == [
            'Name,Note,Qty',
            '"Acme, Inc","She said ""hi""",5',
            'Plain,,0',
        ]

    def test_exported_text_parses_back(self):
        columns = [ExportColumn('name', 'Name'), ExportColumn('price', 'Price'), ExportColumn('qty', 'Qty')]
        text = export_csv([{'name': 'Acme, Inc', 'price': '100', 'qty': '5'}], columns)

        result = parse_csv(text, COLUMNS)

        assert result.records == [{'Name': 'Acme, Inc', 'Price': '100', 'Qty': '5'}]
