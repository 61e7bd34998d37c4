"""
Bulk CSV import and export per resource.

Import is best-effort and non-atomic: rows are created one at a time, in
file order, and each create commits or fails on its own. A header problem
aborts the whole file before anything is written.
"""
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

from saga_inventory.exceptions import InventoryError, NotFoundError
from saga_inventory.services.csv_codec import ColumnMapping, ExportColumn, parse_csv
from saga_inventory.services.validators import (
    optional_text, parse_decimal, parse_email, parse_whole_number, require_non_empty
)

logger = logging.getLogger(__name__)


@dataclass
class ImportSpec:
    columns: List[ColumnMapping]
    transform: Callable[[Dict[str, str]], Dict[str, Any]]


@dataclass
class ImportResult:
    imported: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)
    aborted: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'imported': self.imported,
            'failed': self.failed,
            'errors': self.errors,
            'aborted': self.aborted,
        }


def _product_row(row: Dict[str, str]) -> Dict[str, Any]:
    return {
        'stock_code': require_non_empty(row['Stock Code'], 'Stock Code'),
        'name': require_non_empty(row['Product Name'], 'Product Name'),
        'category': require_non_empty(row['Category'], 'Category'),
        'buying_price': parse_decimal(row['Buying Price'], 'Buying Price'),
        'selling_price': parse_decimal(row['Selling Price'], 'Selling Price'),
        'quantity': parse_whole_number(row['Quantity'], 'Quantity'),
        'supplier_id': optional_text(row.get('Supplier ID')),
    }


def _contact_row(row: Dict[str, str]) -> Dict[str, Any]:
    return {
        'name': require_non_empty(row['Name'], 'Name'),
        'phone': require_non_empty(row['Phone'], 'Phone'),
        'email': parse_email(row['Email'], 'Email'),
    }


def _seller_row(row: Dict[str, str]) -> Dict[str, Any]:
    return {
        'name': require_non_empty(row['Name'], 'Name'),
        'email': parse_email(row['Email'], 'Email'),
    }


PRODUCT_COLUMNS = [
    ColumnMapping('Stock Code', 'stock_code'),
    ColumnMapping('Product Name', 'name'),
    ColumnMapping('Category', 'category'),
    ColumnMapping('Buying Price', 'buying_price'),
    ColumnMapping('Selling Price', 'selling_price'),
    ColumnMapping('Quantity', 'quantity'),
    ColumnMapping('Supplier ID', 'supplier_id'),
]

CONTACT_COLUMNS = [
    ColumnMapping('Name', 'name'),
    ColumnMapping('Phone', 'phone'),
    ColumnMapping('Email', 'email'),
]

SELLER_COLUMNS = [
    ColumnMapping('Name', 'name'),
    ColumnMapping('Email', 'email'),
]

IMPORT_SPECS = {
    'products': ImportSpec(PRODUCT_COLUMNS, _product_row),
    'customers': ImportSpec(CONTACT_COLUMNS, _contact_row),
    'suppliers': ImportSpec(CONTACT_COLUMNS, _contact_row),
    'sellers': ImportSpec(SELLER_COLUMNS, _seller_row),
}


def _export_columns(columns: List[ColumnMapping]) -> List[ExportColumn]:
    return [ExportColumn(c.field, c.csv_header) for c in columns]


# Same labels as the import headers so an export re-imports cleanly
EXPORT_COLUMNS = {resource: _export_columns(spec.columns) for resource, spec in IMPORT_SPECS.items()}
EXPORT_COLUMNS['sales'] = [
    ExportColumn('receipt_number', 'Receipt Number'),
    ExportColumn('customer_id', 'Customer ID'),
    ExportColumn('seller_id', 'Seller ID'),
    ExportColumn('subtotal', 'Subtotal'),
    ExportColumn('discount', 'Discount'),
    ExportColumn('discount_type', 'Discount Type'),
    ExportColumn('total', 'Total'),
    ExportColumn('payment_method', 'Payment Method'),
    ExportColumn('created_at', 'Created At'),
]


def get_import_spec(resource: str) -> ImportSpec:
    try:
        return IMPORT_SPECS[resource]
    except KeyError:
        raise NotFoundError(f'Import is not supported for "{resource}"')


def import_csv(
    raw_text: str,
    spec: ImportSpec,
    create_fn: Callable[[Dict[str, Any]], Any],
    error_preview: int = 3
) -> ImportResult:
    """
    Parse the file and create each valid row sequentially.

    Args:
        raw_text: CSV file contents.
        spec: Column mapping and row transform for the resource.
        create_fn: Persists one record; raising marks that row as failed.
        error_preview: How many header errors to report on abort.

    Returns:
        ImportResult with independent success and failure tallies.
    """
    line_numbers = itertools.count(2)

    def numbered(row):
        line_number = next(line_numbers)
        return line_number, spec.transform(row)

    parsed = parse_csv(raw_text, spec.columns, numbered)
    result = ImportResult()

    if not parsed.header_ok:
        result.aborted = True
        result.errors = parsed.errors[:error_preview]
        logger.info(f"[IMPORT] Aborted: {'; '.join(result.errors)}")
        return result

    result.errors.extend(parsed.errors)
    result.failed = len(parsed.errors)

    for line_number, record in parsed.records:
        try:
            create_fn(record)
            result.imported += 1
        except InventoryError as e:
            result.failed += 1
            result.errors.append(f'Failed to import row {line_number}: {e.message}')
        except Exception as e:
            result.failed += 1
            logger.warning(f"[IMPORT] Row {line_number} failed unexpectedly: {e}")
            result.errors.append(f'Failed to import row {line_number}: unexpected error')

    logger.info(f"[IMPORT] Complete: {result.imported} imported, {result.failed} failed")
    return result
