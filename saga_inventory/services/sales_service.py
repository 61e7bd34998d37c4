"""
Sales service with transactional logic.
Records a sale, its price-snapshotted items and the stock decrements as
one unit: either everything commits or nothing does.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from saga_inventory.exceptions import (
    EmptyCartError, InsufficientStockError, InventoryError, NotFoundError,
    ProductNotFoundError, ValidationError
)
from saga_inventory.models import Customer, DiscountType, Product, Sale, SaleItem, Seller
from saga_inventory.services import cache_service
from saga_inventory.services.crud_service import classify_integrity_error
from saga_inventory.services.validators import (
    parse_decimal, parse_whole_number, require_non_empty, require_non_negative
)
from saga_inventory.utils.identifiers import epoch_now, new_id, new_receipt_number
from saga_inventory.utils.number_format import to_money

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')
RECEIPT_ATTEMPTS = 5


def parse_discount_type(value) -> DiscountType:
    if isinstance(value, DiscountType):
        return value
    try:
        return DiscountType(str(value or DiscountType.PERCENTAGE.value).strip().lower())
    except ValueError:
        raise ValidationError(
            'Discount Type must be "percentage" or "fixed"', field='Discount Type'
        )


def compute_totals(subtotal, discount, discount_type) -> Decimal:
    """
    Apply the discount to the subtotal.

    percentage: subtotal - subtotal * discount / 100
    fixed:      subtotal - discount
    The result is rounded to cents and never negative.
    """
    subtotal = to_money(subtotal)
    discount = Decimal(str(discount or 0))
    if parse_discount_type(discount_type) is DiscountType.PERCENTAGE:
        total = subtotal - (subtotal * discount / Decimal('100'))
    else:
        total = subtotal - discount
    return to_money(max(total, ZERO), 'Total')


def _scalar_id(value, field_name: str):
    """Ids arrive from JSON; only strings and numbers can name a record."""
    if isinstance(value, bool) or not isinstance(value, (str, int, type(None))):
        raise ValidationError(f'{field_name} must be an id', field=field_name)
    return value


def _parse_items(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Validate cart lines before touching the store."""
    parsed = []
    for position, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            raise ValidationError(f'Item {position} must be an object')
        label = f'Item {position} product'
        product_id = require_non_empty(_scalar_id(item.get('product_id'), label), label)
        quantity = parse_whole_number(item.get('quantity'), f'Item {position} quantity')
        if quantity <= 0:
            raise ValidationError(f'Item {position} quantity must be greater than 0')

        unit_price = item.get('unit_price')
        if unit_price is not None and str(unit_price).strip() != '':
            label = f'Item {position} unit price'
            unit_price = to_money(require_non_negative(parse_decimal(unit_price, label), label), label)
        else:
            unit_price = None

        parsed.append({'product_id': product_id, 'quantity': quantity, 'unit_price': unit_price})
    return parsed


def _lock_products(session, product_ids: List[str]) -> Dict[str, Product]:
    """Load products FOR UPDATE (SQLite serializes writers instead)."""
    products = session.query(Product).filter(
        Product.id.in_(product_ids)
    ).with_for_update().populate_existing().all()
    return {p.id: p for p in products}


def _unused_receipt_number(session) -> str:
    for _ in range(RECEIPT_ATTEMPTS):
        receipt_number = new_receipt_number()
        exists = session.query(Sale.id).filter(Sale.receipt_number == receipt_number).first()
        if not exists:
            return receipt_number
    raise InventoryError('Could not allocate a receipt number', status_code=503)


def _decrement_stock(session, product: Product, quantity: int) -> None:
    """Conditional decrement; zero rows means another sale took the stock first."""
    result = session.execute(
        update(Product)
        .where(Product.id == product.id, Product.quantity >= quantity)
        .values(quantity=Product.quantity - quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise InsufficientStockError([product.stock_code])


def record_sale(
    session,
    customer_id: str,
    seller_id: str,
    items: List[Dict[str, Any]],
    discount=0,
    discount_type: str = DiscountType.PERCENTAGE.value,
    payment_method: Optional[str] = None,
) -> Sale:
    """
    Record a sale with full transactional processing.

    Args:
        session: SQLAlchemy session
        customer_id: Existing customer id
        seller_id: Existing seller id
        items: [{'product_id', 'quantity', 'unit_price' (optional override)}]
        discount: Percentage (0-100) or fixed amount, see discount_type
        discount_type: 'percentage' or 'fixed'
        payment_method: Free text, e.g. 'cash' or 'card'

    Returns:
        The committed Sale with its items loaded.

    Raises:
        EmptyCartError, ValidationError, NotFoundError,
        ProductNotFoundError, InsufficientStockError
    """
    if items is not None and not isinstance(items, list):
        raise ValidationError('Items must be a list', field='Items')
    if not items:
        raise EmptyCartError()

    lines_in = _parse_items(items)
    kind = parse_discount_type(discount_type)
    discount = require_non_negative(parse_decimal(discount if discount is not None else 0, 'Discount'), 'Discount')
    payment_method = require_non_empty(payment_method, 'Payment Method')
    customer_id = require_non_empty(_scalar_id(customer_id, 'Customer'), 'Customer')
    seller_id = require_non_empty(_scalar_id(seller_id, 'Seller'), 'Seller')

    try:
        # 1. Parties must exist
        if session.get(Customer, customer_id) is None:
            raise NotFoundError(f'Customer {customer_id} not found')
        if session.get(Seller, seller_id) is None:
            raise NotFoundError(f'Seller {seller_id} not found')

        # 2. Lock products
        product_ids = list(dict.fromkeys(line['product_id'] for line in lines_in))
        products = _lock_products(session, product_ids)
        for pid in product_ids:
            if pid not in products:
                raise ProductNotFoundError(pid)

        # 3. Snapshot prices and validate stock for every line
        lines = []
        requested: Dict[str, int] = {}
        for line in lines_in:
            product = products[line['product_id']]
            unit_price = line['unit_price'] if line['unit_price'] is not None else to_money(product.selling_price)
            lines.append({
                'product': product,
                'quantity': line['quantity'],
                'unit_price': unit_price,
                'buying_price': to_money(product.buying_price),
                'subtotal': to_money(unit_price * line['quantity'], f'Item {len(lines) + 1} subtotal'),
            })
            requested[product.id] = requested.get(product.id, 0) + line['quantity']

        short = [products[pid].stock_code for pid, qty in requested.items()
                 if products[pid].quantity - qty < 0]
        if short:
            raise InsufficientStockError(short)

        # 4. Totals
        subtotal = to_money(sum((line['subtotal'] for line in lines), ZERO), 'Subtotal')
        total = compute_totals(subtotal, discount, kind)

        # 5. Create Sale
        sale = Sale(
            id=new_id(),
            receipt_number=_unused_receipt_number(session),
            customer_id=customer_id,
            seller_id=seller_id,
            subtotal=subtotal,
            discount=to_money(discount),
            discount_type=kind.value,
            total=total,
            payment_method=payment_method,
            created_at=epoch_now(),
        )
        session.add(sale)
        session.flush()

        # 6. Create SaleItems
        for position, line in enumerate(lines):
            product = line['product']
            session.add(SaleItem(
                id=new_id(),
                sale_id=sale.id,
                product_id=product.id,
                position=position,
                product_name=product.name,
                stock_code=product.stock_code,
                quantity=line['quantity'],
                unit_price=line['unit_price'],
                buying_price=line['buying_price'],
                subtotal=line['subtotal'],
            ))
        session.flush()

        # 7. Decrement stock
        for pid, qty in requested.items():
            _decrement_stock(session, products[pid], qty)

        session.commit()
        logger.info(
            f"[SALES] Recorded {sale.receipt_number}: {len(lines)} item(s), "
            f"subtotal={subtotal} total={total}"
        )
        cache_service.invalidate('sales', 'products')
        return sale

    except InventoryError:
        session.rollback()
        raise
    except IntegrityError as e:
        session.rollback()
        logger.warning(f"[SALES] Sale rejected by store: {e.orig}")
        raise classify_integrity_error(e, 'Sale')
    except Exception as e:
        session.rollback()
        logger.exception(f"[SALES] Unexpected error recording sale: {e}")
        raise InventoryError('Error recording sale') from e


def list_sales(session) -> List[Sale]:
    return session.query(Sale).order_by(Sale.created_at.desc(), Sale.receipt_number.desc()).all()


def get_sale(session, sale_id: str) -> Sale:
    sale = session.get(Sale, sale_id)
    if sale is None:
        raise NotFoundError(f'Sale {sale_id} not found')
    return sale
