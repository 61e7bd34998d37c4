"""
Generic CRUD services for suppliers, customers, sellers and products.

Every write commits on its own and rolls back on failure. Integrity
errors from the store are classified into DuplicateError (unique keys)
and ReferentialIntegrityError (foreign keys).
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError

from saga_inventory.exceptions import (
    BusinessLogicError, DuplicateError, InventoryError, NotFoundError,
    ReferentialIntegrityError, ValidationError
)
from saga_inventory.models import Customer, Product, Seller, Supplier
from saga_inventory.services import cache_service
from saga_inventory.services.validators import (
    optional_text, parse_decimal, parse_email, parse_whole_number,
    require_non_empty, require_non_negative
)
from saga_inventory.utils.identifiers import epoch_now, new_id
from saga_inventory.utils.number_format import to_money

logger = logging.getLogger(__name__)

# field -> (label, validator)
FieldRules = Dict[str, Tuple[str, Callable[[Any, str], Any]]]


def classify_integrity_error(error: IntegrityError, label: str) -> InventoryError:
    """Turn a store constraint violation into a typed domain error."""
    message = str(error.orig).lower()
    if 'foreign key' in message:
        return ReferentialIntegrityError(
            f'{label} is referenced by other records and cannot be changed or deleted'
        )
    if 'unique' in message or 'duplicate' in message:
        return DuplicateError(f'{label} already exists')
    return BusinessLogicError(f'{label} violates a store constraint')


class ResourceService:
    """CRUD over one entity type, bound to a session."""

    model = None
    resource = None
    label = 'Record'
    fields: FieldRules = {}
    search_columns: Tuple[str, ...] = ('name',)

    def __init__(self, session):
        self.session = session

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, data: Dict[str, Any], partial: bool = False, record=None) -> Dict[str, Any]:
        """Normalize payload fields; partial validation skips absent keys."""
        if not isinstance(data, dict):
            raise ValidationError('Request body must be a JSON object')

        clean = {}
        for field, (label, validator) in self.fields.items():
            if partial and field not in data:
                continue
            clean[field] = validator(data.get(field), label)

        if partial and not clean:
            raise ValidationError('No updatable fields supplied')

        self.check_rules(clean, record)
        return clean

    def check_rules(self, clean: Dict[str, Any], record=None) -> None:
        """Cross-field and referential checks; override per resource."""

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create(self, data: Dict[str, Any]):
        clean = self.validate(data)
        record = self.model(id=new_id(), created_at=epoch_now(), **clean)
        self.session.add(record)
        self._commit(f'create {self.resource}')
        logger.info(f"[CRUD] Created {self.resource} {record.id}")
        return record

    def list(self, search: Optional[str] = None) -> List[Any]:
        query = self.session.query(self.model)
        if search:
            pattern = f'%{search.lower()}%'
            query = query.filter(or_(*[
                func.lower(getattr(self.model, column)).like(pattern)
                for column in self.search_columns
            ]))
        return query.order_by(self.model.name).all()

    def list_dicts(self, search: Optional[str] = None) -> List[Dict[str, Any]]:
        """List as plain dicts; unfiltered listings go through the cache."""
        def load():
            return [record.to_dict() for record in self.list(search)]

        if search:
            return load()
        try:
            cache = cache_service.get_cache()
        except RuntimeError:
            return load()
        return cache.memoize(self.resource, 'all', load)

    def get(self, record_id: str):
        record = self.session.get(self.model, record_id)
        if record is None:
            raise NotFoundError(f'{self.label} {record_id} not found')
        return record

    def update(self, record_id: str, data: Dict[str, Any]):
        record = self.get(record_id)
        clean = self.validate(data, partial=True, record=record)
        for field, value in clean.items():
            setattr(record, field, value)
        self._commit(f'update {self.resource}')
        logger.info(f"[CRUD] Updated {self.resource} {record_id}: {sorted(clean)}")
        return record

    def delete(self, record_id: str) -> None:
        record = self.get(record_id)
        self.session.delete(record)
        self._commit(f'delete {self.resource}')
        logger.info(f"[CRUD] Deleted {self.resource} {record_id}")

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"[CRUD] {action} rejected by store: {e.orig}")
            raise classify_integrity_error(e, self.label)
        except Exception:
            self.session.rollback()
            raise
        cache_service.invalidate(*self.invalidates())

    def invalidates(self) -> Tuple[str, ...]:
        return (self.resource,)


class SupplierService(ResourceService):
    model = Supplier
    resource = 'suppliers'
    label = 'Supplier'
    fields = {
        'name': ('Name', require_non_empty),
        'phone': ('Phone', require_non_empty),
        'email': ('Email', parse_email),
    }
    search_columns = ('name', 'phone', 'email')


class CustomerService(ResourceService):
    model = Customer
    resource = 'customers'
    label = 'Customer'
    fields = {
        'name': ('Name', require_non_empty),
        'phone': ('Phone', require_non_empty),
        'email': ('Email', parse_email),
    }
    search_columns = ('name', 'phone', 'email')


class SellerService(ResourceService):
    model = Seller
    resource = 'sellers'
    label = 'Seller'
    fields = {
        'name': ('Name', require_non_empty),
        'email': ('Email', parse_email),
    }
    search_columns = ('name', 'email')


def _money(value, label):
    return to_money(require_non_negative(parse_decimal(value, label), label), label)


def _stock_quantity(value, label):
    return require_non_negative(parse_whole_number(value, label), label)


class ProductService(ResourceService):
    model = Product
    resource = 'products'
    label = 'Product'
    fields = {
        'stock_code': ('Stock Code', require_non_empty),
        'name': ('Product Name', require_non_empty),
        'category': ('Category', require_non_empty),
        'buying_price': ('Buying Price', _money),
        'selling_price': ('Selling Price', _money),
        'quantity': ('Quantity', _stock_quantity),
        'supplier_id': ('Supplier ID', optional_text),
    }
    search_columns = ('name', 'stock_code', 'category')

    def check_rules(self, clean, record=None):
        supplier_id = clean.get('supplier_id')
        if supplier_id and self.session.get(Supplier, supplier_id) is None:
            raise ValidationError(f'Supplier {supplier_id} not found', field='Supplier ID')

        stock_code = clean.get('stock_code')
        if stock_code:
            query = self.session.query(Product.id).filter(Product.stock_code == stock_code)
            if record is not None:
                query = query.filter(Product.id != record.id)
            if query.first():
                raise DuplicateError(f'Stock code "{stock_code}" already exists')


SERVICES = {
    'suppliers': SupplierService,
    'customers': CustomerService,
    'sellers': SellerService,
    'products': ProductService,
}


def get_service(resource: str, session) -> ResourceService:
    try:
        return SERVICES[resource](session)
    except KeyError:
        raise NotFoundError(f'Unknown resource "{resource}"')
