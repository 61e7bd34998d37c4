"""Models package - exports all SQLAlchemy models."""
from saga_inventory.models.supplier import Supplier
from saga_inventory.models.customer import Customer
from saga_inventory.models.seller import Seller
from saga_inventory.models.product import Product
from saga_inventory.models.sale import Sale, DiscountType
from saga_inventory.models.sale_item import SaleItem

__all__ = [
    'Supplier', 'Customer', 'Seller', 'Product',
    'Sale', 'DiscountType', 'SaleItem',
]
