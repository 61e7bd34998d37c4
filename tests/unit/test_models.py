"""
Unit tests for SQLAlchemy models.
"""

import pytest
from decimal import Decimal
from sqlalchemy.exc import IntegrityError

from saga_inventory.models import Product, Supplier


class TestProductModel:
    """Tests for Product model."""

    def test_create_product(self, session, supplier):
        product = Product(
            stock_code='WID-1',
            name='Widget',
            category='Parts',
            buying_price=Decimal('1.25'),
            selling_price=Decimal('2.50'),
            quantity=4,
            supplier_id=supplier.id
        )
        session.add(product)
        session.commit()

        assert len(product.id) == 32
        assert product.created_at > 0
        assert product.supplier.name == 'Acme, Inc'
        assert product.to_dict()['selling_price'] == Decimal('2.50')

    def test_stock_code_unique(self, session, make_product):
        make_product(stock_code='DUP-1')

        with pytest.raises(IntegrityError):
            make_product(stock_code='DUP-1')

    def test_quantity_cannot_go_negative(self, session, make_product):
        with pytest.raises(IntegrityError):
            make_product(quantity=-1)


class TestSupplierModel:
    """Tests for Supplier model."""

    def test_supplier_with_products_cannot_be_deleted(self, session, supplier, make_product):
        make_product(supplier_id=supplier.id)

        session.delete(supplier)
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

        assert session.query(Supplier).count() == 1
