import pytest
from decimal import Decimal

from saga_inventory import create_app
from saga_inventory import database
from saga_inventory.database import get_session
from saga_inventory.models import Customer, Seller, Supplier, Product


@pytest.fixture(scope='function')
def app():
    """Create application instance with a fresh in-memory store."""
    app = create_app('config.TestConfig')
    yield app
    database.db_session.remove()
    database.drop_schema()
    database.engine.dispose()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Create database session for testing."""
    session = get_session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(scope='function')
def supplier(session):
    supplier = Supplier(name='Acme, Inc', phone='555-0100', email='sales@acme.test')
    session.add(supplier)
    session.commit()
    return supplier


@pytest.fixture(scope='function')
def customer(session):
    customer = Customer(name='Jane Doe', phone='555-0111', email='jane@example.com')
    session.add(customer)
    session.commit()
    return customer


@pytest.fixture(scope='function')
def seller(session):
    seller = Seller(name='Sam Seller', email='sam@shop.test')
    session.add(seller)
    session.commit()
    return seller


@pytest.fixture(scope='function')
def make_product(session):
    """Factory for products with sensible defaults."""
    counter = {'n': 0}

    def _make(quantity=10, selling_price='100.00', buying_price='60.00', **overrides):
        counter['n'] += 1
        fields = {
            'stock_code': f'SKU-{counter["n"]:03d}',
            'name': f'Product {counter["n"]}',
            'category': 'General',
            'buying_price': Decimal(buying_price),
            'selling_price': Decimal(selling_price),
            'quantity': quantity,
        }
        fields.update(overrides)
        product = Product(**fields)
        session.add(product)
        session.commit()
        return product

    return _make
