"""
Integration tests for the JSON CRUD and sales endpoints.
"""

import pytest

PRODUCT_PAYLOAD = {
    'stock_code': 'SKU-100',
    'name': 'Hammer',
    'category': 'Tools',
    'buying_price': '8.00',
    'selling_price': '12.50',
    'quantity': 10,
}


def _create(client, resource, payload):
    response = client.post(f'/api/{resource}', json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


@pytest.fixture
def parties(client):
    customer = _create(client, 'customers', {'name': 'Jane', 'phone': '555', 'email': 'jane@example.com'})
    seller = _create(client, 'sellers', {'name': 'Sam', 'email': 'sam@shop.test'})
    return customer['id'], seller['id']


class TestCrud:

    def test_create_assigns_id_and_timestamp(self, client):
        body = _create(client, 'suppliers', {'name': 'Acme', 'phone': '555', 'email': 'a@acme.test'})

        assert len(body['id']) == 32
        assert isinstance(body['created_at'], int)
        assert body['name'] == 'Acme'

    def test_create_validation_error(self, client):
        response = client.post('/api/customers', json={'name': 'Jane', 'phone': '555', 'email': 'nope'})

        assert response.status_code == 400
        assert response.get_json() == {
            'status': 'error',
            'message': 'Email must be a valid email address',
            'field': 'Email',
        }

    def test_list_get_update(self, client):
        created = _create(client, 'products', PRODUCT_PAYLOAD)

        listing = client.get('/api/products').get_json()
        assert [p['stock_code'] for p in listing] == ['SKU-100']

        response = client.patch(f"/api/products/{created['id']}", json={'selling_price': '14', 'quantity': 7})
        assert response.status_code == 200
        updated = response.get_json()
        assert updated['selling_price'] == '14.00'
        assert updated['quantity'] == 7
        assert updated['name'] == 'Hammer'

        fetched = client.get(f"/api/products/{created['id']}").get_json()
        assert fetched['quantity'] == 7

    def test_search(self, client):
        _create(client, 'sellers', {'name': 'Alice', 'email': 'alice@shop.test'})
        _create(client, 'sellers', {'name': 'Bob', 'email': 'bob@shop.test'})

        names = [s['name'] for s in client.get('/api/sellers?q=ali').get_json()]
        assert names == ['Alice']

    def test_get_missing_record(self, client):
        response = client.get('/api/customers/does-not-exist')

        assert response.status_code == 404
        assert response.get_json()['status'] == 'error'

    def test_duplicate_stock_code(self, client):
        _create(client, 'products', PRODUCT_PAYLOAD)

        response = client.post('/api/products', json=PRODUCT_PAYLOAD)
        assert response.status_code == 409

    def test_negative_quantity_rejected(self, client):
        response = client.post('/api/products', json={**PRODUCT_PAYLOAD, 'quantity': -1})
        assert response.status_code == 400

    @pytest.mark.parametrize('field, value, message', [
        ('buying_price', '1e30', 'Buying Price is out of range'),
        ('selling_price', '100000000', 'Selling Price is out of range'),
        ('quantity', 10 ** 20, 'Quantity is out of range'),
    ])
    def test_out_of_range_numbers_rejected(self, client, field, value, message):
        response = client.post('/api/products', json={**PRODUCT_PAYLOAD, field: value})

        assert response.status_code == 400
        assert response.get_json()['message'] == message
        assert client.get('/api/products').get_json() == []

    def test_unknown_supplier_rejected(self, client):
        response = client.post('/api/products', json={**PRODUCT_PAYLOAD, 'supplier_id': 'ghost'})
        assert response.status_code == 400

    def test_delete_unreferenced_record(self, client):
        created = _create(client, 'sellers', {'name': 'Temp', 'email': 'temp@shop.test'})

        assert client.delete(f"/api/sellers/{created['id']}").status_code == 204
        assert client.get(f"/api/sellers/{created['id']}").status_code == 404

    def test_delete_supplier_with_products_fails(self, client):
        supplier = _create(client, 'suppliers', {'name': 'Acme', 'phone': '555', 'email': 'a@acme.test'})
        _create(client, 'products', {**PRODUCT_PAYLOAD, 'supplier_id': supplier['id']})

        response = client.delete(f"/api/suppliers/{supplier['id']}")

        assert response.status_code == 409
        assert client.get(f"/api/suppliers/{supplier['id']}").status_code == 200


class TestSalesApi:

    def test_record_and_fetch_sale(self, client, parties):
        customer_id, seller_id = parties
        product = _create(client, 'products', PRODUCT_PAYLOAD)

        response = client.post('/api/sales', json={
            'customer_id': customer_id,
            'seller_id': seller_id,
            'items': [{'product_id': product['id'], 'quantity': 4}],
            'discount': 10,
            'discount_type': 'percentage',
            'payment_method': 'cash',
        })

        assert response.status_code == 201
        sale = response.get_json()
        assert sale['subtotal'] == '50.00'
        assert sale['total'] == '45.00'
        assert sale['items'][0]['stock_code'] == 'SKU-100'

        assert client.get(f"/api/products/{product['id']}").get_json()['quantity'] == 6
        assert client.get(f"/api/sales/{sale['id']}").get_json()['receipt_number'] == sale['receipt_number']
        assert len(client.get('/api/sales').get_json()) == 1

    def test_insufficient_stock_returns_conflict(self, client, parties):
        customer_id, seller_id = parties
        product = _create(client, 'products', {**PRODUCT_PAYLOAD, 'quantity': 3})

        response = client.post('/api/sales', json={
            'customer_id': customer_id,
            'seller_id': seller_id,
            'items': [{'product_id': product['id'], 'quantity': 5}],
            'payment_method': 'cash',
        })

        assert response.status_code == 409
        assert response.get_json()['stock_codes'] == ['SKU-100']
        assert client.get(f"/api/products/{product['id']}").get_json()['quantity'] == 3

    def test_empty_cart_returns_bad_request(self, client, parties):
        customer_id, seller_id = parties

        response = client.post('/api/sales', json={
            'customer_id': customer_id, 'seller_id': seller_id, 'items': [], 'payment_method': 'cash'
        })

        assert response.status_code == 400

    def test_product_in_sale_cannot_be_deleted(self, client, parties):
        customer_id, seller_id = parties
        product = _create(client, 'products', PRODUCT_PAYLOAD)
        client.post('/api/sales', json={
            'customer_id': customer_id,
            'seller_id': seller_id,
            'items': [{'product_id': product['id'], 'quantity': 1}],
            'payment_method': 'cash',
        })

        response = client.delete(f"/api/products/{product['id']}")

        assert response.status_code == 409
        assert client.get(f"/api/products/{product['id']}").status_code == 200

    def test_malformed_sale_payloads_return_bad_request(self, client, parties):
        customer_id, seller_id = parties
        product = _create(client, 'products', PRODUCT_PAYLOAD)
        line = {'product_id': product['id'], 'quantity': 1}

        not_a_list = client.post('/api/sales', json={
            'customer_id': customer_id, 'seller_id': seller_id, 'items': 5, 'payment_method': 'cash'
        })
        object_id = client.post('/api/sales', json={
            'customer_id': {'id': customer_id}, 'seller_id': seller_id,
            'items': [line], 'payment_method': 'cash'
        })

        assert not_a_list.status_code == 400
        assert not_a_list.get_json()['message'] == 'Items must be a list'
        assert object_id.status_code == 400
        assert client.get(f"/api/products/{product['id']}").get_json()['quantity'] == 10

    def test_sales_have_no_update_or_delete(self, client):
        assert client.delete('/api/sales/anything').status_code == 405
        assert client.patch('/api/sales/anything', json={}).status_code == 405


def test_health(client):
    response = client.get('/health')

    assert response.status_code == 200
    assert response.get_json()['database'] == 'connected'
