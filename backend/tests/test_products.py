# Overview: Pytest coverage for the product catalog routes.

from jewelcase.models import Product


class TestProductCreate:
    def test_create_product(self, client, db_session):
        response = client.post('/api/products', json={
            'name': 'Solitaire Ring',
            'category': 'Ring',
            'price_cents': 15900,
        })
        assert response.status_code == 201
        body = response.json
        assert body['name'] == 'Solitaire Ring'
        assert body['category'] == 'ring'
        assert body['price_cents'] == 15900
        assert body['status'] == 'ACTIVE'
        assert body['photo'] is None

    def test_missing_required_fields(self, client, db_session):
        response = client.post('/api/products', json={'name': 'No price'})
        assert response.status_code == 400
        assert 'Missing required fields' in response.json['error']

    def test_unknown_category_rejected(self, client, db_session):
        response = client.post('/api/products', json={
            'name': 'Brooch', 'category': 'brooch', 'price_cents': 100,
        })
        assert response.status_code == 400
        assert 'category' in response.json['error']

    def test_negative_price_rejected(self, client, db_session):
        response = client.post('/api/products', json={
            'name': 'Ring', 'category': 'ring', 'price_cents': -1,
        })
        assert response.status_code == 400

    def test_decimal_price_rejected(self, client, db_session):
        response = client.post('/api/products', json={
            'name': 'Ring', 'category': 'ring', 'price_cents': 10.5,
        })
        assert response.status_code == 400

    def test_non_writable_field_rejected(self, client, db_session):
        response = client.post('/api/products', json={
            'name': 'Ring', 'category': 'ring', 'price_cents': 100, 'status': 'REMOVED',
        })
        assert response.status_code == 400
        assert 'Field not allowed' in response.json['error']

    def test_names_are_not_unique(self, client, db_session):
        payload = {'name': 'Twin', 'category': 'ring', 'price_cents': 100}
        assert client.post('/api/products', json=payload).status_code == 201
        assert client.post('/api/products', json=payload).status_code == 201


class TestProductUpdateDelete:
    def test_update_is_full_overwrite(self, client, db_session, make_product):
        product = make_product(photo='https://example.test/p.jpg')

        response = client.put(f"/api/products/{product['id']}", json={
            'name': 'Renamed', 'category': 'necklace', 'price_cents': 500,
        })
        assert response.status_code == 200
        body = response.json
        assert body['name'] == 'Renamed'
        assert body['category'] == 'necklace'
        assert body['price_cents'] == 500
        # photo omitted -> cleared
        assert body['photo'] is None

    def test_update_unknown_product(self, client, db_session):
        response = client.put('/api/products/999', json={
            'name': 'X', 'category': 'ring', 'price_cents': 1,
        })
        assert response.status_code == 404

    def test_delete_is_soft(self, client, db_session, make_product):
        kept = make_product(name='Kept')
        removed = make_product(name='Removed')

        response = client.delete(f"/api/products/{removed['id']}")
        assert response.status_code == 200

        listing = client.get('/api/products').json
        assert [p['id'] for p in listing['items']] == [kept['id']]
        assert listing['count'] == 1

        # Row still exists for historical case items
        row = db_session.get(Product, removed['id'])
        assert row is not None
        assert row.status == 'REMOVED'
        assert client.get(f"/api/products/{removed['id']}").json['status'] == 'REMOVED'

    def test_delete_unknown_product(self, client, db_session):
        assert client.delete('/api/products/999').status_code == 404

    def test_list_is_ordered_by_name(self, client, db_session, make_product):
        make_product(name='Zircon Ring', category='ring')
        make_product(name='Amber Necklace', category='necklace')

        names = [p['name'] for p in client.get('/api/products').json['items']]
        assert names == ['Amber Necklace', 'Zircon Ring']

    def test_editing_price_does_not_touch_existing_cases(self, client, db_session, make_product, make_case):
        product = make_product(price_cents=10000)
        case = make_case(items=[(product['id'], 1, 10000)])

        client.put(f"/api/products/{product['id']}", json={
            'name': product['name'], 'category': product['category'], 'price_cents': 99999,
        })

        fetched = client.get(f"/api/cases/{case['id']}").json
        assert fetched['total_value_cents'] == 10000
        assert fetched['items'][0]['price_at_time_cents'] == 10000
