# Overview: Pytest coverage for health/version endpoints and app wiring.

from jewelcase import create_app


def test_health(client, db_session):
    response = client.get('/health')
    assert response.status_code == 200
    body = response.json
    assert body['status'] == 'healthy'
    assert body['checks']['database']['status'] == 'healthy'
    assert body['checks']['scanner']['configured'] is False


def test_version(client):
    body = client.get('/version').json
    assert 'api_version' in body
    assert 'python_version' in body


def test_cors_headers_for_known_origin(client, db_session):
    response = client.get('/api/products', headers={'Origin': 'http://localhost:5173'})
    assert response.headers['Access-Control-Allow-Origin'] == 'http://localhost:5173'

    response = client.get('/api/products', headers={'Origin': 'http://evil.test'})
    assert 'Access-Control-Allow-Origin' not in response.headers


def test_config_overrides_applied_before_extensions():
    app = create_app({
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'CASE_RETURN_WINDOW_DAYS': 30,
    })
    assert app.config['CASE_RETURN_WINDOW_DAYS'] == 30
    assert 'sqlalchemy' in app.extensions
