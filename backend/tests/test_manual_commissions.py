# Overview: Pytest coverage for the manual commission ledger.

import pytest
from sqlalchemy import event


def _payload(agent_id, **overrides):
    payload = {
        'agent_id': agent_id,
        'product_name': 'Custom bracelet',
        'price_cents': 30_000,
        'commission_value_cents': 7_500,
    }
    payload.update(overrides)
    return payload


class TestManualCommissions:
    def test_create_and_list(self, client, db_session, make_agent):
        agent = make_agent(name='Carla')

        response = client.post('/api/manual-commissions', json=_payload(agent['id']))
        assert response.status_code == 201
        created = response.json
        assert created['agent_name'] == 'Carla'
        # entered directly, never recalculated
        assert created['commission_value_cents'] == 7_500

        listing = client.get('/api/manual-commissions').json
        assert listing['count'] == 1
        assert listing['items'][0]['id'] == created['id']

    def test_list_newest_first(self, client, db_session, make_agent):
        agent = make_agent()
        first = client.post('/api/manual-commissions', json=_payload(agent['id'], product_name='first')).json
        second = client.post('/api/manual-commissions', json=_payload(agent['id'], product_name='second')).json

        ids = [row['id'] for row in client.get('/api/manual-commissions').json['items']]
        assert ids == [second['id'], first['id']]

    @pytest.mark.parametrize("missing", ['agent_id', 'product_name', 'price_cents', 'commission_value_cents'])
    def test_all_fields_required(self, client, db_session, make_agent, missing):
        agent = make_agent()
        payload = _payload(agent['id'])
        del payload[missing]

        response = client.post('/api/manual-commissions', json=payload)
        assert response.status_code == 400

    def test_negative_amount_rejected(self, client, db_session, make_agent):
        agent = make_agent()
        response = client.post('/api/manual-commissions', json=_payload(agent['id'], price_cents=-10))
        assert response.status_code == 400

    def test_unknown_agent(self, client, db_session):
        response = client.post('/api/manual-commissions', json=_payload(999))
        assert response.status_code == 404

    def test_delete(self, client, db_session, make_agent):
        agent = make_agent()
        created = client.post('/api/manual-commissions', json=_payload(agent['id'])).json

        assert client.delete(f"/api/manual-commissions/{created['id']}").status_code == 200
        assert client.get('/api/manual-commissions').json['count'] == 0
        assert client.delete(f"/api/manual-commissions/{created['id']}").status_code == 404

    def test_list_after_agent_removed(self, client, db_session, make_agent):
        agent = make_agent(name='Dora')
        client.post('/api/manual-commissions', json=_payload(agent['id']))
        client.delete(f"/api/agents/{agent['id']}")

        row = client.get('/api/manual-commissions').json['items'][0]
        assert row['agent_id'] is None
        assert row['agent_name'] is None

    def test_list_loads_agents_in_one_query(self, client, db_session, make_agent):
        for name in ('A', 'B', 'C'):
            agent = make_agent(name=name)
            client.post('/api/manual-commissions', json=_payload(agent['id']))
        db_session.expire_all()

        statements = []

        def _count(conn, cursor, statement, parameters, context, executemany):
            statements.append(statement)

        engine = db_session.get_bind()
        event.listen(engine, "before_cursor_execute", _count)
        try:
            items = client.get('/api/manual-commissions').json['items']
        finally:
            event.remove(engine, "before_cursor_execute", _count)

        assert sorted(row['agent_name'] for row in items) == ['A', 'B', 'C']
        assert len(statements) == 1
