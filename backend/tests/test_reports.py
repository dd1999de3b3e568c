# Overview: Pytest coverage for dashboard stats and consignment reports.

"""
Reporting Tests

Every number is recomputed from the raw tables on each call, so these tests
mutate state between reads and expect fresh values.
"""


def _set_status(client, case, status, agent_id=None):
    response = client.put(f"/api/cases/{case['id']}", json={
        'name': case['name'], 'status': status, 'agent_id': agent_id,
    })
    assert response.status_code == 200
    return response.json


class TestDashboardStats:
    def test_empty(self, client, db_session):
        stats = client.get('/api/stats').json
        assert stats == {
            'vgv_cents': 0,
            'active_cases': 0,
            'premium_cases': 0,
            'total_agents': 0,
            'sales_by_agent': [],
        }

    def test_vgv_counts_non_idle_cases_and_manual_prices(
        self, client, db_session, make_product, make_agent, make_case
    ):
        product = make_product()
        agent = make_agent(name='Ana')
        make_case(name='Field', items=[(product['id'], 1, 600_000)], agent_id=agent['id'])
        make_case(name='Shelf', items=[(product['id'], 1, 999_000)])  # IDLE, excluded
        client.post('/api/manual-commissions', json={
            'agent_id': agent['id'], 'product_name': 'Loose',
            'price_cents': 20_000, 'commission_value_cents': 6_000,
        })

        stats = client.get('/api/stats').json
        assert stats['vgv_cents'] == 620_000
        assert stats['active_cases'] == 1
        # premium counts every status
        assert stats['premium_cases'] == 1
        assert stats['total_agents'] == 1
        assert stats['sales_by_agent'] == [
            {'agent_id': agent['id'], 'name': 'Ana', 'value_cents': 620_000},
        ]

    def test_restock_cases_still_count_toward_vgv(
        self, client, db_session, make_product, make_agent, make_case
    ):
        product = make_product()
        agent = make_agent()
        case = make_case(items=[(product['id'], 1, 5_000)], agent_id=agent['id'])
        _set_status(client, case, 'RESTOCK_NEEDED', agent['id'])

        stats = client.get('/api/stats').json
        assert stats['vgv_cents'] == 5_000
        assert stats['active_cases'] == 0

    def test_sales_by_agent_ranked(self, client, db_session, make_product, make_agent, make_case):
        product = make_product()
        low = make_agent(name='Low')
        high = make_agent(name='High')
        make_case(name='L', items=[(product['id'], 1, 1_000)], agent_id=low['id'])
        make_case(name='H', items=[(product['id'], 1, 9_000)], agent_id=high['id'])

        ranking = client.get('/api/stats').json['sales_by_agent']
        assert [r['name'] for r in ranking] == ['High', 'Low']

    def test_stats_are_fresh(self, client, db_session, make_product, make_agent, make_case):
        product = make_product()
        agent = make_agent()
        case = make_case(items=[(product['id'], 1, 1_000)], agent_id=agent['id'])
        assert client.get('/api/stats').json['vgv_cents'] == 1_000

        client.delete(f"/api/cases/{case['id']}")
        assert client.get('/api/stats').json['vgv_cents'] == 0


class TestCommissionedItems:
    def test_report(self, client, db_session, make_product, make_agent, make_case):
        ring = make_product(name='Ring', category='ring')
        chain = make_product(name='Chain', category='necklace')
        agent = make_agent(name='Ana')
        make_case(name='Field', items=[(ring['id'], 2, 1_000), (chain['id'], 1, 5_000)], agent_id=agent['id'])
        make_case(name='Other', items=[(ring['id'], 1, 1_000)], agent_id=agent['id'])
        make_case(name='Idle', items=[(chain['id'], 9, 5_000)])
        client.post('/api/manual-commissions', json={
            'agent_id': agent['id'], 'product_name': 'Loose',
            'price_cents': 10_000, 'commission_value_cents': 3_000,
        })

        report = client.get('/api/reports/commissioned-items').json

        assert len(report['items']) == 3
        assert {i['case_name'] for i in report['items']} == {'Field', 'Other'}
        assert all(i['agent_name'] == 'Ana' for i in report['items'])
        assert report['total_in_field_cents'] == 8_000
        assert report['total_manual_commission_cents'] == 3_000

        summary = {row['product_id']: row for row in report['product_summary']}
        assert summary[ring['id']]['total_qty'] == 3
        assert summary[ring['id']]['total_value_cents'] == 3_000
        assert summary[chain['id']]['total_qty'] == 1
        # highest value first
        assert report['product_summary'][0]['product_id'] == chain['id']


class TestFieldStock:
    def test_field_stock(self, client, db_session, make_product, make_agent, make_case):
        ring = make_product(name='Ring', category='ring')
        chain = make_product(name='Chain', category='necklace')
        agent = make_agent()
        make_case(name='A', items=[(ring['id'], 2, 100)], agent_id=agent['id'])
        make_case(name='B', items=[(ring['id'], 3, 100)], agent_id=agent['id'])
        make_case(name='Idle', items=[(chain['id'], 5, 100)])

        rows = client.get('/api/reports/field-stock').json['rows']
        assert rows == [{'product_id': ring['id'], 'in_field_quantity': 5}]


class TestStatsCommand:
    def test_cli_stats(self, app, db_session, make_product, make_agent, make_case):
        product = make_product()
        agent = make_agent(name='Ana')
        make_case(items=[(product['id'], 1, 123_456)], agent_id=agent['id'])

        result = app.test_cli_runner().invoke(args=["reports", "stats"])
        assert result.exit_code == 0
        assert "R$ 1.234,56" in result.output
        assert "Ana" in result.output
