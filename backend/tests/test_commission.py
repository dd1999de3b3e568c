import unittest

import pytest

from jewelcase.services.commission_service import (
    BASE_RATE_BPS,
    HIGH_TIER_RATE_BPS,
    calculate_commission,
    commission_rate_bps,
)
from jewelcase.services.case_service import is_premium
from jewelcase.validation import ValidationError


class CommissionCalculatorTests(unittest.TestCase):
    def test_rate_boundary_is_inclusive(self):
        self.assertEqual(commission_rate_bps(499_999), BASE_RATE_BPS)
        self.assertEqual(commission_rate_bps(500_000), HIGH_TIER_RATE_BPS)
        self.assertEqual(commission_rate_bps(500_001), HIGH_TIER_RATE_BPS)

    def test_payout_matches_rate(self):
        quote = calculate_commission(600_000)
        self.assertEqual(quote.rate_bps, 4000)
        self.assertEqual(quote.payout_cents, 240_000)
        self.assertEqual(quote.rate_percent, 40.0)

        quote = calculate_commission(20_000)
        self.assertEqual(quote.rate_bps, 3000)
        self.assertEqual(quote.payout_cents, 6_000)

    def test_payout_rounds_half_up(self):
        # 30% of 0.05 is 0.015 -> 0.02
        self.assertEqual(calculate_commission(5).payout_cents, 2)
        # 30% of 0.01 is 0.003 -> 0.00
        self.assertEqual(calculate_commission(1).payout_cents, 0)

    def test_zero_total(self):
        quote = calculate_commission(0)
        self.assertEqual(quote.payout_cents, 0)
        self.assertEqual(quote.rate_bps, BASE_RATE_BPS)

    def test_negative_total_rejected(self):
        with self.assertRaises(ValidationError):
            calculate_commission(-1)

    def test_to_dict(self):
        self.assertEqual(
            calculate_commission(500_000).to_dict(),
            {"total_cents": 500_000, "rate_bps": 4000, "rate_percent": 40.0, "payout_cents": 200_000},
        )


class PremiumThresholdTests(unittest.TestCase):
    def test_threshold_is_strict(self):
        self.assertFalse(is_premium(800_000))
        self.assertTrue(is_premium(800_001))


class TestQuoteEndpoint:
    def test_quote(self, client, db_session):
        response = client.get('/api/commissions/quote?total_cents=500000')
        assert response.status_code == 200
        assert response.json["rate_bps"] == 4000
        assert response.json["payout_cents"] == 200_000

    @pytest.mark.parametrize("raw", ["", "abc", "-5", "12.5"])
    def test_quote_rejects_non_integer(self, client, db_session, raw):
        response = client.get(f'/api/commissions/quote?total_cents={raw}')
        assert response.status_code == 400


class TestQuoteCommand:
    def test_cli_quote(self, app):
        runner = app.test_cli_runner()
        result = runner.invoke(args=["commissions", "quote", "650000"])
        assert result.exit_code == 0
        assert "40%" in result.output
        assert "R$ 2.600,00" in result.output
