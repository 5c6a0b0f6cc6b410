from decimal import Decimal
from types import SimpleNamespace

from campaign_dashboard.services.metrics import DeliveryMetrics, compute_metrics, cpc, cpm


class TestDeliveryMetrics:
    def test_cpm_and_cpc(self):
        record = SimpleNamespace(impressions=1000, clicks=50, spend=Decimal("25.50"))
        metrics = compute_metrics(record)
        assert metrics == DeliveryMetrics(cpm=Decimal("25.5"), cpc=Decimal("0.51"))

    def test_zero_counters_yield_zero(self):
        record = SimpleNamespace(impressions=0, clicks=0, spend=Decimal("12.00"))
        metrics = compute_metrics(record)
        assert metrics.cpm == 0
        assert metrics.cpc == 0

    def test_zero_spend(self):
        assert cpm(5000, Decimal("0")) == 0
        assert cpc(40, Decimal("0")) == 0

    def test_float_spend_is_converted_exactly(self):
        assert cpc(3, 0.3) == Decimal("0.1")
        assert cpm(2000, 5) == Decimal("2.5")

    def test_none_spend_treated_as_zero(self):
        assert cpc(10, None) == 0

    def test_cpm_scales_per_thousand(self):
        assert cpm(250_000, Decimal("1250.00")) == Decimal("5")
