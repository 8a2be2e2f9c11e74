"""
Tests for the per-region top-1 aggregation.
"""

import pytest

from stormrank.aggregate import RegionalAggregator


class TestRegionalAggregator:

    @pytest.fixture
    def aggregator(self):
        return RegionalAggregator()

    def test_sums_per_event_type(self, aggregator, make_normalized):
        records = [
            make_normalized("TX", "FLOOD", total_cost=3.0),
            make_normalized("TX", "TORNADO", total_cost=6.0),
            make_normalized("TX", "FLOOD", total_cost=4.0),
        ]
        ranking = aggregator.aggregate(records, "total_cost")
        assert ranking.as_dict() == {"TX": ("FLOOD", 7.0)}
        assert ranking.metric == "total_cost"

    def test_one_row_per_region_ranked_by_value(self, aggregator, make_normalized):
        records = [
            make_normalized("AL", "TORNADO", total_cost=10.0),
            make_normalized("OK", "TORNADO", total_cost=50.0),
            make_normalized("OK", "HAIL", total_cost=20.0),
            make_normalized("FL", "HURRICANE", total_cost=50.0),
        ]
        ranking = aggregator.aggregate(records, "total_cost")
        assert [(r.region, r.event_type, r.value) for r in ranking] == [
            ("FL", "HURRICANE", 50.0),
            ("OK", "TORNADO", 50.0),
            ("AL", "TORNADO", 10.0),
        ]

    @pytest.mark.parametrize("order", [("WIND", "HAIL"), ("HAIL", "WIND")])
    def test_tie_break_is_alphabetical(self, aggregator, make_normalized, order):
        records = [make_normalized("TX", et, total_cost=5.0) for et in order]
        for _ in range(3):
            row = aggregator.aggregate(records, "total_cost").get("TX")
            assert row.event_type == "HAIL"
            assert row.value == 5.0

    def test_only_positive_records_count(self, aggregator, make_normalized):
        records = [
            make_normalized("KS", "HAIL", total_health_cost=2.0),
            make_normalized("KS", "HAIL", total_health_cost=-5.0),
            make_normalized("KS", "WIND", total_health_cost=1.5),
        ]
        ranking = aggregator.aggregate(records, "total_health_cost")
        assert ranking.as_dict() == {"KS": ("HAIL", 2.0)}

    def test_region_without_positive_metric_is_absent(self, aggregator, make_normalized):
        records = [
            make_normalized("AL", "TORNADO", total_health_cost=3.0),
            make_normalized("GA", "HAIL", total_health_cost=-1.0),
            make_normalized("GA", "WIND", total_health_cost=0.0),
        ]
        ranking = aggregator.aggregate(records, "total_health_cost")
        assert "GA" not in ranking
        assert ranking.get("GA") is None
        assert len(ranking) == 1
        assert aggregator.missing_regions(records, ranking) == ["GA"]

    def test_none_metric_is_skipped(self, aggregator, make_normalized):
        records = [
            make_normalized("AL", "TORNADO", total_cost=None, total_health_cost=9.0),
            make_normalized("AL", "FLOOD", total_cost=1.0),
        ]
        assert aggregator.aggregate(records, "total_cost").as_dict() == {"AL": ("FLOOD", 1.0)}

    def test_callable_metric(self, aggregator, make_normalized):
        def doubled_cost(r):
            return None if r.total_cost is None else 2 * r.total_cost

        records = [make_normalized("AL", "FLOOD", total_cost=4.0)]
        ranking = aggregator.aggregate(records, doubled_cost)
        assert ranking.metric == "doubled_cost"
        assert ranking.as_dict() == {"AL": ("FLOOD", 8.0)}

    def test_empty_input(self, aggregator):
        ranking = aggregator.aggregate([], "total_cost")
        assert len(ranking) == 0
        assert list(ranking.to_frame().columns) == ["region", "event_type", "total_cost"]

    def test_to_frame(self, aggregator, make_normalized):
        records = [make_normalized("AL", "FLOOD", total_cost=4.0)]
        df = aggregator.aggregate(records, "total_cost").to_frame()
        assert df.to_dict("records") == [{"region": "AL", "event_type": "FLOOD", "total_cost": 4.0}]
