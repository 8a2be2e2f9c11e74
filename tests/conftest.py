import pytest

from stormrank.models import NormalizedRecord, RawEventRecord


@pytest.fixture
def make_record():
    """Factory for RawEventRecord with zero/blank defaults."""
    def _make(region="AL", event_type="TORNADO", fatalities=0, injuries=0,
              prop_dmg=0, prop_dmg_exp="", crop_dmg=0, crop_dmg_exp=""):
        return RawEventRecord(
            region=region,
            event_type=event_type,
            fatalities=fatalities,
            injuries=injuries,
            prop_dmg=prop_dmg,
            prop_dmg_exp=prop_dmg_exp,
            crop_dmg=crop_dmg,
            crop_dmg_exp=crop_dmg_exp,
        )
    return _make


@pytest.fixture
def make_normalized():
    def _make(region, event_type, total_cost=None, total_health_cost=0.0):
        return NormalizedRecord(region, event_type, total_cost, total_health_cost)
    return _make


@pytest.fixture
def scenario_records(make_record):
    """Two Alabama events: a deadly, costly tornado and a harmless flood."""
    return [
        make_record("AL", "TORNADO", fatalities=5, injuries=50, prop_dmg=10, prop_dmg_exp="M"),
        make_record("AL", "FLOOD", prop_dmg=1, prop_dmg_exp="K"),
    ]
