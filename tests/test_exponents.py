"""
Tests for damage exponent resolution.
"""

import pytest

from stormrank.config import PipelineConfig
from stormrank.errors import InvalidExponent
from stormrank.exponents import ExponentResolver, build_exponent_table, normalize_code


class TestExponentResolver:
    """Test cases for ExponentResolver."""

    @pytest.fixture
    def resolver(self):
        return ExponentResolver()

    @pytest.mark.parametrize("code,expected", [
        ("", 1),
        ("0", 1),
        ("H", 100),
        ("K", 1_000),
        ("M", 1_000_000),
        ("B", 1_000_000_000),
    ])
    def test_known_codes(self, resolver, code, expected):
        assert resolver.multiplier(code) == expected

    def test_case_and_whitespace_insensitive(self, resolver):
        assert resolver.multiplier("k") == 1_000
        assert resolver.multiplier(" m ") == 1_000_000
        assert resolver.multiplier("h") == 100
        assert resolver.multiplier("   ") == 1
        assert resolver.multiplier(None) == 1

    @pytest.mark.parametrize("code", ["?", "-", "+", "1", "2", "5", "8", "X"])
    def test_invalid_codes_raise(self, resolver, code):
        with pytest.raises(InvalidExponent) as exc:
            resolver.multiplier(code)
        assert exc.value.code == code

    def test_multiplier_does_not_count(self, resolver):
        resolver.multiplier("K")
        with pytest.raises(InvalidExponent):
            resolver.multiplier("?")
        assert resolver.checked == 0
        assert resolver.rejected == 0

    def test_resolve_counts_records(self, resolver):
        assert resolver.resolve("K", "") == (1_000, 1)
        with pytest.raises(InvalidExponent):
            resolver.resolve("M", "?")
        with pytest.raises(InvalidExponent):
            resolver.resolve("-", "+")
        resolver.resolve("B", "0")

        assert resolver.checked == 4
        assert resolver.rejected == 2
        assert resolver.rejected_fraction == pytest.approx(0.5)
        assert resolver.rejected_codes == {"?": 1, "-": 1, "+": 1}

    def test_rejected_fraction_without_records(self, resolver):
        assert resolver.rejected_fraction == 0.0
        assert not resolver.exceeds(0.01)

    def test_exceeds(self, resolver):
        resolver.resolve("K", "K")
        with pytest.raises(InvalidExponent):
            resolver.resolve("?", "K")
        assert resolver.exceeds(0.01)
        assert not resolver.exceeds(0.5)
        assert not resolver.exceeds(None)


class TestExponentTable:
    def test_normalize_code(self):
        assert normalize_code(" k ") == "K"
        assert normalize_code("  ") == ""
        assert normalize_code(float("nan")) == ""
        assert normalize_code(None) == ""

    def test_digit_codes_are_powers_of_ten(self):
        table = build_exponent_table(["K", "3", "7"])
        assert table == {"K": 1e3, "3": 1e3, "7": 1e7}

    def test_unknown_code_rejected(self):
        with pytest.raises(ValueError):
            build_exponent_table(["?"])

    def test_config_default_codes(self):
        cfg = PipelineConfig()
        assert cfg.valid_exponent_codes == frozenset({"", "0", "H", "K", "M", "B"})
        assert cfg.exponent_table()["B"] == 1e9

    def test_config_normalizes_codes(self):
        cfg = PipelineConfig(valid_exponent_codes=frozenset({"k", " m", "2"}))
        assert cfg.valid_exponent_codes == frozenset({"K", "M", "2"})
        assert cfg.exponent_table() == {"2": 100.0, "K": 1e3, "M": 1e6}

    def test_config_rejects_unknown_code(self):
        with pytest.raises(ValueError):
            PipelineConfig(valid_exponent_codes=frozenset({"K", "+"}))

    @pytest.mark.parametrize("kwargs", [
        {"variance_threshold": 1.5},
        {"variance_threshold": -0.1},
        {"max_invalid_fraction": 2.0},
        {"eigen_tolerance": -1.0},
    ])
    def test_config_validation(self, kwargs):
        with pytest.raises(ValueError):
            PipelineConfig(**kwargs)

    def test_whitespace_code_counts_as_blank(self):
        resolver = ExponentResolver()
        assert resolver.resolve(" ", "\t") == (1.0, 1.0)
        assert resolver.rejected == 0
