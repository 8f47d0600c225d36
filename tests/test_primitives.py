"""Tests for unit scalars, logistic squashing and identifiers."""

import math
import sys
import os

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from selnet_errors import InvalidIdentifierError, OutOfRangeError, SelNetError
from selnet_primitives import (
    Identifier,
    SegmentedIdentifier,
    UnitScalar,
    check_unit,
    logistic,
)


class TestUnitScalar:
    """Values in [0, 1] are stored exactly; anything else is rejected."""

    @pytest.mark.parametrize("value", [0.0, 0.25, 0.5, 0.999999, 1.0])
    def test_valid_values_stored_exactly(self, value):
        assert float(UnitScalar(value)) == value

    @pytest.mark.parametrize("value", [-0.000001, 1.000001, -5.0, 42.0, math.inf, math.nan])
    def test_invalid_values_raise(self, value):
        with pytest.raises(OutOfRangeError):
            UnitScalar(value)

    def test_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            UnitScalar(2.0)
        assert issubclass(OutOfRangeError, SelNetError)

    def test_clamp(self):
        assert UnitScalar.clamp(-0.3) == 0.0
        assert UnitScalar.clamp(1.7) == 1.0
        assert UnitScalar.clamp(0.4) == pytest.approx(0.4)
        assert isinstance(UnitScalar.clamp(3.0), UnitScalar)

    def test_clamp_nan_raises(self):
        with pytest.raises(OutOfRangeError):
            UnitScalar.clamp(math.nan)

    def test_constants(self):
        assert UnitScalar.MINIMUM == 0.0
        assert UnitScalar.MEAN == 0.5
        assert UnitScalar.MAXIMUM == 1.0

    def test_is_within_limits(self):
        assert UnitScalar.is_within_limits(0.0)
        assert UnitScalar.is_within_limits(1.0)
        assert not UnitScalar.is_within_limits(1.01)
        assert not UnitScalar.is_within_limits(math.nan)

    def test_is_approximately(self):
        assert UnitScalar.is_approximately(0.5, 0.50004)
        assert not UnitScalar.is_approximately(0.5, 0.501)
        assert UnitScalar.is_approximately(0.5, 0.51, proportion=0.05)

    def test_arithmetic_yields_plain_float(self):
        total = UnitScalar(0.7) + UnitScalar(0.7)
        assert total == pytest.approx(1.4)
        assert not isinstance(total, UnitScalar)

    def test_is_zero(self):
        assert UnitScalar(0.0).is_zero
        assert not UnitScalar(0.1).is_zero

    def test_check_unit_custom_error(self):
        class Custom(OutOfRangeError):
            pass

        assert check_unit(0.3) == 0.3
        with pytest.raises(Custom):
            check_unit(1.5, Custom, "weight")


class TestLogistic:
    """L(x) = 1 / (1 + exp((-x + 0.5) / 0.1)) reference values."""

    REFERENCE = [
        (0.0, 0.00669285), (0.05, 0.01098694), (0.1, 0.01798621),
        (0.15, 0.02931223), (0.2, 0.04742587), (0.25, 0.07585818),
        (0.3, 0.11920292), (0.35, 0.18242552), (0.4, 0.26894142),
        (0.45, 0.37754067), (0.5, 0.5), (0.55, 0.62245933),
        (0.6, 0.73105858), (0.65, 0.81757448), (0.7, 0.88079708),
        (0.75, 0.92414182), (0.8, 0.95257413), (0.85, 0.97068777),
        (0.9, 0.98201379), (0.95, 0.98901306), (1.0, 0.99330715),
    ]

    @pytest.mark.parametrize("x,expected", REFERENCE)
    def test_reference_table(self, x, expected):
        assert logistic(x) == pytest.approx(expected, abs=1e-8)

    def test_extreme_inputs_do_not_overflow(self):
        assert logistic(-1e6) == pytest.approx(0.0, abs=1e-300)
        assert logistic(1e6) == pytest.approx(1.0)

    def test_custom_parameters(self):
        assert logistic(0.3, mean=0.3, standard_deviation=0.2) == pytest.approx(0.5)

    def test_monotonic(self):
        values = [logistic(x / 20.0) for x in range(21)]
        assert values == sorted(values)


class TestIdentifier:
    """Validation, normalization, interning and ordering."""

    @pytest.mark.parametrize("text", ["X", "S_Prime_1", "_hidden", "h1", "Émile", "ß2"])
    def test_valid(self, text):
        assert Identifier.is_valid(text)
        assert str(Identifier(text)) == text

    @pytest.mark.parametrize("text", ["", "1abc", "a-b", "a.b", "has space", "x!"])
    def test_invalid(self, text):
        assert not Identifier.is_valid(text)
        with pytest.raises(InvalidIdentifierError):
            Identifier(text)

    def test_non_string_rejected(self):
        assert not Identifier.is_valid(12)
        with pytest.raises(InvalidIdentifierError):
            Identifier(12)

    def test_interned(self):
        assert Identifier("S_Star") is Identifier("S_Star")

    def test_nfkc_normalization(self):
        # U+FB01 LATIN SMALL LIGATURE FI normalizes to "fi"
        assert Identifier("ﬁrst") == Identifier("first")
        assert Identifier("ﬁrst") is Identifier("first")

    def test_equal_to_plain_string(self):
        ident = Identifier("M_Prime_1")
        assert ident == "M_Prime_1"
        assert ident != "M_Prime_2"
        assert hash(ident) == hash("M_Prime_1")
        assert {"M_Prime_1": 1}[ident] == 1

    def test_ordering(self):
        names = [Identifier(n) for n in ("b", "c", "a")]
        assert [str(n) for n in sorted(names)] == ["a", "b", "c"]
        assert Identifier("a") < "b"

    def test_is_system(self):
        assert Identifier("_internal").is_system
        assert not Identifier("public").is_system

    def test_coerce(self):
        assert Identifier.coerce(None) is None
        assert Identifier.coerce("d") is Identifier("d")
        ident = Identifier("d")
        assert Identifier.coerce(ident) is ident


class TestSegmentedIdentifier:
    """Dotted paths of identifiers."""

    def test_from_string(self):
        path = SegmentedIdentifier("Net.SensoryAssociationRegion.S_Prime_Prime_1")
        assert len(path) == 3
        assert path.last == "S_Prime_Prime_1"
        assert str(path) == "Net.SensoryAssociationRegion.S_Prime_Prime_1"

    def test_from_segments(self):
        path = SegmentedIdentifier(["Net", Identifier("d")])
        assert [str(s) for s in path] == ["Net", "d"]

    @pytest.mark.parametrize("text", [".a", "a.", "a..b", "", "a.1b"])
    def test_malformed(self, text):
        assert not SegmentedIdentifier.is_valid(text)
        with pytest.raises(InvalidIdentifierError):
            SegmentedIdentifier(text)

    def test_append_returns_new_path(self):
        base = SegmentedIdentifier("Net")
        longer = base.append("h1")
        assert len(base) == 1
        assert str(longer) == "Net.h1"

    def test_equality_and_hash(self):
        assert SegmentedIdentifier("a.b") == SegmentedIdentifier(["a", "b"])
        assert SegmentedIdentifier("a.b") == "a.b"
        assert hash(SegmentedIdentifier("a.b")) == hash(SegmentedIdentifier("a.b"))

    def test_empty_segment_list_rejected(self):
        with pytest.raises(InvalidIdentifierError):
            SegmentedIdentifier([])
