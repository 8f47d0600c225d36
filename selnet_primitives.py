"""
SelNet primitives — unit-interval scalars, identifiers, and logistic squashing.

These are the leaf types every other module builds on:

    - ``UnitScalar``: a float that is guaranteed to lie in [0, 1]
    - ``Identifier``: a validated, interned name for an addressable node
    - ``SegmentedIdentifier``: a dotted path of identifiers
    - ``logistic``: the squashing function applied to presynaptic excitation
"""

from __future__ import annotations

import functools
import math
import re
import sys
import unicodedata
from typing import Dict, Iterable, Iterator, Optional, Tuple, Union

from selnet_errors import InvalidIdentifierError, OutOfRangeError


# ---------------------------------------------------------------------------
# Unit interval scalar
# ---------------------------------------------------------------------------

class UnitScalar(float):
    """A float constrained to the closed interval [0, 1].

    Construction fails fast with ``OutOfRangeError``; arithmetic yields plain
    floats, so callers decide whether to ``clamp`` or re-validate the result.
    """

    __slots__ = ()

    MINIMUM: "UnitScalar"
    MEAN: "UnitScalar"
    MAXIMUM: "UnitScalar"

    APPROXIMATION_PROPORTION = 0.0001

    def __new__(cls, value: float = 0.0) -> "UnitScalar":
        raw = float(value)
        if not cls.is_within_limits(raw):
            raise OutOfRangeError(f"{value!r} is outside [0, 1]")
        return super().__new__(cls, raw)

    def __repr__(self) -> str:
        return f"UnitScalar({float(self)!r})"

    @staticmethod
    def is_within_limits(value: float) -> bool:
        # NaN fails both comparisons
        return 0.0 <= value <= 1.0

    @classmethod
    def clamp(cls, value: float) -> "UnitScalar":
        """Truncate ``value`` into [0, 1]."""
        if math.isnan(value):
            raise OutOfRangeError("NaN cannot be clamped into [0, 1]")
        return cls(min(max(value, 0.0), 1.0))

    @classmethod
    def is_approximately(
        cls,
        value1: float,
        value2: float,
        proportion: Optional[float] = None,
    ) -> bool:
        """True when ``value2`` is within ``proportion`` of ``value1``."""
        if proportion is None:
            proportion = cls.APPROXIMATION_PROPORTION
        return abs(value1 - value2) <= abs(value1) * proportion

    @property
    def is_zero(self) -> bool:
        return float(self) == 0.0


UnitScalar.MINIMUM = UnitScalar(0.0)
UnitScalar.MEAN = UnitScalar(0.5)
UnitScalar.MAXIMUM = UnitScalar(1.0)


def check_unit(value: float, error: type = OutOfRangeError, what: str = "value") -> float:
    """Return ``value`` as a float, raising ``error`` if it is outside [0, 1]."""
    raw = float(value)
    if not UnitScalar.is_within_limits(raw):
        raise error(f"{what} {value!r} is outside [0, 1]")
    return raw


# ---------------------------------------------------------------------------
# Logistic squashing
# ---------------------------------------------------------------------------

LOGISTIC_MEAN = 0.5
LOGISTIC_STANDARD_DEVIATION = 0.1

# exp() overflows a double just above 709
_MAX_EXPONENT = 700.0


def logistic(
    x: float,
    mean: float = LOGISTIC_MEAN,
    standard_deviation: float = LOGISTIC_STANDARD_DEVIATION,
) -> float:
    """Logistic function L(x) = 1 / (1 + e^((−x + μ) / σ)).

    With the default μ = 0.5 and σ = 0.1, L(0) ≈ 0.00669285 is the resting
    activation of every neuron and L(1) ≈ 0.99330715 its practical ceiling.
    """
    exponent = (-x + mean) / standard_deviation
    exponent = min(max(exponent, -_MAX_EXPONENT), _MAX_EXPONENT)
    return 1.0 / (1.0 + math.exp(exponent))


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------

# A letter or underscore, then letters, digits, underscores. ``\w`` is
# Unicode aware, so non-ASCII letters are accepted.
_IDENTIFIER_RE = re.compile(r"[^\W\d]\w*")

SYSTEM_IDENTIFIER_TAG = "_"


@functools.total_ordering
class Identifier:
    """Immutable, validated name used as the registry key for nodes.

    Text is NFKC-normalized and interned, so two identifiers built from
    equivalent spellings share one string.  Equality, hashing and ordering
    use that string; an ``Identifier`` also compares equal to the same
    plain ``str`` so lookups accept either.

    Raises:
        InvalidIdentifierError: if the text is not a valid identifier.
    """

    __slots__ = ("_value",)

    _interned: Dict[str, "Identifier"] = {}

    def __new__(cls, text: Union[str, "Identifier"]) -> "Identifier":
        if isinstance(text, Identifier):
            return text
        value = cls._normalize(text)
        if not _IDENTIFIER_RE.fullmatch(value):
            raise InvalidIdentifierError(f"not a valid identifier: {text!r}")
        existing = cls._interned.get(value)
        if existing is not None:
            return existing
        obj = super().__new__(cls)
        obj._value = sys.intern(value)
        cls._interned[value] = obj
        return obj

    @staticmethod
    def _normalize(text: object) -> str:
        if not isinstance(text, str):
            raise InvalidIdentifierError(f"identifier must be a string, got {type(text).__name__}")
        return unicodedata.normalize("NFKC", text)

    @classmethod
    def is_valid(cls, text: str) -> bool:
        if not isinstance(text, str):
            return False
        return _IDENTIFIER_RE.fullmatch(unicodedata.normalize("NFKC", text)) is not None

    @classmethod
    def coerce(cls, value: Union[None, str, "Identifier"]) -> Optional["Identifier"]:
        """``None`` passes through; strings are validated into identifiers."""
        if value is None:
            return None
        return cls(value)

    @property
    def is_system(self) -> bool:
        return self._value.startswith(SYSTEM_IDENTIFIER_TAG)

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"Identifier({self._value!r})"

    def __hash__(self) -> int:
        return hash(self._value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Identifier):
            return self._value == other._value
        if isinstance(other, str):
            return self._value == unicodedata.normalize("NFKC", other)
        return NotImplemented

    def __lt__(self, other: object) -> bool:
        if isinstance(other, Identifier):
            return self._value < other._value
        if isinstance(other, str):
            return self._value < unicodedata.normalize("NFKC", other)
        return NotImplemented

    def __reduce__(self):
        return (Identifier, (self._value,))


SEGMENT_SEPARATOR = "."


class SegmentedIdentifier:
    """A dotted path of identifiers, e.g. ``BGL.SensoryAssociationRegion.S_Prime_Prime_1``.

    Separators are single dots; empty segments (leading, trailing or
    doubled dots) are rejected along with invalid segments.
    """

    __slots__ = ("_segments",)

    def __init__(self, path: Union[str, Iterable[Union[str, Identifier]]]):
        if isinstance(path, str):
            parts = path.split(SEGMENT_SEPARATOR)
            if any(part == "" for part in parts):
                raise InvalidIdentifierError(f"malformed segmented identifier: {path!r}")
        else:
            parts = list(path)
        if not parts:
            raise InvalidIdentifierError("segmented identifier needs at least one segment")
        self._segments: Tuple[Identifier, ...] = tuple(Identifier(p) for p in parts)

    @classmethod
    def is_valid(cls, path: str) -> bool:
        if not isinstance(path, str):
            return False
        parts = path.split(SEGMENT_SEPARATOR)
        return all(Identifier.is_valid(part) for part in parts)

    @property
    def segments(self) -> Tuple[Identifier, ...]:
        return self._segments

    @property
    def last(self) -> Identifier:
        return self._segments[-1]

    def append(self, segment: Union[str, Identifier]) -> "SegmentedIdentifier":
        """Return a new path with ``segment`` added at the end."""
        return SegmentedIdentifier(self._segments + (Identifier(segment),))

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[Identifier]:
        return iter(self._segments)

    def __str__(self) -> str:
        return SEGMENT_SEPARATOR.join(str(s) for s in self._segments)

    def __repr__(self) -> str:
        return f"SegmentedIdentifier({str(self)!r})"

    def __hash__(self) -> int:
        return hash(self._segments)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SegmentedIdentifier):
            return self._segments == other._segments
        if isinstance(other, str):
            return str(self) == other
        return NotImplemented
