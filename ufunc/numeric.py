"""
Signed-number capability used by the range producers and zip_longest_rows.

Numbers are duck-typed: anything that compares, adds, subtracts and can be
multiplied by an integer count works (int, float, Decimal, Fraction).
Single-character strings are treated as their ordinal values.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SignedNumber(Protocol):
    """Operations a value needs to act as a range bound or step"""

    def __lt__(self, other: Any) -> bool: ...

    def __add__(self, other: Any) -> Any: ...

    def __sub__(self, other: Any) -> Any: ...

    def __mul__(self, other: Any) -> Any: ...


def is_char(value: Any) -> bool:
    """True for a single-character string"""
    return isinstance(value, str) and len(value) == 1


def to_ordinal(value):
    """Return the ordinal for a character, the value itself otherwise"""
    if is_char(value):
        return ord(value)
    if isinstance(value, str):
        raise TypeError(f"Only single characters can be used as numbers, got {value!r}")
    return value


def is_positive(value) -> bool:
    return value > 0


def zero_value(sample: Any) -> Any:
    """
    Return the zero value of sample's type: int -> 0, float -> 0.0,
    str -> "", list -> [] and so on. Types that cannot be built without
    arguments give None.
    """
    try:
        return type(sample)()
    except TypeError:
        return None
