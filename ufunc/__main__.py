"""Walk through the ufunc combinators: python -m ufunc"""

import math
from itertools import islice

from . import (
    __version__,
    filter_map,
    last_index,
    merge,
    range_by,
    range_of,
    reduce,
    spans,
    zip_longest_rows,
    zip_rows,
)
from .utils import setup_logging


def round_positive(x):
    print(f"  computing round({x}) ...")
    if x < 0:
        return 0, False
    return int(math.floor(x + 0.5)), True


def main():
    setup_logging()
    print(f"ufunc {__version__}")

    print("\n--- Demo: laziness (no work until iterated) ---")
    reals = [1.2, -4, 8.5, 19.6, 14.2, -15.5, 18.7]
    positives = filter_map(reals, round_positive)
    print("Constructed filter_map. Nothing computed yet.")
    print("Taking only the first 2:")
    print(f"First two: {list(islice(positives, 2))}")
    print(f"All: {positives.to_list()}")

    print("\n--- Demo: ranges ---")
    print("range_of(5, 15):", list(range_of(5, 15)))
    print("range_by(1.0, 8.5, 0.5):", list(range_by(1.0, 8.5, 0.5)))
    print("range_by(30, 9, 3):", list(range_by(30, 9, 3)))
    print("range_of('M', 'R'):", "".join(range_of("M", "R")))

    print("\n--- Demo: spans ---")
    data = list(range_of(1, 12))
    for span, full in spans(data, 4):
        print(f"  {list(span)}:{full}")

    print("\n--- Demo: merge / zip ---")
    print("merge:", list(merge(range_of(0, 3), range_of(10, 13), range_of(20, 23))))
    sources = (range_by(0, 11, 3), range_by(1, 11, 3), range_by(2, 11, 3))
    print("zip_rows:", list(zip_rows(*sources)))
    print("zip_longest_rows:", list(zip_longest_rows(*sources)))

    print("\n--- Demo: eager scans ---")
    values = [2, 4, 6, 8, 10, 12, 10, 8, 6, 4]
    print("last_index(values, 8):", last_index(values, 8))
    print("reduce('abc', prepend, ''):", reduce("abc", lambda ch, acc: ch + acc, ""))


if __name__ == "__main__":
    main()
