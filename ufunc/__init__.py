"""
Generic sequence functions: lazy ranges, filter_map, merge, zip_rows and
zip_longest_rows, fixed-size spans, and a few eager scans that fill gaps
in what lists already offer.
"""

from .lazy import (
    InvalidStepError,
    InvalidStrideError,
    LazySeq,
    PreconditionError,
    PullHandle,
    SeqIterator,
    SpanView,
    filter_map,
    merge,
    range_by,
    range_of,
    spans,
    zip_longest_rows,
    zip_rows,
)
from .scan import (
    has_prefix,
    has_suffix,
    index,
    index_func,
    last_index,
    last_index_func,
    reduce,
)

__version__ = "1.0.0"

__all__ = [
    "InvalidStepError",
    "InvalidStrideError",
    "LazySeq",
    "PreconditionError",
    "PullHandle",
    "SeqIterator",
    "SpanView",
    "filter_map",
    "merge",
    "range_by",
    "range_of",
    "spans",
    "zip_longest_rows",
    "zip_rows",
    "has_prefix",
    "has_suffix",
    "index",
    "index_func",
    "last_index",
    "last_index_func",
    "reduce",
]
