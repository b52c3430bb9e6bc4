"""
Lazy, pull-based sequences and the combinators that build them.

A LazySeq is re-iterable: every iter() call hands out a fresh SeqIterator
(a cursor) that produces one element per __next__ call and does no work
before it is asked to. Combinators that consume other sequences hold one
PullHandle per source and release all of them when the cursor ends, is
closed, or is garbage collected.
"""

import logging
import operator
from collections.abc import Sequence
from typing import Any, Callable, Iterable, Iterator, List, Optional, Tuple

from .numeric import SignedNumber, is_char, is_positive, to_ordinal, zero_value

logger = logging.getLogger("ufunc.lazy")

_UNSET = object()
_MISSING = object()


class PreconditionError(ValueError):
    """Raised when a combinator is called with an argument it can never accept."""
    pass


class InvalidStepError(PreconditionError):
    """Raised when a range step is not a positive magnitude."""
    pass


class InvalidStrideError(PreconditionError):
    """Raised when a span stride is not a positive integer."""
    pass


# ---------- Pull handles ----------

class PullHandle:
    """
    Stateful handle over one source sequence.

    pull() returns (element, True) while the source has elements and
    (None, False) from then on, even if the underlying iterator would
    produce more. stop() closes the underlying iterator if it can be closed.
    """

    def __init__(self, source: Iterable[Any]):
        self._iterator: Optional[Iterator[Any]] = iter(source)
        self._done = False
        self._source_name = type(source).__name__
        logger.debug("Acquired pull handle on %s", self._source_name)

    @property
    def done(self) -> bool:
        return self._done

    @property
    def stopped(self) -> bool:
        return self._iterator is None

    def pull(self) -> Tuple[Any, bool]:
        if self._done:
            return None, False
        try:
            element = next(self._iterator)
        except StopIteration:
            self._done = True
            return None, False
        return element, True

    def stop(self) -> None:
        if self._iterator is None:
            return
        iterator, self._iterator = self._iterator, None
        self._done = True
        close = getattr(iterator, "close", None)
        if close is not None:
            close()
        logger.debug("Released pull handle on %s", self._source_name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False


# ---------- Cursors ----------

class SeqIterator:
    """
    Base class for the cursors handed out by LazySeq.

    Subclasses implement _advance(), raising StopIteration at the end, and
    optionally _open(), which runs on the first __next__ call. Once a
    cursor has ended it stays ended. An exception raised while advancing,
    including one from a user callable, ends the cursor too: its handles
    are released before the exception reaches the caller.
    """

    def __init__(self):
        self._opened = False
        self._finished = False
        self._handles: List[PullHandle] = []

    def __iter__(self):
        return self

    def __next__(self):
        if self._finished:
            raise StopIteration
        try:
            if not self._opened:
                self._opened = True
                self._open()
            return self._advance()
        except Exception:
            self.close()
            raise

    def _open(self) -> None:
        pass

    def _advance(self):
        raise NotImplementedError

    def _acquire(self, source: Iterable[Any]) -> PullHandle:
        handle = PullHandle(source)
        self._handles.append(handle)
        return handle

    @property
    def finished(self) -> bool:
        return self._finished

    def close(self) -> None:
        """
        Stop producing and release every pull handle, newest first.

        Every handle is stopped even if stopping one of them raises; the
        first such error is re-raised once all of them are released.
        """
        self._finished = True
        handles, self._handles = self._handles, []
        first_error = None
        for handle in reversed(handles):
            try:
                handle.stop()
            except Exception as e:
                logger.error("Failed to release pull handle: %s", e)
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def __del__(self):
        if getattr(self, "_handles", None):
            self.close()


class LazySeq:
    """
    A restartable lazy sequence: iterating it creates a new cursor each time.
    """

    def __init__(self, cursor_factory: Callable[..., SeqIterator], *args, name: str = "seq"):
        self._cursor_factory = cursor_factory
        self._args = args
        self.name = name

    def __iter__(self) -> SeqIterator:
        return self._cursor_factory(*self._args)

    def to_list(self) -> list:
        with iter(self) as cursor:
            return list(cursor)

    def __repr__(self):
        return f"LazySeq(name={self.name!r})"


# ---------- Range ----------

class _RangeCursor(SeqIterator):
    def __init__(self, start, end, step, chars: bool):
        super().__init__()
        self._start = start
        self._end = end
        self._step = step
        self._chars = chars
        self._ascending = start <= end
        self._count = 0

    def _advance(self):
        # start + k * step keeps float progressions from drifting
        offset = self._count * self._step
        if self._ascending:
            value = self._start + offset
            if not value < self._end:
                raise StopIteration
        else:
            value = self._start - offset
            if not value > self._end:
                raise StopIteration
        self._count += 1
        return chr(value) if self._chars else value


def range_by(start: SignedNumber, end: SignedNumber, step: SignedNumber) -> LazySeq:
    """
    Numbers from start up to (or down to) the last step before end.

    step is a magnitude and must be > 0; it is subtracted when start > end.
    Single characters count as their ordinals and come back as characters.

        range_by(1.0, 8.5, 0.5)  # 1.0 1.5 2.0 ... 8.0
        range_by(30, 9, 3)       # 30 27 24 ... 12
    """
    if not is_positive(step):
        logger.warning("Rejected range step %r", step)
        raise InvalidStepError(f"step size must be > 0, got {step!r}")
    chars = is_char(start) or is_char(end)
    if chars:
        if not (is_char(start) and is_char(end)):
            raise TypeError("Character ranges need characters for both start and end")
        if not isinstance(step, int):
            raise TypeError(f"Character ranges need an integer step, got {step!r}")
    return LazySeq(_RangeCursor, to_ordinal(start), to_ordinal(end), step, chars, name="range")


def range_of(start: SignedNumber, end: SignedNumber) -> LazySeq:
    """
    Numbers from start up to (or down to) the one before end in steps of 1.

        range_of(5, 15)      # 5 6 7 ... 14
        range_of("M", "R")   # M N O P Q
    """
    return range_by(start, end, 1)


# ---------- filter_map ----------

class _FilterMapCursor(SeqIterator):
    def __init__(self, sources, mapper):
        super().__init__()
        self._sources = sources
        self._mapper = mapper
        self._pull: Optional[PullHandle] = None

    def _open(self):
        self._pull = self._acquire(self._sources)

    def _advance(self):
        while True:
            element, ok = self._pull.pull()
            if not ok:
                raise StopIteration
            target, keep = self._mapper(element)
            if keep:
                return target


def filter_map(sources: Iterable[Any], mapper: Callable[[Any], Tuple[Any, bool]]) -> LazySeq:
    """
    Every source transformed by mapper, dropping those whose keep flag is false.

    mapper returns a (value, keep) pair.
    """
    return LazySeq(_FilterMapCursor, sources, mapper, name="filter_map")


# ---------- Spans ----------

class SpanView(Sequence):
    """
    Read-only window onto data[start:stop] that shares data instead of copying it.
    """

    __slots__ = ("_data", "_start", "_stop")

    def __init__(self, data: Sequence, start: int, stop: int):
        self._data = data
        self._start = start
        self._stop = stop

    def __len__(self):
        return self._stop - self._start

    def __getitem__(self, i):
        if isinstance(i, slice):
            start, stop, step = i.indices(len(self))
            if step == 1:
                return SpanView(self._data, self._start + start, self._start + max(start, stop))
            return [self[j] for j in range(start, stop, step)]
        i = operator.index(i)
        if i < 0:
            i += len(self)
        if not 0 <= i < len(self):
            raise IndexError("span index out of range")
        return self._data[self._start + i]

    def __eq__(self, other):
        if not isinstance(other, Sequence):
            return NotImplemented
        # strings only equal views over the same kind of string
        if isinstance(other, (str, bytes, bytearray)) and not isinstance(self._data, type(other)):
            return NotImplemented
        return len(self) == len(other) and all(a == b for a, b in zip(self, other))

    __hash__ = None

    def materialize(self):
        """Copy the window out using the underlying sequence's own slicing"""
        return self._data[self._start:self._stop]

    def __repr__(self):
        return f"SpanView({list(self)!r})"


class _SpansCursor(SeqIterator):
    def __init__(self, data, stride):
        super().__init__()
        self._data = data
        self._stride = stride
        self._offset = 0

    def _advance(self):
        if self._offset >= len(self._data):
            raise StopIteration
        stop = min(self._offset + self._stride, len(self._data))
        view = SpanView(self._data, self._offset, stop)
        self._offset = stop
        return view, len(view) == self._stride


def spans(data: Sequence, stride: int) -> LazySeq:
    """
    Consecutive windows of stride items, each paired with True, except a
    short final window which is paired with False.

        spans([1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11], 4)
        # [1 2 3 4]:True [5 6 7 8]:True [9 10 11]:False
    """
    stride = operator.index(stride)
    if stride <= 0:
        logger.warning("Rejected span stride %r", stride)
        raise InvalidStrideError(f"stride must be > 0, got {stride!r}")
    return LazySeq(_SpansCursor, data, stride, name="spans")


# ---------- Merge / Zip / ZipLongest ----------

class _MergeCursor(SeqIterator):
    def __init__(self, sources):
        super().__init__()
        self._sources = sources
        self._pulls: List[PullHandle] = []
        self._position = 0
        self._active = 0

    def _open(self):
        self._pulls = [self._acquire(source) for source in self._sources]
        self._active = len(self._pulls)

    def _advance(self):
        while self._active:
            handle = self._pulls[self._position]
            self._position = (self._position + 1) % len(self._pulls)
            if handle.done:
                continue
            element, ok = handle.pull()
            if ok:
                return element
            self._active -= 1
        raise StopIteration


def merge(*sources: Iterable[Any]) -> LazySeq:
    """
    Interleave the sources round-robin: the first element of each source in
    turn, then the second of each, and so on, skipping sources that have run
    out until all of them have.

        merge(range_of(0, 3), range_of(10, 12))  # 0 10 1 11 2
    """
    return LazySeq(_MergeCursor, sources, name="merge")


class _ZipCursor(SeqIterator):
    def __init__(self, sources):
        super().__init__()
        self._sources = sources
        self._pulls: List[PullHandle] = []

    def _open(self):
        self._pulls = [self._acquire(source) for source in self._sources]

    def _advance(self):
        if not self._pulls:
            raise StopIteration
        row = []
        for handle in self._pulls:
            element, ok = handle.pull()
            if not ok:
                # complete rows only
                raise StopIteration
            row.append(element)
        return row


def zip_rows(*sources: Iterable[Any]) -> LazySeq:
    """
    Rows made of the i-th element of every source, stopping as soon as any
    source runs out.

        zip_rows(range_by(0, 11, 3), range_by(1, 11, 3), range_by(2, 11, 3))
        # [0, 1, 2] [3, 4, 5] [6, 7, 8]
    """
    return LazySeq(_ZipCursor, sources, name="zip")


class _ZipLongestCursor(_ZipCursor):
    def __init__(self, sources, fill):
        super().__init__(sources)
        self._fill = fill
        self._samples: List[Any] = []

    def _open(self):
        super()._open()
        self._samples = [_MISSING] * len(self._pulls)

    def _advance(self):
        row = []
        missing = []
        live_sample = _MISSING
        for column, handle in enumerate(self._pulls):
            element, ok = handle.pull()
            if ok:
                if live_sample is _MISSING:
                    live_sample = element
                self._samples[column] = element
                row.append(element)
            else:
                missing.append(column)
                row.append(None)
        if live_sample is _MISSING:
            raise StopIteration
        for column in missing:
            row[column] = self._zero_for(column, live_sample)
        return row

    def _zero_for(self, column: int, live_sample: Any) -> Any:
        if self._fill is not _UNSET:
            return self._fill
        sample = self._samples[column]
        if sample is _MISSING:
            sample = live_sample
        return zero_value(sample)


def zip_longest_rows(*sources: Iterable[Any], fill: Any = _UNSET) -> LazySeq:
    """
    Rows made of the i-th element of every source, continuing while at least
    one source has elements. Sources that have run out contribute fill, or
    by default the zero value of the type their column held.

        zip_longest_rows(range_by(0, 11, 3), range_by(1, 11, 3), range_by(2, 11, 3))
        # [0, 1, 2] [3, 4, 5] [6, 7, 8] [9, 10, 0]
    """
    return LazySeq(_ZipLongestCursor, sources, fill, name="zip_longest")
