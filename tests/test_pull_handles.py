import gc

import pytest
from ufunc import PullHandle, filter_map, merge, range_of, zip_longest_rows, zip_rows


class Resurrecting:
    """Iterator that starts producing again after signalling the end"""

    def __init__(self):
        self.calls = 0

    def __iter__(self):
        return self

    def __next__(self):
        self.calls += 1
        if self.calls == 2:
            raise StopIteration
        return self.calls


class RecordingIterable:
    """Iterable that records each time iteration starts"""

    def __init__(self, items):
        self.items = items
        self.started = 0

    def __iter__(self):
        self.started += 1
        return iter(self.items)


class TestPullHandle:
    """Test the handle combinators hold over each source"""

    def test_pull_until_end(self):
        handle = PullHandle([1, 2])
        assert handle.pull() == (1, True)
        assert handle.pull() == (2, True)
        assert handle.pull() == (None, False)
        assert handle.done

    def test_end_is_sticky(self):
        """Test that a handle never pulls again after the source has ended"""
        source = Resurrecting()
        handle = PullHandle(source)
        assert handle.pull() == (1, True)
        assert handle.pull() == (None, False)
        assert handle.pull() == (None, False)
        assert source.calls == 2, f"Source pulled after its end: {source.calls} calls"

    def test_stop_closes_source(self, tracked, closed_log):
        handle = PullHandle(tracked("a", [1, 2, 3]))
        handle.pull()
        handle.stop()
        assert closed_log == ["a"]
        assert handle.pull() == (None, False)
        handle.stop()
        assert closed_log == ["a"], "Second stop should do nothing"

    def test_context_manager(self, tracked, closed_log):
        with PullHandle(tracked("a", [1])) as handle:
            assert handle.pull() == (1, True)
        assert handle.stopped
        assert closed_log == ["a"]

    def test_closes_generators(self):
        events = []

        def numbers():
            try:
                yield 1
                yield 2
            finally:
                events.append("finally")

        handle = PullHandle(numbers())
        handle.pull()
        handle.stop()
        assert events == ["finally"]


class TestReleaseOnExhaustion:
    """Test that combinators release every handle when they end"""

    def test_zip_releases_unqueried_sources(self, tracked, closed_log):
        """Test that sources after the exhausted one are released too"""
        rows = list(zip_rows(
            tracked("short", [1]),
            tracked("b", [1, 2, 3]),
            tracked("c", [1, 2, 3]),
        ))
        assert rows == [[1, 1, 1]]
        assert sorted(closed_log) == ["b", "c", "short"]

    def test_merge_releases_all(self, tracked, closed_log):
        assert list(merge(tracked("a", [1]), tracked("b", [2, 3]))) == [1, 2, 3]
        assert sorted(closed_log) == ["a", "b"]

    def test_zip_longest_releases_all(self, tracked, closed_log):
        list(zip_longest_rows(tracked("a", [1]), tracked("b", [])))
        assert sorted(closed_log) == ["a", "b"]

    def test_release_happens_once(self, tracked, closed_log):
        cursor = iter(merge(tracked("a", [1])))
        assert list(cursor) == [1]
        cursor.close()
        assert closed_log == ["a"]


class TestReleaseOnEarlyStop:
    """Test that abandoning a combinator releases its sources promptly"""

    def test_with_block(self, tracked, closed_log):
        with iter(merge(tracked("a", [1, 2]), tracked("b", [3, 4]))) as cursor:
            assert next(cursor) == 1
        assert sorted(closed_log) == ["a", "b"]

    def test_explicit_close(self, tracked, closed_log):
        cursor = iter(zip_rows(tracked("a", range(100)), tracked("b", range(100))))
        assert next(cursor) == [0, 0]
        cursor.close()
        assert sorted(closed_log) == ["a", "b"]
        assert next(cursor, "end") == "end"

    def test_abandoned_for_loop(self, tracked, closed_log):
        """Test that breaking out of a for loop releases handles once the cursor is collected"""
        for row in zip_longest_rows(tracked("a", range(100)), tracked("b", range(3))):
            if row[0] == 5:
                break
        gc.collect()
        assert sorted(closed_log) == ["a", "b"]

    def test_generator_sources_run_finally(self):
        events = []

        def counting(name):
            try:
                n = 0
                while True:
                    yield n
                    n += 1
            finally:
                events.append(name)

        cursor = iter(merge(counting("x"), counting("y")))
        assert [next(cursor) for _ in range(4)] == [0, 0, 1, 1]
        cursor.close()
        assert sorted(events) == ["x", "y"]

    def test_to_list_with_failing_mapper_releases(self, tracked, closed_log):
        def explode(x):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            filter_map(tracked("a", [1]), explode).to_list()
        assert closed_log == ["a"]

    def test_failing_release_still_releases_the_rest(self, tracked, closed_log):
        """Test that one source failing to close does not leave the others held"""
        def fails_on_close():
            try:
                yield "b"
            finally:
                raise RuntimeError("cannot release b")

        cursor = iter(merge(tracked("a", ["a"]), fails_on_close(), tracked("c", ["c"])))
        assert [next(cursor) for _ in range(3)] == ["a", "b", "c"]
        with pytest.raises(RuntimeError, match="cannot release b"):
            cursor.close()
        assert sorted(closed_log) == ["a", "c"], f"Unreleased sources: {closed_log}"
        assert next(cursor, "end") == "end"


class TestAcquisition:
    """Test when handles are acquired"""

    def test_acquired_on_first_pull(self):
        source = RecordingIterable([1, 2])
        cursor = iter(merge(source))
        assert source.started == 0, "Handles should not be acquired before the first pull"
        assert next(cursor) == 1
        assert source.started == 1
        cursor.close()

    def test_each_iteration_acquires_again(self):
        source = RecordingIterable([1, 2])
        merged = merge(source, range_of(5, 6))
        assert list(merged) == [1, 5, 2]
        assert list(merged) == [1, 5, 2]
        assert source.started == 2

    def test_closed_before_start(self):
        """Test that closing an unstarted cursor ends it without touching sources"""
        source = RecordingIterable([1])
        cursor = iter(zip_rows(source))
        cursor.close()
        assert next(cursor, "end") == "end"
        assert source.started == 0
