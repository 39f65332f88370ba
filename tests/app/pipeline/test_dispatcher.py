"""Tests for app.pipeline.dispatcher — bounded concurrent fan-out."""
import threading
import time

from app.pipeline.dispatcher import dispatch


class TestDispatch:

    def test_every_item_attempted_once_despite_failure(self):
        seen = []
        lock = threading.Lock()

        def worker(item, idx):
            with lock:
                seen.append(item)
            if item == 4:
                raise RuntimeError('bad item')
            return 'enriched'

        result = dispatch(list(range(1, 11)), worker, concurrency=3)

        assert sorted(seen) == list(range(1, 11))
        assert result.total == 10
        assert result.processed == 9
        assert result.failed == 1
        assert result.outcomes[3] == 'failed'
        assert result.errors == ['item 3: bad item']

    def test_never_exceeds_concurrency(self):
        in_flight = [0]
        peak = [0]
        lock = threading.Lock()

        def worker(item, idx):
            with lock:
                in_flight[0] += 1
                peak[0] = max(peak[0], in_flight[0])
            time.sleep(0.01)
            with lock:
                in_flight[0] -= 1
            return 'ok'

        result = dispatch(list(range(12)), worker, concurrency=3)
        assert result.processed == 12
        assert peak[0] <= 3

    def test_skipped_outcomes_counted(self):
        result = dispatch(['a', 'b'], lambda item, idx: 'skipped_chain' if item == 'a' else 'enriched')
        assert result.skipped == 1
        assert result.processed == 1

    def test_empty_batch(self):
        result = dispatch([], lambda item, idx: 'ok')
        assert result.total == 0
        assert result.outcomes == {}

    def test_concurrency_below_one_still_runs(self):
        result = dispatch([1, 2], lambda item, idx: 'ok', concurrency=0)
        assert result.processed == 2
