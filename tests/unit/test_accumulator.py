"""Tests for ResultAccumulator."""

from __future__ import annotations

import threading

import pytest

from saturator.metrics.accumulator import (
    NETWORK_ERROR_LABEL,
    TASK_ERROR_LABEL,
    ResultAccumulator,
)
from saturator.metrics.models import HttpFailure, NetworkFailure, Success, TaskFailure


def _assert_consistent(acc: ResultAccumulator, expected_total: int) -> None:
    assert acc.success_count + acc.failure_count == expected_total
    assert acc.processed == expected_total
    assert sum(acc.status_codes.values()) == expected_total


class TestMerge:
    def test_empty(self):
        acc = ResultAccumulator()
        assert acc.latencies_ms == []
        assert acc.status_codes == {}
        assert acc.total_bytes == 0
        _assert_consistent(acc, 0)

    def test_success(self):
        acc = ResultAccumulator()
        acc.merge(Success(status_code=200, latency_ms=12.5, byte_size=100))

        assert acc.success_count == 1
        assert acc.failure_count == 0
        assert acc.latencies_ms == [12.5]
        assert acc.total_bytes == 100
        assert acc.status_codes == {"200": 1}

    def test_http_failure_records_latency_and_bytes(self):
        acc = ResultAccumulator()
        acc.merge(HttpFailure(status_code=503, latency_ms=40.0, byte_size=20))

        assert acc.success_count == 0
        assert acc.failure_count == 1
        assert acc.latencies_ms == [40.0]
        assert acc.total_bytes == 20
        assert acc.status_codes == {"503": 1}

    def test_network_failure_has_no_latency(self):
        acc = ResultAccumulator()
        acc.merge(NetworkFailure(error="refused"))

        assert acc.failure_count == 1
        assert acc.latencies_ms == []
        assert acc.status_codes == {NETWORK_ERROR_LABEL: 1}

    def test_task_failure_uses_synthetic_label(self):
        acc = ResultAccumulator()
        acc.merge(TaskFailure(error="boom"))

        assert acc.failure_count == 1
        assert acc.latencies_ms == []
        assert acc.status_codes == {TASK_ERROR_LABEL: 1}

    def test_mixed_outcomes_keep_invariants(self):
        acc = ResultAccumulator()
        outcomes = [
            Success(status_code=200, latency_ms=1.0),
            Success(status_code=201, latency_ms=2.0),
            HttpFailure(status_code=404, latency_ms=3.0),
            NetworkFailure(error="timeout"),
            TaskFailure(error="bug"),
            Success(status_code=200, latency_ms=4.0),
        ]
        for outcome in outcomes:
            acc.merge(outcome)

        _assert_consistent(acc, len(outcomes))
        assert acc.success_count == 3
        assert acc.failure_count == 3
        assert acc.status_codes == {
            "200": 2,
            "201": 1,
            "404": 1,
            NETWORK_ERROR_LABEL: 1,
            TASK_ERROR_LABEL: 1,
        }
        assert sorted(acc.latencies_ms) == [1.0, 2.0, 3.0, 4.0]

    def test_rejects_unknown_outcome(self):
        acc = ResultAccumulator()
        with pytest.raises(TypeError):
            acc.merge("200")  # type: ignore[arg-type]
        _assert_consistent(acc, 0)

    def test_returned_collections_are_copies(self):
        acc = ResultAccumulator()
        acc.merge(Success(status_code=200, latency_ms=1.0))
        acc.latencies_ms.append(99.0)
        acc.status_codes["200"] = 42
        assert acc.latencies_ms == [1.0]
        assert acc.status_codes == {"200": 1}


class TestFinish:
    def test_records_duration(self):
        acc = ResultAccumulator()
        assert not acc.finished
        acc.finish(1.5)
        assert acc.finished
        assert acc.duration_seconds == 1.5

    def test_merge_after_finish_raises(self):
        acc = ResultAccumulator()
        acc.finish(0.1)
        with pytest.raises(RuntimeError, match="finished"):
            acc.merge(Success(status_code=200, latency_ms=1.0))


class TestConcurrentMerge:
    def test_no_lost_updates_across_threads(self):
        acc = ResultAccumulator()
        per_thread = 2000
        labels = [200, 201, 404, 500]

        def _worker(status: int) -> None:
            for _ in range(per_thread):
                if status < 400:
                    acc.merge(Success(status_code=status, latency_ms=1.0, byte_size=1))
                else:
                    acc.merge(HttpFailure(status_code=status, latency_ms=1.0, byte_size=1))
                acc.merge(NetworkFailure(error="x"))

        threads = [threading.Thread(target=_worker, args=(s,)) for s in labels]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        expected_total = len(labels) * per_thread * 2
        _assert_consistent(acc, expected_total)
        assert acc.status_codes[NETWORK_ERROR_LABEL] == len(labels) * per_thread
        assert acc.total_bytes == len(labels) * per_thread
        assert len(acc.latencies_ms) == len(labels) * per_thread
