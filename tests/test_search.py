"""
Tests for search/parallel.py

Verifies:
- Chunk partitioning covers [0, total) exactly
- Parallel and sequential drivers agree on the best combination
- Ties resolve to the lower global index under either strategy
- parallel_for_indices keeps index order and reports progress
- Skips are counted by reason code, never dropped
- Scoring exceptions propagate unchanged
"""

import math
import threading

import pytest

from core.orchestrator import Orchestrator
from model.base import Everywhere
from model.piecewise import PiecewiseModel
from model.primitives import Constant, Line
from params.grid import ParamGrid
from params.ranges import UniformRange, ValueListRange
from search.parallel import (
    ChunkBest, ProgressCounter, merge_chunks, parallel_for_indices, parallel_search, partition,
    search_chunk, sequential_search,
)
from utils import reason_codes


@pytest.fixture
def line_grid():
    """Line k in 0..9, m in 0..4 on the whole axis (50 combinations)."""
    orch = Orchestrator()
    orch.add(Everywhere(), ParamGrid.for_fields(Line, k=UniformRange(0, 9, 1), m=UniformRange(0, 4, 1)))
    return orch


def distance_score(pm):
    """Highest (0) at k=3, m=2."""
    m = pm(0.0)
    k = pm(1.0) - m
    return -((k - 3) ** 2 + (m - 2) ** 2)


class TestPartition:
    """Tests for chunk partitioning."""

    def test_covers_range(self):
        chunks = partition(10, 3)
        assert chunks == [(0, 4), (4, 8), (8, 10)]

    def test_more_chunks_than_items(self):
        assert partition(2, 8) == [(0, 1), (1, 2)]

    def test_empty(self):
        assert partition(0, 4) == []

    def test_offset_range(self):
        assert partition(5, 2, begin=10) == [(10, 13), (13, 15)]

    def test_contiguous_and_complete(self):
        chunks = partition(1001, 7)
        assert chunks[0][0] == 0
        assert chunks[-1][1] == 1001
        for (_, end), (begin, _) in zip(chunks, chunks[1:]):
            assert end == begin


class TestProgressCounter:
    """Tests for the shared progress counter."""

    def test_counts_across_threads(self):
        counter = ProgressCounter(total=4000)

        def work():
            for _ in range(1000):
                counter.add()

        threads = [threading.Thread(target=work) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert counter.done == 4000

    def test_callback_granularity(self):
        calls = []
        counter = ProgressCounter(total=10, callback=lambda done, total: calls.append((done, total)), every=5)
        for _ in range(10):
            counter.add()
        assert calls == [(5, 10), (10, 10)]


class TestSearchChunk:
    """Tests for single-chunk scoring."""

    def test_best_in_chunk(self, line_grid):
        result = search_chunk(line_grid, 20, 30, distance_score)
        assert result.best_index == 23
        assert result.best_score == 0
        assert result.n_scored == 10

    def test_nonfinite_scores_skipped(self, line_grid):
        result = search_chunk(line_grid, 0, 10, lambda pm: math.nan)
        assert result.best_index is None
        assert result.skipped == {reason_codes.E_NONFINITE_SCORE: 10}

    def test_absent_models_skipped(self):
        class Incomplete:
            def make_at(self, g):
                pm = PiecewiseModel()
                pm.add(Everywhere(), None if g % 2 else Constant(c=float(g)))
                return pm

        result = search_chunk(Incomplete(), 0, 6, lambda pm: pm(0.0))
        assert result.n_scored == 3
        assert result.skipped == {reason_codes.E_ABSENT_MODEL: 3}
        assert result.best_index == 4

    def test_minimize(self, line_grid):
        result = search_chunk(line_grid, 0, 50, distance_score, maximize=False)
        assert result.best_score == -(6 ** 2 + 2 ** 2)


class TestMergeChunks:
    """Tests for reducing chunk bests."""

    def test_tie_goes_to_lower_index(self):
        chunks = [
            ChunkBest(begin=10, end=20, best_index=15, best_score=1.0, n_scored=10),
            ChunkBest(begin=0, end=10, best_index=3, best_score=1.0, n_scored=10),
        ]
        merged = merge_chunks(chunks, n_total=20)
        assert merged.best_index == 3
        assert merged.n_scored == 20

    def test_skips_are_summed(self):
        chunks = [
            ChunkBest(0, 5, skipped={reason_codes.E_NONFINITE_SCORE: 2}),
            ChunkBest(5, 10, skipped={reason_codes.E_NONFINITE_SCORE: 1, reason_codes.E_ABSENT_MODEL: 4}),
        ]
        merged = merge_chunks(chunks, n_total=10)
        assert merged.skipped == {reason_codes.E_NONFINITE_SCORE: 3, reason_codes.E_ABSENT_MODEL: 4}
        assert not merged.found


class TestDrivers:
    """Tests for parallel_search and sequential_search."""

    def test_parallel_finds_best(self, line_grid):
        result = parallel_search(line_grid, distance_score, n_jobs=4, n_chunks=7)
        assert result.best_index == 23
        assert result.best_score == 0
        assert result.n_scored == 50
        assert result.n_total == 50

    def test_parallel_matches_sequential(self, line_grid):
        par = parallel_search(line_grid, distance_score, n_jobs=2, maximize=False, n_chunks=5)
        seq = sequential_search(line_grid, distance_score, maximize=False)

        assert par.best_index == seq.best_index
        assert par.best_score == seq.best_score
        assert par.n_scored == seq.n_scored

    def test_sequential_records_snapshot(self, line_grid):
        result = sequential_search(line_grid, distance_score)
        assert result.best_index == 23
        assert result.snapshot.locals == [23]
        assert result.snapshot.indices == [(3, 2)]

    def test_ties_resolve_to_lowest_index(self, line_grid):
        par = parallel_search(line_grid, lambda pm: 1.0, n_jobs=3, n_chunks=6)
        seq = sequential_search(line_grid, lambda pm: 1.0)
        assert par.best_index == 0
        assert seq.best_index == 0

    def test_reverse_ties_match_parallel(self):
        orch = Orchestrator(strategy='reverse')
        orch.add(Everywhere(), ParamGrid.for_fields(Constant, c=ValueListRange([0, 1, 2])))

        seq = sequential_search(orch, lambda pm: 1.0)
        par = parallel_search(orch, lambda pm: 1.0, n_jobs=2, n_chunks=3)

        assert seq.best_index == 0
        assert par.best_index == 0
        assert seq.snapshot.global_index == 0

    def test_reverse_matches_forward(self, line_grid):
        reverse = Orchestrator(strategy='reverse')
        reverse.add(Everywhere(), ParamGrid.for_fields(Line, k=UniformRange(0, 9, 1), m=UniformRange(0, 4, 1)))

        seq = sequential_search(reverse, distance_score)
        assert seq.best_index == parallel_search(line_grid, distance_score, n_jobs=2).best_index
        assert seq.best_index == 23

    def test_progress_reaches_total(self, line_grid):
        calls = []
        parallel_search(
            line_grid, distance_score, n_jobs=2, n_chunks=4,
            progress=lambda done, total: calls.append(done), progress_every=10,
        )
        assert max(calls) == 50
        assert len(calls) == 5

    def test_score_errors_propagate(self, line_grid):
        def bad_score(pm):
            raise ValueError("Zero variance in data")

        with pytest.raises(ValueError, match="Zero variance"):
            parallel_search(line_grid, bad_score, n_jobs=2, n_chunks=2)
        with pytest.raises(ValueError, match="Zero variance"):
            sequential_search(line_grid, bad_score)

    def test_empty_space(self):
        orch = Orchestrator()
        orch.add(Everywhere(), ParamGrid.for_fields(Line, k=UniformRange(1.0, 0.0, 0.1)))

        par = parallel_search(orch, distance_score, n_jobs=2)
        seq = sequential_search(orch, distance_score)

        assert not par.found
        assert not seq.found
        assert par.skipped == {reason_codes.E_EMPTY_SPACE: 1}
        assert seq.skipped == {reason_codes.E_EMPTY_SPACE: 1}

    def test_to_dict(self, line_grid):
        d = sequential_search(line_grid, distance_score).to_dict()
        assert d['best_index'] == 23
        assert d['maximize'] is True
        assert d['snapshot']['global_index'] == 23


class TestParallelForIndices:
    """Tests for the ordered parallel index map."""

    def test_preserves_order(self):
        out = parallel_for_indices(0, 100, lambda i: i * i, n_jobs=4, n_chunks=9)
        assert out == [i * i for i in range(100)]

    def test_offset_range(self):
        assert parallel_for_indices(5, 9, lambda i: -i, n_jobs=2) == [-5, -6, -7, -8]

    def test_reports_progress(self):
        calls = []
        lock = threading.Lock()

        def on_progress(done, total):
            with lock:
                calls.append((done, total))

        parallel_for_indices(10, 30, lambda i: i, n_jobs=3, on_progress=on_progress)

        assert len(calls) == 20
        assert sorted(d for d, _ in calls) == list(range(1, 21))
        assert all(t == 20 for _, t in calls)

    def test_empty_range(self):
        calls = []
        assert parallel_for_indices(4, 4, lambda i: i, on_progress=lambda d, t: calls.append(d)) == []
        assert calls == []

    def test_worker_errors_propagate(self):
        def worker(i):
            if i == 7:
                raise RuntimeError("bad index 7")
            return i

        with pytest.raises(RuntimeError, match="bad index 7"):
            parallel_for_indices(0, 10, worker, n_jobs=2, n_chunks=3)
