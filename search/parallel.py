"""
Exhaustive search drivers (search/parallel.py).

Parallel pattern:
1. Partition [0, total) into contiguous chunks, one per task
2. Each task loops make_at + score, tracking its own best
3. Per-chunk bests are merged after all tasks finish
4. A lock-guarded counter reports aggregate progress

Tasks run on joblib threads: make_at only reads immutable grids and builds
fresh models. There is no cancellation; each chunk runs to completion.
Exceptions raised by the scoring function propagate unchanged.

parallel_for_indices is the same chunked machinery as a plain ordered map
over any [begin, end) index range.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from joblib import Parallel, cpu_count, delayed

from utils import reason_codes

logger = logging.getLogger(__name__)

ScoreFn = Callable[[Any], float]
ProgressFn = Callable[[int, int], None]


@dataclass
class ChunkBest:
    """Best combination of one chunk."""
    begin: int
    end: int
    best_index: Optional[int] = None
    best_score: Optional[float] = None
    n_scored: int = 0
    skipped: Dict[str, int] = field(default_factory=dict)


@dataclass
class SearchResult:
    """Merged result of an exhaustive search."""
    n_total: int
    best_index: Optional[int] = None
    best_score: Optional[float] = None
    n_scored: int = 0
    skipped: Dict[str, int] = field(default_factory=dict)
    maximize: bool = True
    runtime_seconds: float = 0.0
    snapshot: Optional[Any] = None

    @property
    def found(self) -> bool:
        return self.best_index is not None

    def to_dict(self) -> dict:
        d = {
            'n_total': self.n_total,
            'best_index': self.best_index,
            'best_score': self.best_score,
            'n_scored': self.n_scored,
            'skipped': dict(self.skipped),
            'maximize': self.maximize,
            'runtime_seconds': round(self.runtime_seconds, 3),
        }
        if self.snapshot is not None:
            d['snapshot'] = self.snapshot.to_dict()
        return d


class ProgressCounter:
    """Thread-safe counter of processed combinations."""

    def __init__(self, total: int, callback: Optional[ProgressFn] = None, every: int = 1):
        self.total = total
        self.callback = callback
        self.every = max(1, every)
        self._done = 0
        self._lock = threading.Lock()

    @property
    def done(self) -> int:
        return self._done

    def add(self, n: int = 1) -> int:
        with self._lock:
            before = self._done
            self._done += n
            now = self._done
        if self.callback is not None and (now // self.every) != (before // self.every):
            self.callback(now, self.total)
        return now


def _is_better(score: float, best: Optional[float], maximize: bool) -> bool:
    if best is None:
        return True
    return score > best if maximize else score < best


def partition(total: int, n_chunks: int, begin: int = 0) -> List[Tuple[int, int]]:
    """
    Split [begin, begin + total) into at most n_chunks contiguous [begin, end) chunks.

    Every chunk has the ceiling size total / n_chunks except possibly the last.
    """
    if total <= 0:
        return []
    n_chunks = max(1, min(n_chunks, total))
    chunk = (total + n_chunks - 1) // n_chunks

    out = []
    for lo in range(begin, begin + total, chunk):
        out.append((lo, min(begin + total, lo + chunk)))
    return out


def _default_chunks(n_jobs: int) -> int:
    workers = n_jobs if n_jobs > 0 else cpu_count()
    return 4 * workers


def parallel_for_chunks(
    chunks: List[Tuple[int, int]],
    chunk_fn: Callable[[int, int], Any],
    n_jobs: int = -1,
) -> List[Any]:
    """
    Run chunk_fn(begin, end) for every chunk on joblib threads.

    Results come back in chunk order. Exceptions from chunk_fn propagate.
    """
    if not chunks:
        return []
    return Parallel(n_jobs=n_jobs, prefer="threads")(
        delayed(chunk_fn)(begin, end) for begin, end in chunks
    )


def parallel_for_indices(
    begin: int,
    end: int,
    worker: Callable[[int], Any],
    n_jobs: int = -1,
    on_progress: Optional[ProgressFn] = None,
    n_chunks: Optional[int] = None,
    progress_every: int = 1,
) -> List[Any]:
    """
    Parallel map of worker over the indices [begin, end).

    Args:
        begin: First index
        end: One past the last index
        worker: index -> result, called once per index
        n_jobs: joblib worker count (-1 = all cores)
        on_progress: Optional callback(done, total)
        n_chunks: Number of contiguous chunks (default: 4 per worker)
        progress_every: Callback granularity in indices

    Returns:
        [worker(begin), ..., worker(end - 1)] in index order
    """
    total = max(0, end - begin)
    if n_chunks is None:
        n_chunks = _default_chunks(n_jobs)
    counter = ProgressCounter(total, on_progress, every=progress_every)

    def map_chunk(lo: int, hi: int) -> List[Any]:
        out = []
        for i in range(lo, hi):
            out.append(worker(i))
            counter.add()
        return out

    results = []
    for part in parallel_for_chunks(partition(total, n_chunks, begin=begin), map_chunk, n_jobs=n_jobs):
        results.extend(part)
    return results


def search_chunk(
    orchestrator,
    begin: int,
    end: int,
    score_fn: ScoreFn,
    maximize: bool = True,
    counter: Optional[ProgressCounter] = None,
) -> ChunkBest:
    """
    Score every global index in [begin, end) and keep the best.

    Incomplete models and non-finite scores are counted, not scored.
    Ties keep the lower global index.
    """
    result = ChunkBest(begin=begin, end=end)

    for g in range(begin, end):
        pm = orchestrator.make_at(g)

        if not pm.complete:
            result.skipped[reason_codes.E_ABSENT_MODEL] = (
                result.skipped.get(reason_codes.E_ABSENT_MODEL, 0) + 1
            )
        else:
            score = float(score_fn(pm))
            if not math.isfinite(score):
                result.skipped[reason_codes.E_NONFINITE_SCORE] = (
                    result.skipped.get(reason_codes.E_NONFINITE_SCORE, 0) + 1
                )
            else:
                result.n_scored += 1
                if _is_better(score, result.best_score, maximize):
                    result.best_score = score
                    result.best_index = g

        if counter is not None:
            counter.add()

    return result


def merge_chunks(chunks: List[ChunkBest], n_total: int, maximize: bool = True) -> SearchResult:
    """Reduce per-chunk bests into one SearchResult (ties -> lower index)."""
    merged = SearchResult(n_total=n_total, maximize=maximize)

    for c in sorted(chunks, key=lambda c: c.begin):
        merged.n_scored += c.n_scored
        for code, n in c.skipped.items():
            merged.skipped[code] = merged.skipped.get(code, 0) + n

        if c.best_index is None:
            continue
        if _is_better(c.best_score, merged.best_score, maximize):
            merged.best_score = c.best_score
            merged.best_index = c.best_index

    return merged


def parallel_search(
    orchestrator,
    score_fn: ScoreFn,
    n_jobs: int = -1,
    maximize: bool = True,
    n_chunks: Optional[int] = None,
    progress: Optional[ProgressFn] = None,
    progress_every: int = 1000,
) -> SearchResult:
    """
    Exhaustively score all combinations using stateless make_at().

    Args:
        orchestrator: Orchestrator with all segments registered
        score_fn: PiecewiseModel -> float (higher is better if maximize)
        n_jobs: joblib worker count (-1 = all cores)
        maximize: Keep the highest score (else the lowest)
        n_chunks: Number of contiguous chunks (default: 4 per worker)
        progress: Optional callback(done, total)
        progress_every: Callback granularity in combinations

    Returns:
        SearchResult with the best global index and its score
    """
    start_time = time.time()
    orchestrator.validate()
    total = orchestrator.size()

    if total == 0:
        logger.warning("Search space is empty; nothing to score")
        return SearchResult(
            n_total=0,
            maximize=maximize,
            skipped={reason_codes.E_EMPTY_SPACE: 1},
        )

    if n_chunks is None:
        n_chunks = _default_chunks(n_jobs)

    chunks = partition(total, n_chunks)
    counter = ProgressCounter(total, progress, every=progress_every)

    logger.info(f"Searching {total} combinations in {len(chunks)} chunks (n_jobs={n_jobs})")

    def score_chunk(begin: int, end: int) -> ChunkBest:
        return search_chunk(orchestrator, begin, end, score_fn, maximize=maximize, counter=counter)

    chunk_results = parallel_for_chunks(chunks, score_chunk, n_jobs=n_jobs)

    result = merge_chunks(chunk_results, total, maximize=maximize)
    result.runtime_seconds = time.time() - start_time

    logger.info(
        f"Search complete: best index {result.best_index}, score {result.best_score}, "
        f"{result.n_scored}/{total} scored in {result.runtime_seconds:.2f}s"
    )
    return result


def sequential_search(orchestrator, score_fn: ScoreFn, maximize: bool = True) -> SearchResult:
    """
    Exhaustively score all combinations with reset()/next().

    Uses the orchestrator's cursors, so it must not run concurrently with
    other sequential iteration on the same orchestrator.
    """
    start_time = time.time()
    total = orchestrator.size()
    result = SearchResult(n_total=total, maximize=maximize)

    orchestrator.reset()
    while True:
        pm = orchestrator.next()
        if pm is None:
            break

        if not pm.complete:
            result.skipped[reason_codes.E_ABSENT_MODEL] = (
                result.skipped.get(reason_codes.E_ABSENT_MODEL, 0) + 1
            )
            continue

        score = float(score_fn(pm))
        if not math.isfinite(score):
            result.skipped[reason_codes.E_NONFINITE_SCORE] = (
                result.skipped.get(reason_codes.E_NONFINITE_SCORE, 0) + 1
            )
            continue

        result.n_scored += 1
        tied = result.best_score is not None and score == result.best_score
        if tied or _is_better(score, result.best_score, maximize):
            snap = orchestrator.snapshot()
            # Equal scores keep the lower global index, whatever the visit order
            if tied and snap.global_index > result.best_index:
                continue
            result.best_score = score
            result.best_index = snap.global_index
            result.snapshot = snap

    if total == 0:
        result.skipped[reason_codes.E_EMPTY_SPACE] = 1

    result.runtime_seconds = time.time() - start_time
    return result
