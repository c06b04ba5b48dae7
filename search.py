# search.py
"""
Search algorithms for the minimum-cardinality threshold cover.

Consolidates all search logic including:
- Balas additive branch-and-bound with Glover-style achievability test
- Dominance pruning over the sorted item sequence
- Incumbent (best solution) tracking and index remapping
- Exhaustive enumeration for cross-checking small problems

The objective is the number of selected items (minimised); ties are
broken by the total summed score (maximised). A selection is feasible
when its per-dimension sums all strictly exceed the threshold.
"""

import sys
import time
import numpy as np
from itertools import combinations
from typing import List, Optional, Sequence, Tuple
from dataclasses import dataclass, field
from numba import jit
from tqdm import tqdm

from preprocess import Item, N_DIMENSIONS, preprocess

UNBOUNDED_OBJECTIVE = sys.maxsize
PRUNE_TOLERANCE = 1e-9
FEASIBILITY_TOLERANCE = 1e-9
PROGRESS_INTERVAL = 10000
SEARCH_MODES = ('branch-bound', 'exhaustive')

#-----------------------------------------------------------------------------
# Feasibility
#-----------------------------------------------------------------------------
def is_feasible(running_scores: np.ndarray, threshold: float) -> bool:
    """
    True when every dimension sum strictly exceeds the threshold.

    Sums that land on the threshold can round to just above it depending on
    summation order, so the margin must exceed FEASIBILITY_TOLERANCE.
    """
    return bool(np.all(running_scores > threshold + FEASIBILITY_TOLERANCE))

#-----------------------------------------------------------------------------
# Result containers
#-----------------------------------------------------------------------------
@dataclass
class SearchStats:
    """Counters collected during one search."""
    nodes_processed: int = 0
    pruned_by_bound: int = 0
    pruned_by_capacity: int = 0
    pruned_by_achievability: int = 0
    dominance_exclusions: int = 0
    feasible_candidates: int = 0
    incumbent_updates: int = 0
    elapsed_time: float = 0.0

    @property
    def nodes_pruned(self) -> int:
        return self.pruned_by_bound + self.pruned_by_capacity + self.pruned_by_achievability


@dataclass
class SubsetSolution:
    """Optimal selection expressed in original item indices."""
    selected_indices: List[int] = field(default_factory=list)
    min_objective: int = UNBOUNDED_OBJECTIVE
    solution_sum: float = 0.0

    @property
    def feasible(self) -> bool:
        return self.min_objective != UNBOUNDED_OBJECTIVE

#-----------------------------------------------------------------------------
# Solution tracking
#-----------------------------------------------------------------------------
class SolutionTracker:
    """Holds the incumbent: fewest items first, then largest score sum."""

    def __init__(self, n_items: int, threshold: float):
        self.threshold = float(threshold)
        self.best_objective = UNBOUNDED_OBJECTIVE
        self.best_sum = 0.0
        self.best_assignment = np.zeros(n_items, dtype=np.bool_)
        self.updates = 0

    @property
    def found(self) -> bool:
        return self.best_objective != UNBOUNDED_OBJECTIVE

    def offer(self, count: int, running_scores: np.ndarray, path: np.ndarray) -> bool:
        """
        Record a candidate if it beats the incumbent.

        Args:
            count: Number of selected items
            running_scores: Per-dimension sums of the selection
            path: Boolean selection mask over sorted positions

        Returns:
            True if the incumbent was replaced
        """
        if count <= 0 or not is_feasible(running_scores, self.threshold):
            return False

        total = float(np.sum(running_scores))
        if count < self.best_objective or (count == self.best_objective and total > self.best_sum):
            self.best_objective = count
            self.best_sum = total
            self.best_assignment = path.copy()
            self.updates += 1
            return True
        return False

    def selected_positions(self) -> np.ndarray:
        """Sorted positions of the incumbent selection."""
        return np.flatnonzero(self.best_assignment)

    def to_solution(self, index_map: np.ndarray) -> SubsetSolution:
        """Translate the incumbent back to original item indices."""
        if not self.found:
            return SubsetSolution()
        selected = sorted(int(index_map[pos]) for pos in self.selected_positions())
        return SubsetSolution(selected, self.best_objective, self.best_sum)

#-----------------------------------------------------------------------------
# JIT-compiled achievability scan
#-----------------------------------------------------------------------------
@jit(nopython=True)
def can_close_gap_jit(scores: np.ndarray, excluded: np.ndarray, start: int,
                      dim: int, deficit: float, budget: int) -> bool:
    """
    Glover-style surrogate check for one dimension.

    True if some available item at position >= start could close the
    deficit when picked `budget` times. If none can, no completion within
    the budget reaches feasibility in this dimension.
    """
    for j in range(start, scores.shape[0]):
        if not excluded[j] and scores[j, dim] * budget >= deficit - PRUNE_TOLERANCE:
            return True
    return False

#-----------------------------------------------------------------------------
# Branch-and-bound search
#-----------------------------------------------------------------------------
class BalasSearch:
    """
    Depth-first Balas additive search over a sorted item sequence.

    Search state (committed count, running scores, remaining capacity,
    exclusion mask, path) is shared by all nodes and mutated in place.
    Every branch restores exactly what it changed before returning.
    """

    def __init__(self, sorted_scores: np.ndarray, dominance: np.ndarray, threshold: float,
                 use_dominance: bool = True, show_progress: bool = False,
                 remaining_capacity: Optional[np.ndarray] = None):
        self.scores = np.ascontiguousarray(sorted_scores, dtype=np.float64).reshape(-1, N_DIMENSIONS)
        self.dominance = np.asarray(dominance, dtype=np.bool_)
        self.threshold = float(threshold)
        self.use_dominance = use_dominance
        self.show_progress = show_progress
        self.n_items = self.scores.shape[0]

        self.tracker = SolutionTracker(self.n_items, self.threshold)
        self.stats = SearchStats()

        if remaining_capacity is None:
            remaining_capacity = self.scores.sum(axis=0)
        self.committed_count = 0
        self.running_scores = np.zeros(N_DIMENSIONS, dtype=np.float64)
        self.remaining_capacity = np.array(remaining_capacity, dtype=np.float64)
        self.excluded = np.zeros(self.n_items, dtype=np.bool_)
        self.path = np.zeros(self.n_items, dtype=np.bool_)

        self._pbar = None

    def run(self) -> Tuple[SolutionTracker, SearchStats]:
        """Search to completion and return the incumbent and statistics."""
        start_time = time.time()

        if self.n_items > 0:
            with tqdm(desc="Searching", unit=" nodes", disable=not self.show_progress) as pbar:
                self._pbar = pbar
                self._visit(0)
                pbar.update(self.stats.nodes_processed % PROGRESS_INTERVAL)
            self._pbar = None

        self.stats.incumbent_updates = self.tracker.updates
        self.stats.elapsed_time = time.time() - start_time
        return self.tracker, self.stats

    def _visit(self, x: int) -> None:
        self.stats.nodes_processed += 1
        if self.stats.nodes_processed % PROGRESS_INTERVAL == 0:
            self._pbar.update(PROGRESS_INTERVAL)

        if self._is_pruned(x):
            return

        # Out of bounds
        if x >= self.n_items:
            return

        was_excluded = bool(self.excluded[x])
        if not was_excluded:
            self._include(x)
        self._exclude(x, was_excluded)

    def _is_pruned(self, x: int) -> bool:
        """Cut tests evaluated at entry to the node at depth x."""
        budget = self.tracker.best_objective - self.committed_count

        # Already worse than the incumbent
        if budget < 0:
            self.stats.pruned_by_bound += 1
            return True

        for d in range(N_DIMENSIONS):
            deficit = self.threshold - self.running_scores[d]

            # Balas: remaining items cannot close the gap
            if deficit > self.remaining_capacity[d] + PRUNE_TOLERANCE:
                self.stats.pruned_by_capacity += 1
                return True

            # Glover: no item can close the gap within the pick budget
            if deficit > 0 and not can_close_gap_jit(self.scores, self.excluded, x, d,
                                                     deficit, budget):
                self.stats.pruned_by_achievability += 1
                return True

        return False

    def _include(self, x: int) -> None:
        """One branch: commit item x."""
        saved_running = self.running_scores.copy()
        saved_remaining = self.remaining_capacity.copy()

        self.path[x] = True
        self.committed_count += 1
        self.running_scores += self.scores[x]
        self.remaining_capacity -= self.scores[x]

        # Supersets of a feasible selection are never better
        if is_feasible(self.running_scores, self.threshold):
            self.stats.feasible_candidates += 1
            self.tracker.offer(self.committed_count, self.running_scores, self.path)
        else:
            self._visit(x + 1)

        self.path[x] = False
        self.committed_count -= 1
        self.running_scores[:] = saved_running
        self.remaining_capacity[:] = saved_remaining

    def _exclude(self, x: int, was_excluded: bool) -> None:
        """Zero branch: skip item x and everything it dominates."""
        saved_remaining = self.remaining_capacity.copy()

        if not was_excluded:
            self.remaining_capacity -= self.scores[x]

        cascaded = self._cascade_exclusions(x) if self.use_dominance else None

        self._visit(x + 1)

        if cascaded is not None:
            self.excluded[cascaded] = False
        self.remaining_capacity[:] = saved_remaining

    def _cascade_exclusions(self, x: int) -> np.ndarray:
        """
        Exclude later items dominated by the skipped item x.

        A selection using a dominated item i but not x is never better than
        the same selection with i swapped for x, and that one is reached
        through the include branch of x.
        """
        later = slice(x + 1, self.n_items)
        newly = np.flatnonzero(self.dominance[x, later] & ~self.excluded[later]) + x + 1
        if len(newly):
            self.excluded[newly] = True
            self.remaining_capacity -= self.scores[newly].sum(axis=0)
            self.stats.dominance_exclusions += len(newly)
        return newly


def search(sorted_scores: np.ndarray, dominance: np.ndarray, threshold: float,
           use_dominance: bool = True, show_progress: bool = False,
           remaining_capacity: Optional[np.ndarray] = None) -> Tuple[SolutionTracker, SearchStats]:
    """
    Branch-and-bound search for the smallest feasible selection.

    Args:
        sorted_scores: (n x 3) scores in search order
        dominance: (n x n) dominance table over sorted_scores
        threshold: Every dimension sum must strictly exceed this
        use_dominance: Apply dominance pruning in the zero branch
        show_progress: Show a tqdm node counter
        remaining_capacity: Column sums of sorted_scores (computed if omitted)

    Returns:
        Tuple of (tracker holding the best selection, search statistics)
    """
    engine = BalasSearch(sorted_scores, dominance, threshold, use_dominance,
                         show_progress, remaining_capacity)
    return engine.run()

#-----------------------------------------------------------------------------
# Exhaustive search
#-----------------------------------------------------------------------------
def exhaustive_search(sorted_scores: np.ndarray, threshold: float,
                      show_progress: bool = False) -> Tuple[SolutionTracker, SearchStats]:
    """
    Enumerate subsets by increasing size; stop after the first feasible size.

    Exponential in the number of items, intended for cross-checking the
    branch-and-bound result on small problems.
    """
    scores = np.asarray(sorted_scores, dtype=np.float64).reshape(-1, N_DIMENSIONS)
    n_items = scores.shape[0]
    tracker = SolutionTracker(n_items, threshold)
    stats = SearchStats()
    start_time = time.time()

    with tqdm(desc="Enumerating", unit=" subsets", disable=not show_progress) as pbar:
        for size in range(1, n_items + 1):
            for combo in combinations(range(n_items), size):
                stats.nodes_processed += 1
                if stats.nodes_processed % PROGRESS_INTERVAL == 0:
                    pbar.update(PROGRESS_INTERVAL)

                selection = list(combo)
                running = scores[selection].sum(axis=0)
                if is_feasible(running, tracker.threshold):
                    stats.feasible_candidates += 1
                    path = np.zeros(n_items, dtype=np.bool_)
                    path[selection] = True
                    tracker.offer(size, running, path)

            if tracker.found:
                break

    stats.incumbent_updates = tracker.updates
    stats.elapsed_time = time.time() - start_time
    return tracker, stats

#-----------------------------------------------------------------------------
# End-to-end solve
#-----------------------------------------------------------------------------
def solve_min_cover(items: Sequence[Item], threshold: float, min_row_sum: float,
                    use_dominance: bool = True, search_mode: str = 'branch-bound',
                    show_progress: bool = False) -> Tuple[SubsetSolution, SearchStats]:
    """
    Preprocess, search and map the best selection back to original indices.

    Args:
        items: Items with non-negative score vectors
        threshold: Every dimension sum must strictly exceed this
        min_row_sum: Items whose score sum is below this are ignored
        use_dominance: Apply dominance pruning (branch-bound only)
        search_mode: 'branch-bound' or 'exhaustive'
        show_progress: Show a tqdm progress counter

    Returns:
        Tuple of (solution in original indices, search statistics)
    """
    if search_mode not in SEARCH_MODES:
        raise ValueError(f"Unknown search mode: {search_mode} (expected one of {SEARCH_MODES})")

    prepared = preprocess(items, min_row_sum)

    if search_mode == 'branch-bound':
        tracker, stats = search(prepared.sorted_scores, prepared.dominance, threshold,
                                use_dominance=use_dominance, show_progress=show_progress,
                                remaining_capacity=prepared.remaining_capacity)
    else:
        tracker, stats = exhaustive_search(prepared.sorted_scores, threshold,
                                           show_progress=show_progress)

    return tracker.to_solution(prepared.index_map), stats
