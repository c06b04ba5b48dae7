# preprocess.py
"""
Item store and preprocessing for the minimum-cardinality threshold cover search.

Turns a raw collection of scored items into the structures the
branch-and-bound search consumes:
- Filtering of items that cannot contribute (row sum below a minimum, all zeros)
- Remaining capacity per score dimension
- Dimension ranking (least total capacity first) and lexicographic sort
- Dominance table over the sorted sequence
- Index map from sorted position back to original item index

Scores must be non-negative. Nothing here checks that; see
inputs.validate_score_matrix for the caller-side check.
"""

import numpy as np
from typing import List, Optional, Sequence, Tuple
from dataclasses import dataclass
from numba import jit

N_DIMENSIONS = 3

#-----------------------------------------------------------------------------
# Item store
#-----------------------------------------------------------------------------
@dataclass(frozen=True)
class Item:
    """An item with its original index and 3-dimensional score vector."""
    original_index: int
    scores: Tuple[float, float, float]

    def __post_init__(self):
        scores = tuple(float(v) for v in self.scores)
        if len(scores) != N_DIMENSIONS:
            raise ValueError(
                f"Item {self.original_index} has {len(scores)} scores, expected {N_DIMENSIONS}"
            )
        object.__setattr__(self, 'scores', scores)

    @property
    def total(self) -> float:
        return sum(self.scores)


def items_from_matrix(matrix: np.ndarray, indices: Optional[Sequence[int]] = None) -> List[Item]:
    """
    Build items from an (n x 3) score matrix.

    Args:
        matrix: Score matrix, one row per item
        indices: Original index of each row (default: row number)

    Returns:
        List of Item objects in row order
    """
    matrix = np.asarray(matrix, dtype=np.float64).reshape(-1, N_DIMENSIONS)
    if indices is None:
        indices = range(matrix.shape[0])
    if len(indices) != matrix.shape[0]:
        raise ValueError(f"Got {len(indices)} indices for {matrix.shape[0]} rows")
    return [Item(int(idx), tuple(row)) for idx, row in zip(indices, matrix)]

#-----------------------------------------------------------------------------
# Preprocessed search input
#-----------------------------------------------------------------------------
@dataclass(frozen=True)
class PreprocessedItems:
    """Immutable input handed to the search engine."""
    sorted_scores: np.ndarray       # (n, 3) scores in search order
    remaining_capacity: np.ndarray  # (3,) column sums of sorted_scores
    dominance: np.ndarray           # (n, n) bool, upper triangle only
    index_map: np.ndarray           # (n,) original index per sorted position
    dimension_order: np.ndarray     # (3,) dimensions, least capacity first
    n_input: int = 0

    @property
    def n_items(self) -> int:
        return self.sorted_scores.shape[0]

    @property
    def n_filtered(self) -> int:
        return self.n_input - self.n_items

#-----------------------------------------------------------------------------
# JIT-compiled dominance table
#-----------------------------------------------------------------------------
@jit(nopython=True)
def build_dominance_table_jit(scores: np.ndarray) -> np.ndarray:
    """
    Pairwise dominance over a sorted score matrix.

    table[i, j] is True for i < j when row i is >= row j in every
    dimension (equal rows count). Entries with j <= i stay False.
    """
    n = scores.shape[0]
    n_dims = scores.shape[1]
    table = np.zeros((n, n), dtype=np.bool_)

    for i in range(n):
        for j in range(i + 1, n):
            dominates = True
            for k in range(n_dims):
                if scores[i, k] < scores[j, k]:
                    dominates = False
                    break
            table[i, j] = dominates

    return table

#-----------------------------------------------------------------------------
# Preprocessing steps
#-----------------------------------------------------------------------------
def rank_dimensions(capacity: np.ndarray) -> np.ndarray:
    """Dimensions ordered by ascending total capacity (stable on ties)."""
    return np.argsort(capacity, kind='stable')


def sort_order(scores: np.ndarray, dimension_order: np.ndarray) -> np.ndarray:
    """
    Row order that sorts scores descending-lexicographically.

    The first entry of dimension_order is compared first. Rows with
    identical keys keep their relative order.
    """
    if scores.shape[0] == 0:
        return np.zeros(0, dtype=np.int64)
    # np.lexsort uses the last key as primary and sorts ascending
    keys = tuple(-scores[:, d] for d in reversed(dimension_order))
    return np.lexsort(keys)


def preprocess(items: Sequence[Item], min_row_sum: float) -> PreprocessedItems:
    """
    Filter, sort and index items for the search.

    Args:
        items: Items to consider
        min_row_sum: Items whose score sum is below this are dropped

    Returns:
        PreprocessedItems ready for search()
    """
    n_input = len(items)
    if n_input:
        original = np.array([item.original_index for item in items], dtype=np.int64)
        scores = np.array([item.scores for item in items], dtype=np.float64)
    else:
        original = np.zeros(0, dtype=np.int64)
        scores = np.zeros((0, N_DIMENSIONS), dtype=np.float64)

    # All-zero rows never help, whatever the minimum
    row_sums = scores.sum(axis=1)
    keep = (row_sums >= min_row_sum) & (row_sums > 0)
    scores = scores[keep]
    original = original[keep]

    capacity = scores.sum(axis=0)
    dimension_order = rank_dimensions(capacity)

    order = sort_order(scores, dimension_order)
    sorted_scores = np.ascontiguousarray(scores[order])
    index_map = original[order]

    dominance = build_dominance_table_jit(sorted_scores)

    return PreprocessedItems(
        sorted_scores=sorted_scores,
        remaining_capacity=capacity,
        dominance=dominance,
        index_map=index_map,
        dimension_order=dimension_order,
        n_input=n_input
    )
