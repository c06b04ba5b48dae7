# inputs.py
"""
Score matrix input: random generation, CSV loading/saving and validation.

CSV format: one row per item with columns score_0, score_1, score_2 and an
optional integer 'item' column holding the original item index.
"""

import os
import numpy as np
import pandas as pd
from typing import Optional, Tuple

from preprocess import N_DIMENSIONS

SCORE_COLUMNS = [f"score_{d}" for d in range(N_DIMENSIONS)]
INDEX_COLUMN = "item"


def generate_random_matrix(n_items: int, seed: Optional[int] = None,
                           max_score: float = 0.5, resolution: float = 0.01) -> np.ndarray:
    """
    Generate random scores on a fixed grid.

    Values are drawn uniformly from {0, resolution, 2*resolution, ...}
    strictly below max_score (the defaults give 0.00 .. 0.49).

    Args:
        n_items: Number of rows
        seed: Random seed (None for a fresh seed)
        max_score: Exclusive upper bound on scores
        resolution: Grid spacing

    Returns:
        (n_items x 3) float array
    """
    if n_items < 0:
        raise ValueError(f"n_items must be non-negative, got {n_items}")
    if resolution <= 0 or max_score <= 0:
        raise ValueError("max_score and resolution must be positive")

    steps_per_unit = round(1.0 / resolution)
    n_levels = max(1, int(round(max_score / resolution)))

    rng = np.random.default_rng(seed)
    levels = rng.integers(0, n_levels, size=(n_items, N_DIMENSIONS))
    return levels / steps_per_unit


def validate_score_matrix(matrix: np.ndarray) -> np.ndarray:
    """
    Check a score matrix before it is handed to the solver.

    The pruning tests of the search are only sound for non-negative scores,
    and the solver itself does not check.

    Returns:
        The matrix as a float array of shape (n, 3)

    Raises:
        ValueError: Wrong shape, non-finite or negative values
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.size == 0:
        return matrix.reshape(0, N_DIMENSIONS)
    if matrix.ndim != 2 or matrix.shape[1] != N_DIMENSIONS:
        raise ValueError(f"Score matrix must have shape (n, {N_DIMENSIONS}), got {matrix.shape}")
    if not np.all(np.isfinite(matrix)):
        raise ValueError("Score matrix contains non-finite values")

    negative_rows = np.flatnonzero((matrix < 0).any(axis=1))
    if len(negative_rows):
        raise ValueError(f"Negative scores in rows: {negative_rows.tolist()[:10]}")
    return matrix


def load_score_matrix(csv_path: str) -> Tuple[np.ndarray, np.ndarray]:
    """
    Load a score matrix from CSV.

    Args:
        csv_path: Path to CSV file

    Returns:
        Tuple of (original indices, validated (n x 3) score matrix)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If columns are missing or scores are invalid
    """
    if not os.path.exists(csv_path):
        raise FileNotFoundError(f"Score matrix not found: {csv_path}")

    df = pd.read_csv(csv_path)
    missing = [col for col in SCORE_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"Score matrix {csv_path} is missing columns: {missing}")

    if INDEX_COLUMN in df.columns:
        indices = df[INDEX_COLUMN].to_numpy(dtype=np.int64)
        if len(np.unique(indices)) != len(indices):
            raise ValueError(f"Duplicate item indices in {csv_path}")
    else:
        indices = np.arange(len(df), dtype=np.int64)

    try:
        matrix = df[SCORE_COLUMNS].to_numpy(dtype=np.float64)
    except ValueError as e:
        raise ValueError(f"Non-numeric scores in {csv_path}: {e}")

    return indices, validate_score_matrix(matrix)


def save_score_matrix(matrix: np.ndarray, csv_path: str,
                      indices: Optional[np.ndarray] = None) -> str:
    """Save a score matrix in the format read by load_score_matrix."""
    matrix = np.asarray(matrix, dtype=np.float64).reshape(-1, N_DIMENSIONS)
    if indices is None:
        indices = np.arange(matrix.shape[0])

    df = pd.DataFrame(matrix, columns=SCORE_COLUMNS)
    df.insert(0, INDEX_COLUMN, np.asarray(indices, dtype=np.int64))

    directory = os.path.dirname(csv_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    df.to_csv(csv_path, index=False)
    return csv_path
