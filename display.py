# display.py
"""
Display and output formatting for the subset search.
"""

import csv
import os
from datetime import datetime
from typing import Optional
import numpy as np

from config import Config
from preprocess import PreprocessedItems
from search import SearchStats, SubsetSolution

#-----------------------------------------------------------------------------
# Headers and problem info
#-----------------------------------------------------------------------------
def print_optimization_header(config: Config) -> None:
    """Print optimization header."""
    mode = "Branch-and-Bound" if config.search.search_mode == 'branch-bound' else "Exhaustive"
    print("=" * 60)
    print(f"Minimum-Cardinality Threshold Cover ({mode})")
    print("=" * 60)


def print_problem_info(prepared: PreprocessedItems, threshold: float) -> None:
    """Print the size of the filtered problem and its capacity per dimension."""
    print(f"\nProblem:")
    print(f"  Items: {prepared.n_input} ({prepared.n_filtered} filtered out, "
          f"{prepared.n_items} searched)")
    print(f"  Search space: 2^{prepared.n_items} = {2 ** prepared.n_items:,} subsets")

    capacity = ", ".join(f"{c:.4f}" for c in prepared.remaining_capacity)
    print(f"  Capacity per dimension: [{capacity}] (threshold {threshold})")
    print(f"  Dimension order (least capacity first): {prepared.dimension_order.tolist()}")

    short = np.flatnonzero(prepared.remaining_capacity <= threshold)
    if len(short):
        print(f"  Dimensions {short.tolist()} cannot exceed the threshold: problem is infeasible")

#-----------------------------------------------------------------------------
# Results display
#-----------------------------------------------------------------------------
def print_solution(solution: SubsetSolution, matrix: np.ndarray, threshold: float,
                   indices: Optional[np.ndarray] = None, verbose: bool = False) -> None:
    """
    Print the selected items and their per-dimension totals.

    Args:
        solution: Solution in original indices
        matrix: Score matrix, one row per item
        threshold: Threshold used for the search
        indices: Original index of each matrix row (default: row number)
        verbose: Also list every selected item's scores
    """
    if not solution.feasible:
        print("\nNo subset exceeds the threshold in every dimension.")
        return

    rows = _rows_for(solution, indices)
    totals = matrix[rows].sum(axis=0)

    print(f"\nBest selection: {solution.min_objective} items, total score {solution.solution_sum:.4f}")
    print(f"  Items: {solution.selected_indices}")

    if verbose:
        print(f"\n  {'Item':>6}  {'Score 0':>8}  {'Score 1':>8}  {'Score 2':>8}")
        for idx, row in zip(solution.selected_indices, rows):
            print(f"  {idx:>6}  " + "  ".join(f"{v:>8.4f}" for v in matrix[row]))

    print(f"  Totals: " + ", ".join(f"{t:.4f}" for t in totals) + f" (each > {threshold})")


def print_search_stats(stats: SearchStats) -> None:
    """Print search counters and timing."""
    print(f"\nSearch Summary:")
    print(f"  Nodes processed: {stats.nodes_processed:,}")
    print(f"  Nodes pruned: {stats.nodes_pruned:,} "
          f"(bound {stats.pruned_by_bound:,}, capacity {stats.pruned_by_capacity:,}, "
          f"achievability {stats.pruned_by_achievability:,})")
    print(f"  Dominance exclusions: {stats.dominance_exclusions:,}")
    print(f"  Feasible candidates: {stats.feasible_candidates:,}")
    print(f"  Incumbent updates: {stats.incumbent_updates:,}")
    print(f"  Total time: {stats.elapsed_time:.3f}s")
    if stats.elapsed_time > 0:
        print(f"  Rate: {stats.nodes_processed / stats.elapsed_time:,.0f} nodes/sec")

#-----------------------------------------------------------------------------
# CSV output
#-----------------------------------------------------------------------------
def save_solution_to_csv(solution: SubsetSolution, matrix: np.ndarray, config: Config,
                         indices: Optional[np.ndarray] = None,
                         stats: Optional[SearchStats] = None) -> str:
    """
    Save the solution to a timestamped CSV file in the results folder.

    Returns:
        Path to saved CSV file
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    config_name = os.path.basename(config._config_path).replace('.yaml', '')
    filename = f"subset_results_{config_name}_{timestamp}.csv"
    os.makedirs(config.paths.results_folder, exist_ok=True)
    output_path = os.path.join(config.paths.results_folder, filename)

    problem = config.problem

    with open(output_path, 'w', newline='') as f:
        writer = csv.writer(f, quoting=csv.QUOTE_ALL)

        # Header with configuration
        writer.writerow(['Minimum-Cardinality Threshold Cover Results'])
        writer.writerow(['Threshold', problem.threshold])
        writer.writerow(['Minimum row sum', problem.min_row_sum])
        writer.writerow(['Items', matrix.shape[0]])
        writer.writerow(['Search mode', config.search.search_mode])
        writer.writerow(['Dominance pruning', config.search.use_dominance])
        writer.writerow(['Feasible', solution.feasible])
        if solution.feasible:
            writer.writerow(['Selected items', solution.min_objective])
            writer.writerow(['Total score', f"{solution.solution_sum:.9f}"])
        if stats is not None:
            writer.writerow(['Nodes processed', stats.nodes_processed])
            writer.writerow(['Elapsed seconds', f"{stats.elapsed_time:.6f}"])
        writer.writerow([])

        # Selected items
        writer.writerow(['Item', 'Score 0', 'Score 1', 'Score 2'])
        if solution.feasible:
            rows = _rows_for(solution, indices)
            for idx, row in zip(solution.selected_indices, rows):
                writer.writerow([idx] + [f"{v:.6f}" for v in matrix[row]])
            totals = matrix[rows].sum(axis=0)
            writer.writerow(['Total'] + [f"{v:.6f}" for v in totals])

    return output_path


def _rows_for(solution: SubsetSolution, indices: Optional[np.ndarray]) -> list:
    """Matrix rows holding the selected original indices."""
    if indices is None:
        return list(solution.selected_indices)
    position = {int(idx): row for row, idx in enumerate(indices)}
    return [position[idx] for idx in solution.selected_indices]
