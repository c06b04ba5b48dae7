# optimize_subset.py
"""
Minimum-cardinality threshold cover

Selects the smallest subset of items whose three score sums each exceed a
threshold, breaking ties by the largest total score. Uses Balas's additive
branch-and-bound with a Glover-style achievability test and dominance
pruning over items sorted by their most constrained dimension.

Usage:
    # Random 50-item matrix with settings from config.yaml
    python optimize_subset.py --config config.yaml

    # Score matrix from CSV (columns item, score_0, score_1, score_2)
    python optimize_subset.py --input scores.csv --threshold 1.5

    # Cross-check with exhaustive enumeration on a small problem
    python optimize_subset.py --n-items 15 --seed 1 --threshold 1.5 --exhaustive

"""

import argparse
import os
import time

from config import Config, load_config, print_config_summary, create_default_config, validate_config
from display import (print_optimization_header, print_problem_info, print_solution,
                     print_search_stats, save_solution_to_csv)
from inputs import generate_random_matrix, load_score_matrix, validate_score_matrix
from preprocess import items_from_matrix, preprocess
from search import exhaustive_search, search
from validation import run_validation_suite

#-----------------------------------------------------------------------------
# Optimization
#-----------------------------------------------------------------------------
def load_problem(config: Config):
    """Score matrix from the configured CSV file, or a random one."""
    if config.paths.score_matrix:
        print(f"\nLoading score matrix: {config.paths.score_matrix}")
        return load_score_matrix(config.paths.score_matrix)

    gen = config.generator
    print(f"\nGenerating random score matrix ({gen.n_items} items)...")
    matrix = generate_random_matrix(gen.n_items, gen.seed, gen.max_score, gen.resolution)
    return None, validate_score_matrix(matrix)


def run_optimization(config: Config):
    """
    Run the subset search and display results.

    Args:
        config: Configuration object

    Returns:
        Tuple of (solution, search statistics)
    """
    print_optimization_header(config)
    print_config_summary(config)

    indices, matrix = load_problem(config)
    items = items_from_matrix(matrix, indices)

    threshold = config.problem.threshold
    prepared = preprocess(items, config.problem.min_row_sum)
    print_problem_info(prepared, threshold)

    print(f"\nSearching...")
    start_time = time.time()
    if config.search.search_mode == 'exhaustive':
        tracker, stats = exhaustive_search(prepared.sorted_scores, threshold,
                                           show_progress=config.search.show_progress_bar)
    else:
        tracker, stats = search(prepared.sorted_scores, prepared.dominance, threshold,
                                use_dominance=config.search.use_dominance,
                                show_progress=config.search.show_progress_bar,
                                remaining_capacity=prepared.remaining_capacity)
    solution = tracker.to_solution(prepared.index_map)
    elapsed_time = time.time() - start_time

    print_solution(solution, matrix, threshold, indices, config.visualization.verbose_output)
    print_search_stats(stats)

    if config.search.save_results:
        csv_path = save_solution_to_csv(solution, matrix, config, indices, stats)
        print(f"\nResults saved to: {csv_path}")

    print(f"\nTotal time: {elapsed_time:.3f}s")
    return solution, stats

#-----------------------------------------------------------------------------
# Command-line interface
#-----------------------------------------------------------------------------
def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Find the smallest subset of items exceeding a threshold in all three scores.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Random matrix with settings from the config file
  python optimize_subset.py --config config.yaml

  # Score matrix from CSV
  python optimize_subset.py --input scores.csv --threshold 1.5

  # Validate the search before optimizing
  python optimize_subset.py --validate --quick

  # Write a default configuration file
  python optimize_subset.py --create-config --config my_config.yaml
        """
    )

    # Basic options
    parser.add_argument('--config', type=str, default='config.yaml',
                       help='Path to configuration file (default: config.yaml)')
    parser.add_argument('--create-config', action='store_true',
                       help='Write a default configuration file to --config and exit')
    parser.add_argument('--verbose', action='store_true',
                       help='List the scores of every selected item')

    # Problem overrides
    parser.add_argument('--input', type=str, default=None,
                       help='CSV score matrix (overrides paths.score_matrix)')
    parser.add_argument('--n-items', type=int, default=None,
                       help='Number of random items (overrides generator.n_items)')
    parser.add_argument('--seed', type=int, default=None,
                       help='Random seed (overrides generator.seed)')
    parser.add_argument('--threshold', type=float, default=None,
                       help='Threshold for every dimension (overrides problem.threshold)')
    parser.add_argument('--min-row-sum', type=float, default=None,
                       help='Drop items with a smaller score sum (overrides problem.min_row_sum)')

    # Search options
    parser.add_argument('--exhaustive', action='store_true',
                       help='Enumerate all subsets instead of branch-and-bound')
    parser.add_argument('--no-dominance', action='store_true',
                       help='Disable dominance pruning')
    parser.add_argument('--no-progress', action='store_true',
                       help='Hide the progress bar')
    parser.add_argument('--no-save', action='store_true',
                       help='Do not write results to CSV')

    # Validation options
    parser.add_argument('--validate', action='store_true',
                       help='Run validation suite before optimization')
    parser.add_argument('--quick', action='store_true',
                       help='Run a shorter validation suite (use with --validate)')

    return parser.parse_args(argv)


def apply_overrides(config: Config, args) -> Config:
    """Apply command-line overrides and re-validate."""
    if args.input:
        config.paths.score_matrix = args.input
    if args.n_items is not None:
        config.generator.n_items = args.n_items
    if args.seed is not None:
        config.generator.seed = args.seed
    if args.threshold is not None:
        config.problem.threshold = args.threshold
    if args.min_row_sum is not None:
        config.problem.min_row_sum = args.min_row_sum
    if args.exhaustive:
        config.search.search_mode = 'exhaustive'
    if args.no_dominance:
        config.search.use_dominance = False
    if args.no_progress:
        config.search.show_progress_bar = False
    if args.no_save:
        config.search.save_results = False
    if args.verbose:
        config.visualization.verbose_output = True

    validate_config(config)
    return config


def main(argv=None):
    """Main entry point."""
    args = parse_arguments(argv)

    if args.create_config:
        if os.path.exists(args.config):
            print(f"Configuration file already exists: {args.config}")
            return None
        create_default_config(args.config)
        return None

    # Load configuration
    config = apply_overrides(load_config(args.config), args)

    # Run validation if requested
    if args.validate:
        print(f"🧪 Running validation suite...")
        validation_passed = run_validation_suite(config, quick=args.quick)
        if not validation_passed:
            print("❌ Validation failed. Please fix issues before running optimization.")
            return None
        print("✅ Validation passed!\n")

    return run_optimization(config)

if __name__ == "__main__":
    main()
