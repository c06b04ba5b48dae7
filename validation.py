# validation.py
"""
Validation and testing for the minimum-cardinality threshold cover search.

This module consolidates all validation logic including:
- Feasibility of returned selections
- Optimality against exhaustive enumeration
- Soundness of dominance pruning
- Determinism across repeated runs
- Degenerate inputs (empty, all-zero, single dominating item)
"""

import numpy as np
from itertools import combinations
from typing import Dict, List, Optional
from dataclasses import dataclass

from config import Config
from inputs import generate_random_matrix
from preprocess import Item, items_from_matrix, preprocess
from search import exhaustive_search, search, solve_min_cover

#-----------------------------------------------------------------------------
# Validation result classes
#-----------------------------------------------------------------------------
@dataclass
class ValidationResult:
    """Result of a single validation test."""
    test_name: str
    passed: bool
    message: str
    details: Optional[Dict] = None

    def __str__(self) -> str:
        status = "✅ PASS" if self.passed else "❌ FAIL"
        return f"{status}: {self.test_name} - {self.message}"

@dataclass
class ValidationSuite:
    """Results from a complete validation suite."""
    results: List[ValidationResult]

    @property
    def all_passed(self) -> bool:
        return all(result.passed for result in self.results)

    @property
    def passed_count(self) -> int:
        return sum(1 for result in self.results if result.passed)

    @property
    def failed_count(self) -> int:
        return sum(1 for result in self.results if not result.passed)

    def print_summary(self):
        """Print validation summary."""
        print(f"\nValidation Summary: {self.passed_count}/{len(self.results)} tests passed")

        for result in self.results:
            print(f"  {result}")
            if result.details and not result.passed:
                for key, value in result.details.items():
                    print(f"    {key}: {value}")

        if self.all_passed:
            print("\n🎉 All validation tests passed!")
        else:
            print(f"\n⚠️  {self.failed_count} test(s) failed - review results above")

#-----------------------------------------------------------------------------
# Test problems
#-----------------------------------------------------------------------------
@dataclass
class RandomProblem:
    """Random problem with scores on an integer grid of `levels / scale`."""
    levels: np.ndarray
    level_threshold: int
    scale: int

    @property
    def matrix(self) -> np.ndarray:
        return self.levels / self.scale

    @property
    def threshold(self) -> float:
        return self.level_threshold / self.scale

    def exceeds(self, selection: List[int]) -> bool:
        """Exact check that a selection strictly exceeds the threshold."""
        return bool(np.all(self.levels[selection].sum(axis=0) > self.level_threshold))

    def level_sum(self, selection: List[int]) -> int:
        return int(self.levels[selection].sum())


def random_problem(rng: np.random.Generator, n_items: int, grid: bool = False) -> RandomProblem:
    """
    Random problem with integer scores 0..9, or 0.00..0.49 on the 0.01 grid.

    Grid problems are the ones generate_random_matrix produces: their sums
    often land exactly on the threshold, where float rounding differs by
    summation order.
    """
    max_level, scale = (50, 100) if grid else (10, 1)
    levels = rng.integers(0, max_level, size=(n_items, 3))
    column_min = int(levels.sum(axis=0).min())
    level_threshold = int(rng.integers(0, max(1, column_min)))
    return RandomProblem(levels, level_threshold, scale)


def exact_optimum(problem: RandomProblem):
    """(count, level sum) of the best selection in integer arithmetic, or None."""
    n_items = problem.levels.shape[0]
    for size in range(1, n_items + 1):
        sums = [problem.level_sum(list(combo)) for combo in combinations(range(n_items), size)
                if problem.exceeds(list(combo))]
        if sums:
            return size, max(sums)
    return None

#-----------------------------------------------------------------------------
# Core validation functions
#-----------------------------------------------------------------------------
def test_feasibility_soundness(n_tests: int = 50, n_items: int = 14,
                               seed: int = 42) -> ValidationResult:
    """Every returned selection exceeds the threshold in all three dimensions."""
    try:
        rng = np.random.default_rng(seed)
        violations = 0
        feasible = 0

        for test_idx in range(n_tests):
            problem = random_problem(rng, n_items, grid=test_idx % 2 == 1)
            solution, _ = solve_min_cover(items_from_matrix(problem.matrix), problem.threshold, 0.0)
            if not solution.feasible:
                if solution.selected_indices:
                    violations += 1
                continue

            feasible += 1
            selection = solution.selected_indices
            if (not problem.exceeds(selection)
                    or len(selection) != solution.min_objective
                    or not np.isclose(problem.level_sum(selection) / problem.scale,
                                      solution.solution_sum)):
                violations += 1

        passed = violations == 0
        message = f"Checked {n_tests} problems ({feasible} feasible), {violations} violations found"
        return ValidationResult("Feasibility Soundness", passed, message,
                                {"violations": violations, "total_tests": n_tests})

    except Exception as e:
        return ValidationResult("Feasibility Soundness", False, f"Test failed with error: {e}")

def test_exhaustive_optimality(n_tests: int = 30, max_items: int = 12,
                               seed: int = 7) -> ValidationResult:
    """Branch-and-bound and enumeration both match the exact integer optimum."""
    try:
        rng = np.random.default_rng(seed)
        mismatches = []

        for test_idx in range(n_tests):
            n_items = int(rng.integers(1, max_items + 1))
            problem = random_problem(rng, n_items, grid=test_idx % 2 == 1)
            prepared = preprocess(items_from_matrix(problem.matrix), 0.0)

            bb, _ = search(prepared.sorted_scores, prepared.dominance, problem.threshold)
            ex, _ = exhaustive_search(prepared.sorted_scores, problem.threshold)
            expected = exact_optimum(problem)

            for tracker in (bb, ex):
                if expected is None:
                    ok = not tracker.found
                else:
                    count, level_sum = expected
                    ok = (tracker.best_objective == count
                          and np.isclose(tracker.best_sum, level_sum / problem.scale))
                if not ok:
                    mismatches.append((test_idx, (tracker.best_objective, tracker.best_sum),
                                       expected))

        passed = not mismatches
        message = f"Compared {n_tests} problems, {len(mismatches)} mismatches found"
        return ValidationResult("Exhaustive Optimality", passed, message,
                                {"mismatches": mismatches[:5], "total_tests": n_tests})

    except Exception as e:
        return ValidationResult("Exhaustive Optimality", False, f"Test failed with error: {e}")

def test_dominance_soundness(n_tests: int = 30, n_items: int = 16,
                             seed: int = 3) -> ValidationResult:
    """Turning dominance pruning off never changes the optimum."""
    try:
        rng = np.random.default_rng(seed)
        mismatches = []
        exclusions = 0

        for test_idx in range(n_tests):
            problem = random_problem(rng, n_items, grid=test_idx % 2 == 1)
            threshold = problem.threshold
            prepared = preprocess(items_from_matrix(problem.matrix), 0.0)

            with_dom, stats = search(prepared.sorted_scores, prepared.dominance, threshold,
                                     use_dominance=True)
            without_dom, _ = search(prepared.sorted_scores, prepared.dominance, threshold,
                                    use_dominance=False)
            exclusions += stats.dominance_exclusions

            if (with_dom.best_objective != without_dom.best_objective
                    or not np.isclose(with_dom.best_sum, without_dom.best_sum)):
                mismatches.append((test_idx, with_dom.best_objective, without_dom.best_objective))

        passed = not mismatches
        message = (f"Compared {n_tests} problems, {len(mismatches)} mismatches found "
                   f"({exclusions:,} dominance exclusions)")
        return ValidationResult("Dominance Soundness", passed, message,
                                {"mismatches": mismatches[:5], "total_tests": n_tests})

    except Exception as e:
        return ValidationResult("Dominance Soundness", False, f"Test failed with error: {e}")

def test_determinism(config: Config, n_repeats: int = 3) -> ValidationResult:
    """Repeated runs on the same matrix give identical results."""
    try:
        gen = config.generator
        n_items = min(gen.n_items, 20)
        matrix = generate_random_matrix(n_items, seed=12345, max_score=gen.max_score,
                                        resolution=gen.resolution)
        threshold = min(config.problem.threshold, float(matrix.sum(axis=0).min()) * 0.5)
        items = items_from_matrix(matrix)

        results = set()
        for _ in range(n_repeats):
            solution, _ = solve_min_cover(items, threshold, config.problem.min_row_sum)
            results.add((tuple(solution.selected_indices), solution.min_objective,
                         solution.solution_sum))

        passed = len(results) == 1
        message = f"{n_repeats} runs on {n_items} items gave {len(results)} distinct result(s)"
        return ValidationResult("Determinism", passed, message, {"results": sorted(results)})

    except Exception as e:
        return ValidationResult("Determinism", False, f"Test failed with error: {e}")

def test_degenerate_inputs() -> ValidationResult:
    """Empty input, all-zero scores and a single dominating item."""
    try:
        failures = []

        solution, stats = solve_min_cover([], 0.5, 0.0)
        if solution.feasible or solution.selected_indices or stats.nodes_processed != 0:
            failures.append("empty input")

        zeros = items_from_matrix(np.zeros((5, 3)))
        solution, _ = solve_min_cover(zeros, 0.1, 0.0)
        if solution.feasible or solution.selected_indices:
            failures.append("all-zero scores")

        single = [Item(0, (0.1, 0.2, 0.1)), Item(7, (0.9, 0.8, 0.7)), Item(3, (0.2, 0.0, 0.3))]
        solution, _ = solve_min_cover(single, 0.5, 0.0)
        if solution.min_objective != 1 or solution.selected_indices != [7]:
            failures.append("single dominating item")

        passed = not failures
        message = "All degenerate cases handled" if passed else f"Failed: {', '.join(failures)}"
        return ValidationResult("Degenerate Inputs", passed, message, {"failures": failures})

    except Exception as e:
        return ValidationResult("Degenerate Inputs", False, f"Test failed with error: {e}")

#-----------------------------------------------------------------------------
# Main validation suite
#-----------------------------------------------------------------------------
def run_validation_suite(config: Config, quick: bool = False) -> bool:
    """
    Run comprehensive validation suite.

    Args:
        config: Configuration to use for validation
        quick: If True, run faster but less comprehensive tests

    Returns:
        True if all tests passed, False otherwise
    """
    n_tests = 10 if quick else 30
    max_items = 10 if quick else 14

    results = [
        test_degenerate_inputs(),
        test_feasibility_soundness(n_tests=n_tests, n_items=max_items),
        test_exhaustive_optimality(n_tests=n_tests, max_items=max_items),
        test_dominance_soundness(n_tests=n_tests, n_items=max_items + 2),
        test_determinism(config),
    ]

    suite = ValidationSuite(results)
    suite.print_summary()

    return suite.all_passed

if __name__ == "__main__":
    # Simple test runner for development
    from config import load_config

    print("Running validation test...")
    config = load_config("config.yaml")
    success = run_validation_suite(config, quick=True)

    if success:
        print("✅ Validation suite passed!")
    else:
        print("❌ Validation suite failed!")
