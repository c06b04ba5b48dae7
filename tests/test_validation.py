import numpy as np
import yaml

import validation
from config import load_config


def make_config(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text(yaml.dump({
        'problem': {'threshold': 1.0, 'min_row_sum': 0.025},
        'generator': {'n_items': 12, 'seed': 0},
        'search': {'save_results': False, 'show_progress_bar': False},
    }))
    return load_config(str(path))


def test_individual_checks_pass(tmp_path):
    config = make_config(tmp_path)
    results = [
        validation.test_degenerate_inputs(),
        validation.test_feasibility_soundness(n_tests=5, n_items=10),
        validation.test_exhaustive_optimality(n_tests=5, max_items=9),
        validation.test_dominance_soundness(n_tests=5, n_items=11),
        validation.test_determinism(config),
    ]
    for result in results:
        assert result.passed, str(result)


def test_quick_suite_passes(tmp_path, capsys):
    assert validation.run_validation_suite(make_config(tmp_path), quick=True)
    assert "All validation tests passed" in capsys.readouterr().out


def test_suite_summary_reports_failures(capsys):
    suite = validation.ValidationSuite([
        validation.ValidationResult("A", True, "fine"),
        validation.ValidationResult("B", False, "broken", {"reason": "x"}),
    ])
    suite.print_summary()
    out = capsys.readouterr().out

    assert not suite.all_passed
    assert suite.passed_count == 1
    assert suite.failed_count == 1
    assert "reason: x" in out


def test_grid_problems_use_exact_levels():
    rng = np.random.default_rng(238)
    problem = validation.random_problem(rng, 6, grid=True)

    assert problem.scale == 100
    assert problem.levels.max() < 50
    assert np.allclose(problem.matrix * 100, problem.levels)

    # A selection summing exactly to the threshold does not exceed it
    tie = validation.RandomProblem(np.array([[20, 30, 30], [10, 30, 30], [20, 30, 30]]), 50, 100)
    assert not tie.exceeds([0, 1, 2])
    assert validation.exact_optimum(tie) is None
