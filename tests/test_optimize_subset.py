import csv
import os

import numpy as np
import pytest
import yaml

from inputs import save_score_matrix
from optimize_subset import main

SCENARIO = np.array([
    (0.3, 0.0, 0.3),
    (0.2, 0.0, 0.3),
    (0.3, 0.1, 0.2),
    (0.1, 0.3, 0.15),
    (0.2, 0.4, 0.1),
    (0.01, 0.01, 0.0),
    (0.0, 0.5, 0.0),
])


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text(yaml.dump({
        'problem': {'threshold': 1.0, 'min_row_sum': 0.025},
        'generator': {'n_items': 14, 'seed': 2},
        'paths': {'results_folder': str(tmp_path / 'results')},
        'search': {'show_progress_bar': False},
    }))
    return str(path)


def test_random_problem_run(config_path, tmp_path):
    solution, stats = main(['--config', config_path])

    assert stats.nodes_processed > 0
    saved = os.listdir(tmp_path / 'results')
    assert len(saved) == 1
    assert saved[0].startswith('subset_results_config_')


def test_csv_input_scenario(config_path, tmp_path, capsys):
    matrix_path = save_score_matrix(SCENARIO, str(tmp_path / 'scores.csv'))
    solution, _ = main(['--config', config_path, '--input', matrix_path,
                        '--threshold', '0.5', '--verbose'])

    assert solution.selected_indices == [0, 3, 4]
    assert solution.min_objective == 3
    out = capsys.readouterr().out
    assert "Best selection: 3 items" in out

    results_dir = tmp_path / 'results'
    with open(results_dir / os.listdir(results_dir)[0], newline='') as f:
        rows = list(csv.reader(f))
    item_rows = [row for row in rows if row and row[0] in ('0', '3', '4')]
    assert len(item_rows) == 3


def test_exhaustive_and_no_dominance_agree(config_path):
    bb, _ = main(['--config', config_path, '--no-save', '--no-dominance'])
    ex, _ = main(['--config', config_path, '--no-save', '--exhaustive'])

    assert bb.min_objective == ex.min_objective
    assert bb.solution_sum == pytest.approx(ex.solution_sum)


def test_infeasible_run(config_path, capsys):
    solution, _ = main(['--config', config_path, '--no-save', '--threshold', '100'])

    assert not solution.feasible
    assert "No subset exceeds the threshold" in capsys.readouterr().out


def test_invalid_override(config_path):
    with pytest.raises(ValueError):
        main(['--config', config_path, '--threshold', '-1'])


def test_create_config(tmp_path):
    path = str(tmp_path / 'new.yaml')
    assert main(['--create-config', '--config', path]) is None
    assert os.path.exists(path)

    # Existing files are left alone
    before = open(path).read()
    main(['--create-config', '--config', path])
    assert open(path).read() == before


def test_validate_before_run(config_path, capsys):
    solution, _ = main(['--config', config_path, '--no-save', '--validate', '--quick',
                        '--n-items', '8'])

    assert "Validation passed" in capsys.readouterr().out
    assert solution is not None


def test_no_save_leaves_results_folder_alone(config_path, tmp_path):
    solution, _ = main(['--config', config_path, '--no-save'])

    assert solution is not None
    assert not (tmp_path / 'results').exists()
