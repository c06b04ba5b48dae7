import os

import pytest
import yaml

from config import create_default_config, load_config, validate_config


def write_config(path, data):
    with open(path, 'w') as f:
        yaml.dump(data, f)
    return str(path)


def base_config(tmp_path):
    return {
        'problem': {'threshold': 1.0, 'min_row_sum': 0.0},
        'generator': {'n_items': 10, 'seed': 1},
        'paths': {'results_folder': str(tmp_path / 'results')},
        'search': {'show_progress_bar': False},
    }


def test_default_config_round_trip(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    create_default_config('config.yaml')
    config = load_config('config.yaml')

    assert config.problem.threshold == 6.5
    assert config.problem.min_row_sum == 0.025
    assert config.generator.n_items == 50
    assert config.search.search_mode == 'branch-bound'
    assert config.search.use_dominance
    assert not os.path.exists(config.paths.results_folder)


def test_optional_sections_use_defaults(tmp_path):
    path = write_config(tmp_path / 'c.yaml', {'problem': {'threshold': 2.0},
                                               'search': {'save_results': False}})
    config = load_config(path)

    assert config.problem.min_row_sum == 0.0
    assert config.generator.max_score == 0.5
    assert config.paths.score_matrix == ""
    assert not config.visualization.verbose_output
    assert config._config_path == path


def test_missing_file():
    with pytest.raises(FileNotFoundError):
        load_config('does_not_exist.yaml')


def test_empty_file(tmp_path):
    path = tmp_path / 'empty.yaml'
    path.write_text('')
    with pytest.raises(ValueError):
        load_config(str(path))


def test_missing_problem_section(tmp_path):
    path = write_config(tmp_path / 'c.yaml', {'generator': {'n_items': 5}})
    with pytest.raises(ValueError, match='problem'):
        load_config(path)


def test_unknown_key(tmp_path):
    data = base_config(tmp_path)
    data['search']['beam_width'] = 3
    with pytest.raises(ValueError):
        load_config(write_config(tmp_path / 'c.yaml', data))


@pytest.mark.parametrize("section,key,value", [
    ('problem', 'threshold', -1.0),
    ('problem', 'threshold', 'high'),
    ('problem', 'min_row_sum', -0.1),
    ('generator', 'n_items', 0),
    ('generator', 'seed', 1.5),
    ('generator', 'resolution', 1.0),
    ('search', 'search_mode', 'greedy'),
])
def test_invalid_values(tmp_path, section, key, value):
    data = base_config(tmp_path)
    data[section][key] = value
    with pytest.raises(ValueError):
        load_config(write_config(tmp_path / 'c.yaml', data))


def test_validate_config_after_override(tmp_path):
    config = load_config(write_config(tmp_path / 'c.yaml', base_config(tmp_path)))
    config.problem.threshold = float('inf')
    with pytest.raises(ValueError):
        validate_config(config)


def test_loading_does_not_create_results_folder(tmp_path):
    data = base_config(tmp_path)
    data['search']['save_results'] = True
    load_config(write_config(tmp_path / 'c.yaml', data))

    assert not (tmp_path / 'results').exists()
