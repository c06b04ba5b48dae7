import numpy as np
import pandas as pd
import pytest

from inputs import (generate_random_matrix, load_score_matrix, save_score_matrix,
                    validate_score_matrix)


def test_generate_random_matrix_on_grid():
    matrix = generate_random_matrix(200, seed=1)

    assert matrix.shape == (200, 3)
    assert matrix.min() >= 0.0
    assert matrix.max() <= 0.49
    np.testing.assert_allclose(matrix * 100, np.round(matrix * 100))


def test_generate_random_matrix_seeded():
    np.testing.assert_array_equal(generate_random_matrix(20, seed=3),
                                  generate_random_matrix(20, seed=3))


def test_generate_random_matrix_rejects_bad_arguments():
    with pytest.raises(ValueError):
        generate_random_matrix(-1)
    with pytest.raises(ValueError):
        generate_random_matrix(5, resolution=0.0)


@pytest.mark.parametrize("matrix", [
    np.array([[0.1, -0.2, 0.3]]),
    np.array([[0.1, np.nan, 0.3]]),
    np.array([[0.1, 0.2]]),
])
def test_validate_score_matrix_rejects(matrix):
    with pytest.raises(ValueError):
        validate_score_matrix(matrix)


def test_validate_score_matrix_accepts_empty():
    assert validate_score_matrix([]).shape == (0, 3)


def test_save_and_load_score_matrix(tmp_path):
    matrix = np.array([[0.1, 0.2, 0.3], [0.4, 0.0, 0.25]])
    path = save_score_matrix(matrix, str(tmp_path / "in" / "scores.csv"), indices=[5, 9])

    indices, loaded = load_score_matrix(path)
    assert indices.tolist() == [5, 9]
    np.testing.assert_allclose(loaded, matrix)


def test_load_score_matrix_without_index_column(tmp_path):
    path = tmp_path / "scores.csv"
    pd.DataFrame({"score_0": [1.0, 2.0], "score_1": [0.0, 1.0], "score_2": [3.0, 0.5]}).to_csv(
        path, index=False)

    indices, matrix = load_score_matrix(str(path))
    assert indices.tolist() == [0, 1]
    assert matrix.shape == (2, 3)


def test_load_score_matrix_missing_column(tmp_path):
    path = tmp_path / "scores.csv"
    pd.DataFrame({"score_0": [1.0], "score_1": [0.0]}).to_csv(path, index=False)
    with pytest.raises(ValueError):
        load_score_matrix(str(path))


def test_load_score_matrix_negative_scores(tmp_path):
    path = tmp_path / "scores.csv"
    pd.DataFrame({"score_0": [1.0], "score_1": [-1.0], "score_2": [0.0]}).to_csv(path, index=False)
    with pytest.raises(ValueError):
        load_score_matrix(str(path))


def test_load_score_matrix_duplicate_indices(tmp_path):
    path = tmp_path / "scores.csv"
    pd.DataFrame({"item": [1, 1], "score_0": [1.0, 1.0], "score_1": [0.0, 0.0],
                  "score_2": [0.0, 0.0]}).to_csv(path, index=False)
    with pytest.raises(ValueError):
        load_score_matrix(str(path))


def test_load_score_matrix_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_score_matrix(str(tmp_path / "missing.csv"))
