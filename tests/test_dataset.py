from pathlib import Path

import numpy as np
import pytest

from nnets.dataset import (
    num_categories,
    parse_input_vector,
    parse_integer,
    read_dataset,
    write_predictions,
)


def write_lines(path: Path, lines):
    path.write_text("".join(f"{line}\n" for line in lines))


def test_parse_input_vector():
    np.testing.assert_array_equal(parse_input_vector("0,1,0,2"), [0.0, 1.0, 0.0, 2.0])
    np.testing.assert_array_equal(parse_input_vector("3,4,"), [3.0, 4.0])
    assert parse_input_vector("").size == 0
    assert parse_input_vector("5").dtype == np.float32


@pytest.mark.parametrize("text, expected", [
    ("7", 7),
    (" 12", 12),
    ("-3", -3),
    ("1.5", 1),
    ("-2.7", -2),
    ("4abc", 4),
    ("abc", 0),
    ("", 0),
])
def test_parse_integer_reads_leading_digits(text, expected):
    assert parse_integer(text) == expected


def test_parse_input_vector_truncates_fractions():
    np.testing.assert_array_equal(parse_input_vector("1.5,-2.7,x,3\n"), [1.0, -2.0, 0.0, 3.0])


def test_read_dataset_pairs_vectors_with_labels(tmp_path: Path):
    vectors = tmp_path / "vectors.csv"
    labels = tmp_path / "labels.csv"
    write_lines(vectors, ["0,1,2", "3,4,5", "6,7,8"])
    write_lines(labels, ["2", "0", "1"])

    dataset = read_dataset(str(vectors), str(labels))

    assert len(dataset) == 3
    np.testing.assert_array_equal(dataset[1][0], [3.0, 4.0, 5.0])
    assert dataset[1][0].dtype == np.float32
    assert [label for _, label in dataset] == [2, 0, 1]
    assert all(isinstance(label, int) for _, label in dataset)


def test_read_dataset_stops_at_shorter_file(tmp_path: Path):
    vectors = tmp_path / "vectors.csv"
    labels = tmp_path / "labels.csv"
    write_lines(vectors, ["1,1", "2,2", "3,3"])
    write_lines(labels, ["0", "1"])

    dataset = read_dataset(str(vectors), str(labels))

    assert len(dataset) == 2
    np.testing.assert_array_equal(dataset[-1][0], [2.0, 2.0])


def test_read_dataset_ignores_trailing_commas(tmp_path: Path):
    vectors = tmp_path / "vectors.csv"
    labels = tmp_path / "labels.csv"
    write_lines(vectors, ["1,2,", "3,4,"])
    write_lines(labels, ["0", "1"])

    dataset = read_dataset(str(vectors), str(labels))

    assert dataset[0][0].shape == (2,)


def test_read_dataset_empty_files(tmp_path: Path):
    vectors = tmp_path / "vectors.csv"
    labels = tmp_path / "labels.csv"
    vectors.write_text("")
    labels.write_text("")
    assert read_dataset(str(vectors), str(labels)) == []


def test_read_dataset_missing_file(tmp_path: Path):
    labels = tmp_path / "labels.csv"
    write_lines(labels, ["0"])
    with pytest.raises(FileNotFoundError):
        read_dataset(str(tmp_path / "missing.csv"), str(labels))


def test_num_categories():
    dataset = [(np.zeros(2), 0), (np.zeros(2), 4), (np.zeros(2), 2)]
    assert num_categories(dataset) == 5
    assert num_categories([]) == 0


def test_write_predictions_one_value_per_line(tmp_path: Path):
    path = tmp_path / "predictions"
    write_predictions(str(path), [3, 0, 9, 1])
    assert path.read_text().splitlines() == ["3", "0", "9", "1"]


def test_read_dataset_stops_at_empty_vector_line(tmp_path: Path):
    vectors = tmp_path / "vectors.csv"
    labels = tmp_path / "labels.csv"
    write_lines(vectors, ["1,1", "2,2", "", "3,3"])
    write_lines(labels, ["0", "1", "2", "3"])

    dataset = read_dataset(str(vectors), str(labels))

    assert len(dataset) == 2
    np.testing.assert_array_equal(dataset[-1][0], [2.0, 2.0])
    assert [label for _, label in dataset] == [0, 1]


def test_read_dataset_truncates_fractional_values(tmp_path: Path):
    vectors = tmp_path / "vectors.csv"
    labels = tmp_path / "labels.csv"
    write_lines(vectors, ["1.5,2.9", "-0.5,3"])
    write_lines(labels, ["1.7", "0"])

    dataset = read_dataset(str(vectors), str(labels))

    np.testing.assert_array_equal(dataset[0][0], [1.0, 2.0])
    np.testing.assert_array_equal(dataset[1][0], [0.0, 3.0])
    assert [label for _, label in dataset] == [1, 0]
