"""
Dataset helpers: CSV input vectors paired with integer category labels.

The vectors file holds one comma-separated vector per line; the labels file
holds one integer label per line, in the same order.
"""

import logging
import os
import re
from typing import Iterable, List, Tuple

import numpy as np
import pandas as pd

# Pairs of input vectors and expected output categories
Dataset = List[Tuple[np.ndarray, int]]

_LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")


def parse_integer(text: str) -> int:
    """
    Reads the leading integer of `text`, C `atoi` style.

    Leading whitespace is skipped and anything after the digits is ignored, so
    "1.5" -> 1 and "-2.7" -> -2. Text without a leading integer reads as 0.
    """
    match = _LEADING_INTEGER.match(text)
    return int(match.group(1)) if match else 0


def parse_input_vector(text: str) -> np.ndarray:
    """
    Parses one line of the vectors file: "0,1,0,2" -> array([0., 1., 0., 2.]).

    Parsing stops at the first empty field. Each field is read with
    `parse_integer`.
    """
    values = []
    for field in text.rstrip('\r\n').split(','):
        if not field:
            break
        values.append(parse_integer(field))
    return np.array(values, dtype=np.float32)


def _check_exists(path: str):
    if not os.path.exists(path):
        logging.error(f"Dataset file not found: {path}")
        raise FileNotFoundError(path)


def read_dataset(inputs_path: str, labels_path: str) -> Dataset:
    """
    Reads a dataset from a vectors file and an expected-categories file.

    Lines are paired in order. Reading stops at the end of the shorter file or
    at the first line of the vectors file that holds no values.

    Args:
        inputs_path: CSV file with one input vector per line.
        labels_path: File with one integer label per line.

    Returns:
        List of (input vector, label) pairs. Vectors are float32 arrays.

    Raises:
        FileNotFoundError: If either file does not exist.
    """
    _check_exists(inputs_path)
    _check_exists(labels_path)

    dataset = []
    with open(inputs_path) as inputs_file, open(labels_path) as labels_file:
        for line_number, (input_line, label_line) in enumerate(zip(inputs_file, labels_file), start=1):
            input_vector = parse_input_vector(input_line)
            if input_vector.size == 0:
                logging.warning(f"Empty vector on line {line_number} of {inputs_path}; stopped reading.")
                break
            dataset.append((input_vector, parse_integer(label_line)))

    if dataset:
        logging.info(f"Read {len(dataset)} samples of size {dataset[0][0].size} from {inputs_path}")
    else:
        logging.warning(f"No samples read from {inputs_path}.")
    return dataset


def write_predictions(predictions_path: str, predictions: Iterable[int]):
    """Writes predictions into a file, one integer per line."""
    series = pd.Series(list(predictions), dtype=np.int64)
    series.to_csv(predictions_path, header=False, index=False)
    logging.info(f"Wrote {len(series)} predictions to {predictions_path}")


def num_categories(dataset: Dataset) -> int:
    """Counts the total number of categories in a dataset (max label + 1)."""
    if not dataset:
        return 0
    return max(label for _, label in dataset) + 1
