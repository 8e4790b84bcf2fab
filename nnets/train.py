"""
Training driver for classification datasets stored as CSV files.

Builds a ReLU network, trains it with mini-batch RMSProp on a squared error
loss against one-hot targets, lowers the learning rate after every epoch,
reports validation accuracy and writes predicted categories for the train
and test sets.
"""

import argparse
import logging
import os
import time
from typing import Dict, List, Optional, Sequence as SequenceType, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .dataset import Dataset, num_categories, read_dataset, write_predictions
from .layer import FullyConnected
from .module import Module
from .random_source import RandomSource
from .sequence import Sequence

# --- Hyperparameters ---
EPOCHS = 20
BATCH_SIZE = 200
INITIAL_LEARNING_RATE = 1e-4
GAMMA = 0.95                        # Learning rate multiplier applied after every epoch
RMS_PROP_HISTORY_INFLUENCE = 0.9
RMS_PROP_SMOOTHING_TERM = 1e-8
VALIDATION_FRACTION = 0.1
SEED = 1231331231231231
HIDDEN_SIZES = (300, 200, 100)

logger = logging.getLogger("nnets.train")


def build_network(input_size: int, num_outputs: int,
                  hidden_sizes: SequenceType[int] = HIDDEN_SIZES) -> Sequence:
    """Builds a sequence of ReLU fully connected layers: input -> hidden... -> num_outputs."""
    sizes = [input_size, *hidden_sizes, num_outputs]
    layers = [
        FullyConnected(sizes[i], sizes[i + 1], activation='relu', id=i)
        for i in range(len(sizes) - 1)
    ]
    logger.info(f"Created network with architecture: {sizes}")
    return Sequence(layers)


def squared_error(output: np.ndarray, label: int, grad_out: np.ndarray) -> float:
    """
    Half squared error against the one-hot encoding of `label`.

    Writes the gradient (output - target) into `grad_out` and returns
    0.5 * sum((output - target)^2).
    """
    np.copyto(grad_out, output)
    grad_out[label] -= 1.0
    return 0.5 * float(np.dot(grad_out, grad_out))


def split_validation(dataset: Dataset, fraction: float,
                     random: RandomSource) -> Tuple[Dataset, Dataset]:
    """
    Shuffles a copy of `dataset` and reserves its last `fraction` for validation.

    Returns:
        (train, validation) lists.

    Raises:
        ValueError: If fraction is outside [0, 1).
    """
    if not 0.0 <= fraction < 1.0:
        raise ValueError("validation fraction must be in [0.0, 1.0)")
    indices = random.rng.permutation(len(dataset))
    shuffled = [dataset[i] for i in indices]
    split_idx = int((1.0 - fraction) * len(shuffled))
    return shuffled[:split_idx], shuffled[split_idx:]


def predict_labels(net: Module, dataset: Dataset) -> List[int]:
    """Returns the category with the highest output for every sample."""
    predictions = []
    for inputs, _ in dataset:
        net.forward(inputs)
        predictions.append(int(np.argmax(net.output())))
    return predictions


def evaluate(net: Module, dataset: Dataset) -> float:
    """Fraction of samples whose predicted category equals the label (0.0 for an empty set)."""
    if not dataset:
        return 0.0
    predictions = predict_labels(net, dataset)
    correct = sum(1 for predicted, (_, label) in zip(predictions, dataset) if predicted == label)
    return correct / len(dataset)


def train(
    net: Module,
    train_set: Dataset,
    validation_set: Optional[Dataset],
    random: RandomSource,
    epochs: int = EPOCHS,
    batch_size: int = BATCH_SIZE,
    learning_rate: float = INITIAL_LEARNING_RATE,
    gamma: float = GAMMA,
    history_influence: float = RMS_PROP_HISTORY_INFLUENCE,
    smoothing_term: float = RMS_PROP_SMOOTHING_TERM,
) -> Dict[str, List]:
    """
    Trains `net` with mini-batch RMSProp.

    Every epoch shuffles the training set and splits it into mini-batches. For
    each batch the gradients are zeroed, accumulated over the samples and
    applied with one RMSProp step. The learning rate is multiplied by `gamma`
    after every epoch.

    Args:
        net: The network. Its weights should already be initialized.
        train_set: Training samples.
        validation_set: Samples for per-epoch accuracy, or None.
        random: Source of the shuffling order.
        epochs: Number of passes over the training set.
        batch_size: Samples per optimizer step.
        learning_rate: Initial learning rate.
        gamma: Learning rate multiplier applied after every epoch.
        history_influence: RMSProp decay of the squared gradient average.
        smoothing_term: RMSProp term keeping the denominator positive.

    Returns:
        Training history with keys 'epoch', 'loss', 'val_accuracy',
        'learning_rate' and 'time_per_epoch'.

    Raises:
        ValueError: If batch_size is not positive.
    """
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    num_samples = len(train_set)
    error_grad = np.zeros_like(net.output())

    history: Dict[str, List] = {
        'epoch': [],
        'loss': [],
        'val_accuracy': [],
        'learning_rate': [],
        'time_per_epoch': [],
    }

    for epoch in range(epochs):
        epoch_start_time = time.time()
        epoch_loss = 0.0
        order = random.rng.permutation(num_samples)

        for batch, batch_start in enumerate(range(0, num_samples, batch_size)):
            net.zero_grad()
            batch_loss = 0.0

            for k in order[batch_start:batch_start + batch_size]:
                inputs, label = train_set[k]
                net.forward(inputs)
                batch_loss += squared_error(net.output(), label, error_grad)
                net.backward(error_grad)

            net.step_grad_rms_prop(learning_rate, history_influence, smoothing_term)
            epoch_loss += batch_loss
            logger.debug(f"epoch={epoch} batch={batch} batch_error={batch_loss:.5f}")

        epoch_time = time.time() - epoch_start_time

        history['epoch'].append(epoch)
        history['loss'].append(epoch_loss)
        history['learning_rate'].append(learning_rate)
        history['time_per_epoch'].append(epoch_time)

        # Lower the learning rate
        learning_rate *= gamma

        val_accuracy = None
        if validation_set:
            val_accuracy = evaluate(net, validation_set)
        history['val_accuracy'].append(val_accuracy)

        msg = f"Epoch {epoch + 1}/{epochs} - loss: {epoch_loss:.5f}"
        if val_accuracy is not None:
            msg += f" - val_accuracy: {val_accuracy:.4f}"
        msg += f" - time: {epoch_time:.2f}s"
        logger.info(msg)

    logger.info("Training finished.")
    return history


def plot_history(history: Dict[str, List], filename: str):
    """Saves a plot of the training loss (and validation accuracy, if any) to `filename`."""
    fig, ax_loss = plt.subplots(figsize=(8, 5))
    ax_loss.plot(history['epoch'], history['loss'], label='Training Loss')
    ax_loss.set_xlabel('Epoch')
    ax_loss.set_ylabel('Loss (squared error)')
    ax_loss.grid(True, alpha=0.3)

    val_accuracy = [a for a in history['val_accuracy'] if a is not None]
    if len(val_accuracy) == len(history['epoch']):
        ax_acc = ax_loss.twinx()
        ax_acc.plot(history['epoch'], val_accuracy, color='tab:orange', label='Validation Accuracy')
        ax_acc.set_ylabel('Accuracy')
        ax_acc.set_ylim(0.0, 1.0)

    ax_loss.set_title('Training History')
    fig.tight_layout()
    fig.savefig(filename)
    plt.close(fig)
    logger.info(f"Saved training history plot to {filename}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Train a fully connected classifier on CSV data.")
    parser.add_argument('--train-vectors', default='data/fashion_mnist_train_vectors.csv')
    parser.add_argument('--train-labels', default='data/fashion_mnist_train_labels.csv')
    parser.add_argument('--test-vectors', default='data/fashion_mnist_test_vectors.csv')
    parser.add_argument('--test-labels', default='data/fashion_mnist_test_labels.csv')
    parser.add_argument('--train-predictions', default='trainPredictions')
    parser.add_argument('--test-predictions', default='actualTestPredictions')
    parser.add_argument('--epochs', type=int, default=EPOCHS)
    parser.add_argument('--batch-size', type=int, default=BATCH_SIZE)
    parser.add_argument('--learning-rate', type=float, default=INITIAL_LEARNING_RATE)
    parser.add_argument('--gamma', type=float, default=GAMMA)
    parser.add_argument('--validation-fraction', type=float, default=VALIDATION_FRACTION)
    parser.add_argument('--hidden-sizes', type=int, nargs='+', default=list(HIDDEN_SIZES))
    parser.add_argument('--seed', type=int, default=SEED)
    parser.add_argument('--plot', default=None, help="Save a training history plot to this file")
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level,
                        format='%(asctime)s %(name)s %(levelname)s %(message)s')

    start_time = time.time()
    random = RandomSource(args.seed)

    # Read train dataset
    full_train_dataset = read_dataset(args.train_vectors, args.train_labels)
    if not full_train_dataset:
        logger.error(f"No training samples in {args.train_vectors}")
        return 1
    input_vector_size = full_train_dataset[0][0].shape[0]
    categories = num_categories(full_train_dataset)
    logger.info(f"train_dataset_size={len(full_train_dataset)}")
    logger.info(f"input_vector_size={input_vector_size}")
    logger.info(f"num_categories={categories}")

    # Reserve part of train data for validation
    train_dataset, validation_dataset = split_validation(
        full_train_dataset, args.validation_fraction, random)
    logger.info(f"Training on {len(train_dataset)} samples, validating on {len(validation_dataset)} samples.")

    net = build_network(input_vector_size, categories, args.hidden_sizes)
    net.init_weights(random)
    logger.debug(net.summary())

    history = train(
        net, train_dataset, validation_dataset, random,
        epochs=args.epochs,
        batch_size=args.batch_size,
        learning_rate=args.learning_rate,
        gamma=args.gamma,
    )

    # Evaluate full train dataset
    train_predictions = predict_labels(net, full_train_dataset)
    train_success = np.mean([p == label for p, (_, label) in zip(train_predictions, full_train_dataset)])
    logger.info(f"final train dataset success rate {train_success:.4f}")
    write_predictions(args.train_predictions, train_predictions)

    # Read and evaluate test dataset
    if os.path.exists(args.test_vectors) and os.path.exists(args.test_labels):
        test_dataset = read_dataset(args.test_vectors, args.test_labels)
        test_predictions = predict_labels(net, test_dataset)
        if test_dataset:
            test_success = np.mean([p == label for p, (_, label) in zip(test_predictions, test_dataset)])
            logger.info(f"final test dataset success rate {test_success:.4f}")
        write_predictions(args.test_predictions, test_predictions)
    else:
        logger.warning(f"Test dataset not found ({args.test_vectors}, {args.test_labels}); skipping.")

    if args.plot:
        plot_history(history, args.plot)

    logger.info(f"Total runtime: {time.time() - start_time:.0f} seconds")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
