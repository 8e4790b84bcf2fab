import logging
import os
import sys

import matplotlib.pyplot as plt
import numpy as np

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from nnets import RandomSource, XorNet

# --- Hyperparameters ---
epochs = 10000          # Full-batch passes over the four XOR samples
learning_rate = 0.5
log_every = 1000


def xor_train_example():
    """Trains the sigmoid XOR network with plain gradient descent."""
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger("XORExample")

    # --- Data ---
    train_data = [
        (np.array([0.0, 0.0], dtype=np.float32), 0.0),
        (np.array([0.0, 1.0], dtype=np.float32), 1.0),
        (np.array([1.0, 0.0], dtype=np.float32), 1.0),
        (np.array([1.0, 1.0], dtype=np.float32), 0.0),
    ]

    # --- Network ---
    random = RandomSource()  # seeded from OS entropy
    net = XorNet()
    net.init_weights(random)

    # --- Training ---
    error_grad = np.zeros(1, dtype=np.float32)
    losses = []
    for epoch in range(epochs):
        error = 0.0
        net.zero_grad()

        for inputs, expected in train_data:
            net.forward(inputs)
            error_grad[0] = net.output()[0] - expected
            error += 0.5 * float(error_grad[0]) ** 2
            net.backward(error_grad)

        net.step_grad(learning_rate)
        losses.append(error)

        if epoch % log_every == 0 or epoch == epochs - 1:
            logger.info(f"epoch={epoch}; error={error:.6f}")

    # --- Evaluation on slightly perturbed inputs ---
    for inputs, expected in train_data:
        x = inputs + np.array([0.1, -0.1], dtype=np.float32)
        net.forward(x)
        logger.info(f"x0={x[0]:.1f} x1={x[1]:.1f} y={net.output()[0]:.4f} (target {expected:.0f})")

    # --- Plotting History ---
    plt.figure("XOR Training History", figsize=(8, 5))
    plt.plot(losses, label='Training Loss')
    plt.xlabel('Epoch')
    plt.ylabel('Loss (squared error)')
    plt.title('XOR Training History')
    plt.legend()
    plt.grid(True, alpha=0.3)
    plt.ylim(bottom=0)
    plt.tight_layout()


if __name__ == "__main__":
    print("\n" + "="*40)
    print("--- Running XOR Training Example ---")
    print("="*40)
    xor_train_example()

    print("\nDisplaying plots. Close plot windows to exit.")
    plt.show()
