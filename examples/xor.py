import logging
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from nnets import XorNet


def xor_known_weights_example():
    """Evaluates the XOR network with hand-set unit-step weights."""
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger("XORKnownWeights")

    net = XorNet()
    net.set_correct_weights()

    inputs = [(0.0, 0.0), (0.0, 1.0), (1.0, 0.0), (1.0, 1.0)]
    for x in inputs:
        net.forward(list(x))
        logger.info(f"Input: {x} -> Output: {net.output()[0]:.0f}")


if __name__ == "__main__":
    print("\n" + "="*40)
    print("--- XOR With Known Weights ---")
    print("="*40)
    xor_known_weights_example()
