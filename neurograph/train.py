"""
Training loop driver
"""

import logging
import os
from typing import Callable, List, Optional

from .ai.neural_network import NeuralNetwork
from .data import DataLoader

logger = logging.getLogger(__name__)


def train(
    network: NeuralNetwork,
    train_data,
    test_data,
    epochs: int = 4,
    learning_rate: Optional[float] = 0.001,
    on_epoch: Optional[Callable[[int, float], None]] = None
) -> List[float]:
    """
    Train ``network`` with full-batch gradient descent.

    Each epoch predicts every training instance in train mode (accumulating
    gradients), assesses the test set, then applies one update.

    Args:
        network: Network to train in place
        train_data: DataLoader, CSV path or sequence of DataInstance
        test_data: DataLoader, CSV path or sequence of DataInstance
        epochs: Number of passes over the training data
        learning_rate: Learning rate override; ``None`` keeps the network's own
        on_epoch: Called with ``(epoch, accuracy)`` after each epoch's assessment

    Returns:
        accuracies: Test accuracy measured during each epoch
    """
    if isinstance(train_data, (str, os.PathLike)):
        train_data = DataLoader(train_data)
    if isinstance(test_data, (str, os.PathLike)):
        test_data = DataLoader(test_data)
    train_data = list(train_data)
    test_data = list(test_data)

    if learning_rate is not None:
        network.learning_rate = learning_rate
    network.train()

    accuracies = []
    for epoch in range(epochs):
        for instance in train_data:
            network.predict(instance, strict=True)
        accuracy = network.assess(test_data)
        accuracies.append(accuracy)
        logger.info("epoch: %d accuracy: %.4f", epoch, accuracy)
        if on_epoch is not None:
            on_epoch(epoch, accuracy)
        network.update()

    return accuracies
