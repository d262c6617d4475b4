"""
neurograph.ai - Neural network on graph structures

This module treats graphs as neural computation substrates where:
- Nodes are neurons with activation states and bias gradients
- Edges are weighted connections with weight gradients
- Forward propagation is a breadth-first walk from the input layer
- Backpropagation is a memoized traversal back from the output layer
"""

from .neural_network import NeuralNetwork, Mode, TrainingState
from .layers import LayerBuilder
from .serialization import load_model, loads_model, save_model, dumps_model
from .visualize import architecture_stats, print_architecture_stats

__all__ = [
    'NeuralNetwork',
    'Mode',
    'TrainingState',
    'LayerBuilder',
    'load_model',
    'loads_model',
    'save_model',
    'dumps_model',
    'architecture_stats',
    'print_architecture_stats',
]
