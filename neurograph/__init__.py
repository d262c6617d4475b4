"""
neurograph - Minimal neural network engine built on a mutable directed graph
"""

from .activations import Activation, get_activation, lookup, identifier_of, available_activations
from .exceptions import (
    NeuroGraphError,
    GraphError,
    UnknownNodeError,
    UnknownActivationError,
    InputSizeMismatchError,
    MalformedModelFileError,
    MalformedDatasetError,
    EmptyDatasetError,
)
from .graph import Graph, Node, Edge
from .data import DataInstance, DataLoader, normalize

# Import neural network layer
from .ai import NeuralNetwork, LayerBuilder, load_model, save_model
from .train import train

# Import conversion utilities
from .convert import to_networkx

__version__ = "0.1.0"

__all__ = [
    'Activation',
    'get_activation',
    'lookup',
    'identifier_of',
    'available_activations',
    'NeuroGraphError',
    'GraphError',
    'UnknownNodeError',
    'UnknownActivationError',
    'InputSizeMismatchError',
    'MalformedModelFileError',
    'MalformedDatasetError',
    'EmptyDatasetError',
    'Graph',
    'Node',
    'Edge',
    'DataInstance',
    'DataLoader',
    'normalize',
    'NeuralNetwork',
    'LayerBuilder',
    'load_model',
    'save_model',
    'train',
    'to_networkx',
    'ai',
]
