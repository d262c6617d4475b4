"""
LayerBuilder - Utility for constructing layered neural networks
"""

import numpy as np
from typing import List, Optional, Sequence, Tuple, Union

from ..activations import Activation, get_activation
from ..graph import Node
from .neural_network import NeuralNetwork


class LayerBuilder:
    """
    Build neural networks layer by layer.

    Node ids are assigned in layer order starting at 0. Weights of the
    connections are sampled from the standard normal distribution and
    biases start at zero.

    Example:
        >>> builder = LayerBuilder()
        >>> inputs = builder.add_layer(2, 'identity')
        >>> outputs = builder.add_layer(1, 'sigmoid')
        >>> builder.connect_layers_full(inputs, outputs)
        >>> net = builder.build(seed=0)
    """

    def __init__(self):
        """Initialize builder."""
        self.edges: List[Tuple[int, int]] = []
        self.layers: List[List[int]] = []
        self.activations: List[Activation] = []
        self.current_node_id = 0

    def add_layer(self, size: int, activation: Union[str, Activation] = Activation.IDENTITY) -> List[int]:
        """
        Add a layer with specified number of nodes.

        Args:
            size: Number of nodes in this layer
            activation: Activation shared by every node of the layer

        Returns:
            node_ids: List of node IDs in this layer
        """
        if size < 1:
            raise ValueError(f"layer size must be positive, got {size}")
        activation = get_activation(activation)

        node_ids = list(range(self.current_node_id, self.current_node_id + size))
        self.current_node_id += size
        self.layers.append(node_ids)
        self.activations.append(activation)
        return node_ids

    def connect_layers_full(self, src_layer: Sequence[int], dst_layer: Sequence[int]):
        """
        Fully connect two layers (standard MLP connectivity).

        Args:
            src_layer: Source layer node IDs
            dst_layer: Destination layer node IDs
        """
        for src in src_layer:
            for dst in dst_layer:
                self.edges.append((src, dst))

    def build(self, learning_rate: float = 0.1, seed: Optional[int] = None) -> NeuralNetwork:
        """
        Build the network.

        Args:
            learning_rate: Learning rate of the new network
            seed: Random seed for weight initialization

        Returns:
            network: NeuralNetwork with every recorded layer and connection
        """
        if seed is not None:
            np.random.seed(seed)

        network = NeuralNetwork(self.current_node_id, learning_rate=learning_rate)
        for layer, activation in zip(self.layers, self.activations):
            for node_id in layer:
                network.set_node(node_id, Node(activation=activation))
            network.add_layer(layer)

        for src, dst in self.edges:
            network.set_edge(src, dst, float(np.random.randn()))

        return network

    @staticmethod
    def mlp(
        layer_sizes: Sequence[int],
        activations: Union[None, str, Activation, Sequence[Union[str, Activation]]] = None,
        learning_rate: float = 0.1,
        seed: Optional[int] = None
    ) -> NeuralNetwork:
        """
        Build a standard MLP with fully connected consecutive layers.

        Args:
            layer_sizes: Number of nodes per layer, e.g., [8, 16, 1]
            activations: One activation per layer, or a single one for all layers.
                Defaults to identity inputs, ReLU hidden layers and a sigmoid output.
            learning_rate: Learning rate for gradient descent
            seed: Random seed

        Returns:
            network: The new NeuralNetwork

        Example:
            >>> net = LayerBuilder.mlp([8, 16, 1], seed=42)
        """
        if len(layer_sizes) < 2:
            raise ValueError(f"Neural Network must have at least 2 layers, but got {len(layer_sizes)} layers")

        if activations is None:
            activations = ([Activation.IDENTITY]
                           + [Activation.RELU] * (len(layer_sizes) - 2)
                           + [Activation.SIGMOID])
        elif isinstance(activations, (str, Activation)):
            activations = [activations] * len(layer_sizes)
        elif len(activations) != len(layer_sizes):
            raise ValueError(f"Expected {len(layer_sizes)} activations, got {len(activations)}")

        builder = LayerBuilder()

        layers = []
        for size, activation in zip(layer_sizes, activations):
            layers.append(builder.add_layer(size, activation))

        # Connect consecutive layers
        for i in range(len(layers) - 1):
            builder.connect_layers_full(layers[i], layers[i + 1])

        return builder.build(learning_rate=learning_rate, seed=seed)
