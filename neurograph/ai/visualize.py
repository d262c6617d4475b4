"""
Architecture statistics for neural networks - see topology, connectivity and weights
"""

import numpy as np
from typing import Any, Dict

from .neural_network import NeuralNetwork


def architecture_stats(network: NeuralNetwork) -> Dict[str, Any]:
    """
    Compute statistics about the network architecture.

    Returns:
        stats: Dictionary with architecture statistics

    Example:
        >>> stats = architecture_stats(net)
        >>> print(f"Sparsity: {stats['sparsity']:.2%}")
    """
    n_nodes = network.num_nodes()
    n_edges = network.num_edges()

    # Maximum possible edges for a feedforward network
    if network.layers:
        max_edges = 0
        for i in range(len(network.layers) - 1):
            max_edges += len(network.layers[i]) * len(network.layers[i + 1])
    else:
        max_edges = n_nodes * (n_nodes - 1)

    sparsity = 1.0 - (n_edges / max_edges) if max_edges > 0 else 0.0

    degrees = np.array([len(network.neighbors(node)) for node in range(n_nodes)], dtype=float)
    weights = np.array([edge.weight for edge in network.edges()], dtype=float)
    biases = np.array([node.bias for node in network.nodes()], dtype=float)

    def _summary(values, prefix):
        if values.size == 0:
            return {f'{prefix}_{key}': 0.0 for key in ('mean', 'std', 'min', 'max')}
        return {
            f'{prefix}_mean': float(values.mean()),
            f'{prefix}_std': float(values.std()),
            f'{prefix}_min': float(values.min()),
            f'{prefix}_max': float(values.max()),
        }

    stats = {
        'n_nodes': n_nodes,
        'n_edges': n_edges,
        'max_possible_edges': max_edges,
        'sparsity': sparsity,
        'avg_degree': float(degrees.mean()) if n_nodes else 0.0,
        'max_degree': int(degrees.max()) if n_nodes else 0,
        'min_degree': int(degrees.min()) if n_nodes else 0,
        'learning_rate': network.learning_rate,
        'mode': network.state.mode.value,
    }
    stats.update(_summary(weights, 'weight'))
    stats.update(_summary(biases, 'bias'))

    if network.layers:
        stats['n_layers'] = len(network.layers)
        stats['layer_sizes'] = [len(layer) for layer in network.layers]
        stats['layer_activations'] = [
            network.get_node(layer[0]).activation.identifier if layer else None
            for layer in network.layers
        ]

    return stats


def print_architecture_stats(network: NeuralNetwork) -> None:
    """
    Print formatted architecture statistics.

    Example:
        >>> from neurograph.ai import print_architecture_stats
        >>> print_architecture_stats(net)
    """
    stats = architecture_stats(network)

    print("\n" + "="*60)
    print("Neural Network Architecture Statistics")
    print("="*60)

    print(f"\nTopology:")
    print(f"  Nodes: {stats['n_nodes']}")
    print(f"  Connections: {stats['n_edges']}")
    print(f"  Max possible: {stats['max_possible_edges']}")
    print(f"  Sparsity: {stats['sparsity']:.2%}")

    print(f"\nConnectivity:")
    print(f"  Avg out-degree: {stats['avg_degree']:.2f}")
    print(f"  Out-degree range: [{stats['min_degree']}, {stats['max_degree']}]")

    print(f"\nWeights:")
    print(f"  Mean: {stats['weight_mean']:.4f} ± {stats['weight_std']:.4f}")
    print(f"  Range: [{stats['weight_min']:.4f}, {stats['weight_max']:.4f}]")

    print(f"\nBiases:")
    print(f"  Mean: {stats['bias_mean']:.4f} ± {stats['bias_std']:.4f}")
    print(f"  Range: [{stats['bias_min']:.4f}, {stats['bias_max']:.4f}]")

    if 'n_layers' in stats:
        print(f"\nLayers:")
        print(f"  Number of layers: {stats['n_layers']}")
        print(f"  Layer sizes: {stats['layer_sizes']}")
        print(f"  Activations: {stats['layer_activations']}")

    print("="*60 + "\n")
