"""
NeuralNetwork - a neural network whose state lives directly on a Graph

Forward evaluation is a breadth-first propagation from the input layer.
Backpropagation is a memoized post-order traversal of the graph: the
gradient of the loss with respect to a node's pre-activation (its
"contribution") is computed once per pass and shared by every predecessor.
"""

import logging
import math
import os
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

from ..data import DataInstance, DataLoader
from ..exceptions import EmptyDatasetError, GraphError, InputSizeMismatchError
from ..graph import Graph

logger = logging.getLogger(__name__)

# Keeps the log-loss gradient finite when a sigmoid output saturates
_PROBABILITY_EPSILON = 1e-12


class Mode(Enum):
    TRAIN = 'train'
    EVAL = 'eval'


@dataclass
class TrainingState:
    """
    Runtime configuration of a network.

    Attributes:
        learning_rate: Step size used by ``update``
        mode: TRAIN accumulates gradients on every prediction, EVAL does not
        pending_examples: Examples accumulated since the last update. Informational
            only: gradients are summed, never divided by this count.
    """

    learning_rate: float = 0.1
    mode: Mode = Mode.TRAIN
    pending_examples: int = 0


class NeuralNetwork(Graph):
    """
    A feed-forward neural network built on :class:`~neurograph.graph.Graph`.

    Key concepts:
    - Each node is a neuron with pre/post activation values, a bias and a bias gradient
    - Each edge has a weight and a weight gradient
    - ``layers`` partitions node ids; the first layer is the input, the last the output
    - Gradients accumulate across ``predict`` calls in train mode until ``update``

    The forward pass assumes a layered topology (every predecessor of a node
    sits in an earlier layer at the same distance from the inputs), as built
    by :class:`~neurograph.ai.layers.LayerBuilder` and the model loader.

    Attributes:
        layers: Node ids of each layer, in creation order
        state: Learning rate, mode and pending example count
    """

    def __init__(self, size: int = 0, learning_rate: float = 0.1):
        """
        Initialize an empty network.

        Args:
            size: Number of nodes to allocate
            learning_rate: Learning rate for gradient descent
        """
        super().__init__(size)
        self.layers: List[List[int]] = []
        self.state = TrainingState(learning_rate=learning_rate)
        self._input_node_ids: Optional[List[int]] = None
        self._output_node_ids: Optional[List[int]] = None
        self._contributions: Dict[int, float] = {}

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def train(self):
        """Put the network in train mode: predictions accumulate gradients."""
        self.state.mode = Mode.TRAIN

    def eval(self):
        """Put the network in eval mode: no gradients are accumulated."""
        self.state.mode = Mode.EVAL

    @property
    def training(self) -> bool:
        return self.state.mode is Mode.TRAIN

    @property
    def learning_rate(self) -> float:
        return self.state.learning_rate

    @learning_rate.setter
    def learning_rate(self, value: float):
        self.state.learning_rate = float(value)

    @property
    def pending_examples(self) -> int:
        return self.state.pending_examples

    @property
    def input_node_ids(self) -> List[int]:
        if self._input_node_ids is not None:
            return list(self._input_node_ids)
        return list(self.layers[0]) if self.layers else []

    @input_node_ids.setter
    def input_node_ids(self, node_ids: Sequence[int]):
        for node_id in node_ids:
            self._check_node(node_id)
        self._input_node_ids = list(node_ids)

    @property
    def output_node_ids(self) -> List[int]:
        if self._output_node_ids is not None:
            return list(self._output_node_ids)
        return list(self.layers[-1]) if self.layers else []

    @output_node_ids.setter
    def output_node_ids(self, node_ids: Sequence[int]):
        for node_id in node_ids:
            self._check_node(node_id)
        self._output_node_ids = list(node_ids)

    def add_layer(self, node_ids: Sequence[int]) -> List[int]:
        """
        Register existing nodes as the next layer.

        Args:
            node_ids: Ids of nodes not yet assigned to a layer

        Returns:
            layer: The registered layer
        """
        assigned = {node_id for layer in self.layers for node_id in layer}
        layer = list(node_ids)
        for node_id in layer:
            self._check_node(node_id)
            if node_id in assigned:
                raise GraphError(f"node {node_id} already belongs to a layer")
            assigned.add(node_id)
        self.layers.append(layer)
        return layer

    # ------------------------------------------------------------------
    # Forward pass
    # ------------------------------------------------------------------

    def predict(self, features, label: Optional[int] = None, strict: bool = False) -> List[float]:
        """
        Forward propagation through the network.

        In train mode the prediction is followed by a backward pass that
        accumulates gradients for ``label``; in eval mode node values are
        simply flushed.

        Args:
            features: Input values (one per input node), or a DataInstance
            label: True label, required in train mode unless ``features`` is a DataInstance
            strict: Raise on an input size mismatch instead of returning ``[]``

        Returns:
            outputs: Post-activation values of the output nodes, or ``[]`` if
                the input size does not match the input layer

        Raises:
            GraphError: If the network has no output nodes
        """
        if isinstance(features, DataInstance):
            if label is None:
                label = features.y
            features = features.x

        input_ids = self.input_node_ids
        if len(features) != len(input_ids):
            error = InputSizeMismatchError(len(input_ids), len(features))
            if strict:
                raise error
            logger.error("%s", error)
            return []
        output_ids = self.output_node_ids
        if not output_ids:
            raise GraphError("network has no output nodes")
        if self.training and label is None:
            raise ValueError("a label is required to predict in train mode")

        queue = deque()
        visited = [False] * self.num_nodes()
        for node_id, value in zip(input_ids, features):
            self._nodes[node_id].pre_activation = float(value)
            visited[node_id] = True
            queue.append(node_id)

        while queue:
            current = queue.popleft()
            node = self._nodes[current]
            node.pre_activation += node.bias
            node.activate()
            for dest, edge in self._adjacency[current].items():
                self._nodes[dest].pre_activation += node.post_activation * edge.weight
                if not visited[dest]:
                    visited[dest] = True
                    queue.append(dest)

        outputs = [self._nodes[node_id].post_activation for node_id in output_ids]

        if self.training:
            self.state.pending_examples += 1
            self._contribute(label, outputs[0])
        else:
            self.flush()
        return outputs

    def flush(self):
        """Zero every node's activation values and drop cached contributions."""
        for node in self._nodes:
            node.flush()
        self._contributions.clear()

    # ------------------------------------------------------------------
    # Backward pass
    # ------------------------------------------------------------------

    def _contribute(self, label: float, predicted: float):
        predicted = min(max(predicted, _PROBABILITY_EPSILON), 1.0 - _PROBABILITY_EPSILON)
        try:
            for source in self.input_node_ids:
                node = self._nodes[source]
                for dest, edge in self._adjacency[source].items():
                    contribution = self._resolve_contribution(dest, label, predicted)
                    edge.weight_gradient += contribution * node.post_activation
        finally:
            self.flush()

    def _resolve_contribution(self, root: int, label: float, predicted: float) -> float:
        """
        Contribution of ``root``, resolving its descendants first.

        Post-order traversal with an explicit stack; each node is computed
        once per pass thanks to ``self._contributions``.
        """
        contributions = self._contributions
        if root in contributions:
            return contributions[root]

        stack = [root]
        expanded = set()
        while stack:
            node_id = stack[-1]
            if node_id in contributions:
                stack.pop()
                continue
            pending = [dest for dest in self._adjacency[node_id] if dest not in contributions]
            if pending:
                if node_id in expanded:
                    raise GraphError(f"cycle detected through node {node_id} during backpropagation")
                expanded.add(node_id)
                stack.extend(reversed(pending))
                continue
            stack.pop()
            contributions[node_id] = self._node_contribution(node_id, label, predicted)
        return contributions[root]

    def _node_contribution(self, node_id: int, label: float, predicted: float) -> float:
        # Every successor of node_id is already in self._contributions
        node = self._nodes[node_id]
        out_edges = self._adjacency[node_id]
        if not out_edges:
            # d(log-loss)/d(output), divided back through the output sigmoid
            total = -(label - predicted) / (predicted * (1.0 - predicted))
        else:
            total = 0.0
            for dest, edge in out_edges.items():
                incoming = self._contributions[dest]
                total += edge.weight * incoming
                edge.weight_gradient += incoming * node.post_activation
        total *= node.derive()
        node.bias_gradient += total
        return total

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(self):
        """
        Apply accumulated gradients with plain gradient descent and reset them.

        Gradients are the sum over every example predicted since the last
        update; pick the learning rate with that in mind.
        """
        lr = self.state.learning_rate
        for node_id, node in enumerate(self._nodes):
            node.bias -= lr * node.bias_gradient
            node.bias_gradient = 0.0
            for edge in self._adjacency[node_id].values():
                edge.weight -= lr * edge.weight_gradient
                edge.weight_gradient = 0.0
        logger.debug("Applied gradients accumulated over %d examples", self.state.pending_examples)
        self.state.pending_examples = 0

    # ------------------------------------------------------------------
    # Assessment
    # ------------------------------------------------------------------

    def assess(self, data) -> float:
        """
        Classification accuracy of the rounded first output.

        Args:
            data: A DataLoader, a CSV path, or a sequence of DataInstance

        Returns:
            accuracy: Fraction of instances whose rounded prediction equals the label

        Raises:
            EmptyDatasetError: If there is nothing to assess
        """
        if isinstance(data, (str, os.PathLike)):
            data = DataLoader(data)
        instances = list(data)
        if not instances:
            raise EmptyDatasetError("Cannot assess accuracy on an empty dataset")

        previous_mode = self.state.mode
        self.eval()
        try:
            correct = 0
            for instance in instances:
                outputs = self.predict(instance.x, strict=True)
                if math.floor(outputs[0] + 0.5) == instance.y:
                    correct += 1
        finally:
            self.state.mode = previous_mode
        return correct / len(instances)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, source, learning_rate: float = 0.1, seed: Optional[int] = None) -> 'NeuralNetwork':
        """Load a network from a model file path or text stream."""
        from .serialization import load_model
        return load_model(source, learning_rate=learning_rate, seed=seed)

    def save(self, target):
        """Write the network to a model file path or text stream."""
        from .serialization import save_model
        save_model(self, target)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def __str__(self):
        lines = []
        for index, layer in enumerate(self.layers):
            lines.append(f"layer {index}: " + " ".join(str(node_id) for node_id in layer))
        lines.append(self.to_dot())
        return "\n".join(lines)

    def __repr__(self):
        return (f"NeuralNetwork(nodes={self.num_nodes()}, layers={len(self.layers)}, "
                f"learning_rate={self.learning_rate}, mode='{self.state.mode.value}')")
