"""
Graph - directed graph whose nodes carry activation state and whose edges carry weights

Nodes live in a dense arena indexed by integer id; edges are grouped by
source id so that all edges leaving a node are a single dictionary lookup.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List

from .activations import Activation
from .exceptions import GraphError, UnknownNodeError

logger = logging.getLogger(__name__)


@dataclass
class Node:
    """
    State of a single activation unit.

    Attributes:
        activation: Activation function applied to the pre-activation
        bias: Bias added to the pre-activation during the forward pass
        pre_activation: Weighted input sum plus bias
        post_activation: ``activation(pre_activation)``
        bias_gradient: Accumulated gradient for ``bias``, cleared only by an update
    """

    activation: Activation = Activation.IDENTITY
    bias: float = 0.0
    pre_activation: float = 0.0
    post_activation: float = field(init=False, default=0.0)
    bias_gradient: float = field(init=False, default=0.0)

    def __post_init__(self):
        self.activate()

    def activate(self) -> float:
        """Recompute and return the post-activation value."""
        self.post_activation = self.activation(self.pre_activation)
        return self.post_activation

    def derive(self) -> float:
        """Evaluate the activation derivative at the pre-activation value."""
        return self.activation.derivative(self.pre_activation)

    def flush(self):
        self.pre_activation = 0.0
        self.post_activation = 0.0


@dataclass
class Edge:
    """Weighted connection ``source -> dest``."""

    source: int
    dest: int
    weight: float
    weight_gradient: float = 0.0


class Graph:
    """
    A directed graph of :class:`Node` objects joined by weighted :class:`Edge` objects.

    The graph owns its nodes: ids are assigned ``0..size-1`` when the graph is
    sized and never change or get recycled. Edges are stored under their
    source, at most one per ordered ``(source, dest)`` pair.

    Example:
        >>> g = Graph(3)
        >>> g.set_edge(0, 2, 0.5)
        >>> g.get_edge(0, 2).weight
        0.5
    """

    def __init__(self, size: int = 0):
        self._nodes: List[Node] = []
        self._adjacency: List[Dict[int, Edge]] = []
        if size:
            self.resize(size)

    # ------------------------------------------------------------------
    # Sizing and nodes
    # ------------------------------------------------------------------

    def resize(self, size: int):
        """
        Allocate ``size`` default nodes and an empty edge bucket for each.

        Only valid on an empty graph.
        """
        if size < 0:
            raise ValueError(f"graph size must be non-negative, got {size}")
        if self._nodes:
            raise GraphError(f"cannot resize a graph that already holds {len(self._nodes)} nodes")
        self._nodes = [Node() for _ in range(size)]
        self._adjacency = [{} for _ in range(size)]

    def num_nodes(self) -> int:
        return len(self._nodes)

    def __len__(self):
        return len(self._nodes)

    def has_node(self, node_id: int) -> bool:
        return 0 <= node_id < len(self._nodes)

    def _check_node(self, node_id: int):
        if not self.has_node(node_id):
            raise UnknownNodeError(node_id, len(self._nodes))

    def set_node(self, node_id: int, node: Node):
        """
        Replace the node at ``node_id`` with a copy of ``node``.

        An out-of-range id is reported and ignored.
        """
        if not self.has_node(node_id):
            logger.warning("Attempting to update node with id %s but node does not exist", node_id)
            return
        self._nodes[node_id] = copy.copy(node)

    def get_node(self, node_id: int) -> Node:
        """
        Return the node stored at ``node_id`` for reading or in-place mutation.

        Raises:
            UnknownNodeError: If ``node_id`` is out of range.
        """
        self._check_node(node_id)
        return self._nodes[node_id]

    def nodes(self) -> List[Node]:
        """All nodes in id order (the list is a copy, the nodes are not)."""
        return list(self._nodes)

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def set_edge(self, source: int, dest: int, weight: float):
        """
        Set the weight of ``source -> dest``.

        An existing edge keeps its accumulated gradient; a new edge starts
        with a zero gradient.

        Raises:
            UnknownNodeError: If either endpoint does not exist.
        """
        self._check_node(source)
        self._check_node(dest)
        bucket = self._adjacency[source]
        if dest in bucket:
            bucket[dest].weight = weight
        else:
            bucket[dest] = Edge(source, dest, weight)

    def get_edge(self, source: int, dest: int) -> Edge:
        """
        Return the edge ``source -> dest``.

        Raises:
            UnknownNodeError: If ``source`` does not exist.
            KeyError: If the nodes exist but are not connected.
        """
        self._check_node(source)
        try:
            return self._adjacency[source][dest]
        except KeyError:
            raise KeyError(f"no edge {source} -> {dest}") from None

    def has_edge(self, source: int, dest: int) -> bool:
        return self.has_node(source) and dest in self._adjacency[source]

    def out_edges(self, node_id: int) -> Dict[int, Edge]:
        """Edges leaving ``node_id``, keyed by destination id."""
        self._check_node(node_id)
        return self._adjacency[node_id]

    def neighbors(self, node_id: int) -> List[int]:
        """Destination ids of the edges leaving ``node_id``."""
        return list(self.out_edges(node_id))

    def edges(self) -> Iterator[Edge]:
        """Iterate over every edge, grouped by source id."""
        for bucket in self._adjacency:
            yield from bucket.values()

    def num_edges(self) -> int:
        return sum(len(bucket) for bucket in self._adjacency)

    # ------------------------------------------------------------------
    # Copying
    # ------------------------------------------------------------------

    def copy(self):
        """Return an independent copy: new nodes, new edges, same values."""
        return copy.deepcopy(self)

    def __copy__(self):
        return self.copy()

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def to_dot(self) -> str:
        """
        Human readable dump: a DOT digraph of the weights followed by one
        state line per node.
        """
        lines = ["digraph G {"]
        for source, bucket in enumerate(self._adjacency):
            for edge in bucket.values():
                lines.append(f'\t{source} -> {edge.dest}[label="{edge.weight:g}"]')
        lines.append("}")
        for node_id, node in enumerate(self._nodes):
            lines.append(
                f"node {node_id}: (z={node.pre_activation:g}\t, a={node.post_activation:g}\t"
                f", bias={node.bias:g}\t, activation={node.activation.identifier})"
            )
        return "\n".join(lines)

    def __str__(self):
        return self.to_dot()

    def __repr__(self):
        return f"{type(self).__name__}(nodes={self.num_nodes()}, edges={self.num_edges()})"
