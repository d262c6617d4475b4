"""
Error hierarchy for neurograph
"""


class NeuroGraphError(Exception):
    """Base class for every error raised by neurograph."""


class GraphError(NeuroGraphError):
    """A structural operation is not valid for the graph's current state."""


class UnknownNodeError(GraphError, IndexError):
    """A node id lies outside the allocated range."""

    def __init__(self, node_id, size):
        super().__init__(f"node {node_id} does not exist (graph has {size} nodes)")
        self.node_id = node_id
        self.size = size


class UnknownActivationError(NeuroGraphError, ValueError):
    """An activation identifier or function is not in the registry."""


class InputSizeMismatchError(NeuroGraphError, ValueError):
    """A feature vector does not match the size of the input layer."""

    def __init__(self, expected, got):
        super().__init__(f"input size mismatch: expected {expected} features, got {got}")
        self.expected = expected
        self.got = got


class MalformedModelFileError(NeuroGraphError, ValueError):
    """A model file cannot be read or does not follow the model format."""


class MalformedDatasetError(NeuroGraphError, ValueError):
    """A dataset file cannot be read or has an invalid row."""


class EmptyDatasetError(NeuroGraphError, ValueError):
    """An operation needs at least one data instance but got none."""
