"""
Plain-text model format

    <numLayers> <totalNodeCount>
    <layerSize> <activationId>          (numLayers lines)
    <numWeightOverrides>
    <sourceId> <destId> <weight>        (numWeightOverrides lines)
    <numBiasOverrides>
    <nodeId> <bias>                     (numBiasOverrides lines)

Loading fully connects consecutive layers with standard normal weights and
zero biases before the overrides are applied, so a file may list only the
parameters it wants to pin.
"""

import io
import logging
import os
from typing import IO, Iterator, List, Optional, Union

from ..activations import get_activation
from ..exceptions import GraphError, MalformedModelFileError, UnknownActivationError, UnknownNodeError
from .layers import LayerBuilder
from .neural_network import NeuralNetwork

logger = logging.getLogger(__name__)

PathOrStream = Union[str, os.PathLike, IO[str]]


class _RecordReader:
    """Yields the whitespace separated tokens of each non-blank line."""

    def __init__(self, stream: IO[str], name: str):
        self._lines: Iterator[str] = iter(stream)
        self._name = name
        self.line_number = 0

    def next_record(self, num_fields: int, what: str) -> List[str]:
        for line in self._lines:
            self.line_number += 1
            tokens = line.split()
            if not tokens:
                continue
            if len(tokens) < num_fields:
                raise self.error(f"expected {num_fields} fields for {what}, got {len(tokens)}")
            # Anything after the expected fields is ignored
            return tokens[:num_fields]
        raise MalformedModelFileError(f"{self._name}: unexpected end of file while reading {what}")

    def next_int(self, what: str) -> int:
        return self.parse(self.next_record(1, what)[0], int, what)

    def parse(self, token: str, kind, what: str):
        try:
            return kind(token)
        except ValueError:
            raise self.error(f"invalid {what}: {token!r}") from None

    def error(self, message: str) -> MalformedModelFileError:
        return MalformedModelFileError(f"{self._name}, line {self.line_number}: {message}")


def _open(source: PathOrStream, mode: str):
    if isinstance(source, (str, os.PathLike)):
        try:
            return open(source, mode), os.fspath(source), True
        except OSError as e:
            raise MalformedModelFileError(f"Could not open {os.fspath(source)}: {e}") from e
    return source, getattr(source, 'name', '<stream>'), False


def load_model(
    source: PathOrStream,
    learning_rate: float = 0.1,
    seed: Optional[int] = None
) -> NeuralNetwork:
    """
    Load a network from a model file.

    Args:
        source: Path to a model file, or an open text stream
        learning_rate: Learning rate of the loaded network
        seed: Random seed for the initial weights of connections the file does not override

    Returns:
        network: The loaded NeuralNetwork

    Raises:
        MalformedModelFileError: If the file cannot be opened or does not follow the format
    """
    stream, name, owned = _open(source, 'r')
    try:
        network = _read_network(_RecordReader(stream, name), learning_rate, seed)
    finally:
        if owned:
            stream.close()
    logger.debug("Loaded %r from %s", network, name)
    return network


def loads_model(text: str, learning_rate: float = 0.1, seed: Optional[int] = None) -> NeuralNetwork:
    """Load a network from the text of a model file."""
    return load_model(io.StringIO(text), learning_rate=learning_rate, seed=seed)


def _read_network(reader: _RecordReader, learning_rate: float, seed: Optional[int]) -> NeuralNetwork:
    num_layers, total_nodes = (reader.parse(token, int, 'header')
                               for token in reader.next_record(2, 'header'))
    if num_layers < 2:
        raise reader.error(f"Neural Network must have at least 2 layers, but got {num_layers} layers")

    builder = LayerBuilder()
    previous = None
    for index in range(num_layers):
        size_token, activation_token = reader.next_record(2, f"layer {index}")
        size = reader.parse(size_token, int, f"size of layer {index}")
        if size < 1:
            raise reader.error(f"layer {index} must have at least one node, got {size}")
        try:
            activation = get_activation(activation_token)
        except UnknownActivationError as e:
            raise reader.error(str(e)) from e
        layer = builder.add_layer(size, activation)
        if previous is not None:
            builder.connect_layers_full(previous, layer)
        previous = layer

    if builder.current_node_id != total_nodes:
        raise reader.error(
            f"layer sizes add up to {builder.current_node_id} nodes but the header declares {total_nodes}"
        )

    network = builder.build(learning_rate=learning_rate, seed=seed)

    num_weights = reader.next_int('weight override count')
    if num_weights < 0:
        raise reader.error(f"negative weight override count {num_weights}")
    for _ in range(num_weights):
        source, dest, weight = reader.next_record(3, 'weight override')
        try:
            network.set_edge(reader.parse(source, int, 'source id'),
                             reader.parse(dest, int, 'destination id'),
                             reader.parse(weight, float, 'weight'))
        except UnknownNodeError as e:
            raise reader.error(str(e)) from e

    num_biases = reader.next_int('bias override count')
    if num_biases < 0:
        raise reader.error(f"negative bias override count {num_biases}")
    for _ in range(num_biases):
        node_id, bias = reader.next_record(2, 'bias override')
        try:
            network.get_node(reader.parse(node_id, int, 'node id')).bias = reader.parse(bias, float, 'bias')
        except UnknownNodeError as e:
            raise reader.error(str(e)) from e

    return network


def save_model(network: NeuralNetwork, target: PathOrStream):
    """
    Write a network in the model format.

    Every edge weight and every node bias is written, with enough precision
    for ``load_model`` to reproduce them exactly.

    Args:
        network: Network to save
        target: Path of the file to write, or an open text stream
    """
    text = dumps_model(network)
    stream, name, owned = _open(target, 'w')
    try:
        stream.write(text)
    finally:
        if owned:
            stream.close()
    logger.debug("Saved %r to %s", network, name)


def dumps_model(network: NeuralNetwork) -> str:
    """Return the model file text of ``network``."""
    # The format assigns ids 0..N-1 in layer order, so the layers must do the same
    layered = [node_id for layer in network.layers for node_id in layer]
    if layered != list(range(network.num_nodes())):
        raise GraphError("layers must cover node ids 0..N-1 in order to be saved")

    lines = [f"{len(network.layers)} {network.num_nodes()}"]
    for index, layer in enumerate(network.layers):
        activation = network.get_node(layer[0]).activation if layer else get_activation('identity')
        if any(network.get_node(node_id).activation is not activation for node_id in layer):
            logger.warning("Layer %d mixes activations; saving it as %s", index, activation.identifier)
        lines.append(f"{len(layer)} {activation.identifier}")

    edges = list(network.edges())
    lines.append(str(len(edges)))
    for edge in edges:
        lines.append(f"{edge.source} {edge.dest} {float(edge.weight)!r}")

    nodes = network.nodes()
    lines.append(str(len(nodes)))
    for node_id, node in enumerate(nodes):
        lines.append(f"{node_id} {float(node.bias)!r}")

    return "\n".join(lines) + "\n"
