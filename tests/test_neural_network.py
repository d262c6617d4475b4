import copy
import math

import numpy as np
import pytest

from neurograph.activations import Activation, sigmoid
from neurograph.ai import LayerBuilder, Mode, NeuralNetwork, loads_model
from neurograph.data import DataInstance
from neurograph.exceptions import GraphError, InputSizeMismatchError


def _parameters(network):
    weights = {(e.source, e.dest): e.weight for e in network.edges()}
    biases = [node.bias for node in network.nodes()]
    return weights, biases


def test_new_network_defaults():
    net = NeuralNetwork(4)
    assert net.num_nodes() == 4
    assert net.learning_rate == 0.1
    assert net.state.mode is Mode.TRAIN
    assert net.pending_examples == 0
    assert net.input_node_ids == []
    assert net.output_node_ids == []


def test_mode_switching():
    net = NeuralNetwork(1)
    net.eval()
    assert not net.training
    net.train()
    assert net.training


def test_input_and_output_ids_follow_layers(hidden_network):
    assert hidden_network.layers == [[0, 1], [2, 3], [4]]
    assert hidden_network.input_node_ids == [0, 1]
    assert hidden_network.output_node_ids == [4]


def test_add_layer_rejects_reused_nodes():
    net = NeuralNetwork(3)
    net.add_layer([0, 1])
    with pytest.raises(GraphError):
        net.add_layer([1, 2])


def test_scenario_forward(scenario_network):
    scenario_network.eval()
    assert scenario_network.predict([1.0, 1.0]) == [0.5]


def test_scenario_gradients_and_update(scenario_network):
    net = scenario_network
    assert net.predict([1.0, 1.0], label=1) == [0.5]

    assert net.get_node(2).bias_gradient == pytest.approx(-0.5)
    assert net.get_edge(0, 2).weight_gradient == pytest.approx(-0.5)
    assert net.get_edge(1, 2).weight_gradient == pytest.approx(-0.5)
    # Input nodes pass gradients to their edges but never accumulate a bias gradient
    assert net.get_node(0).bias_gradient == 0.0
    assert net.pending_examples == 1

    net.update()
    assert net.get_node(2).bias == pytest.approx(0.05)
    assert net.get_edge(0, 2).weight == pytest.approx(0.55)
    assert net.get_edge(1, 2).weight == pytest.approx(-0.45)
    assert net.get_edge(0, 2).weight_gradient == 0.0
    assert net.get_node(2).bias_gradient == 0.0
    assert net.pending_examples == 0


def test_predict_accepts_data_instance(scenario_network):
    outputs = scenario_network.predict(DataInstance([1.0, 1.0], 1))
    assert outputs == [0.5]
    assert scenario_network.get_node(2).bias_gradient == pytest.approx(-0.5)


def test_train_mode_requires_label(scenario_network):
    with pytest.raises(ValueError, match="label"):
        scenario_network.predict([1.0, 1.0])


def test_predict_flushes_node_values(scenario_network):
    scenario_network.predict([1.0, 1.0], label=0)
    for node in scenario_network.nodes():
        assert node.pre_activation == 0.0
        assert node.post_activation == 0.0


def test_eval_predict_accumulates_nothing(scenario_network):
    scenario_network.eval()
    scenario_network.predict([3.0, -1.0])
    assert all(node.bias_gradient == 0.0 for node in scenario_network.nodes())
    assert all(edge.weight_gradient == 0.0 for edge in scenario_network.edges())
    assert scenario_network.pending_examples == 0


def test_size_mismatch_returns_empty_and_leaves_state(scenario_network):
    net = scenario_network
    net.get_node(0).pre_activation = 3.0
    net.get_node(2).post_activation = 0.75

    assert net.predict([1.0, 2.0, 3.0], label=1) == []

    assert net.get_node(0).pre_activation == 3.0
    assert net.get_node(2).post_activation == 0.75
    assert net.pending_examples == 0
    assert all(edge.weight_gradient == 0.0 for edge in net.edges())


def test_size_mismatch_strict_raises(scenario_network):
    with pytest.raises(InputSizeMismatchError) as excinfo:
        scenario_network.predict([1.0], label=1, strict=True)
    assert excinfo.value.expected == 2
    assert excinfo.value.got == 1


def test_identity_network_is_matrix_vector_product():
    net = LayerBuilder.mlp([3, 2], activations="identity", seed=7)
    net.eval()
    x = np.array([0.5, -1.0, 2.0])
    weights = np.array([[net.get_edge(i, j).weight for j in (3, 4)] for i in range(3)])

    outputs = net.predict(x)

    np.testing.assert_allclose(outputs, x @ weights)


def test_biases_are_added_once_per_node(scenario_network):
    net = scenario_network
    net.eval()
    net.get_node(2).bias = 1.0
    net.get_node(0).bias = 2.0
    # Output pre-activation: (1 + 2) * 0.5 + 1 * -0.5 + 1 = 2.0
    assert net.predict([1.0, 1.0]) == [pytest.approx(sigmoid(2.0))]


def test_shared_successor_contribution_is_computed_once(hidden_network):
    net = hidden_network
    net.predict([1.0, 2.0], label=1)

    # Hidden pre-activations are 1.0 and 0.0, the output's is 1.0
    p = sigmoid(1.0)
    delta = -(1.0 - p)
    assert net.get_node(4).bias_gradient == pytest.approx(delta)
    assert net.get_node(2).bias_gradient == pytest.approx(delta)
    assert net.get_node(3).bias_gradient == pytest.approx(-delta)
    assert net.get_edge(2, 4).weight_gradient == pytest.approx(delta)
    assert net.get_edge(3, 4).weight_gradient == pytest.approx(0.0)
    assert net.get_edge(0, 2).weight_gradient == pytest.approx(delta)
    assert net.get_edge(1, 2).weight_gradient == pytest.approx(2 * delta)
    assert net.get_edge(0, 3).weight_gradient == pytest.approx(-delta)
    assert net.get_edge(1, 3).weight_gradient == pytest.approx(-2 * delta)


def test_gradients_accumulate_without_averaging(scenario_network):
    net = scenario_network
    net.predict([1.0, 1.0], label=1)
    net.predict([1.0, 1.0], label=1)
    assert net.get_node(2).bias_gradient == pytest.approx(-1.0)
    assert net.pending_examples == 2

    net.update()
    assert net.get_node(2).bias == pytest.approx(0.1)


def test_accumulation_is_order_independent():
    examples = [([0.5, -1.0], 1), ([-2.0, 0.25], 0), ([1.5, 1.5], 1)]
    forward = LayerBuilder.mlp([2, 3, 1], seed=3)
    backward = copy.deepcopy(forward)

    for x, y in examples:
        forward.predict(x, label=y)
    for x, y in reversed(examples):
        backward.predict(x, label=y)
    forward.update()
    backward.update()

    forward_weights, forward_biases = _parameters(forward)
    backward_weights, backward_biases = _parameters(backward)
    assert forward_weights == pytest.approx(backward_weights)
    assert forward_biases == pytest.approx(backward_biases)


def test_accumulating_differs_from_updating_every_example():
    examples = [([0.5, -1.0], 1), ([-2.0, 0.25], 0), ([1.5, 1.5], 1)]
    batched = LayerBuilder.mlp([2, 3, 1], activations=["identity", "sigmoid", "sigmoid"], seed=5)
    batched.learning_rate = 0.5
    online = copy.deepcopy(batched)

    for x, y in examples:
        batched.predict(x, label=y)
    batched.update()
    for x, y in examples:
        online.predict(x, label=y)
        online.update()

    batched_weights, _ = _parameters(batched)
    online_weights, _ = _parameters(online)
    assert batched_weights != pytest.approx(online_weights)


def test_second_update_is_a_noop(hidden_network):
    hidden_network.predict([1.0, 2.0], label=0)
    hidden_network.update()
    after_first = _parameters(hidden_network)
    hidden_network.update()
    assert _parameters(hidden_network) == after_first


def test_update_without_gradients_changes_nothing(scenario_network):
    before = _parameters(scenario_network)
    scenario_network.update()
    assert _parameters(scenario_network) == before


def test_saturated_output_keeps_gradients_finite(scenario_network):
    net = scenario_network
    net.set_edge(0, 2, 1000.0)
    net.predict([1.0, 0.0], label=0)
    assert math.isfinite(net.get_node(2).bias_gradient)


def test_deep_network_does_not_hit_recursion_limit():
    depth = 3000
    activations = ["identity"] * (depth - 1) + ["sigmoid"]
    net = LayerBuilder.mlp([1] * depth, activations=activations, seed=0)
    for edge in net.edges():
        edge.weight = 1.0

    assert net.predict([0.0], label=1) == [0.5]
    assert net.get_node(1).bias_gradient == pytest.approx(-0.5)
    assert net.get_edge(0, 1).weight_gradient == 0.0


def test_cycle_is_reported_during_backpropagation():
    net = NeuralNetwork(2)
    net.add_layer([0])
    net.add_layer([1])
    net.set_edge(0, 1, 1.0)
    net.set_edge(1, 0, 1.0)

    with pytest.raises(GraphError, match="cycle"):
        net.predict([1.0], label=1)
    assert all(node.pre_activation == 0.0 for node in net.nodes())


def test_explicit_input_and_output_ids():
    net = NeuralNetwork(3)
    net.set_edge(2, 0, 2.0)
    net.input_node_ids = [2]
    net.output_node_ids = [0]
    net.eval()
    assert net.predict([1.5]) == [3.0]


def test_assess_counts_rounded_predictions(scenario_network):
    instances = [
        DataInstance([1.0, 1.0], 1),   # 0.5 rounds up to 1
        DataInstance([1.0, -3.0], 1),  # sigmoid(2.0) rounds to 1
        DataInstance([-3.0, 1.0], 1),  # sigmoid(-2.0) rounds to 0
        DataInstance([-3.0, 1.0], 0),
    ]
    scenario_network.train()
    assert scenario_network.assess(instances) == pytest.approx(0.75)
    assert scenario_network.training
    assert all(edge.weight_gradient == 0.0 for edge in scenario_network.edges())


def test_copy_is_independent(scenario_network):
    clone = scenario_network.copy()
    clone.predict([1.0, 1.0], label=1)
    clone.update()
    assert scenario_network.get_edge(0, 2).weight == 0.5
    assert clone.layers == scenario_network.layers
    assert clone.layers is not scenario_network.layers


def test_str_lists_layers_then_dot(scenario_network):
    dump = str(scenario_network)
    assert dump.splitlines()[0] == "layer 0: 0 1"
    assert dump.splitlines()[1] == "layer 1: 2"
    assert "digraph G {" in dump
    assert "activation=sigmoid" in dump


def test_layer_builder_mlp_defaults():
    net = LayerBuilder.mlp([4, 3, 1], seed=1)
    assert [len(layer) for layer in net.layers] == [4, 3, 1]
    assert net.num_edges() == 4 * 3 + 3 * 1
    assert net.get_node(0).activation is Activation.IDENTITY
    assert net.get_node(4).activation is Activation.RELU
    assert net.get_node(7).activation is Activation.SIGMOID
    assert all(node.bias == 0.0 for node in net.nodes())


def test_layer_builder_is_reproducible_with_seed():
    first, _ = _parameters(LayerBuilder.mlp([3, 2, 1], seed=11))
    second, _ = _parameters(LayerBuilder.mlp([3, 2, 1], seed=11))
    assert first == second


def test_layer_builder_rejects_single_layer():
    with pytest.raises(ValueError):
        LayerBuilder.mlp([3])


def test_layer_builder_rejects_empty_layer():
    builder = LayerBuilder()
    with pytest.raises(ValueError, match="positive"):
        builder.add_layer(0, "sigmoid")


def test_network_without_outputs_is_rejected():
    net = NeuralNetwork(3)
    with pytest.raises(GraphError, match="no output nodes"):
        net.predict([], label=1)
    net.eval()
    with pytest.raises(GraphError, match="no output nodes"):
        net.predict([])


# Same wiring as the shared hidden-layer model, with ReLU hidden units
RELU_HIDDEN_MODEL = """\
3 5
2 identity
2 relu
1 sigmoid
6
0 2 0.5
0 3 -0.5
1 2 0.25
1 3 0.25
2 4 1.0
3 4 -1.0
0
"""


def test_inactive_relu_unit_gets_no_gradient():
    net = loads_model(RELU_HIDDEN_MODEL)
    # Hidden pre-activations are 1.25 (active) and -0.75 (inactive)
    net.predict([2.0, 1.0], label=1)

    p = sigmoid(1.25)
    delta = -(1.0 - p)
    assert net.get_node(4).bias_gradient == pytest.approx(delta)
    assert net.get_node(2).bias_gradient == pytest.approx(delta)
    assert net.get_edge(2, 4).weight_gradient == pytest.approx(1.25 * delta)
    assert net.get_edge(0, 2).weight_gradient == pytest.approx(2.0 * delta)
    assert net.get_edge(1, 2).weight_gradient == pytest.approx(delta)

    assert net.get_node(3).bias_gradient == 0.0
    assert net.get_edge(0, 3).weight_gradient == 0.0
    assert net.get_edge(1, 3).weight_gradient == 0.0
    assert net.get_edge(3, 4).weight_gradient == 0.0
