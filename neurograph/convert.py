"""
Conversion utilities for neurograph graphs to other graph libraries.
"""


def to_networkx(g):
    """
    Convert a neurograph Graph (or NeuralNetwork) to a NetworkX DiGraph.

    Parameters
    ----------
    g : neurograph.Graph
        A neurograph graph

    Returns
    -------
    networkx.DiGraph
        A directed graph with the same node ids. Nodes carry ``bias``,
        ``bias_gradient``, ``activation`` and, for a NeuralNetwork, ``layer``
        attributes; edges carry ``weight`` and ``weight_gradient``.

    Examples
    --------
    >>> import neurograph
    >>> net = neurograph.NeuralNetwork.load("models/diabetes.init")
    >>> G = neurograph.to_networkx(net)
    """
    try:
        import networkx as nx
    except ImportError:
        raise ImportError("NetworkX is required for this function. Install it with: pip install networkx")

    G = nx.DiGraph()

    node_to_layer = {}
    for layer_idx, layer in enumerate(getattr(g, 'layers', [])):
        for node_id in layer:
            node_to_layer[node_id] = layer_idx

    for node_id, node in enumerate(g.nodes()):
        attributes = {
            'bias': node.bias,
            'bias_gradient': node.bias_gradient,
            'activation': node.activation.identifier,
        }
        if node_id in node_to_layer:
            attributes['layer'] = node_to_layer[node_id]
        G.add_node(node_id, **attributes)

    for edge in g.edges():
        G.add_edge(edge.source, edge.dest, weight=edge.weight, weight_gradient=edge.weight_gradient)

    return G
