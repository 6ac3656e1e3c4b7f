from collections import defaultdict, deque

import networkx as nx
from matplotlib import pyplot as plt

from ell1.expression import Alternation, Expression, Repetition, Sequence, children

LABELS = {Sequence: "·", Alternation: "|", Repetition: "{ }"}


def label(expr: Expression) -> str:
    return LABELS.get(type(expr), str(expr))


def to_graph(root: Expression) -> nx.DiGraph:
    """Expression tree as a directed graph, nodes numbered breadth first.

    Every node carries `label` and `layer` (its depth) attributes.
    """
    graph = nx.DiGraph()
    queue = deque([(root, None)])

    node_index = 0
    layer = 0

    while queue:
        for _ in range(len(queue)):
            expr, parent_id = queue.popleft()
            graph.add_node(node_index, label=label(expr), layer=layer)

            if parent_id is not None:
                graph.add_edge(parent_id, node_index)

            for ch in children(expr):
                queue.append((ch, node_index))

            node_index += 1
        layer += 1

    return graph


def layout(graph: nx.DiGraph) -> dict[int, tuple[float, float]]:
    # nx.multipartite_layout doesn't keep the order of siblings within a layer
    layers = defaultdict(list)
    for node, data in graph.nodes(data=True):
        layers[data["layer"]].append(node)

    pos = {}
    x_spacing = 1
    for level, nodes in layers.items():
        amount = len(nodes)
        for i, node in enumerate(sorted(nodes)):
            pos[node] = (x_spacing * (i - amount / 2), -level)
    return pos


def visualize(root: Expression, title: str | None = None):
    graph = to_graph(root)
    pos = layout(graph)

    nx.draw(graph, pos, arrows=True, node_shape="o", node_size=1500, alpha=0.4)
    nx.draw_networkx_labels(graph, pos, labels={k: v["label"] for k, v in graph.nodes.items()})
    if title:
        plt.title(title)
    plt.show()
