import unittest

import matplotlib

matplotlib.use("Agg")

from ell1.expression import REPEAT_CLOSE, REPEAT_OPEN, build
from ell1.plot import layout, to_graph


class TestPlot(unittest.TestCase):

    def setUp(self):
        # T { + T }
        self.graph = to_graph(build(["T", REPEAT_OPEN, "+", "T", REPEAT_CLOSE]))

    def test_nodes_and_edges(self):
        labels = [data["label"] for _, data in sorted(self.graph.nodes(data=True))]
        self.assertEqual(labels, ["·", "T", "{ }", "·", "+", "T"])
        self.assertEqual(sorted(self.graph.edges), [(0, 1), (0, 2), (2, 3), (3, 4), (3, 5)])

    def test_layers(self):
        layers = [data["layer"] for _, data in sorted(self.graph.nodes(data=True))]
        self.assertEqual(layers, [0, 1, 1, 2, 3, 3])

    def test_layout_keeps_sibling_order(self):
        pos = layout(self.graph)
        self.assertEqual(set(pos), set(self.graph.nodes))
        self.assertLess(pos[1][0], pos[2][0])
        self.assertLess(pos[4][0], pos[5][0])
        self.assertEqual(pos[3][1], -2)

    def test_single_symbol(self):
        graph = to_graph(build(["a"]))
        self.assertEqual(dict(graph.nodes(data=True)), {0: {"label": "a", "layer": 0}})


if __name__ == '__main__':
    unittest.main()
