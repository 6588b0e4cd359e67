from unittest import TestCase
import unittest
import numpy as np
import causalgraph as cg


class TestDAG(TestCase):
    def setUp(self):
        self.d = cg.DAG(arcs={(1, 2), (1, 3), (3, 4), (2, 4), (3, 5)})

    def test_neighbors(self):
        self.assertEqual(self.d.neighbors_of(1), {2, 3})
        self.assertEqual(self.d.neighbors_of(2), {1, 4})
        self.assertEqual(self.d.neighbors_of(3), {1, 4, 5})
        self.assertEqual(self.d.neighbors_of(4), {2, 3})
        self.assertEqual(self.d.neighbors_of(5), {3})

    def test_children(self):
        self.assertEqual(self.d.children_of(1), {2, 3})
        self.assertEqual(self.d.children_of(2), {4})
        self.assertEqual(self.d.children_of(3), {4, 5})
        self.assertEqual(self.d.children_of(4), set())
        self.assertEqual(self.d.children_of(5), set())

    def test_parents(self):
        self.assertEqual(self.d.parents_of(1), set())
        self.assertEqual(self.d.parents_of(2), {1})
        self.assertEqual(self.d.parents_of(3), {1})
        self.assertEqual(self.d.parents_of(4), {2, 3})
        self.assertEqual(self.d.parents_of(5), {3})
        self.assertEqual(self.d.parents_of({4, 5}), {2, 3})

    def test_downstream(self):
        self.assertEqual(self.d.descendants_of(1), {2, 3, 4, 5})
        self.assertEqual(self.d.descendants_of(2), {4})
        self.assertEqual(self.d.descendants_of(3), {4, 5})
        self.assertEqual(self.d.descendants_of(4), set())
        self.assertEqual(self.d.descendants_of(5), set())

    def test_upstream(self):
        self.assertEqual(self.d.ancestors_of(1), set())
        self.assertEqual(self.d.ancestors_of(2), {1})
        self.assertEqual(self.d.ancestors_of(3), {1})
        self.assertEqual(self.d.ancestors_of(4), {1, 2, 3})
        self.assertEqual(self.d.ancestors_of(5), {1, 3})
        self.assertEqual(self.d.ancestors_of({2, 5}), {1, 3})

    def test_has_adjacency(self):
        self.assertTrue(self.d.has_arc(1, 2))
        self.assertFalse(self.d.has_arc(2, 1))
        self.assertTrue(self.d.has_adjacency(2, 1))
        self.assertFalse(self.d.has_adjacency(2, 3))
        self.assertTrue(self.d.is_ancestor_of(1, 5))
        self.assertFalse(self.d.is_ancestor_of(2, 5))

    def test_sources_sinks(self):
        self.assertEqual(self.d.sources(), {1})
        self.assertEqual(self.d.sinks(), {4, 5})

    def test_add_node(self):
        self.d.add_node(6)
        self.assertEqual(self.d.nodes, set(range(1, 7)))

    def test_remove_node(self):
        self.d.remove_node(3)
        self.assertEqual(self.d.arcs, {(1, 2), (2, 4)})
        self.assertEqual(self.d.parents_of(4), {2})
        with self.assertRaises(KeyError):
            self.d.remove_node(3)
        self.d.remove_node(3, ignore_error=True)

    def test_add_arc(self):
        self.d.add_arc(2, 3)
        self.assertEqual(self.d.children_of(2), {3, 4})
        self.assertEqual(self.d.neighbors_of(2), {1, 3, 4})
        self.assertEqual(self.d.parents_of(3), {1, 2})
        self.assertEqual(self.d.neighbors_of(3), {1, 2, 4, 5})
        self.assertEqual(self.d.descendants_of(2), {3, 4, 5})
        self.assertEqual(self.d.ancestors_of(3), {1, 2})

    def test_remove_arc(self):
        self.d.remove_arc(3, 5)
        self.assertEqual(self.d.parents_of(5), set())
        self.assertIn(5, self.d.nodes)
        with self.assertRaises(KeyError):
            self.d.remove_arc(3, 5)

    def test_topological_sort(self):
        t = self.d.topological_sort()
        ixs = {node: t.index(node) for node in self.d.nodes}
        for i, j in self.d.arcs:
            self.assertTrue(ixs[i] < ixs[j])
        self.assertEqual(t, [1, 2, 3, 4, 5])

    def test_str(self):
        self.assertEqual(str(self.d), '[1][2|1][3|1][4|2,3][5|3]')
        self.assertEqual(str(self.d), str(cg.DAG(arcs=sorted(self.d.arcs, reverse=True))))

    def test_add_arc_cycle(self):
        with self.assertRaises(cg.CycleViolation) as cm:
            self.d.add_arc(2, 1)
        self.assertEqual(cm.exception.cycle, [2, 1, 2])
        with self.assertRaises(cg.CycleViolation):
            self.d.add_arc(4, 1)
        with self.assertRaises(cg.CycleViolation) as cm:
            self.d.add_arc(5, 1)
        self.assertEqual(cm.exception.cycle, [5, 1, 3, 5])
        with self.assertRaises(cg.CycleViolation):
            self.d.add_arc(3, 3)
        self.assertEqual(self.d.arcs, {(1, 2), (1, 3), (3, 4), (2, 4), (3, 5)})

    def test_add_arcs_from_is_atomic(self):
        with self.assertRaises(cg.CycleViolation):
            self.d.add_arcs_from({(4, 6), (5, 1)})
        self.assertEqual(self.d.arcs, {(1, 2), (1, 3), (3, 4), (2, 4), (3, 5)})
        self.assertNotIn(6, self.d.nodes)

    def test_construct_cycle(self):
        with self.assertRaises(cg.CycleViolation) as cm:
            cg.DAG(arcs={(1, 2), (2, 3), (3, 1)})
        cycle = cm.exception.cycle
        self.assertEqual(cycle[0], cycle[-1])
        self.assertEqual(set(cycle), {1, 2, 3})

    def test_missing_node(self):
        with self.assertRaises(KeyError):
            self.d.dsep(1, 7)

    def test_copy(self):
        d2 = self.d.copy()
        d2.add_arc(4, 5)
        self.assertNotEqual(self.d, d2)
        self.assertEqual(self.d.parents_of(5), {3})

    def test_mutilated_graphs(self):
        no_out = self.d.remove_outgoing(3)
        self.assertEqual(no_out.arcs, {(1, 2), (1, 3), (2, 4)})
        self.assertEqual(no_out.nodes, self.d.nodes)
        no_in = self.d.remove_incoming({4, 5})
        self.assertEqual(no_in.arcs, {(1, 2), (1, 3)})
        self.assertEqual(self.d.num_arcs, 5)

    def test_vstructures(self):
        self.assertEqual(self.d.vstructures(), {(2, 4, 3)})
        self.assertEqual(self.d.arcs_in_vstructures(), {(2, 4), (3, 4)})

    def test_amat(self):
        amat, node_list = self.d.to_amat()
        self.assertEqual(node_list, [1, 2, 3, 4, 5])
        self.assertEqual(amat.sum(), 5)
        self.assertEqual(amat[0, 1], 1)
        self.assertEqual(amat[1, 0], 0)
        self.assertEqual(cg.DAG.from_amat(amat, node_list), self.d)
        df = self.d.to_amat(mode='dataframe')
        self.assertEqual(cg.DAG.from_amat(df), self.d)

    def test_nx(self):
        g = self.d.to_nx()
        self.assertEqual(set(g.edges), self.d.arcs)
        self.assertEqual(cg.DAG.from_nx(g), self.d)

    def test_moral_graph(self):
        moral = self.d.moral_graph()
        self.assertEqual(moral.edges, self.d.skeleton | {frozenset({2, 3})})


if __name__ == '__main__':
    unittest.main()
