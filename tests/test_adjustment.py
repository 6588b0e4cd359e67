from unittest import TestCase
import unittest
import itertools as itr
import numpy as np
import causalgraph as cg


class TestAdjustmentSets(TestCase):
    def test_no_backdoor_paths(self):
        d = cg.DAG(arcs={('x', 'm'), ('m', 'y')})
        self.assertEqual(cg.adjustment_sets(d, 'x', 'y'), [set()])

    def test_confounder(self):
        d = cg.DAG(arcs={('z', 'x'), ('z', 'y'), ('x', 'y')})
        self.assertEqual(cg.adjustment_sets(d, 'x', 'y'), [{'z'}])
        self.assertEqual(d.adjustment_sets('x', 'y'), [{'z'}])

    def test_several_minimal_sets(self):
        d = cg.DAG(arcs={('a', 'x'), ('b', 'y'), ('a', 'b'), ('x', 'y')})
        self.assertEqual(cg.adjustment_sets(d, 'x', 'y'), [{'a'}, {'b'}])
        self.assertEqual(cg.adjustment_sets(d, 'x', 'y', minimal=False), [{'a'}, {'b'}, {'a', 'b'}])
        self.assertEqual(cg.adjustment_sets(d, 'x', 'y', excluded={'a'}), [{'b'}])

    def test_collider_not_adjusted(self):
        d = cg.DAG(arcs={('x', 'y'), ('u1', 'x'), ('u1', 'c'), ('u2', 'c'), ('u2', 'y')})
        self.assertEqual(cg.adjustment_sets(d, 'x', 'y'), [set()])
        self.assertFalse(cg.is_adjustment_set(d, 'x', 'y', {'c'}))
        self.assertTrue(cg.is_adjustment_set(d, 'x', 'y', {'c', 'u1'}))

    def test_not_identifiable(self):
        d = cg.DAG(arcs={('u', 'x'), ('u', 'y'), ('x', 'y')})
        with self.assertRaises(cg.NotIdentifiable) as cm:
            cg.adjustment_sets(d, 'x', 'y', excluded={'u'})
        self.assertEqual(cm.exception.exposure, {'x'})
        self.assertEqual(cm.exception.outcome, {'y'})
        self.assertEqual(cm.exception.effect, 'total')

    def test_descendant_of_exposure_forbidden(self):
        d = cg.DAG(arcs={('x', 'y'), ('x', 'd'), ('y', 'd')})
        self.assertFalse(cg.is_adjustment_set(d, 'x', 'y', {'d'}))
        self.assertTrue(cg.is_adjustment_set(d, 'x', 'y', set()))

    def test_direct_effect(self):
        d = cg.DAG(arcs={('x', 'm'), ('m', 'y'), ('x', 'y'), ('c', 'm'), ('c', 'y')})
        self.assertEqual(cg.mediators(d, 'x', 'y'), {'m'})
        self.assertEqual(cg.adjustment_sets(d, 'x', 'y'), [set()])
        self.assertEqual(cg.adjustment_sets(d, 'x', 'y', effect='direct'), [{'c', 'm'}])
        self.assertFalse(cg.is_adjustment_set(d, 'x', 'y', {'m'}, effect='direct'))
        self.assertTrue(cg.is_adjustment_set(d, 'x', 'y', {'c', 'm'}, effect='direct'))
        with self.assertRaises(cg.NotIdentifiable):
            cg.adjustment_sets(d, 'x', 'y', effect='direct', excluded={'m'})

    def test_multiple_exposures(self):
        d = cg.DAG(arcs={('z', 'x1'), ('z', 'y'), ('x1', 'x2'), ('x2', 'y')})
        self.assertEqual(cg.adjustment_sets(d, {'x1', 'x2'}, 'y'), [{'z'}])

    def test_invalid_queries(self):
        d = cg.DAG(arcs={('x', 'y')})
        with self.assertRaises(ValueError):
            cg.adjustment_sets(d, 'x', 'y', effect='indirect')
        with self.assertRaises(ValueError):
            cg.adjustment_sets(d, {'x', 'y'}, 'y')
        with self.assertRaises(KeyError):
            cg.adjustment_sets(d, 'x', 'w')

    def test_budget(self):
        d = cg.DAG(arcs={('a', 'x'), ('b', 'y'), ('a', 'b'), ('x', 'y')})
        with self.assertRaises(cg.SearchBudgetExceeded):
            cg.adjustment_sets(d, 'x', 'y', max_tests=2)

    def test_random_dags_minimal_and_valid(self):
        rng = np.random.default_rng(2024)
        nodes = list(range(7))
        for _ in range(15):
            arcs = {(i, j) for i, j in itr.combinations(nodes, 2) if rng.random() < .4}
            arcs.add((2, 5))
            d = cg.DAG(nodes=set(nodes), arcs=arcs)
            sets = cg.adjustment_sets(d, 2, 5)
            self.assertTrue(sets)
            for s in sets:
                self.assertTrue(cg.is_adjustment_set(d, 2, 5, s))
                for size in range(len(s)):
                    for subset in itr.combinations(sorted(s), size):
                        self.assertFalse(cg.is_adjustment_set(d, 2, 5, set(subset)))
            self.assertEqual(sets, sorted(sets, key=len))


if __name__ == '__main__':
    unittest.main()
