from unittest import TestCase
import unittest
import numpy as np
import pandas as pd
from scipy.stats import norm
import causalgraph as cg


def chain_samples(nsamples, rng):
    a = rng.normal(size=nsamples)
    b = a + rng.normal(size=nsamples)
    c = b + rng.normal(size=nsamples)
    return np.column_stack([a, b, c])


class TestPartialCorrelation(TestCase):
    def setUp(self):
        self.rng = np.random.default_rng(1728)
        self.samples = chain_samples(2000, self.rng)
        self.suffstat = cg.partial_correlation_suffstat(self.samples)

    def test_suffstat(self):
        self.assertEqual(self.suffstat['n'], 2000)
        self.assertEqual(self.suffstat['nodes'], [0, 1, 2])
        np.testing.assert_allclose(self.suffstat['C'], np.corrcoef(self.samples, rowvar=False))

    def test_suffstat_read_only(self):
        with self.assertRaises(ValueError):
            self.suffstat['C'][0, 1] = 0

    def test_marginal(self):
        r = cg.compute_partial_correlation(self.suffstat, 0, 2)
        self.assertAlmostEqual(r, self.suffstat['C'][0, 2])

    def test_closed_form_matches_inverse(self):
        C = self.suffstat['C']
        theta = np.linalg.inv(C)
        expected = -theta[0, 2] / np.sqrt(theta[0, 0] * theta[2, 2])
        self.assertAlmostEqual(cg.compute_partial_correlation(self.suffstat, 0, 2, [1]), expected)

    def test_larger_conditioning_set(self):
        d = self.rng.normal(size=2000)
        samples = np.column_stack([self.samples, d])
        suffstat = cg.partial_correlation_suffstat(samples)
        theta = np.linalg.inv(suffstat['C'])
        expected = -theta[0, 2] / np.sqrt(theta[0, 0] * theta[2, 2])
        self.assertAlmostEqual(cg.compute_partial_correlation(suffstat, 0, 2, [1, 3]), expected)

    def test_chain_independencies(self):
        self.assertTrue(cg.partial_correlation_test(self.suffstat, 0, 1)['reject'])
        self.assertTrue(cg.partial_correlation_test(self.suffstat, 0, 2)['reject'])
        self.assertFalse(cg.partial_correlation_test(self.suffstat, 0, 2, {1}, alpha=1e-3)['reject'])

    def test_statistic(self):
        suffstat = cg.correlation_suffstat(np.array([[1, .5], [.5, 1]]), n=100)
        result = cg.partial_correlation_test(suffstat, 0, 1, alpha=.05)
        self.assertAlmostEqual(result['statistic'], np.sqrt(97) * np.arctanh(.5))
        self.assertAlmostEqual(result['p_value'], 2 * norm.sf(np.sqrt(97) * np.arctanh(.5)))
        self.assertAlmostEqual(result['partial_correlation'], .5)
        self.assertTrue(result['reject'])

    def test_two_sided(self):
        pos = cg.correlation_suffstat(np.array([[1, .2], [.2, 1]]), n=100)
        neg = cg.correlation_suffstat(np.array([[1, -.2], [-.2, 1]]), n=100)
        self.assertAlmostEqual(cg.partial_correlation_test(pos, 0, 1)['p_value'],
                               cg.partial_correlation_test(neg, 0, 1)['p_value'])

    def test_alpha_threshold(self):
        suffstat = cg.correlation_suffstat(np.array([[1, .2], [.2, 1]]), n=100)
        p_value = cg.partial_correlation_test(suffstat, 0, 1)['p_value']
        self.assertTrue(cg.partial_correlation_test(suffstat, 0, 1, alpha=min(1, p_value * 1.1))['reject'])
        self.assertFalse(cg.partial_correlation_test(suffstat, 0, 1, alpha=p_value * .9)['reject'])

    def test_invalid_alpha(self):
        for alpha in (0, 1, -.1, 1.5):
            with self.assertRaises(ValueError):
                cg.partial_correlation_test(self.suffstat, 0, 1, alpha=alpha)

    def test_dataframe_labels(self):
        df = pd.DataFrame(self.samples, columns=['a', 'b', 'c'])
        suffstat = cg.partial_correlation_suffstat(df)
        self.assertEqual(suffstat['nodes'], ['a', 'b', 'c'])
        labelled = cg.partial_correlation_test(suffstat, 'a', 'c', ['b'])
        unlabelled = cg.partial_correlation_test(self.suffstat, 0, 2, [1])
        self.assertAlmostEqual(labelled['statistic'], unlabelled['statistic'])

    def test_invalid_correlation_matrix(self):
        with self.assertRaises(ValueError):
            cg.correlation_suffstat(np.array([[1, .5], [.2, 1]]), n=100)
        with self.assertRaises(ValueError):
            cg.correlation_suffstat(np.ones((2, 3)), n=100)
        with self.assertRaises(ValueError):
            cg.correlation_suffstat(np.eye(2), n=100, nodes=['a', 'a'])


class TestNumericalInstability(TestCase):
    def test_too_few_samples(self):
        suffstat = cg.correlation_suffstat(np.eye(4), n=5)
        with self.assertRaises(cg.NumericalInstability) as cm:
            cg.partial_correlation_test(suffstat, 0, 1, [2, 3])
        self.assertEqual(cm.exception.cond_set, [2, 3])
        self.assertEqual((cm.exception.i, cm.exception.j), (0, 1))

    def test_perfect_correlation(self):
        suffstat = cg.correlation_suffstat(np.array([[1, 1], [1, 1]]), n=100)
        with self.assertRaises(cg.NumericalInstability):
            cg.partial_correlation_test(suffstat, 0, 1)

    def test_degenerate_conditioning_variable(self):
        C = np.array([
            [1, .5, .5],
            [.5, 1, 1],
            [.5, 1, 1],
        ])
        suffstat = cg.correlation_suffstat(C, n=100)
        with self.assertRaises(cg.NumericalInstability):
            cg.partial_correlation_test(suffstat, 0, 1, [2])

    def test_singular_submatrix(self):
        C = np.array([
            [1, .3, .5, .5],
            [.3, 1, .2, .2],
            [.5, .2, 1, 1],
            [.5, .2, 1, 1],
        ])
        suffstat = cg.correlation_suffstat(C, n=100)
        with self.assertRaises(cg.NumericalInstability):
            cg.partial_correlation_test(suffstat, 0, 1, [2, 3])

    def test_constant_column(self):
        samples = np.column_stack([np.arange(10.), np.ones(10)])
        with self.assertWarns(UserWarning):
            suffstat = cg.partial_correlation_suffstat(samples)
        with self.assertRaises(cg.NumericalInstability):
            cg.partial_correlation_test(suffstat, 0, 1)


class TestCITesters(TestCase):
    def setUp(self):
        self.calls = []

        def counting_test(suffstat, i, j, cond_set=None, alpha=None):
            self.calls.append((i, j, frozenset(cond_set)))
            return dict(reject=not suffstat.dsep(i, j, cond_set))

        self.counting_test = counting_test
        self.dag = cg.DAG(arcs={(0, 1), (1, 2)})

    def test_memoized(self):
        ci_tester = cg.MemoizedCI_Tester(self.counting_test, self.dag, detailed=True)
        self.assertTrue(ci_tester.is_ci(0, 2, {1}))
        self.assertTrue(ci_tester.is_ci(2, 0, [1]))
        self.assertFalse(ci_tester.is_ci(0, 2))
        self.assertEqual(len(self.calls), 2)
        self.assertEqual(len(ci_tester.ci_dict_detailed), 2)

    def test_track_times(self):
        ci_tester = cg.MemoizedCI_Tester(self.counting_test, self.dag, track_times=True)
        ci_tester.is_ci(0, 2, {1})
        ci_tester.is_ci(0, 1)
        self.assertEqual(set(ci_tester.ci_times), {
            (frozenset({0, 2}), frozenset({1})),
            (frozenset({0, 1}), frozenset()),
        })
        self.assertTrue(all(t >= 0 for t in ci_tester.ci_times.values()))

    def test_plain(self):
        ci_tester = cg.PlainCI_Tester(self.counting_test, self.dag)
        self.assertTrue(ci_tester.is_ci(0, 2, {1}))
        self.assertTrue(ci_tester.is_ci(0, 2, {1}))
        self.assertEqual(len(self.calls), 2)

    def test_protocol(self):
        self.assertIsInstance(cg.MemoizedCI_Tester(cg.dsep_test, self.dag), cg.CI_Tester)
        self.assertIsInstance(cg.PlainCI_Tester(cg.dsep_test, self.dag), cg.CI_Tester)

    def test_dsep_oracle(self):
        self.assertTrue(cg.dsep_test(self.dag, 0, 1)['reject'])
        self.assertFalse(cg.dsep_test(self.dag, 0, 2, [1])['reject'])

    def test_get_ci_tester(self):
        ci_tester = cg.get_ci_tester(self.dag, test='dsep', memoize=True)
        self.assertIsInstance(ci_tester, cg.MemoizedCI_Tester)
        self.assertTrue(ci_tester.is_ci(0, 2, {1}))

        rng = np.random.default_rng(7)
        ci_tester = cg.get_ci_tester(chain_samples(1000, rng), alpha=1e-3)
        self.assertIsInstance(ci_tester, cg.PlainCI_Tester)
        self.assertTrue(ci_tester.is_ci(0, 2, [1]))
        self.assertFalse(ci_tester.is_ci(0, 2))

        with self.assertRaises(ValueError):
            cg.get_ci_tester(self.dag, test='kernel')


if __name__ == '__main__':
    unittest.main()
