"""
CausalGraph
===========

CausalGraph is a Python package for reasoning about causal DAGs: d-separation, covariate adjustment sets, and
learning Markov equivalence classes from data with the PC algorithm.

Simple Example
--------------

>>> import causalgraph as cg
>>> import numpy as np
>>> rng = np.random.default_rng(12312)
>>> a = rng.normal(size=1000)
>>> b = a + rng.normal(size=1000)
>>> c = b + rng.normal(size=1000)
>>> suffstat = cg.partial_correlation_suffstat(np.column_stack([a, b, c]))
>>> ci_tester = cg.MemoizedCI_Tester(cg.partial_correlation_test, suffstat, alpha=1e-3)
>>> est_cpdag = cg.pcalg({0, 1, 2}, ci_tester)
>>> est_cpdag.to_edge_list()
[(0, 1, 'undirected'), (1, 2, 'undirected')]
>>> dag = cg.DAG(arcs={('z', 'x'), ('z', 'y'), ('x', 'y')})
>>> cg.adjustment_sets(dag, 'x', 'y')
[{'z'}]

License
-------
Released under the 3-Clause BSD license::
   Copyright (C) 2018
   Chandler Squires <chandlersquires18@gmail.com>
"""

from .classes import *
from .utils.core_utils import SearchBudgetExceeded
from .utils.ci_tests import *
from .inference import *
from .structure_learning import *
