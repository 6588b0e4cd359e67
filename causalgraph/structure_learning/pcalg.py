from warnings import warn
import itertools as itr
from joblib import Parallel, delayed
from tqdm import tqdm
from causalgraph.classes.pdag import PDAG, InconsistentOrientation
from causalgraph.classes.undirected_graph import UndirectedGraph
from causalgraph.utils import core_utils
from causalgraph.utils.ci_tests import CI_Tester, MemoizedCI_Tester, partial_correlation_suffstat, \
    partial_correlation_test


def _separate(ci_tester, i, j, adj_i, adj_j, c_size, budget):
    """
    Look for a set of ``c_size`` neighbors of ``i``, then of ``j``, which renders ``i`` and ``j`` independent.
    Return the first such set (or None) and the number of tests performed.
    """
    tried = set()
    for candidates in (adj_i, adj_j):
        for cond_set in itr.combinations(core_utils.sorted_nodes(candidates), c_size):
            if frozenset(cond_set) in tried:
                continue
            tried.add(frozenset(cond_set))
            budget.spend()
            if ci_tester.is_ci(i, j, cond_set):
                return cond_set, budget.spent
    return None, budget.spent


def skeleton(
        nodes: set,
        ci_tester: CI_Tester,
        max_cond_set: int = None,
        max_tests: int = None,
        n_jobs: int = None,
        progress=False,
        verbose=False
):
    """
    Estimate the skeleton of an underlying DAG using the order-independent skeleton estimation method of
    Colombo and Maathuis (2014).

    Starting from the complete graph, for conditioning set sizes k = 0, 1, 2, ..., each remaining edge i-j is
    removed if i and j are independent given some set of k nodes adjacent to i, or failing that to j. Adjacencies
    are fixed at the start of each size k, so the result does not depend on the order in which edges are tested.
    Pairs are visited in node order, with i before j, and candidate sets in lexicographic order; the first set found
    is recorded as the separating set. The search stops once no remaining edge has an endpoint with k other
    neighbors.

    Parameters
    ----------
    nodes:
        Labels of nodes in the graph.
    ci_tester:
        A conditional independence tester, which has a method is_ci taking two nodes i and j, and a conditioning set
        C, and returns True/False.
    max_cond_set:
        Maximum size of conditioning set tested to separate nodes.
    max_tests:
        if not None, raise ``SearchBudgetExceeded`` once more than this many tests have been run. When ``n_jobs`` is
        set, the budget is checked after each conditioning set size.
    n_jobs:
        if not None, number of joblib workers testing edges in parallel within each conditioning set size.
    progress:
        if True, show a progress bar over the edges tested at each conditioning set size.
    verbose:
        If True, print edges as they are removed, along with the separating set responsible for removing them.

    See Also
    --------
    pcalg

    Returns
    -------
    (skeleton, sepset), where sepset maps each pair of non-adjacent nodes ``frozenset({i, j})`` to its separating set.

    Examples
    --------
    >>> import causalgraph as cg
    >>> d = cg.DAG(arcs={(0, 1), (1, 2)})
    >>> skel, sepset = cg.skeleton({0, 1, 2}, cg.MemoizedCI_Tester(cg.dsep_test, d))
    >>> skel.edges == {frozenset({0, 1}), frozenset({1, 2})}
    True
    >>> sepset[frozenset({0, 2})]
    frozenset({1})
    """
    nodes = core_utils.sorted_nodes(nodes)
    ug = UndirectedGraph(nodes, itr.combinations(nodes, 2))
    sepset = {}
    budget = core_utils.Budget(max_tests, 'conditional independence tests')

    c_size = 0
    while True:
        adjacencies = ug.neighbors
        pairs = [
            (i, j) for i, j in core_utils.sorted_edges(ug.edges, undirected=True)
            if len(adjacencies[i]) - 1 >= c_size or len(adjacencies[j]) - 1 >= c_size
        ]
        if not pairs:
            break
        if max_cond_set is not None and c_size > max_cond_set:
            warn(f"Stopped at conditioning sets of size {max_cond_set}; {len(pairs)} edges could still be tested")
            break
        if verbose: print(f"Testing {len(pairs)} edges with conditioning sets of size {c_size}")

        pair_iterator = pairs if not progress else tqdm(pairs, desc=f'Conditioning sets of size {c_size}')
        if n_jobs is None:
            results = [
                _separate(ci_tester, i, j, adjacencies[i] - {j}, adjacencies[j] - {i}, c_size, budget)
                for i, j in pair_iterator
            ]
        else:
            results = Parallel(n_jobs=n_jobs, verbose=verbose)(
                delayed(_separate)(ci_tester, i, j, adjacencies[i] - {j}, adjacencies[j] - {i}, c_size,
                                   core_utils.Budget())
                for i, j in pair_iterator
            )
            budget.spend(sum(num_tests for _, num_tests in results))

        for (i, j), (cond_set, _) in zip(pairs, results):
            if cond_set is not None:
                if verbose: print(f"Removing {i}-{j}, separated by {set(cond_set)}")
                ug.delete_edge(i, j)
                sepset[frozenset({i, j})] = frozenset(cond_set)
        c_size += 1

    return ug, sepset


def orient_vstructures(skel: UndirectedGraph, sepset: dict, solve_conflict: bool = False, verbose=False) -> PDAG:
    """
    Orient every unshielded triple i-j-k of ``skel`` as the collider i->j<-k if j is not in the separating set of
    i and k.

    Parameters
    ----------
    skel:
        An estimated skeleton.
    sepset:
        The separating sets for non-adjacent nodes in the estimated skeleton.
    solve_conflict:
        If False, an edge which two colliders orient in opposite directions raises InconsistentOrientation. If True,
        the edge is marked as bidirected.
    verbose:
        If True, print the colliders found.

    Returns
    -------
    PDAG with the colliders as arcs and all other adjacencies as undirected edges.
    """
    nodes = core_utils.sorted_nodes(skel.nodes)
    adjacencies = skel.neighbors

    proposed = set()
    for i, k in itr.combinations(nodes, 2):
        if skel.has_edge(i, k):
            continue
        common = adjacencies[i] & adjacencies[k]
        if not common:
            continue
        try:
            separating_set = sepset[frozenset({i, k})]
        except KeyError:
            raise ValueError(f"No separating set recorded for the non-adjacent nodes {i} and {k}")
        for j in core_utils.sorted_nodes(common):
            if j not in separating_set:
                if verbose: print(f"Collider {i}->{j}<-{k}: {j} not in separating set {set(separating_set)}")
                proposed.add((i, j))
                proposed.add((k, j))

    conflicts = {frozenset(arc) for arc in proposed if arc[::-1] in proposed}
    if conflicts and not solve_conflict:
        i, j = core_utils.sorted_edges(conflicts, undirected=True)[0]
        raise InconsistentOrientation(i, j, 'colliders orient it in both directions')

    arcs = {arc for arc in proposed if frozenset(arc) not in conflicts}
    if verbose and conflicts: print(f"Conflicting orientations, marked bidirected: {conflicts}")
    oriented = {frozenset(arc) for arc in arcs} | conflicts
    return PDAG(nodes=nodes, arcs=arcs, edges=skel.edges - oriented, bidirected=conflicts)


def pcalg(
        nodes,
        ci_tester: CI_Tester = None,
        skel: UndirectedGraph = None,
        sepset: dict = None,
        solve_conflict: bool = False,
        max_cond_set: int = None,
        max_tests: int = None,
        n_jobs: int = None,
        progress: bool = False,
        verbose: bool = False
) -> PDAG:
    """
    Use the PC (Peter-Clark) algorithm to estimate the Markov equivalence class of the data-generating DAG.

    Parameters
    ----------
    nodes:
        Labels of nodes in the graph.
    ci_tester:
        A conditional independence tester, which has a method is_ci taking two nodes i and j, and a conditioning set
        C, and returns True/False.
    skel:
        An estimated skeleton. If not provided, uses the `skeleton` method to estimate.
    sepset:
        The separating sets for non-adjacent nodes in the estimated skeleton.
    solve_conflict:
        If False, disagreements between v-structures raise InconsistentOrientation. If True, allow both orientations
        (represented by a bidirected edge).
    max_cond_set:
        Maximum size of conditioning set tested to separate nodes.
    max_tests:
        Maximum number of conditional independence tests.
    n_jobs:
        Number of parallel workers for skeleton estimation.
    progress:
        If True, show progress bars during skeleton estimation.
    verbose:
        If True, print decisions made by the algorithm.

    See Also
    --------
    skeleton, orient_vstructures

    Returns
    -------
    est_cpdag

    Examples
    --------
    >>> import causalgraph as cg
    >>> d = cg.DAG(arcs={(0, 2), (1, 2), (2, 3)})
    >>> cpdag = cg.pcalg({0, 1, 2, 3}, cg.MemoizedCI_Tester(cg.dsep_test, d))
    >>> cpdag.to_edge_list()
    [(0, 2, 'directed'), (1, 2, 'directed'), (2, 3, 'directed')]
    """
    if ci_tester is None:
        if skel is None or sepset is None:
            raise ValueError("Must provide either ci_tester or skeleton and sepset dictionary")
    if ci_tester is not None:
        skel, sepset = skeleton(nodes, ci_tester, max_cond_set=max_cond_set, max_tests=max_tests, n_jobs=n_jobs,
                                progress=progress, verbose=verbose)

    cpdag = orient_vstructures(skel, sepset, solve_conflict=solve_conflict, verbose=verbose)
    cpdag.to_complete_pdag(verbose=verbose)

    return cpdag


def pcalg_from_data(samples, alpha: float = 0.01, **kwargs) -> PDAG:
    """
    Run the PC algorithm on ``samples`` with the Gaussian partial correlation test.

    Parameters
    ----------
    samples:
        numpy array or pandas DataFrame with one column per variable. DataFrame column names become node labels.
    alpha:
        significance level of each conditional independence test.
    **kwargs:
        passed on to ``pcalg``.
    """
    suffstat = partial_correlation_suffstat(samples)
    ci_tester = MemoizedCI_Tester(partial_correlation_test, suffstat, alpha=alpha)
    return pcalg(suffstat['nodes'], ci_tester, **kwargs)
