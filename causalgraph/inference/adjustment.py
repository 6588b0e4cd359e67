"""
Covariate adjustment sets for identifying causal effects in a DAG.
"""

import itertools as itr
from typing import List, Set
from causalgraph.classes.dag import DAG
from causalgraph.classes.custom_types import Node, NodeSet
from causalgraph.utils import core_utils

TOTAL = 'total'
DIRECT = 'direct'


class NotIdentifiable(Exception):
    def __init__(self, exposure, outcome, effect, reason):
        self.exposure = exposure
        self.outcome = outcome
        self.effect = effect
        self.reason = reason
        message = 'The %s effect of %s on %s is not identifiable by adjustment: %s' % (
            effect, _set2str(exposure), _set2str(outcome), reason)
        super().__init__(message)


def _set2str(nodes):
    return '{%s}' % ','.join(map(str, core_utils.sorted_nodes(nodes)))


def _check_query(dag: DAG, exposure: set, outcome: set, effect: str):
    if effect not in (TOTAL, DIRECT):
        raise ValueError("effect must be '%s' or '%s', got '%s'" % (TOTAL, DIRECT, effect))
    if not exposure or not outcome:
        raise ValueError('The exposure and outcome must be non-empty')
    if exposure & outcome:
        raise ValueError('The exposure and outcome must be disjoint')
    dag._check_nodes(exposure | outcome)


def mediators(dag: DAG, exposure: NodeSet, outcome: NodeSet) -> Set[Node]:
    """
    Return the nodes, other than ``exposure`` and ``outcome``, which lie on a directed path from ``exposure`` to
    ``outcome``.

    Examples
    --------
    >>> import causalgraph as cg
    >>> d = cg.DAG(arcs={('x', 'm'), ('m', 'y'), ('x', 'y')})
    >>> cg.mediators(d, 'x', 'y')
    {'m'}
    """
    exposure = core_utils.to_set(exposure)
    outcome = core_utils.to_set(outcome)
    return (dag.descendants_of(exposure) & dag.ancestors_of(outcome)) - exposure - outcome


def _search_problem(dag: DAG, exposure: set, outcome: set, effect: str):
    """
    Return the graph in which adjustment sets must d-separate ``exposure`` and ``outcome``, the nodes which may
    never be adjusted for, and the nodes which must always be adjusted for.
    """
    if effect == TOTAL:
        search_graph = dag.remove_outgoing(exposure)
        forbidden = dag.descendants_of(exposure) | exposure | outcome
        baseline = set()
    else:
        search_graph = dag.copy()
        search_graph.remove_arcs_from(itr.product(exposure, outcome), ignore_error=True)
        baseline = mediators(dag, exposure, outcome)
        forbidden = dag.descendants_of(outcome) | exposure | outcome
    return search_graph, forbidden, baseline


def is_adjustment_set(dag: DAG, exposure: NodeSet, outcome: NodeSet, cond_set: NodeSet, effect=TOTAL) -> bool:
    """
    Check whether ``cond_set`` is a valid adjustment set for the ``effect`` of ``exposure`` on ``outcome``.

    For the total effect, ``cond_set`` must contain no descendant of the exposure and must block every back-door
    path, i.e. d-separate exposure and outcome once all arcs out of the exposure are removed.

    For the direct effect, ``cond_set`` must contain every mediator, no descendant of the outcome, and must
    d-separate exposure and outcome once the arcs from exposure to outcome are removed.

    Examples
    --------
    >>> import causalgraph as cg
    >>> d = cg.DAG(arcs={('z', 'x'), ('z', 'y'), ('x', 'y')})
    >>> cg.is_adjustment_set(d, 'x', 'y', {'z'})
    True
    >>> cg.is_adjustment_set(d, 'x', 'y', set())
    False
    """
    exposure = set(core_utils.to_set(exposure))
    outcome = set(core_utils.to_set(outcome))
    cond_set = set(core_utils.to_set(cond_set))
    _check_query(dag, exposure, outcome, effect)
    dag._check_nodes(cond_set)

    search_graph, forbidden, baseline = _search_problem(dag, exposure, outcome, effect)
    if cond_set & forbidden or not baseline <= cond_set:
        return False
    return search_graph.dsep(exposure, outcome, cond_set)


def adjustment_sets(
        dag: DAG,
        exposure: NodeSet,
        outcome: NodeSet,
        effect: str = TOTAL,
        excluded: NodeSet = None,
        minimal: bool = True,
        max_tests: int = None,
        verbose: bool = False
) -> List[Set[Node]]:
    """
    Find the sets of covariates which identify the ``effect`` of ``exposure`` on ``outcome`` by adjustment.

    Candidate covariates are the ancestors of exposure and outcome (and, for direct effects, of the mediators) which
    are neither forbidden nor ``excluded``. It is known that if any valid set exists among the candidates, the set
    of all candidates is valid (van der Zander, Liskiewicz & Textor, 2014), so identifiability is decided before
    enumerating. Subsets of the candidates are then checked by increasing size, in node order.

    Parameters
    ----------
    dag:
        the causal DAG.
    exposure:
        exposure node or set of nodes.
    outcome:
        outcome node or set of nodes.
    effect:
        'total' for the total effect, or 'direct' for the controlled direct effect, in which case every mediator
        is part of each adjustment set.
    excluded:
        nodes which cannot be adjusted for, e.g. because they are unobserved.
    minimal:
        if True, return only the minimal valid sets, i.e. those with no valid proper subset. Otherwise return every
        valid subset of the candidates, with the minimal ones first.
    max_tests:
        if not None, raise ``SearchBudgetExceeded`` after this many candidate sets have been checked.
    verbose:
        if True, print each valid set as it is found.

    Raises
    ------
    NotIdentifiable
        if no valid adjustment set exists.

    See Also
    --------
    is_adjustment_set

    Returns
    -------
    List of adjustment sets, ordered by size and then by node order. ``[set()]`` means that no adjustment is
    needed.

    Examples
    --------
    >>> import causalgraph as cg
    >>> d = cg.DAG(arcs={('a', 'x'), ('b', 'y'), ('a', 'b'), ('x', 'y')})
    >>> cg.adjustment_sets(d, 'x', 'y')
    [{'a'}, {'b'}]
    """
    exposure = set(core_utils.to_set(exposure))
    outcome = set(core_utils.to_set(outcome))
    excluded = set(core_utils.to_set(excluded))
    _check_query(dag, exposure, outcome, effect)

    search_graph, forbidden, baseline = _search_problem(dag, exposure, outcome, effect)
    if baseline & excluded:
        raise NotIdentifiable(exposure, outcome, effect, 'the mediators %s cannot be adjusted for'
                              % _set2str(baseline & excluded))

    relevant = exposure | outcome | baseline
    candidates = search_graph.ancestors_of(relevant) - forbidden - excluded - baseline
    candidates = core_utils.sorted_nodes(candidates)
    if verbose: print(f"Candidate covariates: {candidates}, always adjusted: {baseline}")

    budget = core_utils.Budget(max_tests, 'adjustment set checks')

    def is_valid(cond_set):
        budget.spend()
        return search_graph.dsep(exposure, outcome, cond_set)

    if not is_valid(set(candidates) | baseline):
        raise NotIdentifiable(exposure, outcome, effect, 'adjusting for every candidate %s leaves a path open'
                              % _set2str(set(candidates) | baseline))

    found = []
    for size in range(len(candidates) + 1):
        for subset in itr.combinations(candidates, size):
            cond_set = set(subset) | baseline
            if minimal and any(valid <= cond_set for valid in found):
                continue
            if is_valid(cond_set):
                if verbose: print(f"Found adjustment set {cond_set}")
                found.append(cond_set)

    if minimal:
        return found
    minimal_sets = [s for s in found if not any(other < s for other in found)]
    return minimal_sets + [s for s in found if any(other < s for other in found)]
