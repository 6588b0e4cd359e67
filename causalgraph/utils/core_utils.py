from typing import Iterable, List


class SearchBudgetExceeded(Exception):
    def __init__(self, budget, what):
        self.budget = budget
        self.what = what
        message = 'Search budget of %s %s exceeded' % (budget, what)
        super().__init__(message)


class Budget:
    """
    Counter which raises ``SearchBudgetExceeded`` once more than ``limit`` units have been spent. A limit of None
    never raises.
    """
    def __init__(self, limit=None, what='steps'):
        self.limit = limit
        self.what = what
        self.spent = 0

    def spend(self, amount=1):
        self.spent += amount
        if self.limit is not None and self.spent > self.limit:
            raise SearchBudgetExceeded(self.limit, self.what)


def defdict2dict(defdict, keys):
    factory = defdict.default_factory
    d = {k: factory(v) for k, v in defdict.items()}
    for k in keys:
        if k not in d:
            d[k] = factory()
    return d


def sorted_nodes(nodes: Iterable) -> List:
    """
    Return ``nodes`` as a list in a deterministic order: natural order when the labels are comparable, otherwise
    ordered by their string representation.
    """
    nodes = list(nodes)
    try:
        return sorted(nodes)
    except TypeError:
        return sorted(nodes, key=lambda node: (type(node).__name__, str(node)))


def sorted_edges(edges: Iterable, undirected=False) -> List[tuple]:
    """
    Order a collection of edges deterministically. If ``undirected``, each edge's endpoints are also put in order.
    """
    edges = [tuple(edge) for edge in edges]
    rank = {node: ix for ix, node in enumerate(sorted_nodes({node for edge in edges for node in edge}))}
    if undirected:
        edges = [tuple(sorted(edge, key=rank.get)) for edge in edges]
    return sorted(edges, key=lambda edge: tuple(rank[node] for node in edge))


def to_set(o) -> set:
    if not isinstance(o, set):
        if o is None:
            return set()
        if isinstance(o, (str, bytes)):
            return {o}
        try:
            return set(o)
        except TypeError:
            return {o}
    return o


