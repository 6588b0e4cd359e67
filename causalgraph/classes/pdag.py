"""
Base class for partially directed acyclic graphs, including CPDAGs representing Markov equivalence classes.
"""

from collections import defaultdict
import itertools as itr
import numpy as np
import networkx as nx
from causalgraph.utils import core_utils
from causalgraph.classes.custom_types import DIRECTED, UNDIRECTED, BIDIRECTED, EDGE_KINDS


class InconsistentOrientation(Exception):
    def __init__(self, i, j, reason):
        self.i = i
        self.j = j
        self.reason = reason
        message = 'Cannot orient the edge %s-%s: %s' % (i, j, reason)
        super().__init__(message)


class PDAG:
    """
    A graph with directed arcs, undirected edges and bidirected edges, at most one per pair of nodes.

    Undirected edges mark adjacencies whose orientation is not determined within a Markov equivalence class.
    Bidirected edges are only produced by structure learning, to mark adjacencies on which the data gave
    conflicting orientations.

    Parameters
    ----------
    nodes:
        Nodes of the graph. Endpoints of ``arcs``, ``edges`` and ``bidirected`` are added automatically.
    arcs:
        Directed edges ``(i, j)`` meaning ``i -> j``.
    edges:
        Undirected edges ``i - j``.
    bidirected:
        Bidirected edges ``i <-> j``.
    """
    def __init__(
            self,
            nodes=frozenset(),
            arcs=frozenset(),
            edges=frozenset(),
            bidirected=frozenset()
    ):
        self._nodes = set(nodes)
        self._arcs = set()
        self._edges = set()
        self._bidirected = set()
        self._parents = defaultdict(set)
        self._children = defaultdict(set)
        self._neighbors = defaultdict(set)
        self._undirected_neighbors = defaultdict(set)
        self._spouses = defaultdict(set)
        for i, j in arcs:
            self._add_arc(i, j)
        for i, j in edges:
            self._add_edge(i, j)
        for i, j in bidirected:
            self._add_bidirected(i, j)

    @classmethod
    def from_amat(cls, amat, node_list=None):
        """
        Return a PDAG with arcs/edges given by ``amat``: ``amat[i, j] == amat[j, i] == 1`` is an undirected edge,
        ``amat[i, j] == amat[j, i] == 2`` a bidirected edge, and a single nonzero ``amat[i, j]`` an arc i->j.
        ``amat`` may be a numpy array or a pandas DataFrame labelled by node.
        """
        if hasattr(amat, 'columns'):
            node_list = list(amat.columns)
            amat = amat.values
        if node_list is None:
            node_list = list(range(amat.shape[0]))
        arcs, edges, bidirected = set(), set(), set()
        for (i, j), val in np.ndenumerate(amat):
            if val == 0 or i == j:
                continue
            if amat[j, i] == 0:
                arcs.add((node_list[i], node_list[j]))
            elif i < j:
                if val == 2:
                    bidirected.add((node_list[i], node_list[j]))
                else:
                    edges.add((node_list[i], node_list[j]))
        return PDAG(set(node_list), arcs, edges, bidirected)

    def to_amat(self, node_list=None, mode='dataframe'):
        """
        Return an adjacency matrix for the graph, using the encoding of ``from_amat``.

        Parameters
        ----------
        node_list:
            List indexing the rows/columns of the matrix.
        mode:
            'dataframe' returns a pandas DataFrame labelled by node; 'numpy' returns ``(amat, node_list)``.
        """
        if node_list is None:
            node_list = core_utils.sorted_nodes(self._nodes)
        node2ix = {node: i for i, node in enumerate(node_list)}

        amat = np.zeros((len(node_list), len(node_list)), dtype=int)
        for source, target in self._arcs:
            amat[node2ix[source], node2ix[target]] = 1
        for i, j in self._edges:
            amat[node2ix[i], node2ix[j]] = 1
            amat[node2ix[j], node2ix[i]] = 1
        for i, j in self._bidirected:
            amat[node2ix[i], node2ix[j]] = 2
            amat[node2ix[j], node2ix[i]] = 2

        if mode == 'dataframe':
            from pandas import DataFrame
            return DataFrame(amat, index=node_list, columns=node_list)
        return amat, node_list

    def to_edge_list(self):
        """
        Return every adjacency as a triple ``(i, j, kind)``, where ``kind`` is 'directed', 'undirected' or
        'bidirected'. Arcs keep their direction; the endpoints of other edges are in node order. The list is
        sorted, so equal graphs always give identical lists.

        See Also
        --------
        from_edge_list

        Examples
        --------
        >>> import causalgraph as cg
        >>> g = cg.PDAG(arcs={(1, 2)}, edges={(3, 2)})
        >>> g.to_edge_list()
        [(1, 2, 'directed'), (2, 3, 'undirected')]
        """
        rank = {node: ix for ix, node in enumerate(core_utils.sorted_nodes(self._nodes))}
        triples = [(i, j, DIRECTED) for i, j in self._arcs]
        triples.extend((*sorted(edge, key=rank.get), UNDIRECTED) for edge in self._edges)
        triples.extend((*sorted(edge, key=rank.get), BIDIRECTED) for edge in self._bidirected)
        return sorted(triples, key=lambda t: (rank[t[0]], rank[t[1]], EDGE_KINDS.index(t[2])))

    @classmethod
    def from_edge_list(cls, edge_list, nodes=frozenset()):
        """
        Build a PDAG from ``(i, j, kind)`` triples, as returned by ``to_edge_list``.
        """
        arcs, edges, bidirected = set(), set(), set()
        for i, j, kind in edge_list:
            if kind == DIRECTED:
                arcs.add((i, j))
            elif kind == UNDIRECTED:
                edges.add((i, j))
            elif kind == BIDIRECTED:
                bidirected.add((i, j))
            else:
                raise ValueError("Unknown edge kind '%s'" % kind)
        return PDAG(nodes, arcs, edges, bidirected)

    def to_nx(self) -> nx.DiGraph:
        """
        Convert to a networkx DiGraph, e.g. for plotting. Undirected and bidirected edges are stored in both
        directions; every edge carries its kind in the ``kind`` attribute.
        """
        g = nx.DiGraph()
        g.add_nodes_from(core_utils.sorted_nodes(self._nodes))
        for i, j, kind in self.to_edge_list():
            g.add_edge(i, j, kind=kind)
            if kind != DIRECTED:
                g.add_edge(j, i, kind=kind)
        return g

    @classmethod
    def from_nx(cls, nx_graph):
        """
        Inverse of ``to_nx``. Edges without a ``kind`` attribute are arcs, unless the reverse edge is also present,
        in which case they form an undirected edge.
        """
        arcs, edges, bidirected = set(), set(), set()
        for i, j, data in nx_graph.edges(data=True):
            kind = data.get('kind')
            if kind is None:
                kind = UNDIRECTED if nx_graph.has_edge(j, i) else DIRECTED
            if kind == DIRECTED:
                arcs.add((i, j))
            elif kind == UNDIRECTED:
                edges.add(frozenset({i, j}))
            else:
                bidirected.add(frozenset({i, j}))
        return PDAG(nodes=set(nx_graph.nodes), arcs=arcs, edges=edges, bidirected=bidirected)

    def __eq__(self, other):
        if not isinstance(other, PDAG):
            return False
        same_nodes = self._nodes == other._nodes
        same_arcs = self._arcs == other._arcs
        same_edges = self._edges == other._edges
        same_bidirected = self._bidirected == other._bidirected
        return same_nodes and same_arcs and same_edges and same_bidirected

    def __str__(self):
        substrings = []
        for node in core_utils.sorted_nodes(self._nodes):
            parents = core_utils.sorted_nodes(self._parents[node])
            nbrs = core_utils.sorted_nodes(self._undirected_neighbors[node])
            spouses = core_utils.sorted_nodes(self._spouses[node])
            if not parents and not nbrs and not spouses:
                substrings.append('[{node}]'.format(node=node))
            else:
                parents_str = ','.join(map(str, parents))
                nbrs_str = ','.join(map(str, nbrs))
                s = '[{node}|{parents}:{nbrs}'.format(node=node, parents=parents_str, nbrs=nbrs_str)
                if spouses:
                    s += ':' + ','.join(map(str, spouses))
                substrings.append(s + ']')
        return ''.join(substrings)

    def __repr__(self):
        return str(self)

    def copy(self):
        """Return a copy of the graph
        """
        return PDAG(nodes=self._nodes, arcs=self._arcs, edges=self._edges, bidirected=self._bidirected)

    # === PROPERTIES
    @property
    def nodes(self):
        return set(self._nodes)

    @property
    def nnodes(self):
        return len(self._nodes)

    @property
    def num_arcs(self):
        return len(self._arcs)

    @property
    def num_edges(self):
        return len(self._edges)

    @property
    def num_adjacencies(self):
        return self.num_arcs + self.num_edges + len(self._bidirected)

    @property
    def arcs(self):
        return set(self._arcs)

    @property
    def edges(self):
        return set(self._edges)

    @property
    def bidirected(self):
        return set(self._bidirected)

    @property
    def parents(self):
        return core_utils.defdict2dict(self._parents, self._nodes)

    @property
    def children(self):
        return core_utils.defdict2dict(self._children, self._nodes)

    @property
    def neighbors(self):
        return core_utils.defdict2dict(self._neighbors, self._nodes)

    @property
    def undirected_neighbors(self):
        return core_utils.defdict2dict(self._undirected_neighbors, self._nodes)

    @property
    def skeleton(self):
        return {frozenset({i, j}) for i, j in self._arcs} | self._edges | self._bidirected

    # === PROPERTIES W/ ARGUMENTS
    def parents_of(self, node):
        return set(self._parents[node])

    def children_of(self, node):
        return set(self._children[node])

    def neighbors_of(self, node):
        return set(self._neighbors[node])

    def undirected_neighbors_of(self, node):
        return set(self._undirected_neighbors[node])

    def has_edge(self, i, j):
        """Return True if the graph contains the edge i--j
        """
        return frozenset({i, j}) in self._edges

    def has_arc(self, i, j):
        """Return True if the graph contains the arc i->j"""
        return (i, j) in self._arcs

    def has_bidirected(self, i, j):
        return frozenset({i, j}) in self._bidirected

    def has_edge_or_arc(self, i, j):
        """Return True if i and j are adjacent by any kind of edge
        """
        return j in self._neighbors[i]

    # === MUTATORS
    def _check_not_adjacent(self, i, j):
        if i == j:
            raise ValueError('Self-loop at %s is not allowed' % (i,))
        if j in self._neighbors[i]:
            raise ValueError('%s and %s are already adjacent' % (i, j))

    def _add_arc(self, i, j):
        self._check_not_adjacent(i, j)
        self._nodes.add(i)
        self._nodes.add(j)
        self._arcs.add((i, j))

        self._neighbors[i].add(j)
        self._neighbors[j].add(i)

        self._children[i].add(j)
        self._parents[j].add(i)

    def _add_edge(self, i, j):
        self._check_not_adjacent(i, j)
        self._nodes.add(i)
        self._nodes.add(j)
        self._edges.add(frozenset({i, j}))

        self._neighbors[i].add(j)
        self._neighbors[j].add(i)

        self._undirected_neighbors[i].add(j)
        self._undirected_neighbors[j].add(i)

    def _add_bidirected(self, i, j):
        self._check_not_adjacent(i, j)
        self._nodes.add(i)
        self._nodes.add(j)
        self._bidirected.add(frozenset({i, j}))

        self._neighbors[i].add(j)
        self._neighbors[j].add(i)

        self._spouses[i].add(j)
        self._spouses[j].add(i)

    def remove_edge(self, i, j, ignore_error=False):
        try:
            self._edges.remove(frozenset({i, j}))
        except KeyError as e:
            if ignore_error:
                return
            raise e
        self._neighbors[i].remove(j)
        self._neighbors[j].remove(i)
        self._undirected_neighbors[i].remove(j)
        self._undirected_neighbors[j].remove(i)

    def remove_node(self, node):
        """Remove a node from the graph
        """
        self._nodes.remove(node)
        self._arcs = {(i, j) for i, j in self._arcs if i != node and j != node}
        self._edges = {edge for edge in self._edges if node not in edge}
        self._bidirected = {edge for edge in self._bidirected if node not in edge}
        for child in self._children[node]:
            self._parents[child].remove(node)
            self._neighbors[child].remove(node)
        for parent in self._parents[node]:
            self._children[parent].remove(node)
            self._neighbors[parent].remove(node)
        for u_nbr in self._undirected_neighbors[node]:
            self._undirected_neighbors[u_nbr].remove(node)
            self._neighbors[u_nbr].remove(node)
        for spouse in self._spouses[node]:
            self._spouses[spouse].remove(node)
            self._neighbors[spouse].remove(node)
        self._parents.pop(node, None)
        self._children.pop(node, None)
        self._neighbors.pop(node, None)
        self._undirected_neighbors.pop(node, None)
        self._spouses.pop(node, None)

    def _replace_edge_with_arc(self, arc):
        self._edges.remove(frozenset({*arc}))
        self._arcs.add(arc)
        i, j = arc
        self._parents[j].add(i)
        self._children[i].add(j)
        self._undirected_neighbors[i].remove(j)
        self._undirected_neighbors[j].remove(i)

    # === ORIENTATION
    def _meek_r1(self, i, j):
        # k -> i - j, with k and j not adjacent
        for k in core_utils.sorted_nodes(self._parents[i]):
            if not self.has_edge_or_arc(k, j):
                return f'{k}->{i}-{j}'

    def _meek_r2(self, i, j):
        # i -> k -> j, with i - j
        between = core_utils.sorted_nodes(self._children[i] & self._parents[j])
        if between:
            return f'{i}->{between[0]}->{j}'

    def _meek_r3(self, i, j):
        # i - k1 -> j <- k2 - i, with k1 and k2 not adjacent
        candidates = core_utils.sorted_nodes(self._undirected_neighbors[i] & self._parents[j])
        for k1, k2 in itr.combinations(candidates, 2):
            if not self.has_edge_or_arc(k1, k2):
                return f'{i}-{k1}->{j}<-{k2}-{i}'

    def _meek_r4(self, i, j):
        # i - k1 -> k2 -> j, with i adjacent to k2 and k1 not adjacent to j
        for k2 in core_utils.sorted_nodes(self._parents[j] & self._neighbors[i]):
            for k1 in core_utils.sorted_nodes(self._parents[k2] & self._undirected_neighbors[i]):
                if not self.has_edge_or_arc(k1, j):
                    return f'{i}-{k1}->{k2}->{j}'

    def to_complete_pdag(self, verbose=False):
        """
        Replace with arcs those edges whose orientations are determined by Meek rules.

        The rules are tried in priority order: R1 (no new v-structure), R2 (no directed cycle), R3 and R4. Whenever
        a rule orients some edges, the search restarts from R1, until no rule applies. Edges are visited in node
        order, so the result does not depend on set iteration order.

        See Meek, C. (1995). Causal inference and causal explanation with background knowledge.

        Raises
        ------
        InconsistentOrientation
            if two rules require opposite orientations of one edge, or the oriented arcs contain a directed cycle.
        """
        pdag = self.copy()
        rules = [('R1', pdag._meek_r1), ('R2', pdag._meek_r2), ('R3', pdag._meek_r3), ('R4', pdag._meek_r4)]
        while True:
            implied = {}
            for rule_name, rule in rules:
                for i, j in core_utils.sorted_edges(pdag._edges, undirected=True):
                    for arc in ((i, j), (j, i)):
                        witness = rule(*arc)
                        if witness is not None:
                            implied[arc] = f'{rule_name}: {witness}'
                if implied:
                    break
            if not implied:
                break

            for (i, j), reason in implied.items():
                if (j, i) in implied:
                    raise InconsistentOrientation(i, j, f'{reason} conflicts with {implied[(j, i)]}')
            for arc in core_utils.sorted_edges(implied):
                if verbose: print(f'Orienting {arc[0]}->{arc[1]} by {implied[arc]}')
                pdag._replace_edge_with_arc(arc)

        pdag._check_acyclic_arcs()

        self._nodes = pdag._nodes
        self._arcs = pdag._arcs
        self._edges = pdag._edges
        self._bidirected = pdag._bidirected
        self._parents = pdag._parents
        self._children = pdag._children
        self._neighbors = pdag._neighbors
        self._undirected_neighbors = pdag._undirected_neighbors
        self._spouses = pdag._spouses

    def _check_acyclic_arcs(self):
        from causalgraph.classes.dag import DAG, CycleViolation
        try:
            DAG(arcs=self._arcs)
        except CycleViolation as e:
            raise InconsistentOrientation(e.cycle[0], e.cycle[1], 'oriented arcs form the cycle ' +
                                          '->'.join(map(str, e.cycle))) from e

    def to_dag(self):
        """
        Return a DAG that is consistent with this PDAG, i.e. one obtained by orienting each undirected edge
        without creating new v-structures or cycles (Dor & Tarsi, 1992).

        Raises
        ------
        ValueError
            if the PDAG has bidirected edges or admits no consistent extension.
        """
        from causalgraph.classes.dag import DAG

        if self._bidirected:
            raise ValueError('PDAGs with bidirected edges have no consistent DAG extension')
        pdag2 = self.copy()
        arcs = set()
        while len(pdag2._edges) + len(pdag2._arcs) != 0:
            is_sink = lambda n: len(pdag2._children[n]) == 0
            no_vstructs = lambda n: all(
                (pdag2._neighbors[n] - {u_nbr}).issubset(pdag2._neighbors[u_nbr])
                for u_nbr in pdag2._undirected_neighbors[n]
            )
            sink = next((n for n in core_utils.sorted_nodes(pdag2._nodes) if is_sink(n) and no_vstructs(n)), None)
            if sink is None:
                raise ValueError('This PDAG has no consistent DAG extension')
            arcs.update((nbr, sink) for nbr in pdag2._neighbors[sink])
            pdag2.remove_node(sink)

        return DAG(nodes=self._nodes, arcs=arcs)

    # === COMPARISON
    def shd(self, other):
        """Return the structural Hamming distance between this PDAG and another.

        For each pair of nodes, the SHD is incremented by 1 if the edge type/presence between the two nodes is different
        """
        self_edges = {frozenset(t[:2]): t for t in self.to_edge_list()}
        other_edges = {frozenset(t[:2]): t for t in other.to_edge_list()}
        shd = 0
        for pair in self_edges.keys() | other_edges.keys():
            if self_edges.get(pair) != other_edges.get(pair):
                shd += 1
        return shd

    def shd_skeleton(self, other) -> int:
        return len(self.skeleton.symmetric_difference(other.skeleton))
