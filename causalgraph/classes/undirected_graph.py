from collections import defaultdict
import numpy as np
from networkx import Graph
from causalgraph.classes.custom_types import Node, UndirectedEdge
from causalgraph.utils import core_utils
from typing import Set, Iterable, Dict


class UndirectedGraph:
    """
    Undirected graph, used for skeletons during structure learning and for moral graphs.
    """

    def __init__(self, nodes=frozenset(), edges=frozenset()):
        self._nodes = set(nodes)
        self._edges = {frozenset({i, j}) for i, j in edges}
        self._neighbors = defaultdict(set)
        for i, j in self._edges:
            self._nodes.add(i)
            self._nodes.add(j)
            self._neighbors[i].add(j)
            self._neighbors[j].add(i)

    def __eq__(self, other):
        if not isinstance(other, UndirectedGraph):
            return False
        return self._nodes == other._nodes and self._edges == other._edges

    def __str__(self):
        edges = core_utils.sorted_edges(self._edges, undirected=True)
        return '{%s}' % ', '.join('%s-%s' % (i, j) for i, j in edges)

    def __repr__(self):
        return 'UndirectedGraph(%s)' % str(self)

    def to_nx(self) -> Graph:
        nx_graph = Graph()
        nx_graph.add_nodes_from(self._nodes)
        nx_graph.add_edges_from(self._edges)
        return nx_graph

    @classmethod
    def from_nx(cls, g: Graph):
        return UndirectedGraph(nodes=g.nodes, edges=g.edges)

    def to_amat(self, node_list=None) -> (np.ndarray, list):
        """
        Return an adjacency matrix for this undirected graph.

        Parameters
        ----------
        node_list:
            List indexing the rows/columns of the matrix.

        Return
        ------
        (amat, node_list)
        """
        if not node_list:
            node_list = core_utils.sorted_nodes(self._nodes)
        node2ix = {node: i for i, node in enumerate(node_list)}

        amat = np.zeros([self.num_nodes, self.num_nodes], dtype=int)
        for i, j in self._edges:
            amat[node2ix[i], node2ix[j]] = 1
            amat[node2ix[j], node2ix[i]] = 1
        return amat, node_list

    @classmethod
    def from_amat(cls, amat: np.ndarray):
        """
        Return an undirected graph with edges given by amat, i.e. i-j if amat[i,j] != 0
        """
        edges = {(i, j) for (i, j), val in np.ndenumerate(amat) if val != 0 and i != j}
        return UndirectedGraph(nodes=set(range(amat.shape[0])), edges=edges)

    def copy(self):
        """
        Return a copy of this undirected graph.
        """
        return UndirectedGraph(self._nodes, self._edges)

    @property
    def num_nodes(self) -> int:
        return len(self._nodes)

    @property
    def num_edges(self) -> int:
        return len(self._edges)

    @property
    def degrees(self) -> Dict[Node, int]:
        return {node: len(self._neighbors[node]) for node in self._nodes}

    @property
    def neighbors(self) -> Dict[Node, Set[Node]]:
        return core_utils.defdict2dict(self._neighbors, self._nodes)

    @property
    def edges(self) -> Set[UndirectedEdge]:
        return self._edges.copy()

    @property
    def nodes(self) -> Set[Node]:
        return self._nodes.copy()

    @property
    def skeleton(self) -> Set[UndirectedEdge]:
        return self.edges

    def has_edge(self, i: Node, j: Node) -> bool:
        """
        Check if the undirected graph has the edge ``i``-``j``.

        Examples
        --------
        >>> import causalgraph as cg
        >>> g = cg.UndirectedGraph(edges={(1, 2)})
        >>> g.has_edge(2, 1)
        True
        """
        return frozenset({i, j}) in self._edges

    def neighbors_of(self, node: Node) -> Set[Node]:
        return self._neighbors[node].copy()

    def degree_of(self, node: Node) -> int:
        return len(self._neighbors[node])

    # === MUTATORS ===
    def add_node(self, node: Node):
        self._nodes.add(node)

    def add_edge(self, i: Node, j: Node):
        """
        Add the edge ``i``-``j``. Adding an edge that already exists does nothing.
        """
        if i == j:
            raise ValueError('Self-loop %s-%s is not allowed' % (i, j))
        self._nodes.add(i)
        self._nodes.add(j)
        self._edges.add(frozenset({i, j}))
        self._neighbors[i].add(j)
        self._neighbors[j].add(i)

    def add_edges_from(self, edges: Iterable):
        for i, j in edges:
            self.add_edge(i, j)

    def delete_edge(self, i: Node, j: Node):
        """
        Delete the edge ``i``-``j``; raises KeyError if it is not present.
        """
        self._edges.remove(frozenset({i, j}))
        self._neighbors[i].remove(j)
        self._neighbors[j].remove(i)

    def delete_edges_from(self, edges: Iterable):
        for i, j in edges:
            self.delete_edge(i, j)

    def delete_node(self, node: Node):
        self._nodes.remove(node)
        for j in self._neighbors[node]:
            self._neighbors[j].remove(node)
            self._edges.remove(frozenset({node, j}))
        self._neighbors.pop(node, None)
