"""Base class for causal DAGs
"""

from collections import defaultdict
import itertools as itr
import numpy as np
import networkx as nx
from causalgraph.utils import core_utils
from causalgraph.classes.custom_types import Node, DirectedEdge, NodeSet
from causalgraph.classes.paths import Path
from typing import Set, Iterable, Iterator, Dict, FrozenSet, List, Tuple

_END = object()


class CycleViolation(Exception):
    def __init__(self, cycle):
        self.cycle = cycle
        message = 'Adding arc(s) causes the cycle ' + path2str(cycle)
        super().__init__(message)


def path2str(path):
    return '->'.join(map(str, path))


class DAG:
    """
    Base class for causal DAGs.

    Parameters
    ----------
    nodes:
        Nodes of the graph. Nodes appearing in ``arcs`` are added automatically.
    arcs:
        Directed edges ``(i, j)`` meaning ``i -> j``.

    Raises
    ------
    CycleViolation
        if ``arcs`` contains a directed cycle.

    Examples
    --------
    >>> import causalgraph as cg
    >>> d = cg.DAG(arcs={('smoking', 'tar'), ('tar', 'cancer')})
    >>> d.parents_of('cancer')
    {'tar'}
    """

    def __init__(self, nodes: Set = frozenset(), arcs: Set = frozenset(), dag=None):
        if dag is not None:
            self._nodes = set(dag._nodes)
            self._arcs = set(dag._arcs)
            self._neighbors = defaultdict(set)
            for node, nbrs in dag._neighbors.items():
                self._neighbors[node] = set(nbrs)
            self._parents = defaultdict(set)
            for node, par in dag._parents.items():
                self._parents[node] = set(par)
            self._children = defaultdict(set)
            for node, ch in dag._children.items():
                self._children[node] = set(ch)
        else:
            self._nodes = set(nodes)
            self._arcs = set()
            self._neighbors = defaultdict(set)
            self._parents = defaultdict(set)
            self._children = defaultdict(set)
            self.add_arcs_from(arcs, check_acyclic=True)

    def __eq__(self, other):
        if not isinstance(other, DAG):
            return False
        return self._nodes == other._nodes and self._arcs == other._arcs

    def __str__(self):
        substrings = []
        for node in self.topological_sort():
            if self._parents[node]:
                parents_str = ','.join(map(str, core_utils.sorted_nodes(self._parents[node])))
                substrings.append('[%s|%s]' % (node, parents_str))
            else:
                substrings.append('[%s]' % node)
        return ''.join(substrings)

    def __repr__(self):
        return str(self)

    def copy(self):
        """
        Return a copy of the current DAG.
        """
        return DAG(dag=self)

    def induced_subgraph(self, nodes: Set[Node]):
        """
        Return the induced subgraph over only ``nodes``

        Examples
        --------
        >>> import causalgraph as cg
        >>> d = cg.DAG(arcs={(1, 2), (2, 3), (1, 4)})
        >>> d.induced_subgraph({1, 2, 3}).arcs
        {(1, 2), (2, 3)}
        """
        nodes = set(nodes)
        return DAG(nodes, {(i, j) for i, j in self._arcs if i in nodes and j in nodes})

    def remove_outgoing(self, nodes: NodeSet):
        """
        Return a new DAG in which every arc out of ``nodes`` has been removed. This DAG is not modified.

        Examples
        --------
        >>> import causalgraph as cg
        >>> d = cg.DAG(arcs={(0, 1), (1, 2), (0, 2)})
        >>> d.remove_outgoing(0).arcs
        {(1, 2)}
        """
        nodes = core_utils.to_set(nodes)
        return DAG(self._nodes, {(i, j) for i, j in self._arcs if i not in nodes})

    def remove_incoming(self, nodes: NodeSet):
        """
        Return a new DAG in which every arc into ``nodes`` has been removed. This DAG is not modified.
        """
        nodes = core_utils.to_set(nodes)
        return DAG(self._nodes, {(i, j) for i, j in self._arcs if j not in nodes})

    # === PROPERTIES
    @property
    def nodes(self) -> Set[Node]:
        return set(self._nodes)

    @property
    def nnodes(self) -> int:
        return len(self._nodes)

    @property
    def arcs(self) -> Set[DirectedEdge]:
        return set(self._arcs)

    @property
    def num_arcs(self) -> int:
        return len(self._arcs)

    @property
    def neighbors(self) -> Dict[Node, Set[Node]]:
        return core_utils.defdict2dict(self._neighbors, self._nodes)

    @property
    def parents(self) -> Dict[Node, Set[Node]]:
        return core_utils.defdict2dict(self._parents, self._nodes)

    @property
    def children(self) -> Dict[Node, Set[Node]]:
        return core_utils.defdict2dict(self._children, self._nodes)

    @property
    def skeleton(self) -> Set[FrozenSet]:
        return {frozenset({i, j}) for i, j in self._arcs}

    # === NODE PROPERTIES
    def _check_nodes(self, nodes):
        missing = nodes - self._nodes
        if missing:
            raise KeyError('Nodes not in graph: %s' % ','.join(map(str, core_utils.sorted_nodes(missing))))

    def parents_of(self, nodes: NodeSet) -> Set[Node]:
        """
        Return all nodes that are parents of the node or set of nodes ``nodes``.

        Examples
        --------
        >>> import causalgraph as cg
        >>> g = cg.DAG(arcs={(1, 2), (2, 3)})
        >>> g.parents_of(2)
        {1}
        >>> g.parents_of({2, 3})
        {1, 2}
        """
        if isinstance(nodes, (set, frozenset)):
            return set().union(*(self._parents[n] for n in nodes))
        else:
            return self._parents[nodes].copy()

    def children_of(self, nodes: NodeSet) -> Set[Node]:
        """
        Return all nodes that are children of the node or set of nodes ``nodes``.

        Examples
        --------
        >>> import causalgraph as cg
        >>> g = cg.DAG(arcs={(1, 2), (2, 3)})
        >>> g.children_of({1, 2})
        {2, 3}
        """
        if isinstance(nodes, (set, frozenset)):
            return set().union(*(self._children[n] for n in nodes))
        else:
            return self._children[nodes].copy()

    def neighbors_of(self, nodes: NodeSet) -> Set[Node]:
        """
        Return all nodes that are adjacent to the node or set of nodes ``nodes``.
        """
        if isinstance(nodes, (set, frozenset)):
            return set().union(*(self._neighbors[n] for n in nodes))
        else:
            return self._neighbors[nodes].copy()

    def is_ancestor_of(self, anc: Node, desc: Node) -> bool:
        """
        Check if ``anc`` is an ancestor of ``desc``

        Example
        -------
        >>> import causalgraph as cg
        >>> g = cg.DAG(arcs={(1, 2), (2, 3)})
        >>> g.is_ancestor_of(1, 3)
        True
        >>> g.is_ancestor_of(3, 1)
        False
        """
        return desc in self._children[anc] or desc in self.descendants_of(anc)

    def _add_descendants(self, descendants, node):
        stack = [node]
        while stack:
            for child in self._children[stack.pop()]:
                if child not in descendants:
                    descendants.add(child)
                    stack.append(child)

    def descendants_of(self, nodes: NodeSet) -> Set[Node]:
        """
        Return all nodes j such that there is a directed path of length at least one from ``nodes`` to j.

        See Also
        --------
        ancestors_of

        Example
        -------
        >>> import causalgraph as cg
        >>> g = cg.DAG(arcs={(1, 2), (2, 3)})
        >>> g.descendants_of(1)
        {2, 3}
        """
        descendants = set()
        for node in (nodes if isinstance(nodes, (set, frozenset)) else [nodes]):
            self._add_descendants(descendants, node)
        return descendants

    def _add_ancestors(self, ancestors, node):
        stack = [node]
        while stack:
            for parent in self._parents[stack.pop()]:
                if parent not in ancestors:
                    ancestors.add(parent)
                    stack.append(parent)

    def ancestors_of(self, nodes: NodeSet) -> Set[Node]:
        """
        Return all nodes j such that there is a directed path of length at least one from j to ``nodes``.

        See Also
        --------
        descendants_of

        Example
        -------
        >>> import causalgraph as cg
        >>> g = cg.DAG(arcs={(1, 2), (2, 3)})
        >>> g.ancestors_of(3)
        {1, 2}
        """
        ancestors = set()
        for node in (nodes if isinstance(nodes, (set, frozenset)) else [nodes]):
            self._add_ancestors(ancestors, node)
        return ancestors

    # ==== ORDERS
    def topological_sort(self) -> List[Node]:
        """
        Return a topological sort of the nodes in the graph. Ties are broken by node order, so the result is
        deterministic.

        Examples
        --------
        >>> import causalgraph as cg
        >>> g = cg.DAG(arcs={(1, 2), (2, 3)})
        >>> g.topological_sort()
        [1, 2, 3]
        """
        any_visited = {node: False for node in self._nodes}
        curr_path_visited = {node: False for node in self._nodes}
        curr_path = []
        stack = []
        for node in reversed(core_utils.sorted_nodes(self._nodes)):
            if not any_visited[node]:
                self._mark_children_visited(node, any_visited, curr_path_visited, curr_path, stack)
        return list(reversed(stack))

    def _check_acyclic(self):
        self.topological_sort()

    def _mark_children_visited(self, node, any_visited, curr_path_visited, curr_path, stack):
        any_visited[node] = True
        curr_path_visited[node] = True
        curr_path.append(node)
        for child in reversed(core_utils.sorted_nodes(self._children[node])):
            if not any_visited[child]:
                self._mark_children_visited(child, any_visited, curr_path_visited, curr_path, stack)
            elif curr_path_visited[child]:
                cycle = curr_path[curr_path.index(child):] + [child]
                raise CycleViolation(cycle)
        curr_path.pop()
        curr_path_visited[node] = False
        stack.append(node)

    # === GRAPH MODIFICATION
    def add_node(self, node: Node):
        """
        Add ``node`` to the DAG.
        """
        self._nodes.add(node)

    def add_nodes_from(self, nodes: Iterable):
        for node in nodes:
            self.add_node(node)

    def remove_node(self, node: Node, ignore_error=False):
        """
        Remove the node ``node`` and all of its incident arcs from the graph.

        Parameters
        ----------
        node:
            node to be removed.
        ignore_error:
            if True, ignore the KeyError raised when node is not in the DAG.
        """
        try:
            self._nodes.remove(node)
        except KeyError as e:
            if ignore_error:
                return
            raise e
        for parent in self._parents[node]:
            self._children[parent].remove(node)
            self._neighbors[parent].remove(node)
        for child in self._children[node]:
            self._parents[child].remove(node)
            self._neighbors[child].remove(node)
        self._neighbors.pop(node, None)
        self._parents.pop(node, None)
        self._children.pop(node, None)
        self._arcs = {(i, j) for i, j in self._arcs if i != node and j != node}

    def add_arc(self, i: Node, j: Node, check_acyclic=True):
        """
        Add the arc ``i`` -> ``j`` to the DAG

        Parameters
        ----------
        i:
            source node of the arc
        j:
            target node of the arc
        check_acyclic:
            if True, check that the DAG remains acyclic after adding the edge.

        Raises
        ------
        CycleViolation
            if the arc closes a directed cycle. The DAG is left unchanged.

        Examples
        --------
        >>> import causalgraph as cg
        >>> g = cg.DAG(arcs={(1, 2)})
        >>> g.add_arc(2, 1)
        Traceback (most recent call last):
          ...
        causalgraph.classes.dag.CycleViolation: Adding arc(s) causes the cycle 2->1->2
        """
        if check_acyclic:
            if i == j:
                raise CycleViolation([i, i])
            if i in self._nodes and j in self._nodes and i in self.descendants_of(j):
                raise CycleViolation([i] + self._directed_path(j, i))

        self._nodes.add(i)
        self._nodes.add(j)
        self._arcs.add((i, j))

        self._neighbors[i].add(j)
        self._neighbors[j].add(i)

        self._children[i].add(j)
        self._parents[j].add(i)

    def _directed_path(self, source, target) -> list:
        # breadth-first, so the reported path is a shortest one
        previous = {source: None}
        queue = [source]
        while queue:
            node = queue.pop(0)
            if node == target:
                break
            for child in core_utils.sorted_nodes(self._children[node]):
                if child not in previous:
                    previous[child] = node
                    queue.append(child)
        path = [target]
        while previous[path[-1]] is not None:
            path.append(previous[path[-1]])
        return list(reversed(path))

    def add_arcs_from(self, arcs: Iterable[Tuple], check_acyclic=True):
        """
        Add arcs to the graph from the collection ``arcs``. Either all arcs are added or, if they would create a
        cycle, none are.

        Examples
        --------
        >>> import causalgraph as cg
        >>> g = cg.DAG(arcs={(1, 2)})
        >>> g.add_arcs_from({(1, 3), (2, 3)})
        >>> g.arcs
        {(1, 2), (1, 3), (2, 3)}
        """
        arcs = {(i, j) for i, j in arcs}
        if len(arcs) == 0:
            return

        new_dag = DAG(dag=self)
        for i, j in arcs:
            new_dag.add_arc(i, j, check_acyclic=False)
        if check_acyclic:
            new_dag._check_acyclic()

        self._nodes = new_dag._nodes
        self._arcs = new_dag._arcs
        self._neighbors = new_dag._neighbors
        self._parents = new_dag._parents
        self._children = new_dag._children

    def remove_arc(self, i: Node, j: Node, ignore_error=False):
        """
        Remove the arc ``i`` -> ``j``.

        Parameters
        ----------
        ignore_error:
            if True, ignore the KeyError raised when arc is not in the DAG.
        """
        try:
            self._arcs.remove((i, j))
        except KeyError as e:
            if ignore_error:
                return
            raise e
        self._parents[j].remove(i)
        self._children[i].remove(j)
        self._neighbors[j].remove(i)
        self._neighbors[i].remove(j)

    def remove_arcs_from(self, arcs: Iterable, ignore_error=False):
        for i, j in arcs:
            self.remove_arc(i, j, ignore_error=ignore_error)

    # === GRAPH PROPERTIES
    def has_arc(self, source: Node, target: Node) -> bool:
        """
        Check if this DAG has an arc ``source`` -> ``target``.
        """
        return (source, target) in self._arcs

    def has_adjacency(self, i: Node, j: Node) -> bool:
        return (i, j) in self._arcs or (j, i) in self._arcs

    def sources(self) -> Set[Node]:
        """
        Get all nodes in the graph that have no parents.
        """
        return {node for node in self._nodes if len(self._parents[node]) == 0}

    def sinks(self) -> Set[Node]:
        """
        Get all nodes in the graph that have no children.
        """
        return {node for node in self._nodes if len(self._children[node]) == 0}

    def arcs_in_vstructures(self) -> Set[Tuple]:
        """
        Get all arcs in the graph that participate in a v-structure, i.e. arcs i->j for which there is some k->j
        with k not adjacent to i.

        Example
        -------
        >>> import causalgraph as cg
        >>> g = cg.DAG(arcs={(1, 3), (2, 3)})
        >>> g.arcs_in_vstructures()
        {(1, 3), (2, 3)}
        """
        return {(i, j) for i, j in self._arcs if self._parents[j] - self._neighbors[i] - {i}}

    def vstructures(self) -> Set[Tuple]:
        """
        Get all v-structures in the graph, i.e., triples of the form (i, k, j) such that ``i``->k<-``j`` and ``i``
        is not adjacent to ``j``.

        Example
        -------
        >>> import causalgraph as cg
        >>> g = cg.DAG(arcs={(1, 3), (2, 3)})
        >>> g.vstructures()
        {(1, 3, 2)}
        """
        vstructs = set()
        for node in self._nodes:
            for p1, p2 in itr.combinations(core_utils.sorted_nodes(self._parents[node]), 2):
                if p1 not in self._neighbors[p2]:
                    vstructs.add((p1, node, p2))
        return vstructs

    # === PATHS
    def all_paths(self, i: Node, j: Node, max_paths: int = None) -> Iterator[Path]:
        """
        Lazily enumerate every path between ``i`` and ``j``, ignoring arc directions.

        The traversal is depth-first, visiting neighbors in node order; a node may appear at most once on each path,
        but different paths may share segments. The number of paths can grow exponentially with the size of the
        graph, so callers working with dense graphs should pass ``max_paths``.

        Parameters
        ----------
        i:
            start node.
        j:
            end node.
        max_paths:
            if not None, raise ``SearchBudgetExceeded`` when more than this many paths are generated.

        See Also
        --------
        directed_paths, backdoor_paths

        Examples
        --------
        >>> import causalgraph as cg
        >>> d = cg.DAG(arcs={(0, 1), (1, 2), (0, 2)})
        >>> [str(p) for p in d.all_paths(0, 2)]
        ['0->1->2', '0->2']
        """
        return self._paths(i, j, self._neighbors, max_paths)

    def directed_paths(self, i: Node, j: Node, max_paths: int = None) -> Iterator[Path]:
        """
        Lazily enumerate every directed (causal) path from ``i`` to ``j``.
        """
        return self._paths(i, j, self._children, max_paths)

    def backdoor_paths(self, i: Node, j: Node, max_paths: int = None) -> Iterator[Path]:
        """
        Lazily enumerate every path between ``i`` and ``j`` whose first arc points into ``i``.
        """
        return (path for path in self.all_paths(i, j, max_paths=max_paths) if path.is_backdoor)

    def _paths(self, i, j, successors, max_paths):
        self._check_nodes({i, j})
        if i == j:
            raise ValueError('Paths must have distinct endpoints, got %s twice' % (i,))
        budget = core_utils.Budget(max_paths, 'paths')

        path = [i]
        forward = []
        on_path = {i}
        stack = [iter(core_utils.sorted_nodes(successors[i]))]
        while stack:
            nxt = next(stack[-1], _END)
            if nxt is _END:
                stack.pop()
                on_path.remove(path.pop())
                if forward:
                    forward.pop()
                continue
            if nxt in on_path:
                continue
            is_forward = nxt in self._children[path[-1]]
            if nxt == j:
                budget.spend()
                yield Path(tuple(path) + (j,), tuple(forward) + (is_forward,))
                continue
            path.append(nxt)
            forward.append(is_forward)
            on_path.add(nxt)
            stack.append(iter(core_utils.sorted_nodes(successors[nxt])))

    # === D-SEPARATION
    def dsep(self, A: NodeSet, B: NodeSet, C: NodeSet = frozenset(), method='reachability', max_paths=None,
             verbose=False) -> bool:
        """
        Check if ``A`` and ``B`` are d-separated given ``C``.

        Parameters
        ----------
        A:
            First node or set of nodes.
        B:
            Second node or set of nodes.
        C:
            Separating node or set of nodes.
        method:
            'reachability' (default) traces active trails from ``A`` in linear time, following
            Koller & Friedman, Algorithm 3.1. 'moral' checks separation in the moral graph of the ancestral subgraph
            of ``A``, ``B`` and ``C``. 'paths' enumerates every path between ``A`` and ``B`` and checks that each one
            is blocked; it is exponential in the worst case and is bounded by ``max_paths``.
        max_paths:
            path budget for ``method='paths'``.
        verbose:
            If True, print moves of the algorithm.

        See Also
        --------
        dsep_from_given

        Example
        -------
        >>> import causalgraph as cg
        >>> g = cg.DAG(arcs={(1, 2), (3, 2)})
        >>> g.dsep(1, 3)
        True
        >>> g.dsep(1, 3, 2)
        False
        """
        A = set(core_utils.to_set(A))
        B = set(core_utils.to_set(B))
        C = set(core_utils.to_set(C))
        self._check_nodes(A | B | C)
        if A & B or A & C or B & C:
            raise ValueError('The sets A, B and C must be disjoint')

        if method == 'reachability':
            return self._dsep_reachability(A, B, C, verbose=verbose)
        elif method == 'moral':
            return self._dsep_moral(A, B, C, verbose=verbose)
        elif method == 'paths':
            return self._dsep_paths(A, B, C, max_paths=max_paths, verbose=verbose)
        else:
            raise ValueError("Unknown d-separation method '%s'" % method)

    def _dsep_reachability(self, A, B, C, verbose=False):
        # shade ancestors of C
        shaded_nodes = set(C)
        for node in C:
            self._add_ancestors(shaded_nodes, node)

        visited = set()
        # marks for which direction the path is traveling through the node
        _c = '_c'  # child
        _p = '_p'  # parent

        schedule = [(node, _c) for node in A]
        while schedule:
            node, _dir = schedule.pop()
            if node in B:
                if verbose: print(f"Reached {node} in B: not d-separated")
                return False
            if (node, _dir) in visited: continue
            visited.add((node, _dir))

            if verbose: print(f"Going through node {node} in direction {_dir}")

            # if coming from child, won't encounter v-structure
            if _dir == _c and node not in C:
                schedule.extend((parent, _c) for parent in self._parents[node])
                schedule.extend((child, _p) for child in self._children[node])

            if _dir == _p:
                # if coming from parent and see shaded node, can go through v-structure
                if node in shaded_nodes:
                    schedule.extend((parent, _c) for parent in self._parents[node])

                # if coming from parent and see unconditioned node, can go through children
                if node not in C:
                    schedule.extend((child, _p) for child in self._children[node])

        return True

    def _dsep_moral(self, A, B, C, verbose=False):
        relevant = A | B | C
        relevant |= self.ancestors_of(relevant)
        moral = self.induced_subgraph(relevant).moral_graph().to_nx()
        moral.remove_nodes_from(C)
        reachable = set()
        for a in A:
            reachable |= nx.node_connected_component(moral, a)
        if verbose: print(f"Nodes connected to {A} in the ancestral moral graph: {reachable}")
        return not (reachable & B)

    def _dsep_paths(self, A, B, C, max_paths=None, verbose=False):
        budget = core_utils.Budget(max_paths, 'paths')
        for a, b in itr.product(core_utils.sorted_nodes(A), core_utils.sorted_nodes(B)):
            for path in self.all_paths(a, b):
                budget.spend()
                if not path.is_blocked(C, self):
                    if verbose: print(f"Path {path} is not blocked by {C}")
                    return False
        return True

    def dsep_from_given(self, A, C: NodeSet = frozenset()) -> Set[Node]:
        """
        Find all nodes d-separated from ``A`` given ``C``.

        Uses algorithm in Geiger, D., Verma, T., & Pearl, J. (1990).
        Identifying independence in Bayesian networks. Networks, 20(5), 507-534.

        Examples
        --------
        >>> import causalgraph as cg
        >>> d = cg.DAG(arcs={(0, 1), (1, 2), (2, 3), (3, 4)})
        >>> d.dsep_from_given(0, 1)
        {2, 3, 4}
        """
        A = set(core_utils.to_set(A))
        C = set(core_utils.to_set(C))

        determined = set()
        descendants = set()

        for c in C:
            determined.add(c)
            descendants.add(c)
            self._add_ancestors(descendants, c)

        reachable = set()
        i_links = set()
        labeled_links = set()

        for a in A:
            i_links.add((None, a))
            reachable.add(a)

        while True:
            i_p_1_links = set()
            # Find all unlabeled links v->w adjacent to at least one link u->v labeled i, such that (u->v,v->w) is a
            # legal pair.
            for u, v in i_links:
                for w in self._neighbors[v]:
                    if not u == w and (v, w) not in labeled_links:
                        if u is not None and v in self._children[u] and v in self._children[w]:  # collider
                            if v in descendants:
                                i_p_1_links.add((v, w))
                                reachable.add(w)
                        elif v not in determined:
                            i_p_1_links.add((v, w))
                            reachable.add(w)

            if len(i_p_1_links) == 0:
                break

            labeled_links |= i_links
            i_links = i_p_1_links

        return self._nodes - A - C - reachable

    # === CONVERSION TO OTHER GRAPHS
    def moral_graph(self):
        """
        Return the (undirected) moral graph of this DAG, i.e., the skeleton with the parents of all nodes made
        adjacent.

        Examples
        --------
        >>> import causalgraph as cg
        >>> d = cg.DAG(arcs={(1, 3), (2, 3)})
        >>> ug = d.moral_graph()
        >>> ug.edges == {frozenset({1, 3}), frozenset({2, 3}), frozenset({1, 2})}
        True
        """
        from causalgraph.classes.undirected_graph import UndirectedGraph
        edges = set(self._arcs)
        for node in self._nodes:
            edges.update(itr.combinations(self._parents[node], 2))
        return UndirectedGraph(self._nodes, edges)

    def cpdag(self):
        """
        Return the completed partially directed acyclic graph (CPDAG, aka essential graph) that represents the
        Markov equivalence class of this DAG.

        Examples
        --------
        >>> import causalgraph as cg
        >>> g = cg.DAG(arcs={(1, 2), (2, 4), (3, 4)})
        >>> cpdag = g.cpdag()
        >>> cpdag.edges
        {frozenset({1, 2})}
        >>> cpdag.arcs
        {(2, 4), (3, 4)}
        """
        from causalgraph.classes.pdag import PDAG
        vstruct = self.arcs_in_vstructures()
        pdag = PDAG(nodes=self._nodes, arcs=vstruct, edges=self._arcs - vstruct)
        pdag.to_complete_pdag()
        return pdag

    # === ADJUSTMENT SETS
    def adjustment_sets(self, exposure: NodeSet, outcome: NodeSet, effect='total', excluded: NodeSet = None,
                        minimal=True, max_tests=None, verbose=False) -> List[Set[Node]]:
        """
        Return the covariate sets which identify the ``effect`` of ``exposure`` on ``outcome`` by adjustment.

        See :func:`causalgraph.inference.adjustment.adjustment_sets`.

        Examples
        --------
        >>> import causalgraph as cg
        >>> d = cg.DAG(arcs={('z', 'x'), ('z', 'y'), ('x', 'y')})
        >>> d.adjustment_sets('x', 'y')
        [{'z'}]
        """
        from causalgraph.inference.adjustment import adjustment_sets
        return adjustment_sets(self, exposure, outcome, effect=effect, excluded=excluded, minimal=minimal,
                               max_tests=max_tests, verbose=verbose)

    def is_adjustment_set(self, exposure: NodeSet, outcome: NodeSet, cond_set: NodeSet, effect='total') -> bool:
        """
        Check whether ``cond_set`` is a valid adjustment set for the ``effect`` of ``exposure`` on ``outcome``.

        See :func:`causalgraph.inference.adjustment.is_adjustment_set`.
        """
        from causalgraph.inference.adjustment import is_adjustment_set
        return is_adjustment_set(self, exposure, outcome, cond_set, effect=effect)

    # === NUMPY CONVERSION
    @classmethod
    def from_amat(cls, amat, node_list=None):
        """
        Return a DAG with arcs given by ``amat``, i.e. i->j if ``amat[i,j] != 0``. ``amat`` may be a numpy array
        or a pandas DataFrame whose index and columns are the node names.

        Examples
        --------
        >>> import causalgraph as cg
        >>> import numpy as np
        >>> amat = np.array([[0, 0, 1], [0, 0, 1], [0, 0, 0]])
        >>> cg.DAG.from_amat(amat).arcs
        {(0, 2), (1, 2)}
        """
        if hasattr(amat, 'columns'):
            node_list = list(amat.columns)
            amat = amat.values
        if node_list is None:
            node_list = list(range(amat.shape[0]))
        arcs = {(node_list[i], node_list[j]) for (i, j), val in np.ndenumerate(amat) if val != 0}
        return DAG(nodes=set(node_list), arcs=arcs)

    def to_amat(self, node_list=None, mode='numpy'):
        """
        Return an adjacency matrix for this DAG.

        Parameters
        ----------
        node_list:
            List indexing the rows/columns of the matrix.
        mode:
            'numpy' returns ``(amat, node_list)``; 'dataframe' returns a pandas DataFrame labelled by node.

        See Also
        --------
        from_amat

        Example
        -------
        >>> import causalgraph as cg
        >>> g = cg.DAG(arcs={(1, 2), (1, 3), (2, 3)})
        >>> g.to_amat()[0]
        array([[0, 1, 1],
               [0, 0, 1],
               [0, 0, 0]])
        """
        if not node_list:
            node_list = core_utils.sorted_nodes(self._nodes)
        node2ix = {node: i for i, node in enumerate(node_list)}

        amat = np.zeros((len(node_list), len(node_list)), dtype=int)
        for source, target in self._arcs:
            amat[node2ix[source], node2ix[target]] = 1

        if mode == 'dataframe':
            from pandas import DataFrame
            return DataFrame(amat, index=node_list, columns=node_list)
        return amat, node_list

    # === NETWORKX CONVERSION
    @classmethod
    def from_nx(cls, nx_graph: nx.DiGraph):
        """
        Convert a networkx DiGraph into a DAG.
        """
        if not isinstance(nx_graph, nx.DiGraph):
            raise ValueError("Must be a DiGraph")
        return DAG(nodes=set(nx_graph.nodes), arcs=set(nx_graph.edges))

    def to_nx(self) -> nx.DiGraph:
        """
        Convert DAG to a networkx DiGraph, e.g. for plotting.
        """
        g = nx.DiGraph()
        g.add_nodes_from(core_utils.sorted_nodes(self._nodes))
        g.add_edges_from(core_utils.sorted_edges(self._arcs))
        return g
