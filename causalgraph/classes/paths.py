"""
Paths between nodes of a DAG, annotated with the local structure at each internal node.
"""

from typing import Tuple
from causalgraph.classes.custom_types import Node
from causalgraph.utils import core_utils

CHAIN = 'chain'
FORK = 'fork'
COLLIDER = 'collider'


class Path:
    """
    An ordered sequence of distinct nodes connected by arcs, together with the direction of each arc along the path.

    Parameters
    ----------
    nodes:
        The nodes on the path, from start to end.
    forward:
        For each consecutive pair ``(nodes[k], nodes[k+1])``, True if the arc points along the path, i.e.
        ``nodes[k] -> nodes[k+1]``, and False if it points backwards.

    Examples
    --------
    >>> import causalgraph as cg
    >>> d = cg.DAG(arcs={(1, 2), (3, 2)})
    >>> p = next(d.all_paths(1, 3))
    >>> p.nodes
    (1, 2, 3)
    >>> p.structures
    ('collider',)
    """
    __slots__ = ('_nodes', '_forward', '_structures')

    def __init__(self, nodes: Tuple[Node, ...], forward: Tuple[bool, ...]):
        if len(forward) != len(nodes) - 1:
            raise ValueError('A path over %d nodes needs %d arc directions' % (len(nodes), len(nodes) - 1))
        self._nodes = tuple(nodes)
        self._forward = tuple(forward)
        self._structures = tuple(
            _structure(into_from_left=self._forward[k], into_from_right=not self._forward[k+1])
            for k in range(len(self._nodes) - 2)
        )

    def __eq__(self, other):
        if not isinstance(other, Path):
            return False
        return self._nodes == other._nodes and self._forward == other._forward

    def __hash__(self):
        return hash((self._nodes, self._forward))

    def __len__(self):
        return len(self._nodes) - 1

    def __str__(self):
        pieces = [str(self._nodes[0])]
        for node, fwd in zip(self._nodes[1:], self._forward):
            pieces.append('->' if fwd else '<-')
            pieces.append(str(node))
        return ''.join(pieces)

    def __repr__(self):
        return 'Path(%s)' % self

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return self._nodes

    @property
    def forward(self) -> Tuple[bool, ...]:
        return self._forward

    @property
    def start(self):
        return self._nodes[0]

    @property
    def end(self):
        return self._nodes[-1]

    @property
    def internal_nodes(self) -> Tuple[Node, ...]:
        return self._nodes[1:-1]

    @property
    def structures(self) -> Tuple[str, ...]:
        """
        The local structure (``chain``, ``fork`` or ``collider``) at each internal node, in path order.
        """
        return self._structures

    @property
    def colliders(self) -> set:
        return {node for node, s in zip(self.internal_nodes, self._structures) if s == COLLIDER}

    @property
    def noncolliders(self) -> set:
        return {node for node, s in zip(self.internal_nodes, self._structures) if s != COLLIDER}

    @property
    def is_directed(self) -> bool:
        """
        True if every arc points from the start of the path towards its end.
        """
        return all(self._forward)

    @property
    def is_backdoor(self) -> bool:
        """
        True if the first arc on the path points into the start node.
        """
        return len(self._forward) > 0 and not self._forward[0]

    def is_blocked(self, cond_set, dag) -> bool:
        """
        Check whether ``cond_set`` blocks this path in ``dag``.

        A path is blocked if some non-collider on it is in ``cond_set``, or some collider on it has neither itself
        nor any of its descendants in ``cond_set``.
        """
        cond_set = core_utils.to_set(cond_set)
        for node, structure in zip(self.internal_nodes, self._structures):
            if structure == COLLIDER:
                if node not in cond_set and not (dag.descendants_of(node) & cond_set):
                    return True
            elif node in cond_set:
                return True
        return False


def _structure(into_from_left, into_from_right):
    if into_from_left and into_from_right:
        return COLLIDER
    if not into_from_left and not into_from_right:
        return FORK
    return CHAIN
