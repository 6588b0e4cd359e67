from typing import Set, Hashable, Tuple, FrozenSet, Union
Node = Hashable
DirectedEdge = Tuple[Node, Node]
UndirectedEdge = FrozenSet[Node]
BidirectedEdge = FrozenSet[Node]
NodeSet = Union[Hashable, Set[Hashable]]

# edge kinds, as reported by PDAG.to_edge_list
DIRECTED = 'directed'
UNDIRECTED = 'undirected'
BIDIRECTED = 'bidirected'
EDGE_KINDS = (DIRECTED, UNDIRECTED, BIDIRECTED)
