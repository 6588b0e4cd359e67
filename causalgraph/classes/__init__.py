from .custom_types import DIRECTED, UNDIRECTED, BIDIRECTED, EDGE_KINDS
from .paths import Path, CHAIN, FORK, COLLIDER
from .dag import DAG, CycleViolation
from .pdag import PDAG, InconsistentOrientation
from .undirected_graph import UndirectedGraph
from . import dag, pdag
