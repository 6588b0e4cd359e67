from causalgraph.classes.dag import DAG
from typing import Union, List


def dsep_test(
        dag: DAG,
        i,
        j,
        cond_set: Union[List, set] = None,
        **kwargs
):
    """
    Conditional independence "test" which answers exactly, from d-separation in a known DAG. Keyword arguments
    meant for statistical tests, such as ``alpha``, are ignored.

    Examples
    --------
    >>> import causalgraph as cg
    >>> d = cg.DAG(arcs={(0, 1), (2, 1)})
    >>> cg.dsep_test(d, 0, 2)['reject']
    False
    """
    return dict(reject=not dag.dsep(i, j, cond_set))
