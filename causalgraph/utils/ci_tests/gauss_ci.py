from typing import Dict
from warnings import warn
import numpy as np
from numpy import sqrt, abs, arctanh, ix_
from scipy.stats import norm

# partial correlations are not computed from correlation submatrices with a larger condition number
MAX_CONDITION_NUMBER = 1e10


class NumericalInstability(Exception):
    def __init__(self, i, j, cond_set, reason):
        self.i = i
        self.j = j
        self.cond_set = cond_set
        self.reason = reason
        cond_str = ','.join(map(str, cond_set)) if cond_set else ''
        message = 'Cannot test %s _||_ %s | {%s}: %s' % (i, j, cond_str, reason)
        super().__init__(message)


def _read_only(a):
    a = np.array(a, dtype=float)
    a.setflags(write=False)
    return a


def partial_correlation_suffstat(samples) -> Dict:
    """
    Helper function to compute the sufficient statistics for the partial_correlation_test from data.

    Parameters
    ----------
    samples:
        (n x p) numpy array, where n is the number of samples and p is the number of variables, or a pandas DataFrame
        with one named column per variable. Column names become the node labels used in tests; for an array the
        labels are the column positions.

    See Also
    --------
    correlation_suffstat

    Return
    ------
    dictionary of sufficient statistics: 'C' (correlation matrix), 'n' (number of samples) and 'nodes' (node label of
    each row/column of 'C').

    Examples
    --------
    >>> import causalgraph as cg
    >>> import pandas as pd
    >>> df = pd.DataFrame({'a': [1., 2., 3., 4.], 'b': [2., 1., 4., 3.]})
    >>> suffstat = cg.partial_correlation_suffstat(df)
    >>> suffstat['nodes']
    ['a', 'b']
    """
    if hasattr(samples, 'columns'):
        nodes = list(samples.columns)
        samples = samples.to_numpy(dtype=float)
    else:
        samples = np.asarray(samples, dtype=float)
        nodes = list(range(samples.shape[1]))
    n = samples.shape[0]
    if n < 2:
        raise ValueError('At least two samples are needed to estimate correlations, got %d' % n)

    constant = [node for node, sd in zip(nodes, samples.std(axis=0)) if sd == 0]
    if constant:
        warn('Constant columns have undefined correlations; tests involving them will fail: %s'
             % ','.join(map(str, constant)))

    with np.errstate(invalid='ignore', divide='ignore'):
        C = np.atleast_2d(np.corrcoef(samples, rowvar=False))
    return correlation_suffstat(C, n, nodes=nodes)


def correlation_suffstat(C, n: int, nodes=None) -> Dict:
    """
    Wrap a precomputed correlation matrix and sample size as sufficient statistics for the
    partial_correlation_test.

    Parameters
    ----------
    C:
        (p x p) correlation matrix, a numpy array or a pandas DataFrame labelled by variable.
    n:
        number of samples the correlation matrix was estimated from.
    nodes:
        node label of each row/column of ``C``. Defaults to the DataFrame labels or to ``range(p)``.
    """
    if hasattr(C, 'columns'):
        nodes = list(C.columns) if nodes is None else nodes
        C = C.to_numpy(dtype=float)
    C = _read_only(C)
    if C.ndim != 2 or C.shape[0] != C.shape[1]:
        raise ValueError('The correlation matrix must be square, got shape %s' % (C.shape,))
    finite = np.isfinite(C)
    if not (abs(C - C.T)[finite & finite.T] <= 1e-8).all():
        raise ValueError('The correlation matrix must be symmetric')
    nodes = list(range(C.shape[0])) if nodes is None else list(nodes)
    if len(nodes) != C.shape[0]:
        raise ValueError('Got %d node labels for a %d x %d correlation matrix' % (len(nodes), *C.shape))
    node2ix = {node: ix for ix, node in enumerate(nodes)}
    if len(node2ix) != len(nodes):
        raise ValueError('Node labels must be unique')
    return dict(C=C, n=int(n), nodes=nodes, node2ix=node2ix)


def compute_partial_correlation(suffstat: Dict, i, j, cond_set=None) -> float:
    """
    Compute the sample partial correlation of ``i`` and ``j`` given ``cond_set`` from the correlation matrix in
    ``suffstat``.

    Raises
    ------
    NumericalInstability
        if the correlation submatrix over ``i``, ``j`` and ``cond_set`` is singular or ill-conditioned.
    """
    C = suffstat['C']
    node2ix = suffstat['node2ix']
    cond_set = list(cond_set) if cond_set is not None else []
    ix_i, ix_j = node2ix[i], node2ix[j]
    ix_cond = [node2ix[k] for k in cond_set]

    # partial correlation is correlation if there is no conditioning
    if len(cond_set) == 0:
        return C[ix_i, ix_j]
    # used closed-form
    elif len(cond_set) == 1:
        k = ix_cond[0]
        denom = (1 - C[ix_j, k]**2) * (1 - C[ix_i, k]**2)
        if not denom > 0:
            raise NumericalInstability(i, j, cond_set,
                                       'conditioning variable is perfectly correlated with a tested variable')
        return (C[ix_i, ix_j] - C[ix_i, k]*C[ix_j, k]) / sqrt(denom)
    else:
        ixs = [ix_i, ix_j, *ix_cond]
        sub = C[ix_(ixs, ixs)]
        if not np.isfinite(sub).all():
            raise NumericalInstability(i, j, cond_set, 'correlation matrix has undefined entries')
        if np.linalg.cond(sub) > MAX_CONDITION_NUMBER:
            raise NumericalInstability(i, j, cond_set, 'correlation submatrix is singular or ill-conditioned')
        theta = np.linalg.inv(sub)
        return -theta[0, 1]/sqrt(theta[0, 0] * theta[1, 1])


def partial_correlation_test(suffstat: Dict, i, j, cond_set=None, alpha=0.01) -> Dict:
    """
    Test the null hypothesis that i and j are conditionally independent given cond_set via Fisher's z-transform,
    assuming the data are multivariate normal.

    Parameters
    ----------
    suffstat:
        dictionary of sufficient statistics, from ``partial_correlation_suffstat`` or ``correlation_suffstat``.
    i:
        label of the first variable.
    j:
        label of the second variable.
    cond_set:
        labels of the conditioning variables.
    alpha:
        Significance level, strictly between 0 and 1.

    Raises
    ------
    NumericalInstability
        if the conditioning set is too large for the sample size, or the partial correlation cannot be computed
        reliably.

    Return
    ------
    dictionary containing statistic, p_value, partial_correlation, and reject.

    Examples
    --------
    >>> import causalgraph as cg
    >>> import numpy as np
    >>> suffstat = cg.correlation_suffstat(np.array([[1, .5], [.5, 1]]), n=100)
    >>> cg.partial_correlation_test(suffstat, 0, 1, alpha=.05)['reject']
    True
    """
    if not 0 < alpha < 1:
        raise ValueError('alpha must be strictly between 0 and 1, got %s' % alpha)
    n = suffstat['n']
    cond_set = list(cond_set) if cond_set is not None else []
    n_cond = len(cond_set)

    dof = n - n_cond - 3
    if dof <= 0:
        raise NumericalInstability(i, j, cond_set, 'conditioning set of size %d is too large for %d samples'
                                   % (n_cond, n))

    r = compute_partial_correlation(suffstat, i, j, cond_set)
    if not np.isfinite(r):
        raise NumericalInstability(i, j, cond_set, 'partial correlation is undefined')
    if abs(r) >= 1:
        raise NumericalInstability(i, j, cond_set, 'partial correlation has magnitude %s' % abs(r))

    # === COMPUTE STATISTIC AND P-VALUE
    statistic = sqrt(dof) * abs(arctanh(r))
    p_value = 2 * norm.sf(statistic)
    critical_value = norm.ppf(1 - alpha/2)

    return dict(
        statistic=float(statistic),
        p_value=float(p_value),
        partial_correlation=float(r),
        reject=bool(statistic > critical_value)
    )
