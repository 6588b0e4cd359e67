from .ci_tester import CI_Tester, CI_Test, MemoizedCI_Tester, PlainCI_Tester
from .gauss_ci import partial_correlation_test, partial_correlation_suffstat, correlation_suffstat, \
    compute_partial_correlation, NumericalInstability
from .oracle import dsep_test


def get_ci_tester(
        samples,
        test="partial_correlation",
        memoize=False,
        **kwargs
):
    """
    Build a conditional independence tester from ``samples``.

    Parameters
    ----------
    samples:
        for 'partial_correlation', a numpy array or pandas DataFrame of observations; for 'dsep', a DAG.
    test:
        'partial_correlation' or 'dsep'.
    memoize:
        if True, cache results for the lifetime of the returned tester.
    **kwargs:
        passed on to the test, e.g. ``alpha``.
    """
    if test == "partial_correlation":
        ci_test = partial_correlation_test
        suffstat = partial_correlation_suffstat(samples)
    elif test == "dsep":
        ci_test = dsep_test
        suffstat = samples
    else:
        raise ValueError("Unknown conditional independence test '%s'" % test)

    if memoize:
        return MemoizedCI_Tester(ci_test, suffstat, **kwargs)
    return PlainCI_Tester(ci_test, suffstat, **kwargs)
