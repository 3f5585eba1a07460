import operator
from typing import Any, Callable, Optional

import numpy as np

Comparator = Callable[[Any, Any], Any]


def natural_less(vectorized: bool = False) -> Comparator:
    """
    The natural strict less-than relation.
    Vectorized backends compare whole blocks at once, so they get the elementwise numpy ufunc.
    """
    if vectorized:
        return np.less
    return operator.lt


def resolve_comparator(comp: Optional[Comparator], policy) -> Comparator:
    if comp is not None:
        return comp
    return natural_less(policy.vectorized)


def reverse_order(comp: Comparator) -> Comparator:
    """Swap the arguments of comp, e.g. to search a sequence sorted in descending order."""
    def reversed_comp(a, b):
        return comp(b, a)

    return reversed_comp


def key_order(key: Callable[[Any], Any], comp: Optional[Comparator] = None) -> Comparator:
    """
    Order elements by key(elem). Both arguments are passed through key, so queries must be elements too.
    """
    comp = comp or operator.lt

    def keyed_comp(a, b):
        return comp(key(a), key(b))

    return keyed_comp
