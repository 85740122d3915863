from typing import Callable, Dict, Hashable, Iterable, List, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


def group_by_root(rows: Iterable[V], key: Callable[[V], K]) -> Dict[K, List[V]]:
    """Group rows under their root id.

    Roots keep the order in which they were first seen and each group keeps
    its rows in input order.
    """
    groups: Dict[K, List[V]] = {}
    for row in rows:
        groups.setdefault(key(row), []).append(row)
    return groups
