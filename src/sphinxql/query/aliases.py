"""Select alias generation for OR-grouped filters.

SphinxQL's WHERE clause only combines predicates with AND, so ``or_where``
moves the OR expression into the select list under a synthesized alias and
filters on ``alias = 1``. Aliases must be unique across every query in the
process; they come from one counter owned by this module unless a query is
given its own.
"""

import itertools
import threading


class AliasCounter:
    """Monotonically increasing, thread-safe alias source.

    Example:
        >>> counter = AliasCounter()
        >>> counter.next_alias()
        'orX0'
        >>> counter.next_alias()
        'orX1'
    """

    def __init__(self, prefix: str = "orX", start: int = 0):
        self.prefix = prefix
        self._start = start
        self._lock = threading.Lock()
        self._counter = itertools.count(start)

    def next_alias(self) -> str:
        with self._lock:
            index = next(self._counter)
        return f"{self.prefix}{index}"

    def reset(self) -> None:
        """Restart numbering. Intended for tests."""
        with self._lock:
            self._counter = itertools.count(self._start)


_alias_counter = AliasCounter()


def get_alias_counter() -> AliasCounter:
    """Return the process-wide counter shared by queries without their own."""
    return _alias_counter
