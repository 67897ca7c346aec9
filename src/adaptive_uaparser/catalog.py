"""
Ordered pattern catalogs with adaptive reordering.

A catalog holds the compiled patterns of one category (user agent, OS or
device) in lookup order. The first pattern producing a non-empty family
wins, so a popular pattern sitting deep in the list costs a long scan on
every call.

Reordering:
- Each pattern counts the lines it matched
- A lookup is a miss if nothing matched or the match sat beyond
  `acceptable_index`
- Once `miss_threshold` misses pile up, the catalog is stably re-sorted
  by match count (most matched first) and the miss count starts over

Catalogs are shared by every caller of a parser. Lookups hold the read
side of a readers-writer lock and sorting holds the write side, so no
lookup ever sees a half-sorted list. Counters are updated under a mutex.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from threading import Condition, Lock

from .patterns import CategoryPattern

logger = logging.getLogger(__name__)

NO_MATCH = -1


class ReadWriteLock:
    """Readers-writer lock. Waiting writers block new readers."""

    def __init__(self):
        self._cond = Condition(Lock())
        self._readers = 0
        self._writing = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writing or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class PatternCatalog:
    """Ordered, self-tuning list of patterns for one category."""

    def __init__(
        self,
        name: str,
        patterns: list[CategoryPattern],
        result_type: type,
        miss_threshold: int,
        acceptable_index: int,
    ):
        self.name = name
        self.result_type = result_type
        self.miss_threshold = miss_threshold
        self.acceptable_index = acceptable_index
        self.misses = 0
        self._patterns = list(patterns)
        self._order_lock = ReadWriteLock()
        self._counter_lock = Lock()

    def __len__(self) -> int:
        return len(self._patterns)

    @property
    def patterns(self) -> list[CategoryPattern]:
        """Snapshot of the current lookup order."""
        with self._order_lock.read():
            return list(self._patterns)

    def lookup(self, line: str):
        """
        Find the first pattern matching a line.

        Args:
            line: The User-Agent string

        Returns:
            (result, index) where index is the position of the matching
            pattern, or NO_MATCH with the default "Other" result
        """
        with self._order_lock.read():
            for index, pattern in enumerate(self._patterns):
                result = pattern.match(line)
                if result is not None:
                    with self._counter_lock:
                        pattern.match_count += 1
                        if index > self.acceptable_index:
                            self.misses += 1
                    return result, index

            with self._counter_lock:
                self.misses += 1

        return self.result_type(), NO_MATCH

    def reorder_if_due(self) -> bool:
        """Re-sort the catalog if enough misses have accumulated.

        Returns:
            True if the catalog was re-sorted
        """
        if self.misses < self.miss_threshold:
            return False

        with self._order_lock.write():
            # Another caller may have sorted while we waited
            if self.misses < self.miss_threshold:
                return False
            self._sort()
        return True

    def reorder(self) -> None:
        """Re-sort the catalog now, regardless of the miss count."""
        with self._order_lock.write():
            self._sort()

    def _sort(self) -> None:
        # Caller holds the write lock. sorted() is stable, so ties keep
        # their current relative order.
        self._patterns = sorted(self._patterns, key=lambda p: p.match_count, reverse=True)
        misses = self.misses
        self.misses = 0
        logger.debug(
            f"Reordered {self.name} catalog after {misses} misses, "
            f"top pattern: {self._patterns[0] if self._patterns else None}"
        )

    def stats(self) -> dict:
        """Current order and counters, for monitoring."""
        with self._order_lock.read():
            with self._counter_lock:
                return {
                    "name": self.name,
                    "misses": self.misses,
                    "miss_threshold": self.miss_threshold,
                    "acceptable_index": self.acceptable_index,
                    "patterns": [
                        {"regex": p.rule.regex, "match_count": p.match_count}
                        for p in self._patterns
                    ],
                }
