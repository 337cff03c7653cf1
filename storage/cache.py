"""
Per-run pull request cache.
Maps a PR number to a single shared computation of {pr, linked_issues} so concurrent workers
that reach the same PR number converge on one linked-issues lookup.
"""

import threading
from concurrent.futures import Future
from typing import Callable, Dict, List, Optional, Any

from normalize.models import LinkedIssue, PullRequestRecord


class PRCacheEntry:
    def __init__(self, pr: Optional[PullRequestRecord], linked_issues: List[LinkedIssue]):
        self.pr = pr
        self.linked_issues = linked_issues


class PRCache:
    def __init__(self):
        """Create an empty cache. One instance lives for exactly one changelog run."""
        self._entries: Dict[int, Future] = {}
        self._lock = threading.Lock()
        self.lookups = 0

    def __contains__(self, number: int) -> bool:
        with self._lock:
            return number in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_or_create(self, number: int, factory: Callable[[], PRCacheEntry]) -> PRCacheEntry:
        """Return the entry for `number`, running `factory` only if no worker has claimed the number yet.

        The check-and-insert happens under the lock, so exactly one caller becomes the owner and runs the
        factory (outside the lock). Every other caller blocks on the same future. A factory error is stored
        on the future and re-raised to the owner and to every waiter.
        """
        with self._lock:
            future = self._entries.get(number)
            owner = future is None
            if owner:
                future = Future()
                self._entries[number] = future
                self.lookups += 1
        if owner:
            try:
                future.set_result(factory())
            except BaseException as exc:
                future.set_exception(exc)
                raise
        return future.result()

    def get(self, number: int) -> Optional[PRCacheEntry]:
        """Return a completed entry, or None when the number is unknown or its computation failed/is pending."""
        with self._lock:
            future = self._entries.get(number)
        if future is None or not future.done() or future.exception() is not None:
            return None
        return future.result()

    def backfill(self, number: int, pr: Optional[PullRequestRecord]) -> bool:
        """Patch a full PR object into an entry created without one. Never overwrites a populated PR.

        Returns True when the entry was patched.
        """
        if pr is None:
            return False
        entry = self.get(number)
        if entry is None:
            return False
        with self._lock:
            if entry.pr is None:
                entry.pr = pr
                return True
        return False

    def stats(self) -> Dict[str, Any]:
        """Return basic statistics about the cache: entries and factory executions."""
        with self._lock:
            return {'count': len(self._entries), 'lookups': self.lookups}


__all__ = ["PRCache", "PRCacheEntry"]
