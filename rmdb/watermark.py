"""Tracks the read timestamps of running transactions to find the lowest one."""

from __future__ import annotations

import threading


class Watermark:
    """Keeps a count of running transactions per read timestamp.

    The watermark is the lowest read timestamp still in use. It is the last
    commit timestamp when no transaction is running.
    """

    def __init__(self, commit_ts: int) -> None:
        self.commit_ts = commit_ts
        self.watermark = commit_ts
        self.current_reads: dict[int, int] = {}
        self._lock = threading.Lock()

    def _refresh(self) -> None:
        self.watermark = min(self.current_reads) if self.current_reads else self.commit_ts

    def add_txn(self, read_ts: int) -> None:
        """Register a running transaction that reads at ``read_ts``."""
        with self._lock:
            self.current_reads[read_ts] = self.current_reads.get(read_ts, 0) + 1
            self._refresh()

    def remove_txn(self, read_ts: int) -> None:
        """Unregister a transaction; raises ValueError if none reads at ``read_ts``."""
        with self._lock:
            count = self.current_reads.get(read_ts)
            if count is None:
                raise ValueError(f"no running transaction reads at timestamp {read_ts}")
            if count == 1:
                del self.current_reads[read_ts]
            else:
                self.current_reads[read_ts] = count - 1
            self._refresh()

    def update_commit_ts(self, commit_ts: int) -> None:
        """Record the latest commit timestamp; call before removing the committing transaction."""
        with self._lock:
            self.commit_ts = commit_ts
            self._refresh()

    def get_watermark(self) -> int:
        """The lowest read timestamp in use, or the commit timestamp when none is."""
        with self._lock:
            self._refresh()
            return self.watermark