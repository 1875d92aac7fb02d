"""Transactions with their write sets, lock sets and undo-log buffers."""

from __future__ import annotations

import copy
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Any

from rmdb.common import Value
from rmdb.defs import INVALID_LSN, INVALID_TS, INVALID_TXN_ID
from rmdb.txn_defs import IsolationLevel, LockDataId, TransactionState, WriteRecord


@dataclass(frozen=True)
class UndoLink:
    """Points to an undo log: the owning transaction and the log's index in it."""

    prev_txn: int = INVALID_TXN_ID
    prev_log_idx: int = 0

    def is_valid(self) -> bool:
        return self.prev_txn != INVALID_TXN_ID


@dataclass
class UndoLog:
    """An earlier version of a tuple: which fields changed and their old values."""

    is_deleted: bool = False
    modified_fields: list[bool] = field(default_factory=list)
    tuple_values: list[Value] = field(default_factory=list)
    record: bytes | None = None
    ts: int = INVALID_TS
    prev_version: UndoLink = field(default_factory=UndoLink)


class Transaction:
    """A running transaction and the bookkeeping needed to commit or roll it back."""

    def __init__(
        self,
        txn_id: int,
        isolation_level: IsolationLevel = IsolationLevel.SERIALIZABLE,
    ) -> None:
        self.txn_id = txn_id
        self.isolation_level = isolation_level
        self.state = TransactionState.DEFAULT
        self.txn_mode = False
        self.start_ts = 0
        self.prev_lsn = INVALID_LSN
        self.thread_id = threading.get_ident()
        self.write_set: deque[WriteRecord] = deque()
        self.lock_set: set[LockDataId] = set()
        self.index_latch_page_set: deque[Any] = deque()
        self.index_deleted_page_set: deque[Any] = deque()
        self.read_ts = 0
        self.commit_ts = INVALID_TS
        self._undo_logs: list[UndoLog] = []
        self._latch = threading.Lock()

    def append_write_record(self, write_record: WriteRecord) -> None:
        self.write_set.append(write_record)

    def append_undo_log(self, log: UndoLog) -> UndoLink:
        """Store an undo log and return the link that points to it."""
        with self._latch:
            self._undo_logs.append(log)
            return UndoLink(self.txn_id, len(self._undo_logs) - 1)

    def modify_undo_log(self, log_idx: int, new_log: UndoLog) -> None:
        with self._latch:
            self._undo_logs[log_idx] = new_log

    def get_undo_log(self, log_idx: int) -> UndoLog:
        """A copy of the stored undo log; raises IndexError for an unknown index."""
        with self._latch:
            return copy.deepcopy(self._undo_logs[log_idx])

    def undo_log_count(self) -> int:
        with self._latch:
            return len(self._undo_logs)