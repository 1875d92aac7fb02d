"""Begins, commits and rolls back transactions and keeps the table of running ones."""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from rmdb.defs import INVALID_TXN_ID
from rmdb.lock_manager import LockManager
from rmdb.transaction import Transaction, UndoLink
from rmdb.txn_defs import TransactionState, WType
from rmdb.watermark import Watermark


class ConcurrencyMode(Enum):
    TWO_PHASE_LOCKING = 0
    BASIC_TO = 1
    MVCC = 2


@dataclass(frozen=True)
class VersionUndoLink:
    """The first link of a tuple's version chain."""

    prev: UndoLink = field(default_factory=UndoLink)
    in_progress: bool = False

    @classmethod
    def from_optional_undo_link(cls, undo_link: UndoLink | None) -> VersionUndoLink | None:
        return None if undo_link is None else cls(undo_link)


@dataclass
class _RollbackContext:
    lock_mgr: LockManager | None
    log_mgr: Any
    txn: Transaction


class TransactionManager:
    """Hands out transaction ids and finishes transactions by commit or rollback.

    ``sm_manager`` must expose ``fhs``, a mapping from table name to a record file
    handle offering ``insert_record``, ``update_record`` and ``delete_record``.
    """

    def __init__(
        self,
        lock_manager: LockManager | None,
        sm_manager: Any,
        concurrency_mode: ConcurrencyMode = ConcurrencyMode.TWO_PHASE_LOCKING,
    ) -> None:
        self.lock_manager = lock_manager
        self.concurrency_mode = concurrency_mode
        self.txn_map: dict[int, Transaction] = {}
        self.running_txns = Watermark(0)
        self.last_commit_ts = 0
        self._sm_manager = sm_manager
        self._ids = itertools.count(0)
        self._id_lock = threading.Lock()
        self._latch = threading.Lock()

    def _release_locks(self, txn: Transaction) -> None:
        if self.lock_manager is not None:
            for lock_id in list(txn.lock_set):
                self.lock_manager.unlock(txn, lock_id)
        txn.lock_set.clear()

    def begin(self, txn: Transaction | None, log_manager: Any) -> Transaction:
        """Start ``txn``, or a new explicit transaction when it is None, and register it."""
        if txn is None:
            with self._id_lock:
                new_id = next(self._ids)
            txn = Transaction(new_id)
            txn.txn_mode = True
        txn.state = TransactionState.DEFAULT
        with self._latch:
            self.txn_map[txn.txn_id] = txn
        return txn

    def commit(self, txn: Transaction | None, log_manager: Any) -> None:
        """Mark the transaction committed, flush the log and release its locks."""
        if txn is None:
            raise ValueError("Transaction does not exist.")
        txn.state = TransactionState.COMMITTED
        if log_manager is not None:
            log_manager.flush_log_to_disk()
        txn.index_latch_page_set.clear()
        self._release_locks(txn)
        with self._latch:
            self.txn_map.pop(txn.txn_id, None)

    def abort(self, txn: Transaction, log_manager: Any) -> None:
        """Undo the transaction's writes newest first, then release everything it holds."""
        context = _RollbackContext(self.lock_manager, log_manager, txn)
        while txn.write_set:
            record = txn.write_set.pop()
            file_handle = self._sm_manager.fhs[record.tab_name]
            if record.wtype == WType.INSERT_TUPLE:
                file_handle.delete_record(record.rid, context)
            elif record.wtype == WType.UPDATE_TUPLE:
                file_handle.update_record(record.rid, record.record, context)
            elif record.wtype == WType.DELETE_TUPLE:
                file_handle.insert_record(record.record, context)

        txn.state = TransactionState.ABORTED
        if log_manager is not None:
            log_manager.flush_log_to_disk()
        txn.index_latch_page_set.clear()
        self._release_locks(txn)
        with self._latch:
            self.txn_map.pop(txn.txn_id, None)

    def get_transaction(self, txn_id: int) -> Transaction | None:
        """The running transaction with this id, or None."""
        if txn_id == INVALID_TXN_ID:
            return None
        with self._latch:
            return self.txn_map.get(txn_id)