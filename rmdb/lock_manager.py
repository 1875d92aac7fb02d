"""Multi-granularity two-phase locking with a no-wait conflict policy."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from rmdb.defs import Rid
from rmdb.transaction import Transaction
from rmdb.txn_defs import AbortReason, LockDataId, TransactionAbortError, TransactionState


class LockMode(Enum):
    SHARED = 0
    EXCLUSIVE = 1
    INTENTION_SHARED = 2
    INTENTION_EXCLUSIVE = 3
    S_IX = 4


class GroupLockMode(Enum):
    """The strongest mode granted on a lock target."""

    NON_LOCK = 0
    IS = 1
    IX = 2
    S = 3
    X = 4
    SIX = 5


_S = LockMode.SHARED
_X = LockMode.EXCLUSIVE
_IS = LockMode.INTENTION_SHARED
_IX = LockMode.INTENTION_EXCLUSIVE
_SIX = LockMode.S_IX

_COMPATIBLE: dict[LockMode, frozenset[LockMode]] = {
    _IS: frozenset({_IS, _IX, _S, _SIX}),
    _IX: frozenset({_IS, _IX}),
    _S: frozenset({_IS, _S}),
    _SIX: frozenset({_IS}),
    _X: frozenset(),
}

_COVERS: dict[LockMode, frozenset[LockMode]] = {
    _X: frozenset(LockMode),
    _SIX: frozenset({_SIX, _S, _IX, _IS}),
    _S: frozenset({_S, _IS}),
    _IX: frozenset({_IX, _IS}),
    _IS: frozenset({_IS}),
}


def _combine(held: LockMode, wanted: LockMode) -> LockMode:
    if wanted in _COVERS[held]:
        return held
    if held in _COVERS[wanted]:
        return wanted
    return _SIX


def _group_mode(modes: Iterable[LockMode]) -> GroupLockMode:
    present = set(modes)
    if _X in present:
        return GroupLockMode.X
    if _SIX in present or {_S, _IX} <= present:
        return GroupLockMode.SIX
    if _S in present:
        return GroupLockMode.S
    if _IX in present:
        return GroupLockMode.IX
    if _IS in present:
        return GroupLockMode.IS
    return GroupLockMode.NON_LOCK


@dataclass
class _LockRequest:
    txn_id: int
    lock_mode: LockMode
    granted: bool = False


@dataclass
class _LockRequestQueue:
    requests: list[_LockRequest] = field(default_factory=list)
    group_lock_mode: GroupLockMode = GroupLockMode.NON_LOCK

    def refresh(self) -> None:
        self.group_lock_mode = _group_mode(r.lock_mode for r in self.requests if r.granted)


class LockManager:
    """Grants table and record locks; a conflicting request aborts its transaction at once."""

    def __init__(self) -> None:
        self._latch = threading.Lock()
        self._lock_table: dict[LockDataId, _LockRequestQueue] = {}

    def _acquire(self, txn: Transaction, lock_id: LockDataId, mode: LockMode) -> bool:
        with self._latch:
            if txn.state == TransactionState.SHRINKING:
                raise TransactionAbortError(txn.txn_id, AbortReason.LOCK_ON_SHIRINKING)
            if txn.state == TransactionState.DEFAULT:
                txn.state = TransactionState.GROWING

            queue = self._lock_table.setdefault(lock_id, _LockRequestQueue())
            own = next((r for r in queue.requests if r.txn_id == txn.txn_id), None)
            target = mode if own is None else _combine(own.lock_mode, mode)
            if own is not None and target == own.lock_mode:
                return True

            conflict = any(
                r.lock_mode not in _COMPATIBLE[target]
                for r in queue.requests
                if r.granted and r.txn_id != txn.txn_id
            )
            if conflict:
                if not queue.requests:
                    del self._lock_table[lock_id]
                raise TransactionAbortError(txn.txn_id, AbortReason.DEADLOCK_PREVENTION)

            if own is None:
                queue.requests.append(_LockRequest(txn.txn_id, target, granted=True))
            else:
                own.lock_mode = target
            queue.refresh()
            txn.lock_set.add(lock_id)
            return True

    def lock_shared_on_record(self, txn: Transaction, rid: Rid, tab_fd: int) -> bool:
        return self._acquire(txn, LockDataId.record(tab_fd, rid), _S)

    def lock_exclusive_on_record(self, txn: Transaction, rid: Rid, tab_fd: int) -> bool:
        return self._acquire(txn, LockDataId.record(tab_fd, rid), _X)

    def lock_shared_on_table(self, txn: Transaction, tab_fd: int) -> bool:
        return self._acquire(txn, LockDataId.table(tab_fd), _S)

    def lock_exclusive_on_table(self, txn: Transaction, tab_fd: int) -> bool:
        return self._acquire(txn, LockDataId.table(tab_fd), _X)

    def lock_is_on_table(self, txn: Transaction, tab_fd: int) -> bool:
        return self._acquire(txn, LockDataId.table(tab_fd), _IS)

    def lock_ix_on_table(self, txn: Transaction, tab_fd: int) -> bool:
        return self._acquire(txn, LockDataId.table(tab_fd), _IX)

    def unlock(self, txn: Transaction, lock_data_id: LockDataId) -> bool:
        """Release the transaction's lock on the target; False if it held none."""
        with self._latch:
            removed = False
            queue = self._lock_table.get(lock_data_id)
            if queue is not None:
                before = len(queue.requests)
                queue.requests = [r for r in queue.requests if r.txn_id != txn.txn_id]
                removed = len(queue.requests) != before
                if queue.requests:
                    queue.refresh()
                else:
                    del self._lock_table[lock_data_id]
            txn.lock_set.discard(lock_data_id)
            if removed and txn.state == TransactionState.GROWING:
                txn.state = TransactionState.SHRINKING
            return removed