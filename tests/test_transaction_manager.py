import pytest

from rmdb.defs import INVALID_TXN_ID, Rid
from rmdb.lock_manager import LockManager
from rmdb.transaction import Transaction, UndoLink
from rmdb.transaction_manager import ConcurrencyMode, TransactionManager, VersionUndoLink
from rmdb.txn_defs import TransactionState, WriteRecord, WType


class FakeLog:
    def __init__(self):
        self.flushes = 0

    def flush_log_to_disk(self):
        self.flushes += 1


class FakeFile:
    def __init__(self):
        self.calls = []

    def delete_record(self, rid, context):
        self.calls.append(("delete", rid, None, context.txn.txn_id))

    def update_record(self, rid, data, context):
        self.calls.append(("update", rid, data, context.txn.txn_id))

    def insert_record(self, data, context):
        self.calls.append(("insert", None, data, context.txn.txn_id))


class FakeSm:
    def __init__(self):
        self.fhs = {"t": FakeFile()}


@pytest.fixture
def tm():
    return TransactionManager(LockManager(), FakeSm())


def test_begin_new_transactions(tm):
    a = tm.begin(None, None)
    b = tm.begin(None, None)
    assert b.txn_id == a.txn_id + 1
    assert a.txn_mode is True
    assert a.state == TransactionState.DEFAULT
    assert tm.get_transaction(a.txn_id) is a
    assert tm.get_transaction(b.txn_id) is b


def test_begin_existing_resets_state(tm):
    txn = Transaction(42)
    txn.state = TransactionState.ABORTED
    assert tm.begin(txn, None) is txn
    assert txn.state == TransactionState.DEFAULT
    assert tm.get_transaction(42) is txn


def test_get_transaction_missing(tm):
    assert tm.get_transaction(INVALID_TXN_ID) is None
    assert tm.get_transaction(999) is None


def test_commit_releases_everything(tm):
    log = FakeLog()
    a = tm.begin(None, log)
    tm.lock_manager.lock_exclusive_on_table(a, 5)
    tm.commit(a, log)
    assert a.state == TransactionState.COMMITTED
    assert log.flushes == 1
    assert a.lock_set == set()
    assert tm.get_transaction(a.txn_id) is None
    b = tm.begin(None, log)
    assert tm.lock_manager.lock_exclusive_on_table(b, 5) is True


def test_commit_none_raises(tm):
    with pytest.raises(ValueError):
        tm.commit(None, FakeLog())


def test_abort_undoes_writes_newest_first():
    sm = FakeSm()
    tm = TransactionManager(LockManager(), sm)
    log = FakeLog()
    txn = tm.begin(None, log)
    txn.append_write_record(WriteRecord(WType.INSERT_TUPLE, "t", Rid(1, 0)))
    txn.append_write_record(WriteRecord(WType.UPDATE_TUPLE, "t", Rid(1, 1), b"old"))
    txn.append_write_record(WriteRecord(WType.DELETE_TUPLE, "t", Rid(1, 2), b"gone"))
    tm.abort(txn, log)
    assert sm.fhs["t"].calls == [
        ("insert", None, b"gone", txn.txn_id),
        ("update", Rid(1, 1), b"old", txn.txn_id),
        ("delete", Rid(1, 0), None, txn.txn_id),
    ]
    assert not txn.write_set
    assert txn.state == TransactionState.ABORTED
    assert log.flushes == 1
    assert tm.get_transaction(txn.txn_id) is None


def test_abort_without_log_manager_releases_locks(tm):
    txn = tm.begin(None, None)
    tm.lock_manager.lock_shared_on_record(txn, Rid(0, 0), 2)
    tm.abort(txn, None)
    assert txn.lock_set == set()
    other = tm.begin(None, None)
    assert tm.lock_manager.lock_exclusive_on_record(other, Rid(0, 0), 2) is True


def test_version_undo_link_from_optional():
    assert VersionUndoLink.from_optional_undo_link(None) is None
    link = UndoLink(3, 1)
    version = VersionUndoLink.from_optional_undo_link(link)
    assert version.prev == link
    assert version.in_progress is False


def test_concurrency_mode_default_and_set(tm):
    assert tm.concurrency_mode == ConcurrencyMode.TWO_PHASE_LOCKING
    tm.concurrency_mode = ConcurrencyMode.MVCC
    assert tm.concurrency_mode == ConcurrencyMode.MVCC