"""Transaction states, write records, lock targets and the abort exception."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

from rmdb.defs import Rid

_NO_RID = Rid(-1, -1)


class TransactionState(Enum):
    DEFAULT = 0
    GROWING = 1
    SHRINKING = 2
    COMMITTED = 3
    ABORTED = 4


class IsolationLevel(Enum):
    READ_UNCOMMITTED = 0
    REPEATABLE_READ = 1
    READ_COMMITTED = 2
    SERIALIZABLE = 3


class WType(IntEnum):
    INSERT_TUPLE = 0
    DELETE_TUPLE = 1
    UPDATE_TUPLE = 2


@dataclass
class WriteRecord:
    """A write done by a transaction, kept so it can be undone.

    Inserts carry no record image; deletes and updates carry the old record bytes.
    """

    wtype: WType
    tab_name: str
    rid: Rid
    record: bytes | None = None


class LockDataType(IntEnum):
    TABLE = 0
    RECORD = 1


def _to_int64(value: int) -> int:
    value &= (1 << 64) - 1
    return value - (1 << 64) if value >= 1 << 63 else value


@dataclass(frozen=True)
class LockDataId:
    """The target of a lock: a whole table or one record of it."""

    fd: int
    type: LockDataType
    rid: Rid = _NO_RID

    def __post_init__(self) -> None:
        if self.type == LockDataType.TABLE and self.rid != _NO_RID:
            raise ValueError("a table lock does not name a record")

    @classmethod
    def table(cls, fd: int) -> LockDataId:
        return cls(fd, LockDataType.TABLE)

    @classmethod
    def record(cls, fd: int, rid: Rid) -> LockDataId:
        return cls(fd, LockDataType.RECORD, rid)

    def key(self) -> int:
        """A signed 64-bit integer identifying the target."""
        if self.type == LockDataType.TABLE:
            return self.fd
        return _to_int64(
            (int(self.type) << 63)
            | (self.fd << 31)
            | (self.rid.page_no << 16)
            | self.rid.slot_no
        )

    def __hash__(self) -> int:
        return hash(self.key())


class AbortReason(Enum):
    LOCK_ON_SHIRINKING = 0
    UPGRADE_CONFLICT = 1
    DEADLOCK_PREVENTION = 2


class TransactionAbortError(Exception):
    """Raised when a transaction has to be rolled back."""

    def __init__(self, txn_id: int, abort_reason: AbortReason) -> None:
        self.txn_id = txn_id
        self.abort_reason = abort_reason
        super().__init__(self.info())

    def info(self) -> str:
        if self.abort_reason == AbortReason.LOCK_ON_SHIRINKING:
            return (
                f"Transaction {self.txn_id} aborted because it cannot request locks "
                "on SHRINKING phase\n"
            )
        if self.abort_reason == AbortReason.UPGRADE_CONFLICT:
            return (
                f"Transaction {self.txn_id} aborted because another transaction "
                "is waiting for upgrading\n"
            )
        if self.abort_reason == AbortReason.DEADLOCK_PREVENTION:
            return f"Transaction {self.txn_id} aborted for deadlock prevention\n"
        return "Transaction aborted\n"

    def __str__(self) -> str:
        return self.info()