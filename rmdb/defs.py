"""Basic identifiers, column types, the record-scan interface and engine constants."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntEnum

BUFFER_LENGTH = 8192

INVALID_FRAME_ID = -1
INVALID_PAGE_ID = -1
INVALID_TXN_ID = -1
INVALID_TIMESTAMP = -1
INVALID_LSN = -1
TXN_START_ID = 1 << 62
INVALID_TS = -1
HEADER_PAGE_ID = 0
PAGE_SIZE = 4096
BUFFER_POOL_SIZE = 65536
LOG_BUFFER_SIZE = 1024 * PAGE_SIZE
BUCKET_SIZE = 50

LOG_FILE_NAME = "db.log"
REPLACER_TYPE = "LRU"
DB_META_NAME = "db.meta"


@dataclass(frozen=True)
class Rid:
    """Location of a record: page number and slot number."""

    page_no: int
    slot_no: int

    def __str__(self) -> str:
        return f"({self.page_no}, {self.slot_no})"


class ColType(IntEnum):
    TYPE_INT = 0
    TYPE_FLOAT = 1
    TYPE_STRING = 2
    TYPE_DOUBLE = 3


_COLTYPE_NAMES = {
    ColType.TYPE_INT: "INT",
    ColType.TYPE_FLOAT: "FLOAT",
    ColType.TYPE_STRING: "STRING",
}


def coltype2str(col_type: ColType) -> str:
    """Return the display name of a column type; raises KeyError for types without one."""
    return _COLTYPE_NAMES[ColType(col_type)]


class RecScan(ABC):
    """A cursor over record ids; iterating yields the remaining ids."""

    @abstractmethod
    def next(self) -> None:
        """Advance to the next record."""

    @abstractmethod
    def is_end(self) -> bool:
        """Whether the scan is exhausted."""

    @abstractmethod
    def rid(self) -> Rid:
        """The id of the current record."""

    def __iter__(self) -> Iterator[Rid]:
        while not self.is_end():
            yield self.rid()
            self.next()