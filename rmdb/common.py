"""Values, column references, conditions and clauses shared by the planner and executors."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum

from rmdb.defs import ColType
from rmdb.errors import StringOverflowError

_INT = struct.Struct("<i")
_FLOAT = struct.Struct("<f")


@dataclass(frozen=True)
class TabCol:
    """A column reference, optionally qualified by table and carrying an alias."""

    tab_name: str = ""
    col_name: str = ""
    alias: str = ""

    def _order_key(self) -> tuple[str, str]:
        return (self.tab_name, self.col_name)

    def __lt__(self, other: TabCol) -> bool:
        return self._order_key() < other._order_key()

    def __le__(self, other: TabCol) -> bool:
        return self._order_key() <= other._order_key()

    def __gt__(self, other: TabCol) -> bool:
        return self._order_key() > other._order_key()

    def __ge__(self, other: TabCol) -> bool:
        return self._order_key() >= other._order_key()


@dataclass
class Value:
    """A typed literal: an int, a float or a string."""

    type: ColType = ColType.TYPE_INT
    value: int | float | str = 0

    @classmethod
    def of_int(cls, value: int) -> Value:
        return cls(ColType.TYPE_INT, int(value))

    @classmethod
    def of_float(cls, value: float) -> Value:
        return cls(ColType.TYPE_FLOAT, float(value))

    @classmethod
    def of_str(cls, value: str) -> Value:
        return cls(ColType.TYPE_STRING, str(value))

    def to_bytes(self, length: int) -> bytes:
        """Encode the value as a fixed-width column of ``length`` bytes."""
        if self.type == ColType.TYPE_INT:
            if length != _INT.size:
                raise ValueError(f"an int column is {_INT.size} bytes, not {length}")
            return _INT.pack(int(self.value))
        if self.type == ColType.TYPE_FLOAT:
            if length != _FLOAT.size:
                raise ValueError(f"a float column is {_FLOAT.size} bytes, not {length}")
            return _FLOAT.pack(float(self.value))
        if self.type == ColType.TYPE_STRING:
            encoded = str(self.value).encode("utf-8")
            if length < len(encoded):
                raise StringOverflowError()
            return encoded.ljust(length, b"\0")
        raise ValueError(f"cannot encode a value of type {self.type!r}")


class CompOp(IntEnum):
    OP_EQ = 0
    OP_NE = 1
    OP_LT = 2
    OP_GT = 3
    OP_LE = 4
    OP_GE = 5


class AggFuncType(IntEnum):
    AGG_COUNT = 0
    AGG_MAX = 1
    AGG_MIN = 2
    AGG_SUM = 3
    AGG_AVG = 4


@dataclass
class AggFunc:
    """An aggregate call; COUNT(*) has an empty column."""

    func_type: AggFuncType = AggFuncType.AGG_COUNT
    col: TabCol = field(default_factory=TabCol)
    alias: str = ""


@dataclass
class Condition:
    """A comparison between a column or aggregate and a column, aggregate or value."""

    lhs_col: TabCol = field(default_factory=TabCol)
    op: CompOp = CompOp.OP_EQ
    is_rhs_val: bool = False
    rhs_col: TabCol = field(default_factory=TabCol)
    rhs_val: Value = field(default_factory=Value)
    is_lhs_agg: bool = False
    is_rhs_agg: bool = False
    lhs_agg: AggFunc = field(default_factory=AggFunc)
    rhs_agg: AggFunc = field(default_factory=AggFunc)
    lhs_value: Value = field(default_factory=Value)
    rhs_value: Value = field(default_factory=Value)


@dataclass
class SetClause:
    """One ``column = value`` assignment of an UPDATE."""

    lhs: TabCol
    rhs: Value