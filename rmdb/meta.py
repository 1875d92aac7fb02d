"""Metadata of columns, indexes, tables and databases, with their text serialization."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from rmdb.defs import ColType
from rmdb.errors import ColumnNotFoundError, IndexNotFoundError, TableNotFoundError


class _Tokens:
    """Whitespace-separated tokens of a metadata text."""

    def __init__(self, text: str) -> None:
        self._it: Iterator[str] = iter(text.split())

    def word(self) -> str:
        try:
            return next(self._it)
        except StopIteration:
            raise ValueError("metadata text ends too early") from None

    def integer(self) -> int:
        token = self.word()
        try:
            return int(token)
        except ValueError:
            raise ValueError(f"expected an integer in metadata, got {token!r}") from None

    def flag(self) -> bool:
        return self.integer() != 0


@dataclass
class ColMeta:
    tab_name: str
    name: str
    type: ColType
    len: int
    offset: int
    index: bool = False

    def _dump(self) -> str:
        return f"{self.tab_name} {self.name} {int(self.type)} {self.len} {self.offset} {int(self.index)}"

    @classmethod
    def _load(cls, tokens: _Tokens) -> ColMeta:
        return cls(
            tab_name=tokens.word(),
            name=tokens.word(),
            type=ColType(tokens.integer()),
            len=tokens.integer(),
            offset=tokens.integer(),
            index=tokens.flag(),
        )


@dataclass
class IndexMeta:
    tab_name: str
    col_tot_len: int = 0
    col_num: int = 0
    cols: list[ColMeta] = field(default_factory=list)
    unique: bool = True

    def _dump(self) -> str:
        head = f"{self.tab_name} {self.col_tot_len} {self.col_num} {int(self.unique)}"
        return "".join([head, *("\n" + col._dump() for col in self.cols)])

    @classmethod
    def _load(cls, tokens: _Tokens) -> IndexMeta:
        index = cls(
            tab_name=tokens.word(),
            col_tot_len=tokens.integer(),
            col_num=tokens.integer(),
            unique=tokens.flag(),
        )
        index.cols = [ColMeta._load(tokens) for _ in range(index.col_num)]
        return index

    def _matches(self, col_names: Sequence[str]) -> bool:
        return self.col_num == len(col_names) and all(
            col.name == name for col, name in zip(self.cols, col_names)
        )


@dataclass
class TabMeta:
    name: str = ""
    cols: list[ColMeta] = field(default_factory=list)
    indexes: list[IndexMeta] = field(default_factory=list)

    def is_col(self, col_name: str) -> bool:
        return any(col.name == col_name for col in self.cols)

    def is_index(self, col_names: Sequence[str]) -> bool:
        """Whether an index exists on exactly these columns, in this order."""
        return any(index._matches(col_names) for index in self.indexes)

    def get_index_meta(self, col_names: Sequence[str]) -> IndexMeta:
        for index in self.indexes:
            if index._matches(col_names):
                return index
        raise IndexNotFoundError(self.name, col_names)

    def get_col(self, col_name: str) -> ColMeta:
        for col in self.cols:
            if col.name == col_name:
                return col
        raise ColumnNotFoundError(col_name)

    def _dump(self) -> str:
        parts = [f"{self.name}\n{len(self.cols)}\n"]
        parts.extend(col._dump() + "\n" for col in self.cols)
        parts.append(f"{len(self.indexes)}\n")
        parts.extend(index._dump() + "\n" for index in self.indexes)
        return "".join(parts)

    @classmethod
    def _load(cls, tokens: _Tokens) -> TabMeta:
        tab = cls(name=tokens.word())
        tab.cols = [ColMeta._load(tokens) for _ in range(tokens.integer())]
        tab.indexes = [IndexMeta._load(tokens) for _ in range(tokens.integer())]
        return tab


@dataclass
class DbMeta:
    """A database: its name and its tables, kept in name order when written."""

    name: str = ""
    tabs: dict[str, TabMeta] = field(default_factory=dict)

    def is_table(self, tab_name: str) -> bool:
        return tab_name in self.tabs

    def set_table(self, tab_name: str, meta: TabMeta) -> None:
        self.tabs[tab_name] = meta

    def get_table(self, tab_name: str) -> TabMeta:
        try:
            return self.tabs[tab_name]
        except KeyError:
            raise TableNotFoundError(tab_name) from None

    def dumps(self) -> str:
        """Serialize to the metadata file format."""
        parts = [f"{self.name}\n{len(self.tabs)}\n"]
        parts.extend(self.tabs[key]._dump() + "\n" for key in sorted(self.tabs))
        return "".join(parts)

    @classmethod
    def loads(cls, text: str) -> DbMeta:
        """Parse the metadata file format; raises ValueError on malformed text."""
        tokens = _Tokens(text)
        db = cls(name=tokens.word())
        for _ in range(tokens.integer()):
            tab = TabMeta._load(tokens)
            db.tabs[tab.name] = tab
        return db