import errno
import os

import pytest

from rmdb import errors


def test_base_error_default_message():
    assert str(errors.RMDBError()) == "Error: "


def test_base_error_with_message():
    err = errors.RMDBError("boom")
    assert str(err) == "Error: boom"
    assert err.msg == "Error: boom"


def test_internal_error_message():
    assert str(errors.InternalError("DiskManager::write_page Error")) == (
        "Error: DiskManager::write_page Error"
    )


def test_unix_error_uses_strerror():
    err = errors.UnixError(errno.ENOENT)
    assert str(err) == "Error: " + os.strerror(errno.ENOENT)
    assert err.errno == errno.ENOENT


def test_file_errors():
    assert str(errors.FileNotOpenError(7)) == "Error: Invalid file descriptor: 7"
    assert str(errors.FileNotClosedError("a.txt")) == "Error: File is opened: a.txt"
    assert str(errors.FileAlreadyExistsError("a.txt")) == "Error: File already exists: a.txt"
    assert str(errors.FileMissingError("a.txt")) == "Error: File not found: a.txt"


def test_record_errors():
    assert str(errors.RecordNotFoundError(3, 4)) == "Error: Record not found: (3,4)"
    assert str(errors.InvalidRecordSizeError(0)) == "Error: Invalid record size: 0"
    assert str(errors.InvalidColLengthError(9)) == "Error: Invalid column length: 9"
    assert str(errors.IndexEntryNotFoundError()) == "Error: Index entry not found"


def test_system_errors():
    assert str(errors.DatabaseNotFoundError("db")) == "Error: Database not found: db"
    assert str(errors.DatabaseExistsError("db")) == "Error: Database already exists: db"
    assert str(errors.TableNotFoundError("t")) == "Error: Table not found: t"
    assert str(errors.TableExistsError("t")) == "Error: Table already exists: t"
    assert str(errors.ColumnNotFoundError("c")) == "Error: Column not found: c"


@pytest.mark.parametrize(
    "cls, prefix",
    [
        (errors.IndexNotFoundError, "Index not found: "),
        (errors.IndexExistsError, "Index already exists: "),
        (errors.UniqueIndexViolationError, "Unique index violation: "),
    ],
)
def test_index_errors_list_columns(cls, prefix):
    err = cls("t", ["a", "b"])
    assert str(err) == "Error: " + prefix + "t.(a, b)"
    assert err.col_names == ["a", "b"]


def test_index_error_single_column():
    assert str(errors.IndexNotFoundError("t", ["a"])) == "Error: Index not found: t.(a)"


def test_query_errors():
    assert str(errors.InvalidValueCountError()) == "Error: Invalid value count"
    assert str(errors.StringOverflowError()) == "Error: String is too long"
    assert str(errors.IncompatibleTypeError("INT", "STRING")) == (
        "Error: Incompatible type error: lhs INT, rhs STRING"
    )
    assert str(errors.AmbiguousColumnError("id")) == "Error: Ambiguous column: id"


def test_page_not_exist_error():
    assert str(errors.PageNotExistError("t", 5)) == "Error: Page 5 in table tnot exits"


def test_errors_are_catchable_as_base():
    err = errors.TableNotFoundError("orders")
    assert err.tab_name == "orders"
    assert str(err) == "Error: Table not found: orders"
    assert isinstance(err, errors.RMDBError)