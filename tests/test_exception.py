import pytest

from rmdb.exception import (
    DatabaseException,
    ExceptionType,
    ExecutionException,
    NotImplementedException,
    exception_type_to_string,
)


@pytest.mark.parametrize(
    "exception_type, name",
    [
        (ExceptionType.INVALID, "Invalid"),
        (ExceptionType.OUT_OF_RANGE, "Out of Range"),
        (ExceptionType.DIVIDE_BY_ZERO, "Divide by Zero"),
        (ExceptionType.INCOMPATIBLE_TYPE, "Incompatible type"),
        (ExceptionType.NOT_IMPLEMENTED, "Not implemented"),
        (ExceptionType.EXECUTION, "Execution"),
    ],
)
def test_exception_type_to_string(exception_type, name):
    assert exception_type_to_string(exception_type) == name


def test_unknown_type_string():
    assert exception_type_to_string(None) == "Unknown"


def test_untyped_exception_prints_message(capsys):
    err = DatabaseException("bad thing")
    assert str(err) == "bad thing"
    assert err.type is ExceptionType.INVALID
    assert capsys.readouterr().err == "Message :: bad thing\n"


def test_untyped_exception_can_be_silent(capsys):
    DatabaseException("quiet", print_message=False)
    assert capsys.readouterr().err == ""


def test_typed_exception_prints_type(capsys):
    err = DatabaseException("oops", ExceptionType.CONVERSION)
    assert err.type is ExceptionType.CONVERSION
    assert capsys.readouterr().err == "\nException Type :: Conversion, Message :: oops\n\n"


def test_not_implemented_exception(capsys):
    with pytest.raises(NotImplementedException) as info:
        raise NotImplementedException("feature")
    assert info.value.type is ExceptionType.NOT_IMPLEMENTED
    assert "Not implemented" in capsys.readouterr().err


def test_execution_exception_is_runtime_error():
    err = ExecutionException("failed")
    assert err.type is ExceptionType.EXECUTION
    assert str(err) == "failed"
    assert isinstance(err, RuntimeError)