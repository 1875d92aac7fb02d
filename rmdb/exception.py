"""Typed runtime exceptions used by the execution layer."""

from __future__ import annotations

import sys
from enum import Enum
from typing import ClassVar


class ExceptionType(Enum):
    INVALID = 0
    OUT_OF_RANGE = 1
    CONVERSION = 2
    UNKNOWN_TYPE = 3
    DECIMAL = 4
    MISMATCH_TYPE = 5
    DIVIDE_BY_ZERO = 6
    INCOMPATIBLE_TYPE = 8
    OUT_OF_MEMORY = 9
    NOT_IMPLEMENTED = 11
    EXECUTION = 12


_TYPE_NAMES = {
    ExceptionType.INVALID: "Invalid",
    ExceptionType.OUT_OF_RANGE: "Out of Range",
    ExceptionType.CONVERSION: "Conversion",
    ExceptionType.UNKNOWN_TYPE: "Unknown Type",
    ExceptionType.DECIMAL: "Decimal",
    ExceptionType.MISMATCH_TYPE: "Mismatch Type",
    ExceptionType.DIVIDE_BY_ZERO: "Divide by Zero",
    ExceptionType.INCOMPATIBLE_TYPE: "Incompatible type",
    ExceptionType.OUT_OF_MEMORY: "Out of Memory",
    ExceptionType.NOT_IMPLEMENTED: "Not implemented",
    ExceptionType.EXECUTION: "Execution",
}


def exception_type_to_string(exception_type: ExceptionType) -> str:
    """Human-readable name of an exception type."""
    return _TYPE_NAMES.get(exception_type, "Unknown")


class DatabaseException(RuntimeError):
    """Runtime exception carrying an ExceptionType; reports itself on stderr in debug runs."""

    print_disabled: ClassVar[bool] = False

    def __init__(
        self,
        message: str,
        exception_type: ExceptionType | None = None,
        print_message: bool = True,
    ) -> None:
        super().__init__(message)
        self.message = message
        if exception_type is None:
            self.type = ExceptionType.INVALID
            if __debug__ and print_message:
                sys.stderr.write(f"Message :: {message}\n")
        else:
            self.type = exception_type
            if __debug__ and print_message and not DatabaseException.print_disabled:
                sys.stderr.write(
                    f"\nException Type :: {exception_type_to_string(exception_type)}"
                    f", Message :: {message}\n\n"
                )


class NotImplementedException(DatabaseException):
    def __init__(self, message: str) -> None:
        super().__init__(message, ExceptionType.NOT_IMPLEMENTED)


class ExecutionException(DatabaseException):
    def __init__(self, message: str) -> None:
        super().__init__(message, ExceptionType.EXECUTION, True)