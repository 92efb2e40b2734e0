"""
Error handling for spectralmap.

Errors are identified by integer codes grouped by category. Operations that
can meet a dimension mismatch return an ``Outcome`` instead of a numeric
sentinel, so callers decide explicitly whether to unwrap (raise) or inspect.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, Type, TypeVar


# =============================================================================
# Error Codes
# =============================================================================

# Success
SM_OK = 0

# General errors (1-9)
SM_ERROR_UNKNOWN = 1
SM_ERROR_INTERNAL = 2

# Argument errors (10-19)
SM_ERROR_INVALID_ARGUMENT = 10
SM_ERROR_DIMENSION_MISMATCH = 11
SM_ERROR_INDEX_OUT_OF_BOUNDS = 14
SM_ERROR_INSUFFICIENT_RANK = 15

# I/O errors (30-39)
SM_ERROR_IO_ERROR = 30
SM_ERROR_FILE_NOT_FOUND = 31
SM_ERROR_READ_ERROR = 33
SM_ERROR_WRITE_ERROR = 34
SM_ERROR_MALFORMED_INPUT = 37

# Numerical errors (50-59)
SM_ERROR_NUMERICAL_ERROR = 50
SM_ERROR_DIVISION_BY_ZERO = 51
SM_ERROR_CONVERGENCE_ERROR = 54

# Configuration errors (60-69)
SM_ERROR_CONFIGURATION = 60


_ERROR_MESSAGES = {
    SM_OK: "Success",
    SM_ERROR_UNKNOWN: "Unknown error",
    SM_ERROR_INTERNAL: "Internal error",
    SM_ERROR_INVALID_ARGUMENT: "Invalid argument",
    SM_ERROR_DIMENSION_MISMATCH: "Dimension mismatch",
    SM_ERROR_INDEX_OUT_OF_BOUNDS: "Index out of range",
    SM_ERROR_INSUFFICIENT_RANK: "Insufficient rank",
    SM_ERROR_IO_ERROR: "I/O error",
    SM_ERROR_FILE_NOT_FOUND: "File not found",
    SM_ERROR_READ_ERROR: "Read error",
    SM_ERROR_WRITE_ERROR: "Write error",
    SM_ERROR_MALFORMED_INPUT: "Malformed input",
    SM_ERROR_NUMERICAL_ERROR: "Numerical error",
    SM_ERROR_DIVISION_BY_ZERO: "Division by zero",
    SM_ERROR_CONVERGENCE_ERROR: "Convergence error",
    SM_ERROR_CONFIGURATION: "Configuration error",
}


def error_message(code: int) -> str:
    """Default message for an error code."""
    return _ERROR_MESSAGES.get(code, f"Unknown error (code={code})")


# =============================================================================
# Exception Classes
# =============================================================================

class SpectralMapError(Exception):
    """
    Base exception for all spectralmap errors.

    Attributes:
        code: One of the ``SM_*`` error codes.
        message: Human readable detail.
    """

    default_code = SM_ERROR_UNKNOWN

    def __init__(self, message: Optional[str] = None, code: Optional[int] = None):
        self.code = self.default_code if code is None else code
        if message is None:
            message = error_message(self.code)
        self.message = message
        super().__init__(f"spectralmap error {self.code}: {message}")

    @classmethod
    def from_code(cls, code: int, context: str = "") -> "SpectralMapError":
        """Create the matching exception subclass for ``code`` with optional context."""
        base_msg = error_message(code)
        msg = f"{context}: {base_msg}" if context else base_msg
        exc_cls = _CODE_TO_EXCEPTION.get(code, cls)
        return exc_cls(msg, code=code)


class ConfigurationError(SpectralMapError):
    """Invalid arguments or configuration values; raised before any I/O."""

    default_code = SM_ERROR_CONFIGURATION


class DimensionMismatchError(SpectralMapError):
    """Operands of a dimension-sensitive operation have incompatible shapes."""

    default_code = SM_ERROR_DIMENSION_MISMATCH


class IndexOutOfRangeError(SpectralMapError):
    """An index or count exceeds the length of the sequence it addresses."""

    default_code = SM_ERROR_INDEX_OUT_OF_BOUNDS


class InsufficientRankError(SpectralMapError):
    """The requested number of singular triplets exceeds what the matrix supports."""

    default_code = SM_ERROR_INSUFFICIENT_RANK


class MatrixFormatError(SpectralMapError):
    """A matrix file could be read but its content is malformed."""

    default_code = SM_ERROR_MALFORMED_INPUT


class MatrixIOError(SpectralMapError):
    """A matrix file could not be opened, read or written."""

    default_code = SM_ERROR_IO_ERROR


class NumericalError(SpectralMapError):
    """A numeric result is undefined (e.g. cosine with a zero vector)."""

    default_code = SM_ERROR_NUMERICAL_ERROR


_CODE_TO_EXCEPTION: Dict[int, Type[SpectralMapError]] = {
    SM_ERROR_CONFIGURATION: ConfigurationError,
    SM_ERROR_DIMENSION_MISMATCH: DimensionMismatchError,
    SM_ERROR_INDEX_OUT_OF_BOUNDS: IndexOutOfRangeError,
    SM_ERROR_INSUFFICIENT_RANK: InsufficientRankError,
    SM_ERROR_MALFORMED_INPUT: MatrixFormatError,
    SM_ERROR_IO_ERROR: MatrixIOError,
    SM_ERROR_FILE_NOT_FOUND: MatrixIOError,
    SM_ERROR_READ_ERROR: MatrixIOError,
    SM_ERROR_WRITE_ERROR: MatrixIOError,
    SM_ERROR_NUMERICAL_ERROR: NumericalError,
    SM_ERROR_DIVISION_BY_ZERO: NumericalError,
}


# =============================================================================
# Result-or-Error Type
# =============================================================================

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Result of a computation that may fail on incompatible inputs.

    Exactly one of ``value`` (on success) or a non-zero ``code`` is
    meaningful. ``unwrap()`` turns a failure into the matching exception.

    Example:
        >>> out = cosine_similarity(x, y)
        >>> if out.ok:
        ...     use(out.value)
        >>> cos = out.unwrap()  # raises DimensionMismatchError on mismatch
    """

    value: Optional[T] = None
    code: int = SM_OK
    message: str = ""

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, code: int, context: str = "") -> "Outcome[Any]":
        base_msg = error_message(code)
        msg = f"{context}: {base_msg}" if context else base_msg
        return cls(value=None, code=code, message=msg)

    @property
    def ok(self) -> bool:
        return self.code == SM_OK

    def unwrap(self) -> T:
        """Return the value or raise the exception matching ``code``."""
        if self.ok:
            return self.value  # type: ignore[return-value]
        exc_cls = _CODE_TO_EXCEPTION.get(self.code, SpectralMapError)
        raise exc_cls(self.message, code=self.code)

    def value_or(self, default: T) -> T:
        return self.value if self.ok else default  # type: ignore[return-value]


def check_outcome(outcome: Outcome[T], context: str = "") -> T:
    """
    Unwrap an outcome, prefixing the error message with ``context``.

    Raises:
        SpectralMapError: Subclass matching the outcome's code if it failed.
    """
    if outcome.ok:
        return outcome.value  # type: ignore[return-value]
    msg = f"{context}: {outcome.message}" if context else outcome.message
    exc_cls = _CODE_TO_EXCEPTION.get(outcome.code, SpectralMapError)
    raise exc_cls(msg, code=outcome.code)
