from __future__ import annotations

from enum import Enum, IntEnum


class FunctionErrorKind(str, Enum):
    # Stable error kinds reported by user code and by the coercion layer.
    INITIALIZATION = "initialization"
    INVALID_INPUT = "invalid_input"
    INTERNAL = "internal"
    COERCION = "coercion"


class ExitCode(IntEnum):
    # Process exit codes; each failure class gets its own value for the supervisor.
    SUCCESS = 0
    INVALID_INPUT = 1
    INTERNAL = 2
    COERCION = 3
    INITIALIZATION = 4
    TRANSPORT = 5
    CONTRACT = 6


class FunctionError(Exception):
    # Error raised by initializers/handlers; never dropped, always becomes a response or exit code.
    def __init__(self, kind: FunctionErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = FunctionErrorKind(kind)
        self.message = message

    @classmethod
    def initialization(cls, message: str) -> FunctionError:
        return cls(FunctionErrorKind.INITIALIZATION, message)

    @classmethod
    def invalid_input(cls, message: str) -> FunctionError:
        return cls(FunctionErrorKind.INVALID_INPUT, message)

    @classmethod
    def internal(cls, message: str) -> FunctionError:
        return cls(FunctionErrorKind.INTERNAL, message)

    @classmethod
    def coercion(cls, message: str) -> FunctionError:
        return cls(FunctionErrorKind.COERCION, message)

    def __repr__(self) -> str:
        return f"FunctionError(kind={self.kind.value!r}, message={self.message!r})"


class DecodeError(ValueError):
    # Framing failure on the input stream; the message boundary can no longer be trusted.
    pass


class ContractError(ValueError):
    # Process environment does not describe a supported function contract.
    pass
