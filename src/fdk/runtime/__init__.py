from fdk.errors import ExitCode, FunctionError, FunctionErrorKind

from .context import InvocationContext, RuntimeContext
from .error_mapper import error_response, exit_code_for, status_for
from .handler import HandlerSpec
from .runtime import FDK_VERSION, Function, FunctionRuntime, Outcome, RuntimeState, run_function

__all__ = [
    "ExitCode",
    "FDK_VERSION",
    "Function",
    "FunctionError",
    "FunctionErrorKind",
    "FunctionRuntime",
    "HandlerSpec",
    "InvocationContext",
    "Outcome",
    "RuntimeContext",
    "RuntimeState",
    "error_response",
    "exit_code_for",
    "run_function",
    "status_for",
]
