from __future__ import annotations

import inspect
import typing
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from fdk.runtime.context import InvocationContext, RuntimeContext

Handler = Callable[..., Any]
Initializer = Callable[[RuntimeContext], Any]

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


@dataclass(frozen=True, slots=True)
class HandlerSpec:
    # A user handler `(state, input[, ctx=...]) -> output` with its declared input type resolved once.
    func: Handler
    input_type: Any
    wants_context: bool

    @classmethod
    def inspect(cls, func: Handler, input_type: Any = None) -> HandlerSpec:
        if not callable(func):
            raise TypeError(f"Handler must be callable, got {type(func).__name__}")
        params = list(inspect.signature(func).parameters.values())
        positional = [p for p in params if p.kind in _POSITIONAL]
        has_varargs = any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params)
        if len(positional) < 2 and not has_varargs:
            raise TypeError("Handler must accept (state, input) positional parameters")
        wants_context = any(p.name == "ctx" for p in params[2:] if p.kind is not inspect.Parameter.VAR_POSITIONAL)
        if input_type is None:
            input_type = _declared_input_type(func, positional[1] if len(positional) >= 2 else None)
        return cls(func=func, input_type=input_type, wants_context=wants_context)

    def __call__(self, state: Any, value: Any, ctx: InvocationContext) -> Any:
        if self.wants_context:
            return self.func(state, value, ctx=ctx)
        return self.func(state, value)


def _declared_input_type(func: Handler, param: inspect.Parameter | None) -> Any:
    # Unannotated input defaults to text; an annotation that cannot be resolved is a wiring error.
    if param is None or param.annotation is inspect.Parameter.empty:
        return str
    if not isinstance(param.annotation, str):
        return param.annotation
    target = func if inspect.isfunction(func) or inspect.ismethod(func) else type(func).__call__
    try:
        hints = typing.get_type_hints(target)
    except (NameError, TypeError) as exc:
        raise TypeError(f"Cannot resolve input annotation {param.annotation!r} of {_name(func)}: {exc}") from exc
    if param.name not in hints:
        raise TypeError(f"Cannot resolve input annotation {param.annotation!r} of {_name(func)}")
    return hints[param.name]


def _name(func: Handler) -> str:
    return getattr(func, "__qualname__", type(func).__qualname__)
