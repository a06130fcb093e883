from __future__ import annotations

import argparse
import importlib
from collections.abc import Callable, Sequence
from typing import Any

from fdk.errors import ExitCode
from fdk.observability.logging import FunctionLogger, StderrLogSink
from fdk.runtime.handler import HandlerSpec
from fdk.runtime.runtime import run_function

# --input-type values; "json" leaves the body parsed but untyped.
INPUT_TYPES: dict[str, Any] = {"text": str, "bytes": bytes, "json": Any}


class LauncherError(ValueError):
    # Handler/initializer reference cannot be resolved.
    pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fdk-run", description="Run a function under the Fn function contract")
    parser.add_argument("handler", help="Handler reference, module:attribute")
    parser.add_argument("--init", help="Initializer reference, module:attribute")
    parser.add_argument("--input-type", choices=sorted(INPUT_TYPES), help="Override the handler's declared input type")
    return parser


def parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def load_callable(reference: str) -> Callable[..., Any]:
    # "package.module:name" or "package.module:Class.method".
    module_name, sep, attr_path = reference.partition(":")
    if not sep or not module_name or not attr_path:
        raise LauncherError(f"Expected module:attribute, got {reference!r}")
    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise LauncherError(f"Cannot import {module_name!r}: {exc}") from exc
    for part in attr_path.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise LauncherError(f"{module_name!r} has no attribute {attr_path!r}") from exc
    if not callable(target):
        raise LauncherError(f"{reference!r} is not callable")
    return target


def run(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    input_type = INPUT_TYPES[args.input_type] if args.input_type else None
    try:
        handler = load_callable(args.handler)
        initializer = load_callable(args.init) if args.init else None
        HandlerSpec.inspect(handler, input_type)
    except (LauncherError, TypeError) as exc:
        FunctionLogger(StderrLogSink()).error(str(exc), phase="launch")
        return int(ExitCode.CONTRACT)
    return run_function(handler, initializer, input_type=input_type)


def main(argv: Sequence[str] | None = None) -> int:
    return run(list(argv) if argv is not None else None)
