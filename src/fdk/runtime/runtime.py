from __future__ import annotations

import platform
import sys
import traceback
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, TextIO

from fdk.coercion.coercions import decode_input, encode_output
from fdk.config.store import ConfigStore
from fdk.contract.detector import Contract, Mode, detect_contract
from fdk.errors import ContractError, DecodeError, ExitCode, FunctionError
from fdk.observability.log_framing import LogFramer
from fdk.observability.logging import FunctionLogger, JsonlLogSink, LogSink, StderrLogSink
from fdk.runtime.context import InvocationContext, RuntimeContext
from fdk.runtime.error_mapper import STATUS_HEADER, error_response, exit_code_for
from fdk.runtime.handler import Handler, HandlerSpec, Initializer
from fdk.wire.channels import Channel, open_channel
from fdk.wire.headers import Headers
from fdk.wire.messages import Request, Response

FDK_VERSION = "0.1.0"


class RuntimeState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    INVOKING = "invoking"
    DRAINING = "draining"
    TERMINATED = "terminated"


_TRANSITIONS = {
    RuntimeState.UNINITIALIZED: {RuntimeState.READY, RuntimeState.TERMINATED},
    RuntimeState.READY: {RuntimeState.INVOKING, RuntimeState.DRAINING},
    RuntimeState.INVOKING: {RuntimeState.READY, RuntimeState.DRAINING, RuntimeState.TERMINATED},
    RuntimeState.DRAINING: {RuntimeState.TERMINATED},
    RuntimeState.TERMINATED: set(),
}


@dataclass(frozen=True, slots=True)
class Outcome:
    # Result of one invocation cycle: the response to write and the exit code it implies.
    response: Response
    exit_code: ExitCode


@dataclass
class FunctionRuntime:
    """Drives one user function over one channel.

    The runtime owns the user state for its whole lifetime and serves requests
    strictly one after another. Both contracts share the same cycle: decode the
    next request, coerce its body, call the handler, map the result or error to
    a response and write it. Only the channel and the exit-code policy differ.
    """

    contract: Contract
    channel: Channel
    handler: HandlerSpec
    initializer: Initializer | None = None
    config: ConfigStore = field(default_factory=ConfigStore)
    logger: FunctionLogger = field(default_factory=lambda: FunctionLogger(StderrLogSink()))
    framer: LogFramer | None = None
    state: RuntimeState = field(default=RuntimeState.UNINITIALIZED, init=False)
    invocations: int = field(default=0, init=False)
    _user_state: Any = field(default=None, init=False, repr=False)
    _context: RuntimeContext | None = field(default=None, init=False, repr=False)

    def run(self) -> int:
        if self.state is not RuntimeState.UNINITIALIZED:
            raise RuntimeError(f"FunctionRuntime already ran (state={self.state.value})")
        failure = self._initialize()
        if failure is not None:
            self._move(RuntimeState.TERMINATED)
            return int(failure)
        if self.contract.mode is Mode.HTTP:
            code = self._serve_hot()
        else:
            code = self._serve_once()
        self._move(RuntimeState.TERMINATED)
        self.logger.debug("runtime terminated", exit_code=int(code), invocations=self.invocations)
        return int(code)

    def _initialize(self) -> ExitCode | None:
        self._context = RuntimeContext(config=self.config, settings=self.contract.settings, mode=self.contract.mode)
        if self.initializer is None:
            self._move(RuntimeState.READY)
            return None
        try:
            state = self.initializer(self._context)
            if isinstance(state, FunctionError):
                raise state
        except FunctionError as exc:
            self.logger.error(exc.message.rstrip("\n"), phase="init", kind=exc.kind.value)
            return ExitCode.INITIALIZATION
        except Exception as exc:
            self.logger.error(f"Initializer raised {type(exc).__name__}: {exc}", phase="init", traceback=traceback.format_exc())
            return ExitCode.INITIALIZATION
        self._user_state = state
        self._move(RuntimeState.READY)
        return None

    def _serve_hot(self) -> ExitCode:
        # Handler errors are answered and serving continues; only broken framing stops the loop.
        while True:
            try:
                request = self.channel.next_request()
            except DecodeError as exc:
                self._move(RuntimeState.INVOKING)
                self.logger.error(f"Failed to decode request: {exc}", phase="decode")
                self.channel.write(error_response(FunctionError.internal(f"Failed to decode request: {exc}"), self._base_headers()))
                return ExitCode.TRANSPORT
            if request is None:
                self._move(RuntimeState.DRAINING)
                return ExitCode.SUCCESS
            self._move(RuntimeState.INVOKING)
            outcome = self._invoke(request)
            self.channel.write(outcome.response)
            self._move(RuntimeState.READY)

    def _serve_once(self) -> ExitCode:
        try:
            request = self.channel.next_request()
        except DecodeError as exc:
            self._move(RuntimeState.INVOKING)
            self.logger.error(f"Failed to read input: {exc}", phase="decode")
            return ExitCode.TRANSPORT
        if request is None:
            self._move(RuntimeState.DRAINING)
            return ExitCode.SUCCESS
        self._move(RuntimeState.INVOKING)
        outcome = self._invoke(request)
        self.channel.write(outcome.response)
        self._move(RuntimeState.DRAINING)
        return outcome.exit_code

    def _invoke(self, request: Request) -> Outcome:
        assert self._context is not None
        self.invocations += 1
        ctx = InvocationContext.for_request(self._context, request, default_url=self.contract.request_url)
        if self.framer is not None:
            self.framer.frame(request.headers)
        self.logger.debug("invocation started", call_id=ctx.call_id, seq=self.invocations)
        try:
            value = decode_input(request.body, self.handler.input_type, ctx.content_type)
            output = self.handler(self._user_state, value, ctx)
            body, content_type = encode_output(output, ctx.accept_type)
        except FunctionError as exc:
            self.logger.warning(exc.message.rstrip("\n"), call_id=ctx.call_id, kind=exc.kind.value)
            return Outcome(error_response(exc, self._base_headers()), exit_code_for(exc))
        except Exception as exc:
            self.logger.error(
                f"Error executing user function: {type(exc).__name__}: {exc}",
                call_id=ctx.call_id,
                traceback=traceback.format_exc(),
            )
            error = FunctionError.internal(f"Error executing user function: {exc}")
            return Outcome(error_response(error, self._base_headers()), exit_code_for(error))
        headers = self._base_headers()
        if content_type is not None:
            headers.set("Content-Type", content_type)
        for name, value in ctx.response_headers.items():
            headers.add(name, value)
        status = ctx.status_code if ctx.status_code is not None else 200
        headers.set(STATUS_HEADER, str(status))
        return Outcome(Response(status=status, headers=headers, body=body), ExitCode.SUCCESS)

    def _base_headers(self) -> Headers:
        headers = Headers()
        headers.add("Fn-Fdk-Version", f"fdk-python/{FDK_VERSION}")
        headers.add("Fn-Fdk-Runtime", f"python/{platform.python_version()}")
        return headers

    def _move(self, target: RuntimeState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal runtime transition {self.state.value} -> {target.value}")
        self.state = target


def run_function(
    handler: Handler,
    initializer: Initializer | None = None,
    *,
    input_type: Any = None,
    environ: Mapping[str, str] | None = None,
    stdin: BinaryIO | None = None,
    stdout: BinaryIO | None = None,
    stderr: TextIO | None = None,
    log_sink: LogSink | None = None,
) -> int:
    # Detect the contract, wire the channel and run to completion; returns the process exit code.
    spec = HandlerSpec.inspect(handler, input_type)
    fallback = log_sink if log_sink is not None else StderrLogSink(stderr)
    try:
        contract = detect_contract(environ)
    except ContractError as exc:
        FunctionLogger(fallback).error(str(exc), phase="contract")
        return int(ExitCode.CONTRACT)
    file_sink: JsonlLogSink | None = None
    if log_sink is None and contract.settings.log_path:
        try:
            file_sink = JsonlLogSink(Path(contract.settings.log_path))
        except OSError as exc:
            FunctionLogger(fallback).error(f"Cannot open FDK_LOG_PATH: {exc}", phase="contract")
            return int(ExitCode.CONTRACT)
    sink = file_sink if file_sink is not None else fallback
    channel = open_channel(
        contract,
        stdin if stdin is not None else sys.stdin.buffer,
        stdout if stdout is not None else sys.stdout.buffer,
    )
    runtime = FunctionRuntime(
        contract=contract,
        channel=channel,
        handler=spec,
        initializer=initializer,
        config=ConfigStore.from_environ(environ),
        logger=FunctionLogger(sink, level=contract.settings.log_level),
        framer=LogFramer.from_settings(contract.settings, stderr),
    )
    try:
        return runtime.run()
    finally:
        if file_sink is not None:
            file_sink.close()


class Function:
    # Entry point for function programs: `Function.run(handler, init)` never returns.
    @staticmethod
    def run(handler: Handler, initializer: Initializer | None = None, *, input_type: Any = None) -> None:
        raise SystemExit(run_function(handler, initializer, input_type=input_type))
