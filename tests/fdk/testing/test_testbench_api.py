from __future__ import annotations

import json
from typing import Any

import pytest
from pydantic import BaseModel

from fdk.contract.detector import Mode
from fdk.errors import ExitCode, FunctionError
from fdk.runtime.context import InvocationContext
from fdk.testing import BENCH_BASE_URL, Testbench, TestbenchError
from fdk.wire.headers import Headers
from fdk.wire.messages import Request


class Point(BaseModel):
    x: int
    y: int


def _echo(state: Any, body: str) -> str:
    return body


def _norm(state: Any, point: Point) -> dict[str, int]:
    return {"norm1": abs(point.x) + abs(point.y)}


def _shout(state: Any, body: str) -> str:
    if body == "fail":
        raise FunctionError.internal("upstream down")
    if not body:
        raise FunctionError.invalid_input("empty")
    return body.upper()


def _describe(state: Any, body: str, ctx: InvocationContext) -> str:
    return f"{ctx.method} {ctx.request_url} {ctx.header('X-Tag')}"


def test_drain_responses_empties_the_capture() -> None:
    bench = Testbench()
    bench.enqueue_simple("x")
    bench.run(_echo)
    assert len(bench.drain_responses()) == 1
    assert bench.drain_responses() == []


def test_enqueue_then_run_consumes_the_queue() -> None:
    bench = Testbench()
    bench.enqueue_simple(b"a")
    bench.enqueue_simple("b")
    assert bench.pending == 2
    bench.run(_echo)
    assert bench.pending == 0
    assert bench.last_exit_code == ExitCode.SUCCESS


def test_set_config_after_run_is_rejected() -> None:
    bench = Testbench()
    bench.run(_echo)
    with pytest.raises(TestbenchError, match="before run"):
        bench.set_config("KEY", "value")


def test_set_config_rejects_empty_keys() -> None:
    with pytest.raises(TestbenchError):
        Testbench().set_config("", "value")


def test_enqueue_rejects_non_requests() -> None:
    with pytest.raises(TestbenchError, match="expects a Request"):
        Testbench().enqueue(b"raw")  # type: ignore[arg-type]


def test_json_request_is_coerced_into_typed_input() -> None:
    bench = Testbench()
    bench.enqueue(Request.simple('{"x": 3, "y": -4}', content_type="application/json"))
    bench.run(_norm)
    [response] = bench.drain_responses()
    assert response.headers.get("Content-Type") == "application/json"
    assert json.loads(response.body) == {"norm1": 7}


def test_logs_capture_runtime_records() -> None:
    bench = Testbench()
    bench.enqueue_simple("fail")
    bench.run(_shout)
    levels = {r.level for r in bench.logs}
    assert "warning" in levels
    assert "upstream down" in [r.message for r in bench.logs]


def test_default_mode_bench_rebuilds_response_from_exit_code() -> None:
    bench = Testbench(mode=Mode.DEFAULT)
    bench.enqueue_simple("hi")
    assert bench.run(_shout) == ExitCode.SUCCESS
    [response] = bench.drain_responses()
    assert response.status == 200
    assert response.text == "HI"


@pytest.mark.parametrize(
    ("body", "code", "status"),
    [("", ExitCode.INVALID_INPUT, 400), ("fail", ExitCode.INTERNAL, 500)],
)
def test_default_mode_bench_maps_failures(body: str, code: ExitCode, status: int) -> None:
    bench = Testbench(mode=Mode.DEFAULT)
    bench.enqueue_simple(body)
    assert bench.run(_shout) == code
    [response] = bench.drain_responses()
    assert response.status == status


def test_default_mode_bench_passes_request_metadata_through_environment() -> None:
    bench = Testbench(mode=Mode.DEFAULT)
    bench.enqueue(Request(method="PATCH", target="/r/app/fn?q=1", headers=Headers({"X-Tag": "blue"}), body=b""))
    bench.run(_describe)
    [response] = bench.drain_responses()
    assert response.text == f"PATCH {BENCH_BASE_URL}/r/app/fn?q=1 blue"


def test_default_mode_serves_exactly_one_request() -> None:
    bench = Testbench(mode=Mode.DEFAULT)
    bench.enqueue_simple("a")
    bench.enqueue_simple("b")
    with pytest.raises(TestbenchError, match="exactly one request"):
        bench.run(_echo)


def test_raw_fixtures_need_the_http_contract() -> None:
    with pytest.raises(TestbenchError, match="http contract"):
        Testbench(mode=Mode.DEFAULT).enqueue_raw(b"POST / HTTP/1.1\r\n\r\n")


def test_default_mode_initialization_failure_has_no_response() -> None:
    def init(context: Any) -> None:
        raise FunctionError.initialization("nope")

    bench = Testbench(init, mode=Mode.DEFAULT)
    bench.enqueue_simple("x")
    assert bench.run(_echo) == ExitCode.INITIALIZATION
    assert bench.drain_responses() == []


def test_non_latin1_request_header_is_rejected_before_run() -> None:
    bench = Testbench()
    with pytest.raises(ValueError, match="Invalid header value"):
        bench.enqueue(Request(headers=Headers({"X-Name": "日本"})))
    assert bench.pending == 0
