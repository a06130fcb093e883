from __future__ import annotations

import io

from fdk.contract.detector import detect_contract
from fdk.wire.channels import Channel, DefaultChannel, HttpChannel, open_channel, request_target
from fdk.wire.codec import encode_request, read_response
from fdk.wire.headers import Headers
from fdk.wire.messages import Request, Response


def test_http_channel_reads_framed_requests_until_end_of_stream() -> None:
    payload = encode_request(Request.simple("one")) + encode_request(Request.simple("two"))
    channel = HttpChannel(input=io.BytesIO(payload), output=io.BytesIO(), max_header_bytes=1024)
    first = channel.next_request()
    second = channel.next_request()
    assert first is not None and first.body == b"one"
    assert second is not None and second.body == b"two"
    assert channel.next_request() is None


def test_http_channel_writes_framed_responses() -> None:
    output = io.BytesIO()
    channel = HttpChannel(input=io.BytesIO(), output=output, max_header_bytes=1024)
    channel.write(Response(status=201, body=b"made"))
    decoded = read_response(io.BytesIO(output.getvalue()))
    assert decoded is not None
    assert decoded.status == 201
    assert decoded.body == b"made"


def test_default_channel_yields_whole_input_once() -> None:
    # The default contract carries exactly one invocation per process.
    channel = DefaultChannel(
        input=io.BytesIO(b"line one\nline two\n"),
        output=io.BytesIO(),
        method="POST",
        request_url="http://localhost:8080/r/app/fn?x=1",
        headers=(("Content-Type", "text/plain"),),
    )
    request = channel.next_request()
    assert request is not None
    assert request.body == b"line one\nline two\n"
    assert request.target == "/r/app/fn?x=1"
    assert request.headers == Headers({"Content-Type": "text/plain"})
    assert channel.next_request() is None


def test_default_channel_writes_only_the_body() -> None:
    # Status and headers have no representation in the default contract.
    output = io.BytesIO()
    channel = DefaultChannel(input=io.BytesIO(), output=output, method="GET", request_url="http://h/")
    channel.write(Response(status=400, headers=Headers({"X-A": "1"}), body=b"bad input\n"))
    assert output.getvalue() == b"bad input\n"


def test_open_channel_follows_detected_mode() -> None:
    hot = open_channel(detect_contract({"FN_FORMAT": "http"}), io.BytesIO(), io.BytesIO())
    cold = open_channel(
        detect_contract({"FN_FORMAT": "default", "FN_METHOD": "GET", "FN_REQUEST_URL": "http://h/p"}),
        io.BytesIO(),
        io.BytesIO(),
    )
    assert isinstance(hot, HttpChannel)
    assert isinstance(cold, DefaultChannel)
    assert isinstance(hot, Channel) and isinstance(cold, Channel)


def test_request_target_strips_scheme_and_host() -> None:
    assert request_target("http://fn.example:8080/r/app/hello?name=x") == "/r/app/hello?name=x"
    assert request_target("http://fn.example") == "/"
