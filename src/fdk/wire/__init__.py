from .headers import Headers
from .messages import Request, Response
from .codec import encode_request, encode_response, read_request, read_response, write_request, write_response
from .channels import Channel, DefaultChannel, HttpChannel, open_channel

__all__ = [
    "Headers",
    "Request",
    "Response",
    "encode_request",
    "encode_response",
    "read_request",
    "read_response",
    "write_request",
    "write_response",
    "Channel",
    "DefaultChannel",
    "HttpChannel",
    "open_channel",
]
