from .content_type import ContentType
from .coercions import body_as_text, decode_input, encode_output

__all__ = ["ContentType", "body_as_text", "decode_input", "encode_output"]
