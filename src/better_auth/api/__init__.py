"""Response decoding and HTTP transport."""

from .decoder import ApiFailure, DecodeFailure, EnvelopeDecoder, Ok, Result, is_success
from .transport import HttpxTransport, Transport, TransportResponse

__all__ = [
    "EnvelopeDecoder",
    "Ok",
    "ApiFailure",
    "DecodeFailure",
    "Result",
    "is_success",
    "Transport",
    "TransportResponse",
    "HttpxTransport",
]
