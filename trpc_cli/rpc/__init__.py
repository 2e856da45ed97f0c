"""
RPC Layer.

This package handles all communication with the daemon's JSON RPC endpoint.
"""

from .client import TransmissionClient
from .envelope import (
    Method,
    RpcRequest,
    RpcResponse,
    decode_response,
    encode_request,
    value_from_response,
)
from .ids import Ids, IdsKind
from .session import SESSION_ID_HEADER, SessionNegotiator, SessionState
from .transport import AiohttpTransport, Transport, TransportResponse

__all__ = [
    "SESSION_ID_HEADER",
    "AiohttpTransport",
    "Ids",
    "IdsKind",
    "Method",
    "RpcRequest",
    "RpcResponse",
    "SessionNegotiator",
    "SessionState",
    "TransmissionClient",
    "Transport",
    "TransportResponse",
    "decode_response",
    "encode_request",
    "value_from_response",
]
