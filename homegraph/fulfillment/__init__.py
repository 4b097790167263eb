"""
Fulfillment envelope codec.

Decodes inbound intent requests and encodes responses in the vendor schema.
"""

from .request import (
    CommandExecution,
    CommandGroup,
    DeviceTarget,
    DisconnectIntent,
    ExecuteIntent,
    Intent,
    IntentKind,
    QueryIntent,
    Request,
    SyncIntent,
    decode_request,
)
from .response import (
    CommandResult,
    DisconnectResponse,
    ExecuteResponse,
    ExecutionResult,
    ExecutionStatus,
    QueryResponse,
    Response,
    SyncResponse,
    decode_response,
    encode_response,
)
from .report_state import build_report_state, report_state_for

__all__ = [
    # Requests
    "CommandExecution",
    "CommandGroup",
    "DeviceTarget",
    "DisconnectIntent",
    "ExecuteIntent",
    "Intent",
    "IntentKind",
    "QueryIntent",
    "Request",
    "SyncIntent",
    "decode_request",
    # Responses
    "CommandResult",
    "DisconnectResponse",
    "ExecuteResponse",
    "ExecutionResult",
    "ExecutionStatus",
    "QueryResponse",
    "Response",
    "SyncResponse",
    "decode_response",
    "encode_response",
    # Report state
    "build_report_state",
    "report_state_for",
]
