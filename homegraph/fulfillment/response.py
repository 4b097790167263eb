"""
Outbound fulfillment envelopes.

Responses are plain dataclasses; encode_response() renders the vendor JSON
shape and never fails for well-formed values. decode_response() reads the
same shapes back, which clients and tests use.
"""

import copy
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ..devices import Device
from .request import IntentKind


class ExecutionStatus(str, Enum):
    SUCCESS = "SUCCESS"
    PENDING = "PENDING"
    OFFLINE = "OFFLINE"
    ERROR = "ERROR"


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of executing commands on one device."""

    status: ExecutionStatus
    states: Dict[str, Any] = field(default_factory=dict)
    error_code: Optional[str] = None
    debug_string: Optional[str] = None

    @classmethod
    def success(cls, states: Optional[Dict[str, Any]] = None) -> "ExecutionResult":
        return cls(ExecutionStatus.SUCCESS, states=dict(states or {}))

    @classmethod
    def pending(cls, states: Optional[Dict[str, Any]] = None) -> "ExecutionResult":
        return cls(ExecutionStatus.PENDING, states=dict(states or {}))

    @classmethod
    def offline(cls) -> "ExecutionResult":
        return cls(ExecutionStatus.OFFLINE)

    @classmethod
    def error(cls, code: str, debug_string: Optional[str] = None) -> "ExecutionResult":
        return cls(ExecutionStatus.ERROR, error_code=code, debug_string=debug_string)

    @property
    def failed(self) -> bool:
        return self.status in (ExecutionStatus.ERROR, ExecutionStatus.OFFLINE)

    def to_dict(self) -> dict:
        """Response payload without the device ids."""
        data: Dict[str, Any] = {"status": self.status.value}
        if self.states:
            data["states"] = copy.deepcopy(self.states)
        if self.error_code is not None:
            data["errorCode"] = self.error_code
        if self.debug_string is not None:
            data["debugString"] = self.debug_string
        return data

    def grouping_key(self) -> str:
        """Devices whose results share this key are reported in one entry."""
        return json.dumps(self.to_dict(), sort_keys=True, default=str)

    @classmethod
    def from_dict(cls, data: dict) -> "ExecutionResult":
        return cls(
            status=ExecutionStatus(data["status"]),
            states=dict(data.get("states", {})),
            error_code=data.get("errorCode"),
            debug_string=data.get("debugString"),
        )


@dataclass
class CommandResult:
    """One Execute response entry: a result shared by every listed id."""

    ids: List[str]
    result: ExecutionResult

    def to_dict(self) -> dict:
        return {"ids": list(self.ids), **self.result.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> "CommandResult":
        return cls(ids=list(data["ids"]), result=ExecutionResult.from_dict(data))


@dataclass
class SyncResponse:
    request_id: str
    agent_user_id: str
    devices: List[Device] = field(default_factory=list)
    error_code: Optional[str] = None
    debug_string: Optional[str] = None

    kind = IntentKind.SYNC

    def payload(self) -> dict:
        data: Dict[str, Any] = {
            "agentUserId": self.agent_user_id,
            "devices": [d.to_dict() for d in self.devices],
        }
        if self.error_code is not None:
            data["errorCode"] = self.error_code
        if self.debug_string is not None:
            data["debugString"] = self.debug_string
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "SyncResponse":
        payload = data.get("payload", {})
        return cls(
            request_id=data["requestId"],
            agent_user_id=payload.get("agentUserId", ""),
            devices=[Device.from_dict(d) for d in payload.get("devices", [])],
            error_code=payload.get("errorCode"),
            debug_string=payload.get("debugString"),
        )


@dataclass
class QueryResponse:
    request_id: str
    devices: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    kind = IntentKind.QUERY

    def payload(self) -> dict:
        return {"devices": copy.deepcopy(self.devices)}

    @classmethod
    def from_dict(cls, data: dict) -> "QueryResponse":
        payload = data.get("payload", {})
        return cls(request_id=data["requestId"], devices=dict(payload.get("devices", {})))


@dataclass
class ExecuteResponse:
    request_id: str
    commands: List[CommandResult] = field(default_factory=list)

    kind = IntentKind.EXECUTE

    def payload(self) -> dict:
        return {"commands": [c.to_dict() for c in self.commands]}

    def result_for(self, device_id: str) -> Optional[ExecutionResult]:
        for command in self.commands:
            if device_id in command.ids:
                return command.result
        return None

    @classmethod
    def from_dict(cls, data: dict) -> "ExecuteResponse":
        payload = data.get("payload", {})
        return cls(
            request_id=data["requestId"],
            commands=[CommandResult.from_dict(c) for c in payload.get("commands", [])],
        )


@dataclass
class DisconnectResponse:
    request_id: str

    kind = IntentKind.DISCONNECT

    def payload(self) -> dict:
        return {}


Response = Union[SyncResponse, QueryResponse, ExecuteResponse, DisconnectResponse]

_DECODERS = {
    IntentKind.SYNC: SyncResponse.from_dict,
    IntentKind.QUERY: QueryResponse.from_dict,
    IntentKind.EXECUTE: ExecuteResponse.from_dict,
    IntentKind.DISCONNECT: lambda data: DisconnectResponse(request_id=data["requestId"]),
}


def encode_response(response: Response) -> dict:
    """Render a response in the vendor envelope shape."""
    return {"requestId": response.request_id, "payload": response.payload()}


def decode_response(envelope: dict, intent: Union[IntentKind, str]) -> Response:
    """Read an encoded response back, given the intent it answers."""
    kind = intent if isinstance(intent, IntentKind) else IntentKind.parse(intent)
    if kind is None:
        raise ValueError(f"Unknown intent: {intent}")
    return _DECODERS[kind](envelope)
