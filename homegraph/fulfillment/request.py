"""
Inbound fulfillment envelopes.

The raw JSON is validated with pydantic models that mirror the vendor schema,
then converted into immutable intent objects. Any schema failure surfaces as
a DecodeError naming the dotted path of the offending field.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..errors import DecodeError

logger = logging.getLogger(__name__)

INTENT_PREFIX = "action.devices."


# ============ Wire models ============

class DeviceRefModel(BaseModel):
    """A device reference inside a Query or Execute payload."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Device id")
    custom_data: Optional[Dict[str, Any]] = Field(default=None, alias="customData")


class ExecutionModel(BaseModel):
    command: str = Field(..., description="Vendor command name")
    params: Dict[str, Any] = Field(default_factory=dict, description="Command parameters")


class CommandModel(BaseModel):
    devices: List[DeviceRefModel] = Field(..., description="Target devices")
    execution: List[ExecutionModel] = Field(..., description="Commands to run, in order")


class QueryPayloadModel(BaseModel):
    devices: List[DeviceRefModel] = Field(..., description="Devices to query")


class ExecutePayloadModel(BaseModel):
    commands: List[CommandModel] = Field(..., description="Command groups")


class InputModel(BaseModel):
    intent: str = Field(..., description="Intent tag")
    payload: Optional[Dict[str, Any]] = Field(default=None, description="Intent-specific payload")


class EnvelopeModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    request_id: str = Field(..., alias="requestId")
    inputs: List[InputModel] = Field(..., min_length=1)


# ============ Intents ============

class IntentKind(str, Enum):
    SYNC = "action.devices.SYNC"
    QUERY = "action.devices.QUERY"
    EXECUTE = "action.devices.EXECUTE"
    DISCONNECT = "action.devices.DISCONNECT"

    @property
    def short_name(self) -> str:
        return self.value[len(INTENT_PREFIX):]

    @classmethod
    def parse(cls, tag: str) -> Optional["IntentKind"]:
        """Accept ``action.devices.EXECUTE`` or ``EXECUTE``; None if unknown."""
        full = tag if tag.startswith(INTENT_PREFIX) else INTENT_PREFIX + tag
        try:
            return cls(full)
        except ValueError:
            return None


@dataclass(frozen=True)
class DeviceTarget:
    id: str
    custom_data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> dict:
        data: Dict[str, Any] = {"id": self.id}
        if self.custom_data is not None:
            data["customData"] = self.custom_data
        return data


@dataclass(frozen=True)
class SyncIntent:
    kind = IntentKind.SYNC

    def to_dict(self) -> dict:
        return {"intent": self.kind.value}


@dataclass(frozen=True)
class QueryIntent:
    devices: Tuple[DeviceTarget, ...] = ()

    kind = IntentKind.QUERY

    @property
    def device_ids(self) -> List[str]:
        return [d.id for d in self.devices]

    def to_dict(self) -> dict:
        return {"intent": self.kind.value, "payload": {"devices": [d.to_dict() for d in self.devices]}}


@dataclass(frozen=True)
class CommandExecution:
    command: str
    params: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"command": self.command, "params": self.params}


@dataclass(frozen=True)
class CommandGroup:
    """One group of a command batch: every execution goes to every device, in order."""

    devices: Tuple[DeviceTarget, ...]
    execution: Tuple[CommandExecution, ...]

    @property
    def device_ids(self) -> List[str]:
        return [d.id for d in self.devices]

    def to_dict(self) -> dict:
        return {
            "devices": [d.to_dict() for d in self.devices],
            "execution": [e.to_dict() for e in self.execution],
        }


@dataclass(frozen=True)
class ExecuteIntent:
    commands: Tuple[CommandGroup, ...] = ()

    kind = IntentKind.EXECUTE

    @property
    def device_ids(self) -> List[str]:
        """Targeted ids in first-occurrence order, without repeats."""
        seen: Dict[str, None] = {}
        for group in self.commands:
            for device_id in group.device_ids:
                seen.setdefault(device_id, None)
        return list(seen)

    def to_dict(self) -> dict:
        return {"intent": self.kind.value, "payload": {"commands": [c.to_dict() for c in self.commands]}}


@dataclass(frozen=True)
class DisconnectIntent:
    kind = IntentKind.DISCONNECT

    def to_dict(self) -> dict:
        return {"intent": self.kind.value}


Intent = Union[SyncIntent, QueryIntent, ExecuteIntent, DisconnectIntent]


@dataclass(frozen=True)
class Request:
    """A decoded fulfillment request."""

    request_id: str
    inputs: Tuple[Intent, ...]

    @property
    def intent(self) -> Intent:
        return self.inputs[0]

    def to_dict(self) -> dict:
        return {"requestId": self.request_id, "inputs": [i.to_dict() for i in self.inputs]}


# ============ Decoding ============

def _error_path(prefix: str, loc: Tuple[Union[str, int], ...]) -> str:
    parts = [prefix] if prefix else []
    parts.extend(str(p) for p in loc)
    return ".".join(parts) or "envelope"


def _validate(model: Type[BaseModel], data: Any, prefix: str = "") -> BaseModel:
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        raise DecodeError(_error_path(prefix, first["loc"]), first["msg"]) from e


def _targets(devices: List[DeviceRefModel]) -> Tuple[DeviceTarget, ...]:
    return tuple(DeviceTarget(id=d.id, custom_data=d.custom_data) for d in devices)


def _decode_input(index: int, raw: InputModel) -> Intent:
    path = f"inputs.{index}"
    kind = IntentKind.parse(raw.intent)
    if kind is None:
        raise DecodeError(f"{path}.intent", f"unrecognized intent {raw.intent!r}")

    if kind is IntentKind.SYNC:
        return SyncIntent()
    if kind is IntentKind.DISCONNECT:
        return DisconnectIntent()

    if raw.payload is None:
        raise DecodeError(f"{path}.payload", f"{kind.short_name} requires a payload")

    if kind is IntentKind.QUERY:
        query = _validate(QueryPayloadModel, raw.payload, f"{path}.payload")
        return QueryIntent(devices=_targets(query.devices))

    execute = _validate(ExecutePayloadModel, raw.payload, f"{path}.payload")
    return ExecuteIntent(commands=tuple(
        CommandGroup(
            devices=_targets(group.devices),
            execution=tuple(CommandExecution(command=e.command, params=e.params) for e in group.execution),
        )
        for group in execute.commands
    ))


def decode_request(envelope: Any) -> Request:
    """
    Decode a raw fulfillment envelope.

    Raises DecodeError for envelopes with no inputs, an unrecognized intent
    tag, or a payload that does not match the intent's schema.
    """
    raw = _validate(EnvelopeModel, envelope)
    inputs = tuple(_decode_input(i, item) for i, item in enumerate(raw.inputs))

    logger.debug(f"Decoded request {raw.request_id}: {[i.kind.short_name for i in inputs]}")
    return Request(request_id=raw.request_id, inputs=inputs)
