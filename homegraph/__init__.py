"""
homegraph - smart-home assistant fulfillment

Translates the voice assistant's fulfillment intents (SYNC, QUERY, EXECUTE,
DISCONNECT) onto a typed trait model and back, dispatching commands to a
backend you supply.

Example:
    >>> from homegraph import IntentEngine, InMemoryDeviceRegistry
    >>> engine = IntentEngine(registry, executor, agent_user_id="user-1")
    >>> response = await engine.handle_envelope(body)
"""

__version__ = "1.0.0"

from .config import Config, get_config
from .devices import Device, DeviceName, DeviceType, declare, merge_state, validate_command
from .engine import CommandExecutor, IntentEngine, aggregate_results
from .errors import (
    DecodeError,
    ExecutorError,
    HomegraphError,
    TraitError,
    ValidationError,
)
from .fulfillment import ExecutionResult, decode_request, encode_response
from .registry import DeviceSource, InMemoryDeviceRegistry
from .simulator import SimulatedExecutor
from .traits import TraitKind, get_trait
from .translate import translate_error

__all__ = [
    "__version__",
    "Config",
    "get_config",
    "Device",
    "DeviceName",
    "DeviceType",
    "declare",
    "merge_state",
    "validate_command",
    "CommandExecutor",
    "IntentEngine",
    "aggregate_results",
    "DecodeError",
    "ExecutorError",
    "HomegraphError",
    "TraitError",
    "ValidationError",
    "ExecutionResult",
    "decode_request",
    "encode_response",
    "DeviceSource",
    "InMemoryDeviceRegistry",
    "SimulatedExecutor",
    "TraitKind",
    "get_trait",
    "translate_error",
]
