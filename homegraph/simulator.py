"""
Simulated command executor.

Applies commands to an InMemoryDeviceRegistry instead of real hardware, so
the engine can be exercised end to end without a backend.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Set, Tuple

from .devices import Device
from .errors import ExecutorError, UnknownDeviceError
from .fulfillment import ExecutionResult
from .registry import InMemoryDeviceRegistry
from .traits import TraitKind, command_name, find_command

logger = logging.getLogger(__name__)

# command -> (param, state field, attribute holding the upper bound)
_RELATIVE_STEPS: Dict[str, Tuple[str, str, Optional[str]]] = {
    command_name("BrightnessRelative"): ("brightnessRelativePercent", "brightness", None),
    command_name("volumeRelative"): ("relativeSteps", "currentVolume", "volumeMaxLevel"),
    command_name("HumidityRelative"): ("humidityRelativePercent", "humiditySetpointPercent", None),
    command_name("OpenCloseRelative"): ("openRelativePercent", "openPercent", None),
}


def _relative_delta(device: Device, command: str, params: Dict[str, Any]) -> Dict[str, Any]:
    step = _RELATIVE_STEPS.get(command)
    if step is None:
        return {}
    param, state_field, limit_attr = step
    if param not in params:
        return {}
    high = device.attributes.get(limit_attr, 100) if limit_attr else 100
    value = device.state.get(state_field, 0) + params[param]
    return {state_field: max(0, min(high, value))}


class SimulatedExecutor:
    """
    In-memory executor backed by a device registry.

    Each command's expected state delta is merged into the registry, so a
    later QUERY sees the change. Failures and slow commands can be injected
    for testing:

        executor = SimulatedExecutor(registry)
        executor.fail_device("light-2", "deviceTurnedOff")
        executor.pending_commands.add(command_name("ThermostatSetMode"))
    """

    def __init__(self, registry: InMemoryDeviceRegistry, latency: float = 0.0):
        self.registry = registry
        self.latency = latency
        self.pending_commands: Set[str] = set()
        self._failures: Dict[str, str] = {}
        self.calls = 0

    def fail_device(self, device_id: str, vendor_code: str = "transientError") -> None:
        """Make every command on a device fail with ``vendor_code``."""
        self._failures[device_id] = vendor_code

    def clear_failures(self) -> None:
        self._failures.clear()

    async def execute(
        self,
        device_id: str,
        trait: TraitKind,
        command: str,
        params: Dict[str, Any],
    ) -> ExecutionResult:
        self.calls += 1
        if self.latency:
            await asyncio.sleep(self.latency)

        if device_id in self._failures:
            raise ExecutorError("Simulated failure", vendor_code=self._failures[device_id])

        device = self.registry.get_device(device_id)
        if device is None:
            raise UnknownDeviceError(device_id)
        if not device.online:
            return ExecutionResult.offline()

        _, spec = find_command(command)
        delta = {**spec.derive_state(params), **_relative_delta(device, spec.name, params)}
        self.registry.update_state(device_id, delta)

        logger.info(f"[SIM] {device_id} {spec.short_name} -> {delta}")
        if spec.name in self.pending_commands:
            return ExecutionResult.pending(delta)
        return ExecutionResult.success(delta)

    async def query(self, device_id: str) -> Optional[Dict[str, Any]]:
        """Current state, or None when the device is unknown or offline."""
        device = self.registry.get_device(device_id)
        if device is None or not device.online:
            return None
        return device.reportable_state()
