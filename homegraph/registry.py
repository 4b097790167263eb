"""
Device registry capability.

The engine reads devices through the DeviceSource protocol. Hosts normally
back it with their own storage; InMemoryDeviceRegistry is the reference
implementation used by the simulator, the CLI and the tests.
"""

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union, runtime_checkable

from .devices import Device, declare, merge_state

logger = logging.getLogger(__name__)


@runtime_checkable
class DeviceSource(Protocol):
    """What the engine needs from a device registry."""

    def list_devices(self) -> List[Device]:
        ...

    def get_device(self, device_id: str) -> Optional[Device]:
        ...


class InMemoryDeviceRegistry:
    """
    In-memory registry of device snapshots.

    Snapshots are replaced, never mutated: update_state() stores the new
    Device produced by merge_state().
    """

    def __init__(self, devices: Optional[List[Device]] = None, agent_user_id: Optional[str] = None):
        self.agent_user_id = agent_user_id
        self.linked = True
        self._devices: Dict[str, Device] = {}
        for device in devices or []:
            self.register_device(device)

    def register_device(self, device: Device) -> Device:
        """Declare and add (or replace) a device."""
        device = declare(device)
        if device.id in self._devices:
            logger.info(f"Device updated: {device.name.name} ({device.id})")
        else:
            logger.info(f"New device registered: {device.name.name} ({device.id})")
        self._devices[device.id] = device
        return device

    def get_device(self, device_id: str) -> Optional[Device]:
        """Get a device snapshot by id."""
        return self._devices.get(device_id)

    def list_devices(self) -> List[Device]:
        """All devices in registration order."""
        return list(self._devices.values())

    def get_online_devices(self) -> List[Device]:
        return [d for d in self._devices.values() if d.online]

    def update_state(self, device_id: str, delta: Dict[str, Any]) -> Optional[Device]:
        """Merge a state delta into a device and store the new snapshot."""
        device = self._devices.get(device_id)
        if device is None:
            return None
        device = merge_state(device, delta)
        self._devices[device_id] = device
        return device

    def set_online(self, device_id: str, online: bool) -> None:
        device = self._devices.get(device_id)
        if device is not None:
            self._devices[device_id] = dataclasses.replace(device, online=online)

    def mark_offline(self, device_id: str) -> None:
        """Mark a device as offline."""
        self.set_online(device_id, False)

    def mark_online(self, device_id: str) -> None:
        """Mark a device as online."""
        self.set_online(device_id, True)

    def remove_device(self, device_id: str) -> None:
        """Remove a device from the registry."""
        self._devices.pop(device_id, None)

    def unlink(self, request_id: Optional[str] = None) -> None:
        """Treat the assistant account as unlinked. Devices are kept."""
        self.linked = False
        logger.info(f"Account {self.agent_user_id or '-'} unlinked (request {request_id or '-'})")

    def __len__(self) -> int:
        return len(self._devices)

    def __contains__(self, device_id: str) -> bool:
        return device_id in self._devices

    @classmethod
    def from_dict(cls, data: dict) -> "InMemoryDeviceRegistry":
        """Build from ``{"agentUserId": ..., "devices": [...]}`` (Sync listing shape)."""
        devices = [Device.from_dict(d) for d in data.get("devices", [])]
        return cls(devices, agent_user_id=data.get("agentUserId"))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "InMemoryDeviceRegistry":
        """Load a device fixture file."""
        with open(path) as f:
            data = json.load(f)
        if isinstance(data, list):
            data = {"devices": data}
        registry = cls.from_dict(data)
        logger.info(f"Loaded {len(registry)} devices from {path}")
        return registry
