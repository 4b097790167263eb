"""
Tests for the in-memory device registry and the simulated executor.
"""

import json

import pytest

from homegraph.errors import DuplicateTraitError, ExecutorError
from homegraph.fulfillment import ExecutionStatus
from homegraph.registry import DeviceSource, InMemoryDeviceRegistry
from homegraph.simulator import SimulatedExecutor
from homegraph.traits import TraitKind, command_name


class TestInMemoryDeviceRegistry:
    """Tests for InMemoryDeviceRegistry."""

    def test_is_device_source(self, registry):
        assert isinstance(registry, DeviceSource)

    def test_register_declares(self, registry, make_light):
        """Registration rejects invalid declarations."""
        with pytest.raises(DuplicateTraitError):
            registry.register_device(make_light("light-9", traits=("OnOff", "OnOff")))
        assert "light-9" not in registry

    def test_listing_order(self, registry):
        assert [d.id for d in registry.list_devices()] == ["light-1", "light-2", "thermostat-1", "lock-1"]

    def test_update_state_replaces_snapshot(self, registry):
        before = registry.get_device("light-1")
        after = registry.update_state("light-1", {"on": True})
        assert after.state["on"] is True
        assert before.state["on"] is False
        assert registry.get_device("light-1") is after
        assert registry.update_state("ghost", {"on": True}) is None

    def test_online_flags(self, registry):
        registry.mark_offline("lock-1")
        assert [d.id for d in registry.get_online_devices()] == ["light-1", "light-2", "thermostat-1"]
        registry.mark_online("lock-1")
        assert registry.get_device("lock-1").online

    def test_remove(self, registry):
        registry.remove_device("lock-1")
        assert len(registry) == 3
        registry.remove_device("lock-1")

    def test_from_file(self, tmp_path):
        path = tmp_path / "devices.json"
        path.write_text(json.dumps({
            "agentUserId": "user-9",
            "devices": [
                {"id": "plug-1", "type": "OUTLET", "traits": ["OnOff"], "name": {"name": "Plug"},
                 "state": {"on": False}},
            ],
        }))
        registry = InMemoryDeviceRegistry.from_file(path)
        assert registry.agent_user_id == "user-9"
        assert registry.get_device("plug-1").traits == (TraitKind.ON_OFF,)

    def test_from_file_bare_list(self, tmp_path):
        path = tmp_path / "devices.json"
        path.write_text(json.dumps([{"id": "plug-1", "type": "OUTLET", "traits": ["OnOff"]}]))
        registry = InMemoryDeviceRegistry.from_file(str(path))
        assert registry.agent_user_id is None
        assert registry.get_device("plug-1").name.name == "plug-1"


class TestSimulatedExecutor:
    """Tests for SimulatedExecutor."""

    @pytest.mark.asyncio
    async def test_applies_delta(self, registry, executor):
        result = await executor.execute(
            "light-1", TraitKind.BRIGHTNESS, command_name("BrightnessAbsolute"), {"brightness": 90}
        )
        assert result.status is ExecutionStatus.SUCCESS
        assert result.states == {"brightness": 90}
        assert registry.get_device("light-1").state["brightness"] == 90
        assert executor.calls == 1

    @pytest.mark.asyncio
    async def test_relative_brightness_clamped(self, registry, executor):
        result = await executor.execute(
            "light-1", TraitKind.BRIGHTNESS, command_name("BrightnessRelative"), {"brightnessRelativePercent": 80}
        )
        assert result.states == {"brightness": 100}

    @pytest.mark.asyncio
    async def test_injected_failure(self, executor):
        executor.fail_device("light-1", "deviceBusy")
        with pytest.raises(ExecutorError) as exc_info:
            await executor.execute("light-1", TraitKind.ON_OFF, command_name("OnOff"), {"on": True})
        assert exc_info.value.vendor_code == "deviceBusy"

        executor.clear_failures()
        result = await executor.execute("light-1", TraitKind.ON_OFF, command_name("OnOff"), {"on": True})
        assert result.status is ExecutionStatus.SUCCESS

    @pytest.mark.asyncio
    async def test_offline(self, registry, executor):
        registry.mark_offline("light-1")
        result = await executor.execute("light-1", TraitKind.ON_OFF, command_name("OnOff"), {"on": True})
        assert result.status is ExecutionStatus.OFFLINE
        assert await executor.query("light-1") is None

    @pytest.mark.asyncio
    async def test_query(self, executor):
        assert await executor.query("lock-1") == {"isLocked": True, "isJammed": False}
        assert await executor.query("ghost") is None
