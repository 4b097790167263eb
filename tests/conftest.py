"""
Shared fixtures for the homegraph tests.
"""

import pytest

from homegraph.config import Config, reset_config, set_config
from homegraph.devices import Device, DeviceName, DeviceType
from homegraph.registry import InMemoryDeviceRegistry
from homegraph.simulator import SimulatedExecutor
from homegraph.traits import TraitKind


@pytest.fixture(autouse=True)
def isolated_config(tmp_path):
    """Keep tests away from ~/.homegraph."""
    config = Config(data_dir=tmp_path)
    set_config(config)
    yield config
    reset_config()


def _light(device_id: str = "light-1", **kwargs) -> Device:
    defaults = dict(
        id=device_id,
        type=DeviceType.LIGHT,
        traits=(TraitKind.ON_OFF, TraitKind.BRIGHTNESS, TraitKind.COLOR_SETTING),
        name=DeviceName(name=f"Light {device_id}"),
        attributes={
            "colorModel": "rgb",
            "colorTemperatureRange": {"temperatureMinK": 2000, "temperatureMaxK": 9000},
        },
        state={"on": False, "brightness": 40},
    )
    defaults.update(kwargs)
    return Device(**defaults)


def _thermostat(device_id: str = "thermostat-1", **kwargs) -> Device:
    defaults = dict(
        id=device_id,
        type=DeviceType.THERMOSTAT,
        traits=(TraitKind.TEMPERATURE_SETTING,),
        name=DeviceName(name="Hallway"),
        attributes={
            "availableThermostatModes": ["off", "heat", "cool", "heatcool"],
            "thermostatTemperatureRange": {"minThresholdCelsius": 10, "maxThresholdCelsius": 30},
            "thermostatTemperatureUnit": "C",
        },
        state={"thermostatMode": "heat", "thermostatTemperatureSetpoint": 20, "thermostatTemperatureAmbient": 19.5},
    )
    defaults.update(kwargs)
    return Device(**defaults)


def _lock(device_id: str = "lock-1", **kwargs) -> Device:
    defaults = dict(
        id=device_id,
        type=DeviceType.LOCK,
        traits=(TraitKind.LOCK_UNLOCK,),
        name=DeviceName(name="Front door"),
        state={"isLocked": True, "isJammed": False},
    )
    defaults.update(kwargs)
    return Device(**defaults)


@pytest.fixture
def make_light():
    return _light


@pytest.fixture
def make_thermostat():
    return _thermostat


@pytest.fixture
def make_lock():
    return _lock


@pytest.fixture
def light():
    return _light()


@pytest.fixture
def thermostat():
    return _thermostat()


@pytest.fixture
def registry():
    return InMemoryDeviceRegistry(
        [_light("light-1"), _light("light-2"), _thermostat(), _lock()],
        agent_user_id="user-123",
    )


@pytest.fixture
def executor(registry):
    return SimulatedExecutor(registry)
