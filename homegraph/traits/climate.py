"""
Climate traits: TemperatureSetting, TemperatureControl, HumiditySetting, FanSpeed.

Range attributes declared by a device are enforced at validation time, so a
setpoint outside the device's range never reaches the executor.
"""

from enum import Enum
from typing import Any, Dict

from ..errors import InvalidParameterError, TraitError
from .base import (
    CommandSpec,
    ParamSpec,
    TraitKind,
    TraitSpec,
    check_choice,
    check_range,
    optional,
)
from .registry import register_trait

THERMOSTAT_MODES = [
    "off", "heat", "cool", "on", "heatcool", "auto", "fan-only", "purifier", "eco", "dry", "none",
]

DEFAULT_BUFFER_RANGE_CELSIUS = 2.0


class TemperatureSettingError(str, Enum):
    """Trait-scoped errors for TemperatureSetting."""

    IN_HEAT_OR_COOL = "inHeatOrCool"
    IN_HEATCOOL = "inHeatCool"
    LOCKED_TO_RANGE = "lockedToRange"
    RANGE_TOO_CLOSE = "rangeTooClose"
    IN_OFF_MODE = "inOffMode"
    IN_ECO_MODE = "inEcoMode"
    IN_DRY_MODE = "inDryMode"
    IN_FAN_ONLY_MODE = "inFanOnlyMode"
    IN_PURIFIER_MODE = "inPurifierMode"
    IN_AUTO_MODE = "inAutoMode"


class FanSpeedError(str, Enum):
    """Trait-scoped errors for FanSpeed."""

    MAX_SPEED_REACHED = "maxSpeedReached"
    MIN_SPEED_REACHED = "minSpeedReached"


class HumiditySettingError(str, Enum):
    """Trait-scoped errors for HumiditySetting."""

    MAX_SETTING_REACHED = "maxSettingReached"
    MIN_SETTING_REACHED = "minSettingReached"


def _thermostat_range(attributes: Dict[str, Any]):
    temp_range = attributes.get("thermostatTemperatureRange") or {}
    return temp_range.get("minThresholdCelsius"), temp_range.get("maxThresholdCelsius")


def _check_setpoint(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    low, high = _thermostat_range(attributes)
    check_range("thermostatTemperatureSetpoint", params["thermostatTemperatureSetpoint"], low, high)


def _check_set_range(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    low, high = _thermostat_range(attributes)
    setpoint_low = params["thermostatTemperatureSetpointLow"]
    setpoint_high = params["thermostatTemperatureSetpointHigh"]
    check_range("thermostatTemperatureSetpointLow", setpoint_low, low, high)
    check_range("thermostatTemperatureSetpointHigh", setpoint_high, low, high)

    buffer = attributes.get("bufferRangeCelsius", DEFAULT_BUFFER_RANGE_CELSIUS)
    if setpoint_high - setpoint_low < buffer:
        raise TraitError(
            TraitKind.TEMPERATURE_SETTING,
            TemperatureSettingError.RANGE_TOO_CLOSE,
            f"Setpoints must be at least {buffer}C apart",
        )


def _check_thermostat_mode(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    available = attributes.get("availableThermostatModes")
    if available:
        check_choice("thermostatMode", params["thermostatMode"], available)


def _check_temperature(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    temp_range = attributes.get("temperatureRange") or {}
    check_range(
        "temperature",
        params["temperature"],
        temp_range.get("minThresholdCelsius"),
        temp_range.get("maxThresholdCelsius"),
    )


def _check_humidity(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    setpoint_range = attributes.get("humiditySetpointRange") or {}
    check_range(
        "humidity", params["humidity"], setpoint_range.get("minPercent"), setpoint_range.get("maxPercent")
    )


def _check_fan_speed(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    if "fanSpeed" in params:
        speeds = (attributes.get("availableFanSpeeds") or {}).get("speeds") or []
        if speeds:
            check_choice("fanSpeed", params["fanSpeed"], [s.get("speed_name") for s in speeds])
    if "fanSpeedPercent" in params and attributes.get("supportsFanSpeedPercent") is False:
        raise InvalidParameterError(
            "fanSpeedPercent", "device does not support percentage speeds", InvalidParameterError.ENUM
        )


_TEMPERATURE_RANGE = ParamSpec(
    "temperatureRange",
    "object",
    required=False,
    properties=[
        ParamSpec("minThresholdCelsius", "number"),
        ParamSpec("maxThresholdCelsius", "number"),
    ],
)


TEMPERATURE_SETTING = register_trait(TraitSpec(
    kind=TraitKind.TEMPERATURE_SETTING,
    description="Thermostat setpoints and modes",
    attributes=[
        optional(
            "availableThermostatModes",
            "array",
            items=ParamSpec("mode", "string", enum=THERMOSTAT_MODES),
        ),
        optional(
            "thermostatTemperatureRange",
            "object",
            properties=[
                ParamSpec("minThresholdCelsius", "number"),
                ParamSpec("maxThresholdCelsius", "number"),
            ],
        ),
        optional("thermostatTemperatureUnit", "string", enum=["C", "F"]),
        optional("bufferRangeCelsius", "number", min_value=0),
        optional("commandOnlyTemperatureSetting", "boolean", default=False),
        optional("queryOnlyTemperatureSetting", "boolean", default=False),
    ],
    states=[
        optional("activeThermostatMode", "string", enum=THERMOSTAT_MODES),
        optional("thermostatMode", "string", enum=THERMOSTAT_MODES),
        optional("thermostatTemperatureAmbient", "number"),
        optional("thermostatTemperatureSetpoint", "number"),
        optional("thermostatTemperatureSetpointHigh", "number"),
        optional("thermostatTemperatureSetpointLow", "number"),
        optional("thermostatHumidityAmbient", "number", min_value=0, max_value=100),
        optional("targetTempReachedEstimateUnixTimestampSec", "integer"),
    ],
    commands=[
        CommandSpec(
            "ThermostatTemperatureSetpoint",
            "Set the target temperature",
            parameters=[ParamSpec("thermostatTemperatureSetpoint", "number", "Target in Celsius")],
            mutates=("thermostatTemperatureSetpoint",),
            effect=lambda p: {"thermostatTemperatureSetpoint": p["thermostatTemperatureSetpoint"]},
            constraints=[_check_setpoint],
            errors=(TemperatureSettingError.IN_OFF_MODE, TemperatureSettingError.LOCKED_TO_RANGE),
        ),
        CommandSpec(
            "ThermostatTemperatureSetRange",
            "Set the low and high setpoints",
            parameters=[
                ParamSpec("thermostatTemperatureSetpointHigh", "number"),
                ParamSpec("thermostatTemperatureSetpointLow", "number"),
            ],
            mutates=("thermostatTemperatureSetpointHigh", "thermostatTemperatureSetpointLow"),
            effect=lambda p: {
                "thermostatTemperatureSetpointHigh": p["thermostatTemperatureSetpointHigh"],
                "thermostatTemperatureSetpointLow": p["thermostatTemperatureSetpointLow"],
            },
            constraints=[_check_set_range],
            errors=(TemperatureSettingError.RANGE_TOO_CLOSE, TemperatureSettingError.IN_HEAT_OR_COOL),
        ),
        CommandSpec(
            "ThermostatSetMode",
            "Change the thermostat mode",
            parameters=[ParamSpec("thermostatMode", "string", enum=THERMOSTAT_MODES)],
            mutates=("thermostatMode", "activeThermostatMode"),
            effect=lambda p: {"thermostatMode": p["thermostatMode"]},
            constraints=[_check_thermostat_mode],
        ),
        CommandSpec(
            "TemperatureRelative",
            "Adjust the setpoint by degrees or a weight",
            parameters=[
                optional("thermostatTemperatureRelativeDegree", "number"),
                optional("thermostatTemperatureRelativeWeight", "number"),
            ],
            one_of=("thermostatTemperatureRelativeDegree", "thermostatTemperatureRelativeWeight"),
            mutates=("thermostatTemperatureSetpoint",),
            errors=(TemperatureSettingError.LOCKED_TO_RANGE,),
        ),
    ],
    errors=TemperatureSettingError,
))


TEMPERATURE_CONTROL = register_trait(TraitSpec(
    kind=TraitKind.TEMPERATURE_CONTROL,
    description="Target temperature for non-thermostat devices",
    attributes=[
        _TEMPERATURE_RANGE,
        optional("temperatureStepCelsius", "number", min_value=0),
        optional("temperatureUnitForUX", "string", enum=["C", "F"]),
        optional("commandOnlyTemperatureControl", "boolean", default=False),
        optional("queryOnlyTemperatureControl", "boolean", default=False),
    ],
    states=[
        optional("temperatureSetpointCelsius", "number"),
        optional("temperatureAmbientCelsius", "number"),
    ],
    commands=[
        CommandSpec(
            "SetTemperature",
            "Set the target temperature",
            parameters=[ParamSpec("temperature", "number", "Target in Celsius")],
            mutates=("temperatureSetpointCelsius",),
            effect=lambda p: {"temperatureSetpointCelsius": p["temperature"]},
            constraints=[_check_temperature],
        ),
    ],
))


HUMIDITY_SETTING = register_trait(TraitSpec(
    kind=TraitKind.HUMIDITY_SETTING,
    description="Humidity setpoint",
    attributes=[
        optional(
            "humiditySetpointRange",
            "object",
            properties=[
                optional("minPercent", "integer", min_value=0, max_value=100),
                optional("maxPercent", "integer", min_value=0, max_value=100),
            ],
        ),
        optional("commandOnlyHumiditySetting", "boolean", default=False),
        optional("queryOnlyHumiditySetting", "boolean", default=False),
    ],
    states=[
        optional("humiditySetpointPercent", "integer", min_value=0, max_value=100),
        optional("humidityAmbientPercent", "integer", min_value=0, max_value=100),
    ],
    commands=[
        CommandSpec(
            "SetHumidity",
            "Set the humidity setpoint",
            parameters=[ParamSpec("humidity", "integer", min_value=0, max_value=100)],
            mutates=("humiditySetpointPercent",),
            effect=lambda p: {"humiditySetpointPercent": p["humidity"]},
            constraints=[_check_humidity],
        ),
        CommandSpec(
            "HumidityRelative",
            "Adjust the humidity setpoint",
            parameters=[
                optional("humidityRelativePercent", "integer", min_value=-100, max_value=100),
                optional("humidityRelativeWeight", "integer", min_value=-5, max_value=5),
            ],
            one_of=("humidityRelativePercent", "humidityRelativeWeight"),
            mutates=("humiditySetpointPercent",),
            errors=(HumiditySettingError.MAX_SETTING_REACHED, HumiditySettingError.MIN_SETTING_REACHED),
        ),
    ],
    errors=HumiditySettingError,
))


FAN_SPEED = register_trait(TraitSpec(
    kind=TraitKind.FAN_SPEED,
    description="Fan speed by named setting or percentage",
    attributes=[
        optional("reversible", "boolean", default=False),
        optional("commandOnlyFanSpeed", "boolean", default=False),
        optional(
            "availableFanSpeeds",
            "object",
            properties=[
                ParamSpec(
                    "speeds",
                    "array",
                    items=ParamSpec(
                        "speed",
                        "object",
                        properties=[ParamSpec("speed_name", "string"), optional("speed_values", "array")],
                    ),
                ),
                optional("ordered", "boolean", default=False),
            ],
        ),
        optional("supportsFanSpeedPercent", "boolean"),
    ],
    states=[
        optional("currentFanSpeedSetting", "string"),
        optional("currentFanSpeedPercent", "integer", min_value=0, max_value=100),
    ],
    commands=[
        CommandSpec(
            "SetFanSpeed",
            "Set the fan speed",
            parameters=[
                optional("fanSpeed", "string"),
                optional("fanSpeedPercent", "integer", min_value=0, max_value=100),
            ],
            one_of=("fanSpeed", "fanSpeedPercent"),
            mutates=("currentFanSpeedSetting", "currentFanSpeedPercent"),
            effect=lambda p: {
                "currentFanSpeedSetting": p.get("fanSpeed"),
                "currentFanSpeedPercent": p.get("fanSpeedPercent"),
            },
            constraints=[_check_fan_speed],
        ),
        CommandSpec(
            "SetFanSpeedRelative",
            "Adjust the fan speed",
            parameters=[
                optional("fanSpeedRelativeWeight", "integer"),
                optional("fanSpeedRelativePercent", "integer", min_value=-100, max_value=100),
            ],
            one_of=("fanSpeedRelativeWeight", "fanSpeedRelativePercent"),
            mutates=("currentFanSpeedSetting", "currentFanSpeedPercent"),
            errors=(FanSpeedError.MAX_SPEED_REACHED, FanSpeedError.MIN_SPEED_REACHED),
        ),
        CommandSpec("Reverse", "Reverse the fan direction"),
    ],
    errors=FanSpeedError,
))
