"""
Tests for the trait catalog.
"""

import pytest

from homegraph.errors import InvalidParameterError, TraitError, UnknownCommandError, UnsupportedTraitError
from homegraph.traits import (
    COMMAND_PREFIX,
    TRAIT_CATALOG,
    ColorSettingError,
    CommandSpec,
    ParamSpec,
    TemperatureSettingError,
    TraitKind,
    TraitSpec,
    all_error_codes,
    command_name,
    find_command,
    get_trait,
    replaced_state_fields,
    iter_traits,
    register_trait,
    validate_params,
)


LIGHT_ATTRIBUTES = {
    "colorModel": "rgb",
    "colorTemperatureRange": {"temperatureMinK": 2000, "temperatureMaxK": 9000},
}

THERMOSTAT_ATTRIBUTES = {
    "availableThermostatModes": ["off", "heat", "cool"],
    "thermostatTemperatureRange": {"minThresholdCelsius": 10, "maxThresholdCelsius": 30},
}


class TestTraitKind:
    """Tests for trait identifiers."""

    def test_parse_short_and_full_names(self):
        """Both naming forms resolve to the same member."""
        assert TraitKind.parse("OnOff") is TraitKind.ON_OFF
        assert TraitKind.parse("action.devices.traits.OnOff") is TraitKind.ON_OFF
        assert TraitKind.parse(TraitKind.ON_OFF) is TraitKind.ON_OFF

    def test_parse_unknown(self):
        """Unknown trait names are unsupported traits."""
        with pytest.raises(UnsupportedTraitError):
            TraitKind.parse("Teleport")
        with pytest.raises(UnsupportedTraitError):
            TraitKind.parse(42)

    def test_short_name(self):
        assert TraitKind.COLOR_SETTING.short_name == "ColorSetting"

    def test_command_name(self):
        assert command_name("OnOff") == COMMAND_PREFIX + "OnOff"
        assert command_name(COMMAND_PREFIX + "OnOff") == COMMAND_PREFIX + "OnOff"


class TestCatalog:
    """Tests for catalog lookups."""

    def test_every_kind_registered(self):
        """Each enumeration member has exactly one catalog entry."""
        assert set(TRAIT_CATALOG) == set(TraitKind)
        assert len(TRAIT_CATALOG) == 36

    def test_iter_traits_sorted(self):
        names = [spec.name for spec in iter_traits()]
        assert names == sorted(names)

    def test_get_trait(self):
        spec = get_trait("Brightness")
        assert spec.kind is TraitKind.BRIGHTNESS
        assert spec.state_fields == ["brightness"]

    def test_find_command(self):
        """Commands resolve to their owning trait from short or full names."""
        trait, command = find_command("BrightnessAbsolute")
        assert trait.kind is TraitKind.BRIGHTNESS
        assert command.name == "action.devices.commands.BrightnessAbsolute"

        trait, _ = find_command("action.devices.commands.LockUnlock")
        assert trait.kind is TraitKind.LOCK_UNLOCK

    def test_find_unknown_command(self):
        with pytest.raises(UnknownCommandError):
            find_command("SelfDestruct")

    def test_register_twice_rejected(self):
        """A trait kind may only be registered once."""
        with pytest.raises(ValueError):
            register_trait(get_trait(TraitKind.ON_OFF))

    def test_duplicate_command_in_trait_rejected(self):
        with pytest.raises(ValueError):
            TraitSpec(
                kind=TraitKind.ON_OFF,
                commands=[CommandSpec("Ping"), CommandSpec("action.devices.commands.Ping")],
            )

    def test_error_codes(self):
        """Trait-scoped codes are collected from every entry."""
        codes = all_error_codes()
        assert "rangeTooClose" in codes
        assert "alreadyLocked" in codes
        assert "unsupportedInput" in codes
        assert get_trait("OnOff").error_codes == []

    def test_replaced_state_fields(self):
        """Color is the one state replaced whole instead of merged."""
        assert "color" in replaced_state_fields()
        assert "currentModeSettings" not in replaced_state_fields()

    def test_trait_to_dict(self):
        data = get_trait("OnOff").to_dict()
        assert data["name"] == "action.devices.traits.OnOff"
        assert [c["name"] for c in data["commands"]] == ["action.devices.commands.OnOff"]
        assert data["states"][0]["name"] == "on"


class TestParamValidation:
    """Tests for parameter schemas."""

    def test_defaults_filled(self):
        specs = [ParamSpec("level", "integer"), ParamSpec("mode", "string", required=False, default="auto")]
        assert validate_params(specs, {"level": 3}) == {"level": 3, "mode": "auto"}

    def test_unknown_keys_kept(self):
        specs = [ParamSpec("level", "integer")]
        assert validate_params(specs, {"level": 3, "extra": True}) == {"level": 3, "extra": True}

    def test_integral_float_coerced(self):
        _, command = find_command("BrightnessAbsolute")
        assert command.validate({"brightness": 50.0}) == {"brightness": 50}

    def test_missing(self):
        _, command = find_command("BrightnessAbsolute")
        with pytest.raises(InvalidParameterError) as exc_info:
            command.validate({})
        assert exc_info.value.kind == InvalidParameterError.MISSING
        assert exc_info.value.field == "brightness"

    def test_wrong_type(self):
        _, command = find_command("BrightnessAbsolute")
        with pytest.raises(InvalidParameterError) as exc_info:
            command.validate({"brightness": "high"})
        assert exc_info.value.kind == InvalidParameterError.TYPE

    def test_bool_is_not_integer(self):
        _, command = find_command("BrightnessAbsolute")
        with pytest.raises(InvalidParameterError):
            command.validate({"brightness": True})

    def test_out_of_range(self):
        """Brightness is a percentage."""
        _, command = find_command("BrightnessAbsolute")
        with pytest.raises(InvalidParameterError) as exc_info:
            command.validate({"brightness": 150})
        assert exc_info.value.kind == InvalidParameterError.RANGE
        assert exc_info.value.field == "brightness"

    def test_one_of_required(self):
        """Relative brightness needs a percent or a weight."""
        _, command = find_command("BrightnessRelative")
        with pytest.raises(InvalidParameterError) as exc_info:
            command.validate({})
        assert exc_info.value.kind == InvalidParameterError.MISSING
        assert exc_info.value.field == "brightnessRelativePercent|brightnessRelativeWeight"

        assert command.validate({"brightnessRelativeWeight": 2}) == {"brightnessRelativeWeight": 2}

    def test_nested_path(self):
        _, command = find_command("ColorAbsolute")
        with pytest.raises(InvalidParameterError) as exc_info:
            command.validate({"color": {"spectrumHSV": {"hue": 400, "saturation": 1, "value": 1}}})
        assert exc_info.value.field == "color.spectrumHSV.hue"

    def test_attributes_checked(self):
        with pytest.raises(InvalidParameterError) as exc_info:
            get_trait("Brightness").validate_attributes({"commandOnlyBrightness": "yes"})
        assert exc_info.value.field == "attributes.commandOnlyBrightness"


class TestColorSetting:
    """Tests for ColorSetting constraints."""

    def test_temperature(self):
        _, command = find_command("ColorAbsolute")
        params = command.validate({"color": {"temperature": 3000}}, LIGHT_ATTRIBUTES)
        assert command.derive_state(params) == {"color": {"temperatureK": 3000}}

    def test_temperature_outside_device_range(self):
        _, command = find_command("ColorAbsolute")
        with pytest.raises(InvalidParameterError) as exc_info:
            command.validate({"color": {"temperature": 12000}}, LIGHT_ATTRIBUTES)
        assert exc_info.value.kind == InvalidParameterError.RANGE
        assert exc_info.value.field == "color.temperature"

    def test_unsupported_color_model(self):
        """An HSV color on an RGB device is the trait's own error."""
        _, command = find_command("ColorAbsolute")
        hsv = {"color": {"spectrumHSV": {"hue": 120, "saturation": 1, "value": 1}}}
        with pytest.raises(TraitError) as exc_info:
            command.validate(hsv, LIGHT_ATTRIBUTES)
        assert exc_info.value.error is ColorSettingError.UNSUPPORTED_COLOR
        assert exc_info.value.error_code == "notSupported"

    def test_rgb(self):
        _, command = find_command("ColorAbsolute")
        params = command.validate({"color": {"spectrumRGB": 0x00FF00}}, LIGHT_ATTRIBUTES)
        assert command.derive_state(params) == {"color": {"spectrumRgb": 65280}}


class TestTemperatureSetting:
    """Tests for thermostat constraints."""

    def test_setpoint_within_range(self):
        _, command = find_command("ThermostatTemperatureSetpoint")
        params = command.validate({"thermostatTemperatureSetpoint": 22.5}, THERMOSTAT_ATTRIBUTES)
        assert command.derive_state(params) == {"thermostatTemperatureSetpoint": 22.5}

    def test_setpoint_outside_range(self):
        _, command = find_command("ThermostatTemperatureSetpoint")
        with pytest.raises(InvalidParameterError) as exc_info:
            command.validate({"thermostatTemperatureSetpoint": 35}, THERMOSTAT_ATTRIBUTES)
        assert exc_info.value.kind == InvalidParameterError.RANGE

    def test_range_too_close(self):
        _, command = find_command("ThermostatTemperatureSetRange")
        with pytest.raises(TraitError) as exc_info:
            command.validate(
                {"thermostatTemperatureSetpointLow": 20, "thermostatTemperatureSetpointHigh": 21},
                THERMOSTAT_ATTRIBUTES,
            )
        assert exc_info.value.error is TemperatureSettingError.RANGE_TOO_CLOSE

    def test_mode_not_available(self):
        _, command = find_command("ThermostatSetMode")
        with pytest.raises(InvalidParameterError) as exc_info:
            command.validate({"thermostatMode": "eco"}, THERMOSTAT_ATTRIBUTES)
        assert exc_info.value.kind == InvalidParameterError.ENUM


class TestOtherTraits:
    """Spot checks across the rest of the catalog."""

    def test_derive_state_drops_unset(self):
        """Fields the command did not set are not part of the delta."""
        _, command = find_command("ArmDisarm")
        params = command.validate({"arm": True})
        assert command.derive_state(params) == {"isArmed": True}

    def test_lock(self):
        _, command = find_command("LockUnlock")
        assert command.derive_state(command.validate({"lock": False})) == {"isLocked": False}

    def test_timer_limit(self):
        _, command = find_command("TimerStart")
        with pytest.raises(InvalidParameterError):
            command.validate({"timerTimeSec": 7200}, {"maxTimerLimitSec": 3600})
        params = command.validate({"timerTimeSec": 60}, {"maxTimerLimitSec": 3600})
        assert command.derive_state(params) == {"timerRemainingSec": 60, "timerPaused": False}

    def test_unavailable_input(self):
        _, command = find_command("SetInput")
        attributes = {"availableInputs": [{"key": "hdmi_1", "names": []}]}
        with pytest.raises(TraitError) as exc_info:
            command.validate({"newInput": "hdmi_9"}, attributes)
        assert exc_info.value.error_code == "unsupportedInput"

    def test_discrete_open_close(self):
        _, command = find_command("OpenClose")
        with pytest.raises(InvalidParameterError):
            command.validate({"openPercent": 50}, {"discreteOnlyOpenClose": True})
        assert command.validate({"openPercent": 100}, {"discreteOnlyOpenClose": True})["openPercent"] == 100

    def test_extract_state(self):
        assert get_trait("OnOff").extract_state({"on": True, "brightness": 10}) == {"on": True}
