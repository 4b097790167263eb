"""
Lighting traits: OnOff, Brightness, ColorSetting, LightEffects.
"""

from enum import Enum
from typing import Any, Dict

from ..errors import InvalidParameterError, TraitError
from .base import CommandSpec, ParamSpec, TraitKind, TraitSpec, optional
from .registry import register_trait


class ColorSettingError(str, Enum):
    """Trait-scoped errors for ColorSetting."""

    UNSUPPORTED_COLOR = "notSupported"
    VALUE_OUT_OF_RANGE = "valueOutOfRange"


LIGHT_EFFECTS = ["colorLoop", "sleep", "wake"]


def _check_color(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    color = params["color"]
    model = attributes.get("colorModel")

    if "temperature" in color:
        temp_range = attributes.get("colorTemperatureRange")
        if not temp_range:
            raise TraitError(
                TraitKind.COLOR_SETTING,
                ColorSettingError.UNSUPPORTED_COLOR,
                "Device does not support color temperature",
            )
        low, high = temp_range.get("temperatureMinK"), temp_range.get("temperatureMaxK")
        if low is not None and high is not None and not low <= color["temperature"] <= high:
            raise InvalidParameterError(
                "color.temperature",
                f"{color['temperature']}K is outside {low}K..{high}K",
                InvalidParameterError.RANGE,
            )
    if "spectrumRGB" in color and model != "rgb":
        raise TraitError(
            TraitKind.COLOR_SETTING, ColorSettingError.UNSUPPORTED_COLOR, "Device does not support RGB color"
        )
    if "spectrumHSV" in color and model != "hsv":
        raise TraitError(
            TraitKind.COLOR_SETTING, ColorSettingError.UNSUPPORTED_COLOR, "Device does not support HSV color"
        )


def _color_state(params: Dict[str, Any]) -> Dict[str, Any]:
    color = params["color"]
    state: Dict[str, Any] = {}
    if "name" in color:
        state["name"] = color["name"]
    if "temperature" in color:
        state["temperatureK"] = color["temperature"]
    if "spectrumRGB" in color:
        state["spectrumRgb"] = color["spectrumRGB"]
    if "spectrumHSV" in color:
        state["spectrumHsv"] = color["spectrumHSV"]
    return {"color": state}


ON_OFF = register_trait(TraitSpec(
    kind=TraitKind.ON_OFF,
    description="Basic on and off functionality",
    attributes=[
        optional("commandOnlyOnOff", "boolean", default=False),
        optional("queryOnlyOnOff", "boolean", default=False),
    ],
    states=[optional("on", "boolean", "Whether the device is on")],
    commands=[
        CommandSpec(
            "OnOff",
            "Turn the device on or off",
            parameters=[ParamSpec("on", "boolean", "True to turn on")],
            mutates=("on",),
            effect=lambda p: {"on": p["on"]},
        ),
    ],
))


BRIGHTNESS = register_trait(TraitSpec(
    kind=TraitKind.BRIGHTNESS,
    description="Absolute and relative brightness",
    attributes=[optional("commandOnlyBrightness", "boolean", default=False)],
    states=[optional("brightness", "integer", "Current brightness percentage", min_value=0, max_value=100)],
    commands=[
        CommandSpec(
            "BrightnessAbsolute",
            "Set brightness to an absolute percentage",
            parameters=[ParamSpec("brightness", "integer", "New brightness", min_value=0, max_value=100)],
            mutates=("brightness",),
            effect=lambda p: {"brightness": p["brightness"]},
        ),
        CommandSpec(
            "BrightnessRelative",
            "Change brightness by a percentage or a weight",
            parameters=[
                optional("brightnessRelativePercent", "integer", min_value=-100, max_value=100),
                optional("brightnessRelativeWeight", "integer", min_value=-5, max_value=5),
            ],
            one_of=("brightnessRelativePercent", "brightnessRelativeWeight"),
            mutates=("brightness",),
        ),
    ],
))


_HSV = ParamSpec(
    "spectrumHSV",
    "object",
    required=False,
    properties=[
        ParamSpec("hue", "number", min_value=0, max_value=360),
        ParamSpec("saturation", "number", min_value=0, max_value=1),
        ParamSpec("value", "number", min_value=0, max_value=1),
    ],
)

COLOR_SETTING = register_trait(TraitSpec(
    kind=TraitKind.COLOR_SETTING,
    description="Full spectrum or color temperature control",
    attributes=[
        optional("commandOnlyColorSetting", "boolean", default=False),
        optional("colorModel", "string", enum=["rgb", "hsv"]),
        optional(
            "colorTemperatureRange",
            "object",
            properties=[
                ParamSpec("temperatureMinK", "integer", min_value=0),
                ParamSpec("temperatureMaxK", "integer", min_value=0),
            ],
        ),
    ],
    states=[
        optional(
            "color",
            "object",
            properties=[
                optional("temperatureK", "integer"),
                optional("spectrumRgb", "integer"),
                optional("spectrumHsv", "object"),
            ],
        ),
    ],
    replaced_states=("color",),
    commands=[
        CommandSpec(
            "ColorAbsolute",
            "Set color by temperature, RGB or HSV",
            parameters=[
                ParamSpec(
                    "color",
                    "object",
                    properties=[
                        optional("name", "string"),
                        optional("temperature", "integer", min_value=0),
                        optional("spectrumRGB", "integer", min_value=0, max_value=0xFFFFFF),
                        _HSV,
                    ],
                    one_of=("temperature", "spectrumRGB", "spectrumHSV"),
                ),
            ],
            mutates=("color",),
            effect=_color_state,
            constraints=[_check_color],
            errors=(ColorSettingError.UNSUPPORTED_COLOR,),
        ),
    ],
    errors=ColorSettingError,
))


def _effect_state(effect: str):
    return lambda p: {"activeLightEffect": effect}


LIGHT_EFFECTS_TRAIT = register_trait(TraitSpec(
    kind=TraitKind.LIGHT_EFFECTS,
    description="Timed lighting effects",
    attributes=[
        optional("defaultColorLoopDuration", "integer", min_value=0),
        optional("defaultSleepDuration", "integer", min_value=0),
        optional("defaultWakeDuration", "integer", min_value=0),
        optional("supportedEffects", "array", items=ParamSpec("effect", "string", enum=LIGHT_EFFECTS)),
    ],
    states=[
        optional("activeLightEffect", "string"),
        optional("lightEffectEndUnixTimestampSec", "integer"),
    ],
    commands=[
        CommandSpec(
            "ColorLoop",
            "Cycle through colors",
            parameters=[optional("duration", "integer", min_value=0)],
            mutates=("activeLightEffect", "lightEffectEndUnixTimestampSec"),
            effect=_effect_state("colorLoop"),
        ),
        CommandSpec(
            "Sleep",
            "Gradually dim the light",
            parameters=[optional("duration", "integer", min_value=0)],
            mutates=("activeLightEffect", "lightEffectEndUnixTimestampSec"),
            effect=_effect_state("sleep"),
        ),
        CommandSpec(
            "Wake",
            "Gradually brighten the light",
            parameters=[optional("duration", "integer", min_value=0)],
            mutates=("activeLightEffect", "lightEffectEndUnixTimestampSec"),
            effect=_effect_state("wake"),
        ),
        CommandSpec(
            "StopEffect",
            "Stop the running effect",
            mutates=("activeLightEffect",),
            effect=lambda p: {"activeLightEffect": ""},
        ),
    ],
))
