"""
Appliance traits: Cook, Dispense, Dock, EnergyStorage, Fill, Modes, RunCycle,
StartStop, Timer, Toggles.
"""

from enum import Enum
from typing import Any, Dict

from ..errors import InvalidParameterError, TraitError
from .base import CommandSpec, ParamSpec, TraitKind, TraitSpec, check_choice, check_range, optional
from .registry import register_trait

COOKING_MODES = [
    "NONE", "UNKNOWN_COOKING_MODE", "BAKE", "BEAT", "BLEND", "BOIL", "BREW", "BROIL",
    "CONVECTION_BAKE", "COOK", "DEFROST", "DEHYDRATE", "FERMENT", "FRY", "GRILL", "KNEAD",
    "MICROWAVE", "MIX", "PRESSURE_COOK", "PUREE", "ROAST", "SAUTE", "SLOW_COOK", "SOUS_VIDE",
    "STEAM", "STEW", "STIR", "WARM", "WHIP",
]
CAPACITY_STATES = ["CRITICALLY_LOW", "LOW", "MEDIUM", "HIGH", "FULL"]
CAPACITY_UNITS = ["SECONDS", "MILES", "KILOMETERS", "PERCENTAGE", "KILOWATT_HOURS"]


class CookError(str, Enum):
    """Trait-scoped errors for Cook."""

    DEVICE_DOOR_OPEN = "deviceDoorOpen"
    DEVICE_LID_OPEN = "deviceLidOpen"
    FRACTIONAL_AMOUNT_NOT_SUPPORTED = "fractionalAmountNotSupported"
    AMOUNT_ABOVE_LIMIT = "amountAboveLimit"
    UNKNOWN_FOOD_PRESET = "unknownFoodPreset"


class DispenseError(str, Enum):
    """Trait-scoped errors for Dispense."""

    AMOUNT_REMAINING_EXCEEDED = "dispenseAmountRemainingExceeded"
    AMOUNT_ABOVE_LIMIT = "dispenseAmountAboveLimit"
    AMOUNT_BELOW_LIMIT = "dispenseAmountBelowLimit"
    FRACTIONAL_AMOUNT_NOT_SUPPORTED = "dispenseFractionalAmountNotSupported"
    GENERIC_DISPENSE_NOT_SUPPORTED = "genericDispenseNotSupported"
    DISPENSE_NOT_SUPPORTED = "dispenseNotSupported"
    FRACTIONAL_UNIT_NOT_SUPPORTED = "dispenseFractionalUnitNotSupported"
    DEVICE_CURRENTLY_DISPENSING = "deviceCurrentlyDispensing"
    DEVICE_CLOGGED = "deviceClogged"
    DEVICE_BUSY = "deviceBusy"
    # Reported as exceptions by the vendor, but still error codes
    AMOUNT_REMAINING_LOW = "amountRemainingLow"
    USER_NEEDS_TO_WAIT = "userNeedsToWait"


class EnergyStorageError(str, Enum):
    DEVICE_UNPLUGGED = "deviceUnplugged"


def _check_cook(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    modes = attributes.get("supportedCookingModes")
    if modes and "cookingMode" in params:
        check_choice("cookingMode", params["cookingMode"], modes)

    presets = attributes.get("foodPresets")
    if presets is not None and "foodPreset" in params:
        if params["foodPreset"] not in [p.get("food_preset_name") for p in presets]:
            raise TraitError(TraitKind.COOK, CookError.UNKNOWN_FOOD_PRESET, f"Unknown preset {params['foodPreset']}")


def _cook_state(params: Dict[str, Any]) -> Dict[str, Any]:
    if not params["start"]:
        return {"currentCookingMode": "NONE"}
    return {
        "currentCookingMode": params.get("cookingMode"),
        "currentFoodPreset": params.get("foodPreset"),
        "currentFoodQuantity": params.get("quantity"),
        "currentFoodUnit": params.get("unit"),
    }


def _check_dispense(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    items = attributes.get("supportedDispenseItems")
    if items is not None and "item" in params:
        if params["item"] not in [i.get("item_name") for i in items]:
            raise TraitError(TraitKind.DISPENSE, DispenseError.DISPENSE_NOT_SUPPORTED, f"Cannot dispense {params['item']}")

    presets = attributes.get("supportedDispensePresets")
    if presets is not None and "presetName" in params:
        check_choice("presetName", params["presetName"], [p.get("preset_name") for p in presets])


def _check_modes(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    modes = {m.get("name"): m for m in attributes.get("availableModes") or []}
    if not modes:
        return
    for mode, setting in params["updateModeSettings"].items():
        path = f"updateModeSettings.{mode}"
        check_choice(path, mode, modes)
        check_choice(path, setting, [s.get("setting_name") for s in modes[mode].get("settings", [])])


def _check_toggles(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    toggles = [t.get("name") for t in attributes.get("availableToggles") or []]
    if not toggles:
        return
    for name in params["updateToggleSettings"]:
        check_choice(f"updateToggleSettings.{name}", name, toggles)


def _check_start(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    zones = attributes.get("availableZones")
    if not zones:
        return
    requested = list(params.get("multipleZones") or [])
    if "zone" in params:
        requested.append(params["zone"])
    for zone in requested:
        check_choice("zone", zone, zones)


def _check_pause(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    if not attributes.get("pausable", False):
        raise InvalidParameterError("pause", "device is not pausable", InvalidParameterError.ENUM)


def _start_state(params: Dict[str, Any]) -> Dict[str, Any]:
    state: Dict[str, Any] = {"isRunning": params["start"]}
    if params["start"]:
        zones = list(params.get("multipleZones") or [])
        if "zone" in params:
            zones.append(params["zone"])
        if zones:
            state["activeZones"] = zones
    else:
        state["isPaused"] = False
    return state


def _check_timer(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    check_range("timerTimeSec", params["timerTimeSec"], 0, attributes.get("maxTimerLimitSec"))


def _check_timer_adjust(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    limit = attributes.get("maxTimerLimitSec")
    check_range("timerTimeSec", params["timerTimeSec"], -limit if limit is not None else None, limit)


COOK = register_trait(TraitSpec(
    kind=TraitKind.COOK,
    description="Cooking modes and food presets",
    attributes=[
        optional("supportedCookingModes", "array", items=ParamSpec("mode", "string", enum=COOKING_MODES)),
        optional(
            "foodPresets",
            "array",
            items=ParamSpec(
                "preset",
                "object",
                properties=[
                    ParamSpec("food_preset_name", "string"),
                    optional("supported_units", "array"),
                    optional("food_synonyms", "array"),
                ],
            ),
        ),
    ],
    states=[
        optional("currentCookingMode", "string", enum=COOKING_MODES),
        optional("currentFoodPreset", "string"),
        optional("currentFoodQuantity", "number"),
        optional("currentFoodUnit", "string"),
    ],
    commands=[
        CommandSpec(
            "Cook",
            "Start or stop cooking",
            parameters=[
                ParamSpec("start", "boolean"),
                optional("cookingMode", "string", enum=COOKING_MODES),
                optional("foodPreset", "string"),
                optional("quantity", "number", min_value=0),
                optional("unit", "string"),
            ],
            mutates=("currentCookingMode", "currentFoodPreset", "currentFoodQuantity", "currentFoodUnit"),
            effect=_cook_state,
            constraints=[_check_cook],
            errors=tuple(CookError),
        ),
    ],
    errors=CookError,
))


DISPENSE = register_trait(TraitSpec(
    kind=TraitKind.DISPENSE,
    description="Dispense measured amounts of items",
    attributes=[
        optional(
            "supportedDispenseItems",
            "array",
            items=ParamSpec("item", "object", properties=[ParamSpec("item_name", "string")]),
        ),
        optional(
            "supportedDispensePresets",
            "array",
            items=ParamSpec("preset", "object", properties=[ParamSpec("preset_name", "string")]),
        ),
    ],
    states=[optional("dispenseItems", "array")],
    commands=[
        CommandSpec(
            "Dispense",
            "Dispense an amount, a preset, or the default portion",
            parameters=[
                optional("item", "string"),
                optional("amount", "number", min_value=0),
                optional("unit", "string"),
                optional("presetName", "string"),
            ],
            mutates=("dispenseItems",),
            constraints=[_check_dispense],
            errors=tuple(DispenseError),
        ),
    ],
    errors=DispenseError,
))


DOCK = register_trait(TraitSpec(
    kind=TraitKind.DOCK,
    description="Return to a charging dock",
    states=[optional("isDocked", "boolean")],
    commands=[
        CommandSpec("Dock", "Return to the dock", mutates=("isDocked",), effect=lambda p: {"isDocked": True}),
    ],
))


_CAPACITY = ParamSpec(
    "capacity",
    "object",
    properties=[ParamSpec("rawValue", "number"), ParamSpec("unit", "string", enum=CAPACITY_UNITS)],
)

ENERGY_STORAGE = register_trait(TraitSpec(
    kind=TraitKind.ENERGY_STORAGE,
    description="Battery and charge reporting",
    attributes=[
        optional("queryOnlyEnergyStorage", "boolean", default=False),
        optional("energyStorageDistanceUnitForUX", "string", enum=["KILOMETERS", "MILES"]),
        optional("isRechargeable", "boolean", default=False),
    ],
    states=[
        optional("descriptiveCapacityRemaining", "string", enum=CAPACITY_STATES),
        optional("capacityRemaining", "array", items=_CAPACITY),
        optional("capacityUntilFull", "array", items=_CAPACITY),
        optional("isCharging", "boolean"),
        optional("isPluggedIn", "boolean"),
    ],
    commands=[
        CommandSpec(
            "Charge",
            "Start or stop charging",
            parameters=[ParamSpec("charge", "boolean")],
            mutates=("isCharging",),
            effect=lambda p: {"isCharging": p["charge"]},
            errors=(EnergyStorageError.DEVICE_UNPLUGGED,),
        ),
    ],
    errors=EnergyStorageError,
))


FILL = register_trait(TraitSpec(
    kind=TraitKind.FILL,
    description="Fill to a level or percentage",
    attributes=[
        optional(
            "availableFillLevels",
            "object",
            properties=[
                optional("levels", "array"),
                optional("ordered", "boolean", default=False),
                optional("supportsFillPercent", "boolean", default=False),
            ],
        ),
    ],
    states=[
        optional("isFilled", "boolean"),
        optional("currentFillLevel", "string"),
        optional("currentFillPercent", "number", min_value=0, max_value=100),
    ],
    commands=[
        CommandSpec(
            "Fill",
            "Fill or drain",
            parameters=[
                ParamSpec("fill", "boolean"),
                optional("fillLevel", "string"),
                optional("fillPercent", "number", min_value=0, max_value=100),
            ],
            mutates=("isFilled", "currentFillLevel", "currentFillPercent"),
            effect=lambda p: {
                "isFilled": p["fill"],
                "currentFillLevel": p.get("fillLevel"),
                "currentFillPercent": p.get("fillPercent"),
            },
        ),
    ],
))


MODES = register_trait(TraitSpec(
    kind=TraitKind.MODES,
    description="Named modes with discrete settings",
    attributes=[
        optional(
            "availableModes",
            "array",
            items=ParamSpec(
                "mode",
                "object",
                properties=[
                    ParamSpec("name", "string"),
                    optional("name_values", "array"),
                    optional("settings", "array"),
                    optional("ordered", "boolean", default=False),
                ],
            ),
        ),
        optional("commandOnlyModes", "boolean", default=False),
        optional("queryOnlyModes", "boolean", default=False),
    ],
    states=[optional("currentModeSettings", "object", values=ParamSpec("setting", "string"))],
    commands=[
        CommandSpec(
            "SetModes",
            "Change one or more mode settings",
            parameters=[ParamSpec("updateModeSettings", "object", values=ParamSpec("setting", "string"))],
            mutates=("currentModeSettings",),
            effect=lambda p: {"currentModeSettings": dict(p["updateModeSettings"])},
            constraints=[_check_modes],
        ),
    ],
))


RUN_CYCLE = register_trait(TraitSpec(
    kind=TraitKind.RUN_CYCLE,
    description="Progress of a running cycle",
    states=[
        optional("currentRunCycle", "array"),
        optional("currentTotalRemainingTime", "integer", min_value=0),
        optional("currentCycleRemainingTime", "integer", min_value=0),
    ],
))


START_STOP = register_trait(TraitSpec(
    kind=TraitKind.START_STOP,
    description="Start, stop and pause, optionally by zone",
    attributes=[
        optional("pausable", "boolean", default=False),
        optional("availableZones", "array", items=ParamSpec("zone", "string")),
    ],
    states=[
        optional("isRunning", "boolean"),
        optional("isPaused", "boolean"),
        optional("activeZones", "array", items=ParamSpec("zone", "string")),
    ],
    commands=[
        CommandSpec(
            "StartStop",
            "Start or stop the device",
            parameters=[
                ParamSpec("start", "boolean"),
                optional("zone", "string"),
                optional("multipleZones", "array", items=ParamSpec("zone", "string")),
            ],
            mutates=("isRunning", "isPaused", "activeZones"),
            effect=_start_state,
            constraints=[_check_start],
        ),
        CommandSpec(
            "PauseUnpause",
            "Pause or resume",
            parameters=[ParamSpec("pause", "boolean")],
            mutates=("isPaused",),
            effect=lambda p: {"isPaused": p["pause"]},
            constraints=[_check_pause],
        ),
    ],
))


TIMER = register_trait(TraitSpec(
    kind=TraitKind.TIMER,
    description="Countdown timer",
    attributes=[
        optional("maxTimerLimitSec", "integer", min_value=0),
        optional("commandOnlyTimer", "boolean", default=False),
    ],
    states=[
        optional("timerRemainingSec", "integer"),
        optional("timerPaused", "boolean"),
    ],
    commands=[
        CommandSpec(
            "TimerStart",
            "Start a timer",
            parameters=[ParamSpec("timerTimeSec", "integer", min_value=0)],
            mutates=("timerRemainingSec", "timerPaused"),
            effect=lambda p: {"timerRemainingSec": p["timerTimeSec"], "timerPaused": False},
            constraints=[_check_timer],
        ),
        CommandSpec(
            "TimerAdjust",
            "Add or remove time",
            parameters=[ParamSpec("timerTimeSec", "integer")],
            mutates=("timerRemainingSec",),
            constraints=[_check_timer_adjust],
        ),
        CommandSpec("TimerPause", "Pause the timer", mutates=("timerPaused",), effect=lambda p: {"timerPaused": True}),
        CommandSpec("TimerResume", "Resume the timer", mutates=("timerPaused",), effect=lambda p: {"timerPaused": False}),
        CommandSpec(
            "TimerCancel",
            "Cancel the timer",
            mutates=("timerRemainingSec",),
            effect=lambda p: {"timerRemainingSec": -1},
        ),
    ],
))


TOGGLES = register_trait(TraitSpec(
    kind=TraitKind.TOGGLES,
    description="Named on/off toggles",
    attributes=[
        optional(
            "availableToggles",
            "array",
            items=ParamSpec(
                "toggle",
                "object",
                properties=[ParamSpec("name", "string"), optional("name_values", "array")],
            ),
        ),
        optional("commandOnlyToggles", "boolean", default=False),
        optional("queryOnlyToggles", "boolean", default=False),
    ],
    states=[optional("currentToggleSettings", "object", values=ParamSpec("toggle", "boolean"))],
    commands=[
        CommandSpec(
            "SetToggles",
            "Change one or more toggles",
            parameters=[ParamSpec("updateToggleSettings", "object", values=ParamSpec("toggle", "boolean"))],
            mutates=("currentToggleSettings",),
            effect=lambda p: {"currentToggleSettings": dict(p["updateToggleSettings"])},
            constraints=[_check_toggles],
        ),
    ],
))
