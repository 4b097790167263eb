"""
Building blocks for the trait catalog.

A trait is plain data: a TraitSpec holding attribute, state and command
schemas plus a trait-local error enumeration. Catalog modules build one
TraitSpec per TraitKind and register it; nothing here dispatches on
subclasses.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Type

from ..errors import InvalidParameterError, UnsupportedTraitError

logger = logging.getLogger(__name__)

TRAIT_PREFIX = "action.devices.traits."
COMMAND_PREFIX = "action.devices.commands."


class TraitKind(str, Enum):
    """Closed enumeration of supported traits, valued by vendor identifier."""

    APP_SELECTOR = "action.devices.traits.AppSelector"
    ARM_DISARM = "action.devices.traits.ArmDisarm"
    BRIGHTNESS = "action.devices.traits.Brightness"
    CAMERA_STREAM = "action.devices.traits.CameraStream"
    CHANNEL = "action.devices.traits.Channel"
    COLOR_SETTING = "action.devices.traits.ColorSetting"
    COOK = "action.devices.traits.Cook"
    DISPENSE = "action.devices.traits.Dispense"
    DOCK = "action.devices.traits.Dock"
    ENERGY_STORAGE = "action.devices.traits.EnergyStorage"
    FAN_SPEED = "action.devices.traits.FanSpeed"
    FILL = "action.devices.traits.Fill"
    HUMIDITY_SETTING = "action.devices.traits.HumiditySetting"
    INPUT_SELECTOR = "action.devices.traits.InputSelector"
    LIGHT_EFFECTS = "action.devices.traits.LightEffects"
    LOCATOR = "action.devices.traits.Locator"
    LOCK_UNLOCK = "action.devices.traits.LockUnlock"
    MEDIA_STATE = "action.devices.traits.MediaState"
    MODES = "action.devices.traits.Modes"
    NETWORK_CONTROL = "action.devices.traits.NetworkControl"
    ON_OFF = "action.devices.traits.OnOff"
    OPEN_CLOSE = "action.devices.traits.OpenClose"
    REBOOT = "action.devices.traits.Reboot"
    ROTATION = "action.devices.traits.Rotation"
    RUN_CYCLE = "action.devices.traits.RunCycle"
    SCENE = "action.devices.traits.Scene"
    SENSOR_STATE = "action.devices.traits.SensorState"
    SOFTWARE_UPDATE = "action.devices.traits.SoftwareUpdate"
    START_STOP = "action.devices.traits.StartStop"
    STATUS_REPORT = "action.devices.traits.StatusReport"
    TEMPERATURE_CONTROL = "action.devices.traits.TemperatureControl"
    TEMPERATURE_SETTING = "action.devices.traits.TemperatureSetting"
    TIMER = "action.devices.traits.Timer"
    TOGGLES = "action.devices.traits.Toggles"
    TRANSPORT_CONTROL = "action.devices.traits.TransportControl"
    VOLUME = "action.devices.traits.Volume"

    @property
    def short_name(self) -> str:
        return self.value[len(TRAIT_PREFIX):]

    @classmethod
    def parse(cls, name: Any) -> "TraitKind":
        """Parse a full (``action.devices.traits.OnOff``) or short (``OnOff``) trait name."""
        if isinstance(name, cls):
            return name
        if isinstance(name, str):
            full = name if name.startswith(TRAIT_PREFIX) else TRAIT_PREFIX + name
            try:
                return cls(full)
            except ValueError:
                pass
        raise UnsupportedTraitError(str(name))


def command_name(name: str) -> str:
    """Return the full vendor command name for a short or full name."""
    if name.startswith(COMMAND_PREFIX):
        return name
    return COMMAND_PREFIX + name


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


_TYPE_CHECKS: Dict[str, Callable[[Any], bool]] = {
    "string": lambda v: isinstance(v, str),
    "integer": _is_integer,
    "number": _is_number,
    "boolean": lambda v: isinstance(v, bool),
    "array": lambda v: isinstance(v, list),
    "object": lambda v: isinstance(v, dict),
    "any": lambda v: True,
}


@dataclass
class ParamSpec:
    """Specification for a command parameter, attribute or state field."""

    name: str
    type: str  # "string", "integer", "number", "boolean", "array", "object", "any"
    description: str = ""
    required: bool = True
    default: Any = None

    # Constraints
    enum: Optional[List[Any]] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None

    # Nested shapes
    items: Optional["ParamSpec"] = None  # array elements
    properties: Optional[List["ParamSpec"]] = None  # object fields
    values: Optional["ParamSpec"] = None  # map values, keyed by arbitrary strings
    one_of: Optional[Tuple[str, ...]] = None  # object needs at least one of these fields

    def check(self, value: Any, path: Optional[str] = None) -> Any:
        """
        Validate a single value against this spec.

        Returns the value, normalized (integral floats become ints for
        integer fields, nested objects get defaults filled in).
        Raises InvalidParameterError naming the dotted path on failure.
        """
        path = path or self.name

        if value is None:
            raise InvalidParameterError(path, "value is null", InvalidParameterError.MISSING)

        if self.type == "integer" and isinstance(value, float) and value.is_integer():
            value = int(value)

        check = _TYPE_CHECKS.get(self.type)
        if check is None:
            raise ValueError(f"Unknown parameter type {self.type!r} for {path}")
        if not check(value):
            raise InvalidParameterError(
                path, f"expected {self.type}, got {type(value).__name__}", InvalidParameterError.TYPE
            )

        if self.enum is not None and value not in self.enum:
            raise InvalidParameterError(
                path, f"{value!r} is not one of {self.enum}", InvalidParameterError.ENUM
            )

        if self.min_value is not None and value < self.min_value:
            raise InvalidParameterError(
                path, f"{value} is below minimum {self.min_value}", InvalidParameterError.RANGE
            )
        if self.max_value is not None and value > self.max_value:
            raise InvalidParameterError(
                path, f"{value} is above maximum {self.max_value}", InvalidParameterError.RANGE
            )

        if self.type == "array" and self.items is not None:
            value = [self.items.check(item, f"{path}.{i}") for i, item in enumerate(value)]

        if self.type == "object":
            if self.properties is not None:
                value = validate_params(self.properties, value, prefix=f"{path}.", one_of=self.one_of)
            if self.values is not None:
                value = {key: self.values.check(item, f"{path}.{key}") for key, item in value.items()}

        return value

    def to_dict(self) -> dict:
        data: Dict[str, Any] = {"name": self.name, "type": self.type, "required": self.required}
        if self.description:
            data["description"] = self.description
        if self.default is not None:
            data["default"] = self.default
        if self.enum is not None:
            data["enum"] = self.enum
        if self.min_value is not None:
            data["min"] = self.min_value
        if self.max_value is not None:
            data["max"] = self.max_value
        if self.items is not None:
            data["items"] = self.items.to_dict()
        if self.properties is not None:
            data["properties"] = [p.to_dict() for p in self.properties]
        if self.values is not None:
            data["values"] = self.values.to_dict()
        if self.one_of:
            data["one_of"] = list(self.one_of)
        return data


def optional(name: str, type: str, description: str = "", **kwargs) -> ParamSpec:
    """Shorthand for a ParamSpec that may be omitted."""
    return ParamSpec(name, type, description, required=False, **kwargs)


def validate_params(
    specs: Iterable[ParamSpec],
    params: Dict[str, Any],
    prefix: str = "",
    one_of: Optional[Tuple[str, ...]] = None,
) -> Dict[str, Any]:
    """
    Validate and normalize a parameter object.

    Returns validated params (with defaults filled in). Unknown keys are kept
    as given. Raises InvalidParameterError if validation fails.
    """
    result = dict(params)

    for spec in specs:
        name = spec.name
        if name in params and params[name] is not None:
            result[name] = spec.check(params[name], prefix + name)
        elif spec.default is not None:
            result[name] = spec.default
        elif spec.required:
            raise InvalidParameterError(
                prefix + name, "missing required parameter", InvalidParameterError.MISSING
            )

    if one_of and not any(params.get(name) is not None for name in one_of):
        raise InvalidParameterError(
            prefix + "|".join(one_of),
            f"one of {', '.join(one_of)} is required",
            InvalidParameterError.MISSING,
        )

    return result


def check_range(path: str, value: Any, low: Optional[float], high: Optional[float]) -> None:
    """Raise a range InvalidParameterError unless low <= value <= high (open bounds are None)."""
    if low is not None and value < low:
        raise InvalidParameterError(path, f"{value} is below device minimum {low}", InvalidParameterError.RANGE)
    if high is not None and value > high:
        raise InvalidParameterError(path, f"{value} is above device maximum {high}", InvalidParameterError.RANGE)


def check_choice(path: str, value: Any, choices: Iterable[Any]) -> None:
    """Raise an enum InvalidParameterError unless value is one of the device's choices."""
    choices = list(choices)
    if value not in choices:
        raise InvalidParameterError(path, f"{value!r} is not one of {choices}", InvalidParameterError.ENUM)


Effect = Callable[[Dict[str, Any]], Dict[str, Any]]
Constraint = Callable[[Dict[str, Any], Dict[str, Any]], None]


@dataclass
class CommandSpec:
    """
    Specification for a trait command.

    ``effect`` derives the expected state delta from validated params.
    ``constraints`` are called as ``constraint(params, attributes)`` after
    schema validation and raise InvalidParameterError or TraitError when the
    device's declared attributes rule the request out.
    """

    name: str
    description: str = ""
    parameters: List[ParamSpec] = field(default_factory=list)
    one_of: Optional[Tuple[str, ...]] = None
    mutates: Tuple[str, ...] = ()
    effect: Optional[Effect] = None
    constraints: List[Constraint] = field(default_factory=list)
    errors: Tuple[Enum, ...] = ()

    def __post_init__(self):
        self.name = command_name(self.name)

    @property
    def short_name(self) -> str:
        return self.name[len(COMMAND_PREFIX):]

    def validate(self, params: Dict[str, Any], attributes: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Validate params against the schema, then against the device attributes."""
        validated = validate_params(self.parameters, params or {}, one_of=self.one_of)
        for constraint in self.constraints:
            constraint(validated, attributes or {})
        return validated

    def derive_state(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """State delta this command is expected to produce."""
        if self.effect is None:
            return {}
        delta = self.effect(params)
        return {k: v for k, v in delta.items() if v is not None and k in self.mutates}

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": [p.to_dict() for p in self.parameters],
            "one_of": list(self.one_of) if self.one_of else None,
            "mutates": list(self.mutates),
            "errors": [e.value for e in self.errors],
        }


@dataclass
class TraitSpec:
    """
    Complete definition of one trait.

    This is the single catalog entry for a TraitKind: attribute schema,
    state schema, commands and the trait-local error enumeration.
    """

    kind: TraitKind
    description: str = ""
    attributes: List[ParamSpec] = field(default_factory=list)
    states: List[ParamSpec] = field(default_factory=list)
    commands: List[CommandSpec] = field(default_factory=list)
    errors: Optional[Type[Enum]] = None
    # state fields that are replaced whole rather than merged key by key
    replaced_states: Tuple[str, ...] = ()

    _commands_by_name: Dict[str, CommandSpec] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        for command in self.commands:
            if command.name in self._commands_by_name:
                raise ValueError(f"Duplicate command {command.name} in {self.kind.short_name}")
            self._commands_by_name[command.name] = command

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def short_name(self) -> str:
        return self.kind.short_name

    @property
    def state_fields(self) -> List[str]:
        return [s.name for s in self.states]

    @property
    def error_codes(self) -> List[str]:
        if self.errors is None:
            return []
        return [e.value for e in self.errors]

    def get_command(self, name: str) -> Optional[CommandSpec]:
        return self._commands_by_name.get(command_name(name))

    def validate_attributes(self, attributes: Dict[str, Any]) -> Dict[str, Any]:
        """Type-check the attributes this trait knows about."""
        return validate_params(self.attributes, attributes, prefix="attributes.")

    def extract_state(self, state: Dict[str, Any]) -> Dict[str, Any]:
        """Keep only the state fields this trait reports."""
        fields = set(self.state_fields)
        return {k: v for k, v in state.items() if k in fields}

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "attributes": [a.to_dict() for a in self.attributes],
            "states": [s.to_dict() for s in self.states],
            "commands": [c.to_dict() for c in self.commands],
            "errors": self.error_codes,
        }
