"""
Device model.

A Device is an immutable snapshot supplied by the caller for the duration of
one request. The core validates commands against it and produces new
snapshots when state changes; it never persists or mutates devices in place.
"""

import copy
import dataclasses
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union

from .config import get_config
from .errors import (
    DuplicateTraitError,
    HomegraphError,
    UnknownCommandError,
    UnknownDeviceTypeError,
    UnsupportedTraitError,
)
from .traits import CommandSpec, TraitKind, TraitSpec, find_command, get_trait, replaced_state_fields

logger = logging.getLogger(__name__)

DEVICE_TYPE_PREFIX = "action.devices.types."


class DeviceType(str, Enum):
    """Vendor device types."""

    AC_UNIT = "action.devices.types.AC_UNIT"
    AIRCOOLER = "action.devices.types.AIRCOOLER"
    AIRFRESHENER = "action.devices.types.AIRFRESHENER"
    AIRPURIFIER = "action.devices.types.AIRPURIFIER"
    AUDIO_VIDEO_RECEIVER = "action.devices.types.AUDIO_VIDEO_RECEIVER"
    AWNING = "action.devices.types.AWNING"
    BATHTUB = "action.devices.types.BATHTUB"
    BED = "action.devices.types.BED"
    BLENDER = "action.devices.types.BLENDER"
    BLINDS = "action.devices.types.BLINDS"
    BOILER = "action.devices.types.BOILER"
    CAMERA = "action.devices.types.CAMERA"
    CARBON_MONOXIDE_DETECTOR = "action.devices.types.CARBON_MONOXIDE_DETECTOR"
    CHARGER = "action.devices.types.CHARGER"
    CLOSET = "action.devices.types.CLOSET"
    COFFEE_MAKER = "action.devices.types.COFFEE_MAKER"
    COOKTOP = "action.devices.types.COOKTOP"
    CURTAIN = "action.devices.types.CURTAIN"
    DEHUMIDIFIER = "action.devices.types.DEHUMIDIFIER"
    DEHYDRATOR = "action.devices.types.DEHYDRATOR"
    DISHWASHER = "action.devices.types.DISHWASHER"
    DOOR = "action.devices.types.DOOR"
    DOORBELL = "action.devices.types.DOORBELL"
    DRAWER = "action.devices.types.DRAWER"
    DRYER = "action.devices.types.DRYER"
    FAN = "action.devices.types.FAN"
    FAUCET = "action.devices.types.FAUCET"
    FIREPLACE = "action.devices.types.FIREPLACE"
    FREEZER = "action.devices.types.FREEZER"
    FRYER = "action.devices.types.FRYER"
    GARAGE = "action.devices.types.GARAGE"
    GATE = "action.devices.types.GATE"
    GRILL = "action.devices.types.GRILL"
    HEATER = "action.devices.types.HEATER"
    HOOD = "action.devices.types.HOOD"
    HUMIDIFIER = "action.devices.types.HUMIDIFIER"
    KETTLE = "action.devices.types.KETTLE"
    LIGHT = "action.devices.types.LIGHT"
    LOCK = "action.devices.types.LOCK"
    MICROWAVE = "action.devices.types.MICROWAVE"
    MOP = "action.devices.types.MOP"
    MOWER = "action.devices.types.MOWER"
    MULTICOOKER = "action.devices.types.MULTICOOKER"
    NETWORK = "action.devices.types.NETWORK"
    OUTLET = "action.devices.types.OUTLET"
    OVEN = "action.devices.types.OVEN"
    PERGOLA = "action.devices.types.PERGOLA"
    PETFEEDER = "action.devices.types.PETFEEDER"
    PRESSURECOOKER = "action.devices.types.PRESSURECOOKER"
    RADIATOR = "action.devices.types.RADIATOR"
    REFRIGERATOR = "action.devices.types.REFRIGERATOR"
    REMOTECONTROL = "action.devices.types.REMOTECONTROL"
    ROUTER = "action.devices.types.ROUTER"
    SCENE = "action.devices.types.SCENE"
    SECURITY_SYSTEM = "action.devices.types.SECURITY_SYSTEM"
    SETTOP = "action.devices.types.SETTOP"
    SHOWER = "action.devices.types.SHOWER"
    SHUTTER = "action.devices.types.SHUTTER"
    SMOKE_DETECTOR = "action.devices.types.SMOKE_DETECTOR"
    SOUNDBAR = "action.devices.types.SOUNDBAR"
    SOUSVIDE = "action.devices.types.SOUSVIDE"
    SPEAKER = "action.devices.types.SPEAKER"
    SPRINKLER = "action.devices.types.SPRINKLER"
    STANDMIXER = "action.devices.types.STANDMIXER"
    STREAMING_BOX = "action.devices.types.STREAMING_BOX"
    STREAMING_SOUNDBAR = "action.devices.types.STREAMING_SOUNDBAR"
    STREAMING_STICK = "action.devices.types.STREAMING_STICK"
    SWITCH = "action.devices.types.SWITCH"
    THERMOSTAT = "action.devices.types.THERMOSTAT"
    TV = "action.devices.types.TV"
    VACUUM = "action.devices.types.VACUUM"
    VALVE = "action.devices.types.VALVE"
    WASHER = "action.devices.types.WASHER"
    WATERHEATER = "action.devices.types.WATERHEATER"
    WATERPURIFIER = "action.devices.types.WATERPURIFIER"
    WATERSOFTENER = "action.devices.types.WATERSOFTENER"
    WINDOW = "action.devices.types.WINDOW"
    YOGURTMAKER = "action.devices.types.YOGURTMAKER"

    @property
    def short_name(self) -> str:
        return self.value[len(DEVICE_TYPE_PREFIX):]

    @classmethod
    def parse(cls, name: Union["DeviceType", str]) -> "DeviceType":
        """Parse a full (``action.devices.types.LIGHT``) or short (``LIGHT``) type name."""
        if isinstance(name, cls):
            return name
        if isinstance(name, str):
            full = name if name.startswith(DEVICE_TYPE_PREFIX) else DEVICE_TYPE_PREFIX + name.upper()
            try:
                return cls(full)
            except ValueError:
                pass
        raise UnknownDeviceTypeError(str(name))


@dataclass(frozen=True)
class DeviceName:
    """Names shown to the user. Opaque to the core."""

    name: str
    default_names: Tuple[str, ...] = ()
    nicknames: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        data: Dict[str, Any] = {"name": self.name}
        if self.default_names:
            data["defaultNames"] = list(self.default_names)
        if self.nicknames:
            data["nicknames"] = list(self.nicknames)
        return data

    @classmethod
    def from_dict(cls, data: Union[dict, str]) -> "DeviceName":
        if isinstance(data, str):
            return cls(name=data)
        return cls(
            name=data.get("name", ""),
            default_names=tuple(data.get("defaultNames", ())),
            nicknames=tuple(data.get("nicknames", ())),
        )


@dataclass(frozen=True)
class DeviceInfo:
    """Hardware description reported in Sync."""

    manufacturer: Optional[str] = None
    model: Optional[str] = None
    hw_version: Optional[str] = None
    sw_version: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "manufacturer": self.manufacturer,
            "model": self.model,
            "hwVersion": self.hw_version,
            "swVersion": self.sw_version,
        }
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict) -> "DeviceInfo":
        return cls(
            manufacturer=data.get("manufacturer"),
            model=data.get("model"),
            hw_version=data.get("hwVersion"),
            sw_version=data.get("swVersion"),
        )


@dataclass(frozen=True)
class Device:
    """
    A device snapshot.

    ``traits`` is ordered as declared. ``attributes`` and ``state`` use the
    vendor field names. ``custom_data`` is handed back to the executor in
    requests and otherwise untouched.
    """

    id: str
    type: DeviceType
    traits: Tuple[TraitKind, ...]
    name: DeviceName
    attributes: Dict[str, Any] = field(default_factory=dict)
    state: Dict[str, Any] = field(default_factory=dict)
    online: bool = True
    will_report_state: bool = False
    room_hint: Optional[str] = None
    device_info: Optional[DeviceInfo] = None
    custom_data: Optional[Dict[str, Any]] = None

    def has_trait(self, kind: Union[TraitKind, str]) -> bool:
        try:
            return TraitKind.parse(kind) in self.traits
        except UnsupportedTraitError:
            return False

    def trait_specs(self) -> List[TraitSpec]:
        return [get_trait(kind) for kind in self.traits]

    def reportable_state(self) -> Dict[str, Any]:
        """State restricted to the fields the device's traits report."""
        result: Dict[str, Any] = {}
        for spec in self.trait_specs():
            result.update(spec.extract_state(self.state))
        return result

    def to_dict(self) -> dict:
        """Sync listing shape."""
        data: Dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "traits": [t.value for t in self.traits],
            "name": self.name.to_dict(),
            "willReportState": self.will_report_state,
            "attributes": copy.deepcopy(self.attributes),
        }
        if self.room_hint:
            data["roomHint"] = self.room_hint
        if self.device_info is not None:
            data["deviceInfo"] = self.device_info.to_dict()
        if self.custom_data is not None:
            data["customData"] = copy.deepcopy(self.custom_data)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Device":
        """
        Build a device from the Sync listing shape.

        ``state`` and ``online`` are accepted as extra keys so device fixtures
        can carry their current condition. Trait names are parsed but not
        checked for duplicates; pass the result through declare().
        """
        device_info = data.get("deviceInfo")
        return cls(
            id=data["id"],
            type=DeviceType.parse(data["type"]),
            traits=tuple(TraitKind.parse(t) for t in data.get("traits", [])),
            name=DeviceName.from_dict(data.get("name", {"name": data["id"]})),
            attributes=dict(data.get("attributes", {})),
            state=dict(data.get("state", {})),
            online=data.get("online", True),
            will_report_state=data.get("willReportState", False),
            room_hint=data.get("roomHint"),
            device_info=DeviceInfo.from_dict(device_info) if device_info else None,
            custom_data=data.get("customData"),
        )


@dataclass
class ValidationResult:
    """Outcome of validate_command(). Errors are carried as data."""

    valid: bool
    trait: Optional[TraitSpec] = None
    command: Optional[CommandSpec] = None
    params: Dict[str, Any] = field(default_factory=dict)
    error: Optional[HomegraphError] = None

    @classmethod
    def ok(cls, trait: TraitSpec, command: CommandSpec, params: Dict[str, Any]) -> "ValidationResult":
        return cls(valid=True, trait=trait, command=command, params=params)

    @classmethod
    def fail(cls, error: HomegraphError, trait: Optional[TraitSpec] = None,
             command: Optional[CommandSpec] = None) -> "ValidationResult":
        return cls(valid=False, trait=trait, command=command, error=error)


def declare(device: Device, strict: Optional[bool] = None) -> Device:
    """
    Validate a device declaration.

    Trait kinds must be unique. With ``strict`` (default from config) the
    attributes of every declared trait are type-checked too. Returns a
    snapshot with type and trait names normalized to their enumerations.
    """
    if strict is None:
        strict = get_config().strict_attributes

    kinds: List[TraitKind] = []
    for name in device.traits:
        kind = TraitKind.parse(name)
        if kind in kinds:
            raise DuplicateTraitError(kind.short_name, device.id)
        kinds.append(kind)

    if strict:
        for kind in kinds:
            get_trait(kind).validate_attributes(device.attributes)

    device = dataclasses.replace(device, type=DeviceType.parse(device.type), traits=tuple(kinds))

    logger.debug(f"Declared device {device.id} ({device.type.short_name}) with {len(device.traits)} traits")
    return device


def validate_command(
    device: Device,
    trait: Optional[Union[TraitKind, str]],
    command: str,
    params: Optional[Dict[str, Any]] = None,
) -> ValidationResult:
    """
    Check that ``command`` may be issued to ``device``.

    The command must exist, belong to ``trait`` when one is given, and that
    trait must be declared by the device. Parameter checks are deferred to the
    catalog entry. Never raises for bad input.
    """
    try:
        trait_spec, command_spec = find_command(command)
    except HomegraphError as e:
        return ValidationResult.fail(e)

    if trait is not None:
        try:
            requested = TraitKind.parse(trait)
        except UnsupportedTraitError as e:
            return ValidationResult.fail(e)
        if requested is not trait_spec.kind:
            return ValidationResult.fail(
                UnknownCommandError(command, requested.short_name), trait=get_trait(requested)
            )

    if trait_spec.kind not in device.traits:
        return ValidationResult.fail(
            UnsupportedTraitError(trait_spec.short_name, device.id), trait=trait_spec, command=command_spec
        )

    try:
        validated = command_spec.validate(params or {}, device.attributes)
    except HomegraphError as e:
        logger.debug(f"Rejected {command_spec.short_name} for {device.id}: {e}")
        return ValidationResult.fail(e, trait=trait_spec, command=command_spec)

    return ValidationResult.ok(trait_spec, command_spec, validated)


def _merge(
    current: Dict[str, Any], delta: Dict[str, Any], replaced: FrozenSet[str] = frozenset()
) -> Dict[str, Any]:
    merged = dict(current)
    for key, value in delta.items():
        if key not in replaced and isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def merge_state(device: Device, delta: Dict[str, Any]) -> Device:
    """
    Apply a state delta and return a new snapshot.

    Fields missing from ``delta`` are preserved. Nested objects merge key by
    key, so updating one mode setting keeps the others. One-of fields such as
    ``color`` are replaced whole.
    """
    if not delta:
        return device
    return dataclasses.replace(device, state=_merge(device.state, delta, replaced_state_fields()))


def merge_states(current: Dict[str, Any], delta: Dict[str, Any]) -> Dict[str, Any]:
    """merge_state() for bare state dicts."""
    return _merge(current, delta, replaced_state_fields())
