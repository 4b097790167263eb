"""
Access and movement traits: ArmDisarm, LockUnlock, OpenClose, Rotation.
"""

from enum import Enum
from typing import Any, Dict

from ..errors import InvalidParameterError
from .base import CommandSpec, ParamSpec, TraitKind, TraitSpec, check_choice, check_range, optional
from .registry import register_trait

OPEN_DIRECTIONS = ["UP", "DOWN", "LEFT", "RIGHT", "IN", "OUT"]


class ArmDisarmError(str, Enum):
    """Trait-scoped errors for ArmDisarm."""

    ALREADY_IN_STATE = "alreadyInState"
    DEVICE_TAMPERED = "deviceTampered"
    PASSPHRASE_INCORRECT = "passphraseIncorrect"
    PIN_INCORRECT = "pinIncorrect"
    SECURITY_RESTRICTIONS = "securityRestrictions"
    TOO_MANY_FAILED_ATTEMPTS = "tooManyFailedAttempts"
    USER_CANCELLED = "userCancelled"


class LockUnlockError(str, Enum):
    """Trait-scoped errors for LockUnlock."""

    REMOTE_SET_DISABLED = "remoteSetDisabled"
    DEVICE_JAMMING_DETECTED = "deviceJammingDetected"
    NOT_SUPPORTED = "notSupported"
    ALREADY_LOCKED = "alreadyLocked"
    ALREADY_UNLOCKED = "alreadyUnlocked"


class OpenCloseError(str, Enum):
    """Trait-scoped errors for OpenClose."""

    LOCKED_STATE = "lockedState"
    DEVICE_JAMMING_DETECTED = "deviceJammingDetected"


def _check_arm_level(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    levels = (attributes.get("availableArmLevels") or {}).get("levels") or []
    if levels and "armLevel" in params:
        check_choice("armLevel", params["armLevel"], [level.get("level_name") for level in levels])


def _arm_state(params: Dict[str, Any]) -> Dict[str, Any]:
    if params.get("cancel"):
        return {"isArmed": False}
    return {"isArmed": params["arm"], "currentArmLevel": params.get("armLevel")}


def _check_direction(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    directions = attributes.get("openDirection")
    if directions and "openDirection" in params:
        check_choice("openDirection", params["openDirection"], directions)


def _check_discrete(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    if attributes.get("discreteOnlyOpenClose") and params["openPercent"] not in (0, 100):
        raise InvalidParameterError(
            "openPercent", "device only supports fully open or closed", InvalidParameterError.RANGE
        )


def _check_relative(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    if attributes.get("discreteOnlyOpenClose"):
        raise InvalidParameterError(
            "openRelativePercent", "device only supports fully open or closed", InvalidParameterError.ENUM
        )


def _open_state(params: Dict[str, Any]) -> Dict[str, Any]:
    if "openDirection" in params:
        return {"openState": [{"openPercent": params["openPercent"], "openDirection": params["openDirection"]}]}
    return {"openPercent": params["openPercent"]}


def _check_rotation(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    if "rotationDegrees" in params:
        if attributes.get("supportsDegrees") is False:
            raise InvalidParameterError(
                "rotationDegrees", "device does not rotate by degrees", InvalidParameterError.ENUM
            )
        degree_range = attributes.get("rotationDegreesRange") or {}
        check_range(
            "rotationDegrees",
            params["rotationDegrees"],
            degree_range.get("rotationDegreesMin"),
            degree_range.get("rotationDegreesMax"),
        )
    if "rotationPercent" in params and attributes.get("supportsPercent") is False:
        raise InvalidParameterError(
            "rotationPercent", "device does not rotate by percent", InvalidParameterError.ENUM
        )


ARM_DISARM = register_trait(TraitSpec(
    kind=TraitKind.ARM_DISARM,
    description="Security system arming",
    attributes=[
        optional(
            "availableArmLevels",
            "object",
            properties=[optional("levels", "array"), optional("ordered", "boolean", default=False)],
        ),
    ],
    states=[
        optional("isArmed", "boolean"),
        optional("currentArmLevel", "string"),
        optional("exitAllowance", "integer", min_value=0),
    ],
    commands=[
        CommandSpec(
            "ArmDisarm",
            "Arm or disarm, optionally at a level",
            parameters=[
                ParamSpec("arm", "boolean"),
                optional("cancel", "boolean", default=False),
                optional("armLevel", "string"),
                optional("followUpToken", "string"),
            ],
            mutates=("isArmed", "currentArmLevel", "exitAllowance"),
            effect=_arm_state,
            constraints=[_check_arm_level],
            errors=tuple(ArmDisarmError),
        ),
    ],
    errors=ArmDisarmError,
))


LOCK_UNLOCK = register_trait(TraitSpec(
    kind=TraitKind.LOCK_UNLOCK,
    description="Lock and unlock",
    states=[
        optional("isLocked", "boolean"),
        optional("isJammed", "boolean"),
    ],
    commands=[
        CommandSpec(
            "LockUnlock",
            "Lock or unlock the device",
            parameters=[ParamSpec("lock", "boolean"), optional("followUpToken", "string")],
            mutates=("isLocked",),
            effect=lambda p: {"isLocked": p["lock"]},
            errors=tuple(LockUnlockError),
        ),
    ],
    errors=LockUnlockError,
))


OPEN_CLOSE = register_trait(TraitSpec(
    kind=TraitKind.OPEN_CLOSE,
    description="Open and close, optionally by direction",
    attributes=[
        optional("discreteOnlyOpenClose", "boolean", default=False),
        optional("openDirection", "array", items=ParamSpec("direction", "string", enum=OPEN_DIRECTIONS)),
        optional("commandOnlyOpenClose", "boolean", default=False),
        optional("queryOnlyOpenClose", "boolean", default=False),
    ],
    states=[
        optional("openPercent", "number", min_value=0, max_value=100),
        optional(
            "openState",
            "array",
            items=ParamSpec(
                "state",
                "object",
                properties=[
                    ParamSpec("openPercent", "number", min_value=0, max_value=100),
                    ParamSpec("openDirection", "string", enum=OPEN_DIRECTIONS),
                ],
            ),
        ),
    ],
    commands=[
        CommandSpec(
            "OpenClose",
            "Open to a percentage",
            parameters=[
                ParamSpec("openPercent", "number", min_value=0, max_value=100),
                optional("openDirection", "string", enum=OPEN_DIRECTIONS),
                optional("followUpToken", "string"),
            ],
            mutates=("openPercent", "openState"),
            effect=_open_state,
            constraints=[_check_direction, _check_discrete],
            errors=tuple(OpenCloseError),
        ),
        CommandSpec(
            "OpenCloseRelative",
            "Open or close by a relative amount",
            parameters=[
                ParamSpec("openRelativePercent", "number", min_value=-100, max_value=100),
                optional("openDirection", "string", enum=OPEN_DIRECTIONS),
            ],
            mutates=("openPercent", "openState"),
            constraints=[_check_direction, _check_relative],
            errors=tuple(OpenCloseError),
        ),
    ],
    errors=OpenCloseError,
))


ROTATION = register_trait(TraitSpec(
    kind=TraitKind.ROTATION,
    description="Rotate by degrees or percent",
    attributes=[
        optional("supportsDegrees", "boolean"),
        optional("supportsPercent", "boolean"),
        optional(
            "rotationDegreesRange",
            "object",
            properties=[ParamSpec("rotationDegreesMin", "number"), ParamSpec("rotationDegreesMax", "number")],
        ),
        optional("supportsContinuousRotation", "boolean", default=False),
        optional("commandOnlyRotation", "boolean", default=False),
    ],
    states=[
        optional("rotationDegrees", "number"),
        optional("rotationPercent", "number", min_value=0, max_value=100),
    ],
    commands=[
        CommandSpec(
            "RotateAbsolute",
            "Rotate to an absolute position",
            parameters=[
                optional("rotationDegrees", "number"),
                optional("rotationPercent", "number", min_value=0, max_value=100),
            ],
            one_of=("rotationDegrees", "rotationPercent"),
            mutates=("rotationDegrees", "rotationPercent"),
            effect=lambda p: {
                "rotationDegrees": p.get("rotationDegrees"),
                "rotationPercent": p.get("rotationPercent"),
            },
            constraints=[_check_rotation],
        ),
    ],
))
