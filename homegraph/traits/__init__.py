"""
Trait catalog.

Importing this package registers every supported trait.
"""

from .base import (
    COMMAND_PREFIX,
    TRAIT_PREFIX,
    CommandSpec,
    ParamSpec,
    TraitKind,
    TraitSpec,
    command_name,
    validate_params,
)
from .registry import (
    TRAIT_CATALOG,
    all_error_codes,
    find_command,
    get_trait,
    iter_traits,
    register_trait,
    replaced_state_fields,
)
from . import access, appliances, climate, lighting, media, system  # noqa: F401
from .access import ArmDisarmError, LockUnlockError, OpenCloseError
from .appliances import CookError, DispenseError, EnergyStorageError
from .climate import FanSpeedError, HumiditySettingError, TemperatureSettingError
from .lighting import ColorSettingError
from .media import AppSelectorError, ChannelError, InputSelectorError, VolumeError
from .system import NetworkControlError

__all__ = [
    "COMMAND_PREFIX",
    "TRAIT_PREFIX",
    "TRAIT_CATALOG",
    "CommandSpec",
    "ParamSpec",
    "TraitKind",
    "TraitSpec",
    "command_name",
    "validate_params",
    "all_error_codes",
    "find_command",
    "get_trait",
    "iter_traits",
    "register_trait",
    "replaced_state_fields",
    # Trait-scoped errors
    "AppSelectorError",
    "ArmDisarmError",
    "ChannelError",
    "ColorSettingError",
    "CookError",
    "DispenseError",
    "EnergyStorageError",
    "FanSpeedError",
    "HumiditySettingError",
    "InputSelectorError",
    "LockUnlockError",
    "NetworkControlError",
    "OpenCloseError",
    "TemperatureSettingError",
    "VolumeError",
]
