"""
Error translation.

translate_error() maps any internal error onto the closed vendor error-code
vocabulary plus an optional debug string. It is a pure function and never
raises; anything it does not recognize becomes the generic code.
"""

from typing import FrozenSet, Optional, Tuple

from .errors import (
    DecodeError,
    DuplicateTraitError,
    ExecutorError,
    InvalidParameterError,
    TraitError,
    UnknownCommandError,
    UnknownDeviceError,
    UnknownDeviceTypeError,
    UnsupportedTraitError,
)
from .traits import all_error_codes

GENERIC_ERROR_CODE = "hardError"
DEVICE_NOT_FOUND = "deviceNotFound"
DEVICE_OFFLINE = "deviceOffline"
FUNCTION_NOT_SUPPORTED = "functionNotSupported"
NOT_SUPPORTED = "notSupported"
PROTOCOL_ERROR = "protocolError"
VALUE_OUT_OF_RANGE = "valueOutOfRange"

# Codes that are not scoped to a single trait.
GENERIC_ERROR_CODES: FrozenSet[str] = frozenset({
    "actionNotAvailable",
    "alreadyArmed",
    "alreadyAtMax",
    "alreadyAtMin",
    "alreadyClosed",
    "alreadyDisarmed",
    "alreadyDocked",
    "alreadyInState",
    "alreadyOff",
    "alreadyOn",
    "alreadyOpen",
    "alreadyPaused",
    "alreadyStarted",
    "alreadyStopped",
    "authFailure",
    "deviceBusy",
    DEVICE_NOT_FOUND,
    DEVICE_OFFLINE,
    "deviceTurnedOff",
    FUNCTION_NOT_SUPPORTED,
    GENERIC_ERROR_CODE,
    "inSoftwareUpdate",
    "lowBattery",
    NOT_SUPPORTED,
    PROTOCOL_ERROR,
    "relinkRequired",
    "transientError",
    "unableToLocateDevice",
    VALUE_OUT_OF_RANGE,
})


def vendor_error_codes() -> FrozenSet[str]:
    """Every code translate_error() may return: generic codes plus trait-scoped ones."""
    return GENERIC_ERROR_CODES | all_error_codes()


def is_vendor_code(code: Optional[str]) -> bool:
    return code is not None and code in vendor_error_codes()


def _vendor_code(error: BaseException) -> str:
    if isinstance(error, InvalidParameterError):
        if error.kind in (InvalidParameterError.RANGE, InvalidParameterError.ENUM):
            return VALUE_OUT_OF_RANGE
        return PROTOCOL_ERROR
    if isinstance(error, UnsupportedTraitError):
        return FUNCTION_NOT_SUPPORTED
    if isinstance(error, UnknownCommandError):
        return NOT_SUPPORTED
    if isinstance(error, (DuplicateTraitError, UnknownDeviceTypeError, DecodeError)):
        return PROTOCOL_ERROR
    if isinstance(error, UnknownDeviceError):
        return DEVICE_NOT_FOUND
    if isinstance(error, TraitError):
        code = getattr(error.error, "value", None)
        return code if is_vendor_code(code) else GENERIC_ERROR_CODE
    if isinstance(error, ExecutorError):
        return error.vendor_code if is_vendor_code(error.vendor_code) else GENERIC_ERROR_CODE
    return GENERIC_ERROR_CODE


def translate_error(error: BaseException, include_debug: bool = True) -> Tuple[str, Optional[str]]:
    """
    Map an error to ``(vendor_code, debug_string)``.

    The internal message only ever appears as the debug string, and only when
    ``include_debug`` is set.
    """
    code = _vendor_code(error)
    message = str(error)
    debug = message if include_debug and message else None
    return code, debug
