"""
Error taxonomy for homegraph.

Every error carries a ``code``. The code is an internal classification; the
vendor-facing error code is produced by :mod:`homegraph.translate`.

- DecodeError: the inbound envelope itself is unusable
- ValidationError: a command or declaration violates the trait model
- TraitError: a trait-scoped failure reported by validation or an executor
- ExecutorError: an opaque failure from the device backend
"""

from enum import Enum
from typing import Any, Optional


class HomegraphError(Exception):
    """Base exception for homegraph errors."""

    def __init__(self, message: str, code: str = "HOMEGRAPH_ERROR"):
        super().__init__(message)
        self.code = code


class DecodeError(HomegraphError):
    """Raised when a request envelope cannot be decoded."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Invalid request at '{path}': {reason}", code="DECODE_ERROR")
        self.path = path
        self.reason = reason


class ValidationError(HomegraphError):
    """Base class for trait model violations."""

    def __init__(self, message: str, code: str = "VALIDATION_ERROR"):
        super().__init__(message, code=code)


class UnsupportedTraitError(ValidationError):
    """Raised when a trait is unknown or not declared by the target device."""

    def __init__(self, trait: str, device_id: Optional[str] = None):
        if device_id:
            message = f"Device does not support trait {trait}"
        else:
            message = f"Unsupported trait: {trait}"
        super().__init__(message, code="UNSUPPORTED_TRAIT")
        self.trait = trait
        self.device_id = device_id


class UnknownCommandError(ValidationError):
    """Raised when a command name is not in the trait catalog."""

    def __init__(self, command: str, trait: Optional[str] = None):
        if trait:
            message = f"Command {command} does not belong to trait {trait}"
        else:
            message = f"Unknown command: {command}"
        super().__init__(message, code="UNKNOWN_COMMAND")
        self.command = command
        self.trait = trait


class InvalidParameterError(ValidationError):
    """
    Raised when a command parameter or attribute fails validation.

    ``kind`` is one of ``missing``, ``type``, ``range`` or ``enum``.
    """

    MISSING = "missing"
    TYPE = "type"
    RANGE = "range"
    ENUM = "enum"

    def __init__(self, field: str, reason: str, kind: str = TYPE):
        super().__init__(f"Invalid parameter '{field}': {reason}", code="INVALID_PARAMETER")
        self.field = field
        self.reason = reason
        self.kind = kind


class DuplicateTraitError(ValidationError):
    """Raised when a device declares the same trait kind twice."""

    def __init__(self, trait: str, device_id: str):
        super().__init__(f"Device {device_id} declares trait {trait} more than once", code="DUPLICATE_TRAIT")
        self.trait = trait
        self.device_id = device_id


class UnknownDeviceTypeError(ValidationError):
    """Raised when a declaration names a device type outside the vendor list."""

    def __init__(self, device_type: str):
        super().__init__(f"Unknown device type: {device_type}", code="UNKNOWN_DEVICE_TYPE")
        self.device_type = device_type


class UnknownDeviceError(ValidationError):
    """Raised when a request targets a device the registry does not know."""

    def __init__(self, device_id: str):
        super().__init__("Device not found", code="UNKNOWN_DEVICE")
        self.device_id = device_id


class TraitError(HomegraphError):
    """
    A trait-scoped failure.

    ``error`` is a member of the trait's error enumeration, so its value is a
    vendor error code (e.g. ``LockUnlockError.ALREADY_LOCKED``).
    """

    def __init__(self, trait: Any, error: Enum, message: Optional[str] = None):
        trait_name = getattr(trait, "short_name", str(trait))
        super().__init__(message or f"{trait_name}: {error.value}", code="TRAIT_ERROR")
        self.trait = trait
        self.error = error

    @property
    def error_code(self) -> str:
        return self.error.value


class ExecutorError(HomegraphError):
    """
    An opaque failure from the command executor.

    ``vendor_code`` lets a backend request a specific vendor error code; codes
    outside the vendor vocabulary are replaced by the generic one.
    """

    def __init__(self, message: str, vendor_code: Optional[str] = None):
        super().__init__(message, code="EXECUTOR_ERROR")
        self.vendor_code = vendor_code
