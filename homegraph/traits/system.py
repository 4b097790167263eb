"""
System traits: Locator, NetworkControl, Reboot, Scene, SensorState,
SoftwareUpdate, StatusReport.
"""

from enum import Enum
from typing import Any, Dict

from ..errors import InvalidParameterError, TraitError
from .base import CommandSpec, ParamSpec, TraitKind, TraitSpec, optional
from .registry import register_trait


class NetworkControlError(str, Enum):
    NETWORK_PROFILE_NOT_RECOGNIZED = "networkProfileNotRecognized"
    NETWORK_SPEED_TEST_IN_PROGRESS = "networkSpeedTestInProgress"


def _check_profile(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    profiles = attributes.get("networkProfiles")
    if profiles is not None and params["profile"] not in profiles:
        raise TraitError(
            TraitKind.NETWORK_CONTROL,
            NetworkControlError.NETWORK_PROFILE_NOT_RECOGNIZED,
            f"Unknown network profile {params['profile']}",
        )


def _check_speed_test(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    if params.get("testDownloadSpeed") and attributes.get("supportsNetworkDownloadSpeedTest") is False:
        raise InvalidParameterError(
            "testDownloadSpeed", "device cannot test download speed", InvalidParameterError.ENUM
        )
    if params.get("testUploadSpeed") and attributes.get("supportsNetworkUploadSpeedTest") is False:
        raise InvalidParameterError("testUploadSpeed", "device cannot test upload speed", InvalidParameterError.ENUM)


def _check_reversible(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    if params.get("deactivate") and not attributes.get("sceneReversible", False):
        raise InvalidParameterError("deactivate", "scene is not reversible", InvalidParameterError.ENUM)


_SPEED_TEST = ParamSpec(
    "result",
    "object",
    properties=[
        optional("downloadSpeedMbps", "number"),
        optional("uploadSpeedMbps", "number"),
        optional("unixTimestampSec", "integer"),
        optional("status", "string", enum=["SUCCESS", "FAILURE"]),
    ],
)


LOCATOR = register_trait(TraitSpec(
    kind=TraitKind.LOCATOR,
    description="Make the device findable",
    states=[optional("generatedAlert", "boolean")],
    commands=[
        CommandSpec(
            "Locate",
            "Ring or flash the device",
            parameters=[
                optional("silence", "boolean", default=False),
                optional("lang", "string", default="en"),
            ],
            mutates=("generatedAlert",),
        ),
    ],
))


NETWORK_CONTROL = register_trait(TraitSpec(
    kind=TraitKind.NETWORK_CONTROL,
    description="Router and guest network control",
    attributes=[
        optional("supportsEnablingGuestNetwork", "boolean", default=False),
        optional("supportsDisablingGuestNetwork", "boolean", default=False),
        optional("supportsGettingGuestNetworkPassword", "boolean", default=False),
        optional("networkProfiles", "array", items=ParamSpec("profile", "string")),
        optional("supportsEnablingNetworkProfile", "boolean", default=False),
        optional("supportsDisablingNetworkProfile", "boolean", default=False),
        optional("supportsNetworkDownloadSpeedTest", "boolean", default=False),
        optional("supportsNetworkUploadSpeedTest", "boolean", default=False),
    ],
    states=[
        optional("networkEnabled", "boolean"),
        optional("networkSettings", "object", properties=[ParamSpec("ssid", "string")]),
        optional("guestNetworkEnabled", "boolean"),
        optional("guestNetworkSettings", "object", properties=[ParamSpec("ssid", "string")]),
        optional("numConnectedDevices", "integer", min_value=0),
        optional("networkUsageMB", "number"),
        optional("networkUsageLimitMB", "number"),
        optional("networkUsageUnlimited", "boolean"),
        ParamSpec("lastNetworkDownloadSpeedTest", "object", required=False, properties=_SPEED_TEST.properties),
        ParamSpec("lastNetworkUploadSpeedTest", "object", required=False, properties=_SPEED_TEST.properties),
        optional("networkSpeedTestInProgress", "boolean"),
        optional("networkProfilesState", "object", values=ParamSpec("profile", "object")),
        optional("guestNetworkPassword", "string"),
    ],
    commands=[
        CommandSpec(
            "EnableDisableGuestNetwork",
            "Turn the guest network on or off",
            parameters=[ParamSpec("enable", "boolean")],
            mutates=("guestNetworkEnabled",),
            effect=lambda p: {"guestNetworkEnabled": p["enable"]},
        ),
        CommandSpec(
            "EnableDisableNetworkProfile",
            "Turn a network profile on or off",
            parameters=[ParamSpec("profile", "string"), ParamSpec("enable", "boolean")],
            mutates=("networkProfilesState",),
            effect=lambda p: {"networkProfilesState": {p["profile"]: {"enabled": p["enable"]}}},
            constraints=[_check_profile],
            errors=(NetworkControlError.NETWORK_PROFILE_NOT_RECOGNIZED,),
        ),
        CommandSpec(
            "GetGuestNetworkPassword",
            "Return the guest network password",
            mutates=("guestNetworkPassword",),
        ),
        CommandSpec(
            "TestNetworkSpeed",
            "Run a speed test",
            parameters=[
                ParamSpec("testDownloadSpeed", "boolean"),
                ParamSpec("testUploadSpeed", "boolean"),
                optional("followUpToken", "string"),
            ],
            mutates=("networkSpeedTestInProgress",),
            effect=lambda p: {"networkSpeedTestInProgress": True},
            constraints=[_check_speed_test],
            errors=(NetworkControlError.NETWORK_SPEED_TEST_IN_PROGRESS,),
        ),
    ],
    errors=NetworkControlError,
))


REBOOT = register_trait(TraitSpec(
    kind=TraitKind.REBOOT,
    description="Restart the device",
    commands=[CommandSpec("Reboot", "Reboot the device")],
))


SCENE = register_trait(TraitSpec(
    kind=TraitKind.SCENE,
    description="Activatable scenes",
    attributes=[optional("sceneReversible", "boolean", default=False)],
    commands=[
        CommandSpec(
            "ActivateScene",
            "Activate or deactivate the scene",
            parameters=[optional("deactivate", "boolean", default=False)],
            constraints=[_check_reversible],
        ),
    ],
))


SENSOR_STATE = register_trait(TraitSpec(
    kind=TraitKind.SENSOR_STATE,
    description="Descriptive and numeric sensor readings",
    attributes=[
        optional(
            "sensorStatesSupported",
            "array",
            items=ParamSpec(
                "sensor",
                "object",
                properties=[
                    ParamSpec("name", "string"),
                    optional("descriptiveCapabilities", "object"),
                    optional("numericCapabilities", "object"),
                ],
            ),
        ),
    ],
    states=[
        optional(
            "currentSensorStateData",
            "array",
            items=ParamSpec(
                "reading",
                "object",
                properties=[
                    ParamSpec("name", "string"),
                    optional("currentSensorState", "string"),
                    optional("rawValue", "number"),
                ],
            ),
        ),
    ],
))


SOFTWARE_UPDATE = register_trait(TraitSpec(
    kind=TraitKind.SOFTWARE_UPDATE,
    description="Firmware update",
    states=[optional("lastSoftwareUpdateUnixTimestampSec", "integer")],
    commands=[
        CommandSpec(
            "SoftwareUpdate",
            "Install available updates",
            mutates=("lastSoftwareUpdateUnixTimestampSec",),
        ),
    ],
))


STATUS_REPORT = register_trait(TraitSpec(
    kind=TraitKind.STATUS_REPORT,
    description="Current device and sensor status",
    states=[
        optional(
            "currentStatusReport",
            "array",
            items=ParamSpec(
                "status",
                "object",
                properties=[
                    ParamSpec("blocking", "boolean"),
                    ParamSpec("deviceTarget", "string"),
                    ParamSpec("priority", "integer", min_value=0),
                    optional("statusCode", "string"),
                ],
            ),
        ),
    ],
))
