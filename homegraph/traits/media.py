"""
Media traits: AppSelector, CameraStream, Channel, InputSelector, MediaState,
TransportControl, Volume.
"""

from enum import Enum
from typing import Any, Dict

from ..errors import InvalidParameterError, TraitError
from .base import CommandSpec, ParamSpec, TraitKind, TraitSpec, check_range, optional
from .registry import register_trait

STREAM_PROTOCOLS = ["hls", "dash", "smooth_stream", "progressive_mp4", "webrtc"]
ACTIVITY_STATES = ["INACTIVE", "STANDBY", "ACTIVE"]
PLAYBACK_STATES = ["PAUSED", "PLAYING", "FAST_FORWARDING", "REWINDING", "BUFFERING", "STOPPED"]
TRANSPORT_COMMANDS = [
    "CAPTION_CONTROL", "NEXT", "PAUSE", "PREVIOUS", "RESUME",
    "SEEK_RELATIVE", "SEEK_TO_POSITION", "SET_REPEAT", "SHUFFLE", "STOP",
]


class AppSelectorError(str, Enum):
    NO_AVAILABLE_APP = "noAvailableApp"


class ChannelError(str, Enum):
    NO_AVAILABLE_CHANNEL = "noAvailableChannel"


class InputSelectorError(str, Enum):
    UNSUPPORTED_INPUT = "unsupportedInput"


class VolumeError(str, Enum):
    VOLUME_ALREADY_MAX = "volumeAlreadyMax"
    VOLUME_ALREADY_MIN = "volumeAlreadyMin"


def _names_list(name: str) -> ParamSpec:
    """An array of {key, names} entries, as used by apps, channels and inputs."""
    return optional(
        name,
        "array",
        items=ParamSpec(
            "entry",
            "object",
            properties=[ParamSpec("key", "string"), optional("names", "array"), optional("number", "string")],
        ),
    )


def _check_input(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    inputs = attributes.get("availableInputs")
    if inputs and params["newInput"] not in [i.get("key") for i in inputs]:
        raise TraitError(
            TraitKind.INPUT_SELECTOR,
            InputSelectorError.UNSUPPORTED_INPUT,
            f"Input {params['newInput']} is not available",
        )


def _check_volume_level(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    check_range("volumeLevel", params["volumeLevel"], 0, attributes.get("volumeMaxLevel"))


def _check_mute(params: Dict[str, Any], attributes: Dict[str, Any]) -> None:
    if attributes.get("volumeCanMuteAndUnmute") is False:
        raise InvalidParameterError("mute", "device cannot mute and unmute", InvalidParameterError.ENUM)


_APP_TARGET = [optional("newApplication", "string"), optional("newApplicationName", "string")]

APP_SELECTOR = register_trait(TraitSpec(
    kind=TraitKind.APP_SELECTOR,
    description="Install, search for and open applications",
    attributes=[_names_list("availableApplications")],
    states=[optional("currentApplication", "string")],
    commands=[
        CommandSpec(
            "appInstall",
            "Install an application",
            parameters=list(_APP_TARGET),
            one_of=("newApplication", "newApplicationName"),
            errors=(AppSelectorError.NO_AVAILABLE_APP,),
        ),
        CommandSpec(
            "appSearch",
            "Search for an application",
            parameters=list(_APP_TARGET),
            one_of=("newApplication", "newApplicationName"),
        ),
        CommandSpec(
            "appSelect",
            "Open an application",
            parameters=list(_APP_TARGET),
            one_of=("newApplication", "newApplicationName"),
            mutates=("currentApplication",),
            effect=lambda p: {"currentApplication": p.get("newApplication")},
            errors=(AppSelectorError.NO_AVAILABLE_APP,),
        ),
    ],
    errors=AppSelectorError,
))


CAMERA_STREAM = register_trait(TraitSpec(
    kind=TraitKind.CAMERA_STREAM,
    description="Camera feed streaming to smart displays",
    attributes=[
        optional(
            "cameraStreamSupportedProtocols",
            "array",
            items=ParamSpec("protocol", "string", enum=STREAM_PROTOCOLS),
        ),
        optional("cameraStreamNeedAuthToken", "boolean", default=False),
    ],
    states=[
        optional("cameraStreamAuthToken", "string"),
        optional("cameraStreamProtocol", "string", enum=STREAM_PROTOCOLS),
        optional("cameraStreamAccessUrl", "string"),
        optional("cameraStreamReceiverAppId", "string"),
        optional("cameraStreamSignalingUrl", "string"),
        optional("cameraStreamOffer", "string"),
        optional("cameraStreamIceServers", "string"),
    ],
    commands=[
        CommandSpec(
            "GetCameraStream",
            "Return a stream descriptor for the camera",
            parameters=[
                ParamSpec("StreamToChromecast", "boolean"),
                ParamSpec(
                    "SupportedStreamProtocols",
                    "array",
                    items=ParamSpec("protocol", "string", enum=STREAM_PROTOCOLS),
                ),
            ],
            mutates=(
                "cameraStreamAuthToken",
                "cameraStreamProtocol",
                "cameraStreamAccessUrl",
                "cameraStreamReceiverAppId",
                "cameraStreamSignalingUrl",
                "cameraStreamOffer",
                "cameraStreamIceServers",
            ),
        ),
    ],
))


CHANNEL = register_trait(TraitSpec(
    kind=TraitKind.CHANNEL,
    description="Media channel selection",
    attributes=[
        _names_list("availableChannels"),
        optional("commandOnlyChannels", "boolean", default=False),
    ],
    commands=[
        CommandSpec(
            "selectChannel",
            "Tune to a channel by code, name or number",
            parameters=[
                optional("channelCode", "string"),
                optional("channelName", "string"),
                optional("channelNumber", "string"),
            ],
            one_of=("channelCode", "channelNumber"),
            errors=(ChannelError.NO_AVAILABLE_CHANNEL,),
        ),
        CommandSpec(
            "relativeChannel",
            "Move up or down the channel list",
            parameters=[ParamSpec("relativeChannelChange", "integer")],
        ),
        CommandSpec("returnChannel", "Return to the last channel"),
    ],
    errors=ChannelError,
))


INPUT_SELECTOR = register_trait(TraitSpec(
    kind=TraitKind.INPUT_SELECTOR,
    description="Media input selection",
    attributes=[
        _names_list("availableInputs"),
        optional("commandOnlyInputSelector", "boolean", default=False),
        optional("orderedInputs", "boolean", default=False),
    ],
    states=[optional("currentInput", "string")],
    commands=[
        CommandSpec(
            "SetInput",
            "Switch to an input",
            parameters=[ParamSpec("newInput", "string")],
            mutates=("currentInput",),
            effect=lambda p: {"currentInput": p["newInput"]},
            constraints=[_check_input],
            errors=(InputSelectorError.UNSUPPORTED_INPUT,),
        ),
        CommandSpec("NextInput", "Switch to the next input", mutates=("currentInput",)),
        CommandSpec("PreviousInput", "Switch to the previous input", mutates=("currentInput",)),
    ],
    errors=InputSelectorError,
))


MEDIA_STATE = register_trait(TraitSpec(
    kind=TraitKind.MEDIA_STATE,
    description="Activity and playback state reporting",
    attributes=[
        optional("supportActivityState", "boolean", default=False),
        optional("supportPlaybackState", "boolean", default=False),
    ],
    states=[
        optional("activityState", "string", enum=ACTIVITY_STATES),
        optional("playbackState", "string", enum=PLAYBACK_STATES),
    ],
))


def _media(name: str, description: str, *parameters: ParamSpec, **kwargs) -> CommandSpec:
    return CommandSpec(name, description, parameters=list(parameters), **kwargs)


TRANSPORT_CONTROL = register_trait(TraitSpec(
    kind=TraitKind.TRANSPORT_CONTROL,
    description="Media playback control",
    attributes=[
        optional(
            "transportControlSupportedCommands",
            "array",
            items=ParamSpec("command", "string", enum=TRANSPORT_COMMANDS),
        ),
    ],
    commands=[
        _media("mediaStop", "Stop playback"),
        _media("mediaNext", "Skip to the next item"),
        _media("mediaPrevious", "Go to the previous item"),
        _media("mediaPause", "Pause playback"),
        _media("mediaResume", "Resume playback"),
        _media(
            "mediaSeekRelative",
            "Seek relative to the current position",
            ParamSpec("relativePositionMs", "integer"),
        ),
        _media(
            "mediaSeekToPosition",
            "Seek to an absolute position",
            ParamSpec("absPositionMs", "integer", min_value=0),
        ),
        _media(
            "mediaRepeatMode",
            "Set repeat mode",
            ParamSpec("isOn", "boolean"),
            optional("isSingle", "boolean", default=False),
        ),
        _media("mediaShuffle", "Shuffle the queue"),
        _media(
            "mediaClosedCaptioningOn",
            "Turn captions on",
            optional("closedCaptioningLanguage", "string"),
            optional("userQueryLanguage", "string"),
        ),
        _media("mediaClosedCaptioningOff", "Turn captions off"),
    ],
))


VOLUME = register_trait(TraitSpec(
    kind=TraitKind.VOLUME,
    description="Volume level and mute",
    attributes=[
        ParamSpec("volumeMaxLevel", "integer", min_value=0, required=False, default=100),
        optional("volumeCanMuteAndUnmute", "boolean"),
        optional("volumeDefaultPercentage", "integer", min_value=0, max_value=100),
        optional("levelStepSize", "integer", min_value=1),
        optional("commandOnlyVolume", "boolean", default=False),
    ],
    states=[
        optional("currentVolume", "integer", min_value=0),
        optional("isMuted", "boolean"),
    ],
    commands=[
        CommandSpec(
            "mute",
            "Mute or unmute",
            parameters=[ParamSpec("mute", "boolean")],
            mutates=("isMuted",),
            effect=lambda p: {"isMuted": p["mute"]},
            constraints=[_check_mute],
        ),
        CommandSpec(
            "setVolume",
            "Set an absolute volume level",
            parameters=[ParamSpec("volumeLevel", "integer", min_value=0)],
            mutates=("currentVolume",),
            effect=lambda p: {"currentVolume": p["volumeLevel"]},
            constraints=[_check_volume_level],
        ),
        CommandSpec(
            "volumeRelative",
            "Change the volume by a number of steps",
            parameters=[ParamSpec("relativeSteps", "integer")],
            mutates=("currentVolume",),
            errors=(VolumeError.VOLUME_ALREADY_MAX, VolumeError.VOLUME_ALREADY_MIN),
        ),
    ],
    errors=VolumeError,
))
