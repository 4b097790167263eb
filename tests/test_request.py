"""
Tests for request decoding.
"""

import pytest

from homegraph.errors import DecodeError
from homegraph.fulfillment import (
    CommandExecution,
    DeviceTarget,
    DisconnectIntent,
    ExecuteIntent,
    IntentKind,
    QueryIntent,
    SyncIntent,
    decode_request,
)


def execute_envelope():
    return {
        "requestId": "ff36a3cc-ec34-11e6-b1a0-64510650abcf",
        "inputs": [{
            "intent": "action.devices.EXECUTE",
            "payload": {
                "commands": [
                    {
                        "devices": [{"id": "light-1", "customData": {"fooValue": 74}}, {"id": "light-2"}],
                        "execution": [
                            {"command": "action.devices.commands.OnOff", "params": {"on": True}},
                            {"command": "action.devices.commands.BrightnessAbsolute", "params": {"brightness": 60}},
                        ],
                    },
                    {
                        "devices": [{"id": "thermostat-1"}],
                        "execution": [{"command": "action.devices.commands.ThermostatSetMode",
                                       "params": {"thermostatMode": "cool"}}],
                    },
                ],
            },
        }],
    }


class TestIntentKind:
    """Tests for intent tags."""

    def test_parse(self):
        assert IntentKind.parse("action.devices.SYNC") is IntentKind.SYNC
        assert IntentKind.parse("QUERY") is IntentKind.QUERY
        assert IntentKind.parse("action.devices.REBOOT") is None
        assert IntentKind.EXECUTE.short_name == "EXECUTE"


class TestDecodeRequest:
    """Tests for decode_request()."""

    def test_sync(self):
        request = decode_request({"requestId": "r1", "inputs": [{"intent": "action.devices.SYNC"}]})
        assert request.request_id == "r1"
        assert isinstance(request.intent, SyncIntent)

    def test_short_intent_tag(self):
        request = decode_request({"requestId": "r1", "inputs": [{"intent": "DISCONNECT"}]})
        assert isinstance(request.intent, DisconnectIntent)

    def test_query(self):
        request = decode_request({
            "requestId": "r2",
            "inputs": [{"intent": "action.devices.QUERY", "payload": {"devices": [{"id": "a"}, {"id": "b"}]}}],
        })
        assert isinstance(request.intent, QueryIntent)
        assert request.intent.device_ids == ["a", "b"]

    def test_execute_preserves_order(self):
        """Group, device and execution order survive decoding."""
        request = decode_request(execute_envelope())
        intent = request.intent
        assert isinstance(intent, ExecuteIntent)
        assert request.request_id == "ff36a3cc-ec34-11e6-b1a0-64510650abcf"
        assert len(intent.commands) == 2

        first = intent.commands[0]
        assert first.device_ids == ["light-1", "light-2"]
        assert first.devices[0] == DeviceTarget(id="light-1", custom_data={"fooValue": 74})
        assert [e.command for e in first.execution] == [
            "action.devices.commands.OnOff",
            "action.devices.commands.BrightnessAbsolute",
        ]
        assert first.execution[1] == CommandExecution(
            command="action.devices.commands.BrightnessAbsolute", params={"brightness": 60}
        )
        assert intent.device_ids == ["light-1", "light-2", "thermostat-1"]

    def test_params_default_to_empty(self):
        envelope = {
            "requestId": "r3",
            "inputs": [{
                "intent": "EXECUTE",
                "payload": {"commands": [{"devices": [{"id": "a"}], "execution": [{"command": "Locate"}]}]},
            }],
        }
        request = decode_request(envelope)
        assert request.intent.commands[0].execution[0].params == {}

    def test_multiple_inputs_kept(self):
        request = decode_request({
            "requestId": "r4",
            "inputs": [{"intent": "SYNC"}, {"intent": "DISCONNECT"}],
        })
        assert len(request.inputs) == 2
        assert request.intent.kind is IntentKind.SYNC

    def test_to_dict(self):
        request = decode_request(execute_envelope())
        data = request.to_dict()
        assert data["requestId"] == "ff36a3cc-ec34-11e6-b1a0-64510650abcf"
        assert data["inputs"][0]["payload"]["commands"][0]["devices"][0]["customData"] == {"fooValue": 74}


class TestDecodeErrors:
    """Malformed envelopes fail with a field path."""

    def test_no_inputs(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_request({"requestId": "r1", "inputs": []})
        assert exc_info.value.path == "inputs"

    def test_missing_request_id(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_request({"inputs": [{"intent": "SYNC"}]})
        assert exc_info.value.path == "requestId"

    def test_not_an_object(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_request(["not", "an", "envelope"])
        assert exc_info.value.path == "envelope"

    def test_unknown_intent(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_request({"requestId": "r1", "inputs": [{"intent": "action.devices.TELEPORT"}]})
        assert exc_info.value.path == "inputs.0.intent"

    def test_missing_payload(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_request({"requestId": "r1", "inputs": [{"intent": "QUERY"}]})
        assert exc_info.value.path == "inputs.0.payload"

    def test_malformed_payload(self):
        envelope = execute_envelope()
        del envelope["inputs"][0]["payload"]["commands"][1]["devices"]
        with pytest.raises(DecodeError) as exc_info:
            decode_request(envelope)
        assert exc_info.value.path == "inputs.0.payload.commands.1.devices"

    def test_bad_device_id(self):
        envelope = {
            "requestId": "r1",
            "inputs": [{"intent": "QUERY", "payload": {"devices": [{"id": 12}]}}],
        }
        with pytest.raises(DecodeError) as exc_info:
            decode_request(envelope)
        assert exc_info.value.path == "inputs.0.payload.devices.0.id"
