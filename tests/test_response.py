"""
Tests for response encoding.
"""

import pytest

from homegraph.devices import declare
from homegraph.fulfillment import (
    CommandResult,
    DisconnectResponse,
    ExecuteResponse,
    ExecutionResult,
    ExecutionStatus,
    IntentKind,
    QueryResponse,
    SyncResponse,
    decode_response,
    encode_response,
)


class TestExecutionResult:
    """Tests for per-device results."""

    def test_success_payload(self):
        result = ExecutionResult.success({"on": True})
        assert result.to_dict() == {"status": "SUCCESS", "states": {"on": True}}
        assert not result.failed

    def test_error_payload(self):
        result = ExecutionResult.error("valueOutOfRange", "brightness above 100")
        assert result.to_dict() == {
            "status": "ERROR",
            "errorCode": "valueOutOfRange",
            "debugString": "brightness above 100",
        }
        assert result.failed

    def test_offline(self):
        assert ExecutionResult.offline().to_dict() == {"status": "OFFLINE"}
        assert ExecutionResult.offline().failed

    def test_grouping_key_ignores_key_order(self):
        a = ExecutionResult.success({"on": True, "brightness": 10})
        b = ExecutionResult.success({"brightness": 10, "on": True})
        assert a.grouping_key() == b.grouping_key()

    def test_grouping_key_distinguishes_payloads(self):
        assert ExecutionResult.success({"on": True}).grouping_key() != \
            ExecutionResult.pending({"on": True}).grouping_key()
        assert ExecutionResult.error("hardError", "a").grouping_key() != \
            ExecutionResult.error("hardError", "b").grouping_key()

    def test_from_dict(self):
        data = {"status": "PENDING", "states": {"on": True}}
        assert ExecutionResult.from_dict(data) == ExecutionResult(ExecutionStatus.PENDING, {"on": True})


class TestEncodeResponse:
    """Tests for encode_response()."""

    def test_sync(self, light):
        response = SyncResponse(request_id="r1", agent_user_id="user-123", devices=[declare(light)])
        data = encode_response(response)
        assert data["requestId"] == "r1"
        assert data["payload"]["agentUserId"] == "user-123"
        assert data["payload"]["devices"][0]["id"] == "light-1"
        assert "errorCode" not in data["payload"]

    def test_sync_error(self):
        response = SyncResponse(request_id="r1", agent_user_id="u", error_code="hardError")
        assert encode_response(response)["payload"] == {"agentUserId": "u", "devices": [], "errorCode": "hardError"}

    def test_query(self):
        response = QueryResponse(request_id="r2", devices={"a": {"on": True, "online": True}, "b": {"online": False}})
        assert encode_response(response) == {
            "requestId": "r2",
            "payload": {"devices": {"a": {"on": True, "online": True}, "b": {"online": False}}},
        }

    def test_execute(self):
        response = ExecuteResponse(request_id="r3", commands=[
            CommandResult(ids=["a", "b"], result=ExecutionResult.success({"on": True})),
            CommandResult(ids=["c"], result=ExecutionResult.offline()),
        ])
        assert encode_response(response)["payload"] == {
            "commands": [
                {"ids": ["a", "b"], "status": "SUCCESS", "states": {"on": True}},
                {"ids": ["c"], "status": "OFFLINE"},
            ],
        }
        assert response.result_for("b").status is ExecutionStatus.SUCCESS
        assert response.result_for("zzz") is None

    def test_disconnect(self):
        assert encode_response(DisconnectResponse(request_id="r4")) == {"requestId": "r4", "payload": {}}


class TestDecodeResponse:
    """Encoded responses read back to equal values."""

    def test_sync_round_trip(self, light):
        response = SyncResponse(request_id="r1", agent_user_id="user-123", devices=[declare(light)])
        decoded = decode_response(encode_response(response), IntentKind.SYNC)
        assert decoded.request_id == "r1"
        assert decoded.agent_user_id == "user-123"
        assert [d.to_dict() for d in decoded.devices] == [d.to_dict() for d in response.devices]

    def test_execute_round_trip(self):
        response = ExecuteResponse(request_id="r3", commands=[
            CommandResult(ids=["a"], result=ExecutionResult.error("deviceNotFound")),
        ])
        decoded = decode_response(encode_response(response), "EXECUTE")
        assert decoded == response

    def test_unknown_intent(self):
        with pytest.raises(ValueError):
            decode_response({"requestId": "r", "payload": {}}, "REBOOT")
