"""
Report-state payloads.

The core only prepares the body of a state report; sending it to the
vendor's home graph service is left to the host.
"""

import logging
import uuid
from typing import Any, Dict, Iterable, Mapping, Optional

from ..devices import Device

logger = logging.getLogger(__name__)


def build_report_state(
    agent_user_id: str,
    states: Mapping[str, Mapping[str, Any]],
    request_id: Optional[str] = None,
) -> dict:
    """Build a report-state body from a device id -> state mapping."""
    return {
        "requestId": request_id or str(uuid.uuid4()),
        "agentUserId": agent_user_id,
        "payload": {
            "devices": {
                "states": {device_id: dict(state) for device_id, state in states.items()},
            },
        },
    }


def report_state_for(
    devices: Iterable[Device],
    agent_user_id: str,
    request_id: Optional[str] = None,
) -> dict:
    """
    Build a report-state body for device snapshots.

    Only devices with ``will_report_state`` set are included, and only the
    state fields their traits define.
    """
    states: Dict[str, Dict[str, Any]] = {}
    for device in devices:
        if not device.will_report_state:
            continue
        states[device.id] = {**device.reportable_state(), "online": device.online}

    logger.debug(f"Prepared state report for {len(states)} devices")
    return build_report_state(agent_user_id, states, request_id=request_id)
