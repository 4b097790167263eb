"""
Intent engine for homegraph.

Turns a decoded fulfillment request into a response:
- SYNC lists the registry
- QUERY asks the executor for current state
- EXECUTE validates each command, dispatches it and aggregates the results
- DISCONNECT acknowledges and notifies the host

The engine holds no state across requests other than counters.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Union, runtime_checkable

from .config import Config, get_config
from .devices import Device, merge_states, validate_command
from .errors import ExecutorError, UnknownDeviceError
from .fulfillment import (
    CommandExecution,
    CommandResult,
    DisconnectResponse,
    ExecuteIntent,
    ExecuteResponse,
    ExecutionResult,
    ExecutionStatus,
    IntentKind,
    QueryIntent,
    QueryResponse,
    Request,
    Response,
    SyncResponse,
    decode_request,
    encode_response,
)
from .registry import DeviceSource
from .traits import TraitKind
from .translate import GENERIC_ERROR_CODE, is_vendor_code, translate_error

logger = logging.getLogger(__name__)

# What an executor may hand back from execute().
ExecutorOutcome = Union[None, Dict[str, Any], ExecutionResult]


@runtime_checkable
class CommandExecutor(Protocol):
    """
    The device-control backend.

    Both methods may be plain functions or coroutines. ``execute`` receives
    parameters that already passed validation. ``query`` returns the current
    state of a device, or None when it cannot be reached.
    """

    def execute(
        self,
        device_id: str,
        trait: TraitKind,
        command: str,
        params: Dict[str, Any],
    ) -> ExecutorOutcome:
        ...

    def query(self, device_id: str) -> Optional[Dict[str, Any]]:
        ...


async def _call(fn: Callable, *args: Any) -> Any:
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def _coerce_outcome(
    outcome: ExecutorOutcome,
    derived: Dict[str, Any],
    include_debug: bool = True,
) -> ExecutionResult:
    """
    Normalize an executor return value into an ExecutionResult.

    An ERROR carrying a code outside the vendor vocabulary is reported with
    the generic code; the backend's text moves to the debug string.
    """
    if outcome is None:
        return ExecutionResult.success(derived)
    if isinstance(outcome, ExecutionResult):
        if outcome.status is ExecutionStatus.SUCCESS and not outcome.states:
            return ExecutionResult.success(derived)
        if outcome.status is ExecutionStatus.ERROR and not is_vendor_code(outcome.error_code):
            debug = "; ".join(str(part) for part in (outcome.error_code, outcome.debug_string) if part)
            return ExecutionResult.error(GENERIC_ERROR_CODE, debug if include_debug and debug else None)
        return outcome
    if isinstance(outcome, dict):
        return ExecutionResult.success(outcome)
    raise ExecutorError(f"Executor returned unsupported value of type {type(outcome).__name__}")


def aggregate_results(results: Dict[str, ExecutionResult]) -> List[CommandResult]:
    """
    Group devices with identical results into one entry each.

    ``results`` maps device id to result in targeting order. Groups are
    listed in first-occurrence order and ids keep their order inside a group.
    """
    groups: Dict[str, CommandResult] = {}
    for device_id, result in results.items():
        key = result.grouping_key()
        if key in groups:
            groups[key].ids.append(device_id)
        else:
            groups[key] = CommandResult(ids=[device_id], result=result)
    return list(groups.values())


class IntentEngine:
    """
    Fulfills SYNC, QUERY, EXECUTE and DISCONNECT requests.

    Usage:
        engine = IntentEngine(registry, executor, agent_user_id="user-1")

        response = await engine.handle_envelope(body)
    """

    def __init__(
        self,
        registry: DeviceSource,
        executor: CommandExecutor,
        agent_user_id: Optional[str] = None,
        config: Optional[Config] = None,
        on_disconnect: Optional[Callable[[str], Any]] = None,
    ):
        self.registry = registry
        self.executor = executor
        self.config = config or get_config()
        self.agent_user_id = (
            agent_user_id
            or self.config.agent_user_id
            or getattr(registry, "agent_user_id", None)
            or ""
        )
        self.on_disconnect = on_disconnect

        # Metrics
        self._requests = 0
        self._executions = 0
        self._failures = 0
        self._rejections = 0

    async def handle_envelope(self, envelope: Any) -> dict:
        """Decode, fulfill and encode. DecodeError propagates to the caller."""
        request = decode_request(envelope)
        response = await self.handle(request)
        return encode_response(response)

    async def handle(self, request: Request) -> Response:
        """Fulfill the first intent of a decoded request."""
        self._requests += 1
        if len(request.inputs) > 1:
            logger.warning(
                f"Request {request.request_id} has {len(request.inputs)} inputs; only the first is handled"
            )

        intent = request.intent
        logger.debug(f"Handling {intent.kind.short_name} request {request.request_id}")

        if intent.kind is IntentKind.SYNC:
            return await self.sync(request.request_id)
        if intent.kind is IntentKind.QUERY:
            return await self.query(request.request_id, intent)
        if intent.kind is IntentKind.EXECUTE:
            return await self.execute(request.request_id, intent)
        return await self.disconnect(request.request_id)

    # ============ SYNC ============

    async def sync(self, request_id: str) -> SyncResponse:
        """List every registered device."""
        try:
            devices = list(self.registry.list_devices())
        except Exception as e:
            logger.error(f"Device listing failed for request {request_id}: {e}")
            code, debug = translate_error(e, self.config.include_debug_strings)
            return SyncResponse(
                request_id=request_id,
                agent_user_id=self.agent_user_id,
                error_code=code,
                debug_string=debug,
            )

        logger.info(f"SYNC {request_id}: {len(devices)} devices")
        return SyncResponse(request_id=request_id, agent_user_id=self.agent_user_id, devices=devices)

    # ============ QUERY ============

    async def query(self, request_id: str, intent: QueryIntent) -> QueryResponse:
        """Report the state of every requested device. Never fails."""
        states: Dict[str, Dict[str, Any]] = {}
        for device_id in intent.device_ids:
            if device_id not in states:
                states[device_id] = await self._query_device(device_id)

        online = sum(1 for s in states.values() if s.get("online"))
        logger.info(f"QUERY {request_id}: {online}/{len(states)} devices online")
        return QueryResponse(request_id=request_id, devices=states)

    async def _query_device(self, device_id: str) -> Dict[str, Any]:
        device = self.registry.get_device(device_id)
        if device is None:
            logger.debug(f"Query for unknown device {device_id}")
            return {"online": False}
        if not device.online:
            return {"online": False}

        query = getattr(self.executor, "query", None)
        if query is None:
            return {**device.state, "online": True, "status": ExecutionStatus.SUCCESS.value}

        try:
            current = await _call(query, device_id)
            if current is None:
                return {"online": False}
            if not isinstance(current, dict):
                raise ExecutorError(f"Query returned unsupported value of type {type(current).__name__}")
            current = merge_states(device.state, current)
        except Exception as e:
            logger.error(f"State query failed for {device_id}: {e}")
            code, _ = translate_error(e, include_debug=False)
            return {"online": False, "status": ExecutionStatus.ERROR.value, "errorCode": code}

        return {**current, "online": True, "status": ExecutionStatus.SUCCESS.value}

    # ============ EXECUTE ============

    async def execute(self, request_id: str, intent: ExecuteIntent) -> ExecuteResponse:
        """Run every command group and aggregate the per-device outcomes."""
        # device id -> that device's executions, one list per targeting group
        plan: Dict[str, List[List[CommandExecution]]] = {}
        for group in intent.commands:
            for device_id in group.device_ids:
                plan.setdefault(device_id, []).append(list(group.execution))

        if self.config.parallel_execution:
            outcomes = await asyncio.gather(*[
                self._execute_device(device_id, groups)
                for device_id, groups in plan.items()
            ])
        else:
            outcomes = []
            for device_id, groups in plan.items():
                outcomes.append(await self._execute_device(device_id, groups))

        results = dict(zip(plan.keys(), outcomes))
        commands = aggregate_results(results)

        failed = sum(1 for r in results.values() if r.failed)
        logger.info(f"EXECUTE {request_id}: {len(results)} devices, {failed} failed, {len(commands)} groups")
        return ExecuteResponse(request_id=request_id, commands=commands)

    async def _execute_device(self, device_id: str, groups: List[List[CommandExecution]]) -> ExecutionResult:
        """
        Apply every group targeting a device and combine the outcomes.

        Groups run in request order and independently of each other. The
        device reports the first group failure, if any; otherwise PENDING
        when any command is pending, else SUCCESS with the accumulated state.
        """
        device: Optional[Device] = self.registry.get_device(device_id)
        if device is None:
            self._failures += 1
            return self._error_result(UnknownDeviceError(device_id))
        if not device.online:
            logger.debug(f"Device {device_id} is offline")
            return ExecutionResult.offline()

        states: Dict[str, Any] = {}
        pending = False
        failure: Optional[ExecutionResult] = None
        for executions in groups:
            result = await self._execute_group(device, executions)
            if result.failed:
                failure = failure or result
                continue
            pending = pending or result.status is ExecutionStatus.PENDING
            states = merge_states(states, result.states)

        if failure is not None:
            return failure
        states["online"] = True
        if pending:
            return ExecutionResult.pending(states)
        return ExecutionResult.success(states)

    async def _execute_group(self, device: Device, executions: List[CommandExecution]) -> ExecutionResult:
        """Apply one group's commands in order, stopping at the first failure."""
        states: Dict[str, Any] = {}
        pending = False
        for execution in executions:
            validation = validate_command(device, None, execution.command, execution.params)
            if not validation.valid:
                self._rejections += 1
                logger.warning(f"Rejected {execution.command} for {device.id}: {validation.error}")
                return self._error_result(validation.error)

            command = validation.command
            self._executions += 1
            try:
                outcome = await _call(
                    self.executor.execute,
                    device.id,
                    validation.trait.kind,
                    command.name,
                    validation.params,
                )
                result = _coerce_outcome(
                    outcome,
                    command.derive_state(validation.params),
                    self.config.include_debug_strings,
                )
            except Exception as e:
                self._failures += 1
                logger.error(f"Executor failed for {device.id} {command.short_name}: {e}")
                return self._error_result(e)

            if result.failed:
                self._failures += 1
                return result
            pending = pending or result.status is ExecutionStatus.PENDING
            states = merge_states(states, result.states)

        if pending:
            return ExecutionResult.pending(states)
        return ExecutionResult.success(states)

    def _error_result(self, error: BaseException) -> ExecutionResult:
        code, debug = translate_error(error, self.config.include_debug_strings)
        return ExecutionResult.error(code, debug)

    # ============ DISCONNECT ============

    async def disconnect(self, request_id: str) -> DisconnectResponse:
        """Acknowledge an unlink and notify the host hook, if any."""
        if self.on_disconnect is not None:
            try:
                await _call(self.on_disconnect, request_id)
            except Exception as e:
                logger.error(f"Disconnect hook failed for request {request_id}: {e}")
        logger.info(f"DISCONNECT {request_id}")
        return DisconnectResponse(request_id=request_id)

    def stats(self) -> dict:
        """Get engine statistics."""
        return {
            "requests": self._requests,
            "executions": self._executions,
            "failures": self._failures,
            "rejections": self._rejections,
            "failure_rate": self._failures / self._executions if self._executions > 0 else 0,
        }
