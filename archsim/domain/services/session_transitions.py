"""
Session Transitions

Pure transition functions of the simulation session state machine.

    idle ──set_mode──► flow ──start_flow──► flow(running | paused@0 when stepping)
      ▲                 failure ──start_failure──► failure(running)
      │                 chaos ──begin_chaos──► chaos(auto-running, round N)
      └──── stop / reset (from any state)

Every function takes a SessionState and returns a new one. Functions are
total: when a transition does not apply to the given state, the state is
returned unchanged. Callers detect that with an identity check.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Iterable, Optional

from archsim.domain.models.enums import SimulationMode
from archsim.domain.models.simulation import (
    BlastRadius,
    ChaosConfig,
    ChaosEvent,
    ChaosSession,
    FailureSession,
    FlowSession,
    FlowTrace,
    PartitionResult,
    SessionState,
)


_EMPTY_PAYLOADS = {
    SimulationMode.IDLE: None,
    SimulationMode.FLOW: FlowSession(),
    SimulationMode.FAILURE: FailureSession(),
    SimulationMode.CHAOS: ChaosSession(),
}


def initial_state(config: Optional[ChaosConfig] = None) -> SessionState:
    return SessionState(chaos_config=config or ChaosConfig())


# =============================================================================
# Mode and lifecycle
# =============================================================================

def set_mode(state: SessionState, mode: SimulationMode) -> SessionState:
    """Switch mode, dropping every selection and result of the previous one."""
    return SessionState(
        mode=mode,
        running=False,
        payload=_EMPTY_PAYLOADS[mode],
        chaos_config=state.chaos_config,
        token=state.token + 1,
    )


def stop(state: SessionState) -> SessionState:
    """Return to idle, keeping the chaos configuration."""
    return set_mode(state, SimulationMode.IDLE)


def reset(state: SessionState, config: Optional[ChaosConfig] = None) -> SessionState:
    """Return to idle with a fresh chaos configuration."""
    return SessionState(chaos_config=config or ChaosConfig(), token=state.token + 1)


def pause(state: SessionState) -> SessionState:
    if not state.running:
        return state
    return replace(state, running=False)


def resume(state: SessionState) -> SessionState:
    if state.running or not has_result(state):
        return state
    return replace(state, running=True)


def has_result(state: SessionState) -> bool:
    """Whether the session holds a computed trace, blast radius or chaos run."""
    if state.flow:
        return state.flow.trace is not None
    if state.failure:
        return state.failure.blast_radius is not None
    if state.chaos:
        return state.chaos.auto_running or state.chaos.round > 0
    return False


# =============================================================================
# Flow
# =============================================================================

def set_stepping_mode(state: SessionState, enabled: bool) -> SessionState:
    if not state.flow or state.flow.stepping_mode == enabled:
        return state
    return replace(state, payload=replace(state.flow, stepping_mode=enabled))


def set_round_trip(state: SessionState, enabled: bool) -> SessionState:
    if not state.flow or state.flow.round_trip == enabled:
        return state
    return replace(state, payload=replace(state.flow, round_trip=enabled))


def start_flow(state: SessionState, source_node_id: str, trace: FlowTrace) -> SessionState:
    if not state.flow:
        return state
    flow = replace(state.flow, source_node_id=source_node_id, trace=trace, cursor=0)
    return replace(state, payload=flow, running=not flow.stepping_mode)


def move_cursor(state: SessionState, delta: int) -> SessionState:
    """Move the stepping cursor, clamped to [0, level_count - 1]."""
    flow = state.flow
    if not flow or not flow.stepping_mode or flow.trace is None or flow.max_cursor < 0:
        return state
    cursor = min(max(flow.cursor + delta, 0), flow.max_cursor)
    if cursor == flow.cursor:
        return state
    return replace(state, payload=replace(flow, cursor=cursor))


# =============================================================================
# Failure
# =============================================================================

def toggle_failed_node(state: SessionState, node_id: str) -> SessionState:
    if not state.failure:
        return state
    failed = list(state.failure.failed_node_ids)
    if node_id in failed:
        failed.remove(node_id)
    else:
        failed.append(node_id)
    return replace(state, payload=replace(state.failure, failed_node_ids=tuple(failed)))


def start_failure(state: SessionState, blast_radius: BlastRadius) -> SessionState:
    if not state.failure:
        return state
    failure = FailureSession(
        failed_node_ids=blast_radius.failed_node_ids,
        blast_radius=blast_radius,
    )
    return replace(state, payload=failure, running=True)


# =============================================================================
# Chaos
# =============================================================================

def update_chaos_config(state: SessionState, config: ChaosConfig) -> SessionState:
    if config == state.chaos_config:
        return state
    return replace(state, chaos_config=config)


def begin_chaos(state: SessionState) -> SessionState:
    """Start a new auto-run; the bumped token invalidates earlier ticks."""
    if not state.chaos:
        return state
    return replace(
        state,
        payload=replace(state.chaos, auto_running=True),
        running=True,
        token=state.token + 1,
    )


def renew_token(state: SessionState) -> SessionState:
    """Take ownership away from every previously scheduled tick."""
    return replace(state, token=state.token + 1)


def halt_chaos(state: SessionState) -> SessionState:
    """Stop auto-running but keep the last committed round visible."""
    if not state.chaos or not state.chaos.auto_running:
        return state
    return replace(
        state,
        payload=replace(state.chaos, auto_running=False),
        running=False,
        token=state.token + 1,
    )


def clear_chaos_failures(state: SessionState, event: Optional[ChaosEvent] = None) -> SessionState:
    chaos = state.chaos
    if not chaos or not chaos.has_failures:
        return state
    events = chaos.events + ((event,) if event else ())
    return replace(state, payload=replace(
        chaos,
        failed_node_ids=(),
        blast_radius=None,
        partition=None,
        events=events,
    ))


def commit_failure_round(
    state: SessionState,
    new_failed_ids: Iterable[str],
    blast_radius: BlastRadius,
    events: Iterable[ChaosEvent] = (),
) -> SessionState:
    chaos = state.chaos
    if not chaos:
        return state
    failed = tuple(dict.fromkeys(chaos.failed_node_ids + tuple(new_failed_ids)))
    return replace(state, payload=replace(
        chaos,
        round=chaos.round + 1,
        failed_node_ids=failed,
        blast_radius=blast_radius,
        partition=None,
        events=chaos.events + tuple(events),
    ))


def commit_partition_round(
    state: SessionState,
    partition: PartitionResult,
    event: Optional[ChaosEvent] = None,
) -> SessionState:
    chaos = state.chaos
    if not chaos:
        return state
    return replace(state, payload=replace(
        chaos,
        round=chaos.round + 1,
        failed_node_ids=(),
        blast_radius=None,
        partition=partition,
        events=chaos.events + ((event,) if event else ()),
    ))
