"""
Session State Models

The orchestrator's session is an immutable SessionState whose payload is
a mode-specific record:

    IDLE    -> None
    FLOW    -> FlowSession
    FAILURE -> FailureSession
    CHAOS   -> ChaosSession

Transitions (see domain.services.session_transitions) always return a
new SessionState; consumers only ever see committed snapshots.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Tuple, Union

from ..enums import SimulationMode
from .chaos import ChaosConfig, ChaosEvent
from .results import FlowTrace, BlastRadius, PartitionResult


@dataclass(frozen=True)
class FlowSession:
    """Request-flow tracing, optionally driven step by step."""
    source_node_id: Optional[str] = None
    trace: Optional[FlowTrace] = None
    stepping_mode: bool = False
    cursor: int = -1
    round_trip: bool = False

    @property
    def max_cursor(self) -> int:
        return self.trace.level_count - 1 if self.trace else -1


@dataclass(frozen=True)
class FailureSession:
    """Manually marked failures and their blast radius."""
    failed_node_ids: Tuple[str, ...] = ()
    blast_radius: Optional[BlastRadius] = None


@dataclass(frozen=True)
class ChaosSession:
    """Repeated randomized failure or partition rounds."""
    round: int = 0
    auto_running: bool = False
    failed_node_ids: Tuple[str, ...] = ()
    blast_radius: Optional[BlastRadius] = None
    partition: Optional[PartitionResult] = None
    events: Tuple[ChaosEvent, ...] = ()

    @property
    def severed_edge_ids(self) -> Tuple[str, ...]:
        return self.partition.severed_edge_ids if self.partition else ()

    @property
    def has_failures(self) -> bool:
        return bool(self.failed_node_ids) or self.partition is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round": self.round,
            "auto_running": self.auto_running,
            "failed_node_ids": list(self.failed_node_ids),
            "blast_radius": self.blast_radius.to_dict() if self.blast_radius else None,
            "partition": self.partition.to_dict() if self.partition else None,
            "events": [e.to_dict() for e in self.events],
        }


SessionPayload = Union[None, FlowSession, FailureSession, ChaosSession]

_PAYLOAD_TYPES = {
    SimulationMode.IDLE: type(None),
    SimulationMode.FLOW: FlowSession,
    SimulationMode.FAILURE: FailureSession,
    SimulationMode.CHAOS: ChaosSession,
}


@dataclass(frozen=True)
class SessionState:
    """
    Complete session state.

    Attributes:
        mode: top-level simulation mode
        running: playback flag (cleared by pause, set by resume)
        payload: mode-specific record, None while idle
        chaos_config: chaos parameters, kept across mode switches
        token: ownership token of the active chaos repeat; bumped every
            time a repeat is started or cancelled so stale ticks can be
            recognised
    """
    mode: SimulationMode = SimulationMode.IDLE
    running: bool = False
    payload: SessionPayload = None
    chaos_config: ChaosConfig = field(default_factory=ChaosConfig)
    token: int = 0

    def __post_init__(self):
        expected = _PAYLOAD_TYPES[self.mode]
        if not isinstance(self.payload, expected):
            raise ValueError(
                f"Mode '{self.mode.value}' requires a {expected.__name__} payload, "
                f"got {type(self.payload).__name__}"
            )

    @property
    def flow(self) -> Optional[FlowSession]:
        return self.payload if isinstance(self.payload, FlowSession) else None

    @property
    def failure(self) -> Optional[FailureSession]:
        return self.payload if isinstance(self.payload, FailureSession) else None

    @property
    def chaos(self) -> Optional[ChaosSession]:
        return self.payload if isinstance(self.payload, ChaosSession) else None

    @property
    def cursor(self) -> int:
        return self.flow.cursor if self.flow else -1

    @property
    def round(self) -> int:
        return self.chaos.round if self.chaos else 0

    def snapshot(self) -> "SessionSnapshot":
        return SessionSnapshot(
            mode=self.mode,
            running=self.running,
            round=self.round,
            cursor=self.cursor,
        )


@dataclass(frozen=True)
class SessionSnapshot:
    """The small view of the session published to renderers."""
    mode: SimulationMode
    running: bool
    round: int
    cursor: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "running": self.running,
            "round": self.round,
            "cursor": self.cursor,
        }
