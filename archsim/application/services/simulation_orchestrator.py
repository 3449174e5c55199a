"""
Simulation Orchestrator

Application service driving the simulation session state machine.

Architecture:
    UI driver / CLI (bin/simulate_diagram.py)
      └── SimulationOrchestrator        ← this module
            ├── FlowPathTracer          (domain service)
            ├── BlastRadiusCalculator   (domain service)
            ├── ChaosTargetSelector     (domain service)
            ├── NetworkPartitioner      (domain service)
            ├── IGraphAccessor          (outbound port, fresh snapshot per call)
            └── IScheduler              (outbound port, chaos repeat)

The session is an immutable SessionState replaced wholesale on every
committed transition. Calls that do not apply to the current state are
no-ops: they return False and record the reason in last_rejection.

Chaos repeats are owned by a session token. Every tick carries the token
that was current when the repeat was scheduled and is discarded if the
token has moved on (stop, reset, mode switch, restart).
"""

from __future__ import annotations
import logging
import random
from typing import Callable, Iterable, List, Optional, Union

from archsim.application.ports import (
    ISimulationUseCase,
    IGraphAccessor,
    IScheduler,
    ScheduledTask,
)
from archsim.domain.models import (
    ChaosConfig,
    ChaosEvent,
    ChaosEventType,
    ChaosSubMode,
    DiagramSnapshot,
    RejectionReason,
    SessionSnapshot,
    SessionState,
    SimulationMode,
    SimulationStats,
)
from archsim.domain.models.simulation import BlastRadius, PartitionResult
from archsim.domain.services import (
    BlastRadiusCalculator,
    ChaosTargetSelector,
    FlowPathTracer,
    NetworkPartitioner,
    SimulationStatsCalculator,
)
from archsim.domain.services import session_transitions as transitions

SessionListener = Callable[[SessionState], None]


class SimulationOrchestrator(ISimulationUseCase):
    """
    Mode/session state machine over the four simulation algorithms.

    Example:
        >>> sim = SimulationOrchestrator(accessor, ManualScheduler())
        >>> sim.set_mode(SimulationMode.FLOW)
        >>> sim.start_flow("api-gateway")
        True
        >>> sim.snapshot().running
        True
    """

    def __init__(
        self,
        accessor: IGraphAccessor,
        scheduler: IScheduler,
        rng: Optional[random.Random] = None,
        chaos_config: Optional[ChaosConfig] = None,
        stats_calculator: Optional[SimulationStatsCalculator] = None,
    ):
        self.accessor = accessor
        self.scheduler = scheduler
        self.logger = logging.getLogger(__name__)

        rng = rng or random.Random()
        self.tracer = FlowPathTracer()
        self.blast_calculator = BlastRadiusCalculator()
        self.selector = ChaosTargetSelector(rng)
        self.partitioner = NetworkPartitioner(rng)
        self.stats_calculator = stats_calculator or SimulationStatsCalculator()

        self._default_config = chaos_config or ChaosConfig()
        self._state = transitions.initial_state(self._default_config)
        self._repeat: Optional[ScheduledTask] = None
        self._listeners: List[SessionListener] = []
        self.last_rejection: Optional[RejectionReason] = None

    # =========================================================================
    # Published State
    # =========================================================================

    @property
    def state(self) -> SessionState:
        """The last committed session state."""
        return self._state

    def snapshot(self) -> SessionSnapshot:
        return self._state.snapshot()

    def stats(self) -> Optional[SimulationStats]:
        if self._state.mode == SimulationMode.IDLE:
            return None
        node_count = len(self.accessor.get_snapshot().architecture_node_ids())
        return self.stats_calculator.for_session(self._state, node_count)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener for committed states; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def chaos_repeat_active(self) -> bool:
        return self._repeat is not None and not self._repeat.cancelled

    # =========================================================================
    # Mode and Lifecycle
    # =========================================================================

    def set_mode(self, mode: Union[SimulationMode, str]) -> bool:
        mode = SimulationMode(mode)
        self._cancel_repeat()
        self.logger.info(f"Simulation mode: {self._state.mode.value} -> {mode.value}")
        return self._accept(transitions.set_mode(self._state, mode))

    def stop(self) -> bool:
        if self._state.mode == SimulationMode.IDLE and not self.chaos_repeat_active:
            return self._reject(RejectionReason.WRONG_MODE, "stop while idle")
        self._cancel_repeat()
        self.logger.info(f"Simulation stopped ({self._state.mode.value})")
        return self._accept(transitions.stop(self._state))

    def reset(self) -> bool:
        self._cancel_repeat()
        return self._accept(transitions.reset(self._state, self._default_config))

    def close(self) -> None:
        self.stop()

    def pause(self) -> bool:
        if self._state.mode == SimulationMode.IDLE:
            return self._reject(RejectionReason.WRONG_MODE, "pause while idle")
        return self._apply(transitions.pause(self._state))

    def resume(self) -> bool:
        if self._state.mode == SimulationMode.IDLE:
            return self._reject(RejectionReason.WRONG_MODE, "resume while idle")
        if not transitions.has_result(self._state):
            return self._reject(RejectionReason.NOTHING_TO_RESUME, "resume without a result")
        return self._apply(transitions.resume(self._state))

    # =========================================================================
    # Flow
    # =========================================================================

    def set_stepping_mode(self, enabled: bool) -> bool:
        if not self._state.flow:
            return self._reject(RejectionReason.WRONG_MODE, "stepping outside flow mode")
        return self._apply(transitions.set_stepping_mode(self._state, enabled))

    def set_round_trip(self, enabled: bool) -> bool:
        """Count the response leg back to the source in the flow stats."""
        if not self._state.flow:
            return self._reject(RejectionReason.WRONG_MODE, "round trip outside flow mode")
        return self._apply(transitions.set_round_trip(self._state, enabled))

    def start_flow(self, source_node_id: Optional[str]) -> bool:
        if not self._state.flow:
            return self._reject(RejectionReason.WRONG_MODE, "flow start outside flow mode")

        snapshot = self.accessor.get_snapshot()
        if not snapshot.has_architecture_node(source_node_id):
            return self._reject(RejectionReason.INVALID_SOURCE, f"unknown flow source '{source_node_id}'")

        trace = self.tracer.trace(snapshot.architecture_edges(), source_node_id)
        self.logger.info(
            f"Flow from '{source_node_id}': {trace.hop_count} hops over {trace.level_count} levels"
        )
        return self._accept(transitions.start_flow(self._state, source_node_id, trace))

    def step_forward(self) -> bool:
        return self._step(+1)

    def step_backward(self) -> bool:
        return self._step(-1)

    def _step(self, delta: int) -> bool:
        flow = self._state.flow
        if not flow or not flow.stepping_mode or flow.trace is None:
            return self._reject(RejectionReason.WRONG_MODE, "step without a stepping trace")
        return self._apply(transitions.move_cursor(self._state, delta))

    # =========================================================================
    # Failure
    # =========================================================================

    def toggle_failed_node(self, node_id: str) -> bool:
        if not self._state.failure:
            return self._reject(RejectionReason.WRONG_MODE, "failure toggle outside failure mode")
        if not self.accessor.get_snapshot().has_architecture_node(node_id):
            return self._reject(RejectionReason.UNKNOWN_NODE, f"'{node_id}' is not an architecture node")
        return self._accept(transitions.toggle_failed_node(self._state, node_id))

    def start_failure(self, failed_node_ids: Optional[Iterable[str]] = None) -> bool:
        if not self._state.failure:
            return self._reject(RejectionReason.WRONG_MODE, "failure start outside failure mode")

        snapshot = self.accessor.get_snapshot()
        marked = self._state.failure.failed_node_ids if failed_node_ids is None else failed_node_ids
        failed = [n for n in dict.fromkeys(marked) if snapshot.has_architecture_node(n)]
        if not failed:
            return self._reject(RejectionReason.EMPTY_FAILURE_SET, "no failed nodes marked")

        blast = self.blast_calculator.compute(snapshot.architecture_edges(), failed)
        self.logger.info(
            f"Failure of {failed}: {len(blast.affected_node_ids)} affected, "
            f"{len(blast.broken_edge_ids)} broken edges"
        )
        return self._accept(transitions.start_failure(self._state, blast))

    # =========================================================================
    # Chaos
    # =========================================================================

    def update_chaos_config(self, **changes) -> bool:
        """
        Change chaos parameters.

        Raises:
            ValueError: if a parameter is out of range
        """
        previous = self._state.chaos_config
        config = previous.with_changes(**changes)
        applied = self._apply(transitions.update_chaos_config(self._state, config))
        if applied and self.chaos_repeat_active and config.interval_ms != previous.interval_ms:
            self._cancel_repeat()
            self._commit(transitions.renew_token(self._state))
            self._schedule_repeat()
        return applied

    def set_chaos_sub_mode(self, sub_mode: Union[ChaosSubMode, str]) -> bool:
        return self.update_chaos_config(sub_mode=ChaosSubMode(sub_mode))

    def toggle_protected_node(self, node_id: str) -> bool:
        config = self._state.chaos_config.toggle_protected(node_id)
        return self._apply(transitions.update_chaos_config(self._state, config))

    def start_chaos(self) -> bool:
        if not self._state.chaos:
            return self._reject(RejectionReason.WRONG_MODE, "chaos start outside chaos mode")

        self._cancel_repeat()
        self._accept(transitions.begin_chaos(self._state))
        config = self._state.chaos_config
        self.logger.info(
            f"Chaos auto-run started: {config.sub_mode.value} every {config.interval_ms} ms"
        )

        # The auto-run starts even if this first round finds nothing to do;
        # last_rejection then tells why.
        self._execute_chaos_round(clear_previous=False)
        self._schedule_repeat()
        return True

    def stop_chaos(self) -> bool:
        chaos = self._state.chaos
        if not chaos or not chaos.auto_running:
            return self._reject(RejectionReason.WRONG_MODE, "no chaos auto-run to stop")
        self._cancel_repeat()
        self.logger.info(f"Chaos auto-run stopped after round {chaos.round}")
        return self._accept(transitions.halt_chaos(self._state))

    def _schedule_repeat(self) -> None:
        """Schedule ticks owned by the current session token."""
        token = self._state.token
        self._repeat = self.scheduler.call_repeating(
            self._state.chaos_config.interval_seconds,
            lambda: self._on_chaos_tick(token),
        )

    def _cancel_repeat(self) -> None:
        if self._repeat is not None:
            self._repeat.cancel()
            self._repeat = None

    def _on_chaos_tick(self, token: int) -> None:
        state = self._state
        if token != state.token or state.mode != SimulationMode.CHAOS or not state.chaos.auto_running:
            self.last_rejection = RejectionReason.STALE_TIMER
            self.logger.debug(f"Discarded stale chaos tick (token {token}, current {state.token})")
            return
        if not state.running:
            self.logger.debug("Chaos paused, skipping tick")
            return
        self._execute_chaos_round(clear_previous=True)

    def _execute_chaos_round(self, clear_previous: bool) -> bool:
        snapshot = self.accessor.get_snapshot()
        working = self._state
        if clear_previous:
            working = transitions.clear_chaos_failures(working, self._recovery_event(working, snapshot))

        if working.chaos_config.sub_mode == ChaosSubMode.NETWORK_PARTITION:
            return self._partition_round(working, snapshot)
        return self._failure_round(working, snapshot)

    def _failure_round(self, working: SessionState, snapshot: DiagramSnapshot) -> bool:
        config = working.chaos_config
        already_failed = working.chaos.failed_node_ids
        selected = self.selector.select(
            snapshot.architecture_nodes(),
            config.failure_probability,
            config.max_failures_per_round,
            config.protected_node_ids,
            already_failed,
        )
        if not selected:
            self._commit(working)
            return self._reject(RejectionReason.NO_ELIGIBLE_TARGETS, "no eligible chaos targets")

        all_failed = list(already_failed) + selected
        blast = self.blast_calculator.compute(snapshot.architecture_edges(), all_failed)
        events = self._failure_events(working.chaos.round + 1, selected, blast, snapshot)

        self.logger.info(events[0].message)
        return self._accept(transitions.commit_failure_round(working, selected, blast, events))

    def _partition_round(self, working: SessionState, snapshot: DiagramSnapshot) -> bool:
        partition = self.partitioner.partition(
            snapshot.architecture_nodes(),
            snapshot.architecture_edges(),
            working.chaos_config.protected_node_ids,
        )
        if not partition.severed_edge_ids:
            self._commit(working)
            return self._reject(RejectionReason.DEGENERATE_GRAPH, "nothing to partition")

        event = self._partition_event(working.chaos.round + 1, partition)
        self.logger.info(event.message)
        return self._accept(transitions.commit_partition_round(working, partition, event))

    # =========================================================================
    # Chaos Event Log
    # =========================================================================

    def _failure_events(
        self,
        round_no: int,
        selected: List[str],
        blast: BlastRadius,
        snapshot: DiagramSnapshot,
    ) -> List[ChaosEvent]:
        now = self.scheduler.now()
        labels = ", ".join(snapshot.label_of(n) for n in selected)
        affected = len(blast.affected_node_ids)
        events = [ChaosEvent(
            round=round_no,
            timestamp=now,
            type=ChaosEventType.NODE_FAILURE,
            message=f"Round {round_no}: {labels} failed",
            node_ids=tuple(selected),
            affected_count=affected,
        )]
        if affected:
            events.append(ChaosEvent(
                round=round_no,
                timestamp=now,
                type=ChaosEventType.CASCADE,
                message=f"Cascade: {affected} node(s) affected downstream",
                node_ids=blast.affected_node_ids,
                affected_count=affected,
            ))
        return events

    def _partition_event(self, round_no: int, partition: PartitionResult) -> ChaosEvent:
        return ChaosEvent(
            round=round_no,
            timestamp=self.scheduler.now(),
            type=ChaosEventType.PARTITION,
            message=(
                f"Partition: network split into groups of {len(partition.group_a)} "
                f"and {len(partition.group_b)} nodes"
            ),
            node_ids=partition.group_a + partition.group_b,
            edge_ids=partition.severed_edge_ids,
            affected_count=len(partition.group_b),
        )

    def _recovery_event(self, state: SessionState, snapshot: DiagramSnapshot) -> Optional[ChaosEvent]:
        chaos = state.chaos
        if not chaos or not chaos.has_failures:
            return None
        if chaos.partition is not None:
            message = f"Round {chaos.round}: network partition healed"
            node_ids, edge_ids = (), chaos.partition.severed_edge_ids
        else:
            labels = ", ".join(snapshot.label_of(n) for n in chaos.failed_node_ids)
            message = f"Round {chaos.round}: {labels} recovered"
            node_ids, edge_ids = chaos.failed_node_ids, ()
        return ChaosEvent(
            round=chaos.round,
            timestamp=self.scheduler.now(),
            type=ChaosEventType.RECOVERY,
            message=message,
            node_ids=node_ids,
            edge_ids=edge_ids,
        )

    # =========================================================================
    # Commit Helpers
    # =========================================================================

    def _commit(self, new_state: SessionState) -> None:
        if new_state is self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)

    def _accept(self, new_state: SessionState) -> bool:
        self.last_rejection = None
        self._commit(new_state)
        return True

    def _apply(self, new_state: SessionState) -> bool:
        """Commit if the transition changed anything; unchanged means no-op."""
        if new_state is self._state:
            return False
        return self._accept(new_state)

    def _reject(self, reason: RejectionReason, detail: str) -> bool:
        self.last_rejection = reason
        self.logger.debug(f"Ignored: {detail} ({reason.value})")
        return False
