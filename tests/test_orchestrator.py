"""
Tests for SimulationOrchestrator.

Covers:
    - Mode switching and lifecycle (stop, reset, pause, resume)
    - Flow start, stepping and cursor clamping
    - Failure marking and blast radius
    - Chaos rounds on a virtual clock, stale ticks, restarts
    - Network partition rounds
    - Listeners and published stats
"""

import pytest

from archsim.domain.models import (
    ChaosEventType,
    ChaosSubMode,
    DiagramEdge,
    DiagramNode,
    RejectionReason,
    SimulationMode,
)


# =============================================================================
# Mode and Lifecycle
# =============================================================================

class TestLifecycle:

    def test_starts_idle(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        assert sim.snapshot().to_dict() == {"mode": "idle", "running": False, "round": 0, "cursor": -1}
        assert sim.stats() is None

    def test_set_mode_accepts_strings(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        sim.set_mode("failure")
        assert sim.snapshot().mode == SimulationMode.FAILURE

    def test_mode_switch_drops_previous_result(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        sim.set_mode(SimulationMode.FLOW)
        sim.start_flow("A")
        sim.set_mode(SimulationMode.FAILURE)
        sim.set_mode(SimulationMode.FLOW)
        assert sim.state.flow.trace is None

    def test_stop_is_idempotent(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        sim.set_mode(SimulationMode.CHAOS)
        sim.start_chaos()
        sim.stop()
        sim.stop()
        assert sim.snapshot().mode == SimulationMode.IDLE
        assert not sim.chaos_repeat_active

    def test_stop_while_idle_is_noop(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        seen = []
        sim.subscribe(seen.append)
        token = sim.state.token

        assert not sim.stop()
        assert sim.last_rejection == RejectionReason.WRONG_MODE
        assert sim.state.token == token
        assert seen == []

        sim.set_mode(SimulationMode.FLOW)
        assert sim.stop()
        assert not sim.stop()
        assert len(seen) == 2

    def test_stop_keeps_config_reset_restores(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        sim.update_chaos_config(interval_ms=500)
        sim.stop()
        assert sim.state.chaos_config.interval_ms == 500
        sim.reset()
        assert sim.state.chaos_config.interval_ms == 3000

    def test_pause_and_resume(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        sim.set_mode(SimulationMode.FLOW)
        sim.start_flow("A")
        assert sim.pause()
        assert not sim.snapshot().running
        assert not sim.pause()
        assert sim.resume()
        assert sim.snapshot().running

    def test_resume_without_result(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        sim.set_mode(SimulationMode.FLOW)
        assert not sim.resume()
        assert sim.last_rejection == RejectionReason.NOTHING_TO_RESUME

    def test_pause_while_idle(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        assert not sim.pause()
        assert sim.last_rejection == RejectionReason.WRONG_MODE


# =============================================================================
# Flow
# =============================================================================

class TestFlow:

    def test_start_flow(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        sim.set_mode(SimulationMode.FLOW)
        assert sim.start_flow("A")
        assert sim.snapshot().running
        assert sim.state.flow.trace.edge_ids == ("e1", "e2", "e3")
        assert sim.last_rejection is None

    @pytest.mark.parametrize("source", [None, "", "missing"])
    def test_invalid_source_is_noop(self, make_orchestrator, chain_accessor, source):
        sim = make_orchestrator(chain_accessor)
        sim.set_mode(SimulationMode.FLOW)
        before = sim.state
        assert not sim.start_flow(source)
        assert sim.state is before
        assert sim.last_rejection == RejectionReason.INVALID_SOURCE

    def test_group_node_is_not_a_source(self, make_orchestrator, mixed_accessor):
        sim = make_orchestrator(mixed_accessor)
        sim.set_mode(SimulationMode.FLOW)
        assert not sim.start_flow("grp")

    def test_non_architecture_nodes_invisible(self, make_orchestrator, mixed_accessor):
        sim = make_orchestrator(mixed_accessor)
        sim.set_mode(SimulationMode.FLOW)
        sim.start_flow("gw")
        trace = sim.state.flow.trace
        assert trace.node_ids == ("gw", "svc", "db")
        assert "e3" not in trace.edge_ids

    def test_start_flow_outside_flow_mode(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        assert not sim.start_flow("A")
        assert sim.last_rejection == RejectionReason.WRONG_MODE

    def test_stepping(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        sim.set_mode(SimulationMode.FLOW)
        sim.set_stepping_mode(True)
        sim.start_flow("A")

        assert sim.snapshot().cursor == 0
        assert not sim.snapshot().running
        assert not sim.step_backward()
        assert sim.step_forward()
        assert sim.step_forward()
        assert not sim.step_forward()
        assert sim.snapshot().cursor == 2
        assert sim.stats().total_hops == 3

        sim.step_backward()
        assert sim.stats().total_hops == 2

    def test_round_trip_latency(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        sim.set_mode(SimulationMode.FLOW)
        assert sim.set_round_trip(True)
        assert not sim.set_round_trip(True)
        sim.start_flow("A")

        stats = sim.stats()
        assert stats.total_latency_ms == 160
        assert stats.round_trip_latency_ms == 320

        sim.set_round_trip(False)
        assert sim.stats().round_trip_latency_ms is None

    def test_round_trip_outside_flow_mode(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        sim.set_mode(SimulationMode.CHAOS)
        assert not sim.set_round_trip(True)
        assert sim.last_rejection == RejectionReason.WRONG_MODE

    def test_step_without_stepping_mode(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        sim.set_mode(SimulationMode.FLOW)
        sim.start_flow("A")
        assert not sim.step_forward()
        assert sim.last_rejection == RejectionReason.WRONG_MODE

    def test_snapshot_read_per_call(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        sim.set_mode(SimulationMode.FLOW)
        chain_accessor.add_node(DiagramNode("E"))
        chain_accessor.add_edge(DiagramEdge("e4", "D", "E"))
        sim.start_flow("A")
        assert sim.state.flow.trace.node_ids[-1] == "E"


# =============================================================================
# Failure
# =============================================================================

class TestFailure:

    def test_toggle_and_start(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        sim.set_mode(SimulationMode.FAILURE)
        assert sim.toggle_failed_node("B")
        assert sim.start_failure()

        blast = sim.state.failure.blast_radius
        assert blast.affected_node_ids == ("C", "D")
        stats = sim.stats()
        assert stats.impact_percentage == 75
        assert stats.broken_edge_count == 3

    def test_explicit_failure_set(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        sim.set_mode(SimulationMode.FAILURE)
        assert sim.start_failure(["C"])
        assert sim.state.failure.failed_node_ids == ("C",)

    def test_empty_failure_set(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        sim.set_mode(SimulationMode.FAILURE)
        assert not sim.start_failure()
        assert sim.last_rejection == RejectionReason.EMPTY_FAILURE_SET
        assert not sim.snapshot().running

    def test_unknown_ids_filtered(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        sim.set_mode(SimulationMode.FAILURE)
        assert not sim.start_failure(["nope"])
        assert sim.last_rejection == RejectionReason.EMPTY_FAILURE_SET

    def test_toggle_unknown_node(self, make_orchestrator, mixed_accessor):
        sim = make_orchestrator(mixed_accessor)
        sim.set_mode(SimulationMode.FAILURE)
        assert not sim.toggle_failed_node("note")
        assert sim.last_rejection == RejectionReason.UNKNOWN_NODE


# =============================================================================
# Chaos
# =============================================================================

class TestChaosRounds:

    @pytest.fixture
    def sim(self, make_orchestrator, five_node_accessor):
        sim = make_orchestrator(five_node_accessor)
        sim.set_mode(SimulationMode.CHAOS)
        sim.update_chaos_config(failure_probability=1.0, max_failures_per_round=2)
        return sim

    def test_first_round_runs_immediately(self, sim):
        assert sim.start_chaos()
        assert sim.snapshot().round == 1
        assert len(sim.state.chaos.failed_node_ids) == 2
        assert sim.chaos_repeat_active

    def test_round_increments_once_per_tick(self, sim, scheduler):
        sim.start_chaos()
        for expected in range(2, 6):
            scheduler.advance(3.0)
            assert sim.snapshot().round == expected
            assert len(sim.state.chaos.failed_node_ids) == 2

    def test_previous_failures_recover(self, sim, scheduler):
        sim.start_chaos()
        scheduler.advance(3.0)
        types = [e.type for e in sim.state.chaos.events]
        assert ChaosEventType.RECOVERY in types
        assert types[0] == ChaosEventType.NODE_FAILURE

    def test_event_messages(self, sim, scheduler):
        sim.start_chaos()
        failure = sim.state.chaos.events[0]
        assert failure.message.startswith("Round 1: ")
        assert failure.message.endswith(" failed")
        assert failure.timestamp == 0.0

    def test_cascade_event(self, make_orchestrator, chain_accessor, scheduler):
        sim = make_orchestrator(chain_accessor)
        sim.set_mode(SimulationMode.CHAOS)
        sim.update_chaos_config(failure_probability=1.0, max_failures_per_round=1)
        for node_id in ("B", "C", "D"):
            sim.toggle_protected_node(node_id)
        sim.start_chaos()

        events = sim.state.chaos.events
        assert [e.type for e in events] == [ChaosEventType.NODE_FAILURE, ChaosEventType.CASCADE]
        assert events[1].message == "Cascade: 3 node(s) affected downstream"

    def test_protected_nodes_never_fail(self, sim, scheduler):
        sim.toggle_protected_node("gw")
        sim.start_chaos()
        for _ in range(5):
            assert "gw" not in sim.state.chaos.failed_node_ids
            scheduler.advance(3.0)

    def test_no_eligible_targets(self, sim):
        for node_id in ("gw", "s1", "s2", "s3", "s4"):
            sim.toggle_protected_node(node_id)
        assert sim.start_chaos()
        assert sim.snapshot().round == 0
        assert sim.last_rejection == RejectionReason.NO_ELIGIBLE_TARGETS

    def test_mtbf_stats(self, sim, scheduler):
        sim.start_chaos()
        assert sim.stats().chaos_mtbf_ms is None
        scheduler.advance(3.0)
        assert sim.stats().chaos_mtbf_ms == 3000

    def test_start_outside_chaos_mode(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        sim.set_mode(SimulationMode.FLOW)
        assert not sim.start_chaos()
        assert sim.last_rejection == RejectionReason.WRONG_MODE


class TestChaosRepeat:

    @pytest.fixture
    def sim(self, make_orchestrator, five_node_accessor):
        sim = make_orchestrator(five_node_accessor)
        sim.set_mode(SimulationMode.CHAOS)
        return sim

    def test_mode_switch_cancels_repeat(self, sim, scheduler):
        sim.start_chaos()
        sim.set_mode(SimulationMode.FLOW)
        assert scheduler.pending == 0
        assert scheduler.advance(30.0) == 0

    def test_stale_tick_discarded(self, sim):
        sim.start_chaos()
        stale_token = sim.state.token
        sim.stop_chaos()
        before = sim.state

        sim._on_chaos_tick(stale_token)
        assert sim.state is before
        assert sim.last_rejection == RejectionReason.STALE_TIMER

    def test_restart_keeps_single_repeat(self, sim, scheduler):
        sim.start_chaos()
        sim.start_chaos()
        sim.start_chaos()
        assert scheduler.pending == 1
        round_before = sim.snapshot().round
        scheduler.advance(3.0)
        assert sim.snapshot().round == round_before + 1

    def test_stop_chaos_keeps_last_round(self, sim, scheduler):
        sim.start_chaos()
        scheduler.advance(3.0)
        assert sim.stop_chaos()
        assert sim.snapshot().mode == SimulationMode.CHAOS
        assert sim.snapshot().round == 2
        assert not sim.snapshot().running
        scheduler.advance(30.0)
        assert sim.snapshot().round == 2
        assert not sim.stop_chaos()

    def test_paused_ticks_skipped(self, sim, scheduler):
        sim.start_chaos()
        sim.pause()
        scheduler.advance(9.0)
        assert sim.snapshot().round == 1
        sim.resume()
        scheduler.advance(3.0)
        assert sim.snapshot().round == 2

    def test_interval_change_reschedules(self, sim, scheduler):
        sim.start_chaos()
        sim.update_chaos_config(interval_ms=1000)
        assert scheduler.pending == 1
        scheduler.advance(1.0)
        assert sim.snapshot().round == 2

    def test_invalid_config_raises(self, sim):
        with pytest.raises(ValueError):
            sim.update_chaos_config(failure_probability=2.0)


class TestPartitionRounds:

    def test_partition_round(self, make_orchestrator, chain_accessor, scheduler):
        sim = make_orchestrator(chain_accessor)
        sim.set_mode(SimulationMode.CHAOS)
        sim.set_chaos_sub_mode(ChaosSubMode.NETWORK_PARTITION)
        sim.start_chaos()

        partition = sim.state.chaos.partition
        assert sorted(partition.group_a + partition.group_b) == ["A", "B", "C", "D"]
        assert partition.severed_edge_ids
        event = sim.state.chaos.events[-1]
        assert event.type == ChaosEventType.PARTITION
        assert event.message.startswith("Partition: network split into groups of ")
        assert sim.stats().chaos_severed_edges == len(partition.severed_edge_ids)

        scheduler.advance(3.0)
        assert sim.snapshot().round == 2
        assert any(e.message.endswith("network partition healed") for e in sim.state.chaos.events)

    def test_degenerate_partition(self, make_orchestrator, scheduler):
        from archsim.adapters.outbound.persistence import InMemoryGraphAccessor

        sim = make_orchestrator(InMemoryGraphAccessor([DiagramNode("solo")]))
        sim.set_mode(SimulationMode.CHAOS)
        sim.set_chaos_sub_mode("network-partition")
        sim.start_chaos()
        assert sim.snapshot().round == 0
        assert sim.last_rejection == RejectionReason.DEGENERATE_GRAPH


class TestListeners:

    def test_listener_sees_committed_states(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        seen = []
        unsubscribe = sim.subscribe(seen.append)

        sim.set_mode(SimulationMode.FLOW)
        sim.start_flow("A")
        assert [s.mode for s in seen] == [SimulationMode.FLOW, SimulationMode.FLOW]
        assert seen[-1] is sim.state

        unsubscribe()
        sim.stop()
        assert len(seen) == 2

    def test_rejected_call_does_not_notify(self, make_orchestrator, chain_accessor):
        sim = make_orchestrator(chain_accessor)
        sim.set_mode(SimulationMode.FLOW)
        seen = []
        sim.subscribe(seen.append)
        sim.start_flow("missing")
        assert seen == []
