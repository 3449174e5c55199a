#!/usr/bin/env python3
"""
Diagram Simulation CLI

Runs the architecture simulations on a diagram exported by the editor
(JSON with "nodes" and "edges").

Usage Examples:
    # Request flow from the gateway
    python simulate_diagram.py flow --diagram shop.json --source gateway

    # Step-by-step flow, one level at a time
    python simulate_diagram.py flow --diagram shop.json --source gateway --stepping

    # Request plus response latency back to the gateway
    python simulate_diagram.py flow --diagram shop.json --source gateway --round-trip

    # Blast radius of two failed services
    python simulate_diagram.py failure --diagram shop.json --fail db --fail cache

    # Five chaos rounds on a virtual clock, reproducible
    python simulate_diagram.py chaos --diagram shop.json --rounds 5 --seed 7

    # Chaos on the real event loop, one round per second
    python simulate_diagram.py chaos --diagram shop.json --interval-ms 1000 --live

    # One-shot network partition
    python simulate_diagram.py partition --diagram shop.json --protect db -o split.json
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import argparse
import asyncio
import json
import logging
from dataclasses import replace
from typing import List, Optional

from archsim.adapters.outbound.scheduling import AsyncioScheduler, ManualScheduler
from archsim.config import Container, Settings
from archsim.domain.models import ChaosSubMode, SimulationMode
from archsim.domain.services import NetworkPartitioner


# =============================================================================
# Argument Parsing
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with subcommands."""
    # Parent parser for common arguments
    common_parser = argparse.ArgumentParser(add_help=False)

    input_group = common_parser.add_argument_group("Input")
    input_group.add_argument("--diagram", "-d", required=True, metavar="FILE", help="Diagram JSON file")
    input_group.add_argument("--seed", type=int, help="Random seed for chaos and partitions")

    output_group = common_parser.add_argument_group("Output")
    output_group.add_argument("--output", "-o", metavar="FILE", help="Export results to JSON")
    output_group.add_argument("--json", action="store_true", help="Print JSON to stdout")
    output_group.add_argument("--quiet", "-q", action="store_true", help="Minimal output")
    output_group.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    # Main parser
    parser = argparse.ArgumentParser(
        prog="simulate_diagram.py",
        description="Flow, failure and chaos simulation for architecture diagrams.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # --- Subcommands ---
    subs = parser.add_subparsers(dest="command", help="Simulation command")

    # flow
    fw = subs.add_parser("flow", help="Trace a request flow from a source node", parents=[common_parser])
    fw.add_argument("--source", "-s", required=True, metavar="NODE_ID", help="Flow source node")
    fw.add_argument("--stepping", action="store_true", help="Walk the trace level by level")
    fw.add_argument("--round-trip", action="store_true", help="Add the response leg to the latency")

    # failure
    fl = subs.add_parser("failure", help="Blast radius of failed nodes", parents=[common_parser])
    fl.add_argument(
        "--fail", "-f", action="append", required=True, metavar="NODE_ID",
        help="Node to fail (repeatable)",
    )

    # chaos
    ch = subs.add_parser("chaos", help="Repeated random failure or partition rounds", parents=[common_parser])
    ch.add_argument(
        "--sub-mode", choices=[m.value for m in ChaosSubMode],
        default=ChaosSubMode.RANDOM_FAILURE.value, help="Chaos flavour",
    )
    ch.add_argument("--rounds", "-r", type=int, default=3, help="Number of rounds to run")
    ch.add_argument("--interval-ms", type=int, help="Delay between rounds")
    ch.add_argument("--max-failures", type=int, help="Max nodes failed per round")
    ch.add_argument("--probability", type=float, help="Per-node failure probability (0-1)")
    ch.add_argument("--protect", action="append", default=[], metavar="NODE_ID", help="Protected node")
    ch.add_argument("--live", action="store_true", help="Run on the real event loop clock")

    # partition
    pt = subs.add_parser("partition", help="One-shot network partition", parents=[common_parser])
    pt.add_argument("--protect", action="append", default=[], metavar="NODE_ID", help="Protected node")

    return parser


# =============================================================================
# Command Handlers
# =============================================================================

def handle_flow(args, container, display) -> dict:
    """Handle the 'flow' subcommand."""
    sim = container.simulation_service()
    sim.set_mode(SimulationMode.FLOW)
    sim.set_stepping_mode(args.stepping)
    sim.set_round_trip(args.round_trip)
    if not sim.start_flow(args.source):
        raise ValueError(f"'{args.source}' is not an architecture node of the diagram")

    trace = sim.state.flow.trace
    snapshot = container.graph_accessor().get_snapshot()

    steps = []
    if args.stepping:
        steps.append(sim.stats().to_dict())
        if not args.quiet:
            display.display_flow_trace(trace, snapshot, sim.stats(), cursor=sim.snapshot().cursor)
        while sim.step_forward():
            stats = sim.stats()
            steps.append(stats.to_dict())
            if not args.quiet:
                print(
                    f"  Step {sim.snapshot().cursor}: {stats.total_hops} hops, "
                    f"{stats.total_latency_ms:g} ms"
                )
    elif not args.quiet:
        display.display_flow_trace(trace, snapshot, sim.stats())

    result = {"trace": trace.to_dict(), "stats": sim.stats().to_dict()}
    if steps:
        result["steps"] = steps
    return result


def handle_failure(args, container, display) -> dict:
    """Handle the 'failure' subcommand."""
    sim = container.simulation_service()
    sim.set_mode(SimulationMode.FAILURE)
    if not sim.start_failure(args.fail):
        raise ValueError(f"None of {args.fail} is an architecture node of the diagram")

    blast = sim.state.failure.blast_radius
    stats = sim.stats()
    if not args.quiet:
        display.display_blast_radius(blast, container.graph_accessor().get_snapshot(), stats)
    return {"blast_radius": blast.to_dict(), "stats": stats.to_dict()}


def handle_chaos(args, container, display) -> dict:
    """Handle the 'chaos' subcommand."""
    if args.rounds < 1:
        raise ValueError(f"--rounds must be at least 1, got {args.rounds}")
    if args.live:
        asyncio.run(_run_live_chaos(args, container))
    else:
        _run_virtual_chaos(args, container)

    sim = container.simulation_service()
    chaos = sim.state.chaos
    stats = sim.stats()
    if not args.quiet:
        display.display_chaos(chaos, stats)
        if chaos.partition is not None:
            display.display_partition(chaos.partition, container.graph_accessor().get_snapshot())
        if sim.last_rejection is not None:
            display.display_rejection(sim.last_rejection)
    return {
        "config": sim.state.chaos_config.to_dict(),
        "chaos": chaos.to_dict(),
        "stats": stats.to_dict(),
    }


def _configure_chaos(args, sim) -> None:
    sim.set_mode(SimulationMode.CHAOS)
    changes = {"sub_mode": ChaosSubMode(args.sub_mode)}
    if args.interval_ms is not None:
        changes["interval_ms"] = args.interval_ms
    if args.max_failures is not None:
        changes["max_failures_per_round"] = args.max_failures
    if args.probability is not None:
        changes["failure_probability"] = args.probability
    sim.update_chaos_config(**changes)
    for node_id in args.protect:
        sim.toggle_protected_node(node_id)


def _run_virtual_chaos(args, container) -> None:
    """First round runs at start, the rest on a virtual clock."""
    scheduler = ManualScheduler()
    container.use_scheduler(scheduler)
    sim = container.simulation_service()
    _configure_chaos(args, sim)
    sim.start_chaos()
    for _ in range(args.rounds - 1):
        scheduler.advance(sim.state.chaos_config.interval_seconds)
    sim.stop_chaos()


async def _run_live_chaos(args, container) -> None:
    container.use_scheduler(AsyncioScheduler())
    sim = container.simulation_service()
    _configure_chaos(args, sim)
    interval = sim.state.chaos_config.interval_seconds
    sim.start_chaos()
    # Half an interval of slack so the last tick lands before stopping
    await asyncio.sleep(interval * (args.rounds - 1) + interval / 2)
    sim.stop_chaos()


def handle_partition(args, container, display) -> dict:
    """Handle the 'partition' subcommand."""
    snapshot = container.graph_accessor().get_snapshot()
    partitioner = NetworkPartitioner(container.rng())
    result = partitioner.partition(
        snapshot.architecture_nodes(),
        snapshot.architecture_edges(),
        args.protect,
    )
    if not args.quiet:
        display.display_partition(result, snapshot)
    return {"partition": result.to_dict()}


# =============================================================================
# Main Entry Point
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    settings = Settings.from_env()

    # Logging
    log_level = (
        logging.WARNING if args.quiet
        else logging.DEBUG if args.verbose
        else getattr(logging, settings.log_level, logging.INFO)
    )
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    # Initialize container and services
    if args.seed is not None:
        settings = replace(settings, seed=args.seed)
    container = Container.from_settings(settings, diagram_path=args.diagram)
    display = container.display_service()

    try:
        # Dispatch to handler
        handlers = {
            "flow": handle_flow,
            "failure": handle_failure,
            "chaos": handle_chaos,
            "partition": handle_partition,
        }
        handler = handlers[args.command]
        result_data = handler(args, container, display)

        # JSON stdout
        if args.json:
            print(json.dumps(result_data, indent=2))

        # File export
        if args.output:
            with open(args.output, "w") as f:
                json.dump(result_data, f, indent=2)
            if not args.quiet:
                print(f"\n{display.colored(f'Results saved to: {args.output}', display.Colors.GREEN)}")

        return 0

    except KeyboardInterrupt:
        print("\nSimulation interrupted.")
        return 130
    except Exception as e:
        print(display.colored(f"Error: {e}", display.Colors.RED), file=sys.stderr)
        if args.verbose:
            logging.exception("Simulation failed")
        return 1
    finally:
        container.close()


if __name__ == "__main__":
    sys.exit(main())
