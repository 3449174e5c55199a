"""
Console Display Adapter

Terminal rendering of simulation results for the command line.
"""

from __future__ import annotations
from typing import Iterable, Optional

from archsim.domain.models import (
    BlastRadius,
    ChaosEventType,
    ChaosSession,
    DiagramSnapshot,
    FlowTrace,
    PartitionResult,
    RejectionReason,
    SimulationStats,
)


class Colors:
    """ANSI color codes for terminal output."""
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


EVENT_COLORS = {
    ChaosEventType.NODE_FAILURE: Colors.RED,
    ChaosEventType.CASCADE: Colors.YELLOW,
    ChaosEventType.PARTITION: Colors.MAGENTA,
    ChaosEventType.RECOVERY: Colors.GREEN,
}


class ConsoleDisplay:
    """Prints simulation results with ANSI colors."""

    Colors = Colors

    def __init__(self, use_color: bool = True):
        self.use_color = use_color

    def colored(self, text: str, color: str, bold: bool = False) -> str:
        if not self.use_color:
            return text
        style = Colors.BOLD if bold else ""
        return f"{style}{color}{text}{Colors.RESET}"

    def print_header(self, title: str, char: str = "=", width: int = 78) -> None:
        print(f"\n{self.colored(char * width, Colors.CYAN)}")
        print(f"{self.colored(f' {title} '.center(width), Colors.CYAN, bold=True)}")
        print(f"{self.colored(char * width, Colors.CYAN)}")

    def print_subheader(self, title: str, char: str = "-", width: int = 78) -> None:
        print(f"\n{self.colored(f' {title} ', Colors.WHITE, bold=True)}")
        print(f"{self.colored(char * width, Colors.GRAY)}")

    def _names(self, snapshot: DiagramSnapshot, node_ids: Iterable[str]) -> str:
        names = [snapshot.label_of(n) for n in node_ids]
        return ", ".join(names) if names else "-"

    # =========================================================================
    # Flow
    # =========================================================================

    def display_flow_trace(
        self,
        trace: FlowTrace,
        snapshot: DiagramSnapshot,
        stats: Optional[SimulationStats] = None,
        cursor: Optional[int] = None,
    ) -> None:
        self.print_header(f"Request Flow: {snapshot.label_of(trace.source_node_id)}")

        for level in trace.levels:
            marker = ""
            if cursor is not None and level.depth == cursor:
                marker = self.colored("  <- cursor", Colors.YELLOW, bold=True)
            self.print_subheader(f"Level {level.depth} ({len(level.steps)} hops){marker}")
            for step in level.steps:
                protocol = step.protocol or "-"
                latency = f"{step.latency_ms:g} ms" if step.latency_ms is not None else "default"
                print(
                    f"  {snapshot.label_of(step.from_node_id):<22} -> "
                    f"{snapshot.label_of(step.to_node_id):<22} "
                    f"{protocol:<10} {latency:<10} {self.colored(step.branch_id, Colors.GRAY)}"
                )

        if stats:
            self.print_subheader("Statistics")
            print(f"  {'Hops:':<20} {stats.total_hops}")
            print(f"  {'Nodes Reached:':<20} {stats.path_length}")
            print(f"  {'Protocols:':<20} {', '.join(stats.protocols_used) or '-'}")
            print(f"  {'Total Latency:':<20} {stats.total_latency_ms:g} ms")
            if stats.round_trip_latency_ms is not None:
                print(f"  {'Round Trip:':<20} {stats.round_trip_latency_ms:g} ms")
            print(f"  {'Bottleneck Edge:':<20} {stats.bottleneck_edge_id or '-'}")
            print(f"  {'Branches:':<20} {stats.branch_count}")

    # =========================================================================
    # Failure
    # =========================================================================

    def display_blast_radius(
        self,
        blast: BlastRadius,
        snapshot: DiagramSnapshot,
        stats: Optional[SimulationStats] = None,
    ) -> None:
        self.print_header(f"Blast Radius: {self._names(snapshot, blast.failed_node_ids)}")

        for level in blast.levels:
            print(
                f"  Wave {level.depth}: "
                f"{self.colored(self._names(snapshot, level.node_ids), Colors.YELLOW)} "
                f"{self.colored(f'({len(level.edge_ids)} edges)', Colors.GRAY)}"
            )

        print(f"\n  {'Failed:':<20} {self.colored(self._names(snapshot, blast.failed_node_ids), Colors.RED)}")
        print(f"  {'Affected:':<20} {self.colored(self._names(snapshot, blast.affected_node_ids), Colors.YELLOW)}")
        print(f"  {'Broken Edges:':<20} {len(blast.broken_edge_ids)}")
        if stats:
            color = Colors.RED if stats.impact_percentage >= 50 else Colors.YELLOW
            print(f"  {'Impact:':<20} {self.colored(f'{stats.impact_percentage}%', color, bold=True)}")

    # =========================================================================
    # Chaos
    # =========================================================================

    def display_partition(self, partition: PartitionResult, snapshot: DiagramSnapshot) -> None:
        self.print_header("Network Partition")
        print(f"  {'Group A:':<20} {self.colored(self._names(snapshot, partition.group_a), Colors.GREEN)}")
        print(f"  {'Group B:':<20} {self.colored(self._names(snapshot, partition.group_b), Colors.MAGENTA)}")
        print(f"  {'Severed Edges:':<20} {', '.join(partition.severed_edge_ids) or '-'}")

    def display_chaos(self, chaos: ChaosSession, stats: Optional[SimulationStats] = None) -> None:
        self.print_header(f"Chaos Run: {chaos.round} rounds")
        for event in chaos.events:
            color = EVENT_COLORS.get(event.type, Colors.WHITE)
            print(
                f"  {self.colored(f'[{event.timestamp:8.2f}s]', Colors.GRAY)} "
                f"{self.colored(event.type.value, color):<24} {event.message}"
            )

        if stats:
            self.print_subheader("Statistics")
            print(f"  {'Rounds:':<20} {stats.chaos_rounds}")
            print(f"  {'Failed Now:':<20} {stats.failed_count}")
            print(f"  {'Affected Now:':<20} {stats.affected_count}")
            print(f"  {'Impact:':<20} {stats.impact_percentage}%")
            if stats.chaos_severed_edges:
                print(f"  {'Severed Edges:':<20} {stats.chaos_severed_edges}")
            if stats.chaos_mtbf_ms is not None:
                print(f"  {'MTBF:':<20} {stats.chaos_mtbf_ms} ms")

    def display_rejection(self, reason: Optional[RejectionReason]) -> None:
        text = reason.value if reason else "nothing to do"
        print(self.colored(f"Nothing happened: {text}", Colors.YELLOW))
