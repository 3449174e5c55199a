"""
Chaos Models

Configuration of chaos rounds and the event log they produce.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Dict, Any, FrozenSet, Optional, Tuple

from ..enums import ChaosSubMode, ChaosEventType


@dataclass(frozen=True)
class ChaosConfig:
    """
    Chaos run parameters.

    Attributes:
        sub_mode: random node failures or network partitions
        interval_ms: delay between rounds while auto-running
        max_failures_per_round: upper bound on nodes failed per round
        failure_probability: per-candidate Bernoulli success probability
        protected_node_ids: nodes immune to chaos
    """
    sub_mode: ChaosSubMode = ChaosSubMode.RANDOM_FAILURE
    interval_ms: int = 3000
    max_failures_per_round: int = 2
    failure_probability: float = 0.3
    protected_node_ids: FrozenSet[str] = frozenset()

    def __post_init__(self):
        object.__setattr__(self, "sub_mode", ChaosSubMode(self.sub_mode))
        object.__setattr__(self, "protected_node_ids", frozenset(self.protected_node_ids))
        if self.interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {self.interval_ms}")
        if self.max_failures_per_round < 0:
            raise ValueError(f"max_failures_per_round must be >= 0, got {self.max_failures_per_round}")
        if not 0.0 <= self.failure_probability <= 1.0:
            raise ValueError(f"failure_probability must be within [0, 1], got {self.failure_probability}")

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000.0

    def with_changes(self, **changes) -> "ChaosConfig":
        return replace(self, **changes)

    def toggle_protected(self, node_id: str) -> "ChaosConfig":
        protected = set(self.protected_node_ids)
        protected.symmetric_difference_update({node_id})
        return replace(self, protected_node_ids=frozenset(protected))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sub_mode": self.sub_mode.value,
            "interval_ms": self.interval_ms,
            "max_failures_per_round": self.max_failures_per_round,
            "failure_probability": self.failure_probability,
            "protected_node_ids": sorted(self.protected_node_ids),
        }


@dataclass(frozen=True)
class ChaosEvent:
    """A single entry of the chaos event log."""
    round: int
    timestamp: float
    type: ChaosEventType
    message: str
    node_ids: Tuple[str, ...] = ()
    edge_ids: Tuple[str, ...] = ()
    affected_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round": self.round,
            "timestamp": self.timestamp,
            "type": self.type.value,
            "message": self.message,
            "node_ids": list(self.node_ids),
            "edge_ids": list(self.edge_ids),
            "affected_count": self.affected_count,
        }
