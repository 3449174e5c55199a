"""
Application Settings

Environment configuration for the simulator.
"""

import os
from dataclasses import dataclass
from typing import Optional

from archsim.domain.models import ChaosConfig, DEFAULT_LATENCY_MS


@dataclass
class Settings:
    """Application settings from environment."""

    # Chaos defaults
    chaos_interval_ms: int = 3000
    chaos_max_failures: int = 2
    chaos_probability: float = 0.3

    # Flow statistics
    default_latency_ms: float = DEFAULT_LATENCY_MS

    # Runtime
    seed: Optional[int] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        seed = os.getenv("ARCHSIM_SEED")
        return cls(
            chaos_interval_ms=int(os.getenv("ARCHSIM_CHAOS_INTERVAL_MS", "3000")),
            chaos_max_failures=int(os.getenv("ARCHSIM_CHAOS_MAX_FAILURES", "2")),
            chaos_probability=float(os.getenv("ARCHSIM_CHAOS_PROBABILITY", "0.3")),
            default_latency_ms=float(os.getenv("ARCHSIM_DEFAULT_LATENCY_MS", str(DEFAULT_LATENCY_MS))),
            seed=int(seed) if seed else None,
            log_level=os.getenv("ARCHSIM_LOG_LEVEL", "INFO").upper(),
        )

    def chaos_config(self) -> ChaosConfig:
        """Default chaos configuration; raises ValueError on out-of-range values."""
        return ChaosConfig(
            interval_ms=self.chaos_interval_ms,
            max_failures_per_round=self.chaos_max_failures,
            failure_probability=self.chaos_probability,
        )
