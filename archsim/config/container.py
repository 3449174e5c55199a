"""
Dependency Injection Container

Wires ports to adapters and manages service lifecycle.
"""

import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from .settings import Settings

# Import ports
from archsim.application.ports.outbound.graph_accessor import IGraphAccessor
from archsim.application.ports.outbound.scheduler import IScheduler

# Import adapters
from archsim.adapters.outbound.persistence import InMemoryGraphAccessor, JsonDiagramAccessor
from archsim.adapters.outbound.scheduling import ManualScheduler
from archsim.adapters.inbound.cli.display import ConsoleDisplay

# Import application services
from archsim.application.services.simulation_orchestrator import SimulationOrchestrator
from archsim.domain.services import SimulationStatsCalculator


@dataclass
class Container:
    """
    Dependency injection container.

    Wires hexagonal architecture components:
    - Ports define contracts
    - Adapters implement ports
    - Services orchestrate domain logic

    Without a diagram path the accessor is an empty in-memory diagram;
    without a scheduler the virtual-clock ManualScheduler is used.
    """
    settings: Settings = field(default_factory=Settings)
    diagram_path: Optional[Union[str, Path]] = None

    _accessor: Optional[IGraphAccessor] = field(default=None, repr=False)
    _scheduler: Optional[IScheduler] = field(default=None, repr=False)
    _rng: Optional[random.Random] = field(default=None, repr=False)
    _orchestrator: Optional[SimulationOrchestrator] = field(default=None, repr=False)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        diagram_path: Optional[Union[str, Path]] = None,
    ) -> "Container":
        """Create container from settings."""
        return cls(settings=settings, diagram_path=diagram_path)

    def graph_accessor(self) -> IGraphAccessor:
        """Get the graph accessor singleton."""
        if not self._accessor:
            if self.diagram_path is not None:
                self._accessor = JsonDiagramAccessor(self.diagram_path)
            else:
                self._accessor = InMemoryGraphAccessor()
        return self._accessor

    def use_accessor(self, accessor: IGraphAccessor) -> None:
        self._accessor = accessor

    def scheduler(self) -> IScheduler:
        if not self._scheduler:
            self._scheduler = ManualScheduler()
        return self._scheduler

    def use_scheduler(self, scheduler: IScheduler) -> None:
        """Swap the scheduler; must happen before the orchestrator is built."""
        self._scheduler = scheduler

    def rng(self) -> random.Random:
        """Random source shared by chaos selection and partitioning."""
        if not self._rng:
            self._rng = random.Random(self.settings.seed)
        return self._rng

    def stats_calculator(self) -> SimulationStatsCalculator:
        return SimulationStatsCalculator(default_latency_ms=self.settings.default_latency_ms)

    def simulation_service(self) -> SimulationOrchestrator:
        """Get the simulation orchestrator singleton."""
        if not self._orchestrator:
            self._orchestrator = SimulationOrchestrator(
                accessor=self.graph_accessor(),
                scheduler=self.scheduler(),
                rng=self.rng(),
                chaos_config=self.settings.chaos_config(),
                stats_calculator=self.stats_calculator(),
            )
        return self._orchestrator

    def display_service(self) -> ConsoleDisplay:
        """Get console display adapter."""
        return ConsoleDisplay()

    def close(self) -> None:
        """Stop the session and cancel any pending chaos repeat."""
        if self._orchestrator:
            self._orchestrator.close()
            self._orchestrator = None
