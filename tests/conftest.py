"""
Test Configuration and Fixtures
================================

Shared pytest fixtures for the archsim test suite.

Usage:
    pytest tests/                    # Run all tests
    pytest tests/ -v                 # Verbose output
    pytest tests/ -k "chaos"         # Run only chaos tests
    pytest tests/ -m "not integration"  # Skip the CLI end-to-end tests
    pytest tests/ --quick            # Quick subset
"""

import json
import random
from pathlib import Path
from typing import Dict, Any

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from archsim.domain.models import DiagramEdge, DiagramNode
from archsim.adapters.outbound.persistence import InMemoryGraphAccessor
from archsim.adapters.outbound.scheduling import ManualScheduler
from archsim.application.services import SimulationOrchestrator


# =============================================================================
# Custom Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


def pytest_addoption(parser):
    """Add custom command line options"""
    parser.addoption(
        "--quick",
        action="store_true",
        default=False,
        help="Skip slow tests",
    )


def pytest_collection_modifyitems(config, items):
    """Skip slow tests if --quick is specified"""
    if config.getoption("--quick"):
        skip_slow = pytest.mark.skip(reason="Skipped with --quick")
        for item in items:
            if "slow" in item.keywords:
                item.add_marker(skip_slow)


# =============================================================================
# Diagram Fixtures
# =============================================================================

def nodes(*ids):
    return [DiagramNode(id=i) for i in ids]


@pytest.fixture
def chain_accessor() -> InMemoryGraphAccessor:
    """A -> B -> C -> D"""
    return InMemoryGraphAccessor(
        nodes("A", "B", "C", "D"),
        [
            DiagramEdge("e1", "A", "B", protocol="http", latency_ms=10),
            DiagramEdge("e2", "B", "C", protocol="grpc"),
            DiagramEdge("e3", "C", "D", protocol="http", latency_ms=50),
        ],
    )


@pytest.fixture
def diamond_accessor() -> InMemoryGraphAccessor:
    """A -> B, A -> C, B -> D, C -> D"""
    return InMemoryGraphAccessor(
        nodes("A", "B", "C", "D"),
        [
            DiagramEdge("ab", "A", "B"),
            DiagramEdge("ac", "A", "C"),
            DiagramEdge("bd", "B", "D"),
            DiagramEdge("cd", "C", "D"),
        ],
    )


@pytest.fixture
def bidirectional_accessor() -> InMemoryGraphAccessor:
    """A -> B, C <-> B (declared C -> B, bidirectional)"""
    return InMemoryGraphAccessor(
        nodes("A", "B", "C"),
        [
            DiagramEdge("ab", "A", "B", protocol="http"),
            DiagramEdge("cb", "C", "B", protocol="websocket", bidirectional=True),
        ],
    )


@pytest.fixture
def mixed_accessor() -> InMemoryGraphAccessor:
    """Architecture nodes plus a group and a comment wired into the graph."""
    return InMemoryGraphAccessor(
        [
            DiagramNode("gw", label="Gateway"),
            DiagramNode("svc", label="Orders"),
            DiagramNode("db", label="Postgres"),
            DiagramNode("grp", kind="group", label="Backend"),
            DiagramNode("note", kind="comment", label="Needs review"),
        ],
        [
            DiagramEdge("e1", "gw", "svc", protocol="https"),
            DiagramEdge("e2", "svc", "db", protocol="tcp", latency_ms=5),
            DiagramEdge("e3", "svc", "grp"),
            DiagramEdge("e4", "note", "db"),
        ],
    )


@pytest.fixture
def five_node_accessor() -> InMemoryGraphAccessor:
    """Star of five services behind a gateway."""
    return InMemoryGraphAccessor(
        nodes("gw", "s1", "s2", "s3", "s4"),
        [DiagramEdge(f"e{i}", "gw", f"s{i}") for i in range(1, 5)],
    )


@pytest.fixture
def diagram_data() -> Dict[str, Any]:
    """Editor-style diagram document."""
    return {
        "nodes": [
            {"id": "gw", "type": "architecture", "data": {"label": "Gateway"}},
            {"id": "svc", "type": "architecture", "data": {"label": "Orders"}},
            {"id": "db", "type": "architecture", "data": {"label": "Postgres"}},
            {"id": "grp", "type": "group", "data": {"label": "Backend"}},
        ],
        "edges": [
            {"id": "e1", "source": "gw", "target": "svc", "data": {"protocol": "https", "latencyMs": 20}},
            {"id": "e2", "source": "svc", "target": "db", "data": {"protocol": "tcp", "bidirectional": True}},
        ],
    }


@pytest.fixture
def diagram_file(tmp_path, diagram_data) -> Path:
    path = tmp_path / "diagram.json"
    path.write_text(json.dumps(diagram_data))
    return path


# =============================================================================
# Runtime Fixtures
# =============================================================================

@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def make_orchestrator(scheduler, rng):
    """Factory building an orchestrator over a given accessor."""
    def _make(accessor, **kwargs):
        return SimulationOrchestrator(accessor, scheduler, rng=rng, **kwargs)
    return _make
