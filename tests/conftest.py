"""Pytest configuration and fixtures."""
import random
from datetime import datetime, timezone

import pytest


@pytest.fixture
def editor_config(tmp_path):
    from flowdesk.config import EditorConfig

    return EditorConfig(workflow_dir=str(tmp_path / "workflows"))


@pytest.fixture
def store(editor_config):
    """An empty graph store."""
    from flowdesk.workflow import GraphStore

    return GraphStore(config=editor_config)


@pytest.fixture
def sample_graph():
    """gateway → kafka → actor, with a second edge gateway → actor."""
    from flowdesk.workflow import (
        NodeAction,
        NodeData,
        NodePosition,
        WorkflowEdge,
        WorkflowGraph,
        WorkflowNode,
    )

    return WorkflowGraph(
        nodes=[
            WorkflowNode(
                id="n1", type="gateway",
                position=NodePosition(x=10.4, y=20.6),
                data=NodeData(
                    label="Ingress", nType="gateway",
                    actions=[NodeAction(label="route", formula="x > 1")],
                ),
            ),
            WorkflowNode(
                id="n2", type="kafka",
                position=NodePosition(x=200, y=40),
                data=NodeData(
                    label="Orders", nType="kafka",
                    metadata={"kafkaTopics": "orders,refunds"},
                ),
            ),
            WorkflowNode(
                id="n3", type="actor",
                position=NodePosition(x=400.5, y=-12.5),
                data=NodeData(label="Replier", nType="actor", metadata={"reply": "true"}),
            ),
        ],
        edges=[
            WorkflowEdge(id="c1", source="n1", target="n2"),
            WorkflowEdge(id="c2", source="n2", target="n3", label="publish"),
            WorkflowEdge(id="c3", source="n1", target="n3"),
        ],
    )


class FixedClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return datetime(2024, 1, 1, 0, 0, self.calls % 60, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def simulator(clock):
    from flowdesk.config import SimulatorConfig
    from flowdesk.simulator import RegistrationSimulator

    return RegistrationSimulator(
        SimulatorConfig.instant(),
        rng=random.Random(1234),
        clock=clock,
    )


@pytest.fixture
def valid_user():
    return {
        "name": "Alex",
        "email": "alex@example.com",
        "age": 30,
        "region": "EU",
        "registrationDate": "2024-01-01T00:00:00+00:00",
    }


@pytest.fixture
def invalid_user():
    return {
        "name": "Sam",
        "email": "invalid-email",
        "age": 12,
        "region": "US",
        "registrationDate": "2024-01-01T00:00:00+00:00",
    }
