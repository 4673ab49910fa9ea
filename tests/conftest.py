"""Pytest configuration and fixtures."""
import os

import pytest

# Set test environment variables
os.environ["WORKFLOW_ENV"] = "test"
os.environ["WORKFLOW_TIME_SCALE"] = "0"  # No real waiting in tests
os.environ["WORKFLOW_RANDOM_SEED"] = "1234"


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings and the global session around every test."""
    from workflow_studio.config import reset_settings
    from workflow_studio.session import reset_session

    reset_settings()
    reset_session()
    yield
    reset_settings()
    reset_session()


@pytest.fixture
def graph():
    """Empty workflow graph."""
    from workflow_runtime import WorkflowGraph

    return WorkflowGraph()


@pytest.fixture
def pipeline(graph):
    """Graph with trigger A -> action B -> output C, in that order."""
    a = graph.add_node("trigger", (0, 0), name="A")
    b = graph.add_node("action", (200, 0), name="B")
    c = graph.add_node("output", (400, 0), name="C")
    graph.connect(a, "output", b, "input")
    graph.connect(b, "output", c, "input")
    return graph, [a, b, c]


@pytest.fixture
def notifier():
    from workflow_studio.notifications import MemoryNotifier

    return MemoryNotifier()


@pytest.fixture
def sample_tools():
    """Tool records as the catalog collaborator supplies them."""
    return [
        {
            "id": "tool-1",
            "name": "Blog Writer",
            "description": "Writes long-form articles",
            "category": "Content Creation",
            "image": "https://example.com/blog.png",
            "rating": 4.7,
        },
        {
            "id": "tool-2",
            "name": "Image Studio",
            "description": "Generates images from prompts",
            "category": "Content Creation",
            "image": "https://example.com/image.png",
            "rating": 4.5,
        },
        {
            "id": "tool-3",
            "name": "Sheet Analyzer",
            "description": "Summarizes spreadsheets",
            "category": "Data Processing",
            "image": "https://example.com/sheet.png",
            "rating": 4.2,
        },
        {
            "id": "tool-4",
            "name": "Support Bot",
            "description": "Answers customer questions",
            "category": "Communication",
            "image": "https://example.com/bot.png",
            "rating": 4.9,
        },
    ]


@pytest.fixture
def session(notifier, sample_tools):
    """Session with deterministic outcomes and a recording notifier."""
    from workflow_runtime import AlwaysSucceed
    from workflow_studio.catalog import ToolCatalog
    from workflow_studio.session import WorkflowSession

    return WorkflowSession(
        tools=ToolCatalog(sample_tools),
        notifier=notifier,
        outcome_source=AlwaysSucceed(),
        sleep=lambda duration_ms: None,
    )
