"""
Pytest configuration and fixtures for testing the Wilhelm API.

This module provides:
- Test client fixture for FastAPI app
- An in-memory graph store replacing Neo4j for every endpoint
- Sample vocabulary graphs
- Environment variable overrides to prevent real database connections
"""
import os

import pytest
from fastapi.testclient import TestClient

from tests.mock_helpers import FakeGraphStore

# Override environment variables to prevent real database connections
os.environ.setdefault("NEO4J_URI", "bolt://localhost:7687")
os.environ.setdefault("NEO4J_USERNAME", "neo4j")
os.environ.setdefault("NEO4J_PASSWORD", "test-password")
os.environ.setdefault("NEO4J_DATABASE", "neo4j")

# Import app after env vars are set
from main import app  # noqa: E402


@pytest.fixture
def test_app():
    return app


@pytest.fixture
def client(test_app):
    """
    Create a test client for the FastAPI app.

    raise_server_exceptions=False lets the exception handlers turn errors into
    responses, matching production behavior.
    """
    return TestClient(test_app, raise_server_exceptions=False)


@pytest.fixture
def graph_store():
    """An empty in-memory graph store. Tests add the nodes and relationships they need."""
    return FakeGraphStore()


@pytest.fixture(autouse=True)
def override_graph_store_dependency(test_app, graph_store):
    """
    Route every endpoint to the graph_store fixture through FastAPI's
    dependency_overrides. Runs for every test automatically.
    """
    from db_neo4j import get_graph_store

    def get_fake_store():
        yield graph_store

    test_app.dependency_overrides[get_graph_store] = get_fake_store
    yield
    test_app.dependency_overrides.pop(get_graph_store, None)


@pytest.fixture
def triangle_store(graph_store):
    """A 3-cycle: A -> B -> C -> A."""
    graph_store.add_node("a", label="A")
    graph_store.add_node("b", label="B")
    graph_store.add_node("c", label="C")
    graph_store.add_relationship("a", "b", label="related")
    graph_store.add_relationship("b", "c", label="related")
    graph_store.add_relationship("c", "a", label="related")
    return graph_store


@pytest.fixture
def mensa_store(graph_store):
    """mensa and tabula pointing at each other."""
    graph_store.add_node("n-mensa", label="mensa", language="Latin")
    graph_store.add_node("n-tabula", label="tabula", language="Latin")
    graph_store.add_relationship("n-mensa", "n-tabula", label="related")
    graph_store.add_relationship("n-tabula", "n-mensa", label="related")
    return graph_store
