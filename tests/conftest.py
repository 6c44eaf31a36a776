"""Shared pytest fixtures for growthboard tests."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from growthboard.db.schema import Base
from growthboard.db.session import dispose_engines
from growthboard.models.domain import (
    Board,
    BoardConfig,
    DimensionDefinition,
    Experiment,
    MetricDefinition,
)
from growthboard.store.memory import InMemoryStore
from growthboard.store.sql import SqlStore
from growthboard.workspace import Workspace


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def session(engine):
    """Create a database session for testing."""
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def sql_store():
    """SqlStore on a fresh in-memory database."""
    dispose_engines()
    store = SqlStore(":memory:")
    yield store
    dispose_engines()


@pytest.fixture
def ice_board():
    """Board in default ICE mode with two metrics."""
    return Board(
        id="b-ice",
        name="Growth",
        description="",
        created_at="2024-01-01T00:00:00+00:00",
        config=BoardConfig(
            metrics=[
                MetricDefinition(id="m-conv", name="Conversion", unit="%"),
                MetricDefinition(id="m-rev", name="Revenue", unit="$"),
            ]
        ),
    )


@pytest.fixture
def custom_board():
    """Board scored on a single custom 1-5 dimension."""
    return Board(
        id="b-custom",
        name="Strategy",
        description="",
        created_at="2024-01-01T00:00:00+00:00",
        config=BoardConfig(
            dimensions=[DimensionDefinition(id="strategic", name="Strategic fit", min=1, max=5)],
            use_custom_dimensions=True,
        ),
    )


@pytest.fixture
def experiment():
    """Unlocked experiment with ICE 9/7/4."""
    return Experiment(
        id="e-1",
        board_id="b-ice",
        title="Checkout redesign",
        description="Fewer fields will lift conversion",
        ice_impact=9,
        ice_confidence=7,
        ice_ease=4,
        created_at="2024-03-01T00:00:00+00:00",
    )


@pytest.fixture
def store(ice_board, custom_board, experiment):
    """In-memory store holding the two boards and one experiment."""
    return InMemoryStore(boards=[ice_board, custom_board], experiments=[experiment])


@pytest.fixture
def workspace(store):
    """Loaded workspace over the in-memory store."""
    ws = Workspace(store, owner="Alice")
    ws.load()
    return ws
