import pytest
from sqlalchemy.pool import StaticPool

from school.core.database import build_engine, ensure_created
from school.data.context import SchoolContext


def memory_engine():
    # One shared connection so every session sees the same in-memory database
    return build_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


@pytest.fixture
def empty_engine():
    engine = memory_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def engine(empty_engine):
    ensure_created(empty_engine)
    return empty_engine


@pytest.fixture
def db(engine):
    with SchoolContext(bind=engine) as context:
        yield context


@pytest.fixture
def other_db(engine):
    """A second, independent unit of work on the same database."""
    with SchoolContext(bind=engine) as context:
        yield context
