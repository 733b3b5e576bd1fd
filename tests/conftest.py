import pytest

from vocab.scheduling import (
    InMemoryReviewStore,
    ReviewState,
    SqlReviewStore,
    create_db_engine,
    get_session_factory,
    init_db,
)
from vocab.scheduling.constants import MS_PER_DAY

# Shared test epoch, 2023-11-14T22:13:20Z; test modules import it from here
T0 = 1_700_000_000_000


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return get_session_factory(engine)


@pytest.fixture
def sql_store(session_factory):
    return SqlReviewStore(session_factory)


@pytest.fixture
def memory_store():
    return InMemoryReviewStore()


@pytest.fixture
def steady_state():
    """An item reviewed five times, last at T0."""
    return ReviewState(
        stability=2.0,
        difficulty=5.0,
        retrievability=0.9,
        last_reviewed_at=T0,
        next_review_at=T0 + 4 * MS_PER_DAY,
        total_reviews=5,
        success_count=4,
        last_grade=0.8,
    )
