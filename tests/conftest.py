# tests/conftest.py
"""
Shared fixtures for shlfcore tests.

Provides a fixed clock, an in-memory ledger and profile store, and
pre-wired engines so day boundaries can be simulated with
``clock.advance()`` instead of real time.
"""

import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add source to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shlfcore.clock import FixedClock
from shlfcore.models import CompletionEvent, ReadingSession, UserProfile
from shlfcore.tracking import (
    AchievementEvaluator,
    GamificationEngine,
    GoalLifecycleManager,
    GoalProgressResolver,
    InMemoryActivityLedger,
    InMemoryProfileStore,
)

# Monday, mid-day
NOW = datetime(2025, 3, 10, 12, 0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    """A clock frozen at NOW."""
    return FixedClock(NOW)


@pytest.fixture
def ledger():
    return InMemoryActivityLedger()


@pytest.fixture
def store():
    return InMemoryProfileStore()


@pytest.fixture
def profile():
    return UserProfile()


@pytest.fixture
def engine(ledger, clock):
    return GamificationEngine(ledger, clock=clock)


@pytest.fixture
def resolver(ledger, clock):
    return GoalProgressResolver(ledger, clock=clock)


@pytest.fixture
def evaluator(engine):
    return AchievementEvaluator(engine)


@pytest.fixture
def manager(store, ledger, clock, engine):
    return GoalLifecycleManager(store, ledger, clock=clock, engine=engine)


@pytest.fixture
def log_session(ledger, clock):
    """Append a reading session at the clock's current time (or *at*)."""

    def _log(pages=10, minutes=15, book_id="book-1", at=None, counts=True):
        return ledger.add_session(
            ReadingSession(
                book_id=book_id,
                started_at=at or clock.now(),
                pages_read=pages,
                duration_minutes=minutes,
                counts_toward_stats=counts,
            )
        )

    return _log


@pytest.fixture
def finish_book(ledger, clock):
    """Append a book completion event at the clock's current time (or *at*)."""

    def _finish(book_id="book-1", at=None):
        return ledger.add_completion(CompletionEvent(book_id=book_id, completed_at=at or clock.now()))

    return _finish
