# tests/tracking/test_ledger.py
"""Tests for the in-memory activity ledger."""

from datetime import date, datetime, timedelta

from shlfcore.models import CompletionEvent, ReadingSession, StreakEvent, StreakEventType
from shlfcore.tracking import ActivityLedgerProtocol, InMemoryActivityLedger


class TestRevision:
    """Every append invalidates cached counters."""

    def test_starts_at_zero(self, ledger):
        assert ledger.revision == 0

    def test_appends_bump_revision(self, ledger, log_session, finish_book, now):
        log_session()
        finish_book()
        ledger.add_streak_event(StreakEvent(day=now.date(), type=StreakEventType.SAVED))
        assert ledger.revision == 3

    def test_initial_entries_do_not_bump(self, now):
        ledger = InMemoryActivityLedger(
            sessions=[ReadingSession(book_id="b1", started_at=now, pages_read=5)]
        )
        assert ledger.revision == 0
        assert len(ledger.all_sessions()) == 1

    def test_satisfies_protocol(self, ledger):
        assert isinstance(ledger, ActivityLedgerProtocol)


class TestQueries:
    """Tests for the ledger query surface."""

    def test_sessions_kept_in_time_order(self, ledger, log_session, now):
        later = log_session(at=now + timedelta(hours=2))
        earlier = log_session(at=now - timedelta(hours=2))
        assert [s.id for s in ledger.all_sessions()] == [earlier.id, later.id]

    def test_range_is_inclusive(self, ledger, log_session):
        start = datetime(2025, 3, 10, 0, 0)
        end = datetime(2025, 3, 10, 23, 59)
        log_session(at=start)
        log_session(at=end)
        log_session(at=end + timedelta(minutes=1))
        assert len(ledger.sessions_in_range(start, end)) == 2

    def test_excluded_sessions_never_surface(self, ledger, log_session, now):
        log_session(pages=40)
        log_session(pages=99, at=now - timedelta(days=3), counts=False)
        assert [s.pages_read for s in ledger.all_sessions()] == [40]
        assert ledger.all_session_dates() == {now.date()}
        assert ledger.sessions_in_range(now - timedelta(days=5), now) == ledger.all_sessions()

    def test_completion_events_in_range(self, ledger, finish_book, now):
        finish_book("b1", at=now - timedelta(days=40))
        finish_book("b2", at=now)
        events = ledger.completion_events_in_range(now - timedelta(days=1), now)
        assert [e.book_id for e in events] == ["b2"]
        assert len(ledger.all_completion_events()) == 2

    def test_pardoned_days(self, ledger):
        ledger.add_streak_event(StreakEvent(day=date(2025, 3, 8), type=StreakEventType.SAVED))
        ledger.add_streak_event(StreakEvent(day=date(2025, 3, 6), type=StreakEventType.LOST))
        assert ledger.pardoned_days() == {date(2025, 3, 8)}
        assert len(ledger.streak_events()) == 2
        assert [e.type for e in ledger.streak_events(StreakEventType.LOST)] == [StreakEventType.LOST]

    def test_query_results_are_copies(self, ledger, finish_book):
        finish_book()
        ledger.all_completion_events().clear()
        assert len(ledger.all_completion_events()) == 1
        assert isinstance(ledger.all_completion_events()[0], CompletionEvent)
