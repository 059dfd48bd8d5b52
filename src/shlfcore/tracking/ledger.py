# src/shlfcore/tracking/ledger.py
"""
Activity ledger: the append-only source of truth for derived aggregates.

The tracking core only *reads* from a ledger through
:class:`ActivityLedgerProtocol`. :class:`InMemoryActivityLedger` is the
reference implementation used by embedding applications that keep their
records resident, and by the test suite.

Every append bumps :attr:`revision`, which invalidates the counters cached
on a :class:`~shlfcore.models.UserProfile`.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, List, Protocol, Set, runtime_checkable

from ..models import CompletionEvent, ReadingSession, StreakEvent, StreakEventType

logger = logging.getLogger(__name__)


@runtime_checkable
class ActivityLedgerProtocol(Protocol):
    """Read surface of the activity ledger."""

    @property
    def revision(self) -> int: ...

    def sessions_in_range(self, start: datetime, end: datetime) -> List[ReadingSession]: ...
    def completion_events_in_range(self, start: datetime, end: datetime) -> List[CompletionEvent]: ...
    def all_session_dates(self) -> Set[date]: ...
    def all_sessions(self) -> List[ReadingSession]: ...
    def all_completion_events(self) -> List[CompletionEvent]: ...
    def pardoned_days(self) -> Set[date]: ...


class InMemoryActivityLedger:
    """
    Time-ordered, in-memory ledger.

    Only sessions with ``counts_toward_stats`` set are returned by the
    query methods; excluded sessions are kept but never surface.

    Args:
        sessions: Initial reading sessions.
        completions: Initial book completion events.
        streak_events: Initial streak events.

    Example:
        >>> ledger = InMemoryActivityLedger()
        >>> ledger.add_session(ReadingSession(book_id="b1", started_at=now, pages_read=20))
        >>> ledger.revision
        1
    """

    def __init__(
        self,
        sessions: Iterable[ReadingSession] = (),
        completions: Iterable[CompletionEvent] = (),
        streak_events: Iterable[StreakEvent] = (),
    ) -> None:
        self._sessions: List[ReadingSession] = sorted(sessions, key=lambda s: s.started_at)
        self._completions: List[CompletionEvent] = sorted(completions, key=lambda c: c.completed_at)
        self._streak_events: List[StreakEvent] = sorted(streak_events, key=lambda e: e.day)
        self._revision = 0

    @property
    def revision(self) -> int:
        return self._revision

    # ----- appends ------------------------------------------------------------

    def add_session(self, session: ReadingSession) -> ReadingSession:
        self._sessions.append(session)
        self._sessions.sort(key=lambda s: s.started_at)
        self._bump()
        logger.debug(
            "Session logged: book=%s pages=%d minutes=%d",
            session.book_id,
            session.pages_read,
            session.duration_minutes,
        )
        return session

    def add_completion(self, event: CompletionEvent) -> CompletionEvent:
        self._completions.append(event)
        self._completions.sort(key=lambda c: c.completed_at)
        self._bump()
        logger.debug("Book completed: %s at %s", event.book_id, event.completed_at)
        return event

    def add_streak_event(self, event: StreakEvent) -> StreakEvent:
        self._streak_events.append(event)
        self._streak_events.sort(key=lambda e: e.day)
        self._bump()
        return event

    def _bump(self) -> None:
        self._revision += 1

    # ----- queries ------------------------------------------------------------

    def sessions_in_range(self, start: datetime, end: datetime) -> List[ReadingSession]:
        """Counted sessions whose start lies within ``[start, end]``."""
        return [s for s in self.all_sessions() if start <= s.started_at <= end]

    def completion_events_in_range(self, start: datetime, end: datetime) -> List[CompletionEvent]:
        return [c for c in self._completions if start <= c.completed_at <= end]

    def all_session_dates(self) -> Set[date]:
        return {s.day for s in self.all_sessions()}

    def all_sessions(self) -> List[ReadingSession]:
        return [s for s in self._sessions if s.counts_toward_stats]

    def all_completion_events(self) -> List[CompletionEvent]:
        return list(self._completions)

    def streak_events(self, event_type: StreakEventType | None = None) -> List[StreakEvent]:
        if event_type is None:
            return list(self._streak_events)
        return [e for e in self._streak_events if e.type == event_type]

    def pardoned_days(self) -> Set[date]:
        return {e.day for e in self._streak_events if e.type == StreakEventType.SAVED}
