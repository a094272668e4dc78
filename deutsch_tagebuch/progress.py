import datetime
import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy import func, select

from . import db
from .clock import Clock, SystemClock
from .errors import ValidationError
from .stores import ProgressStore, SqlProgressStore
from .structured import ChartData, DailyProgressRow, ProgressDelta, StreakResult

logger = logging.getLogger(__name__)

DAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
DEFAULT_WINDOW_DAYS = 7


def _as_date(value: Union[datetime.date, datetime.datetime]) -> datetime.date:
    return value.date() if isinstance(value, datetime.datetime) else value


def compute_streak(
    active_dates: Iterable[Union[datetime.date, datetime.datetime]],
    today: datetime.date,
) -> StreakResult:
    """
    Current and longest runs of consecutive active days.

    The current streak only counts if the latest active day is today or
    yesterday; otherwise it is 0. Several activities on the same day are
    one active day. The longest streak is never below the current one and
    is at least 1 whenever there is any activity.
    """
    dates = sorted({_as_date(d) for d in active_dates}, reverse=True)
    if not dates:
        return StreakResult(current=0, longest=0, last_active=None)

    latest = dates[0]
    current_eligible = (today - latest).days <= 1

    current = 1 if current_eligible else 0
    counting_current = current_eligible
    longest = 0
    run = 1
    for newer, older in zip(dates, dates[1:]):
        if (newer - older).days == 1:
            run += 1
            longest = max(longest, run)
            if counting_current:
                current += 1
        else:
            run = 1
            counting_current = False

    longest = max(longest, current, 1)
    return StreakResult(current=current, longest=longest, last_active=latest)


class ProgressAggregator:
    """Daily progress bookkeeping: one additive row per calendar day."""

    def __init__(self, store: Optional[ProgressStore] = None, clock: Optional[Clock] = None) -> None:
        self.store: ProgressStore = store or SqlProgressStore()
        self.clock: Clock = clock or SystemClock()

    def record_session(
        self,
        date: Optional[datetime.date] = None,
        words_learned: int = 0,
        minutes_practiced: int = 0,
    ) -> db.DailyProgress:
        """Add one written entry to the day's row, creating the row if needed.

        `date` defaults to the server's current calendar day. Store
        failures propagate: losing a day's stats silently is not allowed.
        """
        if words_learned < 0 or minutes_practiced < 0:
            raise ValidationError("Progress counts cannot be negative")
        day = date or self.clock.today()
        delta = ProgressDelta(words_learned=words_learned, entries_written=1, minutes_practiced=minutes_practiced)
        row = self.store.upsert(day, delta)
        logger.debug("Recorded session for %s: +%d words, +%d min", day, words_learned, minutes_practiced)
        return row

    def history(self, days: int = DEFAULT_WINDOW_DAYS) -> List[DailyProgressRow]:
        """Exactly `days` rows ending today, oldest first, missing days zero-filled."""
        if days < 1:
            raise ValidationError("days must be at least 1")
        today = self.clock.today()
        start = today - datetime.timedelta(days=days - 1)
        by_date = {row.date: row for row in self.store.list_range(start, today)}

        window: List[DailyProgressRow] = []
        for offset in range(days):
            day = start + datetime.timedelta(days=offset)
            row = by_date.get(day)
            if row is None:
                window.append(DailyProgressRow(date=day))
            else:
                window.append(DailyProgressRow(
                    date=day,
                    words_learned=row.words_learned or 0,
                    entries_written=row.entries_written or 0,
                    minutes_practiced=row.minutes_practiced or 0,
                ))
        return window

    def chart_data(self, days: int = DEFAULT_WINDOW_DAYS) -> ChartData:
        chart = ChartData()
        for row in self.history(days):
            chart.labels.append(DAY_LABELS[row.date.weekday()])
            chart.words.append(row.words_learned)
            chart.entries.append(row.entries_written)
            chart.minutes.append(row.minutes_practiced)
        return chart

    def streak(self) -> StreakResult:
        return compute_streak(self.store.active_dates(), self.clock.today())

    def overall_stats(self) -> Dict[str, Any]:
        """Dashboard totals; "thisWeek" means the last seven days."""
        now = self.clock.now()
        week_start = now - datetime.timedelta(days=7)
        with db.session_scope() as session:
            vocab_total = session.scalar(select(func.count(db.VocabularyWord.id))) or 0
            vocab_week = session.scalar(
                select(func.count(db.VocabularyWord.id)).where(db.VocabularyWord.first_seen >= week_start)
            ) or 0
            entries_total = session.scalar(select(func.count(db.JournalEntry.id))) or 0
            entries_week = session.scalar(
                select(func.count(db.JournalEntry.id)).where(db.JournalEntry.created_at >= week_start)
            ) or 0
            words_total = session.scalar(select(func.sum(db.JournalEntry.word_count))) or 0
            minutes_total = session.scalar(select(func.sum(db.DailyProgress.minutes_practiced))) or 0

        return {
            "vocabulary": {"total": vocab_total, "thisWeek": vocab_week},
            "entries": {"total": entries_total, "thisWeek": entries_week},
            "words": {"total": words_total},
            "time": {"total": minutes_total},
        }

    def active_days(self) -> Dict[str, Any]:
        """Every day on which a word was first seen or progress was recorded."""
        with db.session_scope() as session:
            vocab_days = session.scalars(select(func.date(db.VocabularyWord.first_seen)).distinct()).all()
            progress_days = session.scalars(select(db.DailyProgress.date)).all()

        days = {d if isinstance(d, datetime.date) else datetime.date.fromisoformat(d) for d in vocab_days if d}
        days.update(progress_days)
        ordered = sorted(days, reverse=True)
        return {"activeDays": len(ordered), "dates": [d.isoformat() for d in ordered]}
