"""
Dayboard Summary Service

Builds a day's summary from its note and to-dos and saves it on the day.
"""

from typing import Optional, Tuple

from .ai import DayboardAI, DaySummaryContext, SummaryResult, TodoItem, get_ai
from .days import DayService
from .stores import ChildStore, DayRecord, TodoRecord


class SummaryService:
    """Generate and store day summaries."""

    def __init__(
        self,
        days: DayService,
        todos: ChildStore[TodoRecord],
        ai: Optional[DayboardAI] = None
    ):
        self.days = days
        self.todos = todos
        self.ai = ai or get_ai()

    def _summarize(self, day: DayRecord) -> Tuple[DayRecord, SummaryResult]:
        context = DaySummaryContext(
            date=day.date,
            daily_note=day.daily_note,
            todos=[TodoItem(title=t.title, is_completed=t.is_completed) for t in self.todos.list(day.id)]
        )
        result = self.ai.generate_summary(context)
        saved = self.days.update_day(day.id, {"summary": result.content})
        return saved, result

    def summarize_day(self, day_id: str, user_id: Optional[str] = None) -> Tuple[DayRecord, SummaryResult]:
        """Regenerate the summary of an existing day, optionally one the caller owns."""
        return self._summarize(self.days.get_by_id(day_id, user_id))

    def summarize_date(self, date: str, user_id: str) -> Tuple[DayRecord, SummaryResult]:
        """Resolve the day for date (creating it if needed), then summarise it."""
        return self._summarize(self.days.resolve_day(date, user_id))
