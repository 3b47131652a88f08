"""Budget totals and reminder listings derived from an itinerary."""

from dataclasses import dataclass, field
from decimal import Decimal

from trippal.core.projector import project_itinerary
from trippal.models import Itinerary, Reminder


def _add_totals(into: dict[str, Decimal], totals: dict[str, Decimal]) -> None:
    for currency, amount in totals.items():
        into[currency] = into.get(currency, Decimal("0")) + amount


@dataclass
class DayBudget:
    day_id: str
    title: str
    totals: dict[str, Decimal] = field(default_factory=dict)


@dataclass
class BudgetSummary:
    """Expense totals per day and for the whole trip, kept per currency."""

    days: list[DayBudget] = field(default_factory=list)
    totals: dict[str, Decimal] = field(default_factory=dict)

    def total(self, currency: str = "USD") -> Decimal:
        return self.totals.get(currency.upper(), Decimal("0"))

    def for_day(self, day_id: str) -> DayBudget | None:
        for day in self.days:
            if day.day_id == day_id:
                return day
        return None


def summarize_budget(itinerary: Itinerary) -> BudgetSummary:
    """Sum activity expenses for each day in display order."""
    summary = BudgetSummary()
    for view in project_itinerary(itinerary):
        day_budget = DayBudget(day_id=view.day_id, title=view.title)
        for activity in view.activities:
            _add_totals(day_budget.totals, activity.total_expenses())
        _add_totals(summary.totals, day_budget.totals)
        summary.days.append(day_budget)
    return summary


@dataclass(frozen=True)
class ReminderEntry:
    day_id: str
    day_title: str
    activity_id: str
    activity_content: str
    reminder: Reminder


def active_reminders(itinerary: Itinerary) -> list[ReminderEntry]:
    """List active reminders in itinerary order."""
    entries = []
    for view in project_itinerary(itinerary):
        for activity in view.activities:
            for reminder in activity.reminders:
                if reminder.is_active:
                    entries.append(
                        ReminderEntry(
                            day_id=view.day_id,
                            day_title=view.title,
                            activity_id=activity.id,
                            activity_content=activity.content,
                            reminder=reminder,
                        )
                    )
    return entries
