from .api_client import TripApiClient
from .budget import BudgetSummary, active_reminders, summarize_budget
from .session import PersistenceFailure, PlannerSession
from .sync import ChangeSet, diff_snapshots, resync_changes, write_changes

__all__ = [
    "TripApiClient",
    "BudgetSummary",
    "active_reminders",
    "summarize_budget",
    "PersistenceFailure",
    "PlannerSession",
    "ChangeSet",
    "diff_snapshots",
    "resync_changes",
    "write_changes",
]
