# views/stats.py

from collections import Counter
from datetime import datetime
from typing import Dict, Iterable, List, Literal, Optional, Tuple

from pydantic import BaseModel

from core.dates import days_between, in_month, is_overdue, is_this_week, is_today, is_tomorrow
from core.models import Crop, CurrentWeather, Expense, Farm, Task

ACTIVE_CROP_STATUSES = ("planted", "growing", "flowering", "fruiting")


class DashboardStats(BaseModel):
    total_farms: int
    active_crops: int
    pending_tasks: int
    monthly_expenses: float


class TaskStats(BaseModel):
    total: int
    completed: int
    pending: int
    overdue: int
    today: int


class Activity(BaseModel):
    """One row of the dashboard's recent activity feed."""
    id: int
    type: Literal["task", "expense"]
    title: str
    date: datetime


class CropTimeline(BaseModel):
    days_planted: int
    # negative once the expected harvest date has passed
    days_to_harvest: Optional[int] = None


class WeatherTip(BaseModel):
    level: Literal["danger", "info", "warning", "success"]
    title: str
    message: str


def monthly_expense_total(expenses: Iterable[Expense], now: Optional[datetime] = None) -> float:
    """Sum of expenses dated in now's calendar month (month and year must both match)."""
    now = now or datetime.now()
    return sum(e.amount for e in expenses if in_month(e.date, now.year, now.month))


def dashboard_stats(
    farms: Iterable[Farm],
    crops: Iterable[Crop],
    tasks: Iterable[Task],
    expenses: Iterable[Expense],
    now: Optional[datetime] = None,
) -> DashboardStats:
    return DashboardStats(
        total_farms=len(list(farms)),
        active_crops=sum(1 for c in crops if c.status in ACTIVE_CROP_STATUSES),
        pending_tasks=sum(1 for t in tasks if not t.completed),
        monthly_expenses=monthly_expense_total(expenses, now),
    )


def task_stats(tasks: Iterable[Task], now: Optional[datetime] = None) -> TaskStats:
    tasks = list(tasks)
    now = now or datetime.now()
    return TaskStats(
        total=len(tasks),
        completed=sum(1 for t in tasks if t.completed),
        pending=sum(1 for t in tasks if not t.completed),
        overdue=sum(1 for t in tasks if is_overdue(t.due_date, now) and not t.completed),
        today=sum(1 for t in tasks if is_today(t.due_date, now) and not t.completed),
    )


def status_counts(crops: Iterable[Crop]) -> Dict[str, int]:
    return dict(Counter(crop.status for crop in crops))


def priority_counts(tasks: Iterable[Task]) -> Dict[str, int]:
    return dict(Counter(task.priority for task in tasks))


def category_counts(expenses: Iterable[Expense]) -> Dict[str, int]:
    return dict(Counter(expense.category for expense in expenses))


def expense_total(expenses: Iterable[Expense]) -> float:
    return sum(expense.amount for expense in expenses)


def category_totals(expenses: Iterable[Expense]) -> Dict[str, float]:
    """Amount per category, keyed in order of first appearance."""
    totals: Dict[str, float] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, 0) + expense.amount
    return totals


def top_categories(expenses: Iterable[Expense], limit: int = 5) -> List[Tuple[str, float]]:
    """Largest category totals first; equal totals keep first-appearance order."""
    ranked = sorted(category_totals(expenses).items(), key=lambda item: item[1], reverse=True)
    return ranked[:limit]


def todays_tasks(tasks: Iterable[Task], now: Optional[datetime] = None) -> List[Task]:
    now = now or datetime.now()
    return [t for t in tasks if not t.completed and is_today(t.due_date, now)]


def upcoming_tasks(tasks: Iterable[Task], limit: int = 5, now: Optional[datetime] = None) -> List[Task]:
    """Open tasks due tomorrow or any day of the current week, in collection order."""
    now = now or datetime.now()
    upcoming = [
        t for t in tasks
        if not t.completed and (is_tomorrow(t.due_date, now) or is_this_week(t.due_date, now))
    ]
    return upcoming[:limit]


def recent_activity(
    tasks: Iterable[Task],
    expenses: Iterable[Expense],
    task_limit: int = 3,
    expense_limit: int = 2,
    limit: int = 5,
) -> List[Activity]:
    """
    Merged feed of the most recently due completed tasks and the most recent
    expenses, newest first.
    """
    done = sorted((t for t in tasks if t.completed), key=lambda t: t.due_date, reverse=True)
    latest = sorted(expenses, key=lambda e: e.date, reverse=True)

    feed = [
        Activity(id=t.id, type="task", title=f"Completed: {t.title}", date=t.due_date)
        for t in done[:task_limit]
    ]
    feed += [
        Activity(id=e.id, type="expense", title=f"{e.category}: ${e.amount:.2f}", date=e.date)
        for e in latest[:expense_limit]
    ]
    return sorted(feed, key=lambda a: a.date, reverse=True)[:limit]


def crop_timeline(crop: Crop, now: Optional[datetime] = None) -> CropTimeline:
    now = now or datetime.now()
    return CropTimeline(
        days_planted=days_between(now, crop.planting_date),
        days_to_harvest=days_between(crop.expected_harvest, now) if crop.expected_harvest else None,
    )


def weather_tips(current: Optional[CurrentWeather]) -> List[WeatherTip]:
    tips = []
    if current and current.temperature > 85:
        tips.append(WeatherTip(level="danger", title="High Temperature Alert",
                               message="Consider extra watering for heat-sensitive crops."))
    if current and current.precipitation > 70:
        tips.append(WeatherTip(level="info", title="Rain Expected",
                               message="Good time to skip irrigation. Check for drainage issues."))
    if current and current.wind_speed > 15:
        tips.append(WeatherTip(level="warning", title="Windy Conditions",
                               message="Avoid spraying pesticides or fertilizers."))
    if not tips:
        tips.append(WeatherTip(level="success", title="Good Conditions",
                               message="Perfect weather for most farm activities."))
    return tips
