# views/pages.py

import asyncio
from datetime import datetime
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel

from core.config import settings
from core.models import Crop, CurrentWeather, Expense, Farm, ForecastDay, Task, WeatherAlert
from core.store import FarmRecords
from views.filters import ExpenseFilter, ExpenseSort, TaskFilter, TaskSort, expense_view, task_view
from views.joins import FieldLocation, join_fields
from views.stats import (
    Activity,
    CropTimeline,
    DashboardStats,
    TaskStats,
    WeatherTip,
    crop_timeline,
    dashboard_stats,
    expense_total,
    monthly_expense_total,
    recent_activity,
    task_stats,
    todays_tasks,
    top_categories,
    upcoming_tasks,
    weather_tips,
)


class DashboardPage(BaseModel):
    stats: DashboardStats
    todays_tasks: List[Task]
    upcoming_tasks: List[Task]
    recent_activity: List[Activity]
    weather: Optional[CurrentWeather] = None


class TasksPage(BaseModel):
    tasks: List[Task]
    crops: List[Crop]
    total: int
    stats: TaskStats


class ExpensesPage(BaseModel):
    expenses: List[Expense]
    farms: List[Farm]
    total: int
    filtered_total: float
    monthly_total: float
    top_categories: List[Tuple[str, float]]


class CropRow(BaseModel):
    crop: Crop
    location: FieldLocation
    timeline: CropTimeline


class CropsPage(BaseModel):
    rows: List[CropRow]
    farms: List[Farm]


class WeatherPage(BaseModel):
    current: Optional[CurrentWeather] = None
    forecast: List[ForecastDay]
    alerts: List[WeatherAlert]
    tips: List[WeatherTip]


async def load_dashboard(records: FarmRecords, now: Optional[datetime] = None) -> DashboardPage:
    """Fetches every collection concurrently, then derives the dashboard."""
    now = now or datetime.now()
    farms, crops, tasks, expenses, weather = await asyncio.gather(
        records.farms.get_all(),
        records.crops.get_all(),
        records.tasks.get_all(),
        records.expenses.get_all(),
        records.weather.get_current_weather(),
    )
    return DashboardPage(
        stats=dashboard_stats(farms, crops, tasks, expenses, now),
        todays_tasks=todays_tasks(tasks, now),
        upcoming_tasks=upcoming_tasks(tasks, settings.upcoming_task_limit, now),
        recent_activity=recent_activity(tasks, expenses, limit=settings.recent_activity_limit),
        weather=weather,
    )


async def load_tasks_page(
    records: FarmRecords,
    task_filter: Union[TaskFilter, str] = TaskFilter.ALL,
    sort: Union[TaskSort, str] = TaskSort.DUE_DATE,
    now: Optional[datetime] = None,
) -> TasksPage:
    now = now or datetime.now()
    tasks, crops = await asyncio.gather(records.tasks.get_all(), records.crops.get_all())
    return TasksPage(
        tasks=task_view(tasks, task_filter, sort, now),
        crops=crops,
        total=len(tasks),
        stats=task_stats(tasks, now),
    )


async def load_expenses_page(
    records: FarmRecords,
    expense_filter: Union[ExpenseFilter, str] = ExpenseFilter.ALL,
    sort: Union[ExpenseSort, str] = ExpenseSort.DATE,
    now: Optional[datetime] = None,
) -> ExpensesPage:
    now = now or datetime.now()
    expenses, farms = await asyncio.gather(records.expenses.get_all(), records.farms.get_all())
    shown = expense_view(expenses, expense_filter, sort, farms, now)
    return ExpensesPage(
        expenses=shown,
        farms=farms,
        total=len(expenses),
        filtered_total=expense_total(shown),
        monthly_total=monthly_expense_total(expenses, now),
        top_categories=top_categories(shown, settings.top_category_limit),
    )


async def load_crops_page(records: FarmRecords, now: Optional[datetime] = None) -> CropsPage:
    now = now or datetime.now()
    crops, farms = await asyncio.gather(records.crops.get_all(), records.farms.get_all())
    rows = [
        CropRow(crop=crop, location=location, timeline=crop_timeline(crop, now))
        for crop, location in join_fields(crops, farms)
    ]
    return CropsPage(rows=rows, farms=farms)


async def load_weather_page(records: FarmRecords) -> WeatherPage:
    current, forecast, alerts = await asyncio.gather(
        records.weather.get_current_weather(),
        records.weather.get_forecast(),
        records.weather.get_alerts(),
    )
    return WeatherPage(current=current, forecast=forecast, alerts=alerts, tips=weather_tips(current))
