# views/filters.py

from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Union

from core.dates import in_month, is_overdue, is_today, is_tomorrow, previous_month
from core.models import Expense, Farm, Task
from views.joins import farm_name

PRIORITY_RANK = {"high": 3, "medium": 2, "low": 1}


class TaskFilter(str, Enum):
    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"
    TODAY = "today"
    TOMORROW = "tomorrow"
    OVERDUE = "overdue"
    HIGH = "high"


class TaskSort(str, Enum):
    DUE_DATE = "dueDate"
    PRIORITY = "priority"
    TYPE = "type"
    COMPLETED = "completed"


class ExpenseFilter(str, Enum):
    ALL = "all"
    THIS_MONTH = "thisMonth"
    LAST_MONTH = "lastMonth"
    SEEDS = "seeds"
    FERTILIZER = "fertilizer"
    EQUIPMENT = "equipment"
    FUEL = "fuel"
    LABOR = "labor"


class ExpenseSort(str, Enum):
    DATE = "date"
    AMOUNT = "amount"
    CATEGORY = "category"
    FARM = "farm"


TASK_FILTER_LABELS = {
    TaskFilter.ALL: "All Tasks",
    TaskFilter.PENDING: "Pending",
    TaskFilter.COMPLETED: "Completed",
    TaskFilter.TODAY: "Due Today",
    TaskFilter.TOMORROW: "Due Tomorrow",
    TaskFilter.OVERDUE: "Overdue",
    TaskFilter.HIGH: "High Priority",
}

TASK_SORT_LABELS = {
    TaskSort.DUE_DATE: "Due Date",
    TaskSort.PRIORITY: "Priority",
    TaskSort.TYPE: "Type",
    TaskSort.COMPLETED: "Status",
}

EXPENSE_FILTER_LABELS = {
    ExpenseFilter.ALL: "All Expenses",
    ExpenseFilter.THIS_MONTH: "This Month",
    ExpenseFilter.LAST_MONTH: "Last Month",
    ExpenseFilter.SEEDS: "Seeds & Plants",
    ExpenseFilter.FERTILIZER: "Fertilizer",
    ExpenseFilter.EQUIPMENT: "Equipment",
    ExpenseFilter.FUEL: "Fuel",
    ExpenseFilter.LABOR: "Labor",
}

EXPENSE_SORT_LABELS = {
    ExpenseSort.DATE: "Date",
    ExpenseSort.AMOUNT: "Amount",
    ExpenseSort.CATEGORY: "Category",
    ExpenseSort.FARM: "Farm",
}


def _task_predicate(task_filter: TaskFilter, now: datetime) -> Callable[[Task], bool]:
    predicates: Dict[TaskFilter, Callable[[Task], bool]] = {
        TaskFilter.ALL: lambda t: True,
        TaskFilter.PENDING: lambda t: not t.completed,
        TaskFilter.COMPLETED: lambda t: t.completed,
        TaskFilter.TODAY: lambda t: is_today(t.due_date, now) and not t.completed,
        TaskFilter.TOMORROW: lambda t: is_tomorrow(t.due_date, now) and not t.completed,
        TaskFilter.OVERDUE: lambda t: is_overdue(t.due_date, now) and not t.completed,
        TaskFilter.HIGH: lambda t: t.priority == "high" and not t.completed,
    }
    return predicates[task_filter]


def filter_tasks(
    tasks: Iterable[Task],
    task_filter: Union[TaskFilter, str] = TaskFilter.ALL,
    now: Optional[datetime] = None,
) -> List[Task]:
    """Subset of tasks matching the filter. Unknown filter keys raise ValueError."""
    predicate = _task_predicate(TaskFilter(task_filter), now or datetime.now())
    return [task for task in tasks if predicate(task)]


def sort_tasks(tasks: Iterable[Task], sort: Union[TaskSort, str] = TaskSort.DUE_DATE) -> List[Task]:
    sort = TaskSort(sort)
    if sort is TaskSort.PRIORITY:
        return sorted(tasks, key=lambda t: PRIORITY_RANK[t.priority], reverse=True)
    if sort is TaskSort.TYPE:
        return sorted(tasks, key=lambda t: t.type.casefold())
    if sort is TaskSort.COMPLETED:
        return sorted(tasks, key=lambda t: t.completed)
    return sorted(tasks, key=lambda t: t.due_date)


def task_view(
    tasks: Iterable[Task],
    task_filter: Union[TaskFilter, str] = TaskFilter.ALL,
    sort: Union[TaskSort, str] = TaskSort.DUE_DATE,
    now: Optional[datetime] = None,
) -> List[Task]:
    return sort_tasks(filter_tasks(tasks, task_filter, now), sort)


def _expense_predicate(expense_filter: ExpenseFilter, now: datetime) -> Callable[[Expense], bool]:
    if expense_filter is ExpenseFilter.ALL:
        return lambda e: True
    if expense_filter is ExpenseFilter.THIS_MONTH:
        return lambda e: in_month(e.date, now.year, now.month)
    if expense_filter is ExpenseFilter.LAST_MONTH:
        year, month = previous_month(now)
        return lambda e: in_month(e.date, year, month)
    # the remaining filters are expense categories
    return lambda e: e.category == expense_filter.value


def filter_expenses(
    expenses: Iterable[Expense],
    expense_filter: Union[ExpenseFilter, str] = ExpenseFilter.ALL,
    now: Optional[datetime] = None,
) -> List[Expense]:
    predicate = _expense_predicate(ExpenseFilter(expense_filter), now or datetime.now())
    return [expense for expense in expenses if predicate(expense)]


def sort_expenses(
    expenses: Iterable[Expense],
    sort: Union[ExpenseSort, str] = ExpenseSort.DATE,
    farms: Iterable[Farm] = (),
) -> List[Expense]:
    """Dates and amounts list largest first; category and farm name ascending."""
    sort = ExpenseSort(sort)
    if sort is ExpenseSort.AMOUNT:
        return sorted(expenses, key=lambda e: e.amount, reverse=True)
    if sort is ExpenseSort.CATEGORY:
        return sorted(expenses, key=lambda e: e.category.casefold())
    if sort is ExpenseSort.FARM:
        farms = list(farms)
        return sorted(expenses, key=lambda e: farm_name(farms, e.farm_id).casefold())
    return sorted(expenses, key=lambda e: e.date, reverse=True)


def expense_view(
    expenses: Iterable[Expense],
    expense_filter: Union[ExpenseFilter, str] = ExpenseFilter.ALL,
    sort: Union[ExpenseSort, str] = ExpenseSort.DATE,
    farms: Iterable[Farm] = (),
    now: Optional[datetime] = None,
) -> List[Expense]:
    return sort_expenses(filter_expenses(expenses, expense_filter, now), sort, farms)
