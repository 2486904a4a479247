from datetime import datetime

import pytest

from core.models import Expense, Task
from views.filters import (
    ExpenseFilter,
    ExpenseSort,
    TaskFilter,
    TaskSort,
    expense_view,
    filter_expenses,
    filter_tasks,
    sort_expenses,
    sort_tasks,
    task_view,
)


def ids(records):
    return [record.id for record in records]


@pytest.mark.parametrize(
    "task_filter, expected",
    [
        (TaskFilter.ALL, [1, 2, 3, 4, 5]),
        (TaskFilter.PENDING, [1, 2, 3]),
        (TaskFilter.COMPLETED, [4, 5]),
        (TaskFilter.TODAY, [1]),
        (TaskFilter.TOMORROW, [2]),
        (TaskFilter.OVERDUE, [3]),
        (TaskFilter.HIGH, [1]),
    ],
)
def test_task_filters(tasks, now, task_filter, expected):
    assert ids(filter_tasks(tasks, task_filter, now)) == expected


@pytest.mark.parametrize("task_filter", list(TaskFilter))
def test_task_filters_only_return_input_tasks(tasks, now, task_filter):
    result = filter_tasks(tasks, task_filter, now)
    assert all(task in tasks for task in result)
    assert filter_tasks(result, task_filter, now) == result


def test_task_filter_accepts_string_keys(tasks, now):
    assert ids(filter_tasks(tasks, "overdue", now)) == [3]


def test_unknown_task_filter_key_is_rejected(tasks, now):
    with pytest.raises(ValueError):
        filter_tasks(tasks, "someday", now)


def test_task_due_earlier_today_is_not_overdue(now):
    task = Task(id=1, title="t", type="other", due_date=datetime(2026, 10, 19, 1))
    assert filter_tasks([task], TaskFilter.OVERDUE, now) == []
    assert filter_tasks([task], TaskFilter.TODAY, now) == [task]


def test_priority_sort_orders_high_medium_low():
    tasks = [
        Task(id=1, title="a", type="other", due_date=datetime(2026, 10, 1), priority="low"),
        Task(id=2, title="b", type="other", due_date=datetime(2026, 10, 1), priority="high"),
        Task(id=3, title="c", type="other", due_date=datetime(2026, 10, 1), priority="medium"),
    ]
    assert [t.priority for t in sort_tasks(tasks, TaskSort.PRIORITY)] == ["high", "medium", "low"]


def test_priority_sort_is_stable(tasks):
    assert ids(sort_tasks(tasks, TaskSort.PRIORITY)) == [1, 4, 2, 5, 3]


def test_due_date_sort_is_ascending(tasks):
    assert ids(sort_tasks(tasks)) == [3, 4, 1, 5, 2]


def test_completed_sort_puts_open_tasks_first(tasks):
    assert ids(sort_tasks(tasks, TaskSort.COMPLETED)) == [1, 2, 3, 4, 5]
    assert ids(sort_tasks(list(reversed(tasks)), TaskSort.COMPLETED)) == [3, 2, 1, 5, 4]


def test_type_sort_is_alphabetical(tasks):
    assert [t.type for t in sort_tasks(tasks, TaskSort.TYPE)] == [
        "fertilizing", "harvesting", "inspection", "maintenance", "watering",
    ]


@pytest.mark.parametrize("sort", list(TaskSort))
def test_task_sort_is_idempotent_and_leaves_input_alone(tasks, sort):
    before = list(tasks)
    once = sort_tasks(tasks, sort)
    assert sort_tasks(once, sort) == once
    assert tasks == before


def test_task_view_filters_then_sorts(tasks, now):
    assert ids(task_view(tasks, TaskFilter.PENDING, TaskSort.PRIORITY, now)) == [1, 2, 3]


@pytest.mark.parametrize(
    "expense_filter, expected",
    [
        (ExpenseFilter.ALL, [1, 2, 3, 4]),
        (ExpenseFilter.THIS_MONTH, [1, 3]),
        (ExpenseFilter.LAST_MONTH, [2]),
        (ExpenseFilter.SEEDS, [1, 4]),
        (ExpenseFilter.LABOR, [3]),
        (ExpenseFilter.FERTILIZER, []),
    ],
)
def test_expense_filters(expenses, now, expense_filter, expected):
    assert ids(filter_expenses(expenses, expense_filter, now)) == expected


def test_last_month_wraps_into_previous_year():
    december = Expense(id=1, category="fuel", amount=10, date=datetime(2026, 12, 31, 23), farm_id=1)
    january = Expense(id=2, category="fuel", amount=10, date=datetime(2027, 1, 2), farm_id=1)
    now = datetime(2027, 1, 15)
    assert ids(filter_expenses([december, january], ExpenseFilter.LAST_MONTH, now)) == [1]
    assert ids(filter_expenses([december, january], ExpenseFilter.THIS_MONTH, now)) == [2]


def test_unknown_expense_keys_are_rejected(expenses):
    with pytest.raises(ValueError):
        filter_expenses(expenses, "pesticides")
    with pytest.raises(ValueError):
        sort_expenses(expenses, "newest")


def test_expense_date_sort_lists_newest_first(expenses):
    assert ids(sort_expenses(expenses)) == [3, 1, 2, 4]


def test_expense_amount_sort_lists_largest_first(expenses):
    assert ids(sort_expenses(expenses, ExpenseSort.AMOUNT)) == [3, 1, 2, 4]


def test_expense_category_sort(expenses):
    assert [e.category for e in sort_expenses(expenses, ExpenseSort.CATEGORY)] == [
        "fuel", "labor", "seeds", "seeds",
    ]


def test_expense_farm_sort_uses_farm_names(expenses, farms):
    # Alpha Farm (2), Unknown Farm (99), Zeta Farm (1)
    assert ids(sort_expenses(expenses, ExpenseSort.FARM, farms)) == [2, 3, 4, 1]


@pytest.mark.parametrize("sort", list(ExpenseSort))
def test_expense_sort_is_idempotent(expenses, farms, sort):
    once = sort_expenses(expenses, sort, farms)
    assert sort_expenses(once, sort, farms) == once


def test_expense_view(expenses, farms, now):
    assert ids(expense_view(expenses, "thisMonth", "amount", farms, now)) == [3, 1]
