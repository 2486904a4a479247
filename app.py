# app.py

import asyncio
from datetime import date, datetime
from typing import get_args

import streamlit as st

from core.models import CropStatus, CropType, ExpenseCategory, Priority, SizeUnit, TaskType
from core.store import FarmRecords
from core.validators import (
    FormValidationError,
    clean_crop_form,
    clean_expense_form,
    clean_farm_form,
    clean_task_form,
    crop_form_values,
    expense_form_values,
    farm_form_values,
    task_form_values,
)
from views.filters import (
    EXPENSE_FILTER_LABELS,
    EXPENSE_SORT_LABELS,
    TASK_FILTER_LABELS,
    TASK_SORT_LABELS,
)
from views.joins import crop_label, farm_name, field_options
from views.pages import (
    load_crops_page,
    load_dashboard,
    load_expenses_page,
    load_tasks_page,
    load_weather_page,
)

# --- Page & State Configuration ---
st.set_page_config(page_title="Farm Records", page_icon="🌾", layout="wide")

PAGES = ["Dashboard", "Farms", "Crops", "Tasks", "Expenses", "Weather"]

def initialize_session_state():
    """Initializes the session's record collections once."""
    if "records" not in st.session_state:
        st.session_state.records = FarmRecords.from_seed()
    if "page" not in st.session_state:
        st.session_state.page = "Dashboard"

def run(coro):
    return asyncio.run(coro)

def load_or_report(loader, *args, failure: str = "Failed to load data"):
    """Runs a page loader; on failure shows a generic error with a retry button."""
    try:
        return run(loader(st.session_state.records, *args))
    except Exception as e:
        st.error(f"{failure}: {e}")
        if st.button("Try Again"):
            st.rerun()
        return None

def show_form_errors(error: FormValidationError):
    st.error(str(error))
    for field, message in error.errors.items():
        st.caption(f"• {field}: {message}")

def mutate(action, success: str, failure: str):
    """Runs a store mutation, reports the outcome and refreshes the page."""
    try:
        run(action)
    except Exception as e:
        st.error(f"{failure}: {e}")
        return
    st.toast(success)
    st.rerun()

def submit_form(cleaner, form: dict, save, success: str, failure: str):
    """Cleans a submitted form and hands the payload to a store call."""
    try:
        payload = cleaner(form)
    except FormValidationError as e:
        show_form_errors(e)
        return
    mutate(save(payload), success, failure)

def keep_time(chosen: date, original: datetime) -> datetime:
    """Date picked in an edit form, at the stored record's time of day."""
    return datetime.combine(chosen, original.time()) if chosen else None

# --- Dashboard ---
def show_dashboard():
    st.title("Dashboard")
    st.caption("Welcome back! Here's what's happening on your farm.")
    page = load_or_report(load_dashboard, failure="Failed to load dashboard data")
    if page is None:
        return

    cols = st.columns(4)
    cols[0].metric("Total Farms", page.stats.total_farms)
    cols[1].metric("Active Crops", page.stats.active_crops)
    cols[2].metric("Pending Tasks", page.stats.pending_tasks)
    cols[3].metric("This Month's Expenses", f"${page.stats.monthly_expenses:.2f}")

    left, right = st.columns([2, 1])
    with left:
        st.subheader("Today's Tasks")
        if not page.todays_tasks:
            st.info("Great! You have no pending tasks for today.")
        for task in page.todays_tasks:
            show_task_toggle(task, key_prefix="today")

        st.subheader("Upcoming Tasks")
        if not page.upcoming_tasks:
            st.info("No upcoming tasks scheduled")
        for task in page.upcoming_tasks:
            show_task_toggle(task, key_prefix="upcoming")

    with right:
        st.subheader(page.weather.location if page.weather and page.weather.location else "Current Weather")
        if page.weather:
            st.metric(page.weather.condition, f"{page.weather.temperature:g}°", f"{page.weather.humidity:g}% humidity")
        else:
            st.caption("Weather data unavailable")

        st.subheader("Recent Activity")
        if not page.recent_activity:
            st.caption("No recent activity")
        for activity in page.recent_activity:
            st.write(f"**{activity.title}**  \n{activity.date:%b %d, %I:%M %p}")

def show_task_toggle(task, key_prefix: str):
    label = f"{task.title} ({task.priority} priority, due {task.due_date:%b %d, %Y})"
    checked = st.checkbox(label, value=task.completed, key=f"{key_prefix}-{task.id}")
    if checked != task.completed:
        records = st.session_state.records
        mutate(
            records.tasks.update(task.id, {"completed": checked}),
            "Task completed!" if checked else "Task marked as incomplete",
            "Failed to update task",
        )

# --- Farms ---
def show_farms():
    st.title("Farms")
    records = st.session_state.records
    try:
        farms = run(records.farms.get_all())
    except Exception as e:
        st.error(f"Failed to load farms: {e}")
        return

    with st.expander("➕ Add Farm"):
        with st.form("farm_form", clear_on_submit=True):
            form = {
                "name": st.text_input("Farm Name"),
                "location": st.text_input("Location"),
                "size": st.text_input("Size"),
                "sizeUnit": st.selectbox("Unit", get_args(SizeUnit)),
            }
            if st.form_submit_button("Add Farm"):
                submit_form(clean_farm_form, form, records.farms.create,
                            "Farm created successfully", "Failed to create farm")

    if not farms:
        st.info("No farms yet. Add your first farm to get started.")
    for farm in farms:
        with st.container(border=True):
            st.subheader(farm.name)
            st.caption(f"{farm.location} · {farm.size:g} {farm.size_unit} · {len(farm.fields)} fields")
            for field in farm.fields[:3]:
                st.write(f"- {field.name} ({field.size:g} {farm.size_unit})")
            if len(farm.fields) > 3:
                st.caption(f"+{len(farm.fields) - 3} more fields")
            show_farm_editor(farm)
            if st.button("Delete", key=f"delete-farm-{farm.id}"):
                mutate(records.farms.delete(farm.id), "Farm deleted successfully", "Failed to delete farm")

def show_farm_editor(farm):
    records = st.session_state.records
    values = farm_form_values(farm)
    units = get_args(SizeUnit)
    prefix = f"edit-farm-{farm.id}"
    with st.expander("✏️ Edit Farm"):
        with st.form(prefix):
            form = {
                "name": st.text_input("Farm Name", value=values["name"], key=f"{prefix}-name"),
                "location": st.text_input("Location", value=values["location"], key=f"{prefix}-location"),
                "size": st.text_input("Size", value=values["size"], key=f"{prefix}-size"),
                "sizeUnit": st.selectbox("Unit", units, index=units.index(values["sizeUnit"]), key=f"{prefix}-unit"),
                "fields": values["fields"],
            }
            if st.form_submit_button("Save Farm"):
                submit_form(clean_farm_form, form, lambda payload: records.farms.update(farm.id, payload),
                            "Farm updated successfully", "Failed to update farm")

# --- Crops ---
def show_crops():
    st.title("Crops")
    records = st.session_state.records
    page = load_or_report(load_crops_page, failure="Failed to load crops")
    if page is None:
        return

    options = field_options(page.farms)
    with st.expander("🌱 Plant Crop"):
        with st.form("crop_form", clear_on_submit=True):
            field_choice = st.selectbox("Field", options, format_func=lambda option: option[1])
            form = {
                "type": st.selectbox("Crop Type", get_args(CropType)),
                "fieldId": field_choice[0] if field_choice else "",
                "plantingDate": st.date_input("Planting Date", value=date.today()),
                "expectedHarvest": st.date_input("Expected Harvest", value=None),
                "status": st.selectbox("Status", get_args(CropStatus)),
            }
            if st.form_submit_button("Plant Crop"):
                submit_form(clean_crop_form, form, records.crops.create,
                            "Crop planted successfully", "Failed to plant crop")

    for row in page.rows:
        crop, location, timeline = row.crop, row.location, row.timeline
        with st.container(border=True):
            st.subheader(f"{crop.type.capitalize()} · {crop.status.capitalize()}")
            st.caption(f"{location.farm_name} - {location.field_name} ({location.field_size:g} {location.size_unit})")
            st.write(f"Planted {timeline.days_planted} days ago")
            if timeline.days_to_harvest is not None:
                if timeline.days_to_harvest > 0:
                    st.write(f"Harvest in {timeline.days_to_harvest} days")
                else:
                    st.write(f"Harvest {abs(timeline.days_to_harvest)} days overdue")
            show_crop_editor(crop, options)
            cols = st.columns(2)
            if crop.status != "harvested" and cols[0].button("Mark Harvested", key=f"harvest-{crop.id}"):
                mutate(records.crops.update(crop.id, {"status": "harvested"}),
                       "Crop marked as harvested", "Failed to update crop")
            if cols[1].button("Delete", key=f"delete-crop-{crop.id}"):
                mutate(records.crops.delete(crop.id), "Crop deleted successfully", "Failed to delete crop")

def show_crop_editor(crop, options):
    records = st.session_state.records
    values = crop_form_values(crop)
    types, statuses = get_args(CropType), get_args(CropStatus)
    current_field = next((i for i, option in enumerate(options) if option[0] == values["fieldId"]), 0)
    prefix = f"edit-crop-{crop.id}"
    with st.expander("✏️ Edit Crop"):
        with st.form(prefix):
            field_choice = st.selectbox("Field", options, index=current_field,
                                        format_func=lambda option: option[1], key=f"{prefix}-field")
            form = {
                "type": st.selectbox("Crop Type", types, index=types.index(values["type"]), key=f"{prefix}-type"),
                "fieldId": field_choice[0] if field_choice else "",
                "plantingDate": st.date_input("Planting Date", value=values["plantingDate"], key=f"{prefix}-planted"),
                "expectedHarvest": st.date_input("Expected Harvest", value=values["expectedHarvest"],
                                                 key=f"{prefix}-harvest"),
                "status": st.selectbox("Status", statuses, index=statuses.index(values["status"]),
                                       key=f"{prefix}-status"),
            }
            if st.form_submit_button("Save Crop"):
                submit_form(clean_crop_form, form, lambda payload: records.crops.update(crop.id, payload),
                            "Crop updated successfully", "Failed to update crop")

# --- Tasks ---
def show_tasks():
    st.title("Tasks")
    records = st.session_state.records
    cols = st.columns(2)
    task_filter = cols[0].selectbox("Filter", list(TASK_FILTER_LABELS), format_func=TASK_FILTER_LABELS.get)
    sort = cols[1].selectbox("Sort by", list(TASK_SORT_LABELS), format_func=TASK_SORT_LABELS.get)
    page = load_or_report(load_tasks_page, task_filter, sort, failure="Failed to load tasks")
    if page is None:
        return

    stat_cols = st.columns(5)
    for col, (label, value) in zip(stat_cols, page.stats.model_dump().items()):
        col.metric(label.capitalize(), value)

    with st.expander("➕ Add Task"):
        with st.form("task_form", clear_on_submit=True):
            crop_choices = [None] + [crop.id for crop in page.crops]
            form = {
                "title": st.text_input("Title"),
                "type": st.selectbox("Task Type", get_args(TaskType)),
                "dueDate": st.date_input("Due Date", value=date.today()),
                "priority": st.selectbox("Priority", get_args(Priority), index=1),
                "cropId": st.selectbox(
                    "Crop", crop_choices,
                    format_func=lambda crop_id: crop_label(page.crops, crop_id) or "No specific crop",
                ),
            }
            if st.form_submit_button("Add Task"):
                submit_form(clean_task_form, form, records.tasks.create,
                            "Task created successfully", "Failed to create task")

    st.caption(f"Showing {len(page.tasks)} of {page.total} tasks")
    for task in page.tasks:
        with st.container(border=True):
            show_task_toggle(task, key_prefix="tasks")
            crop = crop_label(page.crops, task.crop_id)
            if crop:
                st.caption(f"Crop task: {crop}")
            show_task_editor(task, page.crops)
            if st.button("Delete", key=f"delete-task-{task.id}"):
                mutate(records.tasks.delete(task.id), "Task deleted successfully", "Failed to delete task")

def show_task_editor(task, crops):
    records = st.session_state.records
    values = task_form_values(task)
    types, priorities = get_args(TaskType), get_args(Priority)
    crop_choices = [None] + [crop.id for crop in crops]
    current_crop = crop_choices.index(values["cropId"]) if values["cropId"] in crop_choices else 0
    prefix = f"edit-task-{task.id}"
    with st.expander("✏️ Edit Task"):
        with st.form(prefix):
            form = {
                "title": st.text_input("Title", value=values["title"], key=f"{prefix}-title"),
                "type": st.selectbox("Task Type", types, index=types.index(values["type"]), key=f"{prefix}-type"),
                "dueDate": keep_time(
                    st.date_input("Due Date", value=values["dueDate"].date(), key=f"{prefix}-due"),
                    values["dueDate"],
                ),
                "priority": st.selectbox("Priority", priorities, index=priorities.index(values["priority"]),
                                         key=f"{prefix}-priority"),
                "cropId": st.selectbox(
                    "Crop", crop_choices, index=current_crop, key=f"{prefix}-crop",
                    format_func=lambda crop_id: crop_label(crops, crop_id) or "No specific crop",
                ),
                "completed": st.checkbox("Completed", value=values["completed"], key=f"{prefix}-completed"),
            }
            if st.form_submit_button("Save Task"):
                submit_form(clean_task_form, form, lambda payload: records.tasks.update(task.id, payload),
                            "Task updated successfully", "Failed to update task")

# --- Expenses ---
def show_expenses():
    st.title("Expenses")
    records = st.session_state.records
    cols = st.columns(2)
    expense_filter = cols[0].selectbox("Filter", list(EXPENSE_FILTER_LABELS), format_func=EXPENSE_FILTER_LABELS.get)
    sort = cols[1].selectbox("Sort by", list(EXPENSE_SORT_LABELS), format_func=EXPENSE_SORT_LABELS.get)
    page = load_or_report(load_expenses_page, expense_filter, sort, failure="Failed to load expenses")
    if page is None:
        return

    totals = st.columns(2)
    totals[0].metric("Total (filtered)", f"${page.filtered_total:.2f}")
    totals[1].metric("This Month", f"${page.monthly_total:.2f}")
    if page.top_categories:
        st.subheader("Top Categories")
        for category, amount in page.top_categories:
            st.write(f"- {category}: ${amount:.2f}")

    with st.expander("➕ Record Expense"):
        with st.form("expense_form", clear_on_submit=True):
            form = {
                "category": st.selectbox("Category", get_args(ExpenseCategory)),
                "amount": st.text_input("Amount"),
                "date": st.date_input("Date", value=date.today()),
                "description": st.text_input("Description"),
                "farmId": st.selectbox("Farm", [farm.id for farm in page.farms],
                                       format_func=lambda farm_id: farm_name(page.farms, farm_id)),
            }
            if st.form_submit_button("Record Expense"):
                submit_form(clean_expense_form, form, records.expenses.create,
                            "Expense recorded successfully", "Failed to record expense")

    st.caption(f"Showing {len(page.expenses)} of {page.total} expenses")
    for expense in page.expenses:
        with st.container(border=True):
            row = st.columns([3, 2, 2, 1])
            row[0].write(f"**{expense.category}** {expense.description or ''}")
            row[1].write(farm_name(page.farms, expense.farm_id))
            row[2].write(f"${expense.amount:.2f} · {expense.date:%b %d, %Y}")
            if row[3].button("Delete", key=f"delete-expense-{expense.id}"):
                mutate(records.expenses.delete(expense.id), "Expense deleted successfully", "Failed to delete expense")
            show_expense_editor(expense, page.farms)

def show_expense_editor(expense, farms):
    records = st.session_state.records
    values = expense_form_values(expense)
    categories = get_args(ExpenseCategory)
    farm_ids = [farm.id for farm in farms]
    current_farm = farm_ids.index(values["farmId"]) if values["farmId"] in farm_ids else 0
    prefix = f"edit-expense-{expense.id}"
    with st.expander("✏️ Edit Expense"):
        with st.form(prefix):
            form = {
                "category": st.selectbox("Category", categories, index=categories.index(values["category"]),
                                         key=f"{prefix}-category"),
                "amount": st.text_input("Amount", value=values["amount"], key=f"{prefix}-amount"),
                "date": keep_time(
                    st.date_input("Date", value=values["date"].date(), key=f"{prefix}-date"),
                    values["date"],
                ),
                "description": st.text_input("Description", value=values["description"], key=f"{prefix}-description"),
                "farmId": st.selectbox("Farm", farm_ids, index=current_farm, key=f"{prefix}-farm",
                                       format_func=lambda farm_id: farm_name(farms, farm_id)),
            }
            if st.form_submit_button("Save Expense"):
                submit_form(clean_expense_form, form, lambda payload: records.expenses.update(expense.id, payload),
                            "Expense updated successfully", "Failed to update expense")

# --- Weather ---
def show_weather():
    st.title("Weather")
    st.caption("Current conditions and 5-day forecast")
    page = load_or_report(load_weather_page, failure="Failed to load weather data")
    if page is None:
        return

    if page.current:
        current = page.current
        cols = st.columns(4)
        cols[0].metric("Temperature", f"{current.temperature:g}°")
        cols[1].metric("Humidity", f"{current.humidity:g}%")
        cols[2].metric("Wind", f"{current.wind_speed:g} mph")
        cols[3].metric("UV Index", f"{current.uv_index:g}")

    if page.forecast:
        st.subheader("5-Day Forecast")
        for col, day in zip(st.columns(len(page.forecast)), page.forecast):
            col.metric(day.day, f"{day.high:g}° / {day.low:g}°", day.condition, delta_color="off")

    st.subheader("Weather Alerts")
    if not page.alerts:
        st.success("No active weather alerts")
    for alert in page.alerts:
        st.warning(f"**{alert.title}** ({alert.severity})  \n{alert.description}  \n"
                   f"Valid until {alert.expires:%b %d, %I:%M %p}")

    st.subheader("Farm Weather Tips")
    show = {"danger": st.error, "info": st.info, "warning": st.warning, "success": st.success}
    for tip in page.tips:
        show[tip.level](f"**{tip.title}**  \n{tip.message}")

# --- Application Entry Point ---
initialize_session_state()

with st.sidebar:
    st.header("🌾 Farm Records")
    st.radio("Navigate", PAGES, key="page")

{
    "Dashboard": show_dashboard,
    "Farms": show_farms,
    "Crops": show_crops,
    "Tasks": show_tasks,
    "Expenses": show_expenses,
    "Weather": show_weather,
}[st.session_state.page]()
