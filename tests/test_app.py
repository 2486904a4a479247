import asyncio
from datetime import datetime
from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from core.config import settings

APP_PATH = str(Path(__file__).resolve().parent.parent / "app.py")


@pytest.fixture
def app(monkeypatch):
    """The Streamlit app after its first run, backed by fresh seed records without delay."""
    monkeypatch.setattr(settings, "simulate_latency", False)
    return AppTest.from_file(APP_PATH, default_timeout=30).run()


def open_page(app, page):
    app.sidebar.radio(key="page").set_value(page).run()
    assert not app.exception
    return app


def submit_button(app, form_id):
    return next(button for button in app.button if button.form_id == form_id)


def test_sidebar_follows_every_page_change(app):
    assert app.title[0].value == "Dashboard"
    for page in ("Tasks", "Expenses", "Crops", "Dashboard"):
        open_page(app, page)
        assert app.title[0].value == page


def test_task_can_be_deleted(app):
    open_page(app, "Tasks")
    app.button(key="delete-task-3").click().run()
    assert not app.exception
    records = app.session_state["records"]
    assert len(records.tasks) == 6
    assert app.title[0].value == "Tasks"


def test_editors_are_prefilled_from_the_record(app):
    open_page(app, "Tasks")
    assert app.text_input(key="edit-task-1-title").value == "Irrigate tomato greenhouse"
    assert app.selectbox(key="edit-task-1-priority").value == "high"

    open_page(app, "Farms")
    assert app.text_input(key="edit-farm-1-name").value == "Green Valley Farm"
    assert app.text_input(key="edit-farm-1-size").value == "150"

    open_page(app, "Expenses")
    assert app.text_input(key="edit-expense-2-amount").value == "840.50"

    open_page(app, "Crops")
    assert app.selectbox(key="edit-crop-1-status").value == "ready"


def test_task_edit_saves_through_the_store(app):
    open_page(app, "Tasks")
    app.text_input(key="edit-task-1-title").set_value("Irrigate greenhouse beds")
    app.selectbox(key="edit-task-1-priority").set_value("low")
    submit_button(app, "edit-task-1").click().run()
    assert not app.exception

    task = asyncio.run(app.session_state["records"].tasks.get_by_id(1))
    assert task.title == "Irrigate greenhouse beds"
    assert task.priority == "low"
    # the date picker keeps the stored time of day
    assert task.due_date == datetime(2026, 10, 19, 8)


def test_farm_edit_keeps_its_fields(app):
    open_page(app, "Farms")
    app.text_input(key="edit-farm-1-location").set_value("Watsonville, California")
    submit_button(app, "edit-farm-1").click().run()
    assert not app.exception

    farm = asyncio.run(app.session_state["records"].farms.get_by_id(1))
    assert farm.location == "Watsonville, California"
    assert [field.id for field in farm.fields] == ["f1", "f2", "f3"]


def test_invalid_edit_shows_form_errors_and_saves_nothing(app):
    open_page(app, "Expenses")
    app.text_input(key="edit-expense-2-amount").set_value("-5")
    submit_button(app, "edit-expense-2").click().run()
    assert not app.exception
    assert any(error.value == "Please fix the errors in the form" for error in app.error)
    assert asyncio.run(app.session_state["records"].expenses.get_by_id(2)).amount == 840.5


def test_rejected_mutation_is_reported_not_raised(app):
    async def rejecting(task_id):
        raise ValueError("Task payload rejected")

    open_page(app, "Tasks")
    app.session_state["records"].tasks.delete = rejecting
    app.button(key="delete-task-3").click().run()
    assert not app.exception
    assert [error.value for error in app.error] == ["Failed to delete task: Task payload rejected"]
    assert len(app.session_state["records"].tasks) == 7
