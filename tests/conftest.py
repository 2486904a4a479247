from datetime import datetime

import pytest

from core.models import Crop, Expense, Farm, Task
from core.store import FarmRecords, Latency

# Monday; the week runs Sunday 2026-10-18 to Saturday 2026-10-24
NOW = datetime(2026, 10, 19, 12, 0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def seeded():
    """Fresh collections from the seed documents, without artificial delay."""
    return FarmRecords.from_seed(latency=Latency.none())


@pytest.fixture
def farms():
    return [
        Farm(id=1, name="Zeta Farm", location="Salinas", size=100, size_unit="acres",
             fields=[{"id": "f1", "name": "North", "size": 50}, {"id": "f2", "name": "South", "size": 50}]),
        Farm(id=2, name="Alpha Farm", location="Ames", size=20, size_unit="hectares",
             fields=[{"id": "f3", "name": "Terrace", "size": 20}]),
    ]


@pytest.fixture
def tasks():
    return [
        Task(id=1, title="Irrigate", type="watering", due_date=datetime(2026, 10, 19, 8), priority="high"),
        Task(id=2, title="Fertilize", type="fertilizing", due_date=datetime(2026, 10, 20, 9), priority="medium"),
        Task(id=3, title="Harvest corn", type="harvesting", due_date=datetime(2026, 10, 10, 7), priority="low"),
        Task(id=4, title="Inspect", type="inspection", due_date=datetime(2026, 10, 18, 10), priority="high",
             completed=True),
        Task(id=5, title="Service tractor", type="maintenance", due_date=datetime(2026, 10, 19, 18),
             priority="medium", completed=True),
    ]


@pytest.fixture
def expenses():
    return [
        Expense(id=1, category="seeds", amount=100.0, date=datetime(2026, 10, 1), farm_id=1),
        Expense(id=2, category="fuel", amount=50.0, date=datetime(2026, 9, 30), farm_id=2),
        Expense(id=3, category="labor", amount=200.0, date=datetime(2026, 10, 15), farm_id=2),
        Expense(id=4, category="seeds", amount=25.0, date=datetime(2025, 10, 5), farm_id=99),
    ]


@pytest.fixture
def crops():
    return [
        Crop(id=1, type="corn", field_id="f1", planting_date=datetime(2026, 4, 15), status="ready"),
        Crop(id=2, type="wheat", field_id="f3", planting_date=datetime(2026, 9, 25), status="planted"),
        Crop(id=3, type="peas", field_id="gone", planting_date=datetime(2026, 8, 1), status="growing"),
    ]
