# core/store.py

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel

from .config import settings
from .models import (
    Crop,
    CurrentWeather,
    Expense,
    Farm,
    ForecastDay,
    Record,
    Task,
    WeatherAlert,
    WeatherReport,
)

T = TypeVar("T", bound=Record)


class NotFoundError(LookupError):
    """Raised when no record in a collection matches the requested id."""


class Latency(BaseModel):
    """Artificial delay per store operation, in milliseconds."""
    get_all: int = 300
    get_by_id: int = 200
    create: int = 400
    update: int = 400
    delete: int = 300
    current_weather: int = 500
    forecast: int = 400
    alerts: int = 300

    @classmethod
    def none(cls) -> "Latency":
        return cls(**{name: 0 for name in cls.model_fields})

    async def wait(self, operation: str):
        delay_ms = getattr(self, operation)
        if delay_ms > 0:
            await asyncio.sleep(delay_ms / 1000)


def coerce_id(value: Any) -> Optional[int]:
    """Numeric id from an int or a numeric string; None when it does not coerce."""
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_field_names(model: Type[BaseModel], data: Union[Dict[str, Any], BaseModel]) -> Dict[str, Any]:
    """Accepts camelCase or snake_case keys (or a model) and returns snake_case keys."""
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    names = {}
    for name, info in model.model_fields.items():
        names[name] = name
        if info.alias:
            names[info.alias] = name
    return {names.get(key, key): value for key, value in data.items()}


class EntityStore(Generic[T]):
    """
    In-memory collection of one entity type with asynchronous CRUD.

    Every call waits for its artificial delay first; the mutation itself runs
    without suspension, so two mutators can never interleave.
    Callers always receive copies, never the stored records.
    """

    def __init__(self, model: Type[T], label: str, records: Iterable[Any] = (), latency: Optional[Latency] = None):
        self.model = model
        self.label = label
        self.latency = latency or Latency()
        self._records: List[T] = [
            item if isinstance(item, model) else model.model_validate(item)
            for item in records
        ]

    def __len__(self) -> int:
        return len(self._records)

    def next_id(self) -> int:
        return max((record.id for record in self._records), default=0) + 1

    def _index_of(self, record_id: Any) -> int:
        wanted = coerce_id(record_id)
        for index, record in enumerate(self._records):
            if record.id == wanted:
                return index
        raise NotFoundError(f"{self.label} not found")

    async def get_all(self) -> List[T]:
        await self.latency.wait("get_all")
        return [record.model_copy(deep=True) for record in self._records]

    async def get_by_id(self, record_id: Any) -> T:
        await self.latency.wait("get_by_id")
        return self._records[self._index_of(record_id)].model_copy(deep=True)

    async def create(self, data: Union[Dict[str, Any], BaseModel]) -> T:
        await self.latency.wait("create")
        payload = _as_field_names(self.model, data)
        payload["id"] = self.next_id()
        record = self.model.model_validate(payload)
        self._records.append(record)
        print(f"---{self.label.upper()} STORE: Created {self.label} {record.id}---")
        return record.model_copy(deep=True)

    async def update(self, record_id: Any, data: Union[Dict[str, Any], BaseModel]) -> T:
        """Shallow merge: provided fields overwrite, the id never changes."""
        await self.latency.wait("update")
        index = self._index_of(record_id)
        current = self._records[index]
        merged = {**current.model_dump(), **_as_field_names(self.model, data), "id": current.id}
        self._records[index] = self.model.model_validate(merged)
        print(f"---{self.label.upper()} STORE: Updated {self.label} {current.id}---")
        return self._records[index].model_copy(deep=True)

    async def delete(self, record_id: Any) -> bool:
        await self.latency.wait("delete")
        index = self._index_of(record_id)
        removed = self._records.pop(index)
        print(f"---{self.label.upper()} STORE: Deleted {self.label} {removed.id}---")
        return True


class WeatherStore:
    """Read-only weather document."""

    def __init__(self, report: Optional[WeatherReport] = None, latency: Optional[Latency] = None):
        self._report = report
        self.latency = latency or Latency()

    async def get_current_weather(self) -> Optional[CurrentWeather]:
        await self.latency.wait("current_weather")
        return self._report.current.model_copy() if self._report else None

    async def get_forecast(self) -> List[ForecastDay]:
        await self.latency.wait("forecast")
        return [day.model_copy() for day in self._report.forecast] if self._report else []

    async def get_alerts(self) -> List[WeatherAlert]:
        await self.latency.wait("alerts")
        return [alert.model_copy() for alert in self._report.alerts] if self._report else []


def _read_json(path: Path):
    with open(path, encoding="utf-8") as f:
        return json.load(f)


class FarmRecords:
    """
    One independent set of collections: farms, crops, tasks, expenses and weather.

    Build a fresh instance per process, session or test; nothing is shared
    between instances.
    """

    def __init__(
        self,
        farms: Iterable[Any] = (),
        crops: Iterable[Any] = (),
        tasks: Iterable[Any] = (),
        expenses: Iterable[Any] = (),
        weather: Optional[WeatherReport] = None,
        latency: Optional[Latency] = None,
    ):
        latency = latency or Latency()
        self.farms: EntityStore[Farm] = EntityStore(Farm, "Farm", farms, latency)
        self.crops: EntityStore[Crop] = EntityStore(Crop, "Crop", crops, latency)
        self.tasks: EntityStore[Task] = EntityStore(Task, "Task", tasks, latency)
        self.expenses: EntityStore[Expense] = EntityStore(Expense, "Expense", expenses, latency)
        self.weather = WeatherStore(weather, latency)

    @classmethod
    def from_seed(cls, data_dir: Optional[Path] = None, latency: Optional[Latency] = None) -> "FarmRecords":
        """Loads every collection from the seed JSON documents."""
        data_dir = Path(data_dir) if data_dir is not None else settings.data_dir
        if latency is None:
            latency = Latency() if settings.simulate_latency else Latency.none()

        weather_path = data_dir / "weather.json"
        weather = WeatherReport.model_validate(_read_json(weather_path)) if weather_path.exists() else None

        records = cls(
            farms=_read_json(data_dir / "farms.json"),
            crops=_read_json(data_dir / "crops.json"),
            tasks=_read_json(data_dir / "tasks.json"),
            expenses=_read_json(data_dir / "expenses.json"),
            weather=weather,
            latency=latency,
        )
        print(
            f"---FARM RECORDS: Loaded {len(records.farms)} farms, {len(records.crops)} crops, "
            f"{len(records.tasks)} tasks, {len(records.expenses)} expenses from {data_dir}---"
        )
        return records
