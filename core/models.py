# core/models.py

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

SizeUnit = Literal["acres", "hectares", "sqft", "sqm"]

CropType = Literal[
    "corn", "wheat", "soybeans", "rice", "tomatoes", "potatoes", "lettuce",
    "carrots", "onions", "peppers", "cucumber", "squash", "beans", "peas",
    "cabbage", "other",
]

# Lifecycle order, not enforced: any status may be set directly
CropStatus = Literal["planted", "growing", "flowering", "fruiting", "ready", "harvested"]

TaskType = Literal[
    "watering", "fertilizing", "harvesting", "planting", "weeding",
    "inspection", "maintenance", "other",
]

Priority = Literal["low", "medium", "high"]

ExpenseCategory = Literal[
    "seeds", "fertilizer", "pesticides", "equipment", "fuel", "labor",
    "irrigation", "maintenance", "utilities", "insurance", "transport",
    "storage", "other",
]


def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Aware datetimes are converted to local wall-clock time and stripped of tzinfo."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase JSON keys as in the seed documents."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Record(CamelModel):
    """Base for every store-managed entity. The id is assigned by the store."""
    id: int = Field(alias="Id")


class FarmField(CamelModel):
    """A field owned by exactly one farm."""
    id: str
    name: str
    size: float


class Farm(Record):
    name: str
    location: str
    size: float
    size_unit: SizeUnit = "acres"
    fields: List[FarmField] = Field(default_factory=list)


class Crop(Record):
    type: CropType
    field_id: str  # weak reference to a FarmField.id on any farm
    planting_date: datetime
    expected_harvest: Optional[datetime] = None
    status: CropStatus = "planted"

    normalize_dates = field_validator("planting_date", "expected_harvest")(to_local_naive)


class Task(Record):
    title: str
    type: TaskType
    due_date: datetime
    priority: Priority = "medium"
    crop_id: Optional[int] = None  # weak reference to Crop.id
    completed: bool = False

    normalize_dates = field_validator("due_date")(to_local_naive)


class Expense(Record):
    category: ExpenseCategory
    amount: float
    date: datetime
    description: Optional[str] = None
    farm_id: int  # weak reference to Farm.id

    normalize_dates = field_validator("date")(to_local_naive)


class CurrentWeather(CamelModel):
    """Current conditions shown on the dashboard weather card."""
    temperature: float
    humidity: float
    condition: str
    precipitation: float
    wind_speed: float
    uv_index: float
    location: Optional[str] = None
    is_alert: bool = False
    visibility: Optional[float] = None


class ForecastDay(CamelModel):
    day: str
    condition: str
    high: float
    low: float
    precipitation: float


class WeatherAlert(CamelModel):
    type: str
    severity: str
    title: str
    description: str
    expires: datetime

    normalize_dates = field_validator("expires")(to_local_naive)


class WeatherReport(CamelModel):
    """The read-only weather document: current conditions, forecast and alerts."""
    current: CurrentWeather
    forecast: List[ForecastDay] = Field(default_factory=list)
    alerts: List[WeatherAlert] = Field(default_factory=list)
