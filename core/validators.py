# core/validators.py

import math
import re
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional, Union
from urllib.parse import urlparse

from pydantic import BaseModel, Field

from .models import Crop, Expense, Farm, Task

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\(?([0-9]{3})\)?[-. ]?([0-9]{3})[-. ]?([0-9]{4})$")
# At least 8 characters, one uppercase, one lowercase, one number
PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)[a-zA-Z\d@$!%*?&]{8,}$")


class FormValidationError(ValueError):
    """Raised by the form cleaners. Never reaches the store."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__("Please fix the errors in the form")


class ValidationResult(BaseModel):
    is_valid: bool
    errors: Dict[str, str] = Field(default_factory=dict)


class Rule(NamedTuple):
    validator: Callable[[Any], bool]
    message: str


# --- Field validators ---

def validate_email(email: Any) -> bool:
    return isinstance(email, str) and bool(EMAIL_RE.match(email))


def validate_phone(phone: Any) -> bool:
    return isinstance(phone, str) and bool(PHONE_RE.match(phone))


def validate_required(value: Any) -> bool:
    if isinstance(value, str):
        return len(value.strip()) > 0
    return value is not None


def validate_min_length(value: Any, min_length: int) -> bool:
    if not isinstance(value, str):
        return False
    return len(value) >= min_length


def validate_max_length(value: Any, max_length: int) -> bool:
    if not isinstance(value, str):
        return False
    return len(value) <= max_length


def parse_number(value: Any) -> Optional[float]:
    """Float from a number or numeric string; None for blanks, NaN and junk."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def validate_number(value: Any) -> bool:
    return parse_number(value) is not None


def validate_positive_number(value: Any) -> bool:
    number = parse_number(value)
    return number is not None and number > 0


def validate_integer(value: Any) -> bool:
    number = parse_number(value)
    return number is not None and number.is_integer()


def validate_url(url: Any) -> bool:
    if not isinstance(url, str):
        return False
    parsed = urlparse(url)
    return bool(parsed.scheme and (parsed.netloc or parsed.path))


def parse_date(value: Any) -> Optional[datetime]:
    """Accepts datetimes, dates and ISO strings. None when the value is not a date."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def validate_date(value: Any) -> bool:
    return parse_date(value) is not None


def validate_date_range(start: Any, end: Any) -> bool:
    if not validate_date(start) or not validate_date(end):
        return False
    return parse_date(start) <= parse_date(end)


def validate_password(password: Any) -> bool:
    return isinstance(password, str) and bool(PASSWORD_RE.match(password))


RuleSpec = Union[Rule, Callable[[Any], Union[bool, str]]]


def validate_form(form_data: Dict[str, Any], rules: Dict[str, Iterable[RuleSpec]]) -> ValidationResult:
    """
    Runs each field's rules in order. A plain callable passes by returning True
    and fails by returning its message; a Rule pairs a predicate with a message.
    The last failing rule for a field wins.
    """
    errors: Dict[str, str] = {}
    for field, field_rules in rules.items():
        value = form_data.get(field)
        for rule in field_rules:
            if isinstance(rule, Rule):
                if not rule.validator(value):
                    errors[field] = rule.message
            else:
                result = rule(value)
                if result is not True:
                    errors[field] = result
    return ValidationResult(is_valid=not errors, errors=errors)


# --- Entity forms ---

def _raise_if_invalid(result: ValidationResult):
    if not result.is_valid:
        raise FormValidationError(result.errors)


def _iso(value: Any) -> Optional[str]:
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else None


FARM_RULES = {
    "name": [Rule(validate_required, "Farm name is required")],
    "location": [Rule(validate_required, "Location is required")],
    "size": [Rule(validate_positive_number, "Please enter a valid size")],
}

CROP_RULES = {
    "type": [Rule(validate_required, "Crop type is required")],
    "fieldId": [Rule(validate_required, "Field selection is required")],
    "plantingDate": [Rule(validate_date, "Planting date is required")],
}

TASK_RULES = {
    "title": [Rule(validate_required, "Task title is required")],
    "type": [Rule(validate_required, "Task type is required")],
    "dueDate": [Rule(validate_date, "Due date is required")],
}

EXPENSE_RULES = {
    "category": [Rule(validate_required, "Category is required")],
    "amount": [Rule(validate_positive_number, "Please enter a valid amount")],
    "date": [Rule(validate_date, "Date is required")],
    "farmId": [Rule(validate_required, "Farm selection is required")],
}


def clean_farm_form(form_data: Dict[str, Any]) -> Dict[str, Any]:
    _raise_if_invalid(validate_form(form_data, FARM_RULES))
    fields: List[Any] = form_data.get("fields") or []
    return {
        "name": str(form_data["name"]).strip(),
        "location": str(form_data["location"]).strip(),
        "size": parse_number(form_data["size"]),
        "sizeUnit": form_data.get("sizeUnit") or "acres",
        "fields": fields,
    }


def clean_crop_form(form_data: Dict[str, Any]) -> Dict[str, Any]:
    result = validate_form(form_data, CROP_RULES)
    harvest = form_data.get("expectedHarvest")
    if validate_required(harvest) and result.is_valid:
        if parse_date(harvest) is None or parse_date(harvest) <= parse_date(form_data["plantingDate"]):
            result.errors["expectedHarvest"] = "Expected harvest date must be after planting date"
            result.is_valid = False
    _raise_if_invalid(result)
    return {
        "type": form_data["type"],
        "fieldId": form_data["fieldId"],
        "plantingDate": _iso(form_data["plantingDate"]),
        "expectedHarvest": _iso(harvest) if validate_required(harvest) else None,
        "status": form_data.get("status") or "planted",
    }


def clean_task_form(form_data: Dict[str, Any]) -> Dict[str, Any]:
    _raise_if_invalid(validate_form(form_data, TASK_RULES))
    crop_id = form_data.get("cropId")
    return {
        "title": str(form_data["title"]).strip(),
        "type": form_data["type"],
        "dueDate": _iso(form_data["dueDate"]),
        "priority": form_data.get("priority") or "medium",
        "cropId": crop_id if validate_required(crop_id) else None,
        "completed": bool(form_data.get("completed", False)),
    }


def clean_expense_form(form_data: Dict[str, Any]) -> Dict[str, Any]:
    _raise_if_invalid(validate_form(form_data, EXPENSE_RULES))
    description = form_data.get("description")
    return {
        "category": form_data["category"],
        "amount": parse_number(form_data["amount"]),
        "date": _iso(form_data["date"]),
        "description": description.strip() if isinstance(description, str) and description.strip() else None,
        "farmId": form_data["farmId"],
    }


# --- Edit form values ---

def farm_form_values(farm: Farm) -> Dict[str, Any]:
    """Form fields prefilled from a stored farm. Its fields list is carried through unchanged."""
    return {
        "name": farm.name,
        "location": farm.location,
        "size": f"{farm.size:g}",
        "sizeUnit": farm.size_unit,
        "fields": [field.model_dump() for field in farm.fields],
    }


def crop_form_values(crop: Crop) -> Dict[str, Any]:
    return {
        "type": crop.type,
        "fieldId": crop.field_id,
        "plantingDate": crop.planting_date.date(),
        "expectedHarvest": crop.expected_harvest.date() if crop.expected_harvest else None,
        "status": crop.status,
    }


def task_form_values(task: Task) -> Dict[str, Any]:
    return {
        "title": task.title,
        "type": task.type,
        "dueDate": task.due_date,
        "priority": task.priority,
        "cropId": task.crop_id,
        "completed": task.completed,
    }


def expense_form_values(expense: Expense) -> Dict[str, Any]:
    return {
        "category": expense.category,
        "amount": f"{expense.amount:.2f}",
        "date": expense.date,
        "description": expense.description or "",
        "farmId": expense.farm_id,
    }
