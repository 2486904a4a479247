# views/joins.py

from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel

from core.models import Crop, Farm


class FieldLocation(BaseModel):
    """A crop's field resolved to its owning farm."""
    farm_name: str
    field_name: str
    field_size: float
    size_unit: str


UNKNOWN_FIELD = FieldLocation(farm_name="Unknown", field_name="Unknown", field_size=0, size_unit="acres")
UNKNOWN_FARM = "Unknown Farm"
UNKNOWN_CROP = "Unknown crop"


def find_field(farms: Iterable[Farm], field_id: str) -> Optional[FieldLocation]:
    """Scans every farm's fields in order. None when no farm owns the field."""
    for farm in farms:
        for field in farm.fields:
            if field.id == field_id:
                return FieldLocation(
                    farm_name=farm.name,
                    field_name=field.name,
                    field_size=field.size,
                    size_unit=farm.size_unit,
                )
    return None


def field_location(farms: Iterable[Farm], field_id: str) -> FieldLocation:
    return find_field(farms, field_id) or UNKNOWN_FIELD


def find_farm(farms: Iterable[Farm], farm_id: int) -> Optional[Farm]:
    return next((farm for farm in farms if farm.id == farm_id), None)


def farm_name(farms: Iterable[Farm], farm_id: int) -> str:
    farm = find_farm(farms, farm_id)
    return farm.name if farm else UNKNOWN_FARM


def find_crop(crops: Iterable[Crop], crop_id: Optional[int]) -> Optional[Crop]:
    if crop_id is None:
        return None
    return next((crop for crop in crops if crop.id == crop_id), None)


def crop_label(crops: Iterable[Crop], crop_id: Optional[int]) -> Optional[str]:
    """'<type> (<status>)' for a task's crop; None when the task has no crop."""
    if crop_id is None:
        return None
    crop = find_crop(crops, crop_id)
    return f"{crop.type} ({crop.status})" if crop else UNKNOWN_CROP


def join_fields(crops: Iterable[Crop], farms: Iterable[Farm]) -> List[Tuple[Crop, FieldLocation]]:
    farms = list(farms)
    return [(crop, field_location(farms, crop.field_id)) for crop in crops]


def crops_by_farm(crops: Iterable[Crop], farms: Iterable[Farm]) -> Dict[str, List[Crop]]:
    """Crops grouped under their farm's name, in first-seen order. Dangling crops group under 'Unknown'."""
    groups: Dict[str, List[Crop]] = {}
    for crop, location in join_fields(crops, farms):
        groups.setdefault(location.farm_name, []).append(crop)
    return groups


def field_options(farms: Iterable[Farm]) -> List[Tuple[str, str]]:
    """(field id, label) for every field of every farm, in farm order."""
    options = []
    for farm in farms:
        for field in farm.fields:
            options.append((field.id, f"{farm.name} - {field.name} ({field.size:g} {farm.size_unit})"))
    return options
