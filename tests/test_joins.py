from views.joins import (
    UNKNOWN_FIELD,
    crop_label,
    crops_by_farm,
    farm_name,
    field_location,
    field_options,
    find_farm,
    find_field,
    join_fields,
)


def test_find_field_scans_every_farm(farms):
    location = find_field(farms, "f3")
    assert location.farm_name == "Alpha Farm"
    assert location.field_name == "Terrace"
    assert location.field_size == 20
    assert location.size_unit == "hectares"


def test_missing_field_is_none_not_an_error(farms):
    assert find_field(farms, "nope") is None
    assert find_field([], "f1") is None


def test_field_location_falls_back_to_unknown(farms):
    location = field_location(farms, "nope")
    assert location == UNKNOWN_FIELD
    assert location.farm_name == "Unknown"
    assert location.field_size == 0


def test_farm_lookups(farms):
    assert find_farm(farms, 2).name == "Alpha Farm"
    assert find_farm(farms, 42) is None
    assert farm_name(farms, 1) == "Zeta Farm"
    assert farm_name(farms, 42) == "Unknown Farm"


def test_crop_label(crops):
    assert crop_label(crops, 2) == "wheat (planted)"
    assert crop_label(crops, None) is None
    assert crop_label(crops, 77) == "Unknown crop"


def test_join_fields_keeps_crop_order(crops, farms):
    joined = join_fields(crops, farms)
    assert [crop.id for crop, _ in joined] == [1, 2, 3]
    assert [location.farm_name for _, location in joined] == ["Zeta Farm", "Alpha Farm", "Unknown"]


def test_crops_by_farm(crops, farms):
    groups = crops_by_farm(crops, farms)
    assert list(groups) == ["Zeta Farm", "Alpha Farm", "Unknown"]
    assert [crop.type for crop in groups["Unknown"]] == ["peas"]


def test_field_options(farms):
    assert field_options(farms) == [
        ("f1", "Zeta Farm - North (50 acres)"),
        ("f2", "Zeta Farm - South (50 acres)"),
        ("f3", "Alpha Farm - Terrace (20 hectares)"),
    ]
