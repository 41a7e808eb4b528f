import json

import pytest

from agents.reference.models import GROWTH_STAGES, GrowthStage
from agents.reference.service import DEFAULT_DATABASE_PATH, ReferenceDataService, load_reference_data
from core.exceptions import ReferenceDataError


@pytest.fixture
def service(reference):
    return ReferenceDataService(reference)


@pytest.fixture
def raw_database():
    with open(DEFAULT_DATABASE_PATH, encoding="utf-8") as fh:
        return json.load(fh)


def write_database(tmp_path, data):
    path = tmp_path / "crop_database.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_bundled_database_loads(reference):
    assert set(reference.crops) == {"cotton", "wheat", "rice"}
    assert set(reference.soils) == {"sandy", "loamy", "clay", "clay_loam"}
    for crop in reference.crops.values():
        assert tuple(crop.stages) == GROWTH_STAGES


def test_loamy_profile(reference):
    loamy = reference.soils["loamy"]
    assert loamy.field_capacity == 0.25
    assert loamy.wilting_point == 0.10
    assert loamy.available_water_capacity == pytest.approx(0.15)


def test_stages_are_reordered(tmp_path, raw_database):
    stages = raw_database["crops"]["cotton"]["stages"]
    raw_database["crops"]["cotton"]["stages"] = dict(reversed(list(stages.items())))

    data = load_reference_data(write_database(tmp_path, raw_database))
    assert list(data.crops["cotton"].stages)[0] == GrowthStage.INITIAL


def test_missing_stage_fails_at_load(tmp_path, raw_database):
    del raw_database["crops"]["wheat"]["stages"]["late"]
    with pytest.raises(ReferenceDataError):
        load_reference_data(write_database(tmp_path, raw_database))


@pytest.mark.parametrize("duration", [0, -5, 12.5])
def test_bad_stage_duration_fails_at_load(tmp_path, raw_database, duration):
    raw_database["crops"]["rice"]["stages"]["mid"]["duration"] = duration
    with pytest.raises(ReferenceDataError):
        load_reference_data(write_database(tmp_path, raw_database))


def test_field_capacity_must_exceed_wilting_point(tmp_path, raw_database):
    raw_database["soils"]["clay"]["wilting_point"] = raw_database["soils"]["clay"]["field_capacity"]
    with pytest.raises(ReferenceDataError):
        load_reference_data(write_database(tmp_path, raw_database))


def test_key_must_match_id(tmp_path, raw_database):
    raw_database["soils"]["clay"]["soil_id"] = "heavy_clay"
    with pytest.raises(ReferenceDataError):
        load_reference_data(write_database(tmp_path, raw_database))


def test_unreadable_database(tmp_path):
    with pytest.raises(ReferenceDataError):
        load_reference_data(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ReferenceDataError):
        load_reference_data(broken)


def test_available_crops(service):
    crops = {crop["type"]: crop for crop in service.get_available_crops()}
    assert crops["cotton"]["scientific_name"] == "Gossypium hirsutum"


def test_crop_details(service):
    details = service.get_crop_details("cotton")
    assert details["coefficients"]["mid"] == 1.15
    assert details["stages"]["initial"] == 30


def test_unknown_crop_details_use_generic_profile(service):
    details = service.get_crop_details("banana")
    assert details == {
        "name": "banana",
        "coefficients": {"mid": 1.0},
        "stages": {"mid": 60},
        "description": "Crop not found in database",
    }


def test_crop_coefficient(service):
    assert service.get_crop_coefficient("wheat", "Mid") == {"kc": 1.0, "duration": 30}
    assert service.get_crop_coefficient("wheat", "flowering") is None
    assert service.get_crop_coefficient("banana", "mid") is None


def test_wheat_has_two_planting_windows(service):
    dates = service.get_optimal_planting_dates("wheat")
    assert set(dates) == {"winter", "spring"}
    assert service.get_optimal_planting_dates("cotton") == {"start": "04-10", "end": "05-10"}


def test_critical_periods(service):
    assert "flowering" in service.get_critical_irrigation_periods("cotton")
    assert service.get_critical_irrigation_periods("banana") is None


def test_adjusted_water_requirement(service):
    assert service.calculate_adjusted_water_requirement("cotton", "clay", 1000) == pytest.approx(1200)
    assert service.calculate_adjusted_water_requirement("cotton", "peat", 1000) == 1000


def test_suitability(service):
    assert service.get_crop_soil_suitability("rice", "clay") == "Excellent"
    assert service.get_crop_soil_suitability("rice", "sandy") == "Poor"
    assert service.get_crop_soil_suitability("rice", "peat") == "Unknown"


def test_rice_on_sand_recommendations(service):
    recommendation = service.get_crop_recommendation("rice", "sandy", area=10)
    messages = [item["message"] for item in recommendation["recommendations"]]

    assert "Increase irrigation frequency by 100% due to low water retention" in messages
    assert "Consider drip irrigation for better water efficiency" in messages
    assert "Rice requires clay soil or soil with clay layer for proper water retention" in messages
    assert recommendation["soil"]["suitability"] == "Poor"
    water = recommendation["water_requirements"]
    assert water["for_area"] == pytest.approx(water["adjusted"] * 10)


def test_cotton_on_clay_needs_drainage(service):
    recommendation = service.get_crop_recommendation("cotton", "clay")
    types = [item["type"] for item in recommendation["recommendations"]]
    assert types == ["drainage"]


def test_cotton_on_sand_needs_split_fertilizer(service):
    recommendation = service.get_crop_recommendation("cotton", "sandy")
    types = [item["type"] for item in recommendation["recommendations"]]
    assert "fertilization" in types


def test_unknown_crop_has_no_recommendation(service):
    assert service.get_crop_recommendation("banana", "loamy") is None


def test_database_stats(service):
    stats = service.get_database_stats()
    assert stats["region"] == "Uzbekistan"
    assert stats["total_crops"] == 3
    assert stats["total_soil_types"] == 4


def test_regional_information(service):
    assert service.get_climate() is not None
    assert service.get_irrigation_guidelines()["water_quotas"]["rice"] == 12000


def test_schedule_and_yield(service):
    assert service.get_irrigation_schedule("rice")["method"] == "basin flooding"
    assert service.get_yield_factors("cotton")["unit"] == "t/ha"
    assert service.get_irrigation_schedule("banana") is None


def test_reload_replaces_tables(tmp_path, raw_database, reference):
    raw_database["crops"]["cotton"]["stages"]["mid"]["kc"] = 1.2
    service = ReferenceDataService(reference)
    service.reload(write_database(tmp_path, raw_database))

    assert service.get_crop_coefficient("cotton", "mid")["kc"] == 1.2
    assert reference.crops["cotton"].stages[GrowthStage.MID].kc == 1.15
