from datetime import datetime, timedelta

import pytest

from agents.farm.models import FarmCreate, IrrigationLogCreate, SavingsPeriod
from agents.farm.service import FarmService
from core.exceptions import FarmNotFoundError

NOW = datetime(2024, 6, 15, 12, 0, 0)

CONFIG = {
    "seed_sample_farms": True,
    "default_current_efficiency": 80.0,
    "default_traditional_efficiency": 50.0,
    "default_water_cost_per_liter": 0.004,
}


@pytest.fixture
def farms():
    return FarmService(CONFIG, clock=lambda: NOW)


def log(farms, amount, days_ago=0, farm_id="farm1"):
    return farms.log_irrigation(
        IrrigationLogCreate(farm_id=farm_id, crop_type="cotton", area=50, amount=amount),
        timestamp=NOW - timedelta(days=days_ago),
    )


def test_sample_farms_are_seeded(farms):
    names = {farm.id: farm.name for farm in farms.list_farms()}
    assert names["farm1"] == "Karimov Cotton Farm"
    assert len(names) == 3


def test_seeding_can_be_disabled():
    assert FarmService({"seed_sample_farms": False}).list_farms() == []


def test_create_farm_uses_configured_defaults(farms):
    farm = farms.create_farm(FarmCreate(name="Andijan Orchard", location="Andijan", crop_type="wheat", area=12))

    assert farm.current_efficiency == 80.0
    assert farm.traditional_efficiency == 50.0
    assert farm.water_cost_per_liter == 0.004
    assert farm.created_at == NOW
    assert farms.get_farm(farm.id) == farm


def test_create_farm_keeps_explicit_values(farms):
    farm = farms.create_farm(FarmCreate(
        name="Namangan Fields", location="Namangan", crop_type="cotton", area=5,
        current_efficiency=90, traditional_efficiency=60, water_cost_per_liter=0.001
    ))
    assert (farm.current_efficiency, farm.traditional_efficiency, farm.water_cost_per_liter) == (90, 60, 0.001)


def test_unknown_farm(farms):
    with pytest.raises(FarmNotFoundError):
        farms.get_farm("farm404")


def test_logging_updates_farm_totals(farms):
    log(farms, 1000, days_ago=2)
    latest = log(farms, 500, days_ago=1)

    farm = farms.get_farm("farm1")
    assert farm.total_water_used == 1500
    assert farm.last_irrigation == latest.timestamp


def test_logs_are_newest_first_and_paged(farms):
    for days_ago in (5, 1, 3):
        log(farms, 100 * days_ago, days_ago=days_ago)
    log(farms, 999, farm_id="farm2")

    page = farms.get_logs("farm1")
    assert page.total == 3
    assert [entry.amount for entry in page.logs] == [100, 300, 500]

    page = farms.get_logs("farm1", limit=1, offset=1)
    assert [entry.amount for entry in page.logs] == [300]
    assert page.total == 3


def test_logs_for_unregistered_farm_are_kept(farms):
    log(farms, 250, farm_id="field-x")
    assert farms.get_logs("field-x").total == 1


def test_monthly_savings(farms):
    # farm1: 75% current vs 60% traditional efficiency, 0.003 per liter
    log(farms, 6000, days_ago=3)
    log(farms, 4000, days_ago=20)
    log(farms, 9000, days_ago=45)

    report = farms.calculate_savings("farm1", SavingsPeriod.MONTHLY)

    assert report.farm_name == "Karimov Cotton Farm"
    assert report.current_system.water_used == 10000
    assert report.current_system.cost == 30.0
    assert report.traditional_system.water_used == 12500
    assert report.traditional_system.cost == 37.5
    assert report.savings.water_saved == 2500
    assert report.savings.cost_saved == 7.5
    assert report.savings.efficiency_gain == 15
    assert report.savings.percentage_saved == 20
    assert report.environmental_impact.co2_saved == 1.0
    assert report.environmental_impact.energy_saved == 2.5
    assert report.environmental_impact.households_equivalent == 17
    assert report.projections["monthly"].water_saved == 2500
    assert report.projections["yearly"].water_saved == 30417


def test_weekly_savings_only_count_the_last_week(farms):
    log(farms, 6000, days_ago=3)
    log(farms, 4000, days_ago=20)

    report = farms.calculate_savings("farm1", "weekly")
    assert report.period == SavingsPeriod.WEEKLY
    assert report.current_system.water_used == 6000


def test_savings_without_logs(farms):
    report = farms.calculate_savings("farm2")
    assert report.savings.water_saved == 0
    assert report.savings.percentage_saved == 0


def test_savings_for_unknown_farm(farms):
    with pytest.raises(FarmNotFoundError):
        farms.calculate_savings("farm404")


def test_reset_restores_samples(farms):
    log(farms, 100)
    farms.reset()
    assert farms.get_logs("farm1").total == 0
    assert farms.get_farm("farm1").total_water_used == 0
