import math

import pytest
from pydantic import ValidationError

from agents.irrigation.evapotranspiration import (
    compute_reference_evapotranspiration,
    estimate_solar_radiation,
    net_radiation,
    psychrometric_constant,
    saturation_vapor_pressure,
    vapor_pressure_slope,
    wind_function,
)
from agents.irrigation.models import WeatherObservation


def test_saturation_vapor_pressure_at_20c():
    assert saturation_vapor_pressure(20) == pytest.approx(2.338, abs=1e-3)


def test_vapor_pressure_slope_uses_given_es():
    es = saturation_vapor_pressure(25)
    assert vapor_pressure_slope(25, es) == pytest.approx(vapor_pressure_slope(25))
    assert vapor_pressure_slope(25) == pytest.approx(4098 * es / (262.3 ** 2))


def test_psychrometric_constant_scales_with_pressure():
    assert psychrometric_constant(101.3) == pytest.approx(0.665 * 1.013)
    assert psychrometric_constant(50) == pytest.approx(psychrometric_constant(100) / 2)


def test_wind_function():
    assert wind_function(0) == pytest.approx(0.34)
    assert wind_function(10) == pytest.approx(0.34 * 6.4)


def test_solar_radiation_estimate():
    assert estimate_solar_radiation(25, 60) == pytest.approx(0.16 * math.sqrt(42.8) * 0.4 * 10)


def test_solar_radiation_estimate_below_root_is_zero():
    assert estimate_solar_radiation(-30, 40) == 0.0


def test_zero_solar_radiation_is_estimated():
    assert net_radiation(0, 25, 60) == pytest.approx(net_radiation(None, 25, 60))


def test_net_radiation_is_not_clamped():
    assert net_radiation(200, 60, 100) < 0


def test_mild_day_is_plausible(mild_weather):
    et0 = compute_reference_evapotranspiration(mild_weather)
    assert 3 < et0 < 8


def test_pressure_defaults_to_sea_level():
    weather = WeatherObservation(temperature=25, humidity=60, wind_speed=10, solar_radiation=18.5)
    assert weather.pressure == 101.3


def test_negative_result_is_floored():
    weather = WeatherObservation(temperature=60, humidity=100, wind_speed=0, solar_radiation=200)
    assert compute_reference_evapotranspiration(weather) == 0.0


@pytest.mark.parametrize("temperature", [-40, -10, 0, 15, 30, 45, 60])
@pytest.mark.parametrize("humidity", [0, 30, 70, 100])
@pytest.mark.parametrize("solar_radiation", [None, 0, 5, 25, 60])
def test_never_negative(temperature, humidity, solar_radiation):
    weather = WeatherObservation(
        temperature=temperature,
        humidity=humidity,
        wind_speed=20,
        solar_radiation=solar_radiation,
    )
    et0 = compute_reference_evapotranspiration(weather)
    assert et0 >= 0
    assert math.isfinite(et0)


def test_drier_air_increases_demand():
    humid = WeatherObservation(temperature=30, humidity=80, wind_speed=10, solar_radiation=20)
    dry = WeatherObservation(temperature=30, humidity=20, wind_speed=10, solar_radiation=20)
    assert compute_reference_evapotranspiration(dry) > compute_reference_evapotranspiration(humid)


@pytest.mark.parametrize("fields", [
    {"humidity": 50},
    {"temperature": 20},
    {"temperature": float("nan"), "humidity": 50},
    {"temperature": 20, "humidity": float("inf")},
    {"temperature": 20, "humidity": 120},
    {"temperature": 20, "humidity": 50, "wind_speed": -1},
    {"temperature": 20, "humidity": 50, "pressure": 0},
])
def test_invalid_observations_are_rejected(fields):
    with pytest.raises(ValidationError):
        WeatherObservation(**fields)
