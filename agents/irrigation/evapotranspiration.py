# server/agents/irrigation/evapotranspiration.py
"""
Reference evapotranspiration (ET0) - simplified Penman-Monteith

The radiation terms are field approximations rather than the full FAO-56
clear-sky model; keep the constants as they are so results stay comparable
with previously issued recommendations.
"""
import math
import logging
from typing import Optional

from agents.irrigation.models import WeatherObservation

logger = logging.getLogger(__name__)

_SIGMA = 4.903e-9               # MJ K-4 m-2 day-1
_LAMBDA = 2.45                  # MJ kg-1, latent heat of vaporization
_PSYCHROMETRIC_COEFF = 0.665    # kPa K-1 per 100 kPa of pressure
_ALBEDO = 0.23
_CANOPY_RESISTANCE = 70.0       # s m-1
_AERODYNAMIC_RESISTANCE = 208.0 # s m-1
_SOIL_HEAT_FRACTION = 0.1


def saturation_vapor_pressure(temperature: float) -> float:
    """Saturation vapor pressure (kPa)"""
    return 0.6108 * math.exp((17.27 * temperature) / (temperature + 237.3))


def vapor_pressure_slope(temperature: float, es: Optional[float] = None) -> float:
    """Slope of the saturation vapor pressure curve (kPa/°C)"""
    if es is None:
        es = saturation_vapor_pressure(temperature)
    return 4098.0 * es / ((temperature + 237.3) ** 2)


def psychrometric_constant(pressure_kpa: float) -> float:
    """Psychrometric constant (kPa/°C)"""
    return _PSYCHROMETRIC_COEFF * pressure_kpa / 100.0


def estimate_solar_radiation(temperature: float, humidity: float) -> float:
    """Solar radiation estimate (MJ/m²/day) when no measurement is available"""
    # Below -17.8 °C the estimate has no real root; treat as no sunshine
    return 0.16 * math.sqrt(max(0.0, temperature + 17.8)) * (1 - humidity / 100.0) * 10


def net_radiation(solar_radiation: Optional[float], temperature: float, humidity: float) -> float:
    """
    Net radiation Rn (MJ/m²/day)

    A missing or zero solar radiation reading is replaced by an estimate from
    temperature and humidity. The result is not clamped; negative values are
    possible on cold, humid days.
    """
    rs = solar_radiation
    if not rs:
        rs = estimate_solar_radiation(temperature, humidity)

    rns = (1 - _ALBEDO) * rs
    rnl = (
        _SIGMA * (temperature + 273.15) ** 4
        * (0.34 - 0.14 * math.sqrt(humidity / 100.0))
        * (1.35 * rs / 20.0 - 0.35)
    )
    return rns - rnl


def wind_function(wind_speed: float) -> float:
    return 0.34 * (1 + 0.54 * wind_speed)


def compute_reference_evapotranspiration(weather: WeatherObservation) -> float:
    """Reference evapotranspiration ET0 (mm/day), never negative"""
    t = weather.temperature
    rh = weather.humidity

    es = saturation_vapor_pressure(t)
    ea = (rh / 100.0) * es
    vpd = es - ea
    delta = vapor_pressure_slope(t, es)
    gamma = psychrometric_constant(weather.pressure)

    rn = net_radiation(weather.solar_radiation, t, rh)
    g = _SOIL_HEAT_FRACTION * rn

    numerator = delta * (rn - g) + _LAMBDA * wind_function(weather.wind_speed) * vpd
    denominator = delta + gamma * (1 + _CANOPY_RESISTANCE / _AERODYNAMIC_RESISTANCE)
    et0 = numerator / denominator

    if et0 < 0:
        logger.debug(f"ET0 {et0:.3f} floored to 0 for T={t}, RH={rh}")
        return 0.0
    return et0
