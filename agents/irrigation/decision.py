# server/agents/irrigation/decision.py
"""
Irrigation decision engine

A moisture threshold rule sets the initial verdict and amount, then an
ordered chain of weather adjustments may only downgrade the verdict or
shrink the amount.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from agents.irrigation.crop_growth import locate_growth_stage, lookup_crop_coefficient
from agents.irrigation.evapotranspiration import compute_reference_evapotranspiration
from agents.irrigation.models import (
    CalculationTrace, IrrigationParameters, IrrigationRecommendation,
    SoilWaterBalance, Verdict, WeatherFactors, WeatherObservation
)
from agents.irrigation.water_balance import balance_for_profile, resolve_soil_profile
from agents.reference.models import ReferenceData
from agents.reference.service import get_reference_data
from core.utils import round_half_up

logger = logging.getLogger(__name__)

# Thresholds on available water, as % of available water capacity
CRITICAL_MOISTURE_LEVEL = 30.0
OPTIMAL_MOISTURE_LEVEL = 70.0

DEFICIT_TRIGGER_MM = 2.0
MAX_DAILY_IRRIGATION_MM = 15.0
MAX_OPTIONAL_IRRIGATION_MM = 8.0

RAINFALL_THRESHOLD_MM = 5.0
RAINFALL_REDUCTION = 0.5
WIND_THRESHOLD_KMH = 15.0
WIND_REDUCTION = 0.7
HUMIDITY_THRESHOLD = 80.0
HUMIDITY_REDUCTION = 0.8

HOT_DAY_TEMPERATURE = 30.0
COOL_DAY_TEMPERATURE = 15.0


@dataclass(frozen=True)
class DecisionContext:
    recent_rainfall: float
    wind_speed: float
    humidity: float
    temperature: float


RuleOutcome = Tuple[Verdict, float, Optional[str]]
AdjustmentRule = Callable[[Verdict, float, DecisionContext], RuleOutcome]


def _fmt(value: float) -> str:
    """Plain decimal text, whole numbers without a trailing .0"""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def evaluate_moisture_thresholds(balance: SoilWaterBalance, efficiency: float) -> Tuple[Verdict, float, str]:
    """Initial verdict from available water; exactly one branch applies"""
    awp = balance.current_available_water_percent

    if awp < CRITICAL_MOISTURE_LEVEL:
        # Refill to 70% of field capacity; 1% volumetric ~ 10 mm
        target_moisture = balance.field_capacity * (OPTIMAL_MOISTURE_LEVEL / 100.0)
        moisture_deficit = max(0.0, target_moisture - balance.current_moisture)
        amount = moisture_deficit * 10 / efficiency
        return Verdict.IRRIGATE, amount, f"Critical soil moisture level ({awp:.1f}%)."

    if awp < OPTIMAL_MOISTURE_LEVEL and balance.water_deficit > DEFICIT_TRIGGER_MM:
        amount = min(balance.water_deficit, MAX_DAILY_IRRIGATION_MM) / efficiency
        return Verdict.IRRIGATE, amount, f"Suboptimal soil moisture ({awp:.1f}%) with water deficit."

    if awp < OPTIMAL_MOISTURE_LEVEL:
        amount = min(balance.water_deficit, MAX_OPTIONAL_IRRIGATION_MM) / efficiency
        return Verdict.MAYBE, amount, f"Moderate soil moisture ({awp:.1f}%)."

    return Verdict.DONT_IRRIGATE, 0.0, f"Adequate soil moisture ({awp:.1f}%)."


def rainfall_rule(verdict: Verdict, amount: float, context: DecisionContext) -> RuleOutcome:
    if context.recent_rainfall <= RAINFALL_THRESHOLD_MM:
        return verdict, amount, None

    rainfall = _fmt(context.recent_rainfall)
    if verdict == Verdict.IRRIGATE:
        return Verdict.MAYBE, amount * RAINFALL_REDUCTION, f"Recent rainfall ({rainfall}mm) detected."
    if verdict == Verdict.MAYBE:
        return Verdict.DONT_IRRIGATE, 0.0, f"Recent rainfall ({rainfall}mm) makes irrigation unnecessary."
    return verdict, amount, None


def wind_rule(verdict: Verdict, amount: float, context: DecisionContext) -> RuleOutcome:
    if context.wind_speed > WIND_THRESHOLD_KMH and verdict == Verdict.IRRIGATE:
        return (Verdict.MAYBE, amount * WIND_REDUCTION,
                f"High wind conditions ({_fmt(context.wind_speed)} km/h).")
    return verdict, amount, None


def humidity_rule(verdict: Verdict, amount: float, context: DecisionContext) -> RuleOutcome:
    if context.humidity > HUMIDITY_THRESHOLD and verdict == Verdict.IRRIGATE:
        return (Verdict.MAYBE, amount * HUMIDITY_REDUCTION,
                f"High humidity ({_fmt(context.humidity)}%) reduces water demand.")
    return verdict, amount, None


ADJUSTMENT_RULES: Tuple[AdjustmentRule, ...] = (rainfall_rule, wind_rule, humidity_rule)


def apply_adjustments(verdict: Verdict, amount: float, context: DecisionContext,
                      rules: Sequence[AdjustmentRule] = ADJUSTMENT_RULES) -> Tuple[Verdict, float, List[str]]:
    fragments = []
    for rule in rules:
        verdict, amount, fragment = rule(verdict, amount, context)
        if fragment:
            fragments.append(fragment)
    return verdict, amount, fragments


def optimal_time_window(temperature: float) -> str:
    if temperature > HOT_DAY_TEMPERATURE:
        return "05:00-07:00"
    if temperature < COOL_DAY_TEMPERATURE:
        return "08:00-10:00"
    return "06:00-08:00"


def liters_per_hectare(amount_mm: float, area: float) -> int:
    return max(0, int(round_half_up(amount_mm * 10 * area)))


def recommend(params: IrrigationParameters, weather: WeatherObservation,
              reference: Optional[ReferenceData] = None) -> IrrigationRecommendation:
    """Turn weather, crop and soil state into an irrigation recommendation"""
    if reference is None:
        reference = get_reference_data()

    fallbacks = []

    et0 = compute_reference_evapotranspiration(weather)

    stage = locate_growth_stage(params.crop_type, params.days_since_planting, reference)
    kc = lookup_crop_coefficient(params.crop_type, stage.stage, reference)
    if stage.fallback or kc.fallback == "crop":
        fallbacks.append("crop")
    elif kc.fallback == "stage":
        fallbacks.append("stage")
    crop_et = et0 * kc.kc

    soil = resolve_soil_profile(params.soil_type, reference)
    if soil.fallback:
        fallbacks.append("soil")
    balance = balance_for_profile(soil.profile, params.soil_moisture, crop_et, params.recent_rainfall)

    verdict, amount, reason = evaluate_moisture_thresholds(balance, params.irrigation_efficiency)
    context = DecisionContext(
        recent_rainfall=params.recent_rainfall,
        wind_speed=weather.wind_speed,
        humidity=weather.humidity,
        temperature=weather.temperature,
    )
    verdict, amount, adjustments = apply_adjustments(verdict, amount, context)
    amount = max(0.0, amount)

    logger.debug(
        f"{params.crop_type}/{params.soil_type}: ET0={et0:.2f} Kc={kc.kc} "
        f"AW={balance.current_available_water_percent:.1f}% -> {verdict.value} {amount:.2f}mm"
    )

    return IrrigationRecommendation(
        verdict=verdict,
        irrigation_amount_mm=amount,
        irrigation_amount_liters=liters_per_hectare(amount, params.area),
        optimal_time=optimal_time_window(weather.temperature),
        rationale=" ".join([reason] + adjustments),
        calculations=CalculationTrace(
            et0=round_half_up(et0, 2),
            crop_et=round_half_up(crop_et, 2),
            growth_stage=stage.stage,
            crop_coefficient=round_half_up(kc.kc, 2),
            water_balance=balance,
            recent_rainfall=params.recent_rainfall,
            irrigation_efficiency=params.irrigation_efficiency,
            fallbacks=fallbacks,
        ),
        weather_factors=WeatherFactors(
            temperature=weather.temperature,
            humidity=weather.humidity,
            wind_speed=weather.wind_speed,
            solar_radiation=weather.solar_radiation if weather.solar_radiation else "estimated",
        ),
        inputs=params,
    )
