# server/agents/irrigation/water_balance.py
"""
Simplified single-layer soil water balance
"""
import logging
from typing import NamedTuple, Optional

from agents.irrigation.models import SoilWaterBalance
from agents.reference.models import ReferenceData, SoilProfile
from agents.reference.service import get_reference_data
from core.exceptions import ReferenceDataError

logger = logging.getLogger(__name__)

FALLBACK_SOIL = "loamy"


class SoilResolution(NamedTuple):
    profile: SoilProfile
    fallback: bool


def resolve_soil_profile(soil_type: str, reference: Optional[ReferenceData] = None) -> SoilResolution:
    if reference is None:
        reference = get_reference_data()

    soil = reference.find_soil(soil_type)
    if soil is not None:
        return SoilResolution(soil, False)

    logger.debug(f"Unknown soil '{soil_type}', using {FALLBACK_SOIL} profile")
    soil = reference.find_soil(FALLBACK_SOIL)
    if soil is None:
        raise ReferenceDataError(f"Reference data has no '{FALLBACK_SOIL}' soil to fall back on")
    return SoilResolution(soil, True)


def balance_for_profile(soil: SoilProfile, current_moisture: float,
                        crop_et: float, rainfall: float) -> SoilWaterBalance:
    """
    Water balance for a resolved soil profile.

    Moisture inputs and outputs are percentages; crop ET and rainfall are mm.
    current_available_water_percent exceeds 100 when the soil is wetter than
    field capacity and is deliberately left unclamped.
    """
    moisture = current_moisture / 100.0
    awc = soil.field_capacity - soil.wilting_point
    if awc <= 0:
        raise ReferenceDataError(f"Soil '{soil.soil_id}' has no available water capacity")

    available = max(0.0, moisture - soil.wilting_point)
    available_percent = available / awc * 100.0
    deficit = max(0.0, crop_et - rainfall)

    after_rainfall = min(soil.field_capacity, moisture + rainfall / 100.0)
    after_et = max(soil.wilting_point, after_rainfall - crop_et / 100.0)

    return SoilWaterBalance(
        current_moisture=moisture * 100.0,
        available_water_capacity=awc * 100.0,
        current_available_water=available * 100.0,
        current_available_water_percent=available_percent,
        water_deficit=deficit,
        moisture_after_rainfall=after_rainfall * 100.0,
        moisture_after_et=after_et * 100.0,
        wilting_point=soil.wilting_point * 100.0,
        field_capacity=soil.field_capacity * 100.0,
    )


def compute_water_balance(soil_type: str, current_moisture: float, crop_et: float,
                          rainfall: float, reference: Optional[ReferenceData] = None) -> SoilWaterBalance:
    soil = resolve_soil_profile(soil_type, reference).profile
    return balance_for_profile(soil, current_moisture, crop_et, rainfall)
