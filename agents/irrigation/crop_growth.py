# server/agents/irrigation/crop_growth.py
"""
Crop growth model - growth stage, crop coefficient (Kc) and crop ET
"""
import logging
from typing import NamedTuple, Optional

from agents.reference.models import GrowthStage, ReferenceData, TERMINAL_STAGE, normalize_key
from agents.reference.service import get_reference_data

logger = logging.getLogger(__name__)

# Used when the crop is not in the reference tables
FALLBACK_STAGE = GrowthStage.MID
FALLBACK_KC = 1.0


class StageResolution(NamedTuple):
    stage: str
    fallback: bool


class CoefficientLookup(NamedTuple):
    kc: float
    fallback: Optional[str]  # "crop", "stage" or None


def locate_growth_stage(crop_type: str, days_since_planting: int,
                        reference: Optional[ReferenceData] = None) -> StageResolution:
    """Walk the cumulative stage boundaries; past the last one is always harvest"""
    if reference is None:
        reference = get_reference_data()

    crop = reference.find_crop(crop_type)
    if crop is None:
        logger.debug(f"Unknown crop '{crop_type}', assuming {FALLBACK_STAGE.value} stage")
        return StageResolution(FALLBACK_STAGE.value, True)

    cumulative_days = 0
    for stage, params in crop.stages.items():
        cumulative_days += params.duration
        if days_since_planting <= cumulative_days:
            return StageResolution(stage.value, False)

    return StageResolution(TERMINAL_STAGE.value, False)


def resolve_growth_stage(crop_type: str, days_since_planting: int,
                         reference: Optional[ReferenceData] = None) -> str:
    return locate_growth_stage(crop_type, days_since_planting, reference).stage


def lookup_crop_coefficient(crop_type: str, growth_stage: str,
                            reference: Optional[ReferenceData] = None) -> CoefficientLookup:
    if reference is None:
        reference = get_reference_data()

    crop = reference.find_crop(crop_type)
    if crop is None:
        logger.debug(f"Unknown crop '{crop_type}', using Kc={FALLBACK_KC}")
        return CoefficientLookup(FALLBACK_KC, "crop")

    try:
        stage = GrowthStage(normalize_key(growth_stage))
    except ValueError:
        logger.debug(f"Unknown stage '{growth_stage}' for {crop.crop_id}, using mid-season Kc")
        return CoefficientLookup(crop.stages[GrowthStage.MID].kc, "stage")

    return CoefficientLookup(crop.stages[stage].kc, None)


def crop_coefficient(crop_type: str, growth_stage: str,
                     reference: Optional[ReferenceData] = None) -> float:
    return lookup_crop_coefficient(crop_type, growth_stage, reference).kc


def compute_crop_evapotranspiration(et0: float, crop_type: str, days_since_planting: int,
                                    reference: Optional[ReferenceData] = None) -> float:
    """Crop evapotranspiration ETc = ET0 * Kc (mm/day)"""
    stage = resolve_growth_stage(crop_type, days_since_planting, reference)
    return et0 * crop_coefficient(crop_type, stage, reference)
