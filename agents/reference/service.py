# server/agents/reference/service.py
"""
Reference data service - crop coefficients, soil properties and Uzbekistan
agronomic information backed by a JSON database
"""
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from agents.reference.models import (
    CropProfile, GrowthStage, ReferenceData, SoilAdjustment, SoilProfile, normalize_key
)
from core.config import get_settings
from core.exceptions import ReferenceDataError
from core.utils import round_half_up

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_PATH = Path(__file__).parent / "data" / "crop_database.json"


def load_reference_data(path: Optional[Path] = None) -> ReferenceData:
    """Read and validate the crop database; malformed tables fail here, not per call"""
    database_path = Path(path) if path else DEFAULT_DATABASE_PATH
    try:
        with open(database_path, "r", encoding="utf-8") as fh:
            raw = json.load(fh)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read crop database {database_path}: {e}")
        raise ReferenceDataError(f"Could not read crop database {database_path}: {e}") from e

    try:
        data = ReferenceData.model_validate(raw)
    except ValidationError as e:
        logger.error(f"Crop database {database_path} failed validation: {e}")
        raise ReferenceDataError(f"Invalid crop database {database_path}: {e}") from e

    logger.info(f"Crop database loaded: {len(data.crops)} crops, {len(data.soils)} soil types")
    return data


@lru_cache()
def get_reference_data() -> ReferenceData:
    """Get the process-wide reference tables"""
    return load_reference_data(get_settings().crop_database_path)


class ReferenceDataService:
    """Lookups over the crop/soil database"""

    def __init__(self, data: Optional[ReferenceData] = None):
        self.data = data or get_reference_data()

    def reload(self, path: Optional[Path] = None) -> None:
        self.data = load_reference_data(path or get_settings().crop_database_path)

    # ---------- Crops ----------

    def get_available_crops(self) -> List[Dict[str, Any]]:
        return [
            {
                "type": crop_id,
                "name": crop.name,
                "scientific_name": crop.scientific_name,
                "description": crop.description,
            }
            for crop_id, crop in self.data.crops.items()
        ]

    def get_crop_info(self, crop_type: str) -> Optional[CropProfile]:
        return self.data.find_crop(crop_type)

    def get_crop_details(self, crop_type: str) -> Dict[str, Any]:
        """Coefficient and duration tables with the crop description"""
        crop = self.get_crop_info(crop_type)
        if crop is None:
            return {
                "name": crop_type,
                "coefficients": {GrowthStage.MID.value: 1.0},
                "stages": {GrowthStage.MID.value: 60},
                "description": "Crop not found in database",
            }
        return {
            "name": crop_type,
            "coefficients": {stage.value: params.kc for stage, params in crop.stages.items()},
            "stages": {stage.value: params.duration for stage, params in crop.stages.items()},
            "description": crop.description,
        }

    def get_crop_coefficient(self, crop_type: str, growth_stage: str) -> Optional[Dict[str, Any]]:
        crop = self.get_crop_info(crop_type)
        if crop is None:
            return None
        try:
            stage = GrowthStage(normalize_key(growth_stage))
        except ValueError:
            return None
        return crop.stages[stage].model_dump()

    def get_water_requirements(self, crop_type: str) -> Optional[Dict[str, Any]]:
        crop = self.get_crop_info(crop_type)
        if crop is None or crop.water_requirements is None:
            return None
        return crop.water_requirements.model_dump()

    def get_growing_season(self, crop_type: str) -> Optional[Dict[str, Any]]:
        crop = self.get_crop_info(crop_type)
        if crop is None:
            return None
        return crop.growing_season

    def get_optimal_planting_dates(self, crop_type: str) -> Optional[Dict[str, Any]]:
        season = self.get_growing_season(crop_type)
        if not season:
            return None

        # Wheat has separate winter and spring sowings
        if "winter_wheat" in season and "spring_wheat" in season:
            return {
                "winter": season["winter_wheat"]["planting"],
                "spring": season["spring_wheat"]["planting"],
            }
        return season.get("planting")

    def get_critical_irrigation_periods(self, crop_type: str) -> Optional[List[str]]:
        requirements = self.get_water_requirements(crop_type)
        if not requirements or not requirements.get("critical_periods"):
            return None
        return requirements["critical_periods"]

    def get_soil_adjustment(self, crop_type: str, soil_type: str) -> Optional[SoilAdjustment]:
        crop = self.get_crop_info(crop_type)
        if crop is None:
            return None
        return crop.soil_adjustments.get(normalize_key(soil_type))

    def calculate_adjusted_water_requirement(self, crop_type: str, soil_type: str,
                                             base_requirement: float) -> float:
        adjustment = self.get_soil_adjustment(crop_type, soil_type)
        if adjustment is None:
            return base_requirement
        return base_requirement * adjustment.water_retention

    def get_irrigation_schedule(self, crop_type: str) -> Optional[Dict[str, Any]]:
        crop = self.get_crop_info(crop_type)
        return crop.irrigation_schedule if crop else None

    def get_yield_factors(self, crop_type: str) -> Optional[Dict[str, Any]]:
        crop = self.get_crop_info(crop_type)
        return crop.yield_factors if crop else None

    # ---------- Soils ----------

    def get_available_soil_types(self) -> List[Dict[str, Any]]:
        return [
            {"type": soil_id, "name": soil.name, "description": soil.description}
            for soil_id, soil in self.data.soils.items()
        ]

    def get_soil_type_info(self, soil_type: str) -> Optional[SoilProfile]:
        return self.data.find_soil(soil_type)

    def get_crop_soil_suitability(self, crop_type: str, soil_type: str) -> str:
        soil = self.get_soil_type_info(soil_type)
        if soil is None or not soil.suitability:
            return "Unknown"
        return soil.suitability.get(normalize_key(crop_type), "Unknown")

    # ---------- Recommendations ----------

    def get_crop_recommendation(self, crop_type: str, soil_type: str,
                                area: float = 1.0) -> Optional[Dict[str, Any]]:
        """Seasonal water budget and agronomic advice for a crop on a soil"""
        crop = self.get_crop_info(crop_type)
        if crop is None:
            return None

        soil = self.get_soil_type_info(soil_type)
        adjustment = self.get_soil_adjustment(crop_type, soil_type)
        requirements = crop.water_requirements
        base = requirements.total_seasonal if requirements else 0.0
        adjusted = self.calculate_adjusted_water_requirement(crop_type, soil_type, base)

        return {
            "crop": {
                "name": crop.name,
                "scientific_name": crop.scientific_name,
                "description": crop.description,
            },
            "soil": {
                "type": soil_type,
                "name": soil.name if soil else "Unknown",
                "suitability": self.get_crop_soil_suitability(crop_type, soil_type),
            },
            "growing_season": crop.growing_season,
            "water_requirements": {
                "base": base,
                "adjusted": adjusted,
                "for_area": adjusted * area,
                "unit": requirements.unit if requirements else "mm/ha",
            },
            "soil_adjustment": adjustment.model_dump() if adjustment else None,
            "critical_periods": self.get_critical_irrigation_periods(crop_type),
            "irrigation_schedule": crop.irrigation_schedule,
            "yield_factors": crop.yield_factors,
            "recommendations": self.generate_recommendations(crop.crop_id, normalize_key(soil_type), adjustment),
        }

    def generate_recommendations(self, crop_type: str, soil_type: str,
                                 adjustment: Optional[SoilAdjustment]) -> List[Dict[str, str]]:
        recommendations = []

        if adjustment is not None:
            if adjustment.water_retention < 0.8:
                increase = int(round_half_up((1 / adjustment.water_retention - 1) * 100))
                recommendations.append({
                    "type": "irrigation",
                    "priority": "high",
                    "message": f"Increase irrigation frequency by {increase}% due to low water retention",
                })
            if adjustment.drainage == "Poor":
                recommendations.append({
                    "type": "drainage",
                    "priority": "high",
                    "message": "Implement drainage system to prevent waterlogging",
                })
            if adjustment.irrigation_frequency > 1.2:
                recommendations.append({
                    "type": "efficiency",
                    "priority": "medium",
                    "message": "Consider drip irrigation for better water efficiency",
                })

        if crop_type == "rice" and soil_type != "clay":
            recommendations.append({
                "type": "soil",
                "priority": "high",
                "message": "Rice requires clay soil or soil with clay layer for proper water retention",
            })

        if crop_type == "cotton" and soil_type == "sandy":
            recommendations.append({
                "type": "fertilization",
                "priority": "medium",
                "message": "Use split fertilizer applications due to sandy soil leaching",
            })

        return recommendations

    # ---------- Regional information ----------

    def get_climate(self) -> Optional[Dict[str, Any]]:
        return self.data.climate

    def get_irrigation_guidelines(self) -> Optional[Dict[str, Any]]:
        guidelines = self.data.irrigation_guidelines or {}
        return guidelines.get("uzbekistan")

    def get_database_stats(self) -> Dict[str, Any]:
        return {
            "version": self.data.version,
            "last_updated": self.data.last_updated,
            "region": self.data.region,
            "total_crops": len(self.data.crops),
            "total_soil_types": len(self.data.soils),
            "crops": list(self.data.crops.keys()),
            "soil_types": list(self.data.soils.keys()),
        }


@lru_cache()
def get_reference_service() -> ReferenceDataService:
    """Get the shared reference data service"""
    return ReferenceDataService()
