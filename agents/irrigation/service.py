# server/agents/irrigation/service.py
"""
Irrigation service - binds the decision engine to the loaded crop/soil database
"""
import logging
from typing import Any, Dict, Optional

from agents.irrigation.decision import recommend
from agents.irrigation.evapotranspiration import compute_reference_evapotranspiration
from agents.irrigation.models import (
    CropSummary, IrrigationParameters, IrrigationRecommendation, IrrigationRequest, WeatherObservation
)
from agents.reference.models import ReferenceData
from agents.reference.service import ReferenceDataService, get_reference_service
from core.utils import round_half_up

logger = logging.getLogger(__name__)

# Request field -> irrigation_config key supplying its default
PARAMETER_DEFAULTS = {
    "soil_type": "default_soil_type",
    "days_since_planting": "default_days_since_planting",
    "area": "default_area_ha",
    "soil_moisture": "default_soil_moisture",
    "irrigation_efficiency": "default_irrigation_efficiency",
}

class IrrigationService:
    """Service for irrigation recommendations using FAO-56 ET0 and a soil water balance"""

    def __init__(self, config: Dict[str, Any], reference: Optional[ReferenceDataService] = None):
        self.config = config
        self.reference = reference or get_reference_service()

    @property
    def data(self) -> ReferenceData:
        return self.reference.data

    def build_parameters(self, request: IrrigationRequest) -> IrrigationParameters:
        """Engine inputs from a request; fields the caller left unset take the configured defaults"""
        values = request.model_dump(exclude={"location"})
        for field, key in PARAMETER_DEFAULTS.items():
            if field not in request.model_fields_set and key in self.config:
                values[field] = self.config[key]
        return IrrigationParameters(**values)

    def compute_et0(self, weather: WeatherObservation) -> float:
        """Reference evapotranspiration (mm/day), rounded for display"""
        return round_half_up(compute_reference_evapotranspiration(weather), 2)

    def recommend(self, params: IrrigationParameters, weather: WeatherObservation) -> IrrigationRecommendation:
        return recommend(params, weather, self.data)

    def fallback_weather(self) -> WeatherObservation:
        """Weather used when no observation can be fetched for a location"""
        defaults = self.config.get("fallback_weather") or {
            "temperature": 25.0,
            "humidity": 60.0,
            "wind_speed": 10.0,
            "pressure": 101.3,
            "solar_radiation": 18.5,
            "precipitation": 0.0,
        }
        return WeatherObservation(**defaults)

    def crop_summary(self, crop_type: str, recommendation: IrrigationRecommendation) -> CropSummary:
        details = self.reference.get_crop_details(crop_type)
        return CropSummary(
            name=details["name"],
            growth_stage=recommendation.calculations.growth_stage,
            crop_coefficient=recommendation.calculations.crop_coefficient,
            description=details["description"],
        )
