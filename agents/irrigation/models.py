# server/agents/irrigation/models.py
"""
Pydantic models for irrigation agent
"""
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Verdict(str, Enum):
    IRRIGATE = "irrigate"
    MAYBE = "maybe"
    DONT_IRRIGATE = "dont-irrigate"


# Water-use order, least first
VERDICT_SEVERITY = {
    Verdict.DONT_IRRIGATE: 0,
    Verdict.MAYBE: 1,
    Verdict.IRRIGATE: 2,
}


class WeatherObservation(BaseModel):
    """A single weather reading as consumed by the ET0 engine"""
    model_config = ConfigDict(frozen=True)

    temperature: float = Field(..., ge=-90, le=60, allow_inf_nan=False, description="Air temperature (°C)")
    humidity: float = Field(..., ge=0, le=100, allow_inf_nan=False, description="Relative humidity (%)")
    wind_speed: float = Field(0.0, ge=0, allow_inf_nan=False, description="Wind speed (km/h)")
    pressure: float = Field(101.3, gt=0, allow_inf_nan=False, description="Atmospheric pressure (kPa)")
    solar_radiation: Optional[float] = Field(None, ge=0, allow_inf_nan=False, description="Solar radiation (MJ/m²/day)")
    precipitation: Optional[float] = Field(None, ge=0, allow_inf_nan=False, description="Precipitation (mm)")


class IrrigationParameters(BaseModel):
    model_config = ConfigDict(frozen=True)

    crop_type: str = Field(..., description="Crop type (cotton, wheat, rice)")
    soil_type: str = Field("loamy", description="Soil type (sandy, loamy, clay, clay_loam)")
    days_since_planting: int = Field(60, ge=0, description="Days since planting")
    area: float = Field(1.0, gt=0, allow_inf_nan=False, description="Field area (hectares)")
    recent_rainfall: float = Field(0.0, ge=0, allow_inf_nan=False, description="Recent rainfall (mm)")
    soil_moisture: float = Field(50.0, ge=0, le=100, allow_inf_nan=False, description="Current soil moisture (%)")
    irrigation_efficiency: float = Field(0.85, gt=0, le=1, description="Irrigation system efficiency (0-1]")


class SoilWaterBalance(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_moisture: float
    available_water_capacity: float
    current_available_water: float
    current_available_water_percent: float
    water_deficit: float
    moisture_after_rainfall: float
    moisture_after_et: float
    wilting_point: float
    field_capacity: float


class CalculationTrace(BaseModel):
    model_config = ConfigDict(frozen=True)

    et0: float
    crop_et: float
    growth_stage: str
    crop_coefficient: float
    water_balance: SoilWaterBalance
    recent_rainfall: float
    irrigation_efficiency: float
    fallbacks: List[str] = Field(default_factory=list, description="Reference lookups that used a default")


class WeatherFactors(BaseModel):
    model_config = ConfigDict(frozen=True)

    temperature: float
    humidity: float
    wind_speed: float
    solar_radiation: Union[float, str]


class IrrigationRecommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    verdict: Verdict
    irrigation_amount_mm: float = Field(..., ge=0)
    irrigation_amount_liters: int = Field(..., ge=0, description="Liters per hectare")
    optimal_time: str
    rationale: str
    calculations: CalculationTrace
    weather_factors: WeatherFactors
    inputs: IrrigationParameters


class IrrigationRequest(IrrigationParameters):
    location: str = Field(..., description="City or 'city,country' understood by the weather provider")


class CropSummary(BaseModel):
    name: str
    growth_stage: str
    crop_coefficient: float
    description: str


class IrrigationResponse(BaseModel):
    success: bool
    data: Optional[IrrigationRecommendation] = None
    location: Optional[str] = None
    crop_info: Optional[CropSummary] = None
    message: str
    timestamp: str
    metadata: Optional[Dict[str, Any]] = None


class ET0Request(BaseModel):
    weather: WeatherObservation
