# server/agents/reference/models.py
"""
Pydantic models for the crop and soil reference database
"""
from enum import Enum
from typing import Dict, List, Optional, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class GrowthStage(str, Enum):
    """Crop development phases, declared in the order they occur"""
    INITIAL = "initial"
    DEVELOPMENT = "development"
    MID = "mid"
    LATE = "late"
    HARVEST = "harvest"


GROWTH_STAGES = tuple(GrowthStage)
TERMINAL_STAGE = GrowthStage.HARVEST


class StageParameters(BaseModel):
    model_config = ConfigDict(frozen=True)

    kc: float = Field(..., gt=0, le=2, description="Crop coefficient for the stage")
    duration: int = Field(..., gt=0, strict=True, description="Stage length in days")


class WaterRequirements(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_seasonal: float = Field(..., ge=0)
    unit: str = "mm/ha"
    critical_periods: List[str] = Field(default_factory=list)


class SoilAdjustment(BaseModel):
    model_config = ConfigDict(frozen=True)

    water_retention: float = Field(..., gt=0)
    drainage: str
    irrigation_frequency: float = Field(..., gt=0)


class CropProfile(BaseModel):
    """One crop with its five-stage Kc/duration table"""
    model_config = ConfigDict(frozen=True)

    crop_id: str
    name: str
    scientific_name: Optional[str] = None
    description: str = "Standard irrigation practices apply."
    stages: Dict[GrowthStage, StageParameters]
    water_requirements: Optional[WaterRequirements] = None
    growing_season: Optional[Dict[str, Any]] = None
    soil_adjustments: Dict[str, SoilAdjustment] = Field(default_factory=dict)
    irrigation_schedule: Optional[Dict[str, Any]] = None
    yield_factors: Optional[Dict[str, Any]] = None

    @field_validator("stages")
    @classmethod
    def _all_stages_in_order(cls, stages: Dict[GrowthStage, StageParameters]) -> Dict[GrowthStage, StageParameters]:
        missing = [stage.value for stage in GROWTH_STAGES if stage not in stages]
        if missing:
            raise ValueError(f"missing growth stages: {missing}")
        return {stage: stages[stage] for stage in GROWTH_STAGES}

    @property
    def total_duration(self) -> int:
        return sum(params.duration for params in self.stages.values())


class SoilProfile(BaseModel):
    """Hydraulic properties of a soil texture class"""
    model_config = ConfigDict(frozen=True)

    soil_id: str
    name: str
    description: str = ""
    field_capacity: float = Field(..., ge=0, le=1, description="Volumetric water content at field capacity")
    wilting_point: float = Field(..., ge=0, le=1, description="Volumetric water content at wilting point")
    bulk_density: float = Field(..., gt=0, description="g/cm³")
    infiltration_rate: float = Field(..., gt=0, description="mm/hour")
    drainage: Optional[str] = None
    suitability: Dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _positive_available_water(self) -> "SoilProfile":
        if self.field_capacity <= self.wilting_point:
            raise ValueError(
                f"field_capacity ({self.field_capacity}) must exceed wilting_point ({self.wilting_point})"
            )
        return self

    @property
    def available_water_capacity(self) -> float:
        return self.field_capacity - self.wilting_point


class ReferenceData(BaseModel):
    """Read-only crop/soil tables, loaded once and shared by every engine call"""
    model_config = ConfigDict(frozen=True)

    version: str = "1.0.0"
    last_updated: Optional[str] = None
    region: Optional[str] = None
    crops: Dict[str, CropProfile]
    soils: Dict[str, SoilProfile]
    climate: Optional[Dict[str, Any]] = None
    irrigation_guidelines: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def _keys_match_ids(self) -> "ReferenceData":
        for key, crop in self.crops.items():
            if key != crop.crop_id:
                raise ValueError(f"crop key '{key}' does not match crop_id '{crop.crop_id}'")
        for key, soil in self.soils.items():
            if key != soil.soil_id:
                raise ValueError(f"soil key '{key}' does not match soil_id '{soil.soil_id}'")
        return self

    def find_crop(self, crop_type: str) -> Optional[CropProfile]:
        return self.crops.get(normalize_key(crop_type))

    def find_soil(self, soil_type: str) -> Optional[SoilProfile]:
        return self.soils.get(normalize_key(soil_type))


def normalize_key(identifier: Optional[str]) -> str:
    return (identifier or "").strip().lower()
