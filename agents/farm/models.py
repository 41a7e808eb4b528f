# server/agents/farm/models.py
"""
Pydantic models for farm records, irrigation logs and savings reports
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

class SavingsPeriod(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

PERIOD_DAYS = {
    SavingsPeriod.WEEKLY: 7,
    SavingsPeriod.MONTHLY: 30,
    SavingsPeriod.YEARLY: 365,
}

class FarmCreate(BaseModel):
    name: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1, description="City used for weather lookups")
    crop_type: str = Field(..., min_length=1)
    area: float = Field(..., gt=0, description="Area (hectares)")
    soil_type: str = "loamy"
    current_efficiency: float = Field(75.0, gt=0, le=100, description="Current system efficiency (%)")
    traditional_efficiency: float = Field(60.0, gt=0, le=100, description="Traditional system efficiency (%)")
    water_cost_per_liter: float = Field(0.003, ge=0)

class Farm(FarmCreate):
    id: str
    monthly_water_usage: float = 0.0
    total_water_used: float = 0.0
    last_irrigation: Optional[datetime] = None
    created_at: datetime

class IrrigationLogCreate(BaseModel):
    farm_id: str = Field(..., min_length=1)
    crop_type: str = Field(..., min_length=1)
    area: float = Field(..., gt=0, description="Irrigated area (hectares)")
    amount: float = Field(..., gt=0, description="Water applied (liters)")
    duration: Optional[float] = Field(None, ge=0, description="Duration (minutes)")
    zones: List[str] = Field(default_factory=list)
    weather_conditions: Dict[str, Any] = Field(default_factory=dict)
    notes: str = ""

class IrrigationLog(IrrigationLogCreate):
    id: str
    timestamp: datetime
    created_at: datetime

class LogPage(BaseModel):
    logs: List[IrrigationLog]
    total: int
    limit: int
    offset: int

class SystemUsage(BaseModel):
    water_used: int
    cost: float
    efficiency: float

class Savings(BaseModel):
    water_saved: int
    cost_saved: float
    efficiency_gain: int
    percentage_saved: int

class EnvironmentalImpact(BaseModel):
    co2_saved: float = Field(..., description="kg CO2")
    energy_saved: float = Field(..., description="kWh")
    households_equivalent: int

class Projection(BaseModel):
    water_saved: int
    cost_saved: float

class SavingsReport(BaseModel):
    farm_id: str
    farm_name: str
    period: SavingsPeriod
    current_system: SystemUsage
    traditional_system: SystemUsage
    savings: Savings
    environmental_impact: EnvironmentalImpact
    projections: Dict[str, Projection]
    timestamp: str
