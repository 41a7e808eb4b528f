# server/agents/weather/models.py
"""
Pydantic models for weather agent
"""
from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any

from agents.irrigation.models import WeatherObservation

class Coordinates(BaseModel):
    lat: float
    lon: float

class LocationInfo(BaseModel):
    name: str
    country: Optional[str] = None
    coordinates: Optional[Coordinates] = None

class CurrentConditions(BaseModel):
    temperature: float
    feels_like: Optional[float] = None
    humidity: float
    pressure: float = Field(..., description="Sea-level pressure (hPa)")
    wind_speed: float = Field(..., description="Wind speed (km/h)")
    wind_direction: Optional[float] = None
    visibility: Optional[float] = Field(None, description="Visibility (km)")
    uv_index: float = 0
    condition: str
    description: str
    icon: Optional[str] = None
    cloudiness: float = 0
    rain: float = 0
    snow: float = 0

class CurrentWeather(BaseModel):
    location: LocationInfo
    current: CurrentConditions
    irrigation: WeatherObservation
    condition: str
    timestamp: str

class TemperatureRange(BaseModel):
    min: float
    max: float
    average: float

class DailyForecast(BaseModel):
    date: str
    temperature: TemperatureRange
    humidity: float
    wind_speed: float = Field(..., description="Mean wind speed (km/h)")
    precipitation: float
    condition: str
    description: str
    icon: Optional[str] = None
    irrigation: WeatherObservation

class WeatherForecast(BaseModel):
    location: LocationInfo
    forecasts: List[DailyForecast]
    timestamp: str

class WeatherData(BaseModel):
    location: LocationInfo
    current: CurrentWeather
    forecast: Optional[WeatherForecast] = None
    timestamp: str
    source: str

class WeatherRequest(BaseModel):
    location: str = Field(..., min_length=1, description="City or 'city,country'")
    include_forecast: bool = Field(False, description="Also return the daily forecast")

class WeatherResponse(BaseModel):
    success: bool
    data: WeatherData
    message: str
    timestamp: str
    metadata: Optional[Dict[str, Any]] = None
