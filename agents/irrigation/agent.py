# server/agents/irrigation/agent.py
"""
Irrigation agent - daily irrigation advice from live weather and field state
"""

import asyncio
import json
from typing import Optional
from datetime import datetime

from agents.base import BaseAgent
from agents.irrigation.models import (
    IrrigationRequest, IrrigationResponse, WeatherObservation
)
from agents.irrigation.service import IrrigationService
from agents.reference.service import ReferenceDataService
from agents.weather.service import WeatherService
from core.exceptions import AgentError, AgentConfigError

class IrrigationAgent(BaseAgent[IrrigationRequest, IrrigationResponse]):
    """
    Irrigation advisory agent using FAO-56 Penman-Monteith

    Features:
    - Current weather from the weather service
    - Crop coefficient (Kc) based on growth stage
    - Soil water balance against field capacity and wilting point
    - Weather adjustments for rain, wind and humidity
    """

    response_model = IrrigationResponse

    def __init__(self, weather_service: Optional[WeatherService] = None,
                 reference: Optional[ReferenceDataService] = None):
        super().__init__("irrigation")
        self.service = IrrigationService(config=self.config, reference=reference)
        self.weather_service = weather_service or WeatherService(
            self.settings.openweather_api_key, self.settings.get_agent_config("weather")
        )
        self.logger.info("Irrigation agent initialized")

    def _validate_config(self) -> None:
        """Validate irrigation agent configuration"""
        fallback = self.config.get("fallback_weather")
        if fallback is not None:
            try:
                WeatherObservation(**fallback)
            except ValueError as e:
                raise AgentConfigError(f"Invalid fallback_weather: {e}") from e

        required_config = ["default_soil_type", "default_irrigation_efficiency", "fallback_weather"]
        missing = [key for key in required_config if key not in self.config]
        if missing:
            self.logger.warning(f"Missing irrigation config (using defaults): {missing}")

    def get_cache_key(self, request: IrrigationRequest) -> str:
        """Key on the resolved parameters so configured defaults are part of the key"""
        params = self.service.build_parameters(request).model_dump(mode="json")
        params["location"] = request.location
        return f"{self.agent_name}:{json.dumps(params, sort_keys=True)}"

    async def process_request(self, request: IrrigationRequest) -> IrrigationResponse:
        """Process irrigation recommendation request"""

        self.logger.info(f"Processing irrigation request for {request.crop_type} at {request.location}")

        try:
            weather, weather_source = await self._fetch_weather(request.location)

            params = self.service.build_parameters(request)
            recommendation = self.service.recommend(params, weather)
            crop_info = self.service.crop_summary(request.crop_type, recommendation)

            amount = recommendation.irrigation_amount_liters
            message = {
                "irrigate": f"Irrigate {amount} L/ha {recommendation.optimal_time}",
                "maybe": f"Optional irrigation of {amount} L/ha {recommendation.optimal_time}",
                "dont-irrigate": "No irrigation needed today",
            }[recommendation.verdict.value]

            response = IrrigationResponse(
                success=True,
                data=recommendation,
                location=request.location,
                crop_info=crop_info,
                message=message,
                timestamp=datetime.now().isoformat(),
                metadata={
                    "weather_source": weather_source,
                    "calculation_method": "fao56_pm",
                    "crop_details": self.service.reference.get_crop_details(request.crop_type),
                }
            )

            self.logger.info(
                f"Recommendation for {request.crop_type}: {recommendation.verdict.value}, "
                f"{recommendation.irrigation_amount_mm:.2f}mm"
            )
            return response

        except Exception as e:
            self.logger.error(f"Error processing irrigation request: {e}")
            raise AgentError(f"Failed to process irrigation request: {e}") from e

    async def _fetch_weather(self, location: str):
        """Fetch current weather asynchronously, falling back to configured defaults"""
        try:
            current = await asyncio.get_running_loop().run_in_executor(
                None,
                self.weather_service.get_current_weather,
                location
            )
            return current.irrigation, "weather_service"
        except Exception as e:
            self.logger.warning(f"Could not fetch weather data for {location}: {e}")
            return self.service.fallback_weather(), "default"

    def get_fallback_response(self, request: IrrigationRequest, error: Exception) -> IrrigationResponse:
        """Get fallback response when agent fails"""
        return IrrigationResponse(
            success=False,
            data=None,
            location=request.location,
            message=f"Unable to compute irrigation recommendation: {str(error)}",
            timestamp=datetime.now().isoformat(),
            metadata={"fallback": True, "error": str(error)}
        )
