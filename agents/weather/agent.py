# server/agents/weather/agent.py
"""
Weather agent - current conditions and forecast for irrigation planning
"""

import asyncio
from datetime import datetime

from agents.base import BaseAgent
from agents.weather.models import WeatherRequest, WeatherResponse
from agents.weather.service import WeatherService
from core.exceptions import AgentError

class WeatherAgent(BaseAgent[WeatherRequest, WeatherResponse]):
    """
    Weather agent backed by OpenWeatherMap

    Falls back to mock data when no API key is configured
    or the provider cannot be reached.
    """

    def __init__(self):
        super().__init__("weather")
        self.service = WeatherService(api_key=self.settings.openweather_api_key, config=self.config)
        self.logger.info("Weather agent initialized")

    def _validate_config(self) -> None:
        """Validate weather agent configuration"""
        required_config = ["base_url", "cache_ttl_seconds", "rate_limits"]
        missing = [key for key in required_config if key not in self.config]
        if missing:
            self.logger.warning(f"Missing weather config (using defaults): {missing}")

        if not self.settings.openweather_api_key:
            self.logger.warning("OpenWeatherMap API key not configured - weather will be mocked")

    async def process_request(self, request: WeatherRequest) -> WeatherResponse:
        """Process weather request"""
        try:
            data = await asyncio.get_running_loop().run_in_executor(
                None,
                self.service.get_weather_data,
                request.location,
                request.include_forecast
            )
        except Exception as e:
            self.logger.error(f"Error fetching weather for {request.location}: {e}")
            raise AgentError(f"Failed to fetch weather: {e}") from e

        return WeatherResponse(
            success=True,
            data=data,
            message=f"Weather for {data.location.name} from {data.source}",
            timestamp=datetime.now().isoformat(),
            metadata={"cache": self.service.get_cache_stats()}
        )

    def get_fallback_response(self, request: WeatherRequest, error: Exception) -> WeatherResponse:
        """Mock weather when the live path fails"""
        current = self.service.get_mock_current_weather(request.location)
        forecast = self.service.get_mock_forecast(request.location) if request.include_forecast else None
        return WeatherResponse(
            success=False,
            data={
                "location": current.location,
                "current": current,
                "forecast": forecast,
                "timestamp": datetime.now().isoformat(),
                "source": "Mock Data",
            },
            message=f"Using mock weather due to error: {str(error)}",
            timestamp=datetime.now().isoformat(),
            metadata={"fallback": True, "error": str(error)}
        )
