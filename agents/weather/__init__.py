# server/agents/weather/__init__.py
"""
Weather agent package
"""

from .agent import WeatherAgent
from .models import WeatherRequest, WeatherResponse
from .service import RateLimiter, WeatherService

__all__ = ["WeatherAgent", "WeatherRequest", "WeatherResponse", "WeatherService", "RateLimiter"]
