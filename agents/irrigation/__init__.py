# server/agents/irrigation/__init__.py
"""
Irrigation engine package

The agent lives in agents.irrigation.agent and is imported from there.
"""

from .decision import recommend
from .models import (
    IrrigationParameters, IrrigationRecommendation, IrrigationRequest,
    IrrigationResponse, Verdict, WeatherObservation
)

__all__ = [
    "IrrigationParameters", "IrrigationRecommendation", "IrrigationRequest",
    "IrrigationResponse", "Verdict", "WeatherObservation", "recommend"
]
