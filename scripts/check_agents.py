# server/scripts/check_agents.py
"""
Exercise the agents without starting the API server

Run from the project root: python -m scripts.check_agents
"""

import asyncio
import sys

from agents.irrigation.agent import IrrigationAgent
from agents.irrigation.models import IrrigationRequest
from agents.weather.agent import WeatherAgent
from agents.weather.models import WeatherRequest
from core.config import get_settings
from core.logging import setup_logging

async def check_weather_agent(agent: WeatherAgent) -> bool:
    print("Weather agent")
    print("=" * 50)

    health = await agent.health_check()
    print(f"   Status: {health['status']}")

    response = await agent.execute(WeatherRequest(location="Tashkent", include_forecast=True), use_cache=False)
    current = response.data.current.current
    print(f"   Source: {response.data.source}")
    print(f"   Now: {current.temperature}°C, {current.humidity}% RH, {current.wind_speed} km/h")
    print(f"   Forecast days: {len(response.data.forecast.forecasts)}")
    return response.success

async def check_irrigation_agent(agent: IrrigationAgent) -> bool:
    print("\nIrrigation agent")
    print("=" * 50)

    ok = True
    for crop_type, soil_type, moisture in [("cotton", "loamy", 50), ("wheat", "clay", 20), ("rice", "sandy", 10)]:
        request = IrrigationRequest(
            location="Tashkent",
            crop_type=crop_type,
            soil_type=soil_type,
            soil_moisture=moisture
        )
        response = await agent.execute(request, use_cache=False)
        ok = ok and response.success
        if response.data is None:
            print(f"   {crop_type}/{soil_type}: {response.message}")
            continue

        rec = response.data
        print(f"   {crop_type}/{soil_type} @ {moisture}%: {rec.verdict.value}, "
              f"{rec.irrigation_amount_mm:.2f} mm ({rec.irrigation_amount_liters} L/ha), {rec.optimal_time}")
        print(f"      {rec.rationale}")

    fallback = agent.get_fallback_response(IrrigationRequest(location="Tashkent", crop_type="cotton"),
                                           Exception("Test error"))
    print(f"   Fallback success flag: {fallback.success}")
    return ok

def check_environment() -> None:
    settings = get_settings()

    print("Environment")
    print("=" * 50)
    if settings.openweather_api_key:
        print("   OPENWEATHER_API_KEY is set")
    else:
        print("   OPENWEATHER_API_KEY is not set (mock weather)")
    print(f"   Environment: {settings.environment.value}")
    print(f"   API: {settings.api_host}:{settings.api_port}\n")

async def main():
    setup_logging()
    check_environment()

    weather_agent = WeatherAgent()
    irrigation_agent = IrrigationAgent(weather_service=weather_agent.service)

    weather_ok = await check_weather_agent(weather_agent)
    irrigation_ok = await check_irrigation_agent(irrigation_agent)

    if weather_ok and irrigation_ok:
        print("\nAgents OK. Start the server with: python run.py")
    else:
        print("\nSome checks failed. See the logs above.")
        sys.exit(1)

if __name__ == "__main__":
    asyncio.run(main())
