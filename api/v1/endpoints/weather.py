# server/api/v1/endpoints/weather.py
import asyncio

from fastapi import APIRouter, HTTPException

from agents.base import agent_registry
from agents.weather.models import WeatherRequest

router = APIRouter()

def _weather_agent():
    weather_agent = agent_registry.get("weather")
    if not weather_agent:
        raise HTTPException(status_code=500, detail="Weather agent not available")
    return weather_agent

@router.get("/stats")
async def get_weather_stats():
    """Weather cache and rate limiter statistics"""
    return {"success": True, "data": _weather_agent().service.get_cache_stats()}

@router.post("/clear-cache")
async def clear_weather_cache():
    """Drop cached weather and the recommendations computed from it"""
    _weather_agent().service.clear_cache()
    for name in agent_registry.list_agents():
        await agent_registry.get(name).clear_cache()
    return {"success": True, "message": "Weather cache cleared"}

@router.get("/{location}")
async def get_current_weather(location: str):
    """Current weather, including the observation used for irrigation"""
    try:
        service = _weather_agent().service
        data = await asyncio.get_running_loop().run_in_executor(None, service.get_current_weather, location)
        return {"success": True, "data": data}
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching weather: {str(e)}")

@router.get("/{location}/forecast")
async def get_weather_forecast(location: str):
    """Daily forecast for up to seven days"""
    try:
        service = _weather_agent().service
        data = await asyncio.get_running_loop().run_in_executor(None, service.get_forecast, location)
        return {"success": True, "data": data}
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching forecast: {str(e)}")

@router.get("/{location}/complete")
async def get_complete_weather(location: str):
    """Current conditions plus forecast"""
    try:
        return await _weather_agent().execute(WeatherRequest(location=location, include_forecast=True))
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching weather data: {str(e)}")
