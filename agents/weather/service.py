# server/agents/weather/service.py
"""
Weather service - OpenWeatherMap current conditions and forecast with
caching, rate limiting and mock fallback data
"""
import logging
import random
import threading
import time
import zlib
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import requests
from cachetools import TTLCache

from agents.irrigation.models import WeatherObservation
from agents.weather.models import (
    Coordinates, CurrentConditions, CurrentWeather, DailyForecast, LocationInfo,
    TemperatureRange, WeatherData, WeatherForecast
)
from core.exceptions import ExternalAPIError

logger = logging.getLogger(__name__)

MS_TO_KMH = 3.6
HPA_TO_KPA = 0.1

CLOUDINESS_BY_CONDITION = {
    "Clear": 0,
    "Sunny": 0,
    "Partly Cloudy": 30,
    "Cloudy": 70,
    "Clouds": 70,
    "Overcast": 90,
    "Rain": 80,
    "Drizzle": 75,
    "Snow": 85,
    "Thunderstorm": 90,
    "Fog": 95,
    "Mist": 60,
}


class RateLimiter:
    """Fixed-window request counter per endpoint plus a minimum gap between requests.

    Shared across executor threads; wait() reserves a slot under the lock.
    """

    def __init__(self, limits: Dict[str, Dict[str, float]], min_interval: float = 1.0,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.limits = limits
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self.request_counts = {endpoint: 0 for endpoint in limits}
        self._window_start = {endpoint: clock() for endpoint in limits}
        self._last_request = None

    def _roll_window(self, endpoint: str) -> None:
        now = self._clock()
        if now - self._window_start[endpoint] > self.limits[endpoint]["window_seconds"]:
            self.request_counts[endpoint] = 0
            self._window_start[endpoint] = now

    def _within_limit(self, endpoint: str) -> bool:
        self._roll_window(endpoint)
        return self.request_counts[endpoint] < self.limits[endpoint]["requests"]

    def is_within_limit(self, endpoint: str) -> bool:
        with self._lock:
            return self._within_limit(endpoint)

    def wait(self, endpoint: str) -> None:
        """Block until a request to endpoint is allowed, then reserve it"""
        with self._lock:
            if not self._within_limit(endpoint):
                elapsed = self._clock() - self._window_start[endpoint]
                wait_time = self.limits[endpoint]["window_seconds"] - elapsed
                if wait_time > 0:
                    logger.warning(f"Rate limit reached for {endpoint}, waiting {wait_time:.1f}s")
                    self._sleep(wait_time)
                self.request_counts[endpoint] = 0
                self._window_start[endpoint] = self._clock()

            if self._last_request is not None:
                since_last = self._clock() - self._last_request
                if since_last < self.min_interval:
                    self._sleep(self.min_interval - since_last)

            self._last_request = self._clock()
            self.request_counts[endpoint] += 1


class WeatherService:
    """Service for fetching weather used by irrigation calculations"""

    def __init__(self, api_key: Optional[str], config: Dict[str, Any]):
        self.api_key = api_key
        self.config = config
        self.base_url = config.get("base_url", "https://api.openweathermap.org/data/2.5")
        self.timeout = config.get("request_timeout_seconds", 10)
        self.forecast_days = config.get("forecast_days", 7)
        self.cache_ttl = config.get("cache_ttl_seconds", 600)
        self._cache = TTLCache(maxsize=config.get("cache_max_entries", 1000), ttl=self.cache_ttl)
        self._cache_lock = threading.Lock()
        self.rate_limiter = RateLimiter(
            config.get("rate_limits", {
                "current": {"requests": 60, "window_seconds": 60},
                "forecast": {"requests": 60, "window_seconds": 60},
            }),
            min_interval=config.get("min_request_interval_seconds", 1.0),
        )

    # ---------- Cache ----------

    @staticmethod
    def generate_cache_key(kind: str, location: str, params: Optional[Dict[str, Any]] = None) -> str:
        param_string = "&".join(f"{key}={value}" for key, value in sorted((params or {}).items()))
        return f"{kind}:{location.strip().lower()}:{param_string}"

    def _cache_get(self, key: str) -> Any:
        with self._cache_lock:
            return self._cache.get(key)

    def _cache_set(self, key: str, value: Any) -> None:
        with self._cache_lock:
            self._cache[key] = value

    def _cache_size(self) -> int:
        with self._cache_lock:
            return len(self._cache)

    def get_cache_stats(self) -> Dict[str, Any]:
        return {
            "size": self._cache_size(),
            "max_size": self._cache.maxsize,
            "ttl_seconds": self.cache_ttl,
            "request_counts": dict(self.rate_limiter.request_counts),
            "rate_limits": self.rate_limiter.limits,
        }

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._cache.clear()
        logger.info("Weather cache cleared")

    # ---------- HTTP ----------

    def _request(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/{path}"
        query = {"appid": self.api_key, "units": "metric", **params}
        try:
            resp = requests.get(url, params=query, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else 0
            if status == 401:
                raise ExternalAPIError("Invalid OpenWeatherMap API key") from e
            if status == 404:
                raise ExternalAPIError("Location not found") from e
            if status == 429:
                raise ExternalAPIError("API rate limit exceeded") from e
            if status >= 500:
                raise ExternalAPIError("OpenWeatherMap API server error") from e
            raise ExternalAPIError(f"API error: {e}") from e
        except (requests.ConnectionError, requests.Timeout) as e:
            raise ExternalAPIError("Network error: Unable to reach OpenWeatherMap API") from e
        except requests.RequestException as e:
            raise ExternalAPIError(f"Request error: {e}") from e
        except ValueError as e:
            raise ExternalAPIError(f"Malformed OpenWeatherMap response: {e}") from e

    # ---------- Public API ----------

    def get_current_weather(self, location: str) -> CurrentWeather:
        cache_key = self.generate_cache_key("current", location)
        cached = self._cache_get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit for key: {cache_key}")
            return cached

        if not self.api_key:
            logger.warning("OpenWeatherMap API key not configured, using mock data")
            mock = self.get_mock_current_weather(location)
            self._cache_set(cache_key, mock)
            return mock

        try:
            self.rate_limiter.wait("current")
            payload = self._request("weather", {"q": location})
            weather = self.process_current_weather_data(payload)
        except (ExternalAPIError, KeyError, IndexError, TypeError) as e:
            logger.error(f"Error fetching current weather for {location}: {e}")
            return self.get_mock_current_weather(location)

        self._cache_set(cache_key, weather)
        logger.info(f"Current weather fetched for {location}")
        return weather

    def get_forecast(self, location: str) -> WeatherForecast:
        cache_key = self.generate_cache_key("forecast", location)
        cached = self._cache_get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit for key: {cache_key}")
            return cached

        if not self.api_key:
            logger.warning("OpenWeatherMap API key not configured, using mock data")
            mock = self.get_mock_forecast(location)
            self._cache_set(cache_key, mock)
            return mock

        try:
            self.rate_limiter.wait("forecast")
            payload = self._request("forecast", {"q": location})
            forecast = self.process_forecast_data(payload)
        except (ExternalAPIError, KeyError, IndexError, TypeError) as e:
            logger.error(f"Error fetching forecast for {location}: {e}")
            return self.get_mock_forecast(location)

        self._cache_set(cache_key, forecast)
        logger.info(f"Forecast fetched for {location}: {len(forecast.forecasts)} days")
        return forecast

    def get_weather_data(self, location: str, include_forecast: bool = True) -> WeatherData:
        current = self.get_current_weather(location)
        forecast = self.get_forecast(location) if include_forecast else None
        return WeatherData(
            location=current.location,
            current=current,
            forecast=forecast,
            timestamp=datetime.now().isoformat(),
            source="OpenWeatherMap" if self.api_key else "Mock Data",
        )

    # ---------- Payload processing ----------

    def process_current_weather_data(self, data: Dict[str, Any]) -> CurrentWeather:
        main = data["main"]
        wind = data.get("wind", {})
        condition = data["weather"][0]
        cloudiness = data.get("clouds", {}).get("all", 0)
        rain = (data.get("rain") or {}).get("1h", 0)
        snow = (data.get("snow") or {}).get("1h", 0)
        wind_kmh = wind.get("speed", 0) * MS_TO_KMH

        return CurrentWeather(
            location=LocationInfo(
                name=data.get("name", ""),
                country=data.get("sys", {}).get("country"),
                coordinates=Coordinates(lat=data["coord"]["lat"], lon=data["coord"]["lon"]),
            ),
            current=CurrentConditions(
                temperature=round(main["temp"], 1),
                feels_like=round(main["feels_like"], 1) if "feels_like" in main else None,
                humidity=main["humidity"],
                pressure=main["pressure"],
                wind_speed=round(wind_kmh, 1),
                wind_direction=wind.get("deg"),
                visibility=data["visibility"] / 1000 if "visibility" in data else None,
                uv_index=data.get("uvi", 0),
                condition=condition["main"],
                description=condition["description"],
                icon=condition.get("icon"),
                cloudiness=cloudiness,
                rain=rain,
                snow=snow,
            ),
            irrigation=WeatherObservation(
                temperature=main["temp"],
                humidity=main["humidity"],
                wind_speed=wind_kmh,
                pressure=main["pressure"] * HPA_TO_KPA,
                solar_radiation=self.estimate_solar_radiation(main["temp"], main["humidity"], cloudiness),
                precipitation=rain + snow,
            ),
            condition=condition["main"],
            timestamp=datetime.now().isoformat(),
        )

    def process_forecast_data(self, data: Dict[str, Any]) -> WeatherForecast:
        city = data["city"]
        tz_offset = city.get("timezone", 0)
        days = self.group_forecasts_by_day(data["list"], tz_offset)

        forecasts = []
        for day in days:
            cloudiness = self.estimate_cloudiness_from_condition(day["condition"])
            forecasts.append(DailyForecast(
                date=day["date"],
                temperature=TemperatureRange(
                    min=round(day["temp_min"], 1),
                    max=round(day["temp_max"], 1),
                    average=round(day["temp_avg"], 1),
                ),
                humidity=round(day["humidity_avg"]),
                wind_speed=round(day["wind_avg"] * MS_TO_KMH, 1),
                precipitation=round(day["precipitation"], 1),
                condition=day["condition"],
                description=day["description"],
                icon=day["icon"],
                irrigation=WeatherObservation(
                    temperature=day["temp_avg"],
                    humidity=day["humidity_avg"],
                    wind_speed=day["wind_avg"] * MS_TO_KMH,
                    pressure=day["pressure_avg"] * HPA_TO_KPA,
                    solar_radiation=self.estimate_solar_radiation(
                        day["temp_avg"], day["humidity_avg"], cloudiness
                    ),
                    precipitation=day["precipitation"],
                ),
            ))

        return WeatherForecast(
            location=LocationInfo(
                name=city.get("name", ""),
                country=city.get("country"),
                coordinates=Coordinates(lat=city["coord"]["lat"], lon=city["coord"]["lon"]),
            ),
            forecasts=forecasts,
            timestamp=datetime.now().isoformat(),
        )

    def group_forecasts_by_day(self, items: List[Dict[str, Any]], tz_offset: int = 0) -> List[Dict[str, Any]]:
        """Collapse 3-hourly forecast entries into per-day aggregates"""
        days: Dict[str, Dict[str, Any]] = {}

        for item in items:
            local_time = datetime.fromtimestamp(item["dt"], tz=timezone.utc) + timedelta(seconds=tz_offset)
            key = local_time.date().isoformat()
            main = item["main"]
            weather = item["weather"][0]

            day = days.get(key)
            if day is None:
                day = days[key] = {
                    "date": key,
                    "temps": [],
                    "humidity": [],
                    "wind": [],
                    "pressure": [],
                    "precipitation": 0.0,
                    "condition": weather["main"],
                    "description": weather["description"],
                    "icon": weather.get("icon"),
                }

            day["temps"].append(main["temp"])
            day["humidity"].append(main["humidity"])
            day["wind"].append(item.get("wind", {}).get("speed", 0))
            day["pressure"].append(main["pressure"])
            day["precipitation"] += (item.get("rain") or {}).get("3h", 0) + (item.get("snow") or {}).get("3h", 0)

        result = []
        for day in list(days.values())[:self.forecast_days]:
            result.append({
                "date": day["date"],
                "temp_min": min(day["temps"]),
                "temp_max": max(day["temps"]),
                "temp_avg": sum(day["temps"]) / len(day["temps"]),
                "humidity_avg": sum(day["humidity"]) / len(day["humidity"]),
                "wind_avg": sum(day["wind"]) / len(day["wind"]),
                "pressure_avg": sum(day["pressure"]) / len(day["pressure"]),
                "precipitation": day["precipitation"],
                "condition": day["condition"],
                "description": day["description"],
                "icon": day["icon"],
            })
        return result

    @staticmethod
    def estimate_solar_radiation(temperature: float, humidity: float, cloudiness: float) -> float:
        """Rough daily solar radiation (MJ/m²/day) from cloud cover, temperature and humidity"""
        base_radiation = 20.0
        cloud_factor = (100 - cloudiness) / 100
        temp_factor = max(0.5, min(1.5, temperature / 25))
        humidity_factor = max(0.7, 1 - (humidity / 100) * 0.3)
        return base_radiation * cloud_factor * temp_factor * humidity_factor

    @staticmethod
    def estimate_cloudiness_from_condition(condition: str) -> float:
        return CLOUDINESS_BY_CONDITION.get(condition, 50)

    # ---------- Mock data ----------

    def get_mock_current_weather(self, location: str) -> CurrentWeather:
        return CurrentWeather(
            location=LocationInfo(
                name=location,
                country="UZ",
                coordinates=Coordinates(lat=41.2995, lon=69.2401),
            ),
            current=CurrentConditions(
                temperature=25,
                feels_like=27,
                humidity=60,
                pressure=1013,
                wind_speed=10,
                wind_direction=180,
                visibility=10,
                uv_index=5,
                condition="Partly Cloudy",
                description="partly cloudy",
                icon="02d",
                cloudiness=30,
            ),
            irrigation=WeatherObservation(
                temperature=25,
                humidity=60,
                wind_speed=10,
                pressure=101.3,
                solar_radiation=18.5,
                precipitation=0,
            ),
            condition="Partly Cloudy",
            timestamp=datetime.now().isoformat(),
        )

    def get_mock_forecast(self, location: str) -> WeatherForecast:
        # Seeded per location so repeated calls agree
        rng = random.Random(zlib.crc32(location.strip().lower().encode("utf-8")))
        today = datetime.now().date()
        conditions = ["Clear", "Partly Cloudy", "Cloudy", "Rain"]

        forecasts = []
        for i in range(self.forecast_days):
            t_min = 15 + rng.random() * 10
            t_max = t_min + 8 + rng.random() * 6
            t_avg = (t_min + t_max) / 2
            humidity = 50 + rng.random() * 30
            wind = 5 + rng.random() * 15
            condition = rng.choice(conditions)
            precipitation = rng.random() * 5 if condition == "Rain" else 0.0
            forecasts.append(DailyForecast(
                date=(today + timedelta(days=i)).isoformat(),
                temperature=TemperatureRange(min=round(t_min, 1), max=round(t_max, 1), average=round(t_avg, 1)),
                humidity=round(humidity),
                wind_speed=round(wind, 1),
                precipitation=round(precipitation, 1),
                condition=condition,
                description=condition.lower(),
                icon="02d",
                irrigation=WeatherObservation(
                    temperature=t_avg,
                    humidity=humidity,
                    wind_speed=wind,
                    pressure=101.0 + rng.random() * 2,
                    solar_radiation=self.estimate_solar_radiation(
                        t_avg, humidity, self.estimate_cloudiness_from_condition(condition)
                    ),
                    precipitation=precipitation,
                ),
            ))

        return WeatherForecast(
            location=LocationInfo(name=location, country="UZ", coordinates=Coordinates(lat=41.2995, lon=69.2401)),
            forecasts=forecasts,
            timestamp=datetime.now().isoformat(),
        )
