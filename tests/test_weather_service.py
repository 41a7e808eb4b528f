from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock, patch

import pytest
import requests

from agents.weather.service import RateLimiter, WeatherService
from core.exceptions import ExternalAPIError

BASE_DT = 1717200000  # 2024-06-01T00:00:00Z

CONFIG = {
    "base_url": "https://api.openweathermap.org/data/2.5",
    "cache_ttl_seconds": 600,
    "cache_max_entries": 100,
    "request_timeout_seconds": 5,
    "min_request_interval_seconds": 0,
    "rate_limits": {
        "current": {"requests": 60, "window_seconds": 60},
        "forecast": {"requests": 60, "window_seconds": 60},
    },
    "forecast_days": 7,
}

CURRENT_PAYLOAD = {
    "coord": {"lon": 69.24, "lat": 41.3},
    "weather": [{"main": "Clouds", "description": "scattered clouds", "icon": "03d"}],
    "main": {"temp": 30.0, "feels_like": 31.2, "humidity": 40, "pressure": 1010},
    "visibility": 10000,
    "wind": {"speed": 5.0, "deg": 200},
    "clouds": {"all": 40},
    "rain": {"1h": 0.5},
    "sys": {"country": "UZ"},
    "name": "Tashkent",
}


def forecast_payload(entries=16, timezone=18000):
    items = []
    for k in range(entries):
        item = {
            "dt": BASE_DT + k * 10800,
            "main": {"temp": 20.0 + k, "humidity": 50, "pressure": 1000},
            "weather": [{"main": "Clear", "description": "clear sky", "icon": "01d"}],
            "wind": {"speed": 2.0},
        }
        if k in (1, 2):
            item["rain"] = {"3h": 1.0}
        items.append(item)
    return {
        "city": {"name": "Tashkent", "country": "UZ", "coord": {"lat": 41.3, "lon": 69.24}, "timezone": timezone},
        "list": items,
    }


def fake_response(payload=None, status=200):
    response = MagicMock()
    response.status_code = status
    response.json.return_value = payload
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} error", response=response)
    return response


@pytest.fixture
def service():
    return WeatherService(api_key="test-key", config=CONFIG)


@pytest.fixture
def offline_service():
    return WeatherService(api_key="", config=CONFIG)


def test_current_weather_conversion(service):
    with patch("agents.weather.service.requests.get", return_value=fake_response(CURRENT_PAYLOAD)) as get:
        weather = service.get_current_weather("Tashkent")

    assert get.call_args.kwargs["params"]["q"] == "Tashkent"
    assert get.call_args.kwargs["params"]["units"] == "metric"
    assert weather.location.name == "Tashkent"
    assert weather.current.wind_speed == 18.0
    assert weather.current.visibility == 10

    observation = weather.irrigation
    assert observation.temperature == 30.0
    assert observation.wind_speed == pytest.approx(18.0)
    assert observation.pressure == pytest.approx(101.0)
    assert observation.precipitation == pytest.approx(0.5)
    assert observation.solar_radiation == pytest.approx(20 * 0.6 * 1.2 * 0.88)


def test_current_weather_is_cached(service):
    with patch("agents.weather.service.requests.get", return_value=fake_response(CURRENT_PAYLOAD)) as get:
        first = service.get_current_weather("Tashkent")
        second = service.get_current_weather(" tashkent ")

    assert get.call_count == 1
    assert first == second
    assert service.get_cache_stats()["size"] == 1

    service.clear_cache()
    assert service.get_cache_stats()["size"] == 0


def test_missing_api_key_uses_mock(offline_service):
    with patch("agents.weather.service.requests.get") as get:
        weather = offline_service.get_current_weather("Samarkand")

    get.assert_not_called()
    assert weather.location.name == "Samarkand"
    assert weather.irrigation.temperature == 25
    assert weather.irrigation.humidity == 60
    assert weather.irrigation.wind_speed == 10
    assert weather.irrigation.pressure == 101.3
    assert weather.irrigation.solar_radiation == 18.5


def test_network_failure_falls_back_to_mock(service):
    with patch("agents.weather.service.requests.get", side_effect=requests.ConnectionError("down")):
        weather = service.get_current_weather("Bukhara")

    assert weather.location.name == "Bukhara"
    assert weather.irrigation.solar_radiation == 18.5
    # Failures are not cached
    assert service.get_cache_stats()["size"] == 0


@pytest.mark.parametrize("status,message", [
    (401, "Invalid OpenWeatherMap API key"),
    (404, "Location not found"),
    (429, "API rate limit exceeded"),
    (503, "OpenWeatherMap API server error"),
])
def test_http_errors_are_mapped(service, status, message):
    with patch("agents.weather.service.requests.get", return_value=fake_response(status=status)):
        with pytest.raises(ExternalAPIError, match=message):
            service._request("weather", {"q": "Nowhere"})


def test_network_error_message(service):
    with patch("agents.weather.service.requests.get", side_effect=requests.Timeout("slow")):
        with pytest.raises(ExternalAPIError, match="Network error: Unable to reach OpenWeatherMap API"):
            service._request("weather", {"q": "Tashkent"})


def test_forecast_groups_by_local_day(service):
    with patch("agents.weather.service.requests.get", return_value=fake_response(forecast_payload())):
        forecast = service.get_forecast("Tashkent")

    assert [day.date for day in forecast.forecasts] == ["2024-06-01", "2024-06-02", "2024-06-03"]
    first = forecast.forecasts[0]
    assert first.temperature.min == 20
    assert first.temperature.max == 26
    assert first.temperature.average == 23
    assert first.precipitation == 2.0
    assert first.wind_speed == 7.2
    assert first.irrigation.pressure == pytest.approx(100.0)


def test_forecast_grouping_follows_city_timezone(service):
    with patch("agents.weather.service.requests.get", return_value=fake_response(forecast_payload(timezone=0))):
        forecast = service.get_forecast("Tashkent")

    assert forecast.forecasts[0].temperature.max == 27


def test_forecast_is_capped_at_seven_days(service):
    with patch("agents.weather.service.requests.get", return_value=fake_response(forecast_payload(entries=80))):
        forecast = service.get_forecast("Tashkent")

    assert len(forecast.forecasts) == 7


def test_mock_forecast_is_repeatable(offline_service):
    first = offline_service.get_mock_forecast("Khiva")
    second = offline_service.get_mock_forecast("Khiva")

    assert len(first.forecasts) == 7
    assert [day.model_dump() for day in first.forecasts] == [day.model_dump() for day in second.forecasts]


def test_weather_data_combines_current_and_forecast(offline_service):
    data = offline_service.get_weather_data("Nukus")
    assert data.source == "Mock Data"
    assert data.current.location.name == "Nukus"
    assert len(data.forecast.forecasts) == 7

    assert offline_service.get_weather_data("Nukus", include_forecast=False).forecast is None


def test_solar_radiation_estimate_bounds():
    assert WeatherService.estimate_solar_radiation(25, 0, 0) == pytest.approx(20)
    assert WeatherService.estimate_solar_radiation(60, 0, 0) == pytest.approx(30)
    assert WeatherService.estimate_solar_radiation(0, 100, 0) == pytest.approx(20 * 0.5 * 0.7)
    assert WeatherService.estimate_solar_radiation(25, 0, 100) == 0


def test_cloudiness_from_condition():
    assert WeatherService.estimate_cloudiness_from_condition("Clear") == 0
    assert WeatherService.estimate_cloudiness_from_condition("Rain") == 80
    assert WeatherService.estimate_cloudiness_from_condition("Sandstorm") == 50


def test_cache_key_normalizes_location():
    assert WeatherService.generate_cache_key("current", " Tashkent ") == "current:tashkent:"
    assert WeatherService.generate_cache_key("forecast", "Tashkent", {"b": 2, "a": 1}) == "forecast:tashkent:a=1&b=2"


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def test_rate_limiter_waits_for_next_window():
    clock = FakeClock()
    limiter = RateLimiter({"current": {"requests": 2, "window_seconds": 60}},
                          min_interval=0, clock=clock, sleep=clock.sleep)

    for _ in range(2):
        limiter.wait("current")
    assert clock.sleeps == []

    clock.now = 10.0
    limiter.wait("current")
    assert clock.sleeps == [pytest.approx(50.0)]
    assert limiter.request_counts["current"] == 1


def test_rate_limiter_spaces_requests():
    clock = FakeClock()
    limiter = RateLimiter({"current": {"requests": 10, "window_seconds": 60}},
                          min_interval=1.0, clock=clock, sleep=clock.sleep)

    limiter.wait("current")
    clock.now = 0.25
    limiter.wait("current")
    assert clock.sleeps == [pytest.approx(0.75)]


def test_rate_limit_windows_are_per_endpoint():
    clock = FakeClock()
    limiter = RateLimiter({
        "current": {"requests": 1, "window_seconds": 60},
        "forecast": {"requests": 1, "window_seconds": 60},
    }, min_interval=0, clock=clock, sleep=clock.sleep)

    limiter.wait("current")
    assert not limiter.is_within_limit("current")
    assert limiter.is_within_limit("forecast")

    clock.now = 61.0
    assert limiter.is_within_limit("current")


def test_rate_limit_holds_across_threads(service):
    clock = FakeClock()
    service.rate_limiter = RateLimiter({
        "current": {"requests": 2, "window_seconds": 30},
        "forecast": {"requests": 2, "window_seconds": 30},
    }, min_interval=0.05, clock=clock, sleep=clock.sleep)

    sent = []

    def fake_get(url, params=None, timeout=None):
        sent.append(params["q"])
        return fake_response(CURRENT_PAYLOAD)

    with patch("agents.weather.service.requests.get", side_effect=fake_get):
        with ThreadPoolExecutor(max_workers=6) as pool:
            results = list(pool.map(service.get_current_weather, [f"city{i}" for i in range(6)]))

    assert len(results) == 6
    assert sorted(sent) == [f"city{i}" for i in range(6)]
    # Two requests per 30 s window, 0.05 s apart: three windows
    assert sorted(clock.sleeps) == [
        pytest.approx(0.05), pytest.approx(0.05), pytest.approx(0.05),
        pytest.approx(29.95), pytest.approx(29.95),
    ]
    assert clock.now == pytest.approx(60.05)
    assert service.get_cache_stats()["size"] == 6
