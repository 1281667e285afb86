"""Tests for the OpenWeather client and weather endpoints."""

from datetime import date, datetime, timezone

import httpx
import pytest

from app.main import app
from app.services.weather import WeatherService, get_weather_service

CURRENT = {
    "name": "Springfield",
    "coord": {"lat": 39.78, "lon": -89.65},
    "weather": [{"main": "Clouds", "description": "scattered clouds", "icon": "03d"}],
    "main": {"temp": 71.6, "feels_like": 72.4, "humidity": 64},
    "wind": {"speed": 8.3},
}


def _entry(when: datetime, main: str) -> dict:
    return {
        "dt": int(when.replace(tzinfo=timezone.utc).timestamp()),
        "weather": [{"main": main, "description": main.lower(), "icon": "10d"}],
        "main": {"temp": 65.0, "feels_like": 64.0, "humidity": 80},
        "wind": {"speed": 12.0},
    }


def _handler(request: httpx.Request) -> httpx.Response:
    if request.url.path.endswith("/weather"):
        return httpx.Response(200, json=CURRENT)
    if request.url.path.endswith("/forecast"):
        return httpx.Response(
            200,
            json={
                "list": [
                    _entry(datetime(2026, 6, 20, 9, 0), "Clear"),
                    _entry(datetime(2026, 6, 20, 12, 0), "Rain"),
                    _entry(datetime(2026, 6, 20, 18, 0), "Clouds"),
                ]
            },
        )
    return httpx.Response(404)


def _service(handler=_handler, api_key="test-key") -> WeatherService:
    return WeatherService(api_key=api_key, base_url="https://weather.test/data/2.5", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_current_weather_parses_response():
    report = await _service().current("62701")
    assert report.condition == "Clouds"
    assert report.temperature == 72
    assert report.wind_speed == 8
    assert report.city == "Springfield"
    assert report.is_placeholder is False


@pytest.mark.asyncio
async def test_forecast_picks_entry_closest_to_noon():
    report = await _service().forecast(date(2026, 6, 20), "62701")
    assert report.condition == "Rain"
    assert report.date == datetime(2026, 6, 20, 12, 0)


@pytest.mark.asyncio
async def test_upstream_error_returns_placeholder():
    report = await _service(lambda request: httpx.Response(500)).current("62701")
    assert report.is_placeholder is True
    assert report.condition == "Clear"
    assert report.temperature == 75


@pytest.mark.asyncio
async def test_network_failure_returns_placeholder():
    def boom(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    report = await _service(boom).forecast(date(2026, 6, 20), "62701")
    assert report.is_placeholder is True
    assert report.date == datetime(2026, 6, 20, 12, 0)


@pytest.mark.asyncio
async def test_missing_api_key_returns_placeholder():
    report = await _service(api_key="").current("62701")
    assert report.is_placeholder is True


@pytest.mark.asyncio
async def test_forecast_endpoint(client, customer):
    app.dependency_overrides[get_weather_service] = lambda: _service()
    try:
        resp = await client.get(
            "/api/v1/weather/forecast?date=2026-06-20&zip_code=62701", headers=customer["headers"]
        )
    finally:
        app.dependency_overrides.pop(get_weather_service, None)
    assert resp.status_code == 200
    assert resp.json()["condition"] == "Rain"


@pytest.mark.asyncio
async def test_current_endpoint_never_fails(client, customer):
    app.dependency_overrides[get_weather_service] = lambda: _service(lambda request: httpx.Response(503))
    try:
        resp = await client.get("/api/v1/weather/current?zip_code=62701", headers=customer["headers"])
    finally:
        app.dependency_overrides.pop(get_weather_service, None)
    assert resp.status_code == 200
    assert resp.json()["is_placeholder"] is True
