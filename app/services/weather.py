"""OpenWeather lookups for scheduling.

Weather is advisory only. When the upstream API is unreachable or returns
garbage we hand back a placeholder report flagged ``is_placeholder`` rather
than failing the request.
"""

import logging
from datetime import date, datetime, time, timezone
from typing import Optional

import httpx
from pydantic import BaseModel

from app.core.config import settings

logger = logging.getLogger(__name__)


class WeatherReport(BaseModel):
    condition: str
    description: str
    temperature: Optional[int] = None
    feels_like: Optional[int] = None
    humidity: Optional[int] = None
    wind_speed: Optional[int] = None
    icon: Optional[str] = None
    city: Optional[str] = None
    date: Optional[datetime] = None
    is_placeholder: bool = False


def placeholder_report(on: Optional[date] = None) -> WeatherReport:
    return WeatherReport(
        condition="Clear",
        description="Weather data temporarily unavailable",
        temperature=75,
        feels_like=75,
        humidity=50,
        wind_speed=5,
        icon="01d",
        city="Unknown" if on is None else None,
        date=datetime.combine(on, time(12, 0)) if on else None,
        is_placeholder=True,
    )


def _report_from(entry: dict, **extra) -> WeatherReport:
    summary = entry["weather"][0]
    return WeatherReport(
        condition=summary["main"],
        description=summary["description"],
        temperature=round(entry["main"]["temp"]),
        feels_like=round(entry["main"]["feels_like"]),
        humidity=entry["main"]["humidity"],
        wind_speed=round(entry["wind"]["speed"]),
        icon=summary.get("icon"),
        **extra,
    )


class WeatherService:
    """Async OpenWeather client. ``transport`` lets tests stub the network."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.WEATHER_API_KEY
        self.base_url = (base_url or settings.WEATHER_API_URL).rstrip("/")
        self.timeout = timeout or settings.WEATHER_TIMEOUT_SECONDS
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def current(self, zip_code: str) -> WeatherReport:
        if not self.api_key:
            logger.warning("WEATHER_API_KEY not configured. Returning placeholder weather.")
            return placeholder_report()
        try:
            async with self._client() as client:
                response = await client.get(
                    "/weather",
                    params={"zip": f"{zip_code},US", "appid": self.api_key, "units": "imperial"},
                )
                response.raise_for_status()
                data = response.json()
            return _report_from(data, city=data.get("name"))
        except (httpx.HTTPError, KeyError, IndexError, ValueError) as e:
            logger.warning("Weather lookup failed for %s: %s", zip_code, e)
            return placeholder_report()

    async def forecast(self, on: date, zip_code: str) -> WeatherReport:
        """Forecast entry closest to noon UTC on the given date."""
        if not self.api_key:
            logger.warning("WEATHER_API_KEY not configured. Returning placeholder weather.")
            return placeholder_report(on)
        try:
            async with self._client() as client:
                geo = await client.get("/weather", params={"zip": f"{zip_code},US", "appid": self.api_key})
                geo.raise_for_status()
                coord = geo.json()["coord"]

                response = await client.get(
                    "/forecast",
                    params={"lat": coord["lat"], "lon": coord["lon"], "appid": self.api_key, "units": "imperial"},
                )
                response.raise_for_status()
                entries = response.json().get("list", [])
        except (httpx.HTTPError, KeyError, IndexError, ValueError) as e:
            logger.warning("Weather forecast failed for %s on %s: %s", zip_code, on, e)
            return placeholder_report(on)

        if not entries:
            return WeatherReport(
                condition="Unknown",
                description="Weather data not available for this date",
                date=datetime.combine(on, time(12, 0)),
            )

        target = datetime.combine(on, time(12, 0), tzinfo=timezone.utc).timestamp()
        try:
            closest = min(entries, key=lambda entry: abs(entry["dt"] - target))
            return _report_from(
                closest,
                date=datetime.fromtimestamp(closest["dt"], tz=timezone.utc).replace(tzinfo=None),
            )
        except (KeyError, IndexError) as e:
            logger.warning("Malformed forecast entry for %s: %s", zip_code, e)
            return placeholder_report(on)


weather_service = WeatherService()


def get_weather_service() -> WeatherService:
    """FastAPI dependency returning the process weather client."""
    return weather_service
