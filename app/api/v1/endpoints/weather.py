"""Weather lookups for scheduling. Never fails on upstream outages."""

from datetime import date
from fastapi import APIRouter, Depends, Query

from app.core.deps import get_current_user
from app.models.user import User
from app.services.weather import WeatherReport, WeatherService, get_weather_service

router = APIRouter()


@router.get("/forecast", response_model=WeatherReport)
async def get_forecast(
    on: date = Query(..., alias="date"),
    zip_code: str = Query(..., min_length=5, max_length=10),
    current_user: User = Depends(get_current_user),
    weather: WeatherService = Depends(get_weather_service),
):
    return await weather.forecast(on, zip_code)


@router.get("/current", response_model=WeatherReport)
async def get_current(
    zip_code: str = Query(..., min_length=5, max_length=10),
    current_user: User = Depends(get_current_user),
    weather: WeatherService = Depends(get_weather_service),
):
    return await weather.current(zip_code)
