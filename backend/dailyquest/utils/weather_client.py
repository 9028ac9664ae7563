from __future__ import annotations

import requests
from pydantic import BaseModel, ValidationError as SchemaError

from dailyquest.errors import Internal, Unavailable

OPEN_WEATHER_MAP_BASE = "https://api.openweathermap.org/data/2.5"


class _Main(BaseModel):
    temp: float


class _Condition(BaseModel):
    main: str
    description: str


class _CurrentWeather(BaseModel):
    name: str
    main: _Main
    weather: list[_Condition]


class WeatherClient:
    """Thin proxy for OpenWeatherMap's current weather endpoint."""

    def __init__(self, *, api_key: str, enabled: bool, timeout: int = 10):
        self.api_key = api_key
        self.enabled = enabled
        self.timeout = timeout

    def current(self, latitude: float, longitude: float, units: str = "metric") -> dict:
        if not self.enabled:
            raise Unavailable("Weather API is disabled")
        if not self.api_key:
            raise Unavailable("OPEN_WEATHER_MAP_API_KEY not set")

        try:
            r = requests.get(
                f"{OPEN_WEATHER_MAP_BASE}/weather",
                params={"lat": latitude, "lon": longitude, "units": units, "appid": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise Unavailable("Weather service unreachable") from e

        if not (200 <= r.status_code < 300):
            raise Internal(f"openweathermap_http_{r.status_code}")

        try:
            data = _CurrentWeather.model_validate(r.json())
        except (ValueError, SchemaError) as e:
            raise Internal("Unexpected response from OpenWeatherMap") from e
        if not data.weather:
            raise Internal("Unexpected response from OpenWeatherMap")

        return {
            "location": data.name,
            "temp": data.main.temp,
            "weather": {
                "main": data.weather[0].main,
                "description": data.weather[0].description,
            },
        }
