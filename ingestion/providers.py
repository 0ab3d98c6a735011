# ingestion/providers.py
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone as dt_timezone

import requests
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils import timezone

logger = logging.getLogger(__name__)

MS_TO_KNOTS = 1.943844
DEFAULT_VISIBILITY_KM = 10.0

SOURCE_OPENWEATHER = "openweather"
SOURCE_SIMULATED = "simulated"


class WeatherProviderError(Exception):
    """Weather could not be obtained for one location."""


@dataclass
class Observation:
    """
    Snapshot of current weather at an airfield.
    Wind in knots, visibility in km, temperature in degrees C.
    """
    temperature: float
    wind_speed: float
    wind_direction: float
    visibility: float
    conditions: str
    pressure: float = None
    humidity: float = None
    observed_at: datetime = field(default_factory=timezone.now)
    source: str = SOURCE_OPENWEATHER

    @property
    def is_simulated(self):
        return self.source == SOURCE_SIMULATED


class OpenWeatherProvider:
    name = SOURCE_OPENWEATHER

    def __init__(self, api_key: str, base_url: str = "https://api.openweathermap.org", timeout: float = 10.0):
        if not api_key:
            raise ImproperlyConfigured("OPENWEATHER_API_KEY is not set")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def fetch(self, latitude: float, longitude: float) -> Observation:
        url = f"{self.base_url}/data/2.5/weather"
        params = {"lat": latitude, "lon": longitude, "appid": self.api_key, "units": "metric"}
        try:
            resp = requests.get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except requests.RequestException as e:
            raise WeatherProviderError(f"request for ({latitude}, {longitude}) failed: {e}") from e
        except ValueError as e:
            raise WeatherProviderError(f"invalid JSON for ({latitude}, {longitude})") from e
        obs = self.parse(payload)
        logger.debug("OpenWeather (%s, %s): %s", latitude, longitude, obs)
        return obs

    @staticmethod
    def parse(payload: dict) -> Observation:
        try:
            main = payload["main"]
            wind = payload.get("wind") or {}
            weather = (payload.get("weather") or [{}])[0]
            visibility_m = payload.get("visibility")

            condition = weather.get("main") or ""
            description = weather.get("description")
            if description and description.lower() != condition.lower():
                condition = f"{condition} ({description})" if condition else description

            observed_at = timezone.now()
            if payload.get("dt"):
                observed_at = datetime.fromtimestamp(int(payload["dt"]), tz=dt_timezone.utc)

            return Observation(
                temperature=float(main["temp"]),
                wind_speed=float(wind.get("speed", 0.0)) * MS_TO_KNOTS,
                wind_direction=float(wind.get("deg", 0.0)),
                visibility=float(visibility_m) / 1000.0 if visibility_m is not None else DEFAULT_VISIBILITY_KM,
                conditions=condition,
                pressure=main.get("pressure"),
                humidity=main.get("humidity"),
                observed_at=observed_at,
                source=SOURCE_OPENWEATHER,
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise WeatherProviderError(f"unexpected payload shape: {e!r}") from e


class SimulatedWeatherProvider:
    """
    Random but plausible readings, used by the interactive refresh and for demos.
    """
    name = SOURCE_SIMULATED

    CONDITIONS = ["Clear", "Clouds", "Rain", "Fog", "Thunderstorm", "Snow", "Hail", "Haze"]

    def __init__(self, seed=None):
        self.rng = random.Random(seed)

    def fetch(self, latitude: float, longitude: float) -> Observation:
        rng = self.rng
        return Observation(
            temperature=round(rng.uniform(-5, 40), 1),
            wind_speed=round(rng.uniform(0, 50), 1),
            wind_direction=round(rng.uniform(0, 360)),
            visibility=round(rng.uniform(0.2, 10), 1),
            conditions=rng.choice(self.CONDITIONS),
            pressure=round(rng.uniform(990, 1030), 1),
            humidity=round(rng.uniform(20, 100)),
            source=SOURCE_SIMULATED,
        )


def get_weather_provider(name=None):
    """
    Build the configured provider. Raises ImproperlyConfigured for an unknown
    provider name or a missing API key.
    """
    conf = settings.AIRFIELDWATCH
    name = name or conf.get("WEATHER_PROVIDER", SOURCE_OPENWEATHER)

    if name == SOURCE_OPENWEATHER:
        return OpenWeatherProvider(
            api_key=conf.get("OPENWEATHER_API_KEY"),
            base_url=conf.get("OPENWEATHER_BASE_URL", "https://api.openweathermap.org"),
            timeout=conf.get("WEATHER_PROVIDER_TIMEOUT", 10.0),
        )
    if name == SOURCE_SIMULATED:
        return SimulatedWeatherProvider()
    raise ImproperlyConfigured(f"Unknown WEATHER_PROVIDER {name!r}")
