"""
Shared fixtures for the alert tests.
"""

import pytest
from django.contrib.auth import get_user_model

from core.models import Airfield, WeatherThreshold
from ingestion.providers import Observation, SOURCE_OPENWEATHER, WeatherProviderError


@pytest.fixture
def make_observation():
    """Factory for calm, clear observations; override any field by keyword."""
    def _make(**overrides):
        values = {
            "temperature": 15.0,
            "wind_speed": 5.0,
            "wind_direction": 270.0,
            "visibility": 10.0,
            "conditions": "Clear",
            "pressure": 1013.0,
            "humidity": 60.0,
            "source": SOURCE_OPENWEATHER,
        }
        values.update(overrides)
        return Observation(**values)
    return _make


@pytest.fixture
def user(db):
    return get_user_model().objects.create_user(username="ops", password="pw")


@pytest.fixture
def other_user(db):
    return get_user_model().objects.create_user(username="dispatch", password="pw")


@pytest.fixture
def airfield(db):
    return Airfield.objects.create(code="VIDP", name="Delhi", latitude=28.5562, longitude=77.1)


@pytest.fixture
def second_airfield(db):
    return Airfield.objects.create(code="VABB", name="Mumbai", latitude=19.0896, longitude=72.8656)


@pytest.fixture
def threshold(user, airfield):
    return WeatherThreshold.objects.create(
        user=user, airfield=airfield, wind_speed_max=30.0, temperature_min=0.0, temperature_max=35.0
    )


class StubProvider:
    """Returns a fixed observation per airfield code; codes in `failing` raise."""
    name = "stub"

    def __init__(self, observations, failing=()):
        self.observations = observations
        self.failing = set(failing)
        self.calls = []

    def fetch(self, latitude, longitude):
        code = self.by_position[(latitude, longitude)]
        self.calls.append(code)
        if code in self.failing:
            raise WeatherProviderError(f"timeout for {code}")
        return self.observations[code]


@pytest.fixture
def stub_provider(airfield, second_airfield):
    def _make(observations, failing=()):
        provider = StubProvider(observations, failing)
        provider.by_position = {
            (airfield.latitude, airfield.longitude): airfield.code,
            (second_airfield.latitude, second_airfield.longitude): second_airfield.code,
        }
        return provider
    return _make
