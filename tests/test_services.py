"""
Tests for the sweep / refresh orchestration, the run_alerts command and the celery task.
"""

from io import StringIO
from unittest.mock import Mock, patch

import pytest
from django.core.exceptions import ImproperlyConfigured
from django.core.management import call_command
from django.core.management.base import CommandError

from alerts.evaluator import BandThresholds, Bands
from alerts.models import Alert
from alerts.services import refresh_airfield_alerts, run_alert_sweep
from alerts.tasks import check_weather_alerts
from core.models import WeatherThreshold
from ingestion.providers import OpenWeatherProvider, SimulatedWeatherProvider, WeatherProviderError


@pytest.fixture
def both_thresholds(threshold, second_airfield):
    other = WeatherThreshold.objects.create(user=threshold.user, airfield=second_airfield, wind_speed_max=30)
    return threshold, other


def test_sweep_creates_alerts_per_threshold(both_thresholds, stub_provider, make_observation):
    provider = stub_provider({
        "VIDP": make_observation(wind_speed=45),
        "VABB": make_observation(conditions="Thunderstorm"),
    })
    result = run_alert_sweep(provider=provider, policy="tuple")

    assert result.thresholds == 2
    assert result.airfields_checked == 2
    assert result.created == 2
    assert set(Alert.objects.values_list("airfield__code", "alert_type", "severity")) == {
        ("VIDP", "wind", "high"),
        ("VABB", "storm", "critical"),
    }


def test_sweep_skips_unreachable_airfield(both_thresholds, stub_provider, make_observation, caplog):
    provider = stub_provider(
        {"VIDP": make_observation(wind_speed=45), "VABB": make_observation(wind_speed=45)},
        failing=["VABB"],
    )
    result = run_alert_sweep(provider=provider)

    assert result.airfields_skipped == 1
    assert result.airfields_checked == 1
    assert list(Alert.objects.values_list("airfield__code", flat=True)) == ["VIDP"]
    assert "VABB" in caplog.text


def test_sweep_fetches_each_airfield_once(threshold, other_user, stub_provider, make_observation):
    WeatherThreshold.objects.create(user=other_user, airfield=threshold.airfield, wind_speed_max=10)
    provider = stub_provider({"VIDP": make_observation(wind_speed=45)})
    result = run_alert_sweep(provider=provider)

    assert provider.calls == ["VIDP"]
    assert result.created == 2
    assert sorted(Alert.objects.values_list("severity", flat=True)) == ["critical", "high"]


def test_sweep_twice_keeps_one_active_alert(threshold, stub_provider, make_observation):
    provider = stub_provider({"VIDP": make_observation(wind_speed=45)})
    run_alert_sweep(provider=provider, policy="tuple")
    second = run_alert_sweep(provider=provider, policy="tuple")

    assert second.candidates == 1
    assert second.created == 0
    assert Alert.objects.active().count() == 1


def test_sweep_ignores_inactive_thresholds_and_airfields(threshold, stub_provider, make_observation):
    provider = stub_provider({"VIDP": make_observation(wind_speed=45)})
    threshold.is_active = False
    threshold.save()
    assert run_alert_sweep(provider=provider).thresholds == 0

    threshold.is_active = True
    threshold.save()
    threshold.airfield.is_active = False
    threshold.airfield.save()
    assert run_alert_sweep(provider=provider).thresholds == 0
    assert provider.calls == []


def test_airfield_without_threshold_gets_no_alerts(threshold, second_airfield, stub_provider, make_observation):
    provider = stub_provider({
        "VIDP": make_observation(),
        "VABB": make_observation(wind_speed=70, conditions="Hail"),
    })
    run_alert_sweep(provider=provider)
    assert "VABB" not in provider.calls
    assert not Alert.objects.filter(airfield=second_airfield).exists()


def test_sweep_dry_run_writes_nothing(threshold, stub_provider, make_observation):
    provider = stub_provider({"VIDP": make_observation(wind_speed=45)})
    result = run_alert_sweep(provider=provider, dry_run=True)
    assert result.candidates == 1
    assert result.created == 0
    assert Alert.objects.count() == 0


def test_sweep_missing_configuration_is_fatal(settings, threshold):
    settings.AIRFIELDWATCH = {**settings.AIRFIELDWATCH, "WEATHER_PROVIDER": "openweather", "OPENWEATHER_API_KEY": ""}
    with pytest.raises(ImproperlyConfigured):
        run_alert_sweep()


def test_refresh_uses_bands_and_replace_policy(user, airfield, stub_provider, make_observation):
    provider = stub_provider({"VIDP": make_observation(wind_speed=42, visibility=2)})
    created = refresh_airfield_alerts(user, airfield, provider=provider, policy="replace")
    assert created == 2

    provider.observations["VIDP"] = make_observation(wind_speed=25)
    refresh_airfield_alerts(user, airfield, provider=provider, policy="replace")
    active = list(Alert.objects.active().values_list("alert_type", "severity"))
    assert active == [("wind", "medium")]


def test_refresh_with_custom_bands(user, airfield, stub_provider, make_observation):
    provider = stub_provider({"VIDP": make_observation(wind_speed=12)})
    bands = BandThresholds(wind=Bands(10, 20, 30))
    assert refresh_airfield_alerts(user, airfield, provider=provider, bands=bands) == 1


def test_refresh_provider_failure_returns_zero(user, airfield, stub_provider, make_observation):
    provider = stub_provider({"VIDP": make_observation()}, failing=["VIDP"])
    assert refresh_airfield_alerts(user, airfield, provider=provider) == 0


def test_refresh_defaults_to_simulated_provider(user, airfield):
    with patch("alerts.services.SimulatedWeatherProvider", return_value=SimulatedWeatherProvider(seed=3)):
        created = refresh_airfield_alerts(user, airfield)
    assert created == Alert.objects.count()
    assert all(a.confidence_score in (85, 90, 95) for a in Alert.objects.all())


def test_run_alerts_command(threshold, stub_provider, make_observation):
    provider = stub_provider({"VIDP": make_observation(wind_speed=55)})
    out = StringIO()
    with patch("alerts.management.commands.run_alerts.get_weather_provider", return_value=provider):
        call_command("run_alerts", stdout=out)
    assert "created 1 alert(s)" in out.getvalue()
    assert Alert.objects.get().severity == "critical"


def test_run_alerts_command_missing_key(settings, threshold):
    settings.AIRFIELDWATCH = {**settings.AIRFIELDWATCH, "WEATHER_PROVIDER": "openweather", "OPENWEATHER_API_KEY": ""}
    with pytest.raises(CommandError):
        call_command("run_alerts", stdout=StringIO())


def test_celery_task_returns_summary(threshold, stub_provider, make_observation):
    provider = stub_provider({"VIDP": make_observation(wind_speed=45)})
    with patch("alerts.services.get_weather_provider", return_value=provider):
        summary = check_weather_alerts.apply().get()
    assert summary["created"] == 1
    assert summary["airfields_checked"] == 1


def test_only_celery_beat_schedules_the_sweep_by_default(settings):
    assert settings.ALERT_SCHEDULER == "celery"
    assert settings.CRONJOBS == []
    assert [entry["task"] for entry in settings.CELERY_BEAT_SCHEDULE.values()] == ["alerts.tasks.check_weather_alerts"]


def test_provider_error_type_is_not_fatal(threshold):
    class Broken:
        def fetch(self, latitude, longitude):
            raise WeatherProviderError("HTTP 502")

    result = run_alert_sweep(provider=Broken())
    assert result.airfields_skipped == 1
    assert result.created == 0


def test_malformed_payload_skips_only_that_airfield(both_thresholds, airfield, caplog):
    good = {"main": {"temp": 20}, "wind": {"speed": 25.0, "deg": 270}, "weather": [{"main": "Clear"}]}
    malformed = {"main": {"temp": 20}, "weather": ["Rain"]}

    def fake_get(url, params=None, timeout=None):
        resp = Mock()
        resp.json.return_value = good if params["lat"] == airfield.latitude else malformed
        return resp

    with patch("ingestion.providers.requests.get", side_effect=fake_get):
        result = run_alert_sweep(provider=OpenWeatherProvider("k3y"), policy="tuple")

    assert result.airfields_checked == 1
    assert result.airfields_skipped == 1
    assert set(Alert.objects.values_list("airfield__code", "alert_type", "severity")) == {
        ("VIDP", "wind", "high"),
    }
    assert "VABB" in caplog.text


def test_unexpected_provider_exception_is_not_fatal(both_thresholds, stub_provider, make_observation, caplog):
    provider = stub_provider({"VIDP": make_observation(wind_speed=45)})

    def flaky_fetch(latitude, longitude):
        code = provider.by_position[(latitude, longitude)]
        if code == "VABB":
            raise RuntimeError("provider bug")
        return provider.observations[code]

    provider.fetch = flaky_fetch
    result = run_alert_sweep(provider=provider)

    assert result.airfields_skipped == 1
    assert list(Alert.objects.values_list("airfield__code", flat=True)) == ["VIDP"]
    assert "provider bug" in caplog.text


def test_refresh_unexpected_provider_exception_returns_zero(user, airfield):
    class Broken:
        def fetch(self, latitude, longitude):
            raise RuntimeError("provider bug")

    assert refresh_airfield_alerts(user, airfield, provider=Broken()) == 0
    assert Alert.objects.count() == 0
