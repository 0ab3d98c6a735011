"""
Tests for the alert persistence sinks.
"""

from datetime import timedelta
from unittest.mock import patch

import pytest
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError
from django.utils import timezone

from alerts.dedup import ReplaceByAirfieldSink, TupleDedupSink, get_sink
from alerts.evaluator import evaluate_threshold
from alerts.models import Alert
from core.models import WeatherThreshold


@pytest.fixture
def windy(make_observation):
    return make_observation(wind_speed=45)


def test_tuple_policy_two_runs_leave_one_active_alert(threshold, windy):
    sink = TupleDedupSink()
    first = sink.persist(evaluate_threshold(windy, threshold))
    second = sink.persist(evaluate_threshold(windy, threshold))

    assert first == 1
    assert second == 0
    assert Alert.objects.active().filter(user=threshold.user, airfield=threshold.airfield).count() == 1


def test_tuple_policy_new_severity_is_a_new_tuple(threshold, make_observation):
    sink = TupleDedupSink()
    sink.persist(evaluate_threshold(make_observation(wind_speed=45), threshold))
    sink.persist(evaluate_threshold(make_observation(wind_speed=55), threshold))

    severities = sorted(Alert.objects.active().values_list("severity", flat=True))
    assert severities == ["critical", "high"]


def test_tuple_policy_drops_duplicates_within_batch(threshold, windy):
    candidates = evaluate_threshold(windy, threshold) * 2
    assert TupleDedupSink().persist(candidates) == 1


def test_tuple_policy_scopes_by_user(threshold, other_user, windy):
    other = WeatherThreshold.objects.create(user=other_user, airfield=threshold.airfield, wind_speed_max=30)
    sink = TupleDedupSink()
    sink.persist(evaluate_threshold(windy, threshold))
    assert sink.persist(evaluate_threshold(windy, other)) == 1
    assert Alert.objects.active().count() == 2


def test_expired_alert_does_not_block(threshold, windy):
    TupleDedupSink().persist(evaluate_threshold(windy, threshold))
    Alert.objects.update(expires_at=timezone.now() - timedelta(minutes=1))

    assert TupleDedupSink().persist(evaluate_threshold(windy, threshold)) == 1


def test_acknowledged_alert_does_not_block(threshold, windy):
    TupleDedupSink().persist(evaluate_threshold(windy, threshold))
    Alert.objects.get().acknowledge()

    assert TupleDedupSink().persist(evaluate_threshold(windy, threshold)) == 1
    assert Alert.objects.count() == 2


def test_new_alerts_get_expiry(settings, threshold, windy):
    settings.AIRFIELDWATCH = {**settings.AIRFIELDWATCH, "ALERT_TTL_MINUTES": 30}
    TupleDedupSink().persist(evaluate_threshold(windy, threshold))
    alert = Alert.objects.get()
    assert alert.expires_at - alert.created_at == timedelta(minutes=30)
    assert alert.is_active


def test_replace_policy_deactivates_previous(threshold, make_observation):
    sink = ReplaceByAirfieldSink()
    sink.persist(evaluate_threshold(make_observation(wind_speed=45), threshold))
    sink.persist(evaluate_threshold(make_observation(wind_speed=45, temperature=-5), threshold))

    assert Alert.objects.count() == 3
    active = Alert.objects.active()
    assert sorted(active.values_list("alert_type", flat=True)) == ["temperature", "wind"]


def test_replace_policy_empty_batch_keeps_existing(threshold, windy):
    sink = ReplaceByAirfieldSink()
    sink.persist(evaluate_threshold(windy, threshold))
    assert sink.persist([]) == 0
    assert Alert.objects.active().count() == 1


def test_replace_policy_leaves_other_airfields(threshold, second_airfield, windy):
    elsewhere = WeatherThreshold.objects.create(user=threshold.user, airfield=second_airfield, wind_speed_max=30)
    sink = ReplaceByAirfieldSink()
    sink.persist(evaluate_threshold(windy, elsewhere))
    sink.persist(evaluate_threshold(windy, threshold))

    assert Alert.objects.active().count() == 2


def test_persistence_failure_is_logged_not_raised(threshold, windy, caplog):
    with patch.object(Alert.objects, "bulk_create", side_effect=DatabaseError("disk full")):
        assert TupleDedupSink().persist(evaluate_threshold(windy, threshold)) == 0
        assert ReplaceByAirfieldSink().persist(evaluate_threshold(windy, threshold)) == 0
    assert "Failed to" in caplog.text
    assert Alert.objects.count() == 0


def test_get_sink(settings):
    assert isinstance(get_sink("replace"), ReplaceByAirfieldSink)
    settings.AIRFIELDWATCH = {**settings.AIRFIELDWATCH, "ALERT_DEDUP_POLICY": "tuple"}
    assert isinstance(get_sink(), TupleDedupSink)
    with pytest.raises(ImproperlyConfigured):
        get_sink("newest")
