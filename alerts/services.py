# alerts/services.py
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from django.conf import settings

from core.models import WeatherThreshold
from ingestion.providers import SimulatedWeatherProvider, WeatherProviderError, get_weather_provider

from .dedup import get_sink
from .evaluator import BandThresholds, evaluate_bands, evaluate_threshold

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    thresholds: int = 0
    airfields_checked: int = 0
    airfields_skipped: int = 0
    candidates: int = 0
    created: int = 0


def refresh_airfield_alerts(user, airfield, provider=None, bands=None, policy=None):
    """
    Interactive refresh for one user and one airfield: fetch an observation
    (simulated unless a provider is given), evaluate it against the band
    thresholds and persist. Returns the number of alerts created.
    """
    provider = provider or SimulatedWeatherProvider()
    bands = bands or BandThresholds.from_settings()
    try:
        observation = provider.fetch(airfield.latitude, airfield.longitude)
    except WeatherProviderError as e:
        logger.warning("Weather unavailable for %s: %s", airfield.code, e)
        return 0
    except Exception:
        logger.exception("Unexpected error fetching weather for %s", airfield.code)
        return 0

    candidates = evaluate_bands(observation, user.pk, airfield.pk, airfield.code, bands=bands)
    if not candidates:
        logger.info("No alert conditions at %s for user %s", airfield.code, user.pk)
        return 0
    return get_sink(policy).persist(candidates)


def _fetch(provider, airfield):
    try:
        return airfield, provider.fetch(airfield.latitude, airfield.longitude), None
    except WeatherProviderError as e:
        return airfield, None, e
    except Exception as e:
        logger.exception("Unexpected error fetching weather for airfield %s", airfield.code)
        return airfield, None, e


def run_alert_sweep(provider=None, policy=None, max_workers=None, dry_run=False):
    """
    Scheduled sweep: check every active threshold against current weather at
    its airfield. Weather is fetched once per airfield, in parallel; an
    airfield whose fetch fails is logged and skipped. Raises
    ImproperlyConfigured when the provider is not configured.
    """
    provider = provider or get_weather_provider()
    sink = get_sink(policy)
    result = SweepResult()

    thresholds = list(
        WeatherThreshold.objects.filter(is_active=True, airfield__is_active=True).select_related("airfield")
    )
    result.thresholds = len(thresholds)
    if not thresholds:
        logger.info("No active thresholds found.")
        return result

    by_airfield = {}
    for t in thresholds:
        by_airfield.setdefault(t.airfield_id, []).append(t)
    airfields = [group[0].airfield for group in by_airfield.values()]

    workers = max_workers or settings.AIRFIELDWATCH.get("ALERT_SWEEP_MAX_WORKERS", 8)
    with ThreadPoolExecutor(max_workers=max(1, min(workers, len(airfields)))) as pool:
        fetched = list(pool.map(lambda af: _fetch(provider, af), airfields))

    candidates = []
    for airfield, observation, error in fetched:
        if error is not None:
            logger.warning("Failed to fetch weather for airfield %s (id=%s): %s", airfield.code, airfield.pk, error)
            result.airfields_skipped += 1
            continue
        result.airfields_checked += 1
        for threshold in by_airfield[airfield.pk]:
            candidates.extend(evaluate_threshold(observation, threshold, airfield_code=airfield.code))

    result.candidates = len(candidates)
    if dry_run:
        for c in candidates:
            logger.info("DRY RUN: %s", c.title)
        return result

    result.created = sink.persist(candidates)
    logger.info(
        "Sweep complete: %d airfield(s) checked, %d skipped, %d candidate(s), %d created.",
        result.airfields_checked, result.airfields_skipped, result.candidates, result.created,
    )
    return result
