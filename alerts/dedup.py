# alerts/dedup.py
"""
Persistence sinks for alert candidates.

TupleDedupSink (default) keeps existing alerts and skips any candidate whose
(user, airfield, alert_type, severity) is already active.
ReplaceByAirfieldSink deactivates every active alert of a (user, airfield)
pair before inserting that pair's fresh batch.

Writes are best-effort: a DatabaseError is logged and reported as 0 created,
never raised, and nothing is retried.
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError, transaction
from django.utils import timezone

from .models import Alert

logger = logging.getLogger(__name__)

POLICY_TUPLE = "tuple"
POLICY_REPLACE = "replace"


def _expiry(now):
    ttl = settings.AIRFIELDWATCH.get("ALERT_TTL_MINUTES")
    return now + timedelta(minutes=ttl) if ttl else None


def _build(candidates, now):
    expires_at = _expiry(now)
    return [Alert(created_at=now, expires_at=expires_at, is_active=True, **c.as_model_kwargs()) for c in candidates]


class TupleDedupSink:
    policy = POLICY_TUPLE

    def filter_new(self, candidates, now=None):
        """Drop candidates already active in the store or repeated within the batch."""
        if not candidates:
            return []
        user_ids = {c.user_id for c in candidates}
        airfield_ids = {c.airfield_id for c in candidates}
        existing = set(
            Alert.objects.active(now)
            .filter(user_id__in=user_ids, airfield_id__in=airfield_ids)
            .values_list("user_id", "airfield_id", "alert_type", "severity")
        )

        fresh = []
        for c in candidates:
            if c.key in existing:
                continue
            existing.add(c.key)
            fresh.append(c)
        return fresh

    def persist(self, candidates):
        now = timezone.now()
        try:
            fresh = self.filter_new(candidates, now)
            if not fresh:
                logger.info("No new alerts to create (%d candidates already active).", len(candidates))
                return 0
            created = Alert.objects.bulk_create(_build(fresh, now))
        except DatabaseError:
            logger.exception("Failed to persist %d alert candidate(s)", len(candidates))
            return 0
        logger.info("Inserted %d new alert(s), skipped %d duplicate(s).", len(created), len(candidates) - len(created))
        return len(created)


class ReplaceByAirfieldSink:
    policy = POLICY_REPLACE

    def persist(self, candidates):
        if not candidates:
            return 0
        now = timezone.now()
        pairs = {(c.user_id, c.airfield_id) for c in candidates}
        try:
            with transaction.atomic():
                deactivated = 0
                for user_id, airfield_id in pairs:
                    deactivated += Alert.objects.filter(
                        user_id=user_id, airfield_id=airfield_id, is_active=True
                    ).update(is_active=False)
                created = Alert.objects.bulk_create(_build(candidates, now))
        except DatabaseError:
            logger.exception("Failed to replace alerts for %d airfield(s)", len(pairs))
            return 0
        logger.info("Replaced %d active alert(s) with %d new alert(s).", deactivated, len(created))
        return len(created)


SINKS = {
    POLICY_TUPLE: TupleDedupSink,
    POLICY_REPLACE: ReplaceByAirfieldSink,
}


def get_sink(policy=None):
    policy = policy or settings.AIRFIELDWATCH.get("ALERT_DEDUP_POLICY", POLICY_TUPLE)
    try:
        return SINKS[policy]()
    except KeyError:
        raise ImproperlyConfigured(f"Unknown ALERT_DEDUP_POLICY {policy!r}") from None
