"""
Command: run_alerts
Checks every active user threshold against current weather and stores Alert rows.

Usage:
  python manage.py run_alerts
  python manage.py run_alerts --policy replace
  python manage.py run_alerts --provider simulated --dry-run
"""

import logging

from django.core.exceptions import ImproperlyConfigured
from django.core.management.base import BaseCommand, CommandError

from alerts.dedup import SINKS
from alerts.services import run_alert_sweep
from ingestion.providers import get_weather_provider

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Evaluate active weather thresholds and generate Alert objects"

    def add_arguments(self, parser):
        parser.add_argument("--policy", choices=sorted(SINKS), help="De-duplication policy (default from settings)")
        parser.add_argument("--provider", type=str, help="Weather provider name (default from settings)")
        parser.add_argument("--workers", type=int, help="Parallel weather fetches")
        parser.add_argument("--dry-run", action="store_true", help="Do not create Alert rows; only log what would happen")

    def handle(self, *args, **options):
        try:
            provider = get_weather_provider(options.get("provider"))
            result = run_alert_sweep(
                provider=provider,
                policy=options.get("policy"),
                max_workers=options.get("workers"),
                dry_run=options.get("dry_run", False),
            )
        except ImproperlyConfigured as e:
            logger.error("Alert sweep aborted: %s", e)
            raise CommandError(str(e)) from e

        if result.airfields_skipped:
            self.stdout.write(self.style.WARNING(f"Skipped {result.airfields_skipped} airfield(s) with no weather"))
        if options.get("dry_run"):
            self.stdout.write(self.style.NOTICE(f"DRY RUN: {result.candidates} candidate alert(s)"))
        else:
            self.stdout.write(self.style.SUCCESS(
                f"Checked {result.airfields_checked} airfield(s); created {result.created} alert(s)"
            ))
