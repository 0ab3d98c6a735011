# core/management/commands/seed_airfields.py
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from core.models import Airfield, WeatherThreshold

AIRFIELDS = [
    {"name": "Delhi Indira Gandhi Intl", "code": "VIDP", "latitude": 28.5562, "longitude": 77.1000},
    {"name": "Mumbai Chhatrapati Shivaji Intl", "code": "VABB", "latitude": 19.0896, "longitude": 72.8656},
    {"name": "Chennai Intl", "code": "VOMM", "latitude": 12.9941, "longitude": 80.1709},
    {"name": "Kolkata Netaji Subhash Chandra Bose", "code": "VECC", "latitude": 22.6547, "longitude": 88.4467},
    {"name": "Bengaluru Kempegowda Intl", "code": "VOBL", "latitude": 13.1986, "longitude": 77.7066},
    {"name": "Ahmedabad Sardar Vallabhbhai Patel Intl", "code": "VAAH", "latitude": 23.0774, "longitude": 72.6347},
]


class Command(BaseCommand):
    help = "Seed sample airfields, optionally with default thresholds for a user"

    def add_arguments(self, parser):
        parser.add_argument("--user", type=str, help="Username to create default thresholds for")
        parser.add_argument("--wind-max", type=float, default=25.0, help="Default wind ceiling in knots")
        parser.add_argument("--temp-min", type=float, default=0.0, help="Default minimum temperature (C)")
        parser.add_argument("--temp-max", type=float, default=40.0, help="Default maximum temperature (C)")

    def handle(self, *args, **options):
        airfields = []
        for af in AIRFIELDS:
            obj, created = Airfield.objects.update_or_create(
                code=af["code"],
                defaults={
                    "name": af["name"],
                    "latitude": af["latitude"],
                    "longitude": af["longitude"],
                },
            )
            airfields.append(obj)
            if created:
                self.stdout.write(self.style.SUCCESS(f"Added {obj}"))
            else:
                self.stdout.write(self.style.WARNING(f"Updated {obj}"))

        username = options.get("user")
        if not username:
            return

        user, _ = get_user_model().objects.get_or_create(username=username)
        for af in airfields:
            _, created = WeatherThreshold.objects.get_or_create(
                user=user,
                airfield=af,
                defaults={
                    "wind_speed_max": options["wind_max"],
                    "temperature_min": options["temp_min"],
                    "temperature_max": options["temp_max"],
                },
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f"Threshold for {username} @ {af.code}"))
