from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class Airfield(models.Model):
    code = models.CharField(max_length=10, unique=True)  # ICAO, e.g. VIDP
    name = models.CharField(max_length=200)

    latitude = models.FloatField()
    longitude = models.FloatField()
    elevation_m = models.FloatField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["code"]

    def __str__(self):
        return f"{self.name} ({self.code})"


class WeatherThreshold(models.Model):
    """
    Per-user limits for one airfield. Any bound left empty is not checked.
    Wind is in knots, temperatures in degrees Celsius.
    """
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="weather_thresholds")
    airfield = models.ForeignKey(Airfield, on_delete=models.CASCADE, related_name="thresholds")

    wind_speed_max = models.FloatField(null=True, blank=True)
    temperature_min = models.FloatField(null=True, blank=True)
    temperature_max = models.FloatField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "airfield"], name="unique_threshold_per_user_airfield"),
        ]

    def clean(self):
        if self.wind_speed_max is not None and self.wind_speed_max < 0:
            raise ValidationError({"wind_speed_max": "Wind speed limit cannot be negative."})
        if (
            self.temperature_min is not None
            and self.temperature_max is not None
            and self.temperature_min > self.temperature_max
        ):
            raise ValidationError("temperature_min must not exceed temperature_max.")

    def __str__(self):
        return f"Threshold {self.user} @ {self.airfield.code}"
