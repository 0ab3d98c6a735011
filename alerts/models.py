from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from core.models import Airfield


class Severity(models.TextChoices):
    LOW = "low", "Low"
    MEDIUM = "medium", "Medium"
    HIGH = "high", "High"
    CRITICAL = "critical", "Critical"

    @classmethod
    def rank(cls, value):
        """Position in the low < medium < high < critical ordering."""
        return list(cls.values).index(value)


class AlertType(models.TextChoices):
    WIND = "wind", "Wind"
    TEMPERATURE = "temperature", "Temperature"
    VISIBILITY = "visibility", "Visibility"
    WEATHER = "weather", "Weather"
    STORM = "storm", "Storm"


ALERT_COLORS = {
    Severity.CRITICAL.value: "red",
    Severity.HIGH.value: "orange",
    Severity.MEDIUM.value: "yellow",
}


def get_alert_color(severity):
    return ALERT_COLORS.get(severity, "green")


class AlertQuerySet(models.QuerySet):
    def active(self, now=None):
        now = now or timezone.now()
        return self.filter(is_active=True).filter(Q(expires_at__isnull=True) | Q(expires_at__gt=now))


class Alert(models.Model):
    airfield = models.ForeignKey(Airfield, on_delete=models.CASCADE, related_name="alerts")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="weather_alerts")
    alert_type = models.CharField(max_length=20, choices=AlertType.choices)
    severity = models.CharField(max_length=10, choices=Severity.choices)
    title = models.CharField(max_length=200)
    message = models.TextField()
    threshold_value = models.FloatField(null=True, blank=True)
    actual_value = models.FloatField(null=True, blank=True)
    confidence_score = models.PositiveSmallIntegerField(default=100)  # 0-100
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(default=timezone.now)
    acknowledged_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)

    objects = AlertQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "airfield", "is_active"], name="alert_user_airfield_active_idx"),
        ]

    @property
    def color(self):
        return get_alert_color(self.severity)

    def acknowledge(self, when=None):
        self.acknowledged_at = when or timezone.now()
        self.is_active = False
        self.save(update_fields=["acknowledged_at", "is_active"])

    def dismiss(self):
        self.is_active = False
        self.save(update_fields=["is_active"])

    def __str__(self):
        return f"{self.severity} {self.alert_type} @ {self.airfield}"
