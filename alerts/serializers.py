# alerts/serializers.py
from rest_framework import serializers

from core.serializers import AirfieldSerializer
from .models import Alert


class AlertSerializer(serializers.ModelSerializer):
    airfield = AirfieldSerializer(read_only=True)
    color = serializers.CharField(read_only=True)

    class Meta:
        model = Alert
        fields = (
            "id",
            "airfield",
            "user",
            "alert_type",
            "severity",
            "color",
            "title",
            "message",
            "threshold_value",
            "actual_value",
            "confidence_score",
            "is_active",
            "created_at",
            "acknowledged_at",
            "expires_at",
        )
        read_only_fields = fields
