# core/serializers.py
from rest_framework import serializers
from .models import Airfield, WeatherThreshold


class AirfieldSerializer(serializers.ModelSerializer):
    class Meta:
        model = Airfield
        fields = ["id", "code", "name", "latitude", "longitude", "elevation_m", "is_active"]


class WeatherThresholdSerializer(serializers.ModelSerializer):
    airfield_code = serializers.CharField(source="airfield.code", read_only=True)

    class Meta:
        model = WeatherThreshold
        fields = [
            "id", "user", "airfield", "airfield_code",
            "wind_speed_max", "temperature_min", "temperature_max",
            "is_active", "created_at", "updated_at",
        ]
        read_only_fields = ["created_at", "updated_at"]

    def validate(self, attrs):
        wind = attrs.get("wind_speed_max", getattr(self.instance, "wind_speed_max", None))
        t_min = attrs.get("temperature_min", getattr(self.instance, "temperature_min", None))
        t_max = attrs.get("temperature_max", getattr(self.instance, "temperature_max", None))
        if wind is not None and wind < 0:
            raise serializers.ValidationError({"wind_speed_max": "Wind speed limit cannot be negative."})
        if t_min is not None and t_max is not None and t_min > t_max:
            raise serializers.ValidationError("temperature_min must not exceed temperature_max.")
        return attrs
