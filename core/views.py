# core/views.py
from rest_framework import viewsets

from .models import Airfield, WeatherThreshold
from .serializers import AirfieldSerializer, WeatherThresholdSerializer


class AirfieldViewSet(viewsets.ModelViewSet):
    queryset = Airfield.objects.all()
    serializer_class = AirfieldSerializer


class WeatherThresholdViewSet(viewsets.ModelViewSet):
    """
    /api/thresholds/?user=<id>&airfield=<id>
    """
    serializer_class = WeatherThresholdSerializer

    def get_queryset(self):
        qs = WeatherThreshold.objects.select_related("airfield").order_by("id")
        user = self.request.query_params.get("user", "")
        airfield = self.request.query_params.get("airfield", "")
        if user.isdigit():
            qs = qs.filter(user_id=int(user))
        if airfield.isdigit():
            qs = qs.filter(airfield_id=int(airfield))
        return qs
