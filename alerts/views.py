# alerts/views.py
from django.contrib.auth import get_user_model
from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.generics import ListAPIView
from rest_framework.response import Response

from core.models import Airfield
from .models import Alert
from .serializers import AlertSerializer
from .services import refresh_airfield_alerts


def _airfield_filter(value):
    try:
        return Q(airfield__id=int(value))
    except ValueError:
        return Q(airfield__code__iexact=value)


MAX_LATEST_LIMIT = 200


class LatestAlertsAPIView(ListAPIView):
    """
    GET /api/alerts/latest/?airfield=<id|code>&user=<id>&include_inactive=true&limit=20
    """
    serializer_class = AlertSerializer
    pagination_class = None

    def get_queryset(self):
        params = self.request.query_params
        try:
            limit = int(params.get("limit", 20))
        except ValueError:
            limit = 20
        limit = max(1, min(limit, MAX_LATEST_LIMIT))
        include_inactive = params.get("include_inactive", "false").lower() == "true"

        qs = Alert.objects.select_related("airfield")
        if not include_inactive:
            qs = qs.active()
        if params.get("airfield"):
            qs = qs.filter(_airfield_filter(params["airfield"]))
        if params.get("user", "").isdigit():
            qs = qs.filter(user_id=params["user"])
        return qs.order_by("-created_at")[:limit]


@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def acknowledge_alert(request, pk):
    """
    POST /api/alerts/ack/<pk>/
    """
    alert = get_object_or_404(Alert, pk=pk)
    if alert.acknowledged_at is not None:
        serializer = AlertSerializer(alert, context={"request": request})
        return Response({"detail": "Already acknowledged", "alert": serializer.data}, status=status.HTTP_200_OK)

    alert.acknowledge()
    serializer = AlertSerializer(alert, context={"request": request})
    return Response({"detail": "Acknowledged", "alert": serializer.data}, status=status.HTTP_200_OK)


@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def dismiss_alert(request, pk):
    """
    POST /api/alerts/dismiss/<pk>/
    """
    alert = get_object_or_404(Alert, pk=pk)
    if alert.is_active:
        alert.dismiss()
    serializer = AlertSerializer(alert, context={"request": request})
    return Response({"detail": "Dismissed", "alert": serializer.data}, status=status.HTTP_200_OK)


@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def refresh_alerts(request, airfield):
    """
    POST /api/alerts/refresh/<id|code>/
    Body: {"user": <user id>}
    Runs the interactive band check for one airfield and returns the active alerts.
    """
    try:
        af = get_object_or_404(Airfield, pk=int(airfield))
    except ValueError:
        af = get_object_or_404(Airfield, code__iexact=airfield)

    try:
        user_id = int(request.data.get("user"))
    except (TypeError, ValueError):
        return Response({"error": "Missing or invalid user"}, status=status.HTTP_400_BAD_REQUEST)
    user = get_object_or_404(get_user_model(), pk=user_id)

    created = refresh_airfield_alerts(user, af)
    alerts = Alert.objects.active().filter(user=user, airfield=af).select_related("airfield")
    serializer = AlertSerializer(alerts, many=True, context={"request": request})
    return Response({"created": created, "alerts": serializer.data}, status=status.HTTP_200_OK)
