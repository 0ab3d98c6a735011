# alerts/urls.py
from django.urls import path
from . import views

urlpatterns = [
    path("latest/", views.LatestAlertsAPIView.as_view(), name="latest_alerts"),
    path("ack/<int:pk>/", views.acknowledge_alert, name="acknowledge_alert"),
    path("dismiss/<int:pk>/", views.dismiss_alert, name="dismiss_alert"),
    path("refresh/<str:airfield>/", views.refresh_alerts, name="refresh_alerts"),
]
