# airfieldwatch/urls.py
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("core.urls")),            # airfields, thresholds
    path("api/alerts/", include("alerts.urls")),   # alert list / ack / refresh
]
