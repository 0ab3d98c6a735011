from django.urls import path, include
from rest_framework import routers
from .views import AirfieldViewSet, WeatherThresholdViewSet

router = routers.DefaultRouter()
router.register(r'airfields', AirfieldViewSet)
router.register(r'thresholds', WeatherThresholdViewSet, basename='threshold')

urlpatterns = [
    path('', include(router.urls)),  # /api/airfields/, /api/thresholds/
]
