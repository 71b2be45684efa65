from django.urls import path

from . import api

urlpatterns = [
    path("health/", api.health_view, name="monitoring-health"),
]
