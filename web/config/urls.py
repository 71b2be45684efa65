from django.urls import include, path

urlpatterns = [
    path("api/", include("apps.monitoring.urls")),
    path("api/", include("apps.site_settings.urls")),
    path("api/", include("apps.catalog.urls")),
    path("api/", include("apps.discounts.urls")),
    path("api/", include("apps.shipping.urls")),
    path("api/", include("apps.orders.urls")),
    path("api/", include("apps.payments.urls")),
]
