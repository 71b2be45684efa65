from django.urls import path

from .views import (
    AdminCarriersView,
    AdminLabelDownloadView,
    AdminLabelsView,
    AdminQuoteView,
    AdminShippingOptionDetailView,
    AdminShippingOptionsReorderView,
    AdminShippingOptionsView,
    SendcloudWebhookView,
    ServicePointsView,
    ShippingOptionsView,
)

urlpatterns = [
    path("shipping/options", ShippingOptionsView.as_view(), name="shipping-options"),
    path("shipping/service-points", ServicePointsView.as_view(), name="shipping-service-points"),
    path("admin/shipping/options", AdminShippingOptionsView.as_view(), name="admin-shipping-options"),
    path(
        "admin/shipping/options/reorder",
        AdminShippingOptionsReorderView.as_view(),
        name="admin-shipping-options-reorder",
    ),
    path(
        "admin/shipping/options/<int:pk>",
        AdminShippingOptionDetailView.as_view(),
        name="admin-shipping-option-detail",
    ),
    path("admin/shipping/quote", AdminQuoteView.as_view(), name="admin-shipping-quote"),
    path("admin/shipping/carriers", AdminCarriersView.as_view(), name="admin-shipping-carriers"),
    path("admin/shipping/labels", AdminLabelsView.as_view(), name="admin-shipping-labels"),
    path("admin/shipping/labels/download", AdminLabelDownloadView.as_view(), name="admin-shipping-label-download"),
    path("webhooks/sendcloud", SendcloudWebhookView.as_view(), name="webhook-sendcloud"),
]
