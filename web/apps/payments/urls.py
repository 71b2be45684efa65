from django.urls import path

from .views import (
    PayPalCaptureOrderView,
    PayPalCreateOrderView,
    StripeConfirmOrderView,
    StripeCreatePaymentIntentView,
)

urlpatterns = [
    path("stripe/create-payment-intent", StripeCreatePaymentIntentView.as_view(), name="stripe-create-intent"),
    path("stripe/confirm-order", StripeConfirmOrderView.as_view(), name="stripe-confirm-order"),
    path("paypal/create-order", PayPalCreateOrderView.as_view(), name="paypal-create-order"),
    path("paypal/capture-order", PayPalCaptureOrderView.as_view(), name="paypal-capture-order"),
]
