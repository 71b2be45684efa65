from django.urls import path

from .views import AdminDiscountDetailView, AdminDiscountsView, ValidateDiscountView

urlpatterns = [
    path("discounts/validate", ValidateDiscountView.as_view(), name="discounts-validate"),
    path("admin/discounts", AdminDiscountsView.as_view(), name="admin-discounts"),
    path("admin/discounts/<int:pk>", AdminDiscountDetailView.as_view(), name="admin-discount-detail"),
]
