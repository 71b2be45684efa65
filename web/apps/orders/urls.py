from django.urls import path

from .views import (
    AdminCustomerDetailView,
    AdminCustomersView,
    AdminOrderCustomerView,
    AdminOrderDetailView,
    AdminOrderPaymentLinkView,
    AdminOrderRefundView,
    AdminOrdersView,
    AdminOrderTagDetailView,
    AdminOrderTagListView,
    AdminOrderTagsView,
    OrdersView,
    PublicOrderView,
)

urlpatterns = [
    path("orders", OrdersView.as_view(), name="orders"),
    path("orders/<str:public_id>", PublicOrderView.as_view(), name="order-detail"),
    path("admin/orders", AdminOrdersView.as_view(), name="admin-orders"),
    path("admin/orders/<str:public_id>", AdminOrderDetailView.as_view(), name="admin-order-detail"),
    path("admin/orders/<str:public_id>/tags", AdminOrderTagsView.as_view(), name="admin-order-tags"),
    path("admin/orders/<str:public_id>/customer", AdminOrderCustomerView.as_view(), name="admin-order-customer"),
    path(
        "admin/orders/<str:public_id>/payment-link",
        AdminOrderPaymentLinkView.as_view(),
        name="admin-order-payment-link",
    ),
    path("admin/orders/<str:public_id>/refund", AdminOrderRefundView.as_view(), name="admin-order-refund"),
    path("admin/order-tags", AdminOrderTagListView.as_view(), name="admin-order-tags-list"),
    path("admin/order-tags/<int:pk>", AdminOrderTagDetailView.as_view(), name="admin-order-tag-detail"),
    path("admin/customers", AdminCustomersView.as_view(), name="admin-customers"),
    path("admin/customers/<int:pk>", AdminCustomerDetailView.as_view(), name="admin-customer-detail"),
]
