from django.urls import path

from .views import (
    AdminCollectionDetailView,
    AdminCollectionsView,
    AdminProductDetailView,
    AdminProductDuplicateView,
    AdminProductsView,
    ProductDetailView,
    ProductListView,
)

urlpatterns = [
    path("products", ProductListView.as_view(), name="products"),
    path("products/<slug:slug>", ProductDetailView.as_view(), name="product-detail"),
    path("admin/products", AdminProductsView.as_view(), name="admin-products"),
    path("admin/products/<int:pk>", AdminProductDetailView.as_view(), name="admin-product-detail"),
    path("admin/products/<int:pk>/duplicate", AdminProductDuplicateView.as_view(), name="admin-product-duplicate"),
    path("admin/collections", AdminCollectionsView.as_view(), name="admin-collections"),
    path("admin/collections/<int:pk>", AdminCollectionDetailView.as_view(), name="admin-collection-detail"),
]
