"""HTTP views for products and collections.

Public endpoints only ever show active products. Admin endpoints manage the
full catalog; slug conflicts are resolved by the database constraint (see
``slugs.py``).
"""

from django.db import transaction
from rest_framework import status
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from apps.common.errors import InvalidInput, NotFound
from apps.common.pagination import page
from gateway.permissions import IsStoreAdmin

from .models import Collection, Product
from .schemas import CollectionDTO, CreateProductDTO, UpdateProductDTO
from .services import ProductNotFound, create_product, duplicate_product, resolve_collections
from .slugs import create_with_unique_slug, save_with_slug, slugify


class CollectionNotFound(NotFound):
    default_message = "Collection not found."


def serialize_collection(row: Collection) -> dict:
    return {
        "id": row.id,
        "slug": row.slug,
        "title": row.title,
        "description": row.description,
        "image_url": row.image_url,
        "listing_active": row.listing_active,
    }


def serialize_product(row: Product, with_collections: bool = True) -> dict:
    body = {
        "id": row.id,
        "slug": row.slug,
        "title": row.title,
        "description_html": row.description_html,
        "price_cents": row.price_cents,
        "compare_at_cents": row.compare_at_cents,
        "weight_kg": str(row.weight_kg) if row.weight_kg is not None else None,
        "active": row.active,
        "in_stock": row.in_stock,
        "created_at": row.created_at.isoformat() if row.created_at else None,
    }
    if with_collections:
        body["collections"] = [serialize_collection(c) for c in row.collections.all()]
    return body


def _get_product(pk: int) -> Product:
    try:
        return Product.objects.get(pk=pk)
    except Product.DoesNotExist:
        raise ProductNotFound()


def _get_collection(pk: int) -> Collection:
    try:
        return Collection.objects.get(pk=pk)
    except Collection.DoesNotExist:
        raise CollectionNotFound()


# ---- Public ----
class ProductListView(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "catalog"

    def get(self, request):
        qs = Product.objects.filter(active=True).prefetch_related("collections")
        collection = (request.query_params.get("collection") or "").strip()
        if collection:
            qs = qs.filter(collections__slug=collection, collections__listing_active=True)
        rows, meta = page(qs.distinct(), request.query_params)
        return Response({"products": [serialize_product(r) for r in rows], **meta})


class ProductDetailView(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "catalog"

    def get(self, request, slug: str):
        row = Product.objects.filter(slug=slug, active=True).prefetch_related("collections").first()
        if row is None:
            raise ProductNotFound()
        return Response({"product": serialize_product(row)})


# ---- Admin: products ----
class AdminProductsView(APIView):
    permission_classes = [IsStoreAdmin]

    def get(self, request):
        qs = Product.objects.prefetch_related("collections")
        q = (request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(title__icontains=q)
        rows, meta = page(qs, request.query_params)
        return Response({"products": [serialize_product(r) for r in rows], **meta})

    def post(self, request):
        dto = CreateProductDTO.model_validate(request.data)
        product = create_product(dto.model_fields_for_create(), dto.collections or [])
        return Response({"product": serialize_product(product)}, status=status.HTTP_201_CREATED)


class AdminProductDetailView(APIView):
    permission_classes = [IsStoreAdmin]

    def get(self, request, pk: int):
        return Response({"product": serialize_product(_get_product(pk))})

    def patch(self, request, pk: int):
        dto = UpdateProductDTO.model_validate(request.data)
        with transaction.atomic():
            row = Product.objects.select_for_update().filter(pk=pk).first()
            if row is None:
                raise ProductNotFound()
            changes = dto.changes()
            for column, value in changes.items():
                setattr(row, column, value)
            save_with_slug(row)
            if "collections" in dto.model_fields_set:
                row.collections.set(resolve_collections(dto.collections or []))
        return Response({"product": serialize_product(row)})

    def delete(self, request, pk: int):
        _get_product(pk).delete()
        return Response({"ok": True})


class AdminProductDuplicateView(APIView):
    permission_classes = [IsStoreAdmin]

    def post(self, request, pk: int):
        copy = duplicate_product(pk)
        return Response({"product": serialize_product(copy)}, status=status.HTTP_201_CREATED)


# ---- Admin: collections ----
class AdminCollectionsView(APIView):
    permission_classes = [IsStoreAdmin]

    def get(self, request):
        return Response({"collections": [serialize_collection(c) for c in Collection.objects.all()]})

    def post(self, request):
        dto = CollectionDTO.model_validate(request.data)
        if not dto.title:
            raise InvalidInput("Title is required.")
        row = create_with_unique_slug(
            Collection,
            dto.slug or slugify(dto.title),
            title=dto.title,
            description=dto.description,
            image_url=dto.image_url,
            listing_active=True if dto.listing_active is None else dto.listing_active,
        )
        return Response({"collection": serialize_collection(row)}, status=status.HTTP_201_CREATED)


class AdminCollectionDetailView(APIView):
    permission_classes = [IsStoreAdmin]

    def get(self, request, pk: int):
        row = _get_collection(pk)
        return Response({
            "collection": serialize_collection(row),
            "product_ids": list(row.products.values_list("id", flat=True)),
        })

    def patch(self, request, pk: int):
        dto = CollectionDTO.model_validate(request.data)
        row = _get_collection(pk)
        for name, value in dto.changes().items():
            if value is None and name in {"title", "slug", "listing_active"}:
                continue
            setattr(row, name, value)
        save_with_slug(row)
        return Response({"collection": serialize_collection(row)})

    def delete(self, request, pk: int):
        _get_collection(pk).delete()
        return Response({"ok": True})
