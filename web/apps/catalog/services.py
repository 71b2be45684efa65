"""Catalog write operations that span several rows."""

import logging

from django.db import transaction

from apps.common.errors import InvalidInput, NotFound

from .models import Collection, Product
from .slugs import create_with_unique_slug, slugify

logger = logging.getLogger(__name__)


class ProductNotFound(NotFound):
    default_message = "Product not found."


class InvalidCollectionSelection(InvalidInput):
    default_message = "Invalid collection selection."


def resolve_collections(collection_ids: list[int]) -> list[Collection]:
    """Load the collections for ``collection_ids``; every id must exist."""
    ids = list(dict.fromkeys(collection_ids))
    rows = list(Collection.objects.filter(id__in=ids))
    if len(rows) != len(ids):
        raise InvalidCollectionSelection()
    return rows


@transaction.atomic
def create_product(fields: dict, collection_ids: list[int]) -> Product:
    collections = resolve_collections(collection_ids)
    product = create_with_unique_slug(Product, slugify(fields["title"]), **fields)
    if collections:
        product.collections.set(collections)
    logger.info("product created", extra={"product_id": product.id, "slug": product.slug})
    return product


@transaction.atomic
def duplicate_product(product_id: int) -> Product:
    """Copy a product as an inactive draft titled ``"<title> (Copy)"``.

    The copy keeps price, weight, description and collection membership.
    Every write happens in one transaction, so a failure leaves nothing
    behind.

    Raises:
        ProductNotFound: If ``product_id`` does not exist.
    """
    try:
        source = Product.objects.get(pk=product_id)
    except Product.DoesNotExist:
        raise ProductNotFound()

    title = f"{source.title} (Copy)"
    copy = create_with_unique_slug(
        Product,
        slugify(title),
        title=title,
        description_html=source.description_html,
        price_cents=source.price_cents,
        compare_at_cents=source.compare_at_cents,
        weight_kg=source.weight_kg,
        active=False,
        in_stock=source.in_stock,
    )
    copy.collections.set(source.collections.all())
    logger.info("product duplicated", extra={"source_id": source.id, "product_id": copy.id})
    return copy
