"""ORM-backed implementation of the ``ProductLookup`` port.

Keeps the checkout pricer unaware of Django: it receives plain
``ProductSnapshot`` values and never touches model instances.
"""

from apps.catalog.models import Product

from .domain import ProductSnapshot


class ProductRepository:
    """Read active products for pricing."""

    def active_by_ids(self, product_ids: list[int]) -> dict[int, ProductSnapshot]:
        """Return the active products among ``product_ids``.

        Args:
            product_ids: Distinct product primary keys from the cart.

        Returns:
            dict[int, ProductSnapshot]: Only active products; unknown or
            inactive ids are simply missing from the mapping.
        """
        rows = Product.objects.filter(id__in=product_ids, active=True).only("id", "title", "price_cents")
        return {r.id: ProductSnapshot(id=r.id, title=r.title, price_cents=r.price_cents) for r in rows}
