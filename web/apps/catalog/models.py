from django.db import models


class Collection(models.Model):
    slug = models.SlugField(max_length=200, unique=True)
    title = models.CharField(max_length=200)
    description = models.TextField(null=True, blank=True)
    image_url = models.URLField(max_length=500, null=True, blank=True)
    listing_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "collections"
        ordering = ["title", "id"]

    def __str__(self):
        return self.title


class Product(models.Model):
    """A sellable product; prices are integer cents."""

    slug = models.SlugField(max_length=200, unique=True)
    title = models.CharField(max_length=255)
    description_html = models.TextField(null=True, blank=True)
    price_cents = models.PositiveIntegerField()
    compare_at_cents = models.PositiveIntegerField(null=True, blank=True)
    weight_kg = models.DecimalField(max_digits=8, decimal_places=3, null=True, blank=True)
    active = models.BooleanField(default=True)
    in_stock = models.BooleanField(default=True)
    collections = models.ManyToManyField(Collection, blank=True, related_name="products")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "products"
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return self.title
