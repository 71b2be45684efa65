from django.db import models


class ShippingOption(models.Model):
    """A shipping method offered at checkout.

    ``price`` and the order-total bounds are kept as canonical two-decimal
    strings ("4.90") and converted to cents when pricing an order.
    """

    class Type(models.TextChoices):
        SHIPPING = "shipping"
        CLICKNCOLLECT = "clickncollect"
        SERVICE_POINTS = "service_points"

    carrier = models.CharField(max_length=120)
    shipping_type = models.CharField(max_length=32, choices=Type.choices, default=Type.SHIPPING)
    title = models.CharField(max_length=200)
    description = models.TextField(null=True, blank=True)
    price = models.CharField(max_length=32)
    min_order_total = models.CharField(max_length=32, null=True, blank=True)
    max_order_total = models.CharField(max_length=32, null=True, blank=True)
    position = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "shipping_options"
        ordering = ["position", "created_at", "id"]

    def __str__(self):
        return f"{self.carrier} / {self.title}"
