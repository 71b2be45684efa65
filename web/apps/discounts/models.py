from django.db import models


class DiscountCode(models.Model):
    class Type(models.TextChoices):
        FIXED = "fixed"
        PERCENT = "percent"

    # Stored upper-cased, which makes lookups case-insensitive
    code = models.CharField(max_length=64, unique=True)
    discount_type = models.CharField(max_length=16, choices=Type.choices, default=Type.FIXED)
    amount_cents = models.IntegerField(null=True, blank=True)
    percent_off = models.IntegerField(null=True, blank=True)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "discount_codes"
        ordering = ["-created_at", "-id"]

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)

    def __str__(self):
        return self.code
