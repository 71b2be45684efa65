"""HTTP views for store settings.

The public view exposes only what the storefront needs to render and to
initialise Stripe.js. The admin views never return secrets: each
credential is reported as a ``has_<name>`` boolean.
"""

from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from gateway.permissions import IsStoreAdmin

from .schemas import UpdateSettingsDTO
from .services import get_secret, get_settings, secret_flags, update_settings


def serialize_settings(row) -> dict | None:
    if row is None:
        return None
    return {
        "id": row.id,
        "store_name": row.store_name,
        "domain": row.domain,
        "website_title": row.website_title,
        "website_description": row.website_description,
        "default_currency": row.default_currency,
        "logo_url": row.logo_url,
        "logo_transparent_url": row.logo_transparent_url,
        **secret_flags(row),
        "updated_at": row.updated_at.isoformat() if row.updated_at else None,
    }


class PublicSettingsView(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "catalog"

    def get(self, request):
        row = get_settings()
        body = None
        if row is not None:
            body = {
                "store_name": row.store_name,
                "logo_url": row.logo_url,
                "logo_transparent_url": row.logo_transparent_url,
            }
        return Response({
            "settings": body,
            "stripe_publishable_key": get_secret("stripe_publishable_key", row) or None,
        })


class AdminSettingsView(APIView):
    """Read or replace the settings row (admin only)."""

    permission_classes = [IsStoreAdmin]

    def get(self, request):
        return Response({"settings": serialize_settings(get_settings())})

    def put(self, request):
        dto = UpdateSettingsDTO.model_validate(request.data)
        row = update_settings(dto.plain_values(), dto.secret_updates())
        return Response({"settings": serialize_settings(row)})
