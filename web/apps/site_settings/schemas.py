"""Pydantic schemas for the settings endpoints."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import SECRET_FIELDS


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.capitalize() for p in rest)


class UpdateSettingsDTO(BaseModel):
    """Body of ``PUT /api/admin/settings``.

    Secret fields follow a tri-state contract: omitted leaves the stored
    value alone, ``""`` clears it, anything else replaces it.
    """

    model_config = ConfigDict(alias_generator=_camel, populate_by_name=True)

    store_name: str = Field(default="", validate_default=True)
    domain: str | None = None
    website_title: str | None = None
    website_description: str | None = None
    default_currency: str = Field(default="", validate_default=True)

    stripe_secret_key: str | None = None
    stripe_publishable_key: str | None = None
    paypal_client_id: str | None = None
    paypal_client_secret: str | None = None
    sendcloud_public_key: str | None = None
    sendcloud_private_key: str | None = None
    brevo_api_key: str | None = None

    @field_validator("store_name")
    @classmethod
    def validate_store_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Store name is required.")
        return v

    @field_validator("default_currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("Default currency is required.")
        if len(v) != 3 or not v.isalpha():
            raise ValueError("Default currency must be a 3-letter code.")
        return v

    @field_validator("domain", "website_title", "website_description")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None

    def plain_values(self) -> dict:
        return {
            "store_name": self.store_name,
            "domain": self.domain,
            "website_title": self.website_title,
            "website_description": self.website_description,
            "default_currency": self.default_currency,
        }

    def secret_updates(self) -> dict[str, str]:
        """Secrets present in the request body, stripped; ``""`` means clear."""
        out = {}
        for name in SECRET_FIELDS:
            if name in self.model_fields_set:
                out[name] = (getattr(self, name) or "").strip()
        return out
