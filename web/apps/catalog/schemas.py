"""Pydantic schemas for the catalog admin endpoints."""

from decimal import Decimal, InvalidOperation

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from pydantic.alias_generators import to_camel

from apps.common.money import parse_money_to_cents

from .slugs import slugify

Amount = str | int | float | None


def _weight(value) -> Decimal | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        weight = Decimal(str(value).strip().replace(",", ".", 1))
    except InvalidOperation:
        raise ValueError("Invalid weight.")
    if not weight.is_finite() or weight < 0:
        raise ValueError("Invalid weight.")
    return weight.quantize(Decimal("0.001"))


def _compare_at(value) -> int | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    cents = parse_money_to_cents(value)
    if cents is None:
        raise ValueError("Invalid compare at price.")
    return cents


def _collection_ids(value) -> list[int]:
    ids = []
    for raw in value or []:
        try:
            ids.append(int(raw))
        except (TypeError, ValueError):
            raise ValueError("Invalid collection selection.")
    return ids


class ProductFields(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    description: str | None = None
    compare_at: Amount = None
    weight_kg: Amount = None
    active: StrictBool | None = None
    in_stock: StrictBool | None = None
    collections: list | None = None

    @field_validator("description")
    @classmethod
    def strip_description(cls, v):
        return (v or "").strip() or None

    @field_validator("compare_at")
    @classmethod
    def validate_compare_at(cls, v):
        return _compare_at(v)

    @field_validator("weight_kg")
    @classmethod
    def validate_weight(cls, v):
        return _weight(v)

    @field_validator("collections")
    @classmethod
    def validate_collections(cls, v):
        return _collection_ids(v) if v is not None else None


class CreateProductDTO(ProductFields):
    """Body of ``POST /api/admin/products``. ``price`` is in currency units."""

    title: str = Field(default="", validate_default=True)
    price: Amount = Field(default=None, validate_default=True)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required.")
        if not slugify(v):
            raise ValueError("Invalid title.")
        return v

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        cents = parse_money_to_cents(v)
        if cents is None:
            raise ValueError("Invalid price.")
        return cents

    def model_fields_for_create(self) -> dict:
        return {
            "title": self.title,
            "description_html": self.description,
            "price_cents": self.price,
            "compare_at_cents": self.compare_at,
            "weight_kg": self.weight_kg,
            "active": True if self.active is None else self.active,
            "in_stock": True if self.in_stock is None else self.in_stock,
        }


class UpdateProductDTO(ProductFields):
    """Body of ``PATCH /api/admin/products/<id>``; only sent fields change."""

    title: str | None = None
    slug: str | None = None
    price: Amount = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Title is required.")
        return v.strip() if v is not None else None

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v):
        if v is None:
            return None
        slug = slugify(v)
        if not slug:
            raise ValueError("Invalid slug.")
        return slug

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        cents = parse_money_to_cents(v)
        if cents is None:
            raise ValueError("Invalid price.")
        return cents

    def changes(self) -> dict:
        columns = {
            "title": "title",
            "slug": "slug",
            "description": "description_html",
            "price": "price_cents",
            "compare_at": "compare_at_cents",
            "weight_kg": "weight_kg",
            "active": "active",
            "in_stock": "in_stock",
        }
        required = {"title", "slug", "price_cents", "active", "in_stock"}
        changes = {}
        for name in self.model_fields_set & columns.keys():
            value = getattr(self, name)
            if value is None and columns[name] in required:
                continue
            changes[columns[name]] = value
        return changes


class CollectionDTO(BaseModel):
    """Body of collection create (all required rules) and patch (partial)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str | None = None
    slug: str | None = None
    description: str | None = None
    image_url: str | None = None
    listing_active: StrictBool | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Title is required.")
        return v.strip() if v is not None else None

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v):
        if v is None or not v.strip():
            return None
        slug = slugify(v)
        if not slug:
            raise ValueError("Invalid slug.")
        return slug

    @field_validator("description", "image_url")
    @classmethod
    def blank_to_none(cls, v):
        return (v or "").strip() or None

    def changes(self) -> dict:
        return {name: getattr(self, name) for name in self.model_fields_set}
