"""Slug generation backed by the database unique constraint.

The insert runs inside a savepoint; on a slug conflict it is retried once
with a random 4-hex suffix. There is no pre-check query, so two concurrent
requests for the same title cannot both pass a check and then collide.
"""

import logging
import re
import secrets

from django.db import IntegrityError, transaction

from apps.common.errors import InvalidInput

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


class InvalidSlug(InvalidInput):
    default_message = "Invalid title."


class SlugTaken(InvalidInput):
    default_message = "Slug already exists."


def slugify(value: str | None) -> str:
    """Lower-case ASCII slug: ``"Vase Bleu #2"`` -> ``"vase-bleu-2"``."""
    return _NON_ALNUM.sub("-", (value or "").strip().lower()).strip("-")


def with_suffix(base_slug: str) -> str:
    return f"{base_slug}-{secrets.token_hex(2)}"


def create_with_unique_slug(model, base_slug: str, **fields):
    """Insert ``model(slug=base_slug, **fields)``, retrying once on conflict.

    Raises:
        InvalidSlug: If ``base_slug`` is empty.
        SlugTaken: If the retried slug collides as well.
    """
    if not base_slug:
        raise InvalidSlug()
    for slug in (base_slug, with_suffix(base_slug)):
        try:
            with transaction.atomic():
                return model.objects.create(slug=slug, **fields)
        except IntegrityError:
            logger.info("slug conflict", extra={"model": model.__name__, "slug": slug})
    raise SlugTaken()


def save_with_slug(row, update_fields: list[str] | None = None):
    """Save ``row`` after an explicit slug change; a conflict is a 400."""
    try:
        with transaction.atomic():
            row.save(update_fields=update_fields)
    except IntegrityError:
        raise SlugTaken()
    return row
