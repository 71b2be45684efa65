from django.conf import settings


def _parse_int(raw, fallback: int) -> int:
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return fallback


def parse_limit_offset(params) -> tuple[int, int]:
    """Read ``limit``/``offset`` query params, clamped to sane bounds.

    Garbage falls back to the defaults instead of failing the request.
    """
    default_size = getattr(settings, "DEFAULT_PAGE_SIZE", 24)
    max_size = getattr(settings, "MAX_PAGE_SIZE", 100)
    limit = _parse_int(params.get("limit"), default_size) if params.get("limit") else default_size
    offset = _parse_int(params.get("offset"), 0) if params.get("offset") else 0
    return min(max(limit, 1), max_size), max(offset, 0)


def page(queryset, params) -> tuple[list, dict]:
    limit, offset = parse_limit_offset(params)
    total = queryset.count()
    rows = list(queryset[offset:offset + limit])
    return rows, {"total": total, "limit": limit, "offset": offset}
