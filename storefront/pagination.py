"""
Pagination helpers for list responses from the shop API.

The API answers list endpoints in three shapes: a bare list, a
resource collection ({"data": [...], "meta": {...}, "links": {...}}),
or a flat paginator ({"data": [...], "current_page": 1, ...}).
"""
import math
from dataclasses import dataclass, asdict
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

META_FIELDS = ("current_page", "last_page", "per_page", "total", "from", "to")


class PaginationMeta(BaseModel):
    """Paginator metadata (all fields optional)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    current_page: Optional[int] = None
    last_page: Optional[int] = None
    per_page: Optional[int] = None
    total: Optional[int] = None
    from_: Optional[int] = None
    to: Optional[int] = None

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "PaginationMeta":
        values = {key: _as_int(data.get(key)) for key in META_FIELDS}
        values["from_"] = values.pop("from")
        return cls(**values)

    def to_dict(self) -> dict[str, Optional[int]]:
        return {
            "current_page": self.current_page,
            "last_page": self.last_page,
            "per_page": self.per_page,
            "total": self.total,
            "from": self.from_,
            "to": self.to,
        }


@dataclass
class NormalizedPagination:
    items: list
    meta: Optional[PaginationMeta] = None
    links: Optional[dict[str, Any]] = None


@dataclass
class PaginationSummary:
    current_page: int
    last_page: int
    per_page: int
    total: int
    from_: int
    to: int
    has_results: bool
    has_multiple_pages: bool

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["from"] = data.pop("from_")
        return data


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def normalize_paginated_response(payload: Any) -> NormalizedPagination:
    """Reduce any list response shape to items, meta and links."""
    if not payload:
        return NormalizedPagination(items=[])

    if isinstance(payload, list):
        return NormalizedPagination(items=list(payload))

    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        links = payload.get("links") or None
        if isinstance(payload.get("meta"), dict):
            return NormalizedPagination(
                items=payload["data"],
                meta=PaginationMeta.from_mapping(payload["meta"]),
                links=links,
            )

        # Flat paginator: meta fields sit next to data
        has_legacy_meta = any(payload.get(key) is not None for key in META_FIELDS)
        return NormalizedPagination(
            items=payload["data"],
            meta=PaginationMeta.from_mapping(payload) if has_legacy_meta else None,
            links=links,
        )

    return NormalizedPagination(items=[])


def summarize_pagination(
    meta: Optional[PaginationMeta] = None,
    fallback_count: int = 0,
    page_size: Optional[int] = None,
) -> PaginationSummary:
    """
    Fill in a complete, clamped page summary from partial metadata.

    Args:
        meta: Paginator metadata, if the API sent any
        fallback_count: Number of items actually received
        page_size: Requested page size, used when meta has none
    """
    meta = meta or PaginationMeta()
    fallback_count = max(fallback_count or 0, 0)
    fallback_page_size = page_size if page_size is not None else fallback_count

    current_page = max(meta.current_page or 1, 1)
    per_page = max(meta.per_page if meta.per_page is not None else fallback_page_size or 0, 1)

    if meta.total is not None:
        total_candidate = meta.total
    elif meta.last_page:
        total_candidate = meta.last_page * per_page
    else:
        total_candidate = fallback_count
    total = max(total_candidate or 0, 0)
    has_results = total > 0

    if has_results:
        computed_from = meta.from_ if meta.from_ is not None else (current_page - 1) * per_page + 1
    else:
        computed_from = 0

    if meta.to and meta.from_:
        count_for_range = meta.to - meta.from_ + 1
    else:
        count_for_range = fallback_count or per_page
    computed_to = computed_from + max(count_for_range - 1, 0) if has_results else 0
    to = min(meta.to if meta.to is not None else computed_to, total) if has_results else 0

    if meta.last_page is not None:
        last_page_candidate = meta.last_page
    else:
        last_page_candidate = math.ceil(max(total, 1) / per_page)
    last_page = max(last_page_candidate, 1)

    return PaginationSummary(
        current_page=current_page,
        last_page=last_page,
        per_page=per_page,
        total=total,
        from_=computed_from,
        to=to,
        has_results=has_results,
        has_multiple_pages=last_page > 1,
    )


def paginated_response(payload: Any, page_size: Optional[int] = None) -> dict[str, Any]:
    """Normalized list response with a filled-in summary, ready to return as JSON."""
    normalized = normalize_paginated_response(payload)
    summary = summarize_pagination(
        normalized.meta,
        fallback_count=len(normalized.items),
        page_size=page_size,
    )
    return {
        "items": normalized.items,
        "meta": normalized.meta.to_dict() if normalized.meta else None,
        "links": normalized.links,
        "pagination": summary.to_dict(),
    }
