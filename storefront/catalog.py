"""Catalog filter options for the storefront and admin product forms."""
from typing import Optional, TypedDict


class CatalogOption(TypedDict):
    id: str
    label: str


ALL_OPTION_ID = "all"

CATEGORY_OPTIONS: list[CatalogOption] = [
    {"id": "flagship", "label": "Flagship"},
    {"id": "foldables", "label": "Foldable"},
    {"id": "midrange", "label": "Mid-range"},
    {"id": "budget", "label": "Budget"},
]

BRAND_OPTIONS: list[CatalogOption] = [
    {"id": "apple", "label": "Apple"},
    {"id": "samsung", "label": "Samsung"},
    {"id": "pixel", "label": "Pixel"},
    {"id": "oneplus", "label": "OnePlus"},
    {"id": "xiaomi", "label": "Xiaomi"},
    {"id": "sony", "label": "Sony"},
    {"id": "honor", "label": "Honor"},
]


def _prepend_all(options: list[CatalogOption], label: str = "All") -> list[CatalogOption]:
    return [{"id": ALL_OPTION_ID, "label": label}, *options]


CATEGORY_FILTER_OPTIONS = _prepend_all(CATEGORY_OPTIONS)
BRAND_FILTER_OPTIONS = _prepend_all(BRAND_OPTIONS)

BRAND_PRESET_LABELS = [option["label"] for option in BRAND_OPTIONS]


def normalize_filter(value: Optional[str]) -> Optional[str]:
    """Filter value to forward upstream; "all" and blanks mean no filter."""
    if value is None:
        return None
    value = value.strip()
    if not value or value.lower() == ALL_OPTION_ID:
        return None
    return value
