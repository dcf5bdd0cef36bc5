"""
modules/scheduling/themes.py
----------------------------
Day-theme classification from Google-Places-style type tags, and theme
detection in free-text requests ("plan me a museum day").

Theme keys: shopping | museums | sights | food | nightlife | nature | mixed
"""

from __future__ import annotations

import re
from typing import Iterable

THEME_KEYS: tuple[str, ...] = ("shopping", "sights", "museums", "food", "nightlife", "nature", "mixed")

# Priority used when one activity matches several themes.
_PRIORITY: tuple[str, ...] = ("shopping", "museums", "sights", "food", "nightlife", "nature")

FOOD_TYPES: frozenset[str] = frozenset({
    "restaurant", "cafe", "bakery", "food", "meal_takeaway", "meal_delivery",
    "coffee_shop", "ice_cream_shop", "dessert_shop", "brunch_restaurant",
    "breakfast_restaurant", "fast_food_restaurant", "pizza_restaurant",
    "seafood_restaurant", "steak_house", "sushi_restaurant", "vegan_restaurant",
    "vegetarian_restaurant", "food_court", "wine_bar",
})
SHOPPING_TYPES: frozenset[str] = frozenset({
    "shopping_mall", "store", "clothing_store", "department_store", "book_store",
    "jewelry_store", "shoe_store", "gift_shop", "market", "supermarket",
    "electronics_store", "furniture_store", "home_goods_store",
})
MUSEUM_TYPES: frozenset[str] = frozenset({"museum", "art_gallery"})
NIGHTLIFE_TYPES: frozenset[str] = frozenset({"night_club", "casino", "bar"})
NATURE_TYPES: frozenset[str] = frozenset({
    "national_park", "park", "hiking_area", "beach", "natural_feature",
    "campground", "zoo", "aquarium",
})
SIGHTS_TYPES: frozenset[str] = frozenset({
    "tourist_attraction", "historical_landmark", "monument", "church",
    "hindu_temple", "mosque", "synagogue", "place_of_worship", "cultural_center",
    "historical_place", "landmark", "city_hall", "performing_arts_theater",
})

_MESSAGE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("shopping",  re.compile(r"\b(shopping|shops?|malls?|boutiques?|markets?)\b")),
    ("museums",   re.compile(r"\b(museums?|galler(y|ies)|exhibits?)\b")),
    ("sights",    re.compile(r"\b(sights?|landmarks?|attractions?|historic|tours?)\b")),
    ("food",      re.compile(r"\b(food|eat|restaurants?|cafes?|coffee|dinner|lunch|breakfast)\b")),
    ("nightlife", re.compile(r"\b(nightlife|bars?|clubs?|party|drinks?)\b")),
    ("nature",    re.compile(r"\b(nature|hike|hiking|parks?|beach(es)?|outdoors?)\b")),
)


def _unique_types(types: Iterable[str] | None) -> list[str]:
    seen: list[str] = []
    for t in types or ():
        norm = str(t or "").strip().lower()
        if norm and norm not in seen:
            seen.append(norm)
    return seen


def classify_themes_from_types(types: Iterable[str] | None) -> list[str]:
    """All themes matched by *types*, in canonical priority order."""
    tags = _unique_types(types)
    if not tags:
        return []

    def has(group: frozenset[str]) -> bool:
        return any(t in group for t in tags)

    matched = {
        "shopping":  has(SHOPPING_TYPES),
        "museums":   has(MUSEUM_TYPES),
        "sights":    has(SIGHTS_TYPES),
        "food":      has(FOOD_TYPES),
        "nightlife": has(NIGHTLIFE_TYPES),
        "nature":    has(NATURE_TYPES),
    }
    return [key for key in _PRIORITY if matched[key]]


def primary_theme_from_types(types: Iterable[str] | None) -> str | None:
    """Highest-priority theme for *types*, or None when nothing matches."""
    themes = classify_themes_from_types(types)
    return themes[0] if themes else None


def infer_day_theme_from_message(message: str | None) -> str | None:
    """
    Theme requested in free text.  One hit → that theme; several → "mixed";
    none → None.
    """
    text = str(message or "").lower()
    if not text.strip():
        return None
    hits = [key for key, pattern in _MESSAGE_PATTERNS if pattern.search(text)]
    if not hits:
        return None
    if len(hits) == 1:
        return hits[0]
    return "mixed"
