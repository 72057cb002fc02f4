"""
Category Mapper - single source of truth for department grouping.

Every free-text domain (from Gemini or the keyword fallback) resolves to
exactly one of eight fixed categories. Dashboards group on these values only.
"""

from enum import Enum
from typing import Dict, List, Tuple


class Category(str, Enum):
    """The eight departmental categories."""
    ROADS_TRANSPORT = "Roads & Transport"
    WATER_DRAINAGE = "Water & Drainage"
    SANITATION_WASTE = "Sanitation & Waste"
    ELECTRICITY_LIGHTING = "Electricity & Lighting"
    PUBLIC_SAFETY = "Public Safety"
    BUILDINGS_INFRASTRUCTURE = "Buildings & Infrastructure"
    ENVIRONMENT_POLLUTION = "Environment & Pollution"
    MISCELLANEOUS = "Miscellaneous"


# Ordered rules: first category with a keyword contained in the domain wins.
# Order matters for compound domains, e.g. "Waste Management & Public Health"
# must land in sanitation and "Infrastructure & Road Safety" in roads.
CATEGORY_RULES: List[Tuple[Category, Tuple[str, ...]]] = [
    (Category.SANITATION_WASTE, ("waste", "garbage", "trash", "sanitation", "litter", "dump")),
    (Category.WATER_DRAINAGE, ("water", "plumb", "drain", "sewer", "pipe", "flood", "leak")),
    (Category.ELECTRICITY_LIGHTING, ("electric", "light", "power", "utilit", "outlet", "wiring")),
    (Category.PUBLIC_SAFETY, ("child safety", "public safety", "security", "crime", "fire", "hazard", "emergency")),
    (Category.ROADS_TRANSPORT, ("road", "traffic", "transport", "pothole", "pavement", "street", "signal", "parking", "sidewalk")),
    (Category.BUILDINGS_INFRASTRUCTURE, ("building", "infrastructure", "construction", "bridge", "structur")),
    (Category.ENVIRONMENT_POLLUTION, ("pollution", "environment", "park", "noise", "smoke", "air quality", "vegetation", "fallen tree")),
]

# Domains emitted by the fallback classifier, pinned so they never drift with rule edits.
KNOWN_DOMAINS: Dict[str, Category] = {
    "plumbing": Category.WATER_DRAINAGE,
    "electrical": Category.ELECTRICITY_LIGHTING,
    "infrastructure & road safety": Category.ROADS_TRANSPORT,
    "traffic management": Category.ROADS_TRANSPORT,
    "waste management": Category.SANITATION_WASTE,
    "general maintenance": Category.MISCELLANEOUS,
}


def map_domain_to_category(domain: str) -> Category:
    """
    Map a free-text domain to one of the eight categories.

    Total and deterministic: unknown, empty or non-string input gives MISCELLANEOUS.
    """
    if not isinstance(domain, str):
        return Category.MISCELLANEOUS

    text = domain.strip().lower()
    if not text:
        return Category.MISCELLANEOUS

    if text in KNOWN_DOMAINS:
        return KNOWN_DOMAINS[text]

    for category, keywords in CATEGORY_RULES:
        if any(keyword in text for keyword in keywords):
            return category

    return Category.MISCELLANEOUS


def all_categories() -> List[Category]:
    """All categories in display order."""
    return list(Category)
