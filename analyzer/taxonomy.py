"""
Static framework reference data.

The JSON files under ``analyzer/data`` describe each framework's elements
(name, description, example keywords). They are descriptive text for the
prompts and the fixed taxonomy the element bookkeeping walks.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterator, List, NamedTuple

from core.errors import FrameworkLoadError

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"

FRAMEWORKS = (
    "golden_circle",
    "b2c_elements",
    "b2b_elements",
    "clifton_strengths",
    "revenue_trends",
    "brand_archetypes",
)

ELEMENT_FRAMEWORKS = ("b2c_elements", "b2b_elements", "clifton_strengths", "brand_archetypes")


class Element(NamedTuple):
    name: str
    category: str
    subcategory: str
    description: str
    keywords: List[str]


@lru_cache(maxsize=None)
def load_framework(name: str) -> dict:
    """Load and sanity-check one framework file."""
    if name not in FRAMEWORKS:
        raise FrameworkLoadError(f"Unknown framework: {name}")

    path = DATA_DIR / f"{name}.json"
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise FrameworkLoadError(f"Could not load {path.name}: {str(e)}")

    if name in ELEMENT_FRAMEWORKS:
        count = sum(1 for _ in _walk(data))
        if count != data.get("total_elements"):
            raise FrameworkLoadError(
                f"{path.name} declares {data.get('total_elements')} elements but lists {count}"
            )
    return data


def _walk(data: dict) -> Iterator[Element]:
    for category in data.get("categories", []):
        for subcategory in category.get("subcategories", []):
            for element in subcategory.get("elements", []):
                yield Element(
                    name=element["name"],
                    category=category["name"],
                    subcategory=subcategory["name"],
                    description=element.get("description", ""),
                    keywords=list(element.get("keywords", [])),
                )


def iter_elements(name: str) -> List[Element]:
    return list(_walk(load_framework(name)))


def category_totals(name: str) -> Dict[str, int]:
    totals: Dict[str, int] = {}
    for element in iter_elements(name):
        totals[element.category] = totals.get(element.category, 0) + 1
    return totals


def subcategory_totals(name: str) -> Dict[str, Dict[str, int]]:
    totals: Dict[str, Dict[str, int]] = {}
    for element in iter_elements(name):
        sub = totals.setdefault(element.category, {})
        sub[element.subcategory] = sub.get(element.subcategory, 0) + 1
    return totals


def reference_text(name: str) -> str:
    """Framework reference table for embedding in a prompt (keywords dropped)."""
    data = load_framework(name)
    if name not in ELEMENT_FRAMEWORKS:
        return json.dumps(data, indent=2)

    lines = [f"{data['title']}: {data['description']}"]
    for category in data["categories"]:
        lines.append(f"\n{category['title'].upper()}")
        for subcategory in category["subcategories"]:
            if subcategory["name"] != category["name"]:
                lines.append(f"  {subcategory['name'].replace('_', ' ').title()}:")
            for element in subcategory["elements"]:
                lines.append(f"    - {element['name']}: {element['description']}")
    return "\n".join(lines)
