"""
Element bookkeeping for the value frameworks.

``tally_elements`` walks the fixed taxonomy and looks each element up in
whatever JSON the model returned, so the totals always come from the
taxonomy and never from the model: present + missing == total for every
response, including empty or malformed ones.

``keyword_baseline`` is a deterministic keyword-count score over the same
taxonomy, reported next to the model verdicts.
"""

import re
from typing import Any, Dict, List, Optional

from analyzer.taxonomy import iter_elements, load_framework

STRONG_THRESHOLD = 70
WEAK_THRESHOLD = 30
PRESENT_SCORE = 5
PRESENT_STATUSES = {"present", "strong", "yes", "true", "partial", "moderate"}
PRIMARY_MIN = 0.8
SECONDARY_MIN = 0.5


def percentage(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return int(part * 100 / whole + 0.5)


def _normalize(name: str) -> str:
    return re.sub(r"[\s\-]+", "_", str(name).strip().lower())


def find_verdict(data: Any, name: str) -> Optional[Any]:
    """
    Depth-first search for the model's verdict on ``name``.

    Matches a dict key equal to the element name, or a list entry whose
    ``name`` / ``element`` / ``theme`` field equals it.
    """
    target = _normalize(name)

    if isinstance(data, dict):
        for key, value in data.items():
            if _normalize(key) == target:
                return value
        for value in data.values():
            found = find_verdict(value, name)
            if found is not None:
                return found
    elif isinstance(data, list):
        for item in data:
            if isinstance(item, dict):
                label = item.get("name") or item.get("element") or item.get("element_name") or item.get("theme")
                if label is not None and _normalize(label) == target:
                    return item
            found = find_verdict(item, name)
            if found is not None:
                return found
    return None


def as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        match = re.match(r"^\s*(\d+(?:\.\d+)?)", value)
        if match:
            return float(match.group(1))
    return None


def is_present(verdict: Any) -> bool:
    """Interpret a single element verdict; anything unrecognised counts as absent."""
    if verdict is None:
        return False
    if isinstance(verdict, bool):
        return verdict
    if isinstance(verdict, str):
        return _normalize(verdict) in PRESENT_STATUSES
    if isinstance(verdict, dict):
        if "present" in verdict:
            return is_present(verdict["present"])
        if "status" in verdict:
            return is_present(verdict["status"])
        score = as_number(verdict.get("score"))
        return score is not None and score >= PRESENT_SCORE
    score = as_number(verdict)
    return score is not None and score >= PRESENT_SCORE


def _evidence(verdict: Any) -> str:
    if isinstance(verdict, dict):
        evidence = verdict.get("evidence", "")
        if isinstance(evidence, list):
            return " | ".join(str(e) for e in evidence if e)
        return str(evidence or "")
    return ""


def _summarize(categories: Dict[str, dict]) -> dict:
    return {
        "strong_categories": [c for c, v in categories.items() if v["percentage"] >= STRONG_THRESHOLD],
        "weak_categories": [c for c, v in categories.items() if v["percentage"] < WEAK_THRESHOLD],
        "missing_categories": [c for c, v in categories.items() if v["present"] == 0],
    }


def tally_elements(framework: str, model_output: Any) -> dict:
    """Count present / missing elements of ``framework`` in the model's reply."""
    elements: List[dict] = []
    categories: Dict[str, dict] = {}

    for element in iter_elements(framework):
        verdict = find_verdict(model_output, element.name)
        present = is_present(verdict)
        elements.append({
            "name": element.name,
            "category": element.category,
            "subcategory": element.subcategory,
            "present": present,
            "assessed": verdict is not None,
            "score": as_number(verdict.get("score")) if isinstance(verdict, dict) else None,
            "evidence": _evidence(verdict) if present else "",
        })

        category = categories.setdefault(
            element.category, {"total": 0, "present": 0, "subcategories": {}}
        )
        sub = category["subcategories"].setdefault(element.subcategory, {"total": 0, "present": 0})
        category["total"] += 1
        sub["total"] += 1
        if present:
            category["present"] += 1
            sub["present"] += 1

    for category in categories.values():
        category["percentage"] = percentage(category["present"], category["total"])
        for sub in category["subcategories"].values():
            sub["percentage"] = percentage(sub["present"], sub["total"])

    total = len(elements)
    present_count = sum(1 for e in elements if e["present"])
    return {
        "total_elements": total,
        "present_elements": present_count,
        "missing_elements": total - present_count,
        "overall_percentage": percentage(present_count, total),
        "categories": categories,
        "elements": elements,
        "present": [e["name"] for e in elements if e["present"]],
        "missing": [e["name"] for e in elements if not e["present"]],
        "unassessed": [e["name"] for e in elements if not e["assessed"]],
        "summary": _summarize(categories),
    }


def keyword_baseline(framework: str, text: str) -> dict:
    """Keyword-count presence for every element of ``framework``."""
    lowered = text.lower()
    sentences = [s.strip() for s in re.split(r"[.!?]+", text) if s.strip()]
    categories: Dict[str, dict] = {}
    present_names = []

    for element in iter_elements(framework):
        keywords = [k.lower() for k in element.keywords]
        present = any(k in lowered for k in keywords)
        category = categories.setdefault(element.category, {"total": 0, "present": 0, "evidence": {}})
        category["total"] += 1
        if present:
            category["present"] += 1
            present_names.append(element.name)
            matching = [s for s in sentences if any(k in s.lower() for k in keywords)]
            category["evidence"][element.name] = ". ".join(matching[:2])

    for category in categories.values():
        category["percentage"] = percentage(category["present"], category["total"])

    total = sum(c["total"] for c in categories.values())
    return {
        "method": "keyword_count",
        "total_elements": total,
        "present_elements": len(present_names),
        "overall_percentage": percentage(len(present_names), total),
        "present": present_names,
        "categories": categories,
        "summary": _summarize(categories),
    }


def tally_themes(model_output: Any) -> dict:
    """CliftonStrengths: per-theme 0-100 scores rolled up into domains."""
    themes = []
    domains: Dict[str, List[float]] = {}

    for element in iter_elements("clifton_strengths"):
        verdict = find_verdict(model_output, element.name)
        raw = verdict.get("score") if isinstance(verdict, dict) else verdict
        score = as_number(raw)
        score = max(0.0, min(100.0, score)) if score is not None else None
        themes.append({
            "name": element.name,
            "domain": element.category,
            "score": score,
            "assessed": score is not None,
            "evidence": _evidence(verdict),
        })
        domains.setdefault(element.category, [])
        if score is not None:
            domains[element.category].append(score)

    domain_scores = {
        name: (int(sum(scores) / len(scores) + 0.5) if scores else None)
        for name, scores in domains.items()
    }
    scored = [t for t in themes if t["score"]]
    scored.sort(key=lambda t: t["score"], reverse=True)
    ranked_domains = [d for d, s in domain_scores.items() if s is not None]

    return {
        "total_themes": len(themes),
        "assessed_themes": sum(1 for t in themes if t["assessed"]),
        "themes": themes,
        "domain_scores": domain_scores,
        "dominant_domain": max(ranked_domains, key=lambda d: domain_scores[d]) if ranked_domains else None,
        "top_themes": [t["name"] for t in scored[:5]],
    }


def archetype_band(score: float) -> str:
    for band in load_framework("brand_archetypes")["bands"]:
        if score >= band["min"]:
            return band["name"]
    return "weak"


def tally_archetypes(model_output: Any) -> dict:
    """
    Brand archetypes: twelve 0.0-1.0 scores with equal weight.

    The overall score is the mean of the scored archetypes, the primary
    archetype the highest scorer and the secondary ones those between
    SECONDARY_MIN and PRIMARY_MIN. Scores given on a 0-100 scale are
    rescaled.
    """
    archetypes = []
    groups: Dict[str, List[float]] = {}

    for element in iter_elements("brand_archetypes"):
        verdict = find_verdict(model_output, element.name)
        if verdict is None:
            verdict = find_verdict(model_output, f"the {element.name}")
        raw = verdict.get("score") if isinstance(verdict, dict) else verdict
        score = as_number(raw)
        if score is not None:
            if score > 1:
                score = score / 100
            score = round(max(0.0, min(1.0, score)), 2)
        archetypes.append({
            "name": element.name,
            "group": element.category,
            "score": score,
            "band": archetype_band(score) if score is not None else None,
            "assessed": score is not None,
            "evidence": _evidence(verdict),
        })
        groups.setdefault(element.category, [])
        if score is not None:
            groups[element.category].append(score)

    scored = sorted((a for a in archetypes if a["assessed"]), key=lambda a: a["score"], reverse=True)
    primary = scored[0] if scored else None
    secondary = [
        a["name"] for a in scored[1:]
        if SECONDARY_MIN <= a["score"] < PRIMARY_MIN
    ]
    group_scores = {
        name: (round(sum(scores) / len(scores), 2) if scores else None)
        for name, scores in groups.items()
    }

    return {
        "total_archetypes": len(archetypes),
        "assessed_archetypes": len(scored),
        "archetypes": archetypes,
        "group_scores": group_scores,
        "overall_score": round(sum(a["score"] for a in scored) / len(scored), 2) if scored else None,
        "primary_archetype": primary["name"] if primary else None,
        "primary_score": primary["score"] if primary else None,
        "secondary_archetypes": secondary,
        "dominant_group": primary["group"] if primary else None,
    }
