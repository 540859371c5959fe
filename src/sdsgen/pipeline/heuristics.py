# src/sdsgen/pipeline/heuristics.py
from __future__ import annotations

import re

from sdsgen.core.types import Language
from sdsgen.errors import ConfigurationError

MIN_MODULES = 4
MAX_MODULES = 15
BASE_SCORE = 5

EXPLICIT_MODULE_COUNTS: dict[str, int] = {
    "simple": 4,
    "medium": 8,
    "complex": 12,
}

HIGH_COMPLEXITY_KEYWORDS: tuple[str, ...] = (
    "authentication",
    "security",
    "payment",
    "analytics",
    "real-time",
    "notification",
    "api integration",
    "machine learning",
    "ai",
    "blockchain",
)
MEDIUM_COMPLEXITY_KEYWORDS: tuple[str, ...] = (
    "user management",
    "database",
    "search",
    "admin panel",
    "dashboard",
    "reporting",
    "file upload",
    "email",
)
LOW_COMPLEXITY_KEYWORDS: tuple[str, ...] = ("crud", "basic", "simple", "minimal")

MOBILE_TERMS: tuple[str, ...] = ("mobile", "ios", "android")

_HANGUL = re.compile(r"[가-힣]")

_PLATFORM_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("mobile", ("모바일", "mobile", "앱", "app")),
    ("web", ("웹", "web")),
)

_MAIN_FEATURES: dict[str, str] = {
    "mobile": "Mobile UI, Touch Interface",
    "web": "Web Interface, Browser Compatibility",
    "desktop": "Desktop UI, System Integration",
    "api": "REST API, Data Processing",
    "backend": "REST API, Data Processing",
    "embedded": "Firmware, Hardware Integration",
}


def detect_language(text: str) -> Language:
    """Any Hangul syllable means Korean; everything else is English."""
    return "ko" if _HANGUL.search(text or "") else "en"


def detect_platform(description: str) -> str:
    text = (description or "").lower()
    for platform, keywords in _PLATFORM_KEYWORDS:
        if any(k in text for k in keywords):
            return platform
    return "web"


def main_features(platform: str) -> str:
    return _MAIN_FEATURES.get(platform, "General Purpose")


def infer_module_count(description: str) -> int:
    """Estimates how many modules a project needs from its description.

    Keywords are matched as substrings of the lowercased text, once per
    keyword. The result is always within [MIN_MODULES, MAX_MODULES].
    """
    text = (description or "").lower()
    score = BASE_SCORE

    score += 2 * sum(1 for k in HIGH_COMPLEXITY_KEYWORDS if k in text)
    score += sum(1 for k in MEDIUM_COMPLEXITY_KEYWORDS if k in text)
    score -= sum(1 for k in LOW_COMPLEXITY_KEYWORDS if k in text)

    word_count = len(text.split())
    if word_count > 100:
        score += 2
    elif word_count > 50:
        score += 1
    elif word_count < 20:
        score -= 1

    if any(t in text for t in MOBILE_TERMS):
        score += 1
    if "web" in text and "backend" in text:
        score += 2
    if "microservices" in text or "distributed" in text:
        score += 3

    return max(MIN_MODULES, min(MAX_MODULES, score))


def resolve_module_count(complexity: str, description: str = "") -> int:
    """Maps a complexity level to a target module count; `auto` uses the heuristic."""
    level = (complexity or "auto").strip().lower()
    if level == "auto":
        return infer_module_count(description)
    if level not in EXPLICIT_MODULE_COUNTS:
        supported = ", ".join([*EXPLICIT_MODULE_COUNTS, "auto"])
        raise ConfigurationError(f"Unsupported complexity level: {complexity!r}. Supported: {supported}")
    return EXPLICIT_MODULE_COUNTS[level]
