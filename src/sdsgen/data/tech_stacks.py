# src/sdsgen/data/tech_stacks.py
from __future__ import annotations

import copy
from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources

import yaml  # PyYAML

from sdsgen.errors import ConfigurationError

TechStack = dict[str, object]


@dataclass(frozen=True)
class TechStackCatalog:
    """Static catalog of tech-stack records keyed by platform."""

    platforms: dict[str, list[TechStack]]
    aliases: dict[str, str]

    def canonical(self, platform: str) -> str:
        p = (platform or "").strip().lower()
        return self.aliases.get(p, p)

    def platform_names(self) -> list[str]:
        return list(self.platforms.keys())

    def stacks_for(self, platform: str) -> list[TechStack]:
        """Returns deep copies so callers can never mutate the catalog."""
        key = self.canonical(platform)
        stacks = self.platforms.get(key)
        if not stacks:
            supported = ", ".join([*self.platforms.keys(), *self.aliases.keys()])
            raise ConfigurationError(f"Unsupported platform: {platform!r}. Supported: {supported}")
        return copy.deepcopy(stacks)

    def default_stack(self, platform: str) -> TechStack:
        return self.stacks_for(platform)[0]

    def find_stack(self, platform: str, stack_id: int) -> TechStack | None:
        for s in self.stacks_for(platform):
            if s.get("id") == stack_id:
                return s
        return None

    def filter_by_preferences(self, platform: str, preferences: Sequence[str]) -> list[TechStack]:
        """Keeps stacks whose name or language contains any preference (case-insensitive).

        Falls back to all stacks of the platform when nothing matches.
        """
        stacks = self.stacks_for(platform)
        prefs = [p.strip().lower() for p in preferences if p and p.strip()]
        if not prefs:
            return stacks

        def _hit(stack: TechStack) -> bool:
            name = str(stack.get("name") or "").lower()
            inner = stack.get("stack")
            language = str(inner.get("language") or "").lower() if isinstance(inner, dict) else ""
            return any(p in name or p in language for p in prefs)

        matched = [s for s in stacks if _hit(s)]
        return matched or stacks


def _parse_catalog(raw: object) -> TechStackCatalog:
    root = raw.get("tech_stacks") if isinstance(raw, dict) else None
    if not isinstance(root, dict):
        raise ConfigurationError("tech_stacks.yaml is missing the 'tech_stacks' root key")

    platforms: dict[str, list[TechStack]] = {}
    for name, entries in (root.get("platforms") or {}).items():
        if isinstance(entries, list):
            platforms[str(name).lower()] = [dict(e) for e in entries if isinstance(e, dict)]

    aliases = {str(k).lower(): str(v).lower() for k, v in (root.get("aliases") or {}).items()}
    return TechStackCatalog(platforms=platforms, aliases=aliases)


@lru_cache(maxsize=1)
def load_catalog(package: str = "sdsgen") -> TechStackCatalog:
    """Reads the catalog shipped as package data (works from wheels/zips too)."""
    data = resources.files(package).joinpath("resources/tech_stacks.yaml").read_bytes()
    return _parse_catalog(yaml.safe_load(data.decode("utf-8")))
