# src/sdsgen/pipeline/discovery.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import cast

from sdsgen.data.spec_types import ModuleOutline, module_key
from sdsgen.errors import (
    AIProviderError,
    ModuleGenerationError,
    NetworkError,
    ParsingError,
    ValidationError,
)
from sdsgen.llm.invoker import CompletionClient
from sdsgen.llm.prompts import ModuleListPrompt
from sdsgen.utils.llm_text_utils import extract_json
from .heuristics import detect_language, resolve_module_count

logger = logging.getLogger(__name__)


def _parse_module_array(text: str) -> list[object]:
    return cast(list, extract_json(text, "array"))


def normalize_outlines(items: list[object], *, limit: int | None = None) -> list[ModuleOutline]:
    """Turns a parsed array into outlines.

    Accepts {"name", "description"} objects or bare strings. Entries without a
    name are skipped; a repeated name (case-insensitive) keeps its first
    occurrence.
    """
    out: list[ModuleOutline] = []
    seen: set[str] = set()
    for item in items:
        if isinstance(item, str):
            name, description = item.strip(), ""
        elif isinstance(item, Mapping):
            raw_name = item.get("name")
            raw_desc = item.get("description")
            name = raw_name.strip() if isinstance(raw_name, str) else ""
            description = raw_desc.strip() if isinstance(raw_desc, str) else ""
        else:
            continue
        if not name:
            continue
        key = module_key(name)
        if key in seen:
            logger.warning("Dropping duplicate module name from discovery: %s", name)
            continue
        seen.add(key)
        out.append(ModuleOutline(name=name, description=description))
        if limit is not None and len(out) >= limit:
            break
    return out


class ModuleDiscovery:
    """Obtains the flat module list for a project description with one model call."""

    task_type = "module-generation"

    def __init__(self, *, llm: CompletionClient) -> None:
        self.llm = llm
        self.prompt = ModuleListPrompt()

    async def discover(
        self,
        description: str,
        complexity: str = "auto",
        *,
        advanced_features: bool = True,
    ) -> list[ModuleOutline]:
        """Returns up to the resolved module count of unique outlines.

        Raises:
            ConfigurationError: Unsupported complexity or no provider credentials (propagated as-is).
            ModuleGenerationError: The call or the parsing failed, or no usable module came back.
        """
        count = resolve_module_count(complexity, description)
        language = detect_language(description)
        prompt = self.prompt.build(
            language=language,
            inputs={
                "description": description,
                "complexity": complexity,
                "module_count": count,
                "advanced_features": advanced_features,
            },
        )

        try:
            items = await self.llm.complete(prompt, task_type=self.task_type, parse=_parse_module_array)
        except (AIProviderError, NetworkError, ParsingError, ValidationError) as e:
            raise ModuleGenerationError(f"Module structure generation failed: {e}", cause=e) from e

        outlines = normalize_outlines(list(items), limit=count)
        if not outlines:
            cause = ValidationError("Model returned no usable module names", field="modules")
            raise ModuleGenerationError(f"Module structure generation failed: {cause}", cause=cause)

        logger.info("Discovered %d modules (target %d, language %s)", len(outlines), count, language)
        return outlines
