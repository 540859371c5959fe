# src/sdsgen/pipeline/assembler.py
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sdsgen.config import Settings
from sdsgen.data.spec_types import Module, Specification, module_key
from sdsgen.data.tech_stacks import TechStackCatalog, load_catalog
from sdsgen.errors import ValidationError
from sdsgen.llm.invoker import CompletionClient
from sdsgen.llm.prompts import ACTION_TYPES, RefinePrompt
from sdsgen.utils.llm_text_utils import extract_json
from .detailer import ModuleDetailer, degrade_to_stubs
from .discovery import ModuleDiscovery
from .heuristics import detect_language, detect_platform

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]

_DEFAULT_TITLES = {"en": "Project Specification", "ko": "프로젝트 명세서"}


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """A freshly generated specification plus the platform it was generated for."""

    specification: Specification
    platform: str
    complexity: str
    stub_modules: tuple[str, ...] = ()


def dedupe_modules(modules: Sequence[Module]) -> list[Module]:
    """Keeps the first module of every (case-insensitive) name."""
    seen: set[str] = set()
    out: list[Module] = []
    for m in modules:
        key = module_key(m.name)
        if key in seen:
            logger.warning("Dropping duplicate module %r", m.name)
            continue
        seen.add(key)
        out.append(m)
    return out


def select_subset(spec: Specification, selected_names: object) -> Specification:
    """Returns a copy of `spec` keeping only modules whose name is in `selected_names`.

    Original relative order is preserved and `spec` itself is never modified.

    Raises:
        ValidationError: If selected_names is not a non-empty sequence of strings.
    """
    if (
        not isinstance(selected_names, (list, tuple))
        or not selected_names
        or not all(isinstance(n, str) for n in selected_names)
    ):
        raise ValidationError(
            "Please provide a valid array of selected module names.", field="selected_modules"
        )
    wanted = set(selected_names)
    return spec.with_modules(m for m in spec.modules if m.name in wanted)


class SpecificationAssembler:
    """Runs the generation pipeline and the whole-specification mutations.

    analyze(): platform + stack resolution, module discovery, batched detailing.
    refine(): one model call that returns a whole new specification.
    select_subset(): pure filter, no model call.
    """

    task_type = "specification"

    def __init__(
        self,
        *,
        llm: CompletionClient,
        settings: Settings | None = None,
        catalog: TechStackCatalog | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.llm = llm
        self.settings = settings or Settings()
        self.catalog = catalog or load_catalog()
        self.discovery = ModuleDiscovery(llm=llm)
        self.detailer = ModuleDetailer(
            llm=llm,
            batch_size=self.settings.batch_size,
            batch_delay_s=self.settings.batch_delay_s,
            sleep=sleep,
        )
        self.refine_prompt = RefinePrompt()

    def resolve_platform(self, platform: str | None, description: str) -> str:
        p = (platform or "auto").strip().lower()
        if p == "auto":
            return detect_platform(description)
        # Raises ConfigurationError for platforms missing from the catalog.
        self.catalog.stacks_for(p)
        return self.catalog.canonical(p)

    async def analyze(
        self,
        description: str,
        *,
        platform: str = "auto",
        complexity: str = "auto",
        advanced_features: bool = True,
        tech_stack: Mapping[str, object] | None = None,
    ) -> AnalysisResult:
        if not isinstance(description, str) or not description.strip():
            raise ValidationError("Project description must be a non-empty string", field="project_description")
        description = description.strip()

        resolved_platform = self.resolve_platform(platform, description)
        stack = dict(tech_stack) if tech_stack is not None else self.catalog.default_stack(resolved_platform)
        language = detect_language(description)
        logger.info("Analyzing project (platform=%s, complexity=%s, stack=%s)", resolved_platform, complexity, stack.get("name"))

        outlines = await self.discovery.discover(description, complexity, advanced_features=advanced_features)
        outcomes = await self.detailer.detail_outcomes(
            outlines,
            project_description=description,
            tech_stack=stack,
            language=language,
        )
        stubs = tuple(o.name for o in outcomes if not o.ok)

        spec = Specification(
            title=_DEFAULT_TITLES[language],
            description=description,
            tech_stack=stack,
            requirements=None,
            modules=[],
        )
        # Failed modules stay in the specification as stubs.
        spec = spec.with_modules(dedupe_modules(degrade_to_stubs(outcomes)))

        logger.info(
            "Specification assembled: %d modules, %d functions, %d stubs",
            len(spec.modules),
            spec.function_count,
            len(stubs),
        )
        return AnalysisResult(
            specification=spec,
            platform=resolved_platform,
            complexity=complexity,
            stub_modules=stubs,
        )

    async def refine(
        self,
        spec: Specification,
        instruction: str,
        *,
        action_type: str = "auto",
    ) -> Specification:
        """Asks the model for a modified specification and validates it before accepting.

        The returned object must contain an array-shaped `modules` field;
        otherwise ValidationError is raised and the caller keeps the old spec.
        Missing title/description/techStack/requirements are inherited.
        """
        if not isinstance(instruction, str) or not instruction.strip():
            raise ValidationError("Modification request must be a non-empty string", field="modification_request")
        action = (action_type or "auto").strip().lower()
        if action not in ACTION_TYPES:
            raise ValidationError(f"Unsupported action_type: {action_type!r}", field="action_type")

        prompt = self.refine_prompt.build(
            language=detect_language(instruction),
            inputs={
                "modification_request": instruction.strip(),
                "action_type": action,
                "module_names": spec.module_names,
                "specification": spec.to_dict(),
            },
        )
        parsed = await self.llm.complete(prompt, task_type=self.task_type, parse=lambda t: extract_json(t, "object"))

        if not isinstance(parsed, dict) or not isinstance(parsed.get("modules"), list):
            raise ValidationError("Invalid specification format received from AI modification", field="specification")

        updated = Specification.from_dict(parsed, fallback=spec)
        return updated.with_modules(dedupe_modules(updated.modules))

    def select_subset(self, spec: Specification, selected_names: object) -> Specification:
        return select_subset(spec, selected_names)
