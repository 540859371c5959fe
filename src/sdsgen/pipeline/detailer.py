# src/sdsgen/pipeline/detailer.py
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sdsgen.core.types import Language
from sdsgen.data.spec_types import Module, ModuleOutline
from sdsgen.errors import ValidationError, classify
from sdsgen.llm.invoker import CompletionClient
from sdsgen.llm.prompts import ModuleDetailPrompt
from sdsgen.utils.llm_text_utils import extract_json

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class ModuleOutcome:
    """Result of detailing one module: either a module or the error that prevented it."""

    name: str
    module: Module | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.module is not None


def _parse_module_detail(text: str) -> dict[str, object]:
    value = extract_json(text, "object")
    if not isinstance(value, dict) or not isinstance(value.get("functions"), list):
        raise ValidationError("Module detail response has no 'functions' array", field="functions")
    return value


def degrade_to_stubs(outcomes: Sequence[ModuleOutcome]) -> list[Module]:
    """Replaces every failed outcome with a stub module (same name, no functions)."""
    modules: list[Module] = []
    for o in outcomes:
        if o.module is not None:
            modules.append(o.module)
        else:
            modules.append(Module.stub(o.name))
    return modules


def _as_outline(item: ModuleOutline | str) -> ModuleOutline:
    return item if isinstance(item, ModuleOutline) else ModuleOutline(name=str(item))


class ModuleDetailer:
    """Generates the function list of each module in sequential, concurrent batches.

    Within a batch every call is started before any is awaited, and results
    are placed by submission index. Batches never overlap; between two
    batches the detailer waits `batch_delay_s`. A failing module never fails
    the whole run: it is reported as an outcome carrying its error.
    """

    task_type = "specification"

    def __init__(
        self,
        *,
        llm: CompletionClient,
        batch_size: int = 3,
        batch_delay_s: float = 1.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.llm = llm
        self.batch_size = int(batch_size)
        self.batch_delay_s = float(batch_delay_s)
        self.sleep = sleep
        self.prompt = ModuleDetailPrompt()

    async def _detail_one(
        self,
        outline: ModuleOutline,
        *,
        project_description: str,
        tech_stack: Mapping[str, object] | None,
        language: Language,
    ) -> ModuleOutcome:
        prompt = self.prompt.build(
            language=language,
            inputs={
                "project_description": project_description,
                "module_name": outline.name,
                "module_description": outline.description,
                "tech_stack": dict(tech_stack or {}),
            },
        )
        try:
            raw = await self.llm.complete(prompt, task_type=self.task_type, parse=_parse_module_detail)
            parsed = Module.from_dict(raw)
        except Exception as e:
            logger.warning("Module %r failed (%s): %s", outline.name, classify(e).value, e)
            return ModuleOutcome(name=outline.name, error=e)

        module = Module(
            name=outline.name,
            description=parsed.description or outline.description,
            functions=parsed.functions,
        )
        logger.debug("Module %r: %d functions", outline.name, len(module.functions))
        return ModuleOutcome(name=outline.name, module=module)

    async def detail_outcomes(
        self,
        modules: Sequence[ModuleOutline | str],
        *,
        project_description: str = "",
        tech_stack: Mapping[str, object] | None = None,
        language: Language = "en",
    ) -> list[ModuleOutcome]:
        outlines = [_as_outline(m) for m in modules]
        batches = [outlines[i : i + self.batch_size] for i in range(0, len(outlines), self.batch_size)]
        outcomes: list[ModuleOutcome] = []

        for index, batch in enumerate(batches, start=1):
            logger.info("Detailing batch %d/%d (%d modules)", index, len(batches), len(batch))
            results = await asyncio.gather(
                *(
                    self._detail_one(
                        o,
                        project_description=project_description,
                        tech_stack=tech_stack,
                        language=language,
                    )
                    for o in batch
                )
            )
            outcomes.extend(results)
            if index < len(batches) and self.batch_delay_s > 0:
                await self.sleep(self.batch_delay_s)

        failed = sum(1 for o in outcomes if not o.ok)
        if failed:
            logger.warning("%d of %d modules could not be detailed", failed, len(outcomes))
        return outcomes

    async def detail_modules(
        self,
        modules: Sequence[ModuleOutline | str],
        *,
        project_description: str = "",
        tech_stack: Mapping[str, object] | None = None,
        language: Language = "en",
    ) -> list[Module]:
        """Details every module and substitutes stubs for failures. Never raises for a single module."""
        outcomes = await self.detail_outcomes(
            modules,
            project_description=project_description,
            tech_stack=tech_stack,
            language=language,
        )
        return degrade_to_stubs(outcomes)
