# src/sdsgen/rpc/handlers.py

from __future__ import annotations

import json
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass

from sdsgen.data.session_store import MemorySessionStore, Session
from sdsgen.data.spec_types import Specification
from sdsgen.data.tech_stacks import TechStack, TechStackCatalog
from sdsgen.errors import ValidationError
from sdsgen.pipeline.assembler import SpecificationAssembler
from sdsgen.pipeline.heuristics import detect_language, main_features
from sdsgen.render import export, render_markdown, render_openapi, render_schema
from sdsgen.utils.input_guards import optional_bool, optional_str, require_non_empty, str_list

logger = logging.getLogger(__name__)

_MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "analysis": "Project Analysis Result",
        "project_type": "Project Type",
        "complexity": "Complexity",
        "main_features": "Main Features",
        "session_id": "Session ID",
        "stubs": "Modules without details",
        "refined": "Specification Update Complete",
        "modification": "Modification",
        "updated": "Updated Specification",
        "exported": "Specification Export Complete",
        "format": "Format",
        "templates": "Templates Included",
        "source": "Data Source",
        "yes": "Yes",
        "no": "No",
    },
    "ko": {
        "analysis": "프로젝트 분석 결과",
        "project_type": "프로젝트 타입",
        "complexity": "복잡도",
        "main_features": "주요 기능",
        "session_id": "세션 ID",
        "stubs": "상세 생성 실패 모듈",
        "refined": "명세서 수정 완료",
        "modification": "수정 내용",
        "updated": "업데이트된 명세서",
        "exported": "명세서 내보내기 완료",
        "format": "형태",
        "templates": "템플릿 포함",
        "source": "데이터 소스",
        "yes": "예",
        "no": "아니오",
    },
}


@dataclass
class ToolContext:
    """Shared state the tool handlers operate on."""

    store: MemorySessionStore
    assembler: SpecificationAssembler
    catalog: TechStackCatalog


def _parse_spec_json(raw: object, field: str) -> Specification:
    """Accepts a JSON string (or an already-decoded object) carrying a specification."""
    if isinstance(raw, Mapping):
        data: object = raw
    elif isinstance(raw, str) and raw.strip():
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValidationError(f"{field} is not valid JSON: {e.msg}", field=field) from e
    else:
        raise ValidationError(f"{field} must be a JSON string", field=field)

    if not isinstance(data, Mapping) or not isinstance(data.get("modules"), list):
        raise ValidationError(f"{field} must be a specification object with a modules array", field=field)
    return Specification.from_dict(data)


def _session_or_inline(
    ctx: ToolContext, arguments: Mapping[str, object], inline_key: str
) -> tuple[str | None, Session | None, Specification]:
    session_id = optional_str(arguments, "session_id")
    if session_id:
        session = ctx.store.require(session_id)
        return session_id, session, session.specification
    if arguments.get(inline_key) is not None:
        return None, None, _parse_spec_json(arguments.get(inline_key), inline_key)
    raise ValidationError(
        "Specification session not found. Please provide a valid session_id.", field="session_id"
    )


def _stack_summary(index: int, stack: TechStack) -> list[str]:
    inner = stack.get("stack")
    fields = inner if isinstance(inner, Mapping) else {}

    def _v(key: str) -> str:
        value = fields.get(key)
        if isinstance(value, (list, tuple)):
            return ", ".join(str(x) for x in value)
        return str(value) if value else "-"

    return [
        f"### {index}. {stack.get('name')} (id: {stack.get('id')})",
        f"- **Language**: {_v('language')}",
        f"- **Framework**: {_v('framework')}",
        f"- **State Management**: {_v('stateManagement')}",
        f"- **Database**: {_v('database')}",
        f"- **Testing**: {_v('testing')}",
        f"- **Deployment**: {_v('deployment')}",
        "",
    ]


class BaseToolHandler(ABC):
    """Defines the execution contract for one RPC tool.

    The base class provides:
    - stable identity (name)
    - a single entrypoint (__call__) that wraps run() with timing and wraps
      the rendered text into the tools/call result shape

    Failures are not caught here; the server classifies them into error
    envelopes.
    """

    name: str = "base_tool"

    @abstractmethod
    async def run(self, *, arguments: Mapping[str, object], ctx: ToolContext) -> str:
        """Runs the tool and returns the text block shown to the caller."""
        raise NotImplementedError

    async def __call__(self, *, arguments: Mapping[str, object], ctx: ToolContext) -> dict[str, object]:
        t0 = time.perf_counter()
        text = await self.run(arguments=arguments, ctx=ctx)
        duration_ms = int((time.perf_counter() - t0) * 1000)
        logger.info("Tool %s finished in %d ms", self.name, duration_ms)
        return {
            "content": [{"type": "text", "text": text}],
            "_meta": {"tool": self.name, "duration_ms": duration_ms},
        }


class AnalyzeProjectHandler(BaseToolHandler):
    name = "analyze_project_request"

    async def run(self, *, arguments: Mapping[str, object], ctx: ToolContext) -> str:
        require_non_empty(arguments, "project_description")
        description = optional_str(arguments, "project_description")
        platform = optional_str(arguments, "target_platform", "auto")
        complexity = optional_str(arguments, "complexity_level", "auto")
        advanced = optional_bool(arguments, "include_advanced_features", True)

        result = await ctx.assembler.analyze(
            description,
            platform=platform,
            complexity=complexity,
            advanced_features=advanced,
        )
        # A session exists only once the whole analysis has succeeded.
        session_id = ctx.store.create(
            result.specification,
            platform=result.platform,
            complexity=result.complexity,
            advanced_features=advanced,
        )

        msg = _MESSAGES[detect_language(description)]
        lines = [
            f"## {msg['analysis']}",
            "",
            f"**{msg['project_type']}**: {result.platform}",
            f"**{msg['complexity']}**: {result.complexity}",
            f"**{msg['main_features']}**: {main_features(result.platform)}",
            f"**{msg['session_id']}**: `{session_id}`",
        ]
        if result.stub_modules:
            lines.append(f"**{msg['stubs']}**: {', '.join(result.stub_modules)}")
        lines += ["", render_markdown(result.specification, result.platform)]
        return "\n".join(lines)


class RefineSpecificationHandler(BaseToolHandler):
    name = "refine_specification"

    async def run(self, *, arguments: Mapping[str, object], ctx: ToolContext) -> str:
        require_non_empty(arguments, "modification_request")
        request = optional_str(arguments, "modification_request")
        action_type = optional_str(arguments, "action_type", "auto")
        session_id, session, spec = _session_or_inline(ctx, arguments, "current_spec")

        updated = await ctx.assembler.refine(spec, request, action_type=action_type)
        if session_id is not None:
            ctx.store.update(session_id, updated)

        platform = session.platform if session is not None else ""
        msg = _MESSAGES[detect_language(request)]
        lines = [
            f"## {msg['refined']}",
            "",
            f"**{msg['modification']}**: {request}",
        ]
        if session_id is not None:
            lines.append(f"**{msg['session_id']}**: `{session_id}`")
        lines += ["", f"## {msg['updated']}", "", render_markdown(updated, platform)]
        return "\n".join(lines)


class ExportSpecificationHandler(BaseToolHandler):
    name = "export_specification"

    async def run(self, *, arguments: Mapping[str, object], ctx: ToolContext) -> str:
        fmt = optional_str(arguments, "export_format", "markdown").lower()
        include_templates = optional_bool(arguments, "include_templates", False)
        session_id, session, spec = _session_or_inline(ctx, arguments, "spec_data")

        platform = session.platform if session is not None else ""
        content = export(spec, fmt, platform=platform)

        msg = _MESSAGES[detect_language(spec.description or spec.title)]
        source = f"Session ID: {session_id}" if session_id is not None else "spec_data"
        lines = [
            f"## {msg['exported']}",
            "",
            f"**{msg['format']}**: {fmt.upper()}",
            f"**{msg['templates']}**: {msg['yes'] if include_templates else msg['no']}",
            f"**{msg['source']}**: {source}",
            "",
            content,
        ]
        if include_templates:
            lines += [
                "",
                "### openapi.yaml",
                "```yaml",
                render_openapi(spec).rstrip(),
                "```",
                "",
                "### schema.sql",
                "```sql",
                render_schema(spec).rstrip(),
                "```",
            ]
        return "\n".join(lines)


class SelectTechStackHandler(BaseToolHandler):
    name = "select_tech_stack"

    async def run(self, *, arguments: Mapping[str, object], ctx: ToolContext) -> str:
        require_non_empty(arguments, "platform")
        platform = optional_str(arguments, "platform").lower()
        preferences = str_list(arguments, "preferences")
        stacks = ctx.catalog.filter_by_preferences(platform, preferences)

        lines = [f"## Available Tech Stacks for {platform}", ""]
        for index, stack in enumerate(stacks, start=1):
            lines += _stack_summary(index, stack)

        session_id = optional_str(arguments, "session_id")
        raw_stack_id = arguments.get("stack_id")
        if session_id and raw_stack_id is not None:
            if isinstance(raw_stack_id, bool) or not isinstance(raw_stack_id, int):
                raise ValidationError("stack_id must be an integer", field="stack_id")
            session = ctx.store.require(session_id)
            chosen = ctx.catalog.find_stack(platform, raw_stack_id)
            if chosen is None:
                raise ValidationError(f"No stack with id {raw_stack_id} for platform {platform}", field="stack_id")
            ctx.store.update(session_id, session.specification.with_tech_stack(chosen))
            lines.append(f"**Applied to session** `{session_id}`: {chosen.get('name')}")

        return "\n".join(lines).rstrip() + "\n"


class SelectModulesHandler(BaseToolHandler):
    name = "select_modules"

    async def run(self, *, arguments: Mapping[str, object], ctx: ToolContext) -> str:
        session_id = optional_str(arguments, "session_id")
        session = ctx.store.require(session_id)
        selected = arguments.get("selected_modules")

        filtered = ctx.assembler.select_subset(session.specification, selected)
        ctx.store.update(session_id, filtered)

        names = [str(n) for n in selected] if isinstance(selected, list) else []
        known = set(session.specification.module_names)
        missing = [n for n in names if n not in known]
        lines = [
            "## Module Selection Complete",
            "",
            f"**Selected Modules**: {', '.join(names)}",
            f"**Session ID**: `{session_id}`",
        ]
        if missing:
            lines.append(f"**Not found**: {', '.join(missing)}")
        lines += ["", "## Updated Specification", "", render_markdown(filtered, session.platform)]
        return "\n".join(lines)


def default_handlers() -> dict[str, BaseToolHandler]:
    handlers: list[BaseToolHandler] = [
        AnalyzeProjectHandler(),
        RefineSpecificationHandler(),
        ExportSpecificationHandler(),
        SelectTechStackHandler(),
        SelectModulesHandler(),
    ]
    return {h.name: h for h in handlers}
