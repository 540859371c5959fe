# src/sdsgen/render/markdown.py
from __future__ import annotations

from collections.abc import Mapping
from datetime import date

from sdsgen.core.types import Language
from sdsgen.data.spec_types import Function, Module, Specification
from sdsgen.pipeline.heuristics import detect_language

_LABELS: dict[str, dict[str, str]] = {
    "en": {
        "title": "Design Specification",
        "description": "Project Description",
        "requirements": "System Requirements",
        "functional": "Functional Requirements",
        "non_functional": "Non-Functional Requirements",
        "compatibility": "System Compatibility",
        "software_design": "Software Design Specification",
        "spec_info": "Specification Information",
        "project_type": "Project Type",
        "language": "Programming Language",
        "generated": "Generated",
        "total_modules": "Total Modules",
        "total_functions": "Total Functions",
        "tech_stack": "Technology Stack",
        "stack_language": "Language",
        "framework": "Framework",
        "state": "State Management",
        "database": "Database",
        "testing": "Testing",
        "deployment": "Deployment",
        "module_structure": "Module Structure",
        "function_list": "Function List",
        "no_functions": "No functions defined.",
        "purpose": "Purpose",
        "parameters": "Parameters",
        "return_value": "Return Value",
        "test_cases": "Test Cases",
        "tbd": "To be determined",
    },
    "ko": {
        "title": "설계 명세서",
        "description": "프로젝트 설명",
        "requirements": "시스템 요구사항",
        "functional": "기능 요구사항",
        "non_functional": "비기능 요구사항",
        "compatibility": "시스템 호환성",
        "software_design": "소프트웨어 설계 명세서",
        "spec_info": "명세서 정보",
        "project_type": "프로젝트 타입",
        "language": "프로그래밍 언어",
        "generated": "생성일",
        "total_modules": "총 모듈 수",
        "total_functions": "총 함수 수",
        "tech_stack": "기술 스택",
        "stack_language": "언어",
        "framework": "프레임워크",
        "state": "상태 관리",
        "database": "데이터베이스",
        "testing": "테스트",
        "deployment": "배포",
        "module_structure": "모듈 구조",
        "function_list": "함수 목록",
        "no_functions": "함수가 정의되지 않았습니다.",
        "purpose": "목적",
        "parameters": "매개변수",
        "return_value": "반환값",
        "test_cases": "테스트 케이스",
        "tbd": "미정",
    },
}


def spec_language(spec: Specification) -> Language:
    return detect_language(spec.description or spec.title or "")


def _cell(text: str) -> str:
    """Keeps a value on one Markdown table row."""
    return " ".join(text.replace("|", "\\|").split()) or "-"


def _join(value: object) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value) if value not in (None, "") else ""


def _stack_fields(tech_stack: Mapping[str, object] | None) -> Mapping[str, object]:
    if not tech_stack:
        return {}
    inner = tech_stack.get("stack")
    return inner if isinstance(inner, Mapping) else tech_stack


def _function_table(module: Module, t: Mapping[str, str]) -> list[str]:
    if not module.functions:
        return [t["no_functions"]]
    lines = [
        "| Function | Design Spec | Function Definition | Remarks |",
        "|----------|-------------|---------------------|---------|",
    ]
    for fn in module.functions:
        lines.append(
            f"| {_cell(fn.name)}() | {_cell(fn.design_spec or fn.purpose)} "
            f"| {_cell(fn.function_definition)} | {_cell(fn.remarks)} |"
        )
    return lines


def _function_details(index: int, fn: Function, t: Mapping[str, str]) -> list[str]:
    lines = [
        f"##### {index}. {fn.name}()",
        f"- **{t['purpose']}**: {fn.purpose or '-'}",
        f"- **{t['parameters']}**: {_join(fn.parameters) or '-'}",
        f"- **{t['return_value']}**: {fn.return_value or '-'}",
    ]
    if fn.test_cases:
        lines.append(f"- **{t['test_cases']}**:")
        lines.extend(f"  - {case}" for case in fn.test_cases)
    lines.append("")
    return lines


def render_markdown(spec: Specification, platform: str = "", *, today: date | None = None) -> str:
    """Renders the human-readable design document.

    The label language follows the specification's own description (or title).
    Modules without functions are rendered with a "No functions defined." line.
    """
    lang = spec_language(spec)
    t = _LABELS[lang]
    stack = _stack_fields(spec.tech_stack)
    generated = (today or date.today()).isoformat()

    out: list[str] = [
        f"# {spec.title or t['title']}",
        "",
        f"## {t['description']}",
        spec.description,
        "",
        f"## {t['requirements']}",
    ]
    if spec.requirements is not None:
        req = spec.requirements
        out += ["", f"### {t['functional']}"]
        out += [f"- {r}" for r in req.functional]
        out += ["", f"### {t['non_functional']}"]
        out += [f"- {r}" for r in req.non_functional]
        out += ["", f"### {t['compatibility']}", req.system]
    out += [
        "",
        f"## {t['software_design']}",
        "",
        f"### {t['spec_info']}",
        f"- **{t['project_type']}**: {platform or '-'}",
        f"- **{t['language']}**: {_join(stack.get('language')) or t['tbd']}",
        f"- **{t['generated']}**: {generated}",
        f"- **{t['total_modules']}**: {len(spec.modules)}",
        f"- **{t['total_functions']}**: {spec.function_count}",
        "",
        f"### {t['tech_stack']}",
    ]
    if spec.tech_stack:
        name = spec.tech_stack.get("name")
        if name:
            out.append(f"**{name}**")
            out.append("")
        for key, label in (
            ("language", "stack_language"),
            ("framework", "framework"),
            ("stateManagement", "state"),
            ("database", "database"),
            ("testing", "testing"),
            ("deployment", "deployment"),
        ):
            out.append(f"- **{t[label]}**: {_join(stack.get(key)) or t['tbd']}")
    else:
        out.append(f"- {t['tbd']}")

    out += ["", f"## {t['module_structure']}", ""]
    for index, module in enumerate(spec.modules, start=1):
        out += [f"### {index}. {module.name}", module.description, "", f"#### {t['function_list']}", ""]
        out += _function_table(module, t)
        out.append("")
        for fn_index, fn in enumerate(module.functions, start=1):
            out += _function_details(fn_index, fn, t)

    return "\n".join(out).rstrip() + "\n"
