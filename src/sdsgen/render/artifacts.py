# src/sdsgen/render/artifacts.py
from __future__ import annotations

import json
import re

import yaml  # PyYAML

from sdsgen.data.spec_types import Specification
from .markdown import render_markdown

EXPORT_FORMATS: tuple[str, ...] = ("markdown", "json", "tasks", "openapi", "sql")

_IDENT = re.compile(r"[^0-9a-zA-Z]+")


def _dump_json(x: object) -> str:
    return json.dumps(x, ensure_ascii=False, indent=2) + "\n"


def _snake(name: str) -> str:
    s = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    s = _IDENT.sub("_", s).strip("_").lower()
    return s or "item"


def _stack_name(spec: Specification) -> str:
    if spec.tech_stack and spec.tech_stack.get("name"):
        return str(spec.tech_stack.get("name"))
    return ""


def render_json(spec: Specification) -> str:
    return _dump_json(spec.to_dict())


def tasks_document(spec: Specification) -> dict[str, object]:
    """TaskMaster-compatible task list: one pending task per module."""
    return {
        "tasks": [
            {
                "id": str(index),
                "title": f"Implement {m.name}",
                "description": m.description,
                "status": "pending",
                "priority": "medium",
                "functions": [f.to_dict() for f in m.functions],
            }
            for index, m in enumerate(spec.modules, start=1)
        ]
    }


def render_tasks(spec: Specification) -> str:
    return _dump_json(tasks_document(spec))


def development_document(spec: Specification) -> dict[str, object]:
    stack = spec.tech_stack or {}
    inner = stack.get("stack")
    return {
        "projectType": _stack_name(spec),
        "techStack": inner if isinstance(inner, dict) else dict(stack),
        "modules": [
            {"name": m.name, "description": m.description, "functionCount": len(m.functions)}
            for m in spec.modules
        ],
    }


def render_development(spec: Specification) -> str:
    return _dump_json(development_document(spec))


def render_readme(spec: Specification) -> str:
    lines = [
        f"# {spec.title} Development Guide",
        "",
        "## Tech Stack",
        _stack_name(spec) or "-",
        "",
        "## Quick Start",
        "1. Install dependencies",
        "2. Configure environment variables",
        "3. Run development server",
        "",
        "## Modules Overview",
    ]
    lines += [f"- **{m.name}**: {m.description}" for m in spec.modules]
    lines += ["", "## Development Tasks", "See tasks.json for detailed implementation tasks.", ""]
    return "\n".join(lines)


def openapi_document(spec: Specification) -> dict[str, object]:
    """OpenAPI 3 stub: one POST operation per function, tagged by module."""
    paths: dict[str, object] = {}
    for m in spec.modules:
        for fn in m.functions:
            path = f"/{_snake(m.name)}/{_snake(fn.name)}"
            paths[path] = {
                "post": {
                    "tags": [m.name],
                    "summary": fn.purpose or fn.name,
                    "operationId": f"{_snake(m.name)}_{_snake(fn.name)}",
                    "responses": {"200": {"description": fn.return_value or "Successful response"}},
                }
            }
    return {
        "openapi": "3.0.3",
        "info": {"title": spec.title or "API", "version": "1.0.0", "description": spec.description},
        "tags": [{"name": m.name, "description": m.description} for m in spec.modules],
        "paths": paths,
    }


def render_openapi(spec: Specification) -> str:
    return yaml.safe_dump(openapi_document(spec), sort_keys=False, allow_unicode=True)


def render_schema(spec: Specification) -> str:
    """SQL DDL stub with one table per module."""
    out = [f"-- {spec.title or 'Specification'} schema (generated stub)", ""]
    for m in spec.modules:
        out += [
            f"-- {m.description}" if m.description else f"-- {m.name}",
            f"CREATE TABLE {_snake(m.name)} (",
            "    id INTEGER PRIMARY KEY,",
            "    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,",
            "    updated_at TIMESTAMP",
            ");",
            "",
        ]
    return "\n".join(out)


def export(spec: Specification, fmt: str = "markdown", *, platform: str = "") -> str:
    """Renders `spec` in one of EXPORT_FORMATS; anything else falls back to Markdown."""
    f = (fmt or "markdown").strip().lower()
    if f == "json":
        return render_json(spec)
    if f == "tasks":
        return render_tasks(spec)
    if f == "openapi":
        return render_openapi(spec)
    if f == "sql":
        return render_schema(spec)
    return render_markdown(spec, platform)
