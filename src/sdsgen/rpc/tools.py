# src/sdsgen/rpc/tools.py
# Static tool catalog returned by tools/list.
from __future__ import annotations

from sdsgen import __version__
from sdsgen.llm.prompts import ACTION_TYPES

PROTOCOL_VERSION = "2024-11-05"
SERVER_INFO: dict[str, object] = {"name": "sds-generator", "version": __version__}

_PLATFORMS = ["embedded", "web", "mobile", "desktop", "api"]

TOOLS: list[dict[str, object]] = [
    {
        "name": "analyze_project_request",
        "description": "Analyze a natural-language project request and generate a design specification",
        "inputSchema": {
            "type": "object",
            "properties": {
                "project_description": {
                    "type": "string",
                    "description": "Natural-language description of the project",
                },
                "target_platform": {
                    "type": "string",
                    "enum": [*_PLATFORMS, "auto"],
                    "default": "auto",
                    "description": "Target platform",
                },
                "complexity_level": {
                    "type": "string",
                    "enum": ["simple", "medium", "complex", "auto"],
                    "default": "auto",
                    "description": "Project complexity",
                },
                "include_advanced_features": {
                    "type": "boolean",
                    "default": True,
                    "description": "Include cross-cutting modules (security, logging, error handling)",
                },
            },
            "required": ["project_description"],
        },
    },
    {
        "name": "refine_specification",
        "description": "Modify an existing specification with a natural-language request",
        "inputSchema": {
            "type": "object",
            "properties": {
                "session_id": {
                    "type": "string",
                    "description": "Specification session ID (returned from analyze_project_request)",
                },
                "current_spec": {
                    "type": "string",
                    "description": "Specification JSON data (use only when session_id is not available)",
                },
                "modification_request": {
                    "type": "string",
                    "description": "What to change",
                },
                "action_type": {
                    "type": "string",
                    "enum": list(ACTION_TYPES),
                    "default": "auto",
                    "description": "Type of action to perform",
                },
            },
            "required": ["modification_request"],
        },
    },
    {
        "name": "export_specification",
        "description": "Export specifications in various formats",
        "inputSchema": {
            "type": "object",
            "properties": {
                "session_id": {
                    "type": "string",
                    "description": "Specification session ID (returned from analyze_project_request)",
                },
                "spec_data": {
                    "type": "string",
                    "description": "Specification JSON data (use only when session_id is not available)",
                },
                "export_format": {
                    "type": "string",
                    "enum": ["markdown", "json", "tasks", "openapi", "sql", "csv", "xlsx"],
                    "default": "markdown",
                    "description": "Export format",
                },
                "include_templates": {
                    "type": "boolean",
                    "default": False,
                    "description": "Include code templates",
                },
            },
        },
    },
    {
        "name": "select_tech_stack",
        "description": "Select technology stack for a project platform",
        "inputSchema": {
            "type": "object",
            "properties": {
                "platform": {
                    "type": "string",
                    "enum": _PLATFORMS,
                    "description": "Target platform",
                },
                "preferences": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Technology preferences (optional)",
                },
                "session_id": {
                    "type": "string",
                    "description": "Session whose specification should use the chosen stack (optional)",
                },
                "stack_id": {
                    "type": "integer",
                    "description": "Catalog id of the stack to apply to the session (optional)",
                },
            },
            "required": ["platform"],
        },
    },
    {
        "name": "select_modules",
        "description": "Keep only the selected modules in a session's specification",
        "inputSchema": {
            "type": "object",
            "properties": {
                "session_id": {
                    "type": "string",
                    "description": "Specification session ID",
                },
                "selected_modules": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Names of the modules to keep",
                },
            },
            "required": ["session_id", "selected_modules"],
        },
    },
]

TOOL_NAMES: tuple[str, ...] = tuple(str(t["name"]) for t in TOOLS)
