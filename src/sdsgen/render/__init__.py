from .artifacts import (
    EXPORT_FORMATS,
    export,
    render_development,
    render_json,
    render_openapi,
    render_readme,
    render_schema,
    render_tasks,
)
from .markdown import render_markdown

__all__ = [
    "EXPORT_FORMATS",
    "export",
    "render_development",
    "render_json",
    "render_markdown",
    "render_openapi",
    "render_readme",
    "render_schema",
    "render_tasks",
]
