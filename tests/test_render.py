import json
from datetime import date

import yaml

from sdsgen.data.spec_types import Function, Module, Requirements, Specification
from sdsgen.render import (
    export,
    render_development,
    render_json,
    render_markdown,
    render_openapi,
    render_readme,
    render_schema,
    render_tasks,
)


def test_markdown_english_layout(sample_spec):
    md = render_markdown(sample_spec, "web", today=date(2025, 1, 2))

    assert md.startswith("# Shop\n")
    assert "## Project Description\nAn online shop" in md
    assert "- **Project Type**: web" in md
    assert "- **Generated**: 2025-01-02" in md
    assert "- **Total Modules**: 3" in md
    assert "- **Total Functions**: 2" in md
    assert "### 1. Auth" in md
    assert "| login() | Sign in | - | - |" in md
    assert "##### 1. login()" in md


def test_markdown_stub_module_renders_no_functions_line(sample_spec):
    md = render_markdown(sample_spec, "web")
    cart = md.split("### 3. Cart", 1)[1]
    assert "No functions defined." in cart


def test_markdown_korean_labels():
    spec = Specification(title="쇼핑몰", description="온라인 쇼핑몰 웹사이트", modules=[Module(name="인증")])
    md = render_markdown(spec, "web")
    assert "## 프로젝트 설명" in md
    assert "함수가 정의되지 않았습니다." in md


def test_markdown_requirements_and_escaping():
    spec = Specification(
        title="T",
        description="d",
        requirements=Requirements(functional=["Login"], non_functional=["Fast"], system="Linux"),
        modules=[Module(name="M", functions=[Function(name="f", design_spec="a | b")])],
    )
    md = render_markdown(spec)
    assert "### Functional Requirements\n- Login" in md
    assert "a \\| b" in md


def test_json_round_trips_to_camel_case(sample_spec):
    data = json.loads(render_json(sample_spec))
    assert data["techStack"]["name"] == "React/Next.js"
    assert data["modules"][0]["functions"][0]["returnValue"] == ""


def test_tasks_are_taskmaster_compatible(sample_spec):
    tasks = json.loads(render_tasks(sample_spec))["tasks"]
    assert [t["id"] for t in tasks] == ["1", "2", "3"]
    assert tasks[0]["title"] == "Implement Auth"
    assert tasks[0]["status"] == "pending"
    assert tasks[2]["functions"] == []


def test_development_counts_functions(sample_spec):
    dev = json.loads(render_development(sample_spec))
    assert dev["projectType"] == "React/Next.js"
    assert dev["techStack"]["framework"] == "Next.js"
    assert [m["functionCount"] for m in dev["modules"]] == [1, 1, 0]


def test_readme_lists_modules(sample_spec):
    readme = render_readme(sample_spec)
    assert readme.startswith("# Shop Development Guide")
    assert "- **Cart**: Basket" in readme


def test_openapi_has_one_path_per_function(sample_spec):
    doc = yaml.safe_load(render_openapi(sample_spec))
    assert doc["openapi"].startswith("3.")
    assert set(doc["paths"]) == {"/auth/login", "/catalog/list_products"}
    assert doc["paths"]["/auth/login"]["post"]["tags"] == ["Auth"]


def test_schema_has_one_table_per_module(sample_spec):
    sql = render_schema(sample_spec)
    assert sql.count("CREATE TABLE") == 3
    assert "CREATE TABLE cart (" in sql


def test_export_dispatch_and_markdown_fallback(sample_spec):
    assert json.loads(export(sample_spec, "json"))["title"] == "Shop"
    assert "tasks" in json.loads(export(sample_spec, "TASKS"))
    assert export(sample_spec, "sql").count("CREATE TABLE") == 3
    assert export(sample_spec, "csv", platform="web").startswith("# Shop")
    assert export(sample_spec, "xlsx").startswith("# Shop")
