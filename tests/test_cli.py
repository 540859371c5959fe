import logging

import pytest

from sdsgen.cli import main as cli
from sdsgen.cli.main import build_parser

CREDENTIAL_VARS = ("ANTHROPIC_API_KEY", "OPENAI_API_KEY", "PERPLEXITY_API_KEY")


@pytest.fixture
def no_credentials(monkeypatch, tmp_path):
    for name in CREDENTIAL_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    root = logging.getLogger()
    for handler in [h for h in root.handlers if getattr(h, "_sdsgen", False)]:
        root.removeHandler(handler)


def test_parser_defaults():
    args = build_parser().parse_args(["generate", "A todo app"])
    assert args.platform == "auto"
    assert args.complexity == "auto"
    assert args.stack_id is None
    assert args.output_dir == "."
    assert args.no_advanced is False


def test_subcommand_is_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_stacks_prints_yaml(capsys, no_credentials):
    assert cli.main(["stacks", "--platform", "api"]) == 0
    out = capsys.readouterr().out
    assert "=== BACKEND ===" in out
    assert "Python/FastAPI" in out


def test_generate_without_credentials_reports_failure(capsys, no_credentials, tmp_path):
    code = cli.main(["generate", "A simple todo app", "--output-dir", str(tmp_path)])

    err = capsys.readouterr().err
    assert code == 1
    assert "Operation failed: Configuration error: No API keys configured" in err
    assert not (tmp_path / ".sds").exists()


def test_generate_unknown_stack_id(capsys, no_credentials):
    code = cli.main(["generate", "A web shop", "--stack-id", "42"])
    assert code == 1
    assert "stack_id" in capsys.readouterr().err


def test_generate_writes_outputs(capsys, no_credentials, tmp_path, monkeypatch):
    from conftest import ScriptedLLM, pipeline_responder

    llm = ScriptedLLM(pipeline_responder(["Auth", "Todos", "Sync", "Settings"]))
    monkeypatch.setattr(cli, "ResilientInvoker", lambda settings: llm)
    monkeypatch.setenv("BATCH_DELAY", "0")

    code = cli.main(["generate", "A simple todo app", "--complexity", "simple", "--output-dir", str(tmp_path)])

    captured = capsys.readouterr()
    assert code == 0
    assert captured.out.startswith("# Project Specification")
    assert "4 modules, 8 functions" in captured.err
    assert (tmp_path / ".sds" / "tasks.json").is_file()
    assert (tmp_path / "specification.md").is_file()
