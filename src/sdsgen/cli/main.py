from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

import yaml

from sdsgen.config import Settings, configure_logging, load_env_file
from sdsgen.data.output_writer import write_outputs
from sdsgen.data.tech_stacks import load_catalog
from sdsgen.errors import ValidationError, describe_for_cli
from sdsgen.llm.invoker import ResilientInvoker
from sdsgen.pipeline.assembler import SpecificationAssembler
from sdsgen.render import render_markdown
from sdsgen.rpc.server import RpcServer

logger = logging.getLogger(__name__)


def _print_yaml(title: str, payload: object) -> None:
    """Prints a human-readable YAML view of structured data."""
    print(f"\n=== {title} ===\n")
    print(yaml.safe_dump(payload, sort_keys=False, allow_unicode=True))


def cmd_generate(args: argparse.Namespace, settings: Settings) -> int:
    """Generates a specification and writes the output files."""
    catalog = load_catalog()
    assembler = SpecificationAssembler(llm=ResilientInvoker(settings=settings), settings=settings, catalog=catalog)

    platform = assembler.resolve_platform(args.platform, args.description)
    tech_stack = None
    if args.stack_id is not None:
        tech_stack = catalog.find_stack(platform, args.stack_id)
        if tech_stack is None:
            raise ValidationError(f"No stack with id {args.stack_id} for platform {platform}", field="stack_id")

    result = asyncio.run(
        assembler.analyze(
            args.description,
            platform=platform,
            complexity=args.complexity,
            advanced_features=not args.no_advanced,
            tech_stack=tech_stack,
        )
    )
    spec = result.specification

    written = write_outputs(spec, Path(args.output_dir), platform=result.platform)

    print(f"Detected platform: {result.platform}", file=sys.stderr)
    print(f"{len(spec.modules)} modules, {spec.function_count} functions", file=sys.stderr)
    if result.stub_modules:
        print(f"Modules without details: {', '.join(result.stub_modules)}", file=sys.stderr)
    for path in written:
        print(f"Wrote {path}", file=sys.stderr)

    print(render_markdown(spec, result.platform))
    return 0


def cmd_stacks(args: argparse.Namespace, settings: Settings) -> int:
    """Lists the tech-stack catalog, optionally for one platform."""
    catalog = load_catalog()
    names = [catalog.canonical(args.platform)] if args.platform else catalog.platform_names()
    for name in names:
        _print_yaml(name.upper(), catalog.stacks_for(name))
    return 0


def cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    """Runs the JSON-RPC server on stdin/stdout until EOF."""
    server = RpcServer.from_settings(settings)
    asyncio.run(server.serve())
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Builds the CLI parser."""
    p = argparse.ArgumentParser(prog="sds", description="Software design specification generator")
    p.add_argument("--env-file", default=None, help="Path to a .env file (default: ./.env)")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp_gen = sub.add_parser("generate", help="Generate a specification from a project description")
    sp_gen.add_argument("description", help="Natural-language project description")
    sp_gen.add_argument("--platform", default="auto", help="auto | mobile | web | backend | api | desktop | embedded")
    sp_gen.add_argument("--complexity", default="auto", help="auto | simple | medium | complex")
    sp_gen.add_argument("--stack-id", type=int, default=None, help="Catalog id of the tech stack (default: first)")
    sp_gen.add_argument("--output-dir", default=".", help="Where .sds/ and specification.md are written")
    sp_gen.add_argument("--no-advanced", action="store_true", help="Do not ask for cross-cutting modules")
    sp_gen.set_defaults(func=cmd_generate)

    sp_stacks = sub.add_parser("stacks", help="List available tech stacks")
    sp_stacks.add_argument("--platform", default=None, help="Only list stacks for this platform")
    sp_stacks.set_defaults(func=cmd_stacks)

    sp_serve = sub.add_parser("serve", help="Run the line-delimited JSON-RPC server on stdin/stdout")
    sp_serve.set_defaults(func=cmd_serve)

    return p


def main(argv: Sequence[str] | None = None) -> int:
    """Runs the CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    load_env_file(args.env_file)
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    try:
        return args.func(args, settings)
    except Exception as e:
        logger.debug("Command %s failed", args.cmd, exc_info=True)
        print(describe_for_cli(e), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
