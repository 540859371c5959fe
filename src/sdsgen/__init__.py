"""Software design specification generator.

The package turns a free-text project description into a structured design
specification by orchestrating calls to hosted LLM APIs:
- llm/: provider descriptors, provider selection, resilient invocation, prompts
- pipeline/: heuristics, module discovery, module detailing, spec assembly
- data/: spec types, tech-stack catalog, session store, output writer
- render/: Markdown / JSON / OpenAPI / SQL renderers
- rpc/: line-delimited JSON-RPC server (MCP-style tools)
- cli/: the `sds` command
"""

__version__ = "1.0.24"
