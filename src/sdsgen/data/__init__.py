"""Data structures for the generator.

These modules contain pure-ish data + normalization helpers, the static
tech-stack catalog, the in-memory session store, and the file writer for
rendered output.
"""

from .spec_types import Function, Module, ModuleOutline, Requirements, Specification
from .session_store import MemorySessionStore, Session

__all__ = [
    "Function",
    "Module",
    "ModuleOutline",
    "Requirements",
    "Specification",
    "MemorySessionStore",
    "Session",
]
