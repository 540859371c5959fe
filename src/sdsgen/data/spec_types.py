# spec_types.py
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace


def _as_str(x: object) -> str:
    return x.strip() if isinstance(x, str) else ""


def _as_str_list(x: object) -> list[str]:
    if not isinstance(x, (list, tuple)):
        return []
    out: list[str] = []
    for item in x:
        if item is None:
            continue
        s = str(item).strip()
        if s:
            out.append(s)
    return out


def _as_params(x: object) -> list[str] | str:
    """Parameters arrive either as a list of strings or as free text."""
    if isinstance(x, (list, tuple)):
        return _as_str_list(x)
    if isinstance(x, str):
        return x.strip()
    return []


def module_key(name: str) -> str:
    """Normalized name used to detect duplicate modules."""
    return " ".join(name.split()).casefold()


@dataclass(frozen=True, slots=True)
class Function:
    """One function of a module. Only the name is guaranteed; the rest is best-effort."""

    name: str
    purpose: str = ""
    parameters: list[str] | str = field(default_factory=list)
    return_value: str = ""
    design_spec: str = ""
    function_definition: str = ""
    remarks: str = ""
    test_cases: list[str] = field(default_factory=list)

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "Function":
        return Function(
            name=_as_str(d.get("name")),
            purpose=_as_str(d.get("purpose")) or _as_str(d.get("description")),
            parameters=_as_params(d.get("parameters")),
            return_value=_as_str(d.get("returnValue")) or _as_str(d.get("returns")),
            design_spec=_as_str(d.get("designSpec")),
            function_definition=_as_str(d.get("functionDefinition")),
            remarks=_as_str(d.get("remarks")),
            test_cases=_as_str_list(d.get("testCases")),
        )

    def to_dict(self) -> dict[str, object]:
        out: dict[str, object] = {
            "name": self.name,
            "purpose": self.purpose,
            "parameters": list(self.parameters) if isinstance(self.parameters, list) else self.parameters,
            "returnValue": self.return_value,
        }
        if self.design_spec:
            out["designSpec"] = self.design_spec
        if self.function_definition:
            out["functionDefinition"] = self.function_definition
        if self.remarks:
            out["remarks"] = self.remarks
        if self.test_cases:
            out["testCases"] = list(self.test_cases)
        return out


@dataclass(frozen=True, slots=True)
class ModuleOutline:
    """A module name + short description as produced by module discovery."""

    name: str
    description: str = ""


@dataclass(frozen=True, slots=True)
class Module:
    """A group of related functions.

    A module with no functions is a valid degraded value: detail generation
    failed for it upstream.
    """

    name: str
    description: str = ""
    functions: list[Function] = field(default_factory=list)

    @property
    def is_stub(self) -> bool:
        return not self.functions

    @staticmethod
    def stub(name: str) -> "Module":
        return Module(name=name, description=f"{name} module (details could not be generated)", functions=[])

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "Module":
        raw_functions = d.get("functions")
        functions: list[Function] = []
        if isinstance(raw_functions, (list, tuple)):
            for item in raw_functions:
                if isinstance(item, Mapping):
                    fn = Function.from_dict(item)
                    if fn.name:
                        functions.append(fn)
        return Module(
            name=_as_str(d.get("name")),
            description=_as_str(d.get("description")),
            functions=functions,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "description": self.description,
            "functions": [f.to_dict() for f in self.functions],
        }


@dataclass(frozen=True, slots=True)
class Requirements:
    functional: list[str] = field(default_factory=list)
    non_functional: list[str] = field(default_factory=list)
    system: str = ""

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "Requirements":
        system = d.get("system")
        if isinstance(system, (list, tuple)):
            system = "\n".join(_as_str_list(system))
        return Requirements(
            functional=_as_str_list(d.get("functional")),
            non_functional=_as_str_list(d.get("nonFunctional")),
            system=_as_str(system),
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "functional": list(self.functional),
            "nonFunctional": list(self.non_functional),
            "system": self.system,
        }


@dataclass(frozen=True, slots=True)
class Specification:
    """A generated design specification.

    Instances are immutable; refine/select produce new values that replace
    the one held by a session.
    """

    title: str = ""
    description: str = ""
    tech_stack: dict[str, object] | None = None
    requirements: Requirements | None = None
    modules: list[Module] = field(default_factory=list)

    @property
    def module_names(self) -> list[str]:
        return [m.name for m in self.modules]

    @property
    def function_count(self) -> int:
        return sum(len(m.functions) for m in self.modules)

    def with_modules(self, modules: Iterable[Module]) -> "Specification":
        return replace(self, modules=list(modules))

    def with_tech_stack(self, tech_stack: Mapping[str, object] | None) -> "Specification":
        return replace(self, tech_stack=dict(tech_stack) if tech_stack is not None else None)

    @staticmethod
    def from_dict(d: Mapping[str, object] | None, *, fallback: "Specification | None" = None) -> "Specification":
        """Parses a specification; missing top-level fields are taken from `fallback`."""
        d2: dict[str, object] = dict(d or {})
        base = fallback or Specification()

        raw_stack = d2.get("techStack")
        tech_stack = dict(raw_stack) if isinstance(raw_stack, Mapping) else base.tech_stack

        raw_req = d2.get("requirements")
        requirements = Requirements.from_dict(raw_req) if isinstance(raw_req, Mapping) else base.requirements

        modules: list[Module] = []
        raw_modules = d2.get("modules")
        if isinstance(raw_modules, (list, tuple)):
            for item in raw_modules:
                if isinstance(item, Mapping):
                    m = Module.from_dict(item)
                    if m.name:
                        modules.append(m)

        return Specification(
            title=_as_str(d2.get("title")) or base.title,
            description=_as_str(d2.get("description")) or base.description,
            tech_stack=tech_stack,
            requirements=requirements,
            modules=modules,
        )

    def to_dict(self) -> dict[str, object]:
        """Converts the specification into a JSON-serializable mapping (camelCase keys)."""
        out: dict[str, object] = {
            "title": self.title,
            "description": self.description,
            "techStack": dict(self.tech_stack) if self.tech_stack is not None else None,
            "modules": [m.to_dict() for m in self.modules],
        }
        if self.requirements is not None:
            out["requirements"] = self.requirements.to_dict()
        return out
