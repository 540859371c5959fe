# src/sdsgen/utils/input_guards.py
# Argument checks shared by the RPC handlers and the assembler.
from __future__ import annotations

from collections.abc import Mapping

from sdsgen.errors import ValidationError


def require_non_empty(inputs: Mapping[str, object], *keys: str) -> None:
    """Ensures required keys exist and their values are non-empty.

    Empty rules:
    - missing or None is empty
    - str is empty when strip() == ""
    - list/tuple/set/dict is empty when len == 0
    """
    for k in keys:
        v = inputs.get(k)
        if v is None:
            raise ValidationError(f"Missing required argument: {k}", field=k)
        if isinstance(v, str) and v.strip() == "":
            raise ValidationError(f"Argument must be a non-empty string: {k}", field=k)
        if isinstance(v, (list, tuple, set, dict)) and len(v) == 0:
            raise ValidationError(f"Argument must not be empty: {k}", field=k)


def optional_str(inputs: Mapping[str, object], key: str, default: str = "") -> str:
    v = inputs.get(key)
    if v is None:
        return default
    if not isinstance(v, str):
        raise ValidationError(f"Argument must be a string: {key}", field=key)
    return v.strip() or default


def optional_bool(inputs: Mapping[str, object], key: str, default: bool) -> bool:
    v = inputs.get(key)
    if v is None:
        return default
    if not isinstance(v, bool):
        raise ValidationError(f"Argument must be a boolean: {key}", field=key)
    return v


def str_list(inputs: Mapping[str, object], key: str) -> list[str]:
    """Returns a list of strings or raises ValidationError if the value is not a sequence of strings."""
    v = inputs.get(key)
    if v is None:
        return []
    if not isinstance(v, (list, tuple)) or not all(isinstance(x, str) for x in v):
        raise ValidationError(f"Argument must be an array of strings: {key}", field=key)
    return [x for x in v]
