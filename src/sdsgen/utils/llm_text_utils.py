# src/sdsgen/utils/llm_text_utils.py
from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Iterator

from sdsgen.core.types import ExpectedShape
from sdsgen.errors import ParsingError

logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```[\w+-]*[ \t]*\r?\n?([\s\S]*?)```")
_FENCE_MARKER = re.compile(r"```[\w+-]*")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")

_BRACKETS: dict[str, tuple[str, str]] = {
    "object": ("{", "}"),
    "array": ("[", "]"),
}


def strip_code_fences(text: str) -> str:
    """Removes markdown code fences from a model response.

    The function supports responses that start with ``` or ```yaml/```json and end with ```.
    The function returns the original text if no fences are present.
    """
    s = (text or "").strip()
    if not s.startswith("```"):
        return s

    lines = s.splitlines()

    if lines and lines[0].lstrip().startswith("```"):
        lines = lines[1:]
    if lines and lines[-1].strip() == "```":
        lines = lines[:-1]

    return "\n".join(lines).strip()


def strip_json_comments(text: str) -> str:
    """Removes // line comments and /* block */ comments outside of string literals."""
    out: list[str] = []
    i = 0
    n = len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
            continue

        if ch == "/" and i + 1 < n and text[i + 1] == "/":
            end = text.find("\n", i)
            i = n if end == -1 else end
            continue

        if ch == "/" and i + 1 < n and text[i + 1] == "*":
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
            continue

        out.append(ch)
        i += 1
    return "".join(out)


def _matches(value: object, expected: ExpectedShape) -> bool:
    if expected == "array":
        return isinstance(value, list)
    return isinstance(value, dict)


def _drop_trailing_commas(text: str) -> str:
    """Removes commas directly before a closing bracket, outside of string literals."""
    out: list[str] = []
    i = 0
    n = len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
        elif ch == ",":
            j = i + 1
            while j < n and text[j] in " \t\r\n":
                j += 1
            if j < n and text[j] in "}]":
                i += 1
                continue
        out.append(ch)
        i += 1
    return "".join(out)


def _sanitize(candidate: str) -> str:
    candidate = _drop_trailing_commas(strip_json_comments(candidate))
    return _CONTROL_CHARS.sub("", candidate)


def _balanced_regions(text: str, open_ch: str, close_ch: str) -> Iterator[str]:
    """Yields successive top-level balanced regions delimited by open_ch/close_ch.

    Inside a region, brackets in string literals and comments are ignored.
    Prose between regions is not scanned for strings.
    """
    depth = 0
    start = -1
    in_string = False
    escaped = False
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            i += 1
            continue

        if depth > 0 and ch == '"':
            in_string = True
        elif depth > 0 and text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
            continue
        elif depth > 0 and text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
            continue
        elif ch == open_ch:
            if depth == 0:
                start = i
            depth += 1
        elif ch == close_ch and depth > 0:
            depth -= 1
            if depth == 0 and start != -1:
                yield text[start : i + 1]
                start = -1
        i += 1


# --------------------
# Strategies
# --------------------
def _strategy_verbatim(text: str, expected: ExpectedShape) -> object:
    return json.loads(text)


def _strategy_fenced(text: str, expected: ExpectedShape) -> object:
    match = _FENCED_BLOCK.search(text)
    if match is not None:
        return json.loads(match.group(1).strip())
    return json.loads(strip_code_fences(text))


def _strategy_greedy(text: str, expected: ExpectedShape) -> object:
    open_ch, close_ch = _BRACKETS[expected]
    unfenced = _FENCE_MARKER.sub("", text)
    start = unfenced.find(open_ch)
    end = unfenced.rfind(close_ch)
    if start == -1 or end <= start:
        raise ValueError(f"No {expected} pattern found")
    return json.loads(_sanitize(unfenced[start : end + 1]))


def _strategy_balanced(text: str, expected: ExpectedShape) -> object:
    open_ch, close_ch = _BRACKETS[expected]
    last_error: Exception = ValueError(f"No balanced {expected} region found")
    for region in _balanced_regions(_FENCE_MARKER.sub("", text), open_ch, close_ch):
        try:
            value = json.loads(_sanitize(region))
        except ValueError as e:
            last_error = e
            continue
        if _matches(value, expected):
            return value
    raise last_error


_STRATEGIES: tuple[tuple[str, Callable[[str, ExpectedShape], object]], ...] = (
    ("verbatim", _strategy_verbatim),
    ("fenced", _strategy_fenced),
    ("greedy", _strategy_greedy),
    ("balanced", _strategy_balanced),
)
# Strategies that parse the whole response (or its fenced block) as one value.
_WHOLE_VALUE = ("verbatim", "fenced")


def extract_json(text: str, expected: ExpectedShape = "object") -> object:
    """Extracts a JSON value of the expected shape from free-form model text.

    Strategies run in order and the first one producing a value of the
    expected shape wins:
    1. parse the text verbatim
    2. parse the content of the first fenced code block
    3. strip fences, take first-open to last-close bracket, drop comments,
       trailing commas and control characters, parse
    4. scan for balanced bracket regions and parse the first valid one

    Comment and trailing-comma removal only touch text outside string
    literals, and only inside the bracketed candidate, so quotes in
    surrounding prose do not matter.

    When strategy 1 or 2 parses the response into a complete value of the
    other shape, extraction fails right there: an array is never dug out of
    a response that is a single object, and vice versa. Nested values are
    only picked out of responses that are not themselves valid JSON.

    Raises:
        ParsingError: If every strategy fails, or the response is a
            complete JSON value of the wrong shape.
    """
    if not isinstance(text, str):
        raise ParsingError("Response is not a string", original_response=repr(text))
    if expected not in _BRACKETS:
        raise ValueError(f"expected must be 'object' or 'array', got {expected!r}")

    stripped = text.strip()
    for name, strategy in _STRATEGIES:
        try:
            value = strategy(stripped, expected)
        except ValueError:
            continue
        if _matches(value, expected):
            if name != "verbatim":
                logger.debug("Extracted JSON %s with %s strategy", expected, name)
            return value
        if name in _WHOLE_VALUE and isinstance(value, (dict, list)):
            raise ParsingError(
                f"Expected a JSON {expected} but the response is a JSON {'array' if isinstance(value, list) else 'object'}",
                original_response=text,
            )

    logger.debug("JSON extraction failed; response starts with: %r", stripped[:200])
    raise ParsingError(
        f"Failed to parse a JSON {expected} from the response after trying all strategies",
        original_response=text,
    )
