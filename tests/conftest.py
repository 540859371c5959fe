import json
import re
from collections.abc import Callable

import pytest

from sdsgen.config import Settings
from sdsgen.data.spec_types import Function, Module, Specification
from sdsgen.llm.providers.http import HttpResult

_DETAIL_NAME = re.compile(r'Please design the "(.+?)" module')


class ScriptedLLM:
    """CompletionClient double: answers every prompt through `responder`.

    A responder returns text (run through `parse` like the real invoker does)
    or an exception instance, which is raised.
    """

    def __init__(self, responder: Callable[[str, str], object]):
        self.responder = responder
        self.calls: list[tuple[str, str]] = []

    async def complete(self, prompt, *, task_type="general", parse=None):
        self.calls.append((task_type, prompt))
        result = self.responder(prompt, task_type)
        if isinstance(result, BaseException):
            raise result
        return parse(result) if parse is not None else result


def pipeline_responder(module_names, *, failing=(), refine_text=None):
    """Answers discovery with `module_names` and details every module with two functions."""

    def respond(prompt, task_type):
        if task_type == "module-generation":
            return json.dumps([{"name": n, "description": f"{n} description"} for n in module_names])
        if "Please modify the current specification" in prompt:
            return refine_text if refine_text is not None else "{}"
        match = _DETAIL_NAME.search(prompt)
        name = match.group(1) if match else "?"
        if name in failing:
            return "Sorry, I cannot help with that."
        return json.dumps(
            {
                "name": name,
                "description": f"{name} in detail",
                "functions": [
                    {"name": f"{name.lower()}_create", "purpose": "create", "parameters": ["data"], "returnValue": "id"},
                    {"name": f"{name.lower()}_read", "purpose": "read", "parameters": ["id"], "returnValue": "record"},
                ],
            }
        )

    return respond


@pytest.fixture
def fast_settings():
    return Settings(timeout_s=5.0, batch_size=3, batch_delay_s=0.0, max_retries=1, retry_backoff_s=0.0)


@pytest.fixture
def sample_spec():
    return Specification(
        title="Shop",
        description="An online shop",
        tech_stack={"id": 1, "name": "React/Next.js", "stack": {"language": "TypeScript", "framework": "Next.js"}},
        modules=[
            Module(name="Auth", description="Login", functions=[Function(name="login", purpose="Sign in")]),
            Module(name="Catalog", description="Products", functions=[Function(name="list_products")]),
            Module(name="Cart", description="Basket", functions=[]),
        ],
    )


class RecordingTransport:
    """Transport double returning queued HttpResults or raising queued exceptions."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls: list[dict] = []

    def __call__(self, *, url, payload, headers=None, timeout_s=30.0):
        self.calls.append({"url": url, "payload": payload, "headers": dict(headers or {}), "timeout_s": timeout_s})
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, BaseException):
            raise result
        return result


def claude_ok(text):
    return HttpResult(status=200, body={"content": [{"type": "text", "text": text}]}, raw_text="")


def http_error(status, text="boom"):
    return HttpResult(status=status, body={"error": text}, raw_text=text)


async def no_sleep(_seconds):
    return None
