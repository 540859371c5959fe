import asyncio

import pytest

from conftest import ScriptedLLM, pipeline_responder
from sdsgen.data.spec_types import Function, Module, ModuleOutline
from sdsgen.errors import ParsingError, ValidationError
from sdsgen.pipeline.detailer import ModuleDetailer, ModuleOutcome, degrade_to_stubs


def _detailer(llm, *, batch_size=3, delay=0.5, sleeps=None):
    async def fake_sleep(seconds):
        if sleeps is not None:
            sleeps.append(seconds)

    return ModuleDetailer(llm=llm, batch_size=batch_size, batch_delay_s=delay, sleep=fake_sleep)


def test_one_failure_in_a_batch_of_three_degrades_to_a_stub():
    llm = ScriptedLLM(pipeline_responder([], failing={"Billing"}))
    modules = asyncio.run(
        _detailer(llm).detail_modules(["Auth", "Billing", "Catalog"], project_description="shop")
    )

    assert [m.name for m in modules] == ["Auth", "Billing", "Catalog"]
    assert [len(m.functions) for m in modules] == [2, 0, 2]
    assert modules[1].is_stub
    assert modules[1].description == "Billing module (details could not be generated)"


def test_outcomes_carry_the_error():
    llm = ScriptedLLM(pipeline_responder([], failing={"Billing"}))
    outcomes = asyncio.run(_detailer(llm).detail_outcomes([ModuleOutline("Auth"), ModuleOutline("Billing")]))

    assert outcomes[0].ok
    assert not outcomes[1].ok
    assert isinstance(outcomes[1].error, ParsingError)


def test_results_follow_submission_order_not_completion_order():
    class DelayedLLM:
        async def complete(self, prompt, *, task_type="general", parse=None):
            name = "First" if '"First"' in prompt else "Second"
            await asyncio.sleep(0.05 if name == "First" else 0)
            return parse(f'{{"name": "{name}", "functions": [{{"name": "f_{name}"}}]}}')

    modules = asyncio.run(_detailer(DelayedLLM()).detail_modules(["First", "Second"]))
    assert [m.name for m in modules] == ["First", "Second"]
    assert modules[0].functions[0].name == "f_First"


def test_batches_wait_between_but_not_after():
    sleeps = []
    llm = ScriptedLLM(pipeline_responder([]))
    names = [f"M{i}" for i in range(7)]

    modules = asyncio.run(_detailer(llm, batch_size=3, delay=0.5, sleeps=sleeps).detail_modules(names))

    assert len(modules) == 7
    assert sleeps == [0.5, 0.5]
    assert all(task == "specification" for task, _ in llm.calls)


def test_batch_members_run_concurrently():
    state = {"active": 0, "peak": 0}

    class CountingLLM:
        async def complete(self, prompt, *, task_type="general", parse=None):
            state["active"] += 1
            state["peak"] = max(state["peak"], state["active"])
            await asyncio.sleep(0.01)
            state["active"] -= 1
            return parse('{"functions": []}')

    asyncio.run(_detailer(CountingLLM(), batch_size=3, delay=0).detail_modules(["A", "B", "C", "D"]))
    assert state["peak"] == 3


def test_response_without_functions_array_is_a_failure():
    llm = ScriptedLLM(lambda prompt, task: '{"name": "Auth", "description": "no functions"}')
    outcomes = asyncio.run(_detailer(llm).detail_outcomes(["Auth"]))
    assert isinstance(outcomes[0].error, ValidationError)


def test_outline_description_is_used_when_model_omits_one():
    llm = ScriptedLLM(lambda prompt, task: '{"functions": [{"name": "login"}]}')
    modules = asyncio.run(_detailer(llm).detail_modules([ModuleOutline("Auth", "Sign-in")]))
    assert modules[0].description == "Sign-in"


def test_invalid_batch_size_is_rejected():
    with pytest.raises(ValueError):
        ModuleDetailer(llm=ScriptedLLM(lambda p, t: ""), batch_size=0)


def test_degrade_to_stubs_replaces_only_failures():
    ok = ModuleOutcome(name="A", module=Module(name="A", functions=[Function(name="f")]))
    failed = ModuleOutcome(name="X", error=RuntimeError("x"))
    modules = degrade_to_stubs([ok, failed])
    assert modules[0] is ok.module
    assert modules[1].name == "X" and modules[1].is_stub
