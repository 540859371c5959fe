import json

from sdsgen.llm.prompts import ModuleDetailPrompt, ModuleListPrompt, RefinePrompt


def test_module_list_prompt_has_count_and_array_rules():
    text = ModuleListPrompt().build(
        language="en", inputs={"description": "shop", "complexity": "auto", "module_count": 9}
    )
    assert "Number of modules: exactly 9" in text
    assert text.rstrip().endswith("Do not include explanations, markdown fences or additional text.")
    assert "valid JSON array" in text


def test_module_detail_prompt_embeds_tech_stack():
    text = ModuleDetailPrompt().build(
        language="en",
        inputs={"project_description": "shop", "module_name": "Auth", "tech_stack": {"name": "Flutter"}},
    )
    assert 'Please design the "Auth" module in detail.' in text
    assert '"name": "Flutter"' in text
    assert "valid JSON object" in text


def test_refine_prompt_in_korean():
    text = RefinePrompt().build(
        language="ko",
        inputs={
            "modification_request": "결제 모듈 추가",
            "action_type": "add_module",
            "module_names": ["인증", "상품"],
            "specification": {"title": "쇼핑몰", "modules": []},
        },
    )
    assert "요청: 결제 모듈 추가" in text
    assert "현재 명세서 모듈: 인증, 상품" in text
    assert json.dumps({"title": "쇼핑몰", "modules": []}, ensure_ascii=False, indent=2) in text
    assert "JSON 객체" in text
