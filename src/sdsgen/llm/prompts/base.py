# src/sdsgen/llm/prompts/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping

from sdsgen.core.types import Language

_OUTPUT_RULES: dict[str, dict[str, tuple[str, ...]]] = {
    "en": {
        "object": (
            "IMPORTANT: Respond only with a valid JSON object.",
            "Do not include explanations, markdown fences or additional text.",
        ),
        "array": (
            "IMPORTANT: Respond only with a valid JSON array.",
            "Do not include explanations, markdown fences or additional text.",
        ),
    },
    "ko": {
        "object": (
            "IMPORTANT: 반드시 유효한 JSON 객체로만 응답하세요.",
            "설명, 마크다운 코드 블록, 추가 텍스트는 포함하지 마세요.",
        ),
        "array": (
            "IMPORTANT: 반드시 유효한 JSON 배열로만 응답하세요.",
            "설명, 마크다운 코드 블록, 추가 텍스트는 포함하지 마세요.",
        ),
    },
}


class BasePrompt(ABC):
    """Builds a single-message prompt for one pipeline stage.

    The base prompt standardizes:
    - a localized body (subclasses provide one per language)
    - a fixed trailer with strict output rules for the expected JSON shape
    - a single entrypoint (build) that stages call deterministically
    """

    expected_shape: str = "object"

    def build(self, *, language: Language, inputs: Mapping[str, object]) -> str:
        body = (self.body_ko(inputs=inputs) if language == "ko" else self.body_en(inputs=inputs)).strip()
        rules = _OUTPUT_RULES.get(language, _OUTPUT_RULES["en"])[self.expected_shape]
        return body + "\n\n" + "\n".join(rules) + "\n"

    @abstractmethod
    def body_en(self, *, inputs: Mapping[str, object]) -> str:
        raise NotImplementedError

    @abstractmethod
    def body_ko(self, *, inputs: Mapping[str, object]) -> str:
        raise NotImplementedError
