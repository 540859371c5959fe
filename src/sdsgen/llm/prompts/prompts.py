# src/sdsgen/llm/prompts/prompts.py
from __future__ import annotations

import json
from collections.abc import Mapping

from .base import BasePrompt

ACTION_TYPES: tuple[str, ...] = ("add_module", "add_function", "modify_function", "remove_item", "auto")


def _get_str(inputs: Mapping[str, object], key: str) -> str:
    v = inputs.get(key)
    return v.strip() if isinstance(v, str) else ""


def _get_names(inputs: Mapping[str, object], key: str) -> list[str]:
    v = inputs.get(key)
    if not isinstance(v, (list, tuple)):
        return []
    return [str(x) for x in v if str(x).strip()]


def _dump(x: object) -> str:
    return json.dumps(x, ensure_ascii=False, indent=2)


class ModuleListPrompt(BasePrompt):
    """Asks for the flat module list of a project.

    Inputs: description, complexity, module_count, advanced_features (bool).
    """

    expected_shape = "array"

    def body_en(self, *, inputs: Mapping[str, object]) -> str:
        count = int(inputs.get("module_count") or 8)
        lines = [
            "Generate a module list based on the following project description.",
            "",
            f"Project Description: {_get_str(inputs, 'description')}",
            f"Complexity: {_get_str(inputs, 'complexity') or 'auto'}",
            f"Number of modules: exactly {count}",
        ]
        if inputs.get("advanced_features"):
            lines.append("Include cross-cutting modules (security, logging, error handling) where they fit.")
        lines += [
            "",
            "Module names must be unique.",
            "Respond with a JSON array in the following format:",
            '[{"name": "module_name", "description": "module description"}, ...]',
        ]
        return "\n".join(lines)

    def body_ko(self, *, inputs: Mapping[str, object]) -> str:
        count = int(inputs.get("module_count") or 8)
        lines = [
            "다음 프로젝트 설명을 바탕으로 모듈 목록을 생성해주세요.",
            "",
            f"프로젝트 설명: {_get_str(inputs, 'description')}",
            f"복잡도: {_get_str(inputs, 'complexity') or 'auto'}",
            f"모듈 개수: 정확히 {count}개",
        ]
        if inputs.get("advanced_features"):
            lines.append("보안, 로깅, 에러 처리 같은 공통 모듈도 적절히 포함해주세요.")
        lines += [
            "",
            "모듈명은 서로 중복되지 않아야 합니다.",
            "다음 형식의 JSON 배열로 응답해주세요:",
            '[{"name": "모듈명", "description": "모듈 설명"}, ...]',
        ]
        return "\n".join(lines)


class ModuleDetailPrompt(BasePrompt):
    """Asks for the function list of one module.

    Inputs: project_description, module_name, module_description, tech_stack (mapping).
    """

    expected_shape = "object"

    def body_en(self, *, inputs: Mapping[str, object]) -> str:
        name = _get_str(inputs, "module_name")
        return "\n".join(
            [
                f'Please design the "{name}" module in detail.',
                "",
                f"Project Description: {_get_str(inputs, 'project_description')}",
                f"Module Summary: {_get_str(inputs, 'module_description') or '-'}",
                f"Tech Stack: {_dump(inputs.get('tech_stack') or {})}",
                "",
                "Respond in the following JSON format:",
                "{",
                f'  "name": "{name}",',
                '  "description": "Detailed module description",',
                '  "functions": [',
                "    {",
                '      "name": "Function name",',
                '      "purpose": "Function purpose",',
                '      "parameters": ["Parameter list"],',
                '      "returnValue": "Return value description",',
                '      "designSpec": "Design specification",',
                '      "functionDefinition": "Function signature",',
                '      "remarks": "Remarks",',
                '      "testCases": ["Test case list"]',
                "    }",
                "  ]",
                "}",
                "",
                "Include 3-5 functions per module.",
            ]
        )

    def body_ko(self, *, inputs: Mapping[str, object]) -> str:
        name = _get_str(inputs, "module_name")
        return "\n".join(
            [
                f'"{name}" 모듈을 상세하게 설계해주세요.',
                "",
                f"프로젝트 설명: {_get_str(inputs, 'project_description')}",
                f"모듈 요약: {_get_str(inputs, 'module_description') or '-'}",
                f"기술 스택: {_dump(inputs.get('tech_stack') or {})}",
                "",
                "다음 JSON 형식으로 응답해주세요:",
                "{",
                f'  "name": "{name}",',
                '  "description": "상세 모듈 설명",',
                '  "functions": [',
                "    {",
                '      "name": "함수명",',
                '      "purpose": "함수 목적",',
                '      "parameters": ["매개변수 목록"],',
                '      "returnValue": "반환값 설명",',
                '      "designSpec": "설계 명세",',
                '      "functionDefinition": "함수 정의",',
                '      "remarks": "비고",',
                '      "testCases": ["테스트 케이스 목록"]',
                "    }",
                "  ]",
                "}",
                "",
                "모듈당 3-5개의 함수를 포함해주세요.",
            ]
        )


class RefinePrompt(BasePrompt):
    """Asks for a modified whole specification.

    Inputs: modification_request, action_type, module_names (list), specification (mapping).
    """

    expected_shape = "object"

    def body_en(self, *, inputs: Mapping[str, object]) -> str:
        return "\n".join(
            [
                "Please modify the current specification according to this request:",
                "",
                f"Request: {_get_str(inputs, 'modification_request')}",
                f"Action type: {_get_str(inputs, 'action_type') or 'auto'}",
                "",
                f"Current specification modules: {', '.join(_get_names(inputs, 'module_names'))}",
                "",
                "Current specification:",
                _dump(inputs.get("specification") or {}),
                "",
                'Return the complete modified specification with the same structure, including a "modules" array.',
            ]
        )

    def body_ko(self, *, inputs: Mapping[str, object]) -> str:
        return "\n".join(
            [
                "다음 요청에 따라 현재 명세서를 수정해주세요:",
                "",
                f"요청: {_get_str(inputs, 'modification_request')}",
                f"작업 유형: {_get_str(inputs, 'action_type') or 'auto'}",
                "",
                f"현재 명세서 모듈: {', '.join(_get_names(inputs, 'module_names'))}",
                "",
                "현재 명세서:",
                _dump(inputs.get("specification") or {}),
                "",
                '같은 구조로 수정된 전체 명세서를 반환하고, 반드시 "modules" 배열을 포함해주세요.',
            ]
        )
