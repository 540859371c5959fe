from __future__ import annotations

from dataclasses import dataclass

from sdsgen.core.types import JSON
from sdsgen.errors import ValidationError
from .types import ProviderDescriptor, ProviderRequest

ANTHROPIC_VERSION = "2023-06-01"


@dataclass(frozen=True)
class AnthropicMessagesProvider(ProviderDescriptor):
    """Anthropic Messages API: x-api-key header, text in content[0].text."""

    def build_request(self, prompt: str, credential: str) -> ProviderRequest:
        return ProviderRequest(
            url=self.endpoint,
            headers={
                "x-api-key": credential,
                "anthropic-version": ANTHROPIC_VERSION,
            },
            payload={
                "model": self.model,
                "max_tokens": int(self.max_tokens),
                "messages": [{"role": "user", "content": prompt}],
            },
        )

    def extract_text(self, body: JSON) -> str:
        content = body.get("content")
        if isinstance(content, list) and content:
            first = content[0]
            if isinstance(first, dict):
                text = first.get("text")
                if isinstance(text, str) and text:
                    return text
        raise ValidationError(f"Invalid response format from {self.display} API", field="response_content")
