from __future__ import annotations

from dataclasses import dataclass

from sdsgen.core.types import JSON
from sdsgen.errors import ValidationError
from .types import ProviderDescriptor, ProviderRequest


@dataclass(frozen=True)
class OpenAIChatProvider(ProviderDescriptor):
    """Chat Completions wire format (OpenAI and compatible APIs such as Perplexity).

    Bearer token auth; text in choices[0].message.content.
    """

    def build_request(self, prompt: str, credential: str) -> ProviderRequest:
        return ProviderRequest(
            url=self.endpoint,
            headers={"Authorization": f"Bearer {credential}"},
            payload={
                "model": self.model,
                "messages": [{"role": "user", "content": prompt}],
                "max_tokens": int(self.max_tokens),
            },
        )

    def extract_text(self, body: JSON) -> str:
        choices = body.get("choices")
        if isinstance(choices, list) and choices:
            c0 = choices[0]
            if isinstance(c0, dict):
                msg = c0.get("message")
                if isinstance(msg, dict):
                    content = msg.get("content")
                    if isinstance(content, str) and content:
                        return content
        raise ValidationError(f"Invalid response format from {self.display} API", field="response_content")
