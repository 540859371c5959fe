# src/sdsgen/llm/registry.py
from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from sdsgen.errors import ConfigurationError
from .providers import AnthropicMessagesProvider, OpenAIChatProvider, ProviderDescriptor, TaskWeights

logger = logging.getLogger(__name__)


DEFAULT_PROVIDERS: tuple[ProviderDescriptor, ...] = (
    AnthropicMessagesProvider(
        name="claude",
        display="Claude",
        endpoint="https://api.anthropic.com/v1/messages",
        key_env="ANTHROPIC_API_KEY",
        model="claude-3-5-sonnet-20241022",
        performance=9,
        cost=6,
        reliability=9,
        specialties=("code", "analysis", "structured-output"),
    ),
    OpenAIChatProvider(
        name="openai",
        display="OpenAI",
        endpoint="https://api.openai.com/v1/chat/completions",
        key_env="OPENAI_API_KEY",
        model="gpt-4",
        performance=8,
        cost=7,
        reliability=8,
        specialties=("general", "creative", "code"),
    ),
    OpenAIChatProvider(
        name="perplexity",
        display="Perplexity",
        endpoint="https://api.perplexity.ai/chat/completions",
        key_env="PERPLEXITY_API_KEY",
        model="llama-3.1-sonar-large-128k-online",
        performance=7,
        cost=4,
        reliability=7,
        specialties=("research", "factual", "current-events"),
    ),
)

DEFAULT_TASK_WEIGHTS: dict[str, TaskWeights] = {
    "module-generation": TaskWeights(performance=0.4, cost=0.3, reliability=0.3),
    "specification": TaskWeights(performance=0.5, cost=0.2, reliability=0.3),
    "general": TaskWeights(performance=0.4, cost=0.4, reliability=0.2),
}


@dataclass(frozen=True)
class AvailableProvider:
    """A provider paired with the credential found for it."""

    descriptor: ProviderDescriptor
    credential: str = field(repr=False)

    @property
    def name(self) -> str:
        return self.descriptor.name


@dataclass(frozen=True)
class ProviderRegistry:
    """Holds the provider descriptors (registry order matters for ties) and task weights."""

    providers: Sequence[ProviderDescriptor] = DEFAULT_PROVIDERS
    task_weights: Mapping[str, TaskWeights] = field(default_factory=lambda: dict(DEFAULT_TASK_WEIGHTS))

    def get(self, name: str) -> ProviderDescriptor | None:
        wanted = name.strip().lower()
        for p in self.providers:
            if p.name == wanted:
                return p
        return None

    def weights_for(self, task_type: str) -> TaskWeights:
        return self.task_weights.get(task_type) or self.task_weights["general"]

    def available(self, environ: Mapping[str, str] | None = None) -> list[AvailableProvider]:
        """Returns the providers whose credential variable is set, in registry order."""
        env = os.environ if environ is None else environ
        out: list[AvailableProvider] = []
        for p in self.providers:
            key = str(env.get(p.key_env) or "").strip()
            if key:
                out.append(AvailableProvider(descriptor=p, credential=key))
        return out

    def select(
        self,
        task_type: str = "general",
        *,
        environ: Mapping[str, str] | None = None,
        preferred: str | None = None,
    ) -> AvailableProvider:
        """Picks one provider for a call.

        Preference wins whenever the preferred provider has a credential.
        Otherwise the highest weighted score wins; max() keeps the first of
        equal scores, so ties go to registry order.
        """
        candidates = self.available(environ)
        if not candidates:
            keys = ", ".join(p.key_env for p in self.providers)
            raise ConfigurationError(f"No API keys configured. Set at least one of: {keys}")

        if preferred:
            wanted = preferred.strip().lower()
            for c in candidates:
                if c.name == wanted:
                    return c

        weights = self.weights_for(task_type)
        return max(candidates, key=lambda c: c.descriptor.score(weights))


def select_provider(
    task_type: str = "general",
    *,
    registry: ProviderRegistry | None = None,
    environ: Mapping[str, str] | None = None,
    preferred: str | None = None,
) -> AvailableProvider:
    return (registry or ProviderRegistry()).select(task_type, environ=environ, preferred=preferred)
