from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict

from sdsgen.core.types import JSON


@dataclass(frozen=True)
class ProviderRequest:
    url: str
    headers: Dict[str, str]
    payload: JSON


@dataclass(frozen=True)
class TaskWeights:
    performance: float
    cost: float
    reliability: float


@dataclass(frozen=True)
class ProviderDescriptor(ABC):
    """Static description of one upstream text-generation API.

    Scores are integers in [0, 10]. A higher cost score means a more expensive
    provider, so it is inverted during selection.

    Subclasses own the wire format: build_request() produces the HTTP request
    for a single-prompt completion, extract_text() pulls the completion text
    out of a decoded response body and raises ValidationError when the
    expected field is missing.
    """

    name: str
    display: str
    endpoint: str
    key_env: str
    model: str
    performance: int
    cost: int
    reliability: int
    max_tokens: int = 4000
    specialties: tuple[str, ...] = field(default=())

    def score(self, weights: TaskWeights) -> float:
        return (
            self.performance * weights.performance
            + (10 - self.cost) * weights.cost
            + self.reliability * weights.reliability
        )

    @abstractmethod
    def build_request(self, prompt: str, credential: str) -> ProviderRequest:
        raise NotImplementedError

    @abstractmethod
    def extract_text(self, body: JSON) -> str:
        raise NotImplementedError
