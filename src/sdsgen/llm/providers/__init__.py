from .anthropic_messages import AnthropicMessagesProvider
from .openai_chat import OpenAIChatProvider
from .types import ProviderDescriptor, ProviderRequest, TaskWeights

__all__ = [
    "AnthropicMessagesProvider",
    "OpenAIChatProvider",
    "ProviderDescriptor",
    "ProviderRequest",
    "TaskWeights",
]
