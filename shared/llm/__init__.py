"""
LLM Provider Module
===================

Abstraction layer over hosted language-model completion endpoints.

Supported providers:
- OpenAI (default)
- Anthropic Claude

Usage:
    from shared.llm import get_llm_provider, LLMMessage

    provider = get_llm_provider()

    response = await provider.complete(
        messages=[
            LLMMessage(role="system", content="You are a compliance expert."),
            LLMMessage(role="user", content="Classify these rules..."),
        ]
    )
    print(response.content)
"""

from shared.llm.provider import (
    LLMProvider,
    LLMMessage,
    LLMResponse,
    LLMUsage,
    MessageRole,
    get_llm_provider,
    parse_json_payload,
    reset_llm_provider,
    set_llm_provider,
)

__all__ = [
    "LLMProvider",
    "LLMMessage",
    "LLMResponse",
    "LLMUsage",
    "MessageRole",
    "get_llm_provider",
    "parse_json_payload",
    "reset_llm_provider",
    "set_llm_provider",
]
