"""
Completion provider.

The chat pipeline only depends on the `CompletionProvider` protocol: a single
`complete` call that returns generated text plus token usage, or raises one of
`UpstreamAuthError`, `UpstreamQuotaError` or `UpstreamTransientError`.
`OpenAICompletionProvider` implements it on top of LangChain's `ChatOpenAI`.
"""

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import openai
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from projectchat.database.config.config import settings
from projectchat.errors import (
    ChatPlatformError,
    UpstreamAuthError,
    UpstreamQuotaError,
    UpstreamTransientError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Completion:
    text: str
    tokens_used: int = 0


class CompletionProvider(Protocol):
    def complete(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float,
        max_output_tokens: int,
    ) -> Completion: ...


def classify_provider_error(exc: Exception) -> ChatPlatformError:
    """
    Map an exception raised by the OpenAI client to the platform taxonomy.

    Credential problems and exhausted quota are reported to the caller; every
    other failure (network, timeout, unexpected payload) is transient.
    """
    code = getattr(exc, "code", None)
    if isinstance(exc, openai.AuthenticationError) or code == "invalid_api_key":
        return UpstreamAuthError()
    if isinstance(exc, openai.RateLimitError) or code == "insufficient_quota":
        return UpstreamQuotaError()
    return UpstreamTransientError(f"{type(exc).__name__}: {exc}")


def _total_tokens(result: Any) -> int:
    usage = getattr(result, "usage_metadata", None) or {}
    total = usage.get("total_tokens")
    if total is None:
        token_usage = (getattr(result, "response_metadata", None) or {}).get("token_usage") or {}
        total = token_usage.get("total_tokens", 0)
    try:
        return max(int(total or 0), 0)
    except (TypeError, ValueError):
        return 0


class OpenAICompletionProvider:
    """
    `CompletionProvider` backed by the OpenAI chat completions API.

    Args:
        llm: A pre-built chat model. When omitted one is created from
            `settings` with the configured timeout and no client-side retries,
            so a slow upstream turns into a transient failure instead of a
            hanging request.
    """

    def __init__(self, llm: Any = None):
        if llm is None and settings.API_KEY:
            llm = ChatOpenAI(
                model=settings.OPEN_AI_MODEL,
                api_key=settings.API_KEY,
                timeout=settings.COMPLETION_TIMEOUT_SECONDS,
                max_retries=0,
            )
        self.llm = llm

    def complete(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float,
        max_output_tokens: int,
    ) -> Completion:
        if self.llm is None:
            raise UpstreamAuthError("OpenAI API key is not configured")

        messages = [SystemMessage(content=system_prompt), HumanMessage(content=user_message)]
        try:
            result = self.llm.invoke(messages, temperature=temperature, max_tokens=max_output_tokens)
        except Exception as e:
            raise classify_provider_error(e) from e

        content = getattr(result, "content", None)
        if not isinstance(content, str) or not content.strip():
            raise UpstreamTransientError("Completion provider returned an empty or malformed message")
        return Completion(text=content.strip(), tokens_used=_total_tokens(result))
