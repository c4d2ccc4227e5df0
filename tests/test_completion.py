import httpx
import openai
import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from projectchat.api.completion import Completion, OpenAICompletionProvider, classify_provider_error
from projectchat.database.config.config import settings
from projectchat.errors import UpstreamAuthError, UpstreamQuotaError, UpstreamTransientError

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def _status_error(cls, status, code):
    return cls(
        f"Error code: {status}",
        response=httpx.Response(status, request=REQUEST),
        body={"message": "boom", "type": "error", "code": code},
    )


class FakeChatModel:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.invocations = []

    def invoke(self, messages, **kwargs):
        self.invocations.append((messages, kwargs))
        if self.error is not None:
            raise self.error
        return self.result


def _complete(llm):
    return OpenAICompletionProvider(llm=llm).complete("system", "hello", temperature=0.7, max_output_tokens=50)


def test_successful_completion_returns_text_and_usage():
    llm = FakeChatModel(
        AIMessage(
            content="  Hi there!  ",
            usage_metadata={"input_tokens": 20, "output_tokens": 5, "total_tokens": 25},
        )
    )

    assert _complete(llm) == Completion(text="Hi there!", tokens_used=25)

    messages, kwargs = llm.invocations[0]
    assert isinstance(messages[0], SystemMessage) and messages[0].content == "system"
    assert isinstance(messages[1], HumanMessage) and messages[1].content == "hello"
    assert kwargs == {"temperature": 0.7, "max_tokens": 50}


def test_usage_falls_back_to_response_metadata():
    llm = FakeChatModel(AIMessage(content="ok", response_metadata={"token_usage": {"total_tokens": 9}}))
    assert _complete(llm).tokens_used == 9


def test_missing_usage_counts_as_zero():
    assert _complete(FakeChatModel(AIMessage(content="ok"))).tokens_used == 0


@pytest.mark.parametrize(
    "error,expected",
    [
        (_status_error(openai.AuthenticationError, 401, "invalid_api_key"), UpstreamAuthError),
        (_status_error(openai.RateLimitError, 429, "insufficient_quota"), UpstreamQuotaError),
        (_status_error(openai.RateLimitError, 429, "rate_limit_exceeded"), UpstreamQuotaError),
        (_status_error(openai.InternalServerError, 500, None), UpstreamTransientError),
        (openai.APITimeoutError(request=REQUEST), UpstreamTransientError),
        (openai.APIConnectionError(request=REQUEST), UpstreamTransientError),
        (ConnectionResetError("peer reset"), UpstreamTransientError),
    ],
)
def test_provider_errors_are_classified(error, expected):
    with pytest.raises(expected) as excinfo:
        _complete(FakeChatModel(error=error))
    assert excinfo.value.__cause__ is error


def test_error_code_alone_is_enough_to_classify():
    class CodedError(Exception):
        code = "insufficient_quota"

    assert isinstance(classify_provider_error(CodedError()), UpstreamQuotaError)


@pytest.mark.parametrize("content", ["", "   ", ["not", "text"]])
def test_malformed_reply_is_transient(content):
    with pytest.raises(UpstreamTransientError):
        _complete(FakeChatModel(AIMessage(content=content)))


def test_missing_api_key_is_an_auth_error(monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "")

    with pytest.raises(UpstreamAuthError):
        OpenAICompletionProvider().complete("system", "hello", temperature=0.7, max_output_tokens=50)


def test_client_is_bounded_and_never_retries(monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "sk-test")

    llm = OpenAICompletionProvider().llm

    assert llm.request_timeout == settings.COMPLETION_TIMEOUT_SECONDS
    assert llm.max_retries == 0
    assert llm.model_name == settings.OPEN_AI_MODEL
