"""chat_pipeline
=================

The authenticated chat-turn pipeline.

A turn runs in four sequential steps, each depending on the previous one:

1. **Ownership**: a single owner-filtered project lookup. A miss is reported
   as :class:`NotFoundOrForbidden` whether the project is missing or foreign.
2. **Completion**: one call to the injected :class:`CompletionProvider` with a
   fixed system prompt, temperature and output cap.
3. **Fallback**: provider credential and quota failures end the request;
   every other provider failure is replaced by an echo reply with zero tokens.
4. **Persistence**: exactly one :class:`ChatTurn` row is written and returned.

Nothing is written before step 4, so validation, ownership and upstream
errors never leave partial state behind.
"""

import logging
from typing import Protocol

from projectchat.api.completion import Completion, CompletionProvider
from projectchat.api.models import MAX_MESSAGE_LENGTH
from projectchat.database.config.config import settings
from projectchat.database.daos import HISTORY_LIMIT
from projectchat.database.entities import ChatTurn, Project
from projectchat.errors import (
    NotFoundOrForbidden,
    PersistenceError,
    UpstreamAuthError,
    UpstreamQuotaError,
    ValidationError,
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant in a chatbot platform. "
    "Keep responses concise, friendly, and relevant to the user's message."
)

USER_ROLE = "user"


def fallback_response(message: str) -> str:
    """Deterministic reply used when the provider fails transiently."""
    return f'Sorry, AI is temporarily unavailable. Echo: "{message}"'


class ProjectStore(Protocol):
    def find_owned(self, project_id: str, owner_id: str, expand: bool = False) -> Project | None: ...


class TurnStore(Protocol):
    def insert(self, turn: ChatTurn) -> ChatTurn: ...

    def query_by_project_and_owner(
        self, project_id: str, owner_id: str, limit: int = HISTORY_LIMIT, expand: bool = False
    ) -> list[ChatTurn]: ...


class ChatPipeline:
    """Orchestrates one chat turn and reads back a project's history.

    Args:
        projects: Store used for the ownership lookup.
        turns: Store the finished turn is written to.
        provider: Completion capability; tests substitute a deterministic fake.
        model_name: Model identifier recorded on every turn.
        temperature: Sampling temperature sent to the provider.
        max_output_tokens: Output length cap sent to the provider.
    """

    def __init__(
        self,
        projects: ProjectStore,
        turns: TurnStore,
        provider: CompletionProvider,
        model_name: str | None = None,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ):
        self.projects = projects
        self.turns = turns
        self.provider = provider
        self.model_name = model_name or settings.OPEN_AI_MODEL
        self.temperature = settings.CHAT_TEMPERATURE if temperature is None else temperature
        self.max_output_tokens = max_output_tokens or settings.CHAT_MAX_TOKENS

    @staticmethod
    def validate_message(message: str | None) -> str:
        """Trim the message and enforce its length bounds.

        Returns:
            str: The trimmed message.

        Raises:
            ValidationError: If the trimmed message is empty or longer than
                ``MAX_MESSAGE_LENGTH`` characters.
        """
        text = (message or "").strip()
        if not text:
            raise ValidationError("message required")
        if len(text) > MAX_MESSAGE_LENGTH:
            raise ValidationError(f"message must be at most {MAX_MESSAGE_LENGTH} characters")
        return text

    def generate(self, message: str) -> Completion:
        """Call the provider, degrading any failure other than credentials or
        quota (a timeout, a dropped connection) to an echo reply.

        Raises:
            UpstreamAuthError: The provider rejected the configured credentials.
            UpstreamQuotaError: The provider reports exhausted credits.
        """
        try:
            return self.provider.complete(
                SYSTEM_PROMPT,
                message,
                temperature=self.temperature,
                max_output_tokens=self.max_output_tokens,
            )
        except (UpstreamAuthError, UpstreamQuotaError):
            raise
        except Exception as e:
            logger.warning("Completion provider unavailable, using fallback: %r", e)
            return Completion(text=fallback_response(message), tokens_used=0)

    def handle_turn(self, caller_id: str, project_id: str, message: str | None) -> ChatTurn:
        """Run one chat turn for an already verified caller.

        Args:
            caller_id: Id of the authenticated user.
            project_id: Id of the target project, taken from the request path.
            message: Raw user input.

        Returns:
            ChatTurn: The persisted turn.

        Raises:
            ValidationError, NotFoundOrForbidden, UpstreamAuthError,
            UpstreamQuotaError, PersistenceError
        """
        text = self.validate_message(message)

        if self.projects.find_owned(project_id, caller_id) is None:
            raise NotFoundOrForbidden()

        completion = self.generate(text)

        turn = ChatTurn(
            project_id=project_id,
            user_id=caller_id,
            message=text,
            response=completion.text,
            role=USER_ROLE,
            tokens=max(completion.tokens_used, 0),
            model=self.model_name,
        )
        try:
            saved = self.turns.insert(turn)
        except PersistenceError:
            # the completion has already been paid for at this point
            logger.error("Could not persist chat turn for project %s (tokens=%s)", project_id, turn.tokens)
            raise
        logger.info("Chat turn %s stored for project %s (tokens=%s)", saved.id, project_id, saved.tokens)
        return saved

    def list_turns(self, caller_id: str, project_id: str, expand: bool = False) -> list[ChatTurn]:
        """Latest turns of a project written by the caller, oldest first.

        A project the caller does not own simply yields an empty list.
        """
        return self.turns.query_by_project_and_owner(project_id, caller_id, limit=HISTORY_LIMIT, expand=expand)
