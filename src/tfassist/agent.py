"""
Terraform assistant: assembles the model context for a query, streams the
reply, and either writes generated files or returns the text answer.
"""

import sys
import threading
from pathlib import Path
from typing import Iterator, Optional, Protocol, Sequence, TextIO, Union

import structlog

from tfassist import budget
from tfassist.config import AgentConfig
from tfassist.errors import ConfigurationError, StreamError, check_cancelled
from tfassist.history import ConversationStore, record_exchange
from tfassist.materializer import apply_files
from tfassist.output_parser import classify_output
from tfassist.prompts import SYSTEM_PROMPT
from tfassist.retrieval import Retriever, render_knowledge_context
from tfassist.schemas.messages import Message, StreamFragment, TurnRole
from tfassist.streaming import collect_stream
from tfassist.workspace import render_workspace_context, scan_workspace

logger = structlog.get_logger(__name__)

WorkspaceDir = Union[str, Path, None]


class ChatModel(Protocol):
    """Turns a message sequence into a streamed reply."""

    def stream(self, messages: Sequence[Message]) -> Iterator[StreamFragment]:
        ...


def workspace_key(workspace_dir: WorkspaceDir) -> str:
    """Key used to scope conversation history; empty when no workspace is given."""
    return str(workspace_dir) if workspace_dir else ""


class TerraformAgent:
    """
    Query pipeline for the assistant.

    Steps per query:
    1. Assemble: system prompt, trimmed history, knowledge, workspace, user message
    2. Stream: collect the model reply into one buffer
    3. Classify: file envelope or plain text
    4. Apply: write files (envelope) or emit text and record the turn
    """

    def __init__(
        self,
        model: Optional[ChatModel],
        config: Optional[AgentConfig] = None,
        retriever: Optional[Retriever] = None,
        history: Optional[ConversationStore] = None,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        if model is None:
            raise ConfigurationError("agent: chat model must not be None")
        self.model = model
        self.config = config or AgentConfig()
        self.retriever = retriever
        self.history = history
        self.system_prompt = system_prompt

    def query(
        self,
        user_message: str,
        workspace_dir: WorkspaceDir = None,
        output: Optional[TextIO] = None,
        cancel: Optional[threading.Event] = None,
    ) -> bool:
        """
        Answer one user message.

        Args:
            user_message: The user's request
            workspace_dir: Absolute workspace path; enables the workspace
                snapshot and file generation
            output: Sink for the answer text or generation summary (default: stdout)
            cancel: Optional event that aborts the query at the next I/O boundary

        Returns:
            True if generated files were written, False for a text answer.

        Raises:
            StreamError: The model stream failed.
            ConfinementError: A generated path escaped the workspace.
            MaterializationError: Writing a generated file failed.
            QueryCancelledError: The cancel event was set.
        """
        output = output if output is not None else sys.stdout
        key = workspace_key(workspace_dir)

        with structlog.contextvars.bound_contextvars(workspace=key or None):
            messages = self.build_messages(user_message, workspace_dir, cancel=cancel)
            text = collect_stream(self._open_stream(messages), cancel=cancel)

            result = classify_output(text, workspace_dir)
            if result is not None:
                # Generated files are not recorded in conversation history
                apply_files(result, workspace_dir, cancel=cancel)
                output.write(result.summary)
                return True

            output.write(text)

            if self.history is not None:
                record_exchange(self.history, key, user_message, text)

            return False

    def build_messages(
        self,
        user_message: str,
        workspace_dir: WorkspaceDir = None,
        cancel: Optional[threading.Event] = None,
    ) -> list[Message]:
        """
        Assemble the ordered message sequence for one query.

        Returns:
            [system, *trimmed_history, knowledge?, workspace?, user]
        """
        system_message = Message.system(self.system_prompt)
        history_messages = self._load_history(workspace_key(workspace_dir), cancel)

        context_messages: list[Message] = []

        knowledge = self._knowledge_message(user_message, cancel)
        if knowledge is not None:
            context_messages.append(knowledge)

        if workspace_dir:
            snapshot = scan_workspace(Path(workspace_dir), cancel=cancel)
            if snapshot:
                context_messages.append(Message.system(render_workspace_context(snapshot)))

        user = Message.user(user_message)
        fixed = [system_message, *context_messages, user]
        max_tokens = self.config.max_context_tokens

        if not budget.fits(fixed, max_tokens):
            logger.warning(
                "Fixed context exceeds token budget",
                estimated_tokens=budget.estimate_messages(fixed),
                max_tokens=max_tokens,
            )

        trimmed = budget.trim_history(fixed, history_messages, max_tokens)
        dropped = len(history_messages) - len(trimmed)
        if dropped > 0:
            logger.warning(
                "Dropped history messages to fit context window",
                dropped=dropped,
                retained=len(trimmed),
                max_tokens=max_tokens,
            )

        return [system_message, *trimmed, *context_messages, user]

    def _load_history(self, key: str, cancel: Optional[threading.Event]) -> list[Message]:
        """Load prior turns as messages; failures degrade to no history."""
        if self.history is None:
            return []

        check_cancelled(cancel, "history load")
        try:
            turns = self.history.recent(key, self.config.history_depth * 2)
        except Exception as e:
            logger.warning("Failed to load conversation history", error=str(e))
            return []

        messages = []
        for turn in turns:
            if turn.role == TurnRole.USER.value:
                messages.append(Message.user(turn.content))
            elif turn.role == TurnRole.ASSISTANT.value:
                messages.append(Message.assistant(turn.content))
            else:
                logger.debug("Skipping turn with unknown role", role=turn.role)
        return messages

    def _knowledge_message(
        self,
        user_message: str,
        cancel: Optional[threading.Event],
    ) -> Optional[Message]:
        """Retrieve reference documents; failures degrade to no knowledge context."""
        if self.retriever is None:
            return None

        check_cancelled(cancel, "retrieval")
        try:
            documents = self.retriever.retrieve(user_message, self.config.retriever_top_k)
        except Exception as e:
            logger.warning("Retrieval failed, continuing without context", error=str(e))
            return None

        if not documents:
            return None

        logger.debug("Retrieved reference documents", count=len(documents))
        return Message.system(render_knowledge_context(documents))

    def _open_stream(self, messages: list[Message]) -> Iterator[StreamFragment]:
        try:
            return self.model.stream(messages)
        except Exception as e:
            logger.error("Failed to open model stream", error=str(e))
            raise StreamError(f"stream failed: {e}") from e
