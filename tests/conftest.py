"""Shared fakes for the assistant pipeline tests."""

from typing import Iterator, Sequence

import pytest

from tfassist.history import SQLiteConversationStore
from tfassist.schemas.messages import Message, RetrievedDocument, StreamFragment


class FakeModel:
    """Chat model that replays a canned reply as fragments and records calls."""

    def __init__(self, reply: str = "", fragments: list[StreamFragment] | None = None):
        self.fragments = fragments if fragments is not None else [
            StreamFragment(role="assistant", content=""),
            StreamFragment(content=reply),
        ]
        self.calls: list[list[Message]] = []
        self.closed = False

    def stream(self, messages: Sequence[Message]) -> Iterator[StreamFragment]:
        self.calls.append(list(messages))
        return self._generate()

    def _generate(self) -> Iterator[StreamFragment]:
        try:
            yield from self.fragments
        finally:
            self.closed = True


class FakeRetriever:
    """Retriever returning fixed documents, or raising when error is set."""

    def __init__(self, documents: list[RetrievedDocument] | None = None, error: Exception | None = None):
        self.documents = documents or []
        self.error = error
        self.calls: list[tuple[str, int]] = []

    def retrieve(self, query: str, top_k: int) -> list[RetrievedDocument]:
        self.calls.append((query, top_k))
        if self.error is not None:
            raise self.error
        return self.documents[:top_k]


@pytest.fixture
def store():
    s = SQLiteConversationStore(":memory:")
    yield s
    s.close()
