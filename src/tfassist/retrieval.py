"""Retriever contract and knowledge-context rendering."""

from typing import Protocol, Sequence

from tfassist.schemas.messages import RetrievedDocument

KNOWLEDGE_CONTEXT_HEADER = (
    "## Relevant Terraform Documentation\n\n"
    "The following documentation excerpts are relevant to the user's query. "
    "Use them to inform your response where applicable.\n\n"
)


class Retriever(Protocol):
    """
    Fetches reference documents relevant to a query.

    Implementations must be safe to call from multiple threads.
    """

    def retrieve(self, query: str, top_k: int) -> list[RetrievedDocument]:
        ...


def render_knowledge_context(documents: Sequence[RetrievedDocument]) -> str:
    """Format retrieved documents, in the order returned, as one system-message body."""
    parts = [KNOWLEDGE_CONTEXT_HEADER]
    for i, doc in enumerate(documents, start=1):
        parts.append(f"### Source {i}: {doc.source}\n{doc.content}\n\n")
    return "".join(parts)
