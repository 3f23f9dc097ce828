"""Collect a streamed model reply into a single text buffer."""

import contextlib
import threading
from typing import ContextManager, Iterator, Optional

import structlog

from tfassist.errors import StreamError, check_cancelled
from tfassist.schemas.messages import StreamFragment

logger = structlog.get_logger(__name__)


def _closing(stream: Iterator[StreamFragment]) -> ContextManager:
    if hasattr(stream, "close"):
        return contextlib.closing(stream)
    return contextlib.nullcontext(stream)


def collect_stream(
    stream: Iterator[StreamFragment],
    cancel: Optional[threading.Event] = None,
) -> str:
    """
    Drain a single-pass fragment stream into one string.

    The stream is closed on every exit path: success, error or cancellation.
    Fragments with empty content (role or usage metadata) are ignored.

    Args:
        stream: Iterator of StreamFragment, exhausted at end of reply
        cancel: Optional event; when set, reading stops before the next fragment

    Returns:
        The concatenated fragment contents, in arrival order.

    Raises:
        StreamError: If reading the stream fails.
        QueryCancelledError: If the cancel event is set mid-stream.
    """
    parts: list[str] = []
    fragment_count = 0

    with _closing(stream):
        iterator = iter(stream)
        while True:
            check_cancelled(cancel, "streaming")
            try:
                fragment = next(iterator)
            except StopIteration:
                break
            except Exception as e:
                logger.error("Stream receive failed", fragments=fragment_count, error=str(e))
                raise StreamError(f"stream receive error: {e}") from e

            fragment_count += 1
            if fragment.content:
                parts.append(fragment.content)

    text = "".join(parts)
    logger.debug("Stream complete", fragments=fragment_count, response_length=len(text))
    return text
