"""Classify a model reply as plain text or a structured file-generation envelope."""

from pathlib import Path
from typing import Optional, Union

import structlog
from pydantic import ValidationError

from tfassist.schemas.output import AgentOutput

logger = structlog.get_logger(__name__)


def parse_agent_output(text: str) -> Optional[AgentOutput]:
    """
    Decode the whole reply as a `{"files": [...], "summary": "..."}` object.

    Markdown fences are not stripped: the model is instructed to emit bare
    JSON, and anything else is treated as prose.

    Args:
        text: Fully accumulated model reply

    Returns:
        Parsed AgentOutput, or None if the text is not a valid envelope.
    """
    if not text or not text.strip():
        return None

    try:
        return AgentOutput.model_validate_json(text)
    except ValidationError as e:
        logger.debug("Reply is not a file envelope", preview=text[:200], errors=e.error_count())
        return None


def classify_output(
    text: str,
    workspace_dir: Union[str, Path, None],
) -> Optional[AgentOutput]:
    """
    Decide whether a reply should be materialized as files.

    Classification is only attempted when a workspace directory was supplied.

    Returns:
        The parsed AgentOutput for a structured reply with at least one file,
        otherwise None (plain text; use the reply text unmodified).
    """
    if not workspace_dir:
        return None

    output = parse_agent_output(text)
    if output is None or not output.files:
        return None

    logger.info("Reply classified as file envelope", files=len(output.files))
    return output
