"""Write generated files to disk, confined to the workspace root."""

import os
import threading
from pathlib import Path
from typing import Optional, Union

import structlog

from tfassist.errors import ConfinementError, MaterializationError, check_cancelled
from tfassist.schemas.output import AgentOutput

logger = structlog.get_logger(__name__)


def confine_to_dir(root: Union[str, Path], relative_path: str) -> str:
    """
    Resolve relative_path under root, refusing anything that escapes it.

    The comparison appends a separator to both sides so a sibling such as
    /tmp/foobar is not mistaken for a child of /tmp/foo.

    Args:
        root: Workspace root directory
        relative_path: Path supplied by the model

    Returns:
        The normalized absolute target path.

    Raises:
        ConfinementError: If the target lies outside root or the path
            contains a NUL byte.
    """
    if "\x00" in relative_path:
        raise ConfinementError(relative_path)

    root_str = os.path.normpath(os.path.abspath(root))
    target = os.path.normpath(os.path.join(root_str, relative_path))

    if target != root_str and not (target + os.sep).startswith(root_str.rstrip(os.sep) + os.sep):
        raise ConfinementError(relative_path)
    return target


def apply_files(
    output: AgentOutput,
    workspace_root: Union[str, Path],
    cancel: Optional[threading.Event] = None,
) -> list[Path]:
    """
    Materialize every file in the envelope under workspace_root.

    All paths are validated before anything is written, so a single escaping
    path leaves the disk untouched for the whole batch.

    Args:
        output: Parsed file envelope
        workspace_root: Directory the files are confined to
        cancel: Optional cancellation event, checked before writing starts

    Returns:
        The written file paths, in envelope order.

    Raises:
        ConfinementError: If any path resolves outside workspace_root.
        MaterializationError: If a directory or file cannot be written.
    """
    targets = [(Path(confine_to_dir(workspace_root, f.path)), f) for f in output.files]

    check_cancelled(cancel, "materialization")

    written: list[Path] = []
    for target, generated in targets:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(generated.content, encoding="utf-8")
        except (OSError, ValueError) as e:
            logger.error("Failed to write generated file", path=generated.path, error=str(e))
            raise MaterializationError(f"failed to write {generated.path!r}: {getattr(e, 'strerror', None) or e}") from e
        written.append(target)
        logger.debug("Wrote generated file", path=generated.path, chars=len(generated.content))

    logger.info("Applied generated files", files=len(written))
    return written
