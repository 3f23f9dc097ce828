"""Workspace snapshot: collect Terraform files so the model can read and modify them."""

import os
import threading
from pathlib import Path
from typing import Optional

import structlog

from tfassist.errors import check_cancelled

logger = structlog.get_logger(__name__)

# File suffixes included in the workspace snapshot
WORKSPACE_SUFFIXES = (".tf", ".tfvars")

WORKSPACE_CONTEXT_HEADER = (
    "## Current Workspace Files\n\n"
    "The following Terraform files are currently in the workspace. "
    "When the user asks to modify, update, or extend the configuration, "
    "use these as the base and return the full updated file contents in the JSON envelope.\n\n"
)


def scan_workspace(
    workspace_dir: Path,
    cancel: Optional[threading.Event] = None,
) -> dict[str, str]:
    """
    Read every recognized Terraform file under workspace_dir.

    Best-effort: unreadable directories and files (permissions, invalid
    UTF-8) are skipped. Traversal is sorted so the snapshot is deterministic.

    Args:
        workspace_dir: Root directory to scan
        cancel: Optional cancellation event, checked per file

    Returns:
        Mapping of POSIX relative path -> file content, in traversal order.
    """
    root = Path(workspace_dir)
    snapshot: dict[str, str] = {}

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for name in sorted(filenames):
            if not name.endswith(WORKSPACE_SUFFIXES):
                continue
            check_cancelled(cancel, "workspace scan")
            path = Path(dirpath) / name
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                continue
            snapshot[path.relative_to(root).as_posix()] = content

    logger.debug("Scanned workspace", workspace_dir=str(root), files=len(snapshot))
    return snapshot


def render_workspace_context(snapshot: dict[str, str]) -> str:
    """
    Format a workspace snapshot as one system-message body.

    Returns:
        Rendered context, or an empty string when the snapshot is empty.
    """
    if not snapshot:
        return ""

    sections = [f"### {rel_path}\n```hcl\n{content}\n```\n\n" for rel_path, content in snapshot.items()]
    return WORKSPACE_CONTEXT_HEADER + "".join(sections)
