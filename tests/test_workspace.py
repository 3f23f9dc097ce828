"""Tests for the workspace snapshot."""

import threading

import pytest

from tfassist.errors import QueryCancelledError
from tfassist.workspace import WORKSPACE_CONTEXT_HEADER, render_workspace_context, scan_workspace


def _write(path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_collects_recognized_suffixes(tmp_path):
    _write(tmp_path / "main.tf", "resource {}")
    _write(tmp_path / "vars.tfvars", "region = \"eu\"")
    _write(tmp_path / "README.md", "# readme")
    _write(tmp_path / "main.tf.bak", "old")

    snapshot = scan_workspace(tmp_path)
    assert snapshot == {"main.tf": "resource {}", "vars.tfvars": "region = \"eu\""}


def test_recurses_with_relative_posix_paths(tmp_path):
    _write(tmp_path / "modules" / "s3" / "main.tf", "s3")
    _write(tmp_path / "main.tf", "root")

    snapshot = scan_workspace(tmp_path)
    assert set(snapshot) == {"main.tf", "modules/s3/main.tf"}


def test_sorted_traversal(tmp_path):
    for name in ["c.tf", "a.tf", "b.tf"]:
        _write(tmp_path / name, name)
    assert list(scan_workspace(tmp_path)) == ["a.tf", "b.tf", "c.tf"]


def test_skips_undecodable_files(tmp_path):
    _write(tmp_path / "ok.tf", "ok")
    (tmp_path / "binary.tf").write_bytes(b"\xff\xfe\x00bad")

    assert scan_workspace(tmp_path) == {"ok.tf": "ok"}


def test_missing_directory_is_empty(tmp_path):
    assert scan_workspace(tmp_path / "missing") == {}


def test_cancellation(tmp_path):
    _write(tmp_path / "main.tf", "x")
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(QueryCancelledError):
        scan_workspace(tmp_path, cancel=cancel)


def test_render_empty_snapshot():
    assert render_workspace_context({}) == ""


def test_render_delimits_each_file():
    rendered = render_workspace_context({"main.tf": "a", "modules/x/main.tf": "b"})
    assert rendered.startswith(WORKSPACE_CONTEXT_HEADER)
    assert "### main.tf\n```hcl\na\n```" in rendered
    assert "### modules/x/main.tf\n```hcl\nb\n```" in rendered
    assert rendered.index("### main.tf") < rendered.index("### modules/x/main.tf")
