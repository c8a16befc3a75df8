"""TOML reading and writing utilities.

Uses tomlkit to preserve formatting and comments when modifying Cargo.toml
and Cargo.lock files. Only the values we replace change; every other byte
of the document round-trips unchanged.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import ParseError
from tomlkit.items import String

from .errors import MalformedDocument


def parse_document(text: str, label: str) -> tomlkit.TOMLDocument:
    """Parse TOML text into a format-preserving document.

    Args:
        text: Raw file contents.
        label: Name used in error messages, e.g. "Cargo.lock".

    Raises:
        MalformedDocument: If the text is not valid TOML.
    """
    try:
        return tomlkit.parse(text)
    except ParseError as exc:
        raise MalformedDocument(label, str(exc)) from exc


def read_text(path: Path) -> str:
    """Read a file without newline translation so CRLF files round-trip.

    Raises:
        MalformedDocument: If the file is not valid UTF-8, which TOML
            requires.
    """
    try:
        with open(path, encoding="utf-8", newline="") as fh:
            return fh.read()
    except UnicodeDecodeError as exc:
        raise MalformedDocument(str(path), str(exc)) from exc


def dump_document(doc: tomlkit.TOMLDocument) -> str:
    """Render a document back to text, preserving original formatting."""
    return tomlkit.dumps(doc)


def string_like(original: Any, value: str) -> String:
    """Build a TOML string that keeps the quoting style of ``original``.

    A literal ('...') string stays literal and a basic ("...") string stays
    basic, so the rewritten line differs only in the string contents.
    """
    if isinstance(original, String):
        return tomlkit.string(
            value,
            literal=original.type.is_literal(),
            multiline=original.type.is_multiline(),
        )
    return tomlkit.string(value)


def replace_string(container: Any, key: str, value: str) -> None:
    """Replace the string stored under ``key`` in place.

    tomlkit carries the old item's indentation, trailing comment and line
    ending over to the replacement.
    """
    container[key] = string_like(container[key], value)


def get_workspace_member_globs(doc: tomlkit.TOMLDocument) -> tuple[list[str], list[str]]:
    """Extract workspace member and exclude glob patterns from [workspace].

    Returns:
        Tuple of (members, exclude). Both are empty for a manifest that is
        not a workspace root.
    """
    workspace = doc.get("workspace", {})
    if not isinstance(workspace, Mapping):
        return [], []
    members = [str(m) for m in workspace.get("members", [])]
    exclude = [str(e) for e in workspace.get("exclude", [])]
    return members, exclude


def write_files_atomically(contents: Mapping[Path, str]) -> None:
    """Write several files so that either all of them change or none do.

    Every file is first written to a temporary sibling, then all
    temporaries are renamed over their targets. If staging fails the
    temporaries are removed and no target is touched.
    """
    staged: list[tuple[str, Path]] = []
    try:
        for path, text in contents.items():
            fd, tmp = tempfile.mkstemp(
                prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
            )
            staged.append((tmp, path))
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
                fh.write(text)
            if path.exists():
                os.chmod(tmp, path.stat().st_mode & 0o777)
    except BaseException:
        for tmp, _ in staged:
            Path(tmp).unlink(missing_ok=True)
        raise

    for tmp, path in staged:
        os.replace(tmp, path)
