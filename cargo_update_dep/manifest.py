"""Manifest editing: pin a dependency declaration in Cargo.toml.

A crate can be declared in several tables of the same manifest (normal,
dev and build dependencies, per-target tables, and the workspace-wide
[workspace.dependencies] table). Every declaration whose requirement names
the expected version is rewritten; anything else is left alone.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from .errors import MalformedDocument, NotFoundInManifest
from .models import ManifestEdit
from .toml import dump_document, parse_document, replace_string
from .versions import split_requirement

MANIFEST_LABEL = "Cargo.toml"

# Cargo still accepts the underscore spellings for backwards compatibility.
DEPENDENCY_KINDS = (
    "dependencies",
    "dev-dependencies",
    "build-dependencies",
    "dev_dependencies",
    "build_dependencies",
)


@dataclass
class Declaration:
    """A located version requirement inside a manifest.

    ``container[field]`` is the requirement string: for ``name = "1.0"`` the
    container is the dependency table itself and the field is the crate
    key, for table declarations it is the declaration and ``"version"``.
    """

    table: str
    key: str
    container: Any
    field: str
    requirement: str
    prefix: str = ""
    suffix: str = ""

    def with_version(self, new_version: str) -> str:
        """Reassemble the requirement around a new version."""
        return f"{self.prefix}{new_version}{self.suffix}"


def iter_dependency_tables(doc: Mapping[str, Any]) -> Iterator[tuple[str, Mapping]]:
    """Yield (dotted path, table) for every dependency table in a manifest.

    Covers:
    - [dependencies], [dev-dependencies], [build-dependencies]
    - [target.<cfg>.dependencies] and its dev/build variants
    - [workspace.dependencies]
    """
    for kind in DEPENDENCY_KINDS:
        table = doc.get(kind)
        if isinstance(table, Mapping):
            yield kind, table

    targets = doc.get("target")
    if isinstance(targets, Mapping):
        for cfg, target in targets.items():
            if not isinstance(target, Mapping):
                continue
            for kind in DEPENDENCY_KINDS:
                table = target.get(kind)
                if isinstance(table, Mapping):
                    yield f"target.{cfg}.{kind}", table

    workspace = doc.get("workspace")
    if isinstance(workspace, Mapping):
        table = workspace.get("dependencies")
        if isinstance(table, Mapping):
            yield "workspace.dependencies", table


def _declarations_of(table_path: str, table: Mapping, name: str) -> Iterator[Declaration]:
    for key, decl in list(table.items()):
        if isinstance(decl, str):
            if key == name:
                yield Declaration(table_path, key, table, key, str(decl))
        elif isinstance(decl, Mapping):
            # Renamed dependencies carry the real crate name in `package`
            if decl.get("package", key) != name:
                continue
            requirement = decl.get("version")
            if isinstance(requirement, str):
                yield Declaration(table_path, key, decl, "version", str(requirement))


def find_declarations(
    doc: Mapping[str, Any], name: str, version: str
) -> list[Declaration]:
    """Find every declaration of ``name`` whose requirement targets ``version``.

    A requirement matches when it is a single comparator ("1.3.0",
    "^1.3.0", "=1.3.0", "~1.3.0", ">=1.3.0") on exactly ``version``.
    Multi-comparator ranges, wildcards and other versions are skipped.
    """
    found: list[Declaration] = []
    for table_path, table in iter_dependency_tables(doc):
        for decl in _declarations_of(table_path, table, name):
            parts = split_requirement(decl.requirement)
            if parts is None or parts[1] != version:
                continue
            decl.prefix, _, decl.suffix = parts
            found.append(decl)
    return found


def rewrite_manifest(
    text: str, name: str, version: str, new_version: str, label: str = MANIFEST_LABEL
) -> tuple[str, list[ManifestEdit]]:
    """Rewrite every matching declaration of a dependency.

    Args:
        text: Manifest contents.
        name: Crate name (the real name, not a rename alias).
        version: Version currently required.
        new_version: Version to require instead.
        label: Name of the manifest used in error messages.

    Returns:
        Tuple of (new text, edits). With no matches the text is returned
        unchanged and the edit list is empty.

    Raises:
        MalformedDocument: If the manifest is not valid TOML.
    """
    try:
        doc = parse_document(text, label)
    except MalformedDocument as exc:
        raise MalformedDocument(
            exc.document, exc.detail, name, version, new_version
        ) from exc

    edits: list[ManifestEdit] = []
    for decl in find_declarations(doc, name, version):
        new_requirement = decl.with_version(new_version)
        replace_string(decl.container, decl.field, new_requirement)
        edits.append(
            ManifestEdit(
                table=decl.table, key=decl.key, old=decl.requirement, new=new_requirement
            )
        )

    if not edits:
        return text, edits
    return dump_document(doc), edits


def update_manifest(text: str, name: str, version: str, new_version: str) -> str:
    """Pin ``name`` from ``version`` to ``new_version`` in manifest text.

    Raises:
        NotFoundInManifest: If no dependency table declares the crate at
            the expected version.
        MalformedDocument: If the manifest is not valid TOML.
    """
    new_text, edits = rewrite_manifest(text, name, version, new_version)
    if not edits:
        raise NotFoundInManifest(name, version, new_version)
    return new_text
