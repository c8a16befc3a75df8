"""Lock file editing: move one locked package to a new version.

Cargo.lock lists every resolved package as a [[package]] table. Packages
refer to each other through their `dependencies` arrays, using a bare
"name" when only one version of that crate is locked and "name version"
(optionally followed by "(source)") when several versions coexist.

Older (v1) lock files additionally keep a [root] table for the root crate
and store checksums in a [metadata] table keyed by
"checksum name version (source)".
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

import tomlkit

from .errors import (
    AmbiguousLockEntry,
    ChecksumUnresolvable,
    MalformedDocument,
    NotFoundInLock,
)
from .models import DependencySpec, LockEdit, LockPackage
from .toml import dump_document, parse_document, replace_string, string_like

LOCK_LABEL = "Cargo.lock"

# Value v1 lock files record for packages without a checksum (git, path).
NO_CHECKSUM = "<none>"

_REFERENCE = re.compile(
    r"^(?P<name>[^\s(]+)(?: (?P<version>[^\s(]+))?(?: \((?P<source>.+)\))?$"
)


def parse_reference(ref: str) -> tuple[str, str | None, str | None]:
    """Split a dependency reference into (name, version, source).

    Examples:
        "serde" → ("serde", None, None)
        "serde 1.0.188" → ("serde", "1.0.188", None)
        "serde 1.0.188 (registry+https://...)" →
            ("serde", "1.0.188", "registry+https://...")
    """
    match = _REFERENCE.match(ref)
    if not match:
        return ref, None, None
    return match.group("name"), match.group("version"), match.group("source")


def format_reference(name: str, version: str | None = None, source: str | None = None) -> str:
    """Inverse of parse_reference()."""
    ref = name
    if version is not None:
        ref += f" {version}"
    if source is not None:
        ref += f" ({source})"
    return ref


def _package_tables(doc: tomlkit.TOMLDocument) -> list[Any]:
    """Collect the [root] table (v1 only) and every [[package]] table."""
    tables: list[Any] = []
    root = doc.get("root")
    if isinstance(root, Mapping):
        tables.append(root)
    packages = doc.get("package", [])
    if not isinstance(packages, list):
        raise MalformedDocument(LOCK_LABEL, "`package` must be an array of tables")
    tables.extend(packages)
    return tables


def _to_package(table: Any) -> LockPackage:
    if not isinstance(table, Mapping):
        raise MalformedDocument(LOCK_LABEL, "package entries must be tables")
    name = table.get("name")
    version = table.get("version")
    if not isinstance(name, str) or not isinstance(version, str):
        raise MalformedDocument(
            LOCK_LABEL, "every package needs string `name` and `version` fields"
        )
    source = table.get("source")
    checksum = table.get("checksum")
    return LockPackage(
        name=str(name),
        version=str(version),
        source=str(source) if isinstance(source, str) else None,
        checksum=str(checksum) if isinstance(checksum, str) else None,
        dependencies=[str(d) for d in table.get("dependencies", [])],
    )


def _metadata_checksums(
    doc: tomlkit.TOMLDocument, name: str, version: str
) -> list[tuple[str, str]]:
    """Return the v1 [metadata] checksum entries for one package."""
    metadata = doc.get("metadata")
    if not isinstance(metadata, Mapping):
        return []
    entries: list[tuple[str, str]] = []
    for key, value in metadata.items():
        if not key.startswith("checksum "):
            continue
        ref_name, ref_version, _ = parse_reference(key[len("checksum ") :])
        if ref_name == name and ref_version == version:
            entries.append((key, str(value)))
    return entries


def _parse_lock(
    text: str, name: str = "", version: str = "", new_version: str | None = None
) -> tuple[tomlkit.TOMLDocument, list[Any], list[LockPackage]]:
    try:
        doc = parse_document(text, LOCK_LABEL)
        tables = _package_tables(doc)
        packages = [_to_package(t) for t in tables]
    except MalformedDocument as exc:
        raise MalformedDocument(
            exc.document, exc.detail, name, version, new_version
        ) from exc
    return doc, tables, packages


def read_packages(text: str) -> list[LockPackage]:
    """Parse lock file text into its package entries, in file order.

    Raises:
        MalformedDocument: If the text is not valid TOML or an entry lacks
            its name or version.
    """
    _, _, packages = _parse_lock(text)
    return packages


def rewrite_lock(
    text: str,
    name: str,
    version: str,
    new_version: str,
    allow_stale_checksum: bool = False,
) -> tuple[str, LockEdit]:
    """Move ``name`` from ``version`` to ``new_version`` in lock file text.

    The package's `version` field is rewritten, and so is every
    "name version" reference to it from other packages. Bare "name"
    references follow the package's own version field and are left as
    they are. Other versions of the same crate are never touched.

    Args:
        text: Lock file contents.
        name: Crate name.
        version: Exact version currently locked.
        new_version: Version to lock instead.
        allow_stale_checksum: Drop the package's checksum instead of
            failing. The checksum of the new version can only come from
            the registry, so it is removed rather than left stale.

    Returns:
        Tuple of (new text, summary of the edit).

    Raises:
        NotFoundInLock: If no package matches name and version.
        AmbiguousLockEntry: If several packages match, or a package is
            already locked at ``new_version``.
        ChecksumUnresolvable: If the package has a checksum and
            ``allow_stale_checksum`` is False.
        MalformedDocument: If the lock file cannot be parsed.
    """
    doc, tables, packages = _parse_lock(text, name, version, new_version)

    matches = [
        i for i, pkg in enumerate(packages) if pkg.name == name and pkg.version == version
    ]
    if not matches:
        raise NotFoundInLock(name, version, new_version)
    if len(matches) > 1:
        raise AmbiguousLockEntry(
            f"package {name} {version} is locked {len(matches)} times; "
            "the lock file looks corrupt",
            name,
            version,
            new_version,
        )
    if any(pkg.name == name and pkg.version == new_version for pkg in packages):
        raise AmbiguousLockEntry(
            f"package {name} {new_version} is already locked; moving "
            f"{name} {version} there would create a duplicate entry",
            name,
            version,
            new_version,
        )

    target_table = tables[matches[0]]
    target = packages[matches[0]]
    metadata_checksums = _metadata_checksums(doc, name, version)
    has_checksum = target.checksum is not None or any(
        value != NO_CHECKSUM for _, value in metadata_checksums
    )
    if has_checksum and not allow_stale_checksum:
        raise ChecksumUnresolvable(name, version, new_version)

    # Every check has passed; from here on the document is mutated.
    replace_string(target_table, "version", new_version)
    if "checksum" in target_table:
        del target_table["checksum"]
    for key, _ in metadata_checksums:
        del doc["metadata"][key]

    dependents: list[str] = []
    for table, pkg in zip(tables, packages):
        deps = table.get("dependencies")
        if not isinstance(deps, list):
            continue
        rewritten = False
        for i, ref in enumerate(list(deps)):
            ref_name, ref_version, ref_source = parse_reference(str(ref))
            if ref_name != name or ref_version != version:
                continue
            if ref_source and target.source and ref_source != target.source:
                continue
            deps[i] = string_like(ref, format_reference(name, new_version, ref_source))
            rewritten = True
        if rewritten:
            dependents.append(DependencySpec(name=pkg.name, version=pkg.version).package_id)

    edit = LockEdit(
        package=DependencySpec(name=name, version=new_version),
        dependents=dependents,
        checksum_removed=has_checksum,
    )
    return dump_document(doc), edit


def update_lock(
    text: str,
    name: str,
    version: str,
    new_version: str,
    allow_stale_checksum: bool = False,
) -> str:
    """Like rewrite_lock(), returning only the new text."""
    new_text, _ = rewrite_lock(
        text, name, version, new_version, allow_stale_checksum=allow_stale_checksum
    )
    return new_text
