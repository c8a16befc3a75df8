"""Update pipeline: discover → rewrite manifests → rewrite lock → write.

This module orchestrates a single dependency update:
1. Discover the root manifest and every workspace member manifest
2. Rewrite matching declarations in each manifest (in memory)
3. Rewrite the package entry and its references in Cargo.lock (in memory)
4. Write every changed file atomically, only if all steps succeeded

Nothing touches the disk until step 4, so a failure at any point leaves
both the manifests and the lock file exactly as they were.
"""

from __future__ import annotations

import glob
from pathlib import Path

from .errors import NotFoundInManifest
from .lockfile import rewrite_lock
from .manifest import rewrite_manifest
from .models import DependencySpec, UpdateResult
from .toml import (
    get_workspace_member_globs,
    parse_document,
    read_text,
    write_files_atomically,
)

LOCK_FILENAME = "Cargo.lock"
MANIFEST_FILENAME = "Cargo.toml"


def step(msg: str) -> None:
    """Print a visually distinct step header."""
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def discover_manifests(manifest_path: Path) -> list[Path]:
    """Find the root manifest and all workspace member manifests.

    Reads [workspace].members from the root Cargo.toml and expands its
    glob patterns, skipping anything listed in [workspace].exclude and
    directories without a Cargo.toml.

    Returns:
        The root manifest first, then member manifests in sorted order.
    """
    root = manifest_path.parent
    doc = parse_document(read_text(manifest_path), str(manifest_path))
    member_globs, exclude_globs = get_workspace_member_globs(doc)

    excluded: set[Path] = set()
    for pattern in exclude_globs:
        for match in glob.glob(str(root / pattern)):
            excluded.add(Path(match).resolve())

    manifests = [manifest_path]
    seen = {manifest_path.resolve()}
    for pattern in member_globs:
        for match in sorted(glob.glob(str(root / pattern))):
            member_dir = Path(match)
            if member_dir.resolve() in excluded:
                continue
            candidate = member_dir / MANIFEST_FILENAME
            if candidate.is_file() and candidate.resolve() not in seen:
                seen.add(candidate.resolve())
                manifests.append(candidate)

    return manifests


def run_update(
    manifest_path: Path,
    name: str,
    version: str,
    new_version: str,
    *,
    allow_stale_checksum: bool = False,
    dry_run: bool = False,
) -> UpdateResult:
    """Pin ``name`` from ``version`` to ``new_version`` across a project.

    Args:
        manifest_path: Root Cargo.toml (a package or a workspace root).
        name: Crate to update.
        version: Exact version currently required and locked.
        new_version: Version to pin instead.
        allow_stale_checksum: Drop the lock file checksum instead of failing.
        dry_run: Compute every edit but write nothing.

    Raises:
        UpdateDepError: Any core error; no file is modified when raised.
    """
    step(f"Updating {name} {version} → {new_version}")
    result = UpdateResult(
        dependency=DependencySpec(name=name, version=version),
        new_version=new_version,
        dry_run=dry_run,
    )
    pending: dict[Path, str] = {}

    for path in discover_manifests(manifest_path):
        new_text, edits = rewrite_manifest(
            read_text(path), name, version, new_version, label=str(path)
        )
        if not edits:
            print(f"  {path}: no declaration of {name} {version}")
            continue
        pending[path] = new_text
        result.updated_manifests.append(str(path))
        result.manifest_edits[str(path)] = edits
        for edit in edits:
            print(f"  {path}: [{edit.table}] {edit.key} {edit.old} → {edit.new}")

    if not pending:
        raise NotFoundInManifest(name, version, new_version)

    lock_path = manifest_path.parent / LOCK_FILENAME
    if lock_path.is_file():
        new_lock, lock_edit = rewrite_lock(
            read_text(lock_path),
            name,
            version,
            new_version,
            allow_stale_checksum=allow_stale_checksum,
        )
        pending[lock_path] = new_lock
        result.lock_updated = True
        result.lock_edit = lock_edit
        print(f"  {lock_path}: {name} {version} → {new_version}")
        for dependent in lock_edit.dependents:
            print(f"    reference from {dependent}")
        if lock_edit.checksum_removed:
            print("    checksum removed")
    else:
        print(f"  {lock_path}: not found, skipping")

    if dry_run:
        step("Dry run: no files written")
        return result

    write_files_atomically(pending)
    step(f"Wrote {len(pending)} file(s)")
    return result
