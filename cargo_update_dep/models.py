"""Data models for cargo-update-dep.

These Pydantic models describe the dependency being updated and the edits
made to the manifest and lock file.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class DependencySpec(BaseModel):
    """A dependency name paired with one exact version.

    Used both as the search key (the current version) and as the
    replacement value (the new version).
    """

    name: str
    version: str

    @property
    def package_id(self) -> str:
        """The "name version" form used by Cargo.lock references."""
        return f"{self.name} {self.version}"


class LockPackage(BaseModel):
    """A single [[package]] entry of a Cargo.lock file.

    Attributes:
        name: Crate name.
        version: Exact locked version.
        source: Registry or git source, absent for path dependencies.
        checksum: Content hash recorded by the registry, if any.
        dependencies: Reference strings, either "name", "name version" or
            "name version (source)".
    """

    name: str
    version: str
    source: str | None = None
    checksum: str | None = None
    dependencies: list[str] = Field(default_factory=list)


class ManifestEdit(BaseModel):
    """One dependency declaration rewritten in a manifest.

    Attributes:
        table: Dotted path of the dependency table, e.g. "dev-dependencies"
            or "target.cfg(unix).dependencies".
        key: The declaration key, which differs from the package name for
            renamed dependencies.
        old: Requirement text before the edit, e.g. "^1.3.0".
        new: Requirement text after the edit, e.g. "^1.4.0".
    """

    table: str
    key: str
    old: str
    new: str


class LockEdit(BaseModel):
    """Summary of a Cargo.lock rewrite.

    Attributes:
        package: The updated package at its new version.
        dependents: Package ids whose dependency references were rewritten.
        checksum_removed: True if a stale checksum was dropped.
    """

    package: DependencySpec
    dependents: list[str] = Field(default_factory=list)
    checksum_removed: bool = False


class UpdateResult(BaseModel):
    """Outcome of a full update across manifests and the lock file."""

    dependency: DependencySpec
    new_version: str
    updated_manifests: list[str] = Field(default_factory=list)
    manifest_edits: dict[str, list[ManifestEdit]] = Field(default_factory=dict)
    lock_updated: bool = False
    lock_edit: LockEdit | None = None
    dry_run: bool = False
