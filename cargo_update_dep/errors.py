"""Errors raised while locating and rewriting a dependency.

Every error is raised before anything is written to disk, so callers can
report it and exit without worrying about half-updated files.
"""

from __future__ import annotations


class UpdateDepError(Exception):
    """Base class for all update failures.

    Attributes:
        name: The dependency being updated.
        version: The expected current version.
        new_version: The requested new version, when known.
    """

    def __init__(
        self, message: str, name: str, version: str, new_version: str | None = None
    ) -> None:
        super().__init__(message)
        self.name = name
        self.version = version
        self.new_version = new_version


class NotFoundInManifest(UpdateDepError):
    """No dependency table declares the package at the expected version."""

    def __init__(self, name: str, version: str, new_version: str | None = None) -> None:
        super().__init__(
            f"dependency {name} not found at version {version} in any manifest",
            name,
            version,
            new_version,
        )


class NotFoundInLock(UpdateDepError):
    """No lock file package matches the name and expected version."""

    def __init__(self, name: str, version: str, new_version: str | None = None) -> None:
        super().__init__(
            f"package {name} {version} not found in lock file",
            name,
            version,
            new_version,
        )


class AmbiguousLockEntry(UpdateDepError):
    """More than one lock entry would carry the same name and version."""


class ChecksumUnresolvable(UpdateDepError):
    """A checksum exists that cannot be recomputed without the registry."""

    def __init__(self, name: str, version: str, new_version: str | None = None) -> None:
        super().__init__(
            f"package {name} {version} has a checksum that requires external "
            "verification; pass --allow-stale-checksum to drop it",
            name,
            version,
            new_version,
        )


class MalformedDocument(UpdateDepError):
    """The manifest or lock text is not valid structured content.

    Attributes:
        document: Label of the offending document (e.g. "Cargo.lock").
        detail: The parser's own message.
    """

    def __init__(
        self,
        document: str,
        detail: str,
        name: str = "",
        version: str = "",
        new_version: str | None = None,
    ) -> None:
        super().__init__(f"{document} is malformed: {detail}", name, version, new_version)
        self.document = document
        self.detail = detail
