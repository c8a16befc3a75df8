"""Version parsing and requirement handling.

Cargo versions are strict semantic versions, while manifest requirements
wrap a version in an optional comparison operator ("^1.3.0", "=1.3.0",
"~1.3", ">= 1.3.0").
"""

from __future__ import annotations

import re

import semver

# One optional comparator followed by a single version. Ranges with commas
# and wildcard requirements deliberately fail to match.
_REQUIREMENT = re.compile(
    r"^(?P<prefix>\s*(?:[=^~]|[<>]=?)?\s*)"
    r"(?P<version>[0-9][0-9A-Za-z.+\-]*)"
    r"(?P<suffix>\s*)$"
)


def is_valid_version(version_str: str) -> bool:
    """Return True if version_str is a complete semantic version.

    Examples:
        "1.2.3" → True
        "1.2.3-alpha.1+build" → True
        "1.2" → False
    """
    return semver.Version.is_valid(version_str)


def split_requirement(requirement: str) -> tuple[str, str, str] | None:
    """Split a single-comparator requirement into (prefix, version, suffix).

    The prefix keeps the operator and any whitespace around it so the
    requirement can be reassembled byte-for-byte.

    Examples:
        "1.3.0" → ("", "1.3.0", "")
        "^1.3.0" → ("^", "1.3.0", "")
        ">= 1.3.0" → (">= ", "1.3.0", "")
        ">=1.3.0, <2.0.0" → None
        "1.*" → None
    """
    match = _REQUIREMENT.match(requirement)
    if not match:
        return None
    return match.group("prefix"), match.group("version"), match.group("suffix")

