"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

CRATES_IO = "registry+https://github.com/rust-lang/crates.io-index"

MANIFEST = """\
[package]
name = "app"
version = "0.1.0"
edition = "2021"

[dependencies]
# pinned until the next audit
serde = "1.3.0"   # keep in sync with dev-dependencies
tokio = { version = "^1.3.0", features = ["full"] }
rand = ">=1.3.0, <2.0.0"
helper = { path = "../helper" }
json = { package = "serde_json", version = "~1.3.0" }
rand_legacy = { package = "rand", version = "0.7.3" }

[dependencies.log]
version = '=1.3.0'
default-features = false

[dev-dependencies]
serde = { version = "1.3.0", features = ["derive"] }

[target.'cfg(unix)'.dependencies]
tokio = "1.3.0"
"""

LOCK = f"""\
# This file is automatically @generated by Cargo.
# It is not intended for manual editing.
version = 3

[[package]]
name = "app"
version = "0.1.0"
dependencies = [
 "helper",
 "rand 0.7.3",
 "rand 0.8.5",
 "serde",
]

[[package]]
name = "helper"
version = "0.1.0"
dependencies = [
 "rand 0.8.5",
]

[[package]]
name = "rand"
version = "0.7.3"
source = "{CRATES_IO}"
checksum = "aaaa"

[[package]]
name = "rand"
version = "0.8.5"
source = "{CRATES_IO}"
checksum = "bbbb"

[[package]]
name = "serde"
version = "1.3.0"
source = "{CRATES_IO}"
checksum = "cccc"

[[package]]
name = "vendored"
version = "0.2.0"
source = "git+https://example.com/vendored.git#0123abcd"
"""

LOCK_V1 = f"""\
[root]
name = "app"
version = "0.1.0"
dependencies = [
 "serde 1.3.0 ({CRATES_IO})",
 "vendored 0.2.0 (git+https://example.com/vendored.git#0123abcd)",
]

[[package]]
name = "serde"
version = "1.3.0"
source = "{CRATES_IO}"

[[package]]
name = "vendored"
version = "0.2.0"
source = "git+https://example.com/vendored.git#0123abcd"

[metadata]
"checksum serde 1.3.0 ({CRATES_IO})" = "cccc"
"checksum vendored 0.2.0 (git+https://example.com/vendored.git#0123abcd)" = "<none>"
"""

WORKSPACE_MANIFEST = """\
[workspace]
members = ["crates/*"]
exclude = ["crates/experimental"]

[workspace.dependencies]
serde = "1.3.0"
"""


@pytest.fixture
def manifest_text() -> str:
    return MANIFEST


@pytest.fixture
def lock_text() -> str:
    return LOCK


@pytest.fixture
def lock_v1_text() -> str:
    return LOCK_V1


@pytest.fixture
def tmp_project(tmp_path: Path) -> Path:
    """Create a single-crate project with Cargo.toml and Cargo.lock."""
    (tmp_path / "Cargo.toml").write_text(MANIFEST)
    (tmp_path / "Cargo.lock").write_text(LOCK)
    return tmp_path


@pytest.fixture
def tmp_workspace(tmp_path: Path) -> Path:
    """Create a workspace with two members, one excluded crate and a lock file."""
    (tmp_path / "Cargo.toml").write_text(WORKSPACE_MANIFEST)
    (tmp_path / "Cargo.lock").write_text(LOCK)
    members = {
        "app": '[package]\nname = "app"\nversion = "0.1.0"\n\n'
        '[dependencies]\nserde = { workspace = true }\nrand = "0.7.3"\n',
        "helper": '[package]\nname = "helper"\nversion = "0.1.0"\n\n'
        '[dependencies]\nrand = "^0.8.5"\n',
        "experimental": '[package]\nname = "experimental"\nversion = "0.1.0"\n\n'
        '[dependencies]\nrand = "0.7.3"\n',
    }
    for name, content in members.items():
        crate = tmp_path / "crates" / name
        crate.mkdir(parents=True)
        (crate / "Cargo.toml").write_text(content)
    # A member glob match without a manifest is ignored
    (tmp_path / "crates" / "docs").mkdir()
    return tmp_path
