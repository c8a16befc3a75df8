"""Pin a single Rust dependency to a new version in Cargo.toml and Cargo.lock."""
