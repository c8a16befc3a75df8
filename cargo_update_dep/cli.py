"""CLI entry point for cargo-update-dep."""

from __future__ import annotations

import sys
from contextlib import nullcontext, redirect_stdout
from pathlib import Path

import click

from cargo_update_dep.errors import UpdateDepError
from cargo_update_dep.pipeline import MANIFEST_FILENAME, run_update
from cargo_update_dep.versions import is_valid_version

# `cargo update-dep ...` runs `cargo-update-dep update-dep ...`
CARGO_SUBCOMMAND = "update-dep"


def _validate_version(ctx: click.Context, param: click.Parameter, value: str) -> str:
    if not is_valid_version(value):
        raise click.BadParameter(f"{value!r} is not a semantic version (e.g. 1.4.0)")
    return value


@click.command()
@click.version_option(None, "-V", "--tool-version", package_name="cargo-update-dep")
@click.option(
    "-p",
    "--dependency-name",
    "name",
    required=True,
    metavar="PACKAGE",
    help="The name of the dependency.",
)
@click.option(
    "-v",
    "--version",
    "version",
    required=True,
    callback=_validate_version,
    help="The current version.",
)
@click.option(
    "-n",
    "--new-version",
    "new_version",
    required=True,
    callback=_validate_version,
    help="The wished version.",
)
@click.option(
    "-m",
    "--manifest-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path of the main Cargo.toml (can be a workspace file). "
    "Defaults to ./Cargo.toml.",
)
@click.option(
    "--allow-stale-checksum",
    is_flag=True,
    envvar="CARGO_UPDATE_DEP_ALLOW_STALE_CHECKSUM",
    help="Remove the lock file checksum instead of failing.",
)
@click.option("--dry-run", is_flag=True, help="Show what would change, write nothing.")
@click.option(
    "--json", "as_json", is_flag=True, help="Print the result as JSON on stdout."
)
def cli(
    name: str,
    version: str,
    new_version: str,
    manifest_path: Path | None,
    allow_stale_checksum: bool,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Update a Rust dependency in Cargo.toml and Cargo.lock."""
    if version == new_version:
        raise click.BadParameter(
            "must differ from --version", param_hint="'-n' / '--new-version'"
        )

    manifest_path = manifest_path or Path.cwd() / MANIFEST_FILENAME
    if not manifest_path.is_file():
        raise click.ClickException(f"No Cargo.toml found at {manifest_path}")

    # Keep stdout for the JSON document alone
    progress = redirect_stdout(sys.stderr) if as_json else nullcontext()
    try:
        with progress:
            result = run_update(
                manifest_path,
                name,
                version,
                new_version,
                allow_stale_checksum=allow_stale_checksum,
                dry_run=dry_run,
            )
    except UpdateDepError as exc:
        raise click.ClickException(str(exc)) from exc

    if as_json:
        click.echo(result.model_dump_json())


def main(argv: list[str] | None = None) -> None:
    """Run the CLI, accepting the extra argument cargo passes to subcommands."""
    args = list(sys.argv[1:] if argv is None else argv)
    if args[:1] == [CARGO_SUBCOMMAND]:
        args = args[1:]
    cli.main(args=args, prog_name="cargo-update-dep")
