"""CLI entrypoint for flowmap."""

import logging
import sys
from pathlib import Path

import click
import yaml

from . import __version__
from .config import load_config
from .ingest.reader import SUPPORTED_SUFFIXES

_SPREADSHEET = click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path)


def _check_spreadsheet(path: Path) -> None:
    if path.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise click.BadParameter(
            f"Please upload a valid spreadsheet ({', '.join(SUPPORTED_SUFFIXES)})", param_hint="FILE"
        )


def _run(fn, *args, **kwargs) -> int:
    """Invoke a command, surfacing unreadable input as a single user-facing error."""
    try:
        return fn(*args, **kwargs)
    except (ValueError, ImportError, OSError) as e:
        raise click.ClickException(f"Failed to read the file: {e}") from e


@click.group()
@click.version_option(__version__, prog_name="flowmap")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to flowmap.yml (defaults to ./flowmap.yml when present)",
)
@click.option("--verbose", is_flag=True, help="Log build details to stderr")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """flowmap - Rebuild layered fund-flow hierarchies from spreadsheets.

    Summarize the account tree, render the layer canvas, or inspect one account.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_config(config_path)
    except (ValueError, yaml.YAMLError) as e:
        raise click.ClickException(f"Invalid config: {e}") from e


@cli.command()
@click.argument("file", type=_SPREADSHEET)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["md", "json", "rich"]),
    default="md",
    show_default=True,
    help="Output format",
)
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write output to a file")
@click.option("--max-depth", type=int, default=6, show_default=True, help="Deepest level shown by --format rich")
@click.option(
    "--collapse", "collapse", type=int, multiple=True, metavar="LAYER", help="List a layer without its members (repeatable)"
)
@click.pass_context
def tree(
    ctx: click.Context,
    file: Path,
    fmt: str,
    out: Path | None,
    max_depth: int,
    collapse: tuple[int, ...],
) -> None:
    """Summarize the account hierarchy and layer index of FILE."""
    from .commands.tree_cmd import run_tree

    _check_spreadsheet(file)
    sys.exit(
        _run(run_tree, file, config=ctx.obj["config"], fmt=fmt, out=out, max_depth=max_depth, collapse=collapse)
    )


@cli.command()
@click.argument("file", type=_SPREADSHEET)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["html", "svg"]),
    default="html",
    show_default=True,
    help="Output format",
)
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write output to a file")
@click.option("--expand", "expand", type=int, multiple=True, metavar="LAYER", help="Expand a layer (repeatable)")
@click.option("--expand-all", is_flag=True, help="Expand every layer")
@click.option("--zoom", type=float, default=None, help="Initial zoom (clamped to the configured range)")
@click.pass_context
def render(
    ctx: click.Context,
    file: Path,
    fmt: str,
    out: Path | None,
    expand: tuple[int, ...],
    expand_all: bool,
    zoom: float | None,
) -> None:
    """Render the layer canvas of FILE."""
    from .commands.render_cmd import run_render

    _check_spreadsheet(file)
    sys.exit(
        _run(
            run_render,
            file,
            config=ctx.obj["config"],
            fmt=fmt,
            out=out,
            expand=expand,
            expand_all=expand_all,
            zoom=zoom,
        )
    )


@cli.command()
@click.argument("file", type=_SPREADSHEET)
@click.argument("account")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "json"]),
    default="rich",
    show_default=True,
    help="Output format",
)
@click.pass_context
def details(ctx: click.Context, file: Path, account: str, fmt: str) -> None:
    """Show the detail fields for ACCOUNT in FILE."""
    from .commands.details_cmd import run_details

    _check_spreadsheet(file)
    sys.exit(_run(run_details, file, account, config=ctx.obj["config"], fmt=fmt))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
