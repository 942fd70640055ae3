"""Command-line interface for inkpost.

This module defines the CLI commands using Click framework.

Commands:
- build: Build the site into the output directory.
- posts: List loaded posts, optionally filtered by author or tag.
- tags: List every distinct tag.
- show: Print the metadata of one post.
"""

from __future__ import annotations

import json
from pathlib import Path

import click

from . import __version__
from .build import BuildError, create_loader, load_posts


@click.group()
@click.version_option(version=__version__, prog_name="inkpost")
def cli():
    """inkpost static blog generator."""


@cli.command()
@click.option(
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    required=False,
    help="Output directory (overrides inkpost.yaml output_dir)",
)
def build(output: Path | None):
    """Build the site into the output directory."""
    project_root = Path.cwd()
    from .build import build_site

    try:
        result = build_site(project_root, output_dir_override=output)
    except BuildError as exc:
        _report_build_error(exc, project_root)
        raise SystemExit(1) from None
    click.echo(
        f"Built {len(result.pages_written)} pages "
        f"({len(result.posts)} posts) into {result.output_dir}"
    )


@cli.command()
@click.option("--author", help="Only posts written by this member")
@click.option("--tag", help="Only posts carrying this tag")
def posts(author: str | None, tag: str | None):
    """List posts, newest first."""
    project_root = Path.cwd()
    try:
        selected = load_posts(create_loader(project_root))
    except BuildError as exc:
        _report_build_error(exc, project_root)
        raise SystemExit(1) from None
    if author is not None:
        selected = selected.by_author(author)
    if tag is not None:
        selected = selected.with_tag(tag)
    for post in selected:
        meta = post.meta_data
        click.echo(f"{meta.created_at}  {post.slug}  {meta.title}")


@cli.command()
def tags():
    """List every distinct tag."""
    project_root = Path.cwd()
    try:
        loaded = load_posts(create_loader(project_root))
    except BuildError as exc:
        _report_build_error(exc, project_root)
        raise SystemExit(1) from None
    for tag in sorted(loaded.tags()):
        click.echo(tag)


@cli.command()
@click.argument("slug")
@click.option("--json", "as_json", is_flag=True, help="Print metadata as JSON")
def show(slug: str, as_json: bool):
    """Print the metadata of a single post."""
    loader = create_loader(Path.cwd())
    try:
        post = loader.load_post(slug)
    except FileNotFoundError as exc:
        raise click.ClickException(str(exc)) from None
    except ValueError as exc:
        raise click.ClickException(f"{slug}: {exc}") from None

    data = post.meta_data.to_dict()
    if as_json:
        click.echo(json.dumps({"slug": post.slug, **data}, ensure_ascii=False, indent=2))
        return
    click.echo(click.style(post.meta_data.title, bold=True))
    for key, value in data.items():
        if key == "title":
            continue
        if isinstance(value, list):
            value = ", ".join(value)
        click.echo(f"  {key}: {value}")


def _report_build_error(exc: BuildError, project_root: Path) -> None:
    try:
        rel_path = exc.source_path.relative_to(project_root)
    except ValueError:
        rel_path = exc.source_path
    click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
    click.echo(click.style(f"  File: {rel_path}", fg="yellow"), err=True)
    click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)


def main():
    """Entry point for the CLI application."""
    cli()
