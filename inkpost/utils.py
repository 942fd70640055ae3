"""Utility functions for inkpost.

This module contains small helpers used throughout the inkpost codebase.
They cover slug derivation, path checks, value normalization and output
directory handling.

Key functions:
    slug_from_filename: Derive a post slug from a filename.
    is_markdown: Check if a path is a Markdown file.
    date_to_str: Normalize YAML date values to strings.
    join_root_url: Join a base URL with a path.
    ensure_clean_dir: Ensure a directory exists and is empty.
    page_path: Map a page URL to its output file.
"""

from __future__ import annotations

import shutil
from datetime import date, datetime
from pathlib import Path
from typing import Any

MARKDOWN_SUFFIX = ".md"


def slug_from_filename(name: str) -> str:
    """Convert a post filename to its slug.

    Only a trailing ``.md`` suffix is removed, so the function is total and
    idempotent: a name that already lacks the suffix is returned unchanged.

    Args:
        name: Filename or slug.

    Returns:
        Slug identifying the post.

    Examples:
        >>> slug_from_filename("hello-world.md")
        'hello-world'

        >>> slug_from_filename("hello-world")
        'hello-world'
    """
    if name.endswith(MARKDOWN_SUFFIX):
        return name[: -len(MARKDOWN_SUFFIX)]
    return name


def is_markdown(path: Path) -> bool:
    """Check if a path is a Markdown file.

    Args:
        path: Path to check.

    Returns:
        True if the file has .md extension.
    """
    return path.suffix == MARKDOWN_SUFFIX


def date_to_str(value: Any) -> Any:
    """Render YAML date values as ISO strings.

    PyYAML turns unquoted ``2021-03-01`` into a ``date``; posts compare dates
    as strings, so those values are converted back. Anything else is
    returned untouched.

    Args:
        value: Raw front-matter value.

    Returns:
        ISO formatted string for dates, the original value otherwise.
    """
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def ensure_clean_dir(path: Path) -> None:
    """Ensure a directory exists and is empty.

    If the directory exists, removes all contents. Creates the
    directory if it doesn't exist.

    Args:
        path: Directory path to clean or create.
    """
    if path.exists():
        shutil.rmtree(str(path))
    path.mkdir(parents=True, exist_ok=True)


def page_path(output_dir: Path, url: str) -> Path:
    """Return the ``index.html`` path a page URL is written to.

    Raises:
        ValueError: If the URL has an empty or dot segment.
    """
    relative = url.strip("/")
    segments = relative.split("/") if relative else []
    if any(segment in ("", ".", "..") for segment in segments):
        raise ValueError(f"Invalid page URL: {url!r}")
    return output_dir.joinpath(*segments, "index.html")


def write_html(output_dir: Path, url: str, html: str) -> Path:
    """Write a rendered page as ``index.html`` under its URL directory.

    Args:
        output_dir: Base output directory.
        url: URL path of the page (e.g. ``/posts/hello/``).
        html: Rendered HTML content.

    Returns:
        Path of the written file.
    """
    html_path = page_path(output_dir, url)
    html_path.parent.mkdir(parents=True, exist_ok=True)
    with open(html_path, "w", encoding="utf-8") as f:
        f.write(html)
    return html_path


def join_root_url(root_url: str, path: str) -> str:
    """Safely join a root URL and a path, avoiding double slashes.

    Args:
        root_url: Base URL (e.g., https://example.com/blog).
        path: Path beginning with or without a leading slash.

    Returns:
        Combined URL with proper slash handling.

    Examples:
        >>> join_root_url('https://example.com', '/about')
        'https://example.com/about'

        >>> join_root_url('https://example.com/', 'about')
        'https://example.com/about'
    """
    suffix = path if path.startswith("/") else f"/{path}"
    if not root_url:
        return suffix
    return f"{root_url.rstrip('/')}{suffix}"
