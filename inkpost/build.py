"""Site building functionality for inkpost.

This module contains the core logic for building the static blog. It loads
configuration, loads every post, renders the pages and writes them to the
output directory.

Key functions:
- build_site: Main function to build the entire site.
- load_config: Loads site configuration from inkpost.yaml.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from jinja2 import TemplateError

from .collections import PostCollection, TagCollection
from .content import PostData, PostDirectoryError, PostLoader, PostNotFoundError
from .members import MemberDirectory, MemberNotFoundError, load_members
from .templates import TemplateEngine
from .utils import ensure_clean_dir, page_path, write_html

CONFIG_FILE = "inkpost.yaml"

DEFAULT_CONFIG = {
    "posts_dir": "data/posts",
    "output_dir": "output",
    "title": "Blog",
    "root_url": "",
}


class BuildError(Exception):
    """Error during site build with file context.

    Attributes:
        source_path: Path to the source file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        posts: Every post, newest first.
        output_dir: Directory where the site was built.
        pages_written: Paths of the generated HTML files.
    """

    posts: PostCollection
    output_dir: Path
    pages_written: list[Path] = field(default_factory=list)


def load_config(project_root: Path) -> dict[str, Any]:
    """Load site configuration from inkpost.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.
    """
    config_path = project_root / CONFIG_FILE
    config = DEFAULT_CONFIG.copy()
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
            if isinstance(loaded, dict):
                config.update(loaded)
    return config


def posts_dir_for(project_root: Path, config: dict[str, Any]) -> Path:
    return project_root / config.get("posts_dir", DEFAULT_CONFIG["posts_dir"])


def create_loader(project_root: Path, config: dict[str, Any] | None = None) -> PostLoader:
    """Create a post loader for a project.

    Args:
        project_root: Root directory of the project.
        config: Optional pre-loaded configuration.

    Returns:
        PostLoader reading the configured posts directory.
    """
    config = config if config is not None else load_config(project_root)
    return PostLoader(posts_dir_for(project_root, config))


def load_posts(loader: PostLoader) -> PostCollection:
    """Load every post, converting loader failures into BuildError.

    Args:
        loader: Loader to read posts with.

    Returns:
        Every post, newest first.

    Raises:
        BuildError: Naming the offending file and the reason.
    """
    try:
        return loader.load_all_posts()
    except PostNotFoundError as exc:
        raise BuildError(exc.path, str(exc), exc) from exc
    except PostDirectoryError as exc:
        raise BuildError(loader.posts_dir, str(exc), exc) from exc
    except Exception as exc:
        slug = getattr(exc, "slug", None)
        source = loader.path_for(slug) if slug else loader.posts_dir
        raise BuildError(source, _format_error_message(exc), exc) from exc


def build_site(
    project_root: Path,
    output_dir_override: Path | None = None,
    clean_output: bool = True,
    loader: PostLoader | None = None,
    members: MemberDirectory | None = None,
) -> BuildResult:
    """Build the entire static site.

    Args:
        project_root: Root directory of the project.
        output_dir_override: Optional path to write the build output instead of config output_dir.
        clean_output: Whether to wipe the output directory before building.
        loader: Optional pre-built loader (its cache is reused).
        members: Optional member directory; defaults to load_members().

    Returns:
        BuildResult containing all posts and written pages.
    """
    config = load_config(project_root)
    loader = loader or create_loader(project_root, config)
    if members is None:
        members = load_members(project_root)
    posts = load_posts(loader)

    engine = TemplateEngine(
        config,
        members,
        template_dirs=[project_root / "templates"],
    )
    # Nothing is written until every page has rendered.
    pages = render_pages(engine, loader, posts, members)

    output_dir = output_dir_override or (
        project_root / config.get("output_dir", DEFAULT_CONFIG["output_dir"])
    )
    for url, _ in pages:
        try:
            page_path(output_dir, url)
        except ValueError as exc:
            raise BuildError(output_dir, str(exc), exc) from exc
    if clean_output:
        ensure_clean_dir(output_dir)
    else:
        output_dir.mkdir(parents=True, exist_ok=True)

    result = BuildResult(posts=posts, output_dir=output_dir)
    for url, html in pages:
        result.pages_written.append(write_html(output_dir, url, html))
    return result


def render_pages(
    engine: TemplateEngine,
    loader: PostLoader,
    posts: PostCollection,
    members: MemberDirectory,
) -> list[tuple[str, str]]:
    """Render every page of the site.

    Args:
        engine: Template engine.
        loader: Loader the posts came from (for error locations).
        posts: Every post, newest first.
        members: Member directory.

    Returns:
        List of (url, html) pairs in output order.
    """
    pages = [("/", engine.render_index(posts))]
    for post in posts:
        pages.append((post.url, _render_post(engine, loader, post)))

    pages.append(("/members/", engine.render_members()))
    for member in members:
        authored = posts.by_author(member.name)
        pages.append((member.url, engine.render_member(member, authored)))

    tags = TagCollection(posts)
    pages.append(("/tags/", engine.render_tags(tags)))
    # Written under the raw tag; links carry its percent-encoded form.
    for tag, tagged in tags.items():
        pages.append((f"/tags/{tag}/", engine.render_tag(tag, tagged)))
    return pages


def _render_post(engine: TemplateEngine, loader: PostLoader, post: PostData) -> str:
    source = loader.path_for(post.slug)
    try:
        return engine.render_post(post)
    except MemberNotFoundError as exc:
        raise BuildError(source, f"Unknown author: {exc.name}", exc) from exc
    except TemplateError as exc:
        raise BuildError(source, _format_error_message(exc), exc) from exc


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    error_type = type(exc).__name__
    error_msg = str(exc)

    if error_type in ("MissingMetadataError", "FrontmatterError", "InvalidTagError"):
        return error_msg
    if error_type == "UndefinedError":
        return f"Undefined variable: {error_msg}"
    if error_type == "TemplateSyntaxError":
        return f"Template syntax error on line {getattr(exc, 'lineno', '?')}: {error_msg}"

    return f"{error_type}: {error_msg}"
