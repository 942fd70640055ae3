"""Post loading for inkpost.

This module turns a directory of Markdown files into a validated, queryable
in-memory collection of posts.

Key classes:
- PostMetaData: Typed front-matter of one post.
- PostData: A loaded, ready-to-render post.
- PostLoader: Lists, loads, caches and queries posts from a directory.

Errors:
- PostNotFoundError: No file exists for the requested slug.
- PostDirectoryError: The posts directory is missing or unreadable.
- MissingMetadataError: Required front-matter fields are absent.
- InvalidTagError: A tag cannot name its listing page.
  (Both re-exported from extractors.)
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .cache import SingleFlight
from .collections import PostCollection
from .extractors import (
    FrontmatterError,
    InvalidTagError,
    MetadataDecoder,
    MissingMetadataError,
    default_metadata_decoder,
    extract_frontmatter,
)
from .protocols import MarkdownConverter
from .renderers import default_markdown_renderer
from .utils import MARKDOWN_SUFFIX, is_markdown, slug_from_filename

__all__ = [
    "FrontmatterError",
    "InvalidTagError",
    "MissingMetadataError",
    "PostData",
    "PostDirectoryError",
    "PostLoader",
    "PostMetaData",
    "PostNotFoundError",
]


class PostNotFoundError(FileNotFoundError):
    """No Markdown file exists for a slug.

    Attributes:
        slug: The requested slug (without ``.md``).
        path: The path that was looked up.
    """

    def __init__(self, slug: str, path: Path):
        self.slug = slug
        self.path = path
        super().__init__(f"Post not found: {slug} ({path})")


class PostDirectoryError(OSError):
    """The posts directory is missing or cannot be listed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Cannot read posts directory {path}: {reason}")


@dataclass(frozen=True)
class PostMetaData:
    """Typed front-matter of a post.

    Attributes:
        title: Post title.
        author: Name of the member who wrote the post.
        editor: Optional editor name, or ordered tuple of names.
        created_at: Creation date string; also the sort key.
        updated_at: Last update date string; equals created_at when unset.
        tags: Distinct tags.
        summary: Short description.
    """

    title: str
    author: str
    created_at: str
    updated_at: str
    summary: str
    tags: frozenset[str] = field(default_factory=frozenset)
    editor: str | tuple[str, ...] | None = None

    @property
    def editors(self) -> tuple[str, ...]:
        if self.editor is None:
            return ()
        if isinstance(self.editor, str):
            return (self.editor,)
        return self.editor

    def to_dict(self) -> dict[str, Any]:
        """Return the metadata keyed the way it is written in front-matter."""
        data: dict[str, Any] = {
            "title": self.title,
            "author": self.author,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "tags": sorted(self.tags),
            "summary": self.summary,
        }
        if self.editor is not None:
            data["editor"] = (
                self.editor if isinstance(self.editor, str) else list(self.editor)
            )
        return data


@dataclass(frozen=True)
class PostData:
    """A loaded post.

    Attributes:
        slug: Filename without ``.md``; unique within one load.
        content: Rendered HTML body.
        meta_data: Typed front-matter.
    """

    slug: str
    content: str
    meta_data: PostMetaData

    @property
    def url(self) -> str:
        return f"/posts/{self.slug}/"


class PostLoader:
    """Loads posts from a directory of Markdown files.

    The full, sorted collection is computed once per loader and reused by
    every query. There is no invalidation: the loader assumes the files do
    not change while it is alive.

    Attributes:
        posts_dir: Directory containing one ``<slug>.md`` file per post.
        converter: Markdown-to-HTML collaborator.
        decoder: Front-matter decoder.
        max_workers: Thread pool size used by load_all_posts.
    """

    def __init__(
        self,
        posts_dir: Path,
        converter: MarkdownConverter | None = None,
        decoder: MetadataDecoder | None = None,
        max_workers: int | None = None,
    ):
        """Initialize the loader.

        Args:
            posts_dir: Path to the posts directory.
            converter: Optional custom Markdown converter.
            decoder: Optional custom metadata decoder.
            max_workers: Optional thread pool size for bulk loads.
        """
        self.posts_dir = Path(posts_dir)
        self.converter = converter or default_markdown_renderer
        self.decoder = decoder or default_metadata_decoder
        self.max_workers = max_workers
        self._cache: SingleFlight[PostCollection] = SingleFlight(self._load_collection)

    def list_slugs(self) -> list[str]:
        """List the filenames in the posts directory, sorted by name.

        Returns:
            Directory entry names (usually ``<slug>.md``).

        Raises:
            PostDirectoryError: If the directory is missing or unreadable.
        """
        try:
            return sorted(os.listdir(self.posts_dir))
        except OSError as exc:
            raise PostDirectoryError(self.posts_dir, exc.strerror or str(exc)) from exc

    def path_for(self, slug: str) -> Path:
        return self.posts_dir / f"{slug_from_filename(slug)}{MARKDOWN_SUFFIX}"

    def load_post(self, slug: str) -> PostData:
        """Load a single post.

        Args:
            slug: Post slug, with or without ``.md`` suffix.

        Returns:
            PostData for the file.

        Raises:
            PostNotFoundError: If the file does not exist.
            FrontmatterError: If the YAML header is malformed.
            MissingMetadataError: If required fields are absent.
        """
        real_slug = slug_from_filename(slug)
        path = self.path_for(real_slug)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise PostNotFoundError(real_slug, path) from exc

        try:
            raw, body = extract_frontmatter(text)
        except FrontmatterError as exc:
            exc.slug = real_slug
            raise
        meta_data = self.decoder.decode(raw, real_slug)
        content = self.converter.render(body)
        return PostData(slug=real_slug, content=content, meta_data=meta_data)

    def load_all_posts(self) -> PostCollection:
        """Return every post, newest ``created_at`` first.

        The first call reads the directory; later calls return the same
        collection object without touching the filesystem.
        """
        return self._cache.get()

    def load_posts_by_author(self, author_name: str) -> PostCollection:
        return self.load_all_posts().by_author(author_name)

    def load_posts_by_tag(self, tag: str) -> PostCollection:
        return self.load_all_posts().with_tag(tag)

    def load_all_tags(self) -> frozenset[str]:
        return self.load_all_posts().tags()

    @property
    def loaded(self) -> bool:
        return self._cache.populated

    def _load_collection(self) -> PostCollection:
        """Load and sort every Markdown file in the directory.

        Loads run on a thread pool and are joined in listing order; the first
        failure is re-raised so a broken post never yields a partial site.
        The re-raised exception carries the ``slug`` of the post that failed.
        """
        names = [n for n in self.list_slugs() if is_markdown(self.posts_dir / n)]
        posts = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [(name, pool.submit(self.load_post, name)) for name in names]
            for name, future in futures:
                try:
                    posts.append(future.result())
                except Exception as exc:
                    if getattr(exc, "slug", None) is None:
                        exc.slug = slug_from_filename(name)
                    raise
        return PostCollection(posts).sorted(reverse=True)
