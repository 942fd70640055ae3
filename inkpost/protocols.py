"""Protocol definitions for inkpost.

These protocols describe the seams between the post loader, its Markdown
collaborator and the consumers of the loaded post collection. They keep the
loader independent of mistune and let tests plug in simple fakes.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .collections import PostCollection
    from .content import PostData


@runtime_checkable
class MarkdownConverter(Protocol):
    """Protocol for converting a Markdown body to HTML.

    Implementations must be pure: the same input always yields the same
    HTML. Failures are raised and propagate through the loader unchanged.
    """

    @abstractmethod
    def render(self, content: str) -> str:
        """Render Markdown content to HTML.

        Args:
            content: Markdown source.

        Returns:
            HTML string.
        """
        ...


@runtime_checkable
class PostSource(Protocol):
    """Protocol for read access to the loaded posts.

    ``PostLoader`` is the file-backed implementation; page rendering only
    depends on this interface.
    """

    @abstractmethod
    def load_post(self, slug: str) -> PostData:
        """Load a single post by slug (with or without ``.md``)."""
        ...

    @abstractmethod
    def load_all_posts(self) -> PostCollection:
        """Return every post, newest first."""
        ...

    @abstractmethod
    def load_posts_by_author(self, author_name: str) -> PostCollection:
        """Return posts whose author matches exactly."""
        ...

    @abstractmethod
    def load_posts_by_tag(self, tag: str) -> PostCollection:
        """Return posts carrying the tag."""
        ...

    @abstractmethod
    def load_all_tags(self) -> frozenset[str]:
        """Return the distinct tags across every post."""
        ...
