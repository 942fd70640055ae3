from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .content import PostData


class PostCollection(Sequence["PostData"]):
    """Read-only sequence of posts with query helpers for templates and code."""

    def __init__(self, posts: Iterable[PostData]):
        self._posts = tuple(posts)

    def __iter__(self) -> Iterator[PostData]:
        return iter(self._posts)

    def __len__(self) -> int:
        return len(self._posts)

    def __getitem__(self, item):
        if isinstance(item, slice):
            return PostCollection(self._posts[item])
        return self._posts[item]

    def __eq__(self, other) -> bool:
        if isinstance(other, PostCollection):
            return self._posts == other._posts
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._posts)

    def by_author(self, name: str) -> PostCollection:
        return PostCollection(p for p in self._posts if p.meta_data.author == name)

    def with_tag(self, tag: str) -> PostCollection:
        return PostCollection(p for p in self._posts if tag in p.meta_data.tags)

    def tags(self) -> frozenset[str]:
        return frozenset(tag for p in self._posts for tag in p.meta_data.tags)

    def slugs(self) -> list[str]:
        return [p.slug for p in self._posts]

    def sorted(self, reverse: bool = True) -> PostCollection:
        """Sort posts by ``created_at`` string.

        Python's sort is stable, so posts with equal ``created_at`` keep
        their current relative order in either direction.

        Args:
            reverse: If True (default), newest first.

        Returns:
            A new PostCollection with sorted posts.
        """
        return PostCollection(
            sorted(self._posts, key=lambda p: p.meta_data.created_at, reverse=reverse)
        )

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PostCollection({len(self._posts)} posts)"


class TagCollection(Mapping[str, PostCollection]):
    """Mapping of tag name to PostCollection, iterated in tag order."""

    def __init__(self, posts: Iterable[PostData]):
        mapping: dict[str, list[PostData]] = {}
        for post in posts:
            for tag in post.meta_data.tags:
                mapping.setdefault(tag, []).append(post)
        self._mapping = {k: PostCollection(mapping[k]) for k in sorted(mapping)}

    def __getitem__(self, key: str) -> PostCollection:
        return self._mapping[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"TagCollection({len(self._mapping)} tags)"
