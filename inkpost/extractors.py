"""Front-matter extraction and metadata decoding for inkpost.

This module splits a post file into its YAML header and Markdown body, then
decodes the raw header mapping into a typed ``PostMetaData`` record.

Key objects:
- extract_frontmatter: Split YAML front-matter from the body.
- MetadataDecoder: Normalize, validate and type a raw front-matter mapping.
- MissingMetadataError: Raised when required fields are absent.
- FrontmatterError: Raised when the YAML header cannot be parsed.
- InvalidTagError: Raised when a tag cannot name its listing page.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import yaml

from .utils import date_to_str

if TYPE_CHECKING:
    from .content import PostMetaData

FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)

# Checked in this order; the error message lists missing keys the same way.
REQUIRED_FIELDS = ("title", "author", "createdAt", "updatedAt", "tags", "summary")

# A tag becomes one path segment of its listing page.
RESERVED_TAGS = frozenset({"", ".", ".."})
TAG_SEPARATORS = ("/", "\\")


class FrontmatterError(ValueError):
    """Front-matter block exists but is not a valid YAML mapping.

    Attributes:
        slug: Slug of the offending post, set by the loader.
    """

    slug: str | None = None


class MissingMetadataError(ValueError):
    """One or more required front-matter fields are absent.

    Attributes:
        slug: Slug of the offending post.
        missing: Names of every missing field, in declaration order.
    """

    def __init__(self, slug: str, missing: list[str]):
        self.slug = slug
        self.missing = list(missing)
        super().__init__(f"Missing meta data: {', '.join(self.missing)}")


class InvalidTagError(ValueError):
    """A tag is blank, a dot segment, or contains a path separator.

    Attributes:
        slug: Slug of the offending post.
        tag: The rejected tag.
    """

    def __init__(self, slug: str, tag: str):
        self.slug = slug
        self.tag = tag
        super().__init__(f"Invalid tag: {tag!r}")


def is_valid_tag(tag: str) -> bool:
    if tag.strip() in RESERVED_TAGS:
        return False
    return not any(sep in tag for sep in TAG_SEPARATORS)


def extract_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Extract YAML frontmatter from content.

    Args:
        text: Raw file content.

    Returns:
        Tuple of (frontmatter dict, remaining content).

    Raises:
        FrontmatterError: If the header is not valid YAML or not a mapping.
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    try:
        data = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as exc:
        raise FrontmatterError(f"Invalid YAML front-matter: {exc}") from exc
    if not isinstance(data, dict):
        raise FrontmatterError(
            f"Front-matter must be a mapping, got {type(data).__name__}"
        )
    return data, text[match.end() :]


class MetadataDecoder:
    """Decodes raw front-matter into ``PostMetaData``.

    Normalization runs before validation: ``updatedAt`` falls back to
    ``createdAt`` and ``tags`` defaults to an empty set. Validation then
    collects every missing field and reports them together.
    """

    def normalize(self, raw: Mapping[str, Any]) -> dict[str, Any]:
        """Apply defaults and deduplicate tags.

        Args:
            raw: Front-matter mapping as parsed from YAML.

        Returns:
            A new dictionary; ``raw`` is left untouched.
        """
        data = {key: date_to_str(value) for key, value in raw.items()}
        if not data.get("updatedAt") and "createdAt" in data:
            data["updatedAt"] = data["createdAt"]
        tags = data.get("tags")
        if not tags:
            data["tags"] = frozenset()
        elif isinstance(tags, str):
            data["tags"] = frozenset([tags])
        else:
            data["tags"] = frozenset(str(tag) for tag in tags)
        return data

    def missing_fields(self, data: Mapping[str, Any]) -> list[str]:
        missing = []
        for key in REQUIRED_FIELDS:
            if key not in data or data[key] is None:
                missing.append(key)
            elif key in ("title", "summary") and not str(data[key]).strip():
                missing.append(key)
        return missing

    def decode(self, raw: Mapping[str, Any], slug: str) -> PostMetaData:
        """Turn a raw mapping into a typed metadata record.

        Args:
            raw: Front-matter mapping.
            slug: Slug of the post, used in error reporting.

        Returns:
            PostMetaData instance.

        Raises:
            MissingMetadataError: If any required field is absent.
            InvalidTagError: If a tag cannot be used as a page path.
        """
        from .content import PostMetaData

        data = self.normalize(raw)
        missing = self.missing_fields(data)
        if missing:
            raise MissingMetadataError(slug, missing)
        for tag in sorted(data["tags"]):
            if not is_valid_tag(tag):
                raise InvalidTagError(slug, tag)

        editor = data.get("editor")
        if isinstance(editor, (list, tuple)):
            editor = tuple(str(name) for name in editor)
        elif editor is not None:
            editor = str(editor)

        return PostMetaData(
            title=str(data["title"]),
            author=str(data["author"]),
            editor=editor,
            created_at=str(data["createdAt"]),
            updated_at=str(data["updatedAt"]),
            tags=data["tags"],
            summary=str(data["summary"]),
        )


default_metadata_decoder = MetadataDecoder()
