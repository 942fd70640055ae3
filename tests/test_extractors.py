from datetime import date

import pytest

from inkpost.content import PostMetaData
from inkpost.extractors import (
    FrontmatterError,
    InvalidTagError,
    MetadataDecoder,
    MissingMetadataError,
    extract_frontmatter,
)


def test_extract_frontmatter_splits_header_and_body():
    text = "---\ntitle: Hello\ntags: [a, b]\n---\n\n# Body\n"
    data, body = extract_frontmatter(text)
    assert data == {"title": "Hello", "tags": ["a", "b"]}
    assert body == "\n# Body\n"


def test_extract_frontmatter_without_header():
    data, body = extract_frontmatter("# Just markdown\n")
    assert data == {}
    assert body == "# Just markdown\n"


def test_extract_frontmatter_empty_header_and_no_body():
    data, body = extract_frontmatter("---\ntitle: Only header\n---")
    assert data == {"title": "Only header"}
    assert body == ""


def test_extract_frontmatter_rejects_invalid_yaml():
    with pytest.raises(FrontmatterError):
        extract_frontmatter("---\ntitle: [unclosed\n---\nbody")
    with pytest.raises(FrontmatterError):
        extract_frontmatter("---\n- just\n- a list\n---\nbody")


def test_decoder_normalizes_before_validating():
    decoder = MetadataDecoder()
    meta = decoder.decode(
        {
            "title": "T",
            "author": "sakito",
            "createdAt": date(2021, 1, 2),
            "tags": ["x", "x", "y"],
            "summary": "S",
        },
        "slug",
    )
    assert isinstance(meta, PostMetaData)
    assert meta.created_at == "2021-01-02"
    assert meta.updated_at == "2021-01-02"
    assert meta.tags == frozenset({"x", "y"})
    assert meta.editor is None


def test_decoder_does_not_mutate_input():
    raw = {"title": "T", "author": "a", "createdAt": "2021", "summary": "S"}
    MetadataDecoder().decode(raw, "slug")
    assert "updatedAt" not in raw
    assert "tags" not in raw


def test_decoder_accepts_single_tag_string():
    meta = MetadataDecoder().decode(
        {"title": "T", "author": "a", "createdAt": "1", "summary": "S", "tags": "solo"},
        "slug",
    )
    assert meta.tags == frozenset({"solo"})


def test_decoder_collects_every_missing_field():
    with pytest.raises(MissingMetadataError) as excinfo:
        MetadataDecoder().decode({"tags": ["a"]}, "empty")
    assert excinfo.value.missing == [
        "title",
        "author",
        "createdAt",
        "updatedAt",
        "summary",
    ]
    assert str(excinfo.value) == (
        "Missing meta data: title, author, createdAt, updatedAt, summary"
    )


def test_decoder_treats_blank_title_as_missing():
    with pytest.raises(MissingMetadataError) as excinfo:
        MetadataDecoder().decode(
            {"title": "  ", "author": "a", "createdAt": "1", "summary": ""}, "blank"
        )
    assert excinfo.value.missing == ["title", "summary"]


@pytest.mark.parametrize("tag", ["..", ".", "", "  ", "CI/CD", "a\\b"])
def test_decoder_rejects_tags_that_are_not_one_path_segment(tag):
    raw = {"title": "T", "author": "a", "createdAt": "1", "summary": "S", "tags": ["ok", tag]}
    with pytest.raises(InvalidTagError) as excinfo:
        MetadataDecoder().decode(raw, "tagged")
    assert excinfo.value.slug == "tagged"
    assert excinfo.value.tag == tag
    assert repr(tag) in str(excinfo.value)


def test_decoder_keeps_unicode_and_dotted_tags():
    meta = MetadataDecoder().decode(
        {"title": "T", "author": "a", "createdAt": "1", "summary": "S", "tags": ["日本語", "v1.2", "c++"]},
        "slug",
    )
    assert meta.tags == frozenset({"日本語", "v1.2", "c++"})
