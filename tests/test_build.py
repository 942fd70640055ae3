import re
from pathlib import Path
from urllib.parse import unquote

import pytest
import yaml

from inkpost.build import (
    DEFAULT_CONFIG,
    BuildError,
    BuildResult,
    _format_error_message,
    build_site,
    create_loader,
    load_config,
)
from inkpost.content import PostLoader
from inkpost.members import Member, MemberDirectory


def write_post(posts_dir: Path, name: str, body: str = "Body text.", **meta) -> Path:
    posts_dir.mkdir(parents=True, exist_ok=True)
    header = yaml.safe_dump(meta, allow_unicode=True, sort_keys=False)
    path = posts_dir / f"{name}.md"
    path.write_text(f"---\n{header}---\n\n{body}\n", encoding="utf-8")
    return path


def create_project(tmp_path: Path) -> Path:
    posts = tmp_path / "data" / "posts"
    write_post(
        posts,
        "hello-world",
        body="# Hello\n\n```python\nprint('hi')\n```\n",
        title="Hello World",
        author="sakito",
        editor="BaHo",
        createdAt="2021-03-01",
        tags=["python", "日本語"],
        summary="The first post.",
    )
    write_post(
        posts,
        "second",
        title="Second <Post>",
        author="BaHo",
        createdAt="2021-04-01",
        updatedAt="2021-04-02",
        tags=["python"],
        summary="Another one.",
    )
    return tmp_path


def read(output: Path, *parts: str) -> str:
    return output.joinpath(*parts, "index.html").read_text(encoding="utf-8")


def test_load_config_defaults_and_overrides(tmp_path):
    assert load_config(tmp_path) == DEFAULT_CONFIG
    (tmp_path / "inkpost.yaml").write_text(
        "title: My Blog\nposts_dir: content\n", encoding="utf-8"
    )
    config = load_config(tmp_path)
    assert config["title"] == "My Blog"
    assert config["posts_dir"] == "content"
    assert config["output_dir"] == "output"
    assert create_loader(tmp_path).posts_dir == tmp_path / "content"


def test_build_site_writes_all_pages(tmp_path):
    project = create_project(tmp_path)
    result = build_site(project)

    assert isinstance(result, BuildResult)
    output = result.output_dir
    assert output == project / "output"
    assert result.posts.slugs() == ["second", "hello-world"]
    assert all(path.exists() for path in result.pages_written)
    # index + 2 posts + members + 3 members + tags + 2 tags
    assert len(result.pages_written) == 10

    index = read(output)
    assert index.index("/posts/second/") < index.index("/posts/hello-world/")

    post = read(output, "posts", "hello-world")
    assert "<title>Hello World | Blog</title>" in post
    assert "Published on" in post
    assert 'datetime="2021-03-01"' in post
    assert 'href="/members/sakito/"' in post
    assert "https://twitter.com/__sakito__" in post
    assert "Edited by" in post and 'href="/members/BaHo/"' in post
    assert 'class="highlight"' in post
    assert 'href="/tags/python/"' in post
    assert 'href="/tags/%E6%97%A5%E6%9C%AC%E8%AA%9E/"' in post
    assert "(updated" not in post

    second = read(output, "posts", "second")
    assert "Second &lt;Post&gt;" in second
    assert 'datetime="2021-04-02"' in second

    members = read(output, "members")
    for name in ("sakito", "BaHo", "sosukesuzuki"):
        assert f'href="/members/{name}/"' in members

    baho = read(output, "members", "BaHo")
    assert "/posts/second/" in baho
    assert "/posts/hello-world/" not in baho
    assert "No posts yet." in read(output, "members", "sosukesuzuki")

    tags = read(output, "tags")
    assert "#python</a> (2)" in tags
    assert "/posts/hello-world/" in read(output, "tags", "日本語")


def test_build_site_reuses_loader_cache(tmp_path):
    project = create_project(tmp_path)
    loader = create_loader(project)
    posts = loader.load_all_posts()
    result = build_site(project, loader=loader)
    assert result.posts is posts


def test_build_site_root_url_and_output_override(tmp_path):
    project = create_project(tmp_path)
    (project / "inkpost.yaml").write_text(
        "title: Team Blog\nroot_url: https://blog.example.com\n", encoding="utf-8"
    )
    target = tmp_path / "public"
    result = build_site(project, output_dir_override=target)
    assert result.output_dir == target
    post = read(target, "posts", "second")
    assert "<title>Second &lt;Post&gt; | Team Blog</title>" in post
    assert 'href="https://blog.example.com/members/BaHo/"' in post
    assert not (project / "output").exists()


def test_project_templates_override_builtin(tmp_path):
    project = create_project(tmp_path)
    (project / "templates").mkdir()
    (project / "templates" / "post.html.jinja").write_text(
        "CUSTOM {{ post.slug }} by {{ author.name }}", encoding="utf-8"
    )
    result = build_site(project)
    assert read(result.output_dir, "posts", "second") == "CUSTOM second by BaHo"


def test_custom_member_directory(tmp_path):
    project = create_project(tmp_path)
    members = MemberDirectory(
        [Member("sakito", "/s.png"), Member("BaHo", "/b.png")]
    )
    result = build_site(project, members=members)
    assert not (result.output_dir / "members" / "sosukesuzuki").exists()
    post = read(result.output_dir, "posts", "second")
    assert "twitter.com" not in post


def test_unknown_author_fails_build(tmp_path):
    project = create_project(tmp_path)
    write_post(
        project / "data" / "posts",
        "stranger",
        title="Stranger",
        author="nobody",
        createdAt="2021-05-01",
        summary="s",
    )
    with pytest.raises(BuildError) as excinfo:
        build_site(project)
    assert excinfo.value.source_path == project / "data" / "posts" / "stranger.md"
    assert "Unknown author: nobody" in excinfo.value.message
    assert not (project / "output").exists()


def test_missing_metadata_fails_build_with_file(tmp_path):
    project = create_project(tmp_path)
    write_post(project / "data" / "posts", "broken", author="sakito", createdAt="2021")
    with pytest.raises(BuildError) as excinfo:
        build_site(project)
    assert excinfo.value.source_path == project / "data" / "posts" / "broken.md"
    assert excinfo.value.message == "Missing meta data: title, summary"
    assert not (project / "output").exists()


def test_converter_failure_names_the_post(tmp_path):
    project = create_project(tmp_path)
    posts_dir = project / "data" / "posts"
    write_post(
        posts_dir,
        "broken-post",
        body="EXPLODE",
        title="Broken",
        author="sakito",
        createdAt="2021-05-01",
        summary="s",
    )

    class ExplodingOnMarker:
        def render(self, content):
            if "EXPLODE" in content:
                raise RuntimeError("render exploded")
            return content

    loader = PostLoader(posts_dir, converter=ExplodingOnMarker())
    with pytest.raises(BuildError) as excinfo:
        build_site(project, loader=loader)
    assert excinfo.value.source_path == posts_dir / "broken-post.md"
    assert excinfo.value.message == "RuntimeError: render exploded"
    assert isinstance(excinfo.value.original_error, RuntimeError)
    assert not (project / "output").exists()


def test_invalid_frontmatter_fails_build_with_file(tmp_path):
    project = create_project(tmp_path)
    (project / "data" / "posts" / "bad-yaml.md").write_text(
        "---\ntitle: [oops\n---\nbody\n", encoding="utf-8"
    )
    with pytest.raises(BuildError) as excinfo:
        build_site(project)
    assert excinfo.value.source_path == project / "data" / "posts" / "bad-yaml.md"
    assert "Invalid YAML front-matter" in excinfo.value.message


def test_missing_posts_directory_fails_build(tmp_path):
    with pytest.raises(BuildError) as excinfo:
        build_site(tmp_path)
    assert excinfo.value.source_path == tmp_path / "data" / "posts"
    assert "Cannot read posts directory" in excinfo.value.message


def test_format_error_message():
    assert _format_error_message(ValueError("bad")) == "ValueError: bad"
    assert _format_error_message(RuntimeError("boom")) == "RuntimeError: boom"


def test_tag_links_resolve_to_written_pages(tmp_path):
    project = create_project(tmp_path)
    write_post(
        project / "data" / "posts",
        "spaced",
        title="Spaced",
        author="sakito",
        createdAt="2021-05-01",
        tags=["C# & F#", "v1.2"],
        summary="s",
    )
    output = build_site(project).output_dir
    hrefs = set(re.findall(r'href="(/tags/[^"]+)"', read(output, "tags")))
    assert len(hrefs) == 4
    for href in hrefs:
        # Static servers percent-decode the request path before mapping it to a file.
        assert (output / unquote(href).strip("/") / "index.html").is_file()


@pytest.mark.parametrize("tag", ["CI/CD", "..", "."])
def test_tag_that_is_not_one_path_segment_fails_build(tmp_path, tag):
    project = create_project(tmp_path)
    output = project / "output"
    output.mkdir()
    (output / "index.html").write_text("previous build", encoding="utf-8")
    write_post(
        project / "data" / "posts",
        "odd-tags",
        title="Odd",
        author="sakito",
        createdAt="2021-05-01",
        tags=["fine", tag],
        summary="s",
    )
    with pytest.raises(BuildError) as excinfo:
        build_site(project)
    assert excinfo.value.source_path == project / "data" / "posts" / "odd-tags.md"
    assert excinfo.value.message == f"Invalid tag: {tag!r}"
    assert (output / "index.html").read_text(encoding="utf-8") == "previous build"
    assert not (output / "tags").exists()


def test_member_name_with_dot_segment_fails_before_writing(tmp_path):
    project = create_project(tmp_path)
    members = MemberDirectory(
        [Member("sakito", "/s.png"), Member("BaHo", "/b.png"), Member("..", "/x.png")]
    )
    with pytest.raises(BuildError) as excinfo:
        build_site(project, members=members)
    assert excinfo.value.source_path == project / "output"
    assert "Invalid page URL" in excinfo.value.message
    assert not (project / "output").exists()
