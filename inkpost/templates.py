"""Template rendering engine for inkpost.

This module uses Jinja2 to render the static pages of the blog: the post
index, post detail pages, the member listing and per-member pages, and the
tag listing and per-tag pages.

Key class:
- TemplateEngine: Loads layouts and renders pages with a shared context.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import quote

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from markupsafe import Markup

from .collections import PostCollection, TagCollection
from .content import PostData
from .members import Member, MemberDirectory
from .renderers import pygments_css
from .utils import join_root_url

# Built-in layouts; a project ``templates/`` directory is searched first.
LAYOUTS_DIR = Path(__file__).parent / "layouts"


class TemplateEngine:
    """Template rendering engine using Jinja2.

    Attributes:
        site: Site configuration values exposed to templates.
        members: Member directory used for author bylines.
        env: Jinja2 environment.
        root_url: Optional base URL for links.
    """

    def __init__(
        self,
        site: dict[str, Any],
        members: MemberDirectory,
        template_dirs: list[Path] | None = None,
        root_url: str | None = None,
    ):
        """Initialize the template engine.

        Args:
            site: Site configuration (title, root_url, ...).
            members: Member directory.
            template_dirs: Extra directories searched before the built-in layouts.
            root_url: Optional base URL for links; defaults to site["root_url"].
        """
        self.site = {"title": "Blog", "root_url": "", **site}
        self.members = members
        self.root_url = (
            root_url if root_url is not None else self.site["root_url"]
        ) or ""
        search_path = [str(p) for p in (template_dirs or []) if p.exists()]
        search_path.append(str(LAYOUTS_DIR))
        self.env = Environment(
            loader=FileSystemLoader(search_path),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            undefined=StrictUndefined,
        )
        self._install_globals()

    def _install_globals(self) -> None:
        self.env.globals["site"] = self.site
        self.env.globals["members"] = self.members
        self.env.globals["url_for"] = self.url_for
        self.env.globals["pygments_css"] = lambda: Markup(pygments_css())
        self.env.filters["tag_url"] = tag_url

    def url_for(self, path: str) -> str:
        """Generate a URL for a path, applying root_url if configured."""
        if path.startswith(("http://", "https://", "//")):
            return path
        return join_root_url(self.root_url, path)

    def render(self, template_name: str, **context: Any) -> str:
        """Render a named template with the given context."""
        template = self.env.get_template(template_name)
        return template.render(**context)

    def render_index(self, posts: PostCollection) -> str:
        return self.render("index.html.jinja", title=self.site["title"], posts=posts)

    def render_post(self, post: PostData) -> str:
        """Render a post detail page.

        Args:
            post: Post to render.

        Returns:
            Rendered HTML.

        Raises:
            MemberNotFoundError: If the post author is not a known member.
        """
        author = self.members.get(post.meta_data.author)
        editors = [
            self.members.find(name) or name for name in post.meta_data.editors
        ]
        return self.render(
            "post.html.jinja",
            title=post.meta_data.title,
            description=post.meta_data.summary,
            post=post,
            author=author,
            editors=editors,
            content=Markup(post.content),
        )

    def render_members(self) -> str:
        return self.render("members.html.jinja", title="Members")

    def render_member(self, member: Member, posts: PostCollection) -> str:
        return self.render(
            "member.html.jinja", title=member.name, member=member, posts=posts
        )

    def render_tags(self, tags: TagCollection) -> str:
        return self.render("tags.html.jinja", title="Tags", tags=tags)

    def render_tag(self, tag: str, posts: PostCollection) -> str:
        return self.render("tag.html.jinja", title=f"#{tag}", tag=tag, posts=posts)


def tag_url(tag: str) -> str:
    """Return the URL path of a tag listing page."""
    return f"/tags/{quote(tag, safe='')}/"
