"""Member directory for inkpost.

Authors referenced by posts are resolved against a fixed roster of members.
The roster ships with the package and can be replaced per project by a
``data/members.yaml`` file.

Key classes:
- Member: Dataclass describing one member.
- MemberDirectory: Ordered lookup of members by name.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

MEMBERS_FILE = Path("data") / "members.yaml"


class MemberNotFoundError(KeyError):
    """No member with the given name exists in the directory."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Unknown member: {self.name}"


@dataclass(frozen=True)
class Member:
    """A blog member.

    Attributes:
        name: Display name, also used as the post ``author`` value.
        icon_url: Path or URL of the member icon.
        twitter_id: Optional Twitter handle without ``@``.
        github_username: Optional GitHub username.
    """

    name: str
    icon_url: str
    twitter_id: str | None = None
    github_username: str | None = None

    @property
    def url(self) -> str:
        return f"/members/{self.name}/"

    @property
    def twitter_url(self) -> str | None:
        return f"https://twitter.com/{self.twitter_id}" if self.twitter_id else None

    @property
    def github_url(self) -> str | None:
        if not self.github_username:
            return None
        return f"https://github.com/{self.github_username}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Member:
        """Build a member from a camelCase mapping as written in YAML."""
        if not data.get("name"):
            raise ValueError(f"Member entry without a name: {data!r}")
        name = str(data["name"])
        return cls(
            name=name,
            icon_url=str(data.get("iconUrl") or f"/member-icons/{name.lower()}.jpg"),
            twitter_id=data.get("twitterId"),
            github_username=data.get("githubUsername"),
        )


DEFAULT_MEMBERS = (
    Member(
        name="sakito",
        icon_url="/member-icons/sakito.jpg",
        twitter_id="__sakito__",
        github_username="sakito21",
    ),
    Member(
        name="BaHo",
        icon_url="/member-icons/baho.jpg",
        twitter_id="b4h0_c4t",
        github_username="b4h0-c4t",
    ),
    Member(
        name="sosukesuzuki",
        icon_url="/member-icons/sosukesuzuki.jpg",
        twitter_id="__sosukesuzuki",
        github_username="sosukesuzuki",
    ),
)


class MemberDirectory:
    """Ordered, name-indexed collection of members."""

    def __init__(self, members: Iterable[Member] = DEFAULT_MEMBERS):
        self._members = {member.name: member for member in members}

    def __iter__(self) -> Iterator[Member]:
        return iter(self._members.values())

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, name: object) -> bool:
        return name in self._members

    def find(self, name: str) -> Member | None:
        return self._members.get(name)

    def get(self, name: str) -> Member:
        """Return the member called ``name``.

        Raises:
            MemberNotFoundError: If no such member exists.
        """
        try:
            return self._members[name]
        except KeyError:
            raise MemberNotFoundError(name) from None


def load_members(project_root: Path) -> MemberDirectory:
    """Load the member directory for a project.

    Args:
        project_root: Root directory of the project.

    Returns:
        Directory built from ``data/members.yaml`` when present, otherwise
        the default roster.
    """
    path = project_root / MEMBERS_FILE
    if not path.exists():
        return MemberDirectory()
    with open(path, encoding="utf-8") as f:
        payload = yaml.safe_load(f) or []
    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a list of members")
    return MemberDirectory(Member.from_dict(entry) for entry in payload)
