"""View models assembled by the repositories."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, TypeVar

T = TypeVar("T")


def _str_id(value: Any) -> str | None:
    return str(value) if value is not None else None


def _serialize(value: Any) -> Any:
    if isinstance(value, (User, AuthorSummary, Thread)):
        return value.to_dict()
    if isinstance(value, datetime):
        return value.isoformat()
    return value


@dataclass
class AuthorSummary:
    """Restricted projection of a user, embedded in child threads."""
    id: str
    external_id: str
    name: str | None = None
    image: str | None = None

    @classmethod
    def from_record(cls, row: Any) -> "AuthorSummary":
        return cls(
            id=str(row["id"]),
            external_id=row["external_id"],
            name=row["name"],
            image=row["image"],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "external_id": self.external_id,
            "name": self.name,
            "image": self.image,
        }


@dataclass
class User:
    """A user profile document.

    ``threads`` holds thread ids until populated, then ``Thread`` objects.
    """
    id: str
    external_id: str
    username: str | None = None
    name: str | None = None
    bio: str | None = None
    image: str | None = None
    onboarded: bool = False
    threads: list[Any] = field(default_factory=list)
    created_at: datetime | None = None

    @classmethod
    def from_record(cls, row: Any) -> "User":
        return cls(
            id=str(row["id"]),
            external_id=row["external_id"],
            username=row["username"],
            name=row["name"],
            bio=row["bio"],
            image=row["image"],
            onboarded=row["onboarded"],
            threads=[str(t) for t in row["threads"] or []],
            created_at=row["created_at"],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "external_id": self.external_id,
            "username": self.username,
            "name": self.name,
            "bio": self.bio,
            "image": self.image,
            "onboarded": self.onboarded,
            "threads": [_serialize(t) for t in self.threads],
            "created_at": _serialize(self.created_at),
        }


@dataclass
class Thread:
    """A thread or reply.

    ``author`` is a user id until populated; ``children`` holds ids until
    populated. ``parent_id`` is None for top-level threads.
    """
    id: str
    text: str
    author: Any
    community: str | None = None
    parent_id: str | None = None
    children: list[Any] = field(default_factory=list)
    created_at: datetime | None = None

    @classmethod
    def from_record(cls, row: Any) -> "Thread":
        return cls(
            id=str(row["id"]),
            text=row["text"],
            author=str(row["author"]),
            community=row["community"],
            parent_id=_str_id(row["parent_id"]),
            children=[str(c) for c in row["children"] or []],
            created_at=row["created_at"],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "author": _serialize(self.author),
            "community": self.community,
            "parent_id": self.parent_id,
            "children": [_serialize(c) for c in self.children],
            "created_at": _serialize(self.created_at),
        }


@dataclass
class Page(Generic[T]):
    """One page of results. ``is_next`` is True when another page exists."""
    items: list[T]
    is_next: bool

    def to_dict(self, key: str = "items") -> dict[str, Any]:
        return {key: [_serialize(i) for i in self.items], "is_next": self.is_next}


def skip_amount(page_number: int, page_size: int) -> int:
    return (page_number - 1) * page_size


def has_next_page(total: int, skip: int, returned: int) -> bool:
    return total > skip + returned
