"""Batched reference expansion shared by the user and thread repositories.

Each level of expansion costs one ``= ANY($1)`` query, whatever the number
of documents on that level.
"""

import asyncpg
from typing import Any
from storage.documents import AuthorSummary, Thread, User

USER_COLUMNS = "id, external_id, username, name, bio, image, onboarded, threads, created_at"
AUTHOR_COLUMNS = "id, external_id, name, image"
THREAD_COLUMNS = "id, text, author, community, parent_id, children, created_at"


def _in_order(ids: list[str], found: dict[str, Any]) -> list[Any]:
    """Keep the order of the stored reference list, dropping dangling ids."""
    return [found[i] for i in ids if i in found]


async def load_threads(conn: asyncpg.Connection, ids: list[str]) -> dict[str, Thread]:
    if not ids:
        return {}
    rows = await conn.fetch(
        f"SELECT {THREAD_COLUMNS} FROM threads WHERE id = ANY($1::uuid[])",
        ids,
    )
    threads = [Thread.from_record(r) for r in rows]
    return {t.id: t for t in threads}


async def load_users(conn: asyncpg.Connection, ids: list[str]) -> dict[str, User]:
    if not ids:
        return {}
    rows = await conn.fetch(
        f"SELECT {USER_COLUMNS} FROM users WHERE id = ANY($1::uuid[])",
        ids,
    )
    users = [User.from_record(r) for r in rows]
    return {u.id: u for u in users}


async def load_authors(conn: asyncpg.Connection, ids: list[str]) -> dict[str, AuthorSummary]:
    if not ids:
        return {}
    rows = await conn.fetch(
        f"SELECT {AUTHOR_COLUMNS} FROM users WHERE id = ANY($1::uuid[])",
        ids,
    )
    authors = [AuthorSummary.from_record(r) for r in rows]
    return {a.id: a for a in authors}


async def populate_authors(conn: asyncpg.Connection, threads: list[Thread], full: bool = False) -> None:
    """Replace each thread's author id with the user it references."""
    ids = list(dict.fromkeys(t.author for t in threads if isinstance(t.author, str)))
    found: dict[str, Any] = await (load_users(conn, ids) if full else load_authors(conn, ids))
    for thread in threads:
        if isinstance(thread.author, str) and thread.author in found:
            thread.author = found[thread.author]


async def populate_children(conn: asyncpg.Connection, threads: list[Thread], depth: int = 1) -> None:
    """Expand ``children`` ``depth`` levels down, authors projected."""
    level = threads
    for _ in range(depth):
        ids = list(dict.fromkeys(c for t in level for c in t.children if isinstance(c, str)))
        if not ids:
            return
        found = await load_threads(conn, ids)
        next_level: list[Thread] = []
        for thread in level:
            thread.children = _in_order(thread.children, found)
            next_level.extend(thread.children)
        await populate_authors(conn, next_level)
        level = next_level
