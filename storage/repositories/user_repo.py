"""User profile repository."""

import asyncpg
import structlog
from config.constants import (
    DEFAULT_PAGE_NUMBER,
    DEFAULT_PAGE_SIZE,
    PROFILE_EDIT_PATH,
    SORT_ALIASES,
    SortOrder,
)
from storage.documents import Page, Thread, User, has_next_page, skip_amount
from storage.page_cache import PageCache
from storage.repositories.population import (
    USER_COLUMNS,
    load_threads,
    populate_authors,
    populate_children,
)
from utils.errors import RepositoryError

log = structlog.get_logger(__name__)

DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError)


def resolve_sort(sort_by: str | int | SortOrder) -> SortOrder:
    """Map "asc"/"desc", "ascending"/"descending" and 1/-1 to a SortOrder."""
    if isinstance(sort_by, SortOrder):
        return sort_by
    try:
        return SORT_ALIASES[str(sort_by).strip().lower()]
    except KeyError:
        raise ValueError(f"Invalid sort order: {sort_by!r}") from None


def like_pattern(term: str) -> str:
    """Substring ILIKE pattern matching ``term`` literally."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class UserRepository:
    def __init__(self, pool: asyncpg.Pool, page_cache: PageCache | None = None) -> None:
        self._pool = pool
        self._page_cache = page_cache

    async def update_user(
        self,
        user_id: str,
        username: str,
        name: str,
        bio: str,
        image: str,
        path: str,
    ) -> None:
        """Create or update a profile keyed on the external id and mark it onboarded."""
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO users (external_id, username, name, bio, image, onboarded)
                    VALUES ($1, $2, $3, $4, $5, TRUE)
                    ON CONFLICT (external_id) DO UPDATE SET
                        username = EXCLUDED.username,
                        name = EXCLUDED.name,
                        bio = EXCLUDED.bio,
                        image = EXCLUDED.image,
                        onboarded = TRUE,
                        updated_at = NOW()
                    """,
                    user_id,
                    username.lower(),
                    name,
                    bio,
                    image,
                )
        except DB_ERRORS as e:
            log.error("update_user_failed", user_id=user_id, error=str(e))
            raise RepositoryError("Failed to create/update user", e) from e

        log.info("user_updated", user_id=user_id)
        if path == PROFILE_EDIT_PATH and self._page_cache is not None:
            self._page_cache.revalidate_path(path)

    async def fetch_user(self, user_id: str) -> User | None:
        """Get a user by external id, or None if absent."""
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"SELECT {USER_COLUMNS} FROM users WHERE external_id = $1",
                    user_id,
                )
        except DB_ERRORS as e:
            raise RepositoryError("Failed to fetch user", e) from e
        return User.from_record(row) if row else None

    async def fetch_user_posts(self, user_id: str, reply_depth: int = 1) -> User | None:
        """Get a user with their threads populated.

        Each thread's children are expanded ``reply_depth`` levels, every
        child carrying a projected author (id, external id, name, image).
        """
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"SELECT {USER_COLUMNS} FROM users WHERE external_id = $1",
                    user_id,
                )
                if row is None:
                    return None
                user = User.from_record(row)
                found = await load_threads(conn, user.threads)
                threads = [found[t] for t in user.threads if t in found]
                await populate_children(conn, threads, depth=reply_depth)
        except DB_ERRORS as e:
            raise RepositoryError("Failed to fetch user posts", e) from e

        user.threads = threads
        return user

    async def fetch_users(
        self,
        user_id: str,
        search_string: str = "",
        page_number: int = DEFAULT_PAGE_NUMBER,
        page_size: int = DEFAULT_PAGE_SIZE,
        sort_by: str | int | SortOrder = SortOrder.DESC,
    ) -> Page[User]:
        """List users other than ``user_id``, optionally filtered by username or name."""
        order = resolve_sort(sort_by)
        skip = skip_amount(page_number, page_size)

        conditions = ["external_id <> $1"]
        args: list[object] = [user_id]
        term = search_string.strip()
        if term:
            args.append(like_pattern(term))
            conditions.append(f"(username ILIKE ${len(args)} OR name ILIKE ${len(args)})")
        where = " AND ".join(conditions)

        try:
            async with self._pool.acquire() as conn:
                total = await conn.fetchval(f"SELECT COUNT(*) FROM users WHERE {where}", *args)
                rows = await conn.fetch(
                    f"""
                    SELECT {USER_COLUMNS} FROM users
                    WHERE {where}
                    ORDER BY created_at {order.value.upper()}
                    LIMIT ${len(args) + 1} OFFSET ${len(args) + 2}
                    """,
                    *args,
                    page_size,
                    skip,
                )
        except DB_ERRORS as e:
            raise RepositoryError("Failed to fetch users", e) from e

        users = [User.from_record(r) for r in rows]
        return Page(items=users, is_next=has_next_page(total or 0, skip, len(users)))

    async def fetch_activity(self, user_id: str) -> list[Thread]:
        """Replies left by other users on this user's threads, newest first."""
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    """
                    SELECT r.id, r.text, r.author, r.community, r.parent_id, r.children, r.created_at
                    FROM threads r
                    JOIN threads p ON r.parent_id = p.id
                    JOIN users u ON p.author = u.id
                    WHERE u.external_id = $1 AND r.author <> u.id
                    ORDER BY r.created_at DESC
                    """,
                    user_id,
                )
                replies = [Thread.from_record(r) for r in rows]
                await populate_authors(conn, replies)
        except DB_ERRORS as e:
            raise RepositoryError("Failed to fetch activity", e) from e
        return replies

