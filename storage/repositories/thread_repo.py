"""Thread repository: top-level threads and replies."""

import asyncpg
import structlog
from config.constants import DEFAULT_PAGE_NUMBER, DEFAULT_PAGE_SIZE, DEFAULT_POPULATE_DEPTH
from storage.documents import Page, Thread, has_next_page, skip_amount
from storage.page_cache import PageCache
from storage.repositories.population import THREAD_COLUMNS, populate_authors, populate_children
from utils.errors import NotFoundError, RepositoryError

log = structlog.get_logger(__name__)

DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError)


class ThreadRepository:
    def __init__(self, pool: asyncpg.Pool, page_cache: PageCache | None = None) -> None:
        self._pool = pool
        self._page_cache = page_cache

    def _revalidate(self, path: str | None) -> None:
        if path and self._page_cache is not None:
            self._page_cache.revalidate_path(path)

    async def create_thread(
        self,
        text: str,
        author: str,
        community_id: str | None = None,
        path: str | None = None,
    ) -> str:
        """Create a top-level thread and append it to its author's thread list.

        Communities are not supported yet, so ``community_id`` is accepted
        and the thread is always stored with ``community = NULL``. Both
        writes share one transaction. Returns the new thread id.
        """
        if community_id:
            log.debug("community_ignored", community_id=community_id)
        try:
            async with self._pool.acquire() as conn:
                async with conn.transaction():
                    thread_id = await conn.fetchval(
                        """
                        INSERT INTO threads (text, author, community)
                        VALUES ($1, $2, NULL) RETURNING id
                        """,
                        text,
                        author,
                    )
                    result = await conn.execute(
                        """
                        UPDATE users SET threads = array_append(threads, $1), updated_at = NOW()
                        WHERE id = $2
                        """,
                        thread_id,
                        author,
                    )
                    if result.split()[-1] == "0":
                        raise NotFoundError("User", author)
        except (*DB_ERRORS, NotFoundError) as e:
            log.error("create_thread_failed", author=author, error=str(e))
            raise RepositoryError("Error creating thread", e) from e

        log.info("thread_created", thread_id=str(thread_id), author=author)
        self._revalidate(path)
        return str(thread_id)

    async def fetch_threads(
        self,
        page_number: int = DEFAULT_PAGE_NUMBER,
        page_size: int = DEFAULT_PAGE_SIZE,
        reply_depth: int = 1,
    ) -> Page[Thread]:
        """Newest top-level threads, author populated, replies expanded ``reply_depth`` levels."""
        skip = skip_amount(page_number, page_size)
        try:
            async with self._pool.acquire() as conn:
                total = await conn.fetchval(
                    "SELECT COUNT(*) FROM threads WHERE parent_id IS NULL"
                )
                rows = await conn.fetch(
                    f"""
                    SELECT {THREAD_COLUMNS} FROM threads
                    WHERE parent_id IS NULL
                    ORDER BY created_at DESC
                    LIMIT $1 OFFSET $2
                    """,
                    page_size,
                    skip,
                )
                posts = [Thread.from_record(r) for r in rows]
                await populate_authors(conn, posts, full=True)
                await populate_children(conn, posts, depth=reply_depth)
        except DB_ERRORS as e:
            raise RepositoryError("Failed to fetch threads", e) from e

        return Page(items=posts, is_next=has_next_page(total or 0, skip, len(posts)))

    async def fetch_thread_by_id(
        self,
        thread_id: str,
        reply_depth: int = DEFAULT_POPULATE_DEPTH,
    ) -> Thread | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"SELECT {THREAD_COLUMNS} FROM threads WHERE id = $1",
                    thread_id,
                )
                if row is None:
                    return None
                thread = Thread.from_record(row)
                await populate_authors(conn, [thread])
                await populate_children(conn, [thread], depth=reply_depth)
        except DB_ERRORS as e:
            raise RepositoryError("Failed to fetch thread", e) from e
        return thread

    async def add_comment_to_thread(
        self,
        thread_id: str,
        text: str,
        author: str,
        path: str | None = None,
    ) -> str:
        """Reply to a thread. Returns the id of the new reply."""
        try:
            async with self._pool.acquire() as conn:
                async with conn.transaction():
                    parent = await conn.fetchrow(
                        "SELECT id FROM threads WHERE id = $1 FOR UPDATE",
                        thread_id,
                    )
                    if parent is None:
                        raise NotFoundError("Thread", thread_id)
                    comment_id = await conn.fetchval(
                        """
                        INSERT INTO threads (text, author, parent_id)
                        VALUES ($1, $2, $3) RETURNING id
                        """,
                        text,
                        author,
                        thread_id,
                    )
                    await conn.execute(
                        "UPDATE threads SET children = array_append(children, $1) WHERE id = $2",
                        comment_id,
                        thread_id,
                    )
                    result = await conn.execute(
                        """
                        UPDATE users SET threads = array_append(threads, $1), updated_at = NOW()
                        WHERE id = $2
                        """,
                        comment_id,
                        author,
                    )
                    if result.split()[-1] == "0":
                        raise NotFoundError("User", author)
        except (*DB_ERRORS, NotFoundError) as e:
            log.error("add_comment_failed", thread_id=thread_id, error=str(e))
            raise RepositoryError("Error adding comment to thread", e) from e

        log.info("comment_added", thread_id=thread_id, comment_id=str(comment_id))
        self._revalidate(path)
        return str(comment_id)
